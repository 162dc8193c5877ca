"""
Todo API package: task lists with deadlines and priorities, a pure query and
analytics engine (``todo_api.engine``) and the FastAPI surface in
``todo_api.main``.
"""
