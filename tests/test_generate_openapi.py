import json

from todo_api.generate_openapi import build_schema, generate_openapi


class TestGenerateOpenAPI:
    def test_schema_has_routes_and_tags(self):
        schema = build_schema()
        paths = schema["paths"]
        for path in [
            "/",
            "/health/ready",
            "/health/live",
            "/api/v1/lists/",
            "/api/v1/lists/{list_id}/tasks",
            "/api/v1/tasks/",
            "/api/v1/tasks/grouped",
            "/api/v1/tasks/{task_id}/completion",
        ]:
            assert path in paths
        assert {t["name"] for t in schema["tags"]} >= {"health", "lists", "tasks", "queries"}

    def test_writes_file(self, tmp_path):
        out = tmp_path / "interfaces" / "openapi.json"
        written = generate_openapi(str(out))
        assert written == str(out)
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["info"]["title"] == "Todo API"
