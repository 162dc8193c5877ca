from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# PUBLIC_INTERFACE
def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Attach a single stderr handler to the 'todo_api' logger.

    Safe to call more than once (e.g. one app per test): the handler is only
    added the first time, later calls just adjust the level.
    """
    logger = logging.getLogger("todo_api")
    logger.setLevel(level)
    if not any(getattr(h, "_todo_api", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._todo_api = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
