"""
Central logging setup.

Library modules only do ``logging.getLogger(__name__)``; entry points (the
API, the CLI, the import script) call ``init_logging`` once.
"""
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s|%(levelname)s|%(name)s:%(lineno)d|%(message)s"


def init_logging(level: int | str = logging.INFO) -> None:
    """Attach a stream handler to the root logger unless one already exists."""
    root = logging.getLogger()
    if root.handlers:
        # Already configured (uvicorn, pytest, REPL); avoid double handlers
        root.setLevel(level)
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    init_logging()
    return logging.getLogger(name)
