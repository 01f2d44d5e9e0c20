from __future__ import annotations

import logging
import sys
from typing import Iterable, Union

LOG_FORMAT = "%(asctime)s [inventory-api] [%(levelname)s] %(name)s: %(message)s"


def _has_handler(logger: logging.Logger, handler_types: Iterable[type]) -> bool:
    return any(isinstance(handler, tuple(handler_types)) for handler in logger.handlers)


def configure_logging(level: Union[str, int] = "INFO") -> logging.Logger:
    """Attach a single stdout handler to the root logger (idempotent)."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if not _has_handler(root_logger, (logging.StreamHandler,)):
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setLevel(level)
        stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(stream_handler)

    # uvicorn installs its own handlers; keep its level in step with ours
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)

    return root_logger
