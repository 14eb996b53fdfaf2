import logging
import os
from typing import Final

_HANDLER_ATTACHED: bool = False
_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level_name: str | None = None) -> int:
    level_name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    return getattr(logging, level_name, logging.INFO)


def configure_logging(level_name: str | None = None) -> None:
    """Attach a single stream handler to the root logger (idempotent)."""
    global _HANDLER_ATTACHED

    level = _resolve_level(level_name)
    root = logging.getLogger()

    if not _HANDLER_ATTACHED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        _HANDLER_ATTACHED = True

    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring the root handler on first use."""
    if not _HANDLER_ATTACHED:
        configure_logging()
    return logging.getLogger(name)
