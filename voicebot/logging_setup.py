"""
Logging setup: console handler always, file handler when LOG_FILE is set.

Modules log via logging.getLogger(__name__); this only wires handlers on the
root logger. Safe to call more than once (handlers are installed once).
"""
from __future__ import annotations

import logging
import os

from voicebot.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_HANDLER_MARK = "_voicebot_handler"


def configure_logging(level: str | None = None, log_file: str | None = None) -> None:
    settings = get_settings()
    level_name = (level or settings.LOG_LEVEL or "INFO").upper()
    path = log_file if log_file is not None else settings.LOG_FILE

    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))
    if any(getattr(h, _HANDLER_MARK, False) for h in root.handlers):
        return

    formatter = logging.Formatter(LOG_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    setattr(console, _HANDLER_MARK, True)
    root.addHandler(console)

    if path:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_MARK, True)
        root.addHandler(file_handler)
