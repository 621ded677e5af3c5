"""Central logging configuration for Later.

Installs a single stderr handler on the root logger so module loggers can emit
without per-module setup. Command output goes to stdout and stays clean.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stderr",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
    }


def configure_logging(level: str = "WARNING") -> None:
    """Configure application-wide logging once.

    If the root logger already has handlers (pytest, embedding apps, a second
    call from the REPL), only the level is adjusted.
    """
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return
    dictConfig(_dict_config(level))
