"""Log level names and attribute formats used in configuration."""

from __future__ import annotations

import logging
from enum import Enum


class AttrFormat(str, Enum):
    """How log record attributes are stored in the database."""

    TEXT = "TEXT"
    JSON = "JSON"


_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}


def level_from_string(text: str | None) -> int:
    """Map DEBUG, INFO, WARN or ERROR (any case) to a logging level; INFO otherwise."""
    if text is None:
        return logging.INFO
    return _LEVELS.get(text.upper(), logging.INFO)