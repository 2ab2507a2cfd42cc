"""
Logging for the cosmoskit package.

A single stdout handler is attached to the package root logger; modules
ask for children of it through `get_logger(__name__)`.
"""
from __future__ import annotations

import logging
import sys

from cosmoskit.core.config import get_settings

_ROOT = "cosmoskit"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(_ROOT)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        root.addHandler(handler)
        root.setLevel(getattr(logging, get_settings().log_level.upper(), logging.INFO))
    return root


def get_logger(name: str) -> logging.Logger:
    root = _configure_root()
    if name == _ROOT or name.startswith(_ROOT + "."):
        return logging.getLogger(name)
    return root.getChild(name)
