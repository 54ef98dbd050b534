"""
Simple system to debug linking modules via log messages
"""

from __future__ import annotations

import functools
import os

from .consts import ENV_DEBUG

__all__ = ["check_debug_enabled"]

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@functools.cache
def check_debug_enabled() -> bool:
    """
    Check whether debugging is enabled by reading the environment
    variable ``LAPLINK_DEBUG``.
    """
    return os.environ.get(ENV_DEBUG, "").strip().lower() in _TRUTHY
