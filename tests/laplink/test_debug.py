r"""
Tests for ``laplink.debug``.
"""

from __future__ import annotations

import logging

import pytest

import laplink as ll
from laplink import debug


@pytest.fixture()
def debug_enabled(monkeypatch):
    debug.check_debug_enabled.cache_clear()
    monkeypatch.setenv(ll.consts.ENV_DEBUG, "1")
    yield
    debug.check_debug_enabled.cache_clear()


@pytest.mark.parametrize(
    ["value", "expected"],
    [("1", True), ("TRUE", True), ("on", True), ("0", False), ("", False)],
)
def test_check_debug_enabled(monkeypatch, value, expected):
    debug.check_debug_enabled.cache_clear()
    monkeypatch.setenv(ll.consts.ENV_DEBUG, value)
    try:
        assert debug.check_debug_enabled() is expected
    finally:
        debug.check_debug_enabled.cache_clear()


def test_debug_logging(debug_enabled, caplog):
    linker = ll.LAPLinker()

    with caplog.at_level(logging.DEBUG, logger="laplink._linker"):
        linker.assign_frame(1, [{"Centroid": [0, 0]}])
        linker.assign_frame(2, [{"Centroid": [0, 1]}])

    messages = [r.getMessage() for r in caplog.records]
    assert any("Frame 2: 1 matched, 0 created" in m for m in messages)
