r"""
Common set-up for all tests.

Defines fixtures that are shared between the test modules.
"""

from __future__ import annotations

import numpy as np
import pytest

import laplink as ll


@pytest.fixture(
    params=["lapjv", "munkres"],
    ids=("solver:lapjv", "solver:munkres"),
)
def solver_name(request) -> str:
    return request.param


@pytest.fixture()
def linker(solver_name: str) -> ll.LAPLinker:
    return ll.LAPLinker(solver=solver_name)


@pytest.fixture()
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)
