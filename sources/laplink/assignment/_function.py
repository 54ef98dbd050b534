from __future__ import annotations

import typing as T

import numpy as np
import typing_extensions as TX

from ._base import Assignment

__all__ = ["FunctionAssignment"]


class FunctionAssignment(Assignment):
    """
    Wraps a user function as a solver.

    The function receives a validated, non-empty ``float64`` array (NxM) and must
    return a sequence of N column indices, with negative values for rows that
    remain unassigned.
    """

    def __init__(self, fn: T.Callable[[np.ndarray], T.Sequence[int] | np.ndarray]):
        super().__init__()

        self.fn = fn

    @TX.override
    def _assign(self, cost_matrix: np.ndarray) -> np.ndarray:
        return np.asarray(self.fn(cost_matrix), dtype=np.int64)

    @TX.override
    def extra_repr(self) -> str:
        return f"fn={getattr(self.fn, '__name__', repr(self.fn))}"
