from __future__ import annotations

import typing as T

import torch
import typing_extensions as TX

from .base_cost import Cost

__all__ = ["FunctionCost"]


class FunctionCost(Cost):
    """
    Wraps a user function ``fn(previous, candidates) -> scores`` as a cost module.
    """

    def __init__(self, fn: T.Callable[[T.Any, T.Sequence[T.Any]], T.Any]):
        super().__init__()

        self.fn = fn

    @TX.override
    def compute(self, previous: T.Any, candidates: T.Sequence[T.Any]) -> torch.Tensor:
        return torch.as_tensor(self.fn(previous, candidates), dtype=torch.float64)

    @TX.override
    def extra_repr(self) -> str:
        return f"fn={getattr(self.fn, '__name__', repr(self.fn))}"
