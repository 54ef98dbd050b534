from __future__ import annotations

import typing as T

import numpy as np
import torch
import typing_extensions as TX

from ..errors import DimensionMismatchError
from .base_cost import Cost

__all__ = ["Euclidean"]


class Euclidean(Cost):
    """
    Euclidean distance between two numeric vectors, e.g. the centroids of a
    segmented object at consecutive frames.
    """

    p: T.Final[float]

    def __init__(self, p_norm: float = 2.0):
        super().__init__()

        self.p = p_norm

    @TX.override
    def compute(self, previous: T.Any, candidates: T.Sequence[T.Any]) -> torch.Tensor:
        a = _as_vector(previous)
        bs = [_as_vector(c) for c in candidates]
        for i, b in enumerate(bs):
            if b.numel() != a.numel():
                msg = (
                    f"Cannot compute distance between values of {a.numel()} and "
                    f"{b.numel()} elements (candidate {i})!"
                )
                raise DimensionMismatchError(msg)

        return torch.cdist(
            a.unsqueeze(0), torch.stack(bs), self.p, "donot_use_mm_for_euclid_dist"
        ).squeeze(0)


def _as_vector(value: T.Any) -> torch.Tensor:
    if isinstance(value, torch.Tensor):
        return value.detach().to(torch.float64).reshape(-1)
    return torch.from_numpy(np.asarray(value, dtype=np.float64).reshape(-1))
