from __future__ import annotations

import typing as T

import numpy as np
import torch
import typing_extensions as TX

from .base_cost import Cost

__all__ = ["PixelIntersect"]


class PixelIntersect(Cost):
    r"""
    Inverse Jaccard index between two sets of (linear) pixel indices.

    .. math::

        C(A, B) = \frac{|A \cup B|}{|A \cap B|}

    Identical regions score 1, disjoint regions score ``inf``.
    """

    @TX.override
    def compute(self, previous: T.Any, candidates: T.Sequence[T.Any]) -> torch.Tensor:
        a = _as_index_set(previous)
        scores = torch.empty(len(candidates), dtype=torch.float64)
        for i, c in enumerate(candidates):
            b = _as_index_set(c)
            n_inter = np.intersect1d(a, b, assume_unique=True).size
            if n_inter == 0:
                scores[i] = torch.inf
            else:
                scores[i] = (a.size + b.size - n_inter) / n_inter
        return scores


def _as_index_set(value: T.Any) -> np.ndarray:
    if isinstance(value, (set, frozenset)):
        value = list(value)
    elif isinstance(value, torch.Tensor):
        value = value.detach().cpu().numpy()
    return np.unique(np.asarray(value).reshape(-1))
