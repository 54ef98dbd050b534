from __future__ import annotations

import typing as T
from abc import abstractmethod

import torch

from .._values import is_missing

__all__ = ["Cost"]


class Cost(torch.nn.Module):
    """
    A cost module scores the most recent value of a track against the values
    of a batch of candidate detections.
    """

    def forward(self, previous: T.Any, candidates: T.Sequence[T.Any]) -> torch.Tensor:
        """
        Computes the dissimilarity between a previous value and each candidate.

        Candidates (or a previous value) that are absent score ``inf``.

        Parameters
        ----------
        previous
            Value of the track at its last recorded frame.
        candidates
            Values of the current detections (M).

        Returns
        -------
        Tensor[M]
            Non-negative scores, ``inf`` for impossible pairings.
        """
        scores = torch.full((len(candidates),), torch.inf, dtype=torch.float64)
        if is_missing(previous):
            return scores

        present = [i for i, c in enumerate(candidates) if not is_missing(c)]
        if len(present) == 0:
            return scores

        values = self.compute(previous, [candidates[i] for i in present])
        values = torch.as_tensor(values, dtype=torch.float64).reshape(-1)
        if values.numel() != len(present):
            msg = (
                f"Cost {self.__class__.__name__} returned {values.numel()} scores "
                f"for {len(present)} candidates!"
            )
            raise ValueError(msg)

        scores[present] = values
        return scores

    @abstractmethod
    def compute(self, previous: T.Any, candidates: T.Sequence[T.Any]) -> torch.Tensor:
        """
        Scores the previous value against every (present) candidate value.

        This is an abstract method that should be overwritten.
        """
        raise NotImplementedError
