r"""
This module builds the augmented cost matrix that links the active tracks at the
previous frame to the detections at the current frame.

For :math:`N` tracks and :math:`M` detections, the square matrix of size
:math:`(N + M)` is composed of four blocks:

.. code-block:: text

    +-----------------+-----------------+
    |  link (N x M)   | no link (N x N) |
    +-----------------+-----------------+
    |  new (M x M)    | auxiliary (MxN) |
    +-----------------+-----------------+

The diagonals of the *no link* and *new* blocks hold the alternative cost of
leaving a track unmatched and of starting a new track. The *auxiliary* block is
the transpose of the link block with every finite value set to the smallest link
cost, such that a matched track/detection pair is completed at minimal cost.
"""

from __future__ import annotations

import typing as T

import torch
import torch.nn as nn

from .consts import ALT_COST_FACTOR
from .costs import Cost

__all__ = ["AugmentedCostMatrix", "CostMatrixBuilder", "gate_scores"]


class AugmentedCostMatrix(T.NamedTuple):
    matrix: torch.Tensor
    link: torch.Tensor
    alt_cost: float

    @property
    def num_tracks(self) -> int:
        return self.link.shape[0]

    @property
    def num_detections(self) -> int:
        return self.link.shape[1]

    def is_detection(self, column: int) -> bool:
        """Whether a column of the matrix corresponds to a detection."""
        return 0 <= column < self.num_detections

    def is_track(self, row: int) -> bool:
        """Whether a row of the matrix corresponds to a track."""
        return 0 <= row < self.num_tracks


class CostMatrixBuilder(nn.Module):
    """
    Builds augmented cost matrices from a cost module and a valid score range.

    Parameters
    ----------
    cost
        Module that scores the value of a track against the detections.
    score_range
        Inclusive range of scores that represent a plausible link.
    alt_cost_factor
        Ratio of the alternative cost to the largest plausible link cost.
    """

    score_range: T.Final[tuple[float, float]]
    alt_cost_factor: T.Final[float]

    def __init__(
        self,
        cost: Cost,
        score_range: tuple[float, float] = (0.0, torch.inf),
        alt_cost_factor: float = ALT_COST_FACTOR,
    ):
        super().__init__()

        self.cost = cost
        self.score_range = (min(score_range), max(score_range))
        self.alt_cost_factor = float(alt_cost_factor)

    def score(
        self, previous: T.Sequence[T.Any], candidates: T.Sequence[T.Any]
    ) -> torch.Tensor:
        """
        Score every previous value against every candidate, forbidding pairs
        with a score outside of the valid range.

        Returns
        -------
        Tensor[N, M]
            Gated scores.
        """
        link = torch.full((len(previous), len(candidates)), torch.inf, dtype=torch.float64)
        for i, value in enumerate(previous):
            link[i] = self.cost(value, candidates)
        return gate_scores(link, self.score_range)

    def forward(
        self, previous: T.Sequence[T.Any], candidates: T.Sequence[T.Any]
    ) -> AugmentedCostMatrix | None:
        """
        Build the augmented cost matrix.

        Parameters
        ----------
        previous
            Last value of the link field of every active track (N).
        candidates
            Value of the link field of every detection (M).

        Returns
        -------
        AugmentedCostMatrix | None
            The matrix, or ``None`` when no track can be linked to any
            detection.
        """
        link = self.score(previous, candidates)
        finite = torch.isfinite(link)
        if not finite.any():
            return None

        max_link = link[finite].max().item()
        min_link = link[finite].min().item()
        alt_cost = self.alt_cost_factor * max_link
        if alt_cost <= 0:
            # All plausible links are free, opting out must still cost more
            alt_cost = 1.0

        n_tracks, n_dets = link.shape
        matrix = torch.full(
            (n_tracks + n_dets, n_dets + n_tracks), torch.inf, dtype=torch.float64
        )
        matrix[:n_tracks, :n_dets] = link
        matrix[:n_tracks, n_dets:] = _alt_diagonal(n_tracks, alt_cost)
        matrix[n_tracks:, :n_dets] = _alt_diagonal(n_dets, alt_cost)
        matrix[n_tracks:, n_dets:] = torch.where(
            finite.T, torch.tensor(min_link, dtype=torch.float64), torch.inf
        )

        return AugmentedCostMatrix(matrix=matrix, link=link, alt_cost=alt_cost)


def gate_scores(scores: torch.Tensor, score_range: tuple[float, float]) -> torch.Tensor:
    """Set scores outside of the inclusive range to ``inf``."""
    lo, hi = score_range
    return torch.where((scores >= lo) & (scores <= hi), scores, torch.inf)


def _alt_diagonal(size: int, alt_cost: float) -> torch.Tensor:
    block = torch.full((size, size), torch.inf, dtype=torch.float64)
    block.fill_diagonal_(alt_cost)
    return block
