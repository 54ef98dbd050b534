from __future__ import annotations

from abc import abstractmethod
from typing import Tuple

import numpy as np
import torch

from ..consts import UNASSIGNED
from ..errors import InvalidCostMatrixError

__all__ = ["Assignment", "check_cost_matrix"]


class Assignment(torch.nn.Module):
    """
    Solves a linear assignment problem (LAP).

    Every row of the cost matrix is mapped to at most one column such that the
    total cost over all finite pairings is minimal. Infinite entries forbid a
    pairing.
    """

    def forward(self, cost_matrix: torch.Tensor) -> torch.Tensor:
        """
        Solve the cost matrix

        Parameters
        ----------
        cost_matrix
            Cost matrix (NxM) to solve, non-negative with ``inf`` for forbidden
            pairings.

        Returns
        -------
        Tensor[N]
            Column assigned to each row, or ``-1`` for rows that are left
            unassigned.
        """
        cost_matrix = torch.as_tensor(cost_matrix)
        check_cost_matrix(cost_matrix)

        if min(cost_matrix.shape) == 0:
            return self._no_match(cost_matrix)

        device = cost_matrix.device
        cm = np.ascontiguousarray(
            cost_matrix.detach().cpu().numpy(), dtype=np.float64
        )
        rowsol = np.asarray(self._assign(cm), dtype=np.int64).reshape(-1)
        if rowsol.shape[0] != cm.shape[0]:
            msg = (
                f"Solver {self.__class__.__name__} returned {rowsol.shape[0]} "
                f"assignments for {cm.shape[0]} rows!"
            )
            raise RuntimeError(msg)

        rowsol = _drop_forbidden(cm, rowsol)
        return torch.from_numpy(rowsol).to(device=device, dtype=torch.long)

    def match(
        self, cost_matrix: torch.Tensor
    ) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        """
        Solve the cost matrix and return the result as lists of pairs.

        Returns
        -------
            Tuple of matches (N_match x 2), unmatched rows and unmatched columns
        """
        cost_matrix = torch.as_tensor(cost_matrix)
        rowsol = self(cost_matrix)

        rows = torch.arange(rowsol.shape[0], device=rowsol.device)
        mask = rowsol >= 0
        matches = torch.column_stack((rows[mask], rowsol[mask])).long()

        cols = torch.arange(cost_matrix.shape[1], device=rowsol.device)
        unmatch_cols = cols[~torch.isin(cols, rowsol[mask])]

        return matches, rows[~mask], unmatch_cols

    @staticmethod
    def _no_match(cost_matrix: torch.Tensor) -> torch.Tensor:
        return torch.full(
            (cost_matrix.shape[0],),
            UNASSIGNED,
            dtype=torch.long,
            device=cost_matrix.device,
        )

    @abstractmethod
    def _assign(self, cost_matrix: np.ndarray) -> np.ndarray:
        """
        Assign a column to each row of a validated, non-empty cost matrix.

        Returns an integer array with one entry per row, negative when the row
        is unassigned.
        """
        raise NotImplementedError


def check_cost_matrix(cost_matrix: torch.Tensor) -> None:
    """
    Raise :class:`InvalidCostMatrixError` when the matrix cannot be solved.
    """
    if cost_matrix.ndim != 2:
        msg = f"Cost matrix must be 2-dimensional, got shape {tuple(cost_matrix.shape)}!"
        raise InvalidCostMatrixError(msg)
    if cost_matrix.numel() == 0:
        return
    if torch.isnan(cost_matrix).any():
        msg = "Cost matrix contains NaN entries!"
        raise InvalidCostMatrixError(msg)
    if (cost_matrix < 0).any():
        msg = f"Cost matrix contains negative entries (min: {cost_matrix.min().item()})!"
        raise InvalidCostMatrixError(msg)
    if not torch.isfinite(cost_matrix).any():
        msg = "Cost matrix has no finite entries!"
        raise InvalidCostMatrixError(msg)


def _drop_forbidden(cost_matrix: np.ndarray, rowsol: np.ndarray) -> np.ndarray:
    rowsol = rowsol.copy()
    n_cols = cost_matrix.shape[1]
    rowsol[(rowsol < 0) | (rowsol >= n_cols)] = UNASSIGNED

    rows = np.flatnonzero(rowsol >= 0)
    forbidden = ~np.isfinite(cost_matrix[rows, rowsol[rows]])
    rowsol[rows[forbidden]] = UNASSIGNED
    return rowsol
