r"""
Helpers for inspecting assignment results.
"""

from __future__ import annotations

import torch
from torch import Tensor

__all__ = ["gather_total_cost"]


def gather_total_cost(cost_matrix: Tensor, assignment: Tensor) -> Tensor:
    """
    Sum the cost matrix entries picked by an assignment.

    Parameters
    ----------
    cost_matrix: Tensor[N, M]
        Costs of every row-column pairing.
    assignment: Tensor[N] | Tensor[K, 2]
        Either the column assigned to each row (negative when unassigned) or a
        tensor of row-column pairs.

    Returns
    -------
    Tensor[*]
        Scalar total cost.
    """
    cost_matrix = torch.as_tensor(cost_matrix)
    assignment = torch.as_tensor(assignment, device=cost_matrix.device).long()

    if assignment.ndim == 1:
        rows = torch.arange(assignment.shape[0], device=cost_matrix.device)
        mask = assignment >= 0
        assignment = torch.column_stack((rows[mask], assignment[mask]))

    return cost_matrix[assignment[:, 0], assignment[:, 1]].sum()
