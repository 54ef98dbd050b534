from __future__ import annotations

import numpy as np
import typing_extensions as TX

from ..consts import RESOLUTION_CEILING, UNASSIGNED
from ._base import Assignment

__all__ = ["Jonker", "jonker_volgenant_assignment"]


class Jonker(Assignment):
    """
    Uses the Jonker-Volgenant algorithm to solve the linear assignment problem.

    Parameters
    ----------
    resolution
        Minimal difference between the smallest and second smallest reduced
        cost of a row for the row reduction to lower the dual of the smallest
        column. Defaults to the floating point spacing at the largest finite
        cost.
    """

    resolution: float | None

    def __init__(self, resolution: float | None = None):
        super().__init__()

        self.resolution = resolution

    @TX.override
    def _assign(self, cost_matrix: np.ndarray) -> np.ndarray:
        return jonker_volgenant_assignment(cost_matrix, self.resolution)

    @TX.override
    def extra_repr(self) -> str:
        return f"resolution={self.resolution}"


def jonker_volgenant_assignment(
    cost_matrix: np.ndarray, resolution: float | None = None
) -> np.ndarray:
    """
    Perform linear assignment with the shortest augmenting path algorithm of
    Jonker and Volgenant (1987).

    Rectangular matrices are padded to square with zero-cost dummy rows or
    columns, infinite entries are replaced by a cost that exceeds the total of
    any finite assignment.

    Parameters
    ----------
    cost_matrix
        Array (NxM) of non-negative costs.
    resolution
        Tie tolerance of the augmenting row reduction.

    Returns
    -------
    ndarray[N]
        Column assigned to each row, ``-1`` when unassigned or only assignable
        through a forbidden pairing.
    """
    cost_matrix = np.asarray(cost_matrix, dtype=np.float64)
    n_rows, n_cols = cost_matrix.shape
    rowsol = np.full(n_rows, UNASSIGNED, dtype=np.int64)

    finite = np.isfinite(cost_matrix)
    if n_rows == 0 or n_cols == 0 or not finite.any():
        return rowsol

    max_cost = float(cost_matrix[finite].max())
    if resolution is None:
        resolution = float(np.spacing(min(RESOLUTION_CEILING, max_cost)))

    dim = max(n_rows, n_cols)
    square = np.zeros((dim, dim), dtype=np.float64)
    square[:n_rows, :n_cols] = np.where(finite, cost_matrix, max_cost * dim + 1.0)

    cols = _lapjv(square, resolution)[:n_rows]
    keep = cols < n_cols
    keep[keep] = finite[np.flatnonzero(keep), cols[keep]]
    rowsol[keep] = cols[keep]

    return rowsol


def _lapjv(cost: np.ndarray, resolution: float) -> np.ndarray:
    dim = cost.shape[0]
    if dim == 1:
        return np.zeros(1, dtype=np.int64)

    v = np.zeros(dim, dtype=np.float64)
    rowsol = np.full(dim, UNASSIGNED, dtype=np.int64)
    colsol = np.full(dim, UNASSIGNED, dtype=np.int64)
    matches = np.zeros(dim, dtype=np.int64)

    # Column reduction, in reverse order such that lower columns win ties
    for j in range(dim - 1, -1, -1):
        imin = int(np.argmin(cost[:, j]))
        v[j] = cost[imin, j]
        if matches[imin] == 0:
            rowsol[imin] = j
            colsol[j] = imin
        elif v[j] < v[rowsol[imin]]:
            j1 = rowsol[imin]
            rowsol[imin] = j
            colsol[j] = imin
            colsol[j1] = UNASSIGNED
        else:
            colsol[j] = UNASSIGNED
        matches[imin] += 1

    # Reduction transfer
    free: list[int] = []
    for i in range(dim):
        if matches[i] == 0:
            free.append(i)
        elif matches[i] == 1:
            j1 = rowsol[i]
            x = cost[i] - v
            x[j1] = np.inf
            v[j1] -= x.min()

    # Augmenting row reduction, two passes
    for _ in range(2):
        k = 0
        num_free_prev = len(free)
        num_free = 0
        while k < num_free_prev:
            i = free[k]
            k += 1

            x = cost[i] - v
            j1 = int(np.argmin(x))
            umin = x[j1]
            x[j1] = np.inf
            j2 = int(np.argmin(x))
            usubmin = x[j2]

            i0 = colsol[j1]
            if usubmin - umin > resolution:
                v[j1] -= usubmin - umin
            elif i0 >= 0:
                j1 = j2
                i0 = colsol[j2]

            rowsol[i] = j1
            colsol[j1] = i

            if i0 >= 0:
                if usubmin - umin > resolution:
                    # Reassigned row is processed again immediately
                    k -= 1
                    free[k] = i0
                else:
                    free[num_free] = i0
                    num_free += 1
        del free[num_free:]

    # Augmentation along shortest paths (Dijkstra)
    for freerow in free:
        d = cost[freerow] - v
        pred = np.full(dim, freerow, dtype=np.int64)
        collist = np.arange(dim)

        low = 0
        up = 0
        last = 0
        h_min = 0.0
        endofpath = UNASSIGNED
        unassigned_found = False

        while not unassigned_found:
            if up == low:
                last = low - 1
                h_min = d[collist[up]]
                up += 1
                for k in range(up, dim):
                    j = collist[k]
                    h = d[j]
                    if h <= h_min:
                        if h < h_min:
                            up = low
                            h_min = h
                        collist[k] = collist[up]
                        collist[up] = j
                        up += 1
                for k in range(low, up):
                    if colsol[collist[k]] < 0:
                        endofpath = collist[k]
                        unassigned_found = True
                        break

            if not unassigned_found:
                j1 = collist[low]
                low += 1
                i = colsol[j1]
                x = cost[i] - v
                h = x[j1] - h_min
                for k in range(up, dim):
                    j = collist[k]
                    v2 = x[j] - h
                    if v2 < d[j]:
                        pred[j] = i
                        if v2 == h_min:
                            if colsol[j] < 0:
                                endofpath = j
                                unassigned_found = True
                                break
                            collist[k] = collist[up]
                            collist[up] = j
                            up += 1
                        d[j] = v2

        # Update the duals of the columns that were fully scanned
        for k in range(last + 1):
            j1 = collist[k]
            v[j1] += d[j1] - h_min

        # Augment the path back to the free row
        while True:
            i = pred[endofpath]
            colsol[endofpath] = i
            j1 = endofpath
            endofpath = rowsol[i]
            rowsol[i] = j1
            if i == freerow:
                break

    return rowsol
