"""
Munkres' variant of the Hungarian algorithm for solving the assignment problem.
"""

from __future__ import annotations

import numpy as np
import typing_extensions as TX

from ..consts import UNASSIGNED
from ._base import Assignment

__all__ = ["Munkres", "munkres_assignment"]


class Munkres(Assignment):
    r"""
    Implements the Munkres (Hungarian) algorithm with starred and primed zeros.

    Slower than :class:`Jonker`, but a useful reference solver.
    """

    @TX.override
    def _assign(self, cost_matrix: np.ndarray) -> np.ndarray:
        return munkres_assignment(cost_matrix)


def munkres_assignment(cost_matrix: np.ndarray) -> np.ndarray:
    """
    Perform linear assignment using the Munkres algorithm.

    Rows and columns without any finite entry are excluded before solving and
    their rows are always unassigned. The remaining matrix is padded to square.

    Parameters
    ----------
    cost_matrix
        Array (NxM) of non-negative costs.

    Returns
    -------
    ndarray[N]
        Column assigned to each row, ``-1`` when unassigned.
    """
    cost_matrix = np.asarray(cost_matrix, dtype=np.float64)
    n_rows, _ = cost_matrix.shape
    rowsol = np.full(n_rows, UNASSIGNED, dtype=np.int64)

    finite = np.isfinite(cost_matrix)
    valid_rows = np.flatnonzero(finite.any(axis=1))
    valid_cols = np.flatnonzero(finite.any(axis=0))
    if valid_rows.size == 0:
        return rowsol

    sub = cost_matrix[np.ix_(valid_rows, valid_cols)]
    sub_finite = finite[np.ix_(valid_rows, valid_cols)]
    n_sub_rows, n_sub_cols = sub.shape
    dim = max(n_sub_rows, n_sub_cols)

    max_cost = float(sub[sub_finite].max())
    work = np.full((dim, dim), 10.0 * max_cost, dtype=np.float64)
    work[:n_sub_rows, :n_sub_cols] = np.where(sub_finite, sub, max_cost * dim + 1.0)

    stars = _munkres(work)[:n_sub_rows]
    for r, c in enumerate(stars):
        if c < n_sub_cols and sub_finite[r, c]:
            rowsol[valid_rows[r]] = valid_cols[c]

    return rowsol


def _munkres(work: np.ndarray) -> np.ndarray:
    dim = work.shape[0]
    work = work - work.min(axis=1, keepdims=True)
    work -= work.min(axis=0, keepdims=True)

    starred = np.zeros((dim, dim), dtype=bool)
    primed = np.zeros((dim, dim), dtype=bool)
    row_cover = np.zeros(dim, dtype=bool)
    col_cover = np.zeros(dim, dtype=bool)

    # Star a zero in every row and column where possible
    for r, c in zip(*np.nonzero(work == 0)):
        if not row_cover[r] and not col_cover[c]:
            starred[r, c] = True
            row_cover[r] = True
            col_cover[c] = True
    row_cover[:] = False
    col_cover = starred.any(axis=0)

    while col_cover.sum() < dim:
        # Prime uncovered zeros until one has no star in its row
        while True:
            uncovered = ~row_cover[:, None] & ~col_cover[None, :]
            hits = np.argwhere((work == 0) & uncovered)
            if hits.size == 0:
                h_min = work[uncovered].min()
                work[uncovered] -= h_min
                work[np.ix_(row_cover, col_cover)] += h_min
                continue

            r, c = hits[0]
            primed[r, c] = True
            star_cols = np.flatnonzero(starred[r])
            if star_cols.size == 0:
                break
            row_cover[r] = True
            col_cover[star_cols[0]] = False

        # Alternate primes and stars starting at the unmatched prime
        path = [(r, c)]
        while True:
            star_rows = np.flatnonzero(starred[:, path[-1][1]])
            if star_rows.size == 0:
                break
            rs = star_rows[0]
            path.append((rs, path[-1][1]))
            path.append((rs, np.flatnonzero(primed[rs])[0]))

        for pr, pc in path:
            starred[pr, pc] = not starred[pr, pc]
        primed[:] = False
        row_cover[:] = False
        col_cover = starred.any(axis=0)

    return np.argmax(starred, axis=1)
