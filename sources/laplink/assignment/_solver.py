from __future__ import annotations

import typing as T
from enum import Enum

import numpy as np

from ..errors import UnknownSolverError
from ._base import Assignment
from ._function import FunctionAssignment
from ._jonker import Jonker
from ._munkres import Munkres

__all__ = ["Solver", "resolve_solver"]


class Solver(Enum):
    """
    Solvers that are shipped with this package.
    """

    LAPJV = "lapjv"
    MUNKRES = "munkres"


_ALIASES: T.Final[dict[str, Solver]] = {
    "lapjv": Solver.LAPJV,
    "jv": Solver.LAPJV,
    "jonker": Solver.LAPJV,
    "munkres": Solver.MUNKRES,
    "hungarian": Solver.MUNKRES,
}

SolverType: T.TypeAlias = (
    str | Solver | Assignment | T.Callable[[np.ndarray], T.Sequence[int] | np.ndarray]
)


def resolve_solver(solver: SolverType, resolution: float | None = None) -> Assignment:
    """
    Returns the assignment module for a solver name, enum member, module or
    function.

    Parameters
    ----------
    solver
        Name of the solver (``"lapjv"``/``"jv"`` or ``"munkres"``/``"hungarian"``,
        case insensitive), a :class:`Solver`, an :class:`Assignment` module or a
        function that maps a cost array to a column per row.
    resolution
        Tie tolerance passed to the Jonker-Volgenant solver.
    """
    if isinstance(solver, Assignment):
        return solver
    if isinstance(solver, str):
        try:
            solver = _ALIASES[solver.lower()]
        except KeyError:
            msg = f"Unknown solver {solver!r}, expected one of {list(_ALIASES)}!"
            raise UnknownSolverError(msg) from None
    if isinstance(solver, Solver):
        if solver is Solver.LAPJV:
            return Jonker(resolution=resolution)
        return Munkres()
    if callable(solver):
        return FunctionAssignment(solver)

    msg = f"Cannot use {type(solver).__name__} as a solver!"
    raise UnknownSolverError(msg)
