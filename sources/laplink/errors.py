r"""
Exceptions raised by the linker, the cost models, the solvers and the track
store.

Each error derives from :class:`LinkerError` and from the builtin exception that
best matches its meaning, such that ``except KeyError`` still catches a missing
track.
"""

from __future__ import annotations

__all__ = [
    "LinkerError",
    "DimensionMismatchError",
    "UnknownMetricError",
    "UnknownSolverError",
    "InvalidCostMatrixError",
    "MissingFieldError",
    "TrackNotFoundError",
    "FrameNotFoundError",
    "FrameOrderError",
    "LineageError",
]


class LinkerError(Exception):
    """Base class of all errors raised by this package."""


class DimensionMismatchError(LinkerError, ValueError):
    """Two values compared by a metric have a different number of elements."""


class UnknownMetricError(LinkerError, ValueError):
    pass


class UnknownSolverError(LinkerError, ValueError):
    pass


class InvalidCostMatrixError(LinkerError, ValueError):
    """The cost matrix contains NaN or negative entries, or has no finite entry."""


class MissingFieldError(LinkerError, KeyError):
    """A detection does not carry a field that the configuration links or divides by."""

    def __str__(self) -> str:
        # KeyError quotes its argument
        return str(self.args[0]) if self.args else ""


class TrackNotFoundError(LinkerError, KeyError):
    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class FrameNotFoundError(LinkerError, KeyError):
    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class FrameOrderError(LinkerError, IndexError):
    """A frame was assigned that does not come after the previously assigned frame."""


class LineageError(LinkerError, ValueError):
    """A mother/daughter link would break the temporal continuity of the lineage."""
