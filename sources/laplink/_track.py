r"""
This module defines the :class:`Track` class, the record of a single object
over time, and the read-only :class:`TrackView` that is handed out to users.

A track stores its values in columns: one list per attribute field, each aligned
with the sorted list of frames. Values of frames at which an attribute was not
recorded are ``None``.
"""

from __future__ import annotations

import bisect
import dataclasses
import typing as T
from enum import Enum
from types import MappingProxyType

import numpy as np

from ._values import as_value, is_numeric
from .errors import FrameNotFoundError

__all__ = ["TrackState", "Track", "TrackView"]


class TrackState(Enum):
    ACTIVE = 1
    AGED_OUT = 2
    DIVIDED = 3


class Track:
    """
    A sparse time series of attribute values with lineage links.

    Properties
    ----------
    id
        Unique, immutable identifier.
    mother_id
        Identifier of the track this track divided from, if any.
    daughter_ids
        Identifiers of the tracks this track divided into.
    state
        Whether the track takes part in linking, or why it stopped.
    frames
        Sorted list of frames at which the track has an entry.
    data
        Mapping of field name to per-frame values, aligned with ``frames``.
    """

    def __init__(self, id: int, frame: int, data: T.Mapping[str, T.Any]):
        self.id = int(id)
        self.mother_id: int | None = None
        self.daughter_ids: tuple[int, ...] = ()
        self.state = TrackState.ACTIVE
        self.frames: list[int] = [int(frame)]
        self.data: dict[str, list[T.Any]] = {
            str(k): [as_value(v)] for k, v in data.items()
        }

    def __len__(self) -> int:
        return len(self.frames)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(id={self.id}, frames={self.first_frame}..."
            f"{self.last_frame}, state={self.state.name})"
        )

    @property
    def is_active(self) -> bool:
        return self.state is TrackState.ACTIVE

    @property
    def first_frame(self) -> int:
        return self.frames[0]

    @property
    def last_frame(self) -> int:
        return self.frames[-1]

    @property
    def num_frames(self) -> int:
        return len(self.frames)

    @property
    def fields(self) -> list[str]:
        return list(self.data.keys())

    def age(self, frame: int) -> int:
        """Number of frames between ``frame`` and the last recorded frame."""
        return int(frame) - self.last_frame

    def index(self, frame: int) -> int:
        """
        Position of ``frame`` within :attr:`frames`.

        Raises
        ------
        FrameNotFoundError
            When the track has no entry at ``frame``.
        """
        pos = bisect.bisect_left(self.frames, frame)
        if pos == len(self.frames) or self.frames[pos] != frame:
            msg = f"Track {self.id} has no entry at frame {frame}!"
            raise FrameNotFoundError(msg)
        return pos

    def value(self, field: str, position: int = -1) -> T.Any:
        """
        Value of ``field`` at a position in :attr:`frames`, ``None`` when absent.
        """
        column = self.data.get(field)
        if column is None:
            return None
        return column[position]

    def set_frame(self, frame: int, data: T.Mapping[str, T.Any]) -> None:
        """
        Write the values of ``data`` at ``frame``, inserting the frame when it
        is not yet recorded. Fields that were not recorded before are added
        with placeholders at every other frame.
        """
        frame = int(frame)
        pos = bisect.bisect_left(self.frames, frame)
        if pos == len(self.frames) or self.frames[pos] != frame:
            self._insert_placeholder(pos, frame)

        for field, value in data.items():
            field = str(field)
            if field not in self.data:
                self.data[field] = [None] * len(self.frames)
            self.data[field][pos] = as_value(value)

    def fill_gaps(self, start: int, stop: int) -> None:
        """
        Insert placeholder entries for every frame in ``[start, stop]`` that has
        no entry yet.
        """
        for frame in range(int(start), int(stop) + 1):
            pos = bisect.bisect_left(self.frames, frame)
            if pos == len(self.frames) or self.frames[pos] != frame:
                self._insert_placeholder(pos, frame)

    def delete_frame(self, frame: int) -> None:
        pos = self.index(frame)
        if len(self.frames) == 1:
            msg = f"Cannot delete the only frame of track {self.id}, delete the track instead!"
            raise ValueError(msg)

        del self.frames[pos]
        for column in self.data.values():
            del column[pos]

    def split(self, frame: int, new_id: int) -> Track:
        """
        Move all entries from ``frame`` onwards into a new track with
        identifier ``new_id``, truncating this track.
        """
        pos = self.index(frame)
        if pos == 0:
            msg = (
                f"Cannot split track {self.id} at its first frame {frame}, this "
                "would leave an empty track!"
            )
            raise ValueError(msg)

        other = Track(new_id, frame, {})
        other.frames = self.frames[pos:]
        other.data = {field: column[pos:] for field, column in self.data.items()}

        del self.frames[pos:]
        for column in self.data.values():
            del column[pos:]

        return other

    def rename_field(self, old: str, new: str) -> None:
        if old not in self.data:
            return
        if new in self.data:
            msg = f"Track {self.id} already has a field {new!r}!"
            raise KeyError(msg)
        self.data = {(new if k == old else k): v for k, v in self.data.items()}

    def view(self, frame: int | None = None) -> TrackView:
        """
        Read-only snapshot of the track, optionally restricted to one frame.
        """
        if frame is None:
            frames = list(self.frames)
            columns = {field: list(column) for field, column in self.data.items()}
        else:
            pos = self.index(frame)
            frames = [self.frames[pos]]
            columns = {field: [column[pos]] for field, column in self.data.items()}

        return TrackView(
            id=self.id,
            mother_id=self.mother_id,
            daughter_ids=self.daughter_ids,
            state=self.state,
            frames=np.asarray(frames, dtype=np.int64),
            data=MappingProxyType(
                {field: flatten_values(column) for field, column in columns.items()}
            ),
        )

    def _insert_placeholder(self, pos: int, frame: int) -> None:
        self.frames.insert(pos, frame)
        for column in self.data.values():
            column.insert(pos, None)


@dataclasses.dataclass(frozen=True)
class TrackView:
    """
    Snapshot of a track for consumers such as exporters.

    Fields of fixed-width numeric values are flattened into an array with one
    row per frame (NaN where absent), other fields are lists with ``None``
    where absent.
    """

    id: int
    mother_id: int | None
    daughter_ids: tuple[int, ...]
    state: TrackState
    frames: np.ndarray
    data: T.Mapping[str, np.ndarray | list[T.Any]]

    def __getitem__(self, field: str) -> np.ndarray | list[T.Any]:
        return self.data[field]

    def __len__(self) -> int:
        return len(self.frames)

    @property
    def first_frame(self) -> int:
        return int(self.frames[0])

    @property
    def last_frame(self) -> int:
        return int(self.frames[-1])

    @property
    def is_active(self) -> bool:
        return self.state is TrackState.ACTIVE


def flatten_values(column: T.Sequence[T.Any]) -> np.ndarray | list[T.Any]:
    """
    Stack a column of per-frame values into an array when every present value
    is numeric and of the same size, padding absent entries with NaN.

    Scalars produce an array of shape ``(N,)``, vectors of width ``W`` an
    array of shape ``(N, W)``. Ragged or non-numeric columns are returned as a
    list.
    """
    present = [v for v in column if v is not None]
    if not all(is_numeric(v) for v in present):
        return list(column)
    if len(present) == 0:
        return np.full(len(column), np.nan)

    sizes = {np.size(v) for v in present}
    if len(sizes) != 1:
        return list(column)

    width = sizes.pop()
    scalar = all(np.ndim(v) == 0 for v in present)
    out = np.full((len(column), width), np.nan)
    for i, v in enumerate(column):
        if v is not None:
            out[i] = np.asarray(v, dtype=np.float64).reshape(-1)

    return out[:, 0] if scalar else out
