r"""
This module defines the :class:`TrackArray`, the store that owns every track
created while linking a movie.

Tracks live in a flat arena indexed by their identifier. Identifiers start at 1,
grow monotonically and are never reused; deleting a track retires its slot.
"""

from __future__ import annotations

import dataclasses
import typing as T

import numpy as np

from ._track import Track, TrackState, TrackView
from .errors import LineageError, TrackNotFoundError
from .lineage import TraversalOrder, traverse

__all__ = ["FileMetadata", "TrackArray"]


@dataclasses.dataclass
class FileMetadata:
    """
    Information about the movie that the tracks were extracted from.
    """

    filename: str = ""
    timestamps: list[float] = dataclasses.field(default_factory=list)
    timestamp_unit: str = ""
    pixel_size: tuple[float, ...] = ()
    pixel_size_unit: str = ""
    image_size: tuple[int, ...] = ()

    @property
    def mean_delta_t(self) -> float:
        """Mean interval between successive timestamps, NaN when unknown."""
        if len(self.timestamps) < 2:
            return float("nan")
        return float(np.mean(np.diff(np.asarray(self.timestamps, dtype=np.float64))))


class TrackArray:
    """
    Container of tracks and their lineage.

    Properties
    ----------
    metadata
        The :class:`FileMetadata` of the movie.
    """

    def __init__(self, metadata: FileMetadata | None = None):
        self._tracks: list[Track | None] = []
        self.metadata = metadata if metadata is not None else FileMetadata()

    def __len__(self) -> int:
        """
        Return the number of tracks in the store, excluding deleted tracks.
        """
        return sum(1 for t in self._tracks if t is not None)

    def __iter__(self) -> T.Iterator[Track]:
        return (t for t in self._tracks if t is not None)

    def __contains__(self, track_id: object) -> bool:
        return isinstance(track_id, int) and self._lookup(track_id) is not None

    def __getitem__(self, track_id: int) -> Track:
        return self._get(track_id)

    @property
    def num_tracks(self) -> int:
        return len(self)

    @property
    def last_id(self) -> int:
        """Identifier of the most recently created track, 0 when empty."""
        return len(self._tracks)

    @property
    def track_ids(self) -> list[int]:
        return [t.id for t in self]

    @property
    def active_track_ids(self) -> list[int]:
        """Identifiers of the active tracks, in order of creation."""
        return [t.id for t in self if t.is_active]

    @property
    def tracked_fields(self) -> list[str]:
        """Names of all fields recorded on any track."""
        fields: dict[str, None] = {}
        for t in self:
            fields.update(dict.fromkeys(t.fields))
        return list(fields)

    @property
    def num_frames(self) -> int:
        """
        Number of frames of the movie: the number of timestamps when known,
        otherwise the span of frames covered by the tracks.
        """
        if len(self.metadata.timestamps) > 0:
            return len(self.metadata.timestamps)
        tracks = list(self)
        if len(tracks) == 0:
            return 0
        return max(t.last_frame for t in tracks) - min(t.first_frame for t in tracks) + 1

    def add_track(self, frame: int, data: T.Mapping[str, T.Any]) -> int:
        """
        Create an active track with a single entry at ``frame``.

        Returns
        -------
        int
            Identifier of the new track.
        """
        track = Track(self.last_id + 1, frame, data)
        self._tracks.append(track)
        return track.id

    def add_tracks(
        self, frame: int, records: T.Iterable[T.Mapping[str, T.Any]]
    ) -> list[int]:
        """Create one track per record, all starting at ``frame``."""
        return [self.add_track(frame, r) for r in records]

    def update_track(
        self,
        track_id: int,
        frame: int | T.Sequence[int],
        data: T.Mapping[str, T.Any] | T.Sequence[T.Mapping[str, T.Any]],
        *,
        fill_gaps: bool = True,
    ) -> None:
        """
        Write data to a track at one or more frames.

        Frames that already have an entry are overwritten field by field, other
        frames are inserted in order. Updates of several frames are applied in
        order of frame, regardless of the order in which they are given.

        Parameters
        ----------
        track_id
            Identifier of the track.
        frame
            A frame, or a sequence of frames.
        data
            A record of field values, or one record per frame. A single record
            is written at every frame.
        fill_gaps
            Insert placeholder entries for the frames between the updated
            frames, and between the updated frames and the existing entries.
        """
        track = self._get(track_id)
        frames = [int(f) for f in np.atleast_1d(np.asarray(frame)).reshape(-1)]

        if isinstance(data, T.Mapping):
            records = [data] * len(frames)
        else:
            records = list(data)
            if len(records) == 1:
                records = records * len(frames)
        if len(records) != len(frames):
            msg = f"Got {len(records)} records for {len(frames)} frames!"
            raise ValueError(msg)
        if len(set(frames)) != len(frames):
            msg = f"Frames of an update must be unique! Got: {frames}"
            raise ValueError(msg)
        if len(frames) == 0:
            return

        first, last = track.first_frame, track.last_frame
        for f, r in sorted(zip(frames, records), key=lambda fr: fr[0]):
            track.set_frame(f, r)

        if fill_gaps:
            lo, hi = min(frames), max(frames)
            track.fill_gaps(lo, hi)
            if lo < first:
                track.fill_gaps(lo, first)
            if hi > last:
                track.fill_gaps(last, hi)

    def delete_track(self, track_id: int) -> None:
        """
        Delete a track. Its identifier is not reused, and links from other
        tracks to it are kept.
        """
        self._get(track_id)
        self._tracks[track_id - 1] = None

    def delete_frame(self, track_id: int, frame: int) -> None:
        """
        Remove the entry of a track at ``frame``.

        Raises
        ------
        FrameNotFoundError
            When the track has no entry at ``frame``.
        """
        self._get(track_id).delete_frame(frame)

    def split_track(self, track_id: int, frame: int) -> int:
        """
        Move the entries of a track from ``frame`` onwards into a new track.

        The new track is active and carries no lineage links.

        Returns
        -------
        int
            Identifier of the new track.
        """
        track = self._get(track_id)
        other = track.split(frame, self.last_id + 1)
        self._tracks.append(other)
        return other.id

    def get_track(self, track_id: int, frame: int | None = None) -> TrackView:
        """
        Return a read-only view of a track, or of a single frame of a track.
        """
        return self._get(track_id).view(frame)

    def retire(self, track_id: int, state: TrackState) -> None:
        """Mark a track as no longer taking part in linking."""
        if state is TrackState.ACTIVE:
            msg = "Retiring a track requires a terminal state!"
            raise ValueError(msg)
        self._get(track_id).state = state

    def set_mother(self, track_id: int, mother_id: int | None) -> None:
        """
        Link a track to its mother. The mother must end exactly one frame
        before the track starts.
        """
        track = self._get(track_id)
        if mother_id is not None:
            mother = self._get(mother_id)
            if mother.last_frame != track.first_frame - 1:
                msg = (
                    f"Mother {mother_id} ends at frame {mother.last_frame}, but "
                    f"track {track_id} starts at frame {track.first_frame}!"
                )
                raise LineageError(msg)
        track.mother_id = mother_id

    def set_daughters(self, track_id: int, daughter_ids: T.Sequence[int]) -> None:
        """
        Link a track to at most two daughters, which ends its participation in
        linking.
        """
        track = self._get(track_id)
        daughter_ids = tuple(int(d) for d in daughter_ids)
        if len(daughter_ids) > 2:
            msg = f"A track has at most two daughters! Got: {daughter_ids}"
            raise LineageError(msg)
        for d in daughter_ids:
            self._get(d)

        track.daughter_ids = daughter_ids
        if len(daughter_ids) > 0:
            track.state = TrackState.DIVIDED

    def rename_field(self, old: str, new: str) -> None:
        """
        Rename a field on every track that records it.
        """
        if old == new:
            return
        clashes = [t.id for t in self if old in t.data and new in t.data]
        if len(clashes) > 0:
            msg = f"Tracks {clashes} already have a field {new!r}!"
            raise KeyError(msg)
        for t in self:
            t.rename_field(old, new)

    def traverse(
        self, root_id: int, order: TraversalOrder | str = TraversalOrder.PREORDER
    ) -> list[int]:
        """
        Identifiers of the lineage of ``root_id``, see :func:`laplink.lineage.traverse`.
        """
        self._get(root_id)
        return traverse(self._lookup, root_id, order)

    def update_metadata(self, **kwargs: T.Any) -> None:
        """Set fields of :attr:`metadata` by name."""
        names = {f.name for f in dataclasses.fields(FileMetadata)}
        unknown = set(kwargs) - names
        if len(unknown) > 0:
            msg = f"Unknown metadata fields: {sorted(unknown)}"
            raise KeyError(msg)
        self.metadata = dataclasses.replace(self.metadata, **kwargs)

    def _lookup(self, track_id: int) -> Track | None:
        if track_id < 1 or track_id > len(self._tracks):
            return None
        return self._tracks[track_id - 1]

    def _get(self, track_id: int) -> Track:
        track = self._lookup(int(track_id))
        if track is None:
            msg = f"Track {track_id} does not exist!"
            raise TrackNotFoundError(msg)
        return track
