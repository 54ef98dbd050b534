r"""
This module defines the :class:`LAPLinker`, which links detections frame by frame
into tracks by solving a linear assignment problem (LAP), and detects divisions
of tracks into two daughters.

Each call to :meth:`LAPLinker.assign_frame` is one transaction: every cost,
assignment and division score is computed first, and only then are the tracks
updated. A step that raises leaves the tracks untouched.
"""

from __future__ import annotations

import logging
import typing as T

import torch

from ._builder import CostMatrixBuilder, gate_scores
from ._track import Track, TrackState, TrackView
from ._track_array import TrackArray
from ._values import is_missing
from .assignment import resolve_solver
from .costs import Euclidean, resolve_cost
from .debug import check_debug_enabled
from .errors import FrameOrderError, MissingFieldError
from .settings import LinkerSettings

__all__ = ["FrameResult", "LAPLinker"]

_logger = logging.getLogger(__name__)

Detection: T.TypeAlias = T.Mapping[str, T.Any]


class FrameResult(T.NamedTuple):
    """
    Outcome of linking one frame.

    Properties
    ----------
    frame
        The frame that was linked.
    matched
        Mapping of track ID to the index of the detection it was extended with.
    created
        Mapping of the ID of each new track to the index of its detection.
    retired
        IDs of the tracks that went unmatched for too long.
    divided
        Mapping of the ID of each mother to the IDs of its two daughters.
    """

    frame: int
    matched: dict[int, int]
    created: dict[int, int]
    retired: list[int]
    divided: dict[int, tuple[int, int]]


class _FramePlan(T.NamedTuple):
    frame: int
    detections: list[Detection]
    matched: dict[int, int]
    new: list[int]
    unmatched: list[int]
    mothers: list[int]
    division_scores: torch.Tensor | None


class LAPLinker:
    """
    Online tracker that links the detections of each frame to the active tracks.

    Parameters
    ----------
    settings
        A :class:`LinkerSettings`, or a mapping of settings.
    **overrides
        Settings that replace those given by ``settings``.

    Examples
    --------
    >>> linker = LAPLinker(max_track_age=3)
    >>> _ = linker.assign_frame(1, [{"Centroid": [1, 1]}, {"Centroid": [10, 10]}])
    >>> _ = linker.assign_frame(2, [{"Centroid": [10, 10.2]}, {"Centroid": [1.1, 1]}])
    >>> linker.get_track(1)["Centroid"]
    array([[1. , 1. ],
           [1.1, 1. ]])
    """

    settings: LinkerSettings
    tracks: TrackArray
    last_frame: int | None

    def __init__(
        self,
        settings: LinkerSettings | T.Mapping[str, T.Any] | None = None,
        **overrides: T.Any,
    ):
        if settings is None:
            settings = LinkerSettings(**overrides)
        elif isinstance(settings, LinkerSettings):
            settings = settings.replace(**overrides)
        else:
            settings = LinkerSettings.from_mapping({**settings, **overrides})

        self.settings = settings
        self.tracks = TrackArray()
        self.last_frame = None

    @property
    def num_tracks(self) -> int:
        return len(self.tracks)

    @property
    def active_track_ids(self) -> list[int]:
        return self.tracks.active_track_ids

    def reset(self) -> None:
        """Discard all tracks."""
        self.tracks = TrackArray(metadata=self.tracks.metadata)
        self.last_frame = None

    def assign_frame(self, frame: int, detections: T.Iterable[Detection]) -> FrameResult:
        """
        Link the detections of a frame to the active tracks.

        Detections that are linked extend their track, other detections start a
        new track. When division tracking is enabled, a new track may split an
        active track into two daughters. Tracks that remain unmatched for more
        than ``max_track_age`` frames stop.

        Parameters
        ----------
        frame
            Index of the frame, larger than that of the previous call.
        detections
            Records of field values, one per detected object.

        Returns
        -------
        FrameResult
            What happened to the tracks and detections at this frame.
        """
        plan = self._plan(int(frame), list(detections))
        return self._commit(plan)

    def start_track(
        self, frame: int, data: Detection | T.Sequence[Detection]
    ) -> int | list[int]:
        """Create a track per record, regardless of the active tracks."""
        if isinstance(data, T.Mapping):
            return self.tracks.add_track(frame, data)
        return self.tracks.add_tracks(frame, data)

    def update_track(
        self,
        track_id: int,
        frame: int | T.Sequence[int],
        data: Detection | T.Sequence[Detection],
    ) -> None:
        """See :meth:`TrackArray.update_track`."""
        self.tracks.update_track(track_id, frame, data)

    def delete_track(self, track_id: int) -> None:
        self.tracks.delete_track(track_id)

    def split_track(self, track_id: int, frame: int) -> int:
        """
        Split a track at ``frame``; the new track holding the later entries is
        active.
        """
        return self.tracks.split_track(track_id, frame)

    def get_track(self, track_id: int, frame: int | None = None) -> TrackView:
        return self.tracks.get_track(track_id, frame)

    def update_metadata(self, **kwargs: T.Any) -> None:
        self.tracks.update_metadata(**kwargs)

    def _plan(self, frame: int, detections: list[Detection]) -> _FramePlan:
        s = self.settings
        solver = resolve_solver(s.solver, s.solver_resolution)
        link_cost = resolve_cost(s.link_cost_metric)

        if self.last_frame is not None and frame <= self.last_frame:
            msg = f"Frame {frame} does not come after the last linked frame {self.last_frame}!"
            raise FrameOrderError(msg)

        _check_field(detections, s.linked_by)
        if s.track_division:
            _check_field(detections, s.division_parameter)
            if s.division_type == "mitosis":
                _check_field(detections, s.mitosis_area_field)

        if len(self.tracks) == 0:
            return _FramePlan(
                frame, detections, {}, list(range(len(detections))), [], [], None
            )

        active = [self.tracks[i] for i in self.tracks.active_track_ids]
        builder = CostMatrixBuilder(link_cost, s.link_score_range)
        cm = builder(
            [t.value(s.linked_by) for t in active],
            [d[s.linked_by] for d in detections],
        )

        matched: dict[int, int] = {}
        if cm is not None:
            rowsol = solver(cm.matrix).tolist()
            for row, track in enumerate(active):
                if cm.is_detection(rowsol[row]):
                    matched[track.id] = rowsol[row]
            if len(set(matched.values())) != len(matched):
                msg = f"Solver linked a detection to several tracks: {matched}"
                raise RuntimeError(msg)

            if check_debug_enabled():
                _logger.debug(
                    "Frame %d: cost matrix %s, alternative cost %.4g",
                    frame,
                    tuple(cm.matrix.shape),
                    cm.alt_cost,
                )

        taken = set(matched.values())
        new = [j for j in range(len(detections)) if j not in taken]
        unmatched = [t.id for t in active if t.id not in matched]

        mothers: list[int] = []
        division_scores = None
        if s.track_division and len(new) > 0:
            mothers, values = self._division_candidates(
                frame, [t for t in active if t.id in matched]
            )
            if len(mothers) > 0:
                division_scores = self._division_scores(
                    values,
                    [detections[j] for j in new],
                    [detections[matched[m]] for m in mothers],
                )

        return _FramePlan(
            frame, detections, matched, new, unmatched, mothers, division_scores
        )

    def _division_candidates(
        self, frame: int, tracks: T.Sequence[Track]
    ) -> tuple[list[int], list[T.Any]]:
        """
        Select the tracks that may divide at ``frame``, together with the value
        of their division parameter ``division_frame_offset`` frames earlier.

        Only tracks that are extended at ``frame`` are passed in.
        """
        s = self.settings
        offset = s.division_frame_offset
        ids: list[int] = []
        values: list[T.Any] = []
        for t in tracks:
            if t.first_frame >= frame:
                continue
            if t.mother_id is not None and frame - t.first_frame < s.min_frames_between_div:
                continue
            # Not yet extended, so position -1 is the latest frame before ``frame``
            if len(t.frames) < offset or t.frames[-offset] != frame - offset:
                continue
            value = t.value(s.division_parameter, -offset)
            if is_missing(value):
                continue
            ids.append(t.id)
            values.append(value)
        return ids, values

    def _division_scores(
        self,
        values: list[T.Any],
        detections: list[Detection],
        sisters: list[Detection],
    ) -> torch.Tensor:
        """
        Score each candidate mother (rows) against each new detection (columns).

        ``sisters`` holds the detection that each candidate is extended with at
        this frame.
        """
        s = self.settings
        positions = [d[s.division_parameter] for d in detections]

        if s.division_type == "overlap":
            builder = CostMatrixBuilder(
                resolve_cost(s.division_score_metric), s.division_score_range
            )
            return builder.score(values, positions)

        # Mitosis: a nearby mother whose other daughter has a similar area
        distance = Euclidean()
        scores = torch.full((len(values), len(detections)), torch.inf, dtype=torch.float64)
        for i, (value, sister) in enumerate(zip(values, sisters)):
            sister_area = float(sister[s.mitosis_area_field])
            dist = distance(value, positions)
            for j, d in enumerate(detections):
                new_area = float(d[s.mitosis_area_field])
                if new_area <= 0:
                    continue
                if abs(new_area - sister_area) / new_area <= s.mitosis_area_tolerance:
                    scores[i, j] = dist[j]
        return gate_scores(scores, (0.0, s.mitosis_search_radius))

    def _commit(self, plan: _FramePlan) -> FrameResult:
        s = self.settings
        frame = plan.frame

        for track_id, j in plan.matched.items():
            self.tracks.update_track(track_id, frame, plan.detections[j], fill_gaps=False)

        created: dict[int, int] = {}
        divided: dict[int, tuple[int, int]] = {}
        scores = plan.division_scores
        for col, j in enumerate(plan.new):
            new_id = self.tracks.add_track(frame, plan.detections[j])
            created[new_id] = j
            if scores is None:
                continue

            best = int(torch.argmin(scores[:, col]).item())
            if not torch.isfinite(scores[best, col]):
                continue

            mother_id = plan.mothers[best]
            sister_id = self.tracks.split_track(mother_id, frame)
            self.tracks.set_daughters(mother_id, (new_id, sister_id))
            self.tracks.set_mother(new_id, mother_id)
            self.tracks.set_mother(sister_id, mother_id)
            divided[mother_id] = (new_id, sister_id)

            # A mother divides at most once
            scores[best, :] = torch.inf

        retired: list[int] = []
        for track_id in plan.unmatched:
            if self.tracks[track_id].age(frame) > s.max_track_age:
                self.tracks.retire(track_id, TrackState.AGED_OUT)
                retired.append(track_id)

        self.last_frame = frame

        if check_debug_enabled():
            _logger.debug(
                "Frame %d: %d matched, %d created, %d retired, divisions %s",
                frame,
                len(plan.matched),
                len(created),
                len(retired),
                divided,
            )

        return FrameResult(frame, dict(plan.matched), created, retired, divided)


def _check_field(detections: T.Sequence[Detection], field: str) -> None:
    for i, d in enumerate(detections):
        if field not in d or is_missing(d[field]):
            msg = f"Detection {i} has no value for field {field!r}!"
            raise MissingFieldError(msg)
