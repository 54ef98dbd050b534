r"""
Configuration of the :class:`~laplink.LAPLinker`.

Settings can be created directly, or from a mapping as exported by
:meth:`LinkerSettings.to_dict`. Keys of a mapping may use ``snake_case`` or the
``CamelCase`` names of the legacy settings files (e.g. ``MaxTrackAge``); keys that
do not name a setting are ignored.
"""

from __future__ import annotations

import dataclasses
import re
import typing as T

import typing_extensions as TX

from .consts import FIELD_AREA, FIELD_CENTROID

__all__ = ["DivisionType", "LinkerSettings"]

DivisionType: T.TypeAlias = T.Literal["overlap", "mitosis"]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@dataclasses.dataclass
class LinkerSettings:
    """
    Parameters
    ----------
    solver
        Name of the assignment solver (``lapjv``, ``munkres``), an
        :class:`~laplink.assignment.Assignment` module, or a function mapping a
        cost array to a column per row.
    solver_resolution
        Tie tolerance of the Jonker-Volgenant solver.
    linked_by
        Field of the detections that links them to tracks.
    link_cost_metric
        Metric that scores the linked field.
    link_score_range
        Scores outside of this range forbid a link.
    max_track_age
        Number of consecutive frames a track may go unmatched before it stops.
    track_division
        Whether to search for a mother when a new track starts.
    division_type
        ``overlap`` scores the division parameter with the division metric,
        ``mitosis`` uses the proximity and area of the mother.
    division_parameter
        Field of the detections that is compared to find a mother.
    division_score_metric
        Metric that scores the division parameter.
    division_score_range
        Scores outside of this range rule out a mother.
    min_frames_between_div
        Minimum age of a track that itself divided from a mother before it may
        divide again.
    division_frame_offset
        Number of frames before the current frame at which the value of a
        candidate mother is compared.
    mitosis_search_radius
        Maximum distance of a mother for the ``mitosis`` division type.
    mitosis_area_field
        Field of the area for the ``mitosis`` division type.
    mitosis_area_tolerance
        Maximum relative area difference for the ``mitosis`` division type.
    """

    solver: T.Any = "lapjv"
    solver_resolution: float | None = None

    linked_by: str = FIELD_CENTROID
    link_cost_metric: T.Any = "euclidean"
    link_score_range: tuple[float, float] = (0.0, 100.0)
    max_track_age: int = 2

    track_division: bool = False
    division_type: DivisionType = "overlap"
    division_parameter: str = FIELD_CENTROID
    division_score_metric: T.Any = "euclidean"
    division_score_range: tuple[float, float] = (0.0, 2.0)
    min_frames_between_div: int = 10
    division_frame_offset: int = 1

    mitosis_search_radius: float = 30.0
    mitosis_area_field: str = FIELD_AREA
    mitosis_area_tolerance: float = 0.3

    def __post_init__(self):
        self.link_score_range = _as_range(self.link_score_range, "link_score_range")
        self.division_score_range = _as_range(
            self.division_score_range, "division_score_range"
        )
        if self.max_track_age < 0:
            msg = f"max_track_age must be non-negative, got {self.max_track_age}!"
            raise ValueError(msg)
        if self.division_frame_offset < 1:
            msg = f"division_frame_offset must be at least 1, got {self.division_frame_offset}!"
            raise ValueError(msg)
        if self.division_type not in T.get_args(DivisionType):
            msg = (
                f"Unknown division type {self.division_type!r}, expected one of "
                f"{T.get_args(DivisionType)}!"
            )
            raise ValueError(msg)

    @classmethod
    def from_mapping(cls, mapping: T.Mapping[str, T.Any]) -> TX.Self:
        """
        Create settings from a mapping, ignoring unknown keys.
        """
        names = {f.name for f in dataclasses.fields(cls)}
        kwargs = {}
        for key, value in mapping.items():
            name = _to_snake_case(str(key))
            if name in names:
                kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> dict[str, T.Any]:
        return dataclasses.asdict(self)

    def replace(self, **kwargs: T.Any) -> TX.Self:
        return dataclasses.replace(self, **kwargs)


def _as_range(value: T.Sequence[float], name: str) -> tuple[float, float]:
    values = [float(v) for v in value]
    if len(values) != 2:
        msg = f"{name} must have two elements, got {value!r}!"
        raise ValueError(msg)
    return (min(values), max(values))


def _to_snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()
