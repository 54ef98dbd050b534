from __future__ import annotations

from typing import Final

__all__ = [
    "UNASSIGNED",
    "ALT_COST_FACTOR",
    "RESOLUTION_CEILING",
    "ENV_DEBUG",
    "FIELD_CENTROID",
    "FIELD_AREA",
]

UNASSIGNED: Final = -1
ALT_COST_FACTOR: Final = 1.05
RESOLUTION_CEILING: Final = 1e16
ENV_DEBUG: Final = "LAPLINK_DEBUG"

FIELD_CENTROID: Final = "Centroid"
FIELD_AREA: Final = "Area"
