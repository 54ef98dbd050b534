r"""
LAPLink
=======

This module implements an online tracker that links per-frame detections, e.g.
segmented cells, into tracks by solving a linear assignment problem (LAP) at
each frame.

Each detection has fields (e.g. ``Centroid`` or ``PixelIdxList``) that are used
to score the plausibility of linking it to each of the tracks that were active at
the previous frame.

Terminology
-----------

- **Detection**: A record of field values of one object observed at one frame.

- **Track**: A persistent identity that links detections across frames.

- **Link**: The assignment of a detection to an existing track.

- **Division**: The event where a track splits into two daughter tracks, e.g.
    mitosis. Mothers and daughters form a lineage forest.

- **Active**: The state of a track that may still be linked at the next frame.
"""

from __future__ import annotations

__version__ = "1.0.0"

from . import assignment, consts, costs, debug, errors, lineage, settings
from ._builder import *
from ._linker import *
from ._track import *
from ._track_array import *
from .errors import *
from .lineage import *
from .settings import *
