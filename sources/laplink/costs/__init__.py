"""
This package implements the metrics that score how (dis)similar the value of a
track is to the values of new detections.
"""

from __future__ import annotations

from .base_cost import *
from .distance import *
from .function import *
from .overlap import *
from .resolve import *
