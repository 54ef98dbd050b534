"""
This package implements modules that solve a Linear Assignment Problem (LAP),
where the minimum cost must be computed over a cost-matrix.
"""

from __future__ import annotations

from ._base import *
from ._function import *
from ._jonker import *
from ._munkres import *
from ._solver import *
from ._utils import *
