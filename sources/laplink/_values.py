r"""
Helpers that normalise the attribute values carried by detections and tracks.

A value is either absent (``None``), a scalar, a numeric vector
(``numpy.ndarray``), a set of indices (``frozenset``) or an opaque object.
"""

from __future__ import annotations

import typing as T

import numpy as np
import torch

__all__ = ["is_missing", "as_value", "is_numeric"]


def is_missing(value: T.Any) -> bool:
    """
    Whether ``value`` represents an absent attribute, i.e. ``None`` or an empty
    container.
    """
    if value is None:
        return True
    if isinstance(value, np.ndarray):
        return value.size == 0
    if isinstance(value, torch.Tensor):
        return value.numel() == 0
    try:
        return len(value) == 0
    except TypeError:
        return False


def as_value(value: T.Any) -> T.Any:
    """
    Convert an attribute value to the representation stored in a track.
    """
    if is_missing(value):
        return None
    if isinstance(value, torch.Tensor):
        return value.detach().cpu().numpy().copy()
    if isinstance(value, np.ndarray):
        return value.copy()
    if isinstance(value, (set, frozenset)):
        return frozenset(value)
    if isinstance(value, (list, tuple)):
        try:
            arr = np.asarray(value)
        except ValueError:
            return list(value)
        if arr.dtype.kind in "biuf":
            return arr
        return list(value)
    return value


def is_numeric(value: T.Any) -> bool:
    """
    Whether ``value`` is a number or a numeric array of at most one dimension.
    """
    if isinstance(value, (bool, int, float, np.number)):
        return True
    if isinstance(value, np.ndarray):
        return value.dtype.kind in "biuf" and value.ndim <= 1
    return False
