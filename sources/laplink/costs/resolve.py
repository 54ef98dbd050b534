from __future__ import annotations

import typing as T

import torch

from ..errors import UnknownMetricError
from .base_cost import Cost
from .distance import Euclidean
from .function import FunctionCost
from .overlap import PixelIntersect

__all__ = ["METRICS", "resolve_cost", "score"]

METRICS: T.Final[dict[str, type[Cost]]] = {
    "euclidean": Euclidean,
    "pxintersect": PixelIntersect,
}

MetricType: T.TypeAlias = str | Cost | T.Callable[[T.Any, T.Sequence[T.Any]], T.Any]


def resolve_cost(metric: MetricType) -> Cost:
    """
    Returns the cost module for a metric name (case insensitive), a cost module
    or a plain scoring function.
    """
    if isinstance(metric, Cost):
        return metric
    if isinstance(metric, str):
        try:
            return METRICS[metric.lower()]()
        except KeyError:
            msg = f"Unknown metric {metric!r}, expected one of {list(METRICS)}!"
            raise UnknownMetricError(msg) from None
    if callable(metric):
        return FunctionCost(metric)

    msg = f"Cannot use {type(metric).__name__} as a metric!"
    raise UnknownMetricError(msg)


def score(
    previous: T.Any, candidates: T.Sequence[T.Any], metric: MetricType = "euclidean"
) -> torch.Tensor:
    """
    Score one previous value against a batch of candidate values.

    Parameters
    ----------
    previous
        The reference value, e.g. the centroid of a track at its last frame.
    candidates
        Values to compare against (M).
    metric
        Name of the metric (``"euclidean"`` or ``"pxintersect"``), a cost module
        or a function.

    Returns
    -------
    Tensor[M]
        Scores in ``[0, inf]``.
    """
    return resolve_cost(metric)(previous, candidates)
