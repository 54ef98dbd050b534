r"""
Tests for ``laplink.costs``.
"""

from __future__ import annotations

import math

import numpy as np
import pytest
import torch
from hypothesis import given, settings
from hypothesis import strategies as st

import laplink as ll
from laplink import costs


@settings(deadline=None)
@given(
    previous=st.lists(st.floats(-1e3, 1e3), min_size=1, max_size=4),
    num_candidates=st.integers(0, 6),
    shift=st.floats(-10, 10),
)
def test_euclidean(previous, num_candidates, shift):
    candidates = [[v + shift * (i + 1) for v in previous] for i in range(num_candidates)]

    scores = costs.Euclidean()(previous, candidates)

    assert scores.shape == (num_candidates,)
    for i, c in enumerate(candidates):
        expected = np.linalg.norm(np.asarray(c) - np.asarray(previous))
        assert scores[i].item() == pytest.approx(expected, rel=1e-9, abs=1e-9)


def test_euclidean_dimension_mismatch():
    with pytest.raises(ll.DimensionMismatchError):
        costs.Euclidean()([1.0, 1.0], [[1.0, 1.0], [1.0, 1.0, 1.0]])


def test_euclidean_tensor_input():
    scores = costs.Euclidean()(torch.tensor([0.0, 0.0]), [torch.tensor([3.0, 4.0])])

    assert scores.tolist() == [5.0]


@pytest.mark.parametrize(
    ["previous", "candidate", "expected"],
    [
        (set(range(1, 11)), set(range(1, 11)), 1.0),
        (set(range(1, 11)), set(range(1, 6)), 2.0),
        (set(range(1, 11)), set(range(6, 10)), 2.5),
        (set(range(1, 11)), set(range(5, 15)), 14 / 6),
        (set(range(1, 11)), set(range(20, 30)), math.inf),
        ([1, 2, 2, 3], np.array([3, 4]), 4.0),
    ],
    ids=("px:identical", "px:half", "px:part", "px:shifted", "px:disjoint", "px:duplicates"),
)
def test_pixel_intersect(previous, candidate, expected):
    scores = costs.PixelIntersect()(previous, [candidate])

    assert scores[0].item() == pytest.approx(expected)


@settings(deadline=None)
@given(
    a=st.sets(st.integers(0, 50), min_size=1, max_size=30),
    b=st.sets(st.integers(0, 50), min_size=1, max_size=30),
)
def test_pixel_intersect_symmetric(a, b):
    cost = costs.PixelIntersect()

    ab = cost(a, [b])[0].item()
    ba = cost(b, [a])[0].item()

    assert ab == ba
    assert ab >= 1.0
    if len(a & b) == 0:
        assert math.isinf(ab)


def test_missing_values_score_inf():
    cost = costs.Euclidean()

    assert torch.all(torch.isinf(cost(None, [[1.0, 1.0], [2.0, 2.0]])))

    scores = cost([0.0, 0.0], [[3.0, 4.0], None, []])
    assert scores[0].item() == 5.0
    assert torch.isinf(scores[1:]).all()


def test_function_cost():
    cost = costs.resolve_cost(lambda a, bs: [abs(a - b) for b in bs])

    assert isinstance(cost, costs.FunctionCost)
    assert cost(3.0, [1.0, 5.0, 3.0]).tolist() == [2.0, 2.0, 0.0]


def test_function_cost_wrong_length():
    cost = costs.resolve_cost(lambda a, bs: [0.0])

    with pytest.raises(ValueError, match="returned 1 scores"):
        cost(0.0, [1.0, 2.0])


@pytest.mark.parametrize(
    ["metric", "expected"],
    [
        ("euclidean", costs.Euclidean),
        ("Euclidean", costs.Euclidean),
        ("pxintersect", costs.PixelIntersect),
    ],
)
def test_resolve_cost(metric, expected):
    assert isinstance(costs.resolve_cost(metric), expected)


def test_resolve_cost_unknown():
    with pytest.raises(ll.UnknownMetricError):
        costs.resolve_cost("manhattan")
    with pytest.raises(ll.UnknownMetricError):
        costs.resolve_cost(3)


def test_score():
    scores = costs.score([0, 0], [[0, 1], [3, 4]])
    assert scores.tolist() == [1.0, 5.0]

    scores = costs.score({1, 2}, [{1, 2}, {2, 3, 4}], metric="pxintersect")
    assert scores.tolist() == [1.0, 4.0]
