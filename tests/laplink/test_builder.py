r"""
Tests for ``laplink._builder``.
"""

from __future__ import annotations

import pytest
import torch
from hypothesis import given, settings
from hypothesis import strategies as st

import laplink as ll
from laplink import costs


@pytest.fixture()
def builder() -> ll.CostMatrixBuilder:
    return ll.CostMatrixBuilder(costs.Euclidean(), (0.0, 5.0))


def test_builder_blocks(builder):
    previous = [[0.0, 0.0], [10.0, 10.0]]
    candidates = [[0.0, 1.0], [10.0, 12.0], [50.0, 50.0]]

    cm = builder(previous, candidates)

    assert cm is not None
    assert cm.num_tracks == 2
    assert cm.num_detections == 3
    assert cm.matrix.shape == (5, 5)

    inf = torch.inf
    expected_link = torch.tensor([[1.0, inf, inf], [inf, 2.0, inf]], dtype=torch.float64)
    assert torch.equal(cm.link, expected_link)
    assert torch.equal(cm.matrix[:2, :3], expected_link)
    assert cm.alt_cost == pytest.approx(1.05 * 2.0)

    no_link = cm.matrix[:2, 3:]
    assert torch.equal(no_link.diagonal(), torch.full((2,), cm.alt_cost, dtype=torch.float64))
    assert torch.isinf(no_link[~torch.eye(2, dtype=torch.bool)]).all()

    new = cm.matrix[2:, :3]
    assert torch.equal(new.diagonal(), torch.full((3,), cm.alt_cost, dtype=torch.float64))
    assert torch.isinf(new[~torch.eye(3, dtype=torch.bool)]).all()

    auxiliary = cm.matrix[2:, 3:]
    expected_aux = torch.tensor([[1.0, inf], [inf, 1.0], [inf, inf]], dtype=torch.float64)
    assert torch.equal(auxiliary, expected_aux)


def test_builder_no_plausible_links(builder):
    assert builder([[0.0, 0.0]], [[100.0, 100.0]]) is None
    assert builder([], [[0.0, 0.0]]) is None
    assert builder([[0.0, 0.0]], []) is None


def test_builder_free_links(builder):
    """
    Opting out costs more than linking, even when every link is free.
    """
    cm = builder([[1.0, 1.0]], [[1.0, 1.0]])

    assert cm.alt_cost > 0
    rowsol = ll.assignment.Jonker()(cm.matrix)
    assert rowsol[0].item() == 0


def test_builder_score_range_inclusive():
    builder = ll.CostMatrixBuilder(costs.Euclidean(), (5.0, 1.0))

    scores = builder.score([[0.0]], [[0.5], [1.0], [3.0], [5.0], [5.5]])

    assert builder.score_range == (1.0, 5.0)
    assert scores[0].tolist() == [torch.inf, 1.0, 3.0, 5.0, torch.inf]


def test_builder_missing_previous(builder):
    cm = builder([None, [0.0, 0.0]], [[0.0, 1.0]])

    assert torch.isinf(cm.link[0]).all()
    assert cm.link[1, 0].item() == 1.0


@settings(deadline=None)
@given(
    num_tracks=st.integers(1, 6),
    num_dets=st.integers(1, 6),
    seed=st.integers(0, 2**16),
)
def test_builder_always_solvable(num_tracks, num_dets, seed):
    generator = torch.Generator().manual_seed(seed)
    previous = list(torch.rand((num_tracks, 2), generator=generator, dtype=torch.float64) * 10)
    current = list(torch.rand((num_dets, 2), generator=generator, dtype=torch.float64) * 10)
    builder = ll.CostMatrixBuilder(costs.Euclidean(), (0.0, 4.0))

    cm = builder(previous, current)
    if cm is None:
        return

    finite_link = cm.link[torch.isfinite(cm.link)]
    assert cm.alt_cost == pytest.approx(1.05 * finite_link.max().item())
    assert torch.isfinite(cm.matrix.diagonal(offset=num_dets)).all()

    for solver in (ll.assignment.Jonker(), ll.assignment.Munkres()):
        rowsol = solver(cm.matrix)
        assert torch.all(rowsol >= 0)
        assert rowsol.unique().numel() == num_tracks + num_dets
