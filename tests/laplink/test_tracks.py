r"""
Tests for ``laplink.TrackArray`` and ``laplink.Track``.
"""

from __future__ import annotations

import math

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

import laplink as ll


@pytest.fixture()
def tracks() -> ll.TrackArray:
    store = ll.TrackArray()
    assert len(store) == 0, "Store should be empty at initialization."
    return store


def centroids(store: ll.TrackArray, track_id: int) -> list:
    return [None if v is None else v.tolist() for v in store[track_id].data["Centroid"]]


def test_add_track(tracks):
    ids = tracks.add_tracks(3, [{"Area": 100, "MajorAxisLength": 10}, {"Area": 100, "MajorAxisLength": 20}])

    assert ids == [1, 2]
    assert tracks.num_tracks == 2
    assert tracks[1].frames == [3]
    assert tracks[1].data["Area"] == [100]
    assert tracks[2].data["MajorAxisLength"] == [20]
    assert tracks.active_track_ids == [1, 2]
    assert tracks.tracked_fields == ["Area", "MajorAxisLength"]


@pytest.mark.parametrize(
    ["frame", "expected_frames", "expected"],
    [
        (2, [2, 3, 4, 5], [[0, 1], None, None, [1, 1]]),
        (8, [5, 6, 7, 8], [[1, 1], None, None, [0, 1]]),
        (5, [5], [[0, 1]]),
    ],
    ids=("update:pre", "update:post", "update:existing"),
)
def test_update_track(tracks, frame, expected_frames, expected):
    tracks.add_track(5, {"Centroid": [1, 1]})

    tracks.update_track(1, frame, {"Centroid": [0, 1]})

    assert tracks[1].frames == expected_frames
    assert centroids(tracks, 1) == expected


def test_update_track_multiple_pre(tracks):
    tracks.add_track(8, {"Centroid": [1, 1]})

    tracks.update_track(1, 3, {"Centroid": [0, 1]})
    tracks.update_track(1, 1, {"Centroid": [1, 0]})

    assert tracks[1].frames == list(range(1, 9))
    assert centroids(tracks, 1) == [[1, 0], None, [0, 1], None, None, None, None, [1, 1]]


def test_update_track_multiple_post(tracks):
    tracks.add_track(1, {"Centroid": [1, 1]})

    tracks.update_track(1, 3, {"Centroid": [0, 1]})
    tracks.update_track(1, 8, {"Centroid": [1, 0]})

    assert tracks[1].frames == list(range(1, 9))
    assert centroids(tracks, 1) == [[1, 1], None, [0, 1], None, None, None, None, [1, 0]]


def test_update_track_batch_existing(tracks):
    tracks.add_track(5, {"Centroid": [1, 1]})
    for frame in (6, 7, 8):
        tracks.update_track(1, frame, {"Centroid": [1, 1]})

    tracks.update_track(
        1, [6, 7, 5], [{"Centroid": [10, 10]}, {"Centroid": [11, 10]}, {"Centroid": [12, 10]}]
    )

    assert tracks[1].frames == [5, 6, 7, 8]
    assert centroids(tracks, 1) == [[12, 10], [10, 10], [11, 10], [1, 1]]


def test_update_track_batch_gaps(tracks):
    tracks.add_track(5, {"Centroid": [1, 1]})

    tracks.update_track(
        1, [3, 8, 5], [{"Centroid": [10, 10]}, {"Centroid": [11, 10]}, {"Centroid": [12, 10]}]
    )

    assert tracks[1].frames == [3, 4, 5, 6, 7, 8]
    assert centroids(tracks, 1) == [[10, 10], None, [12, 10], None, None, [11, 10]]


def test_update_track_without_gaps(tracks):
    tracks.add_track(1, {"Centroid": [1, 1]})

    tracks.update_track(1, 4, {"Centroid": [2, 2]}, fill_gaps=False)

    assert tracks[1].frames == [1, 4]


def test_update_track_insert_inside(tracks):
    tracks.add_track(1, {"Centroid": [1, 1]})
    tracks.update_track(1, 5, {"Centroid": [5, 5]}, fill_gaps=False)

    tracks.update_track(1, 3, {"Centroid": [3, 3]})

    assert tracks[1].frames == [1, 3, 5]
    assert centroids(tracks, 1) == [[1, 1], [3, 3], [5, 5]]


def test_update_track_new_field(tracks):
    tracks.add_track(1, {"Centroid": [1, 1]})
    tracks.update_track(1, 2, {"Centroid": [2, 2]})

    tracks.update_track(1, 3, {"Area": 30})

    assert tracks[1].data["Area"] == [None, None, 30]
    assert centroids(tracks, 1) == [[1, 1], [2, 2], None]


def test_update_track_invalid(tracks):
    tracks.add_track(1, {"Centroid": [1, 1]})

    with pytest.raises(ValueError, match="records"):
        tracks.update_track(1, [2, 3], [{"Centroid": [0, 0]}] * 3)
    with pytest.raises(ValueError, match="unique"):
        tracks.update_track(1, [2, 2], {"Centroid": [0, 0]})
    with pytest.raises(ll.TrackNotFoundError):
        tracks.update_track(2, 2, {"Centroid": [0, 0]})

    assert tracks[1].frames == [1]


def test_delete_frame(tracks):
    tracks.add_track(1, {"Centroid": [1, 1]})
    tracks.update_track(1, [2, 3], [{"Centroid": [2, 2]}, {"Centroid": [3, 3]}])

    tracks.delete_frame(1, 2)

    assert tracks[1].frames == [1, 3]
    assert centroids(tracks, 1) == [[1, 1], [3, 3]]

    with pytest.raises(ll.FrameNotFoundError):
        tracks.delete_frame(1, 2)


def test_delete_only_frame(tracks):
    tracks.add_track(1, {"Centroid": [1, 1]})

    with pytest.raises(ValueError, match="delete the track"):
        tracks.delete_frame(1, 1)


def test_delete_track(tracks):
    tracks.add_tracks(1, [{"Centroid": [1, 1]}, {"Centroid": [2, 2]}])

    tracks.delete_track(1)

    assert len(tracks) == 1
    assert 1 not in tracks
    assert 2 in tracks
    assert tracks.track_ids == [2]
    with pytest.raises(ll.TrackNotFoundError):
        tracks.get_track(1)

    assert tracks.add_track(2, {"Centroid": [3, 3]}) == 3, "IDs are never reused"


def test_split_track(tracks):
    tracks.add_track(1, {"Centroid": [1, 1]})
    for frame in range(2, 11):
        tracks.update_track(1, frame, {"Centroid": [frame, frame]})

    new_id = tracks.split_track(1, 5)

    assert new_id == 2
    assert tracks[1].frames == [1, 2, 3, 4]
    assert tracks[2].frames == list(range(5, 11))
    assert centroids(tracks, 1) == [[1, 1], [2, 2], [3, 3], [4, 4]]
    assert centroids(tracks, 2) == [[f, f] for f in range(5, 11)]
    assert tracks[2].is_active

    with pytest.raises(ll.FrameNotFoundError):
        tracks.split_track(1, 7)
    with pytest.raises(ValueError, match="first frame"):
        tracks.split_track(2, 5)


@settings(deadline=None)
@given(
    frames=st.lists(st.integers(0, 100), min_size=2, max_size=20, unique=True),
    split_at=st.integers(1, 19),
)
def test_split_inverse(frames, split_at):
    frames = sorted(frames)
    split_at = min(split_at, len(frames) - 1)
    store = ll.TrackArray()
    store.add_track(frames[0], {"Value": 0, "Pixels": {frames[0]}})
    for f in frames[1:]:
        store.update_track(1, f, {"Value": f, "Pixels": {f, f + 1}}, fill_gaps=False)
    original_frames = list(store[1].frames)
    original_data = {k: list(v) for k, v in store[1].data.items()}

    new_id = store.split_track(1, frames[split_at])

    assert store[1].frames + store[new_id].frames == original_frames
    for field, values in original_data.items():
        assert store[1].data[field] + store[new_id].data[field] == values


def test_get_track_numeric(tracks):
    tracks.add_track(1, {"Centroid": [1, 1], "Area": 10})
    tracks.update_track(1, 3, {"Centroid": [3, 3], "Area": 40})

    view = tracks.get_track(1)

    assert view.frames.tolist() == [1, 2, 3]
    assert view["Centroid"].shape == (3, 2)
    assert view["Centroid"][0].tolist() == [1.0, 1.0]
    assert np.isnan(view["Centroid"][1]).all()
    assert view["Area"].shape == (3,)
    assert view["Area"][2] == 40.0
    assert math.isnan(view["Area"][1])
    assert view.first_frame == 1
    assert view.last_frame == 3


def test_get_track_ragged(tracks):
    tracks.add_track(1, {"PixelIdxList": [1, 2, 3], "Label": "cell"})
    tracks.update_track(1, 2, {"PixelIdxList": [4, 5], "Label": "cell"})

    view = tracks.get_track(1)

    assert isinstance(view["PixelIdxList"], list)
    assert [v.tolist() for v in view["PixelIdxList"]] == [[1, 2, 3], [4, 5]]
    assert view["Label"] == ["cell", "cell"]


def test_get_track_single_frame(tracks):
    tracks.add_track(1, {"Centroid": [1, 1]})
    tracks.update_track(1, 2, {"Centroid": [2, 3]})

    view = tracks.get_track(1, frame=2)

    assert view.frames.tolist() == [2]
    assert view["Centroid"].tolist() == [[2.0, 3.0]]
    with pytest.raises(ll.FrameNotFoundError):
        tracks.get_track(1, frame=5)


def test_get_track_is_snapshot(tracks):
    tracks.add_track(1, {"Centroid": [1, 1]})
    view = tracks.get_track(1)

    tracks.update_track(1, 2, {"Centroid": [2, 2]})

    assert view.frames.tolist() == [1]
    with pytest.raises(TypeError):
        view.data["Centroid"] = None


def test_rename_field(tracks):
    tracks.add_tracks(1, [{"Centroid": [1, 1]}, {"Centroid": [2, 2], "Area": 3}])

    tracks.rename_field("Centroid", "Position")

    assert tracks.tracked_fields == ["Position", "Area"]
    assert tracks[2].data["Position"][0].tolist() == [2, 2]

    with pytest.raises(KeyError):
        tracks.rename_field("Area", "Position")
    assert "Area" in tracks[2].data


def test_lineage_links(tracks):
    tracks.add_track(1, {"Centroid": [0, 0]})
    tracks.add_tracks(2, [{"Centroid": [1, 1]}, {"Centroid": [-1, 1]}])
    tracks.add_track(4, {"Centroid": [5, 5]})

    tracks.set_daughters(1, [2, 3])
    tracks.set_mother(2, 1)
    tracks.set_mother(3, 1)

    assert tracks[1].state is ll.TrackState.DIVIDED
    assert not tracks[1].is_active
    assert tracks[2].mother_id == 1
    assert tracks.get_track(1).daughter_ids == (2, 3)

    with pytest.raises(ll.LineageError):
        tracks.set_mother(4, 1)
    with pytest.raises(ll.LineageError):
        tracks.set_daughters(1, [2, 3, 4])
    with pytest.raises(ll.TrackNotFoundError):
        tracks.set_daughters(1, [2, 9])


def test_retire(tracks):
    tracks.add_track(1, {"Centroid": [0, 0]})

    tracks.retire(1, ll.TrackState.AGED_OUT)

    assert tracks.active_track_ids == []
    assert tracks.get_track(1).state is ll.TrackState.AGED_OUT
    with pytest.raises(ValueError):
        tracks.retire(1, ll.TrackState.ACTIVE)


def test_metadata(tracks):
    assert math.isnan(tracks.metadata.mean_delta_t)
    assert tracks.num_frames == 0

    tracks.add_track(3, {"Centroid": [0, 0]})
    tracks.update_track(1, 7, {"Centroid": [0, 0]})
    assert tracks.num_frames == 5

    tracks.update_metadata(
        filename="movie.nd2", timestamps=[0.0, 2.0, 4.0, 7.0], timestamp_unit="s"
    )

    assert tracks.metadata.filename == "movie.nd2"
    assert tracks.metadata.mean_delta_t == pytest.approx(7.0 / 3)
    assert tracks.num_frames == 4

    with pytest.raises(KeyError):
        tracks.update_metadata(frame_rate=3)
