import math
from types import SimpleNamespace

from pose_canvas.pool import RingPool
from pose_canvas.pose import (
    KEYPOINT_NAMES,
    SKELETON_CONNECTIONS,
    Keypoint,
    PoseSlotArena,
    is_trusted,
    landmarks_to_pose,
)

from conftest import make_pose


def test_keypoint_names_follow_coco_order():
    assert KEYPOINT_NAMES[0] == "nose"
    assert KEYPOINT_NAMES[9] == "left_wrist"
    assert KEYPOINT_NAMES[16] == "right_ankle"
    assert all(0 <= a < 17 and 0 <= b < 17 for a, b in SKELETON_CONNECTIONS)


def test_trust_threshold_is_exclusive():
    assert not is_trusted(Keypoint(1, 1, 0.1), 0.1)
    assert is_trusted(Keypoint(1, 1, 0.1001), 0.1)


def test_out_of_range_values_are_excluded():
    assert not is_trusted(Keypoint(1, 1, float("nan")), 0.1)
    assert not is_trusted(Keypoint(1, 1, 1.5), 0.1)
    assert not is_trusted(Keypoint(1, 1, -0.2), -1.0)
    assert not is_trusted(Keypoint(1, 1, 0.9), float("nan"))
    assert not is_trusted(Keypoint(float("inf"), 1, 0.9), 0.1)
    assert not is_trusted(Keypoint(1, float("nan"), 0.9), 0.1)


def test_missing_keypoint_is_untrusted():
    pose = make_pose(count=5)
    assert pose.get(9) is None
    assert pose.trusted(9, 0.1) is None
    assert pose.trusted(-1, 0.1) is None
    assert pose.trusted(0, 0.1) is not None


def test_trusted_points_filters():
    pose = make_pose({3: (0, 0, 0.05), 4: (0, 0, 0.1)})
    indices = [i for i, _ in pose.trusted_points(0.1)]
    assert 3 not in indices and 4 not in indices
    assert len(indices) == 15


def test_landmarks_to_pose_maps_mediapipe_indices():
    landmarks = [SimpleNamespace(x=i / 100, y=i / 50, visibility=0.8) for i in range(33)]
    pose = landmarks_to_pose(landmarks, 200, 100)
    assert len(pose) == 17
    # COCO left wrist is MediaPipe landmark 15
    assert math.isclose(pose.keypoints[9].x, 30.0)
    assert math.isclose(pose.keypoints[9].y, 30.0)
    assert pose.keypoints[9].confidence == 0.8


def test_arena_lazy_default_and_retain():
    arena = PoseSlotArena(list)
    arena.get(0).append("a")
    arena.get(2).append("b")
    assert arena.get(0) == ["a"]
    assert len(arena) == 2

    arena.retain(1)
    assert 2 not in arena
    assert arena.get(2) == []
    assert arena.peek(5) is None


def test_ring_pool_reuses_oldest_and_never_grows():
    created = []

    def factory():
        created.append(object())
        return created[-1]

    pool = RingPool(factory, 4)
    first = [pool.acquire() for _ in range(4)]
    assert pool.acquire() is first[0]
    assert pool.acquire() is first[1]
    assert len(pool) == 4
    assert len(created) == 4
    assert pool.cursor == 2
