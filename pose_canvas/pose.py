"""
Pose data model: COCO-17 keypoints, the trust rule and per-slot state arenas.
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

KEYPOINT_COUNT = 17


class KeypointIndex(IntEnum):
    NOSE = 0
    LEFT_EYE = 1
    RIGHT_EYE = 2
    LEFT_EAR = 3
    RIGHT_EAR = 4
    LEFT_SHOULDER = 5
    RIGHT_SHOULDER = 6
    LEFT_ELBOW = 7
    RIGHT_ELBOW = 8
    LEFT_WRIST = 9
    RIGHT_WRIST = 10
    LEFT_HIP = 11
    RIGHT_HIP = 12
    LEFT_KNEE = 13
    RIGHT_KNEE = 14
    LEFT_ANKLE = 15
    RIGHT_ANKLE = 16


KEYPOINT_NAMES = [k.name.lower() for k in KeypointIndex]

EAR_INDICES = (KeypointIndex.LEFT_EAR, KeypointIndex.RIGHT_EAR)
WRIST_INDICES = (KeypointIndex.LEFT_WRIST, KeypointIndex.RIGHT_WRIST)
CORE_INDICES = (
    KeypointIndex.NOSE,
    KeypointIndex.LEFT_SHOULDER,
    KeypointIndex.RIGHT_SHOULDER,
    KeypointIndex.LEFT_HIP,
    KeypointIndex.RIGHT_HIP,
)

SKELETON_CONNECTIONS: List[Tuple[int, int]] = [
    (0, 1), (0, 2), (1, 3), (2, 4),
    (5, 6), (5, 7), (7, 9), (6, 8), (8, 10),
    (5, 11), (6, 12), (11, 12),
    (11, 13), (13, 15), (12, 14), (14, 16),
]

# MediaPipe Pose (33 landmarks) -> COCO-17 order
MEDIAPIPE_TO_COCO = (0, 2, 5, 7, 8, 11, 12, 13, 14, 15, 16, 23, 24, 25, 26, 27, 28)


@dataclass(frozen=True)
class Keypoint:
    x: float
    y: float
    confidence: float


@dataclass(frozen=True)
class Pose:
    keypoints: Tuple[Keypoint, ...]

    def __len__(self) -> int:
        return len(self.keypoints)

    def __iter__(self) -> Iterator[Keypoint]:
        return iter(self.keypoints)

    def get(self, index: int) -> Optional[Keypoint]:
        if 0 <= index < len(self.keypoints):
            return self.keypoints[index]
        return None

    def trusted(self, index: int, min_confidence: float) -> Optional[Keypoint]:
        """Keypoint at ``index`` if it passes the trust rule, else None."""
        kp = self.get(index)
        if kp is not None and is_trusted(kp, min_confidence):
            return kp
        return None

    def trusted_points(self, min_confidence: float) -> List[Tuple[int, Keypoint]]:
        return [(i, kp) for i, kp in enumerate(self.keypoints) if is_trusted(kp, min_confidence)]


def is_trusted(kp: Keypoint, min_confidence: float) -> bool:
    """Finite coordinates, confidence in [0, 1] and strictly above the threshold.

    NaN confidences or thresholds compare False and are therefore excluded.
    """
    c = kp.confidence
    if not (0.0 <= c <= 1.0):
        return False
    if not (c > min_confidence):
        return False
    return math.isfinite(kp.x) and math.isfinite(kp.y)


def landmarks_to_pose(landmarks, width: int, height: int) -> Pose:
    """Convert 33 MediaPipe pose landmarks (normalised) to a pixel COCO-17 pose."""
    points = []
    for mp_index in MEDIAPIPE_TO_COCO:
        if mp_index >= len(landmarks):
            break
        lm = landmarks[mp_index]
        confidence = getattr(lm, "visibility", 1.0)
        points.append(Keypoint(lm.x * width, lm.y * height, float(confidence)))
    return Pose(tuple(points))


# ─── Pose Slot Arena ─────────────────────────────────────────────────────────

T = TypeVar("T")


class PoseSlotArena(Generic[T]):
    """Per-pose-slot state with lazy construction.

    Slot indices are positional (i-th pose of the current frame), so when the
    pose count shrinks the vanished slots are dropped via ``retain`` and a new
    person appearing at that index starts from fresh state.
    """

    def __init__(self, factory: Callable[[], T]):
        self._factory = factory
        self._slots: Dict[int, T] = {}

    def get(self, index: int) -> T:
        slot = self._slots.get(index)
        if slot is None:
            slot = self._factory()
            self._slots[index] = slot
        return slot

    def peek(self, index: int) -> Optional[T]:
        return self._slots.get(index)

    def retain(self, count: int) -> None:
        for index in [i for i in self._slots if i >= count]:
            del self._slots[index]

    def clear(self) -> None:
        self._slots.clear()

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, index: int) -> bool:
        return index in self._slots

    def items(self):
        return sorted(self._slots.items())
