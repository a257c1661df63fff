"""
Direct keypoint painting: keypoints, skeleton, fading trails and the growing
glow circles with hands-up growth and movement-driven recoloring.
"""

import logging
import math
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Deque, Dict, List, Optional, Sequence, Tuple, Union

from pose_canvas.canvas import Canvas
from pose_canvas.color import clamp, distance, hex_to_rgb_or_white
from pose_canvas.config import (
    CIRCLE_PALETTE,
    DEFAULT_COLOR,
    DEFAULT_MODE,
    DEFAULT_MIN_CONFIDENCE,
    DEFAULT_OPACITY,
    DEFAULT_SIZE,
    FRAME_DT,
    MAX_TRAIL_LENGTH,
    MIN_TRAIL_LENGTH,
    TARGET_FPS,
    CircleConfig,
)
from pose_canvas.modes import VISUALIZER_MODES, PaintMode
from pose_canvas.pose import (
    CORE_INDICES,
    EAR_INDICES,
    KEYPOINT_COUNT,
    SKELETON_CONNECTIONS,
    KeypointIndex,
    Pose,
    PoseSlotArena,
)

logger = logging.getLogger(__name__)

TrailFrame = List[Tuple[float, float]]


class Movement(Enum):
    NONE = auto()
    LOW = auto()
    HIGH = auto()


def classify_movement(movement: float, threshold: float) -> Movement:
    """NONE up to and including ``threshold``, HIGH strictly above twice it."""
    if movement > threshold * 2:
        return Movement.HIGH
    if movement > threshold:
        return Movement.LOW
    return Movement.NONE


def check_hands_up(pose: Pose, min_confidence: float) -> bool:
    """True when the nose is trusted and at least one trusted wrist is above it."""
    nose = pose.trusted(KeypointIndex.NOSE, min_confidence)
    if nose is None:
        return False
    for index in (KeypointIndex.LEFT_WRIST, KeypointIndex.RIGHT_WRIST):
        wrist = pose.trusted(index, min_confidence)
        if wrist is not None and wrist.y < nose.y:
            return True
    return False


@dataclass
class PoseTracking:
    colors: Dict[int, str] = field(default_factory=dict)
    last_positions: Dict[int, Tuple[float, float]] = field(default_factory=dict)
    stillness_time: float = 0.0
    growth: float = 0.0
    movement: float = 0.0
    movement_class: Movement = Movement.NONE


class PoseVisualizer:
    def __init__(self, config: Optional[CircleConfig] = None,
                 rng: Optional[random.Random] = None):
        self.config = config or CircleConfig()
        self.rng = rng or random.Random()

        self.mode: Optional[PaintMode] = PaintMode.parse(DEFAULT_MODE)
        self.color = DEFAULT_COLOR
        self.size = DEFAULT_SIZE
        self.opacity = DEFAULT_OPACITY
        self.palette: Sequence[str] = CIRCLE_PALETTE

        self.trail_length = int(clamp(self.config.trail_length, MIN_TRAIL_LENGTH, MAX_TRAIL_LENGTH))
        self.trails: PoseSlotArena[Deque[TrailFrame]] = PoseSlotArena(
            lambda: deque(maxlen=self.trail_length))
        self.tracking: PoseSlotArena[PoseTracking] = PoseSlotArena(PoseTracking)
        self.all_hands_up_time = 0.0

    # ─── Configuration ───────────────────────────────────────────────────────

    def configure(self, mode: Union[PaintMode, str, None] = None,
                  color: Optional[str] = None, size: Optional[float] = None,
                  opacity: Optional[float] = None):
        if mode is not None:
            self.set_mode(mode)
        if color is not None:
            self.color = color
        if size is not None:
            self.size = max(0.0, float(size))
        if opacity is not None:
            self.opacity = clamp(float(opacity), 0.0, 100.0)

    def set_mode(self, mode: Union[PaintMode, str]):
        parsed = PaintMode.parse(mode)
        if parsed is not self.mode:
            logger.debug("Visualizer mode %s -> %s", self.mode, parsed)
        self.mode = parsed

    @property
    def alpha(self) -> float:
        return self.opacity / 100.0

    # ─── Frame ───────────────────────────────────────────────────────────────

    def render(self, poses: Sequence[Pose],
               connections: Sequence[Tuple[int, int]] = SKELETON_CONNECTIONS,
               min_confidence: float = DEFAULT_MIN_CONFIDENCE,
               canvas: Optional[Canvas] = None,
               dt: float = FRAME_DT, now: Optional[float] = None):
        if canvas is None or self.mode not in VISUALIZER_MODES:
            return
        self.trails.retain(len(poses))
        self.tracking.retain(len(poses))
        if not poses:
            return
        if now is None:
            now = 0.0

        for i, pose in enumerate(poses):
            if self.mode is PaintMode.KEYPOINTS:
                self.draw_keypoints(canvas, pose, min_confidence)
            elif self.mode is PaintMode.SKELETON:
                self.draw_skeleton(canvas, pose, connections, min_confidence)
            elif self.mode is PaintMode.TRAILS:
                self.draw_trails(canvas, pose, i, min_confidence)
            elif self.mode is PaintMode.CIRCLES:
                self.draw_growing_circles(canvas, pose, i, min_confidence, dt, now)

    def draw_keypoints(self, canvas: Canvas, pose: Pose, min_confidence: float):
        rgb = hex_to_rgb_or_white(self.color)
        for _, kp in pose.trusted_points(min_confidence):
            canvas.circle(kp.x, kp.y, self.size, rgb, self.alpha)

    def draw_skeleton(self, canvas: Canvas, pose: Pose,
                      connections: Sequence[Tuple[int, int]], min_confidence: float):
        rgb = hex_to_rgb_or_white(self.color)
        for a, b in connections:
            pa = pose.trusted(a, min_confidence)
            pb = pose.trusted(b, min_confidence)
            if pa is None or pb is None:
                continue
            canvas.line(pa.x, pa.y, pb.x, pb.y, rgb, self.size / 2, self.alpha)

    def draw_trails(self, canvas: Canvas, pose: Pose, slot: int, min_confidence: float):
        trail = self.trails.get(slot)
        rgb = hex_to_rgb_or_white(self.color)
        n = len(trail)
        for t, frame in enumerate(trail):
            alpha = ((t + 1) / n) * self.alpha
            for x, y in frame:
                canvas.circle(x, y, self.size * 0.5, rgb, alpha)
        trail.append([(kp.x, kp.y) for _, kp in pose.trusted_points(min_confidence)])

    def draw_growing_circles(self, canvas: Canvas, pose: Pose, slot: int,
                             min_confidence: float, dt: float, now: float):
        cfg = self.config
        state = self.tracking.get(slot)
        self.update_movement_tracking(pose, slot, min_confidence, dt)
        self.update_growth(state, check_hands_up(pose, min_confidence), dt)

        with canvas.additive():
            for j, kp in pose.trusted_points(min_confidence):
                if j in EAR_INDICES:
                    continue
                color = state.colors.get(j)
                if color is None:
                    color = state.colors[j] = self.random_color()

                size = cfg.base_size + cfg.amplitude * math.sin(now * cfg.frequency + j * cfg.phase_offset)
                size *= 1.0 + state.growth

                wave = 0.2 * math.sin(now * cfg.opacity_frequency + j * cfg.opacity_phase)
                alpha = clamp(self.alpha * (0.9 + wave), 0.0, 1.0)
                self.draw_glowing_circle(canvas, kp.x, kp.y, size, color, alpha)

    @staticmethod
    def draw_glowing_circle(canvas: Canvas, x: float, y: float, size: float,
                            color_hex: str, alpha: float):
        """Bright core fading to a dimmer, never transparent, edge."""
        rgb = hex_to_rgb_or_white(color_hex)
        stops = ((0.0, alpha), (0.9, alpha * 0.9), (1.0, alpha * 0.4))
        canvas.radial_gradient_circle(x, y, size * 0.6, rgb, stops)

    # ─── Gesture / Movement State ────────────────────────────────────────────

    check_hands_up = staticmethod(check_hands_up)

    def update_growth(self, state: PoseTracking, hands_up: bool, dt: float):
        cfg = self.config
        frames = max(0.0, dt) * TARGET_FPS
        if hands_up:
            state.growth = min(state.growth + cfg.growth_speed * frames, cfg.max_growth)
        else:
            state.growth *= cfg.growth_decay ** frames
        state.growth = clamp(state.growth, 0.0, cfg.max_growth)

    def update_movement_tracking(self, pose: Pose, slot: int,
                                 min_confidence: float, dt: float) -> Movement:
        cfg = self.config
        state = self.tracking.get(slot)
        total = 0.0
        valid = 0

        for index in CORE_INDICES:
            kp = pose.trusted(index, min_confidence)
            if kp is None:
                continue
            last = state.last_positions.get(index)
            if last is not None:
                total += distance(last[0], last[1], kp.x, kp.y)
                valid += 1
            state.last_positions[index] = (kp.x, kp.y)

        state.movement = total / valid if valid else 0.0
        state.movement_class = classify_movement(state.movement, cfg.movement_threshold)

        if state.movement_class is Movement.NONE:
            state.stillness_time += max(0.0, dt)
        else:
            state.stillness_time = 0.0

        if state.movement_class is Movement.HIGH:
            chance = cfg.high_movement_chance
        elif state.movement_class is Movement.LOW:
            chance = cfg.low_movement_chance
        else:
            chance = 0.0
        if chance and self.rng.random() < chance:
            index = self.rng.randrange(KEYPOINT_COUNT)
            state.colors[index] = self.random_color()

        return state.movement_class

    def check_all_hands_up(self, poses: Sequence[Pose], min_confidence: float,
                           dt: float = FRAME_DT) -> bool:
        """True once every pose has held hands up for ``hands_up_hold`` seconds."""
        if poses and all(check_hands_up(p, min_confidence) for p in poses):
            self.all_hands_up_time += max(0.0, dt)
            return self.all_hands_up_time >= self.config.hands_up_hold
        self.all_hands_up_time = 0.0
        return False

    def random_color(self) -> str:
        return self.rng.choice(self.palette)

    # ─── Lifecycle ───────────────────────────────────────────────────────────

    def growth(self, slot: int = 0) -> float:
        state = self.tracking.peek(slot)
        return state.growth if state else 0.0

    def reset_hands_up(self):
        for _, state in self.tracking.items():
            state.growth = 0.0
        self.all_hands_up_time = 0.0

    def clear_trails(self):
        self.trails.clear()

    def clear_pose_tracking(self):
        self.tracking.clear()

    def reset(self):
        self.clear_trails()
        self.clear_pose_tracking()
        self.all_hands_up_time = 0.0
