"""
Pooled firework bursts.

Sparks come from a fixed ring pool shared by every burst of a system. Two
trigger policies feed the same machinery: ``FireworksSystem.emit_from_poses``
(continuous, one burst per qualifying keypoint on a fixed interval) and
``GestureFireworks`` (hands-up gesture opens a sustain window of alternating
wrist bursts).
"""

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from pose_canvas.canvas import Canvas
from pose_canvas.color import RGB, distance, hex_to_rgb_or_white
from pose_canvas.config import (
    DEFAULT_MIN_CONFIDENCE,
    FIREWORK_PALETTE,
    FRAME_DT,
    TARGET_FPS,
    FireworkConfig,
    GestureFireworkConfig,
)
from pose_canvas.pool import RingPool
from pose_canvas.pose import KeypointIndex, Pose, PoseSlotArena

logger = logging.getLogger(__name__)

MAX_LIFE = 255.0


# ─── Spark ───────────────────────────────────────────────────────────────────

class Spark:
    """One pooled spark. ``generation`` changes on every re-initialisation."""

    def __init__(self):
        self.x = 0.0
        self.y = 0.0
        self.prev_x = 0.0
        self.prev_y = 0.0
        self.vx = 0.0
        self.vy = 0.0
        self.life = 0.0
        self.decay = 0.0
        self.size = 0.0
        self.color: RGB = (255, 255, 255)
        self.active = False
        self.generation = 0

    def init(self, x: float, y: float, angle: float, speed: float,
             size: float, color: RGB, decay: float):
        self.x = self.prev_x = x
        self.y = self.prev_y = y
        self.vx = math.cos(angle) * speed
        self.vy = math.sin(angle) * speed
        self.life = MAX_LIFE
        self.decay = decay
        self.size = size
        self.color = color
        self.active = True
        self.generation += 1

    def update(self, frames: float, cfg: FireworkConfig, rng: random.Random):
        if not self.active:
            return
        self.prev_x, self.prev_y = self.x, self.y

        drag = cfg.drag ** frames
        self.vx *= drag
        self.vy *= drag
        self.vy += cfg.gravity * frames
        jx, jy = cfg.jitter
        self.vx += rng.uniform(-jx, jx)
        self.vy += rng.uniform(-jy, jy)

        self.x += self.vx * frames
        self.y += self.vy * frames
        self.life -= self.decay * cfg.decay_scale * frames
        if self.life <= 0:
            self.life = 0.0
            self.active = False

    def draw(self, canvas: Canvas, t: float):
        if not self.active:
            return
        flicker = 0.7 + 0.3 * math.sin(t * 24.0 + self.x * 0.02)
        alpha = (self.life / MAX_LIFE) * flicker
        canvas.line(self.prev_x, self.prev_y, self.x, self.y, self.color,
                    self.size * 0.6, alpha * 0.5)
        canvas.circle(self.x, self.y, self.size * 1.3, self.color, alpha)


class SparkPool(RingPool[Spark]):
    def __init__(self, capacity: int = 1200):
        super().__init__(Spark, capacity)


# ─── Burst ───────────────────────────────────────────────────────────────────

class Firework:
    def __init__(self, x: float, y: float, color: RGB, pool: SparkPool,
                 cfg: FireworkConfig, rng: random.Random):
        self.cfg = cfg
        self.rng = rng
        self.sparks: List[Tuple[Spark, int]] = []

        n = cfg.sparks_per_burst
        for i in range(n):
            angle = (2 * math.pi * i) / n + rng.uniform(-cfg.angle_jitter, cfg.angle_jitter)
            speed = rng.uniform(*cfg.speed_range)
            size = rng.uniform(*cfg.size_range)
            decay = rng.uniform(*cfg.decay_range)
            spark = pool.acquire()
            spark.init(x, y, angle, speed, size, color, decay)
            self.sparks.append((spark, spark.generation))

    def _owned(self):
        return [s for s, gen in self.sparks if s.generation == gen]

    def update(self, frames: float = 1.0):
        # sparks reclaimed by a newer burst belong to that burst now
        owned = [(s, gen) for s, gen in self.sparks if s.generation == gen]
        for spark, _ in owned:
            spark.update(frames, self.cfg, self.rng)
        self.sparks = [(s, gen) for s, gen in owned if s.active]

    def draw(self, canvas: Canvas, t: float = 0.0):
        with canvas.additive():
            for spark in self._owned():
                spark.draw(canvas, t)

    def is_dead(self) -> bool:
        return len(self.sparks) == 0

    def __len__(self) -> int:
        return len(self.sparks)


# ─── Burst Manager ───────────────────────────────────────────────────────────

class FireworksSystem:
    def __init__(self, config: Optional[FireworkConfig] = None,
                 rng: Optional[random.Random] = None,
                 palette: Sequence[str] = FIREWORK_PALETTE):
        self.config = config or FireworkConfig()
        self.rng = rng or random.Random()
        self.palette = palette
        self.pool = SparkPool(self.config.pool_size)
        self.fireworks: List[Firework] = []
        self.enabled = True
        self.last_emit: Optional[float] = None

    def random_color(self) -> str:
        return self.rng.choice(self.palette)

    def trigger(self, x: float, y: float, color_hex: Optional[str] = None) -> Firework:
        color = hex_to_rgb_or_white(color_hex or self.random_color())
        firework = Firework(x, y, color, self.pool, self.config, self.rng)
        self.fireworks.append(firework)
        return firework

    def emit_from_pose(self, pose: Pose, min_confidence: float = DEFAULT_MIN_CONFIDENCE,
                       now: float = 0.0) -> int:
        return self.emit_from_poses([pose], min_confidence, now)

    def emit_from_poses(self, poses: Sequence[Pose],
                        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
                        now: float = 0.0) -> int:
        """Ambient policy: one burst per qualifying keypoint every ``emit_interval``."""
        if not self.enabled:
            return 0
        if self.last_emit is not None and now - self.last_emit < self.config.emit_interval:
            return 0

        indices = self.config.keypoints
        emitted = 0
        for pose in poses:
            for j, kp in pose.trusted_points(min_confidence):
                if indices is not None and j not in indices:
                    continue
                self.trigger(kp.x, kp.y)
                emitted += 1
        self.last_emit = now
        return emitted

    def update(self, dt: float = FRAME_DT):
        frames = max(0.0, dt) * TARGET_FPS
        for firework in self.fireworks:
            firework.update(frames)
        self.fireworks = [f for f in self.fireworks if not f.is_dead()]

    def draw(self, canvas: Canvas, t: float = 0.0):
        for firework in self.fireworks:
            firework.draw(canvas, t)

    def update_and_draw(self, canvas: Canvas, dt: float = FRAME_DT, t: float = 0.0):
        frames = max(0.0, dt) * TARGET_FPS
        for firework in self.fireworks:
            firework.update(frames)
            firework.draw(canvas, t)
        self.fireworks = [f for f in self.fireworks if not f.is_dead()]

    def clear(self):
        self.fireworks = []

    def set_enabled(self, on: bool):
        self.enabled = on
        if on:
            self.last_emit = None

    def total_sparks(self) -> int:
        return sum(len(f) for f in self.fireworks)


# ─── Gesture Trigger ─────────────────────────────────────────────────────────

@dataclass
class GestureState:
    hands_up_since: Optional[float] = None
    last_trigger: Optional[float] = None
    sustain_until: float = float("-inf")
    last_burst: Optional[float] = None
    next_hand: int = 0
    last_wrists: Dict[int, Tuple[float, float]] = field(default_factory=dict)
    movement: float = 0.0


class GestureFireworks:
    """Hands-up gesture policy feeding a ``FireworksSystem``.

    A trigger opens (or extends) a sustain window measured in wall-clock
    seconds; inside it one burst alternates between the wrists every
    ``burst_interval``, with occasional crown and torso-ring extras.
    """

    TORSO_RING = (
        KeypointIndex.LEFT_SHOULDER,
        KeypointIndex.RIGHT_SHOULDER,
        KeypointIndex.RIGHT_HIP,
        KeypointIndex.LEFT_HIP,
    )
    WRISTS = (KeypointIndex.LEFT_WRIST, KeypointIndex.RIGHT_WRIST)

    def __init__(self, fireworks: FireworksSystem,
                 config: Optional[GestureFireworkConfig] = None,
                 rng: Optional[random.Random] = None):
        self.fireworks = fireworks
        self.config = config or GestureFireworkConfig()
        self.rng = rng or fireworks.rng
        self.slots: PoseSlotArena[GestureState] = PoseSlotArena(GestureState)

    @staticmethod
    def shoulder_line(pose: Pose, min_confidence: float) -> Optional[float]:
        ys = [kp.y for kp in (pose.trusted(KeypointIndex.LEFT_SHOULDER, min_confidence),
                              pose.trusted(KeypointIndex.RIGHT_SHOULDER, min_confidence))
              if kp is not None]
        return sum(ys) / len(ys) if ys else None

    def hands_up(self, pose: Pose, min_confidence: float) -> bool:
        """Both wrists trusted and above the shoulder line."""
        line = self.shoulder_line(pose, min_confidence)
        if line is None:
            return False
        for index in self.WRISTS:
            wrist = pose.trusted(index, min_confidence)
            if wrist is None or wrist.y >= line:
                return False
        return True

    def shoulder_width(self, pose: Pose, min_confidence: float) -> float:
        ls = pose.trusted(KeypointIndex.LEFT_SHOULDER, min_confidence)
        rs = pose.trusted(KeypointIndex.RIGHT_SHOULDER, min_confidence)
        if ls is not None and rs is not None:
            width = distance(ls.x, ls.y, rs.x, rs.y)
            if width > 1.0:
                return width
        return self.config.fallback_shoulder_width

    def update(self, poses: Sequence[Pose], min_confidence: float = DEFAULT_MIN_CONFIDENCE,
               now: float = 0.0) -> int:
        self.slots.retain(len(poses))
        emitted = 0
        for i, pose in enumerate(poses):
            emitted += self._update_slot(pose, self.slots.get(i), min_confidence, now)
        return emitted

    def _relative_movement(self, pose: Pose, state: GestureState,
                           min_confidence: float) -> float:
        total = 0.0
        valid = 0
        for index in self.WRISTS:
            wrist = pose.trusted(index, min_confidence)
            if wrist is None:
                continue
            last = state.last_wrists.get(index)
            if last is not None:
                total += distance(last[0], last[1], wrist.x, wrist.y)
                valid += 1
            state.last_wrists[index] = (wrist.x, wrist.y)
        if not valid:
            return 0.0
        return (total / valid) / self.shoulder_width(pose, min_confidence)

    def _update_slot(self, pose: Pose, state: GestureState,
                     min_confidence: float, now: float) -> int:
        cfg = self.config
        state.movement = self._relative_movement(pose, state, min_confidence)

        if self.hands_up(pose, min_confidence):
            if state.hands_up_since is None:
                state.hands_up_since = now
            held = now - state.hands_up_since
            cooled = state.last_trigger is None or now - state.last_trigger >= cfg.cooldown
            if state.movement > cfg.movement_trigger or (held >= cfg.hold_trigger and cooled):
                state.sustain_until = max(state.sustain_until, now + cfg.sustain)
                state.last_trigger = now
                logger.debug("Firework gesture triggered, sustain until %.2f", state.sustain_until)
        else:
            state.hands_up_since = None

        if now >= state.sustain_until:
            return 0
        if state.last_burst is not None and now - state.last_burst < cfg.burst_interval:
            return 0
        state.last_burst = now
        return self._emit(pose, state, min_confidence)

    def _emit(self, pose: Pose, state: GestureState, min_confidence: float) -> int:
        cfg = self.config
        emitted = 0

        order = self.WRISTS if state.next_hand == 0 else self.WRISTS[::-1]
        state.next_hand ^= 1
        position = None
        for index in order:
            wrist = pose.trusted(index, min_confidence)
            if wrist is not None:
                position = (wrist.x, wrist.y)
                break
        if position is None:
            position = state.last_wrists.get(order[0]) or state.last_wrists.get(order[1])
        if position is not None:
            self.fireworks.trigger(*position)
            emitted += 1

        if self.rng.random() < cfg.crown_chance:
            nose = pose.trusted(KeypointIndex.NOSE, min_confidence)
            if nose is not None:
                self.fireworks.trigger(nose.x, nose.y - cfg.crown_offset)
                emitted += 1

        if self.rng.random() < cfg.torso_ring_chance:
            color = self.fireworks.random_color()
            for index in self.TORSO_RING:
                kp = pose.trusted(index, min_confidence)
                if kp is not None:
                    self.fireworks.trigger(kp.x, kp.y, color)
                    emitted += 1

        return emitted

    def sustaining(self, slot: int, now: float) -> bool:
        state = self.slots.peek(slot)
        return state is not None and now < state.sustain_until

    def clear(self):
        self.slots.clear()
