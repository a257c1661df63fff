"""
Smoke plumes rising from the wrists.

Standing still lets the smoke grow big and lazy; moving shrinks it and blows
it along the direction of motion. Thresholds scale with the canvas so the
feel is the same at any resolution.
"""

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from pose_canvas.canvas import Canvas
from pose_canvas.color import RGB, distance, lerp, per_frame
from pose_canvas.config import (
    BASE_CANVAS_AREA,
    DEFAULT_MIN_CONFIDENCE,
    FRAME_DT,
    TARGET_FPS,
    WARM_COLORS,
    SmokeConfig,
)
from pose_canvas.pose import Pose, PoseSlotArena

logger = logging.getLogger(__name__)

Vector = Tuple[float, float]


@dataclass
class SmokeParticle:
    x: float
    y: float
    vx: float
    vy: float
    size: float
    life: float = 100.0
    max_life: float = 100.0
    ax: float = 0.0
    ay: float = 0.0

    def apply_force(self, fx: float, fy: float):
        self.ax += fx
        self.ay += fy

    def update(self, frames: float = 1.0, life_decay: float = 2.0):
        self.vx += self.ax * frames
        self.vy += self.ay * frames
        self.x += self.vx * frames
        self.y += self.vy * frames
        self.life -= life_decay * frames
        self.ax = self.ay = 0.0

    @property
    def alive(self) -> bool:
        return self.life > 0

    @property
    def age(self) -> float:
        """0 when fresh, 1 at end of life."""
        return 1.0 - max(0.0, self.life) / self.max_life

    def look(self, size_cap: float) -> Tuple[float, RGB, float]:
        """Diameter, color and alpha for the current age."""
        age = self.age
        color = WARM_COLORS[min(int(age * 2), 2)]
        diameter = min(self.size * (0.4 + age * 1.2), size_cap)
        alpha = max(0.0, self.life) / 255.0
        return diameter, color, alpha

    def draw(self, canvas: Canvas, size_cap: float):
        diameter, color, alpha = self.look(size_cap)
        canvas.circle(self.x, self.y, diameter, color, alpha)


@dataclass
class SmokeTracking:
    """Wrist history for one pose slot."""
    last_positions: Dict[int, Vector] = field(default_factory=dict)
    stillness_time: float = 0.0
    movement: float = 0.0
    wind: Optional[Vector] = None


class SmokeSystem:
    def __init__(self, config: Optional[SmokeConfig] = None,
                 rng: Optional[random.Random] = None,
                 canvas_size: Tuple[int, int] = (640, 480)):
        self.config = config or SmokeConfig()
        self.rng = rng or random.Random()
        self.particles: List[SmokeParticle] = []

        cfg = self.config
        self.density = cfg.density
        self.smoke_size = cfg.smoke_size
        self.wind_strength = cfg.wind_strength

        self.size_factor = 1.0
        self.movement_threshold = cfg.base_movement_threshold
        self.wind_smoothing = cfg.wind_smoothing
        self.resize(*canvas_size)

        self.tracking: PoseSlotArena[SmokeTracking] = PoseSlotArena(SmokeTracking)
        self.stillness_time = 0.0
        self.movement = 0.0
        self.size_multiplier = cfg.initial_size_multiplier
        self.target_size_multiplier = cfg.initial_size_multiplier
        self.current_wind: Vector = (0.0, 0.0)
        self.target_wind: Vector = (0.0, 0.0)
        self._force: Vector = (0.0, 0.0)

    # ─── Resolution Scaling ──────────────────────────────────────────────────

    def resize(self, width: int, height: int):
        cfg = self.config
        area = max(1, int(width) * int(height))
        self.size_factor = math.sqrt(area / BASE_CANVAS_AREA)
        self.movement_threshold = cfg.base_movement_threshold * self.size_factor
        self.wind_smoothing = min(cfg.wind_smoothing * self.size_factor, cfg.max_wind_smoothing)

    @property
    def size_cap(self) -> float:
        return self.config.max_draw_size * self.size_factor

    # ─── Emission ────────────────────────────────────────────────────────────

    def emit(self, pose: Pose, min_confidence: float = DEFAULT_MIN_CONFIDENCE,
             dt: float = FRAME_DT) -> int:
        return self.emit_from_poses([pose], min_confidence, dt)

    emit_from_pose = emit

    def emit_from_poses(self, poses: Sequence[Pose],
                        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
                        dt: float = FRAME_DT) -> int:
        """Track every pose slot, settle the shared size and wind once, then emit."""
        cfg = self.config
        frames = max(0.0, dt) * TARGET_FPS
        self.tracking.retain(len(poses))
        states = [self.update_movement_tracking(pose, i, min_confidence, dt)
                  for i, pose in enumerate(poses)]
        self._combine(states, frames)

        self.size_multiplier += ((self.target_size_multiplier - self.size_multiplier)
                                 * per_frame(cfg.size_smoothing, frames))
        self.size_multiplier = min(self.size_multiplier, cfg.max_size_multiplier)

        emitted = 0
        for pose in poses:
            emitted += self._spawn(pose, min_confidence)
        return emitted

    def _spawn(self, pose: Pose, min_confidence: float) -> int:
        cfg = self.config
        emitted = 0
        for index in cfg.keypoints:
            kp = pose.trusted(index, min_confidence)
            if kp is None:
                continue
            for _ in range(self.density):
                if len(self.particles) >= cfg.max_particles:
                    return emitted
                self.particles.append(SmokeParticle(
                    kp.x, kp.y,
                    self.rng.gauss(0.0, 0.3),
                    self.rng.gauss(-1.0, 0.3),
                    size=self.smoke_size * self.size_multiplier,
                    life=cfg.lifespan,
                    max_life=cfg.lifespan,
                ))
                emitted += 1
        return emitted

    def update_movement_tracking(self, pose: Pose, slot: int, min_confidence: float,
                                 dt: float = FRAME_DT) -> SmokeTracking:
        """Wrist movement, stillness and a wind sample for one pose slot."""
        cfg = self.config
        state = self.tracking.get(slot)
        total = 0.0
        valid = 0
        wind_x = wind_y = 0.0

        for index in cfg.keypoints:
            kp = pose.trusted(index, min_confidence)
            if kp is None:
                continue
            last = state.last_positions.get(index)
            if last is not None:
                d = distance(last[0], last[1], kp.x, kp.y)
                total += d
                valid += 1
                if d > 0:
                    strength = min(d * 0.02, cfg.max_wind_strength)
                    strength *= 0.8 + self.rng.uniform(0.0, 0.4)
                    wind_x += (kp.x - last[0]) / d * strength
                    wind_y += (kp.y - last[1]) / d * strength
            state.last_positions[index] = (kp.x, kp.y)

        state.movement = total / valid if valid else 0.0
        if valid and math.hypot(wind_x, wind_y) > 0.01:
            state.wind = (wind_x / valid, wind_y / valid)
        else:
            state.wind = None

        if state.movement < self.movement_threshold:
            state.stillness_time += max(0.0, dt)
        else:
            state.stillness_time = 0.0
        return state

    def _combine(self, states: Sequence[SmokeTracking], frames: float):
        # the busiest person sets the pace; smoke grows only when everyone rests
        cfg = self.config
        if states:
            self.movement = max(s.movement for s in states)
            self.stillness_time = min(s.stillness_time for s in states)
        else:
            self.movement = 0.0

        winds = [s.wind for s in states if s.wind is not None]
        if winds:
            self.target_wind = (sum(w[0] for w in winds) / len(winds),
                                sum(w[1] for w in winds) / len(winds))
            rate = per_frame(self.wind_smoothing, frames)
        else:
            self.target_wind = (0.0, 0.0)
            rate = per_frame(min(self.wind_smoothing * 2, 1.0), frames)
        self.current_wind = (lerp(self.current_wind[0], self.target_wind[0], rate),
                             lerp(self.current_wind[1], self.target_wind[1], rate))

        if self.movement < self.movement_threshold:
            ratio = min(self.stillness_time / cfg.max_stillness_time, 1.0)
            self.target_size_multiplier = 0.6 + ratio * 3.5
        else:
            self.target_size_multiplier = 0.3 + self.movement / 30.0

    # ─── Simulation ──────────────────────────────────────────────────────────

    def apply_force(self, fx: float, fy: float = 0.0):
        """External force (e.g. mouse wind) applied on the next ``run``."""
        self._force = (self._force[0] + fx, self._force[1] + fy)

    def update(self, dt: float = FRAME_DT):
        frames = max(0.0, dt) * TARGET_FPS
        fx = self.current_wind[0] + self._force[0]
        fy = self.current_wind[1] + self._force[1]
        self._force = (0.0, 0.0)
        for particle in self.particles:
            particle.apply_force(fx, fy)
            particle.update(frames, self.config.life_decay)
        self.particles = [p for p in self.particles if p.alive]

    def draw(self, canvas: Canvas):
        cap = self.size_cap
        for particle in self.particles:
            particle.draw(canvas, cap)

    def run(self, canvas: Canvas, dt: float = FRAME_DT):
        self.update(dt)
        self.draw(canvas)

    def clear(self):
        cfg = self.config
        self.particles = []
        self.tracking.clear()
        self.stillness_time = 0.0
        self.movement = 0.0
        self.size_multiplier = cfg.initial_size_multiplier
        self.target_size_multiplier = cfg.initial_size_multiplier
        self.current_wind = (0.0, 0.0)
        self.target_wind = (0.0, 0.0)
        self._force = (0.0, 0.0)

    # ─── Tunables ────────────────────────────────────────────────────────────

    def set_density(self, density: int):
        self.density = max(1, int(density))

    def set_wind_strength(self, percent: float):
        self.wind_strength = max(0.0, float(percent)) / 100.0

    def set_smoke_size(self, size: float):
        self.smoke_size = max(0.0, float(size))

    def total_particles(self) -> int:
        return len(self.particles)

    def wind_info(self) -> Dict[str, object]:
        return {
            "direction": self.current_wind,
            "strength": math.hypot(*self.current_wind),
            "target_direction": self.target_wind,
            "target_strength": math.hypot(*self.target_wind),
        }
