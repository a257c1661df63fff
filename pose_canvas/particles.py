"""
Noise-driven paint particles: one emitter per tracked keypoint, each with its
own fixed pool and hue.
"""

import logging
import math
import random
from typing import Dict, List, Optional, Sequence, Tuple

from pose_canvas.canvas import Canvas
from pose_canvas.color import RGB, hsv_to_rgb
from pose_canvas.config import (
    DEFAULT_MIN_CONFIDENCE,
    FRAME_DT,
    TARGET_FPS,
    ParticleConfig,
)
from pose_canvas.noise import noise01
from pose_canvas.pool import RingPool
from pose_canvas.pose import KEYPOINT_COUNT, Pose

logger = logging.getLogger(__name__)


class NoiseParticle:
    def __init__(self):
        self.reset()

    def reset(self):
        self.x = 0.0
        self.y = 0.0
        self.vx = 0.0
        self.vy = 0.0
        self.life = 0.0
        self.size = 0.0
        self.color: RGB = (255, 255, 255)
        self.active = False
        self.noise_offset_x = 0.0
        self.noise_offset_y = 0.0
        self.noise_scale = 0.01
        self.noise_strength = 0.5

    def init(self, x: float, y: float, vx: float, vy: float, size: float,
             color: RGB, rng: random.Random):
        self.x = x
        self.y = y
        self.vx = vx
        self.vy = vy
        self.life = 1.0
        self.size = size
        self.color = color
        self.active = True
        self.noise_offset_x = rng.uniform(0, 1000)
        self.noise_offset_y = rng.uniform(0, 1000)
        self.noise_scale = rng.uniform(0.005, 0.02)
        self.noise_strength = rng.uniform(0.3, 1.0)

    def update(self, frames: float = 1.0, friction: float = 0.98, life_decay: float = 0.015):
        if not self.active:
            return
        nx = noise01(self.noise_offset_x) - 0.5
        ny = noise01(self.noise_offset_y) - 0.5
        self.noise_offset_x += self.noise_scale * frames
        self.noise_offset_y += self.noise_scale * frames

        self.vx += nx * self.noise_strength * frames
        self.vy += ny * self.noise_strength * frames
        self.x += self.vx * frames
        self.y += self.vy * frames

        damping = friction ** frames
        self.vx *= damping
        self.vy *= damping

        self.life -= life_decay * frames
        if self.life <= 0:
            self.life = 0.0
            self.active = False

    def draw(self, canvas: Canvas):
        if not self.active:
            return
        canvas.circle(self.x, self.y, self.size * self.life, self.color, self.life)


class ParticleEmitter:
    """Fixed pool of particles painting in a single color.

    A burst fires when ``emission_interval`` has passed or the live count has
    fallen to ``min_particles_for_new_burst``, which keeps a continuous stream
    instead of one burst per frame.
    """

    def __init__(self, color: RGB, config: Optional[ParticleConfig] = None,
                 rng: Optional[random.Random] = None, capacity: Optional[int] = None):
        cfg = config or ParticleConfig()
        self.config = cfg
        self.color = color
        self.rng = rng or random.Random()
        self.pool: RingPool[NoiseParticle] = RingPool(NoiseParticle, capacity or cfg.particle_count)
        self.particles: List[NoiseParticle] = []

        self.last_emission_time: Optional[float] = None
        self.emission_interval = cfg.emission_interval
        self.burst_size = cfg.burst_size
        self.min_particles_for_new_burst = cfg.min_particles_for_new_burst
        self.particle_size = cfg.particle_size
        self.noise_strength = cfg.noise_strength

    @property
    def capacity(self) -> int:
        return self.pool.capacity

    def active_count(self) -> int:
        return sum(1 for p in self.particles if p.active)

    def should_emit(self, now: float) -> bool:
        if self.last_emission_time is None:
            return True
        return (now - self.last_emission_time > self.emission_interval
                or self.active_count() <= self.min_particles_for_new_burst)

    def emit(self, x: float, y: float, intensity: float = 1.0, now: float = 0.0) -> int:
        if not self.should_emit(now):
            return 0
        self.last_emission_time = now
        return self.emit_burst(x, y, intensity)

    def emit_burst(self, x: float, y: float, intensity: float = 1.0) -> int:
        count = min(self.burst_size, 2 + int(math.floor(max(0.0, intensity) * 4)))
        for _ in range(count):
            particle = self.pool.acquire()
            was_active = particle.active
            particle.init(
                x, y,
                (self.rng.random() - 0.5) * 2,
                (self.rng.random() - 0.5) * 2,
                self.particle_size + self.rng.random() * 6,
                self.color,
                self.rng,
            )
            if self.noise_strength is not None:
                particle.noise_strength = self.noise_strength
            if not was_active:
                self.particles.append(particle)
        return count

    def update(self, dt: float = FRAME_DT):
        frames = max(0.0, dt) * TARGET_FPS
        for particle in self.particles:
            particle.update(frames, self.config.friction, self.config.life_decay)
        self.particles = [p for p in self.particles if p.active]

    def draw(self, canvas: Canvas):
        for particle in self.particles:
            particle.draw(canvas)

    def clear(self):
        for particle in self.particles:
            particle.active = False
        self.particles = []

    def set_burst_parameters(self, interval: float, burst_size: int, min_particles: int):
        self.emission_interval = max(0.0, float(interval))
        self.burst_size = max(1, int(burst_size))
        self.min_particles_for_new_burst = max(0, int(min_particles))


class ParticleSystem:
    """One emitter per tracked keypoint (all 17 unless a subset is given)."""

    def __init__(self, config: Optional[ParticleConfig] = None,
                 rng: Optional[random.Random] = None,
                 keypoints: Optional[Sequence[int]] = None):
        self.config = config or ParticleConfig()
        self.rng = rng or random.Random()
        if keypoints is None:
            keypoints = self.config.keypoints
        self.keypoints: Tuple[int, ...] = tuple(keypoints) if keypoints is not None \
            else tuple(range(KEYPOINT_COUNT))
        self.emitters: Dict[int, ParticleEmitter] = {}
        self.keypoint_colors: Dict[int, RGB] = {}
        self.initialized = False

    def initialize(self):
        if self.initialized:
            return
        cfg = self.config
        self.emitters = {}
        self.keypoint_colors = {}
        for index in self.keypoints:
            color = hsv_to_rgb((index * cfg.hue_step) % 360, cfg.saturation, cfg.value)
            self.keypoint_colors[index] = color
            self.emitters[index] = ParticleEmitter(color, cfg, self.rng)
        self.initialized = True
        logger.debug("Particle system ready with %d emitters", len(self.emitters))

    def emit_from_pose(self, pose: Pose, connections=None,
                       min_confidence: float = DEFAULT_MIN_CONFIDENCE,
                       now: float = 0.0) -> int:
        self.initialize()
        emitted = 0
        for index, emitter in self.emitters.items():
            kp = pose.trusted(index, min_confidence)
            if kp is not None:
                emitted += emitter.emit(kp.x, kp.y, kp.confidence * 1.5, now)
        return emitted

    def update(self, dt: float = FRAME_DT):
        for emitter in self.emitters.values():
            emitter.update(dt)

    def draw(self, canvas: Canvas):
        for emitter in self.emitters.values():
            emitter.draw(canvas)

    def clear(self):
        for emitter in self.emitters.values():
            emitter.clear()

    def total_particles(self) -> int:
        return sum(len(e.particles) for e in self.emitters.values())

    # ─── Tunables ────────────────────────────────────────────────────────────

    def set_noise_strength(self, strength: Optional[float]):
        """Override noise strength for live particles and future spawns."""
        self.config.noise_strength = strength
        for emitter in self.emitters.values():
            emitter.noise_strength = strength
            if strength is None:
                continue
            for particle in emitter.particles:
                if particle.active:
                    particle.noise_strength = strength

    def set_burst_parameters(self, interval: float, burst_size: int, min_particles: int):
        self.config.emission_interval = interval
        self.config.burst_size = burst_size
        self.config.min_particles_for_new_burst = min_particles
        for emitter in self.emitters.values():
            emitter.set_burst_parameters(interval, burst_size, min_particles)

    def set_particle_count(self, count: int):
        """Resize every emitter's pool; live particles are dropped."""
        self.config.particle_count = max(1, int(count))
        self.initialized = False
        self.emitters = {}

    def set_particle_size(self, size: float):
        self.config.particle_size = max(0.0, float(size))
        for emitter in self.emitters.values():
            emitter.particle_size = self.config.particle_size
