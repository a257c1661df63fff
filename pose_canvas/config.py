"""
Defaults and per-engine tunables for the pose canvas.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

# ─── Camera / Canvas ─────────────────────────────────────────────────────────

CAMERA_ID = 0
CAMERA_WIDTH = 1280
CAMERA_HEIGHT = 720
CAMERA_OPACITY = 100             # 0–100, camera image under the paint
WINDOW_NAME = "Pose Canvas"
EXPORT_PATH = "pose-artwork.png"

BASE_CANVAS_AREA = 640 * 480     # reference resolution for resolution scaling

# ─── Paint Defaults ──────────────────────────────────────────────────────────

DEFAULT_MODE = "keypoints"
DEFAULT_COLOR = "#ff0000"
DEFAULT_SIZE = 10.0
DEFAULT_OPACITY = 80.0
DEFAULT_MIN_CONFIDENCE = 0.1

# ─── Timing ──────────────────────────────────────────────────────────────────

TARGET_FPS = 60.0
FRAME_DT = 1.0 / TARGET_FPS
MAX_FRAME_DT = 0.25              # clamp for stalls (window drag, breakpoints)
MIN_TRAIL_LENGTH = 15
MAX_TRAIL_LENGTH = 20

# ─── Palettes ────────────────────────────────────────────────────────────────

CIRCLE_PALETTE = (
    "#CFF8F4",   # bright cyan mint
    "#5CD4E1",   # aqua-blue
    "#B167E6",   # vibrant purple
    "#7232A8",   # deep violet
    "#2C133F",   # almost black purple
)

FIREWORK_PALETTE = (
    "#FF006E",
    "#FFBE0B",
    "#3A86FF",
    "#8338EC",
    "#FB5607",
    "#00F5D4",
)

WARM_COLORS = (
    (255, 150, 100),   # orange-red
    (255, 200, 100),   # orange
    (255, 255, 150),   # yellow
    (255, 255, 255),   # white
)


# ─── Paint Settings ──────────────────────────────────────────────────────────

@dataclass
class PaintSettings:
    mode: str = DEFAULT_MODE
    color: str = DEFAULT_COLOR
    size: float = DEFAULT_SIZE
    opacity: float = DEFAULT_OPACITY          # 0–100
    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    firework_overlay: bool = False
    auto_mode: bool = False


# ─── Engine Tunables ─────────────────────────────────────────────────────────

@dataclass
class CircleConfig:
    base_size: float = 90.0
    amplitude: float = 30.0
    frequency: float = 2.0
    phase_offset: float = 0.5
    opacity_frequency: float = 1.5
    opacity_phase: float = 0.3
    growth_speed: float = 0.02       # per 60 fps frame while hands are up
    growth_decay: float = 0.95       # per 60 fps frame once released
    max_growth: float = 3.0
    movement_threshold: float = 15.0
    high_movement_chance: float = 0.15
    low_movement_chance: float = 0.03
    hands_up_hold: float = 2.0       # seconds of all-hands-up before escalation
    trail_length: int = 15           # frames, clamped to MIN_TRAIL_LENGTH..MAX_TRAIL_LENGTH


@dataclass
class FireworkConfig:
    pool_size: int = 1200
    sparks_per_burst: int = 90
    angle_jitter: float = 0.03
    speed_range: Tuple[float, float] = (2.5, 6.5)
    size_range: Tuple[float, float] = (3.5, 7.0)
    decay_range: Tuple[float, float] = (3.0, 6.0)
    decay_scale: float = 0.7
    drag: float = 0.992
    gravity: float = 0.07
    jitter: Tuple[float, float] = (0.05, 0.03)
    emit_interval: float = 0.05      # seconds between ambient bursts
    keypoints: Optional[Tuple[int, ...]] = None   # None = all 17


@dataclass
class GestureFireworkConfig:
    movement_trigger: float = 0.08   # wrist displacement / shoulder width
    fallback_shoulder_width: float = 100.0
    hold_trigger: float = 0.6        # seconds hands up before a still trigger
    cooldown: float = 1.5
    sustain: float = 2.0
    burst_interval: float = 0.18
    crown_chance: float = 0.12
    crown_offset: float = 60.0
    torso_ring_chance: float = 0.06


@dataclass
class SmokeConfig:
    max_particles: int = 300
    density: int = 1
    smoke_size: float = 80.0
    max_draw_size: float = 60.0
    lifespan: float = 100.0
    life_decay: float = 2.0
    base_movement_threshold: float = 10.0
    max_stillness_time: float = 4.0
    initial_size_multiplier: float = 0.7
    max_size_multiplier: float = 4.5
    size_smoothing: float = 0.05
    wind_smoothing: float = 0.2
    max_wind_smoothing: float = 0.5
    max_wind_strength: float = 0.3
    wind_strength: float = 0.2
    keypoints: Tuple[int, ...] = (9, 10)


@dataclass
class ParticleConfig:
    particle_count: int = 20         # pool capacity per emitter
    particle_size: float = 4.0
    emission_interval: float = 1.0
    burst_size: int = 20
    min_particles_for_new_burst: int = 10
    friction: float = 0.98
    life_decay: float = 0.015
    noise_strength: Optional[float] = None   # None = random per particle
    keypoints: Optional[Tuple[int, ...]] = None
    hue_step: float = 20.0
    saturation: float = 0.9
    value: float = 1.0


@dataclass
class EngineConfig:
    circles: CircleConfig = field(default_factory=CircleConfig)
    fireworks: FireworkConfig = field(default_factory=FireworkConfig)
    gesture: GestureFireworkConfig = field(default_factory=GestureFireworkConfig)
    smoke: SmokeConfig = field(default_factory=SmokeConfig)
    particles: ParticleConfig = field(default_factory=ParticleConfig)
