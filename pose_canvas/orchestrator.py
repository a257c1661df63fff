"""
Per-frame routing of poses to the active effect engine.

The mode is read once at the start of each ``render`` call, so a mode change
made between frames applies atomically to the next frame. The gesture
firework overlay, when enabled, always draws last.
"""

import logging
import random
import time
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

from pose_canvas.canvas import Canvas
from pose_canvas.color import clamp
from pose_canvas.config import FRAME_DT, MAX_FRAME_DT, EngineConfig, PaintSettings
from pose_canvas.fireworks import FireworksSystem, GestureFireworks
from pose_canvas.modes import VISUALIZER_MODES, PaintMode
from pose_canvas.particles import ParticleSystem
from pose_canvas.pose import SKELETON_CONNECTIONS, Pose
from pose_canvas.smoke import SmokeSystem
from pose_canvas.visualizer import PoseVisualizer

logger = logging.getLogger(__name__)


class FrameOrchestrator:
    def __init__(self, settings: Optional[PaintSettings] = None,
                 engines: Optional[EngineConfig] = None,
                 connections: Sequence[Tuple[int, int]] = SKELETON_CONNECTIONS,
                 clock: Callable[[], float] = time.perf_counter,
                 rng: Optional[random.Random] = None):
        self.settings = settings or PaintSettings()
        self.engines = engines or EngineConfig()
        self.connections = list(connections)
        self.clock = clock
        rng = rng or random.Random()

        self.visualizer = PoseVisualizer(self.engines.circles, rng)
        self.fireworks = FireworksSystem(self.engines.fireworks, rng)
        self.overlay = FireworksSystem(self.engines.fireworks, rng)
        self.gesture = GestureFireworks(self.overlay, self.engines.gesture, rng)
        self.smoke = SmokeSystem(self.engines.smoke, rng)
        self.particles = ParticleSystem(self.engines.particles, rng)

        self.last_time: Optional[float] = None
        self.last_dt = FRAME_DT
        self.pose_count = 0
        self.wind: Tuple[float, float] = (0.0, 0.0)

    # ─── Mode Control ────────────────────────────────────────────────────────

    @property
    def mode(self) -> Optional[PaintMode]:
        return PaintMode.parse(self.settings.mode)

    def set_mode(self, mode: Union[PaintMode, str]):
        parsed = PaintMode.parse(mode)
        previous = self.mode
        self.settings.mode = parsed.value if parsed else str(mode)
        if parsed is PaintMode.FIREWORKS and previous is not PaintMode.FIREWORKS:
            self.fireworks.set_enabled(True)
            self.fireworks.clear()
        if parsed is not previous:
            logger.info("Paint mode: %s", self.settings.mode)

    def escalate_to_fireworks(self) -> bool:
        """Circles -> fireworks, the hands-up finale."""
        if self.mode is not PaintMode.CIRCLES:
            return False
        self.set_mode(PaintMode.FIREWORKS)
        self.visualizer.reset_hands_up()
        return True

    def set_wind(self, fx: float, fy: float = 0.0):
        self.wind = (fx, fy)

    # ─── Frame ───────────────────────────────────────────────────────────────

    def measure_dt(self, now: float) -> float:
        if self.last_time is None:
            dt = FRAME_DT
        else:
            dt = clamp(now - self.last_time, 0.0, MAX_FRAME_DT)
        self.last_time = now
        self.last_dt = dt
        return dt

    def render(self, poses: Sequence[Pose], canvas: Canvas, now: Optional[float] = None):
        now = self.clock() if now is None else now
        dt = self.measure_dt(now)
        poses = list(poses or ())
        settings = self.settings
        min_conf = settings.min_confidence

        if settings.auto_mode:
            self._auto_select(poses, dt)

        mode = self.mode
        self.visualizer.configure(color=settings.color, size=settings.size,
                                  opacity=settings.opacity)

        if mode in VISUALIZER_MODES:
            self.visualizer.set_mode(mode)
            self.visualizer.render(poses, self.connections, min_conf, canvas, dt=dt, now=now)
        elif mode is PaintMode.FIREWORKS:
            if poses:
                self.fireworks.emit_from_poses(poses, min_conf, now)
            self.fireworks.update_and_draw(canvas, dt, now)
        elif mode is PaintMode.SMOKE:
            self.smoke.resize(canvas.width, canvas.height)
            self.smoke.emit_from_poses(poses, min_conf, dt)
            if self.wind != (0.0, 0.0):
                self.smoke.apply_force(*self.wind)
            self.smoke.run(canvas, dt)
        elif mode is PaintMode.PARTICLES:
            for pose in poses:
                self.particles.emit_from_pose(pose, self.connections, min_conf, now)
            self.particles.update(dt)
            self.particles.draw(canvas)

        if settings.firework_overlay:
            self.gesture.update(poses, min_conf, now)
            self.overlay.update_and_draw(canvas, dt, now)
        else:
            self.overlay.update(dt)
        self._update_idle(mode, dt)

        self.pose_count = len(poses)

    def _update_idle(self, mode: Optional[PaintMode], dt: float):
        """Let engines outside the active mode burn down so nothing stale returns."""
        if mode is not PaintMode.FIREWORKS:
            self.fireworks.update(dt)
        if mode is not PaintMode.SMOKE:
            self.smoke.update(dt)
        if mode is not PaintMode.PARTICLES:
            self.particles.update(dt)
        if mode is not PaintMode.TRAILS:
            self.visualizer.clear_trails()

    def _auto_select(self, poses: Sequence[Pose], dt: float):
        """One person paints smoke, a group paints circles; all hands up sets off fireworks."""
        count = len(poses)
        current = self.mode

        if current is PaintMode.FIREWORKS:
            if count == 1:
                self.set_mode(PaintMode.SMOKE)
                self.fireworks.set_enabled(False)
                self.fireworks.clear()
            return

        if count == 1 and current is not PaintMode.SMOKE:
            self.set_mode(PaintMode.SMOKE)
        elif count > 1:
            if current is not PaintMode.CIRCLES:
                self.set_mode(PaintMode.CIRCLES)
            elif self.visualizer.check_all_hands_up(poses, self.settings.min_confidence, dt):
                self.escalate_to_fireworks()

    # ─── Lifecycle ───────────────────────────────────────────────────────────

    def clear(self):
        self.visualizer.reset()
        self.fireworks.clear()
        self.overlay.clear()
        self.gesture.clear()
        self.smoke.clear()
        self.particles.clear()
        logger.debug("Cleared all engines")

    def stats(self) -> Dict[str, object]:
        return {
            "mode": self.settings.mode,
            "poses": self.pose_count,
            "fireworks": len(self.fireworks.fireworks) + len(self.overlay.fireworks),
            "sparks": self.fireworks.total_sparks() + self.overlay.total_sparks(),
            "smoke": self.smoke.total_particles(),
            "particles": self.particles.total_particles(),
        }
