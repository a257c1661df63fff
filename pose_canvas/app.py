"""
Pose Canvas — webcam runner
===========================
Paints generative effects from body pose in real time.

Requires: opencv-python, mediapipe, numpy
Usage:    python -m pose_canvas [--mode smoke] [--auto]
Controls: 1–7 modes, SPACE circles → fireworks, C clear, S save,
          A auto mode, F firework overlay, Q / ESC quit
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

import cv2
import numpy as np

from pose_canvas import config
from pose_canvas.canvas import OpenCVCanvas
from pose_canvas.color import clamp, hex_to_rgb
from pose_canvas.config import PaintSettings
from pose_canvas.hud import HUD
from pose_canvas.modes import PaintMode
from pose_canvas.orchestrator import FrameOrchestrator
from pose_canvas.sources import MediaPipePoseSource

logger = logging.getLogger(__name__)

MODE_KEYS = {ord(str(i + 1)): mode for i, mode in enumerate(PaintMode)}


class PoseCanvasApp:
    def __init__(self, settings: PaintSettings, camera: int = config.CAMERA_ID,
                 width: int = config.CAMERA_WIDTH, height: int = config.CAMERA_HEIGHT,
                 camera_opacity: float = config.CAMERA_OPACITY,
                 export_path: str = config.EXPORT_PATH,
                 source=None):
        self.camera = camera
        self.width = width
        self.height = height
        self.camera_opacity = clamp(camera_opacity, 0.0, 100.0) / 100.0
        self.export_path = export_path

        self.orchestrator = FrameOrchestrator(settings)
        self.source = source or MediaPipePoseSource()
        self.hud = HUD()
        self.show_hud = True
        self.mouse_x: Optional[int] = None
        self.canvas: Optional[OpenCVCanvas] = None

    def _on_mouse(self, event, x, y, flags, param):
        if event == cv2.EVENT_MOUSEMOVE:
            self.mouse_x = x

    def _mouse_wind(self, width: int) -> float:
        """Mouse x across the window maps to a horizontal wind in ±wind_strength."""
        if self.mouse_x is None or width <= 0:
            return 0.0
        strength = self.orchestrator.smoke.wind_strength
        x = clamp(self.mouse_x, 0, width)
        return -strength + (x / width) * 2 * strength

    def _compose_background(self, frame: np.ndarray) -> np.ndarray:
        if self.camera_opacity >= 1.0:
            return frame.copy()
        if self.camera_opacity <= 0.0:
            return np.zeros_like(frame)
        return cv2.convertScaleAbs(frame, alpha=self.camera_opacity)

    def _handle_key(self, key: int) -> bool:
        """Returns False when the app should quit."""
        orch = self.orchestrator
        if key in (ord('q'), 27):
            return False
        if key in MODE_KEYS:
            orch.set_mode(MODE_KEYS[key])
        elif key == ord(' '):
            if orch.escalate_to_fireworks():
                logger.info("Switched to fireworks mode")
        elif key == ord('c'):
            orch.clear()
        elif key == ord('s') and self.canvas is not None:
            self.canvas.save(self.export_path)
        elif key == ord('a'):
            orch.settings.auto_mode = not orch.settings.auto_mode
            logger.info("Auto mode %s", "on" if orch.settings.auto_mode else "off")
        elif key == ord('f'):
            orch.settings.firework_overlay = not orch.settings.firework_overlay
            if not orch.settings.firework_overlay:
                orch.overlay.clear()
                orch.gesture.clear()
        elif key == ord('h'):
            self.show_hud = not self.show_hud
        return True

    def run(self) -> int:
        cap = cv2.VideoCapture(self.camera)
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

        if not cap.isOpened():
            logger.error("Cannot open camera %s", self.camera)
            return 1

        print("=" * 55)
        print("  POSE CANVAS")
        print("=" * 55)
        print()
        for key, mode in sorted(MODE_KEYS.items()):
            print(f"  {chr(key)}      → {mode.value}")
        print("  SPACE  → circles to fireworks")
        print("  C clear · S save · A auto · F overlay · H hud")
        print()
        print("  Press Q or ESC to quit")
        print("=" * 55)

        cv2.namedWindow(config.WINDOW_NAME)
        cv2.setMouseCallback(config.WINDOW_NAME, self._on_mouse)
        prev_time = time.perf_counter()

        try:
            while True:
                ret, frame = cap.read()
                if not ret:
                    logger.warning("Camera returned no frame, stopping")
                    break

                frame = cv2.flip(frame, 1)
                now = time.perf_counter()
                dt = now - prev_time
                prev_time = now

                poses = self.source.process(frame)

                self.canvas = OpenCVCanvas(self._compose_background(frame))
                self.orchestrator.set_wind(self._mouse_wind(self.canvas.width))
                self.orchestrator.render(poses, self.canvas, now)

                result = self.canvas.image
                if self.show_hud:
                    fps = 1.0 / max(dt, 0.001)
                    settings = self.orchestrator.settings
                    self.hud.draw(result, self.orchestrator.stats(), fps,
                                  settings.auto_mode, settings.firework_overlay)

                cv2.imshow(config.WINDOW_NAME, result)

                key = cv2.waitKey(1) & 0xFF
                if key != 0xFF and not self._handle_key(key):
                    break
        finally:
            cap.release()
            cv2.destroyAllWindows()
            self.source.close()
        return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generative pose painting from a webcam")
    parser.add_argument("--camera", type=int, default=config.CAMERA_ID, help="Camera device index")
    parser.add_argument("--width", type=int, default=config.CAMERA_WIDTH, help="Capture width")
    parser.add_argument("--height", type=int, default=config.CAMERA_HEIGHT, help="Capture height")
    parser.add_argument("--mode", choices=[m.value for m in PaintMode], default=config.DEFAULT_MODE)
    parser.add_argument("--color", default=config.DEFAULT_COLOR, help="Paint color as #RRGGBB")
    parser.add_argument("--size", type=float, default=config.DEFAULT_SIZE)
    parser.add_argument("--opacity", type=float, default=config.DEFAULT_OPACITY, help="0-100")
    parser.add_argument("--min-confidence", type=float, default=config.DEFAULT_MIN_CONFIDENCE)
    parser.add_argument("--camera-opacity", type=float, default=config.CAMERA_OPACITY, help="0-100")
    parser.add_argument("--auto", action="store_true", help="Pick the mode from the number of people")
    parser.add_argument("--fireworks-overlay", action="store_true",
                        help="Hands-up gesture fireworks on top of any mode")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if hex_to_rgb(args.color) is None:
        logger.warning("Invalid color %r, painting in white", args.color)

    settings = PaintSettings(
        mode=args.mode,
        color=args.color,
        size=max(0.0, args.size),
        opacity=clamp(args.opacity, 0.0, 100.0),
        min_confidence=args.min_confidence,
        firework_overlay=args.fireworks_overlay,
        auto_mode=args.auto,
    )
    app = PoseCanvasApp(settings, camera=args.camera, width=args.width,
                        height=args.height, camera_opacity=args.camera_opacity)
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
