"""Heads-up display: active mode, people count and live particle totals."""

from typing import Dict

import cv2
import numpy as np

WHITE = (255, 255, 255)
GREY = (150, 150, 150)
ACCENT = (200, 30, 160)   # BGR

MODE_LABELS = {
    "keypoints": "Keypoints",
    "skeleton": "Skeleton",
    "trails": "Trails",
    "circles": "Growing Circles",
    "fireworks": "Fireworks",
    "smoke": "Smoke",
    "particles": "Particles",
}


class HUD:
    @staticmethod
    def draw(frame: np.ndarray, stats: Dict[str, object], fps: float,
             auto_mode: bool = False, overlay: bool = False):
        h, w = frame.shape[:2]
        font = cv2.FONT_HERSHEY_SIMPLEX

        mode = str(stats.get("mode", ""))
        label = MODE_LABELS.get(mode, f"Unknown mode: {mode}")
        if auto_mode:
            label += "  [auto]"
        if overlay:
            label += "  +fireworks"
        HUD._shadow_text(frame, label, (10, 30), font, 0.7, WHITE, 2)

        info = f"People: {stats.get('poses', 0)}"
        if mode == "fireworks" or overlay:
            info += f"   Fireworks: {stats.get('fireworks', 0)}"
        if mode == "smoke":
            info += f"   Smoke: {stats.get('smoke', 0)}"
        if mode == "particles":
            info += f"   Particles: {stats.get('particles', 0)}"
        HUD._shadow_text(frame, info, (10, 58), font, 0.55, WHITE, 1)

        cv2.putText(frame, f"FPS: {int(fps)}", (10, h - 15), font, 0.5, GREY, 1)

        if auto_mode:
            HUD._draw_corner_marks(frame, w, h)

    @staticmethod
    def _shadow_text(frame, text, org, font, scale, color, thickness):
        x, y = org
        cv2.putText(frame, text, (x + 2, y + 2), font, scale, (0, 0, 0), thickness + 2)
        cv2.putText(frame, text, (x, y), font, scale, color, thickness)

    @staticmethod
    def _draw_corner_marks(frame, w, h):
        length = 30
        t = 2
        for cx, cy, dx, dy in ((10, 10, 1, 1), (w - 10, 10, -1, 1),
                               (10, h - 10, 1, -1), (w - 10, h - 10, -1, -1)):
            cv2.line(frame, (cx, cy), (cx + dx * length, cy), ACCENT, t)
            cv2.line(frame, (cx, cy), (cx, cy + dy * length), ACCENT, t)
