"""
Drawing surface used by the effect engines.

``Canvas`` holds the blend/opacity scope state shared by every backend;
``OpenCVCanvas`` paints onto a numpy BGR image with OpenCV primitives.
"""

import logging
import math
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum, auto
from typing import Callable, Optional, Sequence, Tuple

import cv2
import numpy as np

from pose_canvas.color import RGB, clamp, rgb_to_bgr

logger = logging.getLogger(__name__)

GradientStops = Sequence[Tuple[float, float]]


class BlendMode(Enum):
    NORMAL = auto()
    ADD = auto()


class Canvas(ABC):
    """Primitive set every rendering backend provides."""

    def __init__(self, width: int, height: int):
        self.width = int(width)
        self.height = int(height)
        self._blend_stack = [BlendMode.NORMAL]
        self._alpha_stack = [1.0]

    @property
    def blend_mode(self) -> BlendMode:
        return self._blend_stack[-1]

    @property
    def alpha_scale(self) -> float:
        return self._alpha_stack[-1]

    @contextmanager
    def additive(self):
        self._blend_stack.append(BlendMode.ADD)
        try:
            yield self
        finally:
            self._blend_stack.pop()

    @contextmanager
    def opacity(self, alpha: float):
        self._alpha_stack.append(self.alpha_scale * clamp(alpha, 0.0, 1.0))
        try:
            yield self
        finally:
            self._alpha_stack.pop()

    def effective_alpha(self, alpha: float) -> float:
        if not math.isfinite(alpha):
            return 0.0
        return clamp(alpha, 0.0, 1.0) * self.alpha_scale

    @abstractmethod
    def clear(self, color: RGB = (0, 0, 0)) -> None:
        ...

    @abstractmethod
    def circle(self, x: float, y: float, diameter: float, color: RGB,
               alpha: float = 1.0) -> None:
        ...

    @abstractmethod
    def line(self, x1: float, y1: float, x2: float, y2: float, color: RGB,
             width: float = 1.0, alpha: float = 1.0) -> None:
        ...

    @abstractmethod
    def radial_gradient_circle(self, x: float, y: float, radius: float,
                               color: RGB, stops: GradientStops) -> None:
        ...


class OpenCVCanvas(Canvas):
    def __init__(self, image: np.ndarray):
        h, w = image.shape[:2]
        super().__init__(w, h)
        self.image = image

    @classmethod
    def blank(cls, width: int, height: int) -> "OpenCVCanvas":
        return cls(np.zeros((height, width, 3), dtype=np.uint8))

    def clear(self, color: RGB = (0, 0, 0)) -> None:
        self.image[:] = rgb_to_bgr(color)

    def save(self, path: str) -> bool:
        ok = cv2.imwrite(path, self.image)
        if ok:
            logger.info("Saved canvas to %s", path)
        else:
            logger.error("Could not write canvas to %s", path)
        return ok

    # ─── Primitives ──────────────────────────────────────────────────────────

    def circle(self, x, y, diameter, color, alpha=1.0):
        a = self.effective_alpha(alpha)
        if a <= 0 or not _finite(x, y, diameter) or diameter <= 0:
            return
        r = max(1, int(round(diameter / 2)))
        cx, cy = int(round(x)), int(round(y))
        region = self._roi(cx - r - 1, cy - r - 1, cx + r + 2, cy + r + 2)
        if region is None:
            return
        roi, x0, y0 = region
        self._paint(roi, color, a,
                    lambda layer, c: cv2.circle(layer, (cx - x0, cy - y0), r, c, -1, cv2.LINE_AA))

    def line(self, x1, y1, x2, y2, color, width=1.0, alpha=1.0):
        a = self.effective_alpha(alpha)
        if a <= 0 or not _finite(x1, y1, x2, y2, width):
            return
        t = max(1, int(round(width)))
        p1 = (int(round(x1)), int(round(y1)))
        p2 = (int(round(x2)), int(round(y2)))
        pad = t + 2
        region = self._roi(min(p1[0], p2[0]) - pad, min(p1[1], p2[1]) - pad,
                           max(p1[0], p2[0]) + pad + 1, max(p1[1], p2[1]) + pad + 1)
        if region is None:
            return
        roi, x0, y0 = region
        q1 = (p1[0] - x0, p1[1] - y0)
        q2 = (p2[0] - x0, p2[1] - y0)
        self._paint(roi, color, a,
                    lambda layer, c: cv2.line(layer, q1, q2, c, t, cv2.LINE_AA))

    def radial_gradient_circle(self, x, y, radius, color, stops):
        if not stops or not _finite(x, y, radius) or radius <= 0 or self.alpha_scale <= 0:
            return
        r = int(math.ceil(radius))
        cx, cy = int(round(x)), int(round(y))
        region = self._roi(cx - r - 1, cy - r - 1, cx + r + 2, cy + r + 2)
        if region is None:
            return
        roi, x0, y0 = region
        h, w = roi.shape[:2]

        ys, xs = np.ogrid[y0:y0 + h, x0:x0 + w]
        dist = np.sqrt((xs - x) ** 2 + (ys - y) ** 2) / radius
        offsets = [clamp(o, 0.0, 1.0) for o, _ in stops]
        alphas = [clamp(al, 0.0, 1.0) * self.alpha_scale for _, al in stops]
        amap = np.interp(dist, offsets, alphas).astype(np.float32)
        amap[dist > 1.0] = 0.0
        amap = amap[:, :, np.newaxis]

        col = np.array(rgb_to_bgr(color), dtype=np.float32)
        base = roi.astype(np.float32)
        if self.blend_mode is BlendMode.ADD:
            out = base + col * amap
        else:
            out = base * (1.0 - amap) + col * amap
        roi[:] = np.clip(out, 0, 255).astype(np.uint8)

    # ─── Internals ───────────────────────────────────────────────────────────

    def _roi(self, x0: int, y0: int, x1: int, y1: int
             ) -> Optional[Tuple[np.ndarray, int, int]]:
        x0, y0 = max(0, x0), max(0, y0)
        x1, y1 = min(self.width, x1), min(self.height, y1)
        if x0 >= x1 or y0 >= y1:
            return None
        return self.image[y0:y1, x0:x1], x0, y0

    def _paint(self, roi: np.ndarray, color: RGB, alpha: float,
               draw: Callable[[np.ndarray, Tuple[int, int, int]], None]) -> None:
        bgr = rgb_to_bgr(color)
        if self.blend_mode is BlendMode.ADD:
            layer = np.zeros_like(roi)
            draw(layer, tuple(int(c * alpha) for c in bgr))
            roi[:] = cv2.add(roi, layer)
        else:
            layer = roi.copy()
            draw(layer, tuple(int(c) for c in bgr))
            roi[:] = cv2.addWeighted(layer, alpha, roi, 1.0 - alpha, 0)


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)
