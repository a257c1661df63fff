import random
from typing import Dict, Optional, Tuple

import pytest

from pose_canvas.canvas import Canvas
from pose_canvas.pose import KEYPOINT_COUNT, Keypoint, Pose


class RecordingCanvas(Canvas):
    """Canvas that remembers every primitive instead of drawing it."""

    def __init__(self, width: int = 640, height: int = 480):
        super().__init__(width, height)
        self.calls = []

    def clear(self, color=(0, 0, 0)):
        self.calls = []

    def circle(self, x, y, diameter, color, alpha=1.0):
        self.calls.append(("circle", {
            "x": x, "y": y, "diameter": diameter, "color": color,
            "alpha": self.effective_alpha(alpha), "blend": self.blend_mode,
        }))

    def line(self, x1, y1, x2, y2, color, width=1.0, alpha=1.0):
        self.calls.append(("line", {
            "x1": x1, "y1": y1, "x2": x2, "y2": y2, "color": color,
            "width": width, "alpha": self.effective_alpha(alpha), "blend": self.blend_mode,
        }))

    def radial_gradient_circle(self, x, y, radius, color, stops):
        self.calls.append(("gradient", {
            "x": x, "y": y, "radius": radius, "color": color,
            "stops": list(stops), "blend": self.blend_mode,
        }))

    def of(self, kind):
        return [args for k, args in self.calls if k == kind]

    def points(self):
        """Every coordinate referenced by any recorded call."""
        pts = set()
        for kind, args in self.calls:
            if kind == "line":
                pts.add((args["x1"], args["y1"]))
                pts.add((args["x2"], args["y2"]))
            else:
                pts.add((args["x"], args["y"]))
        return pts


def make_pose(overrides: Optional[Dict[int, Tuple[float, float, float]]] = None,
              confidence: float = 0.9, dx: float = 0.0, dy: float = 0.0,
              count: int = KEYPOINT_COUNT) -> Pose:
    """Upright figure: nose on top, wrists at hip height.

    ``overrides`` maps keypoint index to (x, y, confidence).
    """
    base = {
        0: (320, 100), 1: (310, 90), 2: (330, 90), 3: (300, 95), 4: (340, 95),
        5: (280, 160), 6: (360, 160), 7: (260, 220), 8: (380, 220),
        9: (250, 280), 10: (390, 280), 11: (295, 290), 12: (345, 290),
        13: (290, 370), 14: (350, 370), 15: (290, 450), 16: (350, 450),
    }
    points = []
    for i in range(count):
        if overrides and i in overrides:
            x, y, c = overrides[i]
        else:
            x, y = base[i]
            c = confidence
        points.append(Keypoint(float(x) + dx, float(y) + dy, float(c)))
    return Pose(tuple(points))


def hands_up_pose(dx: float = 0.0, **kwargs) -> Pose:
    return make_pose({
        9: (260 + dx, 40, 0.9),
        10: (380 + dx, 40, 0.9),
    }, **kwargs)


@pytest.fixture
def canvas():
    return RecordingCanvas()


@pytest.fixture
def rng():
    return random.Random(1234)
