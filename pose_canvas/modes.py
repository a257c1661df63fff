import logging
from enum import Enum
from typing import Optional, Union

logger = logging.getLogger(__name__)


class PaintMode(Enum):
    KEYPOINTS = "keypoints"
    SKELETON = "skeleton"
    TRAILS = "trails"
    CIRCLES = "circles"
    FIREWORKS = "fireworks"
    SMOKE = "smoke"
    PARTICLES = "particles"

    @classmethod
    def parse(cls, value: Union["PaintMode", str, None]) -> Optional["PaintMode"]:
        """Enum member for ``value`` or None when it names no known mode."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                logger.debug("Unknown paint mode %r", value)
        return None


VISUALIZER_MODES = frozenset({
    PaintMode.KEYPOINTS,
    PaintMode.SKELETON,
    PaintMode.TRAILS,
    PaintMode.CIRCLES,
})
