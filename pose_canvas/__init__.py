"""Generative visual effects painted from human pose keypoints."""

from pose_canvas.canvas import Canvas, OpenCVCanvas
from pose_canvas.config import EngineConfig, PaintSettings
from pose_canvas.fireworks import FireworksSystem, GestureFireworks
from pose_canvas.modes import PaintMode
from pose_canvas.orchestrator import FrameOrchestrator
from pose_canvas.particles import ParticleSystem
from pose_canvas.pose import SKELETON_CONNECTIONS, Keypoint, Pose
from pose_canvas.smoke import SmokeSystem
from pose_canvas.visualizer import PoseVisualizer

__version__ = "0.1.0"

__all__ = [
    "Canvas",
    "OpenCVCanvas",
    "EngineConfig",
    "PaintSettings",
    "FireworksSystem",
    "GestureFireworks",
    "PaintMode",
    "FrameOrchestrator",
    "ParticleSystem",
    "SKELETON_CONNECTIONS",
    "Keypoint",
    "Pose",
    "SmokeSystem",
    "PoseVisualizer",
]
