"""MediaPipe Pose as the pose producer for the webcam app."""

import logging
from typing import List

import cv2
import mediapipe as mp
import numpy as np

from pose_canvas.pose import Pose, landmarks_to_pose

logger = logging.getLogger(__name__)


class MediaPipePoseSource:
    """Runs MediaPipe Pose on BGR frames and yields COCO-17 pixel poses.

    MediaPipe Pose tracks a single person, so the list holds at most one pose.
    """

    def __init__(self, model_complexity: int = 1,
                 min_detection_confidence: float = 0.5,
                 min_tracking_confidence: float = 0.5):
        self.mp_pose = mp.solutions.pose
        self.pose = self.mp_pose.Pose(
            static_image_mode=False,
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

    def process(self, frame: np.ndarray) -> List[Pose]:
        h, w = frame.shape[:2]
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self.pose.process(rgb)
        if not results.pose_landmarks:
            return []
        return [landmarks_to_pose(results.pose_landmarks.landmark, w, h)]

    def close(self):
        self.pose.close()
