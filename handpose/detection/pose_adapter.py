"""
Pose inference adapter.

Runs the landmark model on one analysis image and flattens every detected
hand into a single list of device points (origin top-left).
"""

import logging
from typing import List, Optional

import numpy as np

from handpose.errors import VisionError
from handpose.types import Point
from handpose.utils.logger import log_timing

logger = logging.getLogger(__name__)


class PoseInferenceAdapter:
    """Submits frames to a hand detector and collects keypoints."""

    def __init__(self, detector, max_hand_count: int = 2):
        self.detector = detector
        self.max_hand_count = max_hand_count

    @log_timing
    def infer(self, image: np.ndarray, timestamp_ms: Optional[int] = None) -> List[Point]:
        """
        Args:
            image: RGB analysis image
            timestamp_ms: Frame time, used by video-mode detectors

        Returns:
            Keypoints of all hands, empty if none detected

        Raises:
            VisionError: if the detector fails
        """
        try:
            observations = self.detector.detect(image, timestamp_ms)
        except Exception as e:
            raise VisionError(e) from e

        points = []
        for observation in observations[:self.max_hand_count]:
            for landmark in observation.recognized_points().values():
                points.append(Point(landmark.x, 1 - landmark.y))

        if points:
            logger.debug("%d hand(s), %d point(s)", min(len(observations), self.max_hand_count), len(points))
        return points
