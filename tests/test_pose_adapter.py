"""
Tests for Pose Inference Adapter
=================================
"""

import pytest
import numpy as np
import sys
from pathlib import Path
from unittest.mock import MagicMock

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from handpose.detection.hand_detector import (
    HandDetector,
    HandDetectorConfig,
    HandLandmarks,
    Landmark,
    LandmarkIndex,
)
from handpose.detection.pose_adapter import PoseInferenceAdapter
from handpose.errors import VisionError
from handpose.types import Point


def create_mock_hand(offset: float = 0.0, handedness: str = "Right") -> HandLandmarks:
    """Create a hand whose joint i sits at (0.02 * i + offset, 0.04 * i)."""
    landmarks = [
        Landmark(x=0.02 * i + offset, y=0.04 * i, z=0.0)
        for i in range(len(LandmarkIndex))
    ]
    return HandLandmarks(landmarks=landmarks, handedness=handedness, confidence=0.9)


@pytest.fixture
def image():
    return np.zeros((480, 640, 3), dtype=np.uint8)


class TestHandLandmarks:
    """Test suite for HandLandmarks."""

    def test_recognized_points_in_joint_order(self):
        hand = create_mock_hand()

        points = hand.recognized_points()

        assert list(points.keys()) == list(LandmarkIndex)
        assert points[LandmarkIndex.INDEX_TIP] == hand.landmarks[LandmarkIndex.INDEX_TIP]


class TestPoseInferenceAdapter:
    """Test suite for keypoint flattening and coordinate reconciliation."""

    def test_vertical_flip(self, image):
        detector = MagicMock()
        detector.detect.return_value = [create_mock_hand()]
        adapter = PoseInferenceAdapter(detector)

        points = adapter.infer(image)

        assert len(points) == 21
        for i, point in enumerate(points):
            assert isinstance(point, Point)
            assert point.x == pytest.approx(0.02 * i)
            assert point.y == pytest.approx(1 - 0.04 * i)

    def test_flattens_two_hands(self, image):
        detector = MagicMock()
        detector.detect.return_value = [create_mock_hand(), create_mock_hand(offset=0.5, handedness="Left")]
        adapter = PoseInferenceAdapter(detector, max_hand_count=2)

        points = adapter.infer(image)

        assert len(points) == 42
        assert points[21].x == pytest.approx(0.5)

    def test_limits_hand_count(self, image):
        detector = MagicMock()
        detector.detect.return_value = [create_mock_hand(), create_mock_hand(offset=0.5)]
        adapter = PoseInferenceAdapter(detector, max_hand_count=1)

        assert len(adapter.infer(image)) == 21

    def test_no_hands(self, image):
        detector = MagicMock()
        detector.detect.return_value = []

        assert PoseInferenceAdapter(detector).infer(image) == []

    def test_passes_timestamp(self, image):
        detector = MagicMock()
        detector.detect.return_value = []

        PoseInferenceAdapter(detector).infer(image, timestamp_ms=1234)

        detector.detect.assert_called_once_with(image, 1234)

    def test_detector_failure_wrapped(self, image):
        detector = MagicMock()
        cause = RuntimeError("graph failed")
        detector.detect.side_effect = cause

        with pytest.raises(VisionError) as exc_info:
            PoseInferenceAdapter(detector).infer(image)

        assert exc_info.value.error is cause
        assert "graph failed" in exc_info.value.message


class TestHandDetector:
    """Test suite for the MediaPipe wrapper without a model."""

    def test_default_config(self):
        config = HandDetectorConfig()

        assert config.max_num_hands == 2
        assert config.running_mode == "IMAGE"

    def test_from_dict(self):
        config = HandDetectorConfig.from_dict({"max_num_hands": 1, "running_mode": "VIDEO"})

        assert config.max_num_hands == 1
        assert config.running_mode == "VIDEO"
        assert config.min_detection_confidence == 0.5

    def test_detect_before_start_raises(self, image):
        detector = HandDetector()

        with pytest.raises(RuntimeError):
            detector.detect(image)

    def test_missing_model_without_download(self, tmp_path):
        config = HandDetectorConfig(model_path=str(tmp_path / "missing.task"), download_model=False)
        detector = HandDetector(config)

        assert detector.start() is False
        assert not detector.is_started


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
