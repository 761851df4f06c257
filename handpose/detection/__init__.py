"""Hand landmark detection using MediaPipe."""
from .hand_detector import HandDetector, HandDetectorConfig, HandLandmarks, Landmark, LandmarkIndex
from .pose_adapter import PoseInferenceAdapter

__all__ = [
    "HandDetector",
    "HandDetectorConfig",
    "HandLandmarks",
    "Landmark",
    "LandmarkIndex",
    "PoseInferenceAdapter",
]
