"""
Hand Landmark Detection - MediaPipe Tasks API
==============================================

Wraps the MediaPipe HandLandmarker. Landmarks are reported normalized to
the analysis image with the origin at the LOWER-left corner (y grows
upward), so callers that draw in top-left-origin space flip y themselves.
"""

import logging
import urllib.request
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional

import numpy as np
import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

logger = logging.getLogger(__name__)

HAND_LANDMARKER_MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"
DEFAULT_MODEL_PATH = Path(__file__).parent.parent.parent / "models" / "hand_landmarker.task"


class LandmarkIndex(IntEnum):
    """Hand landmark indices following MediaPipe convention."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


class Landmark(NamedTuple):
    """A single landmark point with normalized coordinates."""
    x: float  # 0.0 at the left edge, 1.0 at the right
    y: float  # 0.0 at the bottom edge, 1.0 at the top
    z: float  # Depth relative to wrist


@dataclass
class HandDetectorConfig:
    """Configuration for hand detector."""
    model_path: str = ""
    max_num_hands: int = 2
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    running_mode: str = "IMAGE"  # IMAGE or VIDEO
    download_model: bool = True

    @classmethod
    def from_dict(cls, d: dict) -> "HandDetectorConfig":
        """Create config from dictionary."""
        return cls(
            model_path=d.get("model_path", ""),
            max_num_hands=d.get("max_num_hands", 2),
            min_detection_confidence=d.get("min_detection_confidence", 0.5),
            min_tracking_confidence=d.get("min_tracking_confidence", 0.5),
            min_presence_confidence=d.get("min_presence_confidence", 0.5),
            running_mode=d.get("running_mode", "IMAGE"),
            download_model=d.get("download_model", True),
        )


@dataclass
class HandLandmarks:
    """One detected hand (an observation)."""
    landmarks: List[Landmark]
    handedness: str  # "Left" or "Right"
    confidence: float

    def recognized_points(self) -> Dict[LandmarkIndex, Landmark]:
        """All joints keyed by landmark index, in joint order."""
        return {LandmarkIndex(i): lm for i, lm in enumerate(self.landmarks)}


def download_model(url: str, save_path: Path) -> bool:
    """Download the hand landmarker model if not present."""
    if save_path.exists():
        logger.info("Model already exists at %s", save_path)
        return True

    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Downloading hand landmarker model to %s...", save_path)
        urllib.request.urlretrieve(url, save_path)
        logger.info("Model download complete")
        return True
    except OSError as e:
        logger.error("Failed to download model: %s", e)
        return False


class HandDetector:
    """
    Hand detection wrapper using MediaPipe Tasks API (HandLandmarker).

    Example:
        >>> detector = HandDetector(HandDetectorConfig(max_num_hands=2))
        >>> detector.start()
        >>> hands = detector.detect(rgb_image)  # RGB format!
        >>> detector.stop()
    """

    def __init__(self, config: Optional[HandDetectorConfig] = None):
        self.config = config or HandDetectorConfig()
        self._landmarker: Optional[vision.HandLandmarker] = None
        self._frame_timestamp = 0

    @property
    def is_started(self) -> bool:
        return self._landmarker is not None

    def start(self) -> bool:
        """Initialize the hand landmarker."""
        if self.is_started:
            return True

        model_path = self.config.model_path or str(DEFAULT_MODEL_PATH)
        if not Path(model_path).exists():
            if not self.config.download_model:
                logger.error("Hand landmarker model not found at %s", model_path)
                return False
            if not download_model(HAND_LANDMARKER_MODEL_URL, Path(model_path)):
                logger.error("Could not download hand landmarker model")
                return False

        if self.config.running_mode == "VIDEO":
            running_mode = vision.RunningMode.VIDEO
        else:
            running_mode = vision.RunningMode.IMAGE

        options = vision.HandLandmarkerOptions(
            base_options=python.BaseOptions(model_asset_path=model_path),
            running_mode=running_mode,
            num_hands=self.config.max_num_hands,
            min_hand_detection_confidence=self.config.min_detection_confidence,
            min_hand_presence_confidence=self.config.min_presence_confidence,
            min_tracking_confidence=self.config.min_tracking_confidence,
        )

        try:
            self._landmarker = vision.HandLandmarker.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            logger.error("Failed to initialize HandLandmarker: %s", e)
            return False

        logger.info("HandLandmarker initialized with model: %s", model_path)
        logger.info("Running mode: %s, Max hands: %d", self.config.running_mode, self.config.max_num_hands)
        return True

    def stop(self) -> None:
        """Release resources."""
        if self._landmarker:
            self._landmarker.close()
            self._landmarker = None
            logger.info("HandLandmarker stopped")

    def detect(self, image: np.ndarray, timestamp_ms: Optional[int] = None) -> List[HandLandmarks]:
        """
        Detect hands in the given image.

        Args:
            image: RGB image as numpy array (H, W, 3)
            timestamp_ms: Timestamp in milliseconds (VIDEO mode only)

        Returns:
            List of HandLandmarks, one per detected hand

        Raises:
            RuntimeError: if start() has not succeeded
        """
        if not self.is_started:
            raise RuntimeError("HandLandmarker not initialized. Call start() first.")

        # Cropped views are not contiguous; MediaPipe needs a packed buffer
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=np.ascontiguousarray(image))

        if self.config.running_mode == "VIDEO":
            if timestamp_ms is None or timestamp_ms <= self._frame_timestamp:
                timestamp_ms = self._frame_timestamp + 33  # ~30 FPS
            self._frame_timestamp = timestamp_ms
            result = self._landmarker.detect_for_video(mp_image, timestamp_ms)
        else:
            result = self._landmarker.detect(mp_image)

        hands = []
        for i, hand_landmarks in enumerate(result.hand_landmarks):
            handedness = "Right"
            confidence = 0.0
            if result.handedness and len(result.handedness) > i:
                handedness = result.handedness[i][0].category_name
                confidence = result.handedness[i][0].score

            landmarks = [
                Landmark(x=lm.x, y=1.0 - lm.y, z=lm.z)
                for lm in hand_landmarks
            ]
            hands.append(HandLandmarks(
                landmarks=landmarks,
                handedness=handedness,
                confidence=confidence,
            ))

        return hands

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
