"""
Frame sampling for analysis.

Scales each delivered frame by a fixed factor and crops a fixed-size
analysis window. The window is anchored at the lower-left corner of the
scaled image, the origin of the landmark coordinate system.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from handpose.capture.session import SampleBuffer

logger = logging.getLogger(__name__)


@dataclass
class SamplerConfig:
    """Analysis window settings."""
    scale: float = 0.5
    crop_width: int = 640
    crop_height: int = 480

    @classmethod
    def from_dict(cls, config: dict) -> "SamplerConfig":
        return cls(
            scale=config.get("scale", 0.5),
            crop_width=config.get("crop_width", 640),
            crop_height=config.get("crop_height", 480),
        )


class FrameSampler:
    """Turns a sample buffer into the image handed to the landmark model."""

    def __init__(self, config: Optional[SamplerConfig] = None):
        self.config = config or SamplerConfig()

    def sample(self, sample_buffer: SampleBuffer) -> Optional[np.ndarray]:
        """
        Scale and crop the frame.

        Args:
            sample_buffer: Frame from the video data output

        Returns:
            The analysis image, or None if the buffer has no image
        """
        image = sample_buffer.image
        if image is None:
            return None
        return self.scale_and_crop(image)

    def scale_and_crop(self, image: np.ndarray) -> np.ndarray:
        height, width = image.shape[:2]
        scale = self.config.scale

        if scale != 1.0:
            new_size = (max(1, int(width * scale)), max(1, int(height * scale)))
            image = cv2.resize(image, new_size, interpolation=cv2.INTER_AREA)

        scaled_h, scaled_w = image.shape[:2]
        crop_w = min(self.config.crop_width, scaled_w)
        crop_h = min(self.config.crop_height, scaled_h)

        # Rows count down from the top, so the lower-left window is the last crop_h rows
        return image[scaled_h - crop_h:scaled_h, 0:crop_w]
