"""
Preview layer geometry.

Maps the camera frame into the view rectangle according to a video
gravity, and converts normalized capture-device points (origin top-left)
into view pixel coordinates with the same mapping.
"""

from enum import Enum
from typing import Optional, Tuple

import cv2
import numpy as np

from handpose.types import Point, Size


class VideoGravity(Enum):
    """How the frame is fitted into the view bounds."""
    RESIZE_ASPECT_FILL = "resize_aspect_fill"  # cover the view, crop overflow
    RESIZE_ASPECT = "resize_aspect"            # fit inside, letterbox
    RESIZE = "resize"                          # stretch

    @classmethod
    def from_string(cls, name: str) -> "VideoGravity":
        try:
            return cls(name.lower())
        except ValueError:
            return cls.RESIZE_ASPECT_FILL


class PreviewLayer:
    """
    Displays camera frames inside fixed view bounds.

    Example:
        >>> layer = PreviewLayer(1280, 720, VideoGravity.RESIZE_ASPECT_FILL)
        >>> layer.layer_point_converted(Point(0.5, 0.5), Size(640, 480))
        Point(x=640.0, y=360.0)
    """

    def __init__(
        self,
        width: int,
        height: int,
        video_gravity: VideoGravity = VideoGravity.RESIZE_ASPECT_FILL,
        mirrored: bool = False,
    ):
        self.bounds = Size(width, height)
        self.video_gravity = video_gravity
        self.mirrored = mirrored
        # Size of the frames being shown; updated on every compose()
        self.frame_size: Optional[Size] = None

    def video_rect(self, frame_size: Size) -> Tuple[float, float, float, float]:
        """Where the full frame lands in the view: (x, y, width, height)."""
        view_w, view_h = self.bounds
        frame_w, frame_h = frame_size

        if self.video_gravity == VideoGravity.RESIZE or frame_w <= 0 or frame_h <= 0:
            return 0.0, 0.0, float(view_w), float(view_h)

        if self.video_gravity == VideoGravity.RESIZE_ASPECT_FILL:
            scale = max(view_w / frame_w, view_h / frame_h)
        else:
            scale = min(view_w / frame_w, view_h / frame_h)

        rect_w = frame_w * scale
        rect_h = frame_h * scale
        return (view_w - rect_w) / 2.0, (view_h - rect_h) / 2.0, rect_w, rect_h

    def layer_point_converted(self, device_point: Point, frame_size: Optional[Size] = None) -> Point:
        """Convert a normalized capture-device point to view pixels."""
        frame_size = frame_size or self.frame_size or self.bounds
        x = 1.0 - device_point.x if self.mirrored else device_point.x
        rect_x, rect_y, rect_w, rect_h = self.video_rect(frame_size)
        return Point(rect_x + x * rect_w, rect_y + device_point.y * rect_h)

    def compose(self, frame: np.ndarray) -> np.ndarray:
        """Render a BGR frame into a view-sized BGR canvas."""
        view_w, view_h = self.bounds
        canvas = np.zeros((view_h, view_w, 3), dtype=np.uint8)

        frame_h, frame_w = frame.shape[:2]
        self.frame_size = Size(frame_w, frame_h)
        if self.mirrored:
            frame = cv2.flip(frame, 1)

        rect_x, rect_y, rect_w, rect_h = self.video_rect(self.frame_size)
        target_w = max(1, int(round(rect_w)))
        target_h = max(1, int(round(rect_h)))
        resized = cv2.resize(frame, (target_w, target_h))

        x0 = int(round(rect_x))
        y0 = int(round(rect_y))
        src_x, src_y = max(0, -x0), max(0, -y0)
        dst_x, dst_y = max(0, x0), max(0, y0)
        w = min(target_w - src_x, view_w - dst_x)
        h = min(target_h - src_y, view_h - dst_y)
        if w > 0 and h > 0:
            canvas[dst_y:dst_y + h, dst_x:dst_x + w] = resized[src_y:src_y + h, src_x:src_x + w]
        return canvas
