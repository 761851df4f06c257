"""
Camera View
============

The preview surface: camera frame, a translucent overlay layer, the
keypoint markers drawn on it, and an error banner.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import cv2
import numpy as np

from handpose.types import Color, ERROR_RED, ORANGE, Point, WHITE_HALF
from handpose.visualization.preview_layer import PreviewLayer, VideoGravity

logger = logging.getLogger(__name__)


@dataclass
class OverlayStyle:
    """Look of the overlay layer and its markers."""
    background_color: Color = WHITE_HALF
    marker_color: Color = ORANGE
    marker_radius: int = 5
    text_color: Color = Color(0.0, 1.0, 1.0)
    error_color: Color = ERROR_RED
    font_scale: float = 0.6
    font_thickness: int = 1


@dataclass
class ViewConfig:
    """Preview window settings."""
    window_name: str = "Hand Pose"
    width: int = 1280
    height: int = 720
    video_gravity: str = "resize_aspect_fill"
    mirrored: bool = False
    show_fps: bool = True
    style: OverlayStyle = field(default_factory=OverlayStyle)

    @classmethod
    def from_dict(cls, config: dict) -> "ViewConfig":
        """Create config from dictionary."""
        colors = config.get("colors", {})
        style = OverlayStyle(
            background_color=Color.from_list(colors.get("background", WHITE_HALF)),
            marker_color=Color.from_list(colors.get("markers", ORANGE)),
            marker_radius=config.get("marker_radius", 5),
            text_color=Color.from_list(colors.get("text", [0.0, 1.0, 1.0])),
            error_color=Color.from_list(colors.get("error", ERROR_RED)),
            font_scale=config.get("font_scale", 0.6),
            font_thickness=config.get("font_thickness", 1),
        )
        return cls(
            window_name=config.get("window_name", "Hand Pose"),
            width=config.get("width", 1280),
            height=config.get("height", 720),
            video_gravity=config.get("video_gravity", "resize_aspect_fill"),
            mirrored=config.get("mirrored", False),
            show_fps=config.get("show_fps", True),
            style=style,
        )


class CameraView:
    """
    Preview layer plus overlay. Mutated only from the UI thread.

    Example:
        >>> view = CameraView(ViewConfig())
        >>> view.show_points([Point(100, 120)], ORANGE)
        >>> canvas = view.render(frame)
        >>> cv2.imshow(view.config.window_name, canvas)
    """

    def __init__(self, config: Optional[ViewConfig] = None):
        self.config = config or ViewConfig()
        self.style = self.config.style
        self.preview_layer = PreviewLayer(
            self.config.width,
            self.config.height,
            VideoGravity.from_string(self.config.video_gravity),
            mirrored=self.config.mirrored,
        )
        self.overlay_visible = False
        self._points: List[Point] = []
        self._point_color: Color = self.style.marker_color
        self._error_message: Optional[str] = None
        self._font = cv2.FONT_HERSHEY_SIMPLEX

    def add_overlay(self, style: Optional[OverlayStyle] = None) -> None:
        """Attach the overlay layer above the preview."""
        if style is not None:
            self.style = style
        self.overlay_visible = True

    def show_points(self, points: Sequence[Point], color: Color) -> None:
        """Replace all markers with the given view-space points."""
        self._points = list(points)
        self._point_color = color

    @property
    def points(self) -> List[Point]:
        return list(self._points)

    def show_error(self, message: str) -> None:
        self._error_message = message

    def clear_error(self) -> None:
        self._error_message = None

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    def render(self, frame: Optional[np.ndarray], fps: Optional[float] = None) -> np.ndarray:
        """Composite preview, overlay, markers and text into one BGR image."""
        if frame is not None:
            canvas = self.preview_layer.compose(frame)
        else:
            canvas = np.zeros((self.config.height, self.config.width, 3), dtype=np.uint8)

        if self.overlay_visible:
            self._draw_overlay(canvas)

        if fps is not None and self.config.show_fps:
            cv2.putText(canvas, "FPS: {:.1f}".format(fps), (20, 30), self._font,
                        self.style.font_scale, self.style.text_color.to_bgr(),
                        self.style.font_thickness)

        if self._error_message:
            self._draw_error(canvas, self._error_message)
        return canvas

    def _draw_overlay(self, canvas: np.ndarray) -> None:
        background = self.style.background_color
        if background.alpha > 0:
            tint = np.empty_like(canvas)
            tint[:] = background.to_bgr()
            cv2.addWeighted(tint, background.alpha, canvas, 1.0 - background.alpha, 0, dst=canvas)

        color = self._point_color.to_bgr()
        for point in self._points:
            cv2.circle(canvas, point.to_pixel(), self.style.marker_radius, color, -1, cv2.LINE_AA)

    def _draw_error(self, canvas: np.ndarray, message: str) -> None:
        width = canvas.shape[1]
        cv2.rectangle(canvas, (0, 0), (width, 40), self.style.error_color.to_bgr(), -1)
        cv2.putText(canvas, message, (12, 27), self._font, self.style.font_scale,
                    (255, 255, 255), self.style.font_thickness + 1)
