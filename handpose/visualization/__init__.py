"""Preview geometry and keypoint overlay."""
from .preview_layer import PreviewLayer, VideoGravity
from .camera_view import CameraView, OverlayStyle, ViewConfig

__all__ = ["PreviewLayer", "VideoGravity", "CameraView", "OverlayStyle", "ViewConfig"]
