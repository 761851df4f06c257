"""
Tests for Preview Layer and Camera View
========================================
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from handpose.types import Color, ORANGE, Point, Size
from handpose.visualization.camera_view import CameraView, OverlayStyle, ViewConfig
from handpose.visualization.preview_layer import PreviewLayer, VideoGravity

FRAME_4_3 = Size(640, 480)


class TestPreviewLayerConversion:
    """Test suite for device point -> view point conversion."""

    def test_resize_stretches(self):
        layer = PreviewLayer(1280, 720, VideoGravity.RESIZE)

        assert layer.layer_point_converted(Point(0.5, 0.5), FRAME_4_3) == Point(640, 360)
        assert layer.layer_point_converted(Point(1.0, 1.0), FRAME_4_3) == Point(1280, 720)

    def test_aspect_fill_crops_vertically(self):
        """4:3 frame in a 16:9 view scales by 2, overflowing 120px top and bottom."""
        layer = PreviewLayer(1280, 720, VideoGravity.RESIZE_ASPECT_FILL)

        assert layer.layer_point_converted(Point(0.5, 0.5), FRAME_4_3) == Point(640, 360)
        assert layer.layer_point_converted(Point(0.0, 0.0), FRAME_4_3) == Point(0, -120)
        assert layer.layer_point_converted(Point(1.0, 1.0), FRAME_4_3) == Point(1280, 840)

    def test_aspect_fit_letterboxes(self):
        """4:3 frame in a 16:9 view scales by 1.5 with 160px side bars."""
        layer = PreviewLayer(1280, 720, VideoGravity.RESIZE_ASPECT)

        assert layer.layer_point_converted(Point(0.0, 0.0), FRAME_4_3) == Point(160, 0)
        assert layer.layer_point_converted(Point(1.0, 1.0), FRAME_4_3) == Point(1120, 720)

    def test_mirrored_flips_x(self):
        layer = PreviewLayer(1000, 500, VideoGravity.RESIZE, mirrored=True)

        assert layer.layer_point_converted(Point(0.25, 0.5), FRAME_4_3) == Point(750, 250)

    def test_uses_last_frame_size(self):
        layer = PreviewLayer(1280, 720, VideoGravity.RESIZE_ASPECT)
        layer.compose(np.zeros((480, 640, 3), dtype=np.uint8))

        assert layer.frame_size == FRAME_4_3
        assert layer.layer_point_converted(Point(0.0, 0.0)) == Point(160, 0)

    def test_gravity_from_string(self):
        assert VideoGravity.from_string("resize_aspect") == VideoGravity.RESIZE_ASPECT
        assert VideoGravity.from_string("bogus") == VideoGravity.RESIZE_ASPECT_FILL


class TestPreviewLayerCompose:
    """Test suite for rendering frames into the view."""

    def test_aspect_fit_has_black_bars(self):
        layer = PreviewLayer(1280, 720, VideoGravity.RESIZE_ASPECT)
        frame = np.full((480, 640, 3), 200, dtype=np.uint8)

        canvas = layer.compose(frame)

        assert canvas.shape == (720, 1280, 3)
        assert (canvas[:, :160] == 0).all()
        assert (canvas[:, 1120:] == 0).all()
        assert (canvas[:, 160:1120] == 200).all()

    def test_aspect_fill_covers_view(self):
        layer = PreviewLayer(1280, 720, VideoGravity.RESIZE_ASPECT_FILL)
        frame = np.full((480, 640, 3), 90, dtype=np.uint8)

        canvas = layer.compose(frame)

        assert canvas.shape == (720, 1280, 3)
        assert (canvas == 90).all()

    def test_mirrored_compose(self):
        layer = PreviewLayer(2, 1, VideoGravity.RESIZE, mirrored=True)
        frame = np.zeros((1, 2, 3), dtype=np.uint8)
        frame[0, 0] = 255

        canvas = layer.compose(frame)

        assert (canvas[0, 1] == 255).all()
        assert (canvas[0, 0] == 0).all()


class TestCameraView:
    """Test suite for the overlay view."""

    @pytest.fixture
    def view(self):
        config = ViewConfig(width=200, height=100, video_gravity="resize")
        return CameraView(config)

    def test_show_points_replaces_markers(self, view):
        view.show_points([Point(1, 1), Point(2, 2)], ORANGE)
        view.show_points([Point(5, 5)], ORANGE)

        assert view.points == [Point(5, 5)]

    def test_empty_points_clear_overlay(self, view):
        view.show_points([Point(1, 1)], ORANGE)
        view.show_points([], ORANGE)

        assert view.points == []

    def test_render_without_frame(self, view):
        canvas = view.render(None)

        assert canvas.shape == (100, 200, 3)
        assert (canvas == 0).all()

    def test_overlay_tints_and_draws_markers(self, view):
        view.add_overlay(OverlayStyle(
            background_color=Color(1.0, 1.0, 1.0, 0.5),
            marker_color=ORANGE,
            marker_radius=3,
        ))
        view.show_points([Point(100, 50)], Color(0.0, 0.0, 1.0))

        canvas = view.render(np.zeros((100, 200, 3), dtype=np.uint8))

        # Half-transparent white over black
        assert 120 <= canvas[5, 5, 0] <= 135
        # Marker in pure blue (BGR)
        assert tuple(canvas[50, 100]) == (255, 0, 0)

    def test_markers_hidden_until_overlay_added(self, view):
        view.show_points([Point(100, 50)], Color(0.0, 0.0, 1.0))

        canvas = view.render(np.zeros((100, 200, 3), dtype=np.uint8))

        assert (canvas == 0).all()

    def test_error_banner(self, view):
        view.show_error("Vision Error: boom")
        canvas = view.render(None)

        assert view.error_message == "Vision Error: boom"
        assert canvas[2, 150].any()

        view.clear_error()
        assert view.error_message is None

    def test_config_from_dict(self):
        config = ViewConfig.from_dict({
            "width": 640,
            "mirrored": True,
            "colors": {"markers": [0.0, 1.0, 0.0]},
        })

        assert config.width == 640
        assert config.height == 720
        assert config.mirrored
        assert config.style.marker_color == Color(0.0, 1.0, 0.0, 1.0)
        assert config.style.background_color.alpha == 0.5


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
