"""
Hand Pose Controller
=====================

Glue between the capture session, the landmark model and the camera view.

Threading:
    - capture_output() runs on the video data output's background thread.
    - Everything else (lifecycle, update_overlay, process_all_points) runs
      on the UI thread.
    Results cross over through single-slot LatestValue cells, so capture
    never waits for rendering.
"""

import logging
from typing import Callable, List, Optional, Sequence

import numpy as np

from handpose.capture.devices import CaptureDevice
from handpose.capture.frame_sampler import FrameSampler
from handpose.capture.session import (
    CaptureDeviceInput,
    CaptureSession,
    CaptureSessionManager,
    SampleBuffer,
)
from handpose.config import AppConfig
from handpose.detection.hand_detector import HandDetector
from handpose.detection.pose_adapter import PoseInferenceAdapter
from handpose.errors import AppError, VisionError
from handpose.types import Point, Size
from handpose.utils.latest import LatestValue
from handpose.utils.performance import FPSCounter
from handpose.visualization.camera_view import CameraView

logger = logging.getLogger(__name__)

MAX_HAND_COUNT = 2


class HandPoseController:
    """
    Drives one capture session and keeps the overlay in sync with it.

    Lifecycle mirrors the preview window: view_did_load() once,
    view_did_appear() each time it is shown, view_will_disappear() when
    it goes away.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        view: Optional[CameraView] = None,
        detector=None,
        device_lister: Optional[Callable[[], Sequence[CaptureDevice]]] = None,
        input_factory: Optional[Callable[[CaptureDevice, str], CaptureDeviceInput]] = None,
    ):
        self.config = config or AppConfig()
        self.view = view or CameraView(self.config.overlay)
        self.detector = detector or HandDetector(self.config.mediapipe)

        self._session_manager = CaptureSessionManager(self.config.camera, device_lister, input_factory)
        self._sampler = FrameSampler(self.config.analysis)
        self._adapter = PoseInferenceAdapter(self.detector, MAX_HAND_COUNT)
        self._session: Optional[CaptureSession] = None

        self._latest_points: LatestValue = LatestValue()
        self._pending_error: LatestValue = LatestValue()
        self.fps_counter = FPSCounter()

    @property
    def session(self) -> Optional[CaptureSession]:
        return self._session

    # --- view lifecycle (UI thread) -------------------------------------

    def view_did_load(self) -> None:
        self.view.add_overlay()
        self.detector.config.max_num_hands = MAX_HAND_COUNT
        if not self.detector.start():
            AppError.display(VisionError(RuntimeError("Hand landmarker model could not be loaded")), self.view)

    def view_did_appear(self) -> None:
        """Build the session on first appearance, then start it."""
        try:
            if self._session is None:
                self._session = self._session_manager.setup(delegate=self)
                self.view.preview_layer.frame_size = Size(*self._session.session_preset.size)
            self._session.start_running()
        except AppError as error:
            AppError.display(error, self.view)

    def view_will_disappear(self) -> None:
        if self._session is not None:
            self._session.stop_running()

    def teardown(self) -> None:
        """Release the camera and the model."""
        if self._session is not None:
            self._session.teardown()
            self._session = None
        self.detector.stop()
        self._latest_points.clear()

    # --- capture callback (background thread) ----------------------------

    def capture_output(self, output, sample_buffer: SampleBuffer) -> None:
        """Sample, infer and publish the points of one frame.

        The publish is unconditional, so a dropped frame clears the overlay.
        """
        points: List[Point] = []
        try:
            scaled = self._sampler.sample(sample_buffer)
            if scaled is None:
                return
            points = self._infer(scaled, sample_buffer)
        finally:
            self._latest_points.put(points)
            self.fps_counter.tick()

    def _infer(self, image: np.ndarray, sample_buffer: SampleBuffer) -> List[Point]:
        try:
            return self._adapter.infer(image, int(sample_buffer.timestamp * 1000))
        except VisionError as error:
            logger.error("Inference failed on frame %d: %s", sample_buffer.frame_number, error)
            if self._session is not None:
                self._session.stop_running()
            self._pending_error.put(error)
            return []

    # --- rendering (UI thread) --------------------------------------------

    def wait_for_results(self, timeout: Optional[float] = None) -> bool:
        """Block until the capture thread publishes new points."""
        return self._latest_points.wait(timeout)

    def update_overlay(self) -> bool:
        """Apply the latest published points and errors. Returns True if redrawn."""
        has_error, error = self._pending_error.take()
        if has_error:
            error.display_in_view(self.view)

        has_points, points = self._latest_points.take()
        if has_points:
            self.process_all_points(points)
        return has_points

    def process_all_points(self, points: Sequence[Point]) -> None:
        """Convert device points to view space and replace the markers."""
        preview_layer = self.view.preview_layer
        converted = [preview_layer.layer_point_converted(point) for point in points]
        self.view.show_points(converted, self.view.style.marker_color)

    def preview_frame(self) -> Optional[np.ndarray]:
        if self._session is None:
            return None
        return self._session.preview_frame()
