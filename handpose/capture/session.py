"""
Capture Session
================

Live pipeline from one camera device to delivered frames.

A session has exactly one input (an opened ``cv2.VideoCapture``) and one
video data output. The capture thread reads frames from the input and
hands them to the output, which delivers them to its delegate on a single
dedicated background thread, in arrival order. When late-frame discarding
is on, at most one frame waits for the delegate and a newer frame replaces
it.
"""

import time
import threading
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from handpose.capture.devices import (
    DEFAULT_FRONT_CAMERA_NAMES,
    CaptureDevice,
    DevicePosition,
    default_device,
    find_device_by_name,
    list_video_devices,
)
from handpose.errors import CaptureDeviceError, CaptureSessionSetupError

logger = logging.getLogger(__name__)


class SessionPreset(Enum):
    """Requested capture quality, applied as a frame size at commit."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    HD1920x1080 = "hd1920x1080"

    @property
    def size(self) -> Tuple[int, int]:
        return _PRESET_SIZES[self]

    @classmethod
    def from_string(cls, name: str) -> "SessionPreset":
        try:
            return cls(name.lower())
        except ValueError:
            logger.warning("Unknown session preset %r, using 'high'", name)
            return cls.HIGH


_PRESET_SIZES = {
    SessionPreset.HIGH: (1280, 720),
    SessionPreset.MEDIUM: (640, 480),
    SessionPreset.LOW: (320, 240),
    SessionPreset.HD1920x1080: (1920, 1080),
}


class PixelFormat(Enum):
    """Pixel layout of images delivered by the video data output."""
    BGR = "bgr"
    RGB = "rgb"

    @classmethod
    def from_string(cls, name: str) -> "PixelFormat":
        try:
            return cls(name.lower())
        except ValueError:
            logger.warning("Unknown pixel format %r, using 'rgb'", name)
            return cls.RGB


BACKENDS = {
    "auto": cv2.CAP_ANY,
    "v4l2": cv2.CAP_V4L2,
    "gstreamer": cv2.CAP_GSTREAMER,
    "avfoundation": cv2.CAP_AVFOUNDATION,
    "dshow": cv2.CAP_DSHOW,
    "msmf": cv2.CAP_MSMF,
}


@dataclass
class CaptureConfig:
    """Camera selection and session settings."""
    preferred_device_name: str = "Razer Kiyo Pro"
    front_camera_names: Tuple[str, ...] = DEFAULT_FRONT_CAMERA_NAMES
    max_devices: int = 10
    backend: str = "auto"
    session_preset: str = "high"
    fps: int = 30
    buffer_size: int = 1  # Minimal buffering for low latency
    pixel_format: str = "rgb"
    always_discards_late_frames: bool = True
    queue_label: str = "CameraFeedDataOutput"

    @classmethod
    def from_dict(cls, config: dict) -> "CaptureConfig":
        """Create config from dictionary (YAML parsed)."""
        return cls(
            preferred_device_name=config.get("preferred_device_name", "Razer Kiyo Pro"),
            front_camera_names=tuple(config.get("front_camera_names", DEFAULT_FRONT_CAMERA_NAMES)),
            max_devices=config.get("max_devices", 10),
            backend=config.get("backend", "auto"),
            session_preset=config.get("session_preset", "high"),
            fps=config.get("fps", 30),
            buffer_size=config.get("buffer_size", 1),
            pixel_format=config.get("pixel_format", "rgb"),
            always_discards_late_frames=config.get("always_discards_late_frames", True),
            queue_label=config.get("queue_label", "CameraFeedDataOutput"),
        )


@dataclass
class SampleBuffer:
    """One captured frame as delivered to the output delegate."""
    image: Optional[np.ndarray]
    timestamp: float
    frame_number: int

    @property
    def has_image(self) -> bool:
        return self.image is not None


class CaptureDeviceInput:
    """An opened camera device, ready to be added to a session."""

    def __init__(self, device: CaptureDevice, backend: str = "auto"):
        self.device = device
        self._backend = backend
        self._cap = cv2.VideoCapture(device.device_id, BACKENDS.get(backend, cv2.CAP_ANY))
        if not self._cap.isOpened():
            self._cap.release()
            self._cap = None
            raise CaptureDeviceError("Could not open {} with backend {}".format(device, backend))
        logger.info("Opened %s", device)

    def configure(self, width: int, height: int, fps: int, buffer_size: int) -> None:
        """Request frame size, rate and buffering. Drivers may ignore any of these."""
        if self._cap is None:
            return
        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self._cap.set(cv2.CAP_PROP_FPS, fps)
        self._cap.set(cv2.CAP_PROP_BUFFERSIZE, buffer_size)

        actual_w = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_h = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        actual_fps = self._cap.get(cv2.CAP_PROP_FPS)
        logger.info(
            "Camera configured: %dx%d @ %.0f FPS (requested %dx%d @ %d)",
            actual_w, actual_h, actual_fps, width, height, fps,
        )

    def read(self):
        """Blocking read of the next frame: ``(ok, bgr_frame)``."""
        if self._cap is None:
            return False, None
        return self._cap.read()

    @property
    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("Released %s", self.device)


class VideoDataOutput:
    """
    Delivers sample buffers to a delegate on one background thread.

    The delegate must provide ``capture_output(output, sample_buffer)``.
    """

    def __init__(self, always_discards_late_frames: bool = True,
                 pixel_format: PixelFormat = PixelFormat.RGB):
        self.always_discards_late_frames = always_discards_late_frames
        self.video_settings = {"pixel_format": pixel_format}
        self._delegate = None
        self._label = "VideoDataOutput"

        self._pending: deque = deque()
        self._cond = threading.Condition()
        self._thread: Optional[threading.Thread] = None
        self._running = False

        self._delivered = 0
        self._discarded = 0

    def set_sample_buffer_delegate(self, delegate, label: str = "CameraFeedDataOutput") -> None:
        self._delegate = delegate
        self._label = label

    @property
    def pixel_format(self) -> PixelFormat:
        return self.video_settings["pixel_format"]

    def start(self) -> None:
        with self._cond:
            if self._running:
                return
            self._running = True
        self._thread = threading.Thread(target=self._delivery_loop, name=self._label, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop delivery and drop waiting frames. Safe to call from the delegate."""
        with self._cond:
            self._running = False
            self._pending.clear()
            self._cond.notify_all()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)
        self._thread = None

    def convert(self, frame: Optional[np.ndarray]) -> Optional[np.ndarray]:
        """Convert a BGR capture frame to the configured pixel format.

        Returns None when the frame has no usable 3-channel pixel data.
        """
        if frame is None or frame.size == 0 or frame.ndim != 3 or frame.shape[2] != 3:
            return None
        if self.pixel_format == PixelFormat.RGB:
            return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        return frame

    def enqueue(self, frame: Optional[np.ndarray], timestamp: float, frame_number: int) -> None:
        """Queue a captured frame for delivery (called by the capture thread)."""
        sample = SampleBuffer(self.convert(frame), timestamp, frame_number)
        with self._cond:
            if not self._running:
                return
            if self.always_discards_late_frames and self._pending:
                self._pending.clear()
                self._discarded += 1
            self._pending.append(sample)
            self._cond.notify()

    def _delivery_loop(self) -> None:
        me = threading.current_thread()
        while True:
            with self._cond:
                while self._running and not self._pending:
                    self._cond.wait(timeout=0.1)
                # A stop/start cycle replaces this thread
                if not self._running or self._thread is not me:
                    return
                sample = self._pending.popleft()

            if self._delegate is None:
                continue
            try:
                self._delegate.capture_output(self, sample)
            except Exception:
                logger.exception("Sample buffer delegate failed on frame %d", sample.frame_number)
            self._delivered += 1

    @property
    def delivered_frames(self) -> int:
        return self._delivered

    @property
    def discarded_frames(self) -> int:
        return self._discarded


class CaptureSession:
    """
    One input, one output, and the thread that pumps frames between them.

    Example:
        >>> session = CaptureSession()
        >>> session.begin_configuration()
        >>> session.add_input(device_input)
        >>> session.add_output(output)
        >>> session.commit_configuration()
        >>> session.start_running()
    """

    def __init__(self):
        self.session_preset = SessionPreset.HIGH
        self.fps = 30
        self.buffer_size = 1

        self._input: Optional[CaptureDeviceInput] = None
        self._output: Optional[VideoDataOutput] = None
        self._configuring = False

        self._lock = threading.Lock()
        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._latest_frame: Optional[np.ndarray] = None
        self._frame_number = 0

    # --- configuration -------------------------------------------------

    def begin_configuration(self) -> None:
        self._configuring = True

    def commit_configuration(self) -> None:
        """Apply the preset to the input."""
        self._configuring = False
        if self._input is not None:
            width, height = self.session_preset.size
            self._input.configure(width, height, self.fps, self.buffer_size)

    def can_add_input(self, device_input: CaptureDeviceInput) -> bool:
        return self._input is None and device_input.is_open

    def add_input(self, device_input: CaptureDeviceInput) -> None:
        if not self.can_add_input(device_input):
            raise ValueError("Session already has an input or the input is closed")
        self._input = device_input

    def can_add_output(self, output: VideoDataOutput) -> bool:
        return self._output is None

    def add_output(self, output: VideoDataOutput) -> None:
        if not self.can_add_output(output):
            raise ValueError("Session already has an output")
        self._output = output

    # --- lifecycle -----------------------------------------------------

    def start_running(self) -> None:
        """Start capture. No-op if already running."""
        with self._lock:
            if self._running:
                return
            if self._configuring:
                logger.warning("start_running() called during configuration")
            if self._input is None:
                logger.error("Cannot start a session without an input")
                return
            self._running = True

        if self._output is not None:
            self._output.start()
        self._thread = threading.Thread(target=self._capture_loop, name="CaptureSession", daemon=True)
        self._thread.start()
        logger.info("Capture session started (%s)", self._input.device)

    def stop_running(self) -> None:
        """Stop capture. Idempotent, and safe to call from the delivery thread."""
        with self._lock:
            if not self._running:
                return
            self._running = False

        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)
        self._thread = None

        if self._output is not None:
            self._output.stop()
            logger.info("Capture session stopped (%d frames delivered, %d discarded)",
                        self._output.delivered_frames, self._output.discarded_frames)
        else:
            logger.info("Capture session stopped")

    def teardown(self) -> None:
        """Stop and release the camera."""
        self.stop_running()
        if self._input is not None:
            self._input.release()

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def preview_frame(self) -> Optional[np.ndarray]:
        """Latest captured BGR frame, for the preview layer."""
        with self._lock:
            return self._latest_frame

    def _capture_loop(self) -> None:
        """Background thread: read frames and hand them to the output."""
        while self.is_running:
            ok, frame = self._input.read()
            if not ok or frame is None:
                time.sleep(0.005)
                continue

            with self._lock:
                self._frame_number += 1
                frame_number = self._frame_number
                self._latest_frame = frame

            if self._output is not None:
                self._output.enqueue(frame, time.time(), frame_number)


class CaptureSessionManager:
    """
    Selects a camera and builds a configured, not-yet-started session.

    The preferred external device (exact name match) wins over the default
    front camera.
    """

    def __init__(
        self,
        config: Optional[CaptureConfig] = None,
        device_lister: Optional[Callable[[], Sequence[CaptureDevice]]] = None,
        input_factory: Optional[Callable[[CaptureDevice, str], CaptureDeviceInput]] = None,
    ):
        self.config = config or CaptureConfig()
        self._device_lister = device_lister or self._list_devices
        self._input_factory = input_factory or CaptureDeviceInput

    def _list_devices(self) -> List[CaptureDevice]:
        return list_video_devices(
            max_devices=self.config.max_devices,
            front_names=self.config.front_camera_names,
        )

    def select_device(self) -> CaptureDevice:
        devices = list(self._device_lister())

        webcam = None
        if self.config.preferred_device_name:
            webcam = find_device_by_name(devices, self.config.preferred_device_name)
            if webcam is not None:
                logger.info("Using preferred camera: %s", webcam)

        if webcam is None:
            webcam = default_device(devices, DevicePosition.FRONT)
            if webcam is None:
                raise CaptureSessionSetupError("Could not find a front facing camera.")
            logger.info("Using front camera: %s", webcam)

        return webcam

    def setup(self, delegate) -> CaptureSession:
        """Build the session. Raises CaptureSessionSetupError on any failure."""
        device = self.select_device()

        try:
            device_input = self._input_factory(device, self.config.backend)
        except CaptureDeviceError as e:
            logger.error("Device input failed: %s", e)
            raise CaptureSessionSetupError("Could not create video device input.") from e

        try:
            return self._configure_session(device_input, delegate)
        except Exception:
            device_input.release()
            raise

    def _configure_session(self, device_input: CaptureDeviceInput, delegate) -> CaptureSession:
        session = CaptureSession()
        session.begin_configuration()
        session.session_preset = SessionPreset.from_string(self.config.session_preset)
        session.fps = self.config.fps
        session.buffer_size = self.config.buffer_size

        if not session.can_add_input(device_input):
            raise CaptureSessionSetupError("Could not add video device input to the session")
        session.add_input(device_input)

        output = VideoDataOutput(
            always_discards_late_frames=self.config.always_discards_late_frames,
            pixel_format=PixelFormat.from_string(self.config.pixel_format),
        )
        if session.can_add_output(output):
            session.add_output(output)
            output.set_sample_buffer_delegate(delegate, self.config.queue_label)
        else:
            raise CaptureSessionSetupError("Could not add video data output to the session")

        session.commit_configuration()
        return session
