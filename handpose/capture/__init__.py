"""Camera discovery, capture session and frame sampling."""
from .devices import CaptureDevice, DevicePosition, list_video_devices
from .session import (
    CaptureConfig,
    CaptureDeviceInput,
    CaptureSession,
    CaptureSessionManager,
    PixelFormat,
    SampleBuffer,
    SessionPreset,
    VideoDataOutput,
)
from .frame_sampler import FrameSampler, SamplerConfig

__all__ = [
    "CaptureDevice",
    "DevicePosition",
    "list_video_devices",
    "CaptureConfig",
    "CaptureDeviceInput",
    "CaptureSession",
    "CaptureSessionManager",
    "PixelFormat",
    "SampleBuffer",
    "SessionPreset",
    "VideoDataOutput",
    "FrameSampler",
    "SamplerConfig",
]
