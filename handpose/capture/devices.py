"""
Video Device Discovery
=======================

Lists the cameras attached to the machine and picks one by name or
position. On Linux the names come from V4L2 sysfs; elsewhere devices are
probed by index through OpenCV.
"""

import os
import sys
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

import cv2

logger = logging.getLogger(__name__)

DEFAULT_FRONT_CAMERA_NAMES = (
    "integrated",
    "built-in",
    "facetime",
    "front",
)


class DevicePosition(Enum):
    """Physical position of a camera relative to the screen."""
    FRONT = "front"
    BACK = "back"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class CaptureDevice:
    """A video device that can be opened with ``cv2.VideoCapture``."""
    device_id: int
    name: str
    position: DevicePosition = DevicePosition.UNSPECIFIED

    def __str__(self) -> str:
        return "{} (id={}, {})".format(self.name, self.device_id, self.position.value)


def classify_position(name: str, front_names: Iterable[str] = DEFAULT_FRONT_CAMERA_NAMES) -> DevicePosition:
    """Guess the position from the device name (laptop built-in cameras face the user)."""
    lowered = name.lower()
    for marker in front_names:
        if marker.lower() in lowered:
            return DevicePosition.FRONT
    return DevicePosition.UNSPECIFIED


def _read_sysfs(path: str) -> Optional[str]:
    try:
        with open(path, "r") as f:
            return f.read().strip()
    except OSError:
        return None


def _list_v4l2_devices(max_devices, dev_dir, sysfs_dir, front_names) -> List[CaptureDevice]:
    devices = []
    for i in range(max_devices):
        node = os.path.join(dev_dir, "video{}".format(i))
        if not os.path.exists(node):
            continue

        sys_node = os.path.join(sysfs_dir, "video{}".format(i))
        # UVC cameras expose a second metadata node with index 1
        index = _read_sysfs(os.path.join(sys_node, "index"))
        if index is not None and index != "0":
            logger.debug("Skipping %s (metadata node, index=%s)", node, index)
            continue

        name = _read_sysfs(os.path.join(sys_node, "name")) or "Camera {}".format(i)
        devices.append(CaptureDevice(i, name, classify_position(name, front_names)))
    return devices


def _probe_devices(max_devices, front_names) -> List[CaptureDevice]:
    devices = []
    for i in range(max_devices):
        cap = cv2.VideoCapture(i)
        try:
            if not cap.isOpened():
                continue
        finally:
            cap.release()
        name = "Camera {}".format(i)
        # Index 0 is the built-in camera on laptops and Macs
        position = DevicePosition.FRONT if i == 0 else classify_position(name, front_names)
        devices.append(CaptureDevice(i, name, position))
    return devices


def list_video_devices(
    max_devices: int = 10,
    dev_dir: str = "/dev",
    sysfs_dir: str = "/sys/class/video4linux",
    front_names: Iterable[str] = DEFAULT_FRONT_CAMERA_NAMES,
) -> List[CaptureDevice]:
    """
    Enumerate available video devices.

    Args:
        max_devices: Highest device index (exclusive) to look at
        dev_dir: Directory holding ``videoN`` nodes (Linux)
        sysfs_dir: V4L2 sysfs class directory (Linux)
        front_names: Name markers identifying front-facing cameras

    Returns:
        Devices in index order
    """
    front_names = tuple(front_names)
    if sys.platform.startswith("linux") or os.path.isdir(sysfs_dir):
        devices = _list_v4l2_devices(max_devices, dev_dir, sysfs_dir, front_names)
    else:
        devices = _probe_devices(max_devices, front_names)

    logger.info("Found %d video device(s)", len(devices))
    for device in devices:
        logger.debug("  %s", device)
    return devices


def find_device_by_name(devices: Sequence[CaptureDevice], name: str) -> Optional[CaptureDevice]:
    """Exact name match. The last match in enumeration order wins."""
    found = None
    for device in devices:
        if device.name == name:
            found = device
    return found


def default_device(devices: Sequence[CaptureDevice], position: DevicePosition) -> Optional[CaptureDevice]:
    """First device at the given position."""
    for device in devices:
        if device.position == position:
            return device
    return None
