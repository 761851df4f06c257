"""
Hand Pose Camera Demo
======================

Live camera preview with MediaPipe hand keypoints drawn on top.

Modules:
    - capture: Camera discovery, capture session and frame sampling
    - detection: MediaPipe hand landmark detection
    - visualization: Preview geometry and keypoint overlay
    - controller: Glue between capture, detection and the view
    - utils: Logging, frame rate and thread handoff helpers
"""

__version__ = "1.0.0"
