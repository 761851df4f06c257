#!/usr/bin/env python3
"""
Hand Pose Camera Demo
Captures live camera frames, runs MediaPipe hand landmark detection on each
frame and draws the keypoints over the preview.

Usage:
    python main.py                             # Preferred webcam, else front camera
    python main.py --device-name "Logitech BRIO"
    python main.py --list-devices              # Show cameras and exit
    python main.py --debug                     # Verbose logging
"""

import os
import sys

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from handpose.main import main


if __name__ == "__main__":
    sys.exit(main())
