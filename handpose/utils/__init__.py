"""Logging, frame rate and thread handoff helpers."""
from .latest import LatestValue
from .logger import setup_logging, log_timing
from .performance import FPSCounter

__all__ = ["LatestValue", "setup_logging", "log_timing", "FPSCounter"]
