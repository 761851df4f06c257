"""
Application error types and the routine that surfaces them to the view.
"""

import logging

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors shown to the user."""

    title = "Error"

    @property
    def message(self) -> str:
        return str(self)

    def display_in_view(self, view) -> None:
        """Log the error and show it in the view's error banner."""
        AppError.display(self, view)

    @staticmethod
    def display(error: Exception, view) -> None:
        """Show any exception in the view. Non-AppErrors get a generic title."""
        if isinstance(error, AppError):
            title = error.title
            message = error.message
        else:
            title = "Error"
            message = str(error)
        logger.error("%s: %s", title, message)
        if view is not None:
            view.show_error("{}: {}".format(title, message))


class CaptureSessionSetupError(AppError):
    """The capture session could not be configured."""

    title = "AVSession Setup Error"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class VisionError(AppError):
    """The landmark model failed on a frame."""

    title = "Vision Error"

    def __init__(self, error: Exception):
        super().__init__(str(error))
        self.error = error


class CaptureDeviceError(AppError):
    """A camera device could not be opened as a session input."""

    title = "Capture Device Error"
