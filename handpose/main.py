"""
Hand Pose Demo - Main Application
==================================

Opens the preview window and runs the UI loop. The window's lifetime
drives the controller: opening it loads and shows the view, quitting hides
it.
"""

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

import cv2

from handpose.capture.devices import list_video_devices
from handpose.config import AppConfig, DEFAULT_CONFIG_PATH, create_app_config, load_config
from handpose.controller import HandPoseController
from handpose.utils.logger import setup_logging
from handpose.visualization.camera_view import CameraView

logger = logging.getLogger(__name__)


class HandPoseApp:
    """
    Preview window plus the controller behind it.

    Keyboard Controls:
        q/ESC - Quit
        r     - Restart the capture session after an error
    """

    def __init__(self, config: AppConfig, controller: Optional[HandPoseController] = None):
        self.config = config
        self.controller = controller or HandPoseController(config, CameraView(config.overlay))
        self.view = self.controller.view
        self._window = config.overlay.window_name
        self._running = False

    def run(self) -> None:
        """Show the window and block until the user quits."""
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        cv2.namedWindow(self._window, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(self._window, self.config.overlay.width, self.config.overlay.height)

        self.controller.view_did_load()
        self.controller.view_did_appear()
        self._running = True
        try:
            self._main_loop()
        finally:
            self.controller.view_will_disappear()
            self.controller.teardown()
            cv2.destroyAllWindows()
            logger.info("Processed %d frame(s)", self.controller.fps_counter.total_frames)

    def stop(self) -> None:
        self._running = False

    def _main_loop(self) -> None:
        frame_interval = 1.0 / max(1, self.config.camera.fps)
        while self._running:
            # Redraw as soon as new points land, or at the frame rate for the preview
            self.controller.wait_for_results(timeout=frame_interval)
            self.controller.update_overlay()

            canvas = self.view.render(self.controller.preview_frame(), fps=self.controller.fps_counter.fps)
            cv2.imshow(self._window, canvas)

            key = cv2.waitKey(1) & 0xFF
            if key == ord('q') or key == 27:
                self._running = False
            elif key == ord('r'):
                self._restart()
            elif cv2.getWindowProperty(self._window, cv2.WND_PROP_VISIBLE) < 1:
                logger.info("Window closed")
                self._running = False

    def _restart(self) -> None:
        logger.info("Restarting capture session")
        self.controller.view_will_disappear()
        self.view.clear_error()
        self.controller.view_did_appear()

    def _signal_handler(self, signum, frame) -> None:
        logger.info("Received signal %d, shutting down...", signum)
        self._running = False


def print_devices(config: AppConfig) -> None:
    devices = list_video_devices(
        max_devices=config.camera.max_devices,
        front_names=config.camera.front_camera_names,
    )
    if not devices:
        print("No video devices found")
        return
    print("Video devices:")
    for device in devices:
        print("  {}".format(device))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Live hand pose keypoints over a camera preview",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Keyboard Controls:
  q/ESC     - Quit
  r         - Restart the capture session

Examples:
  python main.py
  python main.py --device-name "Logitech BRIO"
  python main.py --list-devices
        """,
    )
    parser.add_argument(
        "--config", "-c",
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to configuration file",
    )
    parser.add_argument(
        "--device-name",
        help="Preferred external camera name (exact match)",
    )
    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="List video devices and exit",
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file",
    )
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    config = create_app_config(load_config(Path(args.config)))
    if args.device_name:
        config.camera.preferred_device_name = args.device_name
    if args.debug:
        config.logging.level = "DEBUG"
    if args.log_file:
        config.logging.file = args.log_file

    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        max_size_mb=config.logging.max_size_mb,
        backup_count=config.logging.backup_count,
    )

    if args.list_devices:
        print_devices(config)
        return 0

    HandPoseApp(config).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
