import argparse
import asyncio
import sys
import logging

from pydantic import ValidationError

from gaze_calib.app.bridge import AsyncioTkinterBridge
from gaze_calib.configs.app import AppSettings
from gaze_calib.factories import create_runner
from gaze_calib.ui import ConsoleView

SHUTDOWN_TIMEOUT_S = 3.0


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Webcam gaze calibration")
    parser.add_argument(
        "--dummy",
        action="store_true",
        help="Use a simulated gaze sampler instead of the vision pipeline."
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Log frames instead of opening the fullscreen window."
    )
    return parser.parse_args(argv)


def run_headless(settings: AppSettings) -> None:
    runner = create_runner(settings, ConsoleView())
    try:
        asyncio.run(runner.run())
    except KeyboardInterrupt:
        pass


def run_window(settings: AppSettings) -> None:
    # Imported lazily so headless runs don't need a display
    from gaze_calib.ui.window import GazeWindow

    logger = logging.getLogger("main")

    bridge = AsyncioTkinterBridge()
    bridge.start()
    runner = None
    session_future = None

    try:
        window = GazeWindow(settings.display.width_px, settings.display.height_px)
        runner = create_runner(settings, window)
        window.set_close_handler(lambda: bridge.loop.call_soon_threadsafe(runner.stop))
        session_future = bridge.submit(runner.run())
        window.mainloop()
    except Exception:
        logger.exception("Fatal Application Error")
    finally:
        logger.info("Shutdown sequence initiated.")
        if session_future is not None:
            # Let the runner close its sampler and view before the loop halts
            bridge.loop.call_soon_threadsafe(runner.stop)
            try:
                session_future.result(timeout=SHUTDOWN_TIMEOUT_S)
            except Exception:
                logger.warning("Session did not stop cleanly; cancelling remaining tasks.")
        bridge.stop()


def main(argv=None) -> None:
    args = parse_args(argv)

    # 1. Load Configuration
    try:
        settings = AppSettings()
    except ValidationError as e:
        print(f"Configuration Error: {e}")
        sys.exit(1)

    if args.dummy:
        settings.sampler.kind = "dummy"
    if args.headless:
        settings.display.headless = True

    # 2. Setup Logging
    logging.basicConfig(
        level=settings.logging.level.upper(),
        format=settings.logging.format,
        stream=sys.stdout
    )
    logger = logging.getLogger("main")
    logger.info(f"Starting Gaze Calibration v{settings.__version__}")
    if settings.sampler.kind == "dummy":
        logger.warning("Using DUMMY sampler (Simulation Mode)")

    # 3. Run
    if settings.display.headless:
        run_headless(settings)
    else:
        run_window(settings)


if __name__ == "__main__":
    main()
