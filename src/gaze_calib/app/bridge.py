import asyncio
import concurrent.futures
import logging
import threading
from typing import Coroutine

logger = logging.getLogger(__name__)


class AsyncioTkinterBridge:
    """
    Runs the asyncio event loop that owns the gaze session in a background
    thread, so the Tkinter main loop can keep the window responsive.
    """

    def __init__(self):
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="GazeSessionLoop",
            daemon=True
        )
        self._is_running = False

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            self._loop.close()
            logger.info("Asyncio event loop closed.")

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def start(self) -> None:
        if self._is_running:
            logger.warning("Bridge is already running.")
            return

        logger.info("Starting asyncio event loop thread.")
        self._is_running = True
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """
        Cancels and drains the tasks still on the loop, so their cleanup code
        runs, then stops the loop and waits for its thread to finish.
        """
        if not self._is_running:
            return

        logger.info("Stopping asyncio event loop...")
        drain = asyncio.run_coroutine_threadsafe(self._cancel_pending(), self._loop)
        try:
            drain.result(timeout)
        except concurrent.futures.TimeoutError:
            logger.warning("Pending tasks did not finish within %.1fs.", timeout)

        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout)
        self._is_running = False
        logger.info("Asyncio bridge stopped.")

    async def _cancel_pending(self) -> None:
        current = asyncio.current_task()
        tasks = [t for t in asyncio.all_tasks() if t is not current]
        if not tasks:
            return
        logger.info("Cancelling %d pending task(s).", len(tasks))
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def submit(self, coro: Coroutine) -> asyncio.Future:
        """
        Schedules a coroutine on the session loop from any thread.

        Failures of the coroutine are logged when it completes, never silent.
        """
        if not self._is_running:
            raise RuntimeError("Cannot schedule coroutine, the bridge is not running.")
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)

        def _on_complete(fut):
            if fut.cancelled():
                return
            exc = fut.exception()
            if exc is not None:
                logger.error("Background task crashed", exc_info=exc)

        future.add_done_callback(_on_complete)
        return future
