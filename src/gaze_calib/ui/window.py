import logging
import asyncio
import tkinter as tk
from tkinter import Canvas
from typing import Optional, Callable
from functools import wraps

from screeninfo import get_monitors

from ..models import CalibrationFrame, Frame, RunFrame

logger = logging.getLogger(__name__)


def require_canvas(func):
    """Decorator: Ensures the canvas exists before drawing."""
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        if not self._canvas:
            return
        return func(self, *args, **kwargs)
    return wrapper


def detect_screen_size() -> tuple[int, int]:
    monitor = get_monitors()[0]
    return monitor.width, monitor.height


class GazeWindow(tk.Tk):
    """
    Fullscreen black window that renders session frames.

    The session runs on the asyncio thread; every draw is marshalled to the
    Tk main thread with root.after() and awaited from the asyncio side.
    """

    def __init__(self, width: Optional[int] = None, height: Optional[int] = None, fullscreen: bool = True):
        super().__init__()
        if width is None or height is None:
            width, height = detect_screen_size()

        self._width: int = width
        self._height: int = height
        self._canvas: Optional[Canvas] = None
        self._on_close: Optional[Callable[[], None]] = None

        self.title("Gaze Calibration")
        self.configure(bg="black", cursor="none")
        if fullscreen:
            self.attributes("-fullscreen", True)
        else:
            self.geometry(f"{width}x{height}")
        self.protocol("WM_DELETE_WINDOW", self._handle_close)
        self.bind("<Escape>", lambda _: self._handle_close())

    def set_close_handler(self, handler: Callable[[], None]) -> None:
        self._on_close = handler

    def _handle_close(self) -> None:
        if self._on_close:
            self._on_close()
        self.destroy()

    # --- Async Public Interface (Called by SessionRunner) ---

    async def open(self) -> None:
        await self._run_on_ui(self._create_canvas)

    async def render(self, frame: Frame) -> None:
        if isinstance(frame, CalibrationFrame):
            await self._run_on_ui(self._draw_target, frame)
        else:
            await self._run_on_ui(self._draw_gaze, frame)

    async def close(self) -> None:
        await self._run_on_ui(self._destroy_canvas)

    # --- Thread Bridge Helper ---

    def _run_on_ui(self, func: Callable, *args) -> asyncio.Future:
        """
        Schedules a sync UI function on the Main Thread and awaits completion.
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def _ui_task():
            try:
                func(*args)
                loop.call_soon_threadsafe(future.set_result, None)
            except Exception as e:
                loop.call_soon_threadsafe(future.set_exception, e)

        try:
            self.after(0, _ui_task)
        except (RuntimeError, tk.TclError):
            # Window already destroyed; nothing left to draw on
            future.set_result(None)
        return future

    # --- Private Sync Methods (Main Thread) ---

    def _create_canvas(self) -> None:
        if self._canvas: return

        self._canvas = Canvas(
            self,
            width=self._width,
            height=self._height,
            bg="black",
            highlightthickness=0
        )
        self._canvas.pack(fill="both", expand=True)
        self.update_idletasks()

    @require_canvas
    def _destroy_canvas(self) -> None:
        self._canvas.destroy()
        self._canvas = None

    def _to_px(self, nx: float, ny: float) -> tuple[int, int]:
        return int(nx * self._width), int(ny * self._height)

    @require_canvas
    def _draw_status(self, text: str, size: int) -> None:
        self._canvas.create_text(
            self._width / 2, self._height - 40,
            text=text, font=("Helvetica", size), fill="white"
        )

    @require_canvas
    def _draw_target(self, frame: CalibrationFrame) -> None:
        self._canvas.delete("all")

        cx, cy = self._to_px(*frame.target)
        r = 10
        self._canvas.create_oval(cx-r, cy-r, cx+r, cy+r, fill="orange", outline="")
        self._draw_status(frame.status_text, 16)

    @require_canvas
    def _draw_gaze(self, frame: RunFrame) -> None:
        self._canvas.delete("all")

        px, py = self._to_px(frame.position.x, frame.position.y)
        r = 6
        self._canvas.create_oval(px-r, py-r, px+r, py+r, fill="red", outline="")
        self._draw_status(f"({px}, {py})", 18)
