import asyncio
import json
import logging
from typing import Final, Optional

import zmq
import zmq.asyncio

from ..models import GazeSample
from .base import SamplerUnavailable, parse_gaze_payload

logger = logging.getLogger(__name__)


class ZMQSampler:
    """
    Polls an out-of-process vision pipeline over a ZMQ REQ socket.

    Wire Format:
    - Request: the UTF-8 string 'getGaze'
    - Reply: a JSON object {"x": float, "y": float}, normalized, top-left origin

    A REQ socket cannot send again until it has received a reply, so a socket
    whose reply timed out is closed and replaced before the next poll.
    """

    _REQUEST: Final[str] = "getGaze"

    def __init__(
        self,
        endpoint: str = "tcp://localhost:5556",
        timeout_s: float = 0.2,
        context: Optional[zmq.asyncio.Context] = None,
    ):
        """
        Args:
            endpoint: The address the vision pipeline's REP socket is bound to.
            timeout_s: How long to wait for a reply before giving up on this poll.
            context: Shared ZMQ context. A private one is created if omitted.
        """
        self.endpoint = endpoint
        self._timeout_s = timeout_s
        self._owns_ctx = context is None
        self._ctx = context or zmq.asyncio.Context()
        self._sock: Optional[zmq.asyncio.Socket] = None

    async def start(self) -> None:
        """Connect the request socket."""
        self._connect()
        logger.info(f"ZMQSampler connected to {self.endpoint}")

    def _connect(self) -> None:
        self._sock = self._ctx.socket(zmq.REQ)
        # Drop unsent requests immediately on close
        self._sock.setsockopt(zmq.LINGER, 0)
        self._sock.connect(self.endpoint)

    def _reset(self) -> None:
        if self._sock is not None:
            self._sock.close(linger=0)
        self._connect()

    async def poll_gaze(self) -> GazeSample:
        if self._sock is None:
            raise SamplerUnavailable("ZMQSampler is not started.")

        try:
            await self._sock.send_string(self._REQUEST)
            raw = await asyncio.wait_for(self._sock.recv(), timeout=self._timeout_s)
        except asyncio.TimeoutError:
            self._reset()
            raise SamplerUnavailable(f"No reply from {self.endpoint} within {self._timeout_s}s.")
        except zmq.ZMQError as e:
            self._reset()
            raise SamplerUnavailable(f"ZMQ error while polling {self.endpoint}: {e}") from e

        try:
            payload = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SamplerUnavailable(f"Reply is not valid JSON: {raw[:64]!r}") from e

        return parse_gaze_payload(payload)

    async def close(self) -> None:
        """Shut down the socket, and the context if we created it."""
        logger.info("Closing ZMQSampler...")
        if self._sock is not None:
            self._sock.close(linger=0)
            self._sock = None
        if self._owns_ctx:
            self._ctx.term()
