"""Rate-limited semaphore with a mandatory hold time."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from rolegate.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ThrottledGate:
    """Counting resource pool whose slots are held after use.

    ``async with gate.slot():`` waits for one of ``max_concurrent``
    slots, runs the block, then keeps the slot for ``hold_seconds``
    before releasing it, whether the block succeeded or raised. The
    hold caps throughput at roughly
    ``max_concurrent / (call_time + hold_seconds)`` calls per second no
    matter how fast the remote side answers.

    Example:
        gate = ThrottledGate(max_concurrent=3, hold_seconds=5.0)
        async with gate.slot():
            result = await authority.validate(key)
    """

    def __init__(self, max_concurrent: int = 3, hold_seconds: float = 5.0):
        """Initialize gate.

        Args:
            max_concurrent: Slots available at once (>= 1)
            hold_seconds: Delay after each use before the slot frees (>= 0)
        """
        if max_concurrent < 1:
            raise ConfigurationError(
                f"max_concurrent must be >= 1, got {max_concurrent}"
            )
        if hold_seconds < 0:
            raise ConfigurationError(f"hold_seconds must be >= 0, got {hold_seconds}")

        self._max_concurrent = max_concurrent
        self._hold_seconds = hold_seconds
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._in_flight = 0
        self._peak_in_flight = 0

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Acquire a slot, run the block, hold, release."""
        await self._semaphore.acquire()
        self._in_flight += 1
        self._peak_in_flight = max(self._peak_in_flight, self._in_flight)
        try:
            yield
        finally:
            try:
                if self._hold_seconds:
                    await asyncio.sleep(self._hold_seconds)
            finally:
                self._in_flight -= 1
                self._semaphore.release()

    @property
    def max_concurrent(self) -> int:
        """Get the slot limit."""
        return self._max_concurrent

    @property
    def hold_seconds(self) -> float:
        """Get the hold time."""
        return self._hold_seconds

    @property
    def in_flight(self) -> int:
        """Slots currently taken, including slots in their hold time."""
        return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        """Highest in_flight value observed since creation."""
        return self._peak_in_flight
