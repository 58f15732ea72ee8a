import asyncio
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")

_UNSET: Any = object()


class CancellationToken:
    """Cooperative cancellation: owners check ``cancelled`` before publishing."""

    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class Debouncer(Generic[T]):
    """Calls ``action`` with the last pushed value once ``delay`` passes without a new push.

    A value equal to the previously delivered one is dropped.
    """

    def __init__(self, delay: float, action: Callable[[T], Any]):
        self.delay = delay
        self.action = action
        self._timer: Optional[asyncio.Task] = None
        self._last: Any = _UNSET

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def push(self, value: T) -> None:
        self.cancel()
        self._timer = asyncio.create_task(self._fire_later(value))

    def cancel(self, forget: bool = False) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if forget:
            self._last = _UNSET

    async def _fire_later(self, value: T) -> None:
        await asyncio.sleep(self.delay)
        self._timer = None
        if value == self._last:
            return
        self._last = value
        self.action(value)

    async def wait(self) -> None:
        timer = self._timer
        if timer is not None:
            await asyncio.gather(timer, return_exceptions=True)
