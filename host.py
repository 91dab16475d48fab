"""
Host-side collaborators of the skill graph.

``FrameScheduler`` plays the role of the display's "run this before the
next refresh" service: callbacks requested now run once, on the next call
to :meth:`FrameScheduler.run_frame`, and can be cancelled until then.
``ResizeNotifier`` tells subscribers when a container's measured size
changes.
"""

from __future__ import annotations

import itertools
import logging
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]
Size = Tuple[int, int]


class FrameHandle:
    """Cancellable reference to a callback waiting for the next frame."""

    __slots__ = ('id', 'callback', 'cancelled')

    def __init__(self, handle_id: int, callback: FrameCallback):
        self.id = handle_id
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        state = 'cancelled' if self.cancelled else 'pending'
        return f"FrameHandle(id={self.id}, {state})"


class FrameScheduler:
    def __init__(self):
        self._ids = itertools.count(1)
        self._pending: List[FrameHandle] = []
        self.frame_no: int = 0

    @property
    def pending(self) -> int:
        """Number of callbacks still waiting for a frame."""
        return sum(1 for handle in self._pending if not handle.cancelled)

    def request_frame(self, callback: FrameCallback) -> FrameHandle:
        handle = FrameHandle(next(self._ids), callback)
        self._pending.append(handle)
        return handle

    def cancel_frame(self, handle: Optional[FrameHandle]) -> None:
        if handle is not None:
            handle.cancel()

    def run_frame(self, timestamp: float = 0.0) -> int:
        """Run the callbacks queued before this call.

        Callbacks requested while the frame runs wait for the next one.

        Returns
        -------
        int
            Number of callbacks that ran.
        """
        due, self._pending = self._pending, []
        self.frame_no += 1
        ran = 0
        for handle in due:
            if handle.cancelled:
                continue
            handle.callback(timestamp)
            ran += 1
        return ran


class ResizeNotifier:
    """Broadcast size changes of one container."""

    def __init__(self, name: str = 'container'):
        self.name = name
        self._subscribers: List[Callable[[Size], None]] = []
        self.last_size: Optional[Size] = None

    def subscribe(self, callback: Callable[[Size], None]) -> Callable[[], None]:
        """Register ``callback`` and return a function that removes it.

        A subscriber added after a size is known receives it immediately.
        """
        self._subscribers.append(callback)
        if self.last_size is not None:
            callback(self.last_size)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def notify(self, size: Size) -> bool:
        """Report the measured size; subscribers run only if it changed."""
        size = (int(size[0]), int(size[1]))
        if size == self.last_size:
            return False
        logger.debug("%s resized %s -> %s", self.name, self.last_size, size)
        self.last_size = size
        for callback in list(self._subscribers):
            callback(size)
        return True
