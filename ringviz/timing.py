from __future__ import annotations
import heapq
import threading
import time
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable, Dict, List, Optional

from ringviz import logging as slog

AfterFn = Callable[[int, Callable[[], None]], object]
AfterCancelFn = Callable[[object], None]

# Quiescence window for hover-driven overlay repaints.
HOVER_DEBOUNCE_MS = 150


@dataclass(order=True)
class TimerHandle:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class TimerLoop:
    """
    Stand-in event loop for callers without one: a single daemon thread that runs
    scheduled callbacks one at a time, ordered by (due time, scheduling order).

    `after`/`after_cancel` follow the Tk shape, so a GUI loop can replace it anywhere
    an AfterFn/AfterCancelFn pair is accepted.
    """

    def __init__(self, *, name: str = "ringviz-timers", clock: Callable[[], float] = time.monotonic):
        self.name = name
        self._clock = clock
        self._cond = threading.Condition()
        self._queue: List[TimerHandle] = []
        self._seq = count()
        self._thread: Optional[threading.Thread] = None

    @property
    def thread(self) -> Optional[threading.Thread]:
        return self._thread

    def after(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        with self._cond:
            handle = TimerHandle(self._clock() + max(0, delay_ms) / 1000.0, next(self._seq), callback)
            heapq.heappush(self._queue, handle)
            self._ensure_thread()
            self._cond.notify()
            return handle

    def after_cancel(self, handle: object) -> None:
        if not isinstance(handle, TimerHandle):
            return
        with self._cond:
            handle.cancelled = True
            self._cond.notify()

    def _ensure_thread(self) -> None:
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
            self._thread.start()

    def _next_due(self) -> TimerHandle:
        with self._cond:
            while True:
                while self._queue and self._queue[0].cancelled:
                    heapq.heappop(self._queue)
                if not self._queue:
                    self._cond.wait()
                    continue
                wait = self._queue[0].due - self._clock()
                if wait <= 0:
                    return heapq.heappop(self._queue)
                self._cond.wait(wait)

    def _run(self) -> None:
        while True:
            handle = self._next_due()
            try:
                handle.callback()
            except Exception as e:
                # a failing callback must not stop later ones, as in a GUI loop
                slog.log_err(f"scheduled callback failed: {e!r}", scope="timing")


_default_loop: Optional[TimerLoop] = None
_default_loop_lock = threading.Lock()


def default_loop() -> TimerLoop:
    """Process-wide TimerLoop used when no scheduler is injected."""
    global _default_loop
    with _default_loop_lock:
        if _default_loop is None:
            _default_loop = TimerLoop()
        return _default_loop


class Debouncer:
    """
    Trailing-edge debounce around an injectable scheduler.

    Every call to `trigger` cancels the pending invocation (if any) and schedules a new
    one `delay_ms` later, so only the last call of a burst runs. Without an injected
    `after`/`after_cancel` pair the shared default_loop() is used, so debouncers that
    share it never run their callbacks concurrently.
    """

    def __init__(
        self,
        callback: Callable[..., None],
        *,
        delay_ms: int = HOVER_DEBOUNCE_MS,
        after: Optional[AfterFn] = None,
        after_cancel: Optional[AfterCancelFn] = None,
    ) -> None:
        self._callback = callback
        self.delay_ms = max(0, int(delay_ms))
        if after is None or after_cancel is None:
            loop = default_loop()
            after, after_cancel = after or loop.after, after_cancel or loop.after_cancel
        self._after = after
        self._after_cancel = after_cancel
        self._handle: object | None = None
        self._lock = threading.RLock()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, *args: Any, **kwargs: Any) -> object:
        with self._lock:
            self._cancel_locked()
            slot: Dict[str, Any] = {"handle": None, "fired": False}

            def _fire() -> None:
                with self._lock:
                    # stale timer whose cancel raced with expiry
                    if slot["handle"] is not None and self._handle is not slot["handle"]:
                        return
                    slot["fired"] = True
                    self._handle = None
                self._callback(*args, **kwargs)

            handle = self._after(self.delay_ms, _fire)
            if not slot["fired"]:
                slot["handle"] = handle
                self._handle = handle
            return handle

    def cancel(self) -> None:
        with self._lock:
            self._cancel_locked()

    def _cancel_locked(self) -> None:
        handle = self._handle
        self._handle = None
        if handle is not None:
            self._after_cancel(handle)

    __call__ = trigger
