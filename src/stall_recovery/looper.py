# --- Standard library imports ---
import heapq
import itertools
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable

# --- Project imports ---
from .logger import get_logger


@dataclass
class Message:
    """
    A unit of work queued on a Looper.

    Ordered by (due time, post order) so a delayed message can never run
    ahead of an earlier message that was already due.
    """
    due: float
    seq: int
    callback: Callable[..., Any] = field(compare=False)
    args: tuple = field(default=(), compare=False)
    what: str = field(default="", compare=False)
    cancelled: bool = field(default=False, compare=False)

    def __lt__(self, other: "Message") -> bool:
        return (self.due, self.seq) < (other.due, other.seq)

    def cancel(self) -> None:
        self.cancelled = True


class Looper:
    """
    Single serial execution context with delayed, cancellable messages.

    • post() / post_delayed() are safe from any thread
    • Messages run one at a time, on whichever thread drives the looper
    • Cancelled messages are dropped when they reach the head of the queue

    Drive it with loop() in production, or with run_pending() against a
    manual clock in tests.
    """

    def __init__(self, name: str = "looper", clock: Callable[[], float] = time.monotonic):
        self.name = name
        self.clock = clock
        self.logger = get_logger(name)

        # ─── Queue state (guarded by _cond) ───
        self._queue: list[Message] = []
        self._seq = itertools.count()
        self._cond = threading.Condition()
        self._running = False

    # ──────────────────────────────────────────────────────────────
    # Posting
    # ──────────────────────────────────────────────────────────────

    def post(self, callback: Callable[..., Any], *args, what: str = "") -> Message:
        return self.post_delayed(0.0, callback, *args, what=what)

    def post_delayed(
        self,
        delay_s: float,
        callback: Callable[..., Any],
        *args,
        what: str = "",
    ) -> Message:
        """
        Queue `callback(*args)` to run no earlier than `delay_s` from now.
        """
        with self._cond:
            msg = Message(
                due=self.clock() + max(0.0, delay_s),
                seq=next(self._seq),
                callback=callback,
                args=args,
                what=what or getattr(callback, "__name__", "message"),
            )
            heapq.heappush(self._queue, msg)
            self._cond.notify()
        return msg

    # ──────────────────────────────────────────────────────────────
    # Introspection
    # ──────────────────────────────────────────────────────────────

    def pending(self) -> int:
        """Number of live (non-cancelled) messages still queued."""
        with self._cond:
            return sum(1 for msg in self._queue if not msg.cancelled)

    def next_due(self) -> float | None:
        """Due time of the earliest live message, or None if idle."""
        with self._cond:
            self._drop_cancelled_head()
            return self._queue[0].due if self._queue else None

    def _drop_cancelled_head(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)

    # ──────────────────────────────────────────────────────────────
    # Execution
    # ──────────────────────────────────────────────────────────────

    def _pop_due(self) -> Message | None:
        with self._cond:
            self._drop_cancelled_head()
            if self._queue and self._queue[0].due <= self.clock():
                return heapq.heappop(self._queue)
            return None

    def _dispatch(self, msg: Message) -> None:
        start = time.perf_counter()
        try:
            msg.callback(*msg.args)
        except Exception:
            # One bad handler must not stop the queue
            self.logger.exception(f"Unhandled exception in [{msg.what}]")
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.logger.timing(f"Timing | {msg.what:<34} [{elapsed_ms:8.1f} ms]")

    def run_pending(self) -> int:
        """
        Run every message that is due now, including ones posted while
        running. Returns the number of messages executed.
        """
        count = 0
        while (msg := self._pop_due()) is not None:
            self._dispatch(msg)
            count += 1
        return count

    def loop(self) -> None:
        """
        Block and run messages as they come due until quit() is called.
        """
        with self._cond:
            self._running = True
        self.logger.info(f"🔄 Looper [{self.name}] started")

        while True:
            with self._cond:
                if not self._running:
                    break
                self._drop_cancelled_head()
                if not self._queue:
                    self._cond.wait()
                    continue
                wait_s = self._queue[0].due - self.clock()
                if wait_s > 0:
                    self._cond.wait(timeout=wait_s)
                    continue
            self.run_pending()

        self.logger.info(f"🛑 Looper [{self.name}] stopped")

    def quit(self) -> None:
        """Stop loop() after the current message; queued messages are discarded."""
        with self._cond:
            self._running = False
            for msg in self._queue:
                msg.cancel()
            self._queue.clear()
            self._cond.notify_all()
