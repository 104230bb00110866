"""
Background action runner.

Every dispatched backend operation gets its own short-lived daemon thread (no
pooling, no queueing, no cancellation). The thread reports back exactly once
through the completion callback; the callback must not touch the view. The
state machine's callback only puts the outcome on a queue that the render
thread drains.

Thread Safety:
  - Workers never touch curses or Textual widgets
  - Exceptions never escape a worker: they are turned into a failed Outcome
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from .errors import BackendError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_text(self) -> str:
        if self.error is None:
            return ""
        return str(self.error) or self.error.__class__.__name__


class ActionRunner:
    """Runs backend operations off the render thread."""

    def __init__(self):
        self._lock = threading.Lock()
        self._threads: List[threading.Thread] = []

    def dispatch(self, operation: Callable[[], Any], on_complete: Callable[[Outcome], None],
                 name: str = "action") -> threading.Thread:
        thread = threading.Thread(
            target=self._run, args=(operation, on_complete, name),
            name=f"dockpilot-{name}", daemon=True,
        )
        with self._lock:
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(thread)
        thread.start()
        return thread

    def _run(self, operation: Callable[[], Any], on_complete: Callable[[Outcome], None], name: str) -> None:
        try:
            outcome = Outcome(value=operation())
        except BackendError as e:
            logger.info(f"{name} failed: {e}")
            outcome = Outcome(error=e)
        except Exception as e:
            logger.error(f"Unexpected error in {name}: {e}", exc_info=True)
            outcome = Outcome(error=e)
        try:
            on_complete(outcome)
        except Exception:
            logger.error(f"Completion callback for {name} failed", exc_info=True)

    def active(self) -> List[threading.Thread]:
        with self._lock:
            return [t for t in self._threads if t.is_alive()]

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for running actions (log streams may never finish; use a timeout)."""
        for thread in self.active():
            thread.join(timeout)
