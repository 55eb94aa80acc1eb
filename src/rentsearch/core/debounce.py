"""
rentsearch Query Debouncer

Coalesces rapid keystrokes into a single evaluation and models the short
"searching" pause before results are revealed:

- Debounce window: every keystroke restarts the timer; only the last one
  in a burst settles.
- Reveal delay: after a non-empty settle the debouncer stays in the
  *searching* state for a fixed delay, then marks results visible.
- Clearing the box settles immediately, with no delay.
- Stale timers are discarded: every callback re-checks the generation and
  query it was scheduled for before applying its effect.
"""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


# =============================================================================
# Schedulers
# =============================================================================

class Scheduler:
    """Runs a callback after a delay.

    ``call_later`` returns a handle with ``cancel()``, or ``None`` when the
    callback has already run.
    """

    def call_later(self, delay: float, callback: Callable[[], None]):
        raise NotImplementedError


class ThreadingScheduler(Scheduler):
    """Default scheduler backed by :class:`threading.Timer` (daemon timers)."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class ImmediateScheduler(Scheduler):
    """Runs callbacks inline, ignoring the delay.

    For callers that submit whole queries (CLI, MCP) rather than keystrokes.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        callback()
        return None


# =============================================================================
# Debouncer
# =============================================================================

class QueryDebouncer:
    """
    Tracks ``raw_query`` / ``settled_query`` and the searching/visible flags.

    Args:
        scheduler: Timer source (defaults to :class:`ThreadingScheduler`).
        debounce_seconds: Quiet window before a query settles.
        reveal_seconds: Pause between settle and results becoming visible.
        on_settle: Called with the settled query (run the ranking here).
        on_reveal: Called with the query once results become visible.
        on_clear: Called when the input is cleared.
        lock: Lock shared with the owner so timer callbacks and user input
            never interleave; a private ``RLock`` is used when omitted.
    """

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        *,
        debounce_seconds: float = 0.3,
        reveal_seconds: float = 0.2,
        on_settle: Optional[Callable[[str], None]] = None,
        on_reveal: Optional[Callable[[str], None]] = None,
        on_clear: Optional[Callable[[], None]] = None,
        lock=None,
    ):
        self._scheduler = scheduler or ThreadingScheduler()
        self._debounce_seconds = debounce_seconds
        self._reveal_seconds = reveal_seconds
        self._on_settle = on_settle
        self._on_reveal = on_reveal
        self._on_clear = on_clear
        self._lock = lock if lock is not None else threading.RLock()

        self._raw = ""
        self._settled = ""
        self._searching = False
        self._visible = False
        self._generation = 0
        self._debounce_handle = None
        self._reveal_handle = None
        self._disposed = False
        # Number of settles that triggered an evaluation
        self.evaluations = 0

    # ── State ─────────────────────────────────────────────────────

    @property
    def raw_query(self) -> str:
        return self._raw

    @property
    def settled_query(self) -> str:
        return self._settled

    @property
    def is_searching(self) -> bool:
        return self._searching

    @property
    def results_visible(self) -> bool:
        return self._visible

    @property
    def pending(self) -> bool:
        """True while a debounce or reveal timer is outstanding."""
        return self._debounce_handle is not None or self._reveal_handle is not None

    # ── Input ─────────────────────────────────────────────────────

    def push(self, text: str) -> None:
        """Record a keystroke; restarts the debounce window."""
        with self._lock:
            if self._disposed:
                return
            self._raw = text
            self._generation += 1
            generation = self._generation
            self._cancel_timers()

            if not text.strip():
                self._clear()
                return

            self._debounce_handle = self._scheduler.call_later(
                self._debounce_seconds,
                lambda: self._debounce_elapsed(generation, text),
            )

    def halt(self) -> None:
        """Cancel outstanding timers and hide results (panel closed)."""
        with self._lock:
            self._generation += 1
            self._cancel_timers()
            self._searching = False
            self._visible = False

    def dispose(self) -> None:
        """Tear down for good; later timer firings and pushes are ignored."""
        with self._lock:
            self.halt()
            self._disposed = True

    def cancel(self) -> None:
        """Alias of :meth:`dispose` for unmount-style callers."""
        self.dispose()

    # ── Timer callbacks ───────────────────────────────────────────

    def _debounce_elapsed(self, generation: int, query: str) -> None:
        with self._lock:
            if self._is_stale(generation, query, self._raw):
                logger.debug(f"Discarding stale debounce for '{query}'")
                return
            self._debounce_handle = None
            if query == self._settled and self._visible:
                return

            self._settled = query
            self._searching = True
            self._visible = False
            self.evaluations += 1
            logger.debug(f"Settled query '{query}'")
            if self._on_settle:
                self._on_settle(query)

            self._reveal_handle = self._scheduler.call_later(
                self._reveal_seconds,
                lambda: self._reveal_elapsed(generation, query),
            )

    def _reveal_elapsed(self, generation: int, query: str) -> None:
        with self._lock:
            if self._is_stale(generation, query, self._settled):
                logger.debug(f"Discarding stale reveal for '{query}'")
                return
            self._reveal_handle = None
            self._searching = False
            self._visible = True
            if self._on_reveal:
                self._on_reveal(query)

    # ── Internal helpers ──────────────────────────────────────────

    def _is_stale(self, generation: int, query: str, current: str) -> bool:
        return self._disposed or generation != self._generation or query != current

    def _clear(self) -> None:
        self._settled = ""
        self._searching = False
        self._visible = False
        if self._on_clear:
            self._on_clear()

    def _cancel_timers(self) -> None:
        for handle in (self._debounce_handle, self._reveal_handle):
            if handle is not None:
                handle.cancel()
        self._debounce_handle = None
        self._reveal_handle = None
