"""
rentsearch Search Session

Binds the debouncer, ranking pipeline and navigator into one explicit
object with the lifecycle::

    open -> (debounce -> reveal)* -> commit | close -> reset

Timer callbacks arrive on other threads when the default
:class:`~rentsearch.core.debounce.ThreadingScheduler` is used, so every
state change happens under one re-entrant lock shared with the debouncer.
"""

import logging
import threading
from typing import Callable, Iterable, List, Optional

from rentsearch.core.config import SearchConfig
from rentsearch.core.debounce import QueryDebouncer, Scheduler
from rentsearch.core.engine import VehicleRecord
from rentsearch.core.navigator import RECORD, CommitTarget, SuggestionItem, SuggestionNavigator
from rentsearch.core.search import RankedResults, ResultFormatter, VehicleSearchEngine

logger = logging.getLogger(__name__)


class SearchSession:
    """
    One interactive search box.

    Args:
        catalog: Records to search; anything with ``snapshot()`` (e.g.
            :class:`~rentsearch.core.engine.VehicleCatalog`) or a plain
            iterable.
        engine: Ranking pipeline (built from *config* when omitted).
        config: Timings and presentation limits.
        scheduler: Timer source for the debouncer.
        on_commit: Receives the :class:`CommitTarget` of every commit.
        on_plain_search: Called when Enter is pressed on an empty box.
        on_focus_input: Called when focus should return to the text field.
        on_blur_input: Called when Escape leaves the text field.
        on_results: Receives each :class:`RankedResults` once revealed.
    """

    def __init__(
        self,
        catalog,
        engine: VehicleSearchEngine | None = None,
        config: SearchConfig | None = None,
        scheduler: Scheduler | None = None,
        *,
        on_commit: Optional[Callable[[CommitTarget], None]] = None,
        on_plain_search: Optional[Callable[[], None]] = None,
        on_focus_input: Optional[Callable[[], None]] = None,
        on_blur_input: Optional[Callable[[], None]] = None,
        on_results: Optional[Callable[[RankedResults], None]] = None,
    ):
        self._config = config or (engine.config if engine else SearchConfig())
        self._engine = engine or VehicleSearchEngine(self._config)
        self._catalog = catalog
        self._lock = threading.RLock()

        self._on_commit = on_commit
        self._on_focus_input = on_focus_input
        self._on_results = on_results

        self._navigator = SuggestionNavigator(
            self._config,
            on_focus_input=on_focus_input,
            on_blur_input=on_blur_input,
            on_plain_search=on_plain_search,
        )
        self._debouncer = QueryDebouncer(
            scheduler,
            debounce_seconds=self._config.debounce_seconds,
            reveal_seconds=self._config.reveal_seconds,
            on_settle=self._settle,
            on_reveal=self._reveal,
            on_clear=self._clear,
            lock=self._lock,
        )

        self._text = ""
        self._pending: Optional[RankedResults] = None
        self._results: Optional[RankedResults] = None
        self._disposed = False

    # ── State ─────────────────────────────────────────────────────

    @property
    def text(self) -> str:
        """Current contents of the input field."""
        return self._text

    @property
    def navigator(self) -> SuggestionNavigator:
        return self._navigator

    @property
    def debouncer(self) -> QueryDebouncer:
        return self._debouncer

    @property
    def selected_index(self) -> int:
        return self._navigator.selected_index

    @property
    def items(self) -> List[SuggestionItem]:
        return self._navigator.items

    @property
    def results(self) -> Optional[RankedResults]:
        """Last revealed ranking, or ``None`` before the first reveal."""
        return self._results

    @property
    def is_open(self) -> bool:
        return self._navigator.is_open

    @property
    def is_searching(self) -> bool:
        return self._debouncer.is_searching

    @property
    def results_visible(self) -> bool:
        return self._debouncer.results_visible

    # ── User actions ──────────────────────────────────────────────

    def open(self) -> None:
        """Input focused: the panel may show."""
        with self._lock:
            if not self._disposed:
                self._navigator.open()

    def input(self, text: str) -> None:
        """The input text changed (one keystroke, paste, or clear)."""
        with self._lock:
            if self._disposed:
                return
            self._text = text
            self._navigator.reset_selection()
            if text.strip():
                self._navigator.open()
            self._debouncer.push(text)

    def press(self, key: str) -> Optional[CommitTarget]:
        """Handle a key name; Enter commits."""
        with self._lock:
            if self._disposed:
                return None
            if key.lower() in ("enter", "return"):
                return self.commit()
            was_open = self._navigator.is_open
            self._navigator.handle_key(key, self._text)
            if was_open and not self._navigator.is_open:
                self._debouncer.halt()
            return None

    def hover(self, index: int) -> int:
        with self._lock:
            return self._navigator.hover(index)

    def commit(self) -> Optional[CommitTarget]:
        """
        Resolve the current selection and hand it to ``on_commit``.

        A record commit replaces the input text with the record's name
        without starting a new search.
        """
        with self._lock:
            if self._disposed:
                return None
            target = self._navigator.commit(self._text)
            self._debouncer.halt()
            if target is None:
                return None
            if target.kind == RECORD and target.record is not None:
                self._text = target.record.name
            logger.debug(f"Committed {target.kind} -> {target.target}")
            if self._on_commit:
                self._on_commit(target)
            return target

    def close(self) -> None:
        """Click outside: hide the panel, drop the selection and cancel timers."""
        with self._lock:
            self._navigator.close()
            self._debouncer.halt()

    def dispose(self) -> None:
        """Unmount: cancel every timer; later callbacks are ignored."""
        with self._lock:
            self._disposed = True
            self._debouncer.dispose()
            self._navigator.close()

    # ── Presentation ──────────────────────────────────────────────

    def render(self, emphasis: Callable[[str], str] | None = None) -> str:
        """Text rendering of the suggestion panel."""
        with self._lock:
            kwargs = {"emphasis": emphasis} if emphasis else {}
            return ResultFormatter.format_suggestions(
                self._navigator.items,
                self._navigator.selected_index,
                self._debouncer.settled_query,
                searching=self._debouncer.is_searching,
                **kwargs,
            )

    # ── Debouncer callbacks (lock already held) ───────────────────

    def _records(self) -> Iterable[VehicleRecord]:
        snapshot = getattr(self._catalog, "snapshot", None)
        return snapshot() if callable(snapshot) else tuple(self._catalog)

    def _settle(self, query: str) -> None:
        self._pending = self._engine.rank(query, self._records())
        # Previous results are not navigable while searching
        self._navigator.load((), query)

    def _reveal(self, query: str) -> None:
        ranked = self._pending
        self._pending = None
        if ranked is None or ranked.query != query:
            return
        self._results = ranked
        self._navigator.load(ranked.records, query)
        logger.debug(f"Revealed {ranked.total} result(s) for '{query}'")
        if self._on_focus_input:
            self._on_focus_input()
        if self._on_results:
            self._on_results(ranked)

    def _clear(self) -> None:
        self._pending = None
        self._results = None
        self._navigator.load((), "")
