"""
rentsearch Search Engine

Ranking pipeline over the in-memory catalog and result presentation.

- Active-only filtering (a hard business invariant, not a score)
- Tiered scoring via :func:`calculate_search_score`
- Deterministic ordering: score descending, shorter names first on ties
- Display truncation that keeps the full ranked list for index arithmetic
- Console / JSON / compact / suggestion-list renderers with match highlighting
"""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence

from rentsearch.core.config import SearchConfig, SuggestionSchema
from rentsearch.core.engine import (
    ScoredCandidate,
    VehicleRecord,
    calculate_search_score,
    is_active,
    status_label,
)
from rentsearch.exceptions import InvalidSearchInputError

logger = logging.getLogger(__name__)


@dataclass
class RankedResults:
    """
    Outcome of one ranking pass.

    :attr:`candidates` holds the *full* filtered-and-sorted list.  Only the
    first :attr:`max_display` are shown, but suggestion indices are computed
    from the full length.
    """
    query: str
    candidates: tuple = field(default_factory=tuple)
    max_display: int = 5

    @property
    def total(self) -> int:
        return len(self.candidates)

    @property
    def records(self) -> List[VehicleRecord]:
        return [c.record for c in self.candidates]

    @property
    def displayed(self) -> List[ScoredCandidate]:
        return list(self.candidates[:self.max_display])

    @property
    def displayed_records(self) -> List[VehicleRecord]:
        return [c.record for c in self.displayed]

    def __len__(self) -> int:
        return len(self.candidates)

    def __bool__(self) -> bool:
        return bool(self.candidates)


# =============================================================================
# Ranking Pipeline
# =============================================================================

class VehicleSearchEngine:
    """
    Ranks catalog records for a free-text query.

    The engine is stateless apart from its configuration: calling
    :meth:`rank` twice with the same inputs yields the same ordered list.
    """

    def __init__(self, config: SearchConfig | None = None):
        self._config = config or SearchConfig()
        # Time (seconds) spent in the last rank() call
        self._last_elapsed_seconds: float = 0.0

    @property
    def config(self) -> SearchConfig:
        return self._config

    @property
    def last_search_elapsed_seconds(self) -> float:
        return self._last_elapsed_seconds

    # ── Public API ────────────────────────────────────────────────

    def rank(self, query: str, catalog: Iterable[VehicleRecord]) -> RankedResults:
        """
        Score, filter, and order *catalog* for *query*.

        Args:
            query: Raw user text; trimmed and lower-cased here.
            catalog: Records to search (any iterable, e.g. a VehicleCatalog).

        Returns:
            :class:`RankedResults`; empty for a blank query.

        Raises:
            InvalidSearchInputError: *query* is not a string or *catalog* is None.
        """
        if not isinstance(query, str):
            raise InvalidSearchInputError(f"Query must be a string, got {type(query).__name__}.")
        if catalog is None:
            raise InvalidSearchInputError("Catalog must not be None.")

        max_display = self._config.max_display_results
        term = query.strip()
        if not term:
            return RankedResults(query=query, max_display=max_display)

        lowered = term.lower()
        t0 = time.perf_counter()

        candidates: List[ScoredCandidate] = []
        for record in catalog:
            if not is_active(record):
                continue
            score, rule = calculate_search_score(lowered, record, self._config, explain=True)
            if score <= 0:
                continue
            candidates.append(ScoredCandidate(record=record, score=score, tier=rule or ""))

        candidates.sort()
        self._last_elapsed_seconds = time.perf_counter() - t0
        logger.debug(
            f"Ranked '{lowered}': {len(candidates)} matches "
            f"in {self._last_elapsed_seconds * 1000:.2f} ms"
        )
        return RankedResults(query=query, candidates=tuple(candidates), max_display=max_display)

    def search(
        self,
        query: str,
        catalog: Iterable[VehicleRecord],
        max_results: int | None = None,
    ) -> List[VehicleRecord]:
        """Return the displayed records for *query* (at most *max_results*)."""
        ranked = self.rank(query, catalog)
        limit = self._config.max_display_results if max_results is None else max_results
        return ranked.records[:limit]


# =============================================================================
# Result Formatting
# =============================================================================

def _plain(s: str) -> str:
    return f"[{s}]"


class ResultFormatter:
    """Format search results and suggestion lists for different output modes."""

    # ── Helpers ───────────────────────────────────────────────────

    @staticmethod
    def highlight_match(text: str, term: str) -> tuple:
        """
        Split *text* around the first case-insensitive occurrence of *term*.

        Returns ``(before, match, after)``; when the term is blank or absent
        the whole text is returned as ``before``.
        """
        if not term.strip():
            return text, "", ""
        start = text.lower().find(term.lower())
        if start == -1:
            return text, "", ""
        end = start + len(term)
        return text[:start], text[start:end], text[end:]

    @staticmethod
    def render_highlight(text: str, term: str,
                         emphasis: Callable[[str], str] = _plain) -> str:
        before, match, after = ResultFormatter.highlight_match(text, term)
        if not match:
            return text
        return f"{before}{emphasis(match)}{after}"

    # ── Console (human-friendly) ──────────────────────────────────

    @staticmethod
    def format_console(results: RankedResults, explain: bool = False,
                       elapsed_time: float | None = None,
                       emphasis: Callable[[str], str] = _plain) -> str:
        """
        Multi-line console output of the displayed results.

        Args:
            results: Output of :meth:`VehicleSearchEngine.rank`.
            explain: Show the winning tier next to each score.
            elapsed_time: Optional search time in seconds for the header.
            emphasis: Wraps the highlighted part of each name.
        """
        if not results:
            return f"\n  {SuggestionSchema.EMPTY_STATE}.\n"

        thin = "─" * 60
        term = results.query.strip()
        shown = results.displayed

        header = f"  RENTSEARCH — {results.total} match{'es' if results.total != 1 else ''}"
        if results.total > len(shown):
            header += f" (showing {len(shown)})"
        if elapsed_time is not None:
            header += f" in {elapsed_time:.4f} seconds"

        out: List[str] = [f"\n{thin}", header, thin]
        for idx, c in enumerate(shown, start=1):
            r = c.record
            out.append("")
            out.append(f"  #{idx}  {ResultFormatter.render_highlight(r.name, term, emphasis)}")
            out.append(f"    Location : {r.location}" + (f" / {r.station}" if r.station else ""))
            out.append(f"    Type     : {r.type}")
            out.append(f"    Status   : {status_label(r.status)}")
            score_line = f"    Score    : {c.score}"
            if explain and c.tier:
                score_line += f"  ({c.tier})"
            out.append(score_line)
        out.append(f"\n{thin}")
        return "\n".join(out)

    # ── JSON ──────────────────────────────────────────────────────

    @staticmethod
    def format_json(results: RankedResults, explain: bool = False) -> str:
        """Displayed results as a JSON array (score and, with *explain*, tier)."""
        rows = []
        for c in results.displayed:
            obj = c.record.to_dict()
            obj["score"] = c.score
            if explain:
                obj["tier"] = c.tier
            rows.append(obj)
        return json.dumps(rows, indent=2, ensure_ascii=False, allow_nan=False)

    # ── Compact (one line per result) ─────────────────────────────

    @staticmethod
    def format_compact(results: RankedResults) -> str:
        if not results:
            return SuggestionSchema.EMPTY_STATE
        return "\n".join(
            f"{c.record.id}  {c.record.name}  [{c.score}]  {c.record.location}"
            for c in results.displayed
        )

    # ── Suggestion panel ──────────────────────────────────────────

    @staticmethod
    def format_suggestions(items: Sequence, selected_index: int, query: str,
                           searching: bool = False,
                           emphasis: Callable[[str], str] = _plain) -> str:
        """
        Render the combined suggestion list with the selected row marked.

        Records past the display cut-off are navigable but not rendered.
        """
        if searching:
            return f"  {SuggestionSchema.SEARCHING}"
        if not items:
            return f"  {SuggestionSchema.EMPTY_STATE}"

        term = query.strip()
        lines: List[str] = []
        for item in items:
            if not item.displayed:
                continue
            marker = ">" if item.index == selected_index else " "
            label = item.label
            if item.kind == "record":
                label = ResultFormatter.render_highlight(label, term, emphasis)
            lines.append(f"{marker} {item.index:>2}  {label}")
        return "\n".join(lines)


def describe_record(record: Optional[VehicleRecord]) -> str:
    """One-line description used by the CLI and MCP tools."""
    if record is None:
        return ""
    where = record.location + (f" / {record.station}" if record.station else "")
    return f"{record.name} ({record.type}, {where}, {status_label(record.status)})"
