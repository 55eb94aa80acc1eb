"""
rentsearch Suggestion Navigator

Selection state machine over the combined suggestion list: ranked
vehicles first (in rank order), then the fixed follow-up actions.

``selected_index == -1`` means focus is on the input field.  Arrow keys
move through the list with wraparound at the bottom; ArrowUp from the
first item hands focus back to the input.  Commit resolves the selection
into a :class:`CommitTarget` for the navigation layer.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence
from urllib.parse import quote

from rentsearch.core.config import SearchConfig
from rentsearch.core.engine import VehicleRecord

logger = logging.getLogger(__name__)

RECORD = "record"
SUGGESTION = "suggestion"
FREE_TEXT = "freeText"


@dataclass(frozen=True)
class SuggestionItem:
    """One row of the combined suggestion list."""
    kind: str
    index: int
    label: str
    target: str
    record: Optional[VehicleRecord] = None
    action: Optional[str] = None
    displayed: bool = True
    """False for ranked records past the display cut-off."""

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "index": self.index,
            "label": self.label,
            "target": self.target,
            "record_id": self.record.id if self.record else None,
            "action": self.action,
            "displayed": self.displayed,
        }


@dataclass(frozen=True)
class CommitTarget:
    """What the navigation layer receives on Enter / click."""
    kind: str
    target: str
    record: Optional[VehicleRecord] = None
    text: str = ""

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "target": self.target,
            "record_id": self.record.id if self.record else None,
            "text": self.text,
        }


# =============================================================================
# Routes & list construction
# =============================================================================

def record_target(record: VehicleRecord, config: SearchConfig | None = None) -> str:
    cfg = config or SearchConfig()
    return cfg.record_route.format(id=quote(record.id, safe=""))


def search_target(text: str, config: SearchConfig | None = None) -> str:
    cfg = config or SearchConfig()
    return cfg.search_route.format(query=quote(text.strip(), safe=""))


def build_suggestions(
    records: Sequence[VehicleRecord],
    query: str,
    config: SearchConfig | None = None,
) -> List[SuggestionItem]:
    """
    Flatten ranked records and fixed suggestions into one indexed list.

    Fixed suggestions are only offered when at least one record matched;
    their indices follow the *full* ranked list, not the displayed slice.
    """
    cfg = config or SearchConfig()
    if not records:
        return []

    items: List[SuggestionItem] = []
    for i, record in enumerate(records):
        items.append(SuggestionItem(
            kind=RECORD,
            index=i,
            label=record.name,
            target=record_target(record, cfg),
            record=record,
            displayed=i < cfg.max_display_results,
        ))

    text = query.strip()
    for offset, (action, label, route) in enumerate(cfg.fixed_suggestions()):
        items.append(SuggestionItem(
            kind=SUGGESTION,
            index=len(records) + offset,
            label=label.format(query=text),
            target=route.format(query=quote(text, safe="")),
            action=action,
        ))
    return items


# =============================================================================
# Navigator
# =============================================================================

class SuggestionNavigator:
    """
    Keyboard / pointer selection over the suggestion list.

    Args:
        config: Presentation config (fixed suggestions, routes, display cap).
        on_focus_input: Called when ArrowUp from the first item returns
            focus to the text field.
        on_blur_input: Called when Escape removes focus from the input.
        on_plain_search: Called on commit with an empty query and no
            selection.
    """

    def __init__(
        self,
        config: SearchConfig | None = None,
        *,
        on_focus_input: Optional[Callable[[], None]] = None,
        on_blur_input: Optional[Callable[[], None]] = None,
        on_plain_search: Optional[Callable[[], None]] = None,
    ):
        self._config = config or SearchConfig()
        self._on_focus_input = on_focus_input
        self._on_blur_input = on_blur_input
        self._on_plain_search = on_plain_search
        self._items: List[SuggestionItem] = []
        self._ranked_count = 0
        self._selected = -1
        self._open = False

    # ── State ─────────────────────────────────────────────────────

    @property
    def selected_index(self) -> int:
        return self._selected

    @property
    def total_items(self) -> int:
        return len(self._items)

    @property
    def ranked_count(self) -> int:
        return self._ranked_count

    @property
    def items(self) -> List[SuggestionItem]:
        return list(self._items)

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def selected_item(self) -> Optional[SuggestionItem]:
        if 0 <= self._selected < len(self._items):
            return self._items[self._selected]
        return None

    def _navigable(self) -> bool:
        return self._open and bool(self._items)

    # ── Lifecycle ─────────────────────────────────────────────────

    def load(self, records: Sequence[VehicleRecord], query: str) -> None:
        """Replace the list with fresh ranked records; selection resets."""
        self._items = build_suggestions(records, query, self._config)
        self._ranked_count = len(records) if self._items else 0
        self._selected = -1

    def open(self) -> None:
        self._open = True

    def close(self) -> None:
        self._open = False
        self._selected = -1

    def reset_selection(self) -> None:
        self._selected = -1

    # ── Transitions ───────────────────────────────────────────────

    def move_down(self) -> int:
        if not self._navigable():
            return self._selected
        if self._selected >= len(self._items) - 1:
            self._selected = 0
        else:
            self._selected += 1
        return self._selected

    def move_up(self) -> int:
        if not self._navigable() or self._selected == -1:
            return self._selected
        self._selected -= 1
        if self._selected == -1 and self._on_focus_input:
            self._on_focus_input()
        return self._selected

    def escape(self) -> int:
        if not self._navigable():
            return self._selected
        self.close()
        if self._on_blur_input:
            self._on_blur_input()
        return self._selected

    def hover(self, index: int) -> int:
        if not self._navigable():
            return self._selected
        if 0 <= index < len(self._items):
            self._selected = index
        else:
            logger.debug(f"Ignoring hover on index {index} (total {len(self._items)})")
        return self._selected

    def handle_key(self, key: str, raw_query: str = "") -> Optional[CommitTarget]:
        """Dispatch a key name; returns a target only for Enter."""
        name = key.lower()
        if name in ("arrowdown", "down"):
            self.move_down()
        elif name in ("arrowup", "up"):
            self.move_up()
        elif name in ("escape", "esc"):
            self.escape()
        elif name in ("enter", "return"):
            return self.commit(raw_query)
        return None

    # ── Commit ────────────────────────────────────────────────────

    def commit(self, raw_query: str) -> Optional[CommitTarget]:
        """
        Resolve the current selection into a navigation target.

        - a ranked record -> that exact record
        - a fixed suggestion -> free-text search on *raw_query*
        - nothing selected -> free-text search on *raw_query* (never the
          top-ranked record)
        - nothing selected and an empty query -> ``None`` (plain search
          callback, if any)

        The panel closes and the selection resets afterwards.
        """
        item = self.selected_item
        target: Optional[CommitTarget] = None

        if item is not None and item.kind == RECORD:
            target = CommitTarget(kind=RECORD, target=item.target, record=item.record)
        elif item is not None:
            target = CommitTarget(
                kind=FREE_TEXT,
                target=self._suggestion_route(item, raw_query),
                text=raw_query,
            )
        elif raw_query.strip():
            target = CommitTarget(
                kind=FREE_TEXT,
                target=search_target(raw_query, self._config),
                text=raw_query,
            )
        elif self._on_plain_search:
            self._on_plain_search()

        self.close()
        return target

    def _suggestion_route(self, item: SuggestionItem, raw_query: str) -> str:
        # Routes are rebuilt from the live text, not the query the list loaded with
        for action, _label, route in self._config.fixed_suggestions():
            if action == item.action:
                return route.format(query=quote(raw_query.strip(), safe=""))
        return search_target(raw_query, self._config)
