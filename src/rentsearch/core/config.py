"""
rentsearch Configuration Module

Centralized configuration for the vehicle search engine: tier scores,
debounce timing, presentation limits, routes, and logging.  The schema
tables (score tiers, vehicle statuses, fixed suggestions) live here too so
that every layer reads the same constants.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

# =============================================================================
# Schema Tables
# =============================================================================

class ScoreTiers:
    """
    Ordinal relevance scale used by the scoring cascade.

    Values only matter relative to each other.  The fuzzy word-overlap
    tier (``"fuzzy"``) has no entry of its own: it is always
    ``contains - FUZZY_OFFSET``.
    """

    DEFAULTS = {
        "exact_match": 100,
        "starts_with": 90,
        "word_boundary": 80,
        "contains": 70,
        "location_starts_with": 60,
        "location_contains": 50,
        "station_type_match": 40,
    }

    FUZZY_OFFSET = 10

    # Cascade order, first match wins.  Each rule maps to the tier key above.
    CASCADE = (
        ("exact_name", "exact_match"),
        ("exact_brand", "starts_with"),
        ("name_prefix", "starts_with"),
        ("brand_partial", "word_boundary"),
        ("name_word_boundary", "word_boundary"),
        ("name_contains", "contains"),
        ("word_overlap", "fuzzy"),
        ("location_prefix", "location_starts_with"),
        ("location_contains", "location_contains"),
        ("station_or_type", "station_type_match"),
    )

    @classmethod
    def rule_names(cls) -> list:
        """Return the cascade rule names in evaluation order."""
        return [rule for rule, _ in cls.CASCADE]


class StatusSchema:
    """Vehicle status vocabulary and its display metadata."""

    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    RENTED = "rented"
    INACTIVE = "inactive"

    STATUSES = frozenset((ACTIVE, MAINTENANCE, RENTED, INACTIVE))

    LABELS = {
        ACTIVE: "Active",
        MAINTENANCE: "Maintenance",
        RENTED: "Rented",
        INACTIVE: "Inactive",
    }

    # Lower sorts first
    PRIORITY = {
        ACTIVE: 1,
        RENTED: 2,
        MAINTENANCE: 3,
        INACTIVE: 4,
    }

    # Read as "is currently <phrase>", so "rented out" and "unavailable"
    # stand in for "currently rented" and "temporarily unavailable"
    UNAVAILABLE_PHRASES = {
        MAINTENANCE: "under maintenance",
        RENTED: "rented out",
        INACTIVE: "unavailable",
    }


class SuggestionSchema:
    """
    Fixed follow-up actions appended after the ranked vehicles.

    Each entry is ``(action, label template, route template)``; templates
    receive ``{query}``.  Only the first ``fixed_suggestion_count`` entries
    are offered.
    """

    FIXED_SUGGESTIONS = (
        ("vehicles", "{query} - Electric vehicles", "/vehicles?search={query}"),
        ("locations", "{query} - Locations", "/stations?search={query}"),
        ("services", "{query} - Services", "/services?search={query}"),
    )

    EMPTY_STATE = "No matching results found"
    SEARCHING = "Searching..."


# =============================================================================
# Instance-Based Configuration
# =============================================================================

@dataclass
class SearchConfig:
    """
    Instance-based configuration for rentsearch.

    Each ``SearchConfig`` is self-contained and can be passed through the
    call stack, so a UI session, a CLI run, and an MCP server can each use
    their own limits and timings.

    Create from environment variables::

        config = SearchConfig.from_env()

    Or with explicit values::

        config = SearchConfig(debounce_seconds=0.15, max_display_results=8)
    """

    # ── Scoring ───────────────────────────────────────────────────
    score_tiers: dict = field(default_factory=lambda: dict(ScoreTiers.DEFAULTS))

    # ── Timing ────────────────────────────────────────────────────
    debounce_seconds: float = 0.3
    reveal_seconds: float = 0.2

    # ── Presentation ──────────────────────────────────────────────
    max_display_results: int = 5
    fixed_suggestion_count: int = 2
    record_route: str = "/vehicles/{id}"
    search_route: str = "/vehicles?search={query}"

    # ── Catalog ───────────────────────────────────────────────────
    catalog_path: Optional[str] = None
    watch_debounce_seconds: float = 1.0
    brand_suggestion_limit: int = 3

    # ── Logging ───────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # ── Factory ───────────────────────────────────────────────────

    @classmethod
    def from_env(cls) -> "SearchConfig":
        """Build a config snapshot from current environment variables."""
        return cls(
            catalog_path=os.getenv("RENTSEARCH_CATALOG") or None,
            debounce_seconds=float(os.getenv("RENTSEARCH_DEBOUNCE_SECONDS", "0.3")),
            reveal_seconds=float(os.getenv("RENTSEARCH_REVEAL_SECONDS", "0.2")),
            max_display_results=int(os.getenv("RENTSEARCH_MAX_RESULTS", "5")),
            fixed_suggestion_count=int(os.getenv("RENTSEARCH_FIXED_SUGGESTIONS", "2")),
            log_level=os.getenv("RENTSEARCH_LOG_LEVEL", "INFO").upper(),
        )

    # ── Validation & Accessors ────────────────────────────────────

    def validate(self) -> bool:
        """
        Validate timings, presentation limits, and tier scores.

        Raises :class:`~rentsearch.exceptions.ConfigError` on failure.
        """
        from rentsearch.exceptions import ConfigError

        for name in ("debounce_seconds", "reveal_seconds", "watch_debounce_seconds"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be >= 0 (got {getattr(self, name)}).")

        if self.max_display_results < 1:
            raise ConfigError(
                f"max_display_results must be at least 1 (got {self.max_display_results})."
            )

        available = len(SuggestionSchema.FIXED_SUGGESTIONS)
        if not 0 <= self.fixed_suggestion_count <= available:
            raise ConfigError(
                f"fixed_suggestion_count must be between 0 and {available} "
                f"(got {self.fixed_suggestion_count})."
            )

        missing = set(ScoreTiers.DEFAULTS) - set(self.score_tiers)
        if missing:
            raise ConfigError(f"Missing score tiers: {', '.join(sorted(missing))}.")
        for tier, value in self.score_tiers.items():
            if not isinstance(value, int) or value <= 0:
                raise ConfigError(f"Score tier '{tier}' must be a positive integer (got {value!r}).")
        return True

    def tier_score(self, tier: str) -> int:
        """Return the score for a tier key; ``"fuzzy"`` is derived from ``contains``."""
        if tier == "fuzzy":
            return self.score_tiers["contains"] - ScoreTiers.FUZZY_OFFSET
        return self.score_tiers[tier]

    def fixed_suggestions(self) -> tuple:
        """Return the fixed suggestions offered by this configuration."""
        return SuggestionSchema.FIXED_SUGGESTIONS[:self.fixed_suggestion_count]
