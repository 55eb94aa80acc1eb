"""
rentsearch Engine

Core data types and the scoring cascade:
- VehicleRecord / ScoredCandidate data types
- Tiered relevance scoring (first matching tier wins)
- Vehicle status helpers and the unavailable-vehicle check
- Thread-safe in-memory catalog with JSON loading
"""

import json
import logging
import threading
from dataclasses import dataclass, asdict, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from rentsearch.core.config import ScoreTiers, SearchConfig, StatusSchema
from rentsearch.exceptions import CatalogError, CatalogNotFoundError

logger = logging.getLogger(__name__)


# =============================================================================
# Data Types
# =============================================================================

@dataclass(frozen=True)
class VehicleRecord:
    """A vehicle in the rental catalog.

    Records are read-only snapshots supplied by the data-fetch layer; the
    search engine never mutates them.
    """
    id: str
    name: str
    location: str
    type: str
    status: str
    station: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    """Any further catalog fields (price, seats, range, image ...)."""

    @property
    def brand(self) -> str:
        """First whitespace-delimited token of :attr:`name`."""
        parts = self.name.split()
        return parts[0] if parts else ""

    @property
    def is_active(self) -> bool:
        return self.status == StatusSchema.ACTIVE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VehicleRecord":
        """Build a record from a catalog entry (``id`` or ``_id`` accepted).

        Raises :class:`CatalogError` for missing fields or an unknown status.
        """
        if not isinstance(data, dict):
            raise CatalogError(f"Catalog entry must be an object, got {type(data).__name__}.")

        raw_id = data.get("id", data.get("_id"))
        if raw_id is None or raw_id == "":
            raise CatalogError(f"Catalog entry has no id: {data!r}")

        missing = [k for k in ("name", "location", "type", "status") if k not in data]
        if missing:
            raise CatalogError(f"Vehicle {raw_id}: missing field(s) {', '.join(missing)}.")

        status = str(data["status"]).lower()
        if status not in StatusSchema.STATUSES:
            raise CatalogError(
                f"Vehicle {raw_id}: unknown status '{data['status']}'. "
                f"Supported: {', '.join(sorted(StatusSchema.STATUSES))}."
            )

        known = {"id", "_id", "name", "location", "type", "status", "station"}
        station = data.get("station")
        return cls(
            id=str(raw_id),
            name=str(data["name"]),
            location=str(data["location"]),
            type=str(data["type"]),
            status=status,
            station=str(station) if station is not None else None,
            attributes={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> dict:
        """Return a JSON-serializable dict (attributes flattened back in)."""
        out = {k: v for k, v in asdict(self).items() if k != "attributes"}
        out.update(self.attributes)
        return out


@dataclass
class ScoredCandidate:
    """A record paired with its relevance score for one query."""
    record: VehicleRecord
    score: int
    tier: str = ""
    """Name of the cascade rule that produced the score."""

    def __lt__(self, other):
        if self.score != other.score:
            return self.score > other.score  # Higher score = better
        return len(self.record.name) < len(other.record.name)

    def to_dict(self) -> dict:
        return {"record": self.record.to_dict(), "score": self.score, "tier": self.tier}


@dataclass
class UnavailableNotice:
    """Returned when a query pinpoints a vehicle that cannot be booked."""
    record: VehicleRecord
    message: str
    brand_suggestions: List[VehicleRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "record": self.record.to_dict(),
            "message": self.message,
            "brand_suggestions": [r.to_dict() for r in self.brand_suggestions],
        }


# =============================================================================
# Scoring Cascade
# =============================================================================

_RULE_TO_TIER = dict(ScoreTiers.CASCADE)


def _word_overlap(query: str, name: str) -> bool:
    """True when any query token and name token contain one another.

    Single-character tokens are ignored on both sides.
    """
    query_words = [w for w in query.split() if len(w) > 1]
    name_words = [w for w in name.split() if len(w) > 1]
    return any(
        nw in qw or qw in nw
        for qw in query_words
        for nw in name_words
    )


def match_tier(query: str, record: VehicleRecord) -> Optional[str]:
    """
    Return the name of the first cascade rule that *query* satisfies.

    *query* must already be lower-cased and trimmed.  Rules are evaluated
    strictly in order and later rules are never consulted once one
    matches, so a more specific match always outranks a looser one.
    Returns ``None`` when nothing matches.
    """
    name = record.name.lower()
    brand = record.brand.lower()
    location = record.location.lower()
    station = (record.station or "").lower()
    vtype = record.type.lower()

    if name == query:
        return "exact_name"
    if brand == query:
        return "exact_brand"
    if name.startswith(query):
        return "name_prefix"
    if brand and (query in brand or brand in query):
        return "brand_partial"
    if f" {query}" in name:
        return "name_word_boundary"
    if query in name:
        return "name_contains"
    if _word_overlap(query, name):
        return "word_overlap"
    if location.startswith(query):
        return "location_prefix"
    if query in location:
        return "location_contains"
    if query in station or query in vtype:
        return "station_or_type"
    return None


def calculate_search_score(
    query: str,
    record: VehicleRecord,
    config: SearchConfig | None = None,
    explain: bool = False,
) -> int | tuple[int, Optional[str]]:
    """
    Calculate the relevance score of *record* for an already-lowered query.

    Args:
        explain: If True, return ``(score, rule_name)``.
    """
    rule = match_tier(query, record)
    if rule is None:
        score = 0
    else:
        tier = _RULE_TO_TIER[rule]
        if config is not None:
            score = config.tier_score(tier)
        elif tier == "fuzzy":
            score = ScoreTiers.DEFAULTS["contains"] - ScoreTiers.FUZZY_OFFSET
        else:
            score = ScoreTiers.DEFAULTS[tier]
    if explain:
        return score, rule
    return score


# =============================================================================
# Status Helpers
# =============================================================================

def is_active(record: VehicleRecord) -> bool:
    return record.status == StatusSchema.ACTIVE


def status_label(status: str) -> str:
    """Human-readable status; unknown statuses read as inactive."""
    return StatusSchema.LABELS.get(status, StatusSchema.LABELS[StatusSchema.INACTIVE])


def status_priority(status: str) -> int:
    return StatusSchema.PRIORITY.get(status, StatusSchema.PRIORITY[StatusSchema.INACTIVE])


def filter_active(records: Iterable[VehicleRecord]) -> List[VehicleRecord]:
    return [r for r in records if is_active(r)]


def sort_by_status_priority(records: Iterable[VehicleRecord]) -> List[VehicleRecord]:
    """Active first, then rented, maintenance, inactive; alphabetical within a status."""
    return sorted(records, key=lambda r: (status_priority(r.status), r.name.lower()))


def check_unavailable_vehicle(
    query: str,
    records: Sequence[VehicleRecord],
    limit: int = 3,
) -> Optional[UnavailableNotice]:
    """
    Detect a query that names a specific vehicle which is not bookable.

    The first record whose name equals the query, or contains it when the
    query is longer than two characters, is inspected.  When that record
    is not active a notice is returned with up to *limit* active records
    of the same brand as alternatives.
    """
    normalized = query.strip().lower()
    if not normalized:
        return None

    hit = next(
        (
            r for r in records
            if r.name.lower() == normalized
            or (len(normalized) > 2 and normalized in r.name.lower())
        ),
        None,
    )
    if hit is None or hit.is_active:
        return None

    brand = hit.brand
    suggestions = [
        r for r in records
        if r.is_active and r.name.lower().startswith(brand.lower())
    ][:limit]
    phrase = StatusSchema.UNAVAILABLE_PHRASES.get(hit.status, "not available")
    message = (
        f"{hit.name} is currently {phrase} for booking. "
        f"Please consider other {brand} models. "
        "We apologize for any inconvenience."
    )
    logger.debug(f"Unavailable vehicle matched '{normalized}': {hit.id} ({hit.status})")
    return UnavailableNotice(record=hit, message=message, brand_suggestions=suggestions)


# =============================================================================
# Catalog
# =============================================================================

def parse_catalog(payload: Any) -> List[VehicleRecord]:
    """Parse a decoded catalog payload (a list, or ``{"vehicles": [...]}``)."""
    if isinstance(payload, dict):
        payload = payload.get("vehicles")
    if not isinstance(payload, list):
        raise CatalogError("Catalog must be a JSON list or an object with a 'vehicles' list.")

    records = [VehicleRecord.from_dict(entry) for entry in payload]
    seen: set = set()
    for r in records:
        if r.id in seen:
            raise CatalogError(f"Duplicate vehicle id '{r.id}' in catalog.")
        seen.add(r.id)
    return records


def read_catalog_file(path: str | Path) -> List[VehicleRecord]:
    """Read and parse a JSON catalog file."""
    p = Path(path)
    if not p.is_file():
        raise CatalogNotFoundError(f"No vehicle catalog found at {p}.")
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Catalog {p} is not valid JSON: {exc}") from exc
    return parse_catalog(payload)


class VehicleCatalog:
    """
    Thread-safe holder of a read-only vehicle snapshot.

    The search layer only ever reads :meth:`snapshot`; refreshing is done
    by swapping in a whole new tuple (via :meth:`replace` or :meth:`load`),
    so a ranking pass never observes a half-updated collection.
    """

    def __init__(self, records: Iterable[VehicleRecord] = (), source: str | None = None):
        self._lock = threading.Lock()
        self._records: tuple = tuple(records)
        self._source = source

    @classmethod
    def from_file(cls, path: str | Path) -> "VehicleCatalog":
        catalog = cls()
        catalog.load(path)
        return catalog

    @property
    def source(self) -> str | None:
        """Path the catalog was last loaded from, if any."""
        return self._source

    def load(self, path: str | Path) -> int:
        """Replace the snapshot with the contents of *path*; returns the record count."""
        records = read_catalog_file(path)
        self.replace(records, source=str(Path(path).resolve()))
        logger.info(f"Loaded {len(records)} vehicles from {path}")
        return len(records)

    def replace(self, records: Iterable[VehicleRecord], source: str | None = None) -> None:
        new_records = tuple(records)
        with self._lock:
            self._records = new_records
            if source is not None:
                self._source = source

    def snapshot(self) -> tuple:
        with self._lock:
            return self._records

    def get(self, vehicle_id: str) -> Optional[VehicleRecord]:
        return next((r for r in self.snapshot() if r.id == str(vehicle_id)), None)

    def stats(self) -> Dict[str, Any]:
        """Counts of vehicles overall, per status, and per type."""
        records = self.snapshot()
        by_status = {status: 0 for status in sorted(StatusSchema.STATUSES)}
        by_type: Dict[str, int] = {}
        for r in records:
            by_status[r.status] = by_status.get(r.status, 0) + 1
            by_type[r.type] = by_type.get(r.type, 0) + 1
        return {
            "total_vehicles": len(records),
            "active_vehicles": by_status[StatusSchema.ACTIVE],
            "by_status": by_status,
            "by_type": dict(sorted(by_type.items())),
        }

    def __len__(self) -> int:
        return len(self.snapshot())

    def __iter__(self):
        return iter(self.snapshot())


def load_sample_catalog() -> VehicleCatalog:
    """Return the demo catalog bundled with the package."""
    text = resources.files("rentsearch").joinpath("data/sample_catalog.json").read_text(encoding="utf-8")
    return VehicleCatalog(parse_catalog(json.loads(text)), source="<sample>")
