"""
rentsearch: incremental search-and-rank for a vehicle-rental catalog.

The ``rentsearch`` package scores free-text queries against an in-memory
vehicle catalog with a tiered relevance function, debounces keystrokes,
and drives a keyboard-navigable suggestion list.

Quick start (programmatic API)::

    from rentsearch import RentSearch

    client = RentSearch()                       # reads env vars
    vehicles = client.search("tesla")           # best active matches
    items = client.suggest("vf")                # vehicles + fixed actions

Quick start (CLI)::

    rentsearch search tesla
    rentsearch browse --catalog ./catalog.json

Configuration override::

    from rentsearch import RentSearch, SearchConfig

    config = SearchConfig(catalog_path="catalog.json", max_display_results=8)
    client = RentSearch(config=config)
"""

__version__ = "1.0.0"

# Primary public API: the RentSearch facade
from rentsearch.client import RentSearch

# Configuration
from rentsearch.core.config import SearchConfig

# Core data types that callers interact with
from rentsearch.core.engine import ScoredCandidate, UnavailableNotice, VehicleCatalog, VehicleRecord
from rentsearch.core.navigator import CommitTarget, SuggestionItem
from rentsearch.core.search import RankedResults
from rentsearch.core.session import SearchSession

# Exception hierarchy
from rentsearch.exceptions import (
    CatalogError,
    CatalogNotFoundError,
    ConfigError,
    InvalidSearchInputError,
    RentSearchError,
    SearchError,
)


def health(config: SearchConfig | None = None) -> dict:
    """
    Return a small status dict for agents or REST health checks (no catalog load).

    When *config* is None, uses :meth:`SearchConfig.from_env()` for the snapshot.
    """
    cfg = config or SearchConfig.from_env()
    return {
        "version": __version__,
        "catalog_path": cfg.catalog_path,
        "max_display_results": cfg.max_display_results,
    }


__all__ = [
    "__version__",
    # Facade
    "RentSearch",
    # Config
    "SearchConfig",
    # Data types
    "VehicleRecord",
    "VehicleCatalog",
    "ScoredCandidate",
    "RankedResults",
    "SuggestionItem",
    "CommitTarget",
    "UnavailableNotice",
    "SearchSession",
    # Exceptions
    "RentSearchError",
    "ConfigError",
    "CatalogError",
    "CatalogNotFoundError",
    "SearchError",
    "InvalidSearchInputError",
    # Status
    "health",
]
