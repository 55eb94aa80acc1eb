"""
rentsearch Client Facade

Single entry point for programmatic use of rentsearch.  Wraps catalog
loading, ranking, suggestion lists, and availability checks behind an
instance-based API with optional async support.

Usage::

    from rentsearch import RentSearch

    # From environment variables (RENTSEARCH_CATALOG etc.)
    client = RentSearch()

    # With explicit configuration
    from rentsearch.core.config import SearchConfig
    client = RentSearch(config=SearchConfig(catalog_path="catalog.json"))

    # Search
    for vehicle in client.search("tesla"):
        print(vehicle.name, vehicle.location)

    # Interactive search box
    session = client.open_session(on_commit=print)
    session.input("vf")

    # Async variants (for FastAPI / Django async views)
    hits = await client.asearch("tesla")
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional

from rentsearch.core.config import SearchConfig
from rentsearch.core.debounce import Scheduler
from rentsearch.core.engine import (
    UnavailableNotice,
    VehicleCatalog,
    VehicleRecord,
    check_unavailable_vehicle,
    load_sample_catalog,
)
from rentsearch.core.navigator import CommitTarget, SuggestionItem, SuggestionNavigator
from rentsearch.core.search import RankedResults, VehicleSearchEngine
from rentsearch.core.session import SearchSession
from rentsearch.exceptions import ConfigError

logger = logging.getLogger(__name__)


class RentSearch:
    """
    High-level rentsearch client.

    Each instance carries its own :class:`SearchConfig` and catalog and
    never touches global state.

    Args:
        config: Explicit configuration object.  When *None*, a config is
            built from environment variables or keyword overrides.
        catalog: Pre-built catalog.  When *None*, the file named by
            ``config.catalog_path`` is loaded lazily, or the bundled
            sample catalog when no path is configured.
        validate_on_init: If True, call :meth:`SearchConfig.validate` in
            ``__init__`` so bad settings surface immediately.
        **kwargs: Forwarded to :class:`SearchConfig` when *config* is
            ``None`` (e.g. ``max_display_results=8``).
    """

    def __init__(
        self,
        config: SearchConfig | None = None,
        *,
        catalog: VehicleCatalog | None = None,
        validate_on_init: bool = False,
        **kwargs,
    ):
        if config is not None:
            self._config = config
        elif kwargs:
            # Build a config from env, then overlay keyword overrides
            base = SearchConfig.from_env()
            merged = {
                f.name: kwargs.get(f.name, getattr(base, f.name))
                for f in base.__dataclass_fields__.values()
            }
            self._config = SearchConfig(**merged)
        else:
            self._config = SearchConfig.from_env()

        if validate_on_init:
            self._config.validate()

        self._catalog = catalog
        self._engine = VehicleSearchEngine(self._config)
        self._watchers: list = []

    # ── Configuration & catalog ───────────────────────────────────

    @property
    def config(self) -> SearchConfig:
        """The active configuration for this client."""
        return self._config

    @property
    def engine(self) -> VehicleSearchEngine:
        return self._engine

    @property
    def catalog(self) -> VehicleCatalog:
        """The catalog, loaded on first access."""
        if self._catalog is None:
            if self._config.catalog_path:
                self._catalog = VehicleCatalog.from_file(self._config.catalog_path)
            else:
                logger.debug("No catalog configured; using the bundled sample catalog")
                self._catalog = load_sample_catalog()
        return self._catalog

    def load_catalog(self, path: str | Path) -> int:
        """
        Load (or reload) the catalog from a JSON file.

        Returns:
            Number of vehicles loaded.

        Raises:
            CatalogNotFoundError: If *path* does not exist.
            CatalogError: If the file is malformed.
        """
        if self._catalog is None:
            self._catalog = VehicleCatalog.from_file(path)
            return len(self._catalog)
        return self._catalog.load(path)

    # ── Search ────────────────────────────────────────────────────

    def rank(self, query: str) -> RankedResults:
        """Full ranking (all matches, in order) for *query*."""
        return self._engine.rank(query, self.catalog.snapshot())

    def search(self, query: str, *, max_results: int | None = None) -> List[VehicleRecord]:
        """
        Return the best active vehicles for *query*.

        Args:
            query: Free text typed by the user.
            max_results: Cap on returned records (defaults to
                ``config.max_display_results``).

        Raises:
            InvalidSearchInputError: If *query* is not a string.
        """
        return self._engine.search(query, self.catalog.snapshot(), max_results=max_results)

    def suggest(self, query: str) -> List[SuggestionItem]:
        """The combined suggestion list (ranked vehicles + fixed actions)."""
        navigator = SuggestionNavigator(self._config)
        navigator.load(self.rank(query).records, query)
        return navigator.items

    def commit(self, query: str, index: int = -1) -> Optional[CommitTarget]:
        """
        Resolve what Enter would do with *index* selected in the list for *query*.

        ``index == -1`` (no selection) yields a free-text search, never the
        top-ranked vehicle.  Out-of-range indices count as no selection.
        """
        navigator = SuggestionNavigator(self._config)
        navigator.load(self.rank(query).records, query)
        navigator.open()
        if index >= 0:
            navigator.hover(index)
        return navigator.commit(query)

    def check_availability(self, query: str) -> Optional[UnavailableNotice]:
        """Notice for a query naming a vehicle that cannot be booked, else None."""
        return check_unavailable_vehicle(
            query, self.catalog.snapshot(), limit=self._config.brand_suggestion_limit,
        )

    # ── Statistics ────────────────────────────────────────────────

    def stats(self) -> Dict[str, object]:
        """Catalog statistics plus the catalog source."""
        out = dict(self.catalog.stats())
        out["source"] = self.catalog.source
        return out

    # ── Sessions & watching ───────────────────────────────────────

    def open_session(self, scheduler: Scheduler | None = None, **callbacks) -> SearchSession:
        """
        Create a :class:`SearchSession` over this client's catalog.

        *callbacks* are forwarded (``on_commit``, ``on_results`` ...).
        """
        return SearchSession(
            self.catalog, self._engine, self._config, scheduler, **callbacks,
        )

    def watch_catalog(self, path: str | Path | None = None):
        """
        Reload the catalog automatically when its file changes.

        Returns the running :class:`~rentsearch.core.watcher.CatalogWatcher`
        (call ``.stop()`` to terminate).
        """
        from rentsearch.core.watcher import CatalogWatcher

        target = path or self._config.catalog_path or self.catalog.source
        if not target or not Path(target).is_file():
            raise ConfigError(f"watch_catalog needs an existing catalog file (got {target!r}).")
        if self._catalog is None:
            self.load_catalog(target)
        watcher = CatalogWatcher(
            self.catalog, target, debounce_seconds=self._config.watch_debounce_seconds,
        )
        self._watchers.append(watcher)
        return watcher.start()

    def close(self) -> None:
        """Stop any catalog watchers started by this client."""
        for watcher in self._watchers:
            watcher.stop()
        self._watchers.clear()

    # ── Async variants ────────────────────────────────────────────
    # These use asyncio.to_thread() to run sync operations off the
    # event loop and raise the same exceptions as the sync methods.

    async def asearch(self, query: str, *, max_results: int | None = None) -> List[VehicleRecord]:
        """Async variant of :meth:`search`."""
        return await asyncio.to_thread(self.search, query, max_results=max_results)

    async def asuggest(self, query: str) -> List[SuggestionItem]:
        """Async variant of :meth:`suggest`."""
        return await asyncio.to_thread(self.suggest, query)

    async def aload_catalog(self, path: str | Path) -> int:
        """Async variant of :meth:`load_catalog`."""
        return await asyncio.to_thread(self.load_catalog, path)

    async def astats(self) -> Dict[str, object]:
        """Async variant of :meth:`stats`."""
        return await asyncio.to_thread(self.stats)

    # ── Health (for agents / status endpoints) ─────────────────────

    def health(self) -> Dict[str, object]:
        """
        Return a small status dict for agents or REST health checks.

        Does not force the catalog to load.
        """
        return {
            "version": __import__("rentsearch", fromlist=["__version__"]).__version__,
            "catalog_loaded": self._catalog is not None,
            "catalog_source": self._catalog.source if self._catalog else self._config.catalog_path,
            "max_display_results": self._config.max_display_results,
        }
