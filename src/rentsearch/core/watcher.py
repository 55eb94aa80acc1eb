"""
rentsearch Catalog Watcher

Keeps a :class:`~rentsearch.core.engine.VehicleCatalog` in sync with its
JSON file:
- watchdog observer on the file's directory
- debounced reload (editors write files in several steps)
- a failed reload keeps the previous snapshot
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from rentsearch.core.engine import VehicleCatalog
from rentsearch.exceptions import CatalogError

logger = logging.getLogger(__name__)


class _CatalogFileHandler(FileSystemEventHandler):
    """Forwards events that touch the catalog file to the watcher."""

    def __init__(self, watcher: "CatalogWatcher"):
        self.watcher = watcher

    def _matches(self, event: FileSystemEvent) -> bool:
        if event.is_directory:
            return False
        paths = [event.src_path, getattr(event, "dest_path", "")]
        return any(p and Path(p).resolve() == self.watcher.path for p in paths)

    def on_modified(self, event):
        if self._matches(event):
            self.watcher.schedule_reload()

    def on_created(self, event):
        if self._matches(event):
            self.watcher.schedule_reload()

    def on_moved(self, event):
        if self._matches(event):
            self.watcher.schedule_reload()


class CatalogWatcher:
    """Reload a catalog whenever its file changes on disk."""

    def __init__(
        self,
        catalog: VehicleCatalog,
        path: str | Path,
        debounce_seconds: float = 1.0,
        on_reload: Optional[Callable[[int], None]] = None,
    ):
        """
        Args:
            catalog: Catalog whose snapshot is replaced on reload.
            path: JSON catalog file to watch.
            debounce_seconds: Quiet time after the last change before reloading.
            on_reload: Called with the new record count after a successful reload.
        """
        self.catalog = catalog
        self.path = Path(path).resolve()
        self.debounce_seconds = debounce_seconds
        self.on_reload = on_reload
        self.reload_count = 0
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._observer = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> "CatalogWatcher":
        """Start the observer in its background thread."""
        if self._observer is not None:
            logger.warning("CatalogWatcher already running")
            return self
        observer = Observer()
        observer.schedule(_CatalogFileHandler(self), str(self.path.parent), recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info(f"Watching {self.path} (debounce: {self.debounce_seconds}s)")
        return self

    def stop(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
            logger.info("CatalogWatcher stopped")

    def schedule_reload(self) -> None:
        """Restart the debounce timer; the reload runs once changes settle."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self.reload_now)
            self._timer.daemon = True
            self._timer.start()

    def reload_now(self) -> bool:
        """Reload immediately; returns False (and keeps the old snapshot) on failure."""
        with self._lock:
            self._timer = None
        try:
            count = self.catalog.load(self.path)
        except (CatalogError, OSError, UnicodeDecodeError) as e:
            logger.error(f"Catalog reload failed, keeping previous snapshot: {e}")
            return False
        self.reload_count += 1
        logger.info(f"Catalog reloaded: {count} vehicles")
        if self.on_reload:
            self.on_reload(count)
        return True

    def __enter__(self) -> "CatalogWatcher":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.stop()


def watch_catalog(
    catalog: VehicleCatalog,
    path: str | Path,
    debounce_seconds: float = 1.0,
) -> CatalogWatcher:
    """
    Start watching *path* and return the running watcher.

    Example:
        ```python
        from rentsearch.core.engine import VehicleCatalog
        from rentsearch.core.watcher import watch_catalog

        catalog = VehicleCatalog.from_file("catalog.json")
        watcher = watch_catalog(catalog, "catalog.json")

        # ... serve searches ...

        watcher.stop()
        ```
    """
    return CatalogWatcher(catalog, path, debounce_seconds).start()
