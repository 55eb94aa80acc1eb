"""
Shared fixtures for the rentsearch test suite.
"""

import sys
import warnings
from pathlib import Path

import pytest

# Filter deprecation warnings from pytest-asyncio; we cannot fix the library.
warnings.filterwarnings(
    "ignore",
    category=DeprecationWarning,
    module="pytest_asyncio",
)

# Ensure the src/ directory is on the import path so that
# rentsearch.core.config / rentsearch.core.engine / etc. can be imported.
SRC_ROOT = Path(__file__).resolve().parent.parent / "src"
sys.path.insert(0, str(SRC_ROOT))

from rentsearch.core.config import SearchConfig  # noqa: E402
from rentsearch.core.engine import VehicleCatalog, VehicleRecord  # noqa: E402


# =============================================================================
# Virtual clock scheduler
# =============================================================================

class _Handle:
    def __init__(self, due: float, seq: int, callback):
        self.due = due
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by :meth:`advance` instead of wall-clock time."""

    def __init__(self):
        self.now = 0.0
        self._seq = 0
        self._handles = []

    def call_later(self, delay, callback):
        self._seq += 1
        handle = _Handle(self.now + delay, self._seq, callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self._handles if not h.cancelled]

    def advance(self, seconds):
        """Move the clock forward, firing due callbacks in time order."""
        target = self.now + seconds
        while True:
            due = [h for h in self.pending if h.due <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: (h.due, h.seq))
            self._handles.remove(handle)
            self.now = max(self.now, handle.due)
            handle.callback()
        self.now = target

    def fire_stale(self, handle):
        """Run a callback even though it was cancelled (timer already in flight)."""
        handle.callback()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


# =============================================================================
# Fixtures: records and catalogs
# =============================================================================

def make_record(id, name, location="Ha Noi", type="Sedan", status="active", station=None, **attrs):
    return VehicleRecord(
        id=id, name=name, location=location, type=type,
        status=status, station=station, attributes=attrs,
    )


@pytest.fixture
def records():
    """Small catalog covering every status and scoring tier."""
    return [
        make_record("1", "Tesla Model 3", "Ho Chi Minh City", "Sedan", station="District 1 Hub"),
        make_record("2", "Tesla Model S", "Ha Noi", "Sedan", station="Hoan Kiem Station"),
        make_record("3", "Tesla Model Y", "Ha Noi", "SUV", status="rented"),
        make_record("4", "VinFast VF 8", "Da Nang", "SUV", station="Son Tra Station"),
        make_record("5", "VinFast VF 9", "Da Nang", "SUV", status="maintenance"),
        make_record("6", "VinFast VF e34", "Can Tho", "Compact SUV"),
        make_record("7", "Kia EV6", "Hai Phong", "Crossover", station="Model Park"),
        make_record("8", "Mercedes EQS", "Ho Chi Minh City", "Luxury Sedan", status="inactive"),
    ]


@pytest.fixture
def catalog(records) -> VehicleCatalog:
    return VehicleCatalog(records, source="<test>")


@pytest.fixture
def seven_record_catalog() -> VehicleCatalog:
    """Five VinFast matches so 'vinfast' yields 5 ranked + 2 fixed = 7 items."""
    return VehicleCatalog([
        make_record("a", "VinFast VF 3"),
        make_record("b", "VinFast VF 5"),
        make_record("c", "VinFast VF 6"),
        make_record("d", "VinFast VF 7"),
        make_record("e", "VinFast VF 8"),
        make_record("f", "Kia EV6"),
    ])


@pytest.fixture
def config() -> SearchConfig:
    return SearchConfig()


@pytest.fixture
def catalog_file(tmp_path: Path) -> Path:
    """A JSON catalog on disk."""
    path = tmp_path / "catalog.json"
    path.write_text(
        '{"vehicles": ['
        '{"_id": "x1", "name": "BMW iX3", "location": "Da Nang", "type": "SUV", "status": "active", "price": 1990000},'
        '{"id": "x2", "name": "BMW i4", "location": "Ha Noi", "type": "Sedan", "status": "Rented"}'
        ']}',
        encoding="utf-8",
    )
    return path
