"""
rentsearch Core: configuration, scoring, ranking, debouncing, navigation.

Re-exports the primary classes for convenience::

    from rentsearch.core import SearchConfig, VehicleCatalog, VehicleSearchEngine
"""

from rentsearch.core.config import ScoreTiers, SearchConfig, StatusSchema, SuggestionSchema
from rentsearch.core.debounce import ImmediateScheduler, QueryDebouncer, Scheduler, ThreadingScheduler
from rentsearch.core.engine import (
    ScoredCandidate,
    UnavailableNotice,
    VehicleCatalog,
    VehicleRecord,
    calculate_search_score,
    check_unavailable_vehicle,
    load_sample_catalog,
    match_tier,
)
from rentsearch.core.navigator import CommitTarget, SuggestionItem, SuggestionNavigator
from rentsearch.core.search import RankedResults, ResultFormatter, VehicleSearchEngine
from rentsearch.core.session import SearchSession

__all__ = [
    "ScoreTiers",
    "SearchConfig",
    "StatusSchema",
    "SuggestionSchema",
    "ImmediateScheduler",
    "QueryDebouncer",
    "Scheduler",
    "ThreadingScheduler",
    "ScoredCandidate",
    "UnavailableNotice",
    "VehicleCatalog",
    "VehicleRecord",
    "calculate_search_score",
    "check_unavailable_vehicle",
    "load_sample_catalog",
    "match_tier",
    "CommitTarget",
    "SuggestionItem",
    "SuggestionNavigator",
    "RankedResults",
    "ResultFormatter",
    "VehicleSearchEngine",
    "SearchSession",
]
