"""
rentsearch Exception Hierarchy

Structured exceptions for clear error handling across CLI, API, and MCP
consumers.  Scoring and ranking never raise for well-formed input; these
types cover configuration, catalog loading, and caller contract violations.

Usage::

    from rentsearch.exceptions import RentSearchError, CatalogNotFoundError

    try:
        client.load_catalog("fleet.json")
    except CatalogNotFoundError:
        print("Export the fleet catalog first.")
    except RentSearchError as exc:
        print(f"rentsearch error: {exc}")
"""


class RentSearchError(Exception):
    """Base exception for all rentsearch errors."""


class ConfigError(RentSearchError, ValueError):
    """Configuration is invalid (e.g. negative delay, unknown tier).

    Inherits from ``ValueError`` so callers that validate settings with
    plain ``except ValueError`` keep working.
    """


class CatalogError(RentSearchError):
    """The vehicle catalog could not be parsed or contains an invalid record."""


class CatalogNotFoundError(CatalogError, FileNotFoundError):
    """No catalog file exists at the expected path.

    Inherits from ``FileNotFoundError`` for intuitive exception handling.
    """


class SearchError(RentSearchError):
    """Error during search execution."""


class InvalidSearchInputError(SearchError, TypeError):
    """A non-string query or a missing catalog was passed to the search engine."""
