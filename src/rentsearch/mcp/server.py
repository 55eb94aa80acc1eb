"""
rentsearch MCP Server

Exposes vehicle search as tools that AI agents can invoke natively via the
Model Context Protocol.

Also exposes a **resource** (the scoring tiers) and **prompt templates**
for common booking-assistant workflows.

Start with::

    rentsearch mcp                              # stdio transport (default)
    rentsearch mcp --transport streamable-http  # HTTP (Streamable) for remote agents
    rentsearch mcp --transport sse              # SSE transport (legacy)

Or programmatically::

    from rentsearch.mcp.server import create_server
    server = create_server()
    server.run()
"""

from __future__ import annotations

import json
import logging
from typing import Annotated

# FastMCP uses pydantic for validation, so Field is available with the mcp extra
from pydantic import Field  # type: ignore[import-untyped]

from rentsearch.client import RentSearch
from rentsearch.core.config import ScoreTiers, SearchConfig

logger = logging.getLogger(__name__)


def create_server(config: SearchConfig | None = None, client: RentSearch | None = None):
    """
    Build and return a configured FastMCP server instance.

    Uses a **single client for the whole server**: every tool invocation
    searches the same catalog with the same limits.

    Args:
        config: Instance-based configuration.  Defaults to
            ``SearchConfig.from_env()`` so that the server respects the
            same environment variables as the CLI.
        client: Pre-built facade (tests inject one with an in-memory catalog).

    Raises ``ImportError`` if ``fastmcp`` is not installed (install via
    ``pip install 'rentsearch[mcp]'``).
    """
    from fastmcp import FastMCP  # type: ignore[import-untyped]

    cfg = config or (client.config if client else SearchConfig.from_env())
    rs = client or RentSearch(config=cfg)

    mcp = FastMCP("rentsearch")

    def _error(exc: Exception, **extra) -> str:
        logger.debug(f"Tool error: {exc}")
        return json.dumps({"error": str(exc), **extra}, allow_nan=False)

    # ==================================================================
    # Tool: search_vehicles
    # ==================================================================

    @mcp.tool()
    def search_vehicles(
        query: Annotated[
            str,
            Field(default="", description="Free text as a customer would type it: a brand ('tesla'), a model ('vf 8'), a city ('da nang'), a station or a vehicle type ('suv').")
        ] = "",
        max_results: Annotated[
            int | None,
            Field(default=None, description="Maximum number of vehicles to return. If None, uses the configured display limit (typically 5).")
        ] = None,
        explain: Annotated[
            bool,
            Field(default=False, description="If True, include the name of the scoring tier that matched each vehicle.")
        ] = False,
    ) -> str:
        """Rank bookable (active) vehicles for a free-text query.

        Vehicles under maintenance, rented out or inactive are never returned;
        use check_vehicle_availability to explain why a named vehicle is missing.

        Returns:
            JSON array of vehicles with their score, best match first.
        """
        try:
            query = str(query).strip() if query is not None else ""
            if not query:
                return json.dumps({"error": "Missing required argument: query", "results": []}, allow_nan=False)

            ranked = rs.rank(query)
            limit = max_results if max_results is not None else cfg.max_display_results
            rows = []
            for c in ranked.candidates[:max(limit, 0)]:
                obj = c.record.to_dict()
                obj["score"] = c.score
                if explain:
                    obj["tier"] = c.tier
                rows.append(obj)
            return json.dumps(rows, ensure_ascii=False, allow_nan=False)
        except Exception as e:
            return _error(e, results=[])

    # ==================================================================
    # Tool: suggest_vehicles
    # ==================================================================

    @mcp.tool()
    def suggest_vehicles(
        query: Annotated[
            str,
            Field(description="The text currently typed in the search box.")
        ],
        select: Annotated[
            int,
            Field(default=-1, description="Index of the highlighted suggestion when Enter is pressed; -1 means nothing is highlighted (free-text search).")
        ] = -1,
    ) -> str:
        """Build the search-box suggestion list and resolve what Enter would do.

        The list holds ranked vehicles first, then fixed follow-up searches
        (electric vehicles, locations).  With nothing selected Enter performs
        a free-text search, never an implicit pick of the top vehicle.

        Returns:
            JSON with ``items`` and ``commit`` (kind and navigation target).
        """
        try:
            items = rs.suggest(query)
            target = rs.commit(query, select)
            return json.dumps({
                "items": [i.to_dict() for i in items],
                "commit": target.to_dict() if target else None,
            }, ensure_ascii=False, allow_nan=False)
        except Exception as e:
            return _error(e, items=[])

    # ==================================================================
    # Tool: check_vehicle_availability
    # ==================================================================

    @mcp.tool()
    def check_vehicle_availability(
        query: Annotated[
            str,
            Field(description="Vehicle name (or a distinctive part of it, longer than two characters) to check.")
        ],
    ) -> str:
        """Check whether a named vehicle can be booked right now.

        Returns:
            JSON ``{"available": true}`` or the unavailability message with
            bookable alternatives of the same brand.
        """
        try:
            notice = rs.check_availability(query)
            if notice is None:
                return json.dumps({"available": True})
            out = notice.to_dict()
            out["available"] = False
            return json.dumps(out, ensure_ascii=False, allow_nan=False)
        except Exception as e:
            return _error(e)

    # ==================================================================
    # Tool: get_catalog_stats
    # ==================================================================

    @mcp.tool()
    def get_catalog_stats() -> str:
        """Return vehicle counts overall, per status and per type.

        Returns:
            JSON with total_vehicles, active_vehicles, by_status, by_type.
        """
        try:
            return json.dumps(rs.stats(), ensure_ascii=False)
        except Exception as e:
            return _error(e)

    # ==================================================================
    # Tool: health (readiness check)
    # ==================================================================

    @mcp.tool()
    def health() -> str:
        """Check that the rentsearch MCP server is running and responsive."""
        return json.dumps({"status": "ok", **rs.health()})

    # ==================================================================
    # Resource: scoring tiers
    # ==================================================================

    @mcp.resource("rentsearch://scoring/tiers")
    def scoring_tiers() -> str:
        """Return the scoring cascade (rule order and score per rule)."""
        return json.dumps({
            "cascade": [
                {"rule": rule, "tier": tier, "score": cfg.tier_score(tier)}
                for rule, tier in ScoreTiers.CASCADE
            ],
            "tiers": cfg.score_tiers,
        }, indent=2)

    # ==================================================================
    # Prompt templates
    # ==================================================================

    @mcp.prompt()
    def find_vehicle(need: str) -> str:
        """Pre-built prompt: find a bookable vehicle for a customer need."""
        return (
            f"A customer is looking for: {need}. Call search_vehicles with the "
            "brand, model, city or vehicle type they mention. If they name a "
            "specific vehicle that is missing from the results, call "
            "check_vehicle_availability and offer the alternatives it returns."
        )

    @mcp.prompt()
    def catalog_overview() -> str:
        """Pre-built prompt: summarize the fleet."""
        return (
            "Call get_catalog_stats and summarize the fleet: how many vehicles "
            "are bookable, how many are rented or under maintenance, and which "
            "vehicle types dominate."
        )

    return mcp


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    create_server().run()
