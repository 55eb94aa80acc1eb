"""
Tests for rentsearch.core.search: the ranking pipeline and ResultFormatter.
"""

import json

import pytest
from rentsearch.core.config import SearchConfig
from rentsearch.core.engine import VehicleCatalog, load_sample_catalog
from rentsearch.core.navigator import build_suggestions
from rentsearch.core.search import RankedResults, ResultFormatter, VehicleSearchEngine, describe_record
from rentsearch.exceptions import InvalidSearchInputError, SearchError

from conftest import make_record


@pytest.fixture
def engine():
    return VehicleSearchEngine(SearchConfig())


# =============================================================================
# Ranking pipeline
# =============================================================================

class TestRank:

    def test_brand_query_returns_only_active(self, engine, catalog):
        ranked = engine.rank("tesla", catalog)
        assert [r.id for r in ranked.records] == ["1", "2"]
        assert all(c.score == 90 for c in ranked.candidates)

    def test_inactive_records_never_returned(self, engine, catalog):
        for q in ("tesla model y", "vinfast vf 9", "mercedes", "eqs"):
            assert all(r.status == "active" for r in engine.rank(q, catalog).records)
        assert engine.rank("mercedes eqs", catalog).total == 0

    def test_exact_name_ranks_first(self, engine):
        catalog = [make_record("1", "Kia EV6 GT"), make_record("2", "Kia EV6")]
        ranked = engine.rank("kia ev6", catalog)
        assert ranked.records[0].id == "2"
        assert ranked.candidates[0].score == 100
        assert ranked.candidates[0].tier == "exact_name"

    def test_tie_broken_by_shorter_name(self, engine):
        catalog = [make_record("long", "VinFast VF e34"), make_record("short", "VinFast VF 8")]
        ranked = engine.rank("vf", catalog)
        assert [r.id for r in ranked.records] == ["short", "long"]

    def test_equal_score_and_length_keep_catalog_order(self, engine):
        catalog = [make_record("b", "Tesla Model S"), make_record("a", "Tesla Model 3")]
        assert [r.id for r in engine.rank("tesla", catalog).records] == ["b", "a"]

    def test_mixed_tiers_ordered_by_score(self, engine, catalog):
        ranked = engine.rank("model", catalog)
        assert [r.id for r in ranked.records] == ["1", "2", "7"]
        assert [c.score for c in ranked.candidates] == [80, 80, 40]

    def test_query_is_trimmed_and_lowered(self, engine, catalog):
        assert engine.rank("  TESLA  ", catalog).records == engine.rank("tesla", catalog).records

    @pytest.mark.parametrize("query", ["", "   ", "\t"])
    def test_empty_query_returns_nothing(self, engine, catalog, query):
        ranked = engine.rank(query, catalog)
        assert ranked.total == 0
        assert not ranked

    def test_idempotent(self, engine, catalog):
        first = engine.rank("vinfast", catalog)
        second = engine.rank("vinfast", catalog)
        assert first.records == second.records
        assert [c.score for c in first.candidates] == [c.score for c in second.candidates]

    def test_no_match(self, engine, catalog):
        assert engine.rank("zzzz", catalog).total == 0

    def test_display_truncation_keeps_full_list(self, engine):
        catalog = [make_record(str(i), f"Tesla Unit {i}") for i in range(7)]
        ranked = engine.rank("tesla", catalog)
        assert ranked.total == 7
        assert len(ranked.displayed) == 5
        assert len(ranked.displayed_records) == 5

    def test_search_returns_displayed_records(self, engine):
        catalog = [make_record(str(i), f"Tesla Unit {i}") for i in range(7)]
        assert len(engine.search("tesla", catalog)) == 5
        assert len(engine.search("tesla", catalog, max_results=2)) == 2

    def test_search_zero_max_results_returns_nothing(self, engine):
        catalog = [make_record(str(i), f"Tesla Unit {i}") for i in range(7)]
        assert engine.search("tesla", catalog, max_results=0) == []

    def test_accepts_catalog_object(self, engine, catalog):
        assert isinstance(catalog, VehicleCatalog)
        assert engine.rank("kia", catalog).records[0].id == "7"

    def test_elapsed_time_recorded(self, engine, catalog):
        engine.rank("tesla", catalog)
        assert engine.last_search_elapsed_seconds >= 0

    def test_non_string_query_raises(self, engine, catalog):
        with pytest.raises(InvalidSearchInputError):
            engine.rank(None, catalog)
        with pytest.raises(TypeError):
            engine.rank(42, catalog)

    def test_none_catalog_raises(self, engine):
        with pytest.raises(SearchError):
            engine.rank("tesla", None)

    def test_sample_catalog_tesla(self, engine):
        ranked = engine.rank("tesla", load_sample_catalog())
        assert [r.id for r in ranked.records] == ["v-005", "v-006"]

    def test_sample_catalog_location(self, engine):
        ranked = engine.rank("nang", load_sample_catalog())
        assert {r.id for r in ranked.records} == {"v-005", "v-008"}
        assert all(c.tier == "location_contains" for c in ranked.candidates)


class TestRankedResults:

    def test_empty_defaults(self):
        r = RankedResults(query="x")
        assert r.total == 0
        assert r.records == []
        assert len(r) == 0


# =============================================================================
# ResultFormatter
# =============================================================================

class TestHighlight:

    def test_first_case_insensitive_occurrence(self):
        assert ResultFormatter.highlight_match("Tesla Model 3", "model") == ("Tesla ", "Model", " 3")

    def test_only_first_occurrence(self):
        assert ResultFormatter.highlight_match("VF VF", "vf") == ("", "VF", " VF")

    def test_no_occurrence(self):
        assert ResultFormatter.highlight_match("Kia EV6", "tesla") == ("Kia EV6", "", "")

    def test_empty_term(self):
        assert ResultFormatter.highlight_match("Kia EV6", "  ") == ("Kia EV6", "", "")

    def test_render_highlight_default_emphasis(self):
        assert ResultFormatter.render_highlight("Tesla Model 3", "model") == "Tesla [Model] 3"

    def test_render_highlight_custom_emphasis(self):
        out = ResultFormatter.render_highlight("Kia EV6", "ev", emphasis=lambda s: f"<b>{s}</b>")
        assert out == "Kia <b>EV</b>6"


class TestFormatters:

    def test_console_lists_displayed(self, engine, catalog):
        out = ResultFormatter.format_console(engine.rank("tesla", catalog), explain=True)
        assert "#1  [Tesla] Model 3" in out
        assert "#2  [Tesla] Model S" in out
        assert "exact_brand" in out
        assert "2 matches" in out

    def test_console_empty_state(self, engine, catalog):
        out = ResultFormatter.format_console(engine.rank("zzzz", catalog))
        assert "No matching results found" in out

    def test_console_shows_truncation(self, engine):
        catalog = [make_record(str(i), f"Tesla Unit {i}") for i in range(7)]
        out = ResultFormatter.format_console(engine.rank("tesla", catalog), elapsed_time=0.01)
        assert "7 matches (showing 5)" in out
        assert "seconds" in out

    def test_json(self, engine, catalog):
        rows = json.loads(ResultFormatter.format_json(engine.rank("model", catalog), explain=True))
        assert [r["id"] for r in rows] == ["1", "2", "7"]
        assert rows[0]["score"] == 80
        assert rows[2]["tier"] == "station_or_type"

    def test_json_without_explain_has_no_tier(self, engine, catalog):
        rows = json.loads(ResultFormatter.format_json(engine.rank("tesla", catalog)))
        assert "tier" not in rows[0]

    def test_compact(self, engine, catalog):
        lines = ResultFormatter.format_compact(engine.rank("tesla", catalog)).splitlines()
        assert lines[0].startswith("1  Tesla Model 3  [90]")

    def test_suggestions_marks_selection(self, engine, catalog):
        ranked = engine.rank("tesla", catalog)
        items = build_suggestions(ranked.records, "tesla")
        out = ResultFormatter.format_suggestions(items, 1, "tesla").splitlines()
        assert len(out) == 4
        assert out[1].startswith(">")
        assert not out[0].startswith(">")
        assert "tesla - Electric vehicles" in out[2]

    def test_suggestions_hide_undisplayed_records(self, engine):
        catalog = [make_record(str(i), f"Tesla Unit {i}") for i in range(7)]
        ranked = engine.rank("tesla", catalog)
        items = build_suggestions(ranked.records, "tesla")
        out = ResultFormatter.format_suggestions(items, -1, "tesla").splitlines()
        assert len(items) == 9
        assert len(out) == 7

    def test_suggestions_states(self):
        assert "Searching..." in ResultFormatter.format_suggestions([], -1, "x", searching=True)
        assert "No matching results found" in ResultFormatter.format_suggestions([], -1, "x")

    def test_describe_record(self):
        r = make_record("1", "Kia EV6", "Can Tho", "Crossover", station="Ninh Kieu")
        assert describe_record(r) == "Kia EV6 (Crossover, Can Tho / Ninh Kieu, Active)"
        assert describe_record(None) == ""
