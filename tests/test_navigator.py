"""
Tests for rentsearch.core.navigator: list construction, keyboard and
pointer transitions, and commit semantics.
"""

import pytest
from rentsearch.core.config import SearchConfig
from rentsearch.core.navigator import (
    CommitTarget,
    SuggestionNavigator,
    build_suggestions,
    record_target,
    search_target,
)
from rentsearch.core.search import VehicleSearchEngine

from conftest import make_record


@pytest.fixture
def calls():
    return []


@pytest.fixture
def navigator(calls):
    return SuggestionNavigator(
        SearchConfig(),
        on_focus_input=lambda: calls.append("focus"),
        on_blur_input=lambda: calls.append("blur"),
        on_plain_search=lambda: calls.append("plain"),
    )


@pytest.fixture
def seven(navigator, seven_record_catalog):
    """Navigator loaded with 5 ranked records + 2 fixed suggestions, open."""
    ranked = VehicleSearchEngine().rank("vinfast", seven_record_catalog)
    navigator.load(ranked.records, "vinfast")
    navigator.open()
    return navigator


# =============================================================================
# List construction
# =============================================================================

class TestBuildSuggestions:

    def test_records_then_fixed(self):
        records = [make_record("1", "Tesla Model 3"), make_record("2", "Tesla Model S")]
        items = build_suggestions(records, "tesla")
        assert [i.kind for i in items] == ["record", "record", "suggestion", "suggestion"]
        assert [i.index for i in items] == [0, 1, 2, 3]
        assert items[0].target == "/vehicles/1"
        assert items[2].label == "tesla - Electric vehicles"
        assert items[2].target == "/vehicles?search=tesla"
        assert items[3].label == "tesla - Locations"
        assert items[3].target == "/stations?search=tesla"

    def test_no_records_no_items(self):
        assert build_suggestions([], "zzz") == []

    def test_fixed_indices_follow_full_ranked_list(self):
        records = [make_record(str(i), f"Tesla Unit {i}") for i in range(7)]
        items = build_suggestions(records, "tesla")
        assert len(items) == 9
        assert [i.displayed for i in items[:7]] == [True] * 5 + [False] * 2
        assert items[7].index == 7
        assert items[7].kind == "suggestion"

    def test_fixed_count_configurable(self):
        records = [make_record("1", "Kia EV6")]
        items = build_suggestions(records, "kia", SearchConfig(fixed_suggestion_count=3))
        assert items[-1].action == "services"
        assert len(build_suggestions(records, "kia", SearchConfig(fixed_suggestion_count=0))) == 1

    def test_targets_are_url_quoted(self):
        record = make_record("a/b", "Kia EV6")
        assert record_target(record) == "/vehicles/a%2Fb"
        assert search_target(" vf 8 ") == "/vehicles?search=vf%208"

    def test_to_dict(self):
        item = build_suggestions([make_record("1", "Kia EV6")], "kia")[0]
        assert item.to_dict()["record_id"] == "1"


# =============================================================================
# Transitions
# =============================================================================

class TestKeyboard:

    def test_total_items(self, seven):
        assert seven.total_items == 7
        assert seven.ranked_count == 5
        assert seven.selected_index == -1

    def test_down_walks_and_wraps(self, seven):
        seen = [seven.move_down() for _ in range(8)]
        assert seen == [0, 1, 2, 3, 4, 5, 6, 0]

    def test_up_from_first_returns_to_input(self, seven, calls):
        seven.move_down()
        assert seven.move_up() == -1
        assert calls == ["focus"]

    def test_up_at_input_stays(self, seven, calls):
        assert seven.move_up() == -1
        assert calls == []

    def test_up_moves_back(self, seven):
        for _ in range(3):
            seven.move_down()
        assert seven.move_up() == 1

    def test_escape_closes_and_blurs(self, seven, calls):
        seven.move_down()
        seven.escape()
        assert not seven.is_open
        assert seven.selected_index == -1
        assert calls == ["blur"]

    def test_hover_sets_index(self, seven):
        assert seven.hover(4) == 4
        assert seven.selected_item.kind == "record"
        assert seven.hover(6) == 6
        assert seven.selected_item.kind == "suggestion"

    def test_hover_out_of_range_ignored(self, seven):
        seven.hover(2)
        assert seven.hover(7) == 2
        assert seven.hover(-1) == 2

    def test_closed_panel_ignores_transitions(self, seven, calls):
        seven.close()
        seven.move_down()
        seven.hover(3)
        seven.escape()
        assert seven.selected_index == -1
        assert calls == []

    def test_empty_list_not_navigable(self, navigator):
        navigator.load([], "zzz")
        navigator.open()
        assert navigator.total_items == 0
        assert navigator.move_down() == -1

    def test_handle_key_names(self, seven):
        seven.handle_key("ArrowDown")
        seven.handle_key("down")
        assert seven.selected_index == 1
        seven.handle_key("ArrowUp")
        assert seven.selected_index == 0
        seven.handle_key("Tab")
        assert seven.selected_index == 0

    def test_load_resets_selection(self, seven):
        seven.move_down()
        seven.load([make_record("1", "Kia EV6")], "kia")
        assert seven.selected_index == -1
        assert seven.total_items == 3


# =============================================================================
# Commit
# =============================================================================

class TestCommit:

    def test_commit_record(self, seven):
        seven.hover(2)
        target = seven.commit("vinfast")
        assert target.kind == "record"
        assert target.record.id == "c"
        assert target.target == "/vehicles/c"
        assert not seven.is_open
        assert seven.selected_index == -1

    def test_commit_fixed_suggestion_uses_raw_text(self, seven):
        seven.hover(6)
        target = seven.commit("VinFast ")
        assert target == CommitTarget(kind="freeText", target="/stations?search=vinfast", text="VinFast ")

    def test_commit_fixed_suggestion_follows_live_text(self, navigator):
        navigator.load([make_record("1", "Kia EV6")], "kia")
        navigator.open()
        navigator.hover(1)
        target = navigator.commit("kia ev6")
        assert target.target == "/vehicles?search=kia%20ev6"
        assert target.text == "kia ev6"

    def test_commit_without_selection_is_free_text(self, navigator):
        records = [make_record("1", "Tesla Model 3"), make_record("2", "Tesla Model S")]
        navigator.load(records, "Tesla")
        navigator.open()
        target = navigator.commit("Tesla")
        assert target.kind == "freeText"
        assert target.text == "Tesla"
        assert target.target == "/vehicles?search=Tesla"
        assert target.record is None

    def test_commit_empty_query_plain_search(self, navigator, calls):
        assert navigator.commit("  ") is None
        assert calls == ["plain"]

    def test_enter_key_commits(self, seven):
        seven.handle_key("ArrowDown")
        target = seven.handle_key("Enter", "vinfast")
        assert target.kind == "record"
        assert target.record.id == "a"

    def test_commit_while_closed_is_free_text(self, seven):
        seven.close()
        assert seven.commit("vinfast").kind == "freeText"
