"""Tests for the catalogue reducer and selectors."""
from __future__ import annotations

import pytest

from toonview.catalog import state as st
from toonview.catalog.normalize import id_key
from toonview.catalog.schemas import PageInfo
from toonview.config import settings

from tests.conftest import make_page


def _loaded(records, request_id=1):
    state = st.initial_state()
    state = st.reduce(state, st.FetchStarted(request_id=request_id))
    return st.reduce(state, st.FetchSucceeded(request_id=request_id, page=make_page(records)))


class TestParams:

    def test_initial_params(self):
        params = st.initial_state().params
        assert params.page == 1
        assert params.page_size == settings.DEFAULT_PAGE_SIZE
        assert params.sort_method == "id"
        assert params.selected_film == "all"
        assert params.search_term == ""

    def test_page_is_clamped(self):
        state = st.reduce(st.initial_state(), st.SetPage(page=0))
        assert state.params.page == 1
        state = st.reduce(state, st.SetPage(page="3"))
        assert state.params.page == 3

    def test_page_size_outside_allowed_set(self):
        state = st.reduce(st.initial_state(12), st.SetPageSize(page_size=13))
        assert state.params.page_size == settings.DEFAULT_PAGE_SIZE

    def test_page_size_change_returns_to_first_page(self):
        state = st.reduce(st.initial_state(), st.SetPage(page=4))
        state = st.reduce(state, st.SetPageSize(page_size=24))
        assert state.params.page == 1
        assert state.params.page_size == 24

    def test_search_term_change_returns_to_first_page(self):
        state = st.reduce(st.initial_state(), st.SetPage(page=4))
        assert st.reduce(state, st.SetSearchTerm(term="")).params.page == 4
        assert st.reduce(state, st.SetSearchTerm(term="mickey")).params.page == 1

    def test_unknown_sort_method_falls_back_to_id(self):
        state = st.reduce(st.initial_state(), st.SetSortMethod(sort_method="name"))
        assert state.params.sort_method == "name"
        state = st.reduce(state, st.SetSortMethod(sort_method="rating"))
        assert state.params.sort_method == "id"

    def test_blank_film_means_all(self):
        state = st.reduce(st.initial_state(), st.SetSelectedFilm(film=""))
        assert state.params.selected_film == "all"

    def test_setters_do_not_mutate(self):
        state = st.initial_state()
        st.reduce(state, st.SetPage(page=9))
        assert state.params.page == 1


class TestFetchLifecycle:

    def test_started_sets_loading(self):
        state = st.reduce(st.initial_state(), st.FetchStarted(request_id=1))
        assert state.loading is True
        assert state.latest_request == 1

    def test_success_replaces_working_set(self, sample_records):
        state = _loaded(sample_records)
        assert state.loading is False
        assert state.error is None
        assert [c.id for c in st.working_set(state)] == [4703, 1947, 2700]

    def test_success_keeps_page_info(self, sample_records):
        state = st.reduce(st.initial_state(), st.FetchStarted(request_id=1))
        page = make_page(sample_records, count=3, total_pages=1)
        state = st.reduce(state, st.FetchSucceeded(request_id=1, page=page))
        assert state.info == PageInfo(count=3, total_pages=1)

    def test_stale_success_is_discarded(self, sample_records):
        state = st.reduce(st.initial_state(), st.FetchStarted(request_id=1))
        state = st.reduce(state, st.FetchStarted(request_id=2))
        state = st.reduce(state, st.FetchSucceeded(request_id=2, page=make_page(sample_records[:1])))
        state = st.reduce(state, st.FetchSucceeded(request_id=1, page=make_page(sample_records[1:])))
        assert [c.id for c in st.working_set(state)] == [4703]

    def test_stale_failure_is_discarded(self, sample_records):
        state = st.reduce(st.initial_state(), st.FetchStarted(request_id=1))
        state = st.reduce(state, st.FetchStarted(request_id=2))
        state = st.reduce(state, st.FetchSucceeded(request_id=2, page=make_page(sample_records)))
        state = st.reduce(state, st.FetchFailed(request_id=1, message="boom"))
        assert state.error is None

    def test_failure_sets_error_and_hides_data(self, sample_records):
        state = _loaded(sample_records)
        state = st.reduce(state, st.FetchStarted(request_id=2))
        state = st.reduce(state, st.FetchFailed(request_id=2, message="Network error"))
        assert state.loading is False
        assert state.error == "Network error"
        assert st.visible_characters(state) == []
        view = st.snapshot(state)
        assert view.characters == []
        assert view.films == ["all"]

    def test_first_fetch_extends_form(self, sample_records):
        state = _loaded(sample_records)
        assert "sourceUrl" in state.form.registry
        assert state.form.value("sourceUrl") == "https://disney.fandom.com/wiki/Mickey_Mouse"

    def test_later_fetch_does_not_extend_form(self, sample_records):
        state = _loaded(sample_records)
        state = st.reduce(state, st.FetchStarted(request_id=2))
        state = st.reduce(state, st.FetchSucceeded(request_id=2, page=make_page([{"_id": 1, "brandNew": "x"}])))
        assert "brandNew" not in state.form.registry

    def test_empty_first_fetch_leaves_form_open_to_discovery(self, sample_records):
        state = _loaded([])
        state = st.reduce(state, st.FetchStarted(request_id=2))
        state = st.reduce(state, st.FetchSucceeded(request_id=2, page=make_page(sample_records)))
        assert "sourceUrl" in state.form.registry

    def test_new_fetch_discards_local_edits(self, sample_records):
        state = _loaded(sample_records)
        state = st.reduce(state, st.SetField(name="name", value="Test"))
        state = st.reduce(state, st.SubmitForm(now_ms=1))
        state = st.reduce(state, st.RemoveCharacter(character_id="1947"))
        state = st.reduce(state, st.FetchStarted(request_id=2))
        state = st.reduce(state, st.FetchSucceeded(request_id=2, page=make_page(sample_records)))
        assert [c.id for c in st.working_set(state)] == [4703, 1947, 2700]


class TestMutations:

    def test_submit_prepends_and_resets_form(self, sample_records):
        state = _loaded(sample_records)
        state = st.reduce(state, st.SetField(name="name", value="Test"))
        state = st.reduce(state, st.SetField(name="films", value="A, B, C"))
        state = st.reduce(state, st.SubmitForm(now_ms=1))
        first = st.working_set(state)[0]
        assert first.name == "Test"
        assert first.films == ["A", "B", "C"]
        assert first.id == 4704
        assert state.form.value("name") == ""
        assert state.form.value("films") == ""
        assert "sourceUrl" in state.form.registry

    def test_submit_before_any_fetch_uses_timestamp(self):
        state = st.reduce(st.initial_state(), st.SubmitForm(now_ms=1700000000000))
        assert st.working_set(state)[0].id == 1700000000000

    def test_remove_matches_string_id(self):
        state = _loaded([{"_id": 3}, {"_id": 7}, {"_id": 2}])
        state = st.reduce(state, st.RemoveCharacter(character_id="7"))
        assert [c.id for c in st.working_set(state)] == [3, 2]

    def test_remove_unknown_id_is_noop(self):
        state = _loaded([{"_id": 3}, {"_id": 7}, {"_id": 2}])
        assert st.reduce(state, st.RemoveCharacter(character_id="99")) is state

    def test_ids_unique_after_mixed_sequence(self, sample_records):
        state = _loaded(sample_records)
        actions = [
            st.SubmitForm(now_ms=1),
            st.RemoveCharacter(character_id=4703),
            st.SubmitForm(now_ms=1),
            st.RemoveCharacter(character_id="4704"),
            st.SubmitForm(now_ms=1),
            st.FetchStarted(request_id=2),
            st.FetchSucceeded(request_id=2, page=make_page(sample_records)),
            st.SubmitForm(now_ms=1),
        ]
        for action in actions:
            state = st.reduce(state, action)
            keys = [id_key(c.id) for c in st.working_set(state)]
            assert len(keys) == len(set(keys))


class TestSnapshot:

    def test_view_applies_film_and_sort(self, sample_records):
        state = _loaded(sample_records)
        state = st.reduce(state, st.SetSelectedFilm(film="Fantasia"))
        state = st.reduce(state, st.SetSortMethod(sort_method="name"))
        view = st.snapshot(state)
        assert [card.character.name for card in view.characters] == ["Donald Duck", "Mickey Mouse"]
        assert view.films[0] == "all"
        assert view.params.selected_film == "Fantasia"

    def test_view_is_recomputed_after_removal(self, sample_records):
        state = _loaded(sample_records)
        before = st.snapshot(state)
        state = st.reduce(state, st.RemoveCharacter(character_id=2700))
        after = st.snapshot(state)
        assert len(before.characters) == 3
        assert len(after.characters) == 2
        assert "A Goofy Movie" not in after.films


def test_unsupported_action():
    with pytest.raises(TypeError):
        st.reduce(st.initial_state(), st.Action())
