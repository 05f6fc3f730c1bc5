"""
Catalogue state and the reducer that updates it.

``CatalogState`` is an immutable snapshot of everything the catalogue
knows: the active parameters, the last accepted page, local mutations,
the form draft and the loading/error flags. Every change goes through
``reduce(state, action)``, which returns a new state. Fetch results
carry the id of the request that produced them and are dropped unless
that request is the most recent one, so a slow response can never
overwrite a newer page.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..config import settings
from .disney_service import clamp_page, clamp_page_size
from .form import FormDraft
from .local_store import LocalMutations
from .normalize import normalize_characters
from .schemas import (
    ALL_FILMS,
    CatalogParams,
    CatalogView,
    Character,
    CharacterId,
    CharacterPage,
    PageInfo,
)
from .view import derive_view, film_vocabulary, to_cards

logger = logging.getLogger(__name__)


class CatalogState(BaseModel):
    model_config = ConfigDict(frozen=True)

    params: CatalogParams = Field(default_factory=CatalogParams)
    fetched: Tuple[Character, ...] = ()
    info: PageInfo = Field(default_factory=PageInfo)
    local: LocalMutations = Field(default_factory=LocalMutations)
    form: FormDraft = Field(default_factory=FormDraft.initial)
    loading: bool = False
    error: Optional[str] = None
    latest_request: int = 0


# ---------------------------------------------------------------------------
# Actions


class Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class SetPage(Action):
    page: Any


class SetPageSize(Action):
    page_size: Any


class SetSortMethod(Action):
    sort_method: Any


class SetSelectedFilm(Action):
    film: Optional[str] = None


class SetSearchTerm(Action):
    term: Optional[str] = None


class FetchStarted(Action):
    request_id: int


class FetchSucceeded(Action):
    request_id: int
    page: CharacterPage


class FetchFailed(Action):
    request_id: int
    message: str


class SetField(Action):
    name: str
    value: Any = ""


class SubmitForm(Action):
    now_ms: int = Field(default_factory=lambda: int(time.time() * 1000))


class RemoveCharacter(Action):
    character_id: CharacterId


# ---------------------------------------------------------------------------
# Transitions


def _with_params(state: CatalogState, **changes: Any) -> CatalogState:
    return state.model_copy(update={"params": state.params.model_copy(update=changes)})


def _set_page(state: CatalogState, action: SetPage) -> CatalogState:
    return _with_params(state, page=clamp_page(action.page))


def _set_page_size(state: CatalogState, action: SetPageSize) -> CatalogState:
    size = clamp_page_size(action.page_size)
    if size == state.params.page_size:
        return state
    return _with_params(state, page_size=size, page=1)


def _set_sort_method(state: CatalogState, action: SetSortMethod) -> CatalogState:
    method = action.sort_method if action.sort_method in ("id", "name") else "id"
    return _with_params(state, sort_method=method)


def _set_selected_film(state: CatalogState, action: SetSelectedFilm) -> CatalogState:
    return _with_params(state, selected_film=action.film or ALL_FILMS)


def _set_search_term(state: CatalogState, action: SetSearchTerm) -> CatalogState:
    term = action.term or ""
    if term == state.params.search_term:
        return state
    return _with_params(state, search_term=term, page=1)


def _fetch_started(state: CatalogState, action: FetchStarted) -> CatalogState:
    return state.model_copy(
        update={"latest_request": action.request_id, "loading": True, "error": None}
    )


def _is_stale(state: CatalogState, request_id: int) -> bool:
    if request_id != state.latest_request:
        logger.debug(
            "Discarding stale response for request %s (latest is %s)",
            request_id,
            state.latest_request,
        )
        return True
    return False


def _fetch_succeeded(state: CatalogState, action: FetchSucceeded) -> CatalogState:
    if _is_stale(state, action.request_id):
        return state
    records = action.page.records
    form = state.form
    sample = next((r for r in records if isinstance(r, dict)), None)
    if sample is not None:
        form = form.extend_from_sample(sample)
    # Local additions and removals do not survive a new page.
    return state.model_copy(
        update={
            "fetched": tuple(normalize_characters(records)),
            "info": action.page.info,
            "local": LocalMutations(),
            "form": form,
            "loading": False,
            "error": None,
        }
    )


def _fetch_failed(state: CatalogState, action: FetchFailed) -> CatalogState:
    if _is_stale(state, action.request_id):
        return state
    return state.model_copy(update={"loading": False, "error": action.message})


def _set_field(state: CatalogState, action: SetField) -> CatalogState:
    return state.model_copy(update={"form": state.form.set_field(action.name, action.value)})


def _submit_form(state: CatalogState, action: SubmitForm) -> CatalogState:
    record = state.form.to_entity()
    local = state.local.add(record, state.fetched, action.now_ms)
    return state.model_copy(update={"local": local, "form": state.form.reset()})


def _remove_character(state: CatalogState, action: RemoveCharacter) -> CatalogState:
    local = state.local.remove(action.character_id, state.fetched)
    if local is state.local:
        return state
    return state.model_copy(update={"local": local})


_HANDLERS: Dict[type, Callable[[CatalogState, Any], CatalogState]] = {
    SetPage: _set_page,
    SetPageSize: _set_page_size,
    SetSortMethod: _set_sort_method,
    SetSelectedFilm: _set_selected_film,
    SetSearchTerm: _set_search_term,
    FetchStarted: _fetch_started,
    FetchSucceeded: _fetch_succeeded,
    FetchFailed: _fetch_failed,
    SetField: _set_field,
    SubmitForm: _submit_form,
    RemoveCharacter: _remove_character,
}


def reduce(state: CatalogState, action: Action) -> CatalogState:
    """Apply ``action`` to ``state`` and return the resulting state."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unsupported action: {type(action).__name__}")
    return handler(state, action)


# ---------------------------------------------------------------------------
# Selectors


def server_params(state: CatalogState) -> Tuple[int, int, str]:
    """Parameters sent to the remote source; a change requires a new fetch."""
    p = state.params
    return p.page, p.page_size, p.search_term


def working_set(state: CatalogState) -> List[Character]:
    return state.local.apply(state.fetched)


def visible_characters(state: CatalogState) -> List[Character]:
    """Derived view; empty while an error is active."""
    if state.error is not None:
        return []
    return derive_view(working_set(state), state.params.selected_film, state.params.sort_method)


def snapshot(state: CatalogState) -> CatalogView:
    shown = [] if state.error is not None else working_set(state)
    return CatalogView(
        characters=to_cards(visible_characters(state)),
        loading=state.loading,
        error=state.error,
        films=film_vocabulary(shown),
        params=state.params,
        info=state.info,
        form=state.form.form_fields(),
    )


def initial_state(page_size: Optional[int] = None) -> CatalogState:
    size = clamp_page_size(settings.DEFAULT_PAGE_SIZE if page_size is None else page_size)
    return CatalogState(params=CatalogParams(page_size=size))
