"""
Async driver around the catalogue reducer.

``CatalogSession`` owns the current ``CatalogState`` and the function
used to fetch pages. Setters dispatch actions; when an action changes
the page, page size or search term a new fetch is issued. Several
fetches may be outstanding at once, each tagged with an increasing
request id, and only the latest one is allowed to update the state.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Awaitable, Callable, Optional

from .disney_service import fetch_characters
from .errors import CatalogError
from .schemas import CatalogView, CharacterId, CharacterPage
from . import state as st

logger = logging.getLogger(__name__)

Fetcher = Callable[[int, int, str], Awaitable[CharacterPage]]


async def _default_fetcher(page: int, page_size: int, search_term: str) -> CharacterPage:
    return await fetch_characters(page=page, page_size=page_size, search_term=search_term)


class CatalogSession:
    """Holds the catalogue state for one viewer."""

    def __init__(self, fetcher: Optional[Fetcher] = None, page_size: Optional[int] = None):
        self._fetcher = fetcher or _default_fetcher
        self._request_ids = itertools.count(1)
        self.state = st.initial_state(page_size)

    def dispatch(self, action: st.Action) -> st.CatalogState:
        self.state = st.reduce(self.state, action)
        return self.state

    def snapshot(self) -> CatalogView:
        return st.snapshot(self.state)

    async def refresh(self) -> None:
        """Fetch the page for the current parameters.

        Failures are recorded in the state rather than raised.
        """
        request_id = next(self._request_ids)
        page, page_size, search_term = st.server_params(self.state)
        self.dispatch(st.FetchStarted(request_id=request_id))
        try:
            result = await self._fetcher(page, page_size, search_term)
        except CatalogError as exc:
            logger.warning("Fetch %s failed: %s", request_id, exc)
            self.dispatch(st.FetchFailed(request_id=request_id, message=str(exc) or type(exc).__name__))
            return
        except Exception as exc:
            logger.exception("Fetch %s failed unexpectedly", request_id)
            self.dispatch(st.FetchFailed(request_id=request_id, message=f"Unexpected error: {type(exc).__name__}"))
            return
        self.dispatch(st.FetchSucceeded(request_id=request_id, page=result))

    async def reload(self) -> None:
        """Manual recovery: clears any error and fetches again."""
        await self.refresh()

    async def update(self, *actions: st.Action) -> None:
        """Dispatch ``actions`` and fetch once if the server parameters changed."""
        before = st.server_params(self.state)
        for action in actions:
            self.dispatch(action)
        if st.server_params(self.state) == before:
            return
        if self.state.error is not None:
            logger.info("Parameters changed while in error state; waiting for reload")
            return
        await self.refresh()

    async def set_page(self, page: Any) -> None:
        await self.update(st.SetPage(page=page))

    async def set_page_size(self, page_size: Any) -> None:
        await self.update(st.SetPageSize(page_size=page_size))

    async def set_search_term(self, term: Optional[str]) -> None:
        await self.update(st.SetSearchTerm(term=term))

    def set_sort_method(self, method: Any) -> None:
        self.dispatch(st.SetSortMethod(sort_method=method))

    def set_selected_film(self, film: Optional[str]) -> None:
        self.dispatch(st.SetSelectedFilm(film=film))

    def set_field(self, name: str, value: Any) -> None:
        self.dispatch(st.SetField(name=name, value=value))

    def submit(self) -> None:
        self.dispatch(st.SubmitForm())

    def remove(self, character_id: CharacterId) -> None:
        self.dispatch(st.RemoveCharacter(character_id=character_id))
