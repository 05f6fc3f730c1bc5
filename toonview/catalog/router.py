"""
Route definitions for the catalogue API.

Endpoints under /api/catalog:
- GET    /view                          : derived cards, flags, films, params, form
- GET    /films                         : film vocabulary for the filter selector
- PUT    /params                        : change page/page size/search/sort/film
- PUT    /form/{field}                  : set one form field
- POST   /form/submit                   : create a local character from the form
- DELETE /characters/{character_id}     : hide a character (client only)
- POST   /reload                        : fetch the current page again
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends

from .schemas import CatalogView, FieldUpdate, ParamsUpdate
from .session import CatalogSession
from . import state as st

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/catalog", tags=["catalog"])

# ---------------------------------------------------------------------------
# Session management
#
# The viewer is single-user: one ``CatalogSession`` lives for the whole
# process and every request reads or updates it. Local edits live in
# this object only and are lost on restart.

_session: Optional[CatalogSession] = None


def get_session() -> CatalogSession:
    global _session
    if _session is None:
        _session = CatalogSession()
    return _session


@router.get("/view", response_model=CatalogView)
async def get_view(session: CatalogSession = Depends(get_session)) -> CatalogView:
    return session.snapshot()


@router.get("/films", response_model=List[str])
async def list_films(session: CatalogSession = Depends(get_session)) -> List[str]:
    return session.snapshot().films


@router.put("/params", response_model=CatalogView)
async def update_params(
    update: ParamsUpdate = Body(...),
    session: CatalogSession = Depends(get_session),
) -> CatalogView:
    """Apply the provided parameters, fetching once when needed.

    Changing the page size or search term returns to the first page
    unless a page is given in the same request.
    """
    actions: List[st.Action] = []
    if update.page_size is not None:
        actions.append(st.SetPageSize(page_size=update.page_size))
    if update.search_term is not None:
        actions.append(st.SetSearchTerm(term=update.search_term))
    if update.page is not None:
        actions.append(st.SetPage(page=update.page))
    if update.sort_method is not None:
        actions.append(st.SetSortMethod(sort_method=update.sort_method))
    if update.selected_film is not None:
        actions.append(st.SetSelectedFilm(film=update.selected_film))
    await session.update(*actions)
    return session.snapshot()


@router.put("/form/{field}", response_model=CatalogView)
async def set_form_field(
    field: str,
    update: FieldUpdate = Body(...),
    session: CatalogSession = Depends(get_session),
) -> CatalogView:
    session.set_field(field, update.value)
    return session.snapshot()


@router.post("/form/submit", response_model=CatalogView)
async def submit_form(session: CatalogSession = Depends(get_session)) -> CatalogView:
    session.submit()
    return session.snapshot()


@router.delete("/characters/{character_id}", response_model=CatalogView)
async def remove_character(character_id: str, session: CatalogSession = Depends(get_session)) -> CatalogView:
    """Remove a character from the displayed list.

    Unknown ids are ignored; the current view is returned either way.
    """
    session.remove(character_id)
    return session.snapshot()


@router.post("/reload", response_model=CatalogView)
async def reload_catalog(session: CatalogSession = Depends(get_session)) -> CatalogView:
    await session.reload()
    return session.snapshot()
