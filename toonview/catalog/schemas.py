"""
Pydantic schema definitions for the catalog module.

The ``Character`` model captures the fields required to render a
character card in the front-end. Field names follow Python conventions;
the camelCase names used by the Disney API are accepted as aliases and
used when serialising, so that the HTTP surface speaks the same
vocabulary as the remote source. ``CatalogView`` bundles everything the
presentation layer needs to draw one frame: the derived list of cards,
loading/error flags, the film vocabulary, the active parameters and the
current form draft.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Literal

from ..config import settings

SortMethod = Literal["id", "name"]
FieldKind = Literal["scalar", "list"]
CharacterId = Union[int, str]

# Sentinel used by the film selector to disable the film filter
ALL_FILMS = "all"

# Ordered mapping of list-valued attributes: API name -> attribute name
ARRAY_FIELDS: Dict[str, str] = {
    "films": "films",
    "shortFilms": "short_films",
    "tvShows": "tv_shows",
    "videoGames": "video_games",
    "parkAttractions": "park_attractions",
    "allies": "allies",
    "enemies": "enemies",
}

# Form fields present before any data has been fetched
DEFAULT_FIELDS: Tuple[str, ...] = ("name", "imageUrl", *ARRAY_FIELDS, "url")


class Character(BaseModel):
    """A single catalogue character.

    ``id`` is either the integer identifier assigned by the remote API
    (or by the local store for client-created entries) or a string.
    When the raw record had no identifier at all, a throwaway string id
    is synthesised and ``synthetic_id`` is set; such ids only give the
    card a rendering identity and must not be treated as stable.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: CharacterId
    name: str = "Unknown"
    image_url: str = Field(default=settings.PLACEHOLDER_IMAGE, alias="imageUrl")
    films: List[str] = Field(default_factory=list)
    short_films: List[str] = Field(default_factory=list, alias="shortFilms")
    tv_shows: List[str] = Field(default_factory=list, alias="tvShows")
    video_games: List[str] = Field(default_factory=list, alias="videoGames")
    park_attractions: List[str] = Field(default_factory=list, alias="parkAttractions")
    allies: List[str] = Field(default_factory=list)
    enemies: List[str] = Field(default_factory=list)
    url: Optional[str] = None
    # Any other key of the remote payload, passed through untouched.
    extras: Dict[str, Any] = Field(default_factory=dict)
    source: Literal["remote", "local"] = "remote"
    synthetic_id: bool = False


class PageInfo(BaseModel):
    """Pagination metadata returned by the remote source alongside a page."""

    count: Optional[int] = None
    total_pages: Optional[int] = Field(default=None, alias="totalPages")
    previous_page: Optional[str] = Field(default=None, alias="previousPage")
    next_page: Optional[str] = Field(default=None, alias="nextPage")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class CharacterPage(BaseModel):
    """One page of raw records as returned by the catalog client."""

    records: List[Any] = Field(default_factory=list)
    info: PageInfo = Field(default_factory=PageInfo)


class CatalogParams(BaseModel):
    """User-chosen filter, sort and pagination parameters."""

    model_config = ConfigDict(frozen=True)

    page: int = 1
    page_size: int = settings.DEFAULT_PAGE_SIZE
    sort_method: SortMethod = "id"
    selected_film: str = ALL_FILMS
    search_term: str = ""


class FormField(BaseModel):
    """A form input as shown to the user."""

    name: str
    kind: FieldKind
    value: str = ""


class CharacterCard(BaseModel):
    """A character plus the counters shown on its card."""

    character: Character
    film_count: int = 0
    tv_show_count: int = 0


class CatalogView(BaseModel):
    """Everything the presentation layer needs to render the catalogue."""

    characters: List[CharacterCard]
    loading: bool
    error: Optional[str] = None
    films: List[str]
    params: CatalogParams
    info: PageInfo
    form: List[FormField]


class ParamsUpdate(BaseModel):
    """Partial update of the catalogue parameters (HTTP surface)."""

    page: Optional[int] = None
    page_size: Optional[int] = None
    sort_method: Optional[str] = None
    selected_film: Optional[str] = None
    search_term: Optional[str] = None


class FieldUpdate(BaseModel):
    """New draft value for one form field (HTTP surface)."""

    value: str = ""
