"""
Test configuration and fixtures for toonview tests.
"""
import asyncio
from typing import Dict, List, Tuple

import pytest

from toonview.catalog.schemas import CharacterPage, PageInfo


MICKEY = {
    "_id": 4703,
    "films": ["Fantasia", "Fun and Fancy Free"],
    "shortFilms": ["Steamboat Willie"],
    "tvShows": ["Mickey Mouse Clubhouse"],
    "videoGames": ["Kingdom Hearts"],
    "parkAttractions": [],
    "allies": ["Minnie Mouse"],
    "enemies": ["Pete"],
    "sourceUrl": "https://disney.fandom.com/wiki/Mickey_Mouse",
    "name": "Mickey Mouse",
    "imageUrl": "https://static.wikia.nocookie.net/mickey.png",
    "createdAt": "2021-04-12T02:07:49.376Z",
    "updatedAt": "2021-12-20T20:39:18.051Z",
    "url": "https://api.disneyapi.dev/characters/4703",
    "__v": 0,
}

DONALD = {
    "_id": 1947,
    "films": ["Fantasia", "The Three Caballeros"],
    "tvShows": ["DuckTales"],
    "name": "Donald Duck",
    "imageUrl": "https://static.wikia.nocookie.net/donald.png",
}

GOOFY = {
    "_id": 2700,
    "films": ["A Goofy Movie"],
    "name": "goofy",
}


@pytest.fixture
def sample_records() -> List[Dict]:
    return [dict(MICKEY), dict(DONALD), dict(GOOFY)]


def make_page(records, count=None, total_pages=None) -> CharacterPage:
    return CharacterPage(records=list(records), info=PageInfo(count=count, total_pages=total_pages))


class FakeFetcher:
    """Fetcher stand-in that returns canned pages.

    ``pages`` maps ``(page, page_size, search_term)`` to a list of
    records or to an exception instance. When ``gated`` is set, every
    call waits on an event the test releases with ``release(key)``.
    """

    def __init__(self, pages=None, default=None, gated=False):
        self.pages = pages or {}
        self.default = default if default is not None else []
        self.gated = gated
        self.calls: List[Tuple[int, int, str]] = []
        self._gates: Dict[Tuple[int, int, str], asyncio.Event] = {}

    def _gate(self, key):
        if key not in self._gates:
            self._gates[key] = asyncio.Event()
        return self._gates[key]

    def release(self, key):
        self._gate(key).set()

    async def __call__(self, page, page_size, search_term):
        key = (page, page_size, search_term)
        self.calls.append(key)
        if self.gated:
            await self._gate(key).wait()
        result = self.pages.get(key, self.default)
        if isinstance(result, Exception):
            raise result
        return make_page(result)


@pytest.fixture
def fake_fetcher(sample_records):
    return FakeFetcher(default=sample_records)
