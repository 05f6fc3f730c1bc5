"""
Derivation of the rendered list from the working set.

These functions are pure: the same characters and parameters always
produce the same ordered output, so they are recomputed on every read
instead of being cached.
"""

from __future__ import annotations

import unicodedata
from typing import Iterable, List, Tuple

from .normalize import numeric_id
from .schemas import ALL_FILMS, Character, CharacterCard


def _collation_key(name: str) -> Tuple[str, str, str]:
    """Case-insensitive, accent-insensitive ordering key.

    Names that differ only by case order lowercase first; names that
    differ only by accents order unaccented first.
    """
    text = name or ""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return base, text.casefold(), text.swapcase()


def filter_by_film(characters: Iterable[Character], film: str) -> List[Character]:
    if film == ALL_FILMS:
        return list(characters)
    return [c for c in characters if film in c.films]


def sort_characters(characters: Iterable[Character], method: str) -> List[Character]:
    """Stable sort by name, or by numeric id (non-numeric ids count as 0)."""
    if method == "name":
        return sorted(characters, key=lambda c: _collation_key(c.name))
    return sorted(characters, key=lambda c: numeric_id(c.id) or 0.0)


def derive_view(characters: Iterable[Character], selected_film: str, sort_method: str) -> List[Character]:
    return sort_characters(filter_by_film(characters, selected_film), sort_method)


def film_vocabulary(characters: Iterable[Character]) -> List[str]:
    """``all`` followed by every distinct film name, in first-seen order."""
    films = [ALL_FILMS]
    seen = {ALL_FILMS}
    for character in characters:
        for film in character.films:
            if film and film not in seen:
                seen.add(film)
                films.append(film)
    return films


def to_cards(characters: Iterable[Character]) -> List[CharacterCard]:
    return [
        CharacterCard(character=c, film_count=len(c.films), tv_show_count=len(c.tv_shows))
        for c in characters
    ]
