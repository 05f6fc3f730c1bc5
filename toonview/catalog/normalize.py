"""
Normalisation of raw character records.

Records coming from the Disney API are loosely shaped: identifiers live
under ``_id`` (sometimes ``id``), images under ``imageUrl`` or
``image``, list attributes may be missing or hold something other than a
list. Every function here is total: malformed input is coerced into
safe defaults instead of raising, because bad remote data is expected
rather than exceptional.
"""

from __future__ import annotations

import logging
import math
import uuid
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from ..config import settings
from .schemas import ARRAY_FIELDS, Character

logger = logging.getLogger(__name__)

# Keys consumed by the normaliser; everything else lands in ``extras``.
_KNOWN_KEYS = {"_id", "id", "name", "imageUrl", "image", "url", *ARRAY_FIELDS}


def raw_id(record: Dict[str, Any]) -> Any:
    """Return the identifier of a raw record (``_id`` first, then ``id``)."""
    value = record.get("_id")
    if value is None:
        value = record.get("id")
    return value


def id_key(value: Any) -> str:
    """String form of an identifier, used for all id comparisons."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def numeric_id(value: Any) -> Optional[Union[int, float]]:
    """Return the numeric value of an identifier or ``None``.

    Integers and integer strings stay exact ``int`` values, however large.
    Booleans, blank strings and non-finite values are not numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def _synthetic_id() -> str:
    return f"tmp-{uuid.uuid4().hex[:8]}"


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item if isinstance(item, str) else str(item) for item in value if item is not None]


def normalize_character(record: Dict[str, Any], source: str = "remote") -> Character:
    """Map a raw record into a ``Character``.

    The resulting character always has a non-empty ``name`` and
    ``image_url`` and every array attribute is a list.
    """
    identifier = raw_id(record)
    synthetic = identifier is None or (isinstance(identifier, str) and not identifier.strip())
    if synthetic:
        identifier = _synthetic_id()
    elif not isinstance(identifier, (int, str)) or isinstance(identifier, bool):
        # Floats and other scalars keep their printable form
        identifier = id_key(identifier)

    image = _clean_text(record.get("imageUrl")) or _clean_text(record.get("image"))
    url = _clean_text(record.get("url")) or None

    values: Dict[str, Any] = {
        "id": identifier,
        "name": _clean_text(record.get("name")) or "Unknown",
        "image_url": image or settings.PLACEHOLDER_IMAGE,
        "url": url,
        "extras": {k: v for k, v in record.items() if k not in _KNOWN_KEYS},
        "source": source,
        "synthetic_id": synthetic,
    }
    for api_name, attr in ARRAY_FIELDS.items():
        values[attr] = _string_list(record.get(api_name))
    return Character(**values)


def normalize_characters(records: Iterable[Any]) -> List[Character]:
    """Normalise a page of raw records.

    Entries that are not JSON objects are skipped. When the page holds
    the same identifier twice, only the first occurrence is kept.
    """
    characters: List[Character] = []
    seen: Set[str] = set()
    for record in records:
        if not isinstance(record, dict):
            logger.warning("Skipping non-object character record: %r", record)
            continue
        character = normalize_character(record)
        key = id_key(character.id)
        if key in seen:
            logger.warning("Dropping duplicate character id %s", key)
            continue
        seen.add(key)
        characters.append(character)
    return characters
