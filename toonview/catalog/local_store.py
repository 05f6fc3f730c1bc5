"""
Client-only additions and removals layered over the fetched page.

Nothing here talks to the remote source: a created character is visible
immediately and a removal hides a card without any round-trip. The
store is immutable; ``add`` and ``remove`` return a new store.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, FrozenSet, Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .normalize import id_key, normalize_character, numeric_id
from .schemas import Character, CharacterId

logger = logging.getLogger(__name__)


def next_local_id(characters: Iterable[Character], now_ms: int) -> int:
    """Return an id greater than every numeric id in ``characters``.

    When no numeric id exists, ``now_ms`` (a millisecond timestamp) is
    used instead.
    """
    numbers = [n for n in (numeric_id(c.id) for c in characters) if n is not None]
    if not numbers:
        return int(now_ms)
    highest = max(numbers)
    if isinstance(highest, float):
        highest = math.floor(highest)
    return highest + 1


class LocalMutations(BaseModel):
    """Local additions (newest first) and ids of hidden fetched characters."""

    model_config = ConfigDict(frozen=True)

    additions: Tuple[Character, ...] = ()
    removed: FrozenSet[str] = Field(default_factory=frozenset)

    def apply(self, fetched: Iterable[Character]) -> List[Character]:
        """Return the working set: additions first, then visible fetched characters."""
        taken = {id_key(c.id) for c in self.additions}
        working = list(self.additions)
        for character in fetched:
            key = id_key(character.id)
            if key in self.removed or key in taken:
                continue
            taken.add(key)
            working.append(character)
        return working

    def add(self, record: Dict[str, Any], fetched: Iterable[Character], now_ms: int) -> "LocalMutations":
        """Create a character from a converted form draft and prepend it."""
        # Hidden fetched characters count too: local ids stay disjoint from remote ids.
        new_id = next_local_id(list(self.additions) + list(fetched), now_ms)
        payload = {k: v for k, v in record.items() if k not in ("_id", "id")}
        payload["_id"] = new_id
        character = normalize_character(payload, source="local")
        logger.info("Added local character %s (%s)", new_id, character.name)
        return LocalMutations(additions=(character,) + self.additions, removed=self.removed)

    def remove(self, character_id: CharacterId, fetched: Iterable[Character]) -> "LocalMutations":
        """Hide the character whose id stringifies to ``character_id``.

        Unknown ids leave the store unchanged.
        """
        key = id_key(character_id)
        if any(id_key(c.id) == key for c in self.additions):
            additions = tuple(c for c in self.additions if id_key(c.id) != key)
            return LocalMutations(additions=additions, removed=self.removed)
        if key not in self.removed and any(id_key(c.id) == key for c in fetched):
            return LocalMutations(additions=self.additions, removed=self.removed | {key})
        logger.debug("Remove ignored, no character with id %s", key)
        return self
