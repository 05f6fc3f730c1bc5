"""
Form state for creating a character on the client.

The set of form fields starts from ``DEFAULT_FIELDS`` and grows when the
first fetched record reveals keys the form does not know yet. Each field
carries a kind tag (``scalar`` or ``list``) decided once, when the field
is first registered; list fields are edited as comma separated text.

All operations return new objects; nothing is mutated in place.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .schemas import ARRAY_FIELDS, DEFAULT_FIELDS, FieldKind, FormField

# Identifier keys are assigned by the local store, never typed in.
_IDENTIFIER_KEYS = {"_id", "id"}


def _default_entries() -> Tuple[Tuple[str, FieldKind], ...]:
    return tuple((name, "list" if name in ARRAY_FIELDS else "scalar") for name in DEFAULT_FIELDS)


class FieldRegistry(BaseModel):
    """Ordered registry of known form fields and their kinds."""

    model_config = ConfigDict(frozen=True)

    entries: Tuple[Tuple[str, FieldKind], ...] = Field(default_factory=_default_entries)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.entries)

    def kind(self, name: str) -> FieldKind:
        for field_name, kind in self.entries:
            if field_name == name:
                return kind
        return "scalar"

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def observe(self, sample: Mapping[str, Any]) -> "FieldRegistry":
        """Register every key of ``sample`` that is not known yet."""
        known = set(self.names)
        added = []
        for key, value in sample.items():
            if key in _IDENTIFIER_KEYS or key in known:
                continue
            known.add(key)
            added.append((key, "list" if isinstance(value, (list, tuple)) else "scalar"))
        if not added:
            return self
        return FieldRegistry(entries=self.entries + tuple(added))


def _sample_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join("" if v is None else str(v) for v in value)
    return str(value)


class FormDraft(BaseModel):
    """An in-progress new character: field name -> raw string input."""

    model_config = ConfigDict(frozen=True)

    registry: FieldRegistry = Field(default_factory=FieldRegistry)
    values: Dict[str, str] = Field(default_factory=dict)
    discovered: bool = False

    @classmethod
    def initial(cls) -> "FormDraft":
        registry = FieldRegistry()
        return cls(registry=registry, values={name: "" for name in registry.names})

    def value(self, name: str) -> str:
        return self.values.get(name, "")

    def form_fields(self) -> List[FormField]:
        return [
            FormField(name=name, kind=kind, value=self.value(name))
            for name, kind in self.registry.entries
        ]

    def extend_from_sample(self, sample: Mapping[str, Any]) -> "FormDraft":
        """Add fields seen in ``sample``, pre-filled with the sample's values.

        Runs at most once per draft lifetime; later samples are ignored
        so field kinds are never re-inferred.
        """
        if self.discovered:
            return self
        registry = self.registry.observe(sample)
        values = dict(self.values)
        for name in registry.names:
            if name not in values:
                values[name] = _sample_text(sample.get(name))
        return FormDraft(registry=registry, values=values, discovered=True)

    def set_field(self, name: str, value: Any) -> "FormDraft":
        """Replace one field's draft value.

        Unknown names are registered as scalar fields.
        """
        registry = self.registry
        if name not in registry:
            registry = FieldRegistry(entries=registry.entries + ((name, "scalar"),))
        values = dict(self.values)
        values[name] = "" if value is None else str(value)
        return FormDraft(registry=registry, values=values, discovered=self.discovered)

    def reset(self) -> "FormDraft":
        """Clear every value, keeping the known field set."""
        return FormDraft(
            registry=self.registry,
            values={name: "" for name in self.registry.names},
            discovered=self.discovered,
        )

    def to_entity(self) -> Dict[str, Any]:
        """Convert the draft into a raw character record.

        List fields are split on commas with blank pieces dropped;
        scalar fields are kept only when non-empty after trimming.
        """
        record: Dict[str, Any] = {}
        for name, kind in self.registry.entries:
            text = self.value(name).strip()
            if kind == "list":
                record[name] = [piece.strip() for piece in text.split(",") if piece.strip()] if text else []
            elif text:
                record[name] = text
        return record
