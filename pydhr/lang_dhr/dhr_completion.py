"""Catalog-backed completion for DhrLang buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .dhr_catalog import CatalogEntry, MetadataCatalog, default_catalog

# Re-invocation points only; candidate content does not depend on them.
TRIGGER_CHARACTERS: tuple[str, ...] = (".", "(")


@dataclass(frozen=True, slots=True)
class QueryContext:
    cursor_offset: int = 0
    trigger_char: str | None = None
    document_prefix: str = ""


@dataclass(frozen=True, slots=True)
class CandidateInsertion:
    label: str
    kind: str
    detail: str
    documentation: str
    insert_text: str
    plain_text: str
    category: str

    def to_item(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "insert_text": self.insert_text,
            "plain_text": self.plain_text,
            "kind": self.kind,
            "detail": self.detail,
            "documentation": self.documentation,
            "category": self.category,
            "source": "dhrlang",
            "source_scope": "language",
            "is_snippet": True,
        }


def candidate_for(entry: CatalogEntry) -> CandidateInsertion:
    return CandidateInsertion(
        label=entry.label,
        kind=entry.icon_kind,
        detail=entry.description,
        documentation=f"**{entry.label}** - {entry.description}",
        insert_text=entry.template.text,
        plain_text=entry.template.plain_text(),
        category=entry.category,
    )


def complete(context: QueryContext | None = None, *, catalog: MetadataCatalog | None = None) -> tuple[CandidateInsertion, ...]:
    """Return every catalog construct as a candidate, in declaration order.

    The host's fuzzy matcher filters by ``context.document_prefix``; the
    context is accepted so position-aware filtering can be added without
    changing callers.
    """
    _ = context
    source = catalog if catalog is not None else default_catalog()
    return tuple(candidate_for(entry) for entry in source.all())
