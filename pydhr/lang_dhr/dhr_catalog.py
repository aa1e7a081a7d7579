"""DhrLang construct catalog.

The catalog is a read-only table of the language's keywords, types and
builtins. It is loaded once from ``catalog.json`` and shared by the
completion and hover engines; nothing mutates it per request.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Iterator, Literal

CatalogCategory = Literal["type", "control-keyword", "oop-keyword", "builtin-function", "entry-point"]

CATALOG_CATEGORIES: tuple[str, ...] = (
    "entry-point",
    "builtin-function",
    "control-keyword",
    "type",
    "oop-keyword",
)

_KIND_BY_CATEGORY: dict[str, str] = {
    "type": "type_parameter",
    "control-keyword": "keyword",
    "oop-keyword": "keyword",
    "builtin-function": "function",
    "entry-point": "function",
}

DEFAULT_CATALOG_PATH = Path(__file__).with_name("catalog.json")

# ${1}, ${1:default} and bare $1 tab stops.
_SLOT_RE = re.compile(r"\$\{(?P<index>\d+)(?::(?P<default>[^}]*))?\}|\$(?P<bare>\d+)")


class CatalogError(ValueError):
    """Raised when the declarative catalog source is malformed."""


@dataclass(frozen=True, slots=True)
class TemplateSlot:
    index: int
    default: str = ""
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class Template:
    text: str
    slots: tuple[TemplateSlot, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "Template":
        raw = str(text or "")
        slots: list[TemplateSlot] = []
        for match in _SLOT_RE.finditer(raw):
            index_text = match.group("index") or match.group("bare") or "0"
            slots.append(
                TemplateSlot(
                    index=int(index_text),
                    default=str(match.group("default") or ""),
                    start=match.start(),
                    end=match.end(),
                )
            )
        return cls(text=raw, slots=tuple(slots))

    def slot_indexes(self) -> tuple[int, ...]:
        """Distinct tab-stop indexes in first-appearance order."""
        seen: list[int] = []
        for slot in self.slots:
            if slot.index not in seen:
                seen.append(slot.index)
        return tuple(seen)

    def linked_slots(self) -> dict[int, tuple[TemplateSlot, ...]]:
        """Slots that share an index and must stay textually identical."""
        grouped: dict[int, list[TemplateSlot]] = {}
        for slot in self.slots:
            grouped.setdefault(slot.index, []).append(slot)
        return {index: tuple(group) for index, group in grouped.items() if len(group) > 1}

    def default_for(self, index: int) -> str:
        for slot in self.slots:
            if slot.index == index and slot.default:
                return slot.default
        return ""

    def plain_text(self, values: dict[int, str] | None = None) -> str:
        """Render with every slot replaced by its value (or its default)."""
        overrides = dict(values or {})
        out: list[str] = []
        cursor = 0
        for slot in self.slots:
            out.append(self.text[cursor:slot.start])
            if slot.index in overrides:
                out.append(str(overrides[slot.index]))
            else:
                out.append(self.default_for(slot.index))
            cursor = slot.end
        out.append(self.text[cursor:])
        return "".join(out)


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    label: str
    category: CatalogCategory
    description: str
    template: Template
    documentation: str = ""
    kind: str = ""

    @property
    def icon_kind(self) -> str:
        if self.kind:
            return self.kind
        return _KIND_BY_CATEGORY.get(self.category, "keyword")


@dataclass(frozen=True)
class MetadataCatalog:
    entries: tuple[CatalogEntry, ...]
    _by_label: dict[str, CatalogEntry] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        entries = tuple(self.entries)
        by_label: dict[str, CatalogEntry] = {}
        for entry in entries:
            if entry.label in by_label:
                raise CatalogError(f"Duplicate catalog label: {entry.label!r}")
            by_label[entry.label] = entry
        object.__setattr__(self, "entries", entries)
        object.__setattr__(self, "_by_label", by_label)

    def lookup(self, label: str) -> CatalogEntry | None:
        return self._by_label.get(label)

    def all(self) -> tuple[CatalogEntry, ...]:
        return self.entries

    def by_category(self, category: str) -> tuple[CatalogEntry, ...]:
        return tuple(entry for entry in self.entries if entry.category == category)

    def labels(self) -> tuple[str, ...]:
        return tuple(entry.label for entry in self.entries)

    def multi_word_labels(self) -> tuple[str, ...]:
        return tuple(entry.label for entry in self.entries if " " in entry.label)

    def __contains__(self, label: object) -> bool:
        return isinstance(label, str) and label in self._by_label

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def build_catalog(raw_entries: Iterable[Any]) -> MetadataCatalog:
    entries: list[CatalogEntry] = []
    for position, raw in enumerate(raw_entries):
        if not isinstance(raw, dict):
            raise CatalogError(f"Catalog entry #{position} must be an object.")
        label = str(raw.get("label") or "")
        if not label.strip():
            raise CatalogError(f"Catalog entry #{position} has no label.")
        category = str(raw.get("category") or "").strip()
        if category not in _KIND_BY_CATEGORY:
            raise CatalogError(f"Catalog entry {label!r} has unknown category {category!r}.")
        template = Template.parse(str(raw.get("template") or label))
        for index, group in template.linked_slots().items():
            defaults = {slot.default for slot in group if slot.default}
            if len(defaults) > 1:
                raise CatalogError(
                    f"Catalog entry {label!r} links slot ${index} with conflicting defaults: {sorted(defaults)}"
                )
        entries.append(
            CatalogEntry(
                label=label,
                category=category,
                description=str(raw.get("description") or "").strip(),
                template=template,
                documentation=str(raw.get("documentation") or "").strip(),
                kind=str(raw.get("kind") or "").strip(),
            )
        )
    return MetadataCatalog(entries=tuple(entries))


def load_catalog(path: str | Path | None = None) -> MetadataCatalog:
    source = Path(path) if path is not None else DEFAULT_CATALOG_PATH
    try:
        raw = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise CatalogError(f"Could not read catalog '{source}': {exc}") from exc
    if isinstance(raw, dict):
        raw_entries = raw.get("entries")
    else:
        raw_entries = raw
    if not isinstance(raw_entries, list):
        raise CatalogError(f"Catalog '{source}' must contain an 'entries' list.")
    return build_catalog(raw_entries)


@lru_cache(maxsize=1)
def default_catalog() -> MetadataCatalog:
    return load_catalog()
