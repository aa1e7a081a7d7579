"""Hover documentation and help text for DhrLang constructs."""

from __future__ import annotations

from dataclasses import dataclass

from .dhr_catalog import CATALOG_CATEGORIES, MetadataCatalog, default_catalog

_SECTION_TITLES: dict[str, str] = {
    "entry-point": "Program Entry - प्रोग्राम की शुरुआत",
    "builtin-function": "Builtins - अंतर्निहित फ़ंक्शन",
    "control-keyword": "Basic Keywords - मूलभूत शब्द",
    "type": "Data Types - डेटा प्रकार",
    "oop-keyword": "OOP Keywords - OOP शब्द",
}

_SHORTCUTS: tuple[tuple[str, str], ...] = (
    ("Run File - फ़ाइल चलाएं", "Ctrl+F5"),
    ("Compile File - फ़ाइल कंपाइल करें", "Ctrl+Shift+B"),
    ("Auto-completion - ऑटो-कंप्लीशन", "Ctrl+Space"),
)

_EXAMPLE_PROGRAM = """\
// Simple DhrLang Program
मुख्य() {
    संख्या age = 25;
    स्ट्रिंग name = "राहुल";

    प्रिंट("नाम: " + name);
    प्रिंट("उम्र: " + age);

    अगर (age >= 18) {
        प्रिंट("आप वयस्क हैं!");
    } नहीं तो {
        प्रिंट("आप अभी बच्चे हैं!");
    }
}"""

# Characters that end a word when scanning around the cursor.
_WORD_BREAKS = set(" \t\r\n()[]{};,.:+-*/%=<>!&|\"'`")


@dataclass(frozen=True, slots=True)
class HoverPayload:
    label: str
    markdown: str
    category: str


def hover(word: str, *, catalog: MetadataCatalog | None = None) -> HoverPayload | None:
    """Exact, case-sensitive lookup of an already-extracted token."""
    source = catalog if catalog is not None else default_catalog()
    entry = source.lookup(word)
    if entry is None:
        return None
    body = entry.documentation or entry.description
    return HoverPayload(
        label=entry.label,
        markdown=f"**{entry.label}**\n\n{body}",
        category=entry.category,
    )


def word_at(text: str, offset: int, *, catalog: MetadataCatalog | None = None) -> str:
    """Extract the token spanning ``offset``.

    Multi-word catalog labels (e.g. ``नहीं तो``) are tried first so hosts that
    only split on whitespace can still hover them.
    """
    source_text = str(text or "")
    if not source_text:
        return ""
    pos = max(0, min(int(offset), len(source_text)))
    source = catalog if catalog is not None else default_catalog()

    for label in source.multi_word_labels():
        idx = source_text.find(label, max(0, pos - len(label)))
        while 0 <= idx <= pos:
            end = idx + len(label)
            if pos <= end and _is_word_span(source_text, idx, end):
                return label
            idx = source_text.find(label, idx + 1)

    start = pos
    while start > 0 and source_text[start - 1] not in _WORD_BREAKS:
        start -= 1
    end = pos
    while end < len(source_text) and source_text[end] not in _WORD_BREAKS:
        end += 1
    return source_text[start:end]


def _is_word_span(text: str, start: int, end: int) -> bool:
    """True when ``text[start:end]`` is not part of a longer word."""
    before_ok = start == 0 or text[start - 1] in _WORD_BREAKS
    after_ok = end == len(text) or text[end] in _WORD_BREAKS
    return before_ok and after_ok


def help_document(*, catalog: MetadataCatalog | None = None) -> str:
    """Markdown help page assembled from the catalog."""
    source = catalog if catalog is not None else default_catalog()
    lines: list[str] = [
        "# DhrLang Help - सहायता",
        "",
        "Programming in Hindi - हिंदी में प्रोग्रामिंग",
        "",
    ]
    for category in CATALOG_CATEGORIES:
        entries = source.by_category(category)
        if not entries:
            continue
        lines.append(f"## {_SECTION_TITLES.get(category, category)}")
        lines.append("")
        for entry in entries:
            lines.append(f"- `{entry.label}` - {entry.description}")
        lines.append("")

    lines.append("## Example Program - उदाहरण प्रोग्राम")
    lines.append("")
    lines.append("```")
    lines.append(_EXAMPLE_PROGRAM)
    lines.append("```")
    lines.append("")
    lines.append("## Keyboard Shortcuts - कीबोर्ड शॉर्टकट")
    lines.append("")
    for title, keys in _SHORTCUTS:
        lines.append(f"- {title}: `{keys}`")
    lines.append("")
    lines.append("## Getting Started - शुरुआत करें")
    lines.append("")
    lines.append("1. Create a new file with the `.dhr` extension")
    lines.append("2. Type `मुख्य` and accept the completion for the main function template")
    lines.append("3. Write your DhrLang code using Hindi keywords")
    lines.append("4. Press Ctrl+F5 to run your program")
    return "\n".join(lines) + "\n"
