"""Language-id resolution helpers for editor files.

Pure utility functions that map filenames/extensions to a language id that can
be routed to a completion/hover provider.
"""

from __future__ import annotations

from pathlib import Path

_EXTENSION_LANGUAGE_IDS: dict[str, str] = {
    ".dhr": "dhrlang",
    ".md": "markdown",
    ".json": "json",
}


def language_id_for_path(file_path: str | None, *, default: str = "plaintext") -> str:
    """Return a normalized language id for a file path."""
    path_text = str(file_path or "").strip()
    if not path_text:
        return str(default or "plaintext").strip().lower() or "plaintext"

    suffix = Path(path_text).suffix.lower()
    if suffix in _EXTENSION_LANGUAGE_IDS:
        return _EXTENSION_LANGUAGE_IDS[suffix]

    return str(default or "plaintext").strip().lower() or "plaintext"


def is_dhrlang_path(file_path: str | None) -> bool:
    return language_id_for_path(file_path) == "dhrlang"
