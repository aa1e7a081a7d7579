"""Language-provider bridge for DhrLang backed by the construct catalog."""

from __future__ import annotations

import os
from typing import Any

from PySide6.QtCore import QObject, Signal

from pydhr.services.language_provider import LanguageProviderCapabilities

from .dhr_catalog import MetadataCatalog, default_catalog
from .dhr_completion import TRIGGER_CHARACTERS, QueryContext, complete
from .dhr_hover import help_document, hover, word_at

DHR_FILE_EXTENSIONS = (".dhr",)
DHR_LANGUAGE_IDS = ("dhrlang",)


class DhrLanguagePack(QObject):
    completionReady = Signal(object)
    hoverReady = Signal(object)
    statusMessage = Signal(str)

    capabilities = LanguageProviderCapabilities(
        completion=True,
        signature=False,
        definition=False,
        references=False,
        hover=True,
    )
    trigger_characters = TRIGGER_CHARACTERS

    def __init__(self, catalog: MetadataCatalog | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._catalog = catalog if catalog is not None else default_catalog()
        self._completion_cfg: dict[str, Any] = {}

    @property
    def catalog(self) -> MetadataCatalog:
        return self._catalog

    def update_settings(self, completion_cfg: dict) -> None:
        if isinstance(completion_cfg, dict):
            self._completion_cfg = dict(completion_cfg)

    def register_accepted(self, _text: str) -> None:
        return

    def shutdown(self) -> None:
        return

    def supports_file(self, file_path: str) -> bool:
        suffix = os.path.splitext(str(file_path or ""))[1].lower()
        return suffix in DHR_FILE_EXTENSIONS

    def request_completion(
        self,
        *,
        file_path: str,
        source_text: str,
        line: int,
        column: int,
        prefix: str,
        token: int,
        reason: str = "auto",
        trigger_char: str | None = None,
    ) -> None:
        offset = _offset_for(source_text, line, column)
        context = QueryContext(
            cursor_offset=offset,
            trigger_char=trigger_char or None,
            document_prefix=str(source_text or "")[:offset],
        )
        items: list[dict[str, Any]] = []
        enabled = bool(self._completion_cfg.get("enabled", True))
        if reason == "auto" and not bool(self._completion_cfg.get("auto_trigger", True)):
            enabled = False
        if enabled:
            items = [candidate.to_item() for candidate in complete(context, catalog=self._catalog)]
        self.completionReady.emit(
            {
                "result_type": "completion",
                "file_path": str(file_path or ""),
                "token": max(1, int(token)),
                "items": items,
                "prefix": str(prefix or ""),
                "backend": "dhrlang",
                "reason": str(reason or "auto"),
            }
        )

    def request_hover(
        self,
        *,
        file_path: str,
        source_text: str,
        line: int,
        column: int,
        token: int,
        word: str | None = None,
    ) -> None:
        if word is None:
            offset = _offset_for(source_text, line, column)
            word = word_at(source_text, offset, catalog=self._catalog)
        payload = hover(str(word or ""), catalog=self._catalog)
        self.hoverReady.emit(
            {
                "result_type": "hover",
                "file_path": str(file_path or ""),
                "token": max(1, int(token)),
                "word": str(word or ""),
                "label": payload.label if payload is not None else "",
                "markdown": payload.markdown if payload is not None else "",
                "source": "dhrlang",
            }
        )

    def help_document(self) -> str:
        return help_document(catalog=self._catalog)


def _offset_for(source_text: str, line: int, column: int) -> int:
    """Offset of a 1-based line / 0-based column position, clamped to the text."""
    text = str(source_text or "")
    target_line = max(1, int(line or 1))
    offset = 0
    for _ in range(target_line - 1):
        newline = text.find("\n", offset)
        if newline < 0:
            return len(text)
        offset = newline + 1
    line_end = text.find("\n", offset)
    if line_end < 0:
        line_end = len(text)
    return min(offset + max(0, int(column or 0)), line_end)
