"""Language intelligence provider contracts (pure Python).

These contracts keep completion/hover backends replaceable per language
without coupling UI code to a specific engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class LanguageProviderCapabilities:
    completion: bool = True
    signature: bool = True
    definition: bool = True
    references: bool = True
    hover: bool = False


class LanguageProvider(Protocol):
    capabilities: LanguageProviderCapabilities

    def update_settings(self, completion_cfg: dict) -> None:
        ...

    def supports_file(self, file_path: str) -> bool:
        ...

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
    ) -> None:
        ...

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
        ...

    def register_accepted(self, text: str) -> None:
        ...

    def shutdown(self) -> None:
        ...
