"""Qt-aware hub that routes language intelligence requests to providers."""

from __future__ import annotations

from collections.abc import Iterable

from PySide6.QtCore import QObject, Signal

from pydhr.services.language_id import language_id_for_path
from pydhr.services.language_provider import LanguageProvider
from pydhr.settings_manager import SettingsManager


class LanguageServiceHub(QObject):
    completionReady = Signal(object)
    hoverReady = Signal(object)
    statusMessage = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._providers_by_language: dict[str, LanguageProvider] = {}
        self._connected_provider_ids: set[int] = set()
        self._settings: SettingsManager | None = None

    def register_provider(self, provider: LanguageProvider | None, *, language_ids: Iterable[str] | str) -> None:
        if provider is None:
            return
        language_iter = [language_ids] if isinstance(language_ids, str) else list(language_ids)
        for raw in language_iter:
            lang = str(raw or "").strip().lower()
            if lang:
                self._providers_by_language[lang] = provider
        self._connect_provider_signals(provider)
        if self._settings is not None:
            fn = getattr(provider, "update_settings", None)
            if callable(fn):
                fn(self._settings.completion_settings())

    def provider_for_language(self, language_id: str) -> LanguageProvider | None:
        key = str(language_id or "").strip().lower()
        return self._providers_by_language.get(key)

    def provider_for_path(self, file_path: str) -> LanguageProvider | None:
        return self.provider_for_language(language_id_for_path(file_path))

    def has_provider_for(self, language_id: str) -> bool:
        return self.provider_for_language(language_id) is not None

    def request_completion(self, *, language_id: str | None = None, **kwargs) -> None:
        provider = self._provider_for_request(language_id, kwargs)
        fn = getattr(provider, "request_completion", None)
        if callable(fn):
            fn(**kwargs)
            return
        self._emit_empty_completion(kwargs)

    def request_hover(self, *, language_id: str | None = None, **kwargs) -> None:
        provider = self._provider_for_request(language_id, kwargs)
        fn = getattr(provider, "request_hover", None)
        if callable(fn):
            fn(**kwargs)
            return
        self._emit_empty_hover(kwargs)

    def update_settings(self, completion_cfg: dict) -> None:
        for provider in self._iter_unique_providers():
            fn = getattr(provider, "update_settings", None)
            if callable(fn):
                fn(completion_cfg)

    def register_accepted(self, text: str) -> None:
        for provider in self._iter_unique_providers():
            fn = getattr(provider, "register_accepted", None)
            if callable(fn):
                fn(text)

    def bind_settings(self, settings: SettingsManager) -> None:
        """Keep providers in sync with the ``completion`` settings section."""
        if self._settings is not None:
            self._settings.remove_change_listener(self._on_setting_changed)
        self._settings = settings
        settings.add_change_listener(self._on_setting_changed)
        self.update_settings(settings.completion_settings())

    def shutdown(self) -> None:
        if self._settings is not None:
            self._settings.remove_change_listener(self._on_setting_changed)
            self._settings = None
        for provider in self._iter_unique_providers():
            fn = getattr(provider, "shutdown", None)
            if callable(fn):
                fn()

    def _on_setting_changed(self, key: str, _value: object) -> None:
        if self._settings is not None and (key == "completion" or key.startswith("completion.")):
            self.update_settings(self._settings.completion_settings())

    def _provider_for_request(self, language_id: str | None, request: dict) -> LanguageProvider | None:
        if language_id:
            return self.provider_for_language(language_id)
        return self.provider_for_path(str(request.get("file_path") or ""))

    def _iter_unique_providers(self):
        seen: set[int] = set()
        for provider in self._providers_by_language.values():
            pid = id(provider)
            if pid in seen:
                continue
            seen.add(pid)
            yield provider

    def _connect_provider_signals(self, provider: object) -> None:
        pid = id(provider)
        if pid in self._connected_provider_ids:
            return
        self._connected_provider_ids.add(pid)

        for name in ("completionReady", "hoverReady", "statusMessage"):
            signal = getattr(provider, name, None)
            if signal is not None and hasattr(signal, "connect"):
                signal.connect(getattr(self, name).emit)

    def _emit_empty_completion(self, request: dict) -> None:
        self.completionReady.emit(
            {
                "result_type": "completion",
                "file_path": str(request.get("file_path") or ""),
                "token": int(request.get("token") or 0),
                "items": [],
                "backend": "none",
                "reason": str(request.get("reason") or "manual"),
            }
        )

    def _emit_empty_hover(self, request: dict) -> None:
        self.hoverReady.emit(
            {
                "result_type": "hover",
                "file_path": str(request.get("file_path") or ""),
                "token": int(request.get("token") or 0),
                "word": str(request.get("word") or ""),
                "label": "",
                "markdown": "",
                "source": "none",
            }
        )
