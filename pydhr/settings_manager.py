from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Callable

from pydhr.settings_models import (
    SettingsPaths,
    SettingsScope,
    default_dhrlang_settings,
    default_ide_settings,
    default_project_settings,
)
from pydhr.settings_store import JsonSettingsStore, deep_merge_defaults

PROJECT_KEY_PREFIXES: tuple[str, ...] = ("project_name", "workspace_roots", "dhrlang")
IDE_KEY_PREFIXES: tuple[str, ...] = ("run", "completion")

SettingsListener = Callable[[str, Any], None]


class SettingsManager:
    """Project + IDE settings with key routing and change notification."""

    def __init__(
        self,
        project_root: str | Path,
        ide_app_dir: str | Path,
        *,
        project_filename: str = ".pydhr/project.json",
        ide_filename: str = "ide-settings.json",
        project_persistent: bool = True,
    ) -> None:
        self.paths = SettingsPaths(
            project_root=Path(project_root),
            ide_app_dir=Path(ide_app_dir),
            project_filename=project_filename,
            ide_filename=ide_filename,
        )
        self.project_store = JsonSettingsStore(
            self.paths.project_file,
            default_project_settings(),
            persistent=project_persistent,
        )
        self.ide_store = JsonSettingsStore(self.paths.ide_file, default_ide_settings())
        self._listeners: list[SettingsListener] = []

    @property
    def project_root(self) -> Path:
        return self.paths.project_root

    def load_all(self, *, write_back: bool = True) -> None:
        self.project_store.load()
        self.ide_store.load()
        self._normalize_dhrlang_settings()
        if write_back:
            self.save_all(only_dirty=True)

    def save_all(self, *, only_dirty: bool = False) -> set[SettingsScope]:
        saved: set[SettingsScope] = set()
        for scope, store in (("project", self.project_store), ("ide", self.ide_store)):
            # Never overwrite a malformed file with regenerated defaults.
            if store.last_error:
                continue
            if only_dirty and not store.dirty:
                continue
            store.save()
            saved.add(scope)
        return saved

    def load_errors(self) -> dict[SettingsScope, str]:
        errors: dict[SettingsScope, str] = {}
        if self.project_store.last_error:
            errors["project"] = self.project_store.last_error
        if self.ide_store.last_error:
            errors["ide"] = self.ide_store.last_error
        return errors

    def resolve_key_scope(self, key: str) -> SettingsScope | None:
        for prefix in PROJECT_KEY_PREFIXES:
            if key == prefix or key.startswith(prefix + "."):
                return "project"
        for prefix in IDE_KEY_PREFIXES:
            if key == prefix or key.startswith(prefix + "."):
                return "ide"
        return None

    def get(self, key: str, default: Any = None) -> Any:
        scope = self.resolve_key_scope(key)
        if scope == "ide":
            return self.ide_store.get(key, default)
        if scope == "project":
            return self.project_store.get(key, default)
        value = self.project_store.get(key, None)
        if value is not None:
            return value
        return self.ide_store.get(key, default)

    def set(self, key: str, value: Any, scope: SettingsScope | None = None) -> bool:
        target = scope or self.resolve_key_scope(key) or "project"
        store = self.ide_store if target == "ide" else self.project_store
        changed = store.set(key, value)
        if changed:
            if key == "dhrlang" or key.startswith("dhrlang."):
                self._normalize_dhrlang_settings()
            self._notify(key, value)
        return changed

    def add_change_listener(self, listener: SettingsListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_change_listener(self, listener: SettingsListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def dhrlang_settings(self) -> dict[str, Any]:
        return deepcopy(self.project_store.get("dhrlang", {}) or {})

    def completion_settings(self) -> dict[str, Any]:
        return deepcopy(self.ide_store.get("completion", {}) or {})

    def workspace_roots(self) -> list[str]:
        """Configured roots, falling back to the project root."""
        raw = self.project_store.get("workspace_roots", [])
        roots: list[str] = []
        for item in raw if isinstance(raw, list) else []:
            text = str(item or "").strip()
            if not text:
                continue
            path = Path(text).expanduser()
            if not path.is_absolute():
                path = self.paths.project_root / path
            roots.append(str(path))
        if not roots:
            roots.append(str(self.paths.project_root))
        return roots

    def _notify(self, key: str, value: Any) -> None:
        for listener in list(self._listeners):
            listener(key, value)

    def _normalize_dhrlang_settings(self) -> bool:
        data = self.project_store.data
        before = deepcopy(data.get("dhrlang"))
        cfg = before if isinstance(before, dict) else {}
        cfg = deep_merge_defaults(cfg, default_dhrlang_settings())
        cfg["java_path"] = str(cfg.get("java_path") or "java").strip() or "java"
        cfg["jar_path"] = str(cfg.get("jar_path") or "")
        auto = cfg.get("auto_detect_jar", True)
        if isinstance(auto, str):
            auto = auto.strip().lower() not in {"0", "false", "no", "off"}
        cfg["auto_detect_jar"] = bool(auto)
        data["dhrlang"] = cfg

        changed = cfg != before
        if not isinstance(data.get("workspace_roots"), list):
            data["workspace_roots"] = []
            changed = True
        if changed:
            self.project_store.dirty = True
        return changed
