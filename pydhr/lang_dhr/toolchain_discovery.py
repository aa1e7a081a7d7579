"""DhrLang toolchain (``DhrLang.jar``) discovery helpers."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Literal

ToolchainOrigin = Literal["explicit-override", "workspace-root", "workspace-lib-glob", "bundled"]
ToolchainState = Literal["unknown", "resolved", "unresolved"]

ARTIFACT_NAME = "DhrLang.jar"
LIB_DIRNAME = "lib"
LIB_GLOB = "DhrLang-*.jar"
BUNDLED_DIRNAME = "compiler"

DEFAULT_INSTALL_ROOT = Path(__file__).resolve().parent.parent


@dataclass(frozen=True, slots=True)
class ResolvedToolchain:
    artifact_path: str
    origin: ToolchainOrigin
    java_path: str = "java"


@dataclass(frozen=True, slots=True)
class LocatorConfig:
    java_path: str = "java"
    jar_path: str = ""
    auto_detect_jar: bool = True

    @classmethod
    def from_settings(cls, cfg: object) -> "LocatorConfig":
        data: dict[str, Any] = cfg if isinstance(cfg, dict) else {}
        java_path = str(data.get("java_path") or "java").strip() or "java"
        return cls(
            java_path=java_path,
            jar_path=str(data.get("jar_path") or ""),
            auto_detect_jar=bool(data.get("auto_detect_jar", True)),
        )


def path_exists(path: str | Path) -> bool:
    """Existence probe; unreadable or missing paths are simply absent."""
    try:
        return Path(path).is_file()
    except OSError:
        return False


def _absolute(path: str | Path) -> str:
    try:
        return str(Path(path).expanduser().absolute())
    except (OSError, RuntimeError):
        return str(path)


def _override_candidates(jar_path: str, workspace_roots: list[str]) -> Iterator[tuple[str, str]]:
    text = str(jar_path or "").strip()
    if not text:
        return
    raw = Path(text).expanduser()
    if not raw.is_absolute() and workspace_roots:
        raw = Path(workspace_roots[0]) / raw
    yield "explicit-override", _absolute(raw)


def _workspace_root_candidates(workspace_roots: list[str]) -> Iterator[tuple[str, str]]:
    for root in workspace_roots:
        yield "workspace-root", _absolute(Path(root) / ARTIFACT_NAME)


def _workspace_lib_candidates(workspace_roots: list[str]) -> Iterator[tuple[str, str]]:
    for root in workspace_roots:
        lib_dir = Path(root) / LIB_DIRNAME
        try:
            matches = sorted(str(item) for item in lib_dir.glob(LIB_GLOB) if item.is_file())
        except OSError:
            continue
        if matches:
            yield "workspace-lib-glob", _absolute(matches[0])
            return


def _bundled_candidates(install_root: str | Path) -> Iterator[tuple[str, str]]:
    yield "bundled", _absolute(Path(install_root) / BUNDLED_DIRNAME / ARTIFACT_NAME)


def _clean_roots(workspace_roots: Iterable[str] | None) -> list[str]:
    out: list[str] = []
    for raw in list(workspace_roots or []):
        text = str(raw or "").strip()
        if text:
            out.append(text)
    return out


def resolve_toolchain(
    *,
    config: LocatorConfig,
    workspace_roots: Iterable[str] | None,
    install_root: str | Path = DEFAULT_INSTALL_ROOT,
    exists: Callable[[str], bool] = path_exists,
    debug_lines: list[str] | None = None,
) -> ResolvedToolchain | None:
    """Probe candidate locations in order and return the first hit, or None."""
    roots = _clean_roots(workspace_roots)
    debug = debug_lines if debug_lines is not None else []

    stages: list[Callable[[], Iterator[tuple[str, str]]]] = [
        lambda: _override_candidates(config.jar_path, roots),
    ]
    if config.auto_detect_jar:
        stages.extend(
            [
                lambda: _workspace_root_candidates(roots),
                lambda: _workspace_lib_candidates(roots),
                lambda: _bundled_candidates(install_root),
            ]
        )
    else:
        debug.append("[DhrLang] Auto-detection disabled; only the configured jar path is probed.")

    for stage in stages:
        for origin, candidate in stage():
            try:
                found = bool(exists(candidate))
            except OSError:
                found = False
            debug.append(f"[DhrLang] probe {origin}: {candidate} -> {'found' if found else 'missing'}")
            if found:
                return ResolvedToolchain(artifact_path=candidate, origin=origin, java_path=config.java_path)
    return None


class ToolchainLocator:
    """Owns the resolved toolchain for a session.

    Resolution runs one at a time; a caller arriving while another resolution
    is in flight waits for it and reuses its outcome. ``invalidate`` clears
    the cached result and discards any resolution that started before it.
    """

    def __init__(
        self,
        *,
        config_provider: Callable[[], LocatorConfig],
        workspace_roots_provider: Callable[[], Iterable[str]],
        install_root: str | Path = DEFAULT_INSTALL_ROOT,
        exists: Callable[[str], bool] = path_exists,
    ) -> None:
        self._config_provider = config_provider
        self._workspace_roots_provider = workspace_roots_provider
        self._install_root = install_root
        self._exists = exists

        self._resolve_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._cached: ResolvedToolchain | None = None
        self._state: ToolchainState = "unknown"
        self._generation = 0
        self._serial = 0
        self._stored_generation = -1
        self._last_debug_lines: list[str] = []

    def resolve(self) -> ResolvedToolchain | None:
        with self._state_lock:
            cached = self._cached
            seen_serial = self._serial
            seen_generation = self._generation
        if cached is not None and self._probe(cached.artifact_path):
            # The existence check ran unlocked; an invalidate() since then wins.
            with self._state_lock:
                if self._generation == seen_generation:
                    return cached

        with self._resolve_lock:
            with self._state_lock:
                if self._serial != seen_serial and self._stored_generation == self._generation:
                    return self._cached
                generation = self._generation

            debug: list[str] = []
            result = resolve_toolchain(
                config=self._config_provider(),
                workspace_roots=self._workspace_roots_provider(),
                install_root=self._install_root,
                exists=self._exists,
                debug_lines=debug,
            )

            with self._state_lock:
                self._serial += 1
                self._last_debug_lines = debug
                if generation == self._generation:
                    self._cached = result
                    self._state = "resolved" if result is not None else "unresolved"
                    self._stored_generation = generation
            return result

    def cached(self) -> ResolvedToolchain | None:
        with self._state_lock:
            return self._cached

    def state(self) -> ToolchainState:
        with self._state_lock:
            return self._state

    def invalidate(self) -> None:
        with self._state_lock:
            self._cached = None
            self._state = "unknown"
            self._generation += 1

    def debug_lines(self) -> list[str]:
        with self._state_lock:
            return list(self._last_debug_lines)

    def _probe(self, path: str) -> bool:
        try:
            return bool(self._exists(path))
        except OSError:
            return False
