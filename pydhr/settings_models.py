from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, TypedDict

SettingsScope = Literal["project", "ide"]


class DhrLangSettings(TypedDict, total=False):
    java_path: str
    jar_path: str
    auto_detect_jar: bool


class RunSettings(TypedDict, total=False):
    save_before_run: bool
    focus_output_on_run: bool
    show_check_output: bool


class IdeCompletionSettings(TypedDict, total=False):
    enabled: bool
    auto_trigger: bool


class ProjectSettings(TypedDict, total=False):
    project_name: str
    workspace_roots: list[str]
    dhrlang: DhrLangSettings


class IdeSettings(TypedDict, total=False):
    run: RunSettings
    completion: IdeCompletionSettings


@dataclass(slots=True, frozen=True)
class SettingsPaths:
    project_root: Path
    ide_app_dir: Path
    project_filename: str = ".pydhr/project.json"
    ide_filename: str = "ide-settings.json"
    project_file: Path = field(init=False)
    ide_file: Path = field(init=False)

    def __post_init__(self) -> None:
        project_root = Path(self.project_root).expanduser().resolve()
        ide_app_dir = Path(self.ide_app_dir).expanduser().resolve()
        object.__setattr__(self, "project_root", project_root)
        object.__setattr__(self, "ide_app_dir", ide_app_dir)
        object.__setattr__(self, "project_file", project_root / self.project_filename)
        object.__setattr__(self, "ide_file", ide_app_dir / self.ide_filename)


def default_dhrlang_settings() -> DhrLangSettings:
    return {
        "java_path": "java",
        "jar_path": "",
        "auto_detect_jar": True,
    }


def default_project_settings() -> ProjectSettings:
    defaults: ProjectSettings = {
        "project_name": "My DhrLang Project",
        "workspace_roots": [],
        "dhrlang": default_dhrlang_settings(),
    }
    return deepcopy(defaults)


def default_ide_settings() -> IdeSettings:
    defaults: IdeSettings = {
        "run": {
            "save_before_run": True,
            "focus_output_on_run": True,
            "show_check_output": True,
        },
        "completion": {
            "enabled": True,
            "auto_trigger": True,
        },
    }
    return deepcopy(defaults)
