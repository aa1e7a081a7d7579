from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication

from pydhr.settings_manager import SettingsManager

# Stands in for `java`: prints the last argument's verdict the way the real
# toolchain does. Sources containing "ERROR" fail on stderr, "WARN" exits 0
# but still writes to stderr, "SILENT" prints nothing.
FAKE_JAVA = """#!/bin/sh
for last; do :; done
echo "$@" > "$(dirname "$0")/last-args.txt"
case "$(cat "$last")" in
  *ERROR*) echo "error: unexpected token" >&2; exit 1 ;;
  *WARN*) echo "warning: unused variable" >&2; exit 0 ;;
  *SILENT*) exit 0 ;;
esac
echo "OK"
"""

needs_posix_shell = pytest.mark.skipif(os.name == "nt", reason="fake toolchain is a POSIX shell script")


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def fake_java(tmp_path: Path) -> Path:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "fake-java"
    script.write_text(FAKE_JAVA, encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def settings(tmp_path: Path, workspace: Path) -> SettingsManager:
    manager = SettingsManager(project_root=workspace, ide_app_dir=tmp_path / "ide")
    manager.load_all()
    return manager


def write_jar(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"PK\x03\x04")
    return path


def write_source(path: Path, text: str = "मुख्य() {\n    प्रिंट(\"नमस्ते\");\n}\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
