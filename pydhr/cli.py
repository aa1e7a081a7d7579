"""Headless entry point: run or check a .dhr file, or print the help guide."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication

from pydhr import __version__
from pydhr.lang_dhr.dhr_hover import help_document
from pydhr.settings_manager import SettingsManager
from pydhr.ui.controllers.execution_controller import ExecutionController

APP_NAME = "PyDhr"
IDE_SETTINGS_DIRNAME = ".pydhr"
IDE_APP_DIR_ENV = "PYDHR_IDE_APP_DIR"


def default_ide_app_dir() -> str:
    override = os.environ.get(IDE_APP_DIR_ENV, "").strip()
    if override:
        return str(Path(override).expanduser())
    return str(Path.home() / IDE_SETTINGS_DIRNAME)


def _canonical_existing_dir(path_value: str | Path | None) -> Path | None:
    text = str(path_value or "").strip()
    if not text:
        return None
    candidate = Path(text).expanduser()
    if not candidate.is_dir():
        return None
    return candidate.resolve()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pydhr", description="Run or check DhrLang (.dhr) programs.")
    parser.add_argument("file", nargs="?", help="the .dhr file to run or check")
    parser.add_argument("--check", action="store_true", help="compile-check the file instead of running it")
    parser.add_argument("--help-doc", action="store_true", help="print the DhrLang help guide and exit")
    parser.add_argument("--project", help="project root used for settings and jar discovery (default: cwd)")
    parser.add_argument("--jar", help="explicit path to DhrLang.jar")
    parser.add_argument("--java", help="java executable to launch the jar with")
    parser.add_argument("--no-auto-detect", action="store_true", help="only use the --jar / configured jar path")
    parser.add_argument("--verbose", action="store_true", help="print discovery and command details")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _load_settings(args: argparse.Namespace) -> SettingsManager:
    project_root = _canonical_existing_dir(args.project) or Path.cwd()
    manager = SettingsManager(project_root=project_root, ide_app_dir=default_ide_app_dir())
    manager.load_all(write_back=False)
    for scope, error in manager.load_errors().items():
        print(f"[DhrLang] Ignoring unreadable {scope} settings: {error}", file=sys.stderr)
    # Command-line overrides apply to this invocation only.
    if args.jar:
        manager.set("dhrlang.jar_path", str(Path(args.jar).expanduser().resolve()))
    if args.java:
        manager.set("dhrlang.java_path", args.java)
    if args.no_auto_detect:
        manager.set("dhrlang.auto_detect_jar", False)
    return manager


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.help_doc:
        print(help_document())
        return 0
    if not args.file:
        print("[DhrLang] No DhrLang file given. Pass a .dhr file, or --help-doc.", file=sys.stderr)
        return 2

    app = QCoreApplication.instance() or QCoreApplication([sys.argv[0]])
    app.setApplicationName(APP_NAME)

    settings = _load_settings(args)
    controller = ExecutionController(settings, active_document=lambda: args.file)
    failed: list[str] = []

    def _on_notification(level: str, text: str) -> None:
        stream = sys.stderr if level == "error" else sys.stdout
        print(text, file=stream)
        if level == "error":
            failed.append(text)

    def _on_output(title: str, text: str) -> None:
        print(title)
        print(text, end="" if text.endswith("\n") else "\n")

    def _on_status(text: str) -> None:
        if args.verbose:
            print(text, file=sys.stderr)

    controller.notification.connect(_on_notification)
    controller.outputReady.connect(_on_output)
    controller.statusMessage.connect(_on_status)

    try:
        if args.check:
            if controller.check_current_file() is not None:
                controller.wait_for_checks()
            return 1 if failed else 0

        if not controller.run_current_file():
            return 1
        for line in controller.locator.debug_lines() if args.verbose else []:
            print(line, file=sys.stderr)
        wait = getattr(controller.last_launch, "wait", None)
        return int(wait()) if callable(wait) else 0
    finally:
        controller.shutdown()


if __name__ == "__main__":
    sys.exit(main())
