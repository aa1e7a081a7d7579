from __future__ import annotations

import pytest
from conftest import needs_posix_shell, write_jar, write_source

from pydhr.ui.controllers.execution_controller import CHECK_OUTPUT_TITLE, ExecutionController


class Host:
    """Records what a host editor would display."""

    def __init__(self):
        self.active = None
        self.saved = []
        self.save_ok = True
        self.terminal = []
        self.notifications = []
        self.outputs = []
        self.statuses = []
        self.checks = []

    def save(self, path):
        self.saved.append(path)
        return self.save_ok

    def run_in_terminal(self, block, cwd, label):
        self.terminal.append((block, cwd, label))


@pytest.fixture
def host():
    return Host()


@pytest.fixture
def controller(qapp, settings, host, tmp_path):
    ctl = ExecutionController(
        settings,
        active_document=lambda: host.active,
        save_document=host.save,
        terminal_runner=host.run_in_terminal,
        install_root=tmp_path / "install",
    )
    ctl.notification.connect(lambda level, text: host.notifications.append((level, text)))
    ctl.outputReady.connect(lambda title, text: host.outputs.append((title, text)))
    ctl.toolchainStatusChanged.connect(host.statuses.append)
    ctl.checkFinished.connect(host.checks.append)
    yield ctl
    ctl.shutdown()


def test_run_without_open_document(controller, host):
    assert controller.run_current_file() is False
    assert host.notifications == [("error", "No DhrLang file is open!")]
    assert host.terminal == []


def test_wrong_extension_is_rejected_for_both_actions(controller, host, workspace):
    host.active = str(workspace / "notes.txt")
    assert controller.run_current_file() is False
    assert controller.check_current_file() is None
    assert host.notifications == [
        ("error", "Please open a .dhr file to run!"),
        ("error", "Please open a .dhr file to compile!"),
    ]
    assert host.saved == []


def test_unresolved_toolchain_does_not_launch(controller, host, workspace):
    host.active = str(write_source(workspace / "main.dhr"))
    assert controller.run_current_file() is False
    assert host.terminal == []
    level, text = host.notifications[-1]
    assert level == "error"
    assert "DhrLang.jar not found" in text
    assert host.statuses[-1]["state"] == "unresolved"
    assert controller.locator.state() == "unresolved"


def test_run_saves_and_launches_in_terminal(controller, host, workspace):
    jar = write_jar(workspace / "DhrLang.jar")
    source = write_source(workspace / "src" / "main.dhr")
    host.active = str(source)

    assert controller.run_current_file() is True
    assert host.saved == [str(source)]
    block, cwd, label = host.terminal[0]
    assert cwd == str(workspace / "src")
    assert label == "main.dhr"
    assert str(jar) in block
    assert host.statuses[-1]["state"] == "resolved"
    assert host.statuses[-1]["origin"] == "workspace-root"
    assert host.notifications == []


def test_failed_save_stops_the_action(controller, host, workspace):
    write_jar(workspace / "DhrLang.jar")
    host.active = str(write_source(workspace / "main.dhr"))
    host.save_ok = False
    assert controller.run_current_file() is False
    assert host.terminal == []
    assert host.notifications[-1][0] == "error"


def test_save_before_run_can_be_disabled(controller, host, settings, workspace):
    write_jar(workspace / "DhrLang.jar")
    host.active = str(write_source(workspace / "main.dhr"))
    settings.set("run.save_before_run", False)
    assert controller.run_current_file() is True
    assert host.saved == []


@needs_posix_shell
def test_check_success_reports_output(controller, host, settings, workspace, fake_java):
    write_jar(workspace / "DhrLang.jar")
    settings.set("dhrlang.java_path", str(fake_java))
    host.active = str(write_source(workspace / "main.dhr"))

    assert controller.check_current_file() is not None
    assert controller.wait_for_checks(timeout=10) is True
    assert host.notifications == [("info", "✅ DhrLang file compiled successfully!")]
    assert host.outputs == [(CHECK_OUTPUT_TITLE, "OK\n")]
    assert host.checks[0].outcome == "success"


@needs_posix_shell
def test_check_output_panel_can_be_suppressed(controller, host, settings, workspace, fake_java):
    write_jar(workspace / "DhrLang.jar")
    settings.set("dhrlang.java_path", str(fake_java))
    settings.set("run.show_check_output", False)
    host.active = str(write_source(workspace / "main.dhr"))

    controller.check_current_file()
    controller.wait_for_checks(timeout=10)
    assert host.outputs == []
    assert host.notifications[0][0] == "info"


@needs_posix_shell
def test_check_tool_error_surfaces_stderr(controller, host, settings, workspace, fake_java):
    write_jar(workspace / "DhrLang.jar")
    settings.set("dhrlang.java_path", str(fake_java))
    host.active = str(write_source(workspace / "broken.dhr", "ERROR\n"))

    controller.check_current_file()
    assert controller.wait_for_checks(timeout=10) is True
    assert host.notifications == [("error", "Compilation Error: error: unexpected token\n")]
    assert host.outputs == []
    assert host.checks[0].outcome == "tool_error"


def test_check_with_missing_java_is_an_invocation_failure(controller, host, settings, workspace, tmp_path):
    write_jar(workspace / "DhrLang.jar")
    settings.set("dhrlang.java_path", str(tmp_path / "no-such-java"))
    host.active = str(write_source(workspace / "main.dhr"))

    controller.check_current_file()
    controller.wait_for_checks(timeout=10)
    level, text = host.notifications[-1]
    assert level == "error"
    assert text.startswith("Compilation failed: Could not start the DhrLang toolchain")


def test_check_unresolved_toolchain(controller, host, workspace):
    host.active = str(write_source(workspace / "main.dhr"))
    controller.check_current_file()
    assert controller.wait_for_checks(timeout=10) is True
    assert "DhrLang.jar not found" in host.notifications[-1][1]
    assert host.checks == []


def test_dhrlang_setting_change_invalidates_toolchain(controller, host, settings, workspace, tmp_path):
    write_jar(workspace / "DhrLang.jar")
    override = write_jar(tmp_path / "tools" / "DhrLang.jar")
    settings.set("dhrlang.jar_path", str(override))
    assert controller.refresh_toolchain_status().origin == "explicit-override"

    settings.set("dhrlang.jar_path", "")
    assert controller.locator.state() == "unknown"
    assert host.statuses[-1]["state"] == "unknown"
    assert controller.refresh_toolchain_status().origin == "workspace-root"


def test_unrelated_setting_keeps_cached_toolchain(controller, settings, workspace):
    write_jar(workspace / "DhrLang.jar")
    controller.refresh_toolchain_status()
    settings.set("completion.enabled", False)
    assert controller.locator.state() == "resolved"


def test_run_started_carries_focus_preference(controller, host, settings, workspace):
    write_jar(workspace / "DhrLang.jar")
    source = write_source(workspace / "main.dhr")
    host.active = str(source)
    started = []
    controller.runStarted.connect(started.append)

    controller.run_current_file()
    settings.set("run.focus_output_on_run", False)
    controller.run_current_file()
    assert started == [
        {"target": str(source), "focus_output": True},
        {"target": str(source), "focus_output": False},
    ]
