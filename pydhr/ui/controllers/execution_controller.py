"""Controller for DhrLang run/check actions and toolchain status."""

from __future__ import annotations

import concurrent.futures
import os
import queue
import time
from pathlib import Path
from typing import Any, Callable

from PySide6.QtCore import QObject, QTimer, Signal

from pydhr.lang_dhr.errors import (
    DhrActionError,
    InvocationFailure,
    NoActiveDocument,
    ToolchainUnresolved,
    ToolError,
    WrongExtension,
)
from pydhr.lang_dhr.toolchain_discovery import (
    DEFAULT_INSTALL_ROOT,
    LocatorConfig,
    ResolvedToolchain,
    ToolchainLocator,
)
from pydhr.lang_dhr.toolchain_runner import InvocationResult, TerminalRunner, launch_run, run_check
from pydhr.services.language_id import is_dhrlang_path
from pydhr.settings_manager import SettingsManager

CHECK_OUTPUT_TITLE = "=== DhrLang Compilation Output ==="
_TOOLCHAIN_SETTING_PREFIXES = ("dhrlang", "workspace_roots")


class ExecutionController(QObject):
    notification = Signal(str, str)  # level, text
    toolchainStatusChanged = Signal(object)
    checkFinished = Signal(object)  # InvocationResult
    outputReady = Signal(str, str)  # title, text
    runStarted = Signal(object)  # {"target", "focus_output"}
    statusMessage = Signal(str)

    def __init__(
        self,
        settings: SettingsManager,
        *,
        active_document: Callable[[], str | None],
        save_document: Callable[[str], bool] | None = None,
        terminal_runner: TerminalRunner | None = None,
        install_root: str | Path = DEFAULT_INSTALL_ROOT,
        parent=None,
    ):
        super().__init__(parent)
        self._settings = settings
        self._active_document = active_document
        self._save_document = save_document
        self._terminal_runner = terminal_runner
        self.last_launch: object | None = None
        self.locator = ToolchainLocator(
            config_provider=lambda: LocatorConfig.from_settings(self._settings.dhrlang_settings()),
            workspace_roots_provider=self._settings.workspace_roots,
            install_root=install_root,
        )

        self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="pydhr-check")
        self._active_futures: set[concurrent.futures.Future] = set()
        self._result_queue: queue.Queue[object] = queue.Queue()
        self._pending_checks = 0
        self._result_pump = QTimer(self)
        self._result_pump.setInterval(35)
        self._result_pump.timeout.connect(self.process_pending_results)
        self._result_pump.start()

        self._settings.add_change_listener(self._on_setting_changed)

    # ---------- Actions ----------

    def run_current_file(self) -> bool:
        try:
            target = self._prepare_target("run")
            toolchain = self._resolve_toolchain()
            self.last_launch = launch_run(toolchain, target, terminal_runner=self._terminal_runner)
        except DhrActionError as exc:
            self._report(exc)
            return False
        self.runStarted.emit(
            {"target": target, "focus_output": bool(self._settings.get("run.focus_output_on_run", True))}
        )
        self.statusMessage.emit(f"Running {os.path.basename(target)}")
        return True

    def check_current_file(self) -> concurrent.futures.Future | None:
        try:
            target = self._prepare_target("compile")
        except DhrActionError as exc:
            self._report(exc)
            return None

        future = self._executor.submit(self._check_worker, target)
        self._pending_checks += 1
        self._active_futures.add(future)
        future.add_done_callback(self._queue_future_result)
        self.statusMessage.emit(f"Checking {os.path.basename(target)}")
        return future

    def refresh_toolchain_status(self) -> ResolvedToolchain | None:
        toolchain = self.locator.resolve()
        self._emit_toolchain_status(toolchain)
        return toolchain

    def shutdown(self) -> None:
        self._settings.remove_change_listener(self._on_setting_changed)
        self._result_pump.stop()
        for fut in list(self._active_futures):
            fut.cancel()
        self._executor.shutdown(wait=False, cancel_futures=True)

    # ---------- Check worker plumbing ----------

    def _check_worker(self, target: str) -> dict[str, Any]:
        toolchain = self.locator.resolve()
        if toolchain is None:
            return {"target": target, "toolchain": None, "result": None}
        return {"target": target, "toolchain": toolchain, "result": run_check(toolchain, target)}

    def _queue_future_result(self, future: concurrent.futures.Future) -> None:
        self._active_futures.discard(future)
        if future.cancelled():
            self._result_queue.put(None)
            return
        exc = future.exception()
        if exc is not None:
            self._result_queue.put(InvocationFailure("Compilation failed", detail=str(exc)))
            return
        self._result_queue.put(future.result())

    def process_pending_results(self) -> None:
        while True:
            try:
                item = self._result_queue.get_nowait()
            except queue.Empty:
                return
            self._handle_queued(item)

    def wait_for_checks(self, timeout: float | None = None) -> bool:
        """Block until every submitted check has been delivered.

        For hosts without a running event loop. Returns False on timeout.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while self._pending_checks > 0:
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                return False
            try:
                item = self._result_queue.get(timeout=remaining)
            except queue.Empty:
                return False
            self._handle_queued(item)
        return True

    def _handle_queued(self, item: object) -> None:
        self._pending_checks = max(0, self._pending_checks - 1)
        if isinstance(item, DhrActionError):
            self._report(item)
        elif isinstance(item, dict):
            self._on_check_finished(item)

    def _on_check_finished(self, payload: dict[str, Any]) -> None:
        toolchain = payload.get("toolchain")
        self._emit_toolchain_status(toolchain)
        if toolchain is None:
            self._report(self._unresolved_error())
            return

        result: InvocationResult = payload["result"]
        for line in result.debug_lines:
            self.statusMessage.emit(line)
        self.checkFinished.emit(result)

        if result.outcome == "success":
            self.notification.emit("info", "✅ DhrLang file compiled successfully!")
            if result.has_output and bool(self._settings.get("run.show_check_output", True)):
                self.outputReady.emit(CHECK_OUTPUT_TITLE, result.stdout)
            return
        if result.outcome == "tool_error":
            self._report(ToolError("Compilation Error", detail=result.stderr))
            return
        self._report(InvocationFailure("Compilation failed", detail=result.message))

    # ---------- Helpers ----------

    def _prepare_target(self, action: str) -> str:
        path = str(self._active_document() or "").strip()
        if not path:
            raise NoActiveDocument("No DhrLang file is open!")
        if not is_dhrlang_path(path):
            raise WrongExtension(f"Please open a .dhr file to {action}!")
        if self._save_document is not None and bool(self._settings.get("run.save_before_run", True)):
            if self._save_document(path) is False:
                raise DhrActionError("Could not save the file before running", detail=os.path.basename(path))
        return os.path.abspath(path)

    def _resolve_toolchain(self) -> ResolvedToolchain:
        toolchain = self.locator.resolve()
        self._emit_toolchain_status(toolchain)
        if toolchain is None:
            raise self._unresolved_error()
        return toolchain

    @staticmethod
    def _unresolved_error() -> ToolchainUnresolved:
        return ToolchainUnresolved(
            "DhrLang.jar not found. Set 'dhrlang.jar_path' or place DhrLang.jar in the workspace or its lib folder."
        )

    def _emit_toolchain_status(self, toolchain: ResolvedToolchain | None) -> None:
        state = self.locator.state()
        if toolchain is not None:
            self.toolchainStatusChanged.emit(
                {
                    "state": "resolved",
                    "artifact_path": toolchain.artifact_path,
                    "origin": toolchain.origin,
                    "message": f"DhrLang: {os.path.basename(toolchain.artifact_path)}",
                }
            )
            return
        self.toolchainStatusChanged.emit(
            {
                "state": "unresolved" if state != "unknown" else "unknown",
                "artifact_path": "",
                "origin": "",
                "message": "DhrLang toolchain not found" if state != "unknown" else "",
            }
        )

    def _report(self, exc: DhrActionError) -> None:
        self.notification.emit(exc.level, exc.user_message)
        self.statusMessage.emit(f"[DhrLang] {exc.user_message}")

    def _on_setting_changed(self, key: str, _value: object) -> None:
        if any(key == prefix or key.startswith(prefix + ".") for prefix in _TOOLCHAIN_SETTING_PREFIXES):
            self.locator.invalidate()
            self._emit_toolchain_status(None)
