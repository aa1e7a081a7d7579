"""Invocation of the DhrLang toolchain in run or check mode."""

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import Callable, Literal

from .errors import InvocationFailure
from .toolchain_discovery import ResolvedToolchain

InvocationMode = Literal["run", "check"]
InvocationOutcome = Literal["success", "tool_error", "invocation_failure"]

CHECK_FLAG = "--check"

TerminalRunner = Callable[[str, str, str], object]


@dataclass(slots=True)
class InvocationResult:
    outcome: InvocationOutcome
    stdout: str = ""
    stderr: str = ""
    message: str = ""
    target_file: str = ""
    command: list[str] = field(default_factory=list)
    debug_lines: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome == "success"

    @property
    def has_output(self) -> bool:
        return bool(str(self.stdout or "").strip())


def build_command(toolchain: ResolvedToolchain, mode: InvocationMode, target_file: str) -> list[str]:
    if mode not in ("run", "check"):
        raise ValueError(f"Unknown invocation mode: {mode!r}")
    command = [str(toolchain.java_path or "java"), "-jar", str(toolchain.artifact_path)]
    if mode == "check":
        command.append(CHECK_FLAG)
    command.append(str(target_file))
    return command


def run_directory_for(target_file: str) -> str:
    directory = os.path.dirname(os.path.abspath(str(target_file)))
    return directory or os.getcwd()


def build_run_command_block(command: list[str], run_in: str) -> str:
    """Shell text for a terminal surface: change directory, then run."""
    lines = [f"cd {shlex.quote(run_in)}", shlex.join(command)]
    return "\n".join(lines)


def run_check(
    toolchain: ResolvedToolchain,
    target_file: str,
    *,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> InvocationResult:
    """Run the toolchain with ``--check`` and classify the captured output.

    Only stderr decides the outcome: any stderr text is a tool error, even if
    the process exited 0. The exit status is recorded in ``debug_lines``.
    """
    command = build_command(toolchain, "check", target_file)
    run_in = run_directory_for(target_file)
    debug = [f"[DhrLang] cwd: {run_in}", f"[DhrLang] cmd: {shlex.join(command)}"]
    try:
        proc = runner(
            command,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            cwd=run_in,
            check=False,
        )
    except (OSError, ValueError) as exc:
        debug.append(f"[DhrLang][stderr] {exc}")
        return InvocationResult(
            outcome="invocation_failure",
            message=f"Could not start the DhrLang toolchain: {exc}",
            target_file=str(target_file),
            command=command,
            debug_lines=debug,
        )

    stdout = str(proc.stdout or "")
    stderr = str(proc.stderr or "")
    debug.append(f"[DhrLang] exit {proc.returncode}")
    if stderr:
        return InvocationResult(
            outcome="tool_error",
            stdout=stdout,
            stderr=stderr,
            message=f"Compilation Error: {stderr}",
            target_file=str(target_file),
            command=command,
            debug_lines=debug,
        )
    return InvocationResult(
        outcome="success",
        stdout=stdout,
        message="DhrLang file compiled successfully!",
        target_file=str(target_file),
        command=command,
        debug_lines=debug,
    )


def launch_run(
    toolchain: ResolvedToolchain,
    target_file: str,
    *,
    terminal_runner: TerminalRunner | None = None,
    popen: Callable[..., object] = subprocess.Popen,
) -> object:
    """Start the program and return as soon as it is launched.

    With a ``terminal_runner`` the command goes to the host's terminal surface
    (``terminal_runner(command_block, run_in, label)``); otherwise the process
    inherits this process's stdio. Launch errors raise ``InvocationFailure``.
    """
    command = build_command(toolchain, "run", target_file)
    run_in = run_directory_for(target_file)
    if terminal_runner is not None:
        label = os.path.basename(str(target_file)) or str(target_file)
        try:
            return terminal_runner(build_run_command_block(command, run_in), run_in, label)
        except (OSError, RuntimeError) as exc:
            raise InvocationFailure("Could not open the DhrLang output terminal", detail=str(exc)) from exc
    try:
        return popen(command, cwd=run_in)
    except (OSError, ValueError) as exc:
        raise InvocationFailure("Could not start the DhrLang toolchain", detail=str(exc)) from exc


def invoke(
    toolchain: ResolvedToolchain,
    mode: InvocationMode,
    target_file: str,
    *,
    terminal_runner: TerminalRunner | None = None,
) -> InvocationResult | None:
    """``check`` returns a captured ``InvocationResult``; ``run`` returns None once launched."""
    if mode == "check":
        return run_check(toolchain, target_file)
    if mode == "run":
        launch_run(toolchain, target_file, terminal_runner=terminal_runner)
        return None
    raise ValueError(f"Unknown invocation mode: {mode!r}")
