"""Failures surfaced by the DhrLang run/check actions."""

from __future__ import annotations


class DhrActionError(RuntimeError):
    """Base class for problems reported to the user as a single notification."""

    level = "error"

    def __init__(self, message: str, *, detail: str = "") -> None:
        super().__init__(message)
        self.message = str(message)
        self.detail = str(detail or "")

    @property
    def user_message(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class NoActiveDocument(DhrActionError):
    """No file is open in the editor."""


class WrongExtension(DhrActionError):
    """The open file is not a ``.dhr`` source."""


class ToolchainUnresolved(DhrActionError):
    """Every toolchain candidate location was probed without a hit."""


class InvocationFailure(DhrActionError):
    """The toolchain process could not be started."""


class ToolError(DhrActionError):
    """The toolchain ran and reported a problem on stderr."""
