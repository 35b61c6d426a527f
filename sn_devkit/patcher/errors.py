"""Error types raised by the dependency patcher."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories surfaced by :class:`PatchError`."""

    MISSING_TOOL = "missing_tool"
    MANIFEST_NOT_FOUND = "manifest_not_found"
    IO_FAILURE = "io_failure"
    INVALID_MANIFEST = "invalid_manifest"
    INSTALL_FAILURE = "install_failure"


class PatchError(Exception):
    """Raised when patching the manifest cannot proceed.

    Attributes:
        kind: The failure category.
        hint: Optional follow-up lines telling the user how to recover.
    """

    def __init__(self, kind: ErrorKind, message: str, hint: list[str] | None = None) -> None:
        self.kind = kind
        self.hint = hint or []
        super().__init__(message)
