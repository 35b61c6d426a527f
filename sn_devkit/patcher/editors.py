"""JSON-editing backends used to apply mutation rules.

Two backends are provided:

- ``BuiltinJsonEditor`` edits the manifest in-process and is always available.
- ``JqJsonEditor`` shells out to ``jq``, matching the original shell tooling.
  It is only available when ``jq`` is on ``PATH``.

Each ``set_value`` call persists its result immediately by writing a
temporary sibling file and moving it over the manifest.
"""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

from sn_devkit.utils import command_exists, replace_file, run_command

from .errors import ErrorKind, PatchError
from .manifest import Manifest

JQ_INSTALL_HINTS: list[str] = [
    "  Ubuntu/Debian: sudo apt-get install jq",
    "  macOS: brew install jq",
    "  CentOS/RHEL: sudo yum install jq",
    "  Fedora: sudo dnf install jq",
    "  Windows: winget install jqlang.jq",
]


class JsonEditor(ABC):
    """Sets a single string value inside a JSON document on disk."""

    name: str = ""

    @abstractmethod
    def available(self) -> bool:
        """Return ``True`` if the backend can be used on this machine."""

    def missing_error(self) -> PatchError:
        return PatchError(
            ErrorKind.MISSING_TOOL, f"JSON editor '{self.name}' is not available"
        )

    @abstractmethod
    async def set_value(self, manifest: Path, keys: Sequence[str], value: str) -> None:
        """Overwrite *keys* in *manifest* with *value* and persist the result."""


class BuiltinJsonEditor(JsonEditor):
    name = "builtin"

    def available(self) -> bool:
        return True

    async def set_value(self, manifest: Path, keys: Sequence[str], value: str) -> None:
        document = await asyncio.to_thread(Manifest.load, manifest)
        document.set_path(keys, value)
        await asyncio.to_thread(document.save, manifest)


class JqJsonEditor(JsonEditor):
    """Applies ``setpath($p; $v)`` with the ``jq`` command-line processor."""

    name = "jq"

    def __init__(self, executable: str = "jq", timeout: float = 30) -> None:
        self.executable = executable
        self.timeout = timeout

    def available(self) -> bool:
        return command_exists(self.executable)

    def missing_error(self) -> PatchError:
        return PatchError(
            ErrorKind.MISSING_TOOL,
            "jq is required but not installed. Please install jq first:",
            hint=list(JQ_INSTALL_HINTS),
        )

    async def set_value(self, manifest: Path, keys: Sequence[str], value: str) -> None:
        cmd = [
            self.executable,
            "--argjson", "p", json.dumps(list(keys)),
            "--arg", "v", value,
            "setpath($p; $v)",
            str(manifest),
        ]
        try:
            returncode, stdout, stderr = await run_command(cmd, timeout=self.timeout)
        except FileNotFoundError as exc:
            raise self.missing_error() from exc

        if returncode != 0:
            kind = (
                ErrorKind.IO_FAILURE
                if "Could not open" in stderr or returncode == -1
                else ErrorKind.INVALID_MANIFEST
            )
            raise PatchError(
                kind, f"jq failed on {manifest} (exit {returncode}): {stderr}"
            )

        try:
            await asyncio.to_thread(replace_file, manifest, stdout)
        except OSError as exc:
            raise PatchError(
                ErrorKind.IO_FAILURE, f"Failed to write {manifest}: {exc}"
            ) from exc


EDITORS: dict[str, type[JsonEditor]] = {
    BuiltinJsonEditor.name: BuiltinJsonEditor,
    JqJsonEditor.name: JqJsonEditor,
}


def make_editor(name: str) -> JsonEditor:
    """Instantiate the editor registered under *name*."""
    try:
        return EDITORS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown JSON editor '{name}' (choose from {', '.join(EDITORS)})"
        ) from None
