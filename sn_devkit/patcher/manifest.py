"""In-memory view of a ``package.json`` manifest.

The document is kept as a plain ordered ``dict`` tree so that fields the
patcher never touches, and their key order, survive a load/save cycle.  Only
the ``devDependencies`` section gets a typed accessor.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from sn_devkit.utils import dump_json, load_json, replace_file

from .errors import ErrorKind, PatchError


class Manifest:
    """A parsed manifest document."""

    def __init__(self, data: dict[str, Any], path: Path | None = None) -> None:
        self.data = data
        self.path = path

    @classmethod
    def load(cls, path: str | Path) -> "Manifest":
        """Read and parse the manifest at *path*.

        Raises:
            PatchError: ``IO_FAILURE`` if the file cannot be read,
                ``INVALID_MANIFEST`` if it is not a JSON object.
        """
        path = Path(path)
        try:
            data = load_json(path)
        except json.JSONDecodeError as exc:
            raise PatchError(
                ErrorKind.INVALID_MANIFEST, f"{path} is not valid JSON: {exc}"
            ) from exc
        except UnicodeDecodeError as exc:
            raise PatchError(
                ErrorKind.INVALID_MANIFEST, f"{path} is not valid UTF-8: {exc}"
            ) from exc
        except OSError as exc:
            raise PatchError(ErrorKind.IO_FAILURE, f"Failed to read {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise PatchError(
                ErrorKind.INVALID_MANIFEST,
                f"{path} must contain a JSON object, found {type(data).__name__}",
            )
        return cls(data, path)

    # -- Accessors ---------------------------------------------------------

    @property
    def dev_dependencies(self) -> dict[str, str]:
        """The ``devDependencies`` mapping (empty if the section is absent)."""
        section = self.data.get("devDependencies", {})
        if not isinstance(section, dict):
            raise PatchError(
                ErrorKind.INVALID_MANIFEST, "devDependencies must be a JSON object"
            )
        return section

    def get_path(self, keys: Sequence[str]) -> Any:
        """Return the value at *keys*, or ``None`` if any segment is missing."""
        node: Any = self.data
        for key in keys:
            if not isinstance(node, dict) or key not in node:
                return None
            node = node[key]
        return node

    # -- Mutation ----------------------------------------------------------

    def set_path(self, keys: Sequence[str], value: Any) -> bool:
        """Overwrite the value at *keys*, creating missing objects on the way.

        Existing keys keep their position; new keys are appended.

        Returns:
            ``True`` if the document changed.

        Raises:
            PatchError: ``INVALID_MANIFEST`` if an intermediate segment holds
                something other than an object.
        """
        *parents, leaf = keys
        node = self.data
        walked: list[str] = []
        for key in parents:
            walked.append(key)
            child = node.setdefault(key, {})
            if not isinstance(child, dict):
                raise PatchError(
                    ErrorKind.INVALID_MANIFEST,
                    f"Cannot set {'.'.join(keys)}: {'.'.join(walked)} is not a JSON object",
                )
            node = child

        changed = node.get(leaf) != value or leaf not in node
        node[leaf] = value
        return changed

    # -- Persistence -------------------------------------------------------

    def dumps(self) -> str:
        return dump_json(self.data)

    def save(self, path: str | Path | None = None) -> Path:
        """Write the document back, replacing the target file atomically.

        Raises:
            PatchError: ``IO_FAILURE`` if the write fails.
        """
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("Manifest has no path; pass one explicitly")
        try:
            replace_file(target, self.dumps())
        except OSError as exc:
            raise PatchError(ErrorKind.IO_FAILURE, f"Failed to write {target}: {exc}") from exc
        return target
