"""SN Devkit dependency patcher -- rewrites ``package.json`` dependency entries.

Quick usage::

    from sn_devkit.patcher import DependencyPatcher

    patcher = DependencyPatcher()
    exit_code = await patcher.run("package.json", install=True)
"""

from sn_devkit.patcher.editors import BuiltinJsonEditor, JqJsonEditor, JsonEditor, make_editor
from sn_devkit.patcher.errors import ErrorKind, PatchError
from sn_devkit.patcher.manifest import Manifest
from sn_devkit.patcher.patcher import DependencyPatcher, PatchResult

__all__ = [
    "BuiltinJsonEditor",
    "DependencyPatcher",
    "ErrorKind",
    "JqJsonEditor",
    "JsonEditor",
    "Manifest",
    "PatchError",
    "PatchResult",
    "make_editor",
]
