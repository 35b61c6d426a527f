"""Dependency patcher for ``package.json``.

Runs after the ServiceNow SDK has created the initial ``package.json``.  It
points ``@servicenow/glide`` at the git repository and adds the local
``sn-sdk-mock`` package, then optionally runs ``npm install``.

Order of operations:

1. Pre-flight: the JSON editor must be available and the manifest must exist.
   Nothing on disk is touched if either check fails.
2. Back up the manifest to ``package.json.backup`` (overwriting any previous
   backup).  A failed backup aborts the run.
3. Apply each mutation rule, persisting after every rule.
4. Print the resulting ``devDependencies``.
5. Optionally install.  Install failures are reported but never roll back
   the manifest.
"""

from __future__ import annotations

import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from sn_devkit.config import PatcherConfig
from sn_devkit.utils import Reporter, command_exists, run_command

from .editors import JsonEditor, make_editor
from .errors import ErrorKind, PatchError
from .manifest import Manifest


@dataclass
class PatchResult:
    """Outcome of a successful :meth:`DependencyPatcher.patch`."""

    manifest_path: Path
    backup_path: Path
    dev_dependencies: dict[str, Any]


class DependencyPatcher:
    """Applies the configured mutation rules to a manifest file."""

    def __init__(
        self,
        config: PatcherConfig | None = None,
        reporter: Reporter | None = None,
        editor: JsonEditor | None = None,
    ) -> None:
        self.config = config or PatcherConfig()
        self.reporter = reporter or Reporter()
        self.editor = editor or make_editor(self.config.editor)

    # -- Steps -------------------------------------------------------------

    def preflight(self, manifest: Path) -> None:
        """Check the editor and the manifest before any file is touched.

        Raises:
            PatchError: ``MISSING_TOOL`` or ``MANIFEST_NOT_FOUND``.
        """
        if not self.editor.available():
            raise self.editor.missing_error()

        if not manifest.is_file():
            raise PatchError(
                ErrorKind.MANIFEST_NOT_FOUND,
                f"{manifest.name} not found in {manifest.parent.resolve()}",
                hint=[
                    f"Please run this command from the project directory that "
                    f"contains {manifest.name}"
                ],
            )

    def backup(self, manifest: Path) -> Path:
        """Copy *manifest* byte-for-byte to its backup path.

        Raises:
            PatchError: ``IO_FAILURE`` if the copy fails.
        """
        backup_path = self.config.backup_path(manifest)
        try:
            shutil.copyfile(manifest, backup_path)
        except OSError as exc:
            raise PatchError(
                ErrorKind.IO_FAILURE, f"Failed to create backup {backup_path}: {exc}"
            ) from exc
        self.reporter.info(f"Created backup: {backup_path}")
        return backup_path

    async def apply_rules(self, manifest: Path) -> None:
        """Apply every rule in order, persisting the manifest after each one."""
        for rule in self.config.rules:
            self.reporter.info(f"Setting {rule.dotted} = {rule.value}")
            await self.editor.set_value(manifest, rule.path, rule.value)

    # -- Public API --------------------------------------------------------

    async def patch(self, manifest_path: str | Path | None = None) -> PatchResult:
        """Back up and patch the manifest.

        Args:
            manifest_path: Manifest to patch.  Defaults to the configured
                manifest name in the current directory.

        Raises:
            PatchError: On any fatal failure.  If the error is raised after
                the backup step, the backup holds the pre-run content.
        """
        manifest = (
            Path(manifest_path)
            if manifest_path is not None
            else self.config.manifest_path()
        )

        self.preflight(manifest)
        self.reporter.info(f"Found {manifest.name}, updating dependencies...")

        backup_path = await asyncio.to_thread(self.backup, manifest)
        await self.apply_rules(manifest)

        document = await asyncio.to_thread(Manifest.load, manifest)
        dev_dependencies = document.dev_dependencies

        self.reporter.success(f"Successfully updated {manifest.name} with ServiceNow dependencies")
        self.reporter.info("Updated devDependencies:")
        self.reporter.print_json(dev_dependencies)

        return PatchResult(
            manifest_path=manifest,
            backup_path=backup_path,
            dev_dependencies=dev_dependencies,
        )

    async def install(self, project_dir: str | Path) -> int:
        """Run the install command in *project_dir* and return its exit code.

        A missing package manager is only a warning (returns 0).
        """
        cmd = self.config.install_command
        manual = " ".join(cmd)
        self.reporter.info("Installing updated dependencies...")

        if not command_exists(cmd[0]):
            self.reporter.warning(f"{cmd[0]} not found, skipping dependency installation")
            self.reporter.info(f"Please run '{manual}' manually to install the updated dependencies")
            return 0

        try:
            returncode, _, stderr = await run_command(
                cmd,
                cwd=project_dir,
                timeout=self.config.install_timeout,
                capture=False,
            )
        except OSError as exc:
            self.reporter.warning(f"[{ErrorKind.INSTALL_FAILURE.value}] Could not run '{manual}': {exc}")
            return 1

        if returncode != 0:
            detail = f": {stderr}" if stderr else ""
            self.reporter.warning(
                f"[{ErrorKind.INSTALL_FAILURE.value}] '{manual}' exited with {returncode}{detail}"
            )
            self.reporter.info("The updated package.json was kept; fix the error and re-run the install")
            return returncode if returncode > 0 else 1

        self.reporter.success("Dependencies installed successfully")
        return 0

    async def run(
        self,
        manifest_path: str | Path | None = None,
        install: bool = False,
        project_dir: Optional[str | Path] = None,
    ) -> int:
        """Patch the manifest and optionally install; return the exit code.

        Fatal errors propagate as :class:`PatchError`.
        """
        self.reporter.info("Starting package.json dependency update...")
        result = await self.patch(manifest_path)

        exit_code = 0
        if install:
            exit_code = await self.install(project_dir or result.manifest_path.parent)
        else:
            self.reporter.info(
                f"To install the updated dependencies, run: {' '.join(self.config.install_command)}"
            )

        if exit_code == 0:
            self.reporter.success("Package dependency update completed!")
        self.reporter.info(f"Backup of original {result.manifest_path.name} saved as {result.backup_path.name}")
        return exit_code
