"""Project scaffolding orchestrator.

Creates the ServiceNow TypeScript project skeleton:

- ``<project>/`` plus the configured sub-directories (``src/``, ``test/``)
- ``.node-version`` pinned to the configured Node.js version
- the configured set of template files, each written only if absent
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sn_devkit.config import MutationRule, ScaffoldConfig, default_rules
from sn_devkit.utils import Reporter

from .templates import TEMPLATE_FOR_FILE, TemplateRenderer

# TypeScript + Jest toolchain added after the ServiceNow dependencies.
TOOLCHAIN_DEV_DEPENDENCIES: dict[str, str] = {
    "@types/jest": "^29.5.0",
    "@types/node": "^20.0.0",
    "jest": "^29.5.0",
    "ts-node": "^10.9.0",
    "typescript": "^5.0.0",
}


@dataclass
class ScaffoldResult:
    """Files and directories touched by :meth:`ProjectScaffolder.scaffold`."""

    project_root: Path
    created: list[Path] = field(default_factory=list)
    updated: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)


class ProjectScaffolder:
    """Scaffolds a project directory from a :class:`ScaffoldConfig`.

    The scaffolded ``package.json`` already carries every
    ``devDependencies`` entry from *rules*, so a freshly scaffolded project
    needs no patching.
    """

    def __init__(
        self,
        config: ScaffoldConfig | None = None,
        rules: list[MutationRule] | None = None,
        reporter: Reporter | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or ScaffoldConfig()
        self.rules = rules if rules is not None else default_rules()
        self.reporter = reporter or Reporter()
        self.renderer = renderer or TemplateRenderer()

    # -- Public API --------------------------------------------------------

    async def scaffold(self, parent_dir: str | Path = ".") -> ScaffoldResult:
        """Create the project under *parent_dir* and return what was written.

        Re-running is safe: existing directories and files are left alone,
        only ``.node-version`` is rewritten.
        """
        project_root = Path(parent_dir) / self.config.project_name
        result = ScaffoldResult(project_root=project_root)

        self.reporter.info(f"Creating project directory: {self.config.project_name}")
        await self._make_dir(project_root, result)

        node_version_file = project_root / ".node-version"
        existed = node_version_file.exists()
        await asyncio.to_thread(
            node_version_file.write_text, f"{self.config.node_version}\n", "utf-8"
        )
        (result.updated if existed else result.created).append(node_version_file)
        self.reporter.success(
            f"{'Updated' if existed else 'Created'} .node-version file "
            f"with Node.js version {self.config.node_version}"
        )

        for name in self.config.directories:
            await self._make_dir(project_root / name, result)

        context = self.build_context()
        for name in self.config.files:
            target = project_root / name
            if target.exists():
                self.reporter.warning(f"{name} already exists, skipping...")
                result.skipped.append(target)
                continue
            await self.renderer.render_to_file(TEMPLATE_FOR_FILE[name], target, context)
            result.created.append(target)
            self.reporter.success(f"Created {name}")

        return result

    def build_context(self) -> dict[str, Any]:
        """Template context shared by every scaffolded file."""
        dev_dependencies: dict[str, str] = {}
        for rule in self.rules:
            if len(rule.path) == 2 and rule.path[0] == "devDependencies":
                dev_dependencies[rule.path[1]] = rule.value
        for name, version in TOOLCHAIN_DEV_DEPENDENCIES.items():
            dev_dependencies.setdefault(name, version)

        return {
            "project_name": self.config.project_name,
            "description": self.config.description,
            "node_version": self.config.node_version,
            "dev_dependencies": dev_dependencies,
        }

    def print_next_steps(self, result: ScaffoldResult) -> None:
        """Print the follow-up commands and the resulting layout."""
        version = self.config.node_version
        self.reporter.header("Setup completed successfully!")
        self.reporter.info("Next steps:")
        self.reporter.info(f"1. Navigate to your project directory: cd {result.project_root}")
        self.reporter.info(f"2. Install Node.js version: nodenv install {version}")
        self.reporter.info(f"3. Set local Node.js version: nodenv local {version}")
        self.reporter.info("4. Install dependencies: npm install")
        self.reporter.info("5. Start developing!")

        entries = [f".node-version ({version})", *self.config.files]
        entries += [f"{name}/" for name in self.config.directories]
        self.reporter.info("Project structure created:")
        self.reporter.console.print(f"- {self.config.project_name}/", markup=False)
        for index, entry in enumerate(entries):
            branch = "└──" if index == len(entries) - 1 else "├──"
            self.reporter.console.print(f"  {branch} {entry}", markup=False)

    # -- Internal helpers --------------------------------------------------

    async def _make_dir(self, path: Path, result: ScaffoldResult) -> None:
        if path.is_dir():
            self.reporter.warning(f"Directory {path} already exists")
            result.skipped.append(path)
            return
        await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
        result.created.append(path)
        self.reporter.success(f"Created directory: {path}")
