"""Tests for the project scaffolder (sn_devkit.scaffolder).

Covers:
- Directory structure and .node-version creation
- Default and explicit scaffolded-file sets
- Write-if-absent behaviour on re-runs
- Rendered package.json / tsconfig.json content
- Template discovery
- Next-steps output
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from sn_devkit.config import MutationRule, ScaffoldConfig
from sn_devkit.scaffolder import (
    TEMPLATE_FOR_FILE,
    ProjectScaffolder,
    TemplateRenderer,
)
from sn_devkit.utils import Reporter

pytestmark = pytest.mark.unit


@pytest.fixture
def scaffolder(reporter: Reporter) -> ProjectScaffolder:
    return ProjectScaffolder(ScaffoldConfig(project_name="demo-app"), reporter=reporter)


class TestScaffold:
    @pytest.mark.asyncio
    async def test_default_layout(self, scaffolder: ProjectScaffolder, tmp_path: Path):
        result = await scaffolder.scaffold(tmp_path)

        root = tmp_path / "demo-app"
        assert result.project_root == root
        assert (root / "src").is_dir()
        assert (root / "test").is_dir()
        for name in ("package.json", "tsconfig.json", ".eslintrc.js", ".gitignore"):
            assert (root / name).is_file(), name
        assert (root / ".node-version").read_text(encoding="utf-8") == "22.16.0\n"
        assert result.skipped == []

    @pytest.mark.asyncio
    async def test_explicit_file_set(self, reporter: Reporter, tmp_path: Path):
        config = ScaffoldConfig(project_name="lean", files=["package.json"], directories=["src"])
        await ProjectScaffolder(config, reporter=reporter).scaffold(tmp_path)

        root = tmp_path / "lean"
        assert (root / "package.json").exists()
        assert not (root / "tsconfig.json").exists()
        assert not (root / ".eslintrc.js").exists()
        assert not (root / "test").exists()

    @pytest.mark.asyncio
    async def test_existing_files_are_not_overwritten(
        self, scaffolder: ProjectScaffolder, tmp_path: Path
    ):
        root = tmp_path / "demo-app"
        root.mkdir()
        (root / "package.json").write_text('{"name": "mine"}', encoding="utf-8")

        result = await scaffolder.scaffold(tmp_path)

        assert (root / "package.json").read_text(encoding="utf-8") == '{"name": "mine"}'
        assert root / "package.json" in result.skipped
        assert root in result.skipped
        assert root / "tsconfig.json" in result.created

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, scaffolder: ProjectScaffolder, tmp_path: Path):
        await scaffolder.scaffold(tmp_path)
        first = (tmp_path / "demo-app" / "package.json").read_bytes()

        result = await scaffolder.scaffold(tmp_path)

        assert (tmp_path / "demo-app" / "package.json").read_bytes() == first
        assert result.created == []
        assert result.updated == [tmp_path / "demo-app" / ".node-version"]

    @pytest.mark.asyncio
    async def test_first_run_creates_node_version(
        self, scaffolder: ProjectScaffolder, reporter: Reporter, tmp_path: Path
    ):
        result = await scaffolder.scaffold(tmp_path)

        assert tmp_path / "demo-app" / ".node-version" in result.created
        assert result.updated == []
        assert "Created .node-version file" in reporter.console.export_text()

    @pytest.mark.asyncio
    async def test_node_version_rewritten(self, reporter: Reporter, tmp_path: Path):
        await ProjectScaffolder(ScaffoldConfig(node_version="20.0.0"), reporter=reporter).scaffold(tmp_path)
        await ProjectScaffolder(ScaffoldConfig(node_version="22.1.0"), reporter=reporter).scaffold(tmp_path)
        node_version = tmp_path / "sn-dev-project" / ".node-version"
        assert node_version.read_text(encoding="utf-8") == "22.1.0\n"


class TestRenderedContent:
    @pytest.mark.asyncio
    async def test_package_json_is_valid_and_patched(
        self, scaffolder: ProjectScaffolder, tmp_path: Path
    ):
        await scaffolder.scaffold(tmp_path)
        data = json.loads((tmp_path / "demo-app" / "package.json").read_text(encoding="utf-8"))

        assert data["name"] == "demo-app"
        assert data["description"] == "ServiceNow Development Project"
        assert data["scripts"]["build"] == "tsc"
        assert list(data["devDependencies"]) == [
            "@servicenow/glide",
            "sn-sdk-mock",
            "@types/jest",
            "@types/node",
            "jest",
            "ts-node",
            "typescript",
        ]
        assert data["devDependencies"]["@servicenow/glide"] == (
            "git://github.com/sonisoft-cnanda/servicenow-glide"
        )
        assert data["devDependencies"]["sn-sdk-mock"] == "file:../sn-sdk-mock"
        assert data["jest"]["testEnvironment"] == "node"

    @pytest.mark.asyncio
    async def test_rules_feed_package_json(self, reporter: Reporter, tmp_path: Path):
        rules = [
            MutationRule(path=["devDependencies", "typescript"], value="5.5.4"),
            MutationRule(path=["engines", "node"], value=">=20"),
        ]
        scaffolder = ProjectScaffolder(ScaffoldConfig(files=["package.json"]), rules, reporter)
        await scaffolder.scaffold(tmp_path)

        data = json.loads((tmp_path / "sn-dev-project" / "package.json").read_text(encoding="utf-8"))
        assert data["devDependencies"]["typescript"] == "5.5.4"
        assert "@servicenow/glide" not in data["devDependencies"]
        assert "engines" not in data

    @pytest.mark.asyncio
    async def test_name_with_quotes_stays_valid_json(self, reporter: Reporter, tmp_path: Path):
        config = ScaffoldConfig(description='The "demo" project', files=["package.json"])
        await ProjectScaffolder(config, reporter=reporter).scaffold(tmp_path)
        data = json.loads((tmp_path / "sn-dev-project" / "package.json").read_text(encoding="utf-8"))
        assert data["description"] == 'The "demo" project'

    @pytest.mark.asyncio
    async def test_tsconfig_is_valid_json(self, scaffolder: ProjectScaffolder, tmp_path: Path):
        await scaffolder.scaffold(tmp_path)
        data = json.loads((tmp_path / "demo-app" / "tsconfig.json").read_text(encoding="utf-8"))
        assert data["compilerOptions"]["rootDir"] == "./src"

    @pytest.mark.asyncio
    async def test_gitignore_and_eslint(self, scaffolder: ProjectScaffolder, tmp_path: Path):
        await scaffolder.scaffold(tmp_path)
        root = tmp_path / "demo-app"
        assert "node_modules/" in (root / ".gitignore").read_text(encoding="utf-8")
        assert "@typescript-eslint/parser" in (root / ".eslintrc.js").read_text(encoding="utf-8")


class TestTemplateRenderer:
    def test_every_scaffold_file_has_a_template(self):
        templates = TemplateRenderer().list_templates()
        assert sorted(TEMPLATE_FOR_FILE.values()) == templates

    def test_missing_template_dir(self, tmp_path: Path):
        assert TemplateRenderer(tmp_path / "nope").list_templates() == []

    def test_render_custom_dir(self, tmp_path: Path):
        (tmp_path / "hello.txt.j2").write_text("hi {{ project_name }}\n", encoding="utf-8")
        assert TemplateRenderer(tmp_path).render("hello.txt.j2", {"project_name": "x"}) == "hi x\n"

    @pytest.mark.asyncio
    async def test_render_to_file_creates_parents(self, tmp_path: Path):
        (tmp_path / "a.j2").write_text("{{ v }}", encoding="utf-8")
        out = await TemplateRenderer(tmp_path).render_to_file(
            "a.j2", tmp_path / "deep" / "a.txt", {"v": "ok"}
        )
        assert out.read_text(encoding="utf-8") == "ok"


class TestNextSteps:
    @pytest.mark.asyncio
    async def test_lists_structure(
        self, scaffolder: ProjectScaffolder, reporter: Reporter, tmp_path: Path
    ):
        result = await scaffolder.scaffold(tmp_path)
        scaffolder.print_next_steps(result)

        out = reporter.console.export_text()
        assert "nodenv install 22.16.0" in out
        assert "├── .node-version (22.16.0)" in out
        assert "└── test/" in out
