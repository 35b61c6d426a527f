"""Shared pytest fixtures for the SN Devkit test suite.

Provides reusable fixtures for:
- Temporary project directories with a ``package.json``
- A recording ``Reporter`` whose output can be asserted on
- Mock subprocess helpers
- A clean ``SN_*`` environment
"""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from rich.console import Console

from sn_devkit.utils import Reporter


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clean_sn_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Strip ``SN_*`` variables so the host environment never leaks in."""
    for name in (
        "SN_MANIFEST",
        "SN_JSON_EDITOR",
        "SN_INSTALL_TIMEOUT",
        "SN_PROJECT_NAME",
        "SN_NODE_VERSION",
        "SN_SCAFFOLD_FILES",
    ):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Manifests
# ---------------------------------------------------------------------------

SDK_MANIFEST: dict[str, Any] = {
    "name": "x-snc-demo",
    "version": "0.0.1",
    "description": "",
    "scripts": {
        "build": "now-sdk build",
        "deploy": "now-sdk install",
    },
    "license": "UNLICENSED",
    "devDependencies": {
        "@servicenow/glide": "26.0.1",
        "@servicenow/sdk": "3.0.3",
        "typescript": "5.5.4",
    },
    "type": "module",
}


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary project directory (auto-cleanup)."""
    project_dir = tmp_path / "sn-project"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def sdk_manifest() -> dict[str, Any]:
    """A ``package.json`` as produced by the ServiceNow SDK (fresh copy)."""
    return json.loads(json.dumps(SDK_MANIFEST))


@pytest.fixture
def manifest_path(tmp_project_dir: Path, sdk_manifest: dict[str, Any]) -> Path:
    """Write ``sdk_manifest`` to ``package.json`` in the project directory."""
    path = tmp_project_dir / "package.json"
    path.write_text(json.dumps(sdk_manifest, indent=2) + "\n", encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@pytest.fixture
def reporter() -> Reporter:
    """A Reporter writing to in-memory consoles.

    Read what was printed with ``reporter.console.export_text()`` (info,
    success, warning) and ``reporter.err_console.export_text()`` (errors).
    """
    out = Console(file=io.StringIO(), record=True, width=200, color_system=None)
    err = Console(file=io.StringIO(), record=True, width=200, color_system=None)
    return Reporter(out=out, err=err)


# ---------------------------------------------------------------------------
# Mock subprocess
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
