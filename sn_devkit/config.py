"""SN Devkit configuration.

Typed configuration for the dependency patcher and the project scaffolder.
All settings use Pydantic v2 models so they are validated at construction time
and can be serialised to/from JSON or environment variables without
boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Dependency locators
# ---------------------------------------------------------------------------

GLIDE_PACKAGE = "@servicenow/glide"
GLIDE_LOCATOR = "git://github.com/sonisoft-cnanda/servicenow-glide"

SDK_MOCK_PACKAGE = "sn-sdk-mock"
SDK_MOCK_LOCATOR = "file:../sn-sdk-mock"

# Template file names the scaffolder knows how to render.
SCAFFOLD_FILES: tuple[str, ...] = (
    "package.json",
    "tsconfig.json",
    ".eslintrc.js",
    ".gitignore",
)


class MutationRule(BaseModel):
    """A single ``(key path, new value)`` pair applied to the manifest.

    Applying a rule overwrites whatever sits at *path*, creating missing
    intermediate objects, so re-applying it is a no-op.
    """

    path: list[str] = Field(..., min_length=1)
    value: str

    @field_validator("path")
    @classmethod
    def _no_empty_keys(cls, path: list[str]) -> list[str]:
        if any(not key for key in path):
            raise ValueError("rule path segments must be non-empty strings")
        return path

    @property
    def dotted(self) -> str:
        """Human-readable form, e.g. ``devDependencies["sn-sdk-mock"]``."""
        head, *rest = self.path
        return head + "".join(f'["{key}"]' for key in rest)


def default_rules() -> list[MutationRule]:
    """Return fresh copies of the two fixed ServiceNow dependency rules."""
    return [
        MutationRule(path=["devDependencies", GLIDE_PACKAGE], value=GLIDE_LOCATOR),
        MutationRule(path=["devDependencies", SDK_MOCK_PACKAGE], value=SDK_MOCK_LOCATOR),
    ]


DEFAULT_RULES: list[MutationRule] = default_rules()


class PatcherConfig(BaseModel):
    """Settings for the ``package.json`` dependency patcher."""

    manifest_name: str = Field(default="package.json", min_length=1)
    backup_suffix: str = Field(default=".backup", min_length=1)
    editor: Literal["builtin", "jq"] = Field(
        default="builtin", description="JSON-editing backend used to apply rules"
    )
    rules: list[MutationRule] = Field(default_factory=default_rules)
    install_command: list[str] = Field(default_factory=lambda: ["npm", "install"], min_length=1)
    install_timeout: Optional[int] = Field(
        default=None, ge=1, description="Install timeout in seconds (None = no limit)"
    )

    def manifest_path(self, directory: str | Path = ".") -> Path:
        """Path of the manifest inside *directory*."""
        return Path(directory) / self.manifest_name

    def backup_path(self, manifest: str | Path) -> Path:
        """Sibling backup path for *manifest* (``package.json.backup``)."""
        manifest = Path(manifest)
        return manifest.with_name(manifest.name + self.backup_suffix)


class ScaffoldConfig(BaseModel):
    """Settings for the project scaffolder."""

    project_name: str = Field(default="sn-dev-project", min_length=1)
    description: str = Field(default="ServiceNow Development Project")
    node_version: str = Field(default="22.16.0", min_length=1)
    files: list[str] = Field(default_factory=lambda: list(SCAFFOLD_FILES))
    directories: list[str] = Field(default_factory=lambda: ["src", "test"])

    @field_validator("project_name")
    @classmethod
    def _plain_name(cls, name: str) -> str:
        if "/" in name or "\\" in name or name in (".", "..") or Path(name).is_absolute():
            raise ValueError(
                f"project name '{name}' must be a single directory name, not a path"
            )
        return name

    @field_validator("files")
    @classmethod
    def _known_files(cls, files: list[str]) -> list[str]:
        unknown = [name for name in files if name not in SCAFFOLD_FILES]
        if unknown:
            raise ValueError(
                f"unknown scaffold file(s): {', '.join(unknown)} "
                f"(choose from {', '.join(SCAFFOLD_FILES)})"
            )
        return files


class Config(BaseModel):
    """Global SN Devkit configuration."""

    patcher: PatcherConfig = Field(default_factory=PatcherConfig)
    scaffold: ScaffoldConfig = Field(default_factory=ScaffoldConfig)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls, base: "Config | None" = None) -> "Config":
        """Overlay environment variables on *base* (or the defaults).

        Recognised variables (all optional):
            SN_MANIFEST, SN_JSON_EDITOR, SN_INSTALL_TIMEOUT,
            SN_PROJECT_NAME, SN_NODE_VERSION, SN_SCAFFOLD_FILES.
        """
        base = base or cls()

        patcher_kwargs: dict[str, Any] = {}
        if os.environ.get("SN_MANIFEST"):
            patcher_kwargs["manifest_name"] = os.environ["SN_MANIFEST"]
        if os.environ.get("SN_JSON_EDITOR"):
            patcher_kwargs["editor"] = os.environ["SN_JSON_EDITOR"]
        if os.environ.get("SN_INSTALL_TIMEOUT"):
            patcher_kwargs["install_timeout"] = int(os.environ["SN_INSTALL_TIMEOUT"])

        scaffold_kwargs: dict[str, Any] = {}
        if os.environ.get("SN_PROJECT_NAME"):
            scaffold_kwargs["project_name"] = os.environ["SN_PROJECT_NAME"]
        if os.environ.get("SN_NODE_VERSION"):
            scaffold_kwargs["node_version"] = os.environ["SN_NODE_VERSION"]
        if os.environ.get("SN_SCAFFOLD_FILES"):
            scaffold_kwargs["files"] = split_csv(os.environ["SN_SCAFFOLD_FILES"])

        return cls(
            patcher=PatcherConfig.model_validate(
                {**base.patcher.model_dump(), **patcher_kwargs}
            ),
            scaffold=ScaffoldConfig.model_validate(
                {**base.scaffold.model_dump(), **scaffold_kwargs}
            ),
        )


def split_csv(value: str) -> list[str]:
    """Split a comma-separated option into trimmed, non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]
