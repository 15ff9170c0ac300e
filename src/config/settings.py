# src/config/settings.py — v3
"""Typed configuration loaded from the environment via pydantic-settings.

A single immutable Settings value is built once at process start and passed
explicitly to every component. Variables use the ``INCRLINT_`` prefix; the
IDE build variables (PROJECT_DIR, SRCROOT, ...) are accepted under their
native names as well.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from incrlint.core.errors import IncrlintError


class ConfigurationError(IncrlintError):
    """Raised when configuration is missing or internally inconsistent."""


def _env(name: str) -> AliasChoices:
    return AliasChoices(f"INCRLINT_{name}", name)


class Settings(BaseSettings):
    """Run configuration. Frozen after construction."""

    model_config = SettingsConfigDict(
        env_prefix="INCRLINT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # === IDE / build environment ===
    project_file_path: Path | None = Field(
        default=None, validation_alias=_env("PROJECT_FILE_PATH"),
    )
    project_dir: Path | None = Field(default=None, validation_alias=_env("PROJECT_DIR"))
    workspace_dir: Path | None = Field(default=None, validation_alias=_env("WORKSPACE_DIR"))
    srcroot: Path | None = Field(default=None, validation_alias=_env("SRCROOT"))
    build_root: Path | None = Field(default=None, validation_alias=_env("BUILD_ROOT"))
    build_dir: Path | None = None

    # === Run state ===
    work_directory: Path = Path(".incrlint")
    enabled: bool = True

    # === Analysis tool ===
    tool_name: str = "swiftlint"
    tool_path: Path | None = None
    tool_config_filename: str = ".swiftlint.yml"
    source_suffix: str = ".swift"
    fix_arguments: list[str] = Field(
        default_factory=lambda: ["--fix", "--quiet", "--cache-path", "{cache_path}"]
    )
    lint_arguments: list[str] = Field(
        default_factory=lambda: [
            "--quiet", "--force-exclude", "--reporter", "xcode",
            "--cache-path", "{cache_path}",
        ]
    )
    lint_success_exit_codes: list[int] = Field(default_factory=lambda: [0, 2])

    # === Change detection ===
    root_failure_policy: Literal["fail", "isolate"] = "fail"
    max_graph_depth: int = 256

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"

    # --- Validators ---

    @field_validator("max_graph_depth")
    @classmethod
    def validate_max_graph_depth(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("max_graph_depth must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        errors: list[str] = []

        if 0 not in self.lint_success_exit_codes:
            errors.append("LINT_SUCCESS_EXIT_CODES must include 0")

        if not self.source_suffix.startswith("."):
            errors.append("SOURCE_SUFFIX must start with '.'")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def repo_root(self) -> Path | None:
        """First of workspace dir, source root, project dir that holds a ``.git``."""
        for directory in (self.workspace_dir, self.srcroot, self.project_dir):
            if directory is not None and (directory / ".git").exists():
                return directory
        return None

    @property
    def pbxproj_path(self) -> Path | None:
        if self.project_file_path is None:
            return None
        return self.project_file_path / "project.pbxproj"

    @property
    def clean_build_dir(self) -> Path | None:
        """Directory whose missing ``Products`` entry marks a clean build."""
        if self.build_dir is not None:
            return self.build_dir
        if self.build_root is not None:
            return self.build_root.parent
        return None

    @property
    def package_artifacts_dir(self) -> Path | None:
        """``<DerivedData>/SourcePackages/artifacts`` derived from BUILD_ROOT."""
        if self.build_root is None:
            return None
        return self.build_root.parent.parent / "SourcePackages" / "artifacts"

    def require_standalone(self) -> Settings:
        """Check the values standalone (change-detection) mode cannot run without.

        Raises:
            ConfigurationError: Listing every missing value.
        """
        missing = [
            name
            for name, value in (
                ("PROJECT_FILE_PATH", self.project_file_path),
                ("PROJECT_DIR", self.project_dir),
            )
            if value is None
        ]
        if missing:
            raise ConfigurationError(
                "Missing required environment values: " + ", ".join(missing)
            )
        if not self.project_dir.is_dir():  # type: ignore[union-attr]
            raise ConfigurationError(f"PROJECT_DIR is not a directory: {self.project_dir}")
        if self.repo_root is None:
            raise ConfigurationError(
                "No git repository found in WORKSPACE_DIR, SRCROOT or PROJECT_DIR"
            )
        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from the environment with optional overrides.

    Raises:
        ConfigurationError: If a value is invalid or the configuration is
            internally inconsistent.
    """
    try:
        return Settings(**overrides)  # type: ignore[arg-type]
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e
