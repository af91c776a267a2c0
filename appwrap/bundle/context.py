from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from appwrap.config import AppConfig, split_version
from appwrap.errors import ConfigError
from appwrap.kinds import PackageKind
from appwrap.runtime.arch import RuntimeDescriptor, describe_runtime, package_arch

DEFAULT_WORK_ROOT = Path(tempfile.gettempdir()) / "appwrap"


class BuildOptions(BaseModel):
    kind: PackageKind = Field(
        ...,
        description="Package kind to build",
    )

    runtime: Optional[str] = Field(
        default=None,
        description="Runtime identifier (e.g. linux-x64). Defaults to the host",
    )

    arch: Optional[str] = Field(
        default=None,
        description="Explicit package architecture, overriding detection",
    )

    output: Optional[str] = Field(
        default=None,
        description="Output filename or path, overriding the generated name",
    )

    build_target: str = Field(
        default="Release",
        description="Build configuration passed to publish (Release or Debug)",
    )

    version_release: Optional[str] = Field(
        default=None,
        description="Overrides AppVersionRelease from the configuration",
    )

    verbose: bool = Field(
        default=False,
        description="Pass verbose flags to packaging tools",
    )

    run: bool = Field(
        default=False,
        description="Run the package after building, where supported",
    )

    skip_publish: bool = Field(
        default=False,
        description="Skip the publish step and package the existing build tree",
    )

    clean: bool = Field(
        default=False,
        description="Run 'dotnet clean' before publishing",
    )

    work_root: Path = Field(
        default=DEFAULT_WORK_ROOT,
        description="Directory under which temporary build trees are created",
    )

    @field_validator("version_release")
    @classmethod
    def validate_version_release(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            split_version(value)
        return value

    @field_validator("build_target")
    @classmethod
    def validate_build_target(cls, value: str) -> str:
        if not value or any(char.isspace() for char in value):
            raise ConfigError(f"Invalid build target: {value!r}")
        return value

    class Config:
        frozen = True


@dataclass(frozen=True)
class BuildContext:
    """Values shared by every package kind, computed once per build."""

    config: AppConfig
    kind: PackageKind
    options: BuildOptions
    runtime: RuntimeDescriptor
    package_arch: str
    app_version: str
    package_release: str
    root: Path

    @classmethod
    def create(
        cls,
        config: AppConfig,
        options: BuildOptions,
        kind: Optional[PackageKind] = None,
    ) -> "BuildContext":
        kind = kind or options.kind
        runtime = describe_runtime(options.runtime)
        version, release = split_version(options.version_release or config.app_version_release)

        root = options.work_root / (
            f"{config.app_id}-{runtime.runtime_id}-{options.build_target}-{kind.display_name}"
        )

        return cls(
            config=config,
            kind=kind,
            options=options,
            runtime=runtime,
            package_arch=options.arch or package_arch(kind, runtime.arch),
            app_version=version,
            package_release=release,
            root=root,
        )

    @property
    def linux_exclusive(self) -> bool:
        return self.kind.targets_linux(exclusive=True)

    @property
    def windows_icons(self) -> bool:
        if self.kind is PackageKind.ZIP:
            return self.runtime.is_windows
        return self.kind.targets_windows()

    @property
    def build_root(self) -> Path:
        return self.root / "AppDir"

    @property
    def app_exec_name(self) -> str:
        if self.runtime.is_windows:
            return f"{self.config.app_base_name}.exe"
        return self.config.app_base_name

    @property
    def explicit_output_name(self) -> Optional[str]:
        if not self.options.output:
            return None
        return Path(self.options.output).name or None

    @property
    def output_directory(self) -> Path:
        base = Path(self.config.output_directory)
        if not self.options.output:
            return base

        parent = Path(self.options.output).parent
        if parent == Path("."):
            return base
        if parent.is_absolute():
            return parent
        return base / parent

    @property
    def version_suffix(self) -> str:
        return f"-{self.app_version}-{self.package_release}"
