from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol

from appwrap.bundle.context import BuildContext, BuildOptions
from appwrap.bundle.formats.appimage import AppImageBuilder
from appwrap.bundle.formats.deb import DebBuilder
from appwrap.bundle.formats.flatpak import FlatpakBuilder
from appwrap.bundle.formats.rpm import RpmBuilder
from appwrap.bundle.formats.setup import SetupBuilder
from appwrap.bundle.formats.zip import ZipBuilder
from appwrap.bundle.icons import IconSet
from appwrap.bundle.layout import BuildLayout
from appwrap.config import AppConfig
from appwrap.kinds import PackageKind
from appwrap.runtime.assets import AssetLocator
from appwrap.utils.ops import Operations

logger = logging.getLogger(__name__)


class PackageBuilder(Protocol):
    """Common surface of every package kind builder."""

    kind: PackageKind
    context: BuildContext
    assets: AssetLocator
    ops: Operations
    warnings: list[str]

    package_arch: str
    layout: BuildLayout
    icons: IconSet
    tool: Optional[Path]
    manifest_path: Optional[Path]

    supports_start_command: bool
    supports_run: bool

    @property
    def output_name(self) -> str: ...

    @property
    def install_exec(self) -> str: ...

    @property
    def primary_icon(self) -> Optional[Path]: ...

    @property
    def manifest_content(self) -> Optional[str]: ...

    @property
    def package_commands(self) -> list[str]: ...

    def create(self, desktop: Optional[str], metainfo: Optional[str]) -> None: ...

    def build_package(self) -> None: ...


_BUILDERS = {
    PackageKind.APPIMAGE: AppImageBuilder,
    PackageKind.FLATPAK: FlatpakBuilder,
    PackageKind.RPM: RpmBuilder,
    PackageKind.DEB: DebBuilder,
    PackageKind.SETUP: SetupBuilder,
    PackageKind.ZIP: ZipBuilder,
}


def create_builder(
    kind: PackageKind,
    config: AppConfig,
    options: Optional[BuildOptions] = None,
    *,
    assets: Optional[AssetLocator] = None,
    ops: Optional[Operations] = None,
    warnings: Optional[list[str]] = None,
) -> PackageBuilder:
    kind = PackageKind(kind)
    options = options or BuildOptions(kind=kind)
    warnings = warnings if warnings is not None else []

    context = BuildContext.create(config, options, kind)

    if context.runtime.uncertain:
        message = f"Architecture of runtime {context.runtime.runtime_id} is uncertain"
        logger.warning(message)
        warnings.append(message)

    if kind.targets_linux(exclusive=True) and not context.runtime.is_linux:
        message = (
            f"{kind.display_name} package targets Linux, "
            f"but runtime is {context.runtime.runtime_id}"
        )
        logger.warning(message)
        warnings.append(message)

    if kind.targets_windows(exclusive=True) and not context.runtime.is_windows:
        message = (
            f"{kind.display_name} package targets Windows, "
            f"but runtime is {context.runtime.runtime_id}"
        )
        logger.warning(message)
        warnings.append(message)

    builder = _BUILDERS[kind](
        context,
        assets=assets or AssetLocator(),
        ops=ops or Operations(),
        warnings=warnings,
    )

    logger.debug(
        "Created %s builder: arch=%s output=%s",
        kind.display_name,
        builder.package_arch,
        builder.layout.output_path,
    )
    return builder
