from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from appwrap.bundle import tree
from appwrap.bundle.context import BuildContext
from appwrap.kinds import PackageKind
from appwrap.runtime.arch import classify_architecture
from appwrap.runtime.assets import AssetLocator
from appwrap.utils.ops import Operations

logger = logging.getLogger(__name__)

# appimagetool expects its own names for ARM targets
_TOOL_ARCH = {
    "aarch64": "arm_aarch64",
    "arm64": "arm_aarch64",
    "armhf": "arm",
}


class AppImageBuilder:
    """Builds a single-file AppImage from an AppDir tree.

    https://docs.appimage.org/reference/appdir.html
    """

    kind = PackageKind.APPIMAGE
    supports_start_command = False
    supports_run = True

    def __init__(
        self,
        context: BuildContext,
        *,
        assets: AssetLocator,
        ops: Operations,
        warnings: list[str],
    ):
        self.context = context
        self.assets = assets
        self.ops = ops
        self.warnings = warnings

        config = context.config
        self.package_arch = context.package_arch

        version = context.version_suffix if config.appimage_version_output else ""
        self.layout = tree.make_layout(
            context,
            app_bin=context.build_root / "usr" / "bin",
            install_bin="/usr/bin",
            output_name=f"{config.package_name}{version}.{self.package_arch}.AppImage",
            meta_suffix=".appdata.xml",
        )
        tree.require_usr_bin(context, self.layout)

        self.icons = tree.builder_icons(context, self.layout, assets)
        tree.require_primary_icon(context, self.icons)

        self.manifest_path: Optional[Path] = None
        self.runtime_file = self._runtime_file()

        self.tool = assets.appimage_tool()
        if self.tool is None:
            message = (
                f"CRITICAL. Building of AppImages not supported on "
                f"{assets.host_runtime} development system"
            )
            logger.warning(message)
            self.warnings.append(message)

    @property
    def output_name(self) -> str:
        return self.layout.output_name

    @property
    def install_exec(self) -> str:
        return tree.install_exec(self.layout.install_bin, self.context.app_exec_name)

    @property
    def primary_icon(self) -> Optional[Path]:
        return self.icons.primary

    @property
    def manifest_content(self) -> Optional[str]:
        return None

    @property
    def package_commands(self) -> list[str]:
        args = self.context.config.appimage_args or ""
        params = [tree.quoted(self.tool or "appimagetool")]

        if self.runtime_file is not None:
            params.append(f'--runtime-file="{self.runtime_file}"')

        if args:
            params.append(args)

        if self.context.options.verbose and "--verbose" not in args and "-v" not in args.split():
            params.append("--verbose")

        params.append(tree.quoted(self.layout.build_root))
        params.append(tree.quoted(self.layout.output_path))

        commands = [" ".join(params)]
        if self.context.options.run:
            commands.append(tree.quoted(self.layout.output_path))
        return commands

    def create(self, desktop: Optional[str], metainfo: Optional[str]) -> None:
        tree.populate_tree(self, desktop, metainfo)

        app_id = self.context.config.app_id
        build_root = self.layout.build_root

        # appimagetool reads these from the AppDir root, validators from usr/share
        self.ops.write_file(build_root / f"{app_id}.desktop", desktop)
        self.ops.write_file(build_root / f"{app_id}.appdata.xml", metainfo)

        icon = tree.require_primary_icon(self.context, self.icons)
        self.ops.copy_file(icon, build_root / f"{app_id}{icon.suffix}")

        self.ops.symlink(self.install_exec.lstrip("/"), build_root / "AppRun")

    def build_package(self) -> None:
        tree.require_tool(self, "appimagetool")
        tree.prepare_package(self)

        arch = self.package_arch
        if self.context.options.arch is None:
            arch = _TOOL_ARCH.get(arch, arch)

        for command in self.package_commands:
            self.ops.execute(command, env={"ARCH": arch})

    def _runtime_file(self) -> Optional[Path]:
        configured = self.context.config.appimage_runtime_path
        if not configured:
            return None

        arch = self.context.runtime.arch
        if self.context.options.arch:
            arch = classify_architecture(self.context.options.arch)[0]

        runtime = self.assets.appimage_runtime(Path(configured), arch)
        if not runtime.exists():
            message = f"CRITICAL. Runtime path not exist: {runtime}"
            logger.warning(message)
            self.warnings.append(message)
        return runtime
