from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml

from appwrap.bundle import tree
from appwrap.bundle.context import BuildContext
from appwrap.kinds import PackageKind
from appwrap.runtime.assets import AssetLocator
from appwrap.utils.ops import Operations

logger = logging.getLogger(__name__)


class FlatpakBuilder:
    kind = PackageKind.FLATPAK
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

        self.layout = tree.make_layout(
            context,
            app_bin=context.build_root / "usr" / "bin",
            install_bin="/app/bin",
            output_name=(
                f"{config.package_name}{context.version_suffix}.{self.package_arch}.flatpak"
            ),
        )
        tree.require_usr_bin(context, self.layout)

        self.icons = tree.builder_icons(context, self.layout, assets)
        self.manifest_path: Optional[Path] = context.root / f"{config.app_id}.yml"

        self.tool = tree.find_tool(context, assets, warnings, "flatpak-builder")

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
    def repo_dir(self) -> Path:
        return self.context.root / "repo"

    @property
    def state_dir(self) -> Path:
        return self.context.root / "state"

    @property
    def temp_dir(self) -> Path:
        return self.context.root / "build"

    @property
    def manifest_content(self) -> Optional[str]:
        config = self.context.config
        source = self.layout.build_root.relative_to(self.context.root).as_posix()

        manifest = {
            "app-id": config.app_id,
            "runtime": config.flatpak_platform_runtime,
            "runtime-version": config.flatpak_platform_version,
            "sdk": config.flatpak_platform_sdk,
            "command": self.install_exec,
            "modules": [
                {
                    "name": config.package_name,
                    "buildsystem": "simple",
                    "build-commands": [
                        "mkdir -p /app/bin",
                        "cp -rn bin/* /app/bin",
                        "mkdir -p /app/share",
                        "cp -rn share/* /app/share",
                    ],
                    "sources": [{"type": "dir", "path": f"{source}/usr/"}],
                }
            ],
        }

        if config.flatpak_finish_args:
            manifest["finish-args"] = list(config.flatpak_finish_args)

        return yaml.safe_dump(manifest, sort_keys=False, default_flow_style=False)

    @property
    def package_commands(self) -> list[str]:
        config = self.context.config
        options = self.context.options

        builder = ["flatpak-builder"]
        if config.flatpak_builder_args:
            builder.append(config.flatpak_builder_args)

        # Explicit only, otherwise the tool decides
        if options.arch:
            builder.append(f"--arch {options.arch}")

        if options.verbose:
            builder.append("--verbose")

        builder.extend(
            [
                f"--repo={tree.quoted(self.repo_dir)}",
                "--force-clean",
                tree.quoted(self.temp_dir),
                f"--state-dir {tree.quoted(self.state_dir)}",
                tree.quoted(self.manifest_path),
            ]
        )

        commands = [
            " ".join(builder),
            (
                f"flatpak build-bundle {tree.quoted(self.repo_dir)} "
                f"{tree.quoted(self.layout.output_path)} {config.app_id}"
            ),
        ]

        if options.run:
            commands.append(
                f"flatpak-builder --run --state-dir {tree.quoted(self.state_dir)} "
                f"{tree.quoted(self.temp_dir)} {tree.quoted(self.manifest_path)} "
                f"{self.context.app_exec_name}"
            )

        return commands

    def create(self, desktop: Optional[str], metainfo: Optional[str]) -> None:
        tree.populate_tree(self, desktop, metainfo)

    def build_package(self) -> None:
        tree.require_tool(self, "flatpak-builder")
        tree.prepare_package(self)
        self.ops.execute_all(self.package_commands)

        copy = self.layout.output_directory / self.manifest_path.name
        self.ops.write_file(copy, self.manifest_content)
