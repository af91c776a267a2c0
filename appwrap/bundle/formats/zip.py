from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from appwrap.bundle import tree
from appwrap.bundle.context import BuildContext
from appwrap.kinds import PackageKind
from appwrap.runtime.assets import AssetLocator
from appwrap.utils.ops import Operations

logger = logging.getLogger(__name__)


class ZipBuilder:
    kind = PackageKind.ZIP
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
            app_bin=context.build_root / "Publish",
            install_bin="",
            output_name=(
                f"{config.package_name}{context.version_suffix}.{context.runtime.runtime_id}.zip"
            ),
        )

        self.icons = tree.builder_icons(context, self.layout, assets)
        self.manifest_path: Optional[Path] = None

        # Archived directly, no external tool
        self.tool: Optional[Path] = None

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
        return []

    def create(self, desktop: Optional[str], metainfo: Optional[str]) -> None:
        tree.populate_tree(self, desktop, metainfo)

    def build_package(self) -> None:
        tree.prepare_package(self)
        self.ops.zip_dir(self.layout.app_bin, self.layout.output_path)

        if self.context.options.run:
            self.ops.execute([str(self.layout.app_bin / self.context.app_exec_name)])
