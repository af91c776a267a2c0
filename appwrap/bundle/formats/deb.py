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

# https://www.debian.org/doc/debian-policy/ch-archive.html#s-subsections
DEBIAN_SECTIONS = {
    "audiovideo": "video",
    "audio": "sound",
    "video": "video",
    "development": "development",
    "education": "education",
    "game": "games",
    "graphics": "graphics",
    "network": "net",
    "office": "text",
    "science": "science",
    "settings": "utils",
    "system": "utils",
    "utility": "utils",
}


def debian_section(category: Optional[str]) -> str:
    return DEBIAN_SECTIONS.get((category or "").lower(), "misc")


class DebBuilder:
    kind = PackageKind.DEB
    supports_start_command = True
    supports_run = False

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
        self.debian_name = config.package_name.lower()

        self.layout = tree.make_layout(
            context,
            app_bin=context.build_root / "opt" / config.app_id,
            install_bin=f"/opt/{config.app_id}",
            output_name=(
                f"{self.debian_name}_{context.app_version}-"
                f"{context.package_release}_{self.package_arch}.deb"
            ),
        )
        tree.require_usr_bin(context, self.layout)

        self.icons = tree.builder_icons(context, self.layout, assets)
        self.manifest_path: Optional[Path] = self.layout.build_root / "DEBIAN" / "control"

        self.tool = tree.find_tool(context, assets, warnings, "dpkg-deb")

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
    def copyright_path(self) -> Optional[Path]:
        if self.layout.usr_share is None:
            return None
        return self.layout.usr_share / "doc" / self.debian_name / "copyright"

    @property
    def manifest_content(self) -> Optional[str]:
        context = self.context
        config = context.config

        # https://www.debian.org/doc/debian-policy/ch-controlfields.html
        lines = [
            f"Package: {self.debian_name}",
            f"Version: {context.app_version}-{context.package_release}",
            f"Section: multiverse/{debian_section(config.prime_category)}",
            "Priority: optional",
            f"Architecture: {self.package_arch}",
            f"Description: {config.app_short_summary}",
        ]

        if config.publisher_link_url:
            lines.append(f"Homepage: {config.publisher_link_url}")

        if config.debian_recommends:
            lines.append(f"Recommends: {', '.join(config.debian_recommends)}")

        maintainer = config.publisher_name
        if config.publisher_email:
            maintainer = f"{config.publisher_name} <{config.publisher_email}>"
        lines.append(f"Maintainer: {maintainer}")

        # Not standard fields, dpkg ignores them
        lines.append(f"License: {config.app_license_id}")
        lines.append(f"Vendor: {config.publisher_name}")

        return "\n".join(lines)

    @property
    def package_commands(self) -> list[str]:
        command = ["dpkg-deb --root-owner-group"]

        if self.context.options.verbose:
            command.append("--verbose")

        command.append(
            f"--build {tree.quoted(self.layout.build_root)} {tree.quoted(self.layout.output_path)}"
        )
        return [" ".join(command)]

    def create(self, desktop: Optional[str], metainfo: Optional[str]) -> None:
        tree.populate_tree(self, desktop, metainfo)
        tree.write_start_script(self)

    def build_package(self) -> None:
        tree.require_tool(self, "dpkg-deb")
        tree.prepare_package(self)

        license_path = tree.license_build_path(self.context, self.layout)
        if license_path is not None and self.copyright_path is not None:
            self.ops.copy_file(license_path, self.copyright_path)

        self.ops.execute_all(self.package_commands)
