from __future__ import annotations

import logging
import time
from pathlib import Path, PurePosixPath
from typing import Optional

from appwrap.bundle import tree
from appwrap.bundle.context import BuildContext
from appwrap.errors import ExternalToolError
from appwrap.kinds import PackageKind
from appwrap.runtime.assets import AssetLocator
from appwrap.utils.ops import Operations

logger = logging.getLogger(__name__)

_LICENSE_NAMES = ("license", "licence")
_DOC_NAMES = ("readme", "changelog")


class RpmBuilder:
    kind = PackageKind.RPM
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

        self.layout = tree.make_layout(
            context,
            app_bin=context.build_root / "opt" / config.app_id,
            install_bin=f"/opt/{config.app_id}",
            output_name=(
                f"{config.package_name.lower()}_{context.app_version}-"
                f"{context.package_release}.{self.package_arch}.rpm"
            ),
        )
        tree.require_usr_bin(context, self.layout)

        self.icons = tree.builder_icons(context, self.layout, assets)
        self.manifest_path: Optional[Path] = context.root / f"{config.app_id}.spec"

        self.tool = tree.find_tool(context, assets, warnings, "rpmbuild")

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
    def topdir(self) -> Path:
        return self.context.root / "rpmbuild"

    @property
    def rpm_dir(self) -> Path:
        return self.topdir / "RPMS"

    @property
    def manifest_content(self) -> Optional[str]:
        """Spec file text. The %files section lists the build tree as it is now."""
        context = self.context
        config = context.config

        lines = [
            f"Name: {config.package_name.lower()}",
            f"Version: {context.app_version}",
            f"Release: {context.package_release}",
            f"BuildArch: {self.package_arch}",
            f"Summary: {config.app_short_summary}",
            f"License: {config.app_license_id}",
            f"Vendor: {config.publisher_name}",
        ]

        if config.publisher_link_url:
            lines.append(f"Url: {config.publisher_link_url}")

        lines.append(f"AutoReq: {'yes' if config.rpm_auto_req else 'no'}")
        lines.append(f"AutoProv: {'yes' if config.rpm_auto_prov else 'no'}")

        lines.extend(f"Requires: {item}" for item in config.rpm_requires)

        # Mandatory section, summary is repeated
        lines.extend(["", "%description", config.app_short_summary])

        lines.extend(["", "%files"])
        lines.extend(self._file_entries())

        return "\n".join(lines)

    @property
    def package_commands(self) -> list[str]:
        command = [
            f"rpmbuild -bb {tree.quoted(self.manifest_path)}",
            f'--define "_topdir {self.topdir}"',
            f"--buildroot={tree.quoted(self.layout.build_root)}",
            f'--define "_rpmdir {self.rpm_dir}"',
            '--define "_build_id_links none"',
        ]

        if self.context.options.verbose:
            command.append("--verbose")

        return [" ".join(command)]

    def create(self, desktop: Optional[str], metainfo: Optional[str]) -> None:
        tree.populate_tree(self, desktop, metainfo)
        tree.write_start_script(self)

    def build_package(self) -> None:
        tree.require_tool(self, "rpmbuild")

        self.ops.remove_dir(self.topdir)
        tree.prepare_package(self)

        env = {"SOURCE_DATE_EPOCH": str(int(time.time()))}
        for command in self.package_commands:
            self.ops.execute(command, env=env)

        self.ops.copy_file(self.find_output(), self.layout.output_path)

    def find_output(self) -> Path:
        """Locate the single package rpmbuild wrote under its RPMS tree."""
        found = sorted(self.rpm_dir.rglob("*.rpm")) if self.rpm_dir.is_dir() else []

        if len(found) != 1:
            raise ExternalToolError(
                f"Expected one rpm file under {self.rpm_dir}, found {len(found)}"
            )
        return found[0]

    def _file_entries(self) -> list[str]:
        license_path = tree.license_build_path(self.context, self.layout)
        license_name = license_path.name if license_path is not None else None

        entries: list[str] = []
        for item in self.ops.list_files(self.layout.build_root):
            path = PurePosixPath("/") / item
            stem = path.stem.lower()

            prefix = ""
            if stem in _LICENSE_NAMES or path.name == license_name:
                prefix = "%license "
            elif stem in _DOC_NAMES:
                prefix = "%doc "

            entry = str(path)
            if " " in entry:
                entry = f'"{entry}"'

            entries.append(prefix + entry)

        return entries
