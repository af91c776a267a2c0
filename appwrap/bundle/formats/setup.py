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

PROMPT_BAT = "CommandPrompt.bat"

# https://jrsoftware.org/ishelp/index.php?topic=setup_architecturesallowed
_INSTALL_64BIT = ("x64", "arm64")


def escape_bat(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None

    # Caret first, it is the escape character itself
    value = value.replace("^", "^^")
    for char in ("\\", "&", "|", "<", ">"):
        value = value.replace(char, "^" + char)
    return value.replace("%", "")


class SetupBuilder:
    """Builds a Windows installer with the Inno Setup compiler."""

    kind = PackageKind.SETUP
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

        version = context.version_suffix if config.setup_version_output else ""
        suffix = config.setup_suffix_output or ""

        # Install directory is chosen by the user at install time
        self.layout = tree.make_layout(
            context,
            app_bin=context.build_root / "Publish",
            install_bin="",
            output_name=f"{config.package_name}{suffix}{version}.{self.package_arch}.exe",
        )

        self.icons = tree.builder_icons(context, self.layout, assets)
        tree.require_primary_icon(context, self.icons)

        self.manifest_path: Optional[Path] = context.root / f"{config.app_base_name}.iss"
        self.tool = tree.find_tool(context, assets, warnings, "iscc")

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
    def uninstall_script(self) -> Optional[Path]:
        script = self.context.config.setup_uninstall_script
        return Path(script) if script else None

    @property
    def manifest_content(self) -> Optional[str]:
        context = self.context
        config = context.config
        app_bin = self.layout.app_bin
        icon = self.primary_icon
        exec_name = context.app_exec_name
        output_base = Path(self.output_name).stem

        lines = [
            "[Setup]",
            f"AppName={config.app_friendly_name}",
            f"AppId={config.app_id}",
            f"AppVersion={context.app_version}",
            f"AppVerName={config.app_friendly_name} {context.app_version}",
            f"VersionInfoVersion={context.app_version}",
            f"OutputDir={self.layout.output_directory}",
            f"OutputBaseFilename={output_base}",
            f"AppPublisher={config.publisher_name}",
            f"AppCopyright={config.publisher_copyright or ''}",
            f"AppPublisherURL={config.publisher_link_url or ''}",
            f"InfoBeforeFile={config.change_path or ''}",
            f"LicenseFile={config.license_path or ''}",
            f"SetupIconFile={icon}",
            f"DefaultGroupName={config.app_friendly_name}",
            f"DefaultDirName={{autopf}}\\{config.app_base_name}",
            "AllowNoIcons=yes",
            f"MinVersion={config.setup_min_windows_version}",
        ]

        if self.package_arch in _INSTALL_64BIT:
            lines.append(f"ArchitecturesAllowed={self.package_arch}")
            lines.append(f"ArchitecturesInstallIn64BitMode={self.package_arch}")

        lines.append(f"PrivilegesRequired={'admin' if config.setup_admin_install else 'lowest'}")
        lines.append(f"UninstallDisplayIcon={{app}}\\{icon.name}")

        if config.setup_sign_tool:
            lines.append(f"SignTool={config.setup_sign_tool}")

        flags = "ignoreversion recursesubdirs createallsubdirs"
        lines.extend(
            [
                "",
                "[Files]",
                f'Source: "{app_bin}\\*.exe"; DestDir: "{{app}}"; Flags: {flags} signonce;',
                f'Source: "{app_bin}\\*.dll"; DestDir: "{{app}}"; Flags: {flags} signonce;',
                f'Source: "{app_bin}\\*"; Excludes: "*.exe,*.dll"; DestDir: "{{app}}"; Flags: {flags};',
                f'Source: "{icon}"; DestDir: "{{app}}"; Flags: {flags};',
            ]
        )

        if config.setup_command_prompt:
            lines.append(
                f'Source: "{self.assets.terminal_icon}"; DestDir: "{{app}}"; Flags: {flags};'
            )

        lines.extend(["", "[Tasks]"])
        if not config.desktop_no_display:
            lines.append(
                'Name: "desktopicon"; Description: "Create a &Desktop Icon"; '
                'GroupDescription: "Additional icons:"; Flags: unchecked'
            )

        lines.extend(["", "[REGISTRY]", "", "[Icons]"])
        if not config.desktop_no_display:
            lines.append(
                f'Name: "{{group}}\\{config.app_friendly_name}"; Filename: "{{app}}\\{exec_name}"'
            )
            lines.append(
                f'Name: "{{userdesktop}}\\{config.app_friendly_name}"; '
                f'Filename: "{{app}}\\{exec_name}"; Tasks: desktopicon'
            )

        # Present even when the application itself is hidden
        if config.setup_command_prompt:
            lines.append(
                f'Name: "{{group}}\\{config.setup_command_prompt}"; '
                f'Filename: "{{app}}\\{PROMPT_BAT}"; '
                f'IconFilename: "{{app}}\\{self.assets.terminal_icon.name}"'
            )

        if config.publisher_link_name and config.publisher_link_url:
            lines.append(
                f'Name: "{{group}}\\{config.publisher_link_name}"; '
                f'Filename: "{config.publisher_link_url}"'
            )

        lines.extend(["", "[Run]"])
        if not config.desktop_no_display:
            lines.append(
                f'Filename: "{{app}}\\{exec_name}"; Description: Start Application Now; '
                "Flags: postinstall nowait skipifsilent"
            )

        lines.extend(
            [
                "",
                "[InstallDelete]",
                'Type: filesandordirs; Name: "{app}\\*";',
                'Type: filesandordirs; Name: "{group}\\*";',
                "",
                "[UninstallRun]",
            ]
        )

        if self.uninstall_script is not None:
            lines.append(
                f'Filename: "{{app}}\\{self.uninstall_script.name}"; '
                'RunOnceId: "uninstall"; Flags: runhidden waituntilterminated'
            )

        lines.extend(["", "[UninstallDelete]", 'Type: dirifempty; Name: "{app}"'])
        return "\n".join(lines)

    @property
    def package_commands(self) -> list[str]:
        return [f"iscc /O{tree.quoted(self.layout.output_directory)} {tree.quoted(self.manifest_path)}"]

    def create(self, desktop: Optional[str], metainfo: Optional[str]) -> None:
        tree.populate_tree(self, desktop, metainfo)

        config = self.context.config
        app_bin = self.layout.app_bin
        start = config.start_command

        if start and start.lower() != self.context.app_exec_name.lower():
            self.ops.write_file(app_bin / f"{start}.bat", f"start {self.install_exec} %*")

        if config.setup_command_prompt:
            title = escape_bat(config.setup_command_prompt)
            command = escape_bat(start or config.app_base_name)

            echo_copy = ""
            if config.publisher_copyright:
                echo_copy = f" & echo {escape_bat(config.publisher_copyright)}"

            script = (
                f'start cmd /k "cd /D %userprofile% & title {title} & '
                f"echo {command} {self.context.app_version}{echo_copy} & "
                'set path=%path%;%~dp0"'
            )
            self.ops.write_file(app_bin / PROMPT_BAT, script)

        if self.uninstall_script is not None:
            self.ops.copy_file(self.uninstall_script, app_bin / self.uninstall_script.name)

    def build_package(self) -> None:
        tree.require_tool(self, "iscc")
        tree.prepare_package(self)
        self.ops.execute_all(self.package_commands)
