from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from appwrap.bundle.builder import PackageBuilder, create_builder
from appwrap.bundle.context import BuildOptions
from appwrap.config import PATH_DISABLED, AppConfig, DocStyle
from appwrap.errors import ConfigError
from appwrap.kinds import PackageKind
from appwrap.meta.changes import ChangeLog
from appwrap.meta.expander import MacroExpander
from appwrap.meta.macros import MacroId, MacroTable
from appwrap.meta.templates import DESKTOP_TEMPLATE, METAINFO_TEMPLATE
from appwrap.runtime.arch import describe_runtime
from appwrap.runtime.assets import AssetLocator
from appwrap.utils.ops import Operations

logger = logging.getLogger(__name__)

_RULE = "=" * 60


@dataclass(frozen=True)
class BuildSummary:
    kind: PackageKind
    output_path: Path
    build_root: Path
    published: bool
    warnings: tuple[str, ...]


class PackageAssembler:
    """Expands metadata, publishes the application and builds one package."""

    def __init__(
        self,
        config: AppConfig,
        options: BuildOptions,
        *,
        assets: Optional[AssetLocator] = None,
        ops: Optional[Operations] = None,
        now: Optional[datetime] = None,
    ):
        self.config = config
        self.options = options
        self.assets = assets or AssetLocator()
        self.warnings: list[str] = []

        self.builder: PackageBuilder = create_builder(
            options.kind,
            config,
            options,
            assets=self.assets,
            ops=ops,
            warnings=self.warnings,
        )

        self.changelog = ChangeLog.from_file(config.change_path)
        self.table = MacroTable.build(self.builder, changelog=self.changelog, now=now)
        self.expander = MacroExpander(self.table, self.warnings)

        self._check_config()

        self.desktop = self._expand_desktop()
        self.metainfo = self._expand_metainfo()
        self.publish_commands = self.expander.expand_all(
            self._publish_templates(),
            item_name="publish commands",
        )

        if options.run and not self.builder.supports_run:
            self._warn(f"{self.builder.kind.display_name} does not support post-build run")

    @property
    def host_is_windows(self) -> bool:
        return describe_runtime(self.assets.host_runtime).is_windows

    @property
    def post_publish(self) -> Optional[str]:
        if self.host_is_windows:
            return self.config.dotnet_post_publish_on_windows
        return self.config.dotnet_post_publish

    def assemble(self) -> BuildSummary:
        builder = self.builder
        ops = builder.ops

        logger.info("Creating build tree: %s", builder.layout.root)
        builder.create(self.desktop, self.metainfo)

        published = False
        if self.options.skip_publish:
            logger.info("Skipping publish step")
        elif self.publish_commands:
            logger.info("Publishing application")
            env = self.table.as_environment()
            for command in self.publish_commands:
                ops.execute(command, env=env, cwd=Path(self.config.local_directory))
            published = True

        logger.info("Building package: %s", builder.layout.output_path)
        builder.build_package()

        return BuildSummary(
            kind=builder.kind,
            output_path=builder.layout.output_path,
            build_root=builder.layout.build_root,
            published=published,
            warnings=tuple(self.warnings),
        )

    def describe(self, verbose: bool = False) -> str:
        builder = self.builder
        config = self.config
        context = builder.context

        parts: list[str] = []

        start = config.start_command or ""
        if start and not builder.supports_start_command:
            start += " [Not Supported]"

        _header(parts, f"APPLICATION: {config.app_base_name} {context.app_version} [{context.package_release}]")
        parts.append(f"AppBaseName: {config.app_base_name}")
        parts.append(f"AppId: {config.app_id}")
        parts.append(f"AppVersion: {context.app_version}")
        parts.append(f"PackageRelease: {context.package_release}")
        parts.append(f"StartCommand: {start}")

        if builder.kind is PackageKind.SETUP:
            parts.append(f"SetupCommandPrompt: {config.setup_command_prompt or ''}")

        _header(parts, f"OUTPUT: {builder.kind.display_name.upper()}")
        parts.append(f"PackageKind: {builder.kind.value}")
        parts.append(f"Runtime: {context.runtime.runtime_id}")
        parts.append(f"Arch: {self.options.arch or f'Auto ({builder.package_arch})'}")
        parts.append(f"Build: {self.options.build_target}")
        parts.append(f"OutputName: {builder.output_name}")
        parts.append(f"OutputDirectory: {builder.layout.output_directory}")

        if verbose:
            _section(parts, "CONFIGURATION", config.render(DocStyle.NO_COMMENTS))

        _section(parts, "DESKTOP", self.desktop)
        _section(parts, "CHANGELOG", self.changelog.to_text() if self.changelog else None)

        if verbose:
            assets = [
                str(dest.relative_to(builder.layout.build_root))
                for _, dest in builder.icons.items()
            ]
            _section(parts, "DEPLOY ASSETS", "\n".join(assets), always=True)
            _section(parts, "METAINFO", self.metainfo)
            _section(parts, "MANIFEST", builder.manifest_content)
            _section(parts, "MACROS", self.expander.describe(), always=True)
            parts.append("")
            parts.append("NB. Macros with XML content are not listed above.")

        _section(parts, "BUILD PROJECT", "\n\n".join(self.publish_commands))
        _section(parts, f"BUILD PACKAGE: {builder.output_name}", "\n\n".join(builder.package_commands))
        _section(parts, "ISSUES", "\n\n".join(self.warnings), always=True)

        return "\n".join(parts).strip()

    def _publish_templates(self) -> list[str]:
        config = self.config
        commands: list[str] = []

        if not config.publish_disabled:
            project = config.dotnet_project_path
            target = f' "{project}"' if project else ""
            args = config.dotnet_publish_args or ""

            if self.options.clean:
                commands.append(f"dotnet clean{target}")

            padded = f" {args} "
            if " -o " in padded or " --output " in padded:
                raise ConfigError("The -o, --output option cannot be used in DotnetPublishArgs")

            publish = [f"dotnet publish{target}"]
            if " -r " not in padded and " --runtime " not in padded:
                publish.append(f"-r {self.builder.context.runtime.runtime_id}")
            if " -c " not in padded and " --configuration " not in padded:
                publish.append(f"-c {self.options.build_target}")
            if args:
                publish.append(args)
            publish.append(f'-o "{self.builder.layout.app_bin}"')
            commands.append(" ".join(publish))

        if self.post_publish:
            commands.append(f'"{self.post_publish}"')

        return commands

    def _expand_desktop(self) -> Optional[str]:
        config = self.config
        layout = self.builder.layout

        if layout.share_applications is None or config.desktop_disabled:
            return None

        desktop = config.read_associated_file(config.desktop_path) or DESKTOP_TEMPLATE

        has_exec = "Exec=" in desktop or "Exec " in desktop
        has_install = MacroId.INSTALL_BIN.token in desktop or MacroId.INSTALL_EXEC.token in desktop
        if not has_exec or not has_install:
            self._warn(
                "Desktop file does not contain line needed to accommodate multi-variant "
                f"deployments: 'Exec={MacroId.INSTALL_EXEC.token}'"
            )

        name = config.desktop_path.name if config.desktop_path else "desktop template"
        return self.expander.expand(desktop, item_name=name)

    def _expand_metainfo(self) -> Optional[str]:
        config = self.config
        layout = self.builder.layout

        if layout.share_meta is None:
            return None

        if config.meta_disabled:
            self._warn("AppStream metadata (.metainfo.xml) file not provided")
            return None

        metainfo = config.read_associated_file(config.meta_path) or METAINFO_TEMPLATE
        name = config.meta_path.name if config.meta_path else "metainfo template"
        return self.expander.expand(metainfo, escape_xml=True, item_name=name)

    def _check_config(self) -> None:
        config = self.config

        url = config.publisher_link_url
        if url and "://" not in url and "." not in url:
            self._warn(
                "PublisherLinkUrl doesn't look like a valid URL "
                "(a valid example is: https://example.net)"
            )

        if config.change_path is not None and not self.changelog:
            self._warn(
                "AppChangeFile was supplied, but does not contain version information "
                "in a recognised format"
            )

        if config.dotnet_project_path == PATH_DISABLED and not self.post_publish:
            name = "DotnetPostPublishOnWindows" if self.host_is_windows else "DotnetPostPublish"
            self._warn(f"{name} is required where DotnetProjectPath = {PATH_DISABLED}")

        no_entry = config.desktop_disabled or config.desktop_no_display
        if (
            no_entry
            and not config.start_command
            and self.builder.kind.targets_linux(exclusive=True)
            and self.builder.kind is not PackageKind.APPIMAGE
        ):
            self._warn(
                "No desktop entry or StartCommand is configured, there will be no way "
                "to start the application once installed"
            )

    def _warn(self, message: str) -> None:
        if message not in self.warnings:
            logger.warning(message)
            self.warnings.append(message)


def assemble_package(
    config: AppConfig,
    options: BuildOptions,
    *,
    assets: Optional[AssetLocator] = None,
    ops: Optional[Operations] = None,
) -> BuildSummary:
    return PackageAssembler(config, options, assets=assets, ops=ops).assemble()


def _header(parts: list[str], title: str) -> None:
    if parts:
        parts.append("")
    parts.extend([_RULE, title, _RULE, ""])


def _section(parts: list[str], title: str, content: Optional[str], always: bool = False) -> None:
    if not content and not always:
        return

    _header(parts, title)
    parts.append(content or "NONE")
