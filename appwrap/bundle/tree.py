from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from appwrap.bundle.context import BuildContext
from appwrap.bundle.icons import IconSet, resolve_icons
from appwrap.bundle.layout import BuildLayout
from appwrap.errors import ConstructionError, ToolUnavailableError
from appwrap.runtime.assets import AssetLocator

if TYPE_CHECKING:
    from appwrap.bundle.builder import PackageBuilder

logger = logging.getLogger(__name__)


def make_layout(
    context: BuildContext,
    *,
    app_bin: Path,
    install_bin: str,
    output_name: str,
    meta_suffix: str = ".metainfo.xml",
) -> BuildLayout:
    return BuildLayout(
        root=context.root,
        app_id=context.config.app_id,
        app_bin=app_bin,
        install_bin=install_bin,
        output_directory=context.output_directory,
        output_name=context.explicit_output_name or output_name,
        linux=context.linux_exclusive,
        meta_suffix=meta_suffix,
    )


def require_usr_bin(context: BuildContext, layout: BuildLayout) -> Path:
    if layout.usr_bin is None:
        raise ConstructionError(
            f"{context.kind.display_name} package has no usr/bin build directory"
        )
    return layout.usr_bin


def builder_icons(
    context: BuildContext,
    layout: BuildLayout,
    assets: AssetLocator,
) -> IconSet:
    return resolve_icons(
        [Path(item) for item in context.config.icon_files],
        app_id=context.config.app_id,
        share_icons=layout.share_icons,
        windows=context.windows_icons,
        defaults=assets.default_icons(context.config.desktop_terminal),
    )


def require_primary_icon(context: BuildContext, icons: IconSet) -> Path:
    if icons.primary is None:
        raise ConstructionError(
            f"{context.kind.display_name} package requires an icon, none could be resolved"
        )
    return icons.primary


def install_exec(install_bin: str, exec_name: str) -> str:
    if not install_bin:
        return exec_name
    return f"{install_bin.rstrip('/')}/{exec_name}"


def license_build_path(context: BuildContext, layout: BuildLayout) -> Optional[Path]:
    source = context.config.license_path
    if source is None:
        return None
    return layout.app_bin / source.name


def find_tool(
    context: BuildContext,
    assets: AssetLocator,
    warnings: list[str],
    name: str,
) -> Optional[Path]:
    tool = assets.find_tool(name)
    if tool is None:
        message = (
            f"CRITICAL. {name} not found, building of {context.kind.display_name} "
            "packages not supported on this system"
        )
        logger.warning(message)
        warnings.append(message)
    return tool


def require_tool(builder: "PackageBuilder", name: str) -> Path:
    if builder.tool is None:
        raise ToolUnavailableError(
            f"Cannot build {builder.kind.display_name} package, {name} is not available"
        )
    return builder.tool


def quoted(path: object) -> str:
    return f'"{path}"'


def populate_tree(
    builder: "PackageBuilder",
    desktop: Optional[str],
    metainfo: Optional[str],
) -> None:
    ops = builder.ops
    layout = builder.layout

    if builder.context.options.skip_publish:
        # packages the binaries already in app_bin
        ops.clear_dir(layout.root, keep=layout.app_bin)
    else:
        ops.remove_dir(layout.root)

    for directory in layout.all_dirs():
        ops.create_dir(directory)

    if builder.manifest_path is not None:
        ops.create_dir(builder.manifest_path.parent)

    if builder.context.linux_exclusive:
        ops.write_file(layout.desktop_path, desktop)
        ops.write_file(layout.meta_path, metainfo)

        for source, dest in builder.icons.items():
            ops.copy_file(source, dest)

    ops.create_dir(layout.output_directory)


def write_start_script(builder: "PackageBuilder") -> Optional[Path]:
    command = builder.context.config.start_command
    usr_bin = builder.layout.usr_bin

    if usr_bin is None or not command:
        return None

    path = usr_bin / command
    if path.exists():
        return path

    builder.ops.write_file(path, f'#!/bin/sh\nexec {builder.install_exec} "$@"')
    builder.ops.make_executable(path)
    return path


def prepare_package(builder: "PackageBuilder") -> None:
    ops = builder.ops
    context = builder.context

    ops.assert_exists(builder.layout.app_bin / context.app_exec_name)

    target = license_build_path(context, builder.layout)
    if target is not None:
        content = context.config.read_associated_file(context.config.license_path)
        ops.write_file(target, content)

    ops.write_file(builder.manifest_path, builder.manifest_content)
