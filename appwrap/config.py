from __future__ import annotations

import logging
import os
import re
import textwrap
from collections.abc import Mapping
from enum import IntFlag, StrEnum, auto
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from appwrap.document import MULTI_QUOTE, KeyValueDocument, load_document, read_document
from appwrap.errors import (
    ConfigError,
    ConfigPathNotFoundError,
    InvalidFormatError,
    MissingValueError,
)
from appwrap.version import __version__

logger = logging.getLogger(__name__)

PATH_DISABLED = "NONE"

_UNSAFE_CHARS = re.compile(r'[*?"<>|\x00-\x1f\x7f]')
_STRICT_VALUE = re.compile(r"^[A-Za-z0-9+.\-]{2,}$")
_APP_ID = re.compile(r"^[A-Za-z0-9+\-]+(\.[A-Za-z0-9+\-]+)+$")
_VERSION_RELEASE = re.compile(
    r"^(?P<version>\d+(?:\.\d+){1,3}(?:[-+~][0-9A-Za-z.+~\-]+)?)"
    r"(?:\[(?P<release>[0-9A-Za-z.+~]*)\])?$"
)


class Rule(IntFlag):
    NONE = 0
    MANDATORY = auto()
    SAFE = auto()
    NO_SPACE = auto()
    STRICT = auto()
    BOOLEAN = auto()
    LIST = auto()
    MULTI_LINE = auto()
    PATH = auto()
    ASSERT_PATH = auto()
    DISABLE = auto()


class DocStyle(StrEnum):
    NO_COMMENTS = "no-comments"
    COMMENTS = "comments"
    REFERENCE = "reference"


def split_version(value: str) -> tuple[str, str]:
    match = _VERSION_RELEASE.match(value.strip())
    if match is None:
        raise InvalidFormatError(
            f"Invalid version '{value}', expected VERSION[RELEASE] such as 1.2.3[1]"
        )
    return match.group("version"), match.group("release") or "1"


class AppConfig(BaseModel):
    local_directory: str = Field(
        default="",
        description="Directory containing the configuration document",
    )

    # APP PREAMBLE
    app_base_name: str = Field(
        ...,
        alias="AppBaseName",
        description=(
            "Mandatory application base name. This MUST BE the base name of the main executable "
            "file. It should NOT include any directory part or extension, i.e. do not append "
            "'.exe' or '.dll'. It should not contain spaces or invalid filename characters."
        ),
    )
    app_friendly_name: str = Field(
        ...,
        alias="AppFriendlyName",
        description="Mandatory application friendly name.",
    )
    app_id: str = Field(
        ...,
        alias="AppId",
        description=(
            "Mandatory application ID in reverse DNS form. This should stay constant for "
            "lifetime of the software."
        ),
    )
    app_version_release: str = Field(
        ...,
        alias="AppVersionRelease",
        description=(
            "Mandatory application version and package release of form: 'VERSION[RELEASE]'. "
            "Use optional square brackets to denote package release, i.e. '1.2.3[1]'. Release "
            "refers to a change to the deployment package, rather the application. If release "
            "part is absent (i.e. '1.2.3'), the release value defaults to '1'. The value may be "
            "overridden from the command line."
        ),
    )
    app_short_summary: str = Field(
        ...,
        alias="AppShortSummary",
        description="Mandatory single line application description.",
    )
    app_description: tuple[str, ...] = Field(
        default=(),
        alias="AppDescription",
        description=(
            "Optional multi-line (surround with triple \"\"\" quotes) application description "
            "which provides longer explanation than AppShortSummary in text format. It is "
            "considered to consist of paragraphs separated by blank lines. Lines beginning with "
            "'-', '*' or '+' are taken as list items. It is used to populate AppStream metadata."
        ),
    )
    app_license_id: str = Field(
        ...,
        alias="AppLicenseId",
        description=(
            "Mandatory application license ID. This should be one of the recognised SPDX "
            "license identifiers, such as: 'MIT', 'GPL-3.0-or-later' or 'Apache-2.0'. For a "
            "proprietary or custom license, use 'LicenseRef-Proprietary' or 'LicenseRef-LICENSE'."
        ),
    )
    app_license_file: Optional[str] = Field(
        default=None,
        alias="AppLicenseFile",
        description=(
            "Optional path to a copyright/license text file. If provided, it will be packaged "
            "with the application and identified to package builder where supported."
        ),
    )
    app_change_file: Optional[str] = Field(
        default=None,
        alias="AppChangeFile",
        description=(
            "Optional path to a changelog file. Lines of the form '+ VERSION;DATE' start a "
            "release and lines beginning with '- ' are changes. It is used to populate "
            "AppStream release information."
        ),
    )

    # PUBLISHER
    publisher_name: str = Field(
        ...,
        alias="PublisherName",
        description="Mandatory publisher, group or creator.",
    )
    publisher_copyright: Optional[str] = Field(
        default=None,
        alias="PublisherCopyright",
        description="Optional copyright statement.",
    )
    publisher_link_name: Optional[str] = Field(
        default=None,
        alias="PublisherLinkName",
        description=(
            "Optional publisher or application web-link name. Windows Setup packages require "
            "both PublisherLinkName and PublisherLinkUrl in order to include the link as an "
            "item in program menu entries."
        ),
    )
    publisher_link_url: Optional[str] = Field(
        default=None,
        alias="PublisherLinkUrl",
        description="Optional publisher or application web-link URL.",
    )
    publisher_email: Optional[str] = Field(
        default=None,
        alias="PublisherEmail",
        description=(
            "Publisher or maintainer email contact. Although optional, some packages (such as "
            "Debian) require it and may fail unless provided."
        ),
    )

    # DESKTOP INTEGRATION
    desktop_no_display: bool = Field(
        default=False,
        alias="DesktopNoDisplay",
        description=(
            "Boolean (true or false) which indicates whether the application is hidden on the "
            "desktop. It is used to populate the 'NoDisplay' field of the .desktop file. The "
            "default is false."
        ),
    )
    desktop_terminal: bool = Field(
        default=False,
        alias="DesktopTerminal",
        description=(
            "Boolean (true or false) which indicates whether the application runs in the "
            "terminal, rather than providing a GUI. It is used to populate the 'Terminal' field "
            "of the .desktop file."
        ),
    )
    desktop_file: Optional[str] = Field(
        default=None,
        alias="DesktopFile",
        description=(
            "Optional path to a Linux desktop file. If empty (default), one will be generated "
            "automatically. If supplied, the file MUST contain the line 'Exec=${INSTALL_EXEC}' in "
            "order to use the correct install location. Set to 'NONE' to omit the desktop file."
        ),
    )
    start_command: Optional[str] = Field(
        default=None,
        alias="StartCommand",
        description=(
            "Optional command name to start the application from the terminal. It must not "
            "contain spaces or invalid filename characters. Do not add any extension such as "
            "'.exe'. If empty, the application will not be in the path."
        ),
    )
    prime_category: Optional[str] = Field(
        default=None,
        alias="PrimeCategory",
        description=(
            "Optional category for the application. The value should be one of the recognised "
            "Freedesktop top-level categories, such as: Audio, Development, Game, Office, "
            "Utility etc. Only a single value should be provided here."
        ),
    )
    meta_file: Optional[str] = Field(
        default=None,
        alias="MetaFile",
        description=(
            "Path to AppStream metadata file. It is optional, but recommended as it is used by "
            "software centers. If empty, one is generated. Set to 'NONE' to omit metadata."
        ),
    )
    icon_files: tuple[str, ...] = Field(
        default=(),
        alias="IconFiles",
        description=(
            "Optional icon file paths. The value may include multiple filenames separated with "
            "semicolon or given in multi-line form. Valid types are SVG, PNG and ICO (ICO "
            "ignored on Linux). PNGs must be one of the standard sizes and MUST include the size "
            "in the filename in the form: 'name.32x32.png' or 'name.32.png'."
        ),
    )

    # DOTNET PUBLISH
    dotnet_project_path: Optional[str] = Field(
        default=None,
        alias="DotnetProjectPath",
        description=(
            "Optional path to the dotnet project (.csproj) or solution (.sln) file, or the "
            "directory containing it. If set to 'NONE', dotnet publish is disabled and only "
            "DotnetPostPublish is called."
        ),
    )
    dotnet_publish_args: Optional[str] = Field(
        default=None,
        alias="DotnetPublishArgs",
        description=(
            "Optional arguments supplied to 'dotnet publish'. Do NOT include '-r' (runtime), "
            "app version, or '-c' (configuration) here as they will be added. The value may use "
            "macro variables."
        ),
    )
    dotnet_post_publish: Optional[str] = Field(
        default=None,
        alias="DotnetPostPublish",
        description=(
            "Post-publish (or standalone build) command on Linux (ignored on Windows). It is "
            "called after dotnet publish, but before the final output is built. Macros are "
            "available to the command as environment variables."
        ),
    )
    dotnet_post_publish_on_windows: Optional[str] = Field(
        default=None,
        alias="DotnetPostPublishOnWindows",
        description=(
            "Post-publish (or standalone build) command on Windows (ignored on Linux). This "
            "should perform the equivalent operation as DotnetPostPublish."
        ),
    )

    # PACKAGE OUTPUT
    package_name: str = Field(
        default="",
        alias="PackageName",
        description=(
            "Optional package name (excludes version etc.). If empty, defaults to AppBaseName. "
            "It names the output file and identifies the application in .deb and .rpm packages. "
            "It must contain only alpha-numeric and '-', '+' and '.' characters."
        ),
    )
    output_directory: str = Field(
        default="",
        alias="OutputDirectory",
        description=(
            "Output directory, or subdirectory relative to this file. It will be created if it "
            "does not exist. If empty, it defaults to the location of this file."
        ),
    )

    # APPIMAGE OPTIONS
    appimage_args: Optional[str] = Field(
        default=None,
        alias="AppImageArgs",
        description="Additional arguments for use with appimagetool. Useful for signing.",
    )
    appimage_version_output: bool = Field(
        default=False,
        alias="AppImageVersionOutput",
        description=(
            "Boolean (true or false) which sets whether to include the application version in "
            "the AppImage filename. Default is false."
        ),
    )
    appimage_runtime_path: Optional[str] = Field(
        default=None,
        alias="AppImageRuntimePath",
        description=(
            "Optional path to an AppImage runtime file, or a directory containing files named "
            "'runtime-x86_64', 'runtime-aarch64' etc. If empty, appimagetool uses its own."
        ),
    )

    # FLATPAK OPTIONS
    flatpak_platform_runtime: str = Field(
        ...,
        alias="FlatpakPlatformRuntime",
        description="The runtime platform, typically 'org.freedesktop.Platform'.",
    )
    flatpak_platform_sdk: str = Field(
        ...,
        alias="FlatpakPlatformSdk",
        description=(
            "The platform SDK, typically 'org.freedesktop.Sdk'. The SDK must be installed on "
            "the build system."
        ),
    )
    flatpak_platform_version: str = Field(
        ...,
        alias="FlatpakPlatformVersion",
        description="The platform runtime version.",
    )
    flatpak_finish_args: tuple[str, ...] = Field(
        default=(),
        alias="FlatpakFinishArgs",
        description=(
            "Flatpak manifest 'finish-args' sandbox permissions. Values should be prefixed with "
            "'--' and separated by semicolon or given in multi-line form."
        ),
    )
    flatpak_builder_args: Optional[str] = Field(
        default=None,
        alias="FlatpakBuilderArgs",
        description="Additional arguments for use with flatpak-builder.",
    )

    # RPM OPTIONS
    rpm_auto_req: bool = Field(
        default=False,
        alias="RpmAutoReq",
        description="Boolean (true or false) which sets the RPM 'AutoReq' flag. Default is false.",
    )
    rpm_auto_prov: bool = Field(
        default=False,
        alias="RpmAutoProv",
        description="Boolean (true or false) which sets the RPM 'AutoProv' flag. Default is false.",
    )
    rpm_requires: tuple[str, ...] = Field(
        default=(),
        alias="RpmRequires",
        description=(
            "Optional list of RPM dependencies, separated by semicolon or given in multi-line "
            "form. Each is written as a 'Requires:' line of the spec file."
        ),
    )

    # DEBIAN OPTIONS
    debian_recommends: tuple[str, ...] = Field(
        default=(),
        alias="DebianRecommends",
        description=(
            "Optional list of Debian package recommendations, separated by semicolon or given "
            "in multi-line form."
        ),
    )

    # WINDOWS SETUP OPTIONS
    setup_admin_install: bool = Field(
        default=False,
        alias="SetupAdminInstall",
        description=(
            "Boolean (true or false) which specifies whether the application is to be installed "
            "in administrative mode, or per-user. Default is false."
        ),
    )
    setup_command_prompt: Optional[str] = Field(
        default=None,
        alias="SetupCommandPrompt",
        description=(
            "Optional command prompt title. If set, a 'Command Prompt' program menu entry is "
            "added which opens a console with the application directory in its path."
        ),
    )
    setup_min_windows_version: str = Field(
        ...,
        alias="SetupMinWindowsVersion",
        description=(
            "Mandatory minimum version of Windows that the software runs on. Windows 8 = 6.2, "
            "Windows 10/11 = 10."
        ),
    )
    setup_sign_tool: Optional[str] = Field(
        default=None,
        alias="SetupSignTool",
        description=(
            "Optional name and parameters of the Sign Tool used to digitally sign the installer "
            "and uninstaller. If empty, files will not be signed."
        ),
    )
    setup_suffix_output: Optional[str] = Field(
        default=None,
        alias="SetupSuffixOutput",
        description="Optional suffix for the installer output filename, such as 'Setup'.",
    )
    setup_version_output: bool = Field(
        default=False,
        alias="SetupVersionOutput",
        description=(
            "Boolean (true or false) which sets whether to include the application version in "
            "the setup filename. Default is false."
        ),
    )
    setup_uninstall_script: Optional[str] = Field(
        default=None,
        alias="SetupUninstallScript",
        description=(
            "Optional path to a script packaged with the application and run by the "
            "uninstaller before files are removed."
        ),
    )

    @model_validator(mode="before")
    @classmethod
    def apply_field_rules(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, Mapping):
            return data

        context = info.context or {}
        base = os.path.abspath(context.get("base_directory") or os.getcwd())
        strict = bool(context.get("strict", False))

        result: dict[str, Any] = {"local_directory": base}
        for name, rule in FIELD_RULES.items():
            key = cls.model_fields[name].alias or name
            raw = data.get(key, data.get(name))
            result[name] = _apply_rule(key, raw, rule, base, strict)

        if not result["package_name"]:
            result["package_name"] = result["app_base_name"]
        if not result["output_directory"]:
            result["output_directory"] = base

        return result

    @field_validator("app_id")
    @classmethod
    def validate_app_id(cls, value: str) -> str:
        if not _APP_ID.match(value):
            raise InvalidFormatError(
                f"AppId must be in reverse DNS form (e.g. com.example.app): {value}"
            )
        return value

    @field_validator("app_version_release")
    @classmethod
    def validate_version_release(cls, value: str) -> str:
        split_version(value)
        return value

    @field_validator("flatpak_finish_args")
    @classmethod
    def validate_finish_args(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for item in value:
            if not item.startswith("--"):
                raise InvalidFormatError(
                    f"FlatpakFinishArgs items must start with '--': {item}"
                )
        return value

    @property
    def app_version(self) -> str:
        return split_version(self.app_version_release)[0]

    @property
    def package_release(self) -> str:
        return split_version(self.app_version_release)[1]

    @property
    def license_path(self) -> Optional[Path]:
        return _enabled_path(self.app_license_file)

    @property
    def change_path(self) -> Optional[Path]:
        return _enabled_path(self.app_change_file)

    @property
    def desktop_path(self) -> Optional[Path]:
        return _enabled_path(self.desktop_file)

    @property
    def meta_path(self) -> Optional[Path]:
        return _enabled_path(self.meta_file)

    @property
    def desktop_disabled(self) -> bool:
        return self.desktop_file == PATH_DISABLED

    @property
    def meta_disabled(self) -> bool:
        return self.meta_file == PATH_DISABLED

    @property
    def publish_disabled(self) -> bool:
        return self.dotnet_project_path == PATH_DISABLED

    def read_associated_file(self, path: Optional[Union[str, Path]]) -> Optional[str]:
        if path is None or str(path) == PATH_DISABLED:
            return None

        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigPathNotFoundError(f"Failed to read file: {path}") from exc
        except UnicodeDecodeError as exc:
            raise ConfigError(f"File is not UTF-8 text: {path}") from exc

        text = text.replace("\r\n", "\n").strip()
        if not text:
            raise ConfigError(f"File is empty: {path}")
        return text

    def render(self, style: DocStyle = DocStyle.COMMENTS) -> str:
        parts: list[str] = []

        if style is not DocStyle.REFERENCE:
            parts.append(_breaker(f"APPWRAP: {__version__}", style, major=True))

        for title, names in SECTIONS:
            parts.append(_breaker(title, style))
            for name in names:
                field = type(self).model_fields[name]
                pair = f"{field.alias} = {self._render_value(name)}".rstrip()
                parts.append(_help_field(field.alias, pair, field.description or "", style))

        return "".join(parts).strip() + "\n"

    def _render_value(self, name: str) -> str:
        rule = FIELD_RULES[name]
        value = getattr(self, name)

        if rule & Rule.BOOLEAN:
            return "true" if value else "false"

        if rule & (Rule.LIST | Rule.MULTI_LINE):
            items = [self._display_path(item) if rule & Rule.PATH else item for item in value]
            if not items:
                return ""
            lines = [MULTI_QUOTE] + [f"    {item}".rstrip() for item in items] + [MULTI_QUOTE]
            return "\n".join(lines)

        if value is None:
            return ""

        if rule & Rule.PATH:
            return _quote(self._display_path(value))

        return _quote(value)

    def _display_path(self, value: str) -> str:
        if value == PATH_DISABLED:
            return value

        try:
            relative = Path(value).relative_to(self.local_directory)
        except ValueError:
            return value

        text = relative.as_posix()
        return "" if text == "." else text

    @classmethod
    def example(cls, base_directory: Optional[Path] = None) -> "AppConfig":
        return cls.model_validate(
            EXAMPLE_VALUES,
            context={"base_directory": base_directory, "strict": False},
        )

    class Config:
        frozen = True
        populate_by_name = True


FIELD_RULES: dict[str, Rule] = {
    "app_base_name": Rule.MANDATORY | Rule.SAFE | Rule.NO_SPACE,
    "app_friendly_name": Rule.MANDATORY | Rule.SAFE,
    "app_id": Rule.MANDATORY | Rule.STRICT,
    "app_version_release": Rule.MANDATORY | Rule.NO_SPACE,
    "app_short_summary": Rule.MANDATORY,
    "app_description": Rule.MULTI_LINE,
    "app_license_id": Rule.MANDATORY | Rule.SAFE,
    "app_license_file": Rule.PATH | Rule.ASSERT_PATH | Rule.DISABLE,
    "app_change_file": Rule.PATH | Rule.ASSERT_PATH | Rule.DISABLE,
    "publisher_name": Rule.MANDATORY | Rule.SAFE,
    "publisher_copyright": Rule.SAFE,
    "publisher_link_name": Rule.SAFE,
    "publisher_link_url": Rule.SAFE,
    "publisher_email": Rule.SAFE,
    "desktop_no_display": Rule.BOOLEAN,
    "desktop_terminal": Rule.BOOLEAN,
    "desktop_file": Rule.PATH | Rule.ASSERT_PATH | Rule.DISABLE,
    "start_command": Rule.STRICT,
    "prime_category": Rule.STRICT,
    "meta_file": Rule.PATH | Rule.ASSERT_PATH | Rule.DISABLE,
    "icon_files": Rule.LIST | Rule.PATH | Rule.ASSERT_PATH,
    "dotnet_project_path": Rule.PATH | Rule.ASSERT_PATH | Rule.DISABLE,
    "dotnet_publish_args": Rule.NONE,
    "dotnet_post_publish": Rule.PATH | Rule.ASSERT_PATH,
    "dotnet_post_publish_on_windows": Rule.PATH | Rule.ASSERT_PATH,
    "package_name": Rule.STRICT,
    "output_directory": Rule.PATH,
    "appimage_args": Rule.NONE,
    "appimage_version_output": Rule.BOOLEAN,
    "appimage_runtime_path": Rule.PATH | Rule.ASSERT_PATH,
    "flatpak_platform_runtime": Rule.MANDATORY | Rule.STRICT,
    "flatpak_platform_sdk": Rule.MANDATORY | Rule.STRICT,
    "flatpak_platform_version": Rule.MANDATORY | Rule.STRICT,
    "flatpak_finish_args": Rule.LIST | Rule.SAFE,
    "flatpak_builder_args": Rule.NONE,
    "rpm_auto_req": Rule.BOOLEAN,
    "rpm_auto_prov": Rule.BOOLEAN,
    "rpm_requires": Rule.LIST,
    "debian_recommends": Rule.LIST,
    "setup_admin_install": Rule.BOOLEAN,
    "setup_command_prompt": Rule.SAFE,
    "setup_min_windows_version": Rule.MANDATORY | Rule.STRICT,
    "setup_sign_tool": Rule.NONE,
    "setup_suffix_output": Rule.SAFE | Rule.NO_SPACE,
    "setup_version_output": Rule.BOOLEAN,
    "setup_uninstall_script": Rule.PATH | Rule.ASSERT_PATH,
}

SECTIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "APP PREAMBLE",
        (
            "app_base_name",
            "app_friendly_name",
            "app_id",
            "app_version_release",
            "app_short_summary",
            "app_description",
            "app_license_id",
            "app_license_file",
            "app_change_file",
        ),
    ),
    (
        "PUBLISHER",
        (
            "publisher_name",
            "publisher_copyright",
            "publisher_link_name",
            "publisher_link_url",
            "publisher_email",
        ),
    ),
    (
        "DESKTOP INTEGRATION",
        (
            "desktop_no_display",
            "desktop_terminal",
            "desktop_file",
            "start_command",
            "prime_category",
            "meta_file",
            "icon_files",
        ),
    ),
    (
        "DOTNET PUBLISH",
        (
            "dotnet_project_path",
            "dotnet_publish_args",
            "dotnet_post_publish",
            "dotnet_post_publish_on_windows",
        ),
    ),
    ("PACKAGE OUTPUT", ("package_name", "output_directory")),
    (
        "APPIMAGE OPTIONS",
        ("appimage_args", "appimage_version_output", "appimage_runtime_path"),
    ),
    (
        "FLATPAK OPTIONS",
        (
            "flatpak_platform_runtime",
            "flatpak_platform_sdk",
            "flatpak_platform_version",
            "flatpak_finish_args",
            "flatpak_builder_args",
        ),
    ),
    ("RPM OPTIONS", ("rpm_auto_req", "rpm_auto_prov", "rpm_requires")),
    ("DEBIAN OPTIONS", ("debian_recommends",)),
    (
        "WINDOWS SETUP OPTIONS",
        (
            "setup_admin_install",
            "setup_command_prompt",
            "setup_min_windows_version",
            "setup_sign_tool",
            "setup_suffix_output",
            "setup_version_output",
            "setup_uninstall_script",
        ),
    ),
)

EXAMPLE_VALUES: dict[str, Any] = {
    "AppBaseName": "HelloWorld",
    "AppFriendlyName": "Hello World",
    "AppId": "net.example.helloworld",
    "AppVersionRelease": "1.0.0[1]",
    "AppShortSummary": "A HelloWorld application",
    "AppDescription": (
        "HelloWorld is a demonstration application.",
        "",
        "* It prints a greeting",
        "* It exits",
    ),
    "AppLicenseId": "LicenseRef-Proprietary",
    "PublisherName": "The Hello World Team",
    "PublisherCopyright": "Copyright (C) Hello World Team 1970",
    "PublisherLinkName": "Home Page",
    "PublisherLinkUrl": "https://example.net",
    "PublisherEmail": "contact@example.net",
    "PrimeCategory": "Utility",
    "OutputDirectory": "Deploy/OUT",
    "FlatpakPlatformRuntime": "org.freedesktop.Platform",
    "FlatpakPlatformSdk": "org.freedesktop.Sdk",
    "FlatpakPlatformVersion": "23.08",
    "FlatpakFinishArgs": (
        "--socket=wayland",
        "--socket=x11",
        "--filesystem=host",
        "--share=network",
    ),
    "SetupMinWindowsVersion": "10",
    "SetupSuffixOutput": "Setup",
}


def parse_config(
    source: Union[KeyValueDocument, Iterable[str]],
    base_directory: Optional[Union[str, Path]] = None,
    strict: bool = False,
) -> AppConfig:
    document = source if isinstance(source, KeyValueDocument) else read_document(source)

    if base_directory is None and document.source is not None:
        base_directory = document.source.parent

    aliases = {
        field.alias.lower(): field.alias
        for field in AppConfig.model_fields.values()
        if field.alias
    }

    data: dict[str, Any] = {}
    for key in document:
        alias = aliases.get(key.lower())
        if alias is None:
            logger.warning("Ignoring unknown configuration key: %s", key)
            continue
        data[alias] = document[key]

    return AppConfig.model_validate(
        data,
        context={"base_directory": base_directory, "strict": strict},
    )


def load_config(path: Union[str, Path], strict: bool = True) -> AppConfig:
    path = Path(path).absolute()
    logger.debug("Loading configuration: %s", path)
    return parse_config(load_document(path), base_directory=path.parent, strict=strict)


def _apply_rule(key: str, raw: Any, rule: Rule, base: str, strict: bool) -> Any:
    if isinstance(raw, bool) and rule & Rule.BOOLEAN:
        return raw

    if isinstance(raw, (list, tuple)):
        items = [str(item) for item in raw]
        raw = "\n".join(items)
    elif isinstance(raw, Path):
        raw = str(raw)
    elif raw is not None and not isinstance(raw, str):
        raw = str(raw)

    if raw is None or not raw.strip():
        if rule & Rule.MANDATORY:
            raise MissingValueError(f"Mandatory value required for {key}")
        if rule & Rule.BOOLEAN:
            return False
        if rule & (Rule.LIST | Rule.MULTI_LINE):
            return ()
        return None

    value = raw.strip()

    if "\t" in value:
        raise InvalidFormatError(f"Tab characters not permitted in {key}")

    if rule & Rule.BOOLEAN:
        lowered = value.lower()
        if lowered not in ("true", "false"):
            raise InvalidFormatError(f"{key} must be 'true' or 'false', got: {value}")
        return lowered == "true"

    if rule & Rule.MULTI_LINE:
        return tuple(line.strip() for line in value.split("\n"))

    if rule & Rule.LIST:
        items = [item.strip() for item in re.split(r"[;\n]", value)]
        return tuple(
            _check_value(key, item, rule, base, strict) for item in items if item
        )

    if "\n" in value:
        raise InvalidFormatError(f"Multi-line value not permitted for {key}")

    return _check_value(key, value, rule, base, strict)


def _check_value(key: str, value: str, rule: Rule, base: str, strict: bool) -> str:
    if rule & Rule.DISABLE and value.upper() == PATH_DISABLED:
        return PATH_DISABLED

    if rule & (Rule.SAFE | Rule.PATH) and _UNSAFE_CHARS.search(value):
        raise InvalidFormatError(f"{key} contains invalid characters: {value}")

    if rule & Rule.NO_SPACE and any(char.isspace() for char in value):
        raise InvalidFormatError(f"{key} must not contain spaces: {value}")

    if rule & Rule.STRICT and not _STRICT_VALUE.match(value):
        raise InvalidFormatError(
            f"{key} must contain only alpha-numeric, '-', '+' and '.' characters: {value}"
        )

    if rule & Rule.PATH:
        value = _resolve_path(value, base)
        if strict and rule & Rule.ASSERT_PATH and not os.path.exists(value):
            raise ConfigPathNotFoundError(f"{key} path not found: {value}")

    return value


def _resolve_path(value: str, base: str) -> str:
    value = os.path.expanduser(value.replace("\\", "/"))
    return os.path.normpath(os.path.join(base, value))


def _enabled_path(value: Optional[str]) -> Optional[Path]:
    if value is None or value == PATH_DISABLED:
        return None
    return Path(value)


def _quote(value: str) -> str:
    # read_document strips one pair of matching quotes and opens a block on """
    if value.startswith(MULTI_QUOTE) or (
        len(value) > 1 and value[0] == value[-1] and value[0] in ("'", '"')
    ):
        quote = '"' if value[0] == "'" else "'"
        return f"{quote}{value}{quote}"
    return value


def _breaker(title: str, style: DocStyle, major: bool = False) -> str:
    if style is DocStyle.NO_COMMENTS:
        return f"\n# {title}\n"

    line = "#" * (80 if major else 40)
    return f"\n{line}\n# {title}\n{line}\n"


def _help_field(name: str, pair: str, help_text: str, style: DocStyle) -> str:
    lines = textwrap.wrap(help_text, width=100)

    if style is DocStyle.REFERENCE:
        text = f"\n** {name} **\n" + "".join(f"{line}\n" for line in lines)
        if not pair.endswith("="):
            text += f"Example: {pair}\n"
        return text

    if style is DocStyle.COMMENTS:
        return "\n" + "".join(f"# {line}\n" for line in lines) + f"{pair}\n"

    return f"{pair}\n"
