from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import TYPE_CHECKING, Callable, Iterator, Optional
from xml.sax.saxutils import escape

from appwrap.errors import ConstructionError
from appwrap.meta.changes import ChangeLog
from appwrap.meta.description import description_to_xml

if TYPE_CHECKING:
    from appwrap.bundle.builder import PackageBuilder


class MacroId(StrEnum):
    LOCAL_DIRECTORY = "LOCAL_DIRECTORY"
    APP_BASE_NAME = "APP_BASE_NAME"
    APP_FRIENDLY_NAME = "APP_FRIENDLY_NAME"
    APP_ID = "APP_ID"
    APP_SHORT_SUMMARY = "APP_SHORT_SUMMARY"
    APP_LICENSE_ID = "APP_LICENSE_ID"
    PUBLISHER_NAME = "PUBLISHER_NAME"
    PUBLISHER_COPYRIGHT = "PUBLISHER_COPYRIGHT"
    PUBLISHER_LINK_NAME = "PUBLISHER_LINK_NAME"
    PUBLISHER_LINK_URL = "PUBLISHER_LINK_URL"
    PUBLISHER_EMAIL = "PUBLISHER_EMAIL"
    DESKTOP_NODISPLAY = "DESKTOP_NODISPLAY"
    DESKTOP_INTEGRATE = "DESKTOP_INTEGRATE"
    DESKTOP_TERMINAL = "DESKTOP_TERMINAL"
    PRIME_CATEGORY = "PRIME_CATEGORY"

    APPSTREAM_DESCRIPTION_XML = "APPSTREAM_DESCRIPTION_XML"
    APPSTREAM_CHANGELOG_XML = "APPSTREAM_CHANGELOG_XML"
    APP_VERSION = "APP_VERSION"
    PACKAGE_RELEASE = "PACKAGE_RELEASE"
    DEPLOY_KIND = "DEPLOY_KIND"
    DOTNET_RUNTIME = "DOTNET_RUNTIME"
    BUILD_ARCH = "BUILD_ARCH"
    BUILD_TARGET = "BUILD_TARGET"
    BUILD_DATE = "BUILD_DATE"
    BUILD_YEAR = "BUILD_YEAR"
    BUILD_ROOT = "BUILD_ROOT"
    BUILD_SHARE = "BUILD_SHARE"
    BUILD_APP_BIN = "BUILD_APP_BIN"

    INSTALL_BIN = "INSTALL_BIN"
    INSTALL_EXEC = "INSTALL_EXEC"

    @property
    def token(self) -> str:
        return "${" + self.value + "}"

    @property
    def hint(self) -> str:
        return _HINTS[self]

    @property
    def contains_xml(self) -> bool:
        return self in (MacroId.APPSTREAM_DESCRIPTION_XML, MacroId.APPSTREAM_CHANGELOG_XML)


def _from_config(key: str) -> str:
    return f"Gives the {key} value from the configuration file"


_HINTS: dict[MacroId, str] = {
    MacroId.LOCAL_DIRECTORY: "The configuration file directory",
    MacroId.APP_BASE_NAME: _from_config("AppBaseName"),
    MacroId.APP_FRIENDLY_NAME: _from_config("AppFriendlyName"),
    MacroId.APP_ID: _from_config("AppId"),
    MacroId.APP_SHORT_SUMMARY: _from_config("AppShortSummary"),
    MacroId.APP_LICENSE_ID: _from_config("AppLicenseId"),
    MacroId.PUBLISHER_NAME: _from_config("PublisherName"),
    MacroId.PUBLISHER_COPYRIGHT: _from_config("PublisherCopyright"),
    MacroId.PUBLISHER_LINK_NAME: _from_config("PublisherLinkName"),
    MacroId.PUBLISHER_LINK_URL: _from_config("PublisherLinkUrl"),
    MacroId.PUBLISHER_EMAIL: _from_config("PublisherEmail"),
    MacroId.DESKTOP_NODISPLAY: _from_config("DesktopNoDisplay"),
    MacroId.DESKTOP_INTEGRATE: "Gives the logical not of ${DESKTOP_NODISPLAY}",
    MacroId.DESKTOP_TERMINAL: _from_config("DesktopTerminal"),
    MacroId.PRIME_CATEGORY: _from_config("PrimeCategory") + " (Utility if empty)",
    MacroId.APPSTREAM_DESCRIPTION_XML: (
        "AppStream application description XML (use within the <description> element only)"
    ),
    MacroId.APPSTREAM_CHANGELOG_XML: (
        "AppStream changelog XML content (use within the <releases> element only)"
    ),
    MacroId.APP_VERSION: "Application version, excluding package-release extension",
    MacroId.PACKAGE_RELEASE: "Package release version",
    MacroId.DEPLOY_KIND: "Deployment output kind: appimage, flatpak, rpm, deb, setup, zip",
    MacroId.DOTNET_RUNTIME: "Dotnet publish runtime identifier used (RID)",
    MacroId.BUILD_ARCH: "Package architecture in the notation of the output kind (e.g. x86_64, amd64)",
    MacroId.BUILD_TARGET: "Release or Debug (Release unless explicitly specified)",
    MacroId.BUILD_DATE: "Build date in 'yyyy-MM-dd' format",
    MacroId.BUILD_YEAR: "Build year as 'yyyy'",
    MacroId.BUILD_ROOT: "Root of the temporary application build directory",
    MacroId.BUILD_SHARE: "Linux 'usr/share' build directory under BUILD_ROOT (empty for some deployments)",
    MacroId.BUILD_APP_BIN: "Application build directory (i.e. the output of dotnet publish)",
    MacroId.INSTALL_BIN: "Path to application directory on target system (not the build system)",
    MacroId.INSTALL_EXEC: "Path to application executable on target system (not the build system)",
}


@dataclass(frozen=True)
class _Inputs:
    builder: "PackageBuilder"
    changelog: ChangeLog
    now: datetime

    @property
    def config(self):
        return self.builder.context.config


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _description_xml(inputs: _Inputs) -> str:
    config = inputs.config
    if config.app_description:
        return description_to_xml(config.app_description)
    return f"<p>{escape(config.app_short_summary)}</p>"


def _changelog_xml(inputs: _Inputs) -> str:
    if inputs.changelog:
        return inputs.changelog.to_appstream()
    version = inputs.builder.context.app_version
    return f'<release version="{escape(version)}" date="{inputs.now:%Y-%m-%d}"/>'


_RESOLVERS: dict[MacroId, Callable[[_Inputs], str]] = {
    MacroId.LOCAL_DIRECTORY: lambda s: s.config.local_directory,
    MacroId.APP_BASE_NAME: lambda s: s.config.app_base_name,
    MacroId.APP_FRIENDLY_NAME: lambda s: s.config.app_friendly_name,
    MacroId.APP_ID: lambda s: s.config.app_id,
    MacroId.APP_SHORT_SUMMARY: lambda s: s.config.app_short_summary,
    MacroId.APP_LICENSE_ID: lambda s: s.config.app_license_id,
    MacroId.PUBLISHER_NAME: lambda s: s.config.publisher_name,
    MacroId.PUBLISHER_COPYRIGHT: lambda s: s.config.publisher_copyright or "",
    MacroId.PUBLISHER_LINK_NAME: lambda s: s.config.publisher_link_name or "",
    MacroId.PUBLISHER_LINK_URL: lambda s: s.config.publisher_link_url or "",
    MacroId.PUBLISHER_EMAIL: lambda s: s.config.publisher_email or "",
    MacroId.DESKTOP_NODISPLAY: lambda s: _bool(s.config.desktop_no_display),
    MacroId.DESKTOP_INTEGRATE: lambda s: _bool(not s.config.desktop_no_display),
    MacroId.DESKTOP_TERMINAL: lambda s: _bool(s.config.desktop_terminal),
    MacroId.PRIME_CATEGORY: lambda s: s.config.prime_category or "Utility",
    MacroId.APPSTREAM_DESCRIPTION_XML: _description_xml,
    MacroId.APPSTREAM_CHANGELOG_XML: _changelog_xml,
    MacroId.APP_VERSION: lambda s: s.builder.context.app_version,
    MacroId.PACKAGE_RELEASE: lambda s: s.builder.context.package_release,
    MacroId.DEPLOY_KIND: lambda s: s.builder.kind.value,
    MacroId.DOTNET_RUNTIME: lambda s: s.builder.context.runtime.runtime_id,
    MacroId.BUILD_ARCH: lambda s: s.builder.package_arch,
    MacroId.BUILD_TARGET: lambda s: s.builder.context.options.build_target,
    MacroId.BUILD_DATE: lambda s: f"{s.now:%Y-%m-%d}",
    MacroId.BUILD_YEAR: lambda s: f"{s.now:%Y}",
    MacroId.BUILD_ROOT: lambda s: str(s.builder.layout.build_root),
    MacroId.BUILD_SHARE: lambda s: str(s.builder.layout.usr_share or ""),
    MacroId.BUILD_APP_BIN: lambda s: str(s.builder.layout.app_bin),
    MacroId.INSTALL_BIN: lambda s: s.builder.layout.install_bin,
    MacroId.INSTALL_EXEC: lambda s: s.builder.install_exec,
}

_unresolved = [macro.value for macro in MacroId if macro not in _RESOLVERS]
if _unresolved:
    raise RuntimeError(f"Macros without a resolver: {', '.join(_unresolved)}")

_unhinted = [macro.value for macro in MacroId if not _HINTS.get(macro)]
if _unhinted:
    raise RuntimeError(f"Macros without a hint: {', '.join(_unhinted)}")


class MacroTable(Mapping):
    """Resolved value of every macro for one build."""

    def __init__(self, values: Mapping[MacroId, str]):
        self._values = dict(values)

    @classmethod
    def build(
        cls,
        builder: "PackageBuilder",
        changelog: Optional[ChangeLog] = None,
        now: Optional[datetime] = None,
    ) -> "MacroTable":
        if changelog is None:
            changelog = ChangeLog.from_file(builder.context.config.change_path)

        inputs = _Inputs(
            builder=builder,
            changelog=changelog,
            now=now or datetime.now(timezone.utc),
        )

        table = cls({macro: resolve(inputs) for macro, resolve in _RESOLVERS.items()})
        table.check_complete()
        return table

    def __getitem__(self, key: MacroId) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[MacroId]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def check_complete(self) -> None:
        missing = [
            macro.value for macro in MacroId if self._values.get(macro) is None
        ]
        if missing:
            raise ConstructionError(f"Macro table incomplete: {', '.join(missing)}")

    def lookup(self, name: str) -> Optional[str]:
        try:
            return self._values.get(MacroId(name))
        except ValueError:
            return None

    def as_environment(self) -> dict[str, str]:
        return {
            macro.value: value
            for macro, value in self._values.items()
            if not macro.contains_xml
        }
