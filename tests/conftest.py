"""Shared fixtures: a sample configuration, an isolated asset locator and
an Operations double that records commands instead of running them."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from appwrap.bundle.context import BuildOptions
from appwrap.config import AppConfig, parse_config
from appwrap.kinds import PackageKind
from appwrap.runtime.assets import AssetLocator
from appwrap.utils.ops import Operations

DUMMY_LINES = [
    "AppBaseName = 'HelloWorld'",
    "AppFriendlyName = Hello World",
    'AppId = "net.example.helloworld"',
    "AppVersionRelease = 5.4.3[2]",
    "PackageName = HelloWorld",
    "AppShortSummary = Test <application> only",
    'AppDescription = """',
    "    Line1",
    "    <Line2>",
    "",
    "    Line3 has ${LINE3_VAR}",
    '"""',
    "AppLicenseId = LicenseRef-LICENSE",
    "AppLicenseFile = LICENSE",
    "AppChangeFile = CHANGELOG",
    "PublisherName = Kuiper Zone",
    "PublisherCopyright = Copyright Kuiper Zone",
    "PublisherLinkName = kuiper.zone",
    "PublisherLinkUrl = https://kuiper.zone",
    "PublisherEmail = email@example.net",
    "StartCommand = helloworld",
    "DesktopNoDisplay = TRUE",
    "DesktopTerminal = False",
    "PrimeCategory = Development",
    "DesktopFile = app.desktop",
    "IconFiles = Assets/Icon.32x32.png; Assets/Icon.64x64.png; Assets/Icon.ico; Assets/Icon.svg;",
    "MetaFile = metainfo.xml",
    "DotnetProjectPath = HelloProject",
    "DotnetPublishArgs = --self-contained true",
    "DotnetPostPublish = PostPublishCommand.sh",
    "DotnetPostPublishOnWindows = PostPublishCommandOnWindows.bat",
    "OutputDirectory = Deploy",
    "AppImageArgs = -appargs",
    "AppImageVersionOutput = true",
    "FlatpakPlatformRuntime = org.freedesktop.Platform",
    "FlatpakPlatformSdk = org.freedesktop.Sdk",
    'FlatpakPlatformVersion = "18.00"',
    "FlatpakFinishArgs = --socket=wayland;--socket=fallback-x11;--filesystem=host;--share=network",
    "FlatpakBuilderArgs = -flatargs",
    "RpmAutoReq = true",
    "RpmAutoProv = false",
    "RpmRequires = rpm-requires1;rpm-requires2",
    "DebianRecommends = deb-depends1;deb-depends2",
    "SetupAdminInstall = true",
    "SetupCommandPrompt = Command Prompt",
    "SetupMinWindowsVersion = 6.9",
    "SetupSignTool = signtool.exe",
    "SetupSuffixOutput = Setup",
    "SetupVersionOutput = true",
]

PROJECT_FILES = {
    "LICENSE": "Test license text",
    "CHANGELOG": "+ 5.4.3;2024-05-01\n- First change\n- Second change",
    "app.desktop": "[Desktop Entry]\nName=${APP_FRIENDLY_NAME}\nExec=${INSTALL_EXEC}",
    "metainfo.xml": "<component><summary>${APP_SHORT_SUMMARY}</summary>"
    "<description>${APPSTREAM_DESCRIPTION_XML}</description></component>",
    "Assets/Icon.32x32.png": "png32",
    "Assets/Icon.64x64.png": "png64",
    "Assets/Icon.ico": "ico",
    "Assets/Icon.svg": "<svg/>",
    "PostPublishCommand.sh": "#!/bin/sh",
    "PostPublishCommandOnWindows.bat": "rem",
    "HelloProject/HelloProject.csproj": "<Project/>",
}


def dummy_lines(omit: Optional[str] = None, **overrides: str) -> list[str]:
    """Return the sample configuration, dropping ``omit`` and replacing keys."""
    lines: list[str] = []
    found: set[str] = set()
    skipping = False

    for line in DUMMY_LINES:
        if skipping:
            skipping = line != '"""'
            continue

        key = line.split("=", 1)[0].strip() if "=" in line else None
        if key is not None and (key == omit or key in overrides):
            skipping = line.rstrip().endswith('"""')
            found.add(key)
            if key in overrides:
                lines.append(f"{key} = {overrides[key]}")
            continue

        lines.append(line)

    lines.extend(f"{key} = {value}" for key, value in overrides.items() if key not in found)
    return lines


def write_project(root: Path) -> Path:
    for name, content in PROJECT_FILES.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


class RecordingOperations(Operations):
    """Operations that record external commands instead of running them."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.commands: list[str] = []
        self.environments: list[dict] = []

    def execute(self, command, *, env=None, cwd=None) -> str:
        self.commands.append(command if isinstance(command, str) else " ".join(command))
        self.environments.append(dict(env or {}))
        return ""


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    return write_project(tmp_path / "project")


@pytest.fixture
def config(project_dir: Path) -> AppConfig:
    return parse_config(dummy_lines(), base_directory=project_dir)


@pytest.fixture
def assets(tmp_path: Path) -> AssetLocator:
    root = tmp_path / "assets"
    root.mkdir()
    for name in ("generic.svg", "generic.ico", "terminal.svg", "terminal.ico"):
        (root / name).write_text(name, encoding="utf-8")

    return AssetLocator(root=root, search_path="", host_runtime="linux-x64")


@pytest.fixture
def tool_assets(tmp_path: Path, assets: AssetLocator) -> AssetLocator:
    """Asset locator whose search path holds stub packaging tools."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    for name in ("appimagetool", "flatpak-builder", "rpmbuild", "dpkg-deb", "iscc"):
        tool = bin_dir / name
        tool.write_text("#!/bin/sh\n", encoding="utf-8")
        tool.chmod(0o755)

    return AssetLocator(root=assets.root, search_path=str(bin_dir), host_runtime="linux-x64")


@pytest.fixture
def ops() -> RecordingOperations:
    return RecordingOperations()


@pytest.fixture
def make_options(tmp_path: Path):
    def factory(kind: PackageKind, runtime: str = "linux-x64", **kwargs) -> BuildOptions:
        return BuildOptions(kind=kind, runtime=runtime, work_root=tmp_path / "work", **kwargs)

    return factory
