import pytest

from appwrap.errors import ArchitectureError
from appwrap.kinds import PackageKind
from appwrap.runtime.arch import (
    Architecture,
    classify_architecture,
    describe_runtime,
    package_arch,
    resolve_architecture,
)


@pytest.mark.parametrize(
    "token, expected",
    [
        ("x64", Architecture.X64),
        ("X86_64", Architecture.X64),
        ("amd64", Architecture.X64),
        ("arm64", Architecture.ARM64),
        ("aarch64", Architecture.ARM64),
        ("arm_aarch64", Architecture.ARM64),
        ("armhf", Architecture.ARM),
        ("arm", Architecture.ARM),
        ("i686", Architecture.X86),
        ("x86", Architecture.X86),
    ],
)
def test_resolve_architecture_aliases(token, expected):
    assert resolve_architecture(token) is expected


def test_resolve_architecture_rejects_unknown():
    with pytest.raises(ArchitectureError):
        resolve_architecture("sparc")


def test_classify_architecture_never_raises():
    assert classify_architecture("linux-x64") == (Architecture.X64, False)
    assert classify_architecture("osx-arm64") == (Architecture.ARM64, False)
    assert classify_architecture("linux-musl-arm") == (Architecture.ARM, False)
    assert classify_architecture("freebsd-sparc") == (Architecture.UNKNOWN, True)


@pytest.mark.parametrize(
    "kind, arch, expected",
    [
        (PackageKind.APPIMAGE, Architecture.X64, "x86_64"),
        (PackageKind.APPIMAGE, Architecture.ARM, "armhf"),
        (PackageKind.FLATPAK, Architecture.ARM64, "aarch64"),
        (PackageKind.FLATPAK, Architecture.X86, "i386"),
        (PackageKind.RPM, Architecture.ARM, "armhfp"),
        (PackageKind.RPM, Architecture.X86, "i686"),
        (PackageKind.DEB, Architecture.X64, "amd64"),
        (PackageKind.DEB, Architecture.ARM64, "arm64"),
        (PackageKind.SETUP, Architecture.X64, "x64"),
        (PackageKind.ZIP, Architecture.ARM64, "arm64"),
    ],
)
def test_package_arch_per_kind(kind, arch, expected):
    assert package_arch(kind, arch) == expected


def test_package_arch_unknown_passes_through():
    for kind in PackageKind:
        assert package_arch(kind, Architecture.UNKNOWN) == "unknown"


def test_describe_runtime_platforms():
    linux = describe_runtime("Linux-X64")
    assert linux.runtime_id == "linux-x64"
    assert linux.is_linux and not linux.is_windows

    assert describe_runtime("rhel-arm64").is_linux
    assert describe_runtime("win-x86").is_windows
    assert describe_runtime("osx-arm64").is_osx

    odd = describe_runtime("freebsd-what")
    assert odd.uncertain
    assert odd.arch is Architecture.UNKNOWN
    assert odd.platform == "other"


def test_describe_runtime_defaults_to_host():
    runtime = describe_runtime()
    assert runtime.runtime_id
    assert str(runtime) == runtime.runtime_id


@pytest.mark.parametrize("kind", list(PackageKind))
def test_kind_targets(kind):
    if kind is PackageKind.ZIP:
        assert kind.targets_linux() and kind.targets_windows() and kind.targets_osx()
        assert not kind.targets_linux(exclusive=True)
        assert not kind.targets_windows(exclusive=True)
    elif kind is PackageKind.SETUP:
        assert kind.targets_windows(exclusive=True)
        assert not kind.targets_linux()
    else:
        assert kind.targets_linux(exclusive=True)
        assert not kind.targets_windows()


def test_kind_lookup_is_case_insensitive():
    assert PackageKind("AppImage") is PackageKind.APPIMAGE
    assert PackageKind("DEB") is PackageKind.DEB
    assert PackageKind.RPM.display_name == "Rpm"
