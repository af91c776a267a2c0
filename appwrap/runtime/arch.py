from __future__ import annotations

import platform
import sys
from enum import StrEnum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from appwrap.errors import ArchitectureError
from appwrap.kinds import PackageKind


class Architecture(StrEnum):
    X64 = "x64"
    ARM64 = "arm64"
    ARM = "arm"
    X86 = "x86"
    UNKNOWN = "unknown"


_ALIASES = {
    "x64": Architecture.X64,
    "x86_64": Architecture.X64,
    "amd64": Architecture.X64,
    "arm64": Architecture.ARM64,
    "aarch64": Architecture.ARM64,
    "arm_aarch64": Architecture.ARM64,
    "arm": Architecture.ARM,
    "armhf": Architecture.ARM,
    "x86": Architecture.X86,
    "i686": Architecture.X86,
    "i386": Architecture.X86,
}

_HOST_MACHINES = {
    "armv7l": Architecture.ARM,
    "armv8l": Architecture.ARM,
}

# (appimage, flatpak, rpm, deb, setup, zip)
_PACKAGE_ARCH = {
    Architecture.X64: ("x86_64", "x86_64", "x86_64", "amd64", "x64", "x64"),
    Architecture.ARM64: ("aarch64", "aarch64", "aarch64", "arm64", "arm64", "arm64"),
    Architecture.ARM: ("armhf", "arm", "armhfp", "armhf", "arm", "arm"),
    Architecture.X86: ("i686", "i386", "i686", "i386", "x86", "x86"),
}

_KIND_COLUMNS = {
    PackageKind.APPIMAGE: 0,
    PackageKind.FLATPAK: 1,
    PackageKind.RPM: 2,
    PackageKind.DEB: 3,
    PackageKind.SETUP: 4,
    PackageKind.ZIP: 5,
}

_LINUX_PREFIXES = ("linux", "rhel", "tizen", "alpine")


def resolve_architecture(identifier: str) -> Architecture:
    token = identifier.strip().lower()
    try:
        return _ALIASES[token]
    except KeyError:
        raise ArchitectureError(
            f"Unknown or unsupported architecture: {identifier}"
        ) from None


def classify_architecture(identifier: str) -> tuple[Architecture, bool]:
    """Best-effort classification of a runtime identifier such as ``linux-x64``.

    Never raises. Returns ``(Architecture.UNKNOWN, True)`` when the trailing
    segment is not a recognised architecture token.
    """
    token = identifier.strip().lower().rsplit("-", 1)[-1]
    arch = _ALIASES.get(token)
    if arch is None:
        return Architecture.UNKNOWN, True
    return arch, False


def package_arch(kind: PackageKind, arch: Architecture) -> str:
    if arch is Architecture.UNKNOWN:
        return arch.value
    return _PACKAGE_ARCH[arch][_KIND_COLUMNS[kind]]


def host_runtime_id() -> str:
    machine = platform.machine().strip().lower()
    arch = _HOST_MACHINES.get(machine) or _ALIASES.get(machine, Architecture.X64)

    if sys.platform.startswith("win"):
        prefix = "win"
    elif sys.platform == "darwin":
        prefix = "osx"
    else:
        prefix = "linux"

    return f"{prefix}-{arch.value}"


class RuntimeDescriptor(BaseModel):
    runtime_id: str = Field(
        ...,
        description="Runtime platform identifier, lower case (e.g. linux-x64)",
    )

    arch: Architecture = Field(
        ...,
        description="Architecture classified from the runtime identifier",
    )

    uncertain: bool = Field(
        default=False,
        description="True when the architecture could not be classified",
    )

    platform: Literal["linux", "windows", "osx", "other"] = Field(
        ...,
        description="Operating system family of the runtime",
    )

    @property
    def is_linux(self) -> bool:
        return self.platform == "linux"

    @property
    def is_windows(self) -> bool:
        return self.platform == "windows"

    @property
    def is_osx(self) -> bool:
        return self.platform == "osx"

    def __str__(self) -> str:
        return self.runtime_id

    class Config:
        frozen = True


def describe_runtime(identifier: Optional[str] = None) -> RuntimeDescriptor:
    runtime_id = (identifier or "").strip().lower() or host_runtime_id()
    arch, uncertain = classify_architecture(runtime_id)

    return RuntimeDescriptor(
        runtime_id=runtime_id,
        arch=arch,
        uncertain=uncertain,
        platform=_classify_platform(runtime_id),
    )


def _classify_platform(runtime_id: str) -> Literal["linux", "windows", "osx", "other"]:
    if runtime_id.startswith(_LINUX_PREFIXES):
        return "linux"
    if runtime_id.startswith("win"):
        return "windows"
    if runtime_id.startswith("osx"):
        return "osx"
    return "other"
