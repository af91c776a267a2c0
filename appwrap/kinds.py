from enum import StrEnum


class PackageKind(StrEnum):
    APPIMAGE = "appimage"
    FLATPAK = "flatpak"
    RPM = "rpm"
    DEB = "deb"
    SETUP = "setup"
    ZIP = "zip"

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def file_ext(self) -> str:
        return _FILE_EXTENSIONS[self]

    def targets_linux(self, exclusive: bool = False) -> bool:
        if self is PackageKind.ZIP:
            return not exclusive
        return self in _LINUX_KINDS

    def targets_windows(self, exclusive: bool = False) -> bool:
        if self is PackageKind.ZIP:
            return not exclusive
        return self is PackageKind.SETUP

    def targets_osx(self, exclusive: bool = False) -> bool:
        return self is PackageKind.ZIP and not exclusive


_LINUX_KINDS = frozenset(
    {
        PackageKind.APPIMAGE,
        PackageKind.FLATPAK,
        PackageKind.RPM,
        PackageKind.DEB,
    }
)

_DISPLAY_NAMES = {
    PackageKind.APPIMAGE: "AppImage",
    PackageKind.FLATPAK: "Flatpak",
    PackageKind.RPM: "Rpm",
    PackageKind.DEB: "Deb",
    PackageKind.SETUP: "Setup",
    PackageKind.ZIP: "Zip",
}

_FILE_EXTENSIONS = {
    PackageKind.APPIMAGE: ".AppImage",
    PackageKind.FLATPAK: ".flatpak",
    PackageKind.RPM: ".rpm",
    PackageKind.DEB: ".deb",
    PackageKind.SETUP: ".exe",
    PackageKind.ZIP: ".zip",
}
