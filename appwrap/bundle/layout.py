from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class BuildLayout:
    root: Path
    app_id: str
    app_bin: Path
    install_bin: str
    output_directory: Path
    output_name: str
    linux: bool = True
    meta_suffix: str = ".metainfo.xml"

    @property
    def build_root(self) -> Path:
        return self.root / "AppDir"

    @property
    def usr_bin(self) -> Optional[Path]:
        return self.build_root / "usr" / "bin" if self.linux else None

    @property
    def usr_share(self) -> Optional[Path]:
        return self.build_root / "usr" / "share" if self.linux else None

    @property
    def share_meta(self) -> Optional[Path]:
        return self.usr_share / "metainfo" if self.linux else None

    @property
    def share_applications(self) -> Optional[Path]:
        return self.usr_share / "applications" if self.linux else None

    @property
    def share_icons(self) -> Optional[Path]:
        return self.usr_share / "icons" if self.linux else None

    @property
    def desktop_path(self) -> Optional[Path]:
        if self.share_applications is None:
            return None
        return self.share_applications / f"{self.app_id}.desktop"

    @property
    def meta_path(self) -> Optional[Path]:
        if self.share_meta is None:
            return None
        return self.share_meta / f"{self.app_id}{self.meta_suffix}"

    @property
    def output_path(self) -> Path:
        return self.output_directory / self.output_name

    def all_dirs(self) -> list[Path]:
        dirs = [
            self.root,
            self.build_root,
            self.usr_bin,
            self.usr_share,
            self.share_icons,
            self.share_applications,
            self.share_meta,
            self.app_bin,
        ]

        unique: list[Path] = []
        seen: set[Path] = set()
        for directory in dirs:
            if directory is None or directory in seen:
                continue
            seen.add(directory)
            unique.append(directory)
        return unique
