import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from appwrap.errors import ConstructionError
from appwrap.runtime.arch import Architecture, host_runtime_id, classify_architecture

logger = logging.getLogger(__name__)

DEFAULT_ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets"

_APPIMAGE_ARCH = {
    Architecture.X64: "x86_64",
    Architecture.ARM64: "aarch64",
    Architecture.ARM: "armhf",
    Architecture.X86: "i686",
}


@dataclass(frozen=True)
class AssetLocator:
    """Locates built-in icons and packaging tools.

    Constructed explicitly and handed to builders so that tests can point it
    at a temporary directory and a controlled tool search path.
    """

    root: Path = DEFAULT_ASSETS_DIR
    search_path: Optional[str] = None
    host_runtime: str = field(default_factory=host_runtime_id)

    @property
    def host_arch(self) -> Architecture:
        return classify_architecture(self.host_runtime)[0]

    @property
    def host_is_linux(self) -> bool:
        return self.host_runtime.startswith("linux")

    def default_icons(self, terminal: bool = False) -> tuple[Path, ...]:
        name = "terminal" if terminal else "generic"
        candidates = (self.root / f"{name}.svg", self.root / f"{name}.ico")
        return tuple(path for path in candidates if path.is_file())

    @property
    def terminal_icon(self) -> Path:
        return self.root / "terminal.ico"

    def find_tool(self, name: str) -> Optional[Path]:
        found = shutil.which(name, path=self.search_path)
        if found is None:
            logger.debug("Tool not found: %s", name)
            return None
        return Path(found)

    def appimage_tool(self) -> Optional[Path]:
        if not self.host_is_linux:
            return None

        token = _APPIMAGE_ARCH.get(self.host_arch)
        if token is not None:
            bundled = self.root / f"appimagetool-{token}.AppImage"
            if bundled.is_file():
                return bundled

        return self.find_tool("appimagetool")

    def appimage_runtime(self, path: Path, arch: Architecture) -> Path:
        if not path.is_dir():
            return path

        token = _APPIMAGE_ARCH.get(arch)
        if token is None:
            raise ConstructionError(
                f"No AppImage runtime available for architecture: {arch}"
            )
        return path / f"runtime-{token}"
