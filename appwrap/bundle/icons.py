from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Mapping, Optional, Sequence

from appwrap.errors import ConstructionError

STANDARD_ICON_SIZES = (16, 24, 32, 48, 64, 96, 128, 256, 512)


@dataclass(frozen=True)
class IconSet:
    paths: Mapping[Path, Path] = field(default_factory=dict)
    primary: Optional[Path] = None

    def __iter__(self) -> Iterator[Path]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def __contains__(self, source: object) -> bool:
        return source in self.paths

    def items(self):
        return self.paths.items()


def standard_png_size(path: Path) -> int:
    """Return the size encoded in ``name.32.png`` or ``name.32x32.png``.

    Non-PNG files give 0. A PNG without a standard size in its name is an
    error, since it cannot be placed in the hicolor theme.
    """
    path = Path(path)
    if path.suffix.lower() != ".png":
        return 0

    inner = Path(path.stem).suffix.lstrip(".")
    token = inner.lower().split("x", 1)[0]

    if token.isdigit() and int(token) in STANDARD_ICON_SIZES:
        return int(token)

    sizes = ", ".join(str(size) for size in STANDARD_ICON_SIZES)
    raise ConstructionError(
        f"Icon {path.name} must be of form 'name.size.png', where size = {sizes} only"
    )


def select_primary(sources: Iterable[Path], *, windows: bool) -> Optional[Path]:
    largest = 0
    result: Optional[Path] = None

    for source in sources:
        ext = source.suffix.lower()

        if windows:
            if ext == ".ico":
                return source
            continue

        if ext == ".svg":
            return source

        size = standard_png_size(source)
        if size > largest:
            largest = size
            result = source

    return result


def resolve_icons(
    sources: Sequence[Path],
    *,
    app_id: str,
    share_icons: Optional[Path],
    windows: bool,
    defaults: Sequence[Path] = (),
) -> IconSet:
    candidates = list(sources) or list(defaults)
    paths: dict[Path, Path] = {}

    if share_icons is not None:
        for source in candidates:
            dest = _share_path(source, share_icons, app_id)
            if dest is not None and source not in paths:
                paths[source] = dest

    primary = select_primary(sources, windows=windows)
    if primary is None:
        primary = select_primary(defaults, windows=windows)

    return IconSet(paths=paths, primary=primary)


def _share_path(source: Path, share_icons: Path, app_id: str) -> Optional[Path]:
    hicolor = share_icons / "hicolor"

    if source.suffix.lower() == ".svg":
        return hicolor / "scalable" / "apps" / f"{app_id}.svg"

    size = standard_png_size(source)
    if size > 0:
        return hicolor / f"{size}x{size}" / "apps" / f"{app_id}.png"

    return None
