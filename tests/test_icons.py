from pathlib import Path

import pytest

from appwrap.bundle.icons import resolve_icons, select_primary, standard_png_size
from appwrap.errors import ConstructionError

SHARE = Path("/build/AppDir/usr/share/icons")
SOURCES = [
    Path("Assets/Icon.32x32.png"),
    Path("Assets/Icon.64.png"),
    Path("Assets/Icon.ico"),
    Path("Assets/Icon.svg"),
]


@pytest.mark.parametrize(
    "name, size",
    [
        ("Icon.32x32.png", 32),
        ("Icon.256.png", 256),
        ("Icon.48X48.PNG", 48),
        ("Icon.svg", 0),
        ("Icon.ico", 0),
    ],
)
def test_standard_png_size(name, size):
    assert standard_png_size(Path(name)) == size


@pytest.mark.parametrize("name", ["Icon.png", "Icon.33x33.png", "Icon.large.png"])
def test_non_standard_png_rejected(name):
    with pytest.raises(ConstructionError):
        standard_png_size(Path(name))


def test_linux_share_paths():
    icons = resolve_icons(SOURCES, app_id="net.example.app", share_icons=SHARE, windows=False)

    assert dict(icons.items()) == {
        SOURCES[0]: SHARE / "hicolor" / "32x32" / "apps" / "net.example.app.png",
        SOURCES[1]: SHARE / "hicolor" / "64x64" / "apps" / "net.example.app.png",
        SOURCES[3]: SHARE / "hicolor" / "scalable" / "apps" / "net.example.app.svg",
    }
    assert Path("Assets/Icon.ico") not in icons
    assert icons.primary == SOURCES[3]


def test_primary_prefers_svg_then_largest_png():
    pngs = [SOURCES[0], SOURCES[1]]
    assert select_primary(pngs, windows=False) == SOURCES[1]
    assert select_primary(SOURCES, windows=False) == SOURCES[3]
    assert select_primary([SOURCES[2]], windows=False) is None


def test_windows_primary_is_ico():
    icons = resolve_icons(SOURCES, app_id="net.example.app", share_icons=None, windows=True)

    assert len(icons) == 0
    assert icons.primary == SOURCES[2]


def test_defaults_used_when_none_configured():
    defaults = (Path("/assets/generic.svg"), Path("/assets/generic.ico"))

    linux = resolve_icons([], app_id="a.b", share_icons=SHARE, windows=False, defaults=defaults)
    assert linux.primary == defaults[0]
    assert list(linux) == [defaults[0]]

    windows = resolve_icons([], app_id="a.b", share_icons=None, windows=True, defaults=defaults)
    assert windows.primary == defaults[1]


def test_default_primary_when_sources_lack_usable_type():
    defaults = (Path("/assets/generic.svg"), Path("/assets/generic.ico"))
    icons = resolve_icons(
        [Path("Icon.svg")], app_id="a.b", share_icons=None, windows=True, defaults=defaults
    )
    assert icons.primary == defaults[1]
