import logging
from pathlib import Path

import pytest

from appwrap.config import (
    PATH_DISABLED,
    AppConfig,
    DocStyle,
    load_config,
    parse_config,
    split_version,
)
from appwrap.errors import (
    ConfigError,
    ConfigPathNotFoundError,
    DocumentSyntaxError,
    InvalidFormatError,
    MissingValueError,
)
from conftest import dummy_lines

MANDATORY_KEYS = [
    "AppBaseName",
    "AppFriendlyName",
    "AppId",
    "AppVersionRelease",
    "AppShortSummary",
    "AppLicenseId",
    "PublisherName",
    "FlatpakPlatformRuntime",
    "FlatpakPlatformSdk",
    "FlatpakPlatformVersion",
    "SetupMinWindowsVersion",
]


def test_dummy_configuration_values(config, project_dir):
    assert config.app_base_name == "HelloWorld"
    assert config.app_friendly_name == "Hello World"
    assert config.app_id == "net.example.helloworld"
    assert config.app_version == "5.4.3"
    assert config.package_release == "2"
    assert config.app_short_summary == "Test <application> only"
    assert config.app_description == ("Line1", "<Line2>", "", "Line3 has ${LINE3_VAR}")

    assert config.desktop_no_display is True
    assert config.desktop_terminal is False
    assert config.rpm_auto_req is True
    assert config.rpm_auto_prov is False

    assert config.flatpak_platform_version == "18.00"
    assert config.flatpak_finish_args[0] == "--socket=wayland"
    assert config.rpm_requires == ("rpm-requires1", "rpm-requires2")
    assert config.debian_recommends == ("deb-depends1", "deb-depends2")

    assert config.local_directory == str(project_dir)
    assert config.output_directory == str(project_dir / "Deploy")
    assert config.license_path == project_dir / "LICENSE"
    assert config.icon_files == tuple(
        str(project_dir / "Assets" / name)
        for name in ("Icon.32x32.png", "Icon.64x64.png", "Icon.ico", "Icon.svg")
    )


@pytest.mark.parametrize("key", MANDATORY_KEYS)
def test_mandatory_values_required(key, project_dir):
    with pytest.raises(MissingValueError, match=key):
        parse_config(dummy_lines(omit=key), base_directory=project_dir)


def test_optional_values_default(project_dir):
    lines = [
        "AppBaseName = HelloWorld",
        "AppFriendlyName = Hello World",
        "AppId = net.example.helloworld",
        "AppVersionRelease = 1.0.0",
        "AppShortSummary = Summary",
        "AppLicenseId = MIT",
        "PublisherName = Publisher",
        "FlatpakPlatformRuntime = org.freedesktop.Platform",
        "FlatpakPlatformSdk = org.freedesktop.Sdk",
        "FlatpakPlatformVersion = 23.08",
        "SetupMinWindowsVersion = 10",
    ]

    config = parse_config(lines, base_directory=project_dir)

    assert config.package_release == "1"
    assert config.license_path is None
    assert config.change_path is None

    assert config.publisher_copyright is None
    assert config.desktop_no_display is False
    assert config.icon_files == ()
    assert config.app_description == ()
    assert config.package_name == "HelloWorld"
    assert config.output_directory == str(project_dir)


def test_keys_are_case_insensitive(project_dir):
    lines = [line.replace("AppBaseName", "appbasename") for line in dummy_lines()]
    config = parse_config(lines, base_directory=project_dir)
    assert config.app_base_name == "HelloWorld"


def test_unknown_keys_are_ignored_with_warning(project_dir, caplog):
    with caplog.at_level(logging.WARNING):
        config = parse_config(dummy_lines(NotAKey="value"), base_directory=project_dir)

    assert config.app_base_name == "HelloWorld"
    assert "NotAKey" in caplog.text


@pytest.mark.parametrize(
    "key, value",
    [
        ("DesktopTerminal", "yes"),
        ("AppId", "nodots"),
        ("AppVersionRelease", "one.two"),
        ("AppBaseName", "Hello World"),
        ("PackageName", "Hello_World"),
        ("FlatpakFinishArgs", "socket=x11"),
        ("AppFriendlyName", "Bad*Name"),
        ("AppShortSummary", "Tab\there"),
    ],
)
def test_invalid_values_rejected(key, value, project_dir):
    with pytest.raises(InvalidFormatError):
        parse_config(dummy_lines(**{key: value}), base_directory=project_dir)


def test_disabled_paths(project_dir):
    config = parse_config(
        dummy_lines(DesktopFile="none", MetaFile="NONE", DotnetProjectPath="None"),
        base_directory=project_dir,
    )

    assert config.desktop_file == PATH_DISABLED
    assert config.desktop_disabled
    assert config.desktop_path is None
    assert config.meta_disabled
    assert config.publish_disabled


def test_strict_mode_asserts_paths(project_dir):
    with pytest.raises(ConfigPathNotFoundError, match="AppLicenseFile"):
        parse_config(
            dummy_lines(AppLicenseFile="MISSING"),
            base_directory=project_dir,
            strict=True,
        )


def test_windows_separators_in_paths(project_dir):
    config = parse_config(dummy_lines(AppLicenseFile="sub\\LICENSE"), base_directory=project_dir)
    assert config.license_path == project_dir / "sub" / "LICENSE"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1.2.3[4]", ("1.2.3", "4")),
        ("1.2.3", ("1.2.3", "1")),
        ("1.2", ("1.2", "1")),
        ("1.2.3-beta[2]", ("1.2.3-beta", "2")),
    ],
)
def test_split_version(value, expected):
    assert split_version(value) == expected


def test_split_version_rejects_garbage():
    with pytest.raises(InvalidFormatError):
        split_version("latest")


@pytest.mark.parametrize("style", [DocStyle.NO_COMMENTS, DocStyle.COMMENTS])
def test_render_round_trip(config, project_dir, style):
    text = config.render(style)
    again = parse_config(text.splitlines(), base_directory=project_dir)

    assert again.model_dump() == config.model_dump()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("\"'quoted'\"", "'quoted'"),
        ("'\"double\"'", '"double"'),
        ("'\"\"\"opens a block'", '"""opens a block'),
        ("It's \"fine\"", "It's \"fine\""),
        ("'a'b'", "a'b"),
    ],
)
def test_render_round_trip_keeps_quotes(raw, expected, project_dir):
    config = parse_config(dummy_lines(AppShortSummary=raw), base_directory=project_dir)
    assert config.app_short_summary == expected

    for style in (DocStyle.NO_COMMENTS, DocStyle.COMMENTS):
        again = parse_config(config.render(style).splitlines(), base_directory=project_dir)
        assert again.app_short_summary == expected


def test_multi_line_list_accepts_semicolons(project_dir):
    lines = dummy_lines(omit="RpmRequires") + ['RpmRequires = """', "    rpm1; rpm2", "    rpm3", '"""']
    config = parse_config(lines, base_directory=project_dir)

    assert config.rpm_requires == ("rpm1", "rpm2", "rpm3")


def test_render_uses_relative_paths(config):
    text = config.render(DocStyle.NO_COMMENTS)

    assert "AppLicenseFile = LICENSE\n" in text
    assert "OutputDirectory = Deploy\n" in text
    assert "DesktopNoDisplay = true\n" in text
    assert "    Assets/Icon.svg\n" in text


def test_reference_style_lists_every_key(config):
    text = config.render(DocStyle.REFERENCE)

    for field in AppConfig.model_fields.values():
        if field.alias:
            assert f"** {field.alias} **" in text


def test_example_configuration_is_valid(tmp_path):
    config = AppConfig.example(tmp_path)

    assert config.app_id == "net.example.helloworld"
    assert config.output_directory == str(tmp_path / "Deploy" / "OUT")

    again = parse_config(config.render().splitlines(), base_directory=tmp_path)
    assert again.model_dump() == config.model_dump()


def test_load_config_uses_file_directory(project_dir):
    path = project_dir / "app.appwrap.conf"
    path.write_text("\n".join(dummy_lines()), encoding="utf-8")

    config = load_config(path)
    assert Path(config.local_directory) == project_dir
    assert config.change_path == project_dir / "CHANGELOG"


def test_load_config_strict_by_default(project_dir):
    path = project_dir / "app.appwrap.conf"
    path.write_text("\n".join(dummy_lines(MetaFile="missing.xml")), encoding="utf-8")

    with pytest.raises(ConfigPathNotFoundError):
        load_config(path)


def test_load_config_rejects_non_utf8(project_dir):
    path = project_dir / "app.appwrap.conf"
    path.write_bytes("\n".join(dummy_lines()).encode("utf-8") + b"\n# Caf\xe9\n")

    with pytest.raises(DocumentSyntaxError, match="not UTF-8"):
        load_config(path)


def test_read_associated_file_errors(config, project_dir):
    assert config.read_associated_file(config.license_path) == "Test license text"
    assert config.read_associated_file(PATH_DISABLED) is None

    with pytest.raises(ConfigPathNotFoundError):
        config.read_associated_file(project_dir / "missing")

    binary = project_dir / "LICENSE.bin"
    binary.write_bytes(b"\xff\xfe\xfa")
    with pytest.raises(ConfigError, match="not UTF-8"):
        config.read_associated_file(binary)
