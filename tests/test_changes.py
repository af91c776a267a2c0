from datetime import date

import pytest

from appwrap.errors import ConfigError, ConfigPathNotFoundError
from appwrap.meta.changes import ChangeLog

CHANGELOG = [
    "Some preamble text",
    "",
    "+ 1.2.3;2024-05-01",
    "- First change",
    "- Second change",
    "  continues here",
    "",
    "Unrelated text",
    "- Ignored change",
    "",
    "+ 1.2.2; Obsolete ;2023/12/25",
    "- Earlier <change>",
    "",
    "+ not a header",
    "++ 9.9.9;2020-01-01",
]


def test_parses_headers_and_changes():
    log = ChangeLog(CHANGELOG)
    items = log.items

    assert items[0].version == "1.2.3"
    assert items[0].date == date(2024, 5, 1)
    assert items[1].change == "First change"
    assert items[2].change == "Second change continues here"
    assert items[3].version == "1.2.2"
    assert items[3].date == date(2023, 12, 25)
    assert items[4].change == "Earlier <change>"
    assert len(items) == 5


def test_empty_changelog_is_falsy(tmp_path):
    assert not ChangeLog()
    assert not ChangeLog(["no releases here", "- orphan change"])
    assert not ChangeLog.from_file(None)


def test_from_file(tmp_path):
    path = tmp_path / "CHANGELOG"
    path.write_text("\n".join(CHANGELOG), encoding="utf-8")

    assert len(ChangeLog.from_file(path).items) == 5


def test_from_file_reports_unreadable_files(tmp_path):
    with pytest.raises(ConfigPathNotFoundError):
        ChangeLog.from_file(tmp_path / "missing")

    path = tmp_path / "CHANGELOG"
    path.write_bytes(b"+ 1.0.0;2024-05-01\n- caf\xe9\n")
    with pytest.raises(ConfigError, match="not UTF-8"):
        ChangeLog.from_file(path)


def test_to_appstream_escapes_changes():
    xml = ChangeLog(CHANGELOG).to_appstream()

    assert xml.startswith('<release version="1.2.3" date="2024-05-01"><description><ul>')
    assert "<li>Second change continues here</li>" in xml
    assert "<li>Earlier &lt;change&gt;</li>" in xml
    assert xml.count("<release ") == 2
    assert xml.endswith("</ul></description></release>")


def test_to_text_normalises_headers():
    text = str(ChangeLog(CHANGELOG))

    assert text.splitlines() == [
        "+ 1.2.3;2024-05-01",
        "- First change",
        "- Second change continues here",
        "",
        "+ 1.2.2;2023-12-25",
        "- Earlier <change>",
    ]
