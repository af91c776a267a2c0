import pytest

from appwrap.document import load_document, read_document
from appwrap.errors import ConfigPathNotFoundError, DocumentSyntaxError


def test_reads_pairs_and_strips_quotes():
    doc = read_document(
        [
            "# comment",
            "// another comment",
            "",
            "Name = 'Hello World'",
            'Quoted = "value"',
            "Plain=value = with equals",
            "Empty =",
        ]
    )

    assert doc["name"] == "Hello World"
    assert doc["QUOTED"] == "value"
    assert doc["Plain"] == "value = with equals"
    assert doc["Empty"] == ""
    assert len(doc) == 4


def test_multi_line_value():
    doc = read_document(
        [
            'Text = """',
            "    First",
            "",
            "    Second",
            '"""',
            "Next = 1",
        ]
    )

    assert doc["Text"] == "First\n\nSecond"
    assert doc["Next"] == "1"


def test_multi_line_value_on_one_line():
    doc = read_document(['Text = """inline"""'])
    assert doc["Text"] == "inline"


def test_missing_multi_line_terminator():
    with pytest.raises(DocumentSyntaxError, match="No multi-line termination"):
        read_document(['Text = """', "never closed"])


@pytest.mark.parametrize("line", ["no equals here", "= value"])
def test_syntax_error_reports_line(line):
    with pytest.raises(DocumentSyntaxError, match="at line 2"):
        read_document(["Good = 1", line])


def test_repeated_key_is_an_error():
    with pytest.raises(DocumentSyntaxError, match="Repeated key"):
        read_document(["Key = 1", "KEY = 2"])


def test_load_document(tmp_path):
    path = tmp_path / "app.appwrap.conf"
    path.write_text("AppBaseName = HelloWorld\n", encoding="utf-8")

    doc = load_document(path)
    assert doc["AppBaseName"] == "HelloWorld"
    assert doc.source == path


def test_load_document_missing(tmp_path):
    with pytest.raises(ConfigPathNotFoundError):
        load_document(tmp_path / "missing.conf")
