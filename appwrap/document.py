from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Iterable, Iterator, Optional

from appwrap.errors import ConfigPathNotFoundError, DocumentSyntaxError

MULTI_QUOTE = '"""'


class KeyValueDocument(Mapping):
    """Parsed ``Name = Value`` document with case-insensitive keys."""

    def __init__(
        self,
        values: dict[str, str],
        *,
        source: Optional[Path] = None,
        text: str = "",
    ):
        self._values = {key.lower(): (key, value) for key, value in values.items()}
        self.source = source
        self.text = text

    def __getitem__(self, key: str) -> str:
        return self._values[key.lower()][1]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self._values.values())

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"KeyValueDocument(source={self.source!r}, keys={len(self)})"


def read_document(
    lines: Iterable[str],
    *,
    source: Optional[Path] = None,
) -> KeyValueDocument:
    content = [line.rstrip("\r\n") for line in lines]
    values: dict[str, str] = {}
    seen: set[str] = set()

    index = 0
    while index < len(content):
        start = index
        line = content[index].strip()
        index += 1

        if not line or line.startswith("#") or line.startswith("//"):
            continue

        pos = line.find("=")
        if pos <= 0:
            raise DocumentSyntaxError(_location("Syntax error", start, source))

        name = line[:pos].strip()
        value = line[pos + 1 :].strip()

        if value.startswith(MULTI_QUOTE):
            value, index = _read_multi_line(
                content, value[len(MULTI_QUOTE) :], index, start, source
            )
        elif len(value) > 1 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]

        if name.lower() in seen:
            raise DocumentSyntaxError(_location(f"Repeated key {name}", start, source))

        seen.add(name.lower())
        values[name] = value

    return KeyValueDocument(values, source=source, text="\n".join(content).strip())


def load_document(path: Path) -> KeyValueDocument:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigPathNotFoundError(f"Configuration file not found: {path}") from exc
    except OSError as exc:
        raise DocumentSyntaxError(f"Failed to read configuration file: {path}") from exc
    except UnicodeDecodeError as exc:
        raise DocumentSyntaxError(f"Configuration file is not UTF-8 text: {path}") from exc

    return read_document(text.splitlines(), source=path)


def _read_multi_line(
    content: list[str],
    remainder: str,
    index: int,
    start: int,
    source: Optional[Path],
) -> tuple[str, int]:
    parts: list[str] = []
    line = remainder

    while True:
        line = line.strip()
        end = line.find(MULTI_QUOTE)

        if end > -1:
            parts.append(line[:end])
            return "\n".join(parts).strip(), index

        parts.append(line)

        if index >= len(content):
            raise DocumentSyntaxError(
                _location("No multi-line termination", start, source)
            )

        line = content[index]
        index += 1


def _location(message: str, index: int, source: Optional[Path]) -> str:
    if source is not None:
        return f"{message} in {source.name} at line {index + 1}"
    return f"{message} at line {index + 1}"
