from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Optional
from xml.sax.saxutils import escape

from appwrap.errors import ConfigError, ConfigPathNotFoundError

HEADER_PREFIX = "+"
HEADER_SEPARATOR = ";"
CHANGE_PREFIX = "-"
MAX_VERSION_LENGTH = 25

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%d %b %Y", "%d %B %Y", "%b %d %Y", "%B %d %Y")


@dataclass(frozen=True)
class ChangeItem:
    version: Optional[str] = None
    date: Optional[date] = None
    change: Optional[str] = None

    @property
    def is_header(self) -> bool:
        return self.version is not None


class ChangeLog:
    """Release history read from a plain text changelog.

    A release starts with ``+ VERSION;[...;]DATE`` and is followed by
    ``- change`` lines. A change may continue over following lines until a
    blank line. Any other text breaks the sequence and is ignored until the
    next release header.
    """

    def __init__(self, lines: Iterable[str] = ()):
        items: list[ChangeItem] = []
        header: Optional[ChangeItem] = None
        change: Optional[str] = None

        for raw in lines:
            line = raw.strip()
            parsed = _parse_header(line)

            if parsed is not None:
                change = _append_change(items, change)
                header = parsed
                items.append(header)
                continue

            if header is not None:
                if not line:
                    change = _append_change(items, change)
                    continue

                if line.startswith(CHANGE_PREFIX) and not line.startswith(CHANGE_PREFIX * 2):
                    change = _append_change(items, change)
                    change = line.lstrip(CHANGE_PREFIX + " ")
                    continue

                if change is not None:
                    change += " " + line
                    continue

                header = None

            change = None

        _append_change(items, change)
        self.items: tuple[ChangeItem, ...] = tuple(items)

    @classmethod
    def from_file(cls, path: Optional[Path]) -> "ChangeLog":
        if path is None:
            return cls()

        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigPathNotFoundError(f"Failed to read change file: {path}") from exc
        except UnicodeDecodeError as exc:
            raise ConfigError(f"Change file is not UTF-8 text: {path}") from exc
        return cls(text.splitlines())

    def __bool__(self) -> bool:
        return bool(self.items)

    def to_appstream(self) -> str:
        parts: list[str] = []
        started = False

        for item in self.items:
            if item.is_header:
                if started:
                    parts.append("\n</ul></description></release>\n\n")
                started = True
                parts.append(
                    f'<release version="{escape(item.version)}" '
                    f'date="{item.date.isoformat()}"><description><ul>'
                )
            elif started:
                parts.append(f"\n<li>{escape(item.change)}</li>")

        if started:
            parts.append("\n</ul></description></release>")

        return "".join(parts)

    def to_text(self) -> str:
        parts: list[str] = []
        started = False

        for item in self.items:
            if item.is_header:
                if started:
                    parts.append("\n\n")
                started = True
                parts.append(
                    f"{HEADER_PREFIX} {item.version}{HEADER_SEPARATOR}{item.date.isoformat()}"
                )
            elif started:
                parts.append(f"\n{CHANGE_PREFIX} {item.change}")

        return "".join(parts)

    def __str__(self) -> str:
        return self.to_text()


def _append_change(items: list[ChangeItem], change: Optional[str]) -> None:
    if change:
        items.append(ChangeItem(change=change))
    return None


def _parse_header(line: str) -> Optional[ChangeItem]:
    if not line.startswith(HEADER_PREFIX) or line.startswith(HEADER_PREFIX * 2):
        return None

    fields = [part.strip() for part in line.split(HEADER_SEPARATOR)]
    fields = [part for part in fields if part]
    if len(fields) < 2:
        return None

    parsed = _parse_date(fields[-1])
    if parsed is None:
        return None

    version = fields[0].lstrip(HEADER_PREFIX + " ")
    if not version or len(version) > MAX_VERSION_LENGTH:
        return None

    return ChangeItem(version=version, date=parsed)


def _parse_date(value: str) -> Optional[date]:
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None
