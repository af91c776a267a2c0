from typing import Iterable
from xml.sax.saxutils import escape

_BULLETS = ("* ", "+ ", "- ")


def description_to_xml(lines: Iterable[str]) -> str:
    """Convert description lines to AppStream ``<p>`` and ``<ul>`` markup.

    Blank lines close the current paragraph or list. Lines starting with
    ``- ``, ``* `` or ``+ `` become list items. Text is escaped, so the result
    is safe to insert as XML and must not be expanded again.
    """
    parts: list[str] = []
    in_para = False
    in_list = False

    for item in lines:
        line = item.strip()

        if not line:
            if in_para:
                parts.append("</p>\n\n")
            elif in_list:
                parts.append("</ul>\n\n")
            in_para = False
            in_list = False

        elif line.startswith(_BULLETS):
            line = line[1:].lstrip()

            if in_para:
                parts.append("</p>\n\n")
                in_para = False

            if not in_list:
                parts.append("<ul>\n")

            parts.append(f"<li>{escape(line)}</li>\n")
            in_list = True

        else:
            if in_list:
                parts.append("</ul>\n\n")
                in_list = False

            if in_para:
                parts.append(f"\n{escape(line)}")
            else:
                parts.append(f"<p>{escape(line)}")

            in_para = True

    if parts:
        if in_para:
            parts.append("</p>")
        elif in_list:
            parts.append("</ul>")

    return "".join(parts)
