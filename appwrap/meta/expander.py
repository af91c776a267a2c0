from __future__ import annotations

import logging
import re
from typing import Iterable, Optional
from xml.sax.saxutils import escape

from appwrap.meta.description import description_to_xml
from appwrap.meta.macros import MacroId, MacroTable

__all__ = ["MacroExpander", "description_to_xml"]

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"\$\{([^${}\s]*)\}")


class MacroExpander:
    def __init__(self, table: MacroTable, warnings: Optional[list[str]] = None):
        self.table = table
        self.warnings = warnings if warnings is not None else []

    def expand(
        self,
        template: Optional[str],
        escape_xml: bool = False,
        item_name: Optional[str] = None,
    ) -> Optional[str]:
        """Substitute ``${NAME}`` tokens in a single left-to-right pass.

        Inserted values are never scanned again, so macro-looking text inside
        a value survives verbatim. Unknown names are left in place and
        reported once to the warning list.
        """
        if not template or "${" not in template:
            return template

        def replace(match: re.Match) -> str:
            name = match.group(1)
            value = self.table.lookup(name)

            if value is None:
                self._warn(f"Invalid macro ${{{name}}} in {item_name or 'content'}")
                return match.group(0)

            if escape_xml and not MacroId(name).contains_xml:
                return escape(value)
            return value

        return _TOKEN.sub(replace, template)

    def expand_all(
        self,
        templates: Iterable[str],
        escape_xml: bool = False,
        item_name: Optional[str] = None,
    ) -> list[str]:
        return [self.expand(item, escape_xml, item_name) for item in templates]

    def describe(self, verbose: bool = False, include_xml: bool = False) -> str:
        lines: list[str] = []

        for macro in sorted(self.table, key=lambda item: item.value):
            if macro.contains_xml and not include_xml:
                continue

            value = self.table[macro]
            if verbose:
                if lines:
                    lines.append("")
                lines.append(macro.token)
                lines.append(macro.hint)
                lines.append(f"Example: {macro.token} = {value}")
            else:
                lines.append(f"{macro.token} = {value}")

        return "\n".join(lines)

    def _warn(self, message: str) -> None:
        if message not in self.warnings:
            logger.warning(message)
            self.warnings.append(message)
