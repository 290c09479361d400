"""JSON formatters for the three JMI representation levels.

WHY: Every JMI level is delivered as a JSON document. Clients choose
indented output for reading and minified output for bandwidth, but the
structure must be identical either way.

HOW: JMIFormatter converts the JMI1 working set to its level with
core.conversions.convert(), turns the result into plain lists/dicts
with to_jsonable(), and dumps it. The three concrete classes only fix
the level and the display name.

RULES:
- Indent is config.JSON_INDENT spaces unless minified
- Minified output uses compact separators (no spaces)
- Non-ASCII text is written as-is (ensure_ascii=False)
- Output suffix: "-jmi{level}.json"
- Media type: "application/json"
"""

from __future__ import annotations

import json
from typing import Sequence

from jmi_converter import config
from jmi_converter.core.conversions import convert, to_jsonable
from jmi_converter.core.element import Element
from jmi_converter.formatters.base import BaseFormatter, FormatterOutput


def dump_json(data: object, minified: bool = False) -> str:
    """Serialize plain data the way every JMI response is serialized."""
    if minified:
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    return json.dumps(data, ensure_ascii=False, indent=config.JSON_INDENT)


class JMIFormatter(BaseFormatter):
    """Shared conversion and serialization for one JMI level."""

    _level = 1
    _name = ""

    @property
    def name(self) -> str:
        return self._name

    @property
    def level(self) -> int:
        return self._level

    def format(
        self,
        elements: Sequence[Element],
        key_field: str = config.DEFAULT_KEY_FIELD,
        minified: bool = False,
    ) -> FormatterOutput:
        representation = convert(1, self._level, elements, key_field)
        content = dump_json(to_jsonable(self._level, representation), minified)
        return FormatterOutput(
            suffix="-jmi{}.json".format(self._level),
            content=content,
            media_type="application/json",
        )


class JMI1Formatter(JMIFormatter):
    """Flat list, in working-set order."""

    _level = 1
    _name = "JMI type 1 (flat list)"


class JMI2Formatter(JMIFormatter):
    """Object keyed by the key field."""

    _level = 2
    _name = "JMI type 2 (keyed map)"


class JMI3Formatter(JMIFormatter):
    """Object of working-set roots with nested ``contains``."""

    _level = 3
    _name = "JMI type 3 (nested tree)"
