"""Output formatter registry — one entry per public format token.

WHY: The CLI and the query boundary need a single lookup from the
format token a client sends ("jmi1", "jmi2", "jmi3") to the code that
produces it. A central dict makes the set of valid tokens explicit.

HOW: FORMATTERS maps format tokens to formatter *classes* (not
instances). Callers instantiate as needed: ``FORMATTERS["jmi3"]()``.

RULES:
- Keys are exactly the tokens in config.VALID_FORMATS
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from jmi_converter.formatters.jmi import JMI1Formatter, JMI2Formatter, JMI3Formatter

if TYPE_CHECKING:
    from jmi_converter.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "jmi1": JMI1Formatter,
    "jmi2": JMI2Formatter,
    "jmi3": JMI3Formatter,
}
