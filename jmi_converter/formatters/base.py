"""Formatter interface and the serialized-output container.

WHY: The query boundary and the CLI both turn a working set into a
response body for a requested format token. This base class gives them
one interface so neither needs to know which JMI level a token maps to
or how JSON text is laid out.

HOW: BaseFormatter is an ABC with a ``name``, a ``level`` and a
``format()`` method. FormatterOutput is a plain dataclass that bundles a
file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` (human-readable), ``level`` and ``format()``
- ``suffix`` starts with a hyphen, e.g. ``"-jmi3.json"``
- Callers prepend the source filename stem to suffix
- Errors from conversion propagate unchanged (typed JMIError subclasses)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from jmi_converter import config
from jmi_converter.core.element import Element


@dataclass
class FormatterOutput:
    """One serialized representation.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``"-jmi2.json"`` → ``"elements-jmi2.json"``.
        content: The serialized text.
        media_type: MIME type for the content, e.g. ``"application/json"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Interface every JMI output formatter implements.

    To add a new output format:
    1. Create a new formatter class in formatters/
    2. Subclass BaseFormatter
    3. Implement name, level and format()
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'JMI type 3 (nested tree)'."""

    @property
    @abstractmethod
    def level(self) -> int:
        """JMI representation level produced by this formatter."""

    @abstractmethod
    def format(
        self,
        elements: Sequence[Element],
        key_field: str = config.DEFAULT_KEY_FIELD,
        minified: bool = False,
    ) -> FormatterOutput:
        """Convert a JMI1 working set and serialize the result.

        Args:
            elements: The working set, in JMI1 order.
            key_field: Record field used as map key for JMI2/JMI3.
            minified: Emit compact JSON instead of indented JSON.

        Returns:
            A FormatterOutput with the serialized representation.
        """
