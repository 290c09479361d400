"""Core identifier, record, hierarchy and conversion modules.

WHY: The core package holds the stable heart of the converter: the
element record, the hierarchy index built from it, and the JMI
conversions. Formatters, the query boundary and the CLI all consume
these and must not duplicate their rules.

HOW: ids.py parses composite identifiers, element.py validates records,
hierarchy.py indexes a working set, conversions.py produces JMI1/2/3,
resolver.py fixes the cross-reference contract, errors.py defines the
error taxonomy.

RULES:
- No I/O and no shared state anywhere in core
- Records are validated once (Element.from_dict) and never mutated
- Conversion logic is format-agnostic; JSON text is the formatters' job
"""
