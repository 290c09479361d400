"""JMI Converter — branch-scoped element hierarchy and JSON Model Interchange.

WHY: Model elements are stored flat, one record per element, each
pointing at its parent. Clients want them as a flat list, as a map keyed
by id, or as a nested tree, and they often ask for only part of a
branch. This package rebuilds the hierarchy from whatever subset it is
given and produces all three representations without losing a record
or a cross-reference.

HOW: Four stages: validate records (core.element), index the working
set (core.hierarchy), convert (core.conversions), serialize
(formatters). The boundary package applies query rules on top; the CLI
runs the same path against files.

RULES:
- Every formatter consumes the same validated Element records
- contains is always recomputed from parent, never trusted
- The core is pure and stateless; safe to call from many threads
"""

__version__ = "0.1.0"
