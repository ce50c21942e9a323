"""Core domain schemas shared across layers.

Usage::

    from src.schema import ContextVariable, parse_structured

    result = parse_structured(raw_llm_text)
    if not result.ok:
        logger.warning("Discarding malformed response: %s", result.reason)
"""

from __future__ import annotations

from src.schema.core import ContextVariable, StructuredResult, parse_structured

__all__ = [
    "ContextVariable",
    "StructuredResult",
    "parse_structured",
]
