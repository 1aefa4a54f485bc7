"""Convenience API: one-shot functions and a reusable document factory."""

from .parser import (
    DocumentFactory,
    create_document,
    create_node,
    parse,
    parse_bytes,
    parse_string,
)

__all__ = [
    "DocumentFactory",
    "create_document",
    "create_node",
    "parse",
    "parse_bytes",
    "parse_string",
]
