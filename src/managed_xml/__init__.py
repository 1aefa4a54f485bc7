"""Managed XML.

A managed-object facade over lxml trees: navigate, mutate, query and
serialize XML through validated node handles whose ownership is explicit.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_string(), parse_bytes()
- Level 2: Configured factory - DocumentFactory class
- Level 3: Tree objects - Document, Node, XPathResult
"""

__version__ = "0.1.0"
__author__ = "Managed XML Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Configured factory
from .api import (
    DocumentFactory,
    create_document,
    create_node,
    parse,
    parse_bytes,
    parse_string,
)

# Configuration classes for advanced usage
from .shared.config import FacadeConfig, ParsingConfig, SerializationConfig, XPathConfig

# Error hierarchy
from .shared.errors import (
    InvalidNodeError,
    ManagedXMLError,
    NamespaceError,
    ParseError,
    SerializationError,
    XPathError,
)

# Core tree objects
from .tree import Document, NamespaceRegistry, Node, NodeType, XPathResult

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "parse",
    "parse_string",
    "parse_bytes",
    "create_document",
    "create_node",

    # Level 2: Configured factory
    "DocumentFactory",

    # Tree objects
    "Document",
    "NamespaceRegistry",
    "Node",
    "NodeType",
    "XPathResult",

    # Configuration classes
    "FacadeConfig",
    "ParsingConfig",
    "SerializationConfig",
    "XPathConfig",

    # Errors
    "InvalidNodeError",
    "ManagedXMLError",
    "NamespaceError",
    "ParseError",
    "SerializationError",
    "XPathError",
]
