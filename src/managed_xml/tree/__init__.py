"""Managed tree layer.

Key Components:
    Document: Owner of one lxml tree and its namespace table
    Node: Validated handle onto an element, attribute, text slot or leaf
    Fragment: Standalone subtree owned by a detached node
    NamespaceRegistry: Prefix to URI table used by XPath
    XPathResult: Matches of one XPath evaluation
"""

from .document import Document
from .namespaces import NamespaceRegistry
from .node import Node, NodeType
from .ownership import Fragment, TreeOwner
from .xpath import XPathResult

__all__ = [
    "Document",
    "Fragment",
    "NamespaceRegistry",
    "Node",
    "NodeType",
    "TreeOwner",
    "XPathResult",
]
