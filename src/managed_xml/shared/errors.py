"""Exception hierarchy for the managed XML facade.

Lookups that can legitimately miss (a child by name, an attribute, the first
XPath match) return ``None`` or an empty collection instead of raising. The
exceptions below are reserved for real failures.
"""

from typing import List, Optional

from .result import DiagnosticEntry


class ManagedXMLError(Exception):
    """Base exception for all facade errors."""


class ParseError(ManagedXMLError):
    """Raised when the native engine rejects malformed input."""

    def __init__(
        self,
        message: str,
        diagnostics: Optional[List[DiagnosticEntry]] = None
    ) -> None:
        super().__init__(message)
        self.diagnostics = diagnostics or []

    @property
    def position(self) -> Optional[dict]:
        """Position of the first reported problem, if the engine gave one."""
        for entry in self.diagnostics:
            if entry.position:
                return entry.position
        return None


class SerializationError(ManagedXMLError):
    """Raised when serializing a torn-down or otherwise unusable tree."""


class XPathError(ManagedXMLError):
    """Raised for syntactically invalid or unevaluable XPath expressions."""

    def __init__(
        self,
        message: str,
        expression: Optional[str] = None,
        diagnostics: Optional[List[DiagnosticEntry]] = None
    ) -> None:
        super().__init__(message)
        self.expression = expression
        self.diagnostics = diagnostics or []


class NamespaceError(ManagedXMLError):
    """Raised for invalid namespace bindings or out-of-scope namespaces."""


class InvalidNodeError(ManagedXMLError):
    """Raised when a handle's backing reference no longer resolves.

    This signals a programming error (using a node after its document was
    closed, after it was removed, or after its fragment was released).
    """
