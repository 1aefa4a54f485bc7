"""Diagnostic records for engine errors.

The native engine reports problems as a log of entries; these are mapped to
``DiagnosticEntry`` objects and attached to ``ParseError`` and ``XPathError``.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterable, List, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()
    CRITICAL = auto()


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert the entry to a plain dictionary."""
        return {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
            "position": self.position,
            "details": self.details,
            "correlation_id": self.correlation_id,
        }


# lxml/libxml2 error levels: 1 warning, 2 error, 3 fatal
_ENGINE_LEVELS = {
    1: DiagnosticSeverity.WARNING,
    2: DiagnosticSeverity.ERROR,
    3: DiagnosticSeverity.CRITICAL,
}


def diagnostics_from_error_log(
    error_log: Iterable[Any],
    component: str,
    correlation_id: Optional[str] = None
) -> List[DiagnosticEntry]:
    """Convert an lxml error log into diagnostic entries.

    Args:
        error_log: Iterable of lxml ``_LogEntry`` objects
        component: Component name recorded on every entry
        correlation_id: Optional correlation ID for request tracking

    Returns:
        List of DiagnosticEntry, in the order the engine reported them
    """
    entries = []
    for log_entry in error_log:
        message = (getattr(log_entry, "message", "") or "").strip()
        if not message:
            continue
        position = None
        line = getattr(log_entry, "line", 0)
        if line:
            position = {"line": line, "column": getattr(log_entry, "column", 0)}
        entries.append(
            DiagnosticEntry(
                severity=_ENGINE_LEVELS.get(
                    getattr(log_entry, "level", 2), DiagnosticSeverity.ERROR
                ),
                message=message,
                component=component,
                position=position,
                details={
                    "domain": getattr(log_entry, "domain_name", None),
                    "type": getattr(log_entry, "type_name", None),
                },
                correlation_id=correlation_id,
            )
        )
    return entries
