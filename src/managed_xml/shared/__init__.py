"""Shared utilities for the managed XML facade.

This module provides the configuration objects, exception hierarchy,
diagnostic records and logging helpers used across all layers.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    diagnostics_from_error_log,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    FacadeConfig,
    GlobalConfig,
    ParsingConfig,
    SerializationConfig,
    XPathConfig,
)
from .errors import (
    InvalidNodeError,
    ManagedXMLError,
    NamespaceError,
    ParseError,
    SerializationError,
    XPathError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "diagnostics_from_error_log",
    "ConfigError",
    "ConfigValidationError",
    "FacadeConfig",
    "GlobalConfig",
    "ParsingConfig",
    "SerializationConfig",
    "XPathConfig",
    "InvalidNodeError",
    "ManagedXMLError",
    "NamespaceError",
    "ParseError",
    "SerializationError",
    "XPathError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
]
