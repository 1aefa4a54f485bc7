"""Convenience API for building managed documents.

Module-level functions cover the common one-shot cases; ``DocumentFactory``
keeps a configuration and correlation ID for repeated use and tracks usage
statistics. Malformed input raises ``ParseError``: the facade reports bad XML
rather than repairing it.
"""

import time
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional

from managed_xml.engine import InputType
from managed_xml.shared import FacadeConfig, ParseError, get_logger
from managed_xml.tree import Document, Node

# Max length for content preview in logs
PREVIEW_LENGTH = 100
MS_PER_SECOND = 1000  # Milliseconds per second conversion


def _with_correlation_id(
    config: Optional[FacadeConfig],
    correlation_id: Optional[str]
) -> FacadeConfig:
    config = config or FacadeConfig()
    if correlation_id is None:
        return config
    return replace(config, global_=replace(config.global_, correlation_id=correlation_id))


def parse(
    input_data: InputType,
    namespaces: Optional[Mapping[str, str]] = None,
    config: Optional[FacadeConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse XML text or bytes into a managed document.

    Args:
        input_data: XML content as string or bytes
        namespaces: Prefix to URI table for XPath and namespace lookups
        config: Facade configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        The parsed Document

    Raises:
        ParseError: If the input is malformed

    Examples:
        >>> doc = parse('<root><item>value</item></root>')
        >>> doc.root.child_by_name('item').value
        'value'

        >>> doc = parse(b'<?xml version="1.0"?><root/>')
        >>> doc.root.name
        'root'
    """
    logger = get_logger(__name__, correlation_id, "parse")
    logger.debug(
        "Starting parse operation",
        extra={
            "input_type": type(input_data).__name__,
            "has_correlation_id": correlation_id is not None
        }
    )
    return Document.parse(
        input_data, namespaces, _with_correlation_id(config, correlation_id)
    )


def parse_string(
    xml_string: str,
    namespaces: Optional[Mapping[str, str]] = None,
    config: Optional[FacadeConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse XML from a string.

    Examples:
        >>> doc = parse_string('<root><item id="1">Hello</item></root>')
        >>> doc.root.first_child.get_attribute('id')
        '1'
    """
    logger = get_logger(__name__, correlation_id, "parse_string")
    logger.debug(
        "Starting string parse operation",
        extra={
            "content_length": len(xml_string),
            "preview": (
                xml_string[:PREVIEW_LENGTH] + "..."
                if len(xml_string) > PREVIEW_LENGTH else xml_string
            )
        }
    )
    return Document.from_string(
        xml_string, namespaces, _with_correlation_id(config, correlation_id)
    )


def parse_bytes(
    data: bytes,
    namespaces: Optional[Mapping[str, str]] = None,
    config: Optional[FacadeConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse XML from bytes, letting the engine detect the encoding."""
    return Document.from_bytes(
        data, namespaces, _with_correlation_id(config, correlation_id)
    )


def create_document(
    namespaces: Optional[Mapping[str, str]] = None,
    config: Optional[FacadeConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Create an empty document to build from scratch."""
    return Document.create(namespaces, _with_correlation_id(config, correlation_id))


def create_node(
    name: str,
    namespace: Optional[str] = None,
    text: Optional[str] = None,
    namespaces: Optional[Mapping[str, str]] = None,
    config: Optional[FacadeConfig] = None,
    correlation_id: Optional[str] = None
) -> Node:
    """Create a detached element owning its own subtree."""
    return Node.create(
        name,
        namespace=namespace,
        text=text,
        namespaces=namespaces,
        config=_with_correlation_id(config, correlation_id)
    )


class DocumentFactory:
    """Reusable document factory with a fixed configuration.

    Attributes:
        config: Configuration handed to every document
        namespaces: Default prefix table seeded into every document
        correlation_id: Correlation ID for request tracking

    Examples:
        >>> factory = DocumentFactory(namespaces={"x": "urn:x"})
        >>> doc = factory.parse('<r xmlns:x="urn:x"><x:i/></r>')
        >>> len(doc.xpath('//x:i'))
        1
        >>> factory.statistics["total_parses"]
        1
    """

    def __init__(
        self,
        config: Optional[FacadeConfig] = None,
        namespaces: Optional[Mapping[str, str]] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the factory.

        Args:
            config: Facade configuration (defaults to ``FacadeConfig.default()``)
            namespaces: Prefix table seeded into every document
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or FacadeConfig.default()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.namespaces = dict(namespaces or {})

        self.logger = get_logger(__name__, self.correlation_id, "document_factory")

        self._parse_count = 0
        self._successful_parses = 0
        self._documents_created = 0
        self._total_processing_time = 0.0

        self.logger.info(
            "DocumentFactory initialized",
            extra={
                "config_name": self.config.name,
                "namespaces": len(self.namespaces)
            }
        )

    def _effective_config(self) -> FacadeConfig:
        return _with_correlation_id(self.config, self.correlation_id)

    def _merged_namespaces(
        self,
        namespaces: Optional[Mapping[str, str]]
    ) -> Dict[str, str]:
        merged = dict(self.namespaces)
        if namespaces:
            merged.update(namespaces)
        return merged

    def parse(
        self,
        input_data: InputType,
        namespaces: Optional[Mapping[str, str]] = None
    ) -> Document:
        """Parse XML with the factory's configuration.

        Args:
            input_data: XML content as string or bytes
            namespaces: Extra bindings on top of the factory's defaults

        Raises:
            ParseError: If the input is malformed
        """
        start_time = time.time()
        self._parse_count += 1
        try:
            document = Document.parse(
                input_data,
                self._merged_namespaces(namespaces),
                self._effective_config()
            )
        except ParseError:
            self._total_processing_time += (time.time() - start_time) * MS_PER_SECOND
            self.logger.warning(
                "Factory parse failed",
                extra={"total_parses": self._parse_count}
            )
            raise

        processing_time = (time.time() - start_time) * MS_PER_SECOND
        self._total_processing_time += processing_time
        self._successful_parses += 1
        self.logger.debug(
            "Factory parse completed",
            extra={
                "processing_time_ms": processing_time,
                "total_parses": self._parse_count,
                "success_rate": self._successful_parses / self._parse_count
            }
        )
        return document

    def create(self, namespaces: Optional[Mapping[str, str]] = None) -> Document:
        """Create an empty document with the factory's configuration."""
        self._documents_created += 1
        return Document.create(
            self._merged_namespaces(namespaces), self._effective_config()
        )

    def create_node(
        self,
        name: str,
        namespace: Optional[str] = None,
        text: Optional[str] = None
    ) -> Node:
        """Create a detached node that shares the factory's configuration."""
        return Node.create(
            name,
            namespace=namespace,
            text=text,
            namespaces=self.namespaces,
            config=self._effective_config()
        )

    def reconfigure(
        self,
        config: Optional[FacadeConfig] = None,
        namespaces: Optional[Mapping[str, str]] = None
    ) -> None:
        """Replace the configuration and/or the default prefix table.

        Documents created earlier keep the settings they were built with.
        """
        if config:
            self.config = config
        if namespaces is not None:
            self.namespaces = dict(namespaces)

        self.logger.info(
            "DocumentFactory reconfigured",
            extra={
                "config_updated": config is not None,
                "namespaces_updated": namespaces is not None
            }
        )

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get factory usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "documents_created": self._documents_created,
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset factory usage statistics."""
        self._parse_count = 0
        self._successful_parses = 0
        self._documents_created = 0
        self._total_processing_time = 0.0

        self.logger.info("DocumentFactory statistics reset")
