"""Document: the owner of one XML tree and its namespace table.

Every tree-owned ``Node`` refers back to exactly one ``Document``. Closing the
document releases the tree once and invalidates all of those handles.
"""

import time
from typing import Any, Dict, Iterator, Mapping, Optional, Union

from lxml import etree

from managed_xml.engine import InputType, LxmlEngine, is_element
from managed_xml.shared import (
    FacadeConfig,
    InvalidNodeError,
    SerializationError,
)

from .node import Node, NodeType, wrap_element
from .ownership import TreeOwner
from .xpath import XPathResult, evaluate


class Document(TreeOwner):
    """Managed XML document.

    Examples:
        Parse and query:
        >>> doc = Document.parse(
        ...     '<root xmlns:x="urn:x"><x:item id="1">hi</x:item></root>',
        ...     namespaces={"x": "urn:x"}
        ... )
        >>> item = doc.evaluate_xpath("//x:item").first_node()
        >>> item.value, item.get_attribute("id")
        ('hi', '1')

        Build from scratch:
        >>> doc = Document.create()
        >>> root = doc.set_root(Node.create("a"))
        >>> _ = root.append_child("b", text="v")
        >>> doc.serialize()
        '<a><b>v</b></a>'
    """

    is_document = True

    def __init__(
        self,
        root: Optional[etree._Element] = None,
        namespaces: Optional[Mapping[str, str]] = None,
        config: Optional[FacadeConfig] = None
    ) -> None:
        """Initialize a document.

        Args:
            root: Document element of an lxml tree the document takes over
            namespaces: Initial prefix to URI table
            config: Facade configuration; defaults to ``FacadeConfig()``
        """
        super().__init__(dict(namespaces or {}), config, component="document")
        if root is not None:
            self.install_root(root)

    @classmethod
    def create(
        cls,
        namespaces: Optional[Mapping[str, str]] = None,
        config: Optional[FacadeConfig] = None
    ) -> "Document":
        """Create an empty document with no root element."""
        document = cls(None, namespaces, config)
        document.logger.debug("Empty document created")
        return document

    @classmethod
    def parse(
        cls,
        data: InputType,
        namespaces: Optional[Mapping[str, str]] = None,
        config: Optional[FacadeConfig] = None
    ) -> "Document":
        """Parse XML bytes or text.

        Args:
            data: Raw bytes (encoding detected by the engine) or decoded text
            namespaces: Prefix to URI table seeded into the registry
            config: Facade configuration

        Returns:
            The parsed document

        Raises:
            ParseError: If the input is malformed; carries the engine's
                diagnostics
            NamespaceError: If ``namespaces`` holds an invalid binding
        """
        document = cls(None, namespaces, config)
        start_time = time.time()
        document._root = document.engine.parse(data)
        document.logger.info(
            "Document parsed",
            extra={
                "root_tag": document._root.tag,
                "input_size": len(data),
                "processing_time_ms": (time.time() - start_time) * 1000,
            }
        )
        return document

    @classmethod
    def from_string(
        cls,
        text: str,
        namespaces: Optional[Mapping[str, str]] = None,
        config: Optional[FacadeConfig] = None
    ) -> "Document":
        if not isinstance(text, str):
            raise TypeError(f"Expected str, not {type(text).__name__}")
        return cls.parse(text, namespaces, config)

    @classmethod
    def from_bytes(
        cls,
        data: Union[bytes, bytearray, memoryview],
        namespaces: Optional[Mapping[str, str]] = None,
        config: Optional[FacadeConfig] = None
    ) -> "Document":
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Expected bytes, not {type(data).__name__}")
        return cls.parse(data, namespaces, config)

    @classmethod
    def wrap(
        cls,
        tree: Union[etree._Element, etree._ElementTree],
        namespaces: Optional[Mapping[str, str]] = None,
        config: Optional[FacadeConfig] = None
    ) -> "Document":
        """Take over an lxml tree built elsewhere.

        A document element is adopted as is and must not be edited behind
        the document's back afterwards. Any other element is copied first.
        """
        element = tree.getroot() if isinstance(tree, etree._ElementTree) else tree
        if not is_element(element):
            raise TypeError("Only an lxml element or element tree can be wrapped")
        if not LxmlEngine.is_tree_root(element):
            element = LxmlEngine.copy_subtree(element)
        document = cls(element, namespaces, config)
        document.logger.debug("External tree wrapped", extra={"root_tag": element.tag})
        return document

    # Lifecycle

    @property
    def closed(self) -> bool:
        return self._released

    def _check_open(self, operation: str) -> None:
        if self._released:
            raise InvalidNodeError(f"Cannot {operation}: document is closed")

    def close(self) -> None:
        """Release the tree; every handle into it becomes invalid.

        Closing an already closed document does nothing.
        """
        if self._released:
            self.logger.debug("Document already closed")
            return
        self._release_tree()
        self.logger.info("Document closed")

    def __enter__(self) -> "Document":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # Root access

    @property
    def root(self) -> Optional[Node]:
        """Document element, or None for an empty document."""
        self._check_open("access root")
        if self._root is None:
            return None
        return wrap_element(self._root, self)

    def set_root(self, node: Node) -> Node:
        """Install ``node`` as the document element.

        A node from another document or a detached node is deep-copied and
        the source stays untouched. A node of this document is promoted:
        handles inside its subtree follow it, every other handle into the
        old tree becomes invalid. Top-level comments and PIs are kept.

        Returns:
            Handle on the new document element
        """
        self._check_open("set root")
        if not isinstance(node, Node):
            raise TypeError(f"Expected a Node, not {type(node).__name__}")
        source = node._resolve()
        if node._kind is not NodeType.ELEMENT:
            raise TypeError(f"Document element must be an element, not {node._kind.name}")

        if node._owner is self:
            if source is self._root:
                return wrap_element(source, self)
            new_root = self.engine.copy_subtree(source)
            self.forward_subtree(source, new_root)
        else:
            new_root = self.engine.copy_subtree(source)

        self.install_root(new_root)
        self.logger.info(
            "Document root set",
            extra={"root_tag": new_root.tag, "adopted": node._owner is not self}
        )
        return wrap_element(new_root, self)

    def iter_elements(self) -> Iterator[Node]:
        """Walk all elements in document order."""
        self._check_open("iterate")
        if self._root is None:
            return
        for element in self._root.iter(etree.Element):
            yield wrap_element(element, self)

    # Namespaces and queries

    def register_namespace(self, prefix: str, uri: str) -> None:
        """Add a binding to the document's prefix table."""
        self._namespaces.register(prefix, uri)

    def evaluate_xpath(
        self,
        expression: str,
        context: Optional[Node] = None
    ) -> XPathResult:
        """Evaluate ``expression`` with the registry's prefix bindings.

        Args:
            expression: XPath 1.0 expression
            context: Context node; defaults to the document itself, so
                absolute and relative paths both start at the top

        Returns:
            The result; empty when nothing matches or the document is empty

        Raises:
            XPathError: For invalid syntax or an unbound prefix
        """
        self._check_open("evaluate XPath")
        if context is not None:
            if not isinstance(context, Node) or context.document is not self:
                raise ValueError("XPath context node must belong to this document")
            return context.xpath(expression)
        if self._root is None:
            return XPathResult(self, expression, [])
        return evaluate(self, self._root.getroottree(), expression, self._root)

    xpath = evaluate_xpath

    # Output

    def serialize(self, include_namespace_declarations: bool = False) -> str:
        """Serialize the document.

        The document element has no ancestors, so both settings of
        ``include_namespace_declarations`` give the same text; the argument
        exists for parity with ``Node``.

        Raises:
            SerializationError: If the document is closed or the configured
                encoding cannot be used
        """
        if self._released:
            raise SerializationError("Cannot serialize a closed document")
        if self._root is None:
            return ""
        try:
            return self.engine.serialize_document(self._root, self.config.serialization)
        except (etree.SerialisationError, LookupError) as e:
            raise SerializationError(f"Serialization failed: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """Summary of the document for inspection and logging."""
        data: Dict[str, Any] = {
            "closed": self.closed,
            "has_root": self._root is not None,
            "namespaces": self._namespaces.as_mapping(),
        }
        if self._root is not None:
            elements = list(self._root.iter(etree.Element))
            data["total_elements"] = len(elements)
            data["total_attributes"] = sum(len(el.attrib) for el in elements)
            data["root"] = wrap_element(self._root, self).to_dict()
        return data

    def __repr__(self) -> str:
        if self.closed:
            return "<Document closed>"
        tag = self._root.tag if self._root is not None else None
        return f"<Document root={tag!r} namespaces={len(self._namespaces)}>"
