"""Node handles into a managed XML tree.

A ``Node`` never owns the storage it describes. It records which owner holds
that storage (a ``Document`` for tree-owned nodes, a ``Fragment`` for detached
ones) and re-checks on every access that it still resolves. A handle whose
reference is gone raises ``InvalidNodeError`` instead of reading stale data.

lxml keeps character data in ``.text`` and ``.tail`` slots rather than in
separate nodes. A TEXT node is therefore a handle onto one slot: the leading
text of an element, or the tail text that follows a child element.
"""

from enum import Enum, auto
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from lxml import etree

from managed_xml.engine import check_character_data, clark, is_element, split_tag
from managed_xml.shared import (
    FacadeConfig,
    InvalidNodeError,
    NamespaceError,
)

from .namespaces import DEFAULT_PREFIX, NamespaceRegistry, validate_prefix, validate_uri
from .ownership import Fragment, TreeOwner

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


class NodeType(Enum):
    """Kinds of node a handle can designate.

    ``ANY`` is only a filter value for ``children_of_type``. ``INVALID`` is
    reported by handles whose reference no longer resolves.
    """

    ANY = auto()
    ELEMENT = auto()
    ATTRIBUTE = auto()
    TEXT = auto()
    OTHER = auto()
    INVALID = auto()


def _split_qualified(name: str) -> Tuple[Optional[str], str]:
    """Split ``prefix:local``; the prefix is None for unprefixed names."""
    if ":" in name:
        prefix, local = name.split(":", 1)
        return prefix, local
    return None, name


def _check_text(value: Any, what: str = "Text") -> str:
    if not isinstance(value, str):
        raise TypeError(f"{what} must be a string, not {type(value).__name__}")
    return check_character_data(value)


class Node:
    """Handle onto one element, attribute, text slot or other leaf of a tree.

    Handles are minted lazily by navigation and XPath queries. Two handles
    compare equal when they designate the same node of the same storage.

    Examples:
        >>> node = Node.create("a")
        >>> child = node.append_child("b", text="v")
        >>> node.serialize()
        '<a><b>v</b></a>'
        >>> child.parent == node
        True
    """

    def __init__(
        self,
        element: etree._Element,
        owner: TreeOwner,
        kind: NodeType = NodeType.ELEMENT,
        attribute: Optional[str] = None,
        is_tail: bool = False
    ) -> None:
        """Initialize a handle; use navigation or ``Node.create`` instead.

        Args:
            element: lxml element the handle is anchored on. For a TEXT node
                this is the element whose text (or tail) slot it designates;
                for an ATTRIBUTE node, the element carrying the attribute
            owner: Document or Fragment owning the storage
            kind: Node kind
            attribute: Clark-notation attribute key for ATTRIBUTE nodes
            is_tail: For TEXT nodes, whether the slot is the element's tail
        """
        self._element = element
        self._owner = owner
        self._kind = kind
        self._attribute = attribute
        self._is_tail = is_tail
        self._version = (
            owner.slot_version(element, is_tail) if kind is NodeType.TEXT else 0
        )

    @classmethod
    def create(
        cls,
        name: str,
        namespace: Optional[str] = None,
        text: Optional[str] = None,
        namespaces: Optional[Mapping[str, str]] = None,
        config: Optional[FacadeConfig] = None
    ) -> "Node":
        """Create a detached element that owns its own standalone subtree.

        Args:
            name: Local name, ``prefix:local`` or Clark-notation name
            namespace: Namespace URI, or a prefix from ``namespaces``
            text: Optional initial text content
            namespaces: Prefix to URI bindings declared on the new element
                and used to resolve prefixes
            config: Facade configuration; defaults to ``FacadeConfig()``

        Returns:
            The detached root node; ``document`` is None

        Raises:
            NamespaceError: For invalid bindings or an unknown prefix
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Node name must be a non-empty string")
        if text is not None:
            _check_text(text)

        fragment = Fragment(None, dict(namespaces or {}), config)
        registry = fragment.namespaces

        if name.startswith("{"):
            uri, local = split_tag(name)
        else:
            prefix, local = _split_qualified(name)
            uri = None
            if prefix is not None:
                uri = registry.resolve(prefix)
                if uri is None:
                    raise NamespaceError(f"Unknown namespace prefix {prefix!r} in {name!r}")
        if namespace is not None:
            uri = registry.resolve(namespace) or validate_uri(namespace)

        nsmap = {
            (prefix or None): bound for prefix, bound in registry.as_mapping().items()
        }
        element = fragment.engine.create_element(clark(uri, local), nsmap, text)
        fragment.install_root(element)
        fragment.logger.debug(
            "Detached node created", extra={"tag": element.tag}
        )
        return cls(element, fragment)

    # Handle validation

    def _resolve(self) -> etree._Element:
        """Return the live element behind this handle or raise."""
        owner = self._owner
        if owner.released:
            raise InvalidNodeError(
                "Node belongs to a closed document or a released fragment"
            )
        element = owner.resolve(self._element)
        self._element = element
        if not owner.contains(element):
            raise InvalidNodeError("Node has been removed from its tree")
        if self._kind is NodeType.TEXT:
            if self._is_tail and element.getparent() is None:
                raise InvalidNodeError("Text node has been removed from its tree")
            if owner.slot_version(element, self._is_tail) != self._version:
                raise InvalidNodeError("Text node has been replaced")
        elif self._kind is NodeType.ATTRIBUTE:
            if self._attribute not in element.attrib:
                raise InvalidNodeError(f"Attribute {self._attribute!r} has been removed")
        return element

    def _require_element(self, operation: str) -> etree._Element:
        element = self._resolve()
        if self._kind is not NodeType.ELEMENT:
            raise TypeError(
                f"{operation} requires an element node, not {self._kind.name}"
            )
        return element

    def _scope_element(self) -> Optional[etree._Element]:
        """Element whose namespace scope applies to this node."""
        element = self._resolve()
        if self._kind is NodeType.ELEMENT or self._kind is NodeType.ATTRIBUTE:
            return element
        if self._kind is NodeType.TEXT:
            return element.getparent() if self._is_tail else element
        return element.getparent()

    @property
    def is_valid(self) -> bool:
        """Whether the handle still resolves."""
        try:
            self._resolve()
        except InvalidNodeError:
            return False
        return True

    @property
    def document(self) -> Optional[Any]:
        """Owning Document, or None for a detached node."""
        return self._owner if self._owner.is_document else None

    @property
    def is_detached(self) -> bool:
        return not self._owner.is_document

    # Identity and naming

    @property
    def node_type(self) -> NodeType:
        """Kind of node, or ``NodeType.INVALID`` for a dead handle."""
        if not self.is_valid:
            return NodeType.INVALID
        return self._kind

    @property
    def name(self) -> str:
        """Local (unprefixed) name.

        Text nodes are named ``text`` and comments ``comment``; a processing
        instruction is named by its target.
        """
        element = self._resolve()
        if self._kind is NodeType.ELEMENT:
            return split_tag(element.tag)[1]
        if self._kind is NodeType.ATTRIBUTE:
            return split_tag(self._attribute)[1]
        if self._kind is NodeType.TEXT:
            return "text"
        if isinstance(element, etree._ProcessingInstruction):
            return element.target
        if isinstance(element, etree._Entity):
            return element.name
        return "comment"

    @property
    def namespace(self) -> Optional[str]:
        """Namespace URI, or None."""
        element = self._resolve()
        if self._kind is NodeType.ELEMENT:
            return split_tag(element.tag)[0]
        if self._kind is NodeType.ATTRIBUTE:
            return split_tag(self._attribute)[0]
        return None

    @property
    def prefix(self) -> Optional[str]:
        """Prefix the node's namespace is bound to at its position, if any."""
        element = self._resolve()
        if self._kind is NodeType.ELEMENT:
            return element.prefix
        if self._kind is NodeType.ATTRIBUTE:
            uri = split_tag(self._attribute)[0]
            if uri == XML_NAMESPACE:
                return "xml"
            for prefix, bound in element.nsmap.items():
                if prefix is not None and bound == uri:
                    return prefix
        return None

    @property
    def qualified_name(self) -> str:
        prefix = self.prefix
        return f"{prefix}:{self.name}" if prefix else self.name

    @property
    def value(self) -> str:
        """Text content: concatenated descendant text for elements."""
        element = self._resolve()
        if self._kind is NodeType.ELEMENT:
            return self._owner.engine.text_content(element)
        if self._kind is NodeType.ATTRIBUTE:
            return element.get(self._attribute)
        if self._kind is NodeType.TEXT:
            return (element.tail if self._is_tail else element.text) or ""
        return element.text or ""

    # Navigation

    def _iter_children(self, element: etree._Element) -> Iterator["Node"]:
        owner = self._owner
        if element.text:
            yield text_node(element, False, owner)
        for child in element:
            yield wrap_element(child, owner)
            if child.tail:
                yield text_node(child, True, owner)

    @property
    def children(self) -> List["Node"]:
        """Direct children in document order, text slots included."""
        element = self._resolve()
        if self._kind is not NodeType.ELEMENT:
            return []
        return list(self._iter_children(element))

    def children_of_type(self, kind: NodeType) -> List["Node"]:
        """Direct children of one kind; ``NodeType.ANY`` returns all of them."""
        if not isinstance(kind, NodeType):
            raise TypeError(f"kind must be a NodeType, not {type(kind).__name__}")
        if kind is NodeType.ANY:
            return self.children
        return [child for child in self.children if child._kind is kind]

    def child_by_name(self, name: str) -> Optional["Node"]:
        """First child element with local name ``name``, ignoring namespaces."""
        element = self._resolve()
        if self._kind is not NodeType.ELEMENT:
            return None
        for child in element:
            if is_element(child) and split_tag(child.tag)[1] == name:
                return wrap_element(child, self._owner)
        return None

    @property
    def first_child(self) -> Optional["Node"]:
        element = self._resolve()
        if self._kind is not NodeType.ELEMENT:
            return None
        if element.text:
            return text_node(element, False, self._owner)
        if len(element):
            return wrap_element(element[0], self._owner)
        return None

    @property
    def parent(self) -> Optional["Node"]:
        """Parent element; an attribute's parent is the element carrying it."""
        element = self._resolve()
        if self._kind is NodeType.ATTRIBUTE:
            return wrap_element(element, self._owner)
        if self._kind is NodeType.TEXT and not self._is_tail:
            return wrap_element(element, self._owner)
        parent = element.getparent()
        if parent is None:
            return None
        return wrap_element(parent, self._owner)

    @property
    def next_sibling(self) -> Optional["Node"]:
        element = self._resolve()
        owner = self._owner
        if self._kind is NodeType.ATTRIBUTE:
            return self._attribute_sibling(element, 1)
        if self._kind is NodeType.TEXT and not self._is_tail:
            return wrap_element(element[0], owner) if len(element) else None
        if self._kind is not NodeType.TEXT:
            if element.getparent() is None:
                return None
            if element.tail:
                return text_node(element, True, owner)
        following = element.getnext()
        return wrap_element(following, owner) if following is not None else None

    @property
    def prev_sibling(self) -> Optional["Node"]:
        element = self._resolve()
        owner = self._owner
        if self._kind is NodeType.ATTRIBUTE:
            return self._attribute_sibling(element, -1)
        if self._kind is NodeType.TEXT:
            return wrap_element(element, owner) if self._is_tail else None
        parent = element.getparent()
        if parent is None:
            return None
        previous = element.getprevious()
        if previous is not None:
            if previous.tail:
                return text_node(previous, True, owner)
            return wrap_element(previous, owner)
        if parent.text:
            return text_node(parent, False, owner)
        return None

    def _attribute_sibling(self, element: etree._Element, step: int) -> Optional["Node"]:
        keys = list(element.attrib.keys())
        index = keys.index(self._attribute) + step
        if 0 <= index < len(keys):
            return attribute_node(element, keys[index], self._owner)
        return None

    # Attributes

    def _lookup_prefix(self, element: etree._Element, prefix: str) -> Optional[str]:
        """Resolve a prefix in scope first, then in the owner's registry."""
        if prefix == "xml":
            return XML_NAMESPACE
        in_scope = element.nsmap.get(prefix or None)
        if in_scope is not None:
            return in_scope
        return self._owner.namespaces.resolve(prefix)

    def _lookup_namespace(self, element: etree._Element, namespace: str) -> str:
        """Resolve a prefix or, failing that, take ``namespace`` as a URI."""
        if not isinstance(namespace, str):
            raise TypeError(
                f"namespace must be a string, not {type(namespace).__name__}"
            )
        return self._lookup_prefix(element, namespace) or validate_uri(namespace)

    def _attribute_key(
        self,
        element: etree._Element,
        name: str,
        namespace: Optional[str],
        strict: bool
    ) -> Optional[str]:
        """Clark key for an attribute name; None if a prefix cannot be resolved."""
        if not isinstance(name, str) or not name:
            raise ValueError("Attribute name must be a non-empty string")
        if name.startswith("{"):
            return name
        if namespace is not None:
            return clark(self._lookup_namespace(element, namespace), name)
        prefix, local = _split_qualified(name)
        if prefix is None:
            return name
        uri = self._lookup_prefix(element, prefix)
        if uri is None:
            if strict:
                raise NamespaceError(f"Unknown namespace prefix {prefix!r} in {name!r}")
            return None
        return clark(uri, local)

    @property
    def attributes(self) -> Dict[str, str]:
        """Snapshot of the attributes; namespaced keys use Clark notation."""
        element = self._resolve()
        if self._kind is not NodeType.ELEMENT:
            return {}
        return dict(element.attrib)

    @property
    def attribute_nodes(self) -> List["Node"]:
        element = self._resolve()
        if self._kind is not NodeType.ELEMENT:
            return []
        return [attribute_node(element, key, self._owner) for key in element.attrib]

    def get_attribute(
        self,
        name: str,
        namespace: Optional[str] = None,
        default: Optional[str] = None
    ) -> Optional[str]:
        """Attribute value, or ``default`` if absent.

        Args:
            name: Local name, ``prefix:local`` or Clark-notation name
            namespace: Namespace URI or prefix the attribute must belong to
            default: Returned when the attribute does not exist
        """
        element = self._resolve()
        if self._kind is not NodeType.ELEMENT:
            return default
        key = self._attribute_key(element, name, namespace, strict=False)
        if key is None:
            return default
        return self._owner.engine.get_attribute(element, key, default)

    def has_attribute(self, name: str, namespace: Optional[str] = None) -> bool:
        element = self._resolve()
        if self._kind is not NodeType.ELEMENT:
            return False
        key = self._attribute_key(element, name, namespace, strict=False)
        return key is not None and key in element.attrib

    def set_attribute(
        self,
        name: str,
        value: str,
        namespace: Optional[str] = None
    ) -> None:
        """Create or overwrite an attribute.

        An attribute namespace that is not yet declared in scope is declared
        on this element under its registry prefix when it has one.
        """
        element = self._require_element("set_attribute")
        key = self._attribute_key(element, name, namespace, strict=True)
        _check_text(value, "Attribute value")
        etree.QName(key)
        element = self._declare_for_attribute(element, split_tag(key)[0])
        self._owner.engine.set_attribute(element, key, value)

    def set_attributes(self, attributes: Mapping[str, str]) -> None:
        """Set several attributes; nothing is applied if any entry is invalid."""
        element = self._require_element("set_attributes")
        prepared = []
        for name, value in attributes.items():
            key = self._attribute_key(element, name, None, strict=True)
            _check_text(value, "Attribute value")
            etree.QName(key)
            prepared.append((key, value))
        for key, value in prepared:
            element = self._declare_for_attribute(element, split_tag(key)[0])
            self._owner.engine.set_attribute(element, key, value)

    def remove_attribute(self, name: str, namespace: Optional[str] = None) -> None:
        """Remove an attribute; does nothing if it does not exist."""
        element = self._require_element("remove_attribute")
        key = self._attribute_key(element, name, namespace, strict=False)
        if key is not None:
            self._owner.engine.remove_attribute(element, key)

    def _declare_for_attribute(
        self,
        element: etree._Element,
        uri: Optional[str]
    ) -> etree._Element:
        if uri is None or uri == XML_NAMESPACE or uri in element.nsmap.values():
            return element
        prefix = self._owner.namespaces.prefix_for(uri)
        # Unprefixed attributes are never namespaced; lxml picks a prefix
        if not prefix or prefix in element.nsmap:
            return element
        return self._declare(element, {prefix: uri})

    # Content mutation

    def set_content(self, text: str) -> None:
        """Replace the node's content with ``text``.

        On an element every child is removed and replaced by one text slot.
        """
        _check_text(text)
        element = self._resolve()
        engine = self._owner.engine
        if self._kind is NodeType.ELEMENT:
            engine.replace_content(element, text)
            self._owner.discard_slot(element, False)
        elif self._kind is NodeType.ATTRIBUTE:
            engine.set_attribute(element, self._attribute, text)
        elif self._kind is NodeType.TEXT and self._is_tail:
            element.tail = text
        else:
            element.text = text

    def append_child(
        self,
        name: str,
        text: Optional[str] = None,
        namespace: Optional[str] = None
    ) -> "Node":
        """Create a new last child element.

        Without a ``namespace`` the child takes the parent's namespace, as
        libxml2's ``xmlNewChild`` does; pass a Clark name such as ``"{}b"``
        for a child in no namespace.

        Args:
            name: Local name, ``prefix:local`` or Clark-notation name
            text: Optional initial text content
            namespace: Namespace URI or prefix for the child

        Returns:
            The new child, owned by the same document or fragment
        """
        element = self._require_element("append_child")
        if not isinstance(name, str) or not name:
            raise ValueError("Element name must be a non-empty string")
        if text is not None:
            _check_text(text)

        if name.startswith("{"):
            uri, local = split_tag(name)
        elif namespace is not None:
            uri, local = self._lookup_namespace(element, namespace), name
        else:
            prefix, local = _split_qualified(name)
            if prefix is None:
                uri = split_tag(element.tag)[0]
            else:
                uri = self._lookup_prefix(element, prefix)
                if uri is None:
                    raise NamespaceError(f"Unknown namespace prefix {prefix!r} in {name!r}")
        tag = clark(uri, local)
        etree.QName(tag)

        nsmap = None
        if uri and uri not in element.nsmap.values():
            prefix = self._owner.namespaces.prefix_for(uri)
            if prefix is not None and (prefix or None) not in element.nsmap:
                nsmap = {(prefix or None): uri}

        child = self._owner.engine.append_element(element, tag, nsmap, text)
        return Node(child, self._owner)

    def append_and_adopt_child(self, source: "Node") -> "Node":
        """Attach ``source`` as the last child.

        A node of the same document or fragment is moved. A node from any
        other owner is deep-copied; the source tree is left untouched and the
        caller's handle stays valid.

        Returns:
            Handle on the attached node
        """
        element = self._require_element("append_and_adopt_child")
        if not isinstance(source, Node):
            raise TypeError(f"Expected a Node, not {type(source).__name__}")
        source_element = source._resolve()
        if source._kind not in (NodeType.ELEMENT, NodeType.OTHER):
            raise TypeError(f"Cannot adopt a {source._kind.name} node as a child")

        owner = self._owner
        if source._owner is owner:
            if source_element is element or any(
                ancestor is source_element for ancestor in element.iterancestors()
            ):
                raise ValueError("Cannot append a node to itself or its descendants")
            owner.discard_slot(source_element, True)
            owner.engine.move_element(source_element, element)
            return wrap_element(source_element, owner)

        duplicate = owner.engine.copy_subtree(source_element)
        element.append(duplicate)
        owner.logger.debug(
            "Adopted subtree by copy",
            extra={"tag": str(duplicate.tag), "from_document": source.document is not None}
        )
        return wrap_element(duplicate, owner)

    def remove_children(self) -> None:
        """Unlink every child; handles on them and their descendants die."""
        element = self._resolve()
        if self._kind is not NodeType.ELEMENT:
            return
        removed = self._owner.engine.remove_children(element)
        self._owner.discard_slot(element, False)
        self._owner.logger.debug(
            "Children removed", extra={"tag": element.tag, "count": len(removed)}
        )

    # Namespaces

    def _declare(
        self,
        element: etree._Element,
        bindings: Mapping[str, str]
    ) -> etree._Element:
        nsmap = {(prefix or None): uri for prefix, uri in bindings.items()}
        replacement = self._owner.engine.redeclare(element, nsmap)
        self._owner.replace_element(element, replacement)
        self._element = replacement
        return replacement

    def register_namespace(self, prefix: str, uri: str) -> None:
        """Declare ``prefix`` for ``uri`` on this element, visible to descendants."""
        element = self._require_element("register_namespace")
        self._declare(element, {validate_prefix(prefix): validate_uri(uri)})

    def register_default_namespace(self, uri: str) -> None:
        self.register_namespace(DEFAULT_PREFIX, uri)

    def register_namespaces(self, namespaces: Mapping[str, str]) -> None:
        """Declare several bindings; nothing is applied if any is invalid."""
        element = self._require_element("register_namespaces")
        validated = NamespaceRegistry(namespaces).as_mapping()
        if validated:
            self._declare(element, validated)

    def set_namespace(self, namespace: str) -> None:
        """Move this element into a namespace declared in its scope.

        Args:
            namespace: A prefix in scope, a registry prefix or a URI

        Raises:
            NamespaceError: If no declaration of the namespace is visible here
        """
        element = self._require_element("set_namespace")
        uri = self._lookup_namespace(element, namespace)
        if uri not in element.nsmap.values():
            raise NamespaceError(
                f"Namespace {namespace!r} is not declared in scope of "
                f"<{split_tag(element.tag)[1]}>"
            )
        element.tag = clark(uri, split_tag(element.tag)[1])

    def list_namespaces(self) -> Dict[str, str]:
        """All bindings in scope here; the default namespace has key ``""``."""
        scope_element = self._scope_element()
        if scope_element is None:
            return {}
        return {
            (prefix or DEFAULT_PREFIX): uri
            for prefix, uri in self._owner.engine.namespaces_in_scope(scope_element).items()
        }

    # Output

    def serialize(self) -> str:
        """Serialize this subtree with only the declarations it needs."""
        return self._serialize(False)

    def serialize_with_namespace_declarations(self) -> str:
        """Serialize this subtree declaring every namespace in scope."""
        return self._serialize(True)

    def _serialize(self, include_namespace_declarations: bool) -> str:
        element = self._resolve()
        engine = self._owner.engine
        if self._kind is NodeType.TEXT:
            return engine.serialize_text(self.value)
        if self._kind is NodeType.ATTRIBUTE:
            return engine.serialize_attribute(self.qualified_name, self.value)
        return engine.serialize_element(
            element,
            include_namespace_declarations,
            self._owner.config.serialization
        )

    def xpath(self, expression: str) -> Any:
        """Evaluate ``expression`` with this node as the context node."""
        from .xpath import evaluate

        element = self._resolve()
        if self._kind not in (NodeType.ELEMENT, NodeType.OTHER):
            raise TypeError(f"A {self._kind.name} node cannot be an XPath context")
        return evaluate(self._owner, element, expression, element)

    def get_path(self) -> str:
        """Absolute XPath locating this node in its tree."""
        element = self._resolve()
        if self._kind is NodeType.TEXT:
            if self._is_tail:
                return self.parent.get_path() + "/text()"
            return element.getroottree().getpath(element) + "/text()"
        path = element.getroottree().getpath(element)
        if self._kind is NodeType.ATTRIBUTE:
            return f"{path}/@{self.qualified_name}"
        return path

    def to_dict(self) -> Dict[str, Any]:
        """Convert the subtree to plain dictionaries."""
        self._resolve()
        data: Dict[str, Any] = {
            "type": self._kind.name,
            "name": self.name,
            "namespace": self.namespace,
        }
        if self._kind is NodeType.ELEMENT:
            data["attributes"] = self.attributes
            data["children"] = [child.to_dict() for child in self.children]
        else:
            data["value"] = self.value
        return data

    def release(self) -> bool:
        """Free the standalone subtree of a detached node.

        Every handle into the fragment becomes invalid. Returns False if it
        was already released.
        """
        if self._owner.is_document:
            raise ValueError(
                "Tree-owned nodes are released by closing their document"
            )
        return self._owner.release()

    # Comparison

    def _identity(self) -> Tuple[NodeType, int, Optional[str], bool]:
        return (
            self._kind,
            id(self._owner.resolve(self._element)),
            self._attribute,
            self._is_tail,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self._owner is other._owner and self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __repr__(self) -> str:
        if not self.is_valid:
            return "<Node INVALID>"
        return f"<Node {self._kind.name} {self.qualified_name!r}>"


def wrap_element(element: etree._Element, owner: TreeOwner) -> Node:
    """Handle on an element, comment, PI or entity reference."""
    kind = NodeType.ELEMENT if is_element(element) else NodeType.OTHER
    return Node(element, owner, kind)


def text_node(element: etree._Element, is_tail: bool, owner: TreeOwner) -> Node:
    """Handle on the text (or tail) slot of ``element``."""
    return Node(element, owner, NodeType.TEXT, is_tail=is_tail)


def attribute_node(element: etree._Element, key: str, owner: TreeOwner) -> Node:
    """Handle on one attribute of ``element``."""
    return Node(element, owner, NodeType.ATTRIBUTE, attribute=key)


def node_from_xpath(item: Any, owner: TreeOwner) -> Optional[Node]:
    """Project one XPath result item onto a handle.

    Elements map directly. Attribute and text matches arrive as lxml smart
    strings that know their parent element. Anything else yields None.
    """
    if isinstance(item, etree._Element):
        return wrap_element(item, owner)
    getparent = getattr(item, "getparent", None)
    if getparent is None:
        return None
    parent = getparent()
    if parent is None:
        return None
    if item.is_attribute:
        return attribute_node(parent, item.attrname, owner)
    if item.is_text or item.is_tail:
        return text_node(parent, item.is_tail, owner)
    return None
