"""Native tree engine backed by lxml.

``LxmlEngine`` supplies the parse, serialize and XPath primitives plus the
low-level tree edits the facade builds on. Structural edits to lxml trees
happen here and nowhere else. It knows nothing about handles or ownership:
callers pass raw lxml elements and get raw lxml elements back.
"""

import copy
from typing import Any, Dict, List, Optional, Tuple, Union
from xml.sax.saxutils import escape, quoteattr

from lxml import etree

from managed_xml.shared import (
    ParseError,
    ParsingConfig,
    SerializationConfig,
    XPathError,
    diagnostics_from_error_log,
    get_logger,
)

InputType = Union[str, bytes, bytearray, memoryview]

# Max length for content preview in logs
PREVIEW_LENGTH = 100


def check_character_data(value: str) -> str:
    """Raise ValueError if lxml would reject ``value`` as text or attribute data.

    Assigning to an unattached scratch element runs lxml's own character
    check, so callers can validate before touching a live tree.
    """
    etree.Element("scratch").text = value
    return value


def is_element(node: Any) -> bool:
    """Check whether an lxml node is a real element (not a comment, PI or entity)."""
    return isinstance(node, etree._Element) and isinstance(node.tag, str)


def split_tag(tag: str) -> Tuple[Optional[str], str]:
    """Split a Clark-notation name into (namespace URI, local name)."""
    if tag.startswith("{"):
        uri, _, local = tag[1:].partition("}")
        return uri, local
    return None, tag


def clark(namespace: Optional[str], name: str) -> str:
    """Build a Clark-notation name from a namespace URI and a local name."""
    if namespace:
        return f"{{{namespace}}}{name}"
    return name


class LxmlEngine:
    """Parse/serialize/XPath/tree-edit primitives over ``lxml.etree``.

    Examples:
        >>> engine = LxmlEngine()
        >>> root = engine.parse('<root><item id="1"/></root>')
        >>> engine.get_attribute(root[0], "id")
        '1'
    """

    def __init__(
        self,
        config: Optional[ParsingConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ParsingConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "lxml_engine")

    # Parsing

    def make_parser(self, encoding: Optional[str] = None) -> etree.XMLParser:
        """Build an lxml parser from the parsing configuration."""
        return etree.XMLParser(
            encoding=encoding,
            remove_blank_text=self.config.remove_blank_text,
            remove_comments=self.config.remove_comments,
            remove_pis=self.config.remove_pis,
            strip_cdata=self.config.strip_cdata,
            resolve_entities=self.config.resolve_entities,
            no_network=self.config.no_network,
            huge_tree=self.config.huge_tree,
            recover=self.config.recover,
        )

    def parse(self, data: InputType) -> etree._Element:
        """Parse bytes or text into a tree and return its root element.

        Text input is re-encoded as UTF-8 and the parser is told so, which
        overrides any encoding named in the XML declaration.

        Raises:
            ParseError: If the input is empty, too large or malformed
            TypeError: If ``data`` is neither text nor bytes
        """
        if isinstance(data, str):
            raw = data.encode("utf-8")
            parser = self.make_parser(encoding="utf-8")
        elif isinstance(data, (bytes, bytearray, memoryview)):
            raw = bytes(data)
            parser = self.make_parser()
        else:
            raise TypeError(
                f"XML input must be str or bytes, not {type(data).__name__}"
            )

        limit = self.config.max_input_size_bytes
        if limit is not None and len(raw) > limit:
            raise ParseError(
                f"Input of {len(raw)} bytes exceeds the {limit} byte limit"
            )
        if not raw.strip():
            raise ParseError("Document is empty")

        try:
            root = etree.fromstring(raw, parser)
        except etree.XMLSyntaxError as e:
            diagnostics = diagnostics_from_error_log(
                e.error_log, "lxml_engine", self.correlation_id
            )
            self.logger.warning(
                "Engine rejected malformed XML",
                extra={
                    "error": str(e),
                    "preview": raw[:PREVIEW_LENGTH].decode("utf-8", "replace"),
                }
            )
            raise ParseError(f"Malformed XML: {e}", diagnostics) from e

        if root is None:
            # A recovering parser can give up without raising
            raise ParseError(
                "Document has no root element",
                diagnostics_from_error_log(
                    parser.error_log, "lxml_engine", self.correlation_id
                )
            )
        return root

    # Serialization

    def serialize_document(
        self,
        root: etree._Element,
        config: SerializationConfig
    ) -> str:
        """Serialize the whole document owning ``root``, prolog included."""
        tree = root.getroottree()
        if config.xml_declaration:
            data = etree.tostring(
                tree,
                xml_declaration=True,
                encoding=config.encoding,
                pretty_print=config.pretty_print,
            )
            return data.decode(config.encoding)
        return etree.tostring(
            tree, encoding="unicode", pretty_print=config.pretty_print
        )

    def serialize_element(
        self,
        element: etree._Element,
        include_namespace_declarations: bool,
        config: SerializationConfig
    ) -> str:
        """Serialize the subtree rooted at ``element``.

        With ``include_namespace_declarations`` every binding in scope at the
        element is declared on the output root. Without it only the element's
        own declarations and the ones its subtree actually uses are emitted,
        which is the least that keeps the fragment well-formed.
        """
        if not include_namespace_declarations:
            # The copy only declares ancestor namespaces its subtree uses
            element = copy.deepcopy(element)
        return etree.tostring(
            element,
            encoding="unicode",
            with_tail=config.with_tail,
            pretty_print=config.pretty_print,
        )

    @staticmethod
    def serialize_text(text: str) -> str:
        """Escape character data for output."""
        return escape(text)

    @staticmethod
    def serialize_attribute(name: str, value: str) -> str:
        """Render one attribute as ``name="value"``."""
        return f"{name}={quoteattr(value)}"

    # XPath

    def evaluate_xpath(
        self,
        target: Union[etree._Element, etree._ElementTree],
        expression: str,
        namespaces: Dict[str, str]
    ) -> Any:
        """Evaluate ``expression`` against an element or a whole document.

        Returns:
            A list for node-set results, otherwise the scalar value

        Raises:
            XPathError: On syntax errors, unbound prefixes or evaluation errors
        """
        if not isinstance(expression, str) or not expression.strip():
            raise XPathError("XPath expression must be a non-empty string", expression)
        try:
            return target.xpath(
                expression, namespaces=namespaces or None, smart_strings=True
            )
        except etree.XPathError as e:
            diagnostics = diagnostics_from_error_log(
                e.error_log, "lxml_engine", self.correlation_id
            )
            self.logger.warning(
                "XPath evaluation failed",
                extra={"expression": expression, "error": str(e)}
            )
            raise XPathError(
                f"Invalid XPath expression {expression!r}: {e}",
                expression,
                diagnostics
            ) from e

    # Tree edits

    def create_element(
        self,
        tag: str,
        nsmap: Optional[Dict[Optional[str], str]] = None,
        text: Optional[str] = None
    ) -> etree._Element:
        """Create a standalone element that is the root of its own tree."""
        element = etree.Element(tag, nsmap=nsmap or None)
        if text is not None:
            element.text = text
        return element

    def append_element(
        self,
        parent: etree._Element,
        tag: str,
        nsmap: Optional[Dict[Optional[str], str]] = None,
        text: Optional[str] = None
    ) -> etree._Element:
        """Create a new last child element under ``parent``."""
        child = etree.SubElement(parent, tag, nsmap=nsmap or None)
        if text is not None:
            child.text = text
        return child

    @staticmethod
    def copy_subtree(element: etree._Element) -> etree._Element:
        """Deep-copy a subtree into a new standalone tree, without its tail."""
        duplicate = copy.deepcopy(element)
        duplicate.tail = None
        return duplicate

    @staticmethod
    def move_element(element: etree._Element, new_parent: etree._Element) -> None:
        """Relink ``element`` as the last child of ``new_parent``.

        lxml moves tail text together with an element; the tail is left
        behind here so the text stays where it was in document order.
        """
        old_parent = element.getparent()
        tail = element.tail
        if old_parent is not None and tail:
            previous = element.getprevious()
            if previous is not None:
                previous.tail = (previous.tail or "") + tail
            else:
                old_parent.text = (old_parent.text or "") + tail
        element.tail = None
        new_parent.append(element)

    @staticmethod
    def remove_children(element: etree._Element) -> List[etree._Element]:
        """Unlink every child of ``element`` and drop its leading text."""
        removed = list(element)
        for child in removed:
            element.remove(child)
        element.text = None
        return removed

    @staticmethod
    def replace_content(element: etree._Element, text: str) -> None:
        """Replace all children of ``element`` by a single text slot."""
        children = list(element)
        # Assign first: lxml rejects non-XML text before anything is unlinked
        element.text = text
        for child in children:
            element.remove(child)

    @staticmethod
    def get_attribute(
        element: etree._Element,
        key: str,
        default: Optional[str] = None
    ) -> Optional[str]:
        """Read an attribute by Clark-notation key."""
        return element.get(key, default)

    @staticmethod
    def set_attribute(element: etree._Element, key: str, value: str) -> None:
        """Create or overwrite an attribute by Clark-notation key."""
        element.set(key, value)

    @staticmethod
    def remove_attribute(element: etree._Element, key: str) -> bool:
        """Remove an attribute; returns False if it was absent."""
        return element.attrib.pop(key, None) is not None

    @staticmethod
    def text_content(element: etree._Element) -> str:
        """Concatenate the character data of a subtree, comments excluded."""
        parts = [element.text or ""]
        for child in element:
            if is_element(child):
                parts.append(LxmlEngine.text_content(child))
            parts.append(child.tail or "")
        return "".join(parts)

    # Namespaces

    @staticmethod
    def namespaces_in_scope(element: etree._Element) -> Dict[Optional[str], str]:
        """All bindings visible at ``element``, innermost declaration winning."""
        return dict(element.nsmap)

    @staticmethod
    def own_namespaces(element: etree._Element) -> Dict[Optional[str], str]:
        """Bindings declared on ``element`` itself."""
        parent = element.getparent()
        inherited = parent.nsmap if parent is not None else {}
        return {
            prefix: uri
            for prefix, uri in element.nsmap.items()
            if inherited.get(prefix) != uri
        }

    def redeclare(
        self,
        element: etree._Element,
        nsmap: Dict[Optional[str], str]
    ) -> etree._Element:
        """Rebuild ``element`` with additional namespace declarations.

        lxml cannot add declarations to an existing element, so a replacement
        carrying the merged bindings takes its place: attributes, text and
        tail are copied and the children are moved over unchanged. A root
        element's replacement is returned unlinked; the caller installs it.

        Returns:
            The replacement element, or ``element`` if nothing changed
        """
        in_scope = self.namespaces_in_scope(element)
        pending = {
            prefix: uri for prefix, uri in nsmap.items()
            if in_scope.get(prefix) != uri
        }
        if not pending:
            return element

        declared = self.own_namespaces(element)
        declared.update(pending)
        parent = element.getparent()
        if parent is None:
            replacement = etree.Element(element.tag, nsmap=declared)
        else:
            # Built under the parent so ancestor declarations are reused
            replacement = etree.SubElement(parent, element.tag, nsmap=declared)
            parent.replace(element, replacement)
            replacement.tail = element.tail
        for key, value in element.attrib.items():
            replacement.set(key, value)
        replacement.text = element.text
        for child in list(element):
            replacement.append(child)

        self.logger.debug(
            "Element rebuilt with new namespace declarations",
            extra={"tag": element.tag, "declared": sorted(
                prefix or "" for prefix in pending
            )}
        )
        return replacement

    @staticmethod
    def transfer_top_level_siblings(
        old_root: etree._Element,
        new_root: etree._Element
    ) -> List[Tuple[etree._Element, etree._Element]]:
        """Copy the comments and PIs around ``old_root`` next to ``new_root``.

        Returns:
            ``(original, copy)`` pairs for every transferred node
        """
        transferred = []
        preceding = list(old_root.itersiblings(preceding=True))
        for sibling in reversed(preceding):
            duplicate = copy.deepcopy(sibling)
            new_root.addprevious(duplicate)
            transferred.append((sibling, duplicate))
        following = list(old_root.itersiblings())
        for sibling in reversed(following):
            duplicate = copy.deepcopy(sibling)
            new_root.addnext(duplicate)
            transferred.append((sibling, duplicate))
        return transferred

    @staticmethod
    def top_level_siblings(root: etree._Element) -> List[etree._Element]:
        """Comments and PIs outside the document element, in document order."""
        preceding = list(root.itersiblings(preceding=True))
        preceding.reverse()
        return preceding + list(root.itersiblings())

    @staticmethod
    def is_tree_root(element: etree._Element) -> bool:
        """Check whether ``element`` is the document element of its lxml tree."""
        return element.getroottree().getroot() is element
