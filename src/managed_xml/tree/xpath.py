"""XPath evaluation and results.

Prefixes are bound from the owner's ``NamespaceRegistry``. Declarations in
the tree are only consulted when ``XPathConfig.use_ambient_namespaces`` is
set, and registry bindings win over them.
"""

from typing import Any, Iterator, List, Optional, Union

from lxml import etree

from .node import Node, node_from_xpath
from .ownership import TreeOwner


class XPathResult:
    """Matches of one expression evaluated against one context node.

    Node-set results are projected onto handles on demand; number, string and
    boolean results are exposed through ``scalar``. Releasing a result drops
    the engine's result list and never touches the tree.

    Examples:
        >>> with document.evaluate_xpath("//x:item") as result:
        ...     item = result.first_node()
    """

    def __init__(self, owner: TreeOwner, expression: str, raw: Any) -> None:
        self._owner = owner
        self.expression = expression
        self._raw = raw
        self._released = False

    @property
    def document(self) -> Optional[Any]:
        return self._owner if self._owner.is_document else None

    @property
    def released(self) -> bool:
        return self._released

    @property
    def is_node_set(self) -> bool:
        return isinstance(self._raw, list)

    @property
    def scalar(self) -> Union[float, str, bool, None]:
        """Value of a number, string or boolean expression; None for node sets."""
        if self.is_node_set:
            return None
        if isinstance(self._raw, str):
            return str(self._raw)
        return self._raw

    def _items(self) -> List[Any]:
        if self._released or not self.is_node_set:
            return []
        return self._raw

    def first_node(self) -> Optional[Node]:
        """First matched node in document order, or None."""
        for item in self._items():
            node = node_from_xpath(item, self._owner)
            if node is not None:
                return node
        return None

    def all_nodes(self) -> List[Node]:
        """All matched nodes in document order."""
        nodes = []
        for item in self._items():
            node = node_from_xpath(item, self._owner)
            if node is not None:
                nodes.append(node)
        return nodes

    def release(self) -> None:
        self._raw = None
        self._released = True

    def __len__(self) -> int:
        return len(self.all_nodes())

    def __iter__(self) -> Iterator[Node]:
        return iter(self.all_nodes())

    def __bool__(self) -> bool:
        return self.first_node() is not None

    def __enter__(self) -> "XPathResult":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()

    def __repr__(self) -> str:
        if self._released:
            return f"<XPathResult {self.expression!r} released>"
        if self.is_node_set:
            return f"<XPathResult {self.expression!r} nodes={len(self._raw)}>"
        return f"<XPathResult {self.expression!r} scalar={self._raw!r}>"


def evaluate(
    owner: TreeOwner,
    target: Union[etree._Element, etree._ElementTree],
    expression: str,
    context_element: Optional[etree._Element] = None
) -> XPathResult:
    """Evaluate ``expression`` against ``target`` with the owner's bindings.

    Args:
        owner: Document or Fragment the matches belong to
        target: Context element, or the element tree for document context
        expression: XPath 1.0 expression
        context_element: Element whose in-scope declarations count as
            ambient namespaces

    Raises:
        XPathError: For invalid expressions or unbound prefixes
    """
    xpath_config = owner.config.xpath
    namespaces = owner.namespaces.xpath_namespaces()
    if xpath_config.use_ambient_namespaces and context_element is not None:
        ambient = {
            prefix: uri
            for prefix, uri in owner.engine.namespaces_in_scope(context_element).items()
            if prefix
        }
        ambient.update(namespaces)
        namespaces = ambient

    raw = owner.engine.evaluate_xpath(target, expression, namespaces)
    if isinstance(raw, list) and xpath_config.max_results is not None:
        raw = raw[:xpath_config.max_results]

    owner.logger.debug(
        "XPath evaluated",
        extra={
            "expression": expression,
            "matches": len(raw) if isinstance(raw, list) else None,
        }
    )
    return XPathResult(owner, expression, raw)
