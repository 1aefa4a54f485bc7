"""Storage owners for node handles.

Every ``Node`` carries a reference to the owner of the storage it points
into: a ``Document`` for tree-owned nodes, or a ``Fragment`` for a subtree
created free-standing with ``Node.create``. The owner decides whether a
handle still resolves.

Some edits cannot be done in place with lxml (adding namespace declarations
to an element, promoting a subtree to document root), so the owner installs a
replacement element and records a forwarding entry from the old element to
the new one. Handles minted before the edit follow that entry on their next
access. Entries live until the owner is closed or released, so the table
grows by one entry per replaced element; chains are collapsed on lookup.
"""

from typing import Dict, Optional, Tuple

from lxml import etree

from managed_xml.engine import LxmlEngine
from managed_xml.shared import FacadeConfig, get_logger

from .namespaces import NamespaceRegistry

SlotKey = Tuple[etree._Element, bool]


class TreeOwner:
    """Common state and bookkeeping for documents and fragments."""

    is_document = False

    def __init__(
        self,
        namespaces: Optional[Dict[str, str]] = None,
        config: Optional[FacadeConfig] = None,
        component: str = "tree"
    ) -> None:
        self.config = config or FacadeConfig()
        self.correlation_id = self.config.correlation_id
        self.engine = LxmlEngine(self.config.parsing, self.correlation_id)
        self.logger = get_logger(__name__, self.correlation_id, component)
        self._namespaces = NamespaceRegistry(namespaces)
        self._root: Optional[etree._Element] = None
        self._released = False
        self._forward: Dict[etree._Element, etree._Element] = {}
        self._slot_versions: Dict[SlotKey, int] = {}

    @property
    def namespaces(self) -> NamespaceRegistry:
        """Prefix table used for XPath and namespace argument lookup."""
        return self._namespaces

    @property
    def released(self) -> bool:
        return self._released

    # Handle resolution

    def resolve(self, element: etree._Element) -> etree._Element:
        """Follow forwarding entries to the element currently in the tree."""
        target = element
        while target in self._forward:
            target = self._forward[target]
        if target is not element:
            # Collapse the chain so later lookups take one step
            self._forward[element] = target
        return target

    def contains(self, element: etree._Element) -> bool:
        """Check whether ``element`` hangs below this owner's current root.

        Comments and PIs outside the document element have no parent; they
        count when they are still siblings of the root.
        """
        if self._released or self._root is None:
            return False
        top = element
        parent = top.getparent()
        while parent is not None:
            top = parent
            parent = top.getparent()
        if top is self._root:
            return True
        return any(
            sibling is top
            for sibling in self.engine.top_level_siblings(self._root)
        )

    def forward(self, old: etree._Element, new: etree._Element) -> None:
        """Redirect handles on ``old`` to ``new``."""
        if old is new:
            return
        self._forward[old] = new
        for is_tail in (False, True):
            version = self._slot_versions.pop((old, is_tail), None)
            if version is not None:
                self._slot_versions[(new, is_tail)] = version

    def forward_subtree(self, old: etree._Element, new: etree._Element) -> None:
        """Redirect every node of ``old``'s subtree to its copy under ``new``."""
        for old_node, new_node in zip(old.iter(), new.iter()):
            self.forward(old_node, new_node)

    def slot_version(self, element: etree._Element, is_tail: bool) -> int:
        return self._slot_versions.get((element, is_tail), 0)

    def discard_slot(self, element: etree._Element, is_tail: bool) -> None:
        """Invalidate text handles minted on one text slot."""
        key = (element, is_tail)
        self._slot_versions[key] = self._slot_versions.get(key, 0) + 1

    # Root management

    def install_root(self, new_root: etree._Element) -> None:
        """Make ``new_root`` the document element, keeping top-level PIs and comments."""
        old_root = self._root
        if old_root is not None and old_root is not new_root:
            for sibling, duplicate in self.engine.transfer_top_level_siblings(
                old_root, new_root
            ):
                self.forward(sibling, duplicate)
        self._root = new_root

    def replace_element(
        self,
        old: etree._Element,
        new: etree._Element
    ) -> None:
        """Account for ``new`` having taken ``old``'s place in the tree."""
        if old is new:
            return
        if old is self._root:
            self.install_root(new)
        self.forward(old, new)

    def _release_tree(self) -> None:
        self._released = True
        self._root = None
        self._forward.clear()
        self._slot_versions.clear()


class Fragment(TreeOwner):
    """Standalone subtree owned by a detached node.

    Attaching a fragment's node to a document copies it, so the fragment
    stays usable until ``release`` is called.
    """

    def __init__(
        self,
        root: etree._Element,
        namespaces: Optional[Dict[str, str]] = None,
        config: Optional[FacadeConfig] = None
    ) -> None:
        super().__init__(namespaces, config, component="fragment")
        self._root = root

    def release(self) -> bool:
        """Free the subtree; returns False if it was already released."""
        if self._released:
            self.logger.debug("Fragment already released")
            return False
        self._release_tree()
        self.logger.debug("Fragment released")
        return True
