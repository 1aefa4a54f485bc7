"""Per-document prefix to URI table.

The registry is what XPath evaluation binds prefixes from, and the fallback
used when a namespace argument to a node operation names a prefix that is not
declared in the tree.
"""

import re
from typing import Dict, Iterator, Mapping, Optional

from managed_xml.shared import NamespaceError

# The empty prefix denotes the default namespace
DEFAULT_PREFIX = ""

_NCNAME = re.compile(r"^[A-Za-z_][\w.\-]*$")
_RESERVED_PREFIXES = ("xml", "xmlns")


def validate_prefix(prefix: str, allow_default: bool = True) -> str:
    """Check that ``prefix`` can be bound and return it.

    Raises:
        NamespaceError: If the prefix is not an NCName or is reserved
    """
    if not isinstance(prefix, str):
        raise NamespaceError(f"Namespace prefix must be a string, not {type(prefix).__name__}")
    if prefix == DEFAULT_PREFIX:
        if not allow_default:
            raise NamespaceError("The default namespace cannot be used here")
        return prefix
    if not _NCNAME.match(prefix):
        raise NamespaceError(f"Invalid namespace prefix: {prefix!r}")
    if prefix.lower() in _RESERVED_PREFIXES:
        raise NamespaceError(f"Namespace prefix {prefix!r} is reserved")
    return prefix


def validate_uri(uri: str) -> str:
    """Check that ``uri`` is a usable namespace name and return it."""
    if not isinstance(uri, str) or not uri.strip():
        raise NamespaceError("Namespace URI must be a non-empty string")
    return uri


class NamespaceRegistry:
    """Ordered prefix to URI mapping; re-registering a prefix overwrites it.

    Examples:
        >>> registry = NamespaceRegistry({"x": "urn:x"})
        >>> registry.resolve("x")
        'urn:x'
        >>> registry.register("", "urn:default")
        >>> registry.as_mapping()
        {'x': 'urn:x', '': 'urn:default'}
    """

    def __init__(self, namespaces: Optional[Mapping[str, str]] = None) -> None:
        self._bindings: Dict[str, str] = {}
        if namespaces:
            self.update(namespaces)

    def register(self, prefix: str, uri: str) -> None:
        """Bind ``prefix`` to ``uri``, replacing any previous binding."""
        self._bindings[validate_prefix(prefix)] = validate_uri(uri)

    def update(self, namespaces: Mapping[str, str]) -> None:
        """Register several bindings; nothing is applied if any is invalid."""
        validated = {
            validate_prefix(prefix): validate_uri(uri)
            for prefix, uri in namespaces.items()
        }
        self._bindings.update(validated)

    def unregister(self, prefix: str) -> bool:
        """Drop a binding; returns False if the prefix was not registered."""
        return self._bindings.pop(prefix, None) is not None

    def resolve(self, prefix: str) -> Optional[str]:
        """Return the URI bound to ``prefix``, or None."""
        return self._bindings.get(prefix)

    def prefix_for(self, uri: str) -> Optional[str]:
        """Return the first prefix registered for ``uri``, or None."""
        for prefix, bound in self._bindings.items():
            if bound == uri:
                return prefix
        return None

    def as_mapping(self) -> Dict[str, str]:
        """Snapshot of all bindings in registration order."""
        return dict(self._bindings)

    def xpath_namespaces(self) -> Dict[str, str]:
        """Bindings usable in XPath expressions.

        XPath 1.0 has no default namespace for name tests, so the ``""``
        entry is left out.
        """
        return {
            prefix: uri for prefix, uri in self._bindings.items()
            if prefix != DEFAULT_PREFIX
        }

    def copy(self) -> "NamespaceRegistry":
        return NamespaceRegistry(self._bindings)

    def __contains__(self, prefix: object) -> bool:
        return prefix in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __repr__(self) -> str:
        return f"NamespaceRegistry({self._bindings!r})"
