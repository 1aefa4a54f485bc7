"""Native XML engine layer.

Parsing, serialization, XPath and structural tree edits over ``lxml.etree``.
"""

from .lxml_engine import (
    InputType,
    LxmlEngine,
    check_character_data,
    clark,
    is_element,
    split_tag,
)

__all__ = [
    "InputType",
    "LxmlEngine",
    "check_character_data",
    "clark",
    "is_element",
    "split_tag",
]
