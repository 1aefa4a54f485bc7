"""Tests for the lxml-backed native engine."""

import pytest
from lxml import etree

from managed_xml.engine import (
    LxmlEngine,
    check_character_data,
    clark,
    is_element,
    split_tag,
)
from managed_xml.shared import (
    ParseError,
    ParsingConfig,
    SerializationConfig,
    XPathError,
)


class TestHelpers:
    """Test module-level name helpers."""

    def test_split_and_build_clark_names(self) -> None:
        """Test Clark-notation names split and rebuild."""
        assert split_tag("{urn:x}item") == ("urn:x", "item")
        assert split_tag("item") == (None, "item")
        assert clark("urn:x", "item") == "{urn:x}item"
        assert clark(None, "item") == "item"

    def test_is_element(self) -> None:
        """Test comments and PIs are not elements."""
        root = etree.fromstring("<r><!--c--><?pi data?><a/></r>")

        assert is_element(root)
        assert [is_element(child) for child in root] == [False, False, True]

    def test_check_character_data(self) -> None:
        """Test text lxml cannot store is rejected without a live tree."""
        assert check_character_data("plain & <text>") == "plain & <text>"
        with pytest.raises(ValueError):
            check_character_data("bad\x01")
        with pytest.raises(ValueError):
            check_character_data("nul\x00")


class TestParsing:
    """Test LxmlEngine.parse."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engine = LxmlEngine()

    def test_parse_text(self) -> None:
        """Test parsing decoded text."""
        root = self.engine.parse('<root><item id="1">hi</item></root>')

        assert root.tag == "root"
        assert root[0].get("id") == "1"

    def test_parse_text_with_encoding_declaration(self) -> None:
        """Test a declared encoding does not break text input."""
        root = self.engine.parse(
            '<?xml version="1.0" encoding="ISO-8859-1"?><root>café</root>'
        )

        assert root.text == "café"

    def test_parse_bytes_detects_encoding(self) -> None:
        """Test bytes are decoded by the engine."""
        data = '<?xml version="1.0" encoding="ISO-8859-1"?><root>café</root>'
        root = self.engine.parse(data.encode("latin-1"))

        assert root.text == "café"

    def test_parse_malformed_raises_with_diagnostics(self) -> None:
        """Test malformed input raises ParseError carrying diagnostics."""
        with pytest.raises(ParseError) as exc_info:
            self.engine.parse("<root><unclosed></root>")

        assert exc_info.value.diagnostics
        assert exc_info.value.position is not None
        assert isinstance(exc_info.value.__cause__, etree.XMLSyntaxError)

    @pytest.mark.parametrize("data", ["", "   ", b"", b"\n"])
    def test_parse_empty(self, data) -> None:
        """Test empty input raises ParseError."""
        with pytest.raises(ParseError, match="empty"):
            self.engine.parse(data)

    def test_parse_wrong_type(self) -> None:
        """Test non-text input is a programming error."""
        with pytest.raises(TypeError):
            self.engine.parse(42)

    def test_parse_size_limit(self) -> None:
        """Test the configured input size limit."""
        engine = LxmlEngine(ParsingConfig(max_input_size_bytes=10))

        with pytest.raises(ParseError, match="exceeds"):
            engine.parse("<root>" + "x" * 20 + "</root>")

    def test_entities_not_resolved(self) -> None:
        """Test entity references are kept unresolved by default."""
        data = (
            '<!DOCTYPE r [<!ENTITY e "expanded">]>'
            "<r>&e;</r>"
        )
        root = self.engine.parse(data)

        assert len(root) == 1
        assert isinstance(root[0], etree._Entity)

    def test_remove_blank_text(self) -> None:
        """Test whitespace-only text is dropped when configured."""
        engine = LxmlEngine(ParsingConfig(remove_blank_text=True))
        root = engine.parse("<r>\n  <a/>\n</r>")

        assert root.text is None
        assert root[0].tail is None

    def test_recover_mode(self) -> None:
        """Test the recovering parser accepts damaged input."""
        engine = LxmlEngine(ParsingConfig(recover=True))
        root = engine.parse("<root><a>text</root>")

        assert root.tag == "root"


class TestSerialization:
    """Test document and subtree serialization."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engine = LxmlEngine()
        self.config = SerializationConfig()

    def test_serialize_document_without_declaration(self) -> None:
        """Test default document output has no XML declaration."""
        root = self.engine.parse("<a><b>v</b></a>")

        assert self.engine.serialize_document(root, self.config) == "<a><b>v</b></a>"

    def test_serialize_document_keeps_prolog(self) -> None:
        """Test top-level comments survive serialization."""
        root = self.engine.parse("<!--head--><a/>")

        assert self.engine.serialize_document(root, self.config) == "<!--head--><a/>"

    def test_serialize_document_with_declaration(self) -> None:
        """Test the XML declaration names the configured encoding."""
        root = self.engine.parse("<a/>")
        config = SerializationConfig(xml_declaration=True)

        text = self.engine.serialize_document(root, config)
        assert text.startswith("<?xml version='1.0' encoding='utf-8'?>")
        assert text.rstrip().endswith("<a/>")

    def test_serialize_element_minimal_declarations(self) -> None:
        """Test only needed ancestor declarations are emitted."""
        root = self.engine.parse(
            '<r xmlns:x="urn:x" xmlns:y="urn:y"><x:item>hi</x:item>tail</r>'
        )
        item = root[0]

        text = self.engine.serialize_element(item, False, self.config)
        assert text == '<x:item xmlns:x="urn:x">hi</x:item>'

    def test_serialize_element_with_declarations(self) -> None:
        """Test every in-scope declaration is inlined on request."""
        root = self.engine.parse(
            '<r xmlns:x="urn:x" xmlns:y="urn:y"><x:item>hi</x:item></r>'
        )

        text = self.engine.serialize_element(root[0], True, self.config)
        assert 'xmlns:x="urn:x"' in text
        assert 'xmlns:y="urn:y"' in text

    def test_serialize_text_and_attribute(self) -> None:
        """Test escaping of character data and attribute values."""
        assert LxmlEngine.serialize_text("a < b & c") == "a &lt; b &amp; c"
        assert LxmlEngine.serialize_attribute("id", 'say "hi"') == "id='say \"hi\"'"


class TestXPath:
    """Test XPath evaluation."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engine = LxmlEngine()
        self.root = self.engine.parse(
            '<root xmlns:x="urn:x"><x:item id="1">hi</x:item><x:item id="2"/></root>'
        )

    def test_node_set(self) -> None:
        """Test node-set results come back as a list."""
        result = self.engine.evaluate_xpath(self.root, "//x:item", {"x": "urn:x"})

        assert len(result) == 2

    def test_scalar(self) -> None:
        """Test scalar results come back unwrapped."""
        result = self.engine.evaluate_xpath(self.root, "count(//x:item)", {"x": "urn:x"})

        assert result == 2.0

    def test_attribute_smart_strings(self) -> None:
        """Test attribute matches know their parent."""
        result = self.engine.evaluate_xpath(self.root, "//x:item/@id", {"x": "urn:x"})

        assert result[0].is_attribute
        assert result[0].getparent() is self.root[0]

    def test_unbound_prefix(self) -> None:
        """Test an unbound prefix raises XPathError."""
        with pytest.raises(XPathError) as exc_info:
            self.engine.evaluate_xpath(self.root, "//y:item", {})

        assert exc_info.value.expression == "//y:item"

    @pytest.mark.parametrize("expression", ["//[", "", "   "])
    def test_invalid_expression(self, expression) -> None:
        """Test invalid expressions raise XPathError."""
        with pytest.raises(XPathError):
            self.engine.evaluate_xpath(self.root, expression, {})


class TestTreeEdits:
    """Test low-level tree-edit primitives."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engine = LxmlEngine()

    def test_create_and_append(self) -> None:
        """Test element creation with text."""
        root = self.engine.create_element("a")
        child = self.engine.append_element(root, "b", text="v")

        assert child.getparent() is root
        assert etree.tostring(root, encoding="unicode") == "<a><b>v</b></a>"

    def test_copy_subtree_drops_tail(self) -> None:
        """Test a copy is standalone and has no tail."""
        root = self.engine.parse("<r><a><b/></a>tail</r>")

        duplicate = self.engine.copy_subtree(root[0])
        assert duplicate.getparent() is None
        assert duplicate.tail is None
        assert root[0].tail == "tail"

    def test_move_element_leaves_tail_behind(self) -> None:
        """Test moving an element keeps its tail text in place."""
        root = self.engine.parse("<r><a/>one<b/>two<c/></r>")
        b = root[1]

        self.engine.move_element(b, root[2])

        assert etree.tostring(root, encoding="unicode") == "<r><a/>onetwo<c><b/></c></r>"

    def test_remove_children(self) -> None:
        """Test all children and leading text are removed."""
        root = self.engine.parse("<r>lead<a/>tail<b/></r>")

        removed = self.engine.remove_children(root)
        assert len(removed) == 2
        assert etree.tostring(root, encoding="unicode") == "<r/>"

    def test_replace_content_is_atomic(self) -> None:
        """Test invalid text leaves the children in place."""
        root = self.engine.parse("<r><a/></r>")

        with pytest.raises(ValueError):
            self.engine.replace_content(root, "bad\x00text")
        assert len(root) == 1

        self.engine.replace_content(root, "new")
        assert etree.tostring(root, encoding="unicode") == "<r>new</r>"

    def test_attributes(self) -> None:
        """Test attribute get/set/remove."""
        root = self.engine.create_element("a")

        self.engine.set_attribute(root, "id", "1")
        assert self.engine.get_attribute(root, "id") == "1"
        assert self.engine.remove_attribute(root, "id") is True
        assert self.engine.remove_attribute(root, "id") is False
        assert self.engine.get_attribute(root, "id", "none") == "none"

    def test_text_content_skips_comments(self) -> None:
        """Test text content concatenates text but not comments."""
        root = self.engine.parse("<r>a<!--skip-->b<c>c</c>d</r>")

        assert LxmlEngine.text_content(root) == "abcd"


class TestNamespaces:
    """Test namespace scope and redeclaration."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engine = LxmlEngine()

    def test_scope_merges_ancestors(self) -> None:
        """Test in-scope bindings include ancestor declarations."""
        root = self.engine.parse('<r xmlns:x="urn:x"><a xmlns:y="urn:y"/></r>')

        assert self.engine.namespaces_in_scope(root[0]) == {"x": "urn:x", "y": "urn:y"}
        assert self.engine.own_namespaces(root[0]) == {"y": "urn:y"}

    def test_redeclare_nested_element(self) -> None:
        """Test redeclaring replaces the element in place."""
        root = self.engine.parse('<r><a id="1">text<b/></a>tail</r>')
        a = root[0]

        replacement = self.engine.redeclare(a, {"p": "urn:p"})

        assert replacement is not a
        assert root[0] is replacement
        assert replacement.get("id") == "1"
        assert replacement.text == "text"
        assert replacement.tail == "tail"
        assert replacement[0].tag == "b"
        assert replacement.nsmap == {"p": "urn:p"}

    def test_redeclare_root_is_unlinked(self) -> None:
        """Test a root replacement is returned for the caller to install."""
        root = self.engine.parse("<r><a/></r>")

        replacement = self.engine.redeclare(root, {None: "urn:d"})

        assert replacement.getparent() is None
        assert replacement.nsmap == {None: "urn:d"}
        assert len(replacement) == 1

    def test_redeclare_noop(self) -> None:
        """Test nothing is rebuilt when the binding is already in scope."""
        root = self.engine.parse('<r xmlns:x="urn:x"><a/></r>')

        assert self.engine.redeclare(root[0], {"x": "urn:x"}) is root[0]

    def test_transfer_top_level_siblings(self) -> None:
        """Test prolog and epilog nodes are copied in order."""
        root = self.engine.parse("<!--one--><?two data?><r/><!--three-->")
        new_root = self.engine.create_element("n")

        transferred = self.engine.transfer_top_level_siblings(root, new_root)

        text = etree.tostring(new_root.getroottree(), encoding="unicode")
        assert text == "<!--one--><?two data?><n/><!--three-->"
        assert len(transferred) == 3
        for original, duplicate in transferred:
            assert original is not duplicate
            assert original.text == duplicate.text
        assert self.engine.top_level_siblings(new_root) == [
            duplicate for _, duplicate in transferred
        ]

    def test_top_level_siblings(self) -> None:
        """Test prolog and epilog nodes are listed in document order."""
        root = self.engine.parse("<!--one--><?two data?><r><!--in--></r><!--three-->")

        siblings = self.engine.top_level_siblings(root)

        assert [node.text for node in siblings] == ["one", "data", "three"]
        assert self.engine.top_level_siblings(root[0]) == []
