#!/usr/bin/env python3
"""
Quick Start Guide for Managed XML.

This example walks through parsing, navigating, editing, querying and
serializing documents, and shows how node handles behave when the tree
they point into changes.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from managed_xml import (
    DocumentFactory,
    FacadeConfig,
    InvalidNodeError,
    NamespaceError,
    NodeType,
    ParseError,
    create_document,
    create_node,
    parse,
)

CATALOG_XML = """<catalog xmlns:bk="urn:books">
  <bk:book id="123" genre="fiction">
    <bk:title>My Book</bk:title>
    <bk:author>John Doe</bk:author>
    <bk:price currency="USD">19.99</bk:price>
  </bk:book>
</catalog>"""


def quick_start_example():
    """Quick start example showing basic usage."""

    print("🚀 QUICK START - Managed XML")
    print("=" * 45)

    # Step 1: Parse a document
    print("\n📄 Step 1: Parsing XML")
    print("-" * 30)

    doc = parse(
        CATALOG_XML,
        namespaces={"bk": "urn:books"},
        config=FacadeConfig().override(parsing__remove_blank_text=True)
    )
    print(f"✅ Parsed document with root <{doc.root.name}>")
    print(f"📊 Summary: {doc.to_dict()['total_elements']} elements")

    # Step 2: Navigate
    print("\n🧭 Step 2: Navigation")
    print("-" * 30)

    book = doc.root.child_by_name("book")
    for child in book.children_of_type(NodeType.ELEMENT):
        print(f"  {child.qualified_name}: {child.value}")
    price = book.child_by_name("price")
    print(f"💰 Price: {price.get_attribute('currency')} {price.value}")

    # Step 3: Query with XPath
    print("\n🔍 Step 3: XPath")
    print("-" * 30)

    with doc.evaluate_xpath("//bk:book/@id") as result:
        print(f"📋 Book ids: {[node.value for node in result]}")
    count = doc.evaluate_xpath("count(//bk:book)").scalar
    print(f"📋 Book count: {count}")

    # Step 4: Edit
    print("\n✏️  Step 4: Editing")
    print("-" * 30)

    book.set_attribute("genre", "mystery")
    book.append_child("isbn", text="978-0000000000")
    doc.root.register_namespace("pub", "urn:publisher")
    doc.root.append_child("pub:imprint", text="Example Press")
    print(f"✅ Namespaces in scope: {doc.root.list_namespaces()}")

    # Step 5: Serialize
    print("\n🔄 Step 5: Output")
    print("-" * 30)

    print(doc.serialize())
    print("\n📋 Book subtree only:")
    print(book.serialize())

    doc.close()
    print(f"\n🎉 Quick start complete!")


def handle_lifetime_example():
    """Example showing how handles react to tree edits."""

    print("\n\n🔗 HANDLE LIFETIME EXAMPLE")
    print("=" * 40)

    doc = parse("<root><a><b/></a><c/></root>")
    a = doc.root.child_by_name("a")
    b = a.first_child

    doc.root.remove_children()
    print(f"  After remove_children: a valid={a.is_valid}, b valid={b.is_valid}")

    try:
        b.name
    except InvalidNodeError as e:
        print(f"  ❌ {e}")

    # Adopting from another document copies; the source stays as it was
    other = parse("<src><item k='v'/></src>")
    adopted = doc.root.append_and_adopt_child(other.root.first_child)
    print(f"  Adopted copy: {adopted.serialize()}")
    print(f"  Source unchanged: {other.serialize()}")

    doc.close()
    other.close()


def building_example():
    """Example showing documents built from scratch."""

    print("\n\n🏗️  BUILDING EXAMPLE")
    print("=" * 35)

    doc = create_document(namespaces={"x": "urn:x"})
    root = doc.set_root(create_node("items"))
    for index in range(3):
        item = root.append_child("item", text=f"Item {index}", namespace="x")
        item.set_attribute("id", str(index))
    print(f"  {doc.serialize()}")

    try:
        root.set_namespace("urn:undeclared")
    except NamespaceError as e:
        print(f"  ❌ {e}")

    factory = DocumentFactory(config=FacadeConfig.pretty())
    for data in ("<ok/>", "<broken>"):
        try:
            factory.parse(data)
        except ParseError as e:
            print(f"  ❌ Parse failed at {e.position}: {e}")
    print(f"  📊 Factory statistics: {factory.statistics}")


def main():
    """Main function."""
    try:
        quick_start_example()
        handle_lifetime_example()
        building_example()

        print(f"\n✅ All examples completed successfully!")
        return 0

    except Exception as e:
        print(f"\n❌ Example failed: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
