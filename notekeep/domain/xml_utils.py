"""Helpers to turn documents into XML bytes and back."""
from __future__ import annotations

import io
import re
import xml.etree.ElementTree as ET
from typing import Any

_ILLEGAL_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def to_element(document: Any) -> ET.Element:
    """
    Normalize a serializable document to its root element.

    Accepts an Element, an ElementTree, or any object exposing to_xml().
    """
    if isinstance(document, ET.ElementTree):
        root = document.getroot()
        if root is None:
            raise ValueError("Empty element tree")
        return root
    if isinstance(document, ET.Element):
        return document
    to_xml = getattr(document, "to_xml", None)
    if callable(to_xml):
        element = to_xml()
        if isinstance(element, ET.Element):
            return element
    raise TypeError(f"Cannot serialize {type(document).__name__} to XML")


def serialize_to_bytes(document: Any) -> bytes:
    root = to_element(document)
    # indent() mutates the tree, work on a copy
    tree = ET.ElementTree(ET.fromstring(ET.tostring(root, encoding="utf-8")))
    ET.indent(tree)
    buffer = io.BytesIO()
    tree.write(buffer, encoding="utf-8", xml_declaration=True)
    return buffer.getvalue()


def load_from_bytes(content: bytes | str) -> ET.Element:
    """Parse XML content; raises ET.ParseError or ValueError on malformed input."""
    if content is None:
        raise ValueError("No content")
    if isinstance(content, str):
        content = content.encode("utf-8")
    if not content.strip():
        raise ValueError("Empty document")
    return ET.fromstring(content)


def sanitize_xml_string(value: str | None) -> str | None:
    """Strip characters which are not allowed in an XML 1.0 document."""
    if value is None:
        return None
    cleaned = value.encode("utf-8", errors="ignore").decode("utf-8", errors="ignore")
    return _ILLEGAL_XML_CHARS.sub("", cleaned)


def canonical(document: Any) -> str:
    """Canonical form of a document, used to compare trees for equivalence."""
    raw = ET.tostring(to_element(document), encoding="unicode")
    return ET.canonicalize(raw, strip_text=True)
