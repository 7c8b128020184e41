"""XML to plain-object conversion.

Children are not forced into lists: a tag that appears once becomes a
single value, a repeated tag becomes a list. Attributes are kept under
"$" and text of an element that also has attributes or children under
"_". Namespaced names keep their document prefix ("georss:point").
"""

import io
import xml.etree.ElementTree as ET
from typing import Any

ATTR_KEY = "$"
TEXT_KEY = "_"


def parse_xml_document(content: str | bytes) -> dict[str, Any]:
    """Parse an XML body into {root_tag: value}.

    Pass the raw response bytes so the encoding named in the XML
    declaration is honoured.

    Raises:
        xml.etree.ElementTree.ParseError: malformed XML
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    prefixes: dict[str, str] = {}
    root: ET.Element | None = None
    for event, payload in ET.iterparse(
        io.BytesIO(content), events=("start-ns", "start")
    ):
        if event == "start-ns":
            prefix, uri = payload
            prefixes.setdefault(uri, prefix)
        elif root is None:
            root = payload

    if root is None:
        raise ET.ParseError("no element found")

    return {_qualified(root.tag, prefixes): _convert(root, prefixes)}


def _convert(element: ET.Element, prefixes: dict[str, str]) -> Any:
    text = (element.text or "").strip()
    children = list(element)

    if not element.attrib and not children:
        return text

    node: dict[str, Any] = {}
    if element.attrib:
        node[ATTR_KEY] = {
            _qualified(key, prefixes): value for key, value in element.attrib.items()
        }

    for child in children:
        key = _qualified(child.tag, prefixes)
        value = _convert(child, prefixes)
        if key not in node:
            node[key] = value
        elif isinstance(node[key], list):
            node[key].append(value)
        else:
            node[key] = [node[key], value]

    if text:
        node[TEXT_KEY] = text
    return node


def _qualified(name: str, prefixes: dict[str, str]) -> str:
    if not name.startswith("{"):
        return name
    uri, local = name[1:].split("}", 1)
    prefix = prefixes.get(uri)
    return f"{prefix}:{local}" if prefix else local
