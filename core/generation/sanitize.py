"""Strip executable content from generated SVG artifacts."""

import logging
import re

from lxml import etree

from .errors import GenerationFailedError

logger = logging.getLogger(__name__)

_REMOVED_ELEMENTS = {"script", "foreignobject"}
_ANIMATION_ELEMENTS = {"animate", "set"}
_LINK_ATTRIBUTES = {"href"}
# Browsers ignore whitespace and control characters inside a URL scheme
_URL_NOISE = re.compile(r"[\x00-\x20\x7f]+")


def _local_name(name: str) -> str:
    """Lowercase local part of a tag or attribute name ({ns}name or prefix:name)."""
    return name.rsplit("}", 1)[-1].rsplit(":", 1)[-1].lower()


def _is_javascript_url(value: str) -> bool:
    return _URL_NOISE.sub("", value).lower().startswith("javascript:")


def _should_drop(element: etree._Element) -> bool:
    name = _local_name(element.tag)
    if name in _REMOVED_ELEMENTS:
        return True
    if name in _ANIMATION_ELEMENTS:
        target = element.get("attributeName") or ""
        return _local_name(target.strip()) in _LINK_ATTRIBUTES
    return False


def _drop(element: etree._Element) -> None:
    """Remove an element and its subtree, keeping the text that follows it."""
    parent = element.getparent()
    if element.tail:
        previous = element.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + element.tail
        else:
            parent.text = (parent.text or "") + element.tail
    parent.remove(element)


def _clean_attributes(element: etree._Element) -> None:
    for name, value in list(element.attrib.items()):
        local = _local_name(name)
        if local.startswith("on") or (
            local in _LINK_ATTRIBUTES and _is_javascript_url(value)
        ):
            del element.attrib[name]


def sanitize_svg(svg: str) -> str:
    """Remove scripts, foreignObject islands, event handlers and javascript: links.

    The markup is parsed as XML, so attribute values are seen after entity
    and character-reference decoding. Entities are never expanded from a
    DTD and nothing is fetched over the network.

    Args:
        svg: Raw SVG markup from the generation service

    Returns:
        SVG markup safe to embed in a page

    Raises:
        GenerationFailedError: If the artifact is not well-formed XML
    """
    if not svg.strip():
        raise GenerationFailedError("Invalid SVG artifact: empty document")

    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(svg.encode(), parser)
    except etree.XMLSyntaxError as e:
        logger.warning(f"Artifact is not well-formed SVG: {e}")
        raise GenerationFailedError(f"Invalid SVG artifact: {e}") from e

    if _should_drop(root):
        raise GenerationFailedError("SVG artifact has no renderable root element")

    for element in list(root.iter()):
        # Comments and processing instructions carry no attributes
        if not isinstance(element.tag, str):
            continue
        if element is not root and _should_drop(element):
            _drop(element)
            continue
        _clean_attributes(element)

    return etree.tostring(root, encoding="unicode")
