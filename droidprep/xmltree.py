"""XML document helpers on top of :mod:`xml.etree.ElementTree`.

Resource descriptors are round-tripped through ElementTree: comments are
kept, the ``android`` and ``tools`` prefixes are registered so serialization
keeps them, and output is indented with four spaces. Namespace declarations
are written on the root element only for namespaces actually in use.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterator, Optional

ANDROID_NS = "http://schemas.android.com/apk/res/android"
TOOLS_NS = "http://schemas.android.com/tools"
WIDGETS_NS = "http://www.w3.org/ns/widgets"
CORDOVA_NS = "http://cordova.apache.org/ns/1.0"

ET.register_namespace("android", ANDROID_NS)
ET.register_namespace("tools", TOOLS_NS)
ET.register_namespace("cdv", CORDOVA_NS)

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'

# Descriptor merge rules: these tags are never merged; singletons replace.
MERGE_BLACKLIST = ("platform", "feature", "plugin", "engine")
MERGE_SINGLETONS = ("content", "author", "name")


def android_attr(name: str) -> str:
    return f"{{{ANDROID_NS}}}{name}"


def tools_attr(name: str) -> str:
    return f"{{{TOOLS_NS}}}{name}"


def parse(path: Path | str) -> ET.ElementTree:
    """Parse *path* keeping comments so rewritten files stay recognisable."""
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    with open(path, "rb") as fh:
        return ET.parse(fh, parser=parser)


def parse_string(text: str) -> ET.Element:
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    parser.feed(text)
    return parser.close()


def iter_children(parent: ET.Element, tag: str, **attrs: str) -> Iterator[ET.Element]:
    """Yield direct children of *parent* with *tag* whose attributes match.

    Keyword names are attribute names; use ``attrs`` dict unpacking for
    namespaced attributes.
    """
    for child in parent:
        if child.tag != tag:
            continue
        if all(child.get(key) == value for key, value in attrs.items()):
            yield child


def find_element(parent: ET.Element, tag: str, **attrs: str) -> Optional[ET.Element]:
    return next(iter_children(parent, tag, **attrs), None)


def find_named(parent: ET.Element, tag: str, name: str) -> Optional[ET.Element]:
    """Shortcut for the ubiquitous ``tag[@name="..."]`` lookup."""
    return find_element(parent, tag, name=name)


def make_element(tag: str, attrib: Optional[dict[str, str]] = None, text: Optional[str] = None) -> ET.Element:
    element = ET.Element(tag, dict(attrib or {}))
    if text is not None:
        element.text = text
    return element


def to_string(root: ET.Element, indent: str = "    ") -> str:
    ET.indent(root, space=indent)
    body = ET.tostring(root, encoding="unicode")
    return XML_DECLARATION + body + "\n"


def write(tree: ET.ElementTree | ET.Element, path: Path | str, indent: str = "    ") -> None:
    root = tree.getroot() if isinstance(tree, ET.ElementTree) else tree
    Path(path).write_text(to_string(root, indent), encoding="utf-8")


def _text_match(a: ET.Element, b: ET.Element) -> bool:
    return (a.text or "").strip() == (b.text or "").strip()


def _attrib_match(a: ET.Element, b: ET.Element) -> bool:
    return a.attrib == b.attrib


def merge_xml(src: ET.Element, dest: ET.Element, platform: Optional[str] = None, clobber: bool = False) -> None:
    """Merge *src* into *dest* in place.

    Children of ``<platform name="<platform>">`` blocks in *src* are merged as
    if they were top-level. Identical children are not duplicated; singleton
    tags are replaced. Duplicate preferences in *dest* collapse to the last
    value seen.
    """
    if src.text and src.text.strip() and (clobber or not (dest.text and dest.text.strip())):
        dest.text = src.text
    for key, value in src.attrib.items():
        if clobber or not dest.get(key):
            dest.set(key, value)

    for child in list(src):
        _merge_child(child, dest, platform, clobber)

    if platform:
        for block in iter_children(src, "platform", name=platform):
            for child in list(block):
                _merge_child(child, dest, platform, clobber)

    _remove_duplicate_preferences(dest)


def _merge_child(src_child: ET.Element, dest: ET.Element, platform: Optional[str], clobber: bool) -> None:
    tag = src_child.tag
    if not isinstance(tag, str) or tag in MERGE_BLACKLIST:
        return

    dest_child = ET.Element(tag)
    should_merge = True
    if tag in MERGE_SINGLETONS:
        found = dest.find(tag)
        if found is not None:
            dest_child = found
            dest.remove(found)
    else:
        candidates = [
            c for c in dest.findall(tag)
            if _text_match(src_child, c) and _attrib_match(src_child, c)
        ]
        if candidates:
            dest_child = candidates[0]
            dest.remove(dest_child)
            should_merge = False

    merge_xml(src_child, dest_child, platform, clobber and should_merge)
    dest.append(dest_child)


def _remove_duplicate_preferences(root: ET.Element) -> None:
    prefs = [p for p in root.findall("preference") if p.get("name") is not None and p.get("value") is not None]
    if len(prefs) < 2:
        return
    names = [p.get("name") for p in prefs]
    if len(set(names)) == len(names):
        return
    merged: dict[str, str] = {}
    for pref in prefs:
        merged[pref.get("name")] = pref.get("value")  # type: ignore[index]
        root.remove(pref)
    for name, value in merged.items():
        ET.SubElement(root, "preference", {"name": name, "value": value})


def strip_default_namespace(root: ET.Element, namespace: str = WIDGETS_NS) -> bool:
    """Drop *namespace* from element tags so plain tag lookups work.

    The declaration is kept as a literal ``xmlns`` attribute on the root so
    the serialized document still carries it. Returns whether anything was
    stripped.
    """
    prefix = f"{{{namespace}}}"
    stripped = False
    for element in root.iter():
        if isinstance(element.tag, str) and element.tag.startswith(prefix):
            element.tag = element.tag[len(prefix):]
            stripped = True
    if stripped:
        root.set("xmlns", namespace)
    return stripped
