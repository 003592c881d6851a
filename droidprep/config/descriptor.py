"""Reader for the platform-neutral project descriptor (``config.xml``)."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .. import xmltree
from ..resources.icons import IconDeclaration

logger = logging.getLogger(__name__)

ICON_ATTRIBUTES = ("src", "density", "width", "height", "foreground", "background", "monochrome")


@dataclass(frozen=True)
class ResourceFile:
    """One ``<resource-file src="..." target="..."/>`` entry."""
    src: str
    target: str
    arch: Optional[str] = None


def _node_text(node: Optional[ET.Element]) -> str:
    if node is None or not node.text:
        return ""
    return node.text.strip()


class ProjectDescriptor:
    """Parsed ``config.xml``.

    The widget namespace is stripped from tags on load so lookups use plain
    tag names. ``doc`` is the underlying ElementTree and may be modified and
    written back with :meth:`write`.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.doc: ET.ElementTree = xmltree.parse(self.path)
        xmltree.strip_default_namespace(self.doc.getroot())

    @property
    def root(self) -> ET.Element:
        return self.doc.getroot()

    def _platform_children(self, platform: Optional[str], tag: str) -> list[ET.Element]:
        if not platform:
            return []
        found: list[ET.Element] = []
        for block in xmltree.iter_children(self.root, "platform", name=platform):
            found.extend(xmltree.iter_children(block, tag))
        return found

    # ------------------------------------------------------------ preferences

    @staticmethod
    def _preference_value(elements: list[ET.Element], name: str) -> str:
        wanted = name.lower()
        values = [e.get("value", "") for e in elements if (e.get("name") or "").lower() == wanted]
        # Later declarations override earlier ones.
        return values[-1] if values else ""

    def get_global_preference(self, name: str) -> str:
        return self._preference_value(list(xmltree.iter_children(self.root, "preference")), name)

    def get_platform_preference(self, name: str, platform: str) -> str:
        return self._preference_value(self._platform_children(platform, "preference"), name)

    def get_preference(self, name: str, platform: Optional[str] = None) -> str:
        """Preference value, platform block first; names are case-insensitive.

        Returns an empty string when the preference is not declared.
        """
        value = ""
        if platform:
            value = self.get_platform_preference(name, platform)
        return value or self.get_global_preference(name)

    # -------------------------------------------------------------- resources

    def icons(self, platform: Optional[str] = None) -> list[IconDeclaration]:
        """Icon declarations, those of the *platform* block first."""
        elements = [(e, platform) for e in self._platform_children(platform, "icon")]
        elements += [(e, None) for e in xmltree.iter_children(self.root, "icon")]
        icons: list[IconDeclaration] = []
        for element, owner in elements:
            attrs = {key: element.get(key) or None for key in ICON_ATTRIBUTES}
            icons.append(IconDeclaration(
                platform=owner,
                **attrs,
            ))
        return icons

    def file_resources(self, platform: Optional[str] = None, include_root: bool = False) -> list[ResourceFile]:
        """``<resource-file>`` entries of the *platform* block.

        A merged platform ``config.xml`` has its platform block lifted to the
        top level; pass ``include_root=True`` to read those as well.
        """
        elements = self._platform_children(platform, "resource-file")
        if include_root:
            elements += list(xmltree.iter_children(self.root, "resource-file"))
        resources = []
        for element in elements:
            src, target = element.get("src"), element.get("target")
            if not src or not target:
                logger.warning("Skipping <resource-file> without src or target in %s", self.path)
                continue
            resources.append(ResourceFile(src, target, element.get("arch")))
        return resources

    def has_legacy_splash_tags(self, platform: Optional[str]) -> bool:
        return bool(self._platform_children(platform, "splash"))

    # ----------------------------------------------------------------- widget

    def name(self) -> str:
        return _node_text(self.root.find("name"))

    def short_name(self) -> str:
        node = self.root.find("name")
        short = node.get("short") if node is not None else None
        return short or self.name()

    def version(self) -> str:
        return self.root.get("version", "")

    def android_version_code(self) -> str:
        return self.root.get("android-versionCode", "")

    def package_name(self) -> str:
        return self.root.get("id", "")

    def android_package_name(self) -> str:
        return self.root.get("android-packageName", "")

    def write(self, path: Optional[Path | str] = None) -> None:
        xmltree.write(self.doc, path or self.path)
