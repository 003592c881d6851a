"""Minimal ``AndroidManifest.xml`` editor used by prepare."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from . import xmltree
from .errors import ResourceNotFoundError

logger = logging.getLogger(__name__)

LAUNCHER_CATEGORY = "android.intent.category.LAUNCHER"


class ManifestActivity:
    """Chainable setters for one ``<activity>`` element."""

    def __init__(self, element: ET.Element):
        self.element = element

    def _set(self, attr: str, value: Optional[str]) -> "ManifestActivity":
        key = xmltree.android_attr(attr)
        if value:
            self.element.set(key, value)
        else:
            self.element.attrib.pop(key, None)
        return self

    def set_orientation(self, orientation: Optional[str]) -> "ManifestActivity":
        # "default" means let the platform decide.
        if not orientation or orientation.lower() == "default":
            return self._set("screenOrientation", None)
        return self._set("screenOrientation", orientation)

    def set_launch_mode(self, launch_mode: Optional[str]) -> "ManifestActivity":
        return self._set("launchMode", launch_mode)

    @property
    def orientation(self) -> Optional[str]:
        return self.element.get(xmltree.android_attr("screenOrientation"))

    @property
    def launch_mode(self) -> Optional[str]:
        return self.element.get(xmltree.android_attr("launchMode"))


class AndroidManifest:
    def __init__(self, path: Path | str):
        self.path = Path(path)
        if not self.path.exists():
            raise ResourceNotFoundError(f"AndroidManifest.xml not found at {self.path}")
        self.doc = xmltree.parse(self.path)
        if self.doc.getroot().tag != "manifest":
            raise ResourceNotFoundError(f"AndroidManifest at {self.path} has incorrect root node name (expected \"manifest\")")

    @property
    def root(self) -> ET.Element:
        return self.doc.getroot()

    def _activities(self) -> list[ET.Element]:
        application = self.root.find("application")
        if application is None:
            return []
        return application.findall("activity")

    def activity(self) -> ManifestActivity:
        """The launcher activity, or the first activity when none is marked as launcher."""
        activities = self._activities()
        if not activities:
            raise ResourceNotFoundError(f"No <activity> found in {self.path}")
        category_attr = xmltree.android_attr("name")
        for activity in activities:
            for category in activity.iter("category"):
                if category.get(category_attr) == LAUNCHER_CATEGORY:
                    return ManifestActivity(activity)
        return ManifestActivity(activities[0])

    def set_version_name(self, version: str) -> "AndroidManifest":
        self.root.set(xmltree.android_attr("versionName"), version)
        return self

    def set_version_code(self, version_code: int | str) -> "AndroidManifest":
        self.root.set(xmltree.android_attr("versionCode"), str(version_code))
        return self

    @property
    def version_name(self) -> Optional[str]:
        return self.root.get(xmltree.android_attr("versionName"))

    @property
    def version_code(self) -> Optional[str]:
        return self.root.get(xmltree.android_attr("versionCode"))

    def write(self, path: Optional[Path | str] = None) -> None:
        xmltree.write(self.doc, path or self.path)
        logger.debug("Wrote %s", path or self.path)
