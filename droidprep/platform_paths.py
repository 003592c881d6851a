"""Filesystem layout of a descriptor project and its Android platform.

Goal: keep every path the prepare step touches in one place, so the
materializers only ever receive explicit locations.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

PLATFORM_NAME = "android"
DEFAULT_PLATFORM_DIR = Path("platforms") / PLATFORM_NAME
PLATFORM_DIR_ENV = "DROIDPREP_PLATFORM_DIR"


def relative_to(path: Path, root: Path) -> str:
    """Return *path* relative to *root* as a forward-slash string."""
    return Path(os.path.relpath(Path(path), Path(root))).as_posix()


@dataclass(frozen=True)
class ProjectLocations:
    """Well-known paths inside the Android platform project.

    Attributes:
        root: Platform root (``platforms/android``)
        www: Web assets bundled into the APK
        platform_www: Platform-provided web assets merged into ``www``
        res: Android resource directory
        config_xml: Platform copy of the merged descriptor
        default_config_xml: Pristine platform defaults the descriptor is merged onto
        strings / themes / colors: ``res/values`` descriptors managed here
        manifest: ``AndroidManifest.xml``
        java_src: Java source root
    """
    root: Path
    www: Path
    platform_www: Path
    res: Path
    config_xml: Path
    default_config_xml: Path
    strings: Path
    themes: Path
    colors: Path
    manifest: Path
    java_src: Path

    @classmethod
    def for_platform(cls, root: Path | str) -> "ProjectLocations":
        root = Path(root).resolve()
        main = root / "app" / "src" / "main"
        res = main / "res"
        return cls(
            root=root,
            www=main / "assets" / "www",
            platform_www=root / "platform_www",
            res=res,
            config_xml=res / "xml" / "config.xml",
            default_config_xml=root / "cordova" / "defaults.xml",
            strings=res / "values" / "cdv_strings.xml",
            themes=res / "values" / "cdv_themes.xml",
            colors=res / "values" / "cdv_colors.xml",
            manifest=main / "AndroidManifest.xml",
            java_src=main / "java",
        )

    @property
    def gradle_config_json(self) -> Path:
        return self.root / "cdv-gradle-config.json"

    @property
    def gradle_name_file(self) -> Path:
        return self.root / "cdv-gradle-name.gradle"

    @property
    def gradle_properties(self) -> Path:
        return self.root / "gradle.properties"


def resolve_platform_dir(project_root: Path | str, platform_dir: Optional[str | Path] = None) -> Path:
    """Pick the platform directory: explicit argument, environment, then default."""
    project_root = Path(project_root)
    chosen = platform_dir or os.environ.get(PLATFORM_DIR_ENV) or DEFAULT_PLATFORM_DIR
    path = Path(chosen)
    if not path.is_absolute():
        path = project_root / path
    logger.debug("Platform directory resolved to %s", path)
    return path
