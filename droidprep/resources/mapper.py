"""Resource path mapping for density-qualified Android resource directories."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from .icons import RASTER_EXT

NINE_PATCH_EXT = ".9.png"
ADAPTIVE_API_SUFFIX = "-v26"

LAUNCHER_RESOURCE_NAMES: tuple[str, ...] = (
    "ic_launcher.png",
    "ic_launcher_foreground.png",
    "ic_launcher_background.png",
    "ic_launcher_monochrome.png",
    "ic_launcher_foreground.xml",
    "ic_launcher_background.xml",
    "ic_launcher_monochrome.xml",
    "ic_launcher.xml",
)


def _join(*parts: str) -> str:
    return Path(*parts).as_posix()


def source_extension(source_name: str) -> str:
    """Extension to keep for a copied resource; ``.9.png`` stays intact."""
    if source_name.endswith(NINE_PATCH_EXT):
        return NINE_PATCH_EXT
    return os.path.splitext(source_name)[1].lower()


def map_image_resources(
    root_dir: Path | str,
    sub_dir: str,
    type_: str,
    resource_name: str,
) -> dict[str, Optional[str]]:
    """Map *resource_name* in every existing ``<type>-*`` directory to None.

    *sub_dir* is the resource directory relative to *root_dir*; keys are
    relative to *root_dir* as well.
    """
    base = Path(root_dir) / sub_dir
    path_map: dict[str, Optional[str]] = {}
    if not base.is_dir():
        return path_map
    for entry in sorted(base.glob(f"{type_}-*")):
        if entry.is_dir():
            path_map[_join(sub_dir, entry.name, resource_name)] = None
    return path_map


def map_launcher_resources(root_dir: Path | str, res_dir: str) -> dict[str, Optional[str]]:
    """Every launcher icon file this tool manages, marked for deletion."""
    path_map: dict[str, Optional[str]] = {}
    for name in LAUNCHER_RESOURCE_NAMES:
        path_map.update(map_image_resources(root_dir, res_dir, "mipmap", name))
    return path_map


def image_resource_path(
    resources_dir: str,
    type_: str,
    density: Optional[str],
    name: str,
    source_name: str,
) -> str:
    """Target for a legacy resource, e.g. ``res/mipmap-hdpi/ic_launcher.png``."""
    sub_dir = f"{type_}-{density}" if density else type_
    return _join(resources_dir, sub_dir, name + source_extension(source_name))


def adaptive_image_resource_path(
    resources_dir: str,
    type_: str,
    density: Optional[str],
    name: str,
    source_name: str,
) -> str:
    """Target for an adaptive layer, e.g. ``res/mipmap-hdpi-v26/ic_launcher_foreground.png``."""
    if source_name.endswith(NINE_PATCH_EXT) and name.endswith(RASTER_EXT):
        name = name[: -len(RASTER_EXT)] + NINE_PATCH_EXT
    sub_dir = f"{type_}-{density}{ADAPTIVE_API_SUFFIX}" if density else type_
    return _join(resources_dir, sub_dir, name)


def adaptive_descriptor_path(resources_dir: str, density: str) -> str:
    return _join(resources_dir, f"mipmap-{density}{ADAPTIVE_API_SUFFIX}", "ic_launcher.xml")
