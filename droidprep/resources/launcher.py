"""Launcher icon materialization (adaptive and legacy).

The sync map starts with every launcher file this tool may have written,
marked for deletion. The adaptive pass then assigns layer sources for
``mipmap-<density>-v26`` and writes one adaptive-icon descriptor per density
directly to disk, removing that path from the map so the sync does not
delete it. The legacy pass assigns ``mipmap-<density>/ic_launcher.<ext>``.
Whatever is still mapped to None afterwards is stale and gets removed.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from .. import fileupdater
from ..events import Diagnostics
from .icons import IconDeclaration, ResolvedIconSet, is_color, is_raster, is_vector, prepare_icons
from .mapper import (
    adaptive_descriptor_path,
    adaptive_image_resource_path,
    image_resource_path,
    map_launcher_resources,
)

ADAPTIVE_LAYERS: tuple[str, ...] = ("background", "foreground", "monochrome")
LEGACY_ICON_NAME = "ic_launcher"

SyncMap = dict[str, Optional[str]]


def adaptive_icon_xml(background: str, foreground: str, monochrome: Optional[str] = None) -> str:
    """Render the ``<adaptive-icon>`` descriptor for one density."""
    lines = [
        '<?xml version="1.0" encoding="utf-8"?>',
        '<adaptive-icon xmlns:android="http://schemas.android.com/apk/res/android">',
        f'    <background android:drawable="{background}" />',
        f'    <foreground android:drawable="{foreground}" />',
    ]
    if monochrome:
        lines.append(f'    <monochrome android:drawable="{monochrome}" />')
    lines.append("</adaptive-icon>")
    return "\n".join(lines)


def _layer_entry(
    layer: str,
    value: str,
    density: str,
    res_dir: str,
    diag: Diagnostics,
) -> tuple[str, Optional[tuple[str, str]]]:
    """Classify one layer value.

    Returns the drawable reference for the descriptor and, for file-backed
    layers, the ``(target, source)`` pair to add to the sync map.
    """
    reference = f"@mipmap/ic_launcher_{layer}"
    if layer != "monochrome" and is_color(value):
        return value, None
    if is_vector(value):
        name = f"ic_launcher_{layer}.xml"
    elif is_raster(value):
        name = f"ic_launcher_{layer}.png"
    else:
        diag.warn('Unsupported %s icon "%s" for density %s; expected a .png or .xml file.', layer, value, density)
        return reference, None
    target = adaptive_image_resource_path(res_dir, "mipmap", density, name, os.path.basename(value))
    return reference, (target, value)


def _adaptive_for_density(
    icon: IconDeclaration,
    density: str,
    res_dir: str,
    resource_map: SyncMap,
    diag: Diagnostics,
) -> Optional[str]:
    """Add one density's layers to *resource_map*; return its descriptor XML.

    Returns None when the icon has no full background/foreground pair.
    """
    monochrome = icon.monochrome
    if monochrome and not icon.has_adaptive:
        diag.warn(
            "Monochrome icon found but without adaptive properties.\n"
            "Monochrome icon requires the adaptive background and foreground assets.\n"
            "See https://cordova.apache.org/docs/en/latest/config_ref/images.html fore more information."
        )
        monochrome = None
    if not icon.has_adaptive:
        return None

    values = {"background": icon.background, "foreground": icon.foreground, "monochrome": monochrome}
    references: dict[str, str] = {}
    for layer in ADAPTIVE_LAYERS:
        value = values[layer]
        if not value:
            continue
        references[layer], entry = _layer_entry(layer, value, density, res_dir, diag)
        if entry is not None:
            target, source = entry
            resource_map[target] = source

    return adaptive_icon_xml(references["background"], references["foreground"], references.get("monochrome"))


def map_adaptive_icons(
    resolved: ResolvedIconSet,
    resource_map: SyncMap,
    res_dir: str,
    diagnostics: Optional[Diagnostics] = None,
) -> tuple[SyncMap, dict[str, str]]:
    """Adaptive pass.

    Returns the updated sync map and the descriptors to write, keyed by their
    path relative to the project root. Descriptor paths are removed from the
    sync map.
    """
    diag = diagnostics or Diagnostics(__name__)
    descriptors: dict[str, str] = {}

    for density, icon in resolved.items():
        xml = _adaptive_for_density(icon, density, res_dir, resource_map, diag)
        if xml is None:
            continue
        descriptors[adaptive_descriptor_path(res_dir, density)] = xml

    # There's no "default" mipmap, so assume default == mdpi.
    if resolved.needs_mdpi_fallback:
        default = resolved.default
        assert default is not None
        xml = _adaptive_for_density(default, "mdpi", res_dir, resource_map, diag)
        if xml is not None:
            diag.verbose("Using the default icon for the mdpi adaptive icon.")
            descriptors[adaptive_descriptor_path(res_dir, "mdpi")] = xml

    for path in descriptors:
        resource_map.pop(path, None)
    return resource_map, descriptors


def map_legacy_icons(resolved: ResolvedIconSet, resource_map: SyncMap, res_dir: str) -> SyncMap:
    """Legacy pass: flat ``ic_launcher`` per resolved density (and default)."""
    for density, icon in resolved.items():
        if not icon.src:
            continue
        target = image_resource_path(res_dir, "mipmap", density, LEGACY_ICON_NAME, os.path.basename(icon.src))
        resource_map[target] = icon.src

    if resolved.needs_mdpi_fallback and resolved.default is not None and resolved.default.src:
        src = resolved.default.src
        target = image_resource_path(res_dir, "mipmap", "mdpi", LEGACY_ICON_NAME, os.path.basename(src))
        resource_map[target] = src
    return resource_map


def write_descriptors(project_root: Path | str, descriptors: dict[str, str], diag: Diagnostics) -> bool:
    """Write adaptive-icon descriptors whose content changed; return whether any was written."""
    written = False
    for rel, content in descriptors.items():
        path = Path(project_root) / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists() and path.read_text(encoding="utf-8") == content:
            continue
        path.write_text(content, encoding="utf-8")
        diag.file_op(f"write {rel}")
        written = True
    return written


def update_icons(
    project_root: Path | str,
    icons: list[IconDeclaration],
    res_dir: str,
    diagnostics: Optional[Diagnostics] = None,
) -> bool:
    """Materialize launcher icons under *res_dir* (relative to *project_root*).

    Raises:
        IconValidationError: before any file is touched.
    """
    diag = diagnostics or Diagnostics(__name__)
    if not icons:
        diag.verbose("This app does not have launcher icons defined")
        return False

    resolved = prepare_icons(icons, diag)
    resource_map = map_launcher_resources(project_root, res_dir)

    written = False
    if resolved.has_adaptive:
        resource_map, descriptors = map_adaptive_icons(resolved, resource_map, res_dir, diag)
        written = write_descriptors(project_root, descriptors, diag)

    resource_map = map_legacy_icons(resolved, resource_map, res_dir)

    diag.verbose("Updating icons at %s", res_dir)
    updated = fileupdater.update_paths(resource_map, root_dir=project_root, diagnostics=diag)
    return updated or written


def clean_icons(
    project_root: Path | str,
    icons: list[IconDeclaration],
    res_dir: str,
    diagnostics: Optional[Diagnostics] = None,
) -> bool:
    """Delete every managed launcher file from every ``mipmap-*`` directory."""
    diag = diagnostics or Diagnostics(__name__)
    if not icons:
        diag.verbose("This app does not have launcher icons defined")
        return False

    resource_map = map_launcher_resources(project_root, res_dir)
    diag.verbose("Cleaning icons at %s", res_dir)
    # No sources in the map, so every existing target is deleted.
    return fileupdater.update_paths(resource_map, root_dir=project_root, all=True, diagnostics=diag)
