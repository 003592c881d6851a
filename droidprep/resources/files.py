"""Arbitrary ``<resource-file>`` copies declared for the platform."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from .. import fileupdater
from ..events import Diagnostics

if TYPE_CHECKING:
    from ..config.descriptor import ResourceFile


def _resource_map(resources: Iterable["ResourceFile"], platform_dir: str, with_sources: bool) -> dict[str, Optional[str]]:
    return {
        (Path(platform_dir) / res.target).as_posix(): (res.src if with_sources else None)
        for res in resources
    }


def update_file_resources(
    project_root: Path | str,
    resources: list["ResourceFile"],
    platform_dir: str,
    diagnostics: Optional[Diagnostics] = None,
) -> bool:
    """Copy each resource file to ``<platform_dir>/<target>``.

    Raises:
        FileSyncError: a declared source does not exist.
    """
    diag = diagnostics or Diagnostics(__name__)
    if not resources:
        diag.verbose("This app does not have additional resource files defined")
        return False
    diag.verbose("Updating resource files at %s", platform_dir)
    return fileupdater.update_paths(
        _resource_map(resources, platform_dir, True), root_dir=project_root, diagnostics=diag,
    )


def clean_file_resources(
    project_root: Path | str,
    resources: list["ResourceFile"],
    platform_dir: str,
    diagnostics: Optional[Diagnostics] = None,
) -> bool:
    diag = diagnostics or Diagnostics(__name__)
    if not resources:
        return False
    diag.verbose("Cleaning resource files at %s", platform_dir)
    return fileupdater.update_paths(
        _resource_map(resources, platform_dir, False), root_dir=project_root, all=True, diagnostics=diag,
    )
