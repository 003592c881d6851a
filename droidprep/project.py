"""Prepare and clean an Android platform project from its descriptor.

``prepare`` runs every step in a fixed order and stops at the first
exception; nothing is rolled back. Every step is idempotent, so running
prepare twice on an unchanged project rewrites no file contents.

Usage:
    report = prepare("/path/to/app")
    for event in report.diagnostics.events(Severity.WARN):
        print(event)
"""

from __future__ import annotations

import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from . import fileupdater, xmltree
from .config.descriptor import ProjectDescriptor
from .config.gradle import (
    GradleConfig,
    GradleProperties,
    gradle_properties_user_config,
    write_gradle_name,
)
from .errors import ResourceNotFoundError
from .events import Diagnostics, Severity
from .manifest import AndroidManifest
from .platform_paths import PLATFORM_NAME, ProjectLocations, relative_to, resolve_platform_dir
from .resources import files as resource_files
from .resources import launcher, splash

DESCRIPTOR_NAME = "config.xml"
LAUNCH_MODES = ("standard", "singleTop", "singleTask", "singleInstance")
DEFAULT_LAUNCH_MODE = "singleTop"
_MAIN_ACTIVITY_RE = re.compile(r"extends\s+CordovaActivity")
_PACKAGE_RE = re.compile(r"package [\w.]*;")


@dataclass
class PrepareReport:
    """Outcome of one prepare/clean run.

    Attributes:
        project_root: Descriptor project root
        platform_root: Android platform root
        diagnostics: Every diagnostic emitted during the run
        package_name: Java package the project was prepared for
        version_code: Version code written to the manifest
        main_activity: Location of the main activity after relocation
        www_updated / icons_updated / resources_updated: Whether the sync changed files
    """
    project_root: Path
    platform_root: Path
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    package_name: Optional[str] = None
    version_code: Optional[int] = None
    main_activity: Optional[Path] = None
    www_updated: bool = False
    icons_updated: bool = False
    resources_updated: bool = False

    @property
    def warnings(self) -> list[str]:
        return self.diagnostics.messages(Severity.WARN)

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_root": str(self.project_root),
            "platform_root": str(self.platform_root),
            "package_name": self.package_name,
            "version_code": self.version_code,
            "main_activity": str(self.main_activity) if self.main_activity else None,
            "www_updated": self.www_updated,
            "icons_updated": self.icons_updated,
            "resources_updated": self.resources_updated,
            "diagnostics": [e.to_dict() for e in self.diagnostics.events()],
        }


def default_version_code(version: str, diagnostics: Optional[Diagnostics] = None) -> int:
    """``major*10000 + minor*100 + patch`` from a dotted version; suffixes after ``-`` ignored."""
    diag = diagnostics or Diagnostics(__name__)
    nums = version.split("-")[0].split(".")
    code = 0
    for weight, part in zip((10000, 100, 1), nums):
        try:
            code += int(part) * weight
        except ValueError:
            continue
    diag.verbose(
        "android-versionCode not found in config.xml. Generating a code based on version in config.xml (%s): %s",
        version, code,
    )
    return code


def find_launch_mode(descriptor: ProjectDescriptor, diagnostics: Optional[Diagnostics] = None) -> str:
    diag = diagnostics or Diagnostics(__name__)
    launch_mode = descriptor.get_preference("AndroidLaunchMode")
    if not launch_mode:
        return DEFAULT_LAUNCH_MODE
    if launch_mode not in LAUNCH_MODES:
        diag.warn(
            "Unrecognized value for AndroidLaunchMode preference: %s. Expected values are: %s",
            launch_mode, ", ".join(LAUNCH_MODES),
        )
    return launch_mode


def android_package_name(descriptor: ProjectDescriptor) -> str:
    # Java packages cannot contain dashes.
    return (descriptor.android_package_name() or descriptor.package_name()).replace("-", "_")


# ------------------------------------------------------------------- steps

def update_config_files(
    project_descriptor: ProjectDescriptor,
    locations: ProjectLocations,
    diag: Diagnostics,
) -> ProjectDescriptor:
    """Reset the platform ``config.xml`` to defaults and merge the project descriptor in."""
    diag.verbose(
        "Generating platform-specific config.xml from defaults for android at %s", locations.config_xml,
    )
    locations.config_xml.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(locations.default_config_xml, locations.config_xml)

    diag.verbose("Merging project's config.xml into platform-specific android config.xml")
    platform_config = ProjectDescriptor(locations.config_xml)
    xmltree.merge_xml(project_descriptor.root, platform_config.root, PLATFORM_NAME, clobber=True)
    platform_config.write()
    return platform_config


def update_www(project_root: Path, locations: ProjectLocations, diag: Diagnostics) -> bool:
    source_dirs = [
        relative_to(project_root / "www", project_root),
        relative_to(locations.platform_www, project_root),
    ]
    merges = project_root / "merges" / PLATFORM_NAME
    if merges.exists():
        diag.verbose('Found "merges/android" folder. Copying its contents into the android project.')
        source_dirs.append(relative_to(merges, project_root))

    target_dir = relative_to(locations.www, project_root)
    diag.verbose("Merging and updating files from [%s] to %s", ", ".join(source_dirs), target_dir)
    return fileupdater.merge_and_update_dir(source_dirs, target_dir, root_dir=project_root, diagnostics=diag)


def clean_www(project_root: Path, locations: ProjectLocations, diag: Diagnostics) -> bool:
    target_dir = relative_to(locations.www, project_root)
    diag.verbose("Cleaning %s", target_dir)
    # No sources, so the whole target directory is cleared.
    return fileupdater.merge_and_update_dir([], target_dir, root_dir=project_root, all=True, diagnostics=diag)


def warn_for_legacy_splash(descriptor: ProjectDescriptor, diag: Diagnostics) -> None:
    if descriptor.has_legacy_splash_tags(PLATFORM_NAME):
        diag.warn(
            'The "<splash>" tags were detected and are no longer supported. '
            'Please migrate to the "preference" tag "AndroidWindowSplashScreenAnimatedIcon".'
        )


def _escape(value: str) -> str:
    return value.replace("'", "\\'")


def update_strings(descriptor: ProjectDescriptor, locations: ProjectLocations, diag: Diagnostics) -> None:
    strings = xmltree.parse(locations.strings)
    root = strings.getroot()
    name = descriptor.name()

    app_name = xmltree.find_named(root, "string", "app_name")
    if app_name is None:
        app_name = xmltree.make_element("string", {"name": "app_name"})
        root.append(app_name)
    app_name.text = _escape(name)

    short_name = descriptor.short_name()
    if short_name and short_name != name:
        launcher_name = xmltree.find_named(root, "string", "launcher_name")
        if launcher_name is None:
            launcher_name = xmltree.make_element("string", {"name": "launcher_name"})
            root.append(launcher_name)
        launcher_name.text = _escape(short_name)

    xmltree.write(strings, locations.strings)
    diag.verbose('Wrote out android application name "%s" to %s', name, locations.strings)


def update_manifest(
    descriptor: ProjectDescriptor,
    locations: ProjectLocations,
    diag: Diagnostics,
) -> int:
    """Apply orientation, launch mode and version; return the version code written."""
    manifest = AndroidManifest(locations.manifest)
    manifest.activity() \
        .set_orientation(descriptor.get_preference("orientation")) \
        .set_launch_mode(find_launch_mode(descriptor, diag))

    version = descriptor.version()
    raw_code = descriptor.android_version_code()
    version_code = int(raw_code) if raw_code.isdigit() else default_version_code(version, diag)
    manifest.set_version_name(version).set_version_code(version_code).write()
    return version_code


def find_main_activity(java_src: Path, diag: Diagnostics) -> Path:
    """First ``*.java`` under *java_src* that extends ``CordovaActivity``.

    Raises:
        ResourceNotFoundError: no such file exists.
    """
    candidates = [
        path for path in sorted(java_src.rglob("*.java"))
        if _MAIN_ACTIVITY_RE.search(path.read_text(encoding="utf-8", errors="replace"))
    ]
    if not candidates:
        raise ResourceNotFoundError("No Java files found that extend CordovaActivity.")
    if len(candidates) > 1:
        diag.log(
            "Multiple candidate Java files that extend CordovaActivity found. Guessing at the first one, %s",
            candidates[0],
        )
    return candidates[0]


def _remove_empty_parents(start: Path, stop: Path) -> None:
    current = start
    while current != stop and stop in current.parents:
        if current.exists() and not any(current.iterdir()):
            current.rmdir()
            current = current.parent
        else:
            break


def relocate_main_activity(java_src: Path, package_name: str, diag: Diagnostics) -> Path:
    """Move the main activity into the directory of *package_name*; return its location."""
    current = find_main_activity(java_src, diag)
    destination = java_src.joinpath(*package_name.split(".")) / current.name
    if str(destination).lower() == str(current).lower():
        return current

    destination.parent.mkdir(parents=True, exist_ok=True)
    diag.verbose("copy %s to %s", current, destination)
    content = current.read_text(encoding="utf-8")
    destination.write_text(_PACKAGE_RE.sub(f"package {package_name};", content, count=1), encoding="utf-8")
    diag.verbose('Wrote out Android package name "%s" to %s', package_name, destination)

    diag.verbose("remove %s", current)
    current.unlink()
    _remove_empty_parents(current.parent, java_src)
    return destination


def update_project(
    descriptor: ProjectDescriptor,
    locations: ProjectLocations,
    project_root: Path,
    report: PrepareReport,
) -> None:
    """Strings, theme, Gradle name and package, manifest and main activity."""
    diag = report.diagnostics
    update_strings(descriptor, locations, diag)
    splash.update_project_theme(descriptor, locations, project_root, PLATFORM_NAME, diag.child(splash.__name__))

    write_gradle_name(locations.gradle_name_file, descriptor.name())

    package_name = android_package_name(descriptor)
    GradleConfig.load(locations.gradle_config_json).set_package_name(package_name).write()
    report.package_name = package_name

    report.version_code = update_manifest(descriptor, locations, diag)
    report.main_activity = relocate_main_activity(locations.java_src, package_name, diag)


# ------------------------------------------------------------ entry points

def _locations(project_root: Path, platform_dir: Optional[str | Path]) -> ProjectLocations:
    return ProjectLocations.for_platform(resolve_platform_dir(project_root, platform_dir))


def prepare(
    project_root: Path | str,
    platform_dir: Optional[str | Path] = None,
    jvmargs: Optional[str] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> PrepareReport:
    """Synchronize the project descriptor into the Android platform project.

    Raises:
        IconValidationError: inconsistent icon declarations.
        ResourceNotFoundError: no main activity or manifest.
        FileSyncError: a declared source file is missing.
    """
    project_root = Path(project_root).resolve()
    locations = _locations(project_root, platform_dir)
    diag = diagnostics or Diagnostics(__name__)
    report = PrepareReport(project_root, locations.root, diag)

    project_descriptor = ProjectDescriptor(project_root / DESCRIPTOR_NAME)
    config = update_config_files(project_descriptor, locations, diag)

    GradleConfig.from_preferences(
        locations.gradle_config_json, config, PLATFORM_NAME, diag.child("droidprep.config.gradle"),
    ).write()
    GradleProperties(locations.gradle_properties).configure(
        gradle_properties_user_config(config, jvmargs, PLATFORM_NAME), diag.child("droidprep.config.gradle"),
    )

    report.www_updated = update_www(project_root, locations, diag.child("droidprep.fileupdater"))
    warn_for_legacy_splash(project_descriptor, diag)
    update_project(config, locations, project_root, report)

    res_dir = relative_to(locations.res, project_root)
    report.icons_updated = launcher.update_icons(
        project_root, project_descriptor.icons(PLATFORM_NAME), res_dir, diag.child(launcher.__name__),
    )
    report.resources_updated = resource_files.update_file_resources(
        project_root,
        project_descriptor.file_resources(PLATFORM_NAME),
        relative_to(locations.root, project_root),
        diag.child(resource_files.__name__),
    )
    diag.verbose("Prepared android project successfully")
    return report


def clean(
    project_root: Path | str,
    platform_dir: Optional[str | Path] = None,
    no_prepare: bool = False,
    diagnostics: Optional[Diagnostics] = None,
) -> PrepareReport:
    """Remove everything prepare copied; skipped when *no_prepare* or never prepared."""
    project_root = Path(project_root).resolve()
    locations = _locations(project_root, platform_dir)
    diag = diagnostics or Diagnostics(__name__)
    report = PrepareReport(project_root, locations.root, diag)

    if no_prepare or not locations.config_xml.exists():
        diag.verbose("Nothing to clean at %s", locations.root)
        return report

    config = ProjectDescriptor(locations.config_xml)
    report.www_updated = clean_www(project_root, locations, diag.child("droidprep.fileupdater"))
    report.icons_updated = launcher.clean_icons(
        project_root, config.icons(PLATFORM_NAME), relative_to(locations.res, project_root),
        diag.child(launcher.__name__),
    )
    report.resources_updated = resource_files.clean_file_resources(
        project_root,
        config.file_resources(PLATFORM_NAME, include_root=True),
        relative_to(locations.root, project_root),
        diag.child(resource_files.__name__),
    )
    return report
