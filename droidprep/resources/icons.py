"""Launcher icon declarations and their resolution to density slots.

Two passes over the declarations, in descriptor order:

- validation collects every inconsistent declaration and fails as a whole
  (:class:`~droidprep.errors.IconValidationError`) before anything is written;
- resolution assigns each declaration to a density slot (first writer wins)
  or to the single ``default`` slot used as the mdpi fallback.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from ..errors import IconValidationError
from ..events import Diagnostics

DENSITIES: tuple[str, ...] = ("ldpi", "mdpi", "hdpi", "xhdpi", "xxhdpi", "xxxhdpi")

# http://developer.android.com/design/style/iconography.html
SIZE_TO_DENSITY: dict[int, str] = {
    36: "ldpi",
    48: "mdpi",
    72: "hdpi",
    96: "xhdpi",
    144: "xxhdpi",
    192: "xxxhdpi",
}

COLOR_PREFIX = "@color"
VECTOR_EXT = ".xml"
RASTER_EXT = ".png"


def is_color(value: Optional[str]) -> bool:
    return bool(value) and value.startswith(COLOR_PREFIX)  # type: ignore[union-attr]


def extension(value: str) -> str:
    return os.path.splitext(os.path.basename(value))[1]


def is_vector(value: Optional[str]) -> bool:
    return bool(value) and extension(value) == VECTOR_EXT  # type: ignore[arg-type]


def is_raster(value: Optional[str]) -> bool:
    return bool(value) and extension(value) == RASTER_EXT  # type: ignore[arg-type]


def density_for_size(size: str) -> Optional[str]:
    """Density for a declared pixel size, None when the size is not mapped."""
    try:
        return SIZE_TO_DENSITY.get(int(size))
    except ValueError:
        return None


@dataclass(slots=True)
class IconDeclaration:
    """One ``<icon>`` element of the descriptor.

    ``platform`` is the name of the enclosing ``<platform>`` block, or None
    for generic icons. ``width`` and ``height`` hold the raw attribute text.
    """
    src: Optional[str] = None
    density: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    foreground: Optional[str] = None
    background: Optional[str] = None
    monochrome: Optional[str] = None
    platform: Optional[str] = None

    @property
    def size(self) -> Optional[str]:
        return self.width or self.height

    @property
    def identifier(self) -> str:
        """Name used in error messages: density, else ``size=<h-or-w>``."""
        if self.density:
            return self.density
        return f"size={self.height or self.width}"

    @property
    def has_adaptive(self) -> bool:
        return bool(self.background) and bool(self.foreground)

    def layers(self) -> dict[str, str]:
        """Return the populated src/adaptive attributes, for diagnostics."""
        found: dict[str, str] = {}
        if self.has_adaptive:
            found["background"] = self.background  # type: ignore[assignment]
            found["foreground"] = self.foreground  # type: ignore[assignment]
            if self.monochrome:
                found["monochrome"] = self.monochrome
        if self.src:
            found["src"] = self.src
        return found


@dataclass
class ResolvedIconSet:
    """Icons chosen per density plus the optional density-less default."""
    by_density: dict[str, IconDeclaration] = field(default_factory=dict)
    default: Optional[IconDeclaration] = None
    has_adaptive: bool = False

    def densities(self) -> list[str]:
        """Resolved densities in canonical order."""
        return [d for d in DENSITIES if d in self.by_density] + [
            d for d in self.by_density if d not in DENSITIES
        ]

    def items(self) -> list[tuple[str, IconDeclaration]]:
        return [(d, self.by_density[d]) for d in self.densities()]

    @property
    def needs_mdpi_fallback(self) -> bool:
        return self.default is not None and "mdpi" not in self.by_density


def validate_icons(icons: Iterable[IconDeclaration]) -> tuple[list[IconDeclaration], bool]:
    """Validate declarations and derive implicit legacy sources.

    Returns the (possibly updated) declarations and whether any of them
    declares an adaptive foreground.

    Raises:
        IconValidationError: with every offending identifier, per error class.
    """
    missing_pair: list[str] = []
    legacy_needed: list[str] = []
    has_adaptive = False
    prepared: list[IconDeclaration] = []

    for icon in icons:
        if (
            (icon.background and not icon.foreground)
            or (not icon.background and icon.foreground)
            or (not icon.background and not icon.foreground and not icon.src)
        ):
            missing_pair.append(icon.identifier)

        if icon.foreground:
            has_adaptive = True
            if not icon.src and (is_color(icon.foreground) or is_vector(icon.foreground)):
                legacy_needed.append(icon.identifier)
            elif not icon.src:
                # A raster foreground doubles as the flat icon for old devices.
                icon = replace(icon, src=icon.foreground)
        prepared.append(icon)

    if missing_pair or legacy_needed:
        raise IconValidationError(missing_pair, legacy_needed)
    return prepared, has_adaptive


def resolve_icons(
    icons: Iterable[IconDeclaration],
    *,
    has_adaptive: bool = False,
    diagnostics: Optional[Diagnostics] = None,
) -> ResolvedIconSet:
    """Assign validated declarations to density slots.

    Declared sizes that do not map through :data:`SIZE_TO_DENSITY`, including
    non-numeric ones, are dropped without error.
    """
    diag = diagnostics or Diagnostics(__name__)
    resolved = ResolvedIconSet(has_adaptive=has_adaptive)

    for icon in icons:
        size = icon.size
        if not size and not icon.density:
            if resolved.default is None:
                resolved.default = icon
            else:
                diag.verbose(
                    "Found extra default icon: %s and ignoring in favor of %s.",
                    json.dumps(icon.layers()),
                    json.dumps(resolved.default.layers()),
                )
            continue

        density = icon.density or density_for_size(size)  # type: ignore[arg-type]
        if not density:
            continue
        if density in resolved.by_density:
            continue
        resolved.by_density[density] = icon

    return resolved


def prepare_icons(
    icons: Iterable[IconDeclaration],
    diagnostics: Optional[Diagnostics] = None,
) -> ResolvedIconSet:
    """Validate then resolve; the single entry point used by the materializer."""
    prepared, has_adaptive = validate_icons(icons)
    return resolve_icons(prepared, has_adaptive=has_adaptive, diagnostics=diagnostics)
