"""Splash screen theme materialization.

The ``Theme.App.SplashScreen`` style in ``cdv_themes.xml`` is driven by a
fixed table of :class:`ThemeItem` records. Each record names the theme
attribute, the descriptor preference it reads, its literal default and the
resolver that applies it. Resolvers may also touch ``cdv_colors.xml`` and the
splash image drawables.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Protocol

from .. import xmltree
from ..errors import PrepareError
from ..events import Diagnostics
from ..platform_paths import PLATFORM_NAME, ProjectLocations

SPLASH_STYLE_NAME = "Theme.App.SplashScreen"
ICON_BACKGROUND_COLOR_NAME = "cdv_splashscreen_icon_background"
DEFAULT_SPLASH_BACKGROUND = "@color/cdv_splashscreen_background"
BRANDING_KEY = "android:windowSplashScreenBrandingImage"
BRANDING_TARGET_API = "31"

SPLASH_IMAGE_NAMES: dict[str, str] = {
    "windowSplashScreenAnimatedIcon": "ic_cdv_splashscreen",
    BRANDING_KEY: "ic_cdv_splashscreen_branding",
}

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


class PreferenceSource(Protocol):
    def get_preference(self, name: str, platform: Optional[str] = None) -> str: ...


def theme_preference_key(theme_key: str) -> str:
    """``android:windowFooBar`` / ``windowFooBar`` -> ``AndroidWindowFooBar``."""
    name = theme_key.split(":", 1)[-1]
    return "Android" + name[:1].upper() + name[1:]


def parse_edge_to_edge(value: str, diag: Diagnostics) -> bool:
    """Strict boolean parse of ``AndroidEdgeToEdge``; anything odd is False."""
    if not value:
        diag.verbose('The preference name "AndroidEdgeToEdge" was not set. Defaulting to "false".')
        return False
    if value not in ("true", "false"):
        diag.verbose(
            'Preference name "AndroidEdgeToEdge" has an invalid value. '
            'Valid values are "true" or "false". Defaulting to "false"'
        )
        return False
    return value == "true"


@dataclass
class ThemeContext:
    """Everything a theme resolver may read or modify during one run."""
    themes: ET.ElementTree
    style: ET.Element
    locations: ProjectLocations
    project_root: Path
    preferences: PreferenceSource
    platform: str
    diag: Diagnostics

    def item(self, key: str) -> Optional[ET.Element]:
        return xmltree.find_named(self.style, "item", key)

    def ensure_item(self, key: str, attrib: Optional[dict[str, str]] = None) -> ET.Element:
        node = self.item(key)
        if node is None:
            node = xmltree.make_element("item", {"name": key, **(attrib or {})})
            self.style.append(node)
        return node

    def remove_item(self, key: str) -> None:
        node = self.item(key)
        if node is not None:
            self.style.remove(node)


Resolver = Callable[[ThemeContext, "ThemeItem", str], None]


@dataclass(frozen=True)
class ThemeItem:
    """One managed theme attribute.

    Attributes:
        key: ``<item name="...">`` inside the splash style
        preference: descriptor preference read for it
        default: literal value used when the preference is unset
        apply: resolver; None means the key is not handled
        fallbacks: legacy preference names tried in order after ``preference``
    """
    key: str
    preference: str
    default: Optional[str]
    apply: Optional[Resolver]
    fallbacks: tuple[str, ...] = field(default=())

    def read(self, ctx: ThemeContext) -> str:
        for name in (self.preference, *self.fallbacks):
            value = ctx.preferences.get_preference(name, ctx.platform)
            if value:
                return value
        return ""


# ---------------------------------------------------------------- resolvers

def _apply_edge_to_edge(ctx: ThemeContext, item: ThemeItem, raw: str) -> None:
    has_e2e = parse_edge_to_edge(raw, ctx.diag)
    value = "false" if has_e2e else "true"
    ctx.ensure_item(item.key).text = value
    ctx.diag.verbose('Updating theme item "%s" with value "%s"', item.key, value)


def _apply_background(ctx: ThemeContext, item: ThemeItem, raw: str) -> None:
    value = raw or item.default or ""
    ctx.diag.verbose(
        "The Android Splash Screen background color was set to: %s",
        "Default" if value == DEFAULT_SPLASH_BACKGROUND else value,
    )
    ctx.ensure_item(item.key).text = value


def _apply_text(ctx: ThemeContext, item: ThemeItem, raw: str) -> None:
    ctx.ensure_item(item.key).text = raw or item.default


def _apply_animated_icon(ctx: ThemeContext, item: ThemeItem, raw: str) -> None:
    update_splash_image(ctx.locations, ctx.project_root, item.key, item.preference, raw, ctx.diag)


def _apply_branding_image(ctx: ThemeContext, item: ThemeItem, raw: str) -> None:
    if raw:
        ctx.diag.warn(
            '"%s" is currently not supported by the splash screen compatibility library. '
            "https://issuetracker.google.com/issues/194301890",
            item.key,
        )
    update_splash_image(ctx.locations, ctx.project_root, item.key, item.preference, raw, ctx.diag)

    if not raw:
        # Dropping the item also drops the tools namespace declaration.
        ctx.remove_item(item.key)
        return
    node = ctx.ensure_item(item.key, {xmltree.tools_attr("targetApi"): BRANDING_TARGET_API})
    node.text = "@drawable/" + SPLASH_IMAGE_NAMES[item.key]


def _apply_icon_background_color(ctx: ThemeContext, item: ThemeItem, raw: str) -> None:
    update_icon_background_color(raw, ctx.locations.colors, ctx.diag)
    if not raw:
        ctx.remove_item(item.key)
        return
    ctx.ensure_item(item.key).text = "@color/" + ICON_BACKGROUND_COLOR_NAME


def _item(key: str, default: Optional[str], apply: Optional[Resolver], *, preference: Optional[str] = None,
          fallbacks: tuple[str, ...] = ()) -> ThemeItem:
    return ThemeItem(key, preference or theme_preference_key(key), default, apply, fallbacks)


THEME_ITEMS: tuple[ThemeItem, ...] = (
    _item("android:windowOptOutEdgeToEdgeEnforcement", "false", _apply_edge_to_edge,
          preference="AndroidEdgeToEdge"),
    _item("windowSplashScreenBackground", DEFAULT_SPLASH_BACKGROUND, _apply_background,
          fallbacks=("SplashScreenBackgroundColor", "BackgroundColor")),
    _item("windowSplashScreenAnimatedIcon", None, _apply_animated_icon),
    _item("windowSplashScreenAnimationDuration", "200", _apply_text),
    _item(BRANDING_KEY, None, _apply_branding_image),
    _item("windowSplashScreenIconBackgroundColor", None, _apply_icon_background_color),
    _item("postSplashScreenTheme", "@style/Theme.Cordova.App.DayNight", _apply_text),
)


# ------------------------------------------------------------------ helpers

def update_icon_background_color(color: str, colors_path: Path, diag: Diagnostics) -> None:
    """Set or remove the ``cdv_splashscreen_icon_background`` color node.

    A missing colors file is only created when there is a color to write.
    """
    if not color and not colors_path.exists():
        return
    if colors_path.exists():
        colors = xmltree.parse(colors_path)
    else:
        colors = ET.ElementTree(xmltree.make_element("resources"))
    root = colors.getroot()
    current = xmltree.find_named(root, "color", ICON_BACKGROUND_COLOR_NAME)

    if not color and current is not None:
        root.remove(current)
    elif color:
        if current is None:
            current = xmltree.make_element("color", {"name": ICON_BACKGROUND_COLOR_NAME})
            root.append(current)
        current.text = color.replace("'", "\\'")

    colors_path.parent.mkdir(parents=True, exist_ok=True)
    xmltree.write(colors, colors_path)
    diag.verbose("Wrote out Android application SplashScreen Icon Color to %s", colors_path)


def _cleanup_and_set(src: Optional[Path], dest: Path, previous: Path, cleanup_only: bool = False) -> None:
    if previous.exists():
        previous.unlink()
    if cleanup_only and dest.exists():
        dest.unlink()
    if not cleanup_only and src is not None and src.exists():
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(src.read_bytes())


def update_splash_image(
    locations: ProjectLocations,
    project_root: Path,
    theme_key: str,
    preference_key: str,
    value: str = "",
    diagnostics: Optional[Diagnostics] = None,
) -> None:
    """Place the splash image for *theme_key* as a vector or raster drawable.

    ``.png`` goes to ``drawable-nodpi``, ``.xml`` to ``drawable``; the other
    variant is removed. Unset or missing images fall back to the bundled
    default (branding has none and is only cleaned up).
    """
    diag = diagnostics or Diagnostics(__name__)
    dest_name = SPLASH_IMAGE_NAMES.get(theme_key)
    if not dest_name:
        raise PrepareError(f"{theme_key} is not valid for image detection.")

    png_dir = locations.res / "drawable-nodpi"
    xml_dir = locations.res / "drawable"
    dest = xml_dir / f"{dest_name}.xml"
    previous = png_dir / f"{dest_name}.png"

    default_src: Optional[Path] = None
    if theme_key != BRANDING_KEY:
        default_src = TEMPLATES_DIR / "res" / "drawable" / f"{dest_name}.xml"

    src = Path(value) if value else None
    if src is not None and not src.is_absolute():
        src = Path(project_root) / src

    if src is None or not src.exists():
        if value:
            diag.warn('The "%s" value does not exist. Cordova\'s default will be used.', preference_key)
        else:
            diag.verbose('The "%s" is undefined. Cordova\'s default will be used.', preference_key)
        _cleanup_and_set(default_src, dest, previous, cleanup_only=theme_key == BRANDING_KEY)
        return

    ext = src.suffix.lower()
    if ext == ".png":
        dest = png_dir / f"{dest_name}.png"
        previous = xml_dir / f"{dest_name}.xml"
        _cleanup_and_set(src, dest, previous)
    elif ext == ".xml":
        _cleanup_and_set(src, dest, previous)
    else:
        diag.warn('The "%s" had an unsupported extension. Cordova\'s default will be used.', preference_key)
        _cleanup_and_set(default_src, dest, previous)


def update_project_theme(
    preferences: PreferenceSource,
    locations: ProjectLocations,
    project_root: Path | str,
    platform: str = PLATFORM_NAME,
    diagnostics: Optional[Diagnostics] = None,
    items: tuple[ThemeItem, ...] = THEME_ITEMS,
) -> None:
    """Rewrite the splash style of ``cdv_themes.xml`` from descriptor preferences."""
    diag = diagnostics or Diagnostics(__name__)
    themes = xmltree.parse(locations.themes)
    style = xmltree.find_named(themes.getroot(), "style", SPLASH_STYLE_NAME)
    if style is None:
        raise PrepareError(f'Style "{SPLASH_STYLE_NAME}" not found in {locations.themes}')

    ctx = ThemeContext(themes, style, locations, Path(project_root), preferences, platform, diag)
    for item in items:
        if item.apply is None:
            diag.warn('The theme property "%s" does not exist', item.key)
            continue
        item.apply(ctx, item, item.read(ctx))

    xmltree.write(themes, locations.themes)
    diag.verbose("Wrote out Android application themes to %s", locations.themes)
