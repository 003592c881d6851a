"""Splash screen theme items, image placement and icon background color."""

import pytest

from droidprep import xmltree
from droidprep.events import Diagnostics, Severity
from droidprep.resources import splash
from droidprep.resources.splash import (
    ThemeItem,
    parse_edge_to_edge,
    theme_preference_key,
    update_project_theme,
    update_splash_image,
)


class Prefs:
    def __init__(self, **values):
        self.values = values
        self.platforms = []

    def get_preference(self, name, platform=None):
        self.platforms.append(platform)
        return self.values.get(name, "")


def _items(locations):
    style = xmltree.find_named(xmltree.parse(locations.themes).getroot(), "style", splash.SPLASH_STYLE_NAME)
    return {item.get("name"): item.text for item in style.findall("item")}


def _run(project, diag=None, **prefs):
    diag = diag or Diagnostics()
    update_project_theme(Prefs(**prefs), project.locations, project.root, diagnostics=diag)
    return diag


@pytest.mark.parametrize("key, expected", [
    ("windowSplashScreenAnimatedIcon", "AndroidWindowSplashScreenAnimatedIcon"),
    ("android:windowSplashScreenBrandingImage", "AndroidWindowSplashScreenBrandingImage"),
    ("postSplashScreenTheme", "AndroidPostSplashScreenTheme"),
])
def test_theme_preference_key(key, expected):
    assert theme_preference_key(key) == expected


@pytest.mark.parametrize("value, expected", [("true", True), ("false", False), ("", False), ("yes", False), ("TRUE", False)])
def test_edge_to_edge_is_strict(value, expected):
    assert parse_edge_to_edge(value, Diagnostics()) is expected


def test_defaults(sample_project):
    diag = _run(sample_project)
    items = _items(sample_project.locations)
    assert items["android:windowOptOutEdgeToEdgeEnforcement"] == "true"
    assert items["windowSplashScreenBackground"] == "@color/cdv_splashscreen_background"
    assert items["windowSplashScreenAnimationDuration"] == "200"
    assert items["postSplashScreenTheme"] == "@style/Theme.Cordova.App.DayNight"
    assert "android:windowSplashScreenBrandingImage" not in items
    assert "windowSplashScreenIconBackgroundColor" not in items

    default_icon = sample_project.locations.res / "drawable" / "ic_cdv_splashscreen.xml"
    assert default_icon.read_bytes() == (splash.TEMPLATES_DIR / "res/drawable/ic_cdv_splashscreen.xml").read_bytes()
    assert "xmlns:tools" not in sample_project.locations.themes.read_text()
    assert "The Android Splash Screen background color was set to: Default" in diag.messages(Severity.VERBOSE)
    assert diag.messages(Severity.WARN) == []


def test_platform_is_passed_to_preference_lookup(sample_project):
    prefs = Prefs()
    update_project_theme(prefs, sample_project.locations, sample_project.root, platform="android")
    assert set(prefs.platforms) == {"android"}


def test_edge_to_edge_enabled(sample_project):
    _run(sample_project, AndroidEdgeToEdge="true")
    assert _items(sample_project.locations)["android:windowOptOutEdgeToEdgeEnforcement"] == "false"


def test_background_fallback_chain(sample_project):
    _run(sample_project, BackgroundColor="#000000")
    assert _items(sample_project.locations)["windowSplashScreenBackground"] == "#000000"
    _run(sample_project, BackgroundColor="#000000", SplashScreenBackgroundColor="#111111")
    assert _items(sample_project.locations)["windowSplashScreenBackground"] == "#111111"
    _run(sample_project, BackgroundColor="#000000", AndroidWindowSplashScreenBackground="#222222")
    assert _items(sample_project.locations)["windowSplashScreenBackground"] == "#222222"


def test_custom_duration_and_post_theme(sample_project):
    _run(sample_project, AndroidWindowSplashScreenAnimationDuration="500",
         AndroidPostSplashScreenTheme="@style/Theme.Custom")
    items = _items(sample_project.locations)
    assert items["windowSplashScreenAnimationDuration"] == "500"
    assert items["postSplashScreenTheme"] == "@style/Theme.Custom"


def test_branding_image_toggles_tools_namespace(sample_project):
    sample_project.add_file("res/brand.png", b"brand")
    diag = _run(sample_project, AndroidWindowSplashScreenBrandingImage="res/brand.png")

    text = sample_project.locations.themes.read_text()
    assert 'xmlns:tools="http://schemas.android.com/tools"' in text
    assert 'tools:targetApi="31"' in text
    assert _items(sample_project.locations)["android:windowSplashScreenBrandingImage"] == "@drawable/ic_cdv_splashscreen_branding"
    assert (sample_project.locations.res / "drawable-nodpi" / "ic_cdv_splashscreen_branding.png").read_bytes() == b"brand"
    [warning] = diag.messages(Severity.WARN)
    assert "is currently not supported by the splash screen compatibility library" in warning

    _run(sample_project)
    assert "xmlns:tools" not in sample_project.locations.themes.read_text()
    assert "android:windowSplashScreenBrandingImage" not in _items(sample_project.locations)
    assert not (sample_project.locations.res / "drawable-nodpi" / "ic_cdv_splashscreen_branding.png").exists()


def test_icon_background_color(sample_project):
    _run(sample_project, AndroidWindowSplashScreenIconBackgroundColor="#FF0000")
    colors = xmltree.parse(sample_project.locations.colors).getroot()
    assert xmltree.find_named(colors, "color", "cdv_splashscreen_icon_background").text == "#FF0000"
    assert _items(sample_project.locations)["windowSplashScreenIconBackgroundColor"] == "@color/cdv_splashscreen_icon_background"

    _run(sample_project)
    colors = xmltree.parse(sample_project.locations.colors).getroot()
    assert xmltree.find_named(colors, "color", "cdv_splashscreen_icon_background") is None
    assert xmltree.find_named(colors, "color", "cdv_splashscreen_background") is not None
    assert "windowSplashScreenIconBackgroundColor" not in _items(sample_project.locations)


def test_unset_icon_background_color_does_not_create_colors_file(tmp_path):
    colors = tmp_path / "values" / "cdv_colors.xml"
    splash.update_icon_background_color("", colors, Diagnostics())
    assert not colors.exists()
    splash.update_icon_background_color("#00FF00", colors, Diagnostics())
    node = xmltree.find_named(xmltree.parse(colors).getroot(), "color", "cdv_splashscreen_icon_background")
    assert node.text == "#00FF00"


def test_raster_then_vector_animated_icon(sample_project):
    res = sample_project.locations.res
    sample_project.add_file("res/splash.png", b"png")
    sample_project.add_file("res/splash.xml", "<vector/>")

    _run(sample_project, AndroidWindowSplashScreenAnimatedIcon="res/splash.png")
    assert (res / "drawable-nodpi" / "ic_cdv_splashscreen.png").read_bytes() == b"png"
    assert not (res / "drawable" / "ic_cdv_splashscreen.xml").exists()

    _run(sample_project, AndroidWindowSplashScreenAnimatedIcon="res/splash.xml")
    assert (res / "drawable" / "ic_cdv_splashscreen.xml").read_text() == "<vector/>"
    assert not (res / "drawable-nodpi" / "ic_cdv_splashscreen.png").exists()


def test_missing_or_unsupported_image_falls_back_to_default(sample_project):
    sample_project.add_file("res/splash.gif", b"gif")
    diag = Diagnostics()
    update_splash_image(
        sample_project.locations, sample_project.root, "windowSplashScreenAnimatedIcon",
        "AndroidWindowSplashScreenAnimatedIcon", "res/missing.png", diag,
    )
    update_splash_image(
        sample_project.locations, sample_project.root, "windowSplashScreenAnimatedIcon",
        "AndroidWindowSplashScreenAnimatedIcon", "res/splash.gif", diag,
    )
    assert diag.messages(Severity.WARN) == [
        'The "AndroidWindowSplashScreenAnimatedIcon" value does not exist. Cordova\'s default will be used.',
        'The "AndroidWindowSplashScreenAnimatedIcon" had an unsupported extension. Cordova\'s default will be used.',
    ]
    assert (sample_project.locations.res / "drawable" / "ic_cdv_splashscreen.xml").exists()


def test_unhandled_theme_item_warns(sample_project):
    items = (ThemeItem("windowSomethingNew", "AndroidWindowSomethingNew", None, None),)
    diag = Diagnostics()
    update_project_theme(Prefs(), sample_project.locations, sample_project.root, diagnostics=diag, items=items)
    assert diag.messages(Severity.WARN) == ['The theme property "windowSomethingNew" does not exist']
