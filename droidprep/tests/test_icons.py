"""Icon validation and density resolution."""

import pytest

from droidprep.errors import IconValidationError
from droidprep.events import Diagnostics, Severity
from droidprep.resources.icons import (
    IconDeclaration,
    is_color,
    is_raster,
    is_vector,
    prepare_icons,
    resolve_icons,
    validate_icons,
)


def test_layer_classification():
    assert is_color("@color/background")
    assert not is_color("res/bg.png")
    assert is_vector("res/fg.xml")
    assert is_raster("res/fg.png")
    assert not is_raster("res/fg.xml")
    assert not is_vector(None)


def test_background_without_foreground_is_missing_pair():
    with pytest.raises(IconValidationError) as excinfo:
        validate_icons([IconDeclaration(density="mdpi", background="@color/bg")])
    assert excinfo.value.missing_pair == ["mdpi"]
    assert excinfo.value.legacy_needed == []
    assert "missing the other for the density type: mdpi." in str(excinfo.value)


def test_declaration_without_any_source_uses_size_identifier():
    with pytest.raises(IconValidationError) as excinfo:
        validate_icons([IconDeclaration(width="48", height="48")])
    assert excinfo.value.missing_pair == ["size=48"]


def test_color_or_vector_foreground_needs_src():
    icons = [
        IconDeclaration(density="hdpi", background="@color/bg", foreground="@color/fg"),
        IconDeclaration(density="xhdpi", background="@color/bg", foreground="res/fg.xml"),
        IconDeclaration(density="mdpi", background="@color/bg", foreground="res/fg.xml", src="res/mdpi.png"),
    ]
    with pytest.raises(IconValidationError) as excinfo:
        validate_icons(icons)
    assert excinfo.value.legacy_needed == ["hdpi", "xhdpi"]
    assert "For the following icons with the density of: hdpi, xhdpi" in str(excinfo.value)


def test_errors_are_aggregated_across_classes():
    icons = [
        IconDeclaration(density="ldpi", foreground="res/fg.png"),
        IconDeclaration(density="hdpi", background="@color/bg", foreground="@color/fg"),
    ]
    with pytest.raises(IconValidationError) as excinfo:
        validate_icons(icons)
    assert excinfo.value.missing_pair == ["ldpi"]
    assert excinfo.value.legacy_needed == ["hdpi"]


def test_raster_foreground_becomes_legacy_src():
    prepared, has_adaptive = validate_icons(
        [IconDeclaration(density="mdpi", background="@color/bg", foreground="res/fg.png")]
    )
    assert has_adaptive is True
    assert prepared[0].src == "res/fg.png"


def test_legacy_only_icons_are_not_adaptive():
    prepared, has_adaptive = validate_icons([IconDeclaration(density="mdpi", src="res/mdpi.png")])
    assert has_adaptive is False
    assert prepared[0].src == "res/mdpi.png"


def test_size_maps_to_density_and_unknown_sizes_are_dropped():
    resolved = resolve_icons([
        IconDeclaration(src="a.png", width="72"),
        IconDeclaration(src="b.png", height="192"),
        IconDeclaration(src="c.png", width="50"),
    ])
    assert resolved.densities() == ["hdpi", "xxxhdpi"]
    assert resolved.by_density["hdpi"].src == "a.png"


def test_first_declaration_wins_per_density():
    resolved = resolve_icons([
        IconDeclaration(src="platform.png", density="mdpi", platform="android"),
        IconDeclaration(src="generic.png", width="48"),
    ])
    assert resolved.by_density["mdpi"].src == "platform.png"


def test_extra_default_icons_are_logged_and_ignored():
    diag = Diagnostics()
    resolved = resolve_icons(
        [IconDeclaration(src="first.png"), IconDeclaration(src="second.png")],
        diagnostics=diag,
    )
    assert resolved.default.src == "first.png"
    [message] = diag.messages(Severity.VERBOSE)
    assert message == 'Found extra default icon: {"src": "second.png"} and ignoring in favor of {"src": "first.png"}.'


def test_default_only_needs_mdpi_fallback():
    resolved = prepare_icons([IconDeclaration(src="icon.png")])
    assert resolved.needs_mdpi_fallback
    resolved = prepare_icons([IconDeclaration(src="icon.png"), IconDeclaration(src="m.png", density="mdpi")])
    assert not resolved.needs_mdpi_fallback


def test_unparsable_or_zero_sizes_are_dropped_not_default():
    resolved = prepare_icons([
        IconDeclaration(src="bad.png", width="48px"),
        IconDeclaration(src="zero.png", width="0"),
        IconDeclaration(src="default.png"),
    ])
    assert resolved.by_density == {}
    assert resolved.default.src == "default.png"


def test_unparsable_size_kept_in_identifier():
    with pytest.raises(IconValidationError) as excinfo:
        validate_icons([IconDeclaration(width="48px")])
    assert excinfo.value.missing_pair == ["size=48px"]
