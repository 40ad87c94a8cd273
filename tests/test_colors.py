"""Color model and accent normalization"""
import pytest

from music_bar.colors import (
    Color,
    DEFAULT_ACCENT,
    clamp,
    hsl_to_rgb,
    normalize_accent,
    rgb_to_hsl,
)
from music_bar import state


def test_rgb_to_hsl_primaries():
    assert rgb_to_hsl(255, 0, 0) == pytest.approx((0.0, 1.0, 0.5))
    assert rgb_to_hsl(0, 255, 0) == pytest.approx((1 / 3, 1.0, 0.5))
    assert rgb_to_hsl(0, 0, 255) == pytest.approx((2 / 3, 1.0, 0.5))


def test_rgb_to_hsl_grey_has_no_saturation():
    h, s, l = rgb_to_hsl(128, 128, 128)
    assert h == 0 and s == 0
    assert l == pytest.approx(128 / 255)


def test_hsl_to_rgb_inverts_rgb_to_hsl():
    for rgb in [(200, 30, 90), (12, 180, 240), (250, 250, 10)]:
        assert hsl_to_rgb(*rgb_to_hsl(*rgb)) == pytest.approx(rgb)


def test_clamp():
    assert clamp(5, 0, 1) == 1
    assert clamp(-1, 0, 1) == 0
    assert clamp(0.5, 0, 1) == 0.5


def _hue_distance(a, b):
    d = abs(a - b) % 1.0
    return min(d, 1.0 - d)


@pytest.mark.parametrize("rgb", [
    (0, 0, 0),
    (255, 255, 255),
    (128, 128, 128),
    (255, 0, 0),
    (10, 10, 60),
    (250, 240, 235),
    (0, 255, 140),
])
def test_normalize_stays_inside_bands(rgb):
    s_low, s_high = state.SATURATION_BAND
    l_low, l_high = state.LIGHTNESS_BAND
    out = normalize_accent(Color(*rgb))
    h, s, l = rgb_to_hsl(out.r, out.g, out.b)
    assert s_low - 1e-6 <= s <= s_high + 1e-6
    assert l_low - 1e-6 <= l <= l_high + 1e-6


@pytest.mark.parametrize("rgb", [(255, 0, 0), (10, 10, 60), (0, 255, 140), (250, 240, 200)])
def test_normalize_preserves_hue(rgb):
    h_in = rgb_to_hsl(*rgb)[0]
    out = normalize_accent(Color(*rgb))
    assert _hue_distance(rgb_to_hsl(out.r, out.g, out.b)[0], h_in) < 1e-6


def test_normalize_leaves_in_band_color_alone():
    color = Color(*hsl_to_rgb(0.3, 0.6, 0.5))
    out = normalize_accent(color)
    assert (out.r, out.g, out.b) == pytest.approx((color.r, color.g, color.b))


def test_normalize_custom_bands():
    out = normalize_accent(Color(0, 0, 0), saturation_band=(0.0, 0.0), lightness_band=(0.5, 0.5))
    assert out.rounded() == (128, 128, 128)


def test_hex_and_css_rendering():
    color = Color.from_hex("#7c5cff")
    assert color.rounded() == (124, 92, 255)
    assert Color.from_hex("fff").to_hex() == "#ffffff"
    assert Color(10.4, 20.6, 300).to_css() == "rgb(10, 21, 255)"
    assert Color(1, 2, 3).to_css(0.35) == "rgba(1, 2, 3, 0.35)"


def test_from_hex_rejects_garbage():
    with pytest.raises(ValueError):
        Color.from_hex("#12345")


def test_default_accent():
    assert DEFAULT_ACCENT.rounded() == (124, 92, 255)
