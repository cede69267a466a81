"""Contrast evaluator and hex helpers."""

import pytest

from domain.dtos import Color
from services.contrast import (
    contrast_ratio,
    hex_to_rgb,
    is_hex,
    readable_text_color,
    relative_luminance,
    rgb_to_hex,
    to_color,
)


class TestHexConversion:

    @pytest.mark.parametrize("rgb", [(0, 0, 0), (255, 255, 255), (1, 2, 3), (124, 58, 237), (239, 68, 68)])
    def test_round_trip(self, rgb):
        assert hex_to_rgb(rgb_to_hex(*rgb)) == rgb

    def test_rgb_to_hex_is_uppercase_and_clamped(self):
        assert rgb_to_hex(124, 58, 237) == "#7C3AED"
        assert rgb_to_hex(-5, 300, 10.6) == "#00FF0B"

    def test_shorthand_expands_each_digit(self):
        assert hex_to_rgb("#abc") == (0xAA, 0xBB, 0xCC)
        assert hex_to_rgb("FFF") == (255, 255, 255)

    @pytest.mark.parametrize("bad", ["", "#AB", "#ABCDE", "GGGGGG", "#XYZ123", "#AABBCCDD", None])
    def test_invalid_hex_is_none(self, bad):
        assert hex_to_rgb(bad) is None

    @pytest.mark.parametrize("good", ["#ABC", "#AABBCC", "ABC", "AABBCC", "#aabbcc"])
    def test_is_hex_accepts(self, good):
        assert is_hex(good)

    @pytest.mark.parametrize("bad", ["#AB", "#ABCDE", "GGGGGG", "#ABC\n", "##ABC"])
    def test_is_hex_rejects(self, bad):
        assert not is_hex(bad)

    def test_to_color_accepts_all_forms(self):
        c = Color(18, 52, 86)
        assert to_color("#123456") == c
        assert to_color((18, 52, 86)) == c
        assert to_color(c) is c
        assert to_color((1, 2)) is None
        assert to_color((1, 2, 256)) is None


class TestContrast:

    def test_black_on_white_is_maximum(self):
        assert contrast_ratio("#000000", "#FFFFFF") == 21.0

    def test_identical_colors(self):
        assert contrast_ratio("#FFFFFF", "#FFFFFF") == 1.0

    def test_order_does_not_matter(self):
        assert contrast_ratio("#7C3AED", "#F3F4F6") == contrast_ratio("#F3F4F6", "#7C3AED")

    def test_known_value(self):
        # mid grey on white, the usual 4.5:1 borderline example
        assert contrast_ratio("#767676", "#FFFFFF") == 4.54

    def test_triples_and_hex_agree(self):
        assert contrast_ratio((0, 0, 0), "#fff") == 21.0

    def test_invalid_input_is_not_zero(self):
        assert contrast_ratio("#XYZ123", "#FFFFFF") is None
        assert contrast_ratio("#FFFFFF", "#12") is None

    def test_luminance_bounds(self):
        assert relative_luminance("#000") == 0.0
        assert relative_luminance("#FFF") == pytest.approx(1.0)
        assert relative_luminance("nope") is None

    def test_readable_text_color(self):
        assert readable_text_color("#111111") == "#FFFFFF"
        assert readable_text_color("#EFEFEF") == "#000000"
        with pytest.raises(ValueError):
            readable_text_color("#XYZ")
