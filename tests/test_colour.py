"""Tests for huescope.core.colour — HSL/Lab conversions and CIEDE2000."""

import numpy as np
import pytest
from huescope.core.colour import (
    delta_e_2000,
    hsl_to_css,
    hsl_to_rgb,
    hue_name,
    rgb_to_hex,
    rgb_to_hsl,
    rgb_to_hsl_array,
    rgb_to_lab,
)


class TestRgbToHsl:
    def test_red(self):
        assert rgb_to_hsl(255, 0, 0) == (0, 100, 50)

    def test_green(self):
        assert rgb_to_hsl(0, 255, 0) == (120, 100, 50)

    def test_blue(self):
        assert rgb_to_hsl(0, 0, 255) == (240, 100, 50)

    def test_grey_is_achromatic(self):
        assert rgb_to_hsl(128, 128, 128) == (0, 0, 50)

    def test_white_and_black(self):
        assert rgb_to_hsl(255, 255, 255) == (0, 0, 100)
        assert rgb_to_hsl(0, 0, 0) == (0, 0, 0)

    def test_dark_blue(self):
        assert rgb_to_hsl(0, 0, 128) == (240, 100, 25)

    def test_hue_rounding_to_360_wraps_to_0(self):
        # h * 360 = 359.76 rounds up to 360
        h, _s, _l = rgb_to_hsl(255, 0, 1)
        assert h == 0

    def test_max_channel_tie_prefers_red(self):
        # r == g is the max: red branch gives 60, green branch would also give 60
        assert rgb_to_hsl(255, 255, 0) == (60, 100, 50)
        # r == b is the max: red branch gives 300
        assert rgb_to_hsl(255, 0, 255) == (300, 100, 50)


class TestHslToRgb:
    def test_red(self):
        assert hsl_to_rgb(0, 100, 50) == (255, 0, 0)

    def test_green(self):
        assert hsl_to_rgb(120, 100, 50) == (0, 255, 0)

    def test_grey_rounds_half_up(self):
        # 0.5 * 255 = 127.5 -> 128
        assert hsl_to_rgb(0, 0, 50) == (128, 128, 128)

    def test_accepts_float_inputs(self):
        assert hsl_to_rgb(0.0, 100.0, 50.0) == (255, 0, 0)


@pytest.mark.parametrize(
    'rgb',
    [
        (255, 0, 0),
        (0, 255, 0),
        (0, 0, 255),
        (255, 255, 0),
        (0, 255, 255),
        (255, 0, 255),
        (255, 128, 0),
        (128, 0, 255),
        (0, 0, 0),
        (51, 51, 51),
        (102, 102, 102),
        (153, 153, 153),
        (204, 204, 204),
        (255, 255, 255),
    ],
)
def test_hsl_round_trip(rgb):
    back = hsl_to_rgb(*rgb_to_hsl(*rgb))
    for original, restored in zip(rgb, back):
        assert abs(original - restored) <= 1


class TestRgbToLab:
    def test_white(self):
        lab = rgb_to_lab(255, 255, 255)
        assert lab == pytest.approx((100.0, 0.0, 0.0), abs=0.01)

    def test_black(self):
        lab = rgb_to_lab(0, 0, 0)
        assert lab == pytest.approx((0.0, 0.0, 0.0), abs=1e-9)

    def test_red(self):
        lab = rgb_to_lab(255, 0, 0)
        assert lab == pytest.approx((53.24, 80.09, 67.20), abs=0.1)

    def test_lightness_increases_along_grey_ramp(self):
        ls = [rgb_to_lab(v, v, v)[0] for v in range(0, 256, 15)]
        assert ls == sorted(ls)


class TestDeltaE2000:
    @pytest.mark.parametrize(
        'lab1, lab2, expected',
        [
            # Sharma, Wu & Dalal (2005) reference pairs
            ((50.0, 2.6772, -79.7751), (50.0, 0.0, -82.7485), 2.0425),
            ((50.0, 0.0, 0.0), (50.0, -1.0, 2.0), 2.3669),
            ((50.0, 2.4900, -0.0010), (50.0, -2.4900, 0.0009), 7.1792),
            ((50.0, 2.4900, -0.0010), (50.0, -2.4900, 0.0010), 7.1792),
            ((50.0, 2.4900, -0.0010), (50.0, -2.4900, 0.0011), 7.2195),
            ((50.0, 2.4900, -0.0010), (50.0, -2.4900, 0.0012), 7.2195),
            ((50.0, -0.0010, 2.4900), (50.0, 0.0009, -2.4900), 4.8045),
            ((50.0, 2.5, 0.0), (73.0, 25.0, -18.0), 27.1492),
            ((50.0, 2.5, 0.0), (50.0, 3.1736, 0.5854), 1.0000),
        ],
    )
    def test_reference_pairs(self, lab1, lab2, expected):
        assert delta_e_2000(lab1, lab2) == pytest.approx(expected, abs=1e-4)

    def test_identical_is_zero(self):
        for lab in [(0.0, 0.0, 0.0), (50.0, 20.0, -30.0), (90.0, -5.0, 60.0)]:
            assert delta_e_2000(lab, lab) == 0.0

    def test_symmetry(self):
        a = rgb_to_lab(200, 40, 90)
        b = rgb_to_lab(40, 180, 220)
        assert delta_e_2000(a, b) == pytest.approx(delta_e_2000(b, a), abs=1e-12)

    def test_non_negative(self):
        rng = np.random.default_rng(3)
        for _ in range(200):
            c1 = tuple(int(v) for v in rng.integers(0, 256, 3))
            c2 = tuple(int(v) for v in rng.integers(0, 256, 3))
            assert delta_e_2000(rgb_to_lab(*c1), rgb_to_lab(*c2)) >= 0

    def test_zero_chroma_pair(self):
        # Both neutral: only lightness contributes
        # Mean lightness 50 makes SL = 1, so the distance is the raw difference
        assert delta_e_2000((40.0, 0.0, 0.0), (60.0, 0.0, 0.0)) == pytest.approx(20.0)


class TestRgbToHslArray:
    def test_matches_scalar(self):
        rng = np.random.default_rng(42)
        rgb = rng.integers(0, 256, size=(2000, 3))
        h, s, l = rgb_to_hsl_array(rgb)
        for i, (r, g, b) in enumerate(rgb):
            assert (h[i], s[i], l[i]) == rgb_to_hsl(int(r), int(g), int(b))

    def test_achromatic_rows(self):
        h, s, l = rgb_to_hsl_array(np.array([[0, 0, 0], [128, 128, 128], [255, 255, 255]]))
        assert h.tolist() == [0, 0, 0]
        assert s.tolist() == [0, 0, 0]
        assert l.tolist() == [0, 50, 100]

    def test_empty(self):
        h, s, l = rgb_to_hsl_array(np.zeros((0, 3)))
        assert len(h) == len(s) == len(l) == 0


class TestNamesAndFormatting:
    def test_hue_names(self):
        assert hue_name(0) == 'red'
        assert hue_name(30) == 'orange'
        assert hue_name(60) == 'yellow'
        assert hue_name(120) == 'green'
        assert hue_name(180) == 'cyan'
        assert hue_name(240) == 'blue'
        assert hue_name(300) == 'purple'
        assert hue_name(345) == 'red'

    def test_hue_name_wraps(self):
        assert hue_name(360) == 'red'

    def test_css(self):
        assert hsl_to_css(200) == 'hsl(200, 80%, 50%)'
        assert hsl_to_css(12.5, 40, 60) == 'hsl(12.5, 40%, 60%)'

    def test_hex(self):
        assert rgb_to_hex(37, 99, 235) == '#2563eb'
