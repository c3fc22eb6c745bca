"""Colour space conversions: RGB <-> HSL, RGB -> Lab, and CIEDE2000 distance.

HSL values are integers: hue in [0, 360), saturation and lightness in [0, 100].
Rounding is half-up everywhere so that scalar and vectorised conversions agree.

Lab uses the D65 reference white (X=95.047, Y=100, Z=108.883).
"""

import math

import numpy as np

# D65 reference white, XYZ scaled to 0-100
REF_X = 95.047
REF_Y = 100.0
REF_Z = 108.883

_25_POW_7 = 25.0**7


def _round(x: float) -> int:
    """Round half-up (0.5 -> 1, 2.5 -> 3), not banker's rounding."""
    return int(math.floor(x + 0.5))


def rgb_to_hsl(r: int, g: int, b: int) -> tuple[int, int, int]:
    """RGB (0-255) -> (hue 0-359, saturation 0-100, lightness 0-100)."""
    r /= 255
    g /= 255
    b /= 255

    mx = max(r, g, b)
    mn = min(r, g, b)
    l = (mx + mn) / 2

    h = 0.0
    s = 0.0
    if mx != mn:
        d = mx - mn
        s = d / (2 - mx - mn) if l > 0.5 else d / (mx + mn)
        # Tie-break on the max channel: r, then g, then b
        if mx == r:
            h = ((g - b) / d + (6 if g < b else 0)) / 6
        elif mx == g:
            h = ((b - r) / d + 2) / 6
        else:
            h = ((r - g) / d + 4) / 6

    return _round(h * 360) % 360, _round(s * 100), _round(l * 100)


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> tuple[int, int, int]:
    """HSL (hue degrees, saturation %, lightness %) -> RGB (0-255)."""
    h /= 360
    s /= 100
    l /= 100

    if s == 0:
        r = g = b = l
    else:
        q = l * (1 + s) if l < 0.5 else l + s - l * s
        p = 2 * l - q
        r = _hue_to_channel(p, q, h + 1 / 3)
        g = _hue_to_channel(p, q, h)
        b = _hue_to_channel(p, q, h - 1 / 3)

    return _round(r * 255), _round(g * 255), _round(b * 255)


def _srgb_to_linear(c: float) -> float:
    c /= 255
    return ((c + 0.055) / 1.055) ** 2.4 if c > 0.04045 else c / 12.92


def _lab_f(t: float) -> float:
    return t ** (1 / 3) if t > 0.008856 else 7.787 * t + 16 / 116


def rgb_to_lab(r: int, g: int, b: int) -> tuple[float, float, float]:
    """sRGB (0-255) -> CIE Lab via XYZ (D65)."""
    rr = _srgb_to_linear(r) * 100
    gg = _srgb_to_linear(g) * 100
    bb = _srgb_to_linear(b) * 100

    x = rr * 0.4124564 + gg * 0.3575761 + bb * 0.1804375
    y = rr * 0.2126729 + gg * 0.7151522 + bb * 0.0721750
    z = rr * 0.0193339 + gg * 0.1191920 + bb * 0.9503041

    fx = _lab_f(x / REF_X)
    fy = _lab_f(y / REF_Y)
    fz = _lab_f(z / REF_Z)

    return 116 * fy - 16, 500 * (fx - fy), 200 * (fy - fz)


def delta_e_2000(lab1: tuple[float, float, float], lab2: tuple[float, float, float]) -> float:
    """CIEDE2000 colour difference between two Lab colours (kL = kC = kH = 1).

    0 means identical. Around 2.3 is a just-noticeable difference; the peak
    engine treats anything under 10 as the same dominant hue.
    """
    l1, a1, b1 = lab1
    l2, a2, b2 = lab2
    k_l = k_c = k_h = 1.0

    c1 = math.hypot(a1, b1)
    c2 = math.hypot(a2, b2)
    c_bar = (c1 + c2) / 2
    g = 0.5 * (1 - math.sqrt(c_bar**7 / (c_bar**7 + _25_POW_7)))

    a1p = a1 * (1 + g)
    a2p = a2 * (1 + g)
    c1p = math.hypot(a1p, b1)
    c2p = math.hypot(a2p, b2)

    h1p = math.degrees(math.atan2(b1, a1p)) % 360
    h2p = math.degrees(math.atan2(b2, a2p)) % 360

    dlp = l2 - l1
    dcp = c2p - c1p

    chroma_product = c1p * c2p
    if chroma_product == 0:
        dhp = 0.0
    elif abs(h2p - h1p) <= 180:
        dhp = h2p - h1p
    elif h2p - h1p > 180:
        dhp = h2p - h1p - 360
    else:
        dhp = h2p - h1p + 360

    d_hp = 2 * math.sqrt(chroma_product) * math.sin(math.radians(dhp / 2))
    lbp = (l1 + l2) / 2
    cbp = (c1p + c2p) / 2

    if chroma_product == 0:
        hbp = h1p + h2p
    elif abs(h1p - h2p) <= 180:
        hbp = (h1p + h2p) / 2
    elif h1p + h2p < 360:
        hbp = (h1p + h2p + 360) / 2
    else:
        hbp = (h1p + h2p - 360) / 2

    t = (
        1
        - 0.17 * math.cos(math.radians(hbp - 30))
        + 0.24 * math.cos(math.radians(2 * hbp))
        + 0.32 * math.cos(math.radians(3 * hbp + 6))
        - 0.20 * math.cos(math.radians(4 * hbp - 63))
    )

    sl = 1 + (0.015 * (lbp - 50) ** 2) / math.sqrt(20 + (lbp - 50) ** 2)
    sc = 1 + 0.045 * cbp
    sh = 1 + 0.015 * cbp * t
    rt = (
        -2
        * math.sqrt(cbp**7 / (cbp**7 + _25_POW_7))
        * math.sin(math.radians(60 * math.exp(-(((hbp - 275) / 25) ** 2))))
    )

    tl = dlp / (k_l * sl)
    tc = dcp / (k_c * sc)
    th = d_hp / (k_h * sh)
    # Rotation term can push a near-zero sum fractionally below 0
    return math.sqrt(max(0.0, tl * tl + tc * tc + th * th + rt * tc * th))


def rgb_to_hsl_array(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Vectorised rgb_to_hsl over an (N, 3) array. Returns int arrays (h, s, l)."""
    arr = np.asarray(rgb, dtype=np.float64).reshape(-1, 3) / 255
    r, g, b = arr[:, 0], arr[:, 1], arr[:, 2]

    mx = arr.max(axis=1)
    mn = arr.min(axis=1)
    l = (mx + mn) / 2
    d = mx - mn
    chromatic = d != 0
    # Avoid 0/0 on achromatic pixels; their results are masked out below
    safe_d = np.where(chromatic, d, 1.0)

    denom = np.where(l > 0.5, 2 - mx - mn, mx + mn)
    s = np.where(chromatic, d / np.where(chromatic, denom, 1.0), 0.0)

    h_r = ((g - b) / safe_d + np.where(g < b, 6, 0)) / 6
    h_g = ((b - r) / safe_d + 2) / 6
    h_b = ((r - g) / safe_d + 4) / 6
    h = np.where(mx == r, h_r, np.where(mx == g, h_g, h_b))
    h = np.where(chromatic, h, 0.0)

    hue = np.floor(h * 360 + 0.5).astype(np.int64) % 360
    sat = np.floor(s * 100 + 0.5).astype(np.int64)
    light = np.floor(l * 100 + 0.5).astype(np.int64)
    return hue, sat, light


def hue_name(hue: float) -> str:
    """Plain English name for a hue angle."""
    hue = hue % 360
    if hue < 15:
        return 'red'
    if hue < 45:
        return 'orange'
    if hue < 75:
        return 'yellow'
    if hue < 150:
        return 'green'
    if hue < 210:
        return 'cyan'
    if hue < 270:
        return 'blue'
    if hue < 330:
        return 'purple'
    return 'red'


def hsl_to_css(h: float, s: float = 80, l: float = 50) -> str:
    return f'hsl({h:g}, {s:g}%, {l:g}%)'


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f'#{r:02x}{g:02x}{b:02x}'
