"""Weighted circular hue histogram and circular Gaussian smoothing.

Pixels that are transparent, near-grey, or near-black/white carry no hue
information and are skipped. The rest are weighted so that saturated,
mid-lightness pixels dominate:

    weight = (s / 100) * (1 - |l - 50| / 50)
"""

import logging
import math
from collections.abc import Iterable

import numpy as np

from huescope.core.colour import rgb_to_hsl_array
from huescope.core.types import HistogramData, HistogramError

logger = logging.getLogger(__name__)

DEFAULT_BINS = 360
DEFAULT_SIGMA = 3.0

MIN_ALPHA = 200
MIN_SATURATION = 10
MIN_LIGHTNESS = 5
MAX_LIGHTNESS = 95


def _as_rgba(pixels) -> np.ndarray:
    """Flat RGBA byte sequence -> (N, 4) uint8 array."""
    if isinstance(pixels, (bytes, bytearray, memoryview)):
        arr = np.frombuffer(pixels, dtype=np.uint8)
    else:
        arr = np.asarray(pixels)
        if arr.size and (arr.min() < 0 or arr.max() > 255):
            raise HistogramError('pixel values must be in 0..255')
        arr = arr.astype(np.uint8, copy=False).ravel()
    if arr.size % 4 != 0:
        raise HistogramError(f'RGBA buffer length must be a multiple of 4, got {arr.size}')
    return arr.reshape(-1, 4)


def extract_histogram(pixels, bins: int = DEFAULT_BINS) -> HistogramData:
    """Build the weighted hue histogram of a flat RGBA pixel buffer.

    Args:
        pixels: bytes, bytearray, sequence of ints, or numpy array of RGBA samples
        bins: number of hue bins covering 0-360 degrees (>= 1)

    Returns:
        Unnormalised HistogramData.

    Raises:
        HistogramError: If bins < 1 or the buffer is not whole RGBA pixels.
    """
    if bins < 1:
        raise HistogramError(f'bins must be >= 1, got {bins}')

    rgba = _as_rgba(pixels)
    rgba = rgba[rgba[:, 3] >= MIN_ALPHA]

    hue, sat, light = rgb_to_hsl_array(rgba[:, :3])
    keep = (sat >= MIN_SATURATION) & (light >= MIN_LIGHTNESS) & (light <= MAX_LIGHTNESS)
    hue, sat, light = hue[keep], sat[keep], light[keep]

    weight = (sat / 100) * (1 - np.abs(light - 50) / 50)
    index = np.floor(hue / (360 / bins)).astype(np.int64) % bins

    data = HistogramData(
        weight=np.bincount(index, weights=weight, minlength=bins),
        saturation_sum=np.bincount(index, weights=sat * weight, minlength=bins),
        lightness_sum=np.bincount(index, weights=light * weight, minlength=bins),
    )
    logger.debug('histogram: %d/%d pixels contributed to %d bins', len(hue), len(rgba), bins)
    return data


def combine_histograms(parts: Iterable[HistogramData]) -> HistogramData:
    """Element-wise sum of partial histograms built over separate pixel chunks."""
    parts = list(parts)
    if not parts:
        raise HistogramError('no histograms to combine')
    bins = parts[0].bins
    for part in parts[1:]:
        if part.bins != bins:
            raise HistogramError(f'cannot combine histograms of {bins} and {part.bins} bins')
    return HistogramData(
        weight=np.sum([p.weight for p in parts], axis=0),
        saturation_sum=np.sum([p.saturation_sum for p in parts], axis=0),
        lightness_sum=np.sum([p.lightness_sum for p in parts], axis=0),
    )


def gaussian_kernel(sigma: float, size: int) -> np.ndarray:
    """Normalised discrete Gaussian of `size` taps, centred on tap size // 2."""
    half = size // 2
    offsets = np.arange(size) - half
    kernel = np.exp(-(offsets**2) / (2 * sigma * sigma))
    return kernel / kernel.sum()


def smooth_circular(values, sigma: float = DEFAULT_SIGMA) -> np.ndarray:
    """Gaussian-smooth a circular series. Indices wrap; total mass is preserved.

    Kernel size is ceil(6 * sigma) forced odd, clipped to the series length.
    sigma == 0 returns an unsmoothed copy.
    """
    arr = np.asarray(values, dtype=np.float64).ravel()
    if sigma < 0:
        raise HistogramError(f'sigma must be >= 0, got {sigma}')
    n = len(arr)
    if n == 0 or sigma == 0:
        return arr.copy()

    size = min(math.ceil(sigma * 6) | 1, n)
    kernel = gaussian_kernel(sigma, size)
    half = size // 2

    result = np.zeros(n)
    for j, k in enumerate(kernel):
        # result[i] += arr[(i + j - half) % n] * k
        result += k * np.roll(arr, half - j)
    return result
