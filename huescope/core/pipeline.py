"""End-to-end analysis: pixel buffer -> histogram -> smoothed weights -> hue clusters."""

from dataclasses import dataclass, field

import numpy as np

from huescope.core.histogram import DEFAULT_BINS, DEFAULT_SIGMA, extract_histogram, smooth_circular
from huescope.core.peaks import DEFAULT_MAX_PEAKS, DELTA_E_THRESHOLD, extract_peaks
from huescope.core.types import HistogramData, HuePeak, ImageSample


@dataclass
class Analysis:
    """Result of one image analysis."""

    raw: HistogramData
    smoothed: np.ndarray
    peaks: list[HuePeak] = field(default_factory=list)

    @property
    def bins(self) -> int:
        return self.raw.bins


def analyse_pixels(
    pixels,
    bins: int = DEFAULT_BINS,
    sigma: float = DEFAULT_SIGMA,
    max_peaks: int = DEFAULT_MAX_PEAKS,
    delta_e_threshold: float = DELTA_E_THRESHOLD,
) -> Analysis:
    """Run the full pipeline over a flat RGBA buffer.

    Only the weight array is smoothed. Saturation and lightness sums stay raw,
    so cluster appearance is averaged over real pixels.
    """
    raw = extract_histogram(pixels, bins)
    smoothed = smooth_circular(raw.weight, sigma)
    data = HistogramData(
        weight=smoothed,
        saturation_sum=raw.saturation_sum,
        lightness_sum=raw.lightness_sum,
    )
    peaks = extract_peaks(data, max_peaks=max_peaks, delta_e_threshold=delta_e_threshold)
    return Analysis(raw=raw, smoothed=smoothed, peaks=peaks)


def analysis_for(sample: ImageSample, args) -> Analysis:
    """Analyse sample once per run; later techniques reuse args.analysis."""
    cached = getattr(args, 'analysis', None)
    if cached is None:
        settings = args.settings
        cached = analyse_pixels(
            sample.pixels,
            bins=settings.bins,
            sigma=settings.sigma,
            max_peaks=settings.max_peaks,
            delta_e_threshold=settings.delta_e,
        )
        args.analysis = cached
    return cached
