"""huescope: dominant hue clusters from a circular, perceptually weighted hue histogram."""

from huescope.core.colour import delta_e_2000, hsl_to_rgb, rgb_to_hsl, rgb_to_lab
from huescope.core.histogram import combine_histograms, extract_histogram, smooth_circular
from huescope.core.peaks import extract_peaks
from huescope.core.pipeline import Analysis, analyse_pixels
from huescope.core.types import HistogramData, HistogramError, HuePeak

__version__ = '0.1.0'

__all__ = [
    'Analysis',
    'HistogramData',
    'HistogramError',
    'HuePeak',
    'analyse_pixels',
    'combine_histograms',
    'delta_e_2000',
    'extract_histogram',
    'extract_peaks',
    'hsl_to_rgb',
    'rgb_to_hsl',
    'rgb_to_lab',
    'smooth_circular',
]
