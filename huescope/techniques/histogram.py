"""Weighted hue histogram of the image, smoothed around the hue circle.

Downsamples the image (default: longest side 256 px, nearest neighbour),
skips transparent, near-grey and near-black/white pixels, and accumulates
the rest into hue bins weighted by saturation and closeness to 50% lightness.
The weights are then Gaussian-smoothed with wrap-around at 0/360 degrees.

Output: total weight, number of non-empty bins, a coarse text strip of the
distribution from 0 to 360 degrees, and the strongest bins.

Example:
    huescope histogram photo.jpg
    huescope histogram photo.jpg --bins 72 --sigma 1.5
"""

import numpy as np

from huescope.core.colour import hue_name
from huescope.core.pipeline import analysis_for
from huescope.core.types import ImageSample, Report, Technique

technique = Technique(
    name='histogram',
    help='Weighted, smoothed hue histogram. Show distribution and strongest bins.',
)

STRIP_BANDS = 36
STRIP_LEVELS = ' ▁▂▃▄▅▆▇█'
TOP_BINS = 5


def _strip(values: np.ndarray, bands: int = STRIP_BANDS) -> str:
    """Render values as one block character per band of the hue circle."""
    if len(values) == 0:
        return ''
    bands = min(bands, len(values))
    totals = np.array([chunk.sum() for chunk in np.array_split(values, bands)])
    peak = totals.max()
    if peak <= 0:
        return STRIP_LEVELS[0] * bands
    top = len(STRIP_LEVELS) - 1
    return ''.join(STRIP_LEVELS[int(round(t / peak * top))] for t in totals)


def _top_bins(values: np.ndarray, bin_width: float, count: int = TOP_BINS) -> list[dict]:
    order = np.argsort(-values, kind='stable')[:count]
    return [
        {'hue': float(i * bin_width), 'name': hue_name(i * bin_width), 'value': round(float(values[i]), 4)}
        for i in order
        if values[i] > 0
    ]


@technique.run
def run(sample: ImageSample, report: Report, args) -> None:
    analysis = analysis_for(sample, args)
    raw, smoothed = analysis.raw, analysis.smoothed

    report.add(
        'histogram',
        {
            'bins': raw.bins,
            'sigma': args.settings.sigma,
            'total_weight': round(raw.total_weight, 4),
            'non_empty_bins': int(np.count_nonzero(raw.weight)),
            'strip': _strip(smoothed),
            'top_bins': _top_bins(smoothed, raw.bin_width),
            'smoothed': [round(float(v), 4) for v in smoothed],
        },
    )
