"""Dominant hue clusters from peaks of the smoothed hue histogram.

Finds local maxima of the smoothed histogram, bounds each by its valleys,
merges adjacent peaks separated by shallow valleys until at most
--max-peaks remain, then folds clusters whose representative colours are
within CIEDE2000 --delta-e of each other (and 30 degrees of hue). Clusters
holding under 1% of the weight are dropped.

Each cluster reports its peak hue, hue arc (an arc with end < start wraps
past 0 degrees), share of the total weight, weighted-average saturation and
lightness, and the representative colour as hex and CSS hsl().

Example:
    huescope peaks photo.jpg
    huescope peaks photo.jpg --max-peaks 3 --json
"""

from huescope.core.colour import hsl_to_css, hsl_to_rgb, hue_name, rgb_to_hex
from huescope.core.pipeline import analysis_for
from huescope.core.types import HuePeak, ImageSample, Report, Technique

technique = Technique(
    name='peaks',
    help='Dominant hue clusters (peak detection + CIEDE2000 fusion).',
)


def describe(peak: HuePeak, total_weight: float) -> dict:
    """JSON-ready summary of one cluster."""
    rgb = hsl_to_rgb(peak.peak_hue, peak.avg_saturation, peak.avg_lightness)
    pct = peak.total_weight / total_weight * 100 if total_weight > 0 else 0.0
    return {
        'name': hue_name(peak.peak_hue),
        'peak_hue': peak.peak_hue,
        'start_hue': peak.start_hue,
        'end_hue': peak.end_hue,
        'wraps': peak.wraps,
        'segments': [list(s) for s in peak.segments()],
        'peak_value': round(peak.peak_value, 4),
        'total_weight': round(peak.total_weight, 4),
        'weight_pct': round(pct, 1),
        'avg_saturation': round(peak.avg_saturation, 1),
        'avg_lightness': round(peak.avg_lightness, 1),
        'hex': rgb_to_hex(*rgb),
        'css': hsl_to_css(peak.peak_hue, round(peak.avg_saturation), round(peak.avg_lightness)),
    }


@technique.run
def run(sample: ImageSample, report: Report, args) -> None:
    analysis = analysis_for(sample, args)
    total = sum(p.total_weight for p in analysis.peaks)
    clusters = [describe(p, total) for p in analysis.peaks]
    report.add('peaks', {'count': len(clusters), 'clusters': clusters})
