"""Dominant hue extraction from a (smoothed) circular hue histogram.

Stages, in order:

  1. Local maxima. Bin i is a peak when (c > prev and c >= next) or
     (c >= prev and c > next). A flat histogram has no peaks and collapses to
     one cluster covering the whole circle.
  2. Valleys. Each peak's left/right valley is the lowest bin between it and
     the neighbouring peak on that side (first strict minimum reached).
  3. Merge under a cap. While there are more than max_peaks peaks, fold the
     adjacent pair with the highest score
         (valley / lower peak) * (0.5 + 0.5 * (1 - distance / (bins / 2)))
     i.e. shallow valleys between hue-close peaks merge first.
  4. Aggregation. Sum weight, saturation and lightness over each peak's arc.
  5. Perceptual fusion. Clusters within 30 degrees of hue whose reconstructed
     colours are closer than CIEDE2000 10 are folded together.
  6. Filter. Clusters under 1% of the total weight are dropped.

Bin indices are used throughout; hues are converted to degrees only when
HuePeak records are built.
"""

import logging
from dataclasses import dataclass

import numpy as np

from huescope.core.colour import delta_e_2000, hsl_to_rgb, rgb_to_lab
from huescope.core.types import HistogramData, HistogramError, HuePeak

logger = logging.getLogger(__name__)

DEFAULT_MAX_PEAKS = 5
DELTA_E_THRESHOLD = 10.0
HUE_WINDOW = 30.0  # degrees
MIN_WEIGHT_RATIO = 0.01
NEUTRAL_APPEARANCE = 50.0  # avg saturation/lightness of a zero-weight cluster


@dataclass
class LocalPeak:
    """Working record for one local maximum and its bounding valleys."""

    index: int
    value: float
    left_valley: int = -1
    right_valley: int = -1


def find_local_peaks(hist: list[float]) -> list[LocalPeak]:
    n = len(hist)
    peaks = []
    for i in range(n):
        prev = hist[(i - 1) % n]
        curr = hist[i]
        nxt = hist[(i + 1) % n]
        if (curr > prev and curr >= nxt) or (curr >= prev and curr > nxt):
            peaks.append(LocalPeak(index=i, value=curr))
    return peaks


def assign_valleys(peaks: list[LocalPeak], hist: list[float]) -> None:
    """Set left_valley/right_valley on every peak, in place."""
    n = len(hist)
    if len(peaks) == 1:
        # The whole ring belongs to the one peak
        peak = peaks[0]
        peak.left_valley = (peak.index + 1) % n
        peak.right_valley = peak.index
        return

    for i, peak in enumerate(peaks):
        prev_peak = peaks[(i - 1) % len(peaks)]
        next_peak = peaks[(i + 1) % len(peaks)]

        valley, lowest = peak.index, peak.value
        j = (peak.index - 1) % n
        while j != prev_peak.index:
            if hist[j] < lowest:
                valley, lowest = j, hist[j]
            j = (j - 1) % n
        peak.left_valley = valley

        valley, lowest = peak.index, peak.value
        j = (peak.index + 1) % n
        while j != next_peak.index:
            if hist[j] < lowest:
                valley, lowest = j, hist[j]
            j = (j + 1) % n
        peak.right_valley = valley


def _bin_distance(i: int, j: int, n: int) -> int:
    diff = abs(j - i)
    return min(diff, n - diff)


def merge_adjacent_peaks(peaks: list[LocalPeak], hist: list[float], max_peaks: int) -> None:
    """Greedily fold adjacent peaks, in place, until at most max_peaks remain."""
    n = len(hist)
    while len(peaks) > max_peaks:
        best_idx, best_score = -1, -1.0
        for i, curr in enumerate(peaks):
            nxt = peaks[(i + 1) % len(peaks)]
            lower = min(curr.value, nxt.value)
            if lower <= 0:
                continue
            valley_ratio = hist[curr.right_valley] / lower
            closeness = 1 - _bin_distance(curr.index, nxt.index, n) / (n / 2)
            score = valley_ratio * (0.5 + 0.5 * closeness)
            if score > best_score:
                best_idx, best_score = i, score

        if best_idx < 0:
            logger.debug('merge: no scoreable pair left at %d peaks', len(peaks))
            break

        next_idx = (best_idx + 1) % len(peaks)
        curr, nxt = peaks[best_idx], peaks[next_idx]
        if curr.value >= nxt.value:
            curr.right_valley = nxt.right_valley
            del peaks[next_idx]
            logger.debug('merge: bin %d absorbed bin %d (score %.3f)', curr.index, nxt.index, best_score)
        else:
            nxt.left_valley = curr.left_valley
            del peaks[best_idx]
            logger.debug('merge: bin %d absorbed bin %d (score %.3f)', nxt.index, curr.index, best_score)


def _arc_sums(data: HistogramData, start: int, end: int) -> tuple[float, float, float]:
    """Sum the three arrays over bins start..end inclusive, walking forward circularly."""
    n = data.bins
    if start <= end:
        idx = np.arange(start, end + 1)
    else:
        idx = np.concatenate([np.arange(start, n), np.arange(0, end + 1)])
    return (
        float(data.weight[idx].sum()),
        float(data.saturation_sum[idx].sum()),
        float(data.lightness_sum[idx].sum()),
    )


def _make_peak(
    data: HistogramData, start: int, end: int, peak_index: int, peak_value: float, sums: tuple[float, float, float]
) -> HuePeak:
    weight, sat, light = sums
    width = data.bin_width
    return HuePeak(
        start_hue=start * width,
        end_hue=end * width,
        peak_hue=peak_index * width,
        peak_value=float(peak_value),
        total_weight=weight,
        avg_saturation=sat / weight if weight > 0 else NEUTRAL_APPEARANCE,
        avg_lightness=light / weight if weight > 0 else NEUTRAL_APPEARANCE,
    )


def to_hue_peaks(peaks: list[LocalPeak], data: HistogramData) -> list[HuePeak]:
    """Aggregate each peak's [left_valley, right_valley] arc into a HuePeak.

    When a peak's left valley is the same bin as its predecessor's right
    valley, that bin is counted once, by the predecessor. A lone peak whose
    valleys meet therefore covers the whole circle.
    """
    n = data.bins
    result = []
    for i, peak in enumerate(peaks):
        start = peak.left_valley % n
        end = peak.right_valley % n
        if peaks[i - 1].right_valley == peak.left_valley:
            start = (start + 1) % n
        result.append(_make_peak(data, start, end, peak.index, peak.value, _arc_sums(data, start, end)))
    return result


def _hue_diff(h1: float, h2: float) -> float:
    diff = abs(h1 - h2)
    return min(diff, 360 - diff)


def _in_arc(h: float, start: float, end: float) -> bool:
    if start <= end:
        return start <= h <= end
    return h >= start or h <= end


def union_arcs(s1: float, e1: float, s2: float, e2: float) -> tuple[float, float]:
    """Smallest arc covering two hue arcs (degrees, end < start wraps)."""
    if _in_arc(s2, s1, e1) and _in_arc(e2, s1, e1):
        return s1, e1
    if _in_arc(s1, s2, e2) and _in_arc(e1, s2, e2):
        return s2, e2

    span1 = e2 - s1 if s1 <= e2 else 360 - s1 + e2
    span2 = e1 - s2 if s2 <= e1 else 360 - s2 + e1
    if span1 <= span2:
        return s1, e2
    return s2, e1


def _peak_lab(peak: HuePeak) -> tuple[float, float, float]:
    return rgb_to_lab(*hsl_to_rgb(peak.peak_hue, peak.avg_saturation, peak.avg_lightness))


def _fold(target: HuePeak, other: HuePeak) -> HuePeak:
    w1, w2 = target.total_weight, other.total_weight
    total = w1 + w2
    start, end = union_arcs(target.start_hue, target.end_hue, other.start_hue, other.end_hue)
    if total > 0:
        avg_s = (target.avg_saturation * w1 + other.avg_saturation * w2) / total
        avg_l = (target.avg_lightness * w1 + other.avg_lightness * w2) / total
    else:
        avg_s, avg_l = target.avg_saturation, target.avg_lightness
    identity = other if other.peak_value > target.peak_value else target
    return HuePeak(
        start_hue=start,
        end_hue=end,
        peak_hue=identity.peak_hue,
        peak_value=identity.peak_value,
        total_weight=total,
        avg_saturation=avg_s,
        avg_lightness=avg_l,
    )


def fuse_similar(
    peaks: list[HuePeak], delta_e_threshold: float = DELTA_E_THRESHOLD, hue_window: float = HUE_WINDOW
) -> list[HuePeak]:
    """Fold perceptually similar clusters together.

    Order matters: each cluster joins the first accepted cluster that matches,
    so callers pass clusters sorted by peak value, highest first.
    """
    merged: list[HuePeak] = []
    for peak in peaks:
        lab = _peak_lab(peak)
        target = None
        for k, existing in enumerate(merged):
            if _hue_diff(peak.peak_hue, existing.peak_hue) > hue_window:
                continue
            if delta_e_2000(lab, _peak_lab(existing)) < delta_e_threshold:
                target = k
                break

        if target is None:
            merged.append(peak)
        else:
            logger.debug('fuse: hue %g folded into hue %g', peak.peak_hue, merged[target].peak_hue)
            merged[target] = _fold(merged[target], peak)
    return merged


def filter_by_weight(peaks: list[HuePeak], min_ratio: float = MIN_WEIGHT_RATIO) -> list[HuePeak]:
    total = sum(p.total_weight for p in peaks)
    return [p for p in peaks if p.total_weight >= total * min_ratio]


def extract_peaks(
    data: HistogramData,
    max_peaks: int = DEFAULT_MAX_PEAKS,
    delta_e_threshold: float = DELTA_E_THRESHOLD,
    hue_window: float = HUE_WINDOW,
    min_weight_ratio: float = MIN_WEIGHT_RATIO,
) -> list[HuePeak]:
    """Extract the dominant hue clusters of a histogram.

    Args:
        data: histogram, usually with a smoothed weight array
        max_peaks: cap on clusters before fusion and filtering (>= 1)
        delta_e_threshold: CIEDE2000 distance under which clusters fuse
        hue_window: max peak hue difference, in degrees, for fusion
        min_weight_ratio: clusters lighter than this share of the total are dropped

    Returns:
        Clusters ordered by total_weight, heaviest first. Never more than
        max_peaks; empty for a zero-bin histogram.

    Raises:
        HistogramError: If max_peaks < 1.
    """
    if max_peaks < 1:
        raise HistogramError(f'max_peaks must be >= 1, got {max_peaks}')
    n = data.bins
    if n == 0:
        return []

    hist = data.weight.tolist()
    local = find_local_peaks(hist)

    if not local:
        # Flat histogram: one cluster at the first maximum, spanning the whole circle
        top = int(np.argmax(data.weight))
        sums = (
            data.total_weight,
            float(data.saturation_sum.sum()),
            float(data.lightness_sum.sum()),
        )
        logger.debug('peaks: flat histogram, single cluster at bin %d', top)
        return [_make_peak(data, (top + 1) % n, top, top, hist[top], sums)]

    logger.debug('peaks: %d local maxima', len(local))
    assign_valleys(local, hist)
    merge_adjacent_peaks(local, hist, max_peaks)

    clusters = sorted(to_hue_peaks(local, data), key=lambda p: -p.peak_value)
    clusters = fuse_similar(clusters, delta_e_threshold, hue_window)
    clusters = filter_by_weight(clusters, min_weight_ratio)
    clusters.sort(key=lambda p: -p.total_weight)
    logger.debug('peaks: %d clusters after fusion and filtering', len(clusters))
    return clusters
