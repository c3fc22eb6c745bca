"""Shared types for huescope: HistogramData, HuePeak, ImageSample, Technique, Report."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import Any

import numpy as np


class HistogramError(ValueError):
    """Malformed input to the histogram builder, smoother, or peak engine."""


@dataclass
class HistogramData:
    """Three parallel circular arrays indexed by hue bin.

    weight[i] is the accumulated pixel weight of bin i. saturation_sum[i] and
    lightness_sum[i] are weight-scaled sums, so saturation_sum[i] / weight[i]
    is the weighted-average saturation of the bin.
    """

    weight: np.ndarray
    saturation_sum: np.ndarray
    lightness_sum: np.ndarray

    def __post_init__(self) -> None:
        self.weight = np.asarray(self.weight, dtype=np.float64).ravel()
        self.saturation_sum = np.asarray(self.saturation_sum, dtype=np.float64).ravel()
        self.lightness_sum = np.asarray(self.lightness_sum, dtype=np.float64).ravel()
        n = len(self.weight)
        if len(self.saturation_sum) != n or len(self.lightness_sum) != n:
            raise HistogramError(
                'histogram arrays must share one length, got '
                f'weight={n} saturation_sum={len(self.saturation_sum)} lightness_sum={len(self.lightness_sum)}'
            )

    @property
    def bins(self) -> int:
        return len(self.weight)

    @property
    def bin_width(self) -> float:
        """Degrees of hue covered by one bin."""
        return 360 / self.bins if self.bins else 0.0

    @property
    def total_weight(self) -> float:
        return float(self.weight.sum())

    @classmethod
    def empty(cls, bins: int) -> HistogramData:
        return cls(np.zeros(bins), np.zeros(bins), np.zeros(bins))


@dataclass(frozen=True)
class HuePeak:
    """One dominant hue cluster: an arc of the hue circle plus its appearance.

    Hues are in degrees. end_hue < start_hue means the arc wraps past 0.
    """

    start_hue: float
    end_hue: float
    peak_hue: float
    peak_value: float
    total_weight: float
    avg_saturation: float
    avg_lightness: float

    @property
    def wraps(self) -> bool:
        return self.end_hue < self.start_hue

    def segments(self) -> list[tuple[float, float]]:
        """The arc as one or two non-wrapping (start, end) ranges."""
        if self.wraps:
            return [(self.start_hue, 360.0), (0.0, self.end_hue)]
        return [(self.start_hue, self.end_hue)]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ImageSample:
    """A decoded, downsampled image as a flat RGBA byte buffer."""

    path: str
    pixels: bytes
    width: int
    height: int
    original_width: int
    original_height: int

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


class Technique:
    """A self-registering analysis technique.

    Usage in a technique module:

        technique = Technique(name='peaks', help='Extract dominant hue clusters')

        @technique.run
        def run(sample, report, args):
            ...
    """

    def __init__(self, name: str, help: str = ''):
        self.name = name
        self.help = help
        self._run_fn: Callable | None = None

    def run(self, fn: Callable) -> Callable:
        """Decorator to register the run function."""
        self._run_fn = fn
        return fn

    def execute(self, sample: ImageSample, report: Report, args: Any) -> None:
        """Execute the technique's run function."""
        if self._run_fn is None:
            raise RuntimeError(f'Technique {self.name} has no run function')
        self._run_fn(sample, report, args)


@dataclass
class Report:
    """Accumulates results from techniques for text/JSON output."""

    image_path: str = ''
    image_width: int = 0
    image_height: int = 0
    sample_width: int = 0
    sample_height: int = 0
    settings: dict[str, Any] = field(default_factory=dict)
    sections: dict[str, dict[str, Any]] = field(default_factory=dict)

    def add(self, technique_name: str, data: dict[str, Any]) -> None:
        """Add (or replace) one technique's results."""
        self.sections[technique_name] = data

    @classmethod
    def for_sample(cls, sample: ImageSample, settings: dict[str, Any] | None = None) -> Report:
        return cls(
            image_path=sample.path,
            image_width=sample.original_width,
            image_height=sample.original_height,
            sample_width=sample.width,
            sample_height=sample.height,
            settings=dict(settings or {}),
        )
