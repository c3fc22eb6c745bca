"""Report builder — text and JSON output for huescope results."""

import json
from typing import Any

from huescope.core.types import Report


def _fmt_hue(h: float) -> str:
    return f'{h:g}°'


def _text_histogram(data: dict[str, Any]) -> list[str]:
    lines = [
        f'  bins: {data["bins"]}  sigma: {data["sigma"]:g}  total weight: {data["total_weight"]:.2f}'
        f'  non-empty bins: {data["non_empty_bins"]}',
        f'  0° {data["strip"]} 360°',
    ]
    for entry in data.get('top_bins', []):
        lines.append(f'  {_fmt_hue(entry["hue"]):>6}  {entry["name"]:<7} {entry["value"]:.2f}')
    return lines


def _text_peaks(data: dict[str, Any]) -> list[str]:
    lines = [f'  {data["count"]} dominant hue(s)']
    for i, c in enumerate(data['clusters'], 1):
        arc = f'{_fmt_hue(c["start_hue"])}→{_fmt_hue(c["end_hue"])}'
        lines.append(
            f'  {i}. {c["name"]:<7} peak {_fmt_hue(c["peak_hue"]):>6}  arc {arc:<14} '
            f'{c["weight_pct"]:5.1f}%  S={c["avg_saturation"]:.0f} L={c["avg_lightness"]:.0f}  {c["hex"]}'
        )
    return lines


def format_text(report: Report) -> str:
    """Format report as human-readable text."""
    lines = []
    dim = f'{report.image_width}×{report.image_height}'
    header = f'huescope: {report.image_path} ({dim})'
    if (report.sample_width, report.sample_height) != (report.image_width, report.image_height):
        header += f' — sampled at {report.sample_width}×{report.sample_height}'
    lines.append(header)
    lines.append('')

    for name, data in report.sections.items():
        lines.append(f'── {name}')
        if name == 'histogram':
            lines.extend(_text_histogram(data))
        elif name == 'peaks':
            lines.extend(_text_peaks(data))
        else:
            # Generic fallback
            for k, v in data.items():
                lines.append(f'  {name}.{k}: {v}')
        lines.append('')

    return '\n'.join(lines)


def format_json(report: Report) -> str:
    """Format report as JSON."""
    obj: dict[str, Any] = {
        'image': report.image_path,
        'dimensions': {'width': report.image_width, 'height': report.image_height},
        'sample': {'width': report.sample_width, 'height': report.sample_height},
        'settings': report.settings,
        'results': report.sections,
    }
    return json.dumps(obj, indent=2)
