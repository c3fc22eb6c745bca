"""Run every technique, combine into a single report.

Runs: histogram, peaks.

Example:
    huescope all photo.jpg
    huescope all photo.jpg --json
"""

from huescope.core.types import ImageSample, Report, Technique

technique = Technique(
    name='all',
    help='Run every technique. Combine into a single report.',
)


@technique.run
def run(sample: ImageSample, report: Report, args) -> None:
    from huescope.registry import all_techniques

    for name, tech in sorted(all_techniques().items()):
        if name == 'all':
            continue
        tech.execute(sample, report, args)
