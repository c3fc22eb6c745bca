"""huescope.core — Foundation layer.

Contains colour math, the hue histogram and smoother, the peak engine,
settings, image loading, shared types, and the report builder.
This module has NO dependencies on huescope.techniques or huescope.registry.
Only stdlib, numpy, and PIL are allowed here.
"""
