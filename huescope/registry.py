"""Technique auto-discovery and registration.

Scans huescope/techniques/ for modules that define a `technique` object
of type Technique and collects them into a dict keyed by name.
"""

import importlib
import pkgutil

from huescope.core.types import Technique

_registry: dict[str, Technique] = {}


def discover() -> dict[str, Technique]:
    """Import every public module under huescope.techniques and return the registry."""
    if _registry:
        return _registry

    import huescope.techniques as pkg

    for _importer, modname, _ispkg in pkgutil.iter_modules(pkg.__path__):
        if modname.startswith('_'):
            continue
        module = importlib.import_module(f'{pkg.__name__}.{modname}')
        tech = getattr(module, 'technique', None)
        if isinstance(tech, Technique):
            _registry[tech.name] = tech

    return _registry


def get(name: str) -> Technique:
    reg = discover()
    if name not in reg:
        raise KeyError(f'Unknown technique: {name}. Available: {", ".join(sorted(reg))}')
    return reg[name]


def all_techniques() -> dict[str, Technique]:
    return discover()
