"""Analysis techniques, one module per CLI subcommand.

Each module defines a `technique` object and is picked up by
huescope.registry.discover(). The module docstring is the subcommand's docs.
"""
