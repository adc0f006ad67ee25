"""Public package surface for outlinemap.

Exports ``main`` for programmatic CLI invocation.
Host adapters bind their commands to ``outlinemap.app.OutlineApp``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
