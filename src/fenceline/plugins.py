"""Renderer plugin discovery via importlib.metadata entry points.

Entry point group ``fenceline.renderers``: each entry point loads a
callable ``register(registry)`` that adds or replaces renderer entries.

Plugin load failures are logged to stderr and never crash the host.
Set FENCELINE_DEBUG=1 for full tracebacks on failures.
"""

from __future__ import annotations

import os
import sys
from importlib.metadata import entry_points

from fenceline.core.registry import ArtifactRegistry

RENDERER_PLUGIN_GROUP = "fenceline.renderers"


def discover_renderer_plugins():
    """Return entry points from the ``fenceline.renderers`` group."""
    return list(entry_points(group=RENDERER_PLUGIN_GROUP))


def load_renderer_plugins(registry: ArtifactRegistry) -> list[str]:
    """Load each renderer plugin and call its ``register(registry)`` function.

    Returns the names of plugins that loaded.  Failures are logged to stderr
    but never raise: a broken plugin must not take the built-in renderers
    down with it.
    """
    debug = os.environ.get("FENCELINE_DEBUG", "")
    loaded: list[str] = []
    for ep in discover_renderer_plugins():
        try:
            register_fn = ep.load()
            register_fn(registry)
        except Exception as exc:
            print(f"fenceline: failed to load renderer plugin '{ep.name}': {exc}", file=sys.stderr)
            if debug:
                import traceback

                traceback.print_exc(file=sys.stderr)
            continue
        loaded.append(ep.name)
    return loaded
