"""Renderer registry: artifact type -> render/edit capability.

The registry is an ordinary object so tests and embedding applications can
build isolated instances.  ``default_registry`` is created once at import
with the built-in entries for convenience.
"""

from __future__ import annotations

from typing import Any

from fenceline.core.types import (
    ALL_ARTIFACT_TYPES,
    DEFAULT_FILE_EXTENSIONS,
    DEFAULT_TITLES,
    RendererEntry,
)
from fenceline.core.types import is_canvas_type as _is_canvas_type

BUILTIN_ICONS: dict[str, str] = {
    "code": "code",
    "html": "globe",
    "svg": "image",
    "mermaid": "git-branch",
    "react": "component",
    "canvas:document": "file-text",
    "canvas:poster": "palette",
    "canvas:music": "music",
    "canvas:script": "clapperboard",
    "canvas:novel": "book-open",
}

# Types whose renderer lets the user edit content in place.
_EDITABLE_TYPES: frozenset[str] = frozenset({"code", "html", "svg", "mermaid", "react"})


def create_renderer_entry(
    type: str,
    *,
    display_name: str | None = None,
    icon: str | None = None,
    renderer: Any = None,
    can_edit: bool = False,
    file_extension: str | None = None,
) -> RendererEntry:
    """Build a renderer entry, filling display name and icon from the built-ins."""
    return {
        "type": type,
        "display_name": display_name or DEFAULT_TITLES.get(type, type),
        "icon": icon or BUILTIN_ICONS.get(type, "file"),
        "renderer": renderer,
        "can_edit": can_edit,
        "file_extension": file_extension,
    }


class ArtifactRegistry:
    """Mutable map from artifact type to its renderer entry.

    Registration is an upsert: the last entry registered for a type wins.
    Entries never expire.
    """

    def __init__(self) -> None:
        self._entries: dict[str, RendererEntry] = {}

    def register(self, entry: RendererEntry) -> None:
        if not entry.get("type"):
            raise ValueError("Renderer entry requires a 'type'")
        self._entries[entry["type"]] = entry

    def get(self, type: str) -> RendererEntry | None:
        return self._entries.get(type)

    def has(self, type: str) -> bool:
        return type in self._entries

    def get_all(self) -> list[RendererEntry]:
        return list(self._entries.values())

    def is_canvas_type(self, type: str) -> bool:
        return _is_canvas_type(type)

    def get_file_extension(self, type: str) -> str:
        """Return the export extension (no dot) for *type*.

        An entry's explicit ``file_extension`` wins over the defaults table;
        the result is never empty.
        """
        entry = self._entries.get(type)
        if entry is not None and entry.get("file_extension"):
            return entry["file_extension"]
        return DEFAULT_FILE_EXTENSIONS.get(type) or "txt"

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, type: object) -> bool:
        return type in self._entries


def register_builtin_renderers(registry: ArtifactRegistry) -> ArtifactRegistry:
    """Register a handle-less entry for every known artifact type."""
    for art_type in ALL_ARTIFACT_TYPES:
        registry.register(
            create_renderer_entry(
                art_type,
                can_edit=art_type in _EDITABLE_TYPES,
                file_extension=DEFAULT_FILE_EXTENSIONS[art_type],
            )
        )
    return registry


default_registry: ArtifactRegistry = register_builtin_renderers(ArtifactRegistry())
