"""Artifact types, statuses, and record shapes."""

from __future__ import annotations

import time
from typing import Any, TypedDict

# ---------------------------------------------------------------------------
# Artifact types
# ---------------------------------------------------------------------------

CANVAS_PREFIX = "canvas:"

LIGHTWEIGHT_ARTIFACT_TYPES: tuple[str, ...] = (
    "code",
    "html",
    "svg",
    "mermaid",
    "react",
)

CANVAS_ARTIFACT_TYPES: tuple[str, ...] = (
    "canvas:document",
    "canvas:poster",
    "canvas:music",
    "canvas:script",
    "canvas:novel",
)

ALL_ARTIFACT_TYPES: tuple[str, ...] = LIGHTWEIGHT_ARTIFACT_TYPES + CANVAS_ARTIFACT_TYPES

_LIGHTWEIGHT_SET: frozenset[str] = frozenset(LIGHTWEIGHT_ARTIFACT_TYPES)
_ALL_SET: frozenset[str] = frozenset(ALL_ARTIFACT_TYPES)

DEFAULT_FILE_EXTENSIONS: dict[str, str] = {
    "code": "txt",
    "html": "html",
    "svg": "svg",
    "mermaid": "mmd",
    "react": "jsx",
    "canvas:document": "md",
    "canvas:poster": "json",
    "canvas:music": "json",
    "canvas:script": "json",
    "canvas:novel": "json",
}

DEFAULT_TITLES: dict[str, str] = {
    "code": "Code",
    "html": "HTML",
    "svg": "SVG",
    "mermaid": "Diagram",
    "react": "React Component",
    "canvas:document": "Document",
    "canvas:poster": "Poster",
    "canvas:music": "Music",
    "canvas:script": "Script",
    "canvas:novel": "Novel",
}


def is_canvas_type(type: str) -> bool:
    """Return ``True`` if *type* lives in the ``canvas:`` namespace."""
    return type.startswith(CANVAS_PREFIX)


def is_lightweight_type(type: str) -> bool:
    return type in _LIGHTWEIGHT_SET


def is_valid_type(type: str) -> bool:
    return type in _ALL_SET


# ---------------------------------------------------------------------------
# Statuses
# ---------------------------------------------------------------------------

ARTIFACT_STATUSES: tuple[str, ...] = ("pending", "streaming", "complete", "error")

TERMINAL_STATUSES: frozenset[str] = frozenset({"complete", "error"})

_STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"streaming", "complete", "error"}),
    "streaming": frozenset({"complete", "error"}),
    "complete": frozenset(),
    "error": frozenset(),
}


def is_valid_status_transition(from_status: str, to_status: str) -> bool:
    """Return ``True`` if an artifact may move from *from_status* to *to_status*.

    Staying in the same status is always allowed.  Nothing leaves a
    terminal status.
    """
    if from_status == to_status:
        return True
    return to_status in _STATUS_TRANSITIONS.get(from_status, frozenset())


# ---------------------------------------------------------------------------
# Record shapes
# ---------------------------------------------------------------------------


class Position(TypedDict):
    start: int
    end: int


class _ArtifactBase(TypedDict):
    id: str
    type: str
    title: str
    content: str
    status: str
    meta: dict[str, Any]
    position: Position
    created_at: int
    updated_at: int


class Artifact(_ArtifactBase, total=False):
    error: str


class RendererEntry(TypedDict, total=False):
    type: str
    display_name: str
    icon: str
    renderer: Any
    can_edit: bool
    file_extension: str | None


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


def now_ms() -> int:
    """Current wall-clock time in integer milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def next_timestamp(previous: int | None = None) -> int:
    """Return a timestamp strictly greater than *previous*.

    Falls back to ``previous + 1`` when the wall clock has not advanced
    (or went backwards) since *previous* was taken.
    """
    ts = now_ms()
    if previous is not None and ts <= previous:
        return previous + 1
    return ts


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def default_title(type: str, meta: dict[str, Any] | None = None) -> str:
    """Derive a title: ``meta.filename`` > ``meta.language`` > per-type name."""
    meta = meta or {}
    if meta.get("filename"):
        return str(meta["filename"])
    if meta.get("language"):
        return str(meta["language"])
    return DEFAULT_TITLES.get(type, "Artifact")


def create_artifact(
    art_id: str,
    type: str,
    *,
    title: str = "",
    content: str = "",
    status: str = "pending",
    meta: dict[str, Any] | None = None,
    start: int = 0,
    end: int | None = None,
    created_at: int | None = None,
) -> Artifact:
    """Build an artifact dict.

    If *created_at* is not provided, the current time is used and
    ``updated_at`` starts equal to it.
    """
    if created_at is None:
        created_at = now_ms()
    meta = dict(meta) if meta is not None else {}
    return {
        "id": art_id,
        "type": type,
        "title": title or default_title(type, meta),
        "content": content,
        "status": status,
        "meta": meta,
        "position": {"start": start, "end": start if end is None else max(end, start)},
        "created_at": created_at,
        "updated_at": created_at,
    }
