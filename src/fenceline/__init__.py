"""Fenceline: incremental extraction of typed artifacts from assistant text streams."""

from __future__ import annotations

from fenceline.core.fences import artifact_content_equal, artifacts_equal, serialize_artifact
from fenceline.core.parser import ArtifactParser, ParseResult, parse_stream
from fenceline.core.registry import ArtifactRegistry, create_renderer_entry, default_registry
from fenceline.core.store import StoreState, apply_action, initial_state
from fenceline.core.types import (
    ALL_ARTIFACT_TYPES,
    CANVAS_ARTIFACT_TYPES,
    DEFAULT_FILE_EXTENSIONS,
    LIGHTWEIGHT_ARTIFACT_TYPES,
    Artifact,
    RendererEntry,
    is_canvas_type,
    is_lightweight_type,
)
from fenceline.reactive import ArtifactStore
from fenceline.session import ParserSession

__all__ = [
    "ALL_ARTIFACT_TYPES",
    "CANVAS_ARTIFACT_TYPES",
    "DEFAULT_FILE_EXTENSIONS",
    "LIGHTWEIGHT_ARTIFACT_TYPES",
    "Artifact",
    "ArtifactParser",
    "ArtifactRegistry",
    "ArtifactStore",
    "ParseResult",
    "ParserSession",
    "RendererEntry",
    "StoreState",
    "apply_action",
    "artifact_content_equal",
    "artifacts_equal",
    "create_renderer_entry",
    "default_registry",
    "initial_state",
    "is_canvas_type",
    "is_lightweight_type",
    "parse_stream",
    "serialize_artifact",
]
