"""Tests for fenceline.core.registry."""

from __future__ import annotations

import pytest

from fenceline.core.registry import (
    ArtifactRegistry,
    create_renderer_entry,
    default_registry,
    register_builtin_renderers,
)
from fenceline.core.types import ALL_ARTIFACT_TYPES


class TestCreateRendererEntry:
    def test_defaults_from_builtins(self) -> None:
        entry = create_renderer_entry("mermaid")
        assert entry["display_name"] == "Diagram"
        assert entry["icon"] == "git-branch"
        assert entry["can_edit"] is False
        assert entry["file_extension"] is None

    def test_unknown_type_defaults(self) -> None:
        entry = create_renderer_entry("canvas:custom")
        assert entry["display_name"] == "canvas:custom"
        assert entry["icon"] == "file"


class TestArtifactRegistry:
    def test_register_and_get(self, registry: ArtifactRegistry) -> None:
        handle = object()
        registry.register(create_renderer_entry("svg", renderer=handle))
        assert registry.has("svg")
        assert "svg" in registry
        assert registry.get("svg")["renderer"] is handle

    def test_missing_type(self, registry: ArtifactRegistry) -> None:
        assert registry.get("svg") is None
        assert not registry.has("svg")

    def test_register_requires_type(self, registry: ArtifactRegistry) -> None:
        with pytest.raises(ValueError, match="requires a 'type'"):
            registry.register({"display_name": "Nameless"})

    def test_register_is_upsert(self, registry: ArtifactRegistry) -> None:
        registry.register(create_renderer_entry("svg", display_name="First"))
        registry.register(create_renderer_entry("svg", display_name="Second"))
        assert len(registry) == 1
        assert registry.get("svg")["display_name"] == "Second"

    def test_get_all_in_registration_order(self, registry: ArtifactRegistry) -> None:
        registry.register(create_renderer_entry("svg"))
        registry.register(create_renderer_entry("code"))
        assert [e["type"] for e in registry.get_all()] == ["svg", "code"]

    def test_is_canvas_type(self, registry: ArtifactRegistry) -> None:
        assert registry.is_canvas_type("canvas:music")
        assert registry.is_canvas_type("canvas:anything")
        assert not registry.is_canvas_type("react")


class TestFileExtension:
    def test_entry_extension_wins(self, registry: ArtifactRegistry) -> None:
        registry.register(create_renderer_entry("code", file_extension="py"))
        assert registry.get_file_extension("code") == "py"

    def test_falls_back_to_defaults(self, registry: ArtifactRegistry) -> None:
        registry.register(create_renderer_entry("mermaid"))
        assert registry.get_file_extension("mermaid") == "mmd"
        assert registry.get_file_extension("react") == "jsx"

    def test_unknown_type_is_txt(self, registry: ArtifactRegistry) -> None:
        assert registry.get_file_extension("canvas:custom") == "txt"


class TestBuiltins:
    def test_every_type_registered(self) -> None:
        registry = register_builtin_renderers(ArtifactRegistry())
        assert [e["type"] for e in registry.get_all()] == list(ALL_ARTIFACT_TYPES)

    def test_lightweight_types_editable(self) -> None:
        registry = register_builtin_renderers(ArtifactRegistry())
        assert registry.get("html")["can_edit"] is True
        assert registry.get("canvas:novel")["can_edit"] is False

    def test_default_registry_populated(self) -> None:
        assert len(default_registry) == len(ALL_ARTIFACT_TYPES)
