"""Parser configuration: defaults, loading, and validation."""

from __future__ import annotations

import json
from typing import TypedDict

from fenceline.core.types import is_valid_type

CONFIG_SCHEMA_VERSION = 1

# Fence languages that need a dedicated renderer.  Every other language
# (HTML included) is rendered as highlighted code.
LANGUAGE_TO_TYPE: dict[str, str] = {
    "svg": "svg",
    "mermaid": "mermaid",
    "jsx": "react",
    "tsx": "react",
}


class ParserConfig(TypedDict, total=False):
    schema_version: int
    auto_detect_language: bool
    treat_code_block_as_artifact: bool
    language_types: dict[str, str]


def default_config() -> ParserConfig:
    """Return the default parser configuration."""
    return {
        "schema_version": CONFIG_SCHEMA_VERSION,
        "auto_detect_language": True,
        "treat_code_block_as_artifact": True,
        "language_types": {},
    }


def serialize_config(config: ParserConfig | dict[str, object]) -> str:
    """Serialize a config dict to the canonical JSON format."""
    return json.dumps(config, sort_keys=True, indent=2) + "\n"


def validate_config(config: dict) -> list[str]:
    """Return a list of problems with *config* (empty when valid)."""
    problems: list[str] = []
    if not isinstance(config, dict):
        return [f"Config must be a JSON object, got {type(config).__name__}"]

    version = config.get("schema_version", CONFIG_SCHEMA_VERSION)
    if version != CONFIG_SCHEMA_VERSION:
        problems.append(f"Unsupported schema_version: {version!r}")

    for key in ("auto_detect_language", "treat_code_block_as_artifact"):
        if key in config and not isinstance(config[key], bool):
            problems.append(f"'{key}' must be a boolean")

    language_types = config.get("language_types", {})
    if not isinstance(language_types, dict):
        problems.append("'language_types' must be an object")
    else:
        for lang, art_type in sorted(language_types.items()):
            if not isinstance(art_type, str) or not is_valid_type(art_type):
                problems.append(f"language_types['{lang}']: unknown artifact type {art_type!r}")

    return problems


def load_config(raw: str) -> ParserConfig:
    """Parse a JSON config string, validate it, and merge it over the defaults.

    This is a pure function (no I/O).  Raises ValueError on invalid JSON
    or invalid values.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid config JSON: {e}") from e
    problems = validate_config(data)
    if problems:
        raise ValueError("Invalid config: " + "; ".join(problems))
    config = default_config()
    config.update(data)
    config["language_types"] = {
        str(k).lower(): v for k, v in (data.get("language_types") or {}).items()
    }
    return config


def resolve_language_type(config: ParserConfig | None, language: str) -> str:
    """Map a fence language tag to an artifact type.

    Config overrides win over the built-in table; anything unmapped is
    ``code``.  With ``auto_detect_language`` off every fence is ``code``.
    """
    config = config if config is not None else default_config()
    if not config.get("auto_detect_language", True):
        return "code"
    lang = language.strip().lower()
    overrides = config.get("language_types") or {}
    if lang in overrides:
        return overrides[lang]
    return LANGUAGE_TO_TYPE.get(lang, "code")
