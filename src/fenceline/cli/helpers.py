"""Shared CLI helpers and output utilities."""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import NoReturn

import click

from fenceline.core.config import ParserConfig, default_config, load_config
from fenceline.core.registry import ArtifactRegistry, register_builtin_renderers
from fenceline.plugins import load_renderer_plugins

_SLUG_RE = re.compile(r"[^A-Za-z0-9]+")


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr; DEBUG with --verbose or FENCELINE_DEBUG set."""
    debug = verbose or bool(os.environ.get("FENCELINE_DEBUG", ""))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Config & registry
# ---------------------------------------------------------------------------


def load_parser_config(config_path: str | None, is_json: bool) -> ParserConfig:
    """Load the parser config file at *config_path*, or the defaults."""
    if config_path is None:
        return default_config()
    try:
        return load_config(Path(config_path).read_text())
    except ValueError as e:
        output_error(str(e), "CONFIG_ERROR", is_json)
    except OSError as e:
        output_error(f"Cannot read config: {e}", "CONFIG_ERROR", is_json)


def build_registry() -> ArtifactRegistry:
    """Return a registry holding the built-in entries plus any installed plugins."""
    registry = register_builtin_renderers(ArtifactRegistry())
    load_renderer_plugins(registry)
    return registry


def slugify(text: str) -> str:
    return _SLUG_RE.sub("-", text).strip("-").lower() or "artifact"


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def json_envelope(ok: bool, *, data: object = None, error: object = None) -> str:
    """Build a structured JSON output envelope."""
    result: dict = {"ok": ok}
    if data is not None:
        result["data"] = data
    if error is not None:
        result["error"] = error
    return json.dumps(result, sort_keys=True, indent=2) + "\n"


def json_error_obj(code: str, message: str) -> dict:
    """Build an error object for the JSON envelope."""
    return {"code": code, "message": message}


def output_error(message: str, code: str, is_json: bool, exit_code: int = 1) -> NoReturn:
    """Print error and exit. JSON errors go to stdout; human errors to stderr."""
    if is_json:
        click.echo(json_envelope(False, error=json_error_obj(code, message)))
    else:
        click.echo(f"Error: {message}", err=True)
    raise SystemExit(exit_code)


def output_result(*, data: object, human_message: str, is_json: bool) -> None:
    """Print success result in the appropriate format."""
    if is_json:
        click.echo(json_envelope(True, data=data))
    else:
        click.echo(human_message)
