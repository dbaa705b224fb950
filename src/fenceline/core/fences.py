"""Fence grammar: opener/closer recognition and artifact serialization.

Two opener forms are recognised on a single line::

    ```artifact type="code" language="ts" title="x" filename="a.ts"
    ```python

and one closer: a line holding only ```` ``` ```` (trailing whitespace
allowed).  Everything here is a pure function over one line of text.
"""

from __future__ import annotations

import logging
import re
from typing import Any, TypedDict

from fenceline.core.config import ParserConfig, resolve_language_type
from fenceline.core.types import Artifact, default_title, is_valid_type

logger = logging.getLogger(__name__)

FENCE_TOKEN = "```"

_ATTRIBUTED_OPEN_RE = re.compile(r"^```artifact(?![\w-])\s*(.*)$", re.IGNORECASE)
_GENERIC_OPEN_RE = re.compile(r"^```([\w+#.-]+)?")
_CLOSE_RE = re.compile(r"^```\s*$")
_ATTR_RE = re.compile(r"""([\w-]+)\s*=\s*(?:"([^"]*)"|'([^']*)')""")

# Keys that map onto dedicated artifact fields rather than free-form meta.
_RESERVED_KEYS: frozenset[str] = frozenset({"type", "title", "language", "filename"})


class FenceOpen(TypedDict):
    type: str
    title: str
    meta: dict[str, Any]
    # Raw ``type`` value that was not a known artifact type, else None.
    rejected_type: str | None


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------


def is_fence_close(line: str) -> bool:
    """Return ``True`` if *line* closes an open fence."""
    return bool(_CLOSE_RE.match(line))


def looks_like_fence(line: str) -> bool:
    return line.startswith(FENCE_TOKEN)


def parse_attributes(attr_string: str) -> dict[str, str]:
    """Parse ``key="value"`` / ``key='value'`` pairs.  Keys are lower-cased.

    Later duplicates win.  Text that is not a well-formed pair is ignored.
    """
    attrs: dict[str, str] = {}
    for match in _ATTR_RE.finditer(attr_string):
        key = match.group(1).lower()
        value = match.group(2) if match.group(2) is not None else match.group(3)
        attrs[key] = value
    return attrs


def parse_attributed_open(line: str) -> FenceOpen | None:
    """Parse an ```` ```artifact ```` opener line, or return ``None``.

    An unknown ``type`` falls back to ``code``; unrecognised keys are
    kept verbatim in ``meta``.
    """
    match = _ATTRIBUTED_OPEN_RE.match(line)
    if not match:
        return None

    attrs = parse_attributes(match.group(1))
    art_type = "code"
    rejected: str | None = None
    raw_type = attrs.get("type")
    if raw_type is not None:
        normalized = raw_type.strip().lower()
        if is_valid_type(normalized):
            art_type = normalized
        else:
            rejected = raw_type

    meta: dict[str, Any] = {}
    if "language" in attrs:
        meta["language"] = attrs["language"]
    if "filename" in attrs:
        meta["filename"] = attrs["filename"]
    for key, value in attrs.items():
        if key not in _RESERVED_KEYS:
            meta[key] = value

    title = attrs.get("title") or default_title(art_type, meta)
    return {"type": art_type, "title": title, "meta": meta, "rejected_type": rejected}


def parse_generic_open(line: str, config: ParserConfig | None = None) -> FenceOpen | None:
    """Parse a plain ```` ```lang ```` opener line, or return ``None``.

    Lines mentioning ``artifact`` are never generic openers.
    """
    match = _GENERIC_OPEN_RE.match(line)
    if not match:
        return None
    if "artifact" in line.lower():
        return None

    language = match.group(1) or ""
    art_type = resolve_language_type(config, language)
    meta: dict[str, Any] = {}
    if language:
        meta["language"] = language
    return {
        "type": art_type,
        "title": language or default_title(art_type, meta),
        "meta": meta,
        "rejected_type": None,
    }


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def _quote(value: str) -> str:
    """Quote an attribute value.

    The fence grammar has no escapes: a value holding both quote characters
    cannot be written faithfully, so its double quotes become single quotes
    and the value will not round-trip.
    """
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    logger.warning("Attribute value %r holds both quote characters; rewriting \" as '", value)
    return '"' + value.replace('"', "'") + '"'


def serialize_artifact(artifact: Artifact) -> str:
    """Render *artifact* as attributed fence text.

    ``ArtifactParser.parse(serialize_artifact(a))`` yields one artifact with
    the same type, content, and meta, as long as no attribute value holds
    both quote characters.
    """
    meta = artifact.get("meta") or {}
    attrs = [f'type="{artifact["type"]}"']
    if isinstance(meta.get("language"), str):
        attrs.append(f"language={_quote(str(meta['language']))}")
    if artifact.get("title"):
        attrs.append(f"title={_quote(artifact['title'])}")
    if isinstance(meta.get("filename"), str):
        attrs.append(f"filename={_quote(str(meta['filename']))}")
    for key in sorted(meta):
        value = meta[key]
        if key in _RESERVED_KEYS or not isinstance(value, str):
            continue
        if not re.fullmatch(r"[\w-]+", key):
            continue
        attrs.append(f"{key}={_quote(value)}")

    return f"{FENCE_TOKEN}artifact {' '.join(attrs)}\n{artifact['content']}\n{FENCE_TOKEN}"


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


def artifact_content_equal(a: Artifact, b: Artifact) -> bool:
    """Compare type, content, and ``meta.language`` (ids and times ignored)."""
    return (
        a["type"] == b["type"]
        and a["content"] == b["content"]
        and (a.get("meta") or {}).get("language") == (b.get("meta") or {}).get("language")
    )


def artifacts_equal(a: list[Artifact], b: list[Artifact]) -> bool:
    if len(a) != len(b):
        return False
    return all(artifact_content_equal(x, y) for x, y in zip(a, b))
