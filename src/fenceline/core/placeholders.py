"""Replace artifact fences in a message with inline placeholder markers.

A chat surface shows the prose of a message and renders each artifact
elsewhere; the marker ``[[ARTIFACT:<id>:<title>]]`` keeps the artifact's
place in the text.  An unclosed fence in a message that is still
streaming gets a ``:pending`` suffix.
"""

from __future__ import annotations

import re
from typing import TypedDict

from fenceline.core.config import ParserConfig
from fenceline.core.parser import ArtifactParser

PLACEHOLDER_PREFIX = "[[ARTIFACT:"
PLACEHOLDER_SUFFIX = "]]"
PENDING_SUFFIX = ":pending"

_PLACEHOLDER_RE = re.compile(r"\[\[ARTIFACT:([^:\]]+):([^\]]*?)(:pending)?\]\]")


class ArtifactInfo(TypedDict):
    id: str
    type: str
    title: str
    language: str | None
    is_complete: bool


class PlaceholderResult(TypedDict):
    processed_text: str
    artifacts: list[ArtifactInfo]
    has_pending: bool


def make_placeholder(art_id: str, title: str, pending: bool = False) -> str:
    # ':' and ']' would end the marker early.
    safe_title = title.replace("]", ")").replace(":", " ")
    suffix = PENDING_SUFFIX if pending else ""
    return f"{PLACEHOLDER_PREFIX}{art_id}:{safe_title}{suffix}{PLACEHOLDER_SUFFIX}"


def replace_with_placeholders(
    text: str,
    is_streaming: bool = False,
    config: ParserConfig | None = None,
) -> PlaceholderResult:
    """Parse *text* and rebuild it with every fence swapped for a marker.

    The trailing partial line of a live message is kept, so *text* is
    always parsed as a whole; *is_streaming* only decides whether an
    unclosed fence is marked ``:pending``.  Markers use the fence's
    ``id`` attribute when it has one, so the same message always yields the
    same markers.
    """
    result = ArtifactParser.parse(text, config)

    by_id = {a["id"]: a for a in result["artifacts"]}
    infos: list[ArtifactInfo] = []
    parts: list[str] = []
    has_pending = False

    for segment in result["segments"]:
        if segment["kind"] == "text":
            parts.append(segment["text"])
            continue
        artifact = by_id[segment["id"]]
        complete = artifact["status"] == "complete"
        pending = is_streaming and not complete
        has_pending = has_pending or pending
        # An explicit id="..." attribute wins over the generated id.
        marker_id = str(artifact["meta"].get("id") or artifact["id"])
        parts.append(make_placeholder(marker_id, artifact["title"], pending))
        infos.append(
            {
                "id": marker_id,
                "type": artifact["type"],
                "title": artifact["title"],
                "language": artifact["meta"].get("language"),
                "is_complete": complete,
            }
        )

    return {
        "processed_text": "\n".join(parts),
        "artifacts": infos,
        "has_pending": has_pending,
    }


def has_placeholder(text: str) -> bool:
    """Return ``True`` if *text* contains an artifact placeholder."""
    return PLACEHOLDER_PREFIX in text


def extract_artifact_id(placeholder: str) -> str | None:
    """Return the artifact id from the first placeholder in *placeholder*."""
    match = _PLACEHOLDER_RE.search(placeholder)
    return match.group(1) if match else None


def find_placeholders(text: str) -> list[tuple[str, str, bool]]:
    """Return ``(id, title, pending)`` for every placeholder in *text*, in order."""
    return [
        (m.group(1), m.group(2), m.group(3) is not None) for m in _PLACEHOLDER_RE.finditer(text)
    ]
