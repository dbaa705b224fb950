"""Incremental artifact parser.

The parser is line oriented.  ``append`` processes every complete line in
the buffer and keeps the trailing partial line for the next call;
``finalize`` processes that last line too.  Because a line is only ever
classified once it is complete, any split of the same text into chunks
yields the same artifacts as a single whole-text parse.

Positions are offsets into the full concatenated stream, not into the
current buffer.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from typing import TypedDict

from fenceline.core.config import ParserConfig, default_config
from fenceline.core.diagnostics import (
    INVALID_TYPE,
    MALFORMED_FENCE,
    MISSING_CONTENT,
    UNCLOSED_FENCE,
    ParseDiagnostic,
    create_diagnostic,
    log_diagnostic,
)
from fenceline.core.fences import (
    FenceOpen,
    is_fence_close,
    looks_like_fence,
    parse_attributed_open,
    parse_generic_open,
)
from fenceline.core.ids import generate_artifact_id
from fenceline.core.types import Artifact, create_artifact, next_timestamp, now_ms

logger = logging.getLogger(__name__)


class ParseResult(TypedDict):
    artifacts: list[Artifact]
    plain_text: str
    is_complete: bool
    segments: list[dict]


class _OpenFence:
    """Bookkeeping for the fence currently being filled."""

    __slots__ = ("artifact_id", "lines", "start", "unclosed_reported")

    def __init__(self, artifact_id: str, start: int) -> None:
        self.artifact_id = artifact_id
        self.lines: list[str] = []
        self.start = start
        self.unclosed_reported = False

    @property
    def content(self) -> str:
        return "\n".join(self.lines)


class ArtifactParser:
    """Stateful extractor for fenced artifacts in a growing text stream.

    One instance per stream.  Calls must arrive in stream order and must
    not overlap; the parser does no I/O and never raises on malformed input.
    """

    def __init__(self, config: ParserConfig | None = None) -> None:
        self._config: ParserConfig = config if config is not None else default_config()
        self.reset()

    # -- public API ---------------------------------------------------------

    def append(self, chunk: str) -> ParseResult:
        """Consume the next slice of the stream and return the current result."""
        self._buffer += chunk
        if "\n" in chunk:
            self._process_buffer(final=False)
        return self._result(final=False)

    def finalize(self) -> ParseResult:
        """Signal end of stream; the trailing partial line is processed too."""
        self._process_buffer(final=True)
        if self._fence is not None and not self._fence.unclosed_reported:
            self._fence.unclosed_reported = True
            artifact = self._artifacts[self._fence.artifact_id]
            self._record(
                UNCLOSED_FENCE,
                f"Fence for {artifact['type']} artifact {artifact['id']} never closed",
                self._fence.start,
                self._offset,
                artifact["title"],
            )
        return self._result(final=True)

    def reset(self) -> None:
        """Drop all state, including the stream offset."""
        self._buffer = ""
        self._offset = 0
        self._artifacts: dict[str, Artifact] = {}
        self._fence: _OpenFence | None = None
        self._plain_lines: list[str] = []
        self._segments: list[dict] = []
        self._diagnostics: list[ParseDiagnostic] = []

    @property
    def diagnostics(self) -> list[ParseDiagnostic]:
        return list(self._diagnostics)

    @property
    def in_fence(self) -> bool:
        return self._fence is not None

    @staticmethod
    def parse(text: str, config: ParserConfig | None = None) -> ParseResult:
        """Parse a complete text in one go."""
        parser = ArtifactParser(config)
        parser.append(text)
        return parser.finalize()

    # -- line processing ----------------------------------------------------

    def _process_buffer(self, final: bool) -> None:
        lines = self._buffer.split("\n")
        if final:
            # A trailing empty line is just the newline ending the stream.
            to_process = lines if lines[-1] else lines[:-1]
            rest = ""
        else:
            to_process = lines[:-1]
            rest = lines[-1]

        pos = self._offset
        last = len(lines) - 1
        for i, line in enumerate(to_process):
            terminated = i < last
            line_end = pos + len(line)
            self._process_line(line, pos, line_end, terminated)
            pos = line_end + 1 if terminated else line_end

        self._offset = pos
        self._buffer = rest

    def _process_line(self, line: str, start: int, end: int, terminated: bool) -> None:
        if self._fence is not None:
            artifact = self._artifacts[self._fence.artifact_id]
            if is_fence_close(line):
                self._close_fence(end)
            else:
                self._fence.lines.append(line)
                artifact["position"]["end"] = max(end, artifact["position"]["end"])
            return

        opened = parse_attributed_open(line)
        if opened is None and self._config.get("treat_code_block_as_artifact", True):
            opened = parse_generic_open(line, self._config)
        if opened is not None:
            content_start = end + 1 if terminated else end
            self._open_fence(opened, start, content_start, line)
            return

        if looks_like_fence(line) and parse_generic_open(line, self._config) is None:
            self._record(
                MALFORMED_FENCE,
                "Fence line mentions 'artifact' but is not a valid artifact opener",
                start,
                end,
                line,
            )
        self._add_plain(line)

    def _open_fence(self, opened: FenceOpen, start: int, content_start: int, line: str) -> None:
        if opened["rejected_type"] is not None:
            self._record(
                INVALID_TYPE,
                f"Unknown artifact type '{opened['rejected_type']}', using 'code'",
                start,
                content_start,
                line,
            )

        art_id = generate_artifact_id()
        artifact = create_artifact(
            art_id,
            opened["type"],
            title=opened["title"],
            status="streaming",
            meta=opened["meta"],
            start=start,
            end=content_start,
            created_at=now_ms(),
        )
        self._artifacts[art_id] = artifact
        self._fence = _OpenFence(art_id, start)
        self._segments.append({"kind": "artifact", "id": art_id})
        logger.debug("Opened %s artifact %s at offset %d", opened["type"], art_id, start)

    def _close_fence(self, end: int) -> None:
        fence = self._fence
        assert fence is not None
        artifact = self._artifacts[fence.artifact_id]
        if not fence.lines:
            self._record(
                MISSING_CONTENT,
                f"Artifact {artifact['id']} closed without content",
                fence.start,
                end,
                artifact["title"],
            )
        artifact["content"] = fence.content
        artifact["status"] = "complete"
        artifact["position"]["end"] = max(end, artifact["position"]["start"])
        artifact["updated_at"] = next_timestamp(artifact["updated_at"])
        self._fence = None
        logger.debug("Closed artifact %s at offset %d", artifact["id"], end)

    def _add_plain(self, line: str) -> None:
        self._plain_lines.append(line)
        if self._segments and self._segments[-1]["kind"] == "text":
            self._segments[-1]["text"] += "\n" + line
        else:
            self._segments.append({"kind": "text", "text": line})

    def _record(self, code: str, message: str, start: int, end: int, raw: str) -> None:
        diagnostic = create_diagnostic(code, message, start, end, raw)
        self._diagnostics.append(diagnostic)
        log_diagnostic(diagnostic)

    # -- results ------------------------------------------------------------

    def _sync_open_fence(self) -> None:
        """Copy the open fence's partial content onto its artifact."""
        if self._fence is None:
            return
        artifact = self._artifacts[self._fence.artifact_id]
        content = self._fence.content
        if artifact["content"] != content:
            artifact["content"] = content
            artifact["updated_at"] = next_timestamp(artifact["updated_at"])

    def _result(self, final: bool) -> ParseResult:
        self._sync_open_fence()
        return {
            "artifacts": [copy.deepcopy(a) for a in self._artifacts.values()],
            "plain_text": "\n".join(self._plain_lines),
            "is_complete": final and self._fence is None,
            "segments": copy.deepcopy(self._segments),
        }


def parse_stream(chunks: Iterable[str], config: ParserConfig | None = None) -> ParseResult:
    """Feed every chunk of *chunks* through a fresh parser and finalize."""
    parser = ArtifactParser(config)
    for chunk in chunks:
        parser.append(chunk)
    return parser.finalize()
