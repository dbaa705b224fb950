"""Streaming session: drives a parser and mirrors its output into a store."""

from __future__ import annotations

import logging

from fenceline.core.config import ParserConfig
from fenceline.core.parser import ArtifactParser, ParseResult
from fenceline.core.store import get_artifact
from fenceline.core.types import Artifact
from fenceline.reactive import ArtifactStore

logger = logging.getLogger(__name__)

# Fields copied onto an already-known artifact on every result.
_SYNC_FIELDS: tuple[str, ...] = ("content", "status", "position", "title", "meta")


class ParserSession:
    """Owns one parser per stream and translates each ``ParseResult`` into store actions.

    New artifact ids are dispatched as ``add``; ids seen before as
    ``update``.  The artifact currently being filled is pinned as the
    store's streaming artifact.
    """

    def __init__(self, store: ArtifactStore, config: ParserConfig | None = None) -> None:
        self._store = store
        self._config = config
        self._parser: ArtifactParser | None = None
        self._known_ids: set[str] = set()

    def start(self) -> None:
        """Begin a new stream, discarding any previous parser."""
        logger.debug("Starting parser session")
        self._parser = ArtifactParser(self._config)
        self._known_ids = set()

    def is_active(self) -> bool:
        return self._parser is not None

    def append_chunk(self, chunk: str) -> ParseResult | None:
        """Feed *chunk*; returns ``None`` when no session has been started."""
        if self._parser is None:
            logger.debug("No active parser session, chunk dropped")
            return None
        result = self._parser.append(chunk)
        self._apply(result)
        self._pin_open(result["artifacts"])
        return result

    def finalize(self) -> ParseResult | None:
        """End the stream.

        Artifacts whose fence never closed are promoted to ``complete`` in
        the store (the parser result itself still reports them as
        ``streaming``).
        """
        if self._parser is None:
            return None
        result = self._parser.finalize()
        self._apply(result, promote=True)
        self._store.pin_streaming(None)
        self._parser = None
        return result

    def reset(self) -> None:
        if self._parser is not None:
            self._parser.reset()
        self._parser = None
        self._known_ids = set()

    def _apply(self, result: ParseResult, promote: bool = False) -> None:
        for artifact in result["artifacts"]:
            if promote and artifact["status"] == "streaming":
                artifact = {**artifact, "status": "complete"}
            if artifact["id"] not in self._known_ids:
                self._store.add(artifact)
                self._known_ids.add(artifact["id"])
                continue
            current = get_artifact(self._store.state, artifact["id"])
            if current is None:
                # Removed from the store by the user; stay removed.
                continue
            updates = {f: artifact[f] for f in _SYNC_FIELDS}
            if any(current[f] != v for f, v in updates.items()):
                self._store.update(artifact["id"], updates)

    def _pin_open(self, artifacts: list[Artifact]) -> None:
        open_ids = [a["id"] for a in artifacts if a["status"] == "streaming"]
        live = get_artifact(self._store.state, open_ids[-1]) if open_ids else None
        if self._store.state["streaming_artifact"] != live:
            self._store.pin_streaming(live)
