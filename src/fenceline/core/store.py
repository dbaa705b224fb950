"""Artifact store state and its reducer.

``apply_action`` is the single mutation path for store state.  It never
mutates its input; callers keep the previous state intact and can hand the
new one to whatever observer mechanism they use (see ``fenceline.reactive``).
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import Any, TypedDict

from fenceline.core.types import (
    TERMINAL_STATUSES,
    Artifact,
    is_valid_status_transition,
    next_timestamp,
)

logger = logging.getLogger(__name__)

ACTION_TYPES: tuple[str, ...] = ("add", "update", "remove", "select", "clear")

# Fields an ``update`` action may never overwrite.
_IMMUTABLE_FIELDS: frozenset[str] = frozenset({"id", "created_at", "updated_at"})


class StoreState(TypedDict):
    artifacts: list[Artifact]
    selected_id: str | None
    streaming_artifact: Artifact | None


def initial_state() -> StoreState:
    return {"artifacts": [], "selected_id": None, "streaming_artifact": None}


# ---------------------------------------------------------------------------
# Action construction
# ---------------------------------------------------------------------------


def add_action(artifact: Artifact) -> dict:
    return {"type": "add", "artifact": artifact}


def update_action(art_id: str, updates: dict[str, Any]) -> dict:
    return {"type": "update", "id": art_id, "updates": updates}


def remove_action(art_id: str) -> dict:
    return {"type": "remove", "id": art_id}


def select_action(art_id: str | None) -> dict:
    return {"type": "select", "id": art_id}


def clear_action() -> dict:
    return {"type": "clear"}


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------


def apply_action(state: StoreState | None, action: dict) -> StoreState:
    """Apply a single *action* to *state* (or a fresh state) and return the result.

    Misses at the data level (updating or removing an unknown id) are
    no-ops.  An unknown action type is a programming error and raises
    ValueError.
    """
    atype = action.get("type")
    handler = _ACTION_HANDLERS.get(atype)  # type: ignore[arg-type]
    if handler is None:
        raise ValueError(f"Unknown store action type: '{atype}'")
    new_state = copy.deepcopy(state) if state is not None else initial_state()
    handler(new_state, action)
    return new_state


def pin_streaming(state: StoreState, artifact: Artifact | None) -> StoreState:
    """Return a copy of *state* with *artifact* pinned as the live stream (or unpinned)."""
    new_state = copy.deepcopy(state)
    new_state["streaming_artifact"] = copy.deepcopy(artifact) if artifact is not None else None
    return new_state


def _find_index(state: StoreState, art_id: str) -> int:
    for i, artifact in enumerate(state["artifacts"]):
        if artifact["id"] == art_id:
            return i
    return -1


def _guard_status(old: Artifact, new_status: str | None) -> str:
    """Return the status to keep when *old* is asked to become *new_status*."""
    if new_status is None or is_valid_status_transition(old["status"], new_status):
        return new_status if new_status is not None else old["status"]
    if old["status"] in TERMINAL_STATUSES:
        logger.warning(
            "Ignoring status change %s -> %s for artifact %s",
            old["status"],
            new_status,
            old["id"],
        )
        return old["status"]
    return new_status


def _refresh_pinned(state: StoreState, artifact: Artifact) -> None:
    pinned = state["streaming_artifact"]
    if pinned is not None and pinned["id"] == artifact["id"]:
        state["streaming_artifact"] = copy.deepcopy(artifact)


_ACTION_HANDLERS: dict[str, Callable[[StoreState, dict], None]] = {}


def _register_action(atype: str):  # noqa: ANN202
    """Decorator that registers a state mutation handler for *atype*."""

    def decorator(fn):  # noqa: ANN001, ANN202
        _ACTION_HANDLERS[atype] = fn
        return fn

    return decorator


@_register_action("add")
def _act_add(state: StoreState, action: dict) -> None:
    artifact = copy.deepcopy(action["artifact"])
    index = _find_index(state, artifact["id"])
    if index < 0:
        state["artifacts"].append(artifact)
        return
    old = state["artifacts"][index]
    artifact["status"] = _guard_status(old, artifact.get("status"))
    # Start offsets are fixed at creation.
    artifact["position"] = {
        "start": old["position"]["start"],
        "end": max(artifact["position"]["end"], old["position"]["start"]),
    }
    artifact["created_at"] = old["created_at"]
    incoming = artifact.get("updated_at", old["updated_at"])
    if artifact["content"] != old["content"] or artifact["status"] != old["status"]:
        artifact["updated_at"] = max(incoming, next_timestamp(old["updated_at"]))
    else:
        artifact["updated_at"] = max(incoming, old["updated_at"])
    state["artifacts"][index] = artifact
    _refresh_pinned(state, artifact)


@_register_action("update")
def _act_update(state: StoreState, action: dict) -> None:
    index = _find_index(state, action["id"])
    if index < 0:
        logger.debug("Update for unknown artifact %s ignored", action["id"])
        return
    old = state["artifacts"][index]
    updates = {k: v for k, v in action.get("updates", {}).items() if k not in _IMMUTABLE_FIELDS}

    merged = copy.deepcopy(old)
    merged.update(copy.deepcopy(updates))
    merged["status"] = _guard_status(old, updates.get("status"))
    if "position" in updates:
        merged["position"] = {
            "start": old["position"]["start"],
            "end": max(updates["position"].get("end", 0), old["position"]["start"]),
        }
    merged["updated_at"] = next_timestamp(old["updated_at"])
    state["artifacts"][index] = merged
    _refresh_pinned(state, merged)


@_register_action("remove")
def _act_remove(state: StoreState, action: dict) -> None:
    art_id = action["id"]
    state["artifacts"] = [a for a in state["artifacts"] if a["id"] != art_id]
    if state["selected_id"] == art_id:
        state["selected_id"] = None
    pinned = state["streaming_artifact"]
    if pinned is not None and pinned["id"] == art_id:
        state["streaming_artifact"] = None


@_register_action("select")
def _act_select(state: StoreState, action: dict) -> None:
    art_id = action.get("id")
    if art_id is None:
        state["selected_id"] = None
        return
    if _find_index(state, art_id) < 0:
        logger.debug("Select for unknown artifact %s ignored", art_id)
        return
    state["selected_id"] = art_id


@_register_action("clear")
def _act_clear(state: StoreState, action: dict) -> None:
    state["artifacts"] = []
    state["selected_id"] = None
    state["streaming_artifact"] = None


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------


def artifact_count(state: StoreState) -> int:
    return len(state["artifacts"])


def has_selection(state: StoreState) -> bool:
    return state["selected_id"] is not None


def is_streaming(state: StoreState) -> bool:
    """Return ``True`` while a streaming artifact is pinned."""
    return state["streaming_artifact"] is not None


def get_artifact(state: StoreState, art_id: str) -> Artifact | None:
    index = _find_index(state, art_id)
    return state["artifacts"][index] if index >= 0 else None


def selected_artifact(state: StoreState) -> Artifact | None:
    """Return the selected artifact, or ``None`` if nothing (or nothing live) is selected."""
    if state["selected_id"] is None:
        return None
    return get_artifact(state, state["selected_id"])
