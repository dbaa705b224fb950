"""Tests for fenceline.core.store."""

from __future__ import annotations

import logging

import pytest

from fenceline.core.store import (
    add_action,
    apply_action,
    artifact_count,
    clear_action,
    get_artifact,
    has_selection,
    initial_state,
    is_streaming,
    pin_streaming,
    remove_action,
    select_action,
    selected_artifact,
    update_action,
)
from fenceline.core.types import create_artifact


def _art(art_id: str = "art_a", **kwargs):
    kwargs.setdefault("content", "x")
    kwargs.setdefault("created_at", 1_000)
    return create_artifact(art_id, "code", **kwargs)


def _state_with(*artifacts):
    state = initial_state()
    for artifact in artifacts:
        state = apply_action(state, add_action(artifact))
    return state


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------


class TestAdd:
    def test_appends_in_order(self) -> None:
        state = _state_with(_art("art_a"), _art("art_b"))
        assert [a["id"] for a in state["artifacts"]] == ["art_a", "art_b"]
        assert artifact_count(state) == 2

    def test_existing_id_replaced_in_place(self) -> None:
        state = _state_with(_art("art_a"), _art("art_b"))
        state = apply_action(state, add_action(_art("art_a", content="new")))
        assert [a["id"] for a in state["artifacts"]] == ["art_a", "art_b"]
        assert get_artifact(state, "art_a")["content"] == "new"

    def test_replacement_keeps_start_offset(self) -> None:
        state = _state_with(_art("art_a", start=10, end=20))
        state = apply_action(state, add_action(_art("art_a", start=0, end=30)))
        assert get_artifact(state, "art_a")["position"] == {"start": 10, "end": 30}

    def test_replacement_never_moves_updated_at_back(self) -> None:
        stored = _art("art_a", created_at=5_000)
        state = _state_with(stored)
        state = apply_action(state, add_action(_art("art_a", content="changed", created_at=1_000)))
        art = get_artifact(state, "art_a")
        assert art["content"] == "changed"
        assert art["created_at"] == 5_000
        assert art["updated_at"] > 5_000

    def test_unchanged_replacement_keeps_updated_at(self) -> None:
        state = _state_with(_art("art_a", created_at=5_000))
        state = apply_action(state, add_action(_art("art_a", created_at=1_000)))
        assert get_artifact(state, "art_a")["updated_at"] == 5_000

    def test_does_not_mutate_input(self) -> None:
        state = initial_state()
        artifact = _art()
        new_state = apply_action(state, add_action(artifact))
        assert state["artifacts"] == []
        artifact["content"] = "changed"
        assert new_state["artifacts"][0]["content"] == "x"

    def test_none_state_starts_fresh(self) -> None:
        state = apply_action(None, add_action(_art()))
        assert artifact_count(state) == 1


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


class TestUpdate:
    def test_merges_fields(self) -> None:
        state = _state_with(_art(status="streaming"))
        state = apply_action(state, update_action("art_a", {"content": "y", "status": "complete"}))
        art = get_artifact(state, "art_a")
        assert art["content"] == "y"
        assert art["status"] == "complete"
        assert art["type"] == "code"

    def test_bumps_updated_at(self) -> None:
        state = _state_with(_art())
        before = get_artifact(state, "art_a")["updated_at"]
        state = apply_action(state, update_action("art_a", {"content": "y"}))
        assert get_artifact(state, "art_a")["updated_at"] > before

    def test_unknown_id_is_noop(self) -> None:
        state = _state_with(_art())
        new_state = apply_action(state, update_action("art_zzz", {"content": "y"}))
        assert new_state == state

    def test_identity_fields_protected(self) -> None:
        state = _state_with(_art())
        state = apply_action(
            state, update_action("art_a", {"id": "art_b", "created_at": 5, "updated_at": 1})
        )
        art = state["artifacts"][0]
        assert art["id"] == "art_a"
        assert art["created_at"] == 1_000
        assert art["updated_at"] > 1

    def test_position_start_fixed(self) -> None:
        state = _state_with(_art(start=5, end=8))
        state = apply_action(state, update_action("art_a", {"position": {"start": 0, "end": 40}}))
        assert get_artifact(state, "art_a")["position"] == {"start": 5, "end": 40}

    def test_error_message_stored(self) -> None:
        state = _state_with(_art(status="streaming"))
        state = apply_action(
            state, update_action("art_a", {"status": "error", "error": "render failed"})
        )
        art = get_artifact(state, "art_a")
        assert art["status"] == "error"
        assert art["error"] == "render failed"


class TestStatusGuard:
    @pytest.mark.parametrize("terminal", ["complete", "error"])
    def test_terminal_status_not_left(
        self, terminal: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        state = _state_with(_art(status=terminal))
        with caplog.at_level(logging.WARNING, logger="fenceline.core.store"):
            state = apply_action(state, update_action("art_a", {"status": "streaming"}))
        assert get_artifact(state, "art_a")["status"] == terminal
        assert "Ignoring status change" in caplog.text

    def test_add_cannot_regress_status(self) -> None:
        state = _state_with(_art(status="complete"))
        state = apply_action(state, add_action(_art(status="streaming", content="z")))
        art = get_artifact(state, "art_a")
        assert art["status"] == "complete"
        assert art["content"] == "z"

    def test_forward_transitions_allowed(self) -> None:
        state = _state_with(_art(status="pending"))
        state = apply_action(state, update_action("art_a", {"status": "streaming"}))
        state = apply_action(state, update_action("art_a", {"status": "complete"}))
        assert get_artifact(state, "art_a")["status"] == "complete"


# ---------------------------------------------------------------------------
# remove / select / clear
# ---------------------------------------------------------------------------


class TestRemove:
    def test_removes(self) -> None:
        state = _state_with(_art("art_a"), _art("art_b"))
        state = apply_action(state, remove_action("art_a"))
        assert [a["id"] for a in state["artifacts"]] == ["art_b"]

    def test_clears_matching_selection(self) -> None:
        state = _state_with(_art("art_a"), _art("art_b"))
        state = apply_action(state, select_action("art_a"))
        state = apply_action(state, remove_action("art_a"))
        assert state["selected_id"] is None

    def test_keeps_other_selection(self) -> None:
        state = _state_with(_art("art_a"), _art("art_b"))
        state = apply_action(state, select_action("art_b"))
        state = apply_action(state, remove_action("art_a"))
        assert state["selected_id"] == "art_b"

    def test_unpins_streaming_artifact(self) -> None:
        state = _state_with(_art("art_a", status="streaming"))
        state = pin_streaming(state, get_artifact(state, "art_a"))
        state = apply_action(state, remove_action("art_a"))
        assert is_streaming(state) is False

    def test_unknown_id_is_noop(self) -> None:
        state = _state_with(_art())
        assert apply_action(state, remove_action("art_zzz")) == state


class TestSelect:
    def test_select_and_view(self) -> None:
        state = _state_with(_art("art_a"), _art("art_b"))
        state = apply_action(state, select_action("art_b"))
        assert has_selection(state)
        assert selected_artifact(state)["id"] == "art_b"

    def test_select_none_clears(self) -> None:
        state = _state_with(_art())
        state = apply_action(state, select_action("art_a"))
        state = apply_action(state, select_action(None))
        assert not has_selection(state)
        assert selected_artifact(state) is None

    def test_unknown_id_ignored(self) -> None:
        state = _state_with(_art("art_a"))
        state = apply_action(state, select_action("art_a"))
        state = apply_action(state, select_action("art_missing"))
        assert state["selected_id"] == "art_a"


class TestClear:
    def test_resets_everything(self) -> None:
        state = _state_with(_art("art_a", status="streaming"))
        state = apply_action(state, select_action("art_a"))
        state = pin_streaming(state, get_artifact(state, "art_a"))
        state = apply_action(state, clear_action())
        assert state == initial_state()


class TestReducer:
    def test_unknown_action_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown store action type: 'rename'"):
            apply_action(initial_state(), {"type": "rename"})


# ---------------------------------------------------------------------------
# Streaming pin
# ---------------------------------------------------------------------------


class TestPinStreaming:
    def test_pin_and_unpin(self) -> None:
        state = _state_with(_art(status="streaming"))
        pinned = pin_streaming(state, get_artifact(state, "art_a"))
        assert is_streaming(pinned)
        assert pinned["streaming_artifact"]["id"] == "art_a"
        assert not is_streaming(state)
        assert not is_streaming(pin_streaming(pinned, None))

    def test_pinned_copy_follows_updates(self) -> None:
        state = _state_with(_art(status="streaming"))
        state = pin_streaming(state, get_artifact(state, "art_a"))
        state = apply_action(state, update_action("art_a", {"content": "more"}))
        assert state["streaming_artifact"]["content"] == "more"
