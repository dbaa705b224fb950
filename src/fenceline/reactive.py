"""Observable container around the store reducer.

Listeners are fire-and-forget: failures are logged but never raise or
interrupt dispatch.

Thread-safe: a lock serializes dispatch so an observer never sees a
half-applied action, and protects the listener list.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from fenceline.core.store import (
    StoreState,
    add_action,
    apply_action,
    clear_action,
    initial_state,
    pin_streaming,
    remove_action,
    select_action,
    update_action,
)
from fenceline.core.store import selected_artifact as _selected_artifact
from fenceline.core.types import Artifact

logger = logging.getLogger(__name__)

Listener = Callable[[dict, StoreState], None]


class ArtifactStore:
    """Holds the current ``StoreState`` and notifies listeners after each action."""

    def __init__(self, initial: StoreState | None = None) -> None:
        self._lock = threading.RLock()
        self._state: StoreState = initial if initial is not None else initial_state()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def artifacts(self) -> list[Artifact]:
        return self._state["artifacts"]

    @property
    def selected_artifact(self) -> Artifact | None:
        return _selected_artifact(self._state)

    def subscribe(self, fn: Listener) -> Callable[[], None]:
        """Register *fn* to receive ``(action, new_state)``; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(fn)

        def unsubscribe() -> None:
            with self._lock:
                try:
                    self._listeners.remove(fn)
                except ValueError:
                    pass

        return unsubscribe

    def dispatch(self, action: dict) -> StoreState:
        with self._lock:
            self._state = apply_action(self._state, action)
            state = self._state
            listeners = list(self._listeners)
        self._notify(listeners, action, state)
        return state

    def pin_streaming(self, artifact: Artifact | None) -> StoreState:
        with self._lock:
            self._state = pin_streaming(self._state, artifact)
            state = self._state
            listeners = list(self._listeners)
        self._notify(listeners, {"type": "pin_streaming"}, state)
        return state

    def _notify(self, listeners: list[Listener], action: dict, state: StoreState) -> None:
        for fn in listeners:
            try:
                fn(action, state)
            except Exception:
                logger.exception("Store listener failed on %s action", action.get("type"))

    # -- convenience wrappers -----------------------------------------------

    def add(self, artifact: Artifact) -> StoreState:
        return self.dispatch(add_action(artifact))

    def update(self, art_id: str, updates: dict[str, Any]) -> StoreState:
        return self.dispatch(update_action(art_id, updates))

    def remove(self, art_id: str) -> StoreState:
        return self.dispatch(remove_action(art_id))

    def select(self, art_id: str | None) -> StoreState:
        return self.dispatch(select_action(art_id))

    def clear(self) -> StoreState:
        return self.dispatch(clear_action())
