"""Explicit state machine for a single conversation."""

from __future__ import annotations

import logging
from typing import Callable

from safechat.conversation.models import ConversationState, StateKind

logger = logging.getLogger(__name__)

Listener = Callable[[ConversationState], None]

TRANSITIONS: dict[StateKind, frozenset[StateKind]] = {
    StateKind.IDLE: frozenset({StateKind.CHECKING_SAFETY}),
    StateKind.BLOCKED: frozenset({StateKind.CHECKING_SAFETY}),
    StateKind.FAILED: frozenset({StateKind.CHECKING_SAFETY}),
    StateKind.CHECKING_SAFETY: frozenset({StateKind.BLOCKED, StateKind.STREAMING, StateKind.FAILED}),
    StateKind.STREAMING: frozenset({StateKind.IDLE, StateKind.FAILED}),
}

# Blocked and Failed are recoverable: the next submission starts over.
_SUBMITTABLE = frozenset({StateKind.IDLE, StateKind.BLOCKED, StateKind.FAILED})


class InvalidTransition(RuntimeError):
    """Raised when a transition is not allowed from the current state."""


class ConversationStateMachine:
    """Holds the current :class:`ConversationState` and guards transitions."""

    def __init__(self) -> None:
        self._state = ConversationState.idle()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def accepts_submit(self) -> bool:
        return self._state.kind in _SUBMITTABLE

    def can_transition(self, target: StateKind) -> bool:
        return target in TRANSITIONS[self._state.kind]

    def transition(self, new_state: ConversationState) -> None:
        """Move to *new_state* and notify listeners."""
        if not self.can_transition(new_state.kind):
            raise InvalidTransition(
                f"Cannot move from {self._state.kind.value} to {new_state.kind.value}"
            )
        logger.debug("State %s -> %s", self._state.kind.value, new_state.kind.value)
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for state changes; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
