"""Data models for conversations: messages, states, and submit results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Optional


class Role(Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A single transcript entry.  Identity is its position in the transcript."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


class StateKind(Enum):
    IDLE = "idle"
    CHECKING_SAFETY = "checking_safety"
    BLOCKED = "blocked"
    STREAMING = "streaming"
    FAILED = "failed"


class ErrorKind(Enum):
    """Why a submission failed."""

    SAFETY_UNAVAILABLE = "safety_unavailable"
    COMPLETION_FAILURE = "completion_failure"


@dataclass(frozen=True)
class ConversationState:
    """The single active state of a conversation.

    ``reasons`` is only populated for ``BLOCKED``; ``error`` only for ``FAILED``.
    """

    kind: StateKind
    reasons: tuple[str, ...] = ()
    error: Optional[ErrorKind] = None

    @classmethod
    def idle(cls) -> ConversationState:
        return cls(StateKind.IDLE)

    @classmethod
    def checking_safety(cls) -> ConversationState:
        return cls(StateKind.CHECKING_SAFETY)

    @classmethod
    def blocked(cls, reasons: tuple[str, ...] | list[str]) -> ConversationState:
        return cls(StateKind.BLOCKED, reasons=tuple(reasons))

    @classmethod
    def streaming(cls) -> ConversationState:
        return cls(StateKind.STREAMING)

    @classmethod
    def failed(cls, error: ErrorKind) -> ConversationState:
        return cls(StateKind.FAILED, error=error)


# ---------------------------------------------------------------------------
# Errors and results
# ---------------------------------------------------------------------------


class OrchestrationError(Exception):
    """A submission could not be completed."""

    def __init__(self, kind: ErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


@dataclass
class SubmitResult:
    """Outcome of an accepted submission.

    For a passed submission ``transcript`` already holds the new user message
    and ``updates`` yields a fresh transcript snapshot for every reply
    fragment.  For a blocked one ``blocked`` is set, ``reasons`` explains why,
    and there are no updates.
    """

    transcript: list[Message]
    updates: Optional[AsyncIterator[list[Message]]] = None
    blocked: bool = False
    reasons: tuple[str, ...] = field(default_factory=tuple)
