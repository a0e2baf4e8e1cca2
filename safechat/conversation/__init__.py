"""Conversation pipeline: transcript, state machine, and reply streaming."""

from safechat.conversation.models import (
    ConversationState,
    ErrorKind,
    Message,
    OrchestrationError,
    Role,
    StateKind,
    SubmitResult,
)
from safechat.conversation.orchestrator import ConversationOrchestrator
from safechat.conversation.state import ConversationStateMachine, InvalidTransition
from safechat.conversation.stream import accumulate

__all__ = [
    "ConversationOrchestrator",
    "ConversationState",
    "ConversationStateMachine",
    "ErrorKind",
    "InvalidTransition",
    "Message",
    "OrchestrationError",
    "Role",
    "StateKind",
    "SubmitResult",
    "accumulate",
]
