"""Conversation orchestrator.

Owns the transcript of one conversation and sequences every submission:
safety gate first, then (only on a pass) the streamed completion, whose
fragments are folded into a single in-progress assistant message.

At most one submission is in flight per orchestrator.  That is enforced by
the state machine: a submit is only accepted from ``IDLE``, ``BLOCKED`` or
``FAILED``.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import AsyncIterator, Callable, Optional, Protocol

from safechat.conversation.models import (
    ConversationState,
    ErrorKind,
    Message,
    OrchestrationError,
    Role,
    SubmitResult,
)
from safechat.conversation.state import ConversationStateMachine
from safechat.conversation.stream import accumulate
from safechat.llm.prompts import SYSTEM_PROMPT
from safechat.safety.models import SafetyDecision

logger = logging.getLogger(__name__)


class SafetyEvaluator(Protocol):
    async def evaluate(self, text: str) -> SafetyDecision: ...


class CompletionEngine(Protocol):
    def stream_chat(
        self, messages: list[dict[str, str]], system_prompt: str
    ) -> AsyncIterator[str]: ...


class ConversationOrchestrator:
    """Safety-gated streaming conversation.

    Parameters
    ----------
    gate : SafetyEvaluator
        Usually a :class:`safechat.safety.SafetyGate`.
    engine : CompletionEngine
        Usually a :class:`safechat.llm.LLMClient`.
    system_prompt : str
        Persona/policy preamble sent with every completion.
    """

    def __init__(
        self,
        gate: SafetyEvaluator,
        engine: CompletionEngine,
        system_prompt: str = SYSTEM_PROMPT,
        state_machine: Optional[ConversationStateMachine] = None,
    ) -> None:
        self._gate = gate
        self._engine = engine
        self._system_prompt = system_prompt
        self._machine = state_machine or ConversationStateMachine()
        self._messages: list[Message] = []
        # Index of the assistant message being streamed, if any.
        self._pending: Optional[int] = None
        # Token identifying the active stream; replaced or cleared on cancel.
        self._run: Optional[object] = None

    # -- read access -----------------------------------------------------------

    @property
    def transcript(self) -> list[Message]:
        """A copy of the current transcript, oldest first."""
        return list(self._messages)

    @property
    def state(self) -> ConversationState:
        return self._machine.state

    def history(self) -> list[dict[str, str]]:
        """The transcript in the shape the completion engine consumes."""
        return [m.to_dict() for m in self._messages]

    def subscribe(self, listener: Callable[[ConversationState], None]) -> Callable[[], None]:
        """Call *listener* on every state change."""
        return self._machine.subscribe(listener)

    # -- submission ------------------------------------------------------------

    async def submit(self, text: str) -> Optional[SubmitResult]:
        """Submit a user message.

        Returns *None* (and changes nothing) when *text* is blank or another
        submission is still in flight.  Returns a blocked
        :class:`SubmitResult` when the safety gate trips.  Raises
        :class:`OrchestrationError` with ``SAFETY_UNAVAILABLE`` when the gate
        itself fails.  Otherwise the result carries the transcript with the
        new user message and an ``updates`` iterator that streams the reply.
        """
        if not text or not text.strip():
            logger.debug("Ignoring blank submission")
            return None
        if not self._machine.accepts_submit:
            logger.warning("Submission ignored: conversation is %s", self.state.kind.value)
            return None

        self._machine.transition(ConversationState.checking_safety())
        try:
            decision = await self._gate.evaluate(text)
        except asyncio.CancelledError:
            self._machine.transition(ConversationState.failed(ErrorKind.SAFETY_UNAVAILABLE))
            raise
        except Exception as exc:
            logger.warning("Safety check unavailable: %s", exc)
            self._machine.transition(ConversationState.failed(ErrorKind.SAFETY_UNAVAILABLE))
            raise OrchestrationError(ErrorKind.SAFETY_UNAVAILABLE, str(exc)) from exc

        if decision.blocked:
            reasons = decision.reasons
            logger.info("Message blocked: %s", ", ".join(reasons))
            self._machine.transition(ConversationState.blocked(reasons))
            return SubmitResult(transcript=self.transcript, blocked=True, reasons=reasons)

        self._messages.append(Message(Role.USER, text))
        run = object()
        self._run = run
        self._machine.transition(ConversationState.streaming())
        try:
            fragments = self._engine.stream_chat(self.history(), self._system_prompt)
        except Exception as exc:
            logger.warning("Completion failed to start: %s", exc)
            self._finish(ConversationState.failed(ErrorKind.COMPLETION_FAILURE))
            raise OrchestrationError(ErrorKind.COMPLETION_FAILURE, str(exc)) from exc

        updates = self._stream_reply(run, fragments)
        # An updates iterator dropped before its first pull never runs its
        # finally block, so release the conversation when it is collected.
        weakref.finalize(updates, self._abandon, run)
        return SubmitResult(transcript=self.transcript, updates=updates)

    async def _stream_reply(
        self, run: object, fragments: AsyncIterator[str]
    ) -> AsyncIterator[list[Message]]:
        snapshots = accumulate(fragments)
        try:
            async for text in snapshots:
                if self._run is not run:
                    return
                self._put_reply(text)
                yield self.transcript
                if self._run is not run:
                    return
        except Exception as exc:
            if self._run is run:
                logger.warning("Completion failed: %s", exc)
                self._finish(ConversationState.failed(ErrorKind.COMPLETION_FAILURE))
            raise OrchestrationError(ErrorKind.COMPLETION_FAILURE, str(exc)) from exc
        finally:
            await snapshots.aclose()
            aclose = getattr(fragments, "aclose", None)
            if aclose is not None:
                await aclose()
            # Natural end, or the consumer stopped pulling.
            if self._run is run:
                self._finish(ConversationState.idle())

    def _abandon(self, run: object) -> None:
        if self._run is run:
            logger.info("Reply stream dropped before completion")
            self._finish(ConversationState.idle())

    def _put_reply(self, text: str) -> None:
        message = Message(Role.ASSISTANT, text)
        if self._pending is None:
            self._messages.append(message)
            self._pending = len(self._messages) - 1
        else:
            self._messages[self._pending] = message

    def _finish(self, state: ConversationState) -> None:
        self._run = None
        self._pending = None
        self._machine.transition(state)

    # -- mutation --------------------------------------------------------------

    def cancel(self) -> bool:
        """Stop the in-flight reply, keeping whatever has arrived so far.

        Returns *True* if a stream was cancelled.
        """
        if self._run is None:
            return False
        logger.info("Reply stream cancelled")
        self._finish(ConversationState.idle())
        return True

    def delete(self, position: int) -> Message:
        """Remove and return the message at *position*.

        Deleting the assistant message that is still streaming cancels the
        stream first.
        """
        if not 0 <= position < len(self._messages):
            raise IndexError(f"No message at position {position}")
        if self._pending is not None:
            if position == self._pending:
                self.cancel()
            elif position < self._pending:
                self._pending -= 1
        return self._messages.pop(position)
