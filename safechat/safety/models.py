"""Data models for the content-safety gate."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

JAILBREAK_REASON = "potential jailbreak"

_BLOCK_MESSAGE = (
    "Sorry, we can't process that message as it seems you are trying to send "
    "inappropriate content. Detected: {detected}."
)


class Category(Enum):
    """Moderation categories, in the order reasons are reported."""

    HATE = "Hate"
    SEXUAL = "Sexual"
    SELF_HARM = "SelfHarm"
    VIOLENCE = "Violence"

    @property
    def reason(self) -> str:
        return self.value.lower()


CATEGORIES: tuple[Category, ...] = tuple(Category)


class SafetyFailure(Enum):
    """Why a safety evaluation could not produce a decision."""

    CONFIG_MISSING = "config_missing"
    TRANSPORT_FAILURE = "transport_failure"
    UPSTREAM_REJECTED = "upstream_rejected"


class SafetyCheckError(Exception):
    """A safety evaluation failed; the message must not reach the model."""

    def __init__(self, reason: SafetyFailure, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


@dataclass(frozen=True)
class SafetyDecision:
    """Combined verdict of the prompt shield and the text moderator.

    Severities are the moderator's ordinal levels; any level above zero
    blocks, whatever its magnitude.
    """

    attack_detected: bool
    category_severities: Mapping[Category, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "category_severities", MappingProxyType(dict(self.category_severities))
        )

    @property
    def flagged_categories(self) -> list[Category]:
        return [c for c in CATEGORIES if self.category_severities.get(c, 0) > 0]

    @property
    def blocked(self) -> bool:
        return self.attack_detected or bool(self.flagged_categories)

    @property
    def reasons(self) -> tuple[str, ...]:
        reasons = [JAILBREAK_REASON] if self.attack_detected else []
        reasons.extend(c.reason for c in self.flagged_categories)
        return tuple(reasons)


def describe_block(reasons: tuple[str, ...] | list[str]) -> str:
    """Return the refusal sentence shown to the user for a blocked message."""
    return _BLOCK_MESSAGE.format(detected=", ".join(reasons))
