"""Content-safety gate: prompt shield plus category moderation."""

from safechat.safety.gate import SafetyGate
from safechat.safety.models import (
    CATEGORIES,
    JAILBREAK_REASON,
    Category,
    SafetyCheckError,
    SafetyDecision,
    SafetyFailure,
    describe_block,
)

__all__ = [
    "CATEGORIES",
    "JAILBREAK_REASON",
    "Category",
    "SafetyCheckError",
    "SafetyDecision",
    "SafetyFailure",
    "SafetyGate",
    "describe_block",
]
