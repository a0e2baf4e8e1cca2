"""Two-stage content-safety gate.

Runs a prompt-shield (jailbreak / prompt-injection) classification and a
four-level category moderation over the same text, concurrently, and reduces
both answers to a single :class:`SafetyDecision`.  Any failure of either call
fails the whole evaluation: a message is never let through on a partial answer.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from safechat.config import SafetyConfig
from safechat.safety.models import (
    CATEGORIES,
    Category,
    SafetyCheckError,
    SafetyDecision,
    SafetyFailure,
)

logger = logging.getLogger(__name__)

OUTPUT_TYPE = "FourSeverityLevels"


class SafetyGate:
    """Evaluate user text against the prompt shield and the text moderator.

    Parameters
    ----------
    config : SafetyConfig
        Endpoints and keys for both classifiers.
    client : httpx.AsyncClient | None
        Optional shared client.  When *None* a client is opened per
        evaluation and closed afterwards.
    """

    def __init__(self, config: SafetyConfig, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._client = client

    # -- requests ------------------------------------------------------------

    def _headers(self, key: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Ocp-Apim-Subscription-Key": key,
        }

    async def _post(self, client: httpx.AsyncClient, url: str, key: str, payload: dict) -> Any:
        try:
            response = await client.post(url, json=payload, headers=self._headers(key))
        except httpx.HTTPError as exc:
            raise SafetyCheckError(SafetyFailure.TRANSPORT_FAILURE, str(exc)) from exc

        if not response.is_success:
            raise SafetyCheckError(
                SafetyFailure.TRANSPORT_FAILURE,
                f"{url.split('?')[0]} returned HTTP {response.status_code}",
            )
        try:
            return response.json()
        except ValueError as exc:
            raise SafetyCheckError(SafetyFailure.UPSTREAM_REJECTED, "response body is not JSON") from exc

    async def _shield_prompt(self, client: httpx.AsyncClient, text: str) -> bool:
        body = await self._post(
            client,
            self.config.shield_url,
            self.config.shield_key,
            {"userPrompt": text, "documents": []},
        )
        try:
            attack = body["userPromptAnalysis"]["attackDetected"]
        except (KeyError, TypeError) as exc:
            raise SafetyCheckError(
                SafetyFailure.UPSTREAM_REJECTED, "missing userPromptAnalysis.attackDetected"
            ) from exc
        if not isinstance(attack, bool):
            raise SafetyCheckError(SafetyFailure.UPSTREAM_REJECTED, f"attackDetected is {attack!r}")
        return attack

    async def _moderate_text(self, client: httpx.AsyncClient, text: str) -> dict[Category, int]:
        body = await self._post(
            client,
            self.config.moderation_url,
            self.config.moderation_key,
            {
                "text": text,
                "categories": [c.value for c in CATEGORIES],
                "haltOnBlocklistHit": False,
                "outputType": OUTPUT_TYPE,
            },
        )
        try:
            analysis = body["categoriesAnalysis"]
            reported = {entry["category"]: entry["severity"] for entry in analysis}
        except (KeyError, TypeError) as exc:
            raise SafetyCheckError(SafetyFailure.UPSTREAM_REJECTED, "malformed categoriesAnalysis") from exc

        severities: dict[Category, int] = {}
        for category in CATEGORIES:
            severity = reported.get(category.value)
            if isinstance(severity, bool) or not isinstance(severity, int) or severity < 0:
                raise SafetyCheckError(
                    SafetyFailure.UPSTREAM_REJECTED,
                    f"no usable severity for {category.value}: {severity!r}",
                )
            severities[category] = severity
        return severities

    # -- public API ----------------------------------------------------------

    async def evaluate(self, text: str) -> SafetyDecision:
        """Run both classifiers over *text* and return the combined decision.

        Raises :class:`SafetyCheckError` if configuration is missing or if
        either classifier fails.  Both requests are awaited before any error
        is raised.
        """
        if not text or not text.strip():
            raise ValueError("text must be a non-empty string")

        missing = self.config.missing()
        if missing:
            raise SafetyCheckError(SafetyFailure.CONFIG_MISSING, ", ".join(missing))

        if self._client is not None:
            results = await self._run_checks(self._client, text)
        else:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                results = await self._run_checks(client, text)

        for result in results:
            if isinstance(result, BaseException):
                logger.warning("Safety check failed: %s", result)
                raise result

        attack_detected, severities = results
        decision = SafetyDecision(attack_detected=attack_detected, category_severities=severities)
        logger.debug(
            "Safety decision: attack=%s severities=%s blocked=%s",
            attack_detected,
            {c.value: s for c, s in severities.items()},
            decision.blocked,
        )
        return decision

    async def _run_checks(self, client: httpx.AsyncClient, text: str) -> list:
        return await asyncio.gather(
            self._shield_prompt(client, text),
            self._moderate_text(client, text),
            return_exceptions=True,
        )
