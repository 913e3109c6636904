"""External content classifier capability.

The pipeline depends only on the :class:`ContentClassifier` protocol.  The
production implementation, :class:`RemoteClassifier`, combines an
OpenAI-compatible moderation endpoint (called with ``httpx``) with an
Anthropic model prompted for a profanity verdict.  Every failure mode --
timeout, transport error, bad status, malformed payload, missing API key --
is raised as :class:`ClassifierUnavailable`.
"""

from __future__ import annotations

import json
import logging
from typing import Optional, Protocol

import anthropic
import httpx

from slangdex.config import Settings
from slangdex.errors import ClassifierUnavailable
from slangdex.moderation.models import ClassificationResult, ProfanityResult
from slangdex.moderation.prompts import PROFANITY_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class ContentClassifier(Protocol):
    """Capability consumed by the moderation pipeline."""

    def classify(self, text: str) -> ClassificationResult: ...

    def detect_profanity(self, text: str) -> ProfanityResult: ...


# ---------------------------------------------------------------------------
# Moderation endpoint
# ---------------------------------------------------------------------------


class ModerationAPIClient:
    """Client for an OpenAI-compatible ``POST /moderations`` endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self._configured = bool(api_key)
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Authorization": f"Bearer {api_key}"} if api_key else {},
        )

    @property
    def configured(self) -> bool:
        return self._configured

    def classify(self, text: str) -> ClassificationResult:
        if not self._configured:
            raise ClassifierUnavailable("Moderation API not configured. Set OPENAI_API_KEY.")

        try:
            response = self._client.post("/moderations", json={"input": text})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise ClassifierUnavailable(f"Moderation request failed: {exc}") from exc
        except ValueError as exc:
            raise ClassifierUnavailable("Moderation response was not JSON") from exc

        try:
            result = payload["results"][0]
            scores = {
                str(name): float(score)
                for name, score in (result.get("category_scores") or {}).items()
            }
            return ClassificationResult(flagged=bool(result["flagged"]), category_scores=scores)
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as exc:
            raise ClassifierUnavailable("Malformed moderation response") from exc

    def close(self) -> None:
        self._client.close()


# ---------------------------------------------------------------------------
# Profanity detector
# ---------------------------------------------------------------------------


def _strip_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_profanity_reply(content: str) -> ProfanityResult:
    """Parse the model's JSON reply into a :class:`ProfanityResult`."""
    try:
        data = json.loads(_strip_fences(content))
    except json.JSONDecodeError as exc:
        raise ClassifierUnavailable("Profanity check returned invalid JSON") from exc
    if not isinstance(data, dict) or not isinstance(data.get("containsProfanity"), bool):
        raise ClassifierUnavailable("Profanity check returned an unexpected shape")
    return ProfanityResult(
        is_profane=data["containsProfanity"],
        reason=str(data.get("reason") or ""),
    )


class ProfanityDetector:
    """Asks an Anthropic model for a JSON profanity verdict."""

    def __init__(self, model: str, api_key: str, timeout: float) -> None:
        self.model = model
        self._configured = bool(api_key)
        if self._configured:
            self._client = anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=1)
        else:
            self._client = None  # type: ignore[assignment]

    @property
    def configured(self) -> bool:
        return self._configured

    def detect_profanity(self, text: str) -> ProfanityResult:
        if not self._configured:
            raise ClassifierUnavailable("Profanity detector not configured. Set ANTHROPIC_API_KEY.")

        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=256,
                temperature=0,
                system=PROFANITY_SYSTEM_PROMPT,
                messages=[{"role": "user", "content": text}],
            )
        except anthropic.APIError as exc:
            raise ClassifierUnavailable(f"Profanity request failed: {exc}") from exc

        content = response.content[0].text if response.content else ""
        return parse_profanity_reply(content)


# ---------------------------------------------------------------------------
# Composite
# ---------------------------------------------------------------------------


class RemoteClassifier:
    """Production :class:`ContentClassifier` built from settings."""

    def __init__(self, moderation: ModerationAPIClient, profanity: ProfanityDetector) -> None:
        self._moderation = moderation
        self._profanity = profanity

    @classmethod
    def from_settings(cls, settings: Settings) -> RemoteClassifier:
        if not settings.openai_api_key:
            logger.warning("OPENAI_API_KEY not set; every submission will need manual review")
        if not settings.anthropic_api_key:
            logger.warning("ANTHROPIC_API_KEY not set; every submission will need manual review")
        return cls(
            ModerationAPIClient(
                base_url=settings.moderation_url,
                api_key=settings.openai_api_key,
                timeout=settings.classifier_timeout,
            ),
            ProfanityDetector(
                model=settings.profanity_model,
                api_key=settings.anthropic_api_key,
                timeout=settings.classifier_timeout,
            ),
        )

    def classify(self, text: str) -> ClassificationResult:
        return self._moderation.classify(text)

    def detect_profanity(self, text: str) -> ProfanityResult:
        return self._profanity.detect_profanity(text)
