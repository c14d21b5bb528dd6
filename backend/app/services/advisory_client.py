from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from app.config import Settings

logger = logging.getLogger(__name__)

ADVISORY_UNAVAILABLE_MESSAGE = "AI travel advisory is currently unavailable."

TRAVEL_ADVISORY_PROMPT_TEMPLATE = (
    "You are a friendly travel assistant.\n\n"
    "A traveller is planning a trip to: {location}\n\n"
    "In under 120 words, give practical advice for the coming week:\n"
    "1. What to pack for the typical weather there.\n"
    "2. Anything seasonal worth knowing.\n"
    "3. One or two local tips.\n"
    "Use plain, human-friendly language."
)


class AdvisoryUnavailableError(RuntimeError):
    pass


def build_advisory_prompt(location: str) -> str:
    return TRAVEL_ADVISORY_PROMPT_TEMPLATE.format(location=location.strip() or "an unspecified destination")


@dataclass
class AdvisoryClient:
    settings: Settings
    _client: httpx.AsyncClient = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._client = httpx.AsyncClient(timeout=self.settings.request_timeout_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    async def generate_advisory(self, location: str) -> str:
        """Ask the text-generation service for a travel advisory and return its text verbatim."""
        if not self.settings.advisory_api_key:
            raise AdvisoryUnavailableError("No advisory API key configured.")

        response = await self._client.post(
            f"{self.settings.advisory_api_url}/models/{self.settings.advisory_model}:generateContent",
            params={"key": self.settings.advisory_api_key},
            json={"contents": [{"parts": [{"text": build_advisory_prompt(location)}]}]},
        )
        response.raise_for_status()
        return _extract_text(response.json())


def _extract_text(payload: object) -> str:
    if not isinstance(payload, dict):
        raise ValueError("Advisory response is not an object.")
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise ValueError("Advisory response has no candidates.")

    content = candidates[0].get("content", {}) if isinstance(candidates[0], dict) else {}
    parts = content.get("parts", []) if isinstance(content, dict) else []
    texts = [part.get("text") for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)]
    if not texts:
        raise ValueError("Advisory response has no text parts.")
    return "".join(texts)
