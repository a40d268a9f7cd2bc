from __future__ import annotations

import base64
import logging
from typing import Any, List, Optional, Protocol, Sequence, Union

import openai
from openai import OpenAI

from errors import InvalidApiKey, InvalidInput, RateLimited, UpstreamError, UpstreamUnavailable

from .prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

ImagePayload = Union[bytes, bytearray, str]

_RATE_LIMIT_MARKERS = (
    "rate limit",
    "rate_limit",
    "quota",
    "resource exhausted",
    "resource_exhausted",
    "too many requests",
)
_KEY_MARKERS = ("api key", "api_key", "invalid key", "unauthorized")


class VisionModel(Protocol):
    def complete(self, prompt: str, images: Sequence[str]) -> str: ...


class VisionClient:
    """Chat-completions client for a vision model behind an OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        *,
        temperature: float = 0.1,
        max_tokens: int = 2000,
        timeout: float = 60.0,
    ):
        # Retries are owned by the key-rotation loop, not the SDK.
        self.client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def complete(self, prompt: str, images: Sequence[str]) -> str:
        content: List[dict] = [{"type": "text", "text": prompt}]
        content.extend({"type": "image_url", "image_url": {"url": url}} for url in images)
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": content},
        ]
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.OpenAIError as exc:
            raise classify_error(exc) from exc

        if not resp.choices:
            raise UpstreamUnavailable("Unexpected response format from AI service: no choices")
        return _message_text(resp.choices[0].message.content)


def classify_error(exc: Exception) -> UpstreamError:
    """Map an SDK or transport failure onto the rotatable/non-rotatable taxonomy."""
    status = getattr(exc, "status_code", None)
    message = str(exc)
    lowered = message.lower()

    if (
        isinstance(exc, openai.RateLimitError)
        or status == 429
        or any(marker in lowered for marker in _RATE_LIMIT_MARKERS)
    ):
        return RateLimited(message, status_code=status or 429)
    if (
        isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError))
        or status in (401, 403)
        or any(marker in lowered for marker in _KEY_MARKERS)
    ):
        return InvalidApiKey(message, status_code=status or 401)
    if isinstance(exc, openai.APIConnectionError):
        return UpstreamUnavailable(f"AI service unreachable: {message}")
    return UpstreamUnavailable(message, status_code=status)


def encode_image(payload: ImagePayload) -> str:
    """
    Normalize one page image to a ``data:`` URL. Accepts raw image bytes, a bare
    base64 string, or an existing data URL.
    """
    if isinstance(payload, (bytes, bytearray)):
        if not payload:
            raise InvalidInput("Invalid image data format: empty image")
        return "data:image/png;base64," + base64.b64encode(bytes(payload)).decode("ascii")
    if not isinstance(payload, str):
        raise InvalidInput(f"Invalid image data format: {type(payload).__name__}")

    text = payload.strip()
    mime = "image/png"
    if text.startswith("data:"):
        header, _, text = text.partition(",")
        mime = header[len("data:") :].split(";")[0] or mime
    elif "," in text:
        text = text.split(",", 1)[1]
    if not text.strip():
        raise InvalidInput("Invalid image data format: empty image")
    return f"data:{mime};base64,{text.strip()}"


def _message_text(content: Any) -> str:
    if isinstance(content, list):
        parts = []
        for part in content:
            text = part.get("text") if isinstance(part, dict) else getattr(part, "text", None)
            parts.append(text or "")
        return "".join(parts).strip()
    return (content or "").strip()
