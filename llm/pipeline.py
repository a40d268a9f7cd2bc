from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional, Protocol, Sequence

from config import MAX_KEYS, ROTATION_COUNTER_KEY, EndpointConfig
from errors import AllKeysExhausted, ConfigurationError, InvalidInput, RotatableError
from schemas.resume import ResumeData

from .client import ImagePayload, VisionClient, VisionModel, encode_image
from .parsing import normalize_extraction, parse_model_response
from .prompts import build_prompt

logger = logging.getLogger(__name__)


class CounterStore(Protocol):
    def get(self, key: str) -> Optional[int]: ...

    def set(self, key: str, value: int) -> None: ...


class InMemoryCounterStore:
    """Process-local counter store; shares the rotation index between extractor instances."""

    def __init__(self):
        self._values: Dict[str, int] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[int]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: int) -> None:
        with self._lock:
            self._values[key] = value


ClientFactory = Callable[[str], VisionModel]


class ResumeExtractor:
    """
    Turns resume page images into ResumeData, rotating through the configured API
    keys when one is rate limited or rejected.

    The rotation index lives in an optional shared counter store. Without one
    every call starts at the first key. The read/advance pair is not atomic;
    concurrent callers may both advance it, which only affects load spreading.
    """

    def __init__(
        self,
        config: EndpointConfig,
        *,
        counter_store: Optional[CounterStore] = None,
        client_factory: Optional[ClientFactory] = None,
        prompt: Optional[str] = None,
    ):
        if not config.api_keys:
            raise ConfigurationError(
                "No API keys configured. Set VISION_API_KEYS (comma-separated) or VISION_API_KEY."
            )
        self.config = config
        self.keys = config.api_keys[:MAX_KEYS]
        self.counter_store = counter_store
        self.client_factory = client_factory or self._build_client
        self.prompt = prompt or build_prompt()

    def _build_client(self, api_key: str) -> VisionModel:
        return VisionClient(
            api_key=api_key,
            model=self.config.model,
            base_url=self.config.base_url,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            timeout=self.config.timeout,
        )

    def extract(self, images: Sequence[ImagePayload]) -> ResumeData:
        if isinstance(images, (str, bytes, bytearray)) or not images:
            raise InvalidInput("No images provided")
        encoded = [encode_image(image) for image in images]

        start = self._start_index()
        last_error: Optional[RotatableError] = None
        for attempt in range(len(self.keys)):
            index = (start + attempt) % len(self.keys)
            client = self.client_factory(self.keys[index])
            try:
                raw = client.complete(self.prompt, encoded)
            except RotatableError as exc:
                last_error = exc
                logger.warning(
                    "API key #%s (%s) failed on attempt %s/%s: %s",
                    index + 1,
                    _mask(self.keys[index]),
                    attempt + 1,
                    len(self.keys),
                    exc,
                )
                continue

            self._advance(index)
            logger.info("Extraction succeeded with API key #%s", index + 1)
            logger.debug("AI response received: %s", raw[:1000])
            return normalize_extraction(parse_model_response(raw))

        raise AllKeysExhausted(last_error, attempts=len(self.keys)) from last_error

    def _start_index(self) -> int:
        if self.counter_store is None:
            return 0
        try:
            value = self.counter_store.get(ROTATION_COUNTER_KEY)
        except Exception as exc:
            logger.warning("Rotation counter read failed, starting at key #1: %s", exc)
            return 0
        try:
            return int(value) % len(self.keys) if value is not None else 0
        except (TypeError, ValueError):
            return 0

    def _advance(self, used_index: int) -> None:
        if self.counter_store is None:
            return
        try:
            self.counter_store.set(ROTATION_COUNTER_KEY, (used_index + 1) % len(self.keys))
        except Exception as exc:
            logger.warning("Rotation counter update failed: %s", exc)


def extract_resume(
    images: Sequence[ImagePayload],
    config: Optional[EndpointConfig] = None,
    counter_store: Optional[CounterStore] = None,
) -> ResumeData:
    extractor = ResumeExtractor(config or EndpointConfig.from_env(), counter_store=counter_store)
    return extractor.extract(images)


def _mask(key: str) -> str:
    return f"...{key[-4:]}" if len(key) > 4 else "****"
