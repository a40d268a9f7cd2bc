"""
Configuration for the vision model endpoint.

Values come from the environment (a local ``.env`` is loaded first). Several
API keys may be given comma-separated in VISION_API_KEYS; at most MAX_KEYS are
used for rotation.
"""
from __future__ import annotations

import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()

MAX_KEYS = 3
DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_MAX_TOKENS = 2000
DEFAULT_TEMPERATURE = 0.1
ROTATION_COUNTER_KEY = "vision_api_key_index"


class EndpointConfig(BaseModel):
    api_keys: List[str] = Field(default_factory=list)
    model: str = DEFAULT_MODEL
    base_url: Optional[str] = DEFAULT_BASE_URL
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    timeout: float = 60.0

    @field_validator("api_keys", mode="before")
    def split_keys(cls, v):  # type: ignore
        return parse_api_keys(v)

    @field_validator("base_url", mode="before")
    def blank_base_url(cls, v):  # type: ignore
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @classmethod
    def from_env(cls) -> "EndpointConfig":
        keys = os.getenv("VISION_API_KEYS") or os.getenv("VISION_API_KEY") or ""
        return cls(
            api_keys=keys,
            model=os.getenv("VISION_MODEL", DEFAULT_MODEL),
            base_url=os.getenv("VISION_BASE_URL", DEFAULT_BASE_URL),
            max_tokens=int(os.getenv("VISION_MAX_TOKENS", str(DEFAULT_MAX_TOKENS))),
            temperature=float(os.getenv("VISION_TEMPERATURE", str(DEFAULT_TEMPERATURE))),
        )


def parse_api_keys(value) -> List[str]:
    """``"a, b,,c"`` -> ``["a", "b", "c"]``, capped at MAX_KEYS."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    keys = [str(key).strip() for key in value if key is not None and str(key).strip()]
    return keys[:MAX_KEYS]
