from __future__ import annotations

from typing import Optional


class PortfolioError(Exception):
    """Base class for every error surfaced by the portfolio core."""


class InvalidInput(PortfolioError, ValueError):
    """Empty or malformed image list, or non-object data handed to a renderer."""


class ConfigurationError(PortfolioError):
    pass


class UpstreamError(PortfolioError):
    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamUnavailable(UpstreamError):
    """Endpoint unreachable or a non-success status that rotating keys will not fix."""


class RotatableError(UpstreamError):
    """A failure that should move the orchestrator on to the next API key."""


class RateLimited(RotatableError):
    pass


class InvalidApiKey(RotatableError):
    pass


class AllKeysExhausted(UpstreamError):
    def __init__(self, last_error: Optional[Exception], attempts: int):
        message = f"All {attempts} API key(s) failed"
        if last_error is not None:
            message = f"{message}: {last_error}"
        status = getattr(last_error, "status_code", None) or 429
        super().__init__(message, status_code=status)
        self.last_error = last_error
        self.attempts = attempts


class MalformedResponse(PortfolioError):
    pass


class RenderFailure(PortfolioError):
    """Renderer invariant violation. Indicates a programming error."""


def http_status(exc: Exception) -> int:
    if isinstance(exc, InvalidInput):
        return 400
    if isinstance(exc, InvalidApiKey):
        return 401
    if isinstance(exc, (RateLimited, AllKeysExhausted)):
        return 429
    if isinstance(exc, MalformedResponse):
        return 502
    if isinstance(exc, UpstreamUnavailable):
        return exc.status_code or 503
    return 500
