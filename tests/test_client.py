import base64
from types import SimpleNamespace

import httpx
import openai
import pytest

from errors import InvalidApiKey, InvalidInput, RateLimited, UpstreamUnavailable
from llm.client import VisionClient, classify_error, encode_image


def _status_error(cls, status):
    request = httpx.Request("POST", "https://example.test/v1/chat/completions")
    response = httpx.Response(status, request=request)
    return cls("boom", response=response, body=None)


@pytest.mark.parametrize(
    "exc, expected, status",
    [
        (_status_error(openai.RateLimitError, 429), RateLimited, 429),
        (_status_error(openai.AuthenticationError, 401), InvalidApiKey, 401),
        (_status_error(openai.PermissionDeniedError, 403), InvalidApiKey, 403),
        (_status_error(openai.InternalServerError, 503), UpstreamUnavailable, 503),
        (_status_error(openai.BadRequestError, 400), UpstreamUnavailable, 400),
        (RuntimeError("RESOURCE_EXHAUSTED: quota exceeded"), RateLimited, 429),
        (RuntimeError("API key not valid. Please pass a valid API key."), InvalidApiKey, 401),
        (RuntimeError("socket closed"), UpstreamUnavailable, None),
    ],
)
def test_classify_error(exc, expected, status):
    classified = classify_error(exc)
    assert type(classified) is expected
    assert classified.status_code == status


def test_classify_connection_error():
    exc = openai.APIConnectionError(request=httpx.Request("POST", "https://example.test"))
    classified = classify_error(exc)
    assert isinstance(classified, UpstreamUnavailable)
    assert "unreachable" in str(classified)


def test_encode_image_variants():
    png = b"\x89PNG\r\n\x1a\nrest"
    encoded = base64.b64encode(png).decode("ascii")
    assert encode_image(png) == f"data:image/png;base64,{encoded}"
    assert encode_image(encoded) == f"data:image/png;base64,{encoded}"
    assert encode_image(f"data:image/jpeg;base64,{encoded}") == f"data:image/jpeg;base64,{encoded}"
    assert encode_image(f"junk,{encoded}") == f"data:image/png;base64,{encoded}"


@pytest.mark.parametrize("payload", [b"", "", "data:image/png;base64,", 42, None])
def test_encode_image_rejects_empty_or_unknown(payload):
    with pytest.raises(InvalidInput):
        encode_image(payload)


class _FakeCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def _client(completions):
    client = VisionClient(api_key="test-key", model="vision-model", base_url="https://example.test/v1")
    client.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return client


def test_complete_sends_prompt_and_images():
    message = SimpleNamespace(content='  {"name": "A"}  ')
    completions = _FakeCompletions(SimpleNamespace(choices=[SimpleNamespace(message=message)]))
    client = _client(completions)

    assert client.complete("extract", ["data:image/png;base64,AAAA"]) == '{"name": "A"}'
    call = completions.calls[0]
    assert call["model"] == "vision-model"
    assert call["messages"][0]["role"] == "system"
    user = call["messages"][1]["content"]
    assert user[0] == {"type": "text", "text": "extract"}
    assert user[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}


def test_complete_without_choices():
    client = _client(_FakeCompletions(SimpleNamespace(choices=[])))
    with pytest.raises(UpstreamUnavailable):
        client.complete("extract", [])


def test_complete_translates_sdk_errors():
    client = _client(_FakeCompletions(error=_status_error(openai.RateLimitError, 429)))
    with pytest.raises(RateLimited) as info:
        client.complete("extract", [])
    assert isinstance(info.value.__cause__, openai.RateLimitError)
