import json
import logging

import pytest

from config import ROTATION_COUNTER_KEY, EndpointConfig
from errors import (
    AllKeysExhausted,
    ConfigurationError,
    InvalidApiKey,
    InvalidInput,
    MalformedResponse,
    RateLimited,
    UpstreamUnavailable,
)
from llm.pipeline import InMemoryCounterStore, ResumeExtractor

PAGE = b"\x89PNG\r\n\x1a\nfake-page"
REPLY = json.dumps({"name": "Key Two", "skills": ["Go"], "experience": []})


class FakeVision:
    def __init__(self, api_key, script, calls):
        self.api_key = api_key
        self.script = script
        self.calls = calls

    def complete(self, prompt, images):
        self.calls.append((self.api_key, len(images)))
        outcome = self.script[self.api_key]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _extractor(script, keys=("k1", "k2", "k3"), store=None):
    calls = []
    config = EndpointConfig(api_keys=list(keys))
    extractor = ResumeExtractor(
        config,
        counter_store=store,
        client_factory=lambda key: FakeVision(key, script, calls),
    )
    return extractor, calls


def test_all_keys_rate_limited():
    script = {key: RateLimited("quota exceeded", status_code=429) for key in ("k1", "k2", "k3")}
    extractor, calls = _extractor(script)
    with pytest.raises(AllKeysExhausted) as info:
        extractor.extract([PAGE])
    assert [key for key, _ in calls] == ["k1", "k2", "k3"]
    assert info.value.attempts == 3
    assert info.value.status_code == 429
    assert isinstance(info.value.last_error, RateLimited)
    assert info.value.__cause__ is info.value.last_error


def test_second_key_succeeds_after_rate_limit():
    script = {"k1": RateLimited("slow down"), "k2": REPLY, "k3": "unused"}
    extractor, calls = _extractor(script)
    resume = extractor.extract([PAGE, PAGE])
    assert calls == [("k1", 2), ("k2", 2)]
    assert resume.name == "Key Two"
    assert resume.skills == ["Go"]


def test_invalid_key_rotates_too():
    script = {"k1": InvalidApiKey("bad key", status_code=401), "k2": REPLY}
    extractor, calls = _extractor(script, keys=("k1", "k2"))
    assert extractor.extract([PAGE]).name == "Key Two"
    assert len(calls) == 2


def test_non_rotatable_error_aborts():
    script = {"k1": UpstreamUnavailable("down", status_code=503), "k2": REPLY}
    extractor, calls = _extractor(script)
    with pytest.raises(UpstreamUnavailable):
        extractor.extract([PAGE])
    assert len(calls) == 1


def test_malformed_reply_is_not_retried():
    extractor, calls = _extractor({"k1": "I cannot help with that.", "k2": REPLY})
    with pytest.raises(MalformedResponse):
        extractor.extract([PAGE])
    assert len(calls) == 1


def test_counter_store_advances_past_the_key_used():
    store = InMemoryCounterStore()
    script = {"k1": REPLY, "k2": REPLY, "k3": REPLY}
    extractor, calls = _extractor(script, store=store)

    extractor.extract([PAGE])
    assert store.get(ROTATION_COUNTER_KEY) == 1
    extractor.extract([PAGE])
    extractor.extract([PAGE])
    assert [key for key, _ in calls] == ["k1", "k2", "k3"]
    assert store.get(ROTATION_COUNTER_KEY) == 0


def test_rotation_starts_from_stored_index_and_wraps():
    store = InMemoryCounterStore()
    store.set(ROTATION_COUNTER_KEY, 2)
    script = {"k1": REPLY, "k2": REPLY, "k3": RateLimited("limited")}
    extractor, calls = _extractor(script, store=store)
    extractor.extract([PAGE])
    assert [key for key, _ in calls] == ["k3", "k1"]
    assert store.get(ROTATION_COUNTER_KEY) == 1


def test_broken_counter_store_falls_back_to_first_key(caplog):
    class Broken:
        def get(self, key):
            raise ConnectionError("store offline")

        def set(self, key, value):
            raise ConnectionError("store offline")

    extractor, calls = _extractor({"k1": REPLY}, store=Broken())
    with caplog.at_level(logging.WARNING):
        assert extractor.extract([PAGE]).name == "Key Two"
    assert calls[0][0] == "k1"
    assert "store offline" in caplog.text


def test_rotation_logs_masked_key(caplog):
    script = {"secret-key-1111": RateLimited("limited"), "secret-key-2222": REPLY}
    extractor, _ = _extractor(script, keys=tuple(script))
    with caplog.at_level(logging.WARNING, logger="llm.pipeline"):
        extractor.extract([PAGE])
    assert "...1111" in caplog.text
    assert "secret-key-1111" not in caplog.text


@pytest.mark.parametrize("images", [[], None, b"raw-bytes", "data:image/png;base64,AAAA"])
def test_images_must_be_a_non_empty_list(images):
    extractor, calls = _extractor({"k1": REPLY})
    with pytest.raises(InvalidInput):
        extractor.extract(images)
    assert calls == []


def test_empty_page_rejected_before_any_call():
    extractor, calls = _extractor({"k1": REPLY})
    with pytest.raises(InvalidInput):
        extractor.extract([PAGE, b""])
    assert calls == []


def test_no_keys_configured():
    with pytest.raises(ConfigurationError):
        ResumeExtractor(EndpointConfig(api_keys=" , "))


def test_only_first_three_keys_used():
    config = EndpointConfig(api_keys="a,b,c,d")
    assert ResumeExtractor(config).keys == ["a", "b", "c"]
