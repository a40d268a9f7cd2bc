from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

from errors import MalformedResponse
from schemas.resume import ResumeData

logger = logging.getLogger(__name__)

ARRAY_FIELDS = ("experience", "education", "skills", "projects")
SCALAR_FIELDS = ("name", "email", "location", "summary")
# Not requested by the prompt, but kept when a model volunteers them.
OPTIONAL_SCALAR_FIELDS = ("professionalTitle", "phone", "githubUrl", "linkedinUrl")

PARSE_FAILURE_MESSAGE = (
    "Failed to parse AI response. Please retry with a clearer PDF or try again in a moment."
)

_FENCE = re.compile(r"```[a-zA-Z]*[ \t]*\n?(.*?)\n?```", re.S)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_LEADING_JUNK = re.compile(r"^[^{]*")
_TRAILING_JUNK = re.compile(r"[^}]*$")


def strip_code_fences(text: str) -> str:
    match = _FENCE.search(text)
    if match and "{" in match.group(1):
        return match.group(1).strip()
    return text.strip()


def extract_json_text(text: str) -> Optional[str]:
    """
    Return the first balanced ``{...}`` block in ``text``. Braces inside JSON
    string literals do not count toward the depth.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        ch = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA.sub(r"\1", text)


def parse_model_response(raw: str) -> Dict[str, Any]:
    """
    Reduce a model reply to a JSON object: drop code fences, take the first
    balanced object, remove trailing commas, parse. One more aggressive pass
    (cut everything before the first ``{`` and after the last ``}``) runs
    before giving up with MalformedResponse.
    """
    if not raw or not raw.strip():
        raise MalformedResponse("Empty response from AI model. " + PARSE_FAILURE_MESSAGE)

    text = strip_code_fences(raw)
    candidate = strip_trailing_commas(extract_json_text(text) or text)
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as first_error:
        logger.warning("JSON parse failed (%s); retrying with aggressive cleanup", first_error)
        logger.debug("Extracted JSON candidate: %s", candidate[:1000])
        cleaned = strip_trailing_commas(_TRAILING_JUNK.sub("", _LEADING_JUNK.sub("", text)))
        if not cleaned or cleaned == candidate:
            raise MalformedResponse(PARSE_FAILURE_MESSAGE) from first_error
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise MalformedResponse(PARSE_FAILURE_MESSAGE) from exc
        logger.info("Parsed model response after aggressive cleanup")

    if not isinstance(parsed, dict):
        raise MalformedResponse("Invalid response format from AI: expected a JSON object.")
    return parsed


def normalize_extraction(parsed: Dict[str, Any]) -> ResumeData:
    payload: Dict[str, Any] = {}
    for field in SCALAR_FIELDS + OPTIONAL_SCALAR_FIELDS:
        value = parsed.get(field)
        keep = isinstance(value, (str, int, float)) and not isinstance(value, bool) and value != ""
        payload[field] = value if keep else None
    for field in ARRAY_FIELDS:
        value = parsed.get(field)
        payload[field] = value if isinstance(value, list) else []
    return ResumeData.model_validate(payload)
