import pytest

from errors import MalformedResponse
from llm.parsing import extract_json_text, normalize_extraction, parse_model_response, strip_code_fences
from llm.prompts import build_prompt


def test_fenced_reply_with_prose_and_trailing_comma():
    raw = 'Here is the data:\n```json\n{"name":"A","skills":["x","y",]}\n```\nThanks!'
    resume = normalize_extraction(parse_model_response(raw))
    assert resume.name == "A"
    assert resume.skills == ["x", "y"]
    assert resume.experience == []
    assert resume.education == []
    assert resume.projects == []


def test_braces_inside_strings_do_not_end_the_object():
    text = 'prefix {"summary": "uses {curly} braces and \\"quotes\\" }", "skills": []} suffix {"x": 1}'
    assert extract_json_text(text) == (
        '{"summary": "uses {curly} braces and \\"quotes\\" }", "skills": []}'
    )


def test_extract_json_text_without_object():
    assert extract_json_text("no json here") is None
    assert extract_json_text('{"open": true') is None


def test_fence_without_object_is_left_alone():
    text = "```python\nprint(1)\n```"
    assert strip_code_fences(text) == text


def test_trailing_commas_before_closing_brackets_removed():
    raw = 'Sure! {"name": "B", "skills": ["go",],} (let me know if you need more'
    assert parse_model_response(raw) == {"name": "B", "skills": ["go"]}


@pytest.mark.parametrize("raw", ["", "   ", "I could not read the resume.", "[1, 2, 3]", '{"name": }'])
def test_unparseable_replies_raise(raw):
    with pytest.raises(MalformedResponse):
        parse_model_response(raw)


def test_normalize_discards_wrong_types():
    resume = normalize_extraction(
        {
            "name": "",
            "email": ["a@b.c"],
            "location": 7,
            "summary": None,
            "experience": {"title": "x"},
            "skills": ["Python", 3],
            "projects": "none",
            "phone": "555",
            "unexpected": "ignored",
        }
    )
    assert resume.name is None
    assert resume.email is None
    assert resume.location == "7"
    assert resume.experience == []
    assert resume.skills == ["Python", "3"]
    assert resume.projects == []
    assert resume.phone == "555"


def test_normalize_discards_booleans():
    resume = normalize_extraction({"name": True, "location": False, "phone": True, "summary": 0})
    assert resume.name is None
    assert resume.location is None
    assert resume.phone is None
    assert resume.summary == "0"


def test_build_prompt_limits():
    prompt = build_prompt(max_experience=2, min_skills=5, max_skills=6)
    assert "top 2 most recent" in prompt
    assert "5-6 most relevant skills" in prompt
    assert '"technologies": string' in prompt
    assert "{{" not in prompt
