import json

import app
from editor.session import EditorSession


def _hidden_element_json(resume_payload):
    session = EditorSession({**resume_payload, "skills": []})
    element = session.add_element("progress", "skills")
    return session.to_json(), element.id


def test_edit_element_in_hidden_section(resume_payload):
    resume_json, element_id = _hidden_element_json(resume_payload)
    props = json.dumps({"items": [{"label": "Go", "progress": 40}]})

    updated_json, preview, message = app.edit_element(resume_json, f" {element_id} ", props, "dark")

    assert message == f"Updated {element_id}."
    session = EditorSession.from_json(updated_json)
    assert session.elements[0].props == {"items": [{"label": "Go", "progress": 40}]}
    assert "srcdoc" in preview


def test_remove_element_in_hidden_section(resume_payload):
    resume_json, element_id = _hidden_element_json(resume_payload)

    updated_json, _, message = app.remove_element(resume_json, element_id, "dark")

    assert message == f"Removed {element_id}."
    assert EditorSession.from_json(updated_json).elements == []


def test_remove_unknown_element_leaves_json_untouched(resume_payload):
    resume_json, _ = _hidden_element_json(resume_payload)

    updated_json, _, message = app.remove_element(resume_json, "stats-9", "dark")

    assert updated_json == resume_json
    assert message == "No element with id 'stats-9'."
