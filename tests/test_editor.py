import json

import pytest

from editor.session import EditorSession
from errors import InvalidInput
from render.static import render_portfolio_html


def test_add_element_assigns_unique_ids(resume_payload):
    session = EditorSession(resume_payload)
    first = session.add_element("stats", "about")
    second = session.add_element("stats", "skills")
    third = session.add_element("wizard", "hero", {"steps": 40})

    assert [first.id, second.id, third.id] == ["stats-1", "stats-2", "wizard-1"]
    assert third.props == {"steps": 10, "currentStep": 1}
    assert first.props["stats"][0] == {"label": "Projects", "value": "50+"}


def test_ids_skip_taken_numbers():
    session = EditorSession({"customElements": [{"id": "timeline-1", "type": "timeline", "section": "about"}]})
    assert session.add_element("timeline", "about").id == "timeline-2"


@pytest.mark.parametrize("kind, section", [("carousel", "about"), ("stats", "sidebar")])
def test_add_element_rejects_unknown_kind_or_section(kind, section):
    with pytest.raises(InvalidInput):
        EditorSession().add_element(kind, section)


def test_update_move_remove(resume_payload):
    session = EditorSession(resume_payload)
    element = session.add_element("progress", "skills")

    updated = session.update_element(element.id, {"items": [{"label": "Python", "progress": 120}]})
    assert updated.props == {"items": [{"label": "Python", "progress": 100}]}

    moved = session.move_element(element.id, "experience")
    assert moved.section == "experience"
    assert session.data.elements_for("experience")[0].props == updated.props

    session.remove_element(element.id)
    assert session.elements == []
    with pytest.raises(InvalidInput):
        session.remove_element(element.id)
    with pytest.raises(InvalidInput):
        session.update_element("nope", {})


def test_set_field_and_social(resume_payload):
    session = EditorSession(resume_payload)
    session.set_field("professional_title", "Staff Engineer")
    session.set_field("summary", "")
    session.set_social("twitter", "twitter.com/jane")

    assert session.data.professional_title == "Staff Engineer"
    assert session.data.summary is None
    assert session.data.social.twitter == "twitter.com/jane"
    with pytest.raises(InvalidInput):
        session.set_field("skills", ["x"])
    with pytest.raises(InvalidInput):
        session.set_social("myspace", "x")


def test_add_and_remove_items(resume_payload):
    session = EditorSession(resume_payload)
    session.add_item("skills", "  Rust ")
    session.add_item("projects", {"title": "CLI", "technologies": "Rust"})
    session.remove_item("experience", 0)

    assert session.data.skills[-1] == "Rust"
    assert session.data.projects[0].title == "CLI"
    assert session.data.experience == []

    with pytest.raises(InvalidInput):
        session.remove_item("skills", 10)
    with pytest.raises(InvalidInput):
        session.add_item("skills", "   ")
    with pytest.raises(InvalidInput):
        session.add_item("education", "BSc")
    with pytest.raises(InvalidInput):
        session.add_item("certifications", {"name": "AWS"})


def test_json_round_trip_feeds_the_renderer(resume_payload, soup_of):
    session = EditorSession(resume_payload)
    session.add_element("achievements", "about", {"items": ["Shipped v2"]})

    reloaded = EditorSession.from_json(session.to_json())
    assert reloaded.data.to_payload() == session.data.to_payload()
    assert json.loads(session.to_json())["customElements"][0]["id"] == "achievements-1"

    soup = soup_of(render_portfolio_html(reloaded.data))
    assert soup.select_one("#about .achievement-text").get_text() == "Shipped v2"


@pytest.mark.parametrize("text", ["{not json", "[1, 2]"])
def test_from_json_rejects_bad_documents(text):
    with pytest.raises(InvalidInput):
        EditorSession.from_json(text)
