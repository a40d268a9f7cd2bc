import pytest
from bs4 import BeautifulSoup

from render.live import _ELEMENT_BUILDERS
from render.registry import REGISTRY, is_known_kind, list_kinds, render, resolve, resolve_placed
from schemas.elements import WizardProps
from schemas.resume import PlacedElement


def _soup(markup) -> BeautifulSoup:
    return BeautifulSoup(str(markup), "html.parser")


def test_palette_order_and_names():
    assert [(k.tag, k.name) for k in list_kinds()] == [
        ("wizard", "Wizard"),
        ("steps", "Step by Step"),
        ("timeline", "Timeline"),
        ("stats", "Statistics"),
        ("achievements", "Achievements"),
        ("progress", "Progress Bars"),
    ]


def test_every_kind_has_a_live_builder():
    assert set(_ELEMENT_BUILDERS) == set(REGISTRY)


def test_unknown_kind():
    assert not is_known_kind("carousel")
    assert resolve("carousel", {}) is None
    assert str(render("carousel", {"items": ["a"]})) == ""


def test_progress_defaults():
    soup = _soup(render("progress", {}))
    labels = [node.get_text() for node in soup.select(".progress-label")]
    percents = [node.get_text() for node in soup.select(".progress-percent")]
    assert labels == ["Skill 1", "Skill 2", "Skill 3"]
    assert percents == ["90%", "75%", "60%"]
    assert soup.select_one(".progress-fill")["style"] == "width: 90%"


def test_wizard_step_states():
    soup = _soup(render("wizard", {"steps": 5, "currentStep": 3}))
    states = [node["data-state"] for node in soup.select(".wizard-step")]
    assert states == ["completed", "completed", "active", "pending", "pending"]
    assert len(soup.select(".wizard-check")) == 2
    assert len(soup.select(".wizard-label.active")) == 3
    assert len(soup.select(".wizard-connector")) == 4
    assert len(soup.select(".wizard-connector.completed")) == 2


@pytest.mark.parametrize(
    "props, steps, current",
    [
        ({}, 3, 1),
        ({"steps": 1}, 2, 1),
        ({"steps": 50}, 10, 1),
        ({"steps": 0, "currentStep": -4}, 3, 1),
        ({"steps": "abc"}, 3, 1),
        ({"steps": 4, "currentStep": 9}, 4, 5),
        ({"steps": "6", "currentStep": "2"}, 6, 2),
    ],
)
def test_wizard_clamps(props, steps, current):
    wizard = resolve("wizard", props)
    assert isinstance(wizard, WizardProps)
    assert (wizard.steps, wizard.current_step) == (steps, current)


def test_wizard_all_completed():
    wizard = resolve("wizard", {"steps": 3, "currentStep": 4})
    assert wizard.step_states() == ["completed"] * 3


def test_progress_values_clamped():
    progress = resolve("progress", {"items": [{"label": "A", "progress": 140}, {"label": "B", "progress": -3}]})
    assert [item.progress for item in progress.items] == [100, 0]


def test_list_props_fall_back_to_defaults():
    assert resolve("timeline", {"items": "oops"}).items == ["Event 1", "Event 2", "Event 3"]
    assert resolve("achievements", {}).items == ["Achievement 1", "Achievement 2", "Achievement 3"]
    assert [(s.label, s.value) for s in resolve("stats", {"stats": None}).stats] == [
        ("Projects", "50+"),
        ("Clients", "30+"),
        ("Experience", "5y"),
    ]


def test_kind_key_in_props_is_ignored():
    steps = resolve("steps", {"kind": "wizard", "items": ["Plan", "Build"]})
    assert steps.kind == "steps"
    assert steps.items == ["Plan", "Build"]


def test_element_text_is_escaped():
    soup = _soup(render("steps", {"items": ["<b>bold</b>"]}))
    assert soup.find("b") is None
    assert soup.select_one(".step-content").get_text() == "<b>bold</b>"


def test_defaults_exposed_by_kind():
    assert REGISTRY["wizard"].defaults() == {"steps": 3, "currentStep": 1}


def test_resolve_placed_skips_unknown_section_and_kind():
    good = PlacedElement(id="a", type="stats", section="skills")
    assert resolve_placed(good).section == "skills"
    assert resolve_placed(PlacedElement(id="b", type="stats", section="sidebar")) is None
    assert resolve_placed(PlacedElement(id="c", type="stats")) is None
    assert resolve_placed(PlacedElement(id="d", type="carousel", section="skills")) is None
