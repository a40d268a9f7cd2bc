"""
Live renderer.

Builds the in-app preview as a BeautifulSoup node tree from the same
PortfolioView the static export uses, so both outputs share section order,
absence policy and element placement. Interaction is optional: LiveHooks marks
sections as drop zones and adds edit/remove affordances keyed by element id,
and LivePreview.dispatch routes UI events back to those hooks.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup, Tag

from errors import RenderFailure
from render.compose import PortfolioView, SectionPlan, build_view
from render.registry import ResolvedElement
from render.static import ThemePreference
from render.templates import load_stylesheet, render_fragment
from schemas.elements import (
    AchievementsProps,
    ProgressProps,
    StatsProps,
    StepsProps,
    TimelineProps,
    WizardProps,
)
from schemas.resume import coerce_resume

logger = logging.getLogger(__name__)

ACTIONS = ("edit", "remove", "drop")


@dataclass
class LiveHooks:
    on_drop: Optional[Callable[[str, Any], None]] = None
    on_edit: Optional[Callable[[str], None]] = None
    on_remove: Optional[Callable[[str], None]] = None

    @property
    def editable(self) -> bool:
        return self.on_edit is not None or self.on_remove is not None


class LivePreview:
    def __init__(
        self,
        soup: BeautifulSoup,
        view: PortfolioView,
        hooks: Optional[LiveHooks] = None,
        theme: Optional[ThemePreference] = None,
    ):
        self.soup = soup
        self.view = view
        self.hooks = hooks or LiveHooks()
        self.theme = theme or ThemePreference()

    @property
    def section_ids(self) -> List[str]:
        return self.view.section_ids()

    @property
    def element_ids(self) -> List[str]:
        return [element.id for plan in self.view.sections for element in plan.elements]

    def to_html(self) -> str:
        return str(self.soup)

    def to_document(self) -> str:
        """Full page with the shared stylesheet and theme script, suitable for an iframe ``srcdoc``."""
        body_class = ' class="dark"' if self.theme.default == "dark" else ""
        script = render_fragment("theme_toggle.js", theme=self.theme)
        return (
            "<!DOCTYPE html>\n<html lang=\"en\">\n<head>\n<meta charset=\"UTF-8\">\n"
            f"<style>\n{load_stylesheet()}\n</style>\n</head>\n"
            f"<body{body_class}>\n{self.to_html()}\n<script>\n{script}\n</script>\n</body>\n</html>"
        )

    def dispatch(self, action: str, target: str, payload: Any = None) -> bool:
        """
        Route a UI event to the matching hook. Returns False when the hook is not
        wired or the target is not part of this preview.
        """
        if action not in ACTIONS:
            raise ValueError(f"Unknown action {action!r}; expected one of {ACTIONS}")
        if action == "drop":
            if self.hooks.on_drop is None or target not in self.section_ids:
                return False
            self.hooks.on_drop(target, payload)
            return True

        hook = self.hooks.on_edit if action == "edit" else self.hooks.on_remove
        if hook is None or target not in self.element_ids:
            logger.debug("Ignoring %s for %r: no hook or unknown element", action, target)
            return False
        hook(target)
        return True


def render_live(
    data: Any,
    elements: Optional[Iterable[Any]] = None,
    hooks: Optional[LiveHooks] = None,
    theme: Optional[ThemePreference] = None,
) -> LivePreview:
    resume = coerce_resume(data, elements)
    view = build_view(resume)
    hooks = hooks or LiveHooks()
    theme = theme or ThemePreference()

    soup = BeautifulSoup("", "html.parser")
    root = _node(soup, soup, "div", "portfolio-live")
    _build_header(soup, root, view, theme)
    main = _node(soup, root, "main", "container")
    for plan in view.sections:
        section = _section(soup, main, plan, hooks)
        for element in plan.elements:
            build_element_node(soup, section, element, hooks)
        _SECTION_BUILDERS[plan.id](soup, section, plan, view)
    return LivePreview(soup, view, hooks, theme)


def build_element_node(
    soup: BeautifulSoup, parent: Tag, element: ResolvedElement, hooks: Optional[LiveHooks] = None
) -> Tag:
    builder = _ELEMENT_BUILDERS.get(element.kind)
    if builder is None:
        raise RenderFailure(f"No live builder for element kind {element.kind!r}")
    node = _node(soup, parent, "div", f"custom-element {element.kind}", **{"data-element-id": element.id})
    if hooks is not None and hooks.editable:
        actions = _node(soup, node, "div", "element-actions")
        if hooks.on_edit is not None:
            _action_button(soup, actions, "edit", "Edit", element.id)
        if hooks.on_remove is not None:
            _action_button(soup, actions, "remove", "Remove", element.id)
    builder(soup, node, element.props)
    return node


def _node(
    soup: BeautifulSoup, parent: Tag, tag: str, cls: Optional[str] = None, text: Optional[str] = None, **attrs
) -> Tag:
    attrib = {"class": cls} if cls else {}
    attrib.update(attrs)
    node = soup.new_tag(tag, attrs=attrib)
    if text is not None:
        node.string = text
    parent.append(node)
    return node


def _action_button(soup: BeautifulSoup, parent: Tag, action: str, label: str, element_id: str) -> None:
    _node(
        soup,
        parent,
        "button",
        f"btn btn-outline element-{action}",
        label,
        type="button",
        **{"data-action": action, "data-element-id": element_id},
    )


def _section(soup: BeautifulSoup, parent: Tag, plan: SectionPlan, hooks: LiveHooks) -> Tag:
    attrs: Dict[str, str] = {"id": plan.id}
    classes = ["hero"] if plan.id == "hero" else []
    if hooks.on_drop is not None:
        classes.append("drop-zone")
        attrs["data-drop-zone"] = plan.id
    return _node(soup, parent, "section", " ".join(classes) or None, **attrs)


def _section_header(soup: BeautifulSoup, section: Tag, plan: SectionPlan) -> None:
    header = _node(soup, section, "div", "section-header")
    _node(soup, header, "h2", text=plan.title)
    _node(soup, header, "div", "section-divider")


def _link(soup: BeautifulSoup, parent: Tag, label: str, url: str) -> None:
    _node(
        soup,
        parent,
        "a",
        "social-btn",
        label,
        href=url,
        target="_blank",
        rel="noopener noreferrer",
    )


def _build_header(soup: BeautifulSoup, root: Tag, view: PortfolioView, theme: ThemePreference) -> None:
    nav = _node(soup, _node(soup, root, "header"), "nav", "container")
    _node(soup, _node(soup, nav, "div"), "span", "brand", view.brand)
    links = _node(soup, nav, "div", "nav-links")
    toggle_label = "Light Mode" if theme.default == "dark" else "Dark Mode"
    _node(soup, links, "button", "theme-toggle", toggle_label, id="themeToggle", type="button")
    for section_id, label in view.nav:
        _node(soup, links, "a", text=label, href=f"#{section_id}")


def _build_hero(soup: BeautifulSoup, section: Tag, plan: SectionPlan, view: PortfolioView) -> None:
    hero = view.hero
    content = _node(soup, section, "div", "hero-content")
    text = _node(soup, content, "div", "hero-text")
    heading = _node(soup, text, "h1", text="Hi, I'm ")
    _node(soup, heading, "span", "accent", hero.name)
    _node(soup, text, "h2", "hero-title", hero.title)
    _node(soup, text, "p", "hero-summary", hero.summary)
    actions = _node(soup, text, "div", "hero-actions")
    _node(soup, actions, "a", "btn btn-primary", "Get in Touch", href="#contact")
    if "projects" in view.section_ids():
        _node(soup, actions, "a", "btn btn-outline", "View Projects", href="#projects")
    if hero.links or hero.email:
        social = _node(soup, text, "div", "social-links")
        for link in hero.links:
            _link(soup, social, link.label, link.url)
        if hero.email:
            _node(soup, social, "a", "social-btn", "Email", href=f"mailto:{hero.email}")

    avatar = _node(soup, content, "div", "hero-avatar")
    if hero.avatar:
        _node(soup, avatar, "img", "avatar", src=hero.avatar, alt=hero.avatar_alt)
    else:
        _node(soup, avatar, "div", "avatar-fallback", hero.initial)


def _build_about(soup: BeautifulSoup, section: Tag, plan: SectionPlan, view: PortfolioView) -> None:
    _section_header(soup, section, plan)
    card = _node(soup, section, "div", "card")
    _node(soup, card, "p", "about-summary", view.about_summary)
    if view.skills:
        skills = _node(soup, card, "div", "about-skills")
        _node(soup, skills, "h3", text="What I'm good at")
        row = _node(soup, skills, "div", "badge-row")
        for skill in view.skills:
            _node(soup, row, "span", "badge", skill)


def _build_experience(soup: BeautifulSoup, section: Tag, plan: SectionPlan, view: PortfolioView) -> None:
    _section_header(soup, section, plan)
    for job in view.experience:
        card = _node(soup, section, "div", "card experience-card")
        heading = _node(soup, card, "div", "card-heading")
        title = _node(soup, heading, "h3")
        _node(soup, title, "span", "accent", job.title)
        title.append(" at ")
        _node(soup, title, "span", "company", job.company)
        _node(soup, heading, "span", "badge", job.duration)
        _node(soup, card, "p", "muted", job.description)


def _build_projects(soup: BeautifulSoup, section: Tag, plan: SectionPlan, view: PortfolioView) -> None:
    _section_header(soup, section, plan)
    grid = _node(soup, section, "div", "projects-grid")
    for project in view.projects:
        card = _node(soup, grid, "div", "card project-card")
        _node(soup, card, "h3", text=project.title)
        _node(soup, card, "p", "muted", project.description)
        if project.technologies:
            row = _node(soup, card, "div", "badge-row")
            for tech in project.technologies:
                _node(soup, row, "span", "badge", tech)


def _build_skills(soup: BeautifulSoup, section: Tag, plan: SectionPlan, view: PortfolioView) -> None:
    _section_header(soup, section, plan)
    grid = _node(soup, section, "div", "skills-grid")
    for skill in view.skills:
        _node(soup, grid, "div", "skill-card", skill)


def _build_education(soup: BeautifulSoup, section: Tag, plan: SectionPlan, view: PortfolioView) -> None:
    _section_header(soup, section, plan)
    for entry in view.education:
        card = _node(soup, section, "div", "card education-card")
        _node(soup, card, "h3", text=entry.institution)
        _node(soup, card, "p", "degree", entry.degree)
        if entry.year:
            _node(soup, card, "span", "badge", entry.year)


def _build_contact(soup: BeautifulSoup, section: Tag, plan: SectionPlan, view: PortfolioView) -> None:
    _section_header(soup, section, plan)
    contact = view.contact
    card = _node(soup, section, "div", "card")
    if contact.email:
        row = _node(soup, card, "div", "contact-row")
        _node(soup, row, "span", "contact-label", "Email")
        _node(soup, row, "a", "accent", contact.email, href=f"mailto:{contact.email}")
    if contact.phone:
        row = _node(soup, card, "div", "contact-row")
        _node(soup, row, "span", "contact-label", "Phone")
        _node(soup, row, "span", text=contact.phone)
    if contact.location:
        row = _node(soup, card, "div", "contact-row")
        _node(soup, row, "span", "contact-label", "Location")
        _node(soup, row, "span", text=contact.location)
    if contact.profiles:
        profiles = _node(soup, card, "div", "social-profiles")
        _node(soup, profiles, "p", "contact-label", "Social Profiles")
        links = _node(soup, profiles, "div", "social-links")
        for link in contact.profiles:
            _link(soup, links, link.label, link.url)


_SECTION_BUILDERS: Dict[str, Callable[[BeautifulSoup, Tag, SectionPlan, PortfolioView], None]] = {
    "hero": _build_hero,
    "about": _build_about,
    "experience": _build_experience,
    "projects": _build_projects,
    "skills": _build_skills,
    "education": _build_education,
    "contact": _build_contact,
}


def _build_wizard(soup: BeautifulSoup, node: Tag, props: WizardProps) -> None:
    container = _node(soup, node, "div", "wizard-container")
    states = props.step_states()
    for index, state in enumerate(states, start=1):
        wrapper = _node(soup, container, "div", "wizard-step-wrapper")
        step = _node(soup, wrapper, "div", "wizard-step", **{"data-state": state})
        circle = _node(soup, step, "div", f"wizard-circle {state}")
        if state == "completed":
            _node(soup, circle, "span", "wizard-check", "✓")
        else:
            _node(soup, circle, "span", "wizard-number", str(index))
        label_cls = "wizard-label" if state == "pending" else "wizard-label active"
        _node(soup, step, "span", label_cls, f"Step {index}")
        if index < len(states):
            connector = "wizard-connector completed" if state == "completed" else "wizard-connector"
            _node(soup, container, "div", connector)


def _build_steps(soup: BeautifulSoup, node: Tag, props: StepsProps) -> None:
    container = _node(soup, node, "div", "steps-container")
    for index, item in enumerate(props.items, start=1):
        row = _node(soup, container, "div", "step-item")
        _node(soup, row, "div", "step-number", str(index))
        _node(soup, row, "div", "step-content", item)


def _build_timeline(soup: BeautifulSoup, node: Tag, props: TimelineProps) -> None:
    wrapper = _node(soup, node, "div", "timeline-wrapper")
    _node(soup, wrapper, "div", "timeline-line")
    items = _node(soup, wrapper, "div", "timeline-items")
    for item in props.items:
        row = _node(soup, items, "div", "timeline-item")
        _node(soup, row, "div", "timeline-dot")
        _node(soup, row, "div", "timeline-content", item)


def _build_stats(soup: BeautifulSoup, node: Tag, props: StatsProps) -> None:
    grid = _node(soup, node, "div", "stats-grid")
    for stat in props.stats:
        cell = _node(soup, grid, "div", "stat-item")
        _node(soup, cell, "div", "stat-value", stat.value)
        _node(soup, cell, "div", "stat-label", stat.label)


def _build_achievements(soup: BeautifulSoup, node: Tag, props: AchievementsProps) -> None:
    items = _node(soup, node, "div", "achievements-list")
    for item in props.items:
        row = _node(soup, items, "div", "achievement-item")
        _node(soup, row, "span", "achievement-icon", "\U0001F3C6")
        _node(soup, row, "span", "achievement-text", item)


def _build_progress(soup: BeautifulSoup, node: Tag, props: ProgressProps) -> None:
    items = _node(soup, node, "div", "progress-list")
    for item in props.items:
        row = _node(soup, items, "div", "progress-item")
        header = _node(soup, row, "div", "progress-header")
        _node(soup, header, "span", "progress-label", item.label)
        _node(soup, header, "span", "progress-percent", f"{item.progress}%")
        bar = _node(soup, row, "div", "progress-bar")
        _node(soup, bar, "div", "progress-fill", style=f"width: {item.progress}%")


_ELEMENT_BUILDERS: Dict[str, Callable[[BeautifulSoup, Tag, Any], None]] = {
    "wizard": _build_wizard,
    "steps": _build_steps,
    "timeline": _build_timeline,
    "stats": _build_stats,
    "achievements": _build_achievements,
    "progress": _build_progress,
}
