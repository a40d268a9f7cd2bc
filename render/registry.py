"""
Element registry.

The closed catalog of custom element kinds a user can place into a portfolio
section. Each kind pairs a props model (defaults included) with the fragment
template used by the static export; the live renderer keys its node builders by
the same tags.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from jinja2 import TemplateNotFound
from markupsafe import Markup
from pydantic import BaseModel

from errors import RenderFailure
from render.templates import render_fragment
from schemas.elements import (
    AchievementsProps,
    ElementProps,
    ProgressProps,
    StatsProps,
    StepsProps,
    TimelineProps,
    WizardProps,
)
from schemas.resume import SECTION_IDS, PlacedElement


@dataclass(frozen=True)
class ElementKind:
    tag: str
    name: str
    props_model: Type[BaseModel]

    @property
    def template(self) -> str:
        return f"elements/{self.tag}.html"

    def defaults(self) -> Dict[str, Any]:
        return self.props_model().model_dump(by_alias=True, exclude={"kind"})


@dataclass(frozen=True)
class ResolvedElement:
    id: str
    section: str
    props: ElementProps

    @property
    def kind(self) -> str:
        return self.props.kind


_KINDS = (
    ElementKind("wizard", "Wizard", WizardProps),
    ElementKind("steps", "Step by Step", StepsProps),
    ElementKind("timeline", "Timeline", TimelineProps),
    ElementKind("stats", "Statistics", StatsProps),
    ElementKind("achievements", "Achievements", AchievementsProps),
    ElementKind("progress", "Progress Bars", ProgressProps),
)

REGISTRY: Dict[str, ElementKind] = {kind.tag: kind for kind in _KINDS}


def list_kinds() -> List[ElementKind]:
    return list(_KINDS)


def is_known_kind(tag: str) -> bool:
    return tag in REGISTRY


def resolve(kind: str, props: Optional[Mapping] = None) -> Optional[ElementProps]:
    """
    Validate ``props`` against the kind's model, filling absent fields with the
    kind's defaults. Unknown kinds resolve to None.
    """
    entry = REGISTRY.get(kind)
    if entry is None:
        return None
    payload = {}
    if isinstance(props, Mapping):
        payload = {key: value for key, value in props.items() if key != "kind"}
    return entry.props_model.model_validate(payload)


def resolve_placed(element: PlacedElement) -> Optional[ResolvedElement]:
    """Resolve a placed element, or None when its id, kind or section is missing or unknown."""
    if not element.id or element.section not in SECTION_IDS:
        return None
    props = resolve(element.type, element.props)
    if props is None:
        return None
    return ResolvedElement(id=element.id, section=element.section, props=props)


def render(kind: str, props: Optional[Mapping] = None) -> Markup:
    """Static HTML fragment for one element. Unknown kinds render as empty markup."""
    resolved = resolve(kind, props)
    if resolved is None:
        return Markup("")
    return render_resolved(resolved)


def render_resolved(props: ElementProps, element_id: Optional[str] = None) -> Markup:
    entry = REGISTRY[props.kind]
    try:
        return render_fragment(entry.template, props=props, element_id=element_id)
    except TemplateNotFound as exc:
        raise RenderFailure(f"No fragment template for element kind {entry.tag!r}") from exc
