"""
Editing session over one resume document.

Holds the current ResumeData between extraction and export: scalar field edits,
adding and removing experience/education/skills/project entries, and placing,
updating, moving and removing custom elements. Every mutation revalidates the
document, so the renderers always receive coerced data.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from errors import InvalidInput
from render.registry import REGISTRY, resolve
from schemas.resume import SECTION_IDS, SEQUENCE_FIELDS, PlacedElement, ResumeData, coerce_resume

logger = logging.getLogger(__name__)

SCALAR_FIELDS = (
    "name",
    "email",
    "location",
    "professionalTitle",
    "phone",
    "birthday",
    "avatar",
    "summary",
    "githubUrl",
    "linkedinUrl",
)
SOCIAL_NETWORKS = ("github", "twitter", "instagram")


class EditorSession:
    def __init__(self, data: Any = None, elements: Optional[Iterable[Any]] = None):
        self._data = coerce_resume(data if data is not None else {}, elements)

    @classmethod
    def from_json(cls, text: str) -> "EditorSession":
        try:
            payload = json.loads(text or "{}")
        except json.JSONDecodeError as exc:
            raise InvalidInput(f"Resume JSON is not valid: {exc}") from exc
        return cls(payload)

    @property
    def data(self) -> ResumeData:
        return self._data

    @property
    def elements(self) -> List[PlacedElement]:
        return list(self._data.custom_elements)

    def to_json(self, indent: int = 2) -> str:
        return self._data.model_dump_json(by_alias=True, exclude_none=True, indent=indent)

    # resume fields

    def set_field(self, name: str, value: Any) -> ResumeData:
        field = _ALIASES.get(name, name)
        if field not in SCALAR_FIELDS:
            raise InvalidInput(f"Unknown field {name!r}")
        payload = self._data.to_payload()
        if value is None or value == "":
            payload.pop(field, None)
        else:
            payload[field] = value
        return self._replace(payload)

    def set_social(self, network: str, url: Optional[str]) -> ResumeData:
        if network not in SOCIAL_NETWORKS:
            raise InvalidInput(f"Unknown social network {network!r}")
        payload = self._data.to_payload()
        social = dict(payload.get("social") or {})
        social[network] = url or None
        payload["social"] = social
        return self._replace(payload)

    def add_item(self, sequence: str, item: Any) -> ResumeData:
        self._check_sequence(sequence)
        if sequence == "skills":
            if not isinstance(item, str) or not item.strip():
                raise InvalidInput("A skill must be a non-empty string")
        elif not isinstance(item, Mapping):
            raise InvalidInput(f"A {sequence} entry must be an object")
        payload = self._data.to_payload()
        payload[sequence] = list(payload.get(sequence) or []) + [item]
        return self._replace(payload)

    def remove_item(self, sequence: str, index: int) -> ResumeData:
        self._check_sequence(sequence)
        payload = self._data.to_payload()
        items = list(payload.get(sequence) or [])
        if not 0 <= index < len(items):
            raise InvalidInput(f"No {sequence} entry at index {index}")
        del items[index]
        payload[sequence] = items
        return self._replace(payload)

    # custom elements

    def add_element(self, kind: str, section: str, props: Optional[Mapping] = None) -> PlacedElement:
        if kind not in REGISTRY:
            raise InvalidInput(f"Unknown element kind {kind!r}")
        _check_section(section)
        element = PlacedElement(
            id=self._next_id(kind),
            type=kind,
            section=section,
            props=_resolved_props(kind, props),
        )
        self._set_elements(self.elements + [element])
        logger.info("Added %s element %s to %s", kind, element.id, section)
        return element

    def update_element(self, element_id: str, props: Optional[Mapping]) -> PlacedElement:
        current = self._find(element_id)
        updated = current.model_copy(update={"props": _resolved_props(current.type, props)})
        self._set_elements([updated if el.id == element_id else el for el in self.elements])
        return updated

    def move_element(self, element_id: str, section: str) -> PlacedElement:
        _check_section(section)
        moved = self._find(element_id).model_copy(update={"section": section})
        self._set_elements([moved if el.id == element_id else el for el in self.elements])
        return moved

    def remove_element(self, element_id: str) -> None:
        self._find(element_id)
        self._set_elements([el for el in self.elements if el.id != element_id])
        logger.info("Removed element %s", element_id)

    def _find(self, element_id: str) -> PlacedElement:
        for element in self._data.custom_elements:
            if element.id == element_id:
                return element
        raise InvalidInput(f"No element with id {element_id!r}")

    def _next_id(self, kind: str) -> str:
        taken = {el.id for el in self._data.custom_elements}
        n = 1
        while f"{kind}-{n}" in taken:
            n += 1
        return f"{kind}-{n}"

    def _set_elements(self, elements: List[PlacedElement]) -> None:
        self._data = self._data.model_copy(update={"custom_elements": elements})

    def _replace(self, payload: Dict[str, Any]) -> ResumeData:
        try:
            self._data = ResumeData.model_validate(payload)
        except ValidationError as exc:
            raise InvalidInput(f"Invalid resume data: {exc}") from exc
        return self._data

    @staticmethod
    def _check_sequence(sequence: str) -> None:
        if sequence not in SEQUENCE_FIELDS:
            raise InvalidInput(
                f"Unknown list {sequence!r}; expected one of {', '.join(SEQUENCE_FIELDS)}"
            )


_ALIASES = {
    "professional_title": "professionalTitle",
    "github_url": "githubUrl",
    "linkedin_url": "linkedinUrl",
}


def _check_section(section: str) -> None:
    if section not in SECTION_IDS:
        raise InvalidInput(f"Unknown section {section!r}")


def _resolved_props(kind: str, props: Optional[Mapping]) -> Dict[str, Any]:
    resolved = resolve(kind, props)
    return resolved.model_dump(by_alias=True, exclude={"kind"})
