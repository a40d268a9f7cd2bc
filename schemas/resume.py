from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from errors import InvalidInput

SECTION_IDS = ("hero", "about", "experience", "projects", "skills", "education", "contact")
SEQUENCE_FIELDS = ("experience", "education", "skills", "projects")


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ExperienceEntry(_Model):
    title: Optional[str] = None
    company: Optional[str] = None
    duration: Optional[str] = None
    description: Optional[str] = None

    @field_validator("*", mode="before")
    def coerce_text(cls, v):  # type: ignore
        return _coerce_text(v)


class EducationEntry(_Model):
    degree: Optional[str] = None
    institution: Optional[str] = None
    year: Optional[str] = None

    @field_validator("*", mode="before")
    def coerce_text(cls, v):  # type: ignore
        return _coerce_text(v)


class ProjectEntry(_Model):
    title: Optional[str] = None
    description: Optional[str] = None
    technologies: Optional[str] = Field(
        default=None, description="Comma-separated technology names, e.g. 'React, Node.js'."
    )

    @field_validator("*", mode="before")
    def coerce_text(cls, v):  # type: ignore
        return _coerce_text(v)


class SocialLinks(_Model):
    github: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None

    @field_validator("*", mode="before")
    def coerce_text(cls, v):  # type: ignore
        return _coerce_text(v)


class PlacedElement(_Model):
    id: str = ""
    type: str = ""
    props: Dict[str, Any] = Field(default_factory=dict)
    section: Optional[str] = None

    @field_validator("props", mode="before")
    def coerce_props(cls, v):  # type: ignore
        if isinstance(v, Mapping):
            return dict(v)
        return {}

    @field_validator("id", "type", mode="before")
    def coerce_tag(cls, v):  # type: ignore
        return "" if v is None else str(v)

    @field_validator("section", mode="before")
    def coerce_section(cls, v):  # type: ignore
        # unplaceable elements are dropped at render time, not rejected
        return v if isinstance(v, str) else None


class ResumeData(_Model):
    name: Optional[str] = None
    email: Optional[str] = None
    location: Optional[str] = None
    professional_title: Optional[str] = Field(default=None, alias="professionalTitle")
    phone: Optional[str] = None
    birthday: Optional[str] = None
    avatar: Optional[str] = Field(default=None, description="Image URL or data URL.")
    summary: Optional[str] = None
    github_url: Optional[str] = Field(default=None, alias="githubUrl")
    linkedin_url: Optional[str] = Field(default=None, alias="linkedinUrl")
    social: SocialLinks = Field(default_factory=SocialLinks)
    experience: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    projects: List[ProjectEntry] = Field(default_factory=list)
    custom_elements: List[PlacedElement] = Field(default_factory=list, alias="customElements")

    @field_validator(
        "name",
        "email",
        "location",
        "professional_title",
        "phone",
        "birthday",
        "avatar",
        "summary",
        "github_url",
        "linkedin_url",
        mode="before",
    )
    def coerce_scalars(cls, v):  # type: ignore
        return _coerce_text(v)

    @field_validator("social", mode="before")
    def coerce_social(cls, v):  # type: ignore
        return v if isinstance(v, (Mapping, SocialLinks)) else {}

    @field_validator("experience", "education", "projects", "custom_elements", mode="before")
    def coerce_records(cls, v):  # type: ignore
        return _coerce_records(v)

    @field_validator("skills", mode="before")
    def coerce_skills(cls, v):  # type: ignore
        if not isinstance(v, list):
            return []
        skills = []
        for item in v:
            text = _coerce_text(item)
            if text and text.strip():
                skills.append(text.strip())
        return skills

    @model_validator(mode="after")
    def check_element_ids(self):  # type: ignore
        seen = set()
        for element in self.custom_elements:
            if element.id and element.id in seen:
                raise ValueError(f"Duplicate custom element id: {element.id!r}")
            seen.add(element.id)
        return self

    def elements_for(self, section: str) -> List[PlacedElement]:
        return [el for el in self.custom_elements if el.section == section]

    def to_payload(self) -> Dict[str, Any]:
        """Camel-cased dict, the shape the editor and the extraction prompt speak."""
        return self.model_dump(by_alias=True, exclude_none=True)


def coerce_resume(
    data: Any, elements: Optional[Iterable[Any]] = None
) -> ResumeData:
    """
    Accept a ResumeData or a plain mapping, optionally with placed elements supplied
    alongside. Elements whose id is already embedded are not added twice.
    """
    if isinstance(data, ResumeData):
        resume = data
    elif isinstance(data, Mapping):
        try:
            resume = ResumeData.model_validate(dict(data))
        except ValidationError as exc:
            raise InvalidInput(f"Invalid resume data: {exc}") from exc
    else:
        raise InvalidInput(
            f"Resume data must be an object, got {type(data).__name__}"
        )

    if elements is None:
        return resume

    merged = list(resume.custom_elements)
    seen = {el.id for el in merged}
    for raw in elements:
        try:
            element = raw if isinstance(raw, PlacedElement) else PlacedElement.model_validate(raw)
        except ValidationError as exc:
            raise InvalidInput(f"Invalid custom element: {exc}") from exc
        if element.id in seen:
            continue
        seen.add(element.id)
        merged.append(element)
    return resume.model_copy(update={"custom_elements": merged})


def _coerce_text(value):
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value if item is not None)
    if isinstance(value, Mapping):
        return None
    return str(value)


def _coerce_records(value):
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, (Mapping, BaseModel))]
