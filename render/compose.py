"""
Section composition shared by the live and static renderers.

Both renderers walk the same PortfolioView: the ordered list of present
sections, the custom elements resolved for each, and the native content with
every fallback already applied. A renderer only decides how to emit nodes.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from render.registry import ResolvedElement, resolve_placed
from schemas.resume import SECTION_IDS, ResumeData

DEFAULT_BRAND = "Portfolio"
DEFAULT_NAME = "Your Name"
DEFAULT_TITLE = "Professional"
DEFAULT_HERO_SUMMARY = "A passionate professional with a drive to explore new technologies."
DEFAULT_ABOUT_SUMMARY = "Professional summary..."
DEFAULT_INSTITUTION = "Institution"
DEFAULT_DEGREE = "Degree"

SECTION_TITLES: Dict[str, str] = {
    "about": "About Me",
    "experience": "Work Experience",
    "projects": "Projects",
    "skills": "Technical Skills",
    "education": "Education",
    "contact": "Get In Touch",
}
NAV_LABELS: Dict[str, str] = {
    "about": "About",
    "experience": "Experience",
    "projects": "Projects",
    "skills": "Skills",
    "education": "Education",
    "contact": "Contact",
}

_WHITESPACE = re.compile(r"\s+")
_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]')
# "localhost:3000" is a host and port, not a scheme
_SCHEME = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):(?!\d)")


@dataclass(frozen=True)
class Link:
    label: str
    url: str


@dataclass(frozen=True)
class ResolvedLinks:
    github: str = ""
    linkedin: str = ""
    twitter: str = ""
    instagram: str = ""

    @property
    def primary(self) -> List[Link]:
        """GitHub and LinkedIn, the pair shown in the hero and contact rows."""
        links = []
        if self.github:
            links.append(Link("GitHub", self.github))
        if self.linkedin:
            links.append(Link("LinkedIn", self.linkedin))
        return links

    @property
    def profiles(self) -> List[Link]:
        links = self.primary
        if self.twitter:
            links.append(Link("Twitter", self.twitter))
        if self.instagram:
            links.append(Link("Instagram", self.instagram))
        return links


@dataclass(frozen=True)
class SectionPlan:
    id: str
    elements: List[ResolvedElement] = field(default_factory=list)

    @property
    def title(self) -> Optional[str]:
        return SECTION_TITLES.get(self.id)


@dataclass(frozen=True)
class HeroView:
    name: str
    title: str
    summary: str
    avatar: Optional[str]
    initial: str
    avatar_alt: str
    email: Optional[str]
    links: List[Link]


@dataclass(frozen=True)
class ExperienceCard:
    title: str
    company: str
    duration: str
    description: str


@dataclass(frozen=True)
class ProjectCard:
    title: str
    description: str
    technologies: List[str]


@dataclass(frozen=True)
class EducationCard:
    institution: str
    degree: str
    year: Optional[str]


@dataclass(frozen=True)
class ContactView:
    email: Optional[str]
    phone: Optional[str]
    location: Optional[str]
    profiles: List[Link]


@dataclass(frozen=True)
class PortfolioView:
    brand: str
    sections: List[SectionPlan]
    hero: HeroView
    about_summary: str
    skills: List[str]
    experience: List[ExperienceCard]
    projects: List[ProjectCard]
    education: List[EducationCard]
    contact: ContactView

    @property
    def nav(self) -> List[Tuple[str, str]]:
        return [(plan.id, NAV_LABELS[plan.id]) for plan in self.sections if plan.id in NAV_LABELS]

    def section_ids(self) -> List[str]:
        return [plan.id for plan in self.sections]


def resolve_social_links(resume: ResumeData) -> ResolvedLinks:
    social = resume.social
    return ResolvedLinks(
        github=safe_url(_clean(social.github) or _clean(resume.github_url)),
        linkedin=safe_url(resume.linkedin_url),
        twitter=safe_url(social.twitter),
        instagram=safe_url(social.instagram),
    )


def safe_url(value: Optional[str]) -> str:
    """
    Normalize a user-supplied link for an href attribute. Scheme-less values
    (``github.com/jane``) get ``https://``; schemes other than http(s) and mailto
    are dropped.
    """
    url = _clean(value)
    if not url:
        return ""
    match = _SCHEME.match(url)
    if match is None:
        return url if url.startswith(("/", "#")) else f"https://{url}"
    if match.group(1).lower() in ("http", "https", "mailto"):
        return url
    return ""


def safe_image_src(value: Optional[str]) -> str:
    """Image src: relative paths pass unchanged, as do http(s) and inline ``data:image/`` URLs."""
    url = _clean(value)
    if not url:
        return ""
    match = _SCHEME.match(url)
    if match is None:
        return url
    if match.group(1).lower() in ("http", "https") or url.lower().startswith("data:image/"):
        return url
    return ""


def parse_technologies(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def section_present(resume: ResumeData, section: str) -> bool:
    """hero, about and contact always render; the rest only with backing data."""
    if section in ("hero", "about", "contact"):
        return True
    return bool(getattr(resume, section))


def plan_sections(resume: ResumeData) -> List[SectionPlan]:
    resolved: Dict[str, List[ResolvedElement]] = {section: [] for section in SECTION_IDS}
    for element in resume.custom_elements:
        item = resolve_placed(element)
        if item is not None:
            resolved[item.section].append(item)
    return [
        SectionPlan(id=section, elements=resolved[section])
        for section in SECTION_IDS
        if section_present(resume, section)
    ]


def build_view(resume: ResumeData) -> PortfolioView:
    links = resolve_social_links(resume)
    name = _clean(resume.name)
    email = _clean(resume.email) or None

    hero = HeroView(
        name=name or DEFAULT_NAME,
        title=resume.professional_title or DEFAULT_TITLE,
        summary=resume.summary or DEFAULT_HERO_SUMMARY,
        avatar=safe_image_src(resume.avatar) or None,
        initial=(name or "U")[0].upper(),
        avatar_alt=name or "Profile",
        email=email,
        links=links.primary,
    )
    return PortfolioView(
        brand=name or DEFAULT_BRAND,
        sections=plan_sections(resume),
        hero=hero,
        about_summary=resume.summary or DEFAULT_ABOUT_SUMMARY,
        skills=list(resume.skills),
        experience=[
            ExperienceCard(
                title=entry.title or "",
                company=entry.company or "",
                duration=entry.duration or "",
                description=entry.description or "",
            )
            for entry in resume.experience
        ],
        projects=[
            ProjectCard(
                title=project.title or "",
                description=project.description or "",
                technologies=parse_technologies(project.technologies),
            )
            for project in resume.projects
        ],
        education=[
            EducationCard(
                institution=entry.institution or DEFAULT_INSTITUTION,
                degree=entry.degree or DEFAULT_DEGREE,
                year=entry.year or None,
            )
            for entry in resume.education
        ],
        contact=ContactView(
            email=email,
            phone=_clean(resume.phone) or None,
            location=_clean(resume.location) or None,
            profiles=links.profiles,
        ),
    )


def export_filename(name: Optional[str]) -> str:
    """``Jane Doe`` -> ``jane-doe-portfolio.html``; no name -> ``portfolio-portfolio.html``."""
    base = _UNSAFE_FILENAME_CHARS.sub("", (name or "").strip()).lower()
    base = _WHITESPACE.sub("-", base) or "portfolio"
    return f"{base}-portfolio.html"


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()
