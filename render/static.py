"""
Static export renderer.

Produces one self-contained HTML document (inline CSS, inline theme script, no
external assets) from a ResumeData. All resume-derived text reaches the page
through jinja2 autoescaping, i.e. ``markupsafe.escape``; ``escape_html`` exposes
that same function to callers that assemble markup by hand.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from markupsafe import Markup, escape

from render.compose import build_view, export_filename
from render.registry import ResolvedElement, render_resolved
from render.templates import render_template
from schemas.resume import coerce_resume

THEMES = ("dark", "light")


@dataclass(frozen=True)
class ThemePreference:
    """Where the exported page persists the visitor's theme, and what it starts in."""

    storage_key: str = "portfolio_theme"
    default: str = "dark"

    def __post_init__(self):
        if self.default not in THEMES:
            raise ValueError(f"Unknown theme {self.default!r}; expected one of {THEMES}")


def escape_html(text: Optional[str]) -> str:
    if not text:
        return ""
    return str(escape(text))


def render_element_html(element: ResolvedElement) -> Markup:
    return render_resolved(element.props, element_id=element.id)


def render_portfolio_html(
    data: Any,
    elements: Optional[Iterable[Any]] = None,
    theme: Optional[ThemePreference] = None,
) -> str:
    resume = coerce_resume(data, elements)
    view = build_view(resume)
    return render_template(
        "portfolio",
        {
            "view": view,
            "theme": theme or ThemePreference(),
            "render_element": render_element_html,
        },
    )


def export_portfolio(
    data: Any,
    elements: Optional[Iterable[Any]] = None,
    theme: Optional[ThemePreference] = None,
) -> tuple[str, str]:
    """Return ``(filename, html)`` ready to be offered as a download."""
    resume = coerce_resume(data, elements)
    return export_filename(resume.name), render_portfolio_html(resume, theme=theme)
