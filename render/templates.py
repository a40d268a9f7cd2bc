from __future__ import annotations

import functools
import pathlib
from typing import Dict

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from markupsafe import Markup

TEMPLATE_DIR = pathlib.Path(__file__).resolve().parent.parent / "templates"


def list_templates() -> Dict[str, pathlib.Path]:
    return {p.stem: p for p in TEMPLATE_DIR.glob("*.html")}


@functools.lru_cache(maxsize=None)
def get_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(enabled_extensions=("html",), default_for_string=True),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    return env


def render_template(template_name: str, context: dict) -> str:
    templates = list_templates()
    if template_name not in templates:
        raise ValueError(f"Template {template_name} not found. Available: {list(templates)}")
    template = get_environment().get_template(f"{template_name}.html")
    return template.render(**context)


def render_fragment(path: str, **context) -> Markup:
    """Render a partial (e.g. ``elements/stats.html``) into already-escaped markup."""
    template = get_environment().get_template(path)
    return Markup(template.render(**context))


@functools.lru_cache(maxsize=None)
def load_stylesheet() -> str:
    return (TEMPLATE_DIR / "portfolio.css").read_text(encoding="utf-8")
