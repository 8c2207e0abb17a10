"""Text panels (stat sheet, sect hall, market board) rendered from jinja2 templates."""
from __future__ import annotations

from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from cultivation_rpg.content.loader import TEMPLATES_DIR

_jinja_env: Environment | None = None


def _get_jinja() -> Environment:
    global _jinja_env
    if _jinja_env is None:
        _jinja_env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
    return _jinja_env


def render_panel(template_name: str, **data: Any) -> str:
    return _get_jinja().get_template(template_name).render(**data).rstrip()
