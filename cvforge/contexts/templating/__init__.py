"""
Templating Context

Responsibilities:
- Maps a ResumeRecord to a styled, self-contained HTML document
- Escapes every user-controlled value (form input and LLM output alike)
- Renders placeholders for empty sections and a fixed photo region
- Manages the Jinja2 template system (cvforge/contexts/templating/template/)

Owns: HTML template system, document layout
Never: Calls external services or decides resume content
"""

from cvforge.contexts.templating.html_generator import (
    ResumeToHTMLConverter,
    render_resume_html,
)
from cvforge.contexts.templating.registries import TemplateRegistry

__all__ = [
    "ResumeToHTMLConverter",
    "render_resume_html",
    "TemplateRegistry",
]
