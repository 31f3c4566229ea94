"""
HTML Generator

Converts a ResumeRecord into a self-contained, styled HTML document.

Pure and deterministic: no network, no randomness, no clock. The same record
always yields the same markup. The photo, when present, is inlined as a data:
URI so the document needs no external resources.
"""

from typing import Any, Dict

from jinja2 import TemplateError

from cvforge.contexts.intake.resume_record import ResumeRecord
from cvforge.contexts.templating.defaults import (
    CONTACT_SEPARATOR,
    PLACEHOLDERS,
    SECTION_ORDER,
    SECTION_TITLES,
    get_default_style,
)
from cvforge.contexts.templating.logger import _log_debug, _log_error
from cvforge.contexts.templating.registries import TemplateRegistry
from cvforge.exceptions import TemplateRenderError

DOCUMENT_TEMPLATE = "structure/document"


class ResumeToHTMLConverter:
    """Renders resume records through the document template."""

    def __init__(self, template_registry: TemplateRegistry = None, style: Dict[str, Any] = None):
        self.template_registry = template_registry or TemplateRegistry()
        self.style = {**get_default_style(), **(style or {})}

    def build_context(self, record: ResumeRecord) -> Dict[str, Any]:
        """
        Assemble the template context for a record.

        Args:
            record: Canonical resume record

        Returns:
            Dict with the record plus layout constants
        """
        return {
            "record": record,
            "style": self.style,
            "section_order": SECTION_ORDER,
            "section_titles": SECTION_TITLES,
            "placeholders": PLACEHOLDERS,
            "contact_separator": CONTACT_SEPARATOR,
        }

    def generate_document(self, record: ResumeRecord) -> str:
        """
        Generate the complete HTML document for a record.

        Args:
            record: Canonical resume record

        Returns:
            HTML document string

        Raises:
            TemplateRenderError: If the template fails to load or render
        """
        try:
            template = self.template_registry.get_template(DOCUMENT_TEMPLATE)
            html = template.render(self.build_context(record))
        except TemplateError as e:
            _log_error(f"Template render failed: {e}")
            raise TemplateRenderError(
                "Failed to render resume document",
                template_name=DOCUMENT_TEMPLATE,
                original_error=e,
            ) from e

        _log_debug(
            f"Rendered HTML ({len(html)} chars, photo={'yes' if record.photo else 'no'})"
        )
        return html


def render_resume_html(record: ResumeRecord, converter: ResumeToHTMLConverter = None) -> str:
    """
    Render a record to HTML with the default converter.

    Args:
        record: Canonical resume record
        converter: Optional preconfigured converter

    Returns:
        HTML document string
    """
    return (converter or ResumeToHTMLConverter()).generate_document(record)
