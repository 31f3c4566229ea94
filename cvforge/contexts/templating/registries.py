"""
Templating Registries

Centralized registry for loading and caching the HTML templates.
"""

from pathlib import Path
from typing import Dict

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateNotFound

TEMPLATES_PATH = Path(__file__).resolve().parent / "template"


class TemplateRegistry:
    """
    Registry for loading and caching Jinja2 templates for HTML generation.

    Templates live under cvforge/contexts/templating/template/ as *.html.jinja.
    Autoescaping is always on: every interpolated value is escaped for
    & < > " ' unless a template explicitly marks it safe.
    """

    def __init__(self, templates_path: Path = None):
        """
        Initialize the template registry.

        Args:
            templates_path: Template root directory. Defaults to the packaged templates
        """
        if templates_path is None:
            templates_path = TEMPLATES_PATH

        self.templates_path = templates_path
        self._cache: Dict[str, Template] = {}

        self.env = Environment(
            loader=FileSystemLoader(str(templates_path)),
            # Catches silent failures
            undefined=StrictUndefined,
            # Field values are untrusted (form input and LLM output alike)
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def get_template(self, template_name: str) -> Template:
        """
        Get a template by name, loading and caching it if necessary.

        Args:
            template_name: Path relative to the template root, without the
                           .html.jinja suffix (e.g., 'structure/document')

        Returns:
            Jinja2 Template object

        Raises:
            TemplateNotFound: If template file doesn't exist
            TemplateSyntaxError: If template has Jinja2 syntax errors
        """
        if template_name in self._cache:
            return self._cache[template_name]

        template_path = f"{template_name}.html.jinja"

        try:
            template = self.env.get_template(template_path)
        except TemplateNotFound as e:
            raise TemplateNotFound(
                f"Template '{template_name}' not found at {self.templates_path / template_path}"
            ) from e

        self._cache[template_name] = template
        return template

    def get_template_path(self, template_name: str) -> Path:
        """Get the file path for a template."""
        return self.templates_path / f"{template_name}.html.jinja"

    def clear_cache(self):
        """Clear the template cache."""
        self._cache.clear()

    def is_cached(self, template_name: str) -> bool:
        """Check if a template is in the cache."""
        return template_name in self._cache
