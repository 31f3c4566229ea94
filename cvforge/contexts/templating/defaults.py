"""
Default values for the generated HTML document.

Section titles, empty-section placeholders and the stylesheet palette shared
by the document template and its tests.
"""

from typing import Any, Dict

# Fixed section order below the header
SECTION_ORDER = ("experience", "education", "skills")

SECTION_TITLES = {
    "experience": "Experience",
    "education": "Education",
    "skills": "Skills",
}

# Shown instead of an empty section
PLACEHOLDERS = {
    "experience": "No experience provided",
    "education": "No education provided",
    "skills": "No skills provided",
}

CONTACT_SEPARATOR = " | "

# Stylesheet palette and sizes (neutral professional gray)
DEFAULT_STYLE = {
    "font_family": "Arial, sans-serif",
    "text_color": "#222",
    "muted_color": "#555",
    "dates_color": "#666",
    "rule_color": "#eee",
    "skill_background": "#f1f3f5",
    "photo_size": "120px",
    "name_size": "28px",
}


def get_default_style() -> Dict[str, Any]:
    """Copy of the default style so callers can override entries safely."""
    return DEFAULT_STYLE.copy()
