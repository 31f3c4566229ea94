"""
Resume Field Normalization

Turns the raw field map of a generation request into one of two input sources:

1. **PromptDriven**:
   The caller supplied a non-empty free-text prompt. Structured experience,
   education and skills are ignored; the Content Expander owns the content.

2. **Structured**:
   No prompt. experience/education arrive as JSON text and skills as JSON or
   comma-separated text. Each field is decoded independently and anything that
   does not decode to the expected shape becomes an empty sequence.

Both sources resolve to the same ExpansionFragment, which is merged with contact
fields into a ResumeRecord. Downstream contexts never see the input provenance.

The coerce_* functions are shared with the expander so that AI output passes
through exactly the same schema checks as form input.
"""

import json
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from cvforge.contexts.intake.logger import _log_debug, _log_info
from cvforge.contexts.intake.resume_record import (
    EducationEntry,
    ExpansionFragment,
    ExperienceEntry,
    Photo,
)
from cvforge.exceptions import ValidationError
from cvforge.utils.text_processing import split_comma_list, split_lines, unique_in_order

# Keys every request must carry (values may be empty)
MANDATORY_FIELDS = ("name", "email", "phone", "location")

DEFAULT_PHOTO_MEDIA_TYPE = "image/jpeg"
DEFAULT_PHOTO_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_ALLOWED_MEDIA_TYPES = ("image/png", "image/jpeg", "image/gif", "image/webp")


# ============================================================================
# Input Sources
# ============================================================================


@dataclass(frozen=True)
class PromptDriven:
    """Free-text prompt to be expanded into resume content."""

    text: str


@dataclass(frozen=True)
class Structured:
    """Raw structured fields as submitted (undecoded)."""

    summary: str = ""
    experience: Optional[str] = None
    education: Optional[str] = None
    skills: Optional[str] = None


InputSource = Union[PromptDriven, Structured]


# ============================================================================
# Boundary Validation
# ============================================================================


def validate_transport_fields(raw_fields: Mapping[str, Any]) -> None:
    """
    Reject a request whose field map lacks a mandatory key.

    Empty values are accepted; only absent (or None) keys are rejected.

    Raises:
        ValidationError: Listing every missing field
    """
    missing = [key for key in MANDATORY_FIELDS if raw_fields.get(key) is None]
    if missing:
        raise ValidationError(f"Missing mandatory fields: {', '.join(missing)}")


def build_photo(
    data: Optional[bytes],
    media_type: Optional[str] = None,
    max_bytes: int = DEFAULT_PHOTO_MAX_BYTES,
    allowed_media_types: Iterable[str] = DEFAULT_ALLOWED_MEDIA_TYPES,
) -> Optional[Photo]:
    """
    Validate an uploaded photo and wrap it.

    Args:
        data: Image bytes (None or empty means no photo)
        media_type: Declared MIME type (default: image/jpeg)
        max_bytes: Upload size limit
        allowed_media_types: Accepted MIME types

    Returns:
        Photo, or None when no photo was uploaded

    Raises:
        ValidationError: Photo too large or not an accepted image type
    """
    if not data:
        return None

    media_type = (media_type or DEFAULT_PHOTO_MEDIA_TYPE).strip().lower()
    if media_type not in tuple(allowed_media_types):
        raise ValidationError(
            f"Unsupported photo type '{media_type}'. Allowed: {', '.join(allowed_media_types)}"
        )
    if len(data) > max_bytes:
        raise ValidationError(f"Photo is {len(data)} bytes; limit is {max_bytes}")

    return Photo(data=bytes(data), media_type=media_type)


# ============================================================================
# Classification
# ============================================================================


def classify_input(raw_fields: Mapping[str, Any]) -> InputSource:
    """
    Decide whether a request is prompt-driven or structured.

    A prompt that is blank after trimming does not count as a prompt.
    """
    prompt = raw_fields.get("prompt")
    if prompt is not None and str(prompt).strip():
        _log_info("Prompt supplied; structured content fields ignored")
        return PromptDriven(text=str(prompt))

    return Structured(
        summary=_as_text(raw_fields.get("summary")),
        experience=raw_fields.get("experience"),
        education=raw_fields.get("education"),
        skills=raw_fields.get("skills"),
    )


# ============================================================================
# Coercion (shared by structured parsing and AI expansion)
# ============================================================================


def coerce_experience(value: Any) -> Tuple[ExperienceEntry, ...]:
    """
    Coerce decoded JSON into experience entries.

    Non-lists yield (), non-object items are skipped, fully blank entries are dropped.
    """
    if not isinstance(value, list):
        return ()

    entries = []
    for item in value:
        if not isinstance(item, dict):
            continue
        entry = ExperienceEntry(
            role=_as_text(item.get("role")),
            company=_as_text(item.get("company")),
            dates=_as_text(item.get("dates")),
            bullets=_coerce_bullets(item.get("bullets")),
        )
        if entry != ExperienceEntry():
            entries.append(entry)
    return tuple(entries)


def coerce_education(value: Any) -> Tuple[EducationEntry, ...]:
    """Coerce decoded JSON into education entries (same rules as experience)."""
    if not isinstance(value, list):
        return ()

    entries = []
    for item in value:
        if not isinstance(item, dict):
            continue
        entry = EducationEntry(
            degree=_as_text(item.get("degree")),
            school=_as_text(item.get("school")),
            dates=_as_text(item.get("dates")),
        )
        if entry != EducationEntry():
            entries.append(entry)
    return tuple(entries)


def coerce_skills(value: Any) -> Tuple[str, ...]:
    """
    Coerce decoded JSON into a skill list.

    Lists keep their scalar items; a bare string is comma-split. Items are
    trimmed, blanks dropped, duplicates dropped, order kept.
    """
    if isinstance(value, str):
        items = split_comma_list(value)
    elif isinstance(value, list):
        items = [_as_text(item) for item in value if _is_scalar(item)]
    else:
        return ()
    return tuple(unique_in_order(item for item in items if item))


def coerce_summary(value: Any) -> str:
    """Summary must be a scalar; anything else is dropped."""
    return _as_text(value) if _is_scalar(value) else ""


# ============================================================================
# Structured Parsing
# ============================================================================


def parse_structured(source: Structured) -> ExpansionFragment:
    """
    Decode structured form fields into a content fragment.

    Never raises: each malformed field falls back independently.

    Example:
        >>> parse_structured(Structured(skills="Go, Rust, , Python")).skills
        ('Go', 'Rust', 'Python')
    """
    experience = coerce_experience(_decode_json(source.experience, "experience"))
    education = coerce_education(_decode_json(source.education, "education"))

    decoded_skills = _decode_json(source.skills, "skills")
    if isinstance(decoded_skills, (list, str)):
        skills = coerce_skills(decoded_skills)
    else:
        # Not JSON (or JSON of the wrong shape): treat as comma-separated text
        skills = coerce_skills(_as_text(source.skills))

    _log_debug(
        f"Structured input: {len(experience)} experience, {len(education)} education, "
        f"{len(skills)} skills"
    )
    return ExpansionFragment(
        summary=source.summary,
        experience=experience,
        education=education,
        skills=skills,
    )


# ============================================================================
# Helpers
# ============================================================================


def _decode_json(text: Any, field_name: str) -> Any:
    """Decode JSON text, returning None for absent, blank or malformed input."""
    if text is None:
        return None
    if not isinstance(text, str):
        # Already decoded (e.g., a list passed programmatically)
        return text
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        _log_debug(f"Field '{field_name}' is not valid JSON; using fallback")
        return None


def _coerce_bullets(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return tuple(split_lines(value))
    if isinstance(value, list):
        bullets: List[str] = [_as_text(item) for item in value if _is_scalar(item)]
        return tuple(bullet for bullet in bullets if bullet)
    return ()


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
