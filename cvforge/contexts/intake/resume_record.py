"""
Resume record data structures for the Intake context.

ResumeRecord is the canonical, immutable model every downstream context consumes.
All string fields are plain str (empty when unknown) and all sequences are
tuples (empty when unknown), so templates never branch on missing values.
"""

import base64
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class ExperienceEntry:
    """
    One work history entry.

    Attributes:
        role: Job title
        company: Employer name
        dates: Free-form date range (e.g., "2020 - Present")
        bullets: Accomplishment lines in display order
    """

    role: str = ""
    company: str = ""
    dates: str = ""
    bullets: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EducationEntry:
    """
    One education entry.

    Attributes:
        degree: Degree or qualification name
        school: Institution name
        dates: Free-form date range
    """

    degree: str = ""
    school: str = ""
    dates: str = ""


@dataclass(frozen=True)
class Photo:
    """
    Uploaded portrait, owned by a single generation request.

    Attributes:
        data: Raw image bytes
        media_type: Declared MIME type (e.g., "image/png")
    """

    data: bytes
    media_type: str = "image/jpeg"

    @property
    def data_uri(self) -> str:
        """Self-contained data: URI for inline embedding."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.media_type};base64,{encoded}"

    def __repr__(self) -> str:
        # Keep image bytes out of logs and tracebacks
        return f"Photo(media_type={self.media_type!r}, size={len(self.data)})"


@dataclass(frozen=True)
class ExpansionFragment:
    """
    The content half of a resume: everything except contact fields and photo.

    Produced either by parsing structured form fields or by the Content Expander.
    """

    summary: str = ""
    experience: Tuple[ExperienceEntry, ...] = ()
    education: Tuple[EducationEntry, ...] = ()
    skills: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ResumeRecord:
    """
    Canonical normalized representation of one resume.

    Factory methods:
        from_fragment(contact, fragment, photo) - Merge contact fields with content
    """

    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    summary: str = ""
    experience: Tuple[ExperienceEntry, ...] = ()
    education: Tuple[EducationEntry, ...] = ()
    skills: Tuple[str, ...] = ()
    photo: Optional[Photo] = field(default=None, compare=False)

    @classmethod
    def from_fragment(
        cls,
        contact: dict,
        fragment: ExpansionFragment,
        photo: Optional[Photo] = None,
    ) -> "ResumeRecord":
        """
        Build a record from contact fields plus a content fragment.

        Args:
            contact: Mapping with name/email/phone/location (missing or None -> "")
            fragment: Summary, experience, education and skills
            photo: Optional portrait

        Returns:
            ResumeRecord
        """
        return cls(
            name=_as_text(contact.get("name")),
            email=_as_text(contact.get("email")),
            phone=_as_text(contact.get("phone")),
            location=_as_text(contact.get("location")),
            summary=fragment.summary,
            experience=fragment.experience,
            education=fragment.education,
            skills=fragment.skills,
            photo=photo,
        )

    @property
    def contact_items(self) -> Tuple[str, ...]:
        """Non-empty contact values in display order (email, phone, location)."""
        return tuple(value for value in (self.email, self.phone, self.location) if value)


def _as_text(value) -> str:
    """Coerce a scalar field value to a trimmed string ("" for None)."""
    if value is None:
        return ""
    return str(value).strip()
