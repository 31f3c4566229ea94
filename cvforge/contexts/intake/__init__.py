"""
Intake Context

Responsibilities:
- Validates the transport-level field map and uploaded photo
- Classifies input as prompt-driven or structured
- Decodes structured fields with per-field fallbacks
- Expands free-text prompts into resume content via an LLM (degrading on failure)
- Owns the canonical ResumeRecord model

Owns: Input normalization, AI-assisted expansion, resume data model
Never: Produces markup or touches storage
"""

from cvforge.contexts.intake.expander import ExpansionResult, expand_prompt
from cvforge.contexts.intake.normalizer import (
    PromptDriven,
    Structured,
    build_photo,
    classify_input,
    parse_structured,
    validate_transport_fields,
)
from cvforge.contexts.intake.resume_record import (
    EducationEntry,
    ExpansionFragment,
    ExperienceEntry,
    Photo,
    ResumeRecord,
)

__all__ = [
    # Normalization
    "validate_transport_fields",
    "build_photo",
    "classify_input",
    "parse_structured",
    "PromptDriven",
    "Structured",
    # Expansion
    "expand_prompt",
    "ExpansionResult",
    # Data structures
    "ResumeRecord",
    "ExpansionFragment",
    "ExperienceEntry",
    "EducationEntry",
    "Photo",
]
