"""
Pipeline exceptions.

Every error raised out of the generation pipeline carries the stage that failed,
so callers can report which step broke without inspecting messages.

Content expansion never raises: a failed LLM call degrades to a fallback fragment
(see ExpansionResult.degraded in cvforge.contexts.intake.expander).
"""

from typing import Optional


class PipelineError(Exception):
    """
    Base class for generation pipeline failures.

    Attributes:
        message: Error description
        stage: Pipeline stage that failed (e.g., 'validation', 'rendering', 'storage')
        original_error: Underlying exception, if any
    """

    stage: str = "pipeline"

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error

        parts = [message]
        if original_error:
            parts.append(f"Original error: {original_error}")

        super().__init__("\n".join(parts))


class ValidationError(PipelineError, ValueError):
    """Raised when mandatory transport fields are missing or the photo is unacceptable."""

    stage = "validation"


class MissingIdentityError(ValidationError):
    """Raised when a request arrives without a caller identity."""

    stage = "identity"


class TemplateRenderError(PipelineError):
    """
    Raised when the HTML template fails to render.

    Attributes:
        template_name: Name of the template that failed
    """

    stage = "templating"

    def __init__(
        self,
        message: str,
        template_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.template_name = template_name
        if template_name:
            message = f"{message}\nTemplate: {template_name}"
        super().__init__(message, original_error=original_error)


class RenderingFailure(PipelineError):
    """Raised when the HTML-to-PDF engine cannot produce a document."""

    stage = "rendering"


class StorageError(PipelineError):
    """Raised when an artifact cannot be written to or read from the store."""

    stage = "storage"


class StorageNotFound(StorageError, LookupError):
    """Raised when the requested artifact (or the caller's namespace) does not exist."""


class StorageInvalidName(StorageError, ValueError):
    """Raised when a retrieval key contains characters outside the stored-name alphabet."""
