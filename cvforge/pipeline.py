"""
Document Generation Pipeline

Orchestrates the contexts for one request:

    raw fields -> intake (normalize / expand) -> templating (HTML)
               -> rendering (PDF) -> storage (per-caller artifact)

and exposes listing and retrieval of stored artifacts. Each call works on
request-local data only, so one pipeline instance can serve concurrent
requests from different callers.

Failures surface as PipelineError subclasses naming the failed stage. Content
expansion never fails a request: it degrades to the prompt text.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple

from omegaconf import DictConfig

from cvforge.contexts.intake import (
    ExpansionResult,
    Photo,
    PromptDriven,
    ResumeRecord,
    build_photo,
    classify_input,
    expand_prompt,
    parse_structured,
    validate_transport_fields,
)
from cvforge.contexts.rendering import PdfRenderer, PlaywrightPdfRenderer
from cvforge.contexts.storage import ArtifactStore, FileSystemArtifactStore, namespace_key
from cvforge.contexts.templating import ResumeToHTMLConverter
from cvforge.exceptions import MissingIdentityError, PipelineError
from cvforge.utils.event_logging import PIPELINE_EVENTS_FILE, log_pipeline_event
from cvforge.utils.llm import LLMProvider
from cvforge.utils.settings import load_settings
from cvforge.utils.text_processing import underscore_whitespace

EVENT_SOURCE = "pipeline"


@dataclass
class GenerationResult:
    """
    Result of a full generation run.

    Attributes:
        pdf: Rendered artifact bytes
        stored_name: Retrieval key in the caller's namespace
        download_name: Suggested filename for the download
        expansion: Expansion outcome (None for structured input)
    """

    pdf: bytes
    stored_name: str
    download_name: str
    expansion: Optional[ExpansionResult] = None

    @property
    def expansion_degraded(self) -> bool:
        return self.expansion is not None and self.expansion.degraded


@dataclass(frozen=True)
class ArtifactEntry:
    """
    Public listing entry.

    Attributes:
        name: Display name of the resume
        retrieval_key: Key for fetch_artifact()
        created_at: Creation time (UTC)
    """

    name: str
    retrieval_key: str
    created_at: datetime


def download_filename(name: str) -> str:
    """
    Filename offered to the caller for a generated PDF.

    Example:
        >>> download_filename("Jane  Doe")
        'Jane_Doe.pdf'
        >>> download_filename("")
        'cv.pdf'
    """
    stem = underscore_whitespace((name or "").strip()) or "cv"
    # Quotes and path separators would break a Content-Disposition header
    stem = re.sub(r'["/\\]', "_", stem)
    return f"{stem}.pdf"


class ResumePipeline:
    """
    Produced interface of the system: generate, preview, list and fetch.

    Collaborators are injectable so tests can substitute the LLM provider,
    the PDF engine and the store.
    """

    def __init__(
        self,
        store: Optional[ArtifactStore] = None,
        pdf_renderer: Optional[PdfRenderer] = None,
        llm_provider: Optional[LLMProvider] = None,
        html_converter: Optional[ResumeToHTMLConverter] = None,
        settings: Optional[DictConfig] = None,
        events_file: Optional[Path] = PIPELINE_EVENTS_FILE,
    ):
        self.settings = settings or load_settings()
        self.store = store or FileSystemArtifactStore(Path(self.settings.storage.root))
        self.pdf_renderer = pdf_renderer or PlaywrightPdfRenderer(settings=self.settings)
        self.llm_provider = llm_provider
        self.html_converter = html_converter or ResumeToHTMLConverter()
        self.events_file = events_file

    # =========================================================================
    # RECORD ASSEMBLY
    # =========================================================================

    def validate_photo(self, photo: Optional[Photo]) -> Optional[Photo]:
        """Re-check a photo against the configured type and size limits."""
        if photo is None:
            return None
        return build_photo(
            photo.data,
            photo.media_type,
            max_bytes=self.settings.photo.max_bytes,
            allowed_media_types=list(self.settings.photo.allowed_media_types),
        )

    def build_record(
        self, raw_fields: Mapping[str, Any], photo: Optional[Photo] = None
    ) -> Tuple[ResumeRecord, Optional[ExpansionResult]]:
        """
        Normalize raw fields (expanding a prompt if present) into a ResumeRecord.

        Returns:
            (record, expansion result or None for structured input)

        Raises:
            ValidationError: Missing mandatory field or unacceptable photo
        """
        validate_transport_fields(raw_fields)
        photo = self.validate_photo(photo)

        source = classify_input(raw_fields)
        expansion = None
        if isinstance(source, PromptDriven):
            expansion = expand_prompt(source.text, provider=self.llm_provider, settings=self.settings)
            fragment = expansion.fragment
        else:
            fragment = parse_structured(source)

        return ResumeRecord.from_fragment(raw_fields, fragment, photo=photo), expansion

    # =========================================================================
    # PRODUCED INTERFACE
    # =========================================================================

    def run(
        self, caller_id: str, raw_fields: Mapping[str, Any], photo: Optional[Photo] = None
    ) -> GenerationResult:
        """
        Run the full pipeline and persist the artifact.

        Args:
            caller_id: Opaque authenticated caller identity
            raw_fields: Form fields (name, email, phone, location, prompt?, summary?,
                        experience?, education?, skills?)
            photo: Optional portrait

        Returns:
            GenerationResult

        Raises:
            MissingIdentityError: Blank or missing caller id (before any work)
            ValidationError: Missing mandatory field or bad photo
            TemplateRenderError: HTML generation failed
            RenderingFailure: PDF engine failed
            StorageError: Artifact could not be written
        """
        namespace = self._require_identity(caller_id)
        self._log_event("generation_started", namespace)

        try:
            record, expansion = self.build_record(raw_fields, photo)
            if expansion is not None and expansion.degraded:
                self._log_event(
                    "expansion_degraded", namespace, reason=expansion.reason, model=expansion.model
                )

            html = self.html_converter.generate_document(record)
            rendered = self.pdf_renderer.render(html)
            stored_name = self.store.put(caller_id, record.name or "cv", rendered.pdf)
        except PipelineError as e:
            self._log_event("generation_failed", namespace, stage=e.stage, error=e.message)
            raise

        self._log_event(
            "generation_completed",
            namespace,
            stored_name=stored_name,
            size=len(rendered.pdf),
            prompt_driven=expansion is not None,
        )
        return GenerationResult(
            pdf=rendered.pdf,
            stored_name=stored_name,
            download_name=download_filename(record.name),
            expansion=expansion,
        )

    def generate(
        self, caller_id: str, raw_fields: Mapping[str, Any], photo: Optional[Photo] = None
    ) -> bytes:
        """Run the full pipeline and return the artifact bytes (see run())."""
        return self.run(caller_id, raw_fields, photo).pdf

    def preview(self, raw_fields: Mapping[str, Any], photo: Optional[Photo] = None) -> str:
        """
        Render the HTML document without printing or storing it.

        Returns:
            HTML document string
        """
        record, _ = self.build_record(raw_fields, photo)
        return self.html_converter.generate_document(record)

    def list_artifacts(self, caller_id: str) -> List[ArtifactEntry]:
        """List a caller's artifacts, newest first."""
        self._require_identity(caller_id)
        return [
            ArtifactEntry(
                name=info.display_name,
                retrieval_key=info.stored_name,
                created_at=info.created_at,
            )
            for info in self.store.list(caller_id)
        ]

    def fetch_artifact(self, caller_id: str, retrieval_key: str) -> bytes:
        """
        Read back one of the caller's artifacts.

        Raises:
            StorageInvalidName: Key outside the stored-name alphabet
            StorageNotFound: No such artifact for this caller
        """
        self._require_identity(caller_id)
        return self.store.get(caller_id, retrieval_key)

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _require_identity(caller_id: Optional[str]) -> str:
        if not isinstance(caller_id, str) or not caller_id.strip():
            raise MissingIdentityError("Request has no caller identity")
        return namespace_key(caller_id)

    def _log_event(self, event_type: str, namespace: str, **fields) -> None:
        log_pipeline_event(
            event_type=event_type,
            namespace=namespace,
            source=EVENT_SOURCE,
            events_file=self.events_file,
            **fields,
        )
