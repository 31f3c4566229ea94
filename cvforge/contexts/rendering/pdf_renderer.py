"""
PDF Rendering Module

Prints HTML documents to PDF through a headless Chromium session (Playwright).

The browser is a scoped resource: it is launched per call and closed on every
exit path, including content and printing failures. Engine failures are not
retried; they surface as RenderingFailure.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Sequence

from omegaconf import DictConfig
from playwright.sync_api import sync_playwright

from cvforge.contexts.rendering.logger import (
    _log_debug,
    log_render_result,
    log_render_start,
)
from cvforge.exceptions import RenderingFailure
from cvforge.utils.settings import load_settings

# Physical page layout (fixed for every artifact)
PAGE_FORMAT = "A4"
PAGE_MARGINS = {"top": "20mm", "bottom": "20mm", "left": "15mm", "right": "15mm"}

# Wait until embedded images and fonts have settled before printing
LOAD_STATE = "networkidle"

PDF_MAGIC = b"%PDF"


@dataclass
class RenderResult:
    """
    Result of one HTML-to-PDF render.

    Attributes:
        pdf: Rendered document bytes
        engine: Engine identifier (e.g., "chromium")
        elapsed_s: Wall time of the render
        page_format: Physical page format
        margins: Page margins
    """

    pdf: bytes
    engine: str
    elapsed_s: float = 0.0
    page_format: str = PAGE_FORMAT
    margins: dict = field(default_factory=lambda: dict(PAGE_MARGINS))


class PdfRenderer(ABC):
    """
    Abstract HTML-to-PDF capability.

    Subclasses must:
    - Set engine class attribute (e.g., "chromium")
    - Implement _render() returning raw PDF bytes for one document
    """

    engine: str

    @abstractmethod
    def _render(self, html: str) -> bytes:
        """Render one document. Implemented by subclasses."""
        pass

    def render(self, html: str) -> RenderResult:
        """
        Render HTML to PDF.

        Args:
            html: Complete HTML document

        Returns:
            RenderResult with the PDF bytes

        Raises:
            RenderingFailure: Engine failed or produced something that is not a PDF
        """
        log_render_start(self.engine, len(html))
        start_time = time.time()

        try:
            pdf = self._render(html)
        except RenderingFailure:
            raise
        except Exception as e:
            # Launch, load, print and timeout errors from any engine
            raise RenderingFailure(f"{self.engine} failed to render document", original_error=e) from e

        if not pdf.startswith(PDF_MAGIC):
            raise RenderingFailure(f"{self.engine} returned {len(pdf)} bytes that are not a PDF")

        result = RenderResult(pdf=pdf, engine=self.engine, elapsed_s=time.time() - start_time)
        log_render_result(result)
        return result


class PlaywrightPdfRenderer(PdfRenderer):
    """Headless Chromium via the Playwright sync API."""

    engine = "chromium"

    def __init__(
        self,
        timeout_ms: Optional[float] = None,
        launch_args: Optional[Sequence[str]] = None,
        settings: Optional[DictConfig] = None,
    ):
        if timeout_ms is None or launch_args is None:
            settings = settings or load_settings()
            if timeout_ms is None:
                timeout_ms = settings.pdf.timeout_ms
            if launch_args is None:
                launch_args = list(settings.pdf.launch_args)

        self.timeout_ms = float(timeout_ms)
        self.launch_args = list(launch_args)

    def _render(self, html: str) -> bytes:
        with sync_playwright() as p:
            browser = p.chromium.launch(
                headless=True, args=self.launch_args, timeout=self.timeout_ms
            )
            try:
                page = browser.new_page()
                page.set_default_timeout(self.timeout_ms)
                page.set_content(html, wait_until=LOAD_STATE, timeout=self.timeout_ms)
                pdf = page.pdf(format=PAGE_FORMAT, print_background=True, margin=PAGE_MARGINS)
            finally:
                browser.close()
                _log_debug("Browser closed")
        return pdf
