"""
Rendering Context

Responsibilities:
- Prints HTML documents to paginated PDF through a headless browser
- Fixes physical page size and margins
- Guarantees the browser session is released on every exit path
- Reports engine failures as RenderingFailure

Owns: HTML-to-PDF conversion
Never: Modifies document content
"""

from cvforge.contexts.rendering.pdf_renderer import (
    PdfRenderer,
    PlaywrightPdfRenderer,
    RenderResult,
)

__all__ = ["PdfRenderer", "PlaywrightPdfRenderer", "RenderResult"]
