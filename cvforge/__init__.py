"""
CVFORGE - Resume facts in, persisted PDF out

A context-driven resume generation system that normalizes form input (or a
free-text prompt expanded by an LLM) into a canonical resume record, renders it
to HTML, prints it to PDF with a headless browser and stores the result per caller.

Architecture:
- Intake Context: Field normalization and AI-assisted content expansion
- Templating Context: HTML document generation from the canonical record
- Rendering Context: HTML to PDF printing
- Storage Context: Per-caller artifact persistence and retrieval
"""

__version__ = "0.1.0"
