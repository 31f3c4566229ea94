"""Unit tests for HTML document generation."""

import base64

import pytest

from cvforge.contexts.intake.resume_record import (
    EducationEntry,
    ExperienceEntry,
    Photo,
    ResumeRecord,
)
from cvforge.contexts.templating.defaults import PLACEHOLDERS
from cvforge.contexts.templating.html_generator import ResumeToHTMLConverter, render_resume_html
from cvforge.contexts.templating.registries import TemplateRegistry
from cvforge.exceptions import TemplateRenderError


@pytest.fixture
def record():
    return ResumeRecord(
        name="Jane Doe",
        email="jane@example.com",
        phone="+33 1 23 45 67 89",
        location="Paris",
        summary="Backend engineer.",
        experience=(
            ExperienceEntry(
                role="Senior Engineer",
                company="Acme",
                dates="2020 - Present",
                bullets=("Built the billing API", "Mentored four engineers"),
            ),
        ),
        education=(EducationEntry(degree="BSc Computer Science", school="MIT", dates="2016"),),
        skills=("Go", "Rust"),
    )


@pytest.mark.unit
def test_generate_document_contents(record):
    """Test that every populated field appears in the document."""
    html = render_resume_html(record)

    assert html.startswith("<!doctype html>")
    assert "<title>CV - Jane Doe</title>" in html
    assert '<div class="name">Jane Doe</div>' in html
    assert "jane@example.com | +33 1 23 45 67 89 | Paris" in html
    assert "Backend engineer." in html
    assert "<li>Built the billing API</li>" in html
    assert "<li>Mentored four engineers</li>" in html
    assert "BSc Computer Science" in html
    assert '<span class="skill">Go</span>' in html
    assert '<span class="skill">Rust</span>' in html
    for placeholder in PLACEHOLDERS.values():
        assert placeholder not in html


@pytest.mark.unit
def test_contact_line_skips_empty_values():
    """Test that empty contact fields leave no dangling separators."""
    html = render_resume_html(ResumeRecord(name="Jane", email="jane@example.com", location="Paris"))
    assert '<div class="meta">jane@example.com | Paris</div>' in html


@pytest.mark.unit
def test_empty_sections_show_placeholders():
    """Test placeholders for empty experience, education and skills."""
    html = render_resume_html(ResumeRecord())

    assert "<title>CV - </title>" in html
    assert PLACEHOLDERS["experience"] in html
    assert PLACEHOLDERS["education"] in html
    assert PLACEHOLDERS["skills"] in html
    assert "<li>" not in html


@pytest.mark.unit
def test_section_order(record):
    """Test that sections follow experience, education, skills."""
    html = render_resume_html(record)

    experience = html.index("section-experience")
    education = html.index("section-education")
    skills = html.index("section-skills")
    assert html.index('class="header"') < experience < education < skills


@pytest.mark.unit
def test_all_fields_are_escaped():
    """Test that markup metacharacters in any field are escaped."""
    hostile = "<script>alert(\"x\")</script> & O'Neil"
    record = ResumeRecord(
        name=hostile,
        email=hostile,
        phone=hostile,
        location=hostile,
        summary=hostile,
        experience=(ExperienceEntry(role=hostile, company=hostile, dates=hostile, bullets=(hostile,)),),
        education=(EducationEntry(degree=hostile, school=hostile, dates=hostile),),
        skills=(hostile,),
    )
    html = render_resume_html(record)

    assert "<script>" not in html
    assert "O'Neil" not in html
    assert 'alert("x")' not in html
    assert "&lt;script&gt;" in html
    assert "&amp;" in html
    assert "&#39;" in html
    assert "&#34;" in html


@pytest.mark.unit
def test_photo_is_embedded_as_data_uri():
    """Test that the photo is inlined and needs no external fetch."""
    data = b"\x89PNG\r\n\x1a\nfake"
    record = ResumeRecord(name="Jane", photo=Photo(data=data, media_type="image/png"))
    html = render_resume_html(record)

    expected = "data:image/png;base64," + base64.b64encode(data).decode("ascii")
    assert f'<img src="{expected}" alt="photo" />' in html


@pytest.mark.unit
def test_photo_container_present_without_photo():
    """Test that the photo slot is always rendered, empty when there is no photo."""
    html = render_resume_html(ResumeRecord(name="Jane"))

    assert '<div class="photo"></div>' in html
    assert "<img" not in html


@pytest.mark.unit
def test_generation_is_deterministic(record):
    """Test that the same record always produces the same markup."""
    converter = ResumeToHTMLConverter()
    assert converter.generate_document(record) == converter.generate_document(record)


@pytest.mark.unit
def test_style_override(record):
    """Test that style overrides reach the stylesheet."""
    html = ResumeToHTMLConverter(style={"font_family": "Georgia, serif"}).generate_document(record)
    assert "font-family: Georgia, serif;" in html


@pytest.mark.unit
def test_missing_template_raises_render_error(tmp_path, record):
    """Test that template failures surface as TemplateRenderError."""
    converter = ResumeToHTMLConverter(template_registry=TemplateRegistry(templates_path=tmp_path))

    with pytest.raises(TemplateRenderError) as exc_info:
        converter.generate_document(record)

    assert exc_info.value.stage == "templating"
    assert exc_info.value.template_name == "structure/document"
