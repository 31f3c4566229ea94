"""Integration tests for the generate_cv.py CLI (no browser launched)."""

import importlib.util
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cvforge.contexts.storage.artifact_store import FileSystemArtifactStore

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "generate_cv.py"

runner = CliRunner()


@pytest.fixture
def cli(tmp_path, monkeypatch):
    monkeypatch.setenv("ARTIFACTS_PATH", str(tmp_path / "artifacts"))
    monkeypatch.delenv("CVFORGE_SETTINGS_PATH", raising=False)

    spec = importlib.util.spec_from_file_location("generate_cv", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.mark.integration
def test_preview_writes_html(cli, tmp_path):
    """Test the preview command."""
    output = tmp_path / "preview.html"
    result = runner.invoke(
        cli.app, ["preview", str(output), "--name", "Jane Doe", "--skills", "Go, Rust"]
    )

    assert result.exit_code == 0, result.output
    html = output.read_text()
    assert "<title>CV - Jane Doe</title>" in html
    assert '<span class="skill">Rust</span>' in html


@pytest.mark.integration
def test_list_and_fetch(cli, tmp_path):
    """Test listing and fetching an artifact written through the store."""
    store = FileSystemArtifactStore(tmp_path / "artifacts")
    stored_name = store.put("jane", "Jane Doe", b"%PDF-1.4 cli")

    result = runner.invoke(cli.app, ["list", "--caller", "jane"])
    assert result.exit_code == 0, result.output
    assert stored_name in result.output
    assert "Jane Doe" in result.output

    output = tmp_path / "out.pdf"
    result = runner.invoke(cli.app, ["fetch", stored_name, "--caller", "jane", "-o", str(output)])
    assert result.exit_code == 0, result.output
    assert output.read_bytes() == b"%PDF-1.4 cli"


@pytest.mark.integration
def test_list_empty(cli):
    """Test listing for a caller with no artifacts."""
    result = runner.invoke(cli.app, ["list", "--caller", "nobody"])

    assert result.exit_code == 0
    assert "No artifacts stored." in result.output


@pytest.mark.integration
def test_fetch_invalid_name_fails(cli, tmp_path):
    """Test that traversal keys exit non-zero."""
    result = runner.invoke(
        cli.app, ["fetch", "../../etc/passwd", "--caller", "jane", "-o", str(tmp_path / "x.pdf")]
    )

    assert result.exit_code == 1
    assert not (tmp_path / "x.pdf").exists()


@pytest.mark.integration
def test_missing_caller_fails(cli):
    """Test that an empty caller identity exits non-zero."""
    result = runner.invoke(cli.app, ["list", "--caller", ""])
    assert result.exit_code == 1
