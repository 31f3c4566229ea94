"""Unit tests for loguru session setup."""

import sys

import pytest
from loguru import logger

from cvforge.utils.logger import new_session_dir, setup_logger


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.mark.unit
def test_new_session_dir(tmp_path):
    """Test timestamped session directory creation."""
    session_dir = new_session_dir("generate", logs_root=tmp_path)

    assert session_dir.is_dir()
    assert session_dir.parent == tmp_path
    assert session_dir.name.startswith("generate_")


@pytest.mark.unit
def test_setup_logger_writes_provenance(tmp_path, restore_logger):
    """Test that the log file captures provenance and debug messages."""
    log_file = setup_logger("generate", tmp_path, extra_provenance={"LLM": "openai/gpt-4o-mini"})
    logger.debug("[render] detail line")
    logger.complete()

    content = log_file.read_text()
    assert log_file.name == "generate.log"
    assert "cvforge: 0.1.0" in content
    assert "LLM: openai/gpt-4o-mini" in content
    assert "[render] detail line" in content
