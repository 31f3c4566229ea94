"""Unit tests for prompt expansion and its degraded fallback."""

import json

import pytest
from omegaconf import OmegaConf

from cvforge.contexts.intake.expander import (
    EXPANSION_MAX_TOKENS,
    EXPANSION_TEMPERATURE,
    expand_prompt,
    fallback_fragment,
    fragment_from_reply,
)
from cvforge.contexts.intake.resume_record import EducationEntry, ExpansionFragment, ExperienceEntry
from cvforge.utils.llm import LLMProvider, LLMResponse

PROMPT = "Backend engineer, 10 years of Go and Rust at Acme"

GOOD_REPLY = json.dumps(
    {
        "summary": "Seasoned backend engineer.",
        "experience": [
            {"role": "Senior Engineer", "company": "Acme", "dates": "2014 - 2024", "bullets": ["Built APIs"]}
        ],
        "education": [{"degree": "BSc", "school": "MIT", "dates": "2014"}],
        "skills": ["Go", "Rust", "Go"],
    }
)


class ScriptedProvider(LLMProvider):
    """Provider that returns a fixed reply (or raises) and records its calls."""

    _provider_prefix = "scripted"

    def __init__(self, reply: str = GOOD_REPLY, error: Exception = None):
        self.reply = reply
        self.error = error
        self.calls = []
        self.update_model("test-model")

    def _call_api(self, request):
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.reply, model=self.model, input_tokens=120, output_tokens=80)


@pytest.mark.unit
def test_expand_prompt_success():
    """Test a well-formed reply becomes the fragment."""
    provider = ScriptedProvider()
    result = expand_prompt(PROMPT, provider=provider)

    assert not result.degraded
    assert result.reason is None
    assert result.model == "scripted/test-model"
    assert result.fragment.summary == "Seasoned backend engineer."
    assert result.fragment.experience == (
        ExperienceEntry(role="Senior Engineer", company="Acme", dates="2014 - 2024", bullets=("Built APIs",)),
    )
    assert result.fragment.education == (EducationEntry(degree="BSc", school="MIT", dates="2014"),)
    assert result.fragment.skills == ("Go", "Rust")
    assert (result.input_tokens, result.output_tokens) == (120, 80)


@pytest.mark.unit
def test_expand_prompt_sends_fixed_sampling_parameters():
    """Test temperature, token cap and prompt embedding of the single call."""
    provider = ScriptedProvider()
    expand_prompt(PROMPT, provider=provider)

    assert len(provider.calls) == 1
    call = provider.calls[0]
    assert call.temperature == EXPANSION_TEMPERATURE == 0.2
    assert call.max_tokens == EXPANSION_MAX_TOKENS == 800
    assert PROMPT in call.user_prompt
    assert "JSON" in call.system_prompt


@pytest.mark.unit
def test_expand_prompt_skips_leading_prose():
    """Test that prose before the object is ignored."""
    provider = ScriptedProvider(reply=f"Here is your resume:\n{GOOD_REPLY}\nGood luck!")
    result = expand_prompt(PROMPT, provider=provider)

    assert not result.degraded
    assert result.fragment.skills == ("Go", "Rust")


@pytest.mark.unit
@pytest.mark.parametrize("reply", ["I cannot help with that.", "", "[1, 2, 3]", "{ truncated"])
def test_expand_prompt_undecodable_reply_degrades(reply):
    """Test that a reply without a JSON object falls back to the prompt."""
    result = expand_prompt(PROMPT, provider=ScriptedProvider(reply=reply))

    assert result.degraded
    assert result.fragment == ExpansionFragment(summary=PROMPT)
    assert result.model == "scripted/test-model"


@pytest.mark.unit
@pytest.mark.parametrize("error", [TimeoutError("timed out"), ConnectionError("refused"), RuntimeError("500")])
def test_expand_prompt_provider_error_degrades(error):
    """Test that call failures degrade instead of raising, with one attempt only."""
    provider = ScriptedProvider(error=error)
    result = expand_prompt(PROMPT, provider=provider)

    assert result.degraded
    assert type(error).__name__ in result.reason
    assert result.fragment.summary == PROMPT
    assert result.fragment.experience == ()
    assert result.fragment.skills == ()
    assert len(provider.calls) == 1


@pytest.mark.unit
def test_expand_prompt_provider_unavailable_degrades():
    """Test that a provider that cannot be built degrades."""
    settings = OmegaConf.create({"llm": {"provider": "nonexistent", "model": "x", "timeout_s": 1}})
    result = expand_prompt(PROMPT, settings=settings)

    assert result.degraded
    assert "unavailable" in result.reason
    assert result.model is None
    assert result.fragment.summary == PROMPT


@pytest.mark.unit
def test_expand_prompt_wrong_shapes_are_coerced():
    """Test that a decodable object with wrong field shapes is coerced, not degraded."""
    reply = json.dumps({"summary": ["not", "text"], "experience": "a string", "skills": "Go, SQL"})
    result = expand_prompt(PROMPT, provider=ScriptedProvider(reply=reply))

    assert not result.degraded
    assert result.fragment.summary == ""
    assert result.fragment.experience == ()
    assert result.fragment.education == ()
    assert result.fragment.skills == ("Go", "SQL")


@pytest.mark.unit
def test_fallback_fragment_keeps_prompt_verbatim():
    """Test that whitespace and markup in the prompt survive unchanged."""
    prompt = "  <b>Ten</b> years\n of Go  "
    assert fallback_fragment(prompt).summary == prompt


@pytest.mark.unit
def test_fragment_from_reply_none():
    """Test that an empty reply yields no fragment."""
    assert fragment_from_reply(None) is None


@pytest.mark.unit
def test_expand_prompt_deeply_nested_reply_degrades():
    """Test that a reply nested too deeply to decode degrades instead of raising."""
    reply = '{"summary": ' + "[" * 200000
    result = expand_prompt(PROMPT, provider=ScriptedProvider(reply=reply))

    assert result.degraded
    assert result.fragment == ExpansionFragment(summary=PROMPT)
