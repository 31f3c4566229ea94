"""
LLM-based content expansion for prompt-driven resumes.

Turns a short free-text prompt into summary, experience, education and skills.
The reply is untrusted: it is decoded from its first '{' and pushed through the
same coercers as form input. Any failure (provider setup, network, timeout,
API error, undecodable reply) returns the fallback fragment whose summary is the
prompt verbatim, so a prompt-driven request always yields a renderable record.
"""

import time
from dataclasses import dataclass
from typing import Optional

from omegaconf import DictConfig

from cvforge.contexts.intake.logger import log_expansion_result, log_expansion_start
from cvforge.contexts.intake.normalizer import (
    coerce_education,
    coerce_experience,
    coerce_skills,
    coerce_summary,
)
from cvforge.contexts.intake.resume_record import ExpansionFragment
from cvforge.utils.llm import LLMProvider, decode_object_response, get_provider
from cvforge.utils.settings import load_settings

# Downstream decoding assumes terse, schema-shaped replies; do not loosen
EXPANSION_TEMPERATURE = 0.2
EXPANSION_MAX_TOKENS = 800

# Longer prompts are cut before sending (the fallback still keeps the full text)
MAX_PROMPT_CHARS = 8000

# =============================================================================
# PROMPT TEMPLATES
# =============================================================================

_SYSTEM_PROMPT = """\
You turn brief career notes into well-organized resume content.
Return ONLY a JSON object with exactly these keys:
  "summary": string
  "experience": array of {"role": string, "company": string, "dates": string, "bullets": array of strings}
  "education": array of {"degree": string, "school": string, "dates": string}
  "skills": array of strings
No prose, no markdown, no extra keys. Keep entries concise and professional.
Do not invent employers, schools or dates that the notes do not mention."""

_USER_PROMPT_TEMPLATE = """\
Input:
{prompt}

Output must be the JSON object described above: summary, experience, education, skills."""


# =============================================================================
# RESULT
# =============================================================================


@dataclass
class ExpansionResult:
    """
    Outcome of one expansion attempt.

    Attributes:
        fragment: Content to render (fallback fragment when degraded)
        degraded: True when the LLM result could not be used
        reason: Why expansion degraded (None on success)
        model: Provider/model name, when a provider was reached
        input_tokens: Prompt tokens reported by the provider
        output_tokens: Completion tokens reported by the provider
    """

    fragment: ExpansionFragment
    degraded: bool = False
    reason: Optional[str] = None
    model: Optional[str] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None


# =============================================================================
# EXPANSION
# =============================================================================


def build_user_prompt(prompt: str) -> str:
    """Embed the caller's prompt in the user message."""
    return _USER_PROMPT_TEMPLATE.format(prompt=prompt[:MAX_PROMPT_CHARS])


def fallback_fragment(prompt: str) -> ExpansionFragment:
    """Fragment used when expansion fails: the prompt verbatim as summary, nothing else."""
    return ExpansionFragment(summary=prompt)


def fragment_from_reply(text: Optional[str]) -> Optional[ExpansionFragment]:
    """
    Decode an LLM reply into a fragment.

    Returns:
        ExpansionFragment, or None when the reply holds no JSON object

    Example:
        >>> fragment_from_reply('Here you go: {"summary": "Engineer", "skills": ["Go"]}').skills
        ('Go',)
    """
    data = decode_object_response(text)
    if data is None:
        return None

    return ExpansionFragment(
        summary=coerce_summary(data.get("summary")),
        experience=coerce_experience(data.get("experience")),
        education=coerce_education(data.get("education")),
        skills=coerce_skills(data.get("skills")),
    )


def expand_prompt(
    prompt: str,
    provider: Optional[LLMProvider] = None,
    settings: Optional[DictConfig] = None,
) -> ExpansionResult:
    """
    Expand a free-text prompt into resume content with one LLM call.

    Never raises. No retry: the first failure degrades.

    Args:
        prompt: Caller's free text
        provider: LLM provider (default: built from settings.llm)
        settings: Runtime settings (default: load_settings())

    Returns:
        ExpansionResult (check .degraded)
    """
    start_time = time.time()

    if provider is None:
        settings = settings or load_settings()
        try:
            provider = get_provider(
                provider_name=settings.llm.provider,
                model=settings.llm.model,
                timeout_s=settings.llm.timeout_s,
            )
        except (ImportError, ValueError) as e:
            result = _degraded(prompt, f"LLM provider unavailable: {e}")
            log_expansion_result(result, time.time() - start_time)
            return result

    log_expansion_start(provider.name, prompt)

    try:
        response = provider.generate(
            system_prompt=_SYSTEM_PROMPT,
            user_prompt=build_user_prompt(prompt),
            max_tokens=EXPANSION_MAX_TOKENS,
            temperature=EXPANSION_TEMPERATURE,
        )
    except Exception as e:
        # SDK errors, timeouts and network failures all degrade the same way
        result = _degraded(prompt, f"{type(e).__name__}: {e}", model=provider.name)
        log_expansion_result(result, time.time() - start_time)
        return result

    fragment = fragment_from_reply(response.content)
    if fragment is None:
        result = _degraded(prompt, "Reply did not contain a JSON object", model=provider.name)
    else:
        result = ExpansionResult(
            fragment=fragment,
            model=provider.name,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
        )

    log_expansion_result(result, time.time() - start_time)
    return result


def _degraded(prompt: str, reason: str, model: Optional[str] = None) -> ExpansionResult:
    return ExpansionResult(
        fragment=fallback_fragment(prompt),
        degraded=True,
        reason=reason,
        model=model,
    )
