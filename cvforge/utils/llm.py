"""
Text-generation providers and reply decoding.

Each provider performs exactly one bounded request per generate() call: SDK
retries are disabled and a client-level timeout applies, so the caller alone
decides what a failure means (the expander degrades, it never retries).
"""

import importlib
import json
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Type

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MAX_TOKENS = 800
DEFAULT_TEMPERATURE = 0.2
DEFAULT_TIMEOUT_S = 30.0


@dataclass(frozen=True)
class LLMRequest:
    """One chat-style completion request."""

    system_prompt: str
    user_prompt: str
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE


@dataclass
class LLMResponse:
    """Reply text plus usage reported by the provider."""

    content: str
    model: str
    input_tokens: int
    output_tokens: int


class LLMProvider(ABC):
    """
    Abstract text-generation capability.

    Subclasses must:
    - Set _provider_prefix class attribute (e.g., "anthropic", "openai")
    - Implement _call_api(request) for the actual API call
    - Call update_model(model) in __init__ to set model and name
    """

    _provider_prefix: str

    name: str
    model: str

    def update_model(self, model: str):
        """Update the model and refresh the provider name."""
        self.model = model
        self.name = f"{self._provider_prefix}/{model}"

    @abstractmethod
    def _call_api(self, request: LLMRequest) -> LLMResponse:
        pass

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> LLMResponse:
        """Send one request. SDK, network and timeout errors propagate unchanged."""
        request = LLMRequest(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        return self._call_api(request)


def _load_sdk(module_name: str):
    # SDKs are heavy; import only the one actually configured
    try:
        return importlib.import_module(module_name)
    except ImportError as e:
        raise ImportError(f"{module_name} package required. Install with: pip install {module_name}") from e


def _require_api_key(env_var: str) -> str:
    api_key = os.getenv(env_var)
    if not api_key:
        raise ValueError(f"{env_var} environment variable not set")
    return api_key


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API."""

    _provider_prefix = "anthropic"

    def __init__(self, model: str = "claude-sonnet-4-20250514", timeout_s: float = DEFAULT_TIMEOUT_S):
        anthropic = _load_sdk("anthropic")
        self.client = anthropic.Anthropic(
            api_key=_require_api_key("ANTHROPIC_API_KEY"), timeout=timeout_s, max_retries=0
        )
        self.update_model(model)

    def _call_api(self, request: LLMRequest) -> LLMResponse:
        response = self.client.messages.create(
            model=self.model,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
            system=request.system_prompt,
            messages=[{"role": "user", "content": request.user_prompt}],
        )
        text = "".join(block.text for block in response.content if getattr(block, "type", "") == "text")
        return LLMResponse(
            content=text,
            model=self.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )


class OpenAIProvider(LLMProvider):
    """OpenAI Chat Completions API."""

    _provider_prefix = "openai"

    def __init__(self, model: str = "gpt-4o-mini", timeout_s: float = DEFAULT_TIMEOUT_S):
        openai = _load_sdk("openai")
        self.client = openai.OpenAI(
            api_key=_require_api_key("OPENAI_API_KEY"), timeout=timeout_s, max_retries=0
        )
        self.update_model(model)

    def _call_api(self, request: LLMRequest) -> LLMResponse:
        response = self.client.chat.completions.create(
            model=self.model,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
            messages=[
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_prompt},
            ],
        )
        usage = response.usage
        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=self.model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )


PROVIDERS: Dict[str, Type[LLMProvider]] = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
}


def get_provider(
    provider_name: Optional[str] = None,
    model: Optional[str] = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> LLMProvider:
    """
    Build a provider by name.

    Args:
        provider_name: Key of PROVIDERS (default: LLM_PROVIDER env var, then "openai")
        model: Model name (default: provider-specific default)
        timeout_s: Per-request timeout in seconds

    Raises:
        ValueError: Unknown provider or missing API key
        ImportError: Provider SDK not installed
    """
    provider_name = (provider_name or os.getenv("LLM_PROVIDER", "openai")).lower()

    provider_cls = PROVIDERS.get(provider_name)
    if provider_cls is None:
        raise ValueError(f"Unknown provider: {provider_name}. Use one of: {', '.join(PROVIDERS)}")

    kwargs = {"timeout_s": timeout_s}
    if model:
        kwargs["model"] = model
    return provider_cls(**kwargs)


def decode_object_response(text: Optional[str]) -> Optional[dict]:
    """
    Decode the JSON object that starts at the first '{' of a reply.

    Prose or a markdown fence before the object is skipped; anything after the
    closing brace is ignored.

    Returns:
        The decoded dict, or None if there is no decodable JSON object

    Example:
        >>> decode_object_response('Sure! Here it is: {"summary": "x"} Hope that helps')
        {'summary': 'x'}
    """
    start = text.find("{") if text else -1
    if start == -1:
        return None

    try:
        decoded, _ = json.JSONDecoder().raw_decode(text, start)
    except (json.JSONDecodeError, RecursionError):
        # Pathologically deep nesting exhausts the decoder like malformed text
        return None

    return decoded if isinstance(decoded, dict) else None
