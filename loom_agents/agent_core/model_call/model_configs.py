"""Per-model sampling parameters and provider routing.

Temperature and max output tokens are tuned per model id to match each
provider's own app behaviour. Model ids may carry a ``provider/`` prefix
(``anthropic/claude-sonnet-4-5``); lookups ignore it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Tuple

ProviderName = Literal["anthropic", "openai", "google"]


@dataclass(frozen=True)
class SamplingParams:
    """Sampling parameters passed to the model for one run."""

    temperature: float
    max_tokens: int


MODEL_CONFIGS: Dict[str, SamplingParams] = {
    # Anthropic
    "claude-opus-4-6": SamplingParams(temperature=1.0, max_tokens=8192),
    "claude-sonnet-4-5": SamplingParams(temperature=1.0, max_tokens=8192),
    "claude-haiku-4-5": SamplingParams(temperature=1.0, max_tokens=8192),
    # OpenAI
    "gpt-5.2": SamplingParams(temperature=0.7, max_tokens=16384),
    "gpt-5-mini": SamplingParams(temperature=1.0, max_tokens=8192),  # only temperature=1 is accepted
    "gpt-5-nano": SamplingParams(temperature=1.0, max_tokens=4096),  # only temperature=1 is accepted
    "gpt-4.1": SamplingParams(temperature=0.7, max_tokens=8192),
    "gpt-4.1-mini": SamplingParams(temperature=0.7, max_tokens=8192),
    "gpt-4.1-nano": SamplingParams(temperature=0.7, max_tokens=8192),
}

DEFAULT_MODEL_CONFIG = SamplingParams(temperature=0.8, max_tokens=8192)

_PROVIDER_PREFIXES: Tuple[Tuple[ProviderName, Tuple[str, ...]], ...] = (
    ("anthropic", ("claude", "anthropic")),
    ("openai", ("gpt", "o1", "o3", "openai")),
    ("google", ("gemini", "google")),
)


def split_model_id(model_id: str) -> Tuple[str | None, str]:
    """Split ``provider/model`` into its parts; the prefix is None when absent."""
    if "/" in model_id:
        prefix, name = model_id.split("/", 1)
        return prefix, name
    return None, model_id


def get_model_config(model_id: str) -> SamplingParams:
    """Return the tuned sampling parameters for a model, or the defaults."""
    _prefix, name = split_model_id(model_id)
    return MODEL_CONFIGS.get(model_id) or MODEL_CONFIGS.get(name) or DEFAULT_MODEL_CONFIG


def detect_provider(model_id: str) -> ProviderName:
    """
    Infer the provider serving ``model_id``.

    ``claude*``/``anthropic*`` map to anthropic, ``gpt*``/``o1*``/``o3*`` to
    openai and ``gemini*`` to google. Anything else is treated as anthropic.
    """
    lowered = model_id.lower()
    for provider, prefixes in _PROVIDER_PREFIXES:
        if lowered.startswith(prefixes):
            return provider
    return "anthropic"
