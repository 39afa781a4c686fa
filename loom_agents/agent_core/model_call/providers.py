"""Construction of Pydantic AI models from model identifiers.

The provider is inferred from the model id (see ``detect_provider``) and the
API key is passed explicitly, so a run never depends on provider-specific
environment variables.
"""

from __future__ import annotations

import logging

from pydantic_ai.models import Model
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.openai import OpenAIResponsesModel
from pydantic_ai.providers.anthropic import AnthropicProvider
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.providers.openai import OpenAIProvider

from .model_configs import detect_provider, split_model_id

logger = logging.getLogger(__name__)


def create_model(model_id: str, api_key: str) -> Model:
    """
    Create the Pydantic AI model serving ``model_id``.

    A ``provider/`` prefix is stripped before the name is handed to the
    provider SDK; routing always follows the bare model name.

    Args:
        model_id: Model identifier such as ``claude-sonnet-4-5`` or
            ``openai/gpt-4.1``.
        api_key: API key for the inferred provider.

    Returns:
        A configured Pydantic AI ``Model``.

    Raises:
        ValueError: If ``api_key`` is empty.
    """
    if not api_key:
        raise ValueError(f"No API key configured for model '{model_id}'")

    _prefix, name = split_model_id(model_id)
    provider = detect_provider(name)

    if provider == "openai":
        logger.debug(f"Creating OpenAI model: {name} with Pydantic AI")
        return OpenAIResponsesModel(name, provider=OpenAIProvider(api_key=api_key))
    if provider == "google":
        logger.debug(f"Creating Google model: {name} with Pydantic AI")
        return GoogleModel(name, provider=GoogleProvider(api_key=api_key))

    logger.debug(f"Creating Anthropic model: {name} with Pydantic AI")
    return AnthropicModel(name, provider=AnthropicProvider(api_key=api_key))
