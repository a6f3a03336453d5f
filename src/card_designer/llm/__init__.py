"""
LLM Client Layer

Unified interface for the OpenAI-compatible completion endpoint.

Usage:
    # Configuration from environment (API_KEY, CARD_API_BASE_URL, ...)
    from card_designer.llm import get_client
    client = get_client()
    text = client.complete([ChatMessage("user", "Hello!")], structured=False)

    # Explicit configuration (e.g. in tests)
    client = get_client(LLMConfig(api_key="sk-test", base_url="http://localhost:8080"))
"""

import logging
from typing import Optional

from .base import BaseLLMClient, ChatMessage, GenerationConfig, LLMResponse
from .config import MODEL_REGISTRY, LLMConfig, ModelInfo, get_model_info
from .openai_compat import OpenAICompatibleClient

logger = logging.getLogger(__name__)


def get_client(config: Optional[LLMConfig] = None) -> BaseLLMClient:
    """
    Build a completion client.

    The environment is read on every call without an explicit config, so a
    credential set after startup is picked up by the next action.

    Args:
        config: Explicit configuration (uses LLMConfig.from_env() if None)

    Returns:
        Configured completion client
    """
    config = config or LLMConfig.from_env()
    client = OpenAICompatibleClient(config)
    logger.debug(f"Created LLM client: {client}")
    return client


__all__ = [
    "get_client",
    "BaseLLMClient",
    "ChatMessage",
    "GenerationConfig",
    "LLMResponse",
    "LLMConfig",
    "ModelInfo",
    "MODEL_REGISTRY",
    "OpenAICompatibleClient",
    "get_model_info",
]
