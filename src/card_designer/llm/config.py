"""
LLM Configuration and Model Registry

Holds the endpoint/credential configuration as an explicit object and
records the models the two stages use.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://sg.uiuiapi.com"
DEFAULT_ANALYSIS_MODEL = "gpt-4o-mini"
DEFAULT_LAYOUT_MODEL = "gpt-4o"
DEFAULT_TEMPERATURE = 0.7


@dataclass
class ModelInfo:
    """Information about a specific model."""
    model_id: str
    description: str
    input_cost_per_1m: float  # USD per 1M input tokens
    output_cost_per_1m: float  # USD per 1M output tokens


# Model Registry - models with known pricing
MODEL_REGISTRY: Dict[str, ModelInfo] = {
    "gpt-4o-mini": ModelInfo(
        model_id="gpt-4o-mini",
        description="GPT-4o mini - fast, cheap, JSON mode (analysis stage)",
        input_cost_per_1m=0.15,
        output_cost_per_1m=0.60,
    ),
    "gpt-4o": ModelInfo(
        model_id="gpt-4o",
        description="GPT-4o - higher quality layout generation",
        input_cost_per_1m=2.50,
        output_cost_per_1m=10.00,
    ),
}


def get_model_info(name: str) -> Optional[ModelInfo]:
    """Get model info by name, None for unknown models."""
    return MODEL_REGISTRY.get(name)


def estimate_call_cost(model: str, input_tokens: int, output_tokens: int) -> Optional[float]:
    """
    Estimate USD cost of one call.

    Returns:
        Cost in USD, or None if the model has no registry entry
    """
    info = get_model_info(model)
    if not info:
        return None
    return (
        (input_tokens / 1_000_000) * info.input_cost_per_1m
        + (output_tokens / 1_000_000) * info.output_cost_per_1m
    )


@dataclass
class LLMConfig:
    """
    Endpoint configuration for the completion client.

    An empty api_key is allowed here; the client refuses to make calls
    until one is configured.
    """
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    analysis_model: str = DEFAULT_ANALYSIS_MODEL
    layout_model: str = DEFAULT_LAYOUT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    timeout: Optional[float] = None  # None keeps the transport default

    @property
    def completions_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/v1/chat/completions"

    @classmethod
    def from_env(cls) -> "LLMConfig":
        """
        Build configuration from environment variables.

        Environment variables:
            API_KEY: Bearer credential (required for calls)
            CARD_API_BASE_URL: Endpoint base URL (default: https://sg.uiuiapi.com)
            CARD_ANALYSIS_MODEL: Model for the analysis stage (default: gpt-4o-mini)
            CARD_LAYOUT_MODEL: Model for card layout (default: gpt-4o)
            CARD_LLM_TEMPERATURE: Sampling temperature (default: 0.7)
            CARD_LLM_TIMEOUT: Request timeout in seconds (default: none)
        """
        timeout = os.environ.get("CARD_LLM_TIMEOUT")
        config = cls(
            api_key=os.environ.get("API_KEY", ""),
            base_url=os.environ.get("CARD_API_BASE_URL", DEFAULT_BASE_URL),
            analysis_model=os.environ.get("CARD_ANALYSIS_MODEL", DEFAULT_ANALYSIS_MODEL),
            layout_model=os.environ.get("CARD_LAYOUT_MODEL", DEFAULT_LAYOUT_MODEL),
            temperature=float(os.environ.get("CARD_LLM_TEMPERATURE", DEFAULT_TEMPERATURE)),
            timeout=float(timeout) if timeout else None,
        )
        logger.debug(
            f"Loaded LLM config: base_url={config.base_url}, "
            f"analysis={config.analysis_model}, layout={config.layout_model}, "
            f"api_key={'set' if config.api_key else 'missing'}"
        )
        return config
