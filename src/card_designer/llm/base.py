"""
LLM Client Abstraction - Base Classes

Provides the interface the analyzer and renderer talk to, so the
OpenAI-compatible client can be swapped for a fake in tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ChatMessage:
    """One entry of a chat-completion conversation."""
    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class GenerationConfig:
    """
    Sampling configuration for a single completion call.

    Fields left as None are omitted from the request body.
    """
    temperature: float = 0.7
    max_output_tokens: Optional[int] = None

    # Provider-specific overrides (optional)
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LLMResponse:
    """
    Unified response from a completion call.
    """
    text: str
    model: str

    # Usage stats (if available)
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None

    # Raw response for debugging
    raw_response: Optional[Any] = None

    # Finish reason
    finish_reason: Optional[str] = None


class BaseLLMClient(ABC):
    """
    Abstract base class for completion clients.

    Two model tiers are used: a cheaper one for structured (JSON) output and
    a more capable one for free-text layout generation.
    """

    def __init__(self, analysis_model: str, layout_model: str):
        """
        Initialize LLM client.

        Args:
            analysis_model: Model used when structured JSON output is requested
            layout_model: Model used for unconstrained text output
        """
        self.analysis_model = analysis_model
        self.layout_model = layout_model

    def model_for(self, structured: bool) -> str:
        """Select the model tier for a request."""
        return self.analysis_model if structured else self.layout_model

    @abstractmethod
    def generate(
        self,
        messages: List[ChatMessage],
        structured: bool = False,
        config: Optional[GenerationConfig] = None
    ) -> LLMResponse:
        """
        Run one chat completion.

        Args:
            messages: Ordered conversation (system first)
            structured: Request JSON-shaped output from the analysis tier
            config: Generation configuration (uses defaults if None)

        Returns:
            LLMResponse with generated text and metadata
        """
        pass

    def complete(
        self,
        messages: List[ChatMessage],
        structured: bool = False
    ) -> str:
        """
        Run one chat completion and return the raw message content.

        No parsing is applied; structured callers parse the JSON themselves.
        """
        return self.generate(messages, structured=structured).text

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(analysis_model={self.analysis_model}, "
            f"layout_model={self.layout_model})"
        )
