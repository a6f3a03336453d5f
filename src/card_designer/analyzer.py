"""
Blueprint Analyzer

Turns free text into a DesignBlueprint with one structured (JSON mode)
completion call. Malformed responses raise ParseError; nothing is retried.
"""

import logging
from typing import Optional

from .errors import ParseError
from .llm import BaseLLMClient, get_client
from .prompt_manager import AUTO_STYLE, PromptManager
from .schema import DesignBlueprint

logger = logging.getLogger(__name__)


def analyze_document(
    text: str,
    preferred_style: str = AUTO_STYLE,
    client: Optional[BaseLLMClient] = None,
    prompt_manager: Optional[PromptManager] = None,
) -> DesignBlueprint:
    """
    Analyze a document into a card blueprint.

    The caller is responsible for rejecting empty text.

    Args:
        text: Raw document text
        preferred_style: "Auto" to let the model pick, or an exact style name
        client: Completion client (built from the environment if None)
        prompt_manager: Optional PromptManager instance (creates default if None)

    Returns:
        Parsed DesignBlueprint (cardOutlines[0] is the cover)

    Raises:
        ConfigurationError: No API key configured
        RequestError: Completion endpoint failure
        ParseError: Response is not a valid blueprint
    """
    if prompt_manager is None:
        prompt_manager = PromptManager()
    if client is None:
        client = get_client()

    messages = prompt_manager.build_analysis_messages(text, preferred_style)

    logger.debug(
        f"Analyzing document: {len(text)} chars, style={preferred_style}, "
        f"~{prompt_manager.get_prompt_stats(messages[-1].content)['estimated_tokens']} tokens"
    )

    content = client.complete(messages, structured=True)

    try:
        blueprint = DesignBlueprint.from_json(content)
    except ParseError as e:
        logger.error(f"Failed to parse blueprint response: {e}")
        raise

    logger.info(
        f"Blueprint ready: style={blueprint.style}, {blueprint.card_count} cards "
        f"[model={client.analysis_model}]"
    )
    return blueprint
