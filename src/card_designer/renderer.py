"""
Card Renderer

Generates self-contained HTML for one blueprint entry with a free-text
completion call, then strips any markdown fence the model added.
"""

import logging
from typing import Optional

from .llm import BaseLLMClient, get_client
from .markup import strip_code_fences
from .prompt_manager import PromptManager
from .schema import DesignBlueprint

logger = logging.getLogger(__name__)


def generate_card_html(
    blueprint: DesignBlueprint,
    index: int,
    client: Optional[BaseLLMClient] = None,
    prompt_manager: Optional[PromptManager] = None,
) -> str:
    """
    Render one card of a blueprint to HTML.

    Index 0 is rendered as the cover card. Range checking is the caller's
    job; the workflow controller only passes indices taken from the
    blueprint itself.

    Args:
        blueprint: Blueprint produced by the analysis stage
        index: Position in blueprint.card_outlines
        client: Completion client (built from the environment if None)
        prompt_manager: Optional PromptManager instance (creates default if None)

    Returns:
        Sanitized markup string (not validated as HTML)

    Raises:
        ConfigurationError: No API key configured
        RequestError: Completion endpoint failure
    """
    if prompt_manager is None:
        prompt_manager = PromptManager()
    if client is None:
        client = get_client()

    messages = prompt_manager.build_card_messages(blueprint, index)

    logger.debug(
        f"Rendering card {index} ({'cover' if blueprint.is_cover(index) else 'content'}): "
        f"{blueprint.card_outlines[index].title!r}"
    )

    raw = client.complete(messages, structured=False)
    html = strip_code_fences(raw)

    if len(html) != len(raw.strip()):
        logger.debug(f"Stripped code fence from card {index} response")

    logger.info(f"Rendered card {index}: {len(html)} chars [model={client.layout_model}]")
    return html
