"""
Prompt Manager for Blueprint Analysis and Card Layout

Handles loading, formatting, and managing LLM prompts.
"""

import os
import re
from pathlib import Path
from typing import Dict, Any, List, Optional

from .llm.base import ChatMessage
from .llm.config import DEFAULT_ANALYSIS_MODEL, DEFAULT_LAYOUT_MODEL, estimate_call_cost
from .schema import CARD_HEIGHT, CARD_WIDTH, DesignBlueprint

AUTO_STYLE = 'Auto'

# Style vocabulary offered to the model (and the UI) when the style is "Auto"
STYLE_VOCABULARY: Dict[str, str] = {
    'Academic': 'Academic elegance - rigorous, composed',
    'Modern': 'Modern knowledge - minimal, bold',
    'Tech': 'Tech minimalism - hardcore, avant-garde',
    'Handwritten': 'Hand-drawn notes - warm, lively',
    'Business': 'Business professional - efficient, restrained',
}

DEFAULT_ATTRIBUTION = '@不想上班计划 AI提效 少工作 多赚钱'

# Full-width separator between bullet points in the card prompt
POINT_SEPARATOR = '；'

_PLACEHOLDER = re.compile(r'\{(\w+)\}')


def get_attribution() -> str:
    """Attribution caption required on every card (CARD_ATTRIBUTION overrides)."""
    return os.environ.get('CARD_ATTRIBUTION', DEFAULT_ATTRIBUTION)


class PromptManager:
    """
    Manages prompts for the two generation stages.

    Handles:
    - Loading prompt templates from files
    - Building the analysis conversation from raw text and a style choice
    - Building the per-card layout conversation from a blueprint entry
    """

    def __init__(self, prompt_dir: str = None, attribution: Optional[str] = None):
        """
        Initialize prompt manager.

        Args:
            prompt_dir: Directory containing prompt files (defaults to package prompts/)
            attribution: Caption required on every card (defaults to get_attribution())
        """
        if prompt_dir is None:
            self.prompt_dir = Path(__file__).parent / 'prompts'
        else:
            self.prompt_dir = Path(prompt_dir)

        self.attribution = attribution if attribution is not None else get_attribution()
        self._prompt_cache = {}

    def load_prompt(self, prompt_name: str) -> str:
        """
        Load prompt template from file.

        Args:
            prompt_name: Name of prompt file

        Returns:
            Prompt template string

        Raises:
            FileNotFoundError: If prompt file doesn't exist
        """
        if prompt_name in self._prompt_cache:
            return self._prompt_cache[prompt_name]

        prompt_path = self.prompt_dir / prompt_name

        if not prompt_path.exists():
            raise FileNotFoundError(
                f"Prompt file not found: {prompt_path}. "
                f"Available prompts: {list(self.prompt_dir.glob('*.txt'))}"
            )

        with open(prompt_path, 'r', encoding='utf-8') as f:
            prompt_template = f.read()

        self._prompt_cache[prompt_name] = prompt_template

        return prompt_template

    @staticmethod
    def format_prompt(template: str, **values: Any) -> str:
        """
        Fill {name} placeholders in a single pass.

        Unknown placeholders and JSON braces in the template are left alone,
        and substituted values are never scanned again, so user text that
        happens to contain "{style}" stays verbatim.
        """
        def substitute(match):
            key = match.group(1)
            if key not in values:
                return match.group(0)
            value = values[key]
            return '' if value is None else str(value)

        return _PLACEHOLDER.sub(substitute, template).strip()

    @staticmethod
    def style_instruction(preferred_style: str) -> str:
        """Directive telling the model which style to use."""
        if preferred_style == AUTO_STYLE:
            choices = ', '.join(STYLE_VOCABULARY)
            return f"Intelligently choose the best-matching style from ({choices})."
        return f"The visual style is forced to: {preferred_style}."

    def build_analysis_messages(self, text: str, preferred_style: str = AUTO_STYLE) -> List[ChatMessage]:
        """
        Build the analysis conversation.

        Args:
            text: Raw document text
            preferred_style: "Auto" or an exact style name to force

        Returns:
            [system, user] messages
        """
        system_prompt = self.load_prompt('analysis_system_prompt.txt').strip()
        user_prompt = self.format_prompt(
            self.load_prompt('analysis_user_prompt.txt'),
            text=text,
            style_instruction=self.style_instruction(preferred_style),
        )
        return [
            ChatMessage('system', system_prompt),
            ChatMessage('user', user_prompt),
        ]

    def build_card_messages(self, blueprint: DesignBlueprint, index: int) -> List[ChatMessage]:
        """
        Build the layout conversation for one card.

        The caller guarantees 0 <= index < blueprint.card_count.

        Returns:
            [system, user] messages
        """
        card = blueprint.card_outlines[index]
        is_cover = blueprint.is_cover(index)

        system_prompt = self.format_prompt(
            self.load_prompt('card_system_prompt.txt'),
            width=CARD_WIDTH,
            height=CARD_HEIGHT,
            attribution=self.attribution,
            style=blueprint.style,
        )
        user_prompt = self.format_prompt(
            self.load_prompt('card_user_prompt.txt'),
            card_type='cover' if is_cover else 'content',
            title=card.title,
            points=POINT_SEPARATOR.join(card.points),
            style=blueprint.style,
            theme_color=blueprint.theme_color,
            secondary_color=blueprint.secondary_color,
            heading_font=blueprint.font_pairing.heading,
            body_font=blueprint.font_pairing.body,
        )
        return [
            ChatMessage('system', system_prompt),
            ChatMessage('user', user_prompt),
        ]

    def get_prompt_stats(self, prompt: str) -> Dict[str, Any]:
        """
        Get statistics about a formatted prompt.

        Note: Token estimation is approximate (~4 chars per token).
        """
        char_count = len(prompt)
        return {
            'char_count': char_count,
            'word_count': len(prompt.split()),
            'estimated_tokens': char_count // 4
        }


# Estimated tokens per call
ESTIMATED_ANALYSIS_INPUT_TOKENS = 1500  # Prompt + document text
ESTIMATED_ANALYSIS_OUTPUT_TOKENS = 800  # Blueprint JSON
ESTIMATED_CARD_INPUT_TOKENS = 400  # Prompt + one outline
ESTIMATED_CARD_OUTPUT_TOKENS = 2500  # Full HTML document


def estimate_cost(
    num_cards: int,
    analysis_model: str = DEFAULT_ANALYSIS_MODEL,
    layout_model: str = DEFAULT_LAYOUT_MODEL
) -> Dict[str, float]:
    """
    Estimate cost for one analysis plus num_cards layout calls.

    Returns:
        Dictionary with cost breakdown:
        - analysis_cost: Cost of the blueprint call
        - cards_cost: Cost of all layout calls
        - total_cost: Total cost
        - cost_per_card: Average layout cost per card
    """
    analysis_cost = (estimate_call_cost(analysis_model, ESTIMATED_ANALYSIS_INPUT_TOKENS, ESTIMATED_ANALYSIS_OUTPUT_TOKENS) or 0.0)
    cards_cost = num_cards * (estimate_call_cost(layout_model, ESTIMATED_CARD_INPUT_TOKENS, ESTIMATED_CARD_OUTPUT_TOKENS) or 0.0)

    return {
        'analysis_cost': analysis_cost,
        'cards_cost': cards_cost,
        'total_cost': analysis_cost + cards_cost,
        'cost_per_card': cards_cost / num_cards if num_cards > 0 else 0.0
    }
