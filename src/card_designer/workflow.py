r"""
Workflow Controller

Owns the session state of one card-design run and sequences the analysis
and layout calls:

    IDLE --analyze--> ANALYZING --ok--> BLUEPRINT_READY
                                 \--error--> IDLE
    BLUEPRINT_READY | CARD_READY --generate(i)--> GENERATING_CARD --ok--> CARD_READY
                                                                 \--error--> BLUEPRINT_READY
    CARD_READY --next (index < last)--> generate(index + 1)
    any --reset--> IDLE

Completion calls are blocking, so each one runs in a worker thread and is
awaited by the action that triggered it. Every action takes a generation
token; reset() and newer actions bump it, and a response that arrives with
a stale token is dropped without touching state.
"""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

from .analyzer import analyze_document
from .errors import describe_error
from .exporter import export_card_png
from .llm import BaseLLMClient, get_client
from .prompt_manager import AUTO_STYLE, PromptManager
from .renderer import generate_card_html
from .schema import DesignBlueprint, GeneratedCard

logger = logging.getLogger(__name__)

Exporter = Callable[[str, Path], Awaitable[Path]]


class WorkflowState(str, Enum):
    """Session states, owned exclusively by WorkflowController."""
    IDLE = "IDLE"
    ANALYZING = "ANALYZING"
    BLUEPRINT_READY = "BLUEPRINT_READY"
    GENERATING_CARD = "GENERATING_CARD"
    CARD_READY = "CARD_READY"


class WorkflowController:
    """
    Single-session state machine for the two-stage card pipeline.

    Holds at most one blueprint and one generated card. Generating a card
    replaces the previous one; revisiting an index renders it again.
    """

    def __init__(
        self,
        client: Optional[BaseLLMClient] = None,
        prompt_manager: Optional[PromptManager] = None,
        exporter: Optional[Exporter] = None,
    ):
        """
        Initialize the controller.

        Args:
            client: Completion client (a fresh one is built from the
                environment for every action if None)
            prompt_manager: Optional PromptManager instance
            exporter: Coroutine rendering (html, output_path) to PNG
        """
        self._client = client
        self.prompt_manager = prompt_manager or PromptManager()
        self._exporter = exporter or export_card_png
        self._generation = 0

        self.selected_style = AUTO_STYLE
        self._clear()

    def _clear(self) -> None:
        self.input_text = ""
        self.state = WorkflowState.IDLE
        self.blueprint: Optional[DesignBlueprint] = None
        self.current_card: Optional[GeneratedCard] = None
        self.error: Optional[str] = None
        self.is_downloading = False

    def _get_client(self) -> BaseLLMClient:
        return self._client if self._client is not None else get_client()

    def _begin(self, state: WorkflowState) -> int:
        self._generation += 1
        self.state = state
        self.error = None
        logger.info(f"Workflow -> {state.value}")
        return self._generation

    def _is_stale(self, token: int, action: str) -> bool:
        if token != self._generation:
            logger.warning(f"Discarding stale {action} response (token {token}, current {self._generation})")
            return True
        return False

    def _fail(self, error: Exception, state: WorkflowState) -> None:
        self.error = describe_error(error)
        self.state = state
        logger.error(f"Workflow action failed ({type(error).__name__}): {self.error}")
        logger.info(f"Workflow -> {state.value}")

    @property
    def is_busy(self) -> bool:
        return self.state in (WorkflowState.ANALYZING, WorkflowState.GENERATING_CARD)

    async def analyze(self, text: Optional[str] = None, style: Optional[str] = None) -> bool:
        """
        Build a blueprint from the input text.

        Empty or whitespace-only text, or a session that is not IDLE, makes
        this a no-op that never reaches the completion client.

        Args:
            text: New input text (keeps the current input if None)
            style: "Auto" or an exact style name (keeps the selection if None)

        Returns:
            True if a blueprint is now available
        """
        if self.state != WorkflowState.IDLE:
            logger.warning(f"Ignoring analyze request in state {self.state.value}")
            return False

        if text is not None:
            self.input_text = text
        if style is not None:
            self.selected_style = style

        if not self.input_text.strip():
            logger.debug("Ignoring analyze request with empty text")
            return False

        token = self._begin(WorkflowState.ANALYZING)
        try:
            blueprint = await asyncio.to_thread(
                analyze_document,
                self.input_text,
                self.selected_style,
                self._get_client(),
                self.prompt_manager,
            )
        except Exception as e:
            if not self._is_stale(token, "analyze"):
                self._fail(e, WorkflowState.IDLE)
            return False

        if self._is_stale(token, "analyze"):
            return False

        self.blueprint = blueprint
        self.state = WorkflowState.BLUEPRINT_READY
        logger.info(f"Workflow -> {self.state.value} ({blueprint.card_count} cards)")
        return True

    async def generate_card(self, index: int) -> bool:
        """
        Render the card at index, replacing the current card on success.

        Args:
            index: Position in the blueprint's card outlines

        Returns:
            True if the card is now current

        Raises:
            IndexError: index outside the blueprint (state is left untouched)
        """
        if self.blueprint is None or self.state not in (
            WorkflowState.BLUEPRINT_READY,
            WorkflowState.CARD_READY,
        ):
            logger.warning(f"Ignoring generate request in state {self.state.value}")
            return False

        blueprint = self.blueprint
        if not 0 <= index < blueprint.card_count:
            raise IndexError(f"Card index {index} out of range (0-{blueprint.last_index})")

        token = self._begin(WorkflowState.GENERATING_CARD)
        try:
            html = await asyncio.to_thread(
                generate_card_html,
                blueprint,
                index,
                self._get_client(),
                self.prompt_manager,
            )
        except Exception as e:
            if not self._is_stale(token, "generate"):
                self._fail(e, WorkflowState.BLUEPRINT_READY)
            return False

        if self._is_stale(token, "generate"):
            return False

        self.current_card = GeneratedCard(
            index=index,
            html=html,
            title=blueprint.card_outlines[index].title,
        )
        self.state = WorkflowState.CARD_READY
        logger.info(f"Workflow -> {self.state.value} (card {index + 1}/{blueprint.card_count})")
        return True

    @property
    def has_next(self) -> bool:
        return (
            self.state == WorkflowState.CARD_READY
            and self.blueprint is not None
            and self.current_card is not None
            and self.current_card.index < self.blueprint.last_index
        )

    async def next_card(self) -> bool:
        """Render the card after the current one; a no-op on the last card."""
        if not self.has_next:
            logger.debug("No next card to generate")
            return False
        return await self.generate_card(self.current_card.index + 1)

    def reset(self) -> None:
        """Clear all session state, whatever is in flight."""
        self._generation += 1
        self._clear()
        logger.info(f"Workflow reset -> {self.state.value}")

    def copy_markup(self) -> Optional[str]:
        """Raw markup of the current card, for the clipboard."""
        return self.current_card.html if self.current_card else None

    async def export_image(self, output_dir: Path) -> Optional[Path]:
        """
        Export the current card to PNG in output_dir.

        Export failures are not stored in self.error; the ExportError
        propagates so the caller can show a blocking notification.

        Returns:
            Path of the written PNG, or None if there is no card or an
            export is already running
        """
        card = self.current_card
        if card is None or self.is_downloading:
            return None

        self.is_downloading = True
        try:
            return await self._exporter(card.html, Path(output_dir) / card.download_name)
        finally:
            self.is_downloading = False

    def snapshot(self) -> Dict[str, Any]:
        """JSON-serializable view of the session."""
        return {
            'state': self.state.value,
            'input_text': self.input_text,
            'selected_style': self.selected_style,
            'blueprint': self.blueprint.to_dict() if self.blueprint else None,
            'current_card': self.current_card.to_dict() if self.current_card else None,
            'error': self.error,
            'is_downloading': self.is_downloading,
            'has_next': self.has_next,
        }
