"""
OpenAI-compatible Completion Client

One blocking POST to ``{base_url}/v1/chat/completions`` per call.
No retries and no streaming: failures go straight back to the caller.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from ..errors import ConfigurationError, RequestError
from .base import BaseLLMClient, ChatMessage, GenerationConfig, LLMResponse
from .config import LLMConfig, estimate_call_cost

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = (
    "No API_KEY detected. Make sure API_KEY is configured in the environment."
)


class OpenAICompatibleClient(BaseLLMClient):
    """
    Chat-completion client for any OpenAI-compatible endpoint.

    Structured requests use the analysis model and ask the endpoint to
    enforce JSON output; free-text requests use the layout model.
    """

    def __init__(
        self,
        config: LLMConfig,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            config: Endpoint configuration (credential, base URL, models)
            session: Optional requests session (created lazily if None)
        """
        super().__init__(config.analysis_model, config.layout_model)
        self.config = config
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"Content-Type": "application/json"})
        return self._session

    def _build_payload(
        self,
        messages: List[ChatMessage],
        structured: bool,
        config: GenerationConfig
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model_for(structured),
            "messages": [m.to_dict() for m in messages],
            "temperature": config.temperature,
        }
        if structured:
            payload["response_format"] = {"type": "json_object"}
        if config.max_output_tokens:
            payload["max_tokens"] = config.max_output_tokens
        payload.update(config.extra)
        return payload

    @staticmethod
    def _error_from_response(response: requests.Response) -> RequestError:
        try:
            body = response.json()
        except ValueError:
            body = {}

        message = None
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            candidate = body["error"].get("message")
            if isinstance(candidate, str):
                message = candidate

        return RequestError(
            message or f"request failed: {response.status_code}",
            status_code=response.status_code,
            body=body,
        )

    def generate(
        self,
        messages: List[ChatMessage],
        structured: bool = False,
        config: Optional[GenerationConfig] = None
    ) -> LLMResponse:
        """
        Run one chat completion against the configured endpoint.

        Raises:
            ConfigurationError: No API key configured (checked before any request)
            RequestError: Non-success status, transport failure or malformed body
        """
        if not self.config.api_key:
            raise ConfigurationError(MISSING_KEY_MESSAGE)

        config = config or GenerationConfig(temperature=self.config.temperature)
        payload = self._build_payload(messages, structured, config)
        model = payload["model"]

        logger.debug(f"POST {self.config.completions_url} model={model} structured={structured}")
        start = time.time()

        try:
            response = self.session.post(
                self.config.completions_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.config.api_key}"},
                timeout=self.config.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Completion request failed: {e}")
            raise RequestError(f"request failed: {e}") from e

        if not response.ok:
            error = self._error_from_response(response)
            logger.error(f"Completion endpoint returned {response.status_code}: {error.message}")
            raise error

        try:
            data = response.json()
            choice = data["choices"][0]
            text = choice["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise RequestError(
                f"Unexpected completion response: {response.text[:200]}",
                status_code=response.status_code,
            ) from e

        usage = data.get("usage") or {}
        input_tokens = usage.get("prompt_tokens")
        output_tokens = usage.get("completion_tokens")
        duration_ms = int((time.time() - start) * 1000)
        cost = estimate_call_cost(model, input_tokens or 0, output_tokens or 0)

        logger.info(
            f"Completion finished: model={model}, structured={structured}, "
            f"tokens={input_tokens}/{output_tokens}, duration={duration_ms}ms"
            + (f", est_cost=${cost:.5f}" if cost is not None else "")
        )

        return LLMResponse(
            text=text,
            model=data.get("model", model),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            raw_response=data,
            finish_reason=choice.get("finish_reason"),
        )
