"""LLM completion clients used for AI-assisted outfit selection."""

from __future__ import annotations

import logging
from typing import Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions

from tools.observability import instrument_tool

logger = logging.getLogger(__name__)


class CompletionError(RuntimeError):
    """Raised when the completion endpoint does not return usable text."""


class CompletionClient:
    """Interface for a single-shot text completion."""

    def complete(self, prompt: str) -> str:
        raise NotImplementedError


class GeminiCompletionClient(CompletionClient):
    """Gemini-backed completion that asks for a JSON response body."""

    def __init__(
        self,
        model: str,
        system_instruction: str,
        api_key: Optional[str] = None,
        temperature: float = 0.7,
    ) -> None:
        self.model_name = model
        self.system_instruction = system_instruction
        self.temperature = temperature
        if api_key:
            genai.configure(api_key=api_key)
        self._model: Optional[genai.GenerativeModel] = None

    def _get_model(self) -> genai.GenerativeModel:
        if self._model is None:
            self._model = genai.GenerativeModel(
                model_name=self.model_name,
                system_instruction=self.system_instruction,
            )
        return self._model

    @instrument_tool("llm_complete")
    def complete(self, prompt: str) -> str:
        """Send ``prompt`` once and return the raw response text.

        Raises:
            CompletionError: On transport failures, blocked responses or empty
                text. The call is never retried.
        """

        try:
            response = self._get_model().generate_content(
                prompt,
                generation_config=genai.GenerationConfig(
                    temperature=self.temperature,
                    response_mime_type="application/json",
                ),
            )
        except (google_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as exc:
            # Missing credentials surface as GoogleAuthError, outside the API error tree.
            logger.error("Completion request failed", extra={"error": str(exc), "model": self.model_name})
            raise CompletionError(f"Completion request failed: {exc}") from exc

        try:
            text = response.text
        except ValueError as exc:
            # Raised by the SDK when the candidate was blocked or has no text parts.
            raise CompletionError(f"Completion returned no text: {exc}") from exc

        if not text or not text.strip():
            raise CompletionError("Completion returned an empty response")
        return text


__all__ = ["CompletionClient", "CompletionError", "GeminiCompletionClient"]
