"""
LLM Service - Gemini generation wrapper

Provides a unified interface for:
- JSON generation (vision + text or text only) used by detect/draft agents
- Free-text generation used by the commissioner persona

google-generativeai is synchronous, so calls run in a worker thread.
"""
import asyncio
import json
from typing import Any, Dict, List, Optional, Union

import google.generativeai as genai

from civicai.config import get_settings, Settings
from civicai.utils.logger import get_logger

logger = get_logger(__name__)


class LLMResponseError(Exception):
    """Raised when the model returns no usable content"""


class LLMService:
    """
    Gemini client used by the pipeline agents

    Args:
        settings: Application settings (API key, model name, temperature)
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.model_name = self.settings.gemini_model
        genai.configure(api_key=self.settings.google_api_key)
        logger.info(f"LLMService initialized with {self.model_name}")

    def _model(self, system_instruction: Optional[str] = None) -> "genai.GenerativeModel":
        return genai.GenerativeModel(self.model_name, system_instruction=system_instruction)

    @staticmethod
    def _response_text(response) -> str:
        """
        Extract text, raising when the response was blocked or empty

        Raises:
            LLMResponseError: No candidates or no content parts
        """
        if not response.candidates or not response.candidates[0].content.parts:
            candidate = response.candidates[0] if response.candidates else None
            finish_reason = candidate.finish_reason if candidate else "unknown"
            logger.error(f"Response blocked - Finish reason: {finish_reason}")
            raise LLMResponseError(f"Response blocked. Finish reason: {finish_reason}")

        text = response.text
        if not text or not text.strip():
            raise LLMResponseError("Empty response from model")
        return text.strip()

    async def generate_json(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        image: Optional[bytes] = None,
        mime_type: str = "image/jpeg",
        max_output_tokens: int = 1024
    ) -> Dict[str, Any]:
        """
        Generate a JSON object

        Args:
            prompt: User prompt
            system_instruction: Agent instructions
            image: Optional inline image payload
            mime_type: Image MIME type
            max_output_tokens: Token limit for the reply

        Returns:
            Parsed JSON object

        Raises:
            LLMResponseError: Blocked/empty response or non-object JSON
            json.JSONDecodeError: Malformed JSON
        """
        contents: List[Union[str, Dict[str, Any]]] = []
        if image is not None:
            contents.append({"mime_type": mime_type, "data": image})
        contents.append(prompt)

        model = self._model(system_instruction)
        response = await asyncio.to_thread(
            model.generate_content,
            contents,
            generation_config=genai.GenerationConfig(
                temperature=self.settings.llm_temperature,
                max_output_tokens=max_output_tokens,
                response_mime_type="application/json"
            )
        )

        result = json.loads(self._response_text(response))

        # Gemini sometimes returns array, extract first element
        if isinstance(result, list) and len(result) > 0:
            result = result[0]
        if not isinstance(result, dict):
            raise LLMResponseError(f"Expected JSON object, got {type(result).__name__}")

        return result

    async def generate_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        max_output_tokens: int = 256
    ) -> str:
        """
        Generate free text

        Raises:
            LLMResponseError: Blocked or empty response
        """
        model = self._model(system_instruction)
        response = await asyncio.to_thread(
            model.generate_content,
            prompt,
            generation_config=genai.GenerationConfig(
                temperature=self.settings.llm_temperature,
                max_output_tokens=max_output_tokens,
            )
        )
        return self._response_text(response)
