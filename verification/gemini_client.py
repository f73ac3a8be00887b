"""
Gemini API client for proof extraction.

The single production implementation of the extraction service: sends the
instruction prompt and the inline proof image, returns the response text.
"""

import os
import logging
from typing import Optional, Any, Tuple

# Simple warning suppression for Google Cloud libraries
os.environ['GRPC_VERBOSITY'] = 'ERROR'
os.environ['GLOG_minloglevel'] = '2'

import google.generativeai as genai

from .constants import ConfigDefaults
from .error_handler import ConfigurationError, classify_error
from .logging_config import get_logger


class GeminiClient:
    """
    Gemini API client implementing the extraction service interface.
    """

    def __init__(self, api_key: Optional[str], model_name: str = ConfigDefaults.MODEL_NAME,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key (checked on first use)
            model_name: Model identifier, with or without the "models/" prefix
            logger: Optional logger instance
        """
        self.api_key = api_key
        self.model_name = model_name
        self.logger = logger or get_logger('gemini_client')

    def get_model(self, model_name: Optional[str] = None) -> Tuple[Optional[genai.GenerativeModel], Optional[str]]:
        """
        Get initialized Gemini model.

        Returns:
            Tuple of (model, error_message) where model is None if initialization failed
        """
        name = model_name or self.model_name
        try:
            genai.configure(api_key=self.api_key)
            model = genai.GenerativeModel(
                name,
                generation_config={
                    'temperature': ConfigDefaults.TEMPERATURE,
                    'top_p': ConfigDefaults.TOP_P,
                },
            )
            return model, None
        except Exception as e:
            error = classify_error(e, f"client initialization ({name})")
            return None, str(error)

    @staticmethod
    def build_content(prompt: str, image_bytes: bytes, mime_type: str) -> list:
        """Prompt text followed by the inline proof image."""
        return [prompt, {'mime_type': mime_type, 'data': image_bytes}]

    @staticmethod
    def response_text(response: Any) -> str:
        """Text of a response, or "" when the model returned no usable candidate."""
        if response is None:
            return ""
        try:
            return response.text or ""
        except ValueError:
            # Raised by the SDK when the candidate was blocked or has no parts
            return ""

    async def generate(self, prompt: str, image_bytes: bytes, mime_type: str) -> str:
        """
        Send the prompt and proof image to Gemini.

        Errors from the SDK propagate unchanged so the caller can classify
        them (rate limits, transport failures).

        Returns:
            Raw response text ("" when the model declined)

        Raises:
            ConfigurationError: If no API key is configured or the model cannot be initialized
        """
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY is not configured")

        model, error = self.get_model()
        if model is None:
            raise ConfigurationError(f"Could not initialize Gemini model: {error}")

        self.logger.info(f"📤 Sending proof to {self.model_name} ({len(image_bytes)} bytes, {mime_type})")
        response = await model.generate_content_async(self.build_content(prompt, image_bytes, mime_type))

        text = self.response_text(response)
        if not text:
            self.logger.warning("⚠️ Model returned empty response")
        return text
