"""
Extraction client: prompt construction, bounded service call, response parsing.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Optional, Protocol, Callable

from .constants import ConfigDefaults
from .error_handler import ExtractionTimeoutError
from .logging_config import get_logger
from .models import ClaimContext, ExtractionResult
from .prompts import ExtractionPromptGenerator
from .response_parser import ExtractionResponseParser


class ExtractionServiceProtocol(Protocol):
    """Opaque extraction capability: instruction + image in, free-form text out."""
    async def generate(self, prompt: str, image_bytes: bytes, mime_type: str) -> str:
        ...


class ExtractionClient:
    """
    Runs one extraction against the external service.

    The service call races a single timer. On expiry the call is cancelled
    and ExtractionTimeoutError is raised; there is no internal retry.
    """

    def __init__(self,
                 service: ExtractionServiceProtocol,
                 timeout_seconds: float = ConfigDefaults.VERIFY_TIMEOUT_MS / 1000.0,
                 unit_label: str = ConfigDefaults.UNIT_LABEL,
                 clock: Optional[Callable[[], datetime]] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Args:
            service: Extraction service implementation
            timeout_seconds: Upper bound for the service call
            unit_label: Name of the primary metric used in the prompt
            clock: Wall-clock source for relative date anchors
            logger: Optional logger instance
        """
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.service = service
        self.timeout_seconds = timeout_seconds
        self.unit_label = unit_label
        self.clock = clock or datetime.now
        self.logger = logger or get_logger('extraction_client')

    def build_prompt(self, claim: ClaimContext, now: datetime) -> str:
        return ExtractionPromptGenerator.build_extraction_prompt(claim, now, self.unit_label)

    async def extract(self, claim: ClaimContext, proof_bytes: bytes, mime_type: str) -> ExtractionResult:
        """
        Extract structured data from a proof image.

        Args:
            claim: Claim context used to build the instruction
            proof_bytes: Proof image bytes
            mime_type: Proof MIME type

        Returns:
            Validated ExtractionResult (empty when the response was unusable)

        Raises:
            ExtractionTimeoutError: If the service does not answer in time
            Exception: Service errors propagate unchanged for classification
        """
        now = self.clock()
        prompt = self.build_prompt(claim, now)
        start_time = time.time()

        try:
            raw_text = await asyncio.wait_for(
                self.service.generate(prompt, proof_bytes, mime_type),
                timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            self.logger.warning(f"⏰ Extraction timed out after {self.timeout_seconds:.1f}s")
            raise ExtractionTimeoutError(
                f"Extraction service did not respond within {self.timeout_seconds:.1f}s"
            ) from e

        self.logger.info(f"📥 Extraction response received in {time.time() - start_time:.2f}s")

        result = ExtractionResponseParser(reference_date=now).parse(raw_text)
        if result.has_value:
            self.logger.info(f"🔍 Extracted {result.value} {self.unit_label} (confidence: {result.confidence})")
        else:
            self.logger.info(f"🔍 No {self.unit_label} value extracted")
        return result
