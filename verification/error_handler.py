"""
Error handling utilities for the verification engine.

Provides the error taxonomy and the ordered classification used at every
pipeline exit point.
"""

import asyncio
from enum import Enum
from typing import Optional

import aiohttp
import requests
from google.api_core import exceptions as google_exceptions

from .constants import ConfigDefaults


class ErrorCategory(Enum):
    """Enumeration of verification failure categories."""
    PROOF_UNAVAILABLE = "proof_unavailable"
    TIMEOUT_ERROR = "timeout_error"
    RATE_LIMITED = "rate_limited"
    SERVICE_UNREACHABLE = "service_unreachable"
    MALFORMED_EXTRACTION = "malformed_extraction"
    CONFIGURATION_ERROR = "configuration_error"
    UNKNOWN_ERROR = "unknown_error"


class VerificationError(Exception):
    """Custom exception for verification errors with categorization."""

    def __init__(self, message: str, category: ErrorCategory, recoverable: bool = False,
                 retry_delay: Optional[int] = None):
        super().__init__(message)
        self.category = category
        self.recoverable = recoverable
        self.retry_delay = retry_delay
        self.message = message

    def __str__(self):
        return f"[{self.category.value}] {self.message}"


class ProofUnavailableError(VerificationError):
    """The proof object is missing, unusable, or the store is unreachable."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCategory.PROOF_UNAVAILABLE, recoverable=False)


class ExtractionTimeoutError(VerificationError):
    """The extraction service did not answer within the configured bound."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCategory.TIMEOUT_ERROR, recoverable=True)


class MalformedExtractionError(VerificationError):
    """The extraction response could not be validated."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCategory.MALFORMED_EXTRACTION, recoverable=False)


class ConfigurationError(VerificationError):
    """Required configuration is missing or invalid."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCategory.CONFIGURATION_ERROR, recoverable=False)


class ClaimNotFoundError(Exception):
    """No claim record exists for the given id."""


RATE_LIMIT_PATTERNS = ['429', 'resource_exhausted', 'resource has been exhausted', 'rate limit', 'quota']
TIMEOUT_PATTERNS = ['timed out', 'timeout', 'deadline exceeded']
NETWORK_PATTERNS = ['connection', 'network', 'dns', 'unreachable', 'name resolution', 'ssl']


def classify_error(error: BaseException, context: str = "") -> VerificationError:
    """
    Classify an exception into a verification error category with retry information.

    Matching is ordered: already-classified errors, then exception kinds,
    then message substrings. Every input yields a category.

    Args:
        error: The exception to classify
        context: Additional context about where the error occurred

    Returns:
        VerificationError with category and recovery information
    """
    if isinstance(error, VerificationError):
        return error

    error_str = str(error).lower()

    # Rate limiting is checked before timeouts: quota messages often mention retry deadlines
    if isinstance(error, google_exceptions.ResourceExhausted) or \
            any(pattern in error_str for pattern in RATE_LIMIT_PATTERNS):
        return VerificationError(
            f"Rate limited in {context}: {error}",
            ErrorCategory.RATE_LIMITED,
            recoverable=True,
            retry_delay=ConfigDefaults.RATE_LIMIT_RETRY_AFTER
        )

    if isinstance(error, (asyncio.TimeoutError, TimeoutError, google_exceptions.DeadlineExceeded,
                          requests.Timeout)) or \
            any(pattern in error_str for pattern in TIMEOUT_PATTERNS):
        return VerificationError(
            f"Timeout in {context}: {error}",
            ErrorCategory.TIMEOUT_ERROR,
            recoverable=True
        )

    if isinstance(error, (ConnectionError, aiohttp.ClientConnectionError, requests.ConnectionError,
                          google_exceptions.ServiceUnavailable)) or \
            any(pattern in error_str for pattern in NETWORK_PATTERNS):
        return VerificationError(
            f"Network error in {context}: {error}",
            ErrorCategory.SERVICE_UNREACHABLE,
            recoverable=False
        )

    return VerificationError(
        f"Unknown error in {context}: {error}",
        ErrorCategory.UNKNOWN_ERROR,
        recoverable=False
    )
