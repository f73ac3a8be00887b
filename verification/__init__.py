"""
stepproof verification engine.

Verifies numeric activity claims against screenshot proofs using an external
multimodal extraction service.
"""

from .config import VerifierConfig
from .error_handler import (
    ErrorCategory,
    VerificationError,
    ProofUnavailableError,
    ExtractionTimeoutError,
    ConfigurationError,
    classify_error,
)
from .evaluator import evaluate, compute_tolerance
from .models import ClaimContext, ExtractionResult, Verdict, Outcome
from .pipeline import ClaimVerifier

__all__ = [
    'VerifierConfig',
    'ErrorCategory',
    'VerificationError',
    'ProofUnavailableError',
    'ExtractionTimeoutError',
    'ConfigurationError',
    'classify_error',
    'evaluate',
    'compute_tolerance',
    'ClaimContext',
    'ExtractionResult',
    'Verdict',
    'Outcome',
    'ClaimVerifier',
]
