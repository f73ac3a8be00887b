"""
Claim verification pipeline for stepproof.

Orchestrates proof retrieval, extraction, evaluation and audit persistence,
and turns every exit point into a classified Outcome.
"""

import asyncio
import logging
import time
from collections import deque
from typing import Optional, List, Dict, Any, Protocol, Sequence

from .audit import persist_verification
from .config import VerifierConfig
from .constants import ConfigDefaults
from .evaluator import evaluate
from .extraction_client import ExtractionClient
from .gemini_client import GeminiClient
from .logging_config import get_logger, setup_logging
from .models import ClaimContext, Outcome
from .outcome_classifier import build_error_outcome, build_success_outcome
from .proof_fetcher import (
    ProofFetcher,
    LocalBlobStore,
    StorageHTTPBlobStore,
    AsyncStorageHTTPBlobStore,
)
from .repository import ClaimRecordRepository, ClaimRecordStoreProtocol


class MetricsCollectorProtocol(Protocol):
    """Protocol for metrics collection."""
    def record_operation(self, operation: str, duration: float, success: bool, **kwargs) -> None:
        ...

    def get_summary(self) -> Dict[str, Any]:
        ...


class DefaultMetricsCollector:
    """
    Default in-memory metrics collector.

    Keeps running totals plus only the most recent operations, so a
    long-lived verifier holds bounded state.
    """
    def __init__(self, max_recent: int = ConfigDefaults.METRICS_RECENT_OPERATIONS):
        if max_recent <= 0:
            raise ValueError("max_recent must be positive")
        self.metrics = {
            "operations": deque(maxlen=max_recent),
            "total": 0,
            "succeeded": 0,
            "total_duration": 0.0,
        }

    def record_operation(self, operation: str, duration: float, success: bool, **kwargs) -> None:
        """Record an operation with metrics."""
        self.metrics["total"] += 1
        self.metrics["succeeded"] += 1 if success else 0
        self.metrics["total_duration"] += duration
        self.metrics["operations"].append({
            "operation": operation,
            "duration": duration,
            "success": success,
            "timestamp": time.time(),
            **kwargs
        })

    def get_summary(self) -> Dict[str, Any]:
        """Get metrics summary (totals cover every operation, not just the recent ones)."""
        total = self.metrics["total"]
        return {
            "operations": list(self.metrics["operations"]),
            "total": total,
            "succeeded": self.metrics["succeeded"],
            "average_duration": self.metrics["total_duration"] / total if total else 0.0,
        }


class ClaimVerifier:
    """
    Main orchestrator for activity-claim verification.

    Each call to verify() is an independent linear pipeline:
    fetch proof -> extract -> evaluate -> persist. Nothing is cached
    between attempts, so concurrent attempts share no state.
    """

    def __init__(self,
                 proof_fetcher: ProofFetcher,
                 extraction_client: ExtractionClient,
                 claim_store: Optional[ClaimRecordStoreProtocol] = None,
                 metrics_collector: Optional[MetricsCollectorProtocol] = None,
                 unit_label: str = ConfigDefaults.UNIT_LABEL,
                 logger: Optional[logging.Logger] = None):
        """
        Args:
            proof_fetcher: Retrieves proof bytes
            extraction_client: Runs the bounded extraction call
            claim_store: Durable claim record store (None disables persistence)
            metrics_collector: Metrics collection interface
            unit_label: Name of the primary metric used in notes
            logger: Optional logger instance
        """
        self.proof_fetcher = proof_fetcher
        self.extraction_client = extraction_client
        self.claim_store = claim_store
        self.metrics_collector = metrics_collector or DefaultMetricsCollector()
        self.unit_label = unit_label
        self.logger = logger or get_logger('pipeline')

    @classmethod
    def from_config(cls, config: Optional[VerifierConfig] = None,
                    logger: Optional[logging.Logger] = None) -> 'ClaimVerifier':
        """
        Wire the production collaborators from configuration.

        Proofs come from the storage endpoint when STORAGE_URL is set,
        otherwise from the local PROOFS_DIR.
        """
        config = config or VerifierConfig.from_env()
        setup_logging(config.log_level, config.log_file)
        logger = logger or get_logger('pipeline')

        if config.storage_url:
            proof_fetcher = ProofFetcher(
                blob_store=StorageHTTPBlobStore(config.storage_url, config.proofs_bucket,
                                                config.storage_key, config.download_timeout),
                async_blob_store=AsyncStorageHTTPBlobStore(config.storage_url, config.proofs_bucket,
                                                           config.storage_key, config.download_timeout),
                max_proof_size_mb=config.max_proof_size_mb,
            )
        elif config.proofs_dir:
            proof_fetcher = ProofFetcher(
                blob_store=LocalBlobStore(config.proofs_dir, config.proofs_bucket),
                max_proof_size_mb=config.max_proof_size_mb,
            )
        else:
            raise ValueError("Either STORAGE_URL or PROOFS_DIR must be configured")

        extraction_client = ExtractionClient(
            service=GeminiClient(config.api_key, config.model_name),
            timeout_seconds=config.timeout_seconds,
            unit_label=config.unit_label,
        )

        logger.info(f"🔧 ClaimVerifier configured: {config}")
        return cls(
            proof_fetcher=proof_fetcher,
            extraction_client=extraction_client,
            claim_store=ClaimRecordRepository(config.database_path),
            unit_label=config.unit_label,
            logger=logger,
        )

    async def verify(self, claim: ClaimContext) -> Outcome:
        """
        Verify one claim against its proof.

        Never raises for pipeline failures: every exit is classified into an
        Outcome. Caller cancellation propagates and cancels the in-flight
        extraction call.

        Args:
            claim: The claim to verify (claimed_value 0 means auto-extract)

        Returns:
            Outcome envelope ready to serialize
        """
        start_time = time.time()
        mode = "auto_extract" if claim.is_auto_extract else "claim"
        self.logger.info(f"🚀 Verifying claim {claim.claim_id or '(dry run)'} for {claim.requester_id} ({mode})")

        try:
            proof = await self.proof_fetcher.fetch_proof(claim.proof_path)
            extraction = await self.extraction_client.extract(claim, proof.data, proof.mime_type)
            verdict = evaluate(claim, extraction, self.unit_label)
        except Exception as e:
            outcome = build_error_outcome(e, "claim verification")
            self.logger.error(f"❌ Verification failed with {outcome.code}: {e}")
            self._record_metrics("verification_failure", start_time, False,
                                 error_code=outcome.code, mode=mode)
            return outcome

        outcome = build_success_outcome(verdict, extraction)

        # Own error boundary: a failed write never changes the outcome
        persist_verification(self.claim_store, claim, verdict, extraction, self.unit_label)

        self.logger.info(f"✅ Claim {claim.claim_id or '(dry run)'}: {outcome.code} "
                         f"(tolerance {verdict.tolerance}, difference {verdict.difference})")
        self._record_metrics("verification_complete", start_time, True, code=outcome.code, mode=mode)
        return outcome

    def _record_metrics(self, operation: str, start_time: float, success: bool, **kwargs) -> None:
        # Metrics never change the outcome
        try:
            self.metrics_collector.record_operation(operation, time.time() - start_time, success, **kwargs)
        except Exception as e:
            self.logger.warning(f"⚠️ Could not record {operation} metrics: {e}")

    async def extract_only(self, proof_path: str, requester_id: str,
                           league_id: Optional[str] = None,
                           filename_hint: Optional[str] = None) -> Outcome:
        """
        Dry-run extraction for user review: auto-extract mode, nothing persisted.

        The extracted date comes back in ISO form with any missing year inferred.
        """
        claim = ClaimContext(
            claimed_value=0,
            proof_path=proof_path,
            requester_id=requester_id,
            league_id=league_id,
            filename_hint=filename_hint,
        )
        return await self.verify(claim)

    async def verify_batch(self, claims: Sequence[ClaimContext], max_concurrency: int = 1) -> List[Outcome]:
        """
        Verify several independent claims, preserving input order.

        Args:
            claims: Claims to verify
            max_concurrency: Maximum attempts in flight at once

        Returns:
            One Outcome per claim
        """
        if max_concurrency <= 0:
            raise ValueError("max_concurrency must be positive")

        semaphore = asyncio.Semaphore(max_concurrency)

        async def run(claim: ClaimContext) -> Outcome:
            async with semaphore:
                return await self.verify(claim)

        self.logger.info(f"📦 Verifying batch of {len(claims)} claims (concurrency {max_concurrency})")
        return list(await asyncio.gather(*(run(claim) for claim in claims)))
