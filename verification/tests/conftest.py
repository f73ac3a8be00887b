"""
Shared pytest fixtures for verification tests.
Provides fake collaborators, claim builders and an isolated claims database.
"""

import asyncio
import json
import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import pytest

from verification.extraction_client import ExtractionClient
from verification.logging_config import TRANSPORT_LOGGERS
from verification.models import ClaimContext
from verification.pipeline import ClaimVerifier, DefaultMetricsCollector
from verification.proof_fetcher import ProofFetcher
from verification.repository import ClaimRecordRepository

FIXED_NOW = datetime(2026, 1, 12, 9, 30)
PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 64


class FakeBlobStore:
    """In-memory blob store keyed by proof path."""

    def __init__(self, objects: Optional[Dict[str, Tuple[bytes, Optional[str]]]] = None):
        self.objects = objects or {}
        self.requested: List[str] = []

    def get(self, path: str) -> Tuple[bytes, Optional[str]]:
        self.requested.append(path)
        if path not in self.objects:
            raise FileNotFoundError(f"No such object: {path}")
        return self.objects[path]


class FakeExtractionService:
    """Extraction service double returning canned text, raising, or stalling."""

    def __init__(self, response: str = "", error: Optional[BaseException] = None, delay: float = 0.0):
        self.response = response
        self.error = error
        self.delay = delay
        self.calls: List[Dict] = []
        self.cancelled = False

    async def generate(self, prompt: str, image_bytes: bytes, mime_type: str) -> str:
        self.calls.append({'prompt': prompt, 'image_bytes': image_bytes, 'mime_type': mime_type})
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        return self.response


def extraction_json(**fields) -> str:
    """Well-formed extractor response with the given field overrides."""
    payload = {
        'steps': None,
        'km': None,
        'calories': None,
        'date': None,
        'confidence': None,
        'notes': '',
    }
    payload.update(fields)
    return json.dumps(payload)


@pytest.fixture
def make_claim():
    """Factory for ClaimContext objects with sensible defaults."""
    def _make(claimed_value=10000, **kwargs):
        kwargs.setdefault('proof_path', 'user-1/2026-01-10.png')
        kwargs.setdefault('requester_id', 'user-1')
        return ClaimContext(claimed_value=claimed_value, **kwargs)
    return _make


@pytest.fixture
def blob_store():
    """Blob store holding one PNG proof."""
    return FakeBlobStore({'user-1/2026-01-10.png': (PNG_BYTES, 'image/png')})


@pytest.fixture
def db_path(tmp_path):
    """Isolated claims database path for each test."""
    return str(tmp_path / "claims.db")


@pytest.fixture
def repository(db_path):
    """Claim repository over the isolated database."""
    return ClaimRecordRepository(db_path)


@pytest.fixture
def build_verifier(blob_store, repository):
    """Build a ClaimVerifier around a fake extraction service."""
    def _build(service: FakeExtractionService, timeout_seconds: float = 5.0, claim_store=None,
               store=None):
        return ClaimVerifier(
            proof_fetcher=ProofFetcher(blob_store=store or blob_store),
            extraction_client=ExtractionClient(service, timeout_seconds=timeout_seconds,
                                               clock=lambda: FIXED_NOW),
            claim_store=claim_store if claim_store is not None else repository,
            metrics_collector=DefaultMetricsCollector(),
        )
    return _build


@pytest.fixture
def fake_service():
    """Factory for FakeExtractionService instances."""
    return FakeExtractionService


@pytest.fixture
def response_json():
    """Builder for well-formed extractor responses."""
    return extraction_json


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def restore_verification_logger():
    """Undo setup_logging() so handlers and levels do not leak between tests."""
    names = ('verification',) + TRANSPORT_LOGGERS
    saved = {name: (list(logging.getLogger(name).handlers), logging.getLogger(name).level) for name in names}
    yield
    for name, (handlers, level) in saved.items():
        logger = logging.getLogger(name)
        for handler in logger.handlers:
            if handler not in handlers:
                handler.close()
        logger.handlers = handlers
        logger.setLevel(level)
