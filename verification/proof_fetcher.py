"""
Proof retrieval for the verification engine.

Downloads proof images from a blob store and determines their MIME type.
No retries happen here: a failed download ends the attempt.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Protocol
from urllib.parse import quote

import aiohttp
import requests

from .constants import MimeTypes, ConfigDefaults
from .error_handler import ProofUnavailableError
from .logging_config import get_logger


class BlobStoreProtocol(Protocol):
    """Protocol for blob store reads."""
    def get(self, path: str) -> Tuple[bytes, Optional[str]]:
        """Return the object's bytes and the store-reported content type (if any)."""
        ...


class AsyncBlobStoreProtocol(Protocol):
    """Protocol for async blob store reads."""
    async def get(self, path: str) -> Tuple[bytes, Optional[str]]:
        """Return the object's bytes and the store-reported content type (if any)."""
        ...


@dataclass(frozen=True)
class ProofFile:
    """Downloaded proof ready for extraction."""
    data: bytes
    mime_type: str
    path: str

    @property
    def size_mb(self) -> float:
        return len(self.data) / (1024 * 1024)


def guess_mime_type(path: str) -> str:
    """Infer a proof MIME type from its file extension."""
    extension = os.path.splitext(path.lower())[1]
    return MimeTypes.BY_EXTENSION.get(extension, MimeTypes.DEFAULT)


def resolve_mime_type(path: str, content_type: Optional[str]) -> str:
    """Prefer the store-reported content type, falling back to the extension."""
    if content_type:
        media_type = content_type.split(';', 1)[0].strip().lower()
        if media_type:
            return media_type
    return guess_mime_type(path)


class StorageEndpoint:
    """Addressing shared by the object-storage blob stores."""

    def __init__(self, base_url: str, bucket: str, service_key: Optional[str] = None,
                 timeout: float = ConfigDefaults.DOWNLOAD_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.bucket = bucket
        self.service_key = service_key
        self.timeout = timeout

    def object_url(self, path: str) -> str:
        return f"{self.base_url}/object/{quote(self.bucket)}/{quote(path.lstrip('/'))}"

    def headers(self) -> dict:
        if not self.service_key:
            return {}
        return {'Authorization': f'Bearer {self.service_key}', 'apikey': self.service_key}


class StorageHTTPBlobStore(StorageEndpoint):
    """Blob store backed by an object-storage REST endpoint, using requests."""

    def __init__(self, base_url: str, bucket: str, service_key: Optional[str] = None,
                 timeout: float = ConfigDefaults.DOWNLOAD_TIMEOUT,
                 session: Optional[requests.Session] = None):
        super().__init__(base_url, bucket, service_key, timeout)
        self.session = session or requests.Session()

    def get(self, path: str) -> Tuple[bytes, Optional[str]]:
        response = self.session.get(self.object_url(path), headers=self.headers(), timeout=self.timeout)
        response.raise_for_status()
        return response.content, response.headers.get('Content-Type')


class AsyncStorageHTTPBlobStore(StorageEndpoint):
    """Async variant of the storage blob store, using aiohttp."""

    async def get(self, path: str) -> Tuple[bytes, Optional[str]]:
        client_timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.get(self.object_url(path), headers=self.headers()) as response:
                response.raise_for_status()
                data = await response.read()
                return data, response.headers.get('Content-Type')


class LocalBlobStore:
    """Blob store reading proofs from a local directory ({root}/{bucket}/{path})."""

    def __init__(self, root_dir: str, bucket: str = ConfigDefaults.PROOFS_BUCKET):
        self.root = (Path(root_dir) / bucket).resolve()

    def get(self, path: str) -> Tuple[bytes, Optional[str]]:
        target = (self.root / path.lstrip('/')).resolve()
        if self.root not in target.parents:
            raise FileNotFoundError(f"Proof path escapes the store root: {path}")
        return target.read_bytes(), None


class ProofFetcher:
    """
    Retrieves proof bytes and their MIME type.

    Uses the async store when one is injected; otherwise the sync store's
    download runs in a worker thread.
    """

    def __init__(self,
                 blob_store: Optional[BlobStoreProtocol] = None,
                 async_blob_store: Optional[AsyncBlobStoreProtocol] = None,
                 max_proof_size_mb: float = ConfigDefaults.MAX_PROOF_SIZE_MB,
                 logger: Optional[logging.Logger] = None):
        if blob_store is None and async_blob_store is None:
            raise ValueError("ProofFetcher needs a blob store")
        self.blob_store = blob_store
        self.async_blob_store = async_blob_store
        self.max_proof_size_mb = max_proof_size_mb
        self.logger = logger or get_logger('proof_fetcher')

    async def fetch_proof(self, path: str) -> ProofFile:
        """
        Download the proof stored at ``path``.

        Args:
            path: Opaque blob store key

        Returns:
            ProofFile with bytes and MIME type

        Raises:
            ProofUnavailableError: If the object is missing, empty, too large
                or the store cannot be reached
        """
        self.logger.info(f"🔗 Fetching proof: {path}")

        try:
            if self.async_blob_store is not None:
                data, content_type = await self.async_blob_store.get(path)
            else:
                data, content_type = await asyncio.to_thread(self.blob_store.get, path)
        except Exception as e:
            self.logger.error(f"❌ Unable to download proof {path}: {e}")
            raise ProofUnavailableError(f"Unable to download proof: {path}") from e

        if not data:
            self.logger.error(f"❌ Proof is empty: {path}")
            raise ProofUnavailableError(f"Proof is empty: {path}")

        proof = ProofFile(data=data, mime_type=resolve_mime_type(path, content_type), path=path)

        if proof.size_mb > self.max_proof_size_mb:
            self.logger.error(f"❌ Proof too large: {proof.size_mb:.2f}MB > {self.max_proof_size_mb:.2f}MB")
            raise ProofUnavailableError(f"Proof exceeds {self.max_proof_size_mb}MB limit: {path}")

        self.logger.info(f"✅ Proof fetched ({proof.size_mb:.2f}MB, {proof.mime_type})")
        return proof
