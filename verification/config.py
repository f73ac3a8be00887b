"""
Configuration management for the verification engine.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any

from utils.config import Config
from .constants import ConfigDefaults


VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


@dataclass
class VerifierConfig:
    """
    Configuration for the ClaimVerifier and its collaborators.

    Centralizes all options so production wiring and tests build the
    engine from the same place.
    """

    # Extraction service
    api_key: Optional[str] = None
    model_name: str = ConfigDefaults.MODEL_NAME
    timeout_ms: int = ConfigDefaults.VERIFY_TIMEOUT_MS

    # Proof storage
    proofs_bucket: str = ConfigDefaults.PROOFS_BUCKET
    storage_url: Optional[str] = None  # Object storage REST base URL
    storage_key: Optional[str] = None  # Service key for the storage endpoint
    proofs_dir: Optional[str] = None  # Local proof root, used when no storage URL is set
    download_timeout: float = ConfigDefaults.DOWNLOAD_TIMEOUT
    max_proof_size_mb: float = ConfigDefaults.MAX_PROOF_SIZE_MB

    # Claim records
    database_path: Optional[str] = None

    # Operational settings
    unit_label: str = ConfigDefaults.UNIT_LABEL
    log_level: str = ConfigDefaults.LOG_LEVEL
    log_file: Optional[str] = None  # Extra file handler alongside stdout

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_config()

    def _validate_config(self):
        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

        if self.download_timeout <= 0:
            raise ValueError("download_timeout must be positive")

        if self.max_proof_size_mb <= 0:
            raise ValueError("max_proof_size_mb must be positive")

        if not self.proofs_bucket or not self.proofs_bucket.strip():
            raise ValueError("proofs_bucket cannot be empty")

        if not self.unit_label or not self.unit_label.strip():
            raise ValueError("unit_label cannot be empty")

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @classmethod
    def from_env(cls) -> 'VerifierConfig':
        """Build configuration from environment variables (and .env files)."""
        timeout_ms = Config.get_env_var('VERIFY_TIMEOUT_MS')
        download_timeout = Config.get_env_var('DOWNLOAD_TIMEOUT')
        max_size = Config.get_env_var('MAX_PROOF_SIZE_MB')

        return cls(
            api_key=Config.get_env_var('GEMINI_API_KEY'),
            model_name=Config.get_env_var('GEMINI_MODEL', ConfigDefaults.MODEL_NAME),
            timeout_ms=int(timeout_ms) if timeout_ms else ConfigDefaults.VERIFY_TIMEOUT_MS,
            proofs_bucket=Config.get_env_var('PROOFS_BUCKET', ConfigDefaults.PROOFS_BUCKET),
            storage_url=Config.get_env_var('STORAGE_URL'),
            storage_key=Config.get_env_var('STORAGE_SERVICE_KEY'),
            proofs_dir=Config.get_env_var('PROOFS_DIR'),
            download_timeout=float(download_timeout) if download_timeout else ConfigDefaults.DOWNLOAD_TIMEOUT,
            max_proof_size_mb=float(max_size) if max_size else ConfigDefaults.MAX_PROOF_SIZE_MB,
            database_path=Config.get_database_path(),
            log_level=Config.get_env_var('LOG_LEVEL', ConfigDefaults.LOG_LEVEL),
            log_file=Config.get_env_var('LOG_FILE'),
        )

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'VerifierConfig':
        """Create configuration from dictionary."""
        return cls(**config_dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for logging (secrets redacted)."""
        return {
            'api_key': '***REDACTED***' if self.api_key else None,
            'model_name': self.model_name,
            'timeout_ms': self.timeout_ms,
            'proofs_bucket': self.proofs_bucket,
            'storage_url': self.storage_url,
            'storage_key': '***REDACTED***' if self.storage_key else None,
            'proofs_dir': self.proofs_dir,
            'download_timeout': self.download_timeout,
            'max_proof_size_mb': self.max_proof_size_mb,
            'database_path': self.database_path,
            'unit_label': self.unit_label,
            'log_level': self.log_level,
            'log_file': self.log_file,
        }

    def __str__(self) -> str:
        return f"VerifierConfig({self.to_dict()})"
