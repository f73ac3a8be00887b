"""
Configuration management for stepproof.
Environment detection and .env loading shared by all packages.
"""

import os
import sys
from typing import Optional
from pathlib import Path

import dotenv


VALID_ENVIRONMENTS = {'development', 'testing', 'production'}


class Config:
    """Centralized configuration management."""

    # Environment settings
    _environment: Optional[str] = None
    _env_loaded: bool = False

    @classmethod
    def _load_env_file(cls) -> None:
        """Load environment-specific .env file if it exists."""
        if cls._env_loaded:
            return

        # Get environment without loading .env files first (to avoid recursion)
        env = cls._get_environment_no_load()
        project_root = cls.get_project_root()
        env_file = project_root / f'.env.{env}'

        if env_file.exists():
            dotenv.load_dotenv(env_file, override=True)
        else:
            # Only load default .env if no environment-specific file exists
            default_env_file = project_root / '.env'
            if default_env_file.exists():
                dotenv.load_dotenv(default_env_file, override=False)

        cls._env_loaded = True

    @classmethod
    def _get_environment_no_load(cls) -> str:
        """Get environment without loading .env files (to avoid recursion)."""
        env = os.environ.get('STEPPROOF_ENV', '').strip().lower()

        # Auto-detect testing environment
        if not env:
            if os.environ.get('PYTEST_CURRENT_TEST') or 'pytest' in sys.argv[0]:
                env = 'testing'

        if not env:
            env = 'development'

        return env

    @classmethod
    def get_environment(cls) -> str:
        """Get the current environment with proper priority order."""
        if cls._environment is not None:
            return cls._environment

        cls._load_env_file()
        env = cls._get_environment_no_load()

        if env not in VALID_ENVIRONMENTS:
            raise ValueError(f"Invalid environment '{env}'. Must be one of: {VALID_ENVIRONMENTS}")

        cls._environment = env
        return env

    @classmethod
    def set_environment(cls, env: str) -> None:
        """Override the environment (useful for testing)."""
        if env not in VALID_ENVIRONMENTS:
            raise ValueError(f"Invalid environment '{env}'. Must be one of: {VALID_ENVIRONMENTS}")
        cls._environment = env

    @classmethod
    def reset(cls) -> None:
        """Forget the cached environment so the next lookup re-reads it."""
        cls._environment = None
        cls._env_loaded = False

    @classmethod
    def is_development(cls) -> bool:
        return cls.get_environment() == 'development'

    @classmethod
    def is_testing(cls) -> bool:
        return cls.get_environment() == 'testing'

    @classmethod
    def is_production(cls) -> bool:
        return cls.get_environment() == 'production'

    @classmethod
    def get_env_var(cls, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get environment variable with automatic .env file loading."""
        cls._load_env_file()
        value = os.environ.get(key)
        if value is None or value.strip() == '':
            return default
        return value.strip()

    @classmethod
    def get_database_path(cls) -> str:
        """Get the claims database path for the current environment."""
        db_path = cls.get_env_var('DATABASE_PATH')
        if db_path:
            path = Path(db_path)
            if not path.is_absolute():
                path = cls.get_project_root() / path
            return str(path)

        db_names = {
            'development': 'claims.db',
            'testing': 'test_claims.db',
            'production': 'claims.db'
        }

        db_name = db_names.get(cls.get_environment(), 'claims.db')
        return str(cls.get_project_root() / db_name)

    @classmethod
    def get_project_root(cls) -> Path:
        """Get project root directory."""
        return Path(__file__).resolve().parent.parent


# Global instance for easy access
config = Config()
