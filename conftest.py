"""
Global pytest configuration for stepproof.
Forces the testing environment and cleans up the test database.
"""

import os

import pytest

from utils.config import Config
from utils.database import cleanup_test_database


@pytest.fixture(scope="session", autouse=True)
def cleanup_test_database_on_exit():
    """Remove the environment's test database when the session ends."""
    yield
    Config.reset()
    Config.set_environment('testing')
    cleanup_test_database()


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment for all tests."""
    original_env = os.environ.get('STEPPROOF_ENV')
    os.environ['STEPPROOF_ENV'] = 'testing'
    Config.reset()

    yield

    if original_env:
        os.environ['STEPPROOF_ENV'] = original_env
    else:
        os.environ.pop('STEPPROOF_ENV', None)
    Config.reset()
