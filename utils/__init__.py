"""
Utilities package for the stepproof project.
"""

from .config import Config, config

__all__ = [
    'Config', 'config',
]
