"""
Utilities package: configuration, logging, file storage and URL helpers.
"""

from .config import settings
from .storage import StorageService

__all__ = [
    'settings',        # Application settings
    'StorageService',  # Firm-scoped file persistence
]
