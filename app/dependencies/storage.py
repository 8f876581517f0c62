"""
Storage dependency injection for FastAPI.

This module provides FastAPI dependency functions for injecting the storage
facade into endpoints.
"""
from fastapi import Request

from app.config import StorageConfig, settings
from app.storage.facade import StorageService


def create_storage() -> StorageService:
    """
    Build the storage facade from environment settings.

    Called once at application startup; backend selection is fixed for the
    lifetime of the process.
    """
    return StorageService(StorageConfig.from_settings(settings))


def get_storage(request: Request) -> StorageService:
    """
    Return the storage facade created at startup.

    Tests override this dependency to inject a facade with fake backends.
    """
    return request.app.state.storage
