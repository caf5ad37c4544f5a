"""
Core utilities and configuration for the RequestDesk blog sync service.

This package provides foundational components used by every sync service:

Modules:
    config: Application settings and the per-operation RequestDeskConfig
    database: Database connection and session management
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings, RequestDeskConfig
    from core.database import async_session_maker
    from core.exceptions import ConfigurationError, AuthenticationError
    from core.logging import setup_logging

Example:
    setup_logging()
    config = RequestDeskConfig.from_settings()
    config.require_credentials()
"""

__all__ = [
    "settings",
    "RequestDeskConfig",
    "async_session_maker",
    "setup_logging",
    # Exceptions
    "SyncException",
    "ConfigurationError",
    "RemoteError",
    "AuthenticationError",
    "NotFoundError",
    "TransformError",
    "ValidationError",
    "PersistenceError",
]
