"""Custom exception hierarchy for s3checker.

Fatal errors abort the check before any report is printed; the CLI maps
them to exit codes. Each exception exposes a stable 'error_type' attribute
for structured logging.
"""
from __future__ import annotations
from typing import Optional, Dict, Any


class S3CheckerError(Exception):
    """Base exception for all s3checker errors."""

    error_type = "S3CheckerError"

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error_type": self.error_type, "message": str(self), "context": self.context}


class ConfigurationError(S3CheckerError):
    error_type = "ConfigurationError"


class AuthenticationError(S3CheckerError):
    error_type = "AuthenticationError"


class CallerIdentityError(S3CheckerError):
    error_type = "CallerIdentityError"


class BucketRegionError(S3CheckerError):
    error_type = "BucketRegionError"


class FixtureCleanupError(S3CheckerError):
    """Local fixture files could not be removed. Advisory, never fatal."""

    error_type = "FixtureCleanupError"
