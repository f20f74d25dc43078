# app/domain/errors.py
from __future__ import annotations


class ScanError(Exception):
    """Base class for failures along the scan flow."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidImageError(ScanError):
    status_code = 400


class LlmError(ScanError):
    pass


class ProductParseError(ScanError):
    pass


class RepositoryError(ScanError):
    pass
