from __future__ import annotations

from typing import Optional


class ValidationError(ValueError):
    """Bad user input. Nothing was written."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class AccessDenied(Exception):
    pass
