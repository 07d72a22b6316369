from __future__ import annotations

from typing import Any


class PricingError(Exception):
    def __init__(
        self,
        code: str,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Create a structured error for engine and configuration callers."""
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
