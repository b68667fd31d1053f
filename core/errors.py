from __future__ import annotations

from typing import Optional


class DashboardError(Exception):
    """Base class for errors surfaced to the fund transfer screens."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DashboardError):
    """Input rejected locally; no request is sent to the backend."""


class AmountError(ValidationError):
    pass


class SelectionError(ValidationError):
    pass


class BackendError(DashboardError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
