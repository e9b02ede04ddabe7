"""Exceptions raised by the stock-ledger services.

Routes translate these into ``{"error": ..., "message": ...}`` bodies using
``status_code`` and ``error``; services never build HTTP responses.
"""
from __future__ import annotations

from typing import Sequence


class InventoryError(Exception):
    status_code = 500
    error = 'Internal Server Error'

    def __init__(self, message: str, *, details: Sequence[str] | None = None):
        super().__init__(message)
        self.message = message
        self.details = list(details) if details else []

    def to_dict(self):
        payload = {'error': self.error, 'message': self.message}
        if self.details:
            payload['details'] = self.details
        return payload


class ValidationError(InventoryError):
    status_code = 400
    error = 'Validation Error'


class NotFoundError(InventoryError):
    status_code = 404
    error = 'Not Found'


class AuthorizationError(InventoryError):
    status_code = 403
    error = 'Forbidden'

    def __init__(self, message: str, *, status_code: int = 403):
        super().__init__(message)
        self.status_code = status_code
        if status_code == 401:
            self.error = 'Unauthorized'


class PersistenceError(InventoryError):
    status_code = 500
    error = 'Internal Server Error'
