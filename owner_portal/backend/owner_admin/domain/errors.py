# backend/owner_admin/domain/errors.py
from __future__ import annotations


class AdminError(Exception):
    """Base for errors surfaced to the caller as a definite failure."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(AdminError):
    status_code = 404


class Conflict(AdminError):
    status_code = 409


class InvalidInput(AdminError):
    status_code = 400


class UpstreamUnavailable(AdminError):
    status_code = 502
