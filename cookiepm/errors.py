"""Custom exception hierarchy for cookiepm.

All cookiepm-specific exceptions derive from CookiePMError. Each exception
carries an optional ``context`` dict with structured metadata that the CLI
error handler can render.

Exception hierarchy::

    CookiePMError
    ├── InvalidAgreementTypeError  (ValueError)
    ├── InvalidCallbackError       (TypeError)
    └── ConfigError

Storage failures are deliberately absent: an unusable backend is an
environmental condition handled by falling back, not an error.
"""
from __future__ import annotations

from typing import Iterable, Optional


class CookiePMError(Exception):
    """Base class for all cookiepm exceptions.

    Args:
        message: Human-readable error description.
        context: Optional dict of structured metadata.
    """

    exit_code: int = 1

    def __init__(self, message: str, context: Optional[dict] = None):
        self.context = context or {}
        super().__init__(message)


# ── Invalid Arguments ──────────────────────────────────────────────

class InvalidAgreementTypeError(CookiePMError, ValueError):
    """Raised when ``update`` receives a type outside the known set."""

    exit_code = 2

    def __init__(self, agreement_type: object, allowed: Iterable[str]):
        allowed = list(allowed)
        super().__init__(
            'type must be one of "' + '", "'.join(allowed) + '"',
            context={"type": agreement_type, "allowed": allowed},
        )


class InvalidCallbackError(CookiePMError, TypeError):
    """Raised when ``action`` receives something that is not callable."""

    exit_code = 2

    def __init__(self, callback: object):
        kind = type(callback).__name__
        super().__init__(
            f"callback must be callable, was: {kind}",
            context={"callback_type": kind},
        )


# ── Configuration ──────────────────────────────────────────────────

class ConfigError(CookiePMError):
    """Raised when configuration is invalid or missing."""
    pass
