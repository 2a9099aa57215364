# linkup/core/errors.py
"""
Closed set of domain errors.

Services raise these; the exception handlers registered in main.py are the
only place they are turned into HTTP responses. Each variant carries a fixed
status code so the mapping is decided once.
"""
from typing import Optional


class LinkUpError(Exception):
    """Base class for all errors the API knows how to report."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(LinkUpError):
    """Malformed input rejected before any collaborator is touched."""
    status_code = 400
    default_message = "Invalid request"


class AuthError(LinkUpError):
    """
    Bad password, bad OTP, bad refresh token or bad bearer token.

    Messages are deliberately low-detail. OTP failures are reported with
    status 400, everything else with 401.
    """
    status_code = 401
    default_message = "Invalid credentials"


class NotFoundError(LinkUpError):
    status_code = 404
    default_message = "Seller not found"


class ConflictError(LinkUpError):
    status_code = 409
    default_message = "Resource already exists"


class WalletOwnershipError(LinkUpError):
    """The claimed account is not controlled by the supplied mnemonic."""
    status_code = 400
    default_message = "Account ID does not match the provided mnemonic"


class UpstreamError(LinkUpError):
    """The ledger rejected or failed a call."""
    status_code = 502
    default_message = "Ledger service unavailable"


class IntegrityError(LinkUpError):
    """Vault decryption failed: tampered data or wrong key."""
    status_code = 500
    default_message = "Secret integrity check failed"
