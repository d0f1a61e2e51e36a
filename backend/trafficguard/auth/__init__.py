"""
Officer sign-in (demo identity, not real authentication)
"""

from .officer_auth import (
    DEMO_OFFICERS,
    DISPOSABLE_DOMAINS,
    LOCKOUT_SECONDS,
    MAX_ATTEMPTS,
    OfficerAuth,
    is_disposable_email,
    is_weak_password,
)

__all__ = [
    "DEMO_OFFICERS",
    "DISPOSABLE_DOMAINS",
    "LOCKOUT_SECONDS",
    "MAX_ATTEMPTS",
    "OfficerAuth",
    "is_disposable_email",
    "is_weak_password",
]
