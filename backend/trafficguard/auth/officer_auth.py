"""
Officer Sign-In

Demo identity layer for the officer device. Not real authentication:
credentials are a fixed directory. The login policies still apply:

- Disposable / temporary email domains are rejected
- Weak passwords (under 8 characters or without a digit) are rejected
- Three failed attempts lock sign-in for 30 seconds

The signed-in officer is kept in the user storage slot and restored at
startup.
"""

import time
from typing import Dict, Optional, Tuple

from pydantic import ValidationError

from trafficguard.errors import AuthenticationError, PersistenceError
from trafficguard.models import Officer


DISPOSABLE_DOMAINS = {
    '10minutemail.com',
    'guerrillamail.com',
    'temp-mail.org',
    'tempmail.com',
    'throwawaymail.com',
    'yopmail.com',
    'mailinator.com',
    'sharklasers.com',
    'maildrop.cc',
    'getairmail.com',
    'dispostable.com',
    'tempr.email',
    'trashmail.com',
    'mytemp.email',
    'mvrht.com',
    'supere.ml',
    'rhyta.com',
    'teleworm.us',
    'jourrapide.com',
}

# email -> (password, officer)
DEMO_OFFICERS: Dict[str, Tuple[str, Officer]] = {
    'officer@trafficguard.in': (
        'traffic123',
        Officer(id='POL-8821', name='Vikram Malhotra', badge_number='MH-POL-8821',
                email='officer@trafficguard.in', role='Officer'),
    ),
    'admin@trafficguard.in': (
        'control2024',
        Officer(id='ADM-001', name='System Administrator', badge_number='SYS-ADMIN',
                email='admin@trafficguard.in', role='Admin'),
    ),
}

MAX_ATTEMPTS = 3
LOCKOUT_SECONDS = 30.0


def is_disposable_email(email: str) -> bool:
    """True for known throwaway domains and their subdomains"""
    if not email or '@' not in email:
        return False

    domain = email.split('@')[1].lower()
    if domain in DISPOSABLE_DOMAINS:
        return True
    return any(domain.endswith('.' + d) for d in DISPOSABLE_DOMAINS)


def is_weak_password(password: str) -> bool:
    """Minimum 8 characters with at least one digit"""
    password = password or ""
    return not (len(password) >= 8 and any(ch.isdigit() for ch in password))


class OfficerAuth:
    """
    Sign-in state for the device

    Usage:
        auth = OfficerAuth(storage)
        auth.restore()
        officer = auth.login(email, password)
        auth.logout()
    """

    def __init__(self, storage=None, slot: str = "traffic_guard_user",
                 directory: Dict[str, Tuple[str, Officer]] = None, clock=time.monotonic):
        """
        Args:
            storage: SlotStorage for the user slot (None: memory only)
            slot: Storage slot name
            directory: Credential directory (defaults to the demo officers)
            clock: Monotonic time source (injectable for tests)
        """
        self.storage = storage
        self.slot = slot
        self.directory = directory if directory is not None else DEMO_OFFICERS
        self.clock = clock

        self.current_officer: Optional[Officer] = None
        self.failed_attempts = 0
        self.locked_until: Optional[float] = None
        self.last_persistence_error: Optional[PersistenceError] = None

    @property
    def lockout_remaining(self) -> float:
        if self.locked_until is None:
            return 0.0
        remaining = self.locked_until - self.clock()
        if remaining <= 0:
            self.locked_until = None
            self.failed_attempts = 0
            return 0.0
        return remaining

    def restore(self) -> Optional[Officer]:
        """Load the signed-in officer from storage; corrupt data signs out"""
        if self.storage is None:
            return None

        data = self.storage.load_json(self.slot, default=None)
        if data is None:
            return None
        try:
            self.current_officer = Officer.model_validate(data)
        except ValidationError:
            print("[AUTH] Stored officer unreadable, signed out")
            self.current_officer = None
        return self.current_officer

    def login(self, email: str, password: str) -> Officer:
        """
        Verify credentials and sign in

        Raises:
            AuthenticationError: locked out, policy violation or bad credentials
        """
        remaining = self.lockout_remaining
        if remaining > 0:
            raise AuthenticationError(
                f"Security Lockout: Too many failed attempts. Try again in {int(remaining) + 1}s."
            )

        email = (email or "").strip().lower()
        if is_disposable_email(email):
            raise AuthenticationError(
                "Security Alert: Temporary or disposable email addresses are not permitted. "
                "Please use an official organizational email."
            )

        entry = self.directory.get(email)
        if is_weak_password(password) or entry is None or entry[0] != password:
            return self._fail()

        self.failed_attempts = 0
        self.current_officer = entry[1].model_copy()
        self._save()
        print(f"[AUTH] Officer signed in: {self.current_officer.badge_number}")
        return self.current_officer

    def logout(self):
        self.current_officer = None
        if self.storage is not None:
            try:
                self.storage.remove(self.slot)
                self.last_persistence_error = None
            except PersistenceError as e:
                self.last_persistence_error = e
                print(f"[AUTH] Could not clear stored officer: {e}")
        print("[AUTH] Officer signed out")

    def _fail(self):
        self.failed_attempts += 1
        if self.failed_attempts >= MAX_ATTEMPTS:
            self.locked_until = self.clock() + LOCKOUT_SECONDS
            raise AuthenticationError(
                f"Security Lockout: Too many failed attempts. "
                f"System unavailable for {int(LOCKOUT_SECONDS)}s."
            )
        # Same message for unknown user and wrong password
        raise AuthenticationError(
            f"Invalid credentials. Access denied. "
            f"({MAX_ATTEMPTS - self.failed_attempts} attempts remaining)"
        )

    def _save(self):
        if self.storage is None:
            return
        try:
            self.storage.save_json(self.slot, self.current_officer.model_dump(mode='json'))
            self.last_persistence_error = None
        except PersistenceError as e:
            self.last_persistence_error = e
            print(f"[AUTH] Could not persist officer: {e}")
