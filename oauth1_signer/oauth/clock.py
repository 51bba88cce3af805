"""Timestamp and nonce sources for request signing.

Every signed request carries the current time in seconds and a nonce the
provider has not seen before. Tests swap in FixedClockAndNonce to get
reproducible signatures.
"""

import secrets
import time
from dataclasses import dataclass
from typing import Protocol

# Random bytes per nonce; hex-encoded this is 32 characters
NONCE_BYTES = 16


class ClockAndNonceSource(Protocol):
    """Supplies oauth_timestamp and oauth_nonce values."""

    def timestamp(self) -> str: ...

    def nonce(self) -> str: ...


def generate_nonce() -> str:
    """Generate a cryptographically random nonce.

    Returns:
        32-character random hex string
    """
    return secrets.token_hex(NONCE_BYTES)


def generate_timestamp() -> str:
    """Current time as whole seconds since the epoch."""
    return str(int(time.time()))


class SystemClockAndNonce:
    """Wall clock time and a fresh random nonce on every call."""

    def timestamp(self) -> str:
        return generate_timestamp()

    def nonce(self) -> str:
        return generate_nonce()


@dataclass(frozen=True)
class FixedClockAndNonce:
    """Always returns the same timestamp and nonce. For tests only."""

    fixed_timestamp: str
    fixed_nonce: str

    def timestamp(self) -> str:
        return self.fixed_timestamp

    def nonce(self) -> str:
        return self.fixed_nonce
