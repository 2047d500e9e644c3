"""Password hashing using Argon2.

Provides salted password hashing and verification using the Argon2id
algorithm. Every hash embeds its own random salt and cost parameters, so two
hashes of the same password never match and verification needs nothing but
the stored hash.
"""

import secrets
from functools import cached_property

from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import HashingError as Argon2HashingError
from argon2.exceptions import InvalidHashError, VerificationError

from coddy_public.core.config import Settings


class HashingError(Exception):
    """Raised when a password cannot be hashed."""

    pass


class PasswordHasher:
    """Argon2id password hasher configured from process settings."""

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ) -> None:
        """Initialize the hasher.

        Args:
            time_cost: Number of Argon2 iterations.
            memory_cost: Memory usage in KiB.
            parallelism: Number of parallel lanes.
        """
        self._hasher = Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordHasher":
        return cls(
            time_cost=settings.password_hash_time_cost,
            memory_cost=settings.password_hash_memory_cost,
            parallelism=settings.password_hash_parallelism,
        )

    def hash(self, password: str) -> str:
        """Hash a password using Argon2id.

        Args:
            password: The plaintext password to hash.

        Returns:
            The encoded hash, including salt and parameters.

        Raises:
            HashingError: If the underlying library fails.

        Example:
            >>> hasher = PasswordHasher()
            >>> hasher.hash("Strong1!").startswith("$argon2id$")
            True
        """
        try:
            return self._hasher.hash(password)
        except Argon2HashingError as e:
            raise HashingError("Failed to hash password") from e

    def verify(self, password: str, hashed: str) -> bool:
        """Verify a password against a hash.

        Uses constant-time comparison to prevent timing attacks. Malformed
        hashes and passwords that cannot be encoded (lone surrogates, a
        non-ASCII hash) are reported as a mismatch rather than an error.

        Args:
            password: The plaintext password to verify.
            hashed: The hashed password to verify against.

        Returns:
            True if the password matches, False otherwise.
        """
        try:
            return self._hasher.verify(hashed, password)
        except (VerificationError, InvalidHashError, UnicodeEncodeError):
            return False

    @cached_property
    def dummy_hash(self) -> str:
        """A hash of a random secret, verified against when no user matched.

        Uses the same cost parameters as real hashes so that a lookup miss
        spends as much time verifying as a lookup hit.
        """
        return self.hash(secrets.token_urlsafe(16))

    def needs_rehash(self, hashed: str) -> bool:
        """Check if a hash was produced with outdated parameters.

        Args:
            hashed: The hashed password to check.

        Returns:
            True if the hash should be updated, False otherwise.
        """
        try:
            return self._hasher.check_needs_rehash(hashed)
        except (InvalidHashError, UnicodeEncodeError):
            return True
