"""Password hashing with bcrypt.

bcrypt generates a random salt per call and embeds it in the digest, so two
hashes of the same password differ but both verify. bcrypt only looks at the
first 72 bytes of input; longer passwords are rejected up front instead of
being silently truncated.
"""

import bcrypt

from postgate.errors import ValidationError

MAX_PASSWORD_BYTES = 72
DEFAULT_ROUNDS = 12


class CredentialHasher:
    """One-way password hashing and verification."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds
        # Verified against when the account does not exist, so an unknown
        # email costs the same bcrypt work as a wrong password.
        self._dummy_digest = self.hash("postgate-timing-equalizer")

    def hash(self, plaintext: str) -> str:
        """Return a salted bcrypt digest of ``plaintext``."""
        encoded = plaintext.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plaintext: str, digest: str) -> bool:
        """Return True if ``plaintext`` produced ``digest``. Fails closed."""
        try:
            encoded = plaintext.encode("utf-8")
            if len(encoded) > MAX_PASSWORD_BYTES:
                return False
            return bcrypt.checkpw(encoded, digest.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            return False

    def burn(self, plaintext: str) -> bool:
        """Spend one verification's worth of work and return False."""
        self.verify(plaintext, self._dummy_digest)
        return False
