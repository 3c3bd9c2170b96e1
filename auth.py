import logging

from passlib.context import CryptContext

from config import DEFAULT_PASSWORD_HASH_ROUNDS

logger = logging.getLogger(__name__)

# NOTE:
# passlib's bcrypt backend breaks against current `bcrypt` releases, so the
# built-in `pbkdf2_sha256` scheme is used instead. It is salted and has a
# tunable work factor, and does NOT depend on the external `bcrypt` library.


class PasswordHasher:
    """
    One-way salted password hashing with a fixed work factor.
    """

    def __init__(self, rounds: int = DEFAULT_PASSWORD_HASH_ROUNDS):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["pbkdf2_sha256"],
            deprecated="auto",
            pbkdf2_sha256__default_rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """
        Hash a plain-text password. The salt and rounds are embedded in
        the returned string.
        """
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        """
        Verify a candidate password against a stored hash.

        A mismatch and a malformed hash both yield False.
        """
        if not isinstance(password, str) or not isinstance(hashed, str) or not hashed:
            return False
        try:
            return self._context.verify(password, hashed)
        except (ValueError, TypeError) as exc:
            logger.warning("Password hash could not be verified: %s", exc)
            return False
