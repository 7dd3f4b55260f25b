"""Password hashing utilities.

Learn: Uses argon2id (argon2-cffi) for password hashing. argon2id is
memory-hard, salts every hash automatically, and encodes its parameters
in the hash string ("$argon2id$v=19$m=...,t=...,p=...$salt$hash").

Verification never raises, and it costs one full argon2 computation
whether or not the stored hash is well-formed: a malformed hash burns a
dummy verification before failing.
"""

from functools import lru_cache

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

_hasher = PasswordHasher(type=Type.ID)


def hash_password(password: str) -> str:
    """Hash a password with argon2id and a fresh random salt."""
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its argon2 hash."""
    try:
        return _hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError):
        return False
    except (InvalidHashError, ValueError):
        dummy_verify(password)
        return False


def dummy_verify(password: str) -> None:
    """Burn one argon2 verification without a real stored hash.

    Used for unknown usernames and malformed stored hashes, so neither
    is distinguishable from a wrong password by response time.
    """
    try:
        _hasher.verify(_dummy_hash(), password)
    except VerifyMismatchError:
        pass


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return _hasher.hash("taskgate-dummy-password")
