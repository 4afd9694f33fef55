"""
Crypto utilities — bcrypt password hashing and constant-time comparisons.

Passwords are only ever held in memory long enough to hash or verify them;
neither the plain text nor the hash is logged.
"""

import hmac

import bcrypt
from flask import current_app, has_app_context

DEFAULT_BCRYPT_ROUNDS = 12

# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72

# Per-cost padding hashes, checked against when there is no stored hash so a
# failed login costs the same bcrypt work whether or not the account exists.
_DUMMY_HASHES: dict[int, bytes] = {}


def _rounds() -> int:
    if has_app_context():
        return current_app.config.get("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS)
    return DEFAULT_BCRYPT_ROUNDS


def _dummy_hash() -> bytes:
    rounds = _rounds()
    if rounds not in _DUMMY_HASHES:
        _DUMMY_HASHES[rounds] = bcrypt.hashpw(b"pmo-dashboard-timing-pad", bcrypt.gensalt(rounds=rounds))
    return _DUMMY_HASHES[rounds]


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password with bcrypt (BCRYPT_ROUNDS, default 12).

    Raises ValueError for passwords longer than ``MAX_PASSWORD_BYTES``; the
    user contracts reject those before they get here.
    """
    secret = plain_password.encode("utf-8")
    if len(secret) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password longer than {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=_rounds())
    return bcrypt.hashpw(secret, salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    """Verify a plain-text password against its bcrypt hash (constant time).

    A password bcrypt cannot take (over ``MAX_PASSWORD_BYTES``) never
    matches, but still pays for one check against the padding hash.
    """
    secret = plain_password.encode("utf-8")
    if len(secret) > MAX_PASSWORD_BYTES:
        bcrypt.checkpw(secret[:MAX_PASSWORD_BYTES], _dummy_hash())
        return False
    if not password_hash or not password_hash.startswith(("$2b$", "$2a$", "$2y$")):
        bcrypt.checkpw(secret, _dummy_hash())
        return False
    try:
        return bcrypt.checkpw(secret, password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def constant_time_equals(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))
