"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting, and checkpw compares in constant time.
The work factor (rounds=12) takes ~100ms per hash on modern hardware.

Hashes made with a lower work factor are still verified, and
re-hashed at the current cost on successful login (see needs_rehash).
"""

import bcrypt

BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    Passwords are truncated to 72 bytes (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False


def needs_rehash(password_hash: str) -> bool:
    """Check if a hash was made with a lower work factor than BCRYPT_ROUNDS."""
    # Format: $2b$<cost>$<salt+digest>
    try:
        cost = int(password_hash.split("$")[2])
    except (IndexError, ValueError):
        return True
    return cost < BCRYPT_ROUNDS


# Compared against when the email is unknown, so a login attempt costs
# the same whether or not the account exists.
DUMMY_HASH = hash_password("inkwell-timing-equaliser")
