import bcrypt

from models.user import User
from security.bruteforce import normalize_identity, storage_errors

BCRYPT_ROUNDS = 12

# Compared against when the email is unknown so both paths pay the bcrypt cost
_DUMMY_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def hash_password(plain_password: str) -> str:
    if not isinstance(plain_password, str) or len(plain_password) == 0:
        raise ValueError("Password must be a non-empty string")
    return bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


@storage_errors
def verify_credentials(email: str, plain_password: str):
    """
    Returns the matching User, or None when the email is unknown or the
    password does not match.
    """
    user = User.query.filter_by(email=normalize_identity(email)).first()
    password_hash = user.password_hash if user else _DUMMY_HASH
    try:
        matches = bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # bcrypt rejects malformed stored hashes and passwords over 72 bytes
        return None
    return user if user and matches else None
