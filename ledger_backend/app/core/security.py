"""
Password and PIN hashing.
"""

from passlib.context import CryptContext

# One scheme for both passwords and 6 digit PINs
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str) -> str:
    """Hash a password (or PIN) for storage."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password (or PIN) against its stored hash."""
    return pwd_context.verify(plain_password, hashed_password)
