import logging
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

# pbkdf2_sha256 needs no native backend, so hashing behaves the same everywhere
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """
    Checks a plain password against a stored hash.
    Malformed hashes count as a failed match rather than an error.
    """
    try:
        return pwd_context.verify(plain_password, password_hash)
    except ValueError as e:
        logger.warning(f"Password hash could not be verified: {e}")
        return False
