"""
Password hashing (scrypt, via cryptography) and access tokens (JWT, via PyJWT).
"""
import base64
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

SCRYPT_N = 2**14
SCRYPT_R = 8
SCRYPT_P = 1
SALT_BYTES = 16
KEY_BYTES = 32


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii")


def _unb64(data: str) -> bytes:
    return base64.urlsafe_b64decode(data.encode("ascii"))


def hash_password(password: str) -> str:
    """Returns 'scrypt$n$r$p$salt$key'."""
    salt = os.urandom(SALT_BYTES)
    kdf = Scrypt(salt=salt, length=KEY_BYTES, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P)
    key = kdf.derive(password.encode("utf-8"))
    return f"scrypt${SCRYPT_N}${SCRYPT_R}${SCRYPT_P}${_b64(salt)}${_b64(key)}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        scheme, n, r, p, salt, key = password_hash.split("$")
        if scheme != "scrypt":
            return False
        kdf = Scrypt(salt=_unb64(salt), length=len(_unb64(key)), n=int(n), r=int(r), p=int(p))
        kdf.verify(password.encode("utf-8"), _unb64(key))
        return True
    except (InvalidKey, ValueError):
        return False


def create_access_token(
    user_id: int,
    secret: str,
    algorithm: str = "HS256",
    expires_in: timedelta = timedelta(days=7),
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(token: str, secret: str, algorithm: str = "HS256") -> Dict[str, Any]:
    """Validates signature and expiry. Raises jwt.InvalidTokenError."""
    return jwt.decode(token, key=secret, algorithms=[algorithm])
