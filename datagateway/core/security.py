"""
Secrets at rest and access tokens.

Data source passwords are stored as Fernet tokens and only decrypted into a
ConnectionConfig for one gateway operation. User passwords are bcrypt
hashes. API access uses short-lived HS256 JWTs whose subject is the user id.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import bcrypt
from cryptography.fernet import Fernet, InvalidToken
from jose import JWTError, jwt

from datagateway.core.config import settings
from datagateway.core.errors import AuthenticationError, GatewayError

_cipher = Fernet(settings.FERNET_KEY_B64)

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"

# bcrypt ignores everything past 72 bytes
_BCRYPT_MAX_BYTES = 72


def encrypt_secret(plaintext: str) -> str:
    return _cipher.encrypt(plaintext.encode("utf-8")).decode("ascii")


def decrypt_secret(token: str) -> str:
    """
    Raises:
        GatewayError: the token was written with another FERNET_KEY or is corrupt
    """
    try:
        return _cipher.decrypt(token.encode("ascii")).decode("utf-8")
    except InvalidToken as e:
        raise GatewayError("Stored data source credentials could not be decrypted") from e


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], password_hash.encode("utf-8"))


def issue_access_token(user_id: str, lifetime: Optional[timedelta] = None) -> str:
    """Signed token for user_id, valid for ACCESS_TOKEN_EXPIRE_MINUTES unless lifetime is given"""
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": user_id,
        "type": ACCESS_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + (lifetime or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)),
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def read_access_token(token: str) -> str:
    """
    Verify signature, expiry and token type; return the user id.

    Raises:
        AuthenticationError: anything wrong with the token
    """
    try:
        claims: Dict[str, Any] = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        raise AuthenticationError("Invalid or expired token") from e

    if claims.get("type") != ACCESS_TOKEN_TYPE or not claims.get("sub"):
        raise AuthenticationError("Invalid token: subject (sub) missing")
    return claims["sub"]
