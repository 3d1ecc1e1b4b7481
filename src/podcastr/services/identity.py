"""
Identity service: password hashing and signed bearer tokens.

Tokens are stateless HS256 JWTs carrying ``{id, email}``. There is no
revocation list; logging out means the client discards its token.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from ..errors import ConfigError, Unauthorized, ValidationError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True)
class TokenIdentity:
    """Identity decoded from a verified token."""

    id: str
    email: str


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash a password with bcrypt.

    Raises:
        ValidationError: If the password is longer than bcrypt accepts
    """
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


class IdentityService:
    """Issues and verifies signed bearer tokens."""

    def __init__(self, secret: str, expires_in_seconds: int):
        if not secret:
            raise ConfigError("JWT_SECRET is not defined")
        self._secret = secret
        self.expires_in_seconds = expires_in_seconds

    def issue_token(self, user_id: str, email: str) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "id": user_id,
            "email": email,
            "iat": now,
            "exp": now + timedelta(seconds=self.expires_in_seconds),
        }
        return jwt.encode(claims, self._secret, algorithm=ALGORITHM)

    def verify_token(self, token: str) -> TokenIdentity:
        """
        Verify a token's signature and expiry.

        Raises:
            Unauthorized: If the token is malformed, tampered with or expired
        """
        if not token:
            raise Unauthorized("No token provided, authorization denied")
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "id", "email"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise Unauthorized("Token is invalid or expired") from e
        except jwt.InvalidTokenError as e:
            logger.info("Rejected bearer token: %s", e)
            raise Unauthorized("Token is invalid or expired") from e
        return TokenIdentity(id=str(claims["id"]), email=str(claims["email"]))
