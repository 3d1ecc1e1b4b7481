"""
Account registration and login.
"""
import logging
from typing import Dict, Optional, Tuple

from ..errors import Unauthorized, ValidationError
from ..models.user_storage import UserStorage, public_user
from .identity import IdentityService, check_password, hash_password

logger = logging.getLogger(__name__)


class AccountService:
    """Creates users and exchanges credentials for bearer tokens."""

    def __init__(self, users: UserStorage, identity: IdentityService, bcrypt_rounds: int = 12):
        self.users = users
        self.identity = identity
        self.bcrypt_rounds = bcrypt_rounds

    def register(
        self, email: Optional[str], password: Optional[str], name: Optional[str]
    ) -> Tuple[str, Dict]:
        """
        Create an account and sign a token for it.

        Returns:
            Tuple of (token, public user dict)

        Raises:
            ValidationError: Missing fields or email already registered
        """
        if not email or not password or not name:
            raise ValidationError("Please provide email, password, and name")
        user = self.users.create_user(
            email=email, name=name, password_hash=hash_password(password, self.bcrypt_rounds)
        )
        logger.info("Registered user %s", user["id"])
        token = self.identity.issue_token(user["id"], user["email"])
        return token, public_user(user)

    def login(self, email: Optional[str], password: Optional[str]) -> Tuple[str, Dict]:
        """
        Check credentials and sign a token.

        Raises:
            ValidationError: Missing fields
            Unauthorized: Unknown email or wrong password
        """
        if not email or not password:
            raise ValidationError("Please provide email and password")
        user = self.users.find_by_email(email)
        if not user or not check_password(password, user.get("password_hash", "")):
            raise Unauthorized("Invalid credentials")
        token = self.identity.issue_token(user["id"], user["email"])
        return token, public_user(user)
