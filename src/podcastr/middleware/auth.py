"""
Bearer token authentication.

Protected routes depend on ``get_current_user``; public routes never touch the
Authorization header.
"""
import logging
from typing import Optional

from fastapi import Depends, Header

from ..context import AppContext, get_context
from ..errors import Unauthorized
from ..services.identity import TokenIdentity

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an ``Authorization: Bearer <token>`` header.

    Raises:
        Unauthorized: If the header is missing or not a Bearer credential
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized("No token provided, authorization denied")
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise Unauthorized("No token provided, authorization denied")
    return token


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    context: AppContext = Depends(get_context),
) -> TokenIdentity:
    """
    Resolve the authenticated user for the request.

    Args:
        authorization: Raw Authorization header
        context: Application context

    Returns:
        Identity decoded from the verified token
    """
    token = extract_bearer_token(authorization)
    return context.identity.verify_token(token)
