"""
Account endpoints (register/login).
"""
import logging

from fastapi import APIRouter, Depends, status

from ..context import AppContext, get_context
from ..models.schemas import AuthResponse, ErrorResponse, LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def register(
    request: RegisterRequest, context: AppContext = Depends(get_context)
) -> AuthResponse:
    """
    Register a new user and return a bearer token for it.
    """
    token, user = context.accounts.register(request.email, request.password, request.name)
    return AuthResponse(
        message="User registered successfully",
        data={"token": token, "user": user},
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def login(request: LoginRequest, context: AppContext = Depends(get_context)) -> AuthResponse:
    """
    Exchange email and password for a bearer token.
    """
    token, user = context.accounts.login(request.email, request.password)
    logger.info("User %s logged in", user["id"])
    return AuthResponse(message="Login successful", data={"token": token, "user": user})
