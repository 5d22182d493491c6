"""
Authentication API endpoints for registration, login and the current user.
"""

from fastapi import APIRouter, Depends, status
from house_rental.models.user import User
from house_rental.services.auth import AuthService
from house_rental.schemas.auth import LoginRequest, AuthResponse
from house_rental.schemas.user import UserCreate, UserResponse
from house_rental.schemas.error import get_error_responses, get_auth_error_responses
from house_rental.utils.dependencies import get_auth_service, get_current_active_user


router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(auth_service: AuthService, user: User, token: str) -> AuthResponse:
    return AuthResponse(
        access_token=token,
        token_type="bearer",
        expires_in=auth_service.token_lifetime_seconds,
        user=UserResponse.model_validate(user.to_dict())
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="Create a user, owner or admin account and return an access token",
    responses=get_error_responses(400, 409, 500)
)
async def register(
    user_data: UserCreate,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Register a new account.

    Raises:
        ConflictError: If the email is already registered
        ValidationError: If the registration data is invalid
    """
    user, token = await auth_service.register(user_data)
    return _auth_response(auth_service, user, token)


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with email and password, returns a JWT access token",
    responses=get_error_responses(400, 401)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Authenticate a user.

    Raises:
        InvalidCredentialsError: If the email or password is wrong, or the account is inactive
    """
    user, token = await auth_service.login(login_data.email, login_data.password)
    return _auth_response(auth_service, user, token)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    description="Profile of the authenticated user",
    responses=get_auth_error_responses()
)
async def get_me(current_user: User = Depends(get_current_active_user)) -> UserResponse:
    return UserResponse.model_validate(current_user.to_dict())
