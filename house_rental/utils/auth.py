"""
Access tokens: HS256 JWTs carrying the user id, role, name and email.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from house_rental.config import get_settings
from house_rental.models.user import UserRole
import uuid


class TokenPayload:
    """Claims the API relies on, read from a verified token."""

    def __init__(self, user_id: str, email: str, role: Optional[str], name: Optional[str], exp: datetime):
        self.user_id = user_id
        self.email = email
        self.role = role
        self.name = name
        self.exp = exp

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        return cls(
            user_id=data["sub"],
            email=data["email"],
            role=data.get("role"),
            name=data.get("name"),
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc)
        )


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    role: UserRole,
    name: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Sign an access token for a user.

    ``sub`` and ``userId`` both hold the user id; ``userId`` is what
    browser clients read. Lifetime defaults to ACCESS_TOKEN_EXPIRE_DAYS.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.access_token_expire_days))

    claims = {
        "sub": str(user_id),
        "userId": str(user_id),
        "email": email,
        "name": name,
        "role": role.value,
        "exp": expire,
        "iat": now,
        "type": "access"
    }

    return jwt.encode(
        claims,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def verify_token(token: str, token_type: str = "access") -> TokenPayload:
    """
    Check signature, expiry and token type, then extract the claims.

    Raises:
        ExpiredSignatureError: If the token has expired
        JWTError: For any other invalid token
    """
    settings = get_settings()
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])

    if payload.get("type") != token_type:
        raise JWTError(f"Expected a {token_type} token, got {payload.get('type')!r}")

    if not payload.get("sub") or not payload.get("email"):
        raise JWTError("Token is missing the sub or email claim")

    return TokenPayload.from_dict(payload)

