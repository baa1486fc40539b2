"""
Security module: password hashing, JWT issue/verify, current user and role guard.

Auth Flow:
1. User posts email + password to /api/auth/login
2. Backend verifies the bcrypt hash and signs an HS256 JWT ({sub, role, exp})
3. Client sends the JWT as "Authorization: Bearer <token>" on every request
4. Backend verifies the signature and expiry, then loads the user row
5. Inactive or unknown users are rejected with 401
6. require_role() narrows each route to the roles allowed to call it
"""

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tuitiondesk.core.config import settings
from tuitiondesk.core.database import get_supabase

logger = logging.getLogger(__name__)

security_scheme = HTTPBearer(auto_error=False)

JWT_ALGORITHM = "HS256"
ROLES = ("admin", "staff", "teacher", "student")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def create_access_token(user_id: str, role: str, expires_in: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    ttl = settings.jwt_expire_seconds if expires_in is None else expires_in
    payload = {
        "sub": user_id,
        "role": role,
        "iat": now,
        "exp": now + timedelta(seconds=ttl),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def public_user(row: dict) -> dict:
    """User row as returned to clients: never includes the password hash."""
    return {
        "id": row["id"],
        "name": row.get("name"),
        "email": row.get("email"),
        "role": row.get("role"),
        "profile_id": row.get("profile_id"),
    }


# ---------------------------------------------------------------------------
# Token verification
# ---------------------------------------------------------------------------
async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security_scheme),
) -> dict:
    """
    Validate the Bearer token and return the user dict.
    Missing, malformed, expired and orphaned tokens all answer 401 so the
    client can force a logout.
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Access token is required")

    claims = decode_access_token(credentials.credentials)

    db = get_supabase()
    result = (
        db.table("users")
        .select("*")
        .eq("id", claims.get("sub"))
        .maybe_single()
        .execute()
    )
    if not result or not result.data:
        raise _unauthorized("User not found")

    user_data = result.data
    if not user_data.get("is_active", True):
        logger.info("Rejected token for deactivated user %s", user_data["id"])
        raise _unauthorized("Your account has been deactivated")

    return public_user(user_data)


# ---------------------------------------------------------------------------
# Role guard dependency
# ---------------------------------------------------------------------------
def require_role(allowed_roles: list[str]):
    """
    Usage:
        @router.post("/batches")
        async def endpoint(user=Depends(require_role(["admin"]))):
    """
    allowed = {role.lower() for role in allowed_roles}

    async def role_checker(
        user: dict = Depends(get_current_user),
    ) -> dict:
        if str(user.get("role", "")).lower() not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{user.get('role')}' not authorized. Required: {sorted(allowed)}",
            )
        return user

    return role_checker
