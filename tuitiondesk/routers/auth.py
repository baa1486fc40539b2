"""
Auth router: login, first admin bootstrap and the current user profile.

Rules:
- Every login is a row in `users`; teachers, staff and students get one when
  their record is created
- Deactivated accounts cannot log in
- /register only works while no admin exists yet
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from tuitiondesk.core.accounts import create_login, ensure_email_free
from tuitiondesk.core.database import get_supabase
from tuitiondesk.core.security import (
    create_access_token, get_current_user, public_user, verify_password,
)
from tuitiondesk.core.validation import validated
from tuitiondesk.schemas.auth import AdminRegister, UserLogin
from tuitiondesk.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/login")
async def login(body: UserLogin = Depends(validated(UserLogin))):
    """Verify email + password and return a signed token with the user."""
    db = get_supabase()
    result = (
        db.table("users")
        .select("*")
        .eq("email", body.email)
        .eq("is_active", True)
        .maybe_single()
        .execute()
    )
    user_data = result.data if result else None

    if not user_data or not verify_password(body.password, user_data.get("password_hash") or ""):
        logger.info("Failed login for %s", body.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    token = create_access_token(user_data["id"], user_data["role"])
    return success_response(
        data={"token": token, "user": public_user(user_data)},
        message="Login successful",
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_admin(body: AdminRegister = Depends(validated(AdminRegister))):
    """
    Create the first admin account.

    Flow:
    1. Refuse once any admin exists
    2. Refuse a taken email
    3. Create the admin login and return a token for immediate use
    """
    db = get_supabase()
    existing = db.table("users").select("id").eq("role", "admin").limit(1).execute()
    if existing.data:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="An admin account already exists",
        )
    ensure_email_free(db, body.email)

    user_data = create_login(
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        role="admin",
    )
    token = create_access_token(user_data["id"], "admin")
    return success_response(
        data={"token": token, "user": public_user(user_data)},
        message="Admin account created",
    )


@router.get("/me")
async def get_me(user: dict = Depends(get_current_user)):
    """Return current authenticated user profile."""
    return success_response(data=user)
