"""
Login accounts behind teacher, staff and student records.

Every person record owns one row in `users` (role + bcrypt hash). The profile
row never stores the password; the users row never leaves the server with it.
"""

import logging

from fastapi import status

from tuitiondesk.core.errors import ApiError
from tuitiondesk.core.security import get_password_hash

logger = logging.getLogger(__name__)


def ensure_email_free(db, email: str | None, profile_id: str | None = None) -> None:
    """Emails are unique across every login account."""
    if not email:
        return
    result = db.table("users").select("id, profile_id").eq("email", email).execute()
    for row in result.data or []:
        if profile_id is None or row.get("profile_id") != profile_id:
            raise ApiError(status.HTTP_400_BAD_REQUEST, f"User with email '{email}' already exists")


def create_login(db, *, name: str, email: str, password: str, role: str, profile_id: str | None = None) -> dict:
    result = db.table("users").insert({
        "name": name,
        "email": email,
        "role": role,
        "profile_id": profile_id,
        "password_hash": get_password_hash(password),
        "is_active": True,
    }).execute()
    logger.info("Created %s login for %s", role, email)
    return result.data[0]


def sync_login(db, profile_id: str, changes: dict) -> None:
    """Mirror name/email/password/status changes of a profile onto its login."""
    update = {k: changes[k] for k in ("name", "email") if changes.get(k) is not None}
    if changes.get("password"):
        update["password_hash"] = get_password_hash(changes["password"])
    if changes.get("status") is not None:
        update["is_active"] = changes["status"] != "inactive"
    if update:
        db.table("users").update(update).eq("profile_id", profile_id).execute()


def delete_login(db, profile_id: str) -> None:
    db.table("users").delete().eq("profile_id", profile_id).execute()


def create_with_login(db, table: str, record: dict, *, role: str, password: str) -> dict:
    """
    Insert a profile row and its login account.
    The profile is removed again if the account cannot be created.
    """
    ensure_email_free(db, record.get("email"))
    created = db.table(table).insert(record).execute().data[0]
    try:
        create_login(
            db,
            name=record["name"],
            email=record["email"],
            password=password,
            role=role,
            profile_id=created["id"],
        )
    except Exception:
        logger.exception("Login creation failed, rolling back %s %s", table, created["id"])
        db.table(table).delete().eq("id", created["id"]).execute()
        raise
    return created
