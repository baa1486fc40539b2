"""
Staff router. Staff members may report to another staff member.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from tuitiondesk.core.accounts import create_with_login, delete_login, ensure_email_free, sync_login
from tuitiondesk.core.database import get_supabase
from tuitiondesk.core.errors import validation_failed
from tuitiondesk.core.records import apply_update, check_references, fetch_one
from tuitiondesk.core.security import require_role
from tuitiondesk.core.validation import validated
from tuitiondesk.schemas.people import StaffCreate, StaffUpdate
from tuitiondesk.utils.response import success_response

router = APIRouter(prefix="/api/staff", tags=["Staff"])


@router.get("")
async def list_staff(
    department: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    user: dict = Depends(require_role(["admin", "staff"])),
):
    db = get_supabase()
    query = db.table("staff").select("*").order("name")
    if department:
        query = query.eq("department", department)
    if status_filter:
        query = query.eq("status", status_filter)
    result = query.execute()
    return success_response(data=result.data)


@router.get("/{staff_id}")
async def get_staff_member(staff_id: str, user: dict = Depends(require_role(["admin", "staff"]))):
    db = get_supabase()
    return success_response(data=fetch_one(db, "staff", staff_id, "Staff member"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_staff_member(
    user: dict = Depends(require_role(["admin"])),
    body: StaffCreate = Depends(validated(StaffCreate)),
):
    db = get_supabase()
    check_references(db, {"reporting_to": ("staff", body.reporting_to, "Staff member")})
    record = body.model_dump(mode="json", exclude={"password"})
    member = create_with_login(db, "staff", record, role="staff", password=body.password)
    return success_response(data=member, message=f"Staff member '{member['name']}' created")


@router.put("/{staff_id}")
async def update_staff_member(
    staff_id: str,
    user: dict = Depends(require_role(["admin"])),
    body: StaffUpdate = Depends(validated(StaffUpdate)),
):
    db = get_supabase()
    current = fetch_one(db, "staff", staff_id, "Staff member")
    changes = body.model_dump(mode="json", exclude_unset=True)
    if changes.get("reporting_to") == staff_id:
        raise validation_failed([
            {"field": "reporting_to", "message": "A staff member cannot report to themselves"},
        ])
    ensure_email_free(db, changes.get("email"), profile_id=staff_id)
    check_references(db, {"reporting_to": ("staff", body.reporting_to, "Staff member")})

    profile_data = {k: v for k, v in changes.items() if k != "password"}
    updated = apply_update(db, "staff", current, profile_data)
    sync_login(db, staff_id, changes)
    return success_response(data=updated, message="Staff member updated")


@router.delete("/{staff_id}")
async def delete_staff_member(staff_id: str, user: dict = Depends(require_role(["admin"]))):
    db = get_supabase()
    fetch_one(db, "staff", staff_id, "Staff member")
    db.table("staff").update({"reporting_to": None}).eq("reporting_to", staff_id).execute()
    db.table("staff").delete().eq("id", staff_id).execute()
    delete_login(db, staff_id)
    return success_response(data={"id": staff_id}, message="Staff member deleted")
