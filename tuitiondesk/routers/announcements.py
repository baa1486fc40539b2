"""
Announcements router. Everyone signed in can read; only admins publish.
The `status` of an announcement (scheduled / active / expired) follows its date window.
"""

from fastapi import APIRouter, Depends, status

from tuitiondesk.core.database import get_supabase
from tuitiondesk.core.errors import validation_failed
from tuitiondesk.core.records import (
    active_announcements, apply_update, fetch_one, parse_day, present_announcement,
)
from tuitiondesk.core.security import require_role
from tuitiondesk.core.validation import validated
from tuitiondesk.schemas.office import AnnouncementCreate, AnnouncementUpdate
from tuitiondesk.utils.response import success_response

router = APIRouter(prefix="/api/announcements", tags=["Announcements"])

READERS = ["admin", "staff", "teacher", "student"]


@router.get("")
async def list_announcements(user: dict = Depends(require_role(READERS))):
    db = get_supabase()
    result = db.table("announcements").select("*").order("start_date", desc=True).execute()
    return success_response(data=[present_announcement(row) for row in result.data])


@router.get("/active")
async def list_active_announcements(user: dict = Depends(require_role(READERS))):
    return success_response(data=active_announcements(get_supabase()))


@router.get("/{announcement_id}")
async def get_announcement(announcement_id: str, user: dict = Depends(require_role(READERS))):
    db = get_supabase()
    row = fetch_one(db, "announcements", announcement_id, "Announcement")
    return success_response(data=present_announcement(row))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_announcement(
    user: dict = Depends(require_role(["admin"])),
    body: AnnouncementCreate = Depends(validated(AnnouncementCreate)),
):
    db = get_supabase()
    data = {**body.model_dump(mode="json"), "created_by": user["id"]}
    result = db.table("announcements").insert(data).execute()
    return success_response(data=present_announcement(result.data[0]), message="Announcement created")


@router.put("/{announcement_id}")
async def update_announcement(
    announcement_id: str,
    user: dict = Depends(require_role(["admin"])),
    body: AnnouncementUpdate = Depends(validated(AnnouncementUpdate)),
):
    db = get_supabase()
    current = fetch_one(db, "announcements", announcement_id, "Announcement")
    changes = body.model_dump(mode="json", exclude_unset=True)

    merged = {**current, **changes}
    start, end = parse_day(merged.get("start_date")), parse_day(merged.get("end_date"))
    if start and end and end <= start:
        raise validation_failed([{"field": "end_date", "message": "End date must be after start date"}])

    updated = apply_update(db, "announcements", current, changes)
    return success_response(data=present_announcement(updated), message="Announcement updated")


@router.delete("/{announcement_id}")
async def delete_announcement(announcement_id: str, user: dict = Depends(require_role(["admin"]))):
    db = get_supabase()
    fetch_one(db, "announcements", announcement_id, "Announcement")
    db.table("announcements").delete().eq("id", announcement_id).execute()
    return success_response(data={"id": announcement_id}, message="Announcement deleted")
