"""
Standards router: grade levels (Class 1 .. Class 12) and the subjects taught in them.
"""

from fastapi import APIRouter, Depends, status

from tuitiondesk.core.database import get_supabase
from tuitiondesk.core.records import apply_update, check_references, fetch_one
from tuitiondesk.core.security import require_role
from tuitiondesk.core.validation import validated
from tuitiondesk.schemas.academic import StandardCreate, StandardUpdate
from tuitiondesk.utils.response import success_response

router = APIRouter(prefix="/api/standards", tags=["Standards"])

READERS = ["admin", "staff", "teacher", "student"]


@router.get("")
async def list_standards(user: dict = Depends(require_role(READERS))):
    db = get_supabase()
    result = db.table("standards").select("*").order("level").execute()
    return success_response(data=result.data)


@router.get("/{standard_id}")
async def get_standard(standard_id: str, user: dict = Depends(require_role(READERS))):
    db = get_supabase()
    standard = fetch_one(db, "standards", standard_id, "Standard")
    return success_response(data=standard)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_standard(
    user: dict = Depends(require_role(["admin"])),
    body: StandardCreate = Depends(validated(StandardCreate)),
):
    db = get_supabase()
    check_references(db, {"subjects": ("subjects", body.subjects, "Subject")})
    data = body.model_dump(mode="json")
    data["subjects"] = data["subjects"] or []
    result = db.table("standards").insert(data).execute()
    return success_response(data=result.data[0], message="Standard created")


@router.put("/{standard_id}")
async def update_standard(
    standard_id: str,
    user: dict = Depends(require_role(["admin"])),
    body: StandardUpdate = Depends(validated(StandardUpdate)),
):
    db = get_supabase()
    current = fetch_one(db, "standards", standard_id, "Standard")
    check_references(db, {"subjects": ("subjects", body.subjects, "Subject")})
    update_data = body.model_dump(mode="json", exclude_unset=True)
    updated = apply_update(db, "standards", current, update_data)
    return success_response(data=updated, message="Standard updated")


@router.delete("/{standard_id}")
async def delete_standard(standard_id: str, user: dict = Depends(require_role(["admin"]))):
    db = get_supabase()
    fetch_one(db, "standards", standard_id, "Standard")
    db.table("standards").delete().eq("id", standard_id).execute()
    return success_response(data={"id": standard_id}, message="Standard deleted")
