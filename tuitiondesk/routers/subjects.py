"""
Subjects router. Subject names are unique, compared lowercase.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status

from tuitiondesk.core.database import get_supabase
from tuitiondesk.core.records import apply_update, check_references, check_unique, fetch_one
from tuitiondesk.core.security import require_role
from tuitiondesk.core.validation import validated
from tuitiondesk.schemas.academic import SubjectCreate, SubjectUpdate
from tuitiondesk.utils.response import success_response

router = APIRouter(prefix="/api/subjects", tags=["Subjects"])

READERS = ["admin", "staff", "teacher", "student"]


@router.get("")
async def list_subjects(
    standard: Optional[str] = None,
    user: dict = Depends(require_role(READERS)),
):
    db = get_supabase()
    query = db.table("subjects").select("*").order("name")
    if standard:
        query = query.eq("standard", standard)
    result = query.execute()
    return success_response(data=result.data)


@router.get("/{subject_id}")
async def get_subject(subject_id: str, user: dict = Depends(require_role(READERS))):
    db = get_supabase()
    return success_response(data=fetch_one(db, "subjects", subject_id, "Subject"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_subject(
    user: dict = Depends(require_role(["admin"])),
    body: SubjectCreate = Depends(validated(SubjectCreate)),
):
    db = get_supabase()
    check_unique(db, "subjects", "name", body.name, f"Subject '{body.name}' already exists")
    check_references(db, {"standard": ("standards", body.standard, "Standard")})
    result = db.table("subjects").insert(body.model_dump(mode="json")).execute()
    return success_response(data=result.data[0], message="Subject created")


@router.put("/{subject_id}")
async def update_subject(
    subject_id: str,
    user: dict = Depends(require_role(["admin"])),
    body: SubjectUpdate = Depends(validated(SubjectUpdate)),
):
    db = get_supabase()
    current = fetch_one(db, "subjects", subject_id, "Subject")
    check_unique(
        db, "subjects", "name", body.name,
        f"Subject '{body.name}' already exists", exclude_id=subject_id,
    )
    check_references(db, {"standard": ("standards", body.standard, "Standard")})
    update_data = body.model_dump(mode="json", exclude_unset=True)
    updated = apply_update(db, "subjects", current, update_data)
    return success_response(data=updated, message="Subject updated")


@router.delete("/{subject_id}")
async def delete_subject(subject_id: str, user: dict = Depends(require_role(["admin"]))):
    db = get_supabase()
    fetch_one(db, "subjects", subject_id, "Subject")
    db.table("subjects").delete().eq("id", subject_id).execute()
    return success_response(data={"id": subject_id}, message="Subject deleted")
