"""
Teachers router. Creating a teacher also creates the teacher's login account.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from tuitiondesk.core.accounts import create_with_login, delete_login, ensure_email_free, sync_login
from tuitiondesk.core.database import get_supabase
from tuitiondesk.core.records import apply_update, check_references, fetch_one
from tuitiondesk.core.security import require_role
from tuitiondesk.core.validation import validated
from tuitiondesk.schemas.people import TeacherCreate, TeacherUpdate
from tuitiondesk.utils.response import success_response

router = APIRouter(prefix="/api/teachers", tags=["Teachers"])

READERS = ["admin", "staff", "teacher"]


@router.get("")
async def list_teachers(
    status_filter: Optional[str] = Query(None, alias="status"),
    user: dict = Depends(require_role(READERS)),
):
    db = get_supabase()
    query = db.table("teachers").select("*").order("name")
    if status_filter:
        query = query.eq("status", status_filter)
    result = query.execute()
    return success_response(data=result.data)


@router.get("/{teacher_id}")
async def get_teacher(teacher_id: str, user: dict = Depends(require_role(READERS))):
    db = get_supabase()
    return success_response(data=fetch_one(db, "teachers", teacher_id, "Teacher"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_teacher(
    user: dict = Depends(require_role(["admin"])),
    body: TeacherCreate = Depends(validated(TeacherCreate)),
):
    db = get_supabase()
    check_references(db, {"subjects": ("subjects", body.subjects, "Subject")})
    record = body.model_dump(mode="json", exclude={"password"})
    teacher = create_with_login(db, "teachers", record, role="teacher", password=body.password)
    return success_response(data=teacher, message=f"Teacher '{teacher['name']}' created")


@router.put("/{teacher_id}")
async def update_teacher(
    teacher_id: str,
    user: dict = Depends(require_role(["admin"])),
    body: TeacherUpdate = Depends(validated(TeacherUpdate)),
):
    db = get_supabase()
    current = fetch_one(db, "teachers", teacher_id, "Teacher")
    changes = body.model_dump(mode="json", exclude_unset=True)
    ensure_email_free(db, changes.get("email"), profile_id=teacher_id)
    check_references(db, {"subjects": ("subjects", body.subjects, "Subject")})

    profile_data = {k: v for k, v in changes.items() if k != "password"}
    updated = apply_update(db, "teachers", current, profile_data)
    sync_login(db, teacher_id, changes)
    return success_response(data=updated, message="Teacher updated")


@router.delete("/{teacher_id}")
async def delete_teacher(teacher_id: str, user: dict = Depends(require_role(["admin"]))):
    db = get_supabase()
    fetch_one(db, "teachers", teacher_id, "Teacher")
    # batches keep running without an assigned teacher
    db.table("batches").update({"teacher": None}).eq("teacher", teacher_id).execute()
    db.table("teachers").delete().eq("id", teacher_id).execute()
    delete_login(db, teacher_id)
    return success_response(data={"id": teacher_id}, message="Teacher deleted")
