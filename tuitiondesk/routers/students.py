"""
Students router.

Each student gets a readable roll id (STU<year><seq>) next to the record id,
and a login account. `batches` is maintained by batch enrollment, never by
student create/update payloads.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from tuitiondesk.core.accounts import create_with_login, delete_login, ensure_email_free, sync_login
from tuitiondesk.core.database import get_supabase
from tuitiondesk.core.records import (
    apply_update, check_references, fetch_many, fetch_one, present_batch,
)
from tuitiondesk.core.security import require_role
from tuitiondesk.core.validation import validated
from tuitiondesk.schemas.people import StudentCreate, StudentUpdate
from tuitiondesk.utils.response import success_response

router = APIRouter(prefix="/api/students", tags=["Students"])

READERS = ["admin", "staff", "teacher"]


def _next_student_id(db, year: int) -> str:
    prefix = f"STU{year}"
    result = db.table("students").select("student_id").execute()
    taken = [
        int(row["student_id"][len(prefix):])
        for row in (result.data or [])
        if str(row.get("student_id") or "").startswith(prefix)
        and row["student_id"][len(prefix):].isdigit()
    ]
    return f"{prefix}{max(taken, default=0) + 1:04d}"


@router.get("")
async def list_students(
    standard: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    user: dict = Depends(require_role(READERS)),
):
    db = get_supabase()
    query = db.table("students").select("*").order("name")
    if standard:
        query = query.eq("standard", standard)
    if status_filter:
        query = query.eq("status", status_filter)
    result = query.execute()
    return success_response(data=result.data)


@router.get("/{student_id}")
async def get_student(student_id: str, user: dict = Depends(require_role(READERS))):
    db = get_supabase()
    return success_response(data=fetch_one(db, "students", student_id, "Student"))


@router.get("/{student_id}/batches")
async def get_student_batches(student_id: str, user: dict = Depends(require_role(READERS))):
    db = get_supabase()
    student = fetch_one(db, "students", student_id, "Student")
    batches = fetch_many(db, "batches", student.get("batches") or [])
    return success_response(data=[present_batch(b) for b in batches.values()])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_student(
    user: dict = Depends(require_role(["admin"])),
    body: StudentCreate = Depends(validated(StudentCreate)),
):
    db = get_supabase()
    check_references(db, {"standard": ("standards", body.standard, "Standard")})
    record = body.model_dump(mode="json", exclude={"password"})
    record["student_id"] = _next_student_id(db, body.joining_date.year)
    record["batches"] = []
    student = create_with_login(db, "students", record, role="student", password=body.password)
    return success_response(data=student, message=f"Student '{student['name']}' created")


@router.put("/{student_id}")
async def update_student(
    student_id: str,
    user: dict = Depends(require_role(["admin"])),
    body: StudentUpdate = Depends(validated(StudentUpdate)),
):
    db = get_supabase()
    current = fetch_one(db, "students", student_id, "Student")
    changes = body.model_dump(mode="json", exclude_unset=True)
    ensure_email_free(db, changes.get("email"), profile_id=student_id)
    check_references(db, {"standard": ("standards", body.standard, "Standard")})

    profile_data = {k: v for k, v in changes.items() if k != "password"}
    updated = apply_update(db, "students", current, profile_data)
    sync_login(db, student_id, changes)
    return success_response(data=updated, message="Student updated")


@router.delete("/{student_id}")
async def delete_student(student_id: str, user: dict = Depends(require_role(["admin"]))):
    db = get_supabase()
    student = fetch_one(db, "students", student_id, "Student")

    # free the seats the student held
    for batch in fetch_many(db, "batches", student.get("batches") or []).values():
        remaining = [sid for sid in batch.get("enrolled_students") or [] if sid != student_id]
        db.table("batches").update({"enrolled_students": remaining}).eq("id", batch["id"]).execute()

    db.table("students").delete().eq("id", student_id).execute()
    delete_login(db, student_id)
    return success_response(data={"id": student_id}, message="Student deleted")
