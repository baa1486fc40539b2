"""
Student portal: the signed-in student's own profile, batches and fee payments.
"""

from fastapi import APIRouter, Depends, status

from tuitiondesk.core.database import get_supabase
from tuitiondesk.core.errors import ApiError
from tuitiondesk.core.records import (
    active_announcements, apply_update, fetch_many, fetch_one, label_batches, today, upcoming_classes,
)
from tuitiondesk.core.security import require_role
from tuitiondesk.core.validation import validated
from tuitiondesk.schemas.people import StudentProfileUpdate
from tuitiondesk.utils.response import success_response

router = APIRouter(prefix="/api/student", tags=["Student Portal"])


def _own_student(db, user: dict) -> dict:
    return fetch_one(db, "students", user.get("profile_id"), "Student profile")


def _own_batches(db, student: dict) -> list[dict]:
    batch_ids = student.get("batches") or []
    found = fetch_many(db, "batches", batch_ids)
    return label_batches(db, [found[bid] for bid in batch_ids if bid in found])


def _own_payments(db, student: dict) -> list[dict]:
    result = db.table("payments").select("*").eq("student", student["id"]).order("payment_date", desc=True).execute()
    return result.data or []


@router.get("/profile")
async def get_profile(user: dict = Depends(require_role(["student"]))):
    db = get_supabase()
    return success_response(data=_own_student(db, user))


@router.put("/profile")
async def update_profile(
    user: dict = Depends(require_role(["student"])),
    body: StudentProfileUpdate = Depends(validated(StudentProfileUpdate)),
):
    db = get_supabase()
    student = _own_student(db, user)
    updated = apply_update(db, "students", student, body.model_dump(mode="json", exclude_unset=True))
    return success_response(data=updated, message="Profile updated")


@router.get("/batches")
async def get_my_batches(user: dict = Depends(require_role(["student"]))):
    db = get_supabase()
    return success_response(data=_own_batches(db, _own_student(db, user)))


@router.get("/batches/{batch_id}")
async def get_my_batch(batch_id: str, user: dict = Depends(require_role(["student"]))):
    db = get_supabase()
    student = _own_student(db, user)
    batch = fetch_one(db, "batches", batch_id, "Batch")
    if batch_id not in (student.get("batches") or []):
        raise ApiError(status.HTTP_403_FORBIDDEN, "You are not enrolled in this batch")
    return success_response(data=label_batches(db, [batch])[0])


@router.get("/payments")
async def get_my_payments(user: dict = Depends(require_role(["student"]))):
    db = get_supabase()
    return success_response(data=_own_payments(db, _own_student(db, user)))


@router.get("/dashboard")
async def get_dashboard(user: dict = Depends(require_role(["student"]))):
    db = get_supabase()
    student = _own_student(db, user)
    batches = _own_batches(db, student)
    payments = _own_payments(db, student)
    paid = [p for p in payments if p.get("status") == "Completed"]

    return success_response(data={
        "total_batches": len(batches),
        "fees_paid": round(sum(float(p.get("amount") or 0) for p in paid), 2),
        "pending_payments": sum(1 for p in payments if p.get("status") == "Pending"),
        "active_announcements": active_announcements(db, ["All", "Students"]),
        "upcoming_classes": upcoming_classes(batches, today()),
    })
