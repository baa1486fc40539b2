"""
Teacher portal: the signed-in teacher's own profile, batches and students.
The teacher record is resolved from the login's profile_id, never from the path.
"""

from fastapi import APIRouter, Depends, status

from tuitiondesk.core.database import get_supabase
from tuitiondesk.core.errors import ApiError
from tuitiondesk.core.records import (
    active_announcements, apply_update, fetch_many, fetch_one, label_batches, today, upcoming_classes,
)
from tuitiondesk.core.security import require_role
from tuitiondesk.core.validation import validated
from tuitiondesk.schemas.people import TeacherProfileUpdate
from tuitiondesk.utils.response import success_response

router = APIRouter(prefix="/api/teacher", tags=["Teacher Portal"])

STUDENT_FIELDS = ("id", "student_id", "name", "email", "phone", "parent_phone", "standard")


def _own_teacher(db, user: dict) -> dict:
    return fetch_one(db, "teachers", user.get("profile_id"), "Teacher profile")


def _own_batches(db, teacher: dict) -> list[dict]:
    result = db.table("batches").select("*").eq("teacher", teacher["id"]).order("start_date", desc=True).execute()
    return label_batches(db, result.data or [])


def _with_students(db, batches: list[dict]) -> list[dict]:
    """Attach a short card of every enrolled student to each batch."""
    students = fetch_many(db, "students", [sid for b in batches for sid in b["enrolled_students"]])
    return [
        {
            **batch,
            "students": [
                {key: students[sid].get(key) for key in STUDENT_FIELDS}
                for sid in batch["enrolled_students"]
                if sid in students
            ],
        }
        for batch in batches
    ]


# ===== PROFILE =====

@router.get("/profile")
async def get_profile(user: dict = Depends(require_role(["teacher"]))):
    db = get_supabase()
    return success_response(data=_own_teacher(db, user))


@router.put("/profile")
async def update_profile(
    user: dict = Depends(require_role(["teacher"])),
    body: TeacherProfileUpdate = Depends(validated(TeacherProfileUpdate)),
):
    db = get_supabase()
    teacher = _own_teacher(db, user)
    updated = apply_update(db, "teachers", teacher, body.model_dump(mode="json", exclude_unset=True))
    return success_response(data=updated, message="Profile updated")


# ===== BATCHES =====

@router.get("/batches")
async def get_my_batches(user: dict = Depends(require_role(["teacher"]))):
    db = get_supabase()
    teacher = _own_teacher(db, user)
    return success_response(data=_with_students(db, _own_batches(db, teacher)))


@router.get("/batches/{batch_id}")
async def get_my_batch(batch_id: str, user: dict = Depends(require_role(["teacher"]))):
    db = get_supabase()
    teacher = _own_teacher(db, user)
    batch = fetch_one(db, "batches", batch_id, "Batch")
    if batch.get("teacher") != teacher["id"]:
        raise ApiError(status.HTTP_403_FORBIDDEN, "This batch does not belong to you")
    return success_response(data=_with_students(db, label_batches(db, [batch]))[0])


@router.get("/students")
async def get_my_students(user: dict = Depends(require_role(["teacher"]))):
    """Every student across the teacher's batches, once, with the batches they share."""
    db = get_supabase()
    teacher = _own_teacher(db, user)

    by_id: dict[str, dict] = {}
    for batch in _with_students(db, _own_batches(db, teacher)):
        batch_card = {
            "id": batch["id"],
            "name": batch.get("name"),
            "subject": batch.get("subject_name"),
            "standard": batch.get("standard_name"),
        }
        for student in batch["students"]:
            entry = by_id.setdefault(student["id"], {**student, "batches": []})
            entry["batches"].append(batch_card)

    students = sorted(by_id.values(), key=lambda s: s.get("name") or "")
    return success_response(data=students)


# ===== DASHBOARD =====

@router.get("/dashboard")
async def get_dashboard(user: dict = Depends(require_role(["teacher"]))):
    db = get_supabase()
    teacher = _own_teacher(db, user)
    batches = _own_batches(db, teacher)
    student_ids = {sid for batch in batches for sid in batch["enrolled_students"]}

    return success_response(data={
        "total_batches": len(batches),
        "total_students": len(student_ids),
        "active_announcements": active_announcements(db, ["All", "Teachers"]),
        "upcoming_classes": upcoming_classes(batches, today()),
    })
