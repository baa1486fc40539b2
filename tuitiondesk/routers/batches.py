"""
Batches router: class sections with a schedule, a capacity and enrolled students.

Enrollment:
- POST /api/batches/{id}/enroll takes a list of student ids and answers with
  one result per id, so partial failure is explicit in a single response
- enrollments into the same batch are serialized per process, so two
  concurrent requests cannot both take the last seat
"""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from tuitiondesk.core.database import get_supabase
from tuitiondesk.core.errors import ApiError, validation_failed
from tuitiondesk.core.records import (
    apply_update, check_references, fetch_many, fetch_one, parse_day, present_batch,
)
from tuitiondesk.core.security import require_role
from tuitiondesk.core.validation import validated
from tuitiondesk.schemas.academic import BatchCreate, BatchUpdate, EnrollRequest
from tuitiondesk.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/batches", tags=["Batches"])

READERS = ["admin", "staff", "teacher"]

# an entry lives only while a request holds or waits on it
_enrollment_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


@asynccontextmanager
async def locked_batch(db, batch_id: str):
    """Hold the enrollment lock of an existing batch and yield its stored record."""
    fetch_one(db, "batches", batch_id, "Batch")
    lock = _enrollment_locks.get(batch_id)
    if lock is None:
        lock = _enrollment_locks[batch_id] = asyncio.Lock()
    async with lock:
        # re-read once the lock is held, an earlier holder may have changed it
        yield fetch_one(db, "batches", batch_id, "Batch")


def _references(body) -> dict:
    return {
        "standard": ("standards", body.standard, "Standard"),
        "subject": ("subjects", body.subject, "Subject"),
        "teacher": ("teachers", body.teacher, "Teacher"),
    }


def _check_merged(batch: dict) -> None:
    """Invariants over the stored record once a partial update is applied."""
    errors = []
    start, end = parse_day(batch.get("start_date")), parse_day(batch.get("end_date"))
    if start and end and end <= start:
        errors.append({"field": "end_date", "message": "End date must be after start date"})
    schedule = batch.get("schedule") or {}
    if schedule.get("start_time") and schedule.get("end_time"):
        if schedule["end_time"] <= schedule["start_time"]:
            errors.append({"field": "schedule.end_time", "message": "End time must be after start time"})
    enrolled = len(batch.get("enrolled_students") or [])
    if batch.get("capacity") is not None and batch["capacity"] < enrolled:
        errors.append({
            "field": "capacity",
            "message": f"Capacity cannot be less than the {enrolled} enrolled students",
        })
    if errors:
        raise validation_failed(errors)


def enroll_students(db, batch: dict, student_ids: list[str]) -> tuple[list[dict], dict]:
    """
    Try each id in order and return (results, updated batch).
    All accepted students are written with one batch update.
    """
    students = fetch_many(db, "students", student_ids)
    enrolled = list(batch.get("enrolled_students") or [])
    capacity = batch.get("capacity") or 0
    results, added = [], []

    for student_id in student_ids:
        if student_id not in students:
            message = "Student not found"
        elif student_id in enrolled:
            message = "Student is already enrolled in this batch"
        elif len(enrolled) >= capacity:
            message = "Batch is full"
        else:
            enrolled.append(student_id)
            added.append(student_id)
            results.append({"student_id": student_id, "success": True, "message": "Enrolled"})
            continue
        results.append({"student_id": student_id, "success": False, "message": message})

    if added:
        batch = apply_update(db, "batches", batch, {"enrolled_students": enrolled})
        for student_id in added:
            joined = list(students[student_id].get("batches") or [])
            if batch["id"] not in joined:
                joined.append(batch["id"])
            db.table("students").update({"batches": joined}).eq("id", student_id).execute()

    logger.info(
        "Batch %s enrollment: %d enrolled, %d rejected",
        batch["id"], len(added), len(results) - len(added),
    )
    return results, batch


# ═══════════════════════════════════════════════════════════
# CRUD
# ═══════════════════════════════════════════════════════════

@router.get("")
async def list_batches(
    subject: Optional[str] = None,
    standard: Optional[str] = None,
    teacher: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    user: dict = Depends(require_role(READERS)),
):
    db = get_supabase()
    query = db.table("batches").select("*").order("start_date", desc=True)
    for column, value in (("subject", subject), ("standard", standard), ("teacher", teacher)):
        if value:
            query = query.eq(column, value)
    batches = [present_batch(row) for row in query.execute().data]
    if status_filter:
        batches = [b for b in batches if b["computed_status"] == status_filter]
    return success_response(data=batches)


@router.get("/{batch_id}")
async def get_batch(batch_id: str, user: dict = Depends(require_role(READERS))):
    db = get_supabase()
    return success_response(data=present_batch(fetch_one(db, "batches", batch_id, "Batch")))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_batch(
    user: dict = Depends(require_role(["admin"])),
    body: BatchCreate = Depends(validated(BatchCreate)),
):
    db = get_supabase()
    check_references(db, _references(body))
    data = {**body.model_dump(mode="json"), "enrolled_students": []}
    result = db.table("batches").insert(data).execute()
    return success_response(data=present_batch(result.data[0]), message="Batch created")


@router.put("/{batch_id}")
async def update_batch(
    batch_id: str,
    user: dict = Depends(require_role(["admin"])),
    body: BatchUpdate = Depends(validated(BatchUpdate)),
):
    db = get_supabase()
    current = fetch_one(db, "batches", batch_id, "Batch")
    changes = body.model_dump(mode="json", exclude_unset=True)
    if "schedule" in changes and changes["schedule"] is not None:
        changes["schedule"] = {**(current.get("schedule") or {}), **changes["schedule"]}

    _check_merged({**current, **changes})
    check_references(db, _references(body))
    updated = apply_update(db, "batches", current, changes)
    return success_response(data=present_batch(updated), message="Batch updated")


@router.delete("/{batch_id}")
async def delete_batch(batch_id: str, user: dict = Depends(require_role(["admin"]))):
    db = get_supabase()
    batch = fetch_one(db, "batches", batch_id, "Batch")
    for student in fetch_many(db, "students", batch.get("enrolled_students") or []).values():
        remaining = [bid for bid in student.get("batches") or [] if bid != batch_id]
        db.table("students").update({"batches": remaining}).eq("id", student["id"]).execute()
    db.table("batches").delete().eq("id", batch_id).execute()
    return success_response(data={"id": batch_id}, message="Batch deleted")


# ═══════════════════════════════════════════════════════════
# ENROLLMENT
# ═══════════════════════════════════════════════════════════

@router.post("/{batch_id}/enroll")
async def enroll_batch_students(
    batch_id: str,
    user: dict = Depends(require_role(["admin"])),
    body: EnrollRequest = Depends(validated(EnrollRequest)),
):
    db = get_supabase()
    async with locked_batch(db, batch_id) as batch:
        results, batch = enroll_students(db, batch, body.student_ids)

    enrolled = sum(1 for r in results if r["success"])
    return success_response(
        data={
            "results": results,
            "enrolled": enrolled,
            "failed": len(results) - enrolled,
            "batch": present_batch(batch),
        },
        message=f"Enrolled {enrolled} of {len(results)} students",
    )


@router.put("/{batch_id}/students/{student_id}/add")
async def add_student_to_batch(
    batch_id: str,
    student_id: str,
    user: dict = Depends(require_role(["admin"])),
):
    db = get_supabase()
    async with locked_batch(db, batch_id) as batch:
        results, batch = enroll_students(db, batch, [student_id])

    outcome = results[0]
    if not outcome["success"]:
        code = status.HTTP_404_NOT_FOUND if outcome["message"] == "Student not found" else status.HTTP_400_BAD_REQUEST
        raise ApiError(code, outcome["message"])
    return success_response(data=present_batch(batch), message="Student added to batch")


@router.put("/{batch_id}/students/{student_id}/remove")
async def remove_student_from_batch(
    batch_id: str,
    student_id: str,
    user: dict = Depends(require_role(["admin"])),
):
    db = get_supabase()
    async with locked_batch(db, batch_id) as batch:
        enrolled = list(batch.get("enrolled_students") or [])
        if student_id not in enrolled:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "Student is not in this batch")
        enrolled.remove(student_id)
        batch = apply_update(db, "batches", batch, {"enrolled_students": enrolled})

    student = fetch_many(db, "students", [student_id]).get(student_id)
    if student:
        remaining = [bid for bid in student.get("batches") or [] if bid != batch_id]
        db.table("students").update({"batches": remaining}).eq("id", student_id).execute()
    return success_response(data=present_batch(batch), message="Student removed from batch")
