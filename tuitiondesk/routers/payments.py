"""
Payments router: fee payments recorded against a student and a batch.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status

from tuitiondesk.core.database import get_supabase
from tuitiondesk.core.records import apply_update, check_references, fetch_one
from tuitiondesk.core.security import require_role
from tuitiondesk.core.validation import validated
from tuitiondesk.schemas.office import PaymentCreate, PaymentUpdate
from tuitiondesk.utils.response import success_response

router = APIRouter(prefix="/api/payments", tags=["Payments"])

MANAGERS = ["admin", "staff"]


def _references(body) -> dict:
    return {
        "student": ("students", body.student, "Student"),
        "batch": ("batches", body.batch, "Batch"),
    }


@router.get("")
async def list_payments(
    student: Optional[str] = None,
    batch: Optional[str] = None,
    user: dict = Depends(require_role(MANAGERS)),
):
    db = get_supabase()
    query = db.table("payments").select("*").order("payment_date", desc=True)
    if student:
        query = query.eq("student", student)
    if batch:
        query = query.eq("batch", batch)
    return success_response(data=query.execute().data)


@router.get("/{payment_id}")
async def get_payment(payment_id: str, user: dict = Depends(require_role(MANAGERS))):
    db = get_supabase()
    return success_response(data=fetch_one(db, "payments", payment_id, "Payment"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_payment(
    user: dict = Depends(require_role(MANAGERS)),
    body: PaymentCreate = Depends(validated(PaymentCreate)),
):
    db = get_supabase()
    check_references(db, _references(body))
    result = db.table("payments").insert(body.model_dump(mode="json")).execute()
    return success_response(data=result.data[0], message="Payment recorded")


@router.put("/{payment_id}")
async def update_payment(
    payment_id: str,
    user: dict = Depends(require_role(MANAGERS)),
    body: PaymentUpdate = Depends(validated(PaymentUpdate)),
):
    db = get_supabase()
    current = fetch_one(db, "payments", payment_id, "Payment")
    check_references(db, _references(body))
    updated = apply_update(db, "payments", current, body.model_dump(mode="json", exclude_unset=True))
    return success_response(data=updated, message="Payment updated")


@router.delete("/{payment_id}")
async def delete_payment(payment_id: str, user: dict = Depends(require_role(["admin"]))):
    db = get_supabase()
    fetch_one(db, "payments", payment_id, "Payment")
    db.table("payments").delete().eq("id", payment_id).execute()
    return success_response(data={"id": payment_id}, message="Payment deleted")
