"""
Admin dashboard router: headline counts, recent records and revenue statistics.
"""

from datetime import date

from fastapi import APIRouter, Depends

from tuitiondesk.core.database import get_supabase
from tuitiondesk.core.records import parse_day, present_batch, today
from tuitiondesk.core.security import require_role
from tuitiondesk.utils.response import success_response

router = APIRouter(prefix="/api/admin/dashboard", tags=["Dashboard"])

RECENT_LIMIT = 5


def _count(db, table: str, **filters) -> int:
    query = db.table(table).select("id", count="exact")
    for column, value in filters.items():
        query = query.eq(column, value)
    result = query.execute()
    return result.count or 0


def _month_start(day: date, months_back: int = 0) -> date:
    month_index = day.year * 12 + (day.month - 1) - months_back
    return date(month_index // 12, month_index % 12 + 1, 1)


def revenue_stats(payments: list[dict], on: date) -> dict:
    """Totals of completed payments by period, by month of this year and by method."""
    this_month, prev_month, this_year = _month_start(on), _month_start(on, 1), date(on.year, 1, 1)
    periods = {
        "this_month": {"total": 0.0, "count": 0},
        "prev_month": {"total": 0.0, "count": 0},
        "this_year": {"total": 0.0, "count": 0},
    }
    by_month: dict[tuple, dict] = {}
    by_method: dict[str, dict] = {}

    for payment in payments:
        if payment.get("status") != "Completed":
            continue
        amount = float(payment.get("amount") or 0)
        paid_on = parse_day(payment.get("payment_date"))

        method = by_method.setdefault(payment.get("payment_method"), {"total": 0.0, "count": 0})
        method["total"] += amount
        method["count"] += 1

        if paid_on is None:
            continue
        buckets = []
        if paid_on >= this_month:
            buckets.append(periods["this_month"])
        elif prev_month <= paid_on < this_month:
            buckets.append(periods["prev_month"])
        if paid_on >= this_year:
            buckets.append(periods["this_year"])
            buckets.append(by_month.setdefault((paid_on.year, paid_on.month), {"total": 0.0, "count": 0}))
        for bucket in buckets:
            bucket["total"] += amount
            bucket["count"] += 1

    previous, current = periods["prev_month"]["total"], periods["this_month"]["total"]
    if previous > 0:
        growth = (current - previous) / previous * 100
    else:
        growth = 100.0 if current > 0 else 0.0

    return {
        **periods,
        "by_month": [
            {"year": year, "month": month, **totals}
            for (year, month), totals in sorted(by_month.items())
        ],
        "by_method": sorted(
            ({"method": name, **totals} for name, totals in by_method.items()),
            key=lambda item: item["total"],
            reverse=True,
        ),
        "growth": round(growth, 2),
    }


@router.get("/summary")
async def dashboard_summary(user: dict = Depends(require_role(["admin"]))):
    db = get_supabase()
    recent_students = (
        db.table("students")
        .select("id, student_id, name, email, phone, standard, created_at")
        .order("created_at", desc=True)
        .limit(RECENT_LIMIT)
        .execute()
    )
    recent_batches = (
        db.table("batches")
        .select("*")
        .order("created_at", desc=True)
        .limit(RECENT_LIMIT)
        .execute()
    )
    return success_response(
        data={
            "counts": {
                "students": _count(db, "students", status="active"),
                "teachers": _count(db, "teachers", status="active"),
                "staff": _count(db, "staff", status="active"),
                "batches": _count(db, "batches"),
            },
            "recent_students": recent_students.data,
            "recent_batches": [present_batch(b) for b in recent_batches.data],
        },
        message="Dashboard summary retrieved successfully",
    )


@router.get("/revenue")
async def dashboard_revenue(user: dict = Depends(require_role(["admin"]))):
    db = get_supabase()
    payments = (
        db.table("payments")
        .select("amount, payment_date, payment_method, status")
        .eq("status", "Completed")
        .execute()
    )
    return success_response(
        data=revenue_stats(payments.data or [], today()),
        message="Revenue statistics retrieved successfully",
    )
