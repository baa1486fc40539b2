"""
Record lookup guards and response shaping shared by the resource routers.

Usage:
    from tuitiondesk.core.records import fetch_one, check_references

    @router.put("/batches/{batch_id}")
    async def update_batch(...):
        batch = fetch_one(db, "batches", batch_id, "Batch")
        check_references(db, {"teacher": ("teachers", body.teacher, "Teacher")})
        ...
"""

import re
from datetime import date, timedelta
from typing import Iterable

from fastapi import status

from tuitiondesk.core.errors import ApiError, not_found, validation_failed
from tuitiondesk.schemas.common import UUID_PATTERN, WEEKDAYS

_RECORD_ID = re.compile(UUID_PATTERN)


def is_record_id(value) -> bool:
    return isinstance(value, str) and bool(_RECORD_ID.match(value))


def today() -> date:
    return date.today()


def fetch_one(db, table: str, record_id: str, label: str) -> dict:
    """Return the row with `record_id` or raise 404."""
    if not is_record_id(record_id):
        raise not_found(label)
    result = db.table(table).select("*").eq("id", record_id).maybe_single().execute()
    if not result or not result.data:
        raise not_found(label)
    return result.data


def fetch_many(db, table: str, record_ids: Iterable[str]) -> dict[str, dict]:
    """Rows keyed by id; malformed or unknown ids are simply absent."""
    wanted = sorted({rid for rid in record_ids if is_record_id(rid)})
    if not wanted:
        return {}
    result = db.table(table).select("*").in_("id", wanted).execute()
    return {row["id"]: row for row in (result.data or [])}


def check_references(db, references: dict[str, tuple]) -> None:
    """
    Verify that referenced records exist.
    `references` maps payload field -> (table, id or list of ids, label).
    Missing targets are reported as field errors, all at once.
    """
    errors = []
    for field, (table, value, label) in references.items():
        if value is None:
            continue
        ids = value if isinstance(value, list) else [value]
        found = fetch_many(db, table, ids)
        if any(rid not in found for rid in ids):
            errors.append({"field": field, "message": f"{label} not found"})
    if errors:
        raise validation_failed(errors)


def check_unique(db, table: str, column: str, value, message: str, exclude_id: str | None = None) -> None:
    if value is None:
        return
    result = db.table(table).select("id").eq(column, value).execute()
    clashes = [row for row in (result.data or []) if row["id"] != exclude_id]
    if clashes:
        raise ApiError(status.HTTP_400_BAD_REQUEST, message)


def parse_day(value) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def window_status(start, end, on: date, labels=("upcoming", "active", "completed")) -> str:
    """Where `on` falls relative to the [start, end] window."""
    start, end = parse_day(start), parse_day(end)
    before, during, after = labels
    if end is not None and end < on:
        return after
    if start is not None and start <= on:
        return during
    return before


def present_batch(row: dict) -> dict:
    enrolled = row.get("enrolled_students") or []
    computed = row.get("status")
    if computed != "cancelled":
        computed = window_status(row.get("start_date"), row.get("end_date"), today())
    return {
        **row,
        "enrolled_students": enrolled,
        "enrolled_count": len(enrolled),
        "is_full": len(enrolled) >= (row.get("capacity") or 0),
        "computed_status": computed,
    }


def present_announcement(row: dict) -> dict:
    return {
        **row,
        "status": window_status(
            row.get("start_date"), row.get("end_date"), today(),
            labels=("scheduled", "active", "expired"),
        ),
    }


def label_batches(db, batches: list[dict]) -> list[dict]:
    """Presented batches with the names of their subject, standard and teacher."""
    names = {}
    for table, column in (("subjects", "subject"), ("standards", "standard"), ("teachers", "teacher")):
        rows = fetch_many(db, table, [b.get(column) for b in batches])
        names.update({rid: row.get("name") for rid, row in rows.items()})
    return [
        {
            **present_batch(batch),
            "subject_name": names.get(batch.get("subject")),
            "standard_name": names.get(batch.get("standard")),
            "teacher_name": names.get(batch.get("teacher")),
        }
        for batch in batches
    ]


def upcoming_classes(batches: list[dict], on: date) -> list[dict]:
    """
    The next class of every scheduled weekday in the coming week, soonest first.
    Cancelled batches and dates outside a batch's start/end window are skipped.
    Expects batches shaped by `label_batches`.
    """
    classes = []
    for batch in batches:
        if batch.get("status") == "cancelled":
            continue
        start, end = parse_day(batch.get("start_date")), parse_day(batch.get("end_date"))
        schedule = batch.get("schedule") or {}
        for day in schedule.get("days") or []:
            if day not in WEEKDAYS:
                continue
            when = on + timedelta(days=(WEEKDAYS.index(day) - on.weekday()) % 7)
            if (start and when < start) or (end and when > end):
                continue
            classes.append({
                "batch": batch["id"],
                "batch_name": batch.get("name"),
                "subject": batch.get("subject_name"),
                "standard": batch.get("standard_name"),
                "day": day,
                "date": when.isoformat(),
                "start_time": schedule.get("start_time"),
                "end_time": schedule.get("end_time"),
            })
    classes.sort(key=lambda c: (c["date"], c["start_time"] or ""))
    return classes


def active_announcements(db, audiences: list[str] | None = None) -> list[dict]:
    """Announcements whose window includes today, optionally for some audiences only."""
    now = today().isoformat()
    query = db.table("announcements").select("*").lte("start_date", now).gte("end_date", now)
    if audiences:
        query = query.in_("target_audience", audiences)
    result = query.order("start_date", desc=True).execute()
    return [present_announcement(row) for row in result.data or []]


def apply_update(db, table: str, current: dict, update_data: dict) -> dict:
    """Write `update_data` over `current` and return the stored row."""
    if not update_data:
        return current
    result = db.table(table).update(update_data).eq("id", current["id"]).execute()
    return result.data[0] if result.data else {**current, **update_data}
