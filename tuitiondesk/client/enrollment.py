"""
Batch enrollment from the operator's side: pick students not yet in the
batch, enroll the selection in one call and report the outcome per student.
"""

import logging
from dataclasses import dataclass, field

from tuitiondesk.client.http import ApiClient
from tuitiondesk.client.stores import ResourceStore

logger = logging.getLogger(__name__)


@dataclass
class EnrollmentReport:
    results: list[dict] = field(default_factory=list)
    batch: dict | None = None

    @property
    def succeeded(self) -> list[str]:
        return [r["student_id"] for r in self.results if r["success"]]

    @property
    def failed(self) -> list[dict]:
        return [r for r in self.results if not r["success"]]

    @property
    def summary(self) -> str:
        return f"Enrolled {len(self.succeeded)} of {len(self.results)} students"


class EnrollmentFlow:
    def __init__(self, client: ApiClient, batches_store: ResourceStore | None = None):
        self.client = client
        self.batches_store = batches_store

    async def candidates(self, batch_id: str) -> list[dict]:
        """Every student who is not enrolled in the batch yet."""
        batch = await self.client.get(f"/api/batches/{batch_id}")
        students = await self.client.get("/api/students")
        enrolled = set(batch.get("enrolled_students") or [])
        return [s for s in students if s["id"] not in enrolled]

    async def enroll(self, batch_id: str, student_ids: list[str]) -> EnrollmentReport:
        data = await self.client.post(f"/api/batches/{batch_id}/enroll", {"student_ids": student_ids})
        report = EnrollmentReport(results=data["results"], batch=data["batch"])

        if self.batches_store is not None and report.succeeded:
            if self.batches_store.get(batch_id) is not None:
                self.batches_store.replace(report.batch)
            else:
                self.batches_store.items.append(report.batch)

        logger.info("Batch %s: %s", batch_id, report.summary)
        return report
