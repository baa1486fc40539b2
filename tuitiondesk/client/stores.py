"""
Resource stores: a local list of records per resource kept in step with the API.

Each operation sets `loading`, clears the previous error, calls the API and
folds the answer into `items`. Failures land in `error` / `field_errors` and
the operation returns None. AuthenticationExpired is recorded and re-raised
so the caller can leave the signed-in area.
"""

import logging
from typing import Any

from tuitiondesk.client.http import ApiClient, ApiRequestError, AuthenticationExpired

logger = logging.getLogger(__name__)


class ResourceStore:
    def __init__(self, client: ApiClient, path: str):
        self.client = client
        self.path = path.rstrip("/")
        self.items: list[dict] = []
        self.loading = False
        self.error: str | None = None
        self.message: str | None = None
        self.field_errors: dict[str, str] = {}

    def __repr__(self) -> str:
        return f"<ResourceStore {self.path} items={len(self.items)}>"

    def get(self, record_id: str) -> dict | None:
        return next((item for item in self.items if item.get("id") == record_id), None)

    def clear_error(self) -> None:
        self.error = None
        self.field_errors = {}

    def replace(self, record: dict) -> None:
        self.items = [record if item.get("id") == record.get("id") else item for item in self.items]

    async def _run(self, call, success_message: str | None = None) -> Any:
        self.loading = True
        self.clear_error()
        self.message = None
        try:
            result = await call
        except AuthenticationExpired as exc:
            self.error = exc.message
            raise
        except ApiRequestError as exc:
            logger.info("%s request failed: %s", self.path, exc.message)
            self.error = exc.message
            self.field_errors = exc.field_errors
            return None
        finally:
            self.loading = False
        self.message = success_message
        return result

    async def fetch_all(self, **params) -> list[dict] | None:
        records = await self._run(self.client.get(self.path, params=params or None))
        if records is not None:
            self.items = list(records)
        return records

    async def create(self, payload: dict) -> dict | None:
        record = await self._run(self.client.post(self.path, payload), "Created successfully")
        if record is not None:
            self.items.append(record)
        return record

    async def update(self, record_id: str, payload: dict) -> dict | None:
        record = await self._run(self.client.put(f"{self.path}/{record_id}", payload), "Updated successfully")
        if record is not None:
            self.replace(record)
        return record

    async def delete(self, record_id: str) -> bool:
        result = await self._run(self.client.delete(f"{self.path}/{record_id}"), "Deleted successfully")
        if result is None:
            return False
        self.items = [item for item in self.items if item.get("id") != record_id]
        return True


class Stores:
    """One store per resource, sharing a client."""

    RESOURCES = {
        "standards": "/api/standards",
        "subjects": "/api/subjects",
        "teachers": "/api/teachers",
        "staff": "/api/staff",
        "students": "/api/students",
        "batches": "/api/batches",
        "announcements": "/api/announcements",
        "payments": "/api/payments",
    }

    def __init__(self, client: ApiClient):
        self.client = client
        for name, path in self.RESOURCES.items():
            setattr(self, name, ResourceStore(client, path))

    def __iter__(self):
        return (getattr(self, name) for name in self.RESOURCES)
