import json

import httpx
import pytest

from tuitiondesk.client.enrollment import EnrollmentFlow
from tuitiondesk.client.http import ApiClient, ApiRequestError, AuthenticationExpired
from tuitiondesk.client.session import Session
from tuitiondesk.client.stores import Stores
from tuitiondesk.main import app

pytestmark = pytest.mark.anyio

ADMIN_PASSWORD = "secret123"


@pytest.fixture
def session_file(tmp_path):
    return tmp_path / "session.json"


@pytest.fixture
def logouts():
    return []


@pytest.fixture
async def api(db, admin, session_file, logouts):
    session = Session(session_file)
    transport = httpx.ASGITransport(app=app)
    async with ApiClient("http://testserver", session, on_logout=logouts.append, transport=transport) as client:
        yield client


async def login(api):
    return await api.login("admin@brightminds.in", ADMIN_PASSWORD)


class TestSession:
    async def test_login_persists_session(self, api, session_file):
        user = await login(api)
        assert user["role"] == "admin"
        assert api.session.is_authenticated

        stored = json.loads(session_file.read_text())
        assert stored["user"]["email"] == "admin@brightminds.in"
        assert Session(session_file).token == api.session.token

    async def test_logout_clears_file(self, api, session_file):
        await login(api)
        api.logout()
        assert not api.session.is_authenticated
        assert not session_file.exists()

    async def test_unreadable_file_is_ignored(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        assert Session(path).token is None

    async def test_unauthorized_response_ends_session(self, api, session_file, logouts):
        api.session.save("stale-token", {"id": "x"})
        with pytest.raises(AuthenticationExpired) as exc_info:
            await api.get("/api/batches")
        assert exc_info.value.status_code == 401
        assert api.session.token is None
        assert api.session.user is None
        assert not session_file.exists()
        assert logouts == ["/login"]

    async def test_server_message_is_surfaced(self, api):
        await login(api)
        with pytest.raises(ApiRequestError) as exc_info:
            await api.get("/api/batches/5b0a7c2d-1e3f-4a5b-8c9d-0e1f2a3b4c5d")
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Batch not found"

    async def test_fallback_message(self):
        def handler(request):
            return httpx.Response(502, text="Bad gateway")

        client = ApiClient("http://testserver", Session(), transport=httpx.MockTransport(handler))
        with pytest.raises(ApiRequestError) as exc_info:
            await client.get("/api/batches")
        await client.aclose()
        assert exc_info.value.message == "Something went wrong. Please try again."


class TestStores:
    async def test_crud_round(self, api, db):
        await login(api)
        stores = Stores(api)
        standards = stores.standards

        created = await standards.create({"name": "Class 6", "level": 6, "description": "Primary to middle school"})
        assert created is not None
        assert standards.items == [created]
        assert standards.message == "Created successfully"

        updated = await standards.update(created["id"], {"name": "Class VI"})
        assert standards.get(created["id"])["name"] == "Class VI"
        assert updated["level"] == 6

        assert await standards.delete(created["id"]) is True
        assert standards.items == []
        assert standards.loading is False

    async def test_fetch_replaces_items(self, api, db, standard):
        await login(api)
        store = Stores(api).standards
        store.items = [{"id": "stale"}]
        await store.fetch_all()
        assert [s["id"] for s in store.items] == [standard["id"]]

    async def test_errors_are_stored_not_raised(self, api):
        await login(api)
        store = Stores(api).subjects
        assert await store.create({"name": "x"}) is None
        assert store.error == "Validation failed"
        assert store.field_errors["name"] == "Subject name must be between 2 and 100 characters"
        assert store.items == []

        store.clear_error()
        assert store.error is None
        assert store.field_errors == {}

    async def test_expired_session_propagates(self, api, logouts):
        store = Stores(api).students
        with pytest.raises(AuthenticationExpired):
            await store.fetch_all()
        assert store.error is not None
        assert store.loading is False
        assert logouts == ["/login"]

    async def test_bundle_has_every_resource(self, api):
        paths = [store.path for store in Stores(api)]
        assert paths == [
            "/api/standards", "/api/subjects", "/api/teachers", "/api/staff",
            "/api/students", "/api/batches", "/api/announcements", "/api/payments",
        ]


class TestEnrollmentFlow:
    async def test_enroll_selected_students(self, api, db, make_batch, make_student):
        await login(api)
        already = make_student("Kiran Das")
        first, second = make_student("Neha Shah"), make_student("Rohan Pillai")
        batch = make_batch(capacity=10, enrolled_students=[already["id"]])

        stores = Stores(api)
        await stores.batches.fetch_all()
        flow = EnrollmentFlow(api, stores.batches)

        candidates = await flow.candidates(batch["id"])
        assert {s["id"] for s in candidates} == {first["id"], second["id"]}

        report = await flow.enroll(batch["id"], [first["id"], already["id"], second["id"]])
        assert report.succeeded == [first["id"], second["id"]]
        assert [f["student_id"] for f in report.failed] == [already["id"]]
        assert report.summary == "Enrolled 2 of 3 students"

        cached = stores.batches.get(batch["id"])
        assert cached["enrolled_students"] == [already["id"], first["id"], second["id"]]
        assert cached["enrolled_count"] == 3
