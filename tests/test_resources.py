from datetime import date

from tuitiondesk.core import records

MISSING_ID = "5b0a7c2d-1e3f-4a5b-8c9d-0e1f2a3b4c5d"


class TestStandards:
    def test_crud(self, client, admin_headers, db):
        response = client.post("/api/standards", json={
            "name": "Class 8",
            "level": 8,
            "description": "Middle school foundation year",
        }, headers=admin_headers)
        assert response.status_code == 201
        standard = response.json()["data"]
        assert standard["subjects"] == []
        assert standard["is_active"] is True

        response = client.put(f"/api/standards/{standard['id']}", json={"level": 9}, headers=admin_headers)
        assert response.json()["data"]["level"] == 9
        assert response.json()["data"]["name"] == "Class 8"

        response = client.delete(f"/api/standards/{standard['id']}", headers=admin_headers)
        assert response.json() == {
            "success": True, "data": {"id": standard["id"]}, "message": "Standard deleted",
        }
        assert client.get(f"/api/standards/{standard['id']}", headers=admin_headers).status_code == 404

    def test_students_can_read(self, client, role_headers, standard):
        response = client.get("/api/standards", headers=role_headers("student"))
        assert response.status_code == 200
        assert [s["name"] for s in response.json()["data"]] == ["Class 10"]

    def test_empty_update_returns_current(self, client, admin_headers, standard):
        response = client.put(f"/api/standards/{standard['id']}", json={}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Class 10"


class TestSubjects:
    def test_duplicate_name_is_case_insensitive(self, client, admin_headers, subject):
        response = client.post("/api/subjects", json={
            "name": "Mathematics",
            "description": "Another maths",
            "duration": "6 months",
        }, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Subject 'mathematics' already exists"

    def test_filter_by_standard(self, client, admin_headers, db, standard, subject):
        db.add("subjects", name="history", description="World history", duration="1 year", standard=None)
        response = client.get(f"/api/subjects?standard={standard['id']}", headers=admin_headers)
        assert [s["name"] for s in response.json()["data"]] == ["mathematics"]

    def test_rename_to_own_name_is_allowed(self, client, admin_headers, subject):
        response = client.put(f"/api/subjects/{subject['id']}", json={"name": "MATHEMATICS"}, headers=admin_headers)
        assert response.status_code == 200


class TestAnnouncements:
    def test_status_follows_window(self, client, admin_headers, admin, monkeypatch):
        monkeypatch.setattr(records, "today", lambda: date(2026, 10, 18))
        response = client.post("/api/announcements", json={
            "title": "Mock tests",
            "content": "Mock tests start next week",
            "type": "Exam",
            "priority": "High",
            "start_date": "2026-10-20",
            "end_date": "2026-10-30",
        }, headers=admin_headers)
        assert response.status_code == 201
        announcement = response.json()["data"]
        assert announcement["status"] == "scheduled"
        assert announcement["created_by"] == admin["id"]

    def test_active_list(self, client, admin_headers, db, role_headers, monkeypatch):
        monkeypatch.setattr(records, "today", lambda: date(2026, 10, 18))
        db.add("announcements", title="Past", content="x", start_date="2026-09-01", end_date="2026-09-10")
        db.add("announcements", title="Now", content="x", start_date="2026-10-15", end_date="2026-10-25")
        db.add("announcements", title="Later", content="x", start_date="2026-11-01", end_date="2026-11-05")

        response = client.get("/api/announcements/active", headers=role_headers("student"))
        data = response.json()["data"]
        assert [a["title"] for a in data] == ["Now"]
        assert data[0]["status"] == "active"

    def test_update_checks_merged_window(self, client, admin_headers, db):
        row = db.add("announcements", title="Holiday", content="x", start_date="2026-12-24", end_date="2026-12-26")
        response = client.put(f"/api/announcements/{row['id']}", json={"end_date": "2026-12-20"}, headers=admin_headers)
        assert response.status_code == 422
        assert response.json()["errors"] == [{"field": "end_date", "message": "End date must be after start date"}]

    def test_only_admin_publishes(self, client, role_headers):
        response = client.post("/api/announcements", json={}, headers=role_headers("staff"))
        assert response.status_code == 403


class TestPayments:
    def test_record_and_filter(self, client, role_headers, make_batch, make_student):
        headers = role_headers("staff")
        batch, student = make_batch(), make_student()
        response = client.post("/api/payments", json={
            "student": student["id"],
            "batch": batch["id"],
            "amount": 6000,
            "payment_date": "2026-05-02",
            "payment_method": "UPI",
            "transaction_id": "UPI-88231",
        }, headers=headers)
        assert response.status_code == 201
        assert response.json()["data"]["status"] == "Pending"

        response = client.get(f"/api/payments?student={student['id']}", headers=headers)
        assert len(response.json()["data"]) == 1
        response = client.get(f"/api/payments?student={MISSING_ID}", headers=headers)
        assert response.json()["data"] == []

    def test_unknown_references(self, client, admin_headers):
        response = client.post("/api/payments", json={
            "student": MISSING_ID,
            "batch": MISSING_ID,
            "amount": 100,
            "payment_date": "2026-05-02",
            "payment_method": "Cash",
        }, headers=admin_headers)
        assert response.status_code == 422
        assert response.json()["errors"] == [
            {"field": "student", "message": "Student not found"},
            {"field": "batch", "message": "Batch not found"},
        ]

    def test_staff_cannot_delete(self, client, role_headers, db):
        row = db.add("payments", amount=100, status="Pending")
        response = client.delete(f"/api/payments/{row['id']}", headers=role_headers("staff"))
        assert response.status_code == 403
        assert db.get("payments", row["id"]) is not None
