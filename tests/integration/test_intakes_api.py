"""
Integration tests for Intakes API.

Tests the intake logging flow including:
- Authentication requirements
- Photo-verified creation
- Today, by-date and history views
- Corrections, deletion and ownership checks
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models import User
from tests.factories import create_intake, create_settings, create_user, make_image_bytes


def photo(content_type: str = "image/png"):
    return {"photo": ("glass.png", make_image_bytes(), content_type)}


class TestIntakeAuthentication:

    @pytest.mark.parametrize(
        "path", ["/intakes/today", "/intakes/summary", "/intakes/history"]
    )
    def test_requires_auth(self, client: TestClient, path):
        assert client.get(path).status_code == 401

    def test_create_requires_auth(self, client: TestClient):
        response = client.post("/intakes", data={"amount": "250"}, files=photo())

        assert response.status_code == 401


class TestCreateIntakeApi:
    """Tests for POST /intakes."""

    def test_create(self, auth_client: TestClient):
        response = auth_client.post("/intakes", data={"amount": "330"}, files=photo())

        assert response.status_code == 201
        intake = response.json()["intake"]
        assert intake["amount"] == 330
        assert intake["unit"] == "ml"
        assert intake["photo_url"].startswith("/uploads/intakes/")

    def test_photo_required(self, auth_client: TestClient):
        response = auth_client.post("/intakes", data={"amount": "330"})

        assert response.status_code == 422

    @pytest.mark.parametrize("amount", ["0", "5001", "lots"])
    def test_amount_validated(self, auth_client: TestClient, amount):
        response = auth_client.post("/intakes", data={"amount": amount}, files=photo())

        assert response.status_code == 422

    def test_rejects_non_image(self, auth_client: TestClient):
        response = auth_client.post(
            "/intakes",
            data={"amount": "250"},
            files={"photo": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert "Invalid file type" in response.json()["detail"]


class TestReadIntakesApi:
    """Tests for today, summary, by-date and history."""

    def test_today(self, auth_client: TestClient, db: Session, test_user: User):
        create_intake(db, test_user, amount=200)
        create_intake(db, test_user, amount=300)
        create_intake(
            db, test_user, amount=999,
            logged_at=datetime.now(timezone.utc) - timedelta(days=2),
        )

        body = auth_client.get("/intakes/today").json()

        assert body["total"] == 2
        assert sorted(i["amount"] for i in body["intakes"]) == [200, 300]

    def test_summary(self, auth_client: TestClient, db: Session, test_user: User):
        create_settings(db, test_user, daily_goal=1000)
        create_intake(db, test_user, amount=250)

        body = auth_client.get("/intakes/summary").json()

        assert body == {
            "total_intake": 250,
            "daily_goal": 1000,
            "percentage": 25,
            "entries_count": 1,
            "unit": "ml",
        }

    def test_by_date(self, auth_client: TestClient, db: Session, test_user: User):
        create_intake(
            db, test_user, amount=400,
            logged_at=datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc),
        )

        body = auth_client.get("/intakes/date/2026-03-14").json()

        assert body["date"] == "2026-03-14"
        assert body["total"] == 1
        assert body["total_amount"] == 400

    def test_by_date_invalid(self, auth_client: TestClient):
        assert auth_client.get("/intakes/date/not-a-date").status_code == 422

    def test_history_grouped(self, auth_client: TestClient, db: Session, test_user: User):
        create_intake(db, test_user, amount=100, logged_at=datetime(2026, 3, 14, 9, tzinfo=timezone.utc))
        create_intake(db, test_user, amount=200, logged_at=datetime(2026, 3, 14, 18, tzinfo=timezone.utc))
        create_intake(db, test_user, amount=300, logged_at=datetime(2026, 3, 15, 9, tzinfo=timezone.utc))

        body = auth_client.get(
            "/intakes/history",
            params={"start_date": "2026-03-14T00:00:00Z", "end_date": "2026-03-16T00:00:00Z"},
        ).json()

        assert body["total"] == 3
        assert list(body["by_date"]) == ["2026-03-15", "2026-03-14"]
        assert body["by_date"]["2026-03-14"]["total"] == 300
        assert body["by_date"]["2026-03-14"]["count"] == 2

    def test_history_rejects_inverted_range(self, auth_client: TestClient):
        response = auth_client.get(
            "/intakes/history",
            params={"start_date": "2026-03-16T00:00:00Z", "end_date": "2026-03-14T00:00:00Z"},
        )

        assert response.status_code == 400

    def test_only_own_intakes(self, auth_client: TestClient, db: Session):
        other = create_user(db)
        create_intake(db, other, amount=700)

        assert auth_client.get("/intakes/today").json()["total"] == 0


class TestModifyIntakeApi:
    """Tests for PATCH and DELETE /intakes/{id}."""

    def test_update(self, auth_client: TestClient, db: Session, test_user: User):
        intake = create_intake(db, test_user, amount=250)

        response = auth_client.patch(f"/intakes/{intake.id}", json={"amount": 500})

        assert response.status_code == 200
        assert response.json()["intake"]["amount"] == 500

    def test_update_validates(self, auth_client: TestClient, db: Session, test_user: User):
        intake = create_intake(db, test_user)

        response = auth_client.patch(f"/intakes/{intake.id}", json={"amount": 0})

        assert response.status_code == 422

    def test_delete(self, auth_client: TestClient):
        created = auth_client.post("/intakes", data={"amount": "330"}, files=photo()).json()

        response = auth_client.delete(f"/intakes/{created['intake']['id']}")

        assert response.json() == {"success": True}
        assert auth_client.get("/intakes/today").json()["total"] == 0

    def test_cannot_touch_others(self, auth_client: TestClient, db: Session):
        other = create_user(db)
        intake = create_intake(db, other)

        assert auth_client.patch(f"/intakes/{intake.id}", json={"amount": 1}).status_code == 403
        assert auth_client.delete(f"/intakes/{intake.id}").status_code == 403

    def test_missing(self, auth_client: TestClient):
        assert auth_client.delete("/intakes/999999").status_code == 404
