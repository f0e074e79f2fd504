from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from app.database import SessionLocal
from app.models.donor import Donor
from app.routers.admin_donors import _commit_donor
from app.services.donor_service import record_donation_if_eligible
from app.utils.errors import InvalidInputError


def _donor_payload(**overrides):
    payload = {
        "name": "Asha Verma",
        "roll_no": "2022031",
        "blood_group": "O+",
        "age": 21,
        "phone": "9876500000",
        "email": "Asha@MMMUT.ac.in",
        "branch": "ECE",
        "year": "2",
        "medical_history": "None reported",
    }
    payload.update(overrides)
    return payload


def _create_donor(client, headers, **overrides):
    response = client.post("/api/admin/donors", json=_donor_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def test_create_and_fetch_donor(client, admin_headers):
    donor = _create_donor(client, admin_headers)

    assert donor["email"] == "asha@mmmut.ac.in"
    assert donor["is_eligible_for_donation"] is True
    assert donor["days_until_eligible"] == 0

    fetched = client.get(f"/api/admin/donors/{donor['id']}", headers=admin_headers)
    assert fetched.status_code == 200
    assert fetched.json()["data"]["medical_history"] == "None reported"


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"blood_group": "C+"}, "Invalid blood group"),
        ({"age": 15}, "Age must be between 16 and 65"),
        ({"age": 66}, "Age must be between 16 and 65"),
        ({"age": 16}, "Age must be between 18 and 65"),
        ({"age": 17}, "Age must be between 18 and 65"),
    ],
)
def test_donor_validation(client, db, admin_headers, overrides, message):
    response = client.post("/api/admin/donors", json=_donor_payload(**overrides), headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["message"] == message
    assert db.query(Donor).count() == 0


def test_donor_missing_fields(client, admin_headers):
    payload = _donor_payload()
    del payload["roll_no"]

    response = client.post("/api/admin/donors", json=payload, headers=admin_headers)

    assert response.status_code == 422


def test_donor_routes_require_admin(client, user_headers):
    assert client.get("/api/admin/donors", headers=user_headers).status_code == 403
    assert client.post("/api/admin/donors", json=_donor_payload()).status_code == 401


def test_list_donors_is_paginated(client, admin_headers):
    for index in range(3):
        _create_donor(client, admin_headers, roll_no=f"R{index}", email=f"donor{index}@mmmut.ac.in")

    response = client.get("/api/admin/donors", params={"page": 2, "limit": 2}, headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["donors"]) == 1
    assert data["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}


def test_update_donor(client, admin_headers):
    donor = _create_donor(client, admin_headers)

    response = client.put(
        f"/api/admin/donors/{donor['id']}",
        json=_donor_payload(blood_group="AB-", age=30),
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["data"]["blood_group"] == "AB-"
    assert response.json()["data"]["age"] == 30

    invalid = client.put(
        f"/api/admin/donors/{donor['id']}",
        json=_donor_payload(age=16),
        headers=admin_headers,
    )
    assert invalid.status_code == 400
    assert client.get(f"/api/admin/donors/{donor['id']}", headers=admin_headers).json()["data"]["age"] == 30


def test_soft_delete_hides_donor_from_listings(client, admin_headers, user_headers):
    donor = _create_donor(client, admin_headers)

    deleted = client.delete(f"/api/admin/donors/{donor['id']}", headers=admin_headers)
    assert deleted.status_code == 200

    assert client.get("/api/admin/donors", headers=admin_headers).json()["data"]["pagination"]["total"] == 0
    assert client.get("/api/donors/list", headers=user_headers).json()["data"]["count"] == 0

    recorded = client.post(f"/api/admin/donors/{donor['id']}/record-donation", headers=admin_headers)
    assert recorded.status_code == 404


def test_public_listing_hides_medical_history(client, admin_headers, user_headers):
    _create_donor(client, admin_headers)

    response = client.get("/api/donors/list", headers=user_headers)

    assert response.status_code == 200
    donors = response.json()["data"]["donors"]
    assert response.json()["data"]["count"] == 1
    assert "medical_history" not in donors[0]
    assert donors[0]["is_eligible_for_donation"] is True

    assert client.get("/api/donors/list").status_code == 401


def test_record_donation_for_first_time_donor(client, admin_headers):
    donor = _create_donor(client, admin_headers)

    response = client.post(f"/api/admin/donors/{donor['id']}/record-donation", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["last_donation"] is not None
    assert data["is_eligible_for_donation"] is False
    assert data["days_until_eligible"] == 90

    again = client.post(f"/api/admin/donors/{donor['id']}/record-donation", headers=admin_headers)
    assert again.status_code == 400
    assert again.json()["message"] == "Donor is not eligible. Must wait 90 more days."


def test_record_donation_respects_cooldown(client, admin_headers):
    recent = (datetime.utcnow() - timedelta(days=89)).isoformat()
    donor = _create_donor(client, admin_headers, last_donation=recent)
    assert donor["days_until_eligible"] == 1

    response = client.post(f"/api/admin/donors/{donor['id']}/record-donation", headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Donor is not eligible. Must wait 1 more days."


def test_record_donation_after_cooldown(client, admin_headers):
    old = (datetime.utcnow() - timedelta(days=91)).isoformat()
    donor = _create_donor(client, admin_headers, last_donation=old)

    response = client.post(f"/api/admin/donors/{donor['id']}/record-donation", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"]["days_until_eligible"] == 90


def test_record_donation_unknown_donor(client, admin_headers):
    response = client.post("/api/admin/donors/999/record-donation", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Donor not found"


def test_record_donation_at_exact_cooldown_boundary(client, admin_headers):
    boundary = (datetime.utcnow() - timedelta(days=90)).isoformat()
    donor = _create_donor(client, admin_headers, last_donation=boundary)
    assert donor["is_eligible_for_donation"] is True
    assert donor["days_until_eligible"] == 0

    response = client.post(f"/api/admin/donors/{donor['id']}/record-donation", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"]["is_eligible_for_donation"] is False
    assert response.json()["data"]["days_until_eligible"] == 90


def test_concurrent_recordings_only_one_succeeds(client, admin_headers):
    donor_id = _create_donor(client, admin_headers)["id"]
    first, second = SessionLocal(), SessionLocal()
    try:
        # Both sessions observe an eligible donor before either writes
        assert first.get(Donor, donor_id).last_donation is None
        assert second.get(Donor, donor_id).last_donation is None

        now = datetime.utcnow()
        results = (
            record_donation_if_eligible(first, donor_id, now),
            record_donation_if_eligible(second, donor_id, now),
        )
    finally:
        first.close()
        second.close()

    assert results == (True, False)


class _FailingSession:
    def __init__(self, message):
        self.message = message
        self.rolled_back = False

    def commit(self):
        raise IntegrityError("INSERT INTO donors", {}, Exception(self.message))

    def rollback(self):
        self.rolled_back = True


def test_age_constraint_violation_maps_to_bad_request():
    session = _FailingSession("CHECK constraint failed: ck_donor_age_range")

    with pytest.raises(InvalidInputError) as excinfo:
        _commit_donor(session)

    assert excinfo.value.detail == "Age must be between 18 and 65"
    assert session.rolled_back


def test_unrelated_integrity_errors_are_not_relabelled():
    session = _FailingSession("NOT NULL constraint failed: donors.name")

    with pytest.raises(IntegrityError):
        _commit_donor(session)

    assert session.rolled_back
