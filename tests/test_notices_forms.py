PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
PDF_BYTES = b"%PDF-1.4\n%fake\n"


def _create_notice(client, headers, title, priority=None, file=None):
    data = {"title": title, "content": f"{title} details"}
    if priority:
        data["priority"] = priority
    files = {"file": file} if file else None
    return client.post("/api/admin/notices", data=data, files=files, headers=headers)


def _form_data(**overrides):
    data = {
        "title": "Blood Donation Drive",
        "link": "https://forms.example.org/drive",
        "event_date": "2026-11-20T10:00:00Z",
        "description": "Main auditorium",
    }
    data.update(overrides)
    return data


def test_create_notice_with_attachment(client, object_store, admin_headers, normal_admin):
    response = _create_notice(
        client, admin_headers, "Camp schedule", priority="high", file=("poster.png", PNG_BYTES, "image/png")
    )

    assert response.status_code == 201
    notice = response.json()["data"]
    assert notice["priority"] == "high"
    assert notice["author"] == {"id": normal_admin.id, "name": normal_admin.name}
    assert notice["file"]["original_name"] == "poster.png"
    assert notice["file"]["mimetype"] == "image/png"
    assert notice["file"]["size"] == len(PNG_BYTES)

    key = notice["file"]["key"]
    assert key.startswith("blood_camp/notices/") and key.endswith(".png")
    assert object_store.objects[key]["body"] == PNG_BYTES
    assert object_store.objects[key]["ContentType"] == "image/png"


def test_notice_defaults_to_medium_priority(client, admin_headers):
    response = _create_notice(client, admin_headers, "Reminder")

    assert response.status_code == 201
    assert response.json()["data"]["priority"] == "medium"
    assert response.json()["data"]["file"] is None


def test_notice_rejects_bad_priority_and_file_type(client, object_store, admin_headers):
    bad_priority = _create_notice(client, admin_headers, "Oops", priority="urgent")
    assert bad_priority.status_code == 400

    bad_file = _create_notice(client, admin_headers, "Oops", file=("notes.txt", b"plain text", "text/plain"))
    assert bad_file.status_code == 400
    assert bad_file.json()["message"] == "Only images (JPEG, JPG, PNG, GIF) and PDF files are allowed"
    assert object_store.objects == {}


def test_notices_ordered_by_priority(client, admin_headers, user_headers):
    for title, priority in (("Low", "low"), ("High", "high"), ("Medium", "medium")):
        assert _create_notice(client, admin_headers, title, priority=priority).status_code == 201

    response = client.get("/api/notices", headers=user_headers)

    assert response.status_code == 200
    assert response.json()["data"]["count"] == 3
    assert [notice["title"] for notice in response.json()["data"]["notices"]] == ["High", "Medium", "Low"]


def test_notice_detail_is_admin_only(client, admin_headers, user_headers):
    notice_id = _create_notice(client, admin_headers, "Camp").json()["data"]["id"]

    assert client.get(f"/api/notices/{notice_id}", headers=user_headers).status_code == 403
    assert client.get(f"/api/notices/{notice_id}", headers=admin_headers).status_code == 200


def test_update_and_delete_notice(client, admin_headers, user_headers):
    notice_id = _create_notice(client, admin_headers, "Camp").json()["data"]["id"]

    updated = client.put(
        f"/api/admin/notices/{notice_id}",
        data={"title": "Camp moved", "content": "Now in hall B", "priority": "low"},
        files={"file": ("map.pdf", PDF_BYTES, "application/pdf")},
        headers=admin_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["title"] == "Camp moved"
    assert updated.json()["data"]["file"]["mimetype"] == "application/pdf"

    deleted = client.delete(f"/api/admin/notices/{notice_id}", headers=admin_headers)
    assert deleted.status_code == 200
    assert client.get("/api/notices", headers=user_headers).json()["data"]["count"] == 0
    assert client.get(f"/api/admin/notices/{notice_id}", headers=admin_headers).status_code == 404


def test_admin_notice_listing_is_paginated(client, admin_headers):
    for index in range(3):
        _create_notice(client, admin_headers, f"Notice {index}")

    response = client.get("/api/admin/notices", params={"limit": 2}, headers=admin_headers)

    assert response.status_code == 200
    assert len(response.json()["data"]["notices"]) == 2
    assert response.json()["data"]["pagination"]["total"] == 3


def test_create_form_with_files(client, object_store, admin_headers, normal_admin):
    response = client.post(
        "/api/admin/forms",
        data=_form_data(),
        files=[
            ("files", ("flyer.jpg", b"\xff\xd8\xff" + b"\x00" * 16, "image/jpeg")),
            ("files", ("consent.pdf", PDF_BYTES, "application/pdf")),
        ],
        headers=admin_headers,
    )

    assert response.status_code == 201
    form = response.json()["data"]
    assert form["created_by"] == {"id": normal_admin.id, "name": normal_admin.name}
    assert [item["original_name"] for item in form["files"]] == ["flyer.jpg", "consent.pdf"]
    assert form["event_date"].startswith("2026-11-20T10:00:00")
    assert len(object_store.objects) == 2
    assert all(key.startswith("blood_camp/forms/") for key in object_store.objects)


def test_form_validation(client, object_store, admin_headers):
    bad_link = client.post("/api/admin/forms", data=_form_data(link="not a url"), headers=admin_headers)
    assert bad_link.status_code == 400
    assert bad_link.json()["message"] == "Please provide a valid URL"

    bad_date = client.post("/api/admin/forms", data=_form_data(event_date="next friday"), headers=admin_headers)
    assert bad_date.status_code == 400

    too_many = client.post(
        "/api/admin/forms",
        data=_form_data(),
        files=[("files", (f"page{index}.pdf", PDF_BYTES, "application/pdf")) for index in range(6)],
        headers=admin_headers,
    )
    assert too_many.status_code == 400
    assert object_store.objects == {}


def test_forms_ordered_by_event_date(client, admin_headers, user_headers):
    for title, event_date in (("Later", "2026-12-01T09:00:00"), ("Sooner", "2026-11-01T09:00:00")):
        created = client.post(
            "/api/admin/forms", data=_form_data(title=title, event_date=event_date), headers=admin_headers
        )
        assert created.status_code == 201

    response = client.get("/api/forms", headers=user_headers)

    assert response.status_code == 200
    assert [form["title"] for form in response.json()["data"]["forms"]] == ["Sooner", "Later"]


def test_update_form_keeps_files_without_new_uploads(client, admin_headers):
    created = client.post(
        "/api/admin/forms",
        data=_form_data(),
        files=[("files", ("consent.pdf", PDF_BYTES, "application/pdf"))],
        headers=admin_headers,
    )
    form_id = created.json()["data"]["id"]

    updated = client.put(f"/api/admin/forms/{form_id}", data=_form_data(title="Renamed"), headers=admin_headers)

    assert updated.status_code == 200
    assert updated.json()["data"]["title"] == "Renamed"
    assert len(updated.json()["data"]["files"]) == 1

    replaced = client.put(
        f"/api/admin/forms/{form_id}",
        data=_form_data(),
        files=[("files", ("poster.gif", b"GIF89a" + b"\x00" * 8, "image/gif"))],
        headers=admin_headers,
    )
    assert [item["original_name"] for item in replaced.json()["data"]["files"]] == ["poster.gif"]


def test_delete_form(client, admin_headers, user_headers):
    form_id = client.post("/api/admin/forms", data=_form_data(), headers=admin_headers).json()["data"]["id"]

    assert client.delete(f"/api/admin/forms/{form_id}", headers=admin_headers).status_code == 200
    assert client.get("/api/forms", headers=user_headers).json()["data"]["count"] == 0
    assert client.get(f"/api/forms/{form_id}", headers=admin_headers).status_code == 404


def test_upload_failure_surfaces_as_server_error(client, monkeypatch, admin_headers):
    from botocore.exceptions import EndpointConnectionError

    from app.services import spaces_service

    class BrokenStore:
        def put_object(self, **kwargs):
            raise EndpointConnectionError(endpoint_url="https://spaces.invalid")

    monkeypatch.setattr(spaces_service, "get_client", lambda: BrokenStore())

    response = _create_notice(client, admin_headers, "Camp", file=("poster.png", PNG_BYTES, "image/png"))

    assert response.status_code == 500
    assert response.json()["message"] == "Failed to upload file"


def test_rejected_batch_stores_nothing(client, object_store, admin_headers):
    response = client.post(
        "/api/admin/forms",
        data=_form_data(),
        files=[
            ("files", ("ok.pdf", PDF_BYTES, "application/pdf")),
            ("files", ("bad.exe", b"MZ\x90\x00", "application/octet-stream")),
        ],
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Only images (JPEG, JPG, PNG, GIF) and PDF files are allowed"
    assert object_store.objects == {}


def test_partial_upload_failure_removes_stored_files(client, monkeypatch, admin_headers):
    from botocore.exceptions import EndpointConnectionError

    from app.services import spaces_service
    from conftest import FakeObjectStore

    class FlakyStore(FakeObjectStore):
        def put_object(self, Bucket, Key, Body, **kwargs):
            if self.objects:
                raise EndpointConnectionError(endpoint_url="https://spaces.invalid")
            return super().put_object(Bucket, Key, Body, **kwargs)

    store = FlakyStore()
    monkeypatch.setattr(spaces_service, "get_client", lambda: store)

    response = client.post(
        "/api/admin/forms",
        data=_form_data(),
        files=[
            ("files", ("one.pdf", PDF_BYTES, "application/pdf")),
            ("files", ("two.pdf", PDF_BYTES, "application/pdf")),
        ],
        headers=admin_headers,
    )

    assert response.status_code == 500
    assert store.objects == {}


def test_notice_json_routes(client, admin_headers, user_headers, normal_admin):
    created = client.post(
        "/api/notices",
        json={"title": "Camp day", "content": "Hall A", "priority": "high"},
        headers=admin_headers,
    )
    assert created.status_code == 201
    notice = created.json()["data"]
    assert notice["author"] == {"id": normal_admin.id, "name": normal_admin.name}
    assert notice["file"] is None

    updated = client.put(f"/api/notices/{notice['id']}", json={"content": "Hall B"}, headers=admin_headers)
    assert updated.status_code == 200
    assert updated.json()["data"]["title"] == "Camp day"
    assert updated.json()["data"]["content"] == "Hall B"
    assert updated.json()["data"]["priority"] == "high"

    bad = client.put(f"/api/notices/{notice['id']}", json={"priority": "urgent"}, headers=admin_headers)
    assert bad.status_code == 422

    assert client.post("/api/notices", json={"title": "x", "content": "y"}, headers=user_headers).status_code == 403

    deleted = client.delete(f"/api/notices/{notice['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    assert client.get("/api/notices", headers=user_headers).json()["data"]["count"] == 0
    assert client.delete(f"/api/notices/{notice['id']}", headers=admin_headers).status_code == 404


def test_form_json_routes(client, admin_headers, user_headers):
    created = client.post(
        "/api/forms",
        json={"title": "Drive", "link": "https://forms.example.org/drive", "event_date": "2026-11-20T15:30:00+05:30"},
        headers=admin_headers,
    )
    assert created.status_code == 201
    form = created.json()["data"]
    assert form["files"] == []
    assert form["event_date"].startswith("2026-11-20T10:00:00")

    bad_link = client.put(f"/api/forms/{form['id']}", json={"link": "nope"}, headers=admin_headers)
    assert bad_link.status_code == 400
    assert bad_link.json()["message"] == "Please provide a valid URL"

    updated = client.put(f"/api/forms/{form['id']}", json={"title": "Drive 2"}, headers=admin_headers)
    assert updated.status_code == 200
    assert updated.json()["data"]["title"] == "Drive 2"
    assert updated.json()["data"]["link"] == "https://forms.example.org/drive"

    assert client.delete(f"/api/forms/{form['id']}", headers=admin_headers).status_code == 200
    assert client.get("/api/forms", headers=user_headers).json()["data"]["count"] == 0
    assert client.put(f"/api/forms/{form['id']}", json={"title": "x"}, headers=admin_headers).status_code == 404
