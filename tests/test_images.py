from pathlib import Path


def create_image(client, auth, **fields):
    response = client.post("/api/admin/images", json={"url": "https://example.com/a.jpg", **fields}, headers=auth)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_image_defaults(client, auth):
    image = create_image(client, auth)
    assert image["url"] == "https://example.com/a.jpg"
    assert image["credit"] == ""
    assert image["duration"] is None
    assert image["order"] == 0
    assert image["id"]
    assert "createdAt" in image


def test_create_image_rejects_blank_url(client, auth):
    response = client.post("/api/admin/images", json={"url": "   "}, headers=auth)
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


def test_create_image_rejects_non_positive_duration(client, auth):
    response = client.post("/api/admin/images", json={"url": "https://x/y.png", "duration": 0}, headers=auth)
    assert response.status_code == 400


def test_library_is_newest_first(client, auth, admin_data):
    image = create_image(client, auth, credit="Newest")
    assert admin_data()["images"][0]["id"] == image["id"]


def test_partial_update_only_touches_sent_fields(client, auth):
    image = create_image(client, auth, credit="Jane", duration=12)

    response = client.put(f"/api/admin/images/{image['id']}", json={"credit": "John"}, headers=auth)
    assert response.status_code == 200
    assert response.json()["credit"] == "John"
    assert response.json()["duration"] == 12
    assert response.json()["url"] == image["url"]

    response = client.put(f"/api/admin/images/{image['id']}", json={"duration": None}, headers=auth)
    assert response.json()["duration"] is None
    assert response.json()["credit"] == "John"


def test_update_missing_image(client, auth):
    response = client.put("/api/admin/images/doesnotexist", json={"credit": "x"}, headers=auth)
    assert response.status_code == 404
    assert response.json()["detail"] == "Image not found."


def test_delete_image_removes_it_from_every_list(client, auth, admin_data):
    image = create_image(client, auth)
    data = admin_data()
    default = next(lst for lst in data["imageLists"] if lst["name"] == "Default")
    default_ids = [img["id"] for img in default["images"]]

    holiday = client.post("/api/admin/image-lists", json={"name": "Holiday"}, headers=auth).json()
    client.put(
        f"/api/admin/image-lists/{holiday['id']}",
        json={"images": [image["id"], default_ids[0], image["id"]]},
        headers=auth,
    )
    client.put(
        f"/api/admin/image-lists/{default['id']}",
        json={"images": default_ids + [image["id"]]},
        headers=auth,
    )

    response = client.delete(f"/api/admin/images/{image['id']}", headers=auth)
    assert response.status_code == 200
    assert response.json()["success"] is True

    lists = {lst["name"]: lst for lst in admin_data()["imageLists"]}
    assert [img["id"] for img in lists["Holiday"]["images"]] == [default_ids[0]]
    assert [img["id"] for img in lists["Default"]["images"]] == default_ids
    assert image["id"] not in [img["id"] for img in admin_data()["images"]]


def test_delete_missing_image(client, auth):
    assert client.delete("/api/admin/images/nope", headers=auth).status_code == 404


def test_upload_stores_file_and_serves_it(client, auth, config):
    response = client.post(
        "/api/admin/images/upload",
        files={"imageFile": ("Sunset.PNG", b"\x89PNG fake bytes", "image/png")},
        headers=auth,
    )
    assert response.status_code == 201
    url = response.json()["url"]
    assert url.startswith("/userImages/")
    assert url.endswith(".png")

    name = url.rsplit("/", 1)[1]
    stem = name[: -len(".png")]
    millis, rand = stem.split("-")
    assert millis.isdigit() and rand.isdigit()

    stored = Path(config.storage.upload_dir) / name
    assert stored.read_bytes() == b"\x89PNG fake bytes"
    assert client.get(url).content == b"\x89PNG fake bytes"


def test_upload_without_file(client, auth):
    response = client.post(
        "/api/admin/images/upload",
        files={"somethingElse": ("a.txt", b"x", "text/plain")},
        headers=auth,
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "No file uploaded."


def test_deleting_uploaded_image_removes_file(client, auth, config):
    url = client.post(
        "/api/admin/images/upload",
        files={"imageFile": ("photo.jpg", b"jpeg", "image/jpeg")},
        headers=auth,
    ).json()["url"]
    image = create_image(client, auth, url=url)
    stored = Path(config.storage.upload_dir) / url.rsplit("/", 1)[1]
    assert stored.exists()

    client.delete(f"/api/admin/images/{image['id']}", headers=auth)
    assert not stored.exists()
