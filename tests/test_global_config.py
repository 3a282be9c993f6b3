from signage.db import GlobalConfig
from signage.store.global_config import get_global_config, get_or_create_global_config


def test_seeded_config(admin_data):
    config = admin_data()["globalConfig"]
    assert config["title"] == "Welcome to the Display!"
    assert config["globalSlideDuration"] == 8
    assert config["unitSystem"] == "imperial"
    assert config["timeFormat"] == "12hr"
    assert config["weatherLocation"] == "Houghton, MI"
    assert config["activeSlideshowId"] is None
    assert config["events"] == []


def test_seed_creates_default_list_with_placeholders(admin_data):
    data = admin_data()
    default = next(lst for lst in data["imageLists"] if lst["name"] == "Default")
    credits = [img["credit"] for img in default["images"]]
    assert credits == ["First slide", "Second slide"]
    assert [img["duration"] for img in default["images"]] == [5, None]


def test_partial_update_keeps_other_fields(client, auth, admin_data):
    response = client.put("/api/admin/global-config", json={"title": "Lobby"}, headers=auth)
    assert response.status_code == 200
    assert response.json()["title"] == "Lobby"
    assert response.json()["globalSlideDuration"] == 8
    assert admin_data()["globalConfig"]["unitSystem"] == "imperial"


def test_update_events_drops_blank_lines(client, auth):
    response = client.put(
        "/api/admin/global-config",
        json={"events": ["Bake sale Friday", "  ", "Concert at 7 "]},
        headers=auth,
    )
    assert response.json()["events"] == ["Bake sale Friday", "Concert at 7"]


def test_unknown_and_snapshot_fields_are_ignored(client, auth):
    response = client.put(
        "/api/admin/global-config",
        json={"title": "Hall", "temp": 99, "bogus": True},
        headers=auth,
    )
    assert response.status_code == 200
    assert response.json()["temp"] is None
    assert "bogus" not in response.json()


def test_active_slideshow_must_exist(client, auth):
    response = client.put("/api/admin/global-config", json={"activeSlideshowId": "nope"}, headers=auth)
    assert response.status_code == 400
    assert response.json()["detail"] == "Selected slideshow does not exist."


def test_active_slideshow_set_and_cleared(client, auth):
    holiday = client.post("/api/admin/image-lists", json={"name": "Holiday"}, headers=auth).json()

    response = client.put("/api/admin/global-config", json={"activeSlideshowId": holiday["id"]}, headers=auth)
    assert response.json()["activeSlideshowId"] == holiday["id"]

    response = client.put("/api/admin/global-config", json={"activeSlideshowId": ""}, headers=auth)
    assert response.json()["activeSlideshowId"] is None


def test_invalid_values_rejected(client, auth):
    for body in (
        {"timeFormat": "13hr"},
        {"unitSystem": "kelvin"},
        {"globalSlideDuration": 0},
        {"title": None},
        {"globalSlideDuration": None},
        {"weatherLocation": None},
        {"unitSystem": None},
        {"events": None},
    ):
        response = client.put("/api/admin/global-config", json=body, headers=auth)
        assert response.status_code == 400, body


def test_null_title_leaves_config_untouched(client, auth, admin_data):
    before = admin_data()["globalConfig"]
    response = client.put("/api/admin/global-config", json={"title": None, "location": "Lobby"}, headers=auth)
    assert response.status_code == 400
    assert "title" in response.json()["detail"]
    assert admin_data()["globalConfig"] == before


def test_null_active_slideshow_clears_selection(client, auth, admin_data):
    response = client.put("/api/admin/global-config", json={"activeSlideshowId": None}, headers=auth)
    assert response.status_code == 200
    assert admin_data()["globalConfig"]["activeSlideshowId"] is None


def test_get_or_create_is_a_singleton(database):
    with database.session() as session:
        first = get_or_create_global_config(session)
        second = get_or_create_global_config(session)
        assert first is second
        assert session.query(GlobalConfig).count() == 1


def test_get_or_create_after_delete(database):
    with database.session() as session:
        session.delete(get_global_config(session))
        session.commit()
        assert get_global_config(session) is None

        config = get_or_create_global_config(session, title="Fresh")
        session.commit()
        assert config.title == "Fresh"
        assert config.global_slide_duration == 7
