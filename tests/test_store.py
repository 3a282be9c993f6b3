import io

import pytest
from sqlalchemy import select

from signage.core.errors import NotFoundError, ValidationError
from signage.db import Database, GlobalConfig, Image, ImageList
from signage.db.seed import seed_default_data
from signage.store import image_lists, images, uploads


@pytest.fixture
def db(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'store.db'}")
    database.create_all()
    yield database
    database.dispose()


def test_seed_runs_once(db):
    with db.session() as session:
        assert seed_default_data(session) is True
        assert seed_default_data(session) is False
        assert len(session.scalars(select(Image)).all()) == 2
        assert len(session.scalars(select(GlobalConfig)).all()) == 1


def test_seed_recreates_missing_default_list(db):
    with db.session() as session:
        seed_default_data(session)
        session.delete(image_lists.find_image_list(session, "Default"))
        session.commit()

        assert seed_default_data(session) is False
        default = image_lists.find_image_list(session, "Default")
        assert default is not None
        assert default.images == []


def test_delete_image_renumbers_positions(db):
    with db.session() as session:
        a = images.create_image(session, "https://example.com/a.jpg")
        b = images.create_image(session, "https://example.com/b.jpg")
        c = images.create_image(session, "https://example.com/c.jpg")
        show = image_lists.create_image_list(session, "Show")
        image_lists.replace_images(session, show.id, [a.id, b.id, a.id, c.id])

        images.delete_image(session, a.id)

    with db.session() as session:
        show = session.get(ImageList, show.id)
        assert [image.url for image in show.images] == ["https://example.com/b.jpg", "https://example.com/c.jpg"]
        assert [entry.position for entry in show.entries] == [0, 1]


def test_lookup_errors(db):
    with db.session() as session:
        with pytest.raises(NotFoundError):
            images.get_image(session, "missing")
        with pytest.raises(NotFoundError):
            image_lists.get_image_list(session, "missing")
        with pytest.raises(ValidationError):
            image_lists.resolve_images(session, ["missing"])


def test_find_image_by_url_returns_oldest(db):
    with db.session() as session:
        first = images.create_image(session, "https://example.com/same.jpg", credit="first")
        images.create_image(session, "https://example.com/same.jpg", credit="second")
        assert images.find_image_by_url(session, "https://example.com/same.jpg").id == first.id
        assert images.find_image_by_url(session, "https://example.com/other.jpg") is None


def test_save_and_remove_upload(tmp_path):
    url = uploads.save_upload(io.BytesIO(b"bytes"), "My Photo.JPEG", tmp_path)
    name = url.removeprefix(uploads.UPLOAD_URL_PREFIX)
    assert name.endswith(".jpeg")
    assert (tmp_path / name).read_bytes() == b"bytes"

    assert uploads.remove_upload(url, tmp_path) is True
    assert uploads.remove_upload(url, tmp_path) is False


def test_remove_upload_ignores_foreign_urls(tmp_path):
    outside = tmp_path / "secret.txt"
    outside.write_text("keep")
    upload_dir = tmp_path / "uploads"
    upload_dir.mkdir()

    assert uploads.remove_upload("https://example.com/a.jpg", upload_dir) is False
    assert uploads.remove_upload("/userImages/../secret.txt", upload_dir) is False
    assert outside.exists()
