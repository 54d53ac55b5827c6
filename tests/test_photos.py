"""Photo service tests."""

from datetime import UTC, datetime

import pytest

from anniversary.assets import Upload
from anniversary.exceptions import InvalidFileTypeError, NotFoundError, ValidationError
from anniversary.photos import MAX_BATCH_SIZE, PhotoService, parse_metadata
from anniversary.site import Site


@pytest.fixture
def photos(site: Site) -> PhotoService:
    """Photo service with a frozen clock."""
    frozen = datetime(2024, 2, 14, 9, 30, tzinfo=UTC)
    return PhotoService(
        site.photos.store,
        site.photos.assets,
        clock=lambda: frozen,
    )


def _png(png_bytes: bytes, name: str = "us.png") -> Upload:
    return Upload(png_bytes, name, "image/png")


def test_create_batch_applies_metadata_by_position(
    photos: PhotoService,
    png_bytes: bytes,
) -> None:
    """Each upload takes the metadata entry at its index."""
    created = photos.create(
        [_png(png_bytes, "a.png"), _png(png_bytes, "b.jpg")],
        '[{"year": "2021", "caption": "First date"}, {"caption": "Beach"}]',
    )

    assert [p["year"] for p in created] == ["2021", "2024"]
    assert [p["caption"] for p in created] == ["First date", "Beach"]
    for photo in created:
        assert photo["src"] == f"pic/{photo['filename']}"
        assert photo["uploadedAt"] == "2024-02-14T09:30:00.000Z"
        assert photos.assets.exists(photo["filename"])
    assert photos.list() == created


def test_missing_metadata_defaults(photos: PhotoService, png_bytes: bytes) -> None:
    """Without metadata the year is the current year and the caption empty."""
    [photo] = photos.create([_png(png_bytes)])
    assert photo["year"] == "2024"
    assert photo["caption"] == ""


def test_batch_ids_are_unique_within_one_millisecond(
    photos: PhotoService,
    png_bytes: bytes,
) -> None:
    """The batch index disambiguates photos created together."""
    first = photos.create([_png(png_bytes) for _ in range(3)])
    second = photos.create([_png(png_bytes) for _ in range(3)])

    ids = [p["id"] for p in first + second]
    assert len(set(ids)) == len(ids)
    assert [p["id"] for p in first] == [
        "1707903000000-0",
        "1707903000000-1",
        "1707903000000-2",
    ]


def test_non_image_rejects_whole_batch(photos: PhotoService, png_bytes: bytes) -> None:
    """One bad file means no files and no records are written."""
    with pytest.raises(InvalidFileTypeError):
        photos.create(
            [_png(png_bytes), Upload(b"text", "notes.txt", "text/plain")],
        )

    assert photos.list() == []
    assert photos.assets.fs.ls(photos.assets.directory, detail=False) == []


def test_empty_and_oversized_batches(photos: PhotoService, png_bytes: bytes) -> None:
    """Batches must hold between one and twenty photos."""
    with pytest.raises(ValidationError):
        photos.create([])
    with pytest.raises(ValidationError):
        photos.create([_png(png_bytes) for _ in range(MAX_BATCH_SIZE + 1)])


def test_parse_metadata() -> None:
    """Metadata may be text, a list, or absent; non-objects become empty."""
    assert parse_metadata(None) == []
    assert parse_metadata("") == []
    assert parse_metadata('[{"year": "2020"}, 3]') == [{"year": "2020"}, {}]
    assert parse_metadata([{"caption": "x"}]) == [{"caption": "x"}]
    with pytest.raises(ValidationError):
        parse_metadata("{not json")
    with pytest.raises(ValidationError):
        parse_metadata('{"year": "2020"}')


def test_delete_removes_record_and_file(
    photos: PhotoService,
    png_bytes: bytes,
) -> None:
    """Deleting a photo removes both the record and its image."""
    keep, drop = photos.create([_png(png_bytes), _png(png_bytes)])

    photos.delete(drop["id"])

    assert photos.list() == [keep]
    assert not photos.assets.exists(drop["filename"])
    assert photos.assets.exists(keep["filename"])


def test_delete_twice_is_not_found(photos: PhotoService, png_bytes: bytes) -> None:
    """The second delete of the same id reports NotFound."""
    [photo] = photos.create([_png(png_bytes)])
    photos.delete(photo["id"])

    with pytest.raises(NotFoundError):
        photos.delete(photo["id"])


def test_delete_unknown_leaves_store_unchanged(
    photos: PhotoService,
    png_bytes: bytes,
) -> None:
    """Unknown ids do not touch the store file."""
    photos.create([_png(png_bytes)])
    before = photos.store.fs.cat_file(photos.store.path)

    with pytest.raises(NotFoundError):
        photos.delete("missing")

    assert photos.store.fs.cat_file(photos.store.path) == before


def test_delete_with_missing_file_still_removes_record(
    photos: PhotoService,
    png_bytes: bytes,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A file removed out of band does not block deleting the record."""
    [photo] = photos.create([_png(png_bytes)])
    photos.assets.delete(photo["filename"])

    photos.delete(photo["id"])

    assert photos.list() == []
    assert "already missing" in caplog.text


def test_delete_record_with_unusable_filename(
    photos: PhotoService,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A hand-edited record with a non-text filename can still be deleted."""
    photos.store.save_all([{"id": "1", "filename": 123}])

    photos.delete("1")

    assert photos.list() == []
    assert "unusable filename" in caplog.text
