import re
from datetime import datetime, timezone

import pytest

from models.batch import BatchCreate, BatchFilters, BatchUpdate
from services.batches import BatchService
from services.storage import PhotoStorage
from utils.errors import ForbiddenError, NotFoundError


@pytest.fixture
def batch_service(entities):
    yield BatchService(entities=entities, storage=PhotoStorage(offline=True))


def _create(batch_service, user_id="u1", **kwargs):
    data = {"name": "Plain Kefir", "stage": "stage1_open", **kwargs}
    return batch_service.create_batch(user_id, BatchCreate(**data))


def test_create_batch(batch_service, memory_store):
    batch = _create(batch_service, targetDuration=48, temperature=22.5)

    assert batch.status == "active"
    assert batch.stage == "stage1_open"
    assert batch.photo_keys == []
    assert batch.is_public is False
    assert batch.target_duration == 48
    assert batch.start_date == batch.created_at
    assert batch.PK == "USER#u1"
    assert batch.SK == f"BATCH#{batch.batch_id}"
    assert batch.GSI1PK == f"BATCH#{batch.batch_id}"

    item = memory_store.get("USER#u1", f"BATCH#{batch.batch_id}")
    assert item["name"] == "Plain Kefir"
    assert item["targetDuration"] == 48
    assert "notes" not in item


def test_create_batch_with_start_date(batch_service):
    batch = _create(
        batch_service, startDate=datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc)
    )
    assert batch.start_date == "2024-03-01T08:30:00.000Z"


def test_list_batches_newest_first(batch_service, memory_store):
    for day in (1, 3, 2):
        batch = _create(batch_service, name=f"Batch {day}")
        memory_store.update(
            batch.PK, batch.SK, {"createdAt": f"2024-01-0{day}T00:00:00.000Z"}
        )

    batches = batch_service.list_batches("u1")
    assert [b.name for b in batches] == ["Batch 3", "Batch 2", "Batch 1"]

    assert batch_service.list_batches("someone-else") == []


def test_list_batches_filters_before_limit(batch_service):
    for i in range(3):
        _create(batch_service, name=f"Open {i}")
    bottled = _create(batch_service, name="Bottled", stage="stage2_bottled")
    batch_service.archive_batch(bottled.batch_id, "u1")

    open_batches = batch_service.list_batches("u1", BatchFilters(stage="stage1_open"))
    assert len(open_batches) == 3

    archived = batch_service.list_batches("u1", BatchFilters(status="archived", limit=1))
    assert [b.name for b in archived] == ["Bottled"]

    limited = batch_service.list_batches("u1", BatchFilters(limit=2))
    assert len(limited) == 2


def test_get_batch_checks_owner(batch_service):
    batch = _create(batch_service)

    assert batch_service.get_batch(batch.batch_id, "u1").name == "Plain Kefir"

    with pytest.raises(ForbiddenError):
        batch_service.get_batch(batch.batch_id, "u2")

    with pytest.raises(NotFoundError):
        batch_service.get_batch("missing", "u1")


def test_update_batch_only_touches_given_fields(batch_service):
    batch = _create(batch_service, notes="Used raw sugar")

    updated = batch_service.update_batch(
        batch.batch_id, "u1", BatchUpdate(name="Renamed", isPublic=True)
    )

    assert updated.name == "Renamed"
    assert updated.is_public is True
    assert updated.notes == "Used raw sugar"
    assert updated.stage == "stage1_open"
    assert updated.updated_at >= batch.updated_at


def test_update_batch_rejects_other_users(batch_service):
    batch = _create(batch_service)
    with pytest.raises(ForbiddenError):
        batch_service.update_batch(batch.batch_id, "u2", BatchUpdate(name="Mine now"))
    assert batch_service.get_batch(batch.batch_id, "u1").name == "Plain Kefir"


def test_archive_batch_keeps_record(batch_service):
    batch = _create(batch_service)
    archived = batch_service.archive_batch(batch.batch_id, "u1")
    assert archived.status == "archived"
    assert batch_service.get_batch(batch.batch_id, "u1").status == "archived"


def test_photos(batch_service):
    batch = _create(batch_service)

    result = batch_service.get_photo_upload_url(
        batch.batch_id, "u1", "kefir.png", "image/png"
    )
    assert re.fullmatch(
        rf"users/u1/batches/{batch.batch_id}/\d+\.png", result["photoKey"]
    )
    assert result["uploadUrl"].startswith("http://localhost:3000/_mock/s3/upload/")

    batch_service.add_photo(batch.batch_id, "u1", "photo-1.jpg")
    updated = batch_service.add_photo(batch.batch_id, "u1", "photo-2.jpg")
    assert updated.photo_keys == ["photo-1.jpg", "photo-2.jpg"]

    urls = batch_service.get_photo_urls(batch.batch_id, "u1")
    assert urls == [
        "http://localhost:3000/_mock/s3/download/photo-1.jpg",
        "http://localhost:3000/_mock/s3/download/photo-2.jpg",
    ]

    with pytest.raises(ForbiddenError):
        batch_service.get_photo_upload_url(batch.batch_id, "u2", "x.jpg", "image/jpeg")
