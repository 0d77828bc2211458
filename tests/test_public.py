import pytest

from models.batch import BatchCreate
from services.batches import BatchService
from services.public import PublicService
from services.storage import PhotoStorage
from utils.errors import ForbiddenError, NotFoundError


@pytest.fixture
def batch_service(entities):
    yield BatchService(entities=entities, storage=PhotoStorage(offline=True))


@pytest.fixture
def public_service(entities):
    yield PublicService(entities=entities)


def test_public_batch(batch_service, public_service):
    batch = batch_service.create_batch(
        "u1",
        BatchCreate(
            name="Strawberry",
            stage="stage2_bottled",
            notes="private notes",
            isPublic=True,
            publicNote="Come try it",
        ),
    )

    view = public_service.get_public_batch(batch.batch_id)

    assert view.to_api() == {
        "batchId": batch.batch_id,
        "name": "Strawberry",
        "stage": "stage2_bottled",
        "status": "active",
        "startDate": batch.start_date,
        "publicNote": "Come try it",
        "createdAt": batch.created_at,
    }


def test_private_batch_is_forbidden(batch_service, public_service):
    batch = batch_service.create_batch(
        "u1", BatchCreate(name="Secret", stage="stage1_open")
    )
    with pytest.raises(ForbiddenError):
        public_service.get_public_batch(batch.batch_id)


def test_missing_batch(public_service):
    with pytest.raises(NotFoundError):
        public_service.get_public_batch("missing")
