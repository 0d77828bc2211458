"""Batch lifecycle: create, list, update, archive and photos."""

import logging
import uuid
from typing import Dict, List, Optional

from models.batch import (BatchCreate, BatchFilters, BatchItem, BatchStatus,
                          BatchUpdate)
from models.keys import batch_key
from services.entities import KefirEntities
from services.storage import PhotoStorage, generate_photo_key
from utils.clock import to_iso, utc_now_iso
from utils.errors import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)


def load_owned_batch(entities: KefirEntities, batch_id: str, user_id: str) -> BatchItem:
    """
    Fetch a batch by ID and check that ``user_id`` owns it.

    Raises:
        NotFoundError: No batch has this ID
        ForbiddenError: The batch belongs to someone else
    """
    batch = BatchItem.from_item(entities.get_batch_by_id(batch_id))
    if batch is None:
        raise NotFoundError("Batch not found")
    if batch.user_id != user_id:
        raise ForbiddenError("You do not have access to this batch")
    return batch


class BatchService:
    def __init__(
        self,
        entities: Optional[KefirEntities] = None,
        storage: Optional[PhotoStorage] = None,
    ):
        self.entities = entities or KefirEntities()
        self.storage = storage or PhotoStorage()

    @property
    def store(self):
        return self.entities.store

    def create_batch(self, user_id: str, data: BatchCreate) -> BatchItem:
        batch_id = str(uuid.uuid4())
        now = utc_now_iso()

        batch = BatchItem(
            **batch_key(user_id, batch_id),
            batch_id=batch_id,
            user_id=user_id,
            name=data.name,
            stage=data.stage,
            status=BatchStatus.ACTIVE,
            start_date=to_iso(data.start_date) if data.start_date else now,
            target_duration=data.target_duration,
            temperature=data.temperature,
            sugar_type=data.sugar_type,
            sugar_amount=data.sugar_amount,
            notes=data.notes,
            photo_keys=[],
            is_public=data.is_public,
            public_note=data.public_note,
            created_at=now,
        )
        written = self.store.put(batch.to_item())
        logger.info("Created batch", extra={"batch_id": batch_id, "user_id": user_id})
        return BatchItem.from_item(written)

    def list_batches(
        self, user_id: str, filters: Optional[BatchFilters] = None
    ) -> List[BatchItem]:
        """
        Newest batches first.

        Stage and status filters are applied before the limit, so a filtered
        listing still returns up to ``limit`` matching batches.
        """
        filters = filters or BatchFilters()
        batches = [
            BatchItem.from_item(item)
            for item in self.entities.get_user_batches(user_id)
        ]
        if filters.stage:
            batches = [b for b in batches if b.stage == filters.stage]
        if filters.status:
            batches = [b for b in batches if b.status == filters.status]

        batches.sort(key=lambda b: b.created_at or b.start_date, reverse=True)
        return batches[: filters.limit]

    def get_batch(self, batch_id: str, user_id: str) -> BatchItem:
        return load_owned_batch(self.entities, batch_id, user_id)

    def update_batch(self, batch_id: str, user_id: str, data: BatchUpdate) -> BatchItem:
        batch = self.get_batch(batch_id, user_id)
        updated = self.store.update(batch.PK, batch.SK, data.changes())
        if not updated:
            raise NotFoundError("Batch not found")
        return BatchItem.from_item(updated)

    def archive_batch(self, batch_id: str, user_id: str) -> BatchItem:
        """Batches are never physically deleted, only archived."""
        batch = self.get_batch(batch_id, user_id)
        updated = self.store.update(
            batch.PK, batch.SK, {"status": BatchStatus.ARCHIVED.value}
        )
        if not updated:
            raise NotFoundError("Batch not found")
        logger.info("Archived batch", extra={"batch_id": batch_id, "user_id": user_id})
        return BatchItem.from_item(updated)

    def get_photo_upload_url(
        self, batch_id: str, user_id: str, filename: str, content_type: str
    ) -> Dict[str, str]:
        self.get_batch(batch_id, user_id)
        photo_key = generate_photo_key(user_id, batch_id, filename)
        upload_url = self.storage.get_upload_url(photo_key, content_type)
        return {"uploadUrl": upload_url, "photoKey": photo_key}

    def add_photo(self, batch_id: str, user_id: str, photo_key: str) -> BatchItem:
        batch = self.get_batch(batch_id, user_id)
        photo_keys = [*batch.photo_keys, photo_key]
        updated = self.store.update(batch.PK, batch.SK, {"photoKeys": photo_keys})
        if not updated:
            raise NotFoundError("Batch not found")
        return BatchItem.from_item(updated)

    def get_photo_urls(self, batch_id: str, user_id: str) -> List[str]:
        batch = self.get_batch(batch_id, user_id)
        return [self.storage.get_download_url(key) for key in batch.photo_keys]
