"""Read-only share view of a batch the owner marked public."""

from typing import Optional

from models.batch import BatchItem, PublicBatchView
from services.entities import KefirEntities
from utils.errors import ForbiddenError, NotFoundError


class PublicService:
    def __init__(self, entities: Optional[KefirEntities] = None):
        self.entities = entities or KefirEntities()

    def get_public_batch(self, batch_id: str) -> PublicBatchView:
        batch = BatchItem.from_item(self.entities.get_batch_by_id(batch_id))
        if batch is None:
            raise NotFoundError("Batch not found")
        if not batch.is_public:
            raise ForbiddenError("This batch is not publicly shared")

        return PublicBatchView(
            batch_id=batch.batch_id,
            name=batch.name,
            stage=batch.stage,
            status=batch.status,
            start_date=batch.start_date,
            public_note=batch.public_note,
            created_at=batch.created_at,
        )
