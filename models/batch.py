"""Batch model objects for the kefir tracker."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from models.dynamodb import CamelModel, DynamoDBItem


class BatchStage(str, Enum):
    STAGE1_OPEN = "stage1_open"
    STAGE2_BOTTLED = "stage2_bottled"


class BatchStatus(str, Enum):
    ACTIVE = "active"
    IN_FRIDGE = "in_fridge"
    READY = "ready"
    ARCHIVED = "archived"


class BatchItem(DynamoDBItem):
    """A fermentation run owned by a single user."""

    GSI1PK: str = Field(alias="GSI1PK")  # BATCH#{batch_id}
    GSI1SK: str = Field(alias="GSI1SK")  # USER#{user_id}
    batch_id: str
    user_id: str
    name: str
    stage: BatchStage
    status: BatchStatus = BatchStatus.ACTIVE
    start_date: str
    target_duration: Optional[float] = None  # hours
    temperature: Optional[float] = None  # Celsius
    sugar_type: Optional[str] = None
    sugar_amount: Optional[float] = None  # grams
    notes: Optional[str] = None
    photo_keys: List[str] = Field(default_factory=list)
    is_public: bool = False
    public_note: Optional[str] = None


class BatchCreate(CamelModel):
    """Model for creating new batches - excludes generated fields."""

    name: str = Field(..., min_length=1, max_length=100)
    stage: BatchStage
    start_date: Optional[datetime] = None
    target_duration: Optional[float] = Field(None, ge=1, le=720)
    temperature: Optional[float] = Field(None, ge=10, le=40)
    sugar_type: Optional[str] = Field(None, max_length=50)
    sugar_amount: Optional[float] = Field(None, ge=0, le=1000)
    notes: Optional[str] = Field(None, max_length=1000)
    is_public: bool = False
    public_note: Optional[str] = Field(None, max_length=500)


class BatchUpdate(CamelModel):
    """Partial update; only fields present in the request are written."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    stage: Optional[BatchStage] = None
    status: Optional[BatchStatus] = None
    target_duration: Optional[float] = Field(None, ge=1, le=720)
    temperature: Optional[float] = Field(None, ge=10, le=40)
    sugar_type: Optional[str] = Field(None, max_length=50)
    sugar_amount: Optional[float] = Field(None, ge=0, le=1000)
    notes: Optional[str] = Field(None, max_length=1000)
    is_public: Optional[bool] = None
    public_note: Optional[str] = Field(None, max_length=500)

    def changes(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


class BatchFilters(CamelModel):
    stage: Optional[BatchStage] = None
    status: Optional[BatchStatus] = None
    limit: int = Field(50, ge=1, le=100)


class PhotoUploadRequest(CamelModel):
    filename: str = "photo.jpg"
    content_type: str = "image/jpeg"


class AddPhotoRequest(CamelModel):
    photo_key: str = Field(..., min_length=1)


class PublicBatchView(CamelModel):
    """The subset of a batch that is safe to show on a public share page."""

    batch_id: str
    name: str
    stage: BatchStage
    status: BatchStatus
    start_date: str
    public_note: Optional[str] = None
    created_at: Optional[str] = None
