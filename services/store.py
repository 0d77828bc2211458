"""
Key-value store facade over the single kefir table.

``KeyValueStore`` defines the generic operations every backend provides.
Callers build keys with ``models.keys`` and never depend on which backend is
active; ``get_store`` picks DynamoDB or the in-memory store from config.

Errors raised by a backend propagate unchanged. The facade never retries.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from utils.clock import utc_now_iso

Item = Dict[str, Any]
Key = Dict[str, str]


class BeginsWith(BaseModel):
    """Sort key starts with ``prefix``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["begins_with"] = "begins_with"
    prefix: str

    def matches(self, value: str) -> bool:
        return value.startswith(self.prefix)


class Equals(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["equals"] = "equals"
    value: str

    def matches(self, value: str) -> bool:
        return value == self.value


class Between(BaseModel):
    """Sort key within ``[low, high]``, both bounds inclusive."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["between"] = "between"
    low: str
    high: str

    def matches(self, value: str) -> bool:
        return self.low <= value <= self.high


SortKeyCondition = Union[BeginsWith, Equals, Between]
IndexKeyCondition = Union[BeginsWith, Equals]


class PutRequest(BaseModel):
    item: Item


class DeleteRequest(BaseModel):
    PK: str
    SK: str


WriteRequest = Union[PutRequest, DeleteRequest]


def check_index_condition(condition: Optional[IndexKeyCondition]) -> None:
    """The secondary index only supports prefix and equality conditions."""
    if condition is not None and not isinstance(condition, (BeginsWith, Equals)):
        raise TypeError(
            f"Unsupported GSI1SK condition: {type(condition).__name__}"
        )


def check_sort_condition(condition: Optional[SortKeyCondition]) -> None:
    if condition is not None and not isinstance(
        condition, (BeginsWith, Equals, Between)
    ):
        raise TypeError(f"Unsupported SK condition: {type(condition).__name__}")


def is_empty_limit(limit: Optional[int]) -> bool:
    """A zero or negative limit selects nothing."""
    return limit is not None and limit <= 0


def stamp(item: Item) -> Item:
    """Copy ``item`` with a fresh ``updatedAt``, ignoring any caller value."""
    return {**item, "updatedAt": utc_now_iso()}


class KeyValueStore(ABC):
    """Generic operations on items keyed by PK/SK with one secondary index."""

    @abstractmethod
    def put(self, item: Item) -> Item:
        """Insert or fully replace the item at its key; returns what was written."""

    @abstractmethod
    def get(self, pk: str, sk: str) -> Optional[Item]:
        """Return the item at the exact key, or None."""

    @abstractmethod
    def query(
        self,
        pk: str,
        sk_condition: Optional[SortKeyCondition] = None,
        limit: Optional[int] = None,
        sort_ascending: bool = True,
    ) -> List[Item]:
        """
        Items in partition ``pk`` matching ``sk_condition``, ordered by SK.

        A zero or negative ``limit`` selects nothing.
        """

    @abstractmethod
    def query_gsi1(
        self,
        gsi1pk: str,
        gsi1sk_condition: Optional[IndexKeyCondition] = None,
        limit: Optional[int] = None,
    ) -> List[Item]:
        """Same as ``query`` but against the GSI1PK/GSI1SK index."""

    @abstractmethod
    def update(self, pk: str, sk: str, updates: Dict[str, Any]) -> Item:
        """
        Merge ``updates`` into an existing item and refresh ``updatedAt``.

        Returns the updated item, or an empty dict when no item exists at the
        key. A missing item is never created.
        """

    @abstractmethod
    def delete(self, pk: str, sk: str) -> None:
        """Remove the item if present."""

    @abstractmethod
    def batch_get(self, keys: List[Key]) -> List[Item]:
        """Items found for ``keys``; missing keys are silently omitted."""

    @abstractmethod
    def batch_write(self, operations: List[WriteRequest]) -> None:
        """Apply a mix of puts and deletes. Each put refreshes ``updatedAt``."""


_store: Optional[KeyValueStore] = None


def get_store() -> KeyValueStore:
    """
    Return the process-wide store.

    Offline mode uses the in-memory store; otherwise the DynamoDB table named
    by the ``table-name`` setting.
    """
    global _store
    if _store is None:
        from services.parameter_store import config

        if config.is_offline:
            from services.memory_store import InMemoryStore

            _store = InMemoryStore()
        else:
            import boto3

            from services.dynamodb import DynamoDBStore

            resource = boto3.resource(
                "dynamodb", endpoint_url=config.dynamodb_endpoint
            )
            _store = DynamoDBStore(config.table_name, dynamodb_resource=resource)
    return _store


def set_store(store: Optional[KeyValueStore]) -> None:
    """Replace the process-wide store. Passing None resets it."""
    global _store
    _store = store
