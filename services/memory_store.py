"""
In-memory backend for the key-value store facade.

Used in offline mode and by tests. Items are deep-copied on the way in and
out so callers can't mutate stored state by accident.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

from services.store import (DeleteRequest, IndexKeyCondition, Item,
                            KeyValueStore, PutRequest, SortKeyCondition,
                            WriteRequest, check_index_condition,
                            check_sort_condition, is_empty_limit, stamp)

logger = logging.getLogger(__name__)


class InMemoryStore(KeyValueStore):
    """A dict keyed by the (PK, SK) pair."""

    def __init__(self):
        self._items: Dict[Tuple[str, str], Item] = {}

    def __len__(self) -> int:
        return len(self._items)

    def clear(self) -> None:
        self._items.clear()

    def put(self, item: Item) -> Item:
        written = stamp(item)
        self._items[(item["PK"], item["SK"])] = copy.deepcopy(written)
        logger.debug("PUT %s/%s", item["PK"], item["SK"])
        return written

    def get(self, pk: str, sk: str) -> Optional[Item]:
        item = self._items.get((pk, sk))
        return copy.deepcopy(item) if item is not None else None

    @staticmethod
    def _select(
        items: List[Item],
        sort_attribute: str,
        limit: Optional[int],
        sort_ascending: bool,
    ) -> List[Item]:
        if is_empty_limit(limit):
            return []
        items.sort(key=lambda item: item[sort_attribute], reverse=not sort_ascending)
        if limit is not None:
            items = items[:limit]
        return [copy.deepcopy(item) for item in items]

    def query(
        self,
        pk: str,
        sk_condition: Optional[SortKeyCondition] = None,
        limit: Optional[int] = None,
        sort_ascending: bool = True,
    ) -> List[Item]:
        check_sort_condition(sk_condition)
        matches = [
            item
            for (item_pk, item_sk), item in self._items.items()
            if item_pk == pk and (sk_condition is None or sk_condition.matches(item_sk))
        ]
        return self._select(matches, "SK", limit, sort_ascending)

    def query_gsi1(
        self,
        gsi1pk: str,
        gsi1sk_condition: Optional[IndexKeyCondition] = None,
        limit: Optional[int] = None,
    ) -> List[Item]:
        check_index_condition(gsi1sk_condition)
        # Items without both index attributes are not projected into GSI1.
        matches = [
            item
            for item in self._items.values()
            if item.get("GSI1PK") == gsi1pk
            and "GSI1SK" in item
            and (gsi1sk_condition is None or gsi1sk_condition.matches(item["GSI1SK"]))
        ]
        return self._select(matches, "GSI1SK", limit, True)

    def update(self, pk: str, sk: str, updates: Dict[str, Any]) -> Item:
        existing = self._items.get((pk, sk))
        if existing is None:
            return {}
        changes = {k: v for k, v in updates.items() if k not in ("PK", "SK")}
        merged = stamp({**existing, **copy.deepcopy(changes)})
        self._items[(pk, sk)] = merged
        return copy.deepcopy(merged)

    def delete(self, pk: str, sk: str) -> None:
        self._items.pop((pk, sk), None)

    def batch_get(self, keys: List[Dict[str, str]]) -> List[Item]:
        found = []
        seen = set()
        for key in keys:
            composite = (key["PK"], key["SK"])
            if composite in seen or composite not in self._items:
                continue
            seen.add(composite)
            found.append(copy.deepcopy(self._items[composite]))
        return found

    def batch_write(self, operations: List[WriteRequest]) -> None:
        for operation in operations:
            if not isinstance(operation, (PutRequest, DeleteRequest)):
                raise TypeError(f"Invalid batch operation: {type(operation).__name__}")

        for operation in operations:
            if isinstance(operation, PutRequest):
                self.put(operation.item)
            else:
                self.delete(operation.PK, operation.SK)
