"""CSV export of everything a user has stored."""

import csv
import io
import json
from decimal import Decimal
from typing import Any, Dict, List, Optional

from services.entities import KefirEntities

EMPTY_EXPORT = "recordType\n"


def _scalar(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return _scalar(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def flatten(record: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """
    Flatten nested maps into dotted column names.

    Lists are JSON-encoded and missing values become empty strings.
    """
    flat: Dict[str, Any] = {}
    for key, value in record.items():
        column = f"{prefix}.{key}" if prefix else key
        if value is None:
            flat[column] = ""
        elif isinstance(value, (list, tuple, set)):
            flat[column] = json.dumps(list(value), default=_json_default)
        elif isinstance(value, dict):
            flat.update(flatten(value, column))
        elif isinstance(value, bool):
            flat[column] = "true" if value else "false"
        else:
            flat[column] = _scalar(value)
    return flat


def to_csv(rows: List[Dict[str, Any]]) -> str:
    if not rows:
        return EMPTY_EXPORT

    # Union of all columns, in the order they were first seen.
    headers: Dict[str, None] = {}
    for row in rows:
        headers.update(dict.fromkeys(row))

    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer, fieldnames=list(headers), restval="", lineterminator="\n"
    )
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


class ExportService:
    def __init__(self, entities: Optional[KefirEntities] = None):
        self.entities = entities or KefirEntities()

    def export_user_data(self, user_id: str) -> str:
        """Batches, their events, reminders and devices as one CSV document."""
        batches = self.entities.get_user_batches(user_id)
        reminders = self.entities.get_user_reminders(user_id)
        devices = self.entities.get_user_devices(user_id)

        events = []
        for batch in batches:
            events.extend(self.entities.get_batch_events(batch["batchId"]))

        rows = []
        for record_type, records in (
            ("batch", batches),
            ("event", events),
            ("reminder", reminders),
            ("device", devices),
        ):
            rows.extend({"recordType": record_type, **flatten(r)} for r in records)

        return to_csv(rows)
