import csv
import io
from decimal import Decimal

import pytest

from models.batch import BatchCreate
from models.device import DeviceRegister
from models.event import EventCreate
from models.keys import reminder_key
from services.batches import BatchService
from services.events import EventService
from services.export import ExportService, flatten, to_csv
from services.storage import PhotoStorage
from services.users import UserService


def test_flatten():
    record = {
        "name": "Plain",
        "photoKeys": ["a.jpg", "b.jpg"],
        "metadata": {"ph": Decimal("4.5"), "smell": {"sour": True}},
        "notes": None,
        "count": Decimal("3"),
        "isPublic": False,
    }
    assert flatten(record) == {
        "name": "Plain",
        "photoKeys": '["a.jpg", "b.jpg"]',
        "metadata.ph": 4.5,
        "metadata.smell.sour": "true",
        "notes": "",
        "count": 3,
        "isPublic": "false",
    }


def test_to_csv_empty():
    assert to_csv([]) == "recordType\n"


def test_to_csv_header_is_union_in_first_seen_order():
    content = to_csv(
        [
            {"recordType": "batch", "name": "Plain"},
            {"recordType": "device", "token": "t, with comma"},
        ]
    )
    assert content == (
        "recordType,name,token\n"
        "batch,Plain,\n"
        'device,,"t, with comma"\n'
    )


@pytest.fixture
def export_service(entities):
    yield ExportService(entities=entities)


def test_export_user_data(export_service, entities, memory_store):
    batches = BatchService(entities=entities, storage=PhotoStorage(offline=True))
    batch = batches.create_batch("u1", BatchCreate(name="Plain", stage="stage1_open"))
    batches.create_batch("u2", BatchCreate(name="Not mine", stage="stage1_open"))
    EventService(entities=entities).create_event(
        batch.batch_id,
        "u1",
        EventCreate(type="observation", description="Fizzy", metadata={"ph": 4}),
    )
    UserService(entities=entities).register_device(
        "u1", DeviceRegister(deviceId="d1", platform="android", token="tok")
    )
    memory_store.put(
        {
            **reminder_key("u1", "r1"),
            "reminderId": "r1",
            "userId": "u1",
            "batchId": batch.batch_id,
            "scheduledTime": "2030-01-01T00:00:00.000Z",
            "message": "Check",
            "status": "pending",
        }
    )

    rows = list(csv.DictReader(io.StringIO(export_service.export_user_data("u1"))))

    assert [row["recordType"] for row in rows] == ["batch", "event", "reminder", "device"]
    assert rows[0]["name"] == "Plain"
    assert rows[0]["photoKeys"] == "[]"
    assert rows[1]["description"] == "Fizzy"
    assert rows[1]["metadata.ph"] == "4"
    assert rows[1]["name"] == ""
    assert rows[2]["message"] == "Check"
    assert rows[3]["token"] == "tok"
    assert "Not mine" not in {row["name"] for row in rows}


def test_export_with_no_data(export_service):
    assert export_service.export_user_data("nobody") == "recordType\n"
