from unittest import mock

from click.testing import CliRunner

from models.keys import user_pk
from scripts.setup_local_dynamo import (SAMPLE_BATCHES, SAMPLE_USERS,
                                        create_table, main, sample_items)
from services.dynamodb import DynamoDBStore
from services.store import BeginsWith

NOW = "2024-01-01T00:00:00.000Z"


def test_sample_items():
    items = sample_items(NOW)

    # users, batches with one event each, one device
    assert len(items) == len(SAMPLE_USERS) + 2 * len(SAMPLE_BATCHES) + 1
    assert all("PK" in item and "SK" in item for item in items)
    batches = [item for item in items if item["SK"].startswith("BATCH#")]
    assert {b["GSI1PK"] for b in batches} == {
        "BATCH#batch-1",
        "BATCH#batch-2",
        "BATCH#batch-3",
    }


def test_create_table(dynamo_resource):
    assert create_table(dynamo_resource, "kefir-other-table") is True
    assert create_table(dynamo_resource, "kefir-other-table") is False

    indexes = dynamo_resource.Table("kefir-other-table").global_secondary_indexes
    assert [index["IndexName"] for index in indexes] == ["GSI1"]


def test_cli_seeds_existing_table(dynamo_resource, dynamo_store, tmp_path):
    with mock.patch(
        "scripts.setup_local_dynamo.boto3.resource", return_value=dynamo_resource
    ):
        result = CliRunner().invoke(
            main,
            [
                "--table-name",
                "kefir-test-table",
                "--seed",
                "--env-file",
                str(tmp_path / "missing.env"),
            ],
        )

    assert result.exit_code == 0, result.output
    assert "already exists" in result.output
    assert "Seeded 2 users, 3 batches" in result.output

    batches = dynamo_store.query(user_pk("test-user-1"), BeginsWith(prefix="BATCH#"))
    assert {b["batchId"] for b in batches} == {"batch-1", "batch-2"}
    assert dynamo_store.query_gsi1("BATCH#batch-3")[0]["userId"] == "test-user-2"


def test_cli_creates_table(dynamo_resource, tmp_path):
    with mock.patch(
        "scripts.setup_local_dynamo.boto3.resource", return_value=dynamo_resource
    ):
        result = CliRunner().invoke(
            main,
            ["--table-name", "kefir-new-table", "--env-file", str(tmp_path / "x.env")],
        )

    assert result.exit_code == 0, result.output
    assert "Created table kefir-new-table" in result.output
    assert DynamoDBStore("kefir-new-table", dynamodb_resource=dynamo_resource).get(
        "USER#test-user-1", "USER#test-user-1"
    ) is None
