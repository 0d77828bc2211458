#!/usr/bin/env python3
"""
Create the kefir tracker table on a DynamoDB endpoint.

Intended for DynamoDB Local during development. The table layout (including
the GSI1 index) comes from ``services.dynamodb.table_schema`` so it matches
what the application queries. Optionally seeds sample users, batches, events
and a device.
"""

import os
import sys
from pathlib import Path

import boto3
import click
from botocore.exceptions import ClientError
from dotenv import load_dotenv

from models.keys import batch_key, device_key, event_key, user_key
from services.dynamodb import DynamoDBStore, table_schema
from services.store import PutRequest
from utils.clock import utc_now_iso

SAMPLE_USERS = [
    {"userId": "test-user-1", "email": "alice@example.com", "name": "Alice Smith"},
    {"userId": "test-user-2", "email": "bob@example.com", "name": "Bob Jones"},
]

SAMPLE_BATCHES = [
    {
        "batchId": "batch-1",
        "userId": "test-user-1",
        "name": "Strawberry Kefir",
        "stage": "stage1_open",
        "status": "active",
    },
    {
        "batchId": "batch-2",
        "userId": "test-user-1",
        "name": "Plain Kefir",
        "stage": "stage2_bottled",
        "status": "in_fridge",
    },
    {
        "batchId": "batch-3",
        "userId": "test-user-2",
        "name": "Blueberry Kefir",
        "stage": "stage1_open",
        "status": "active",
    },
]


def sample_items(now: str) -> list:
    """Users, batches with one starting event each, and one iOS device."""
    items = []

    for user in SAMPLE_USERS:
        items.append({**user_key(user["userId"]), **user, "createdAt": now})

    for batch in SAMPLE_BATCHES:
        items.append(
            {
                **batch_key(batch["userId"], batch["batchId"]),
                **batch,
                "startDate": now,
                "isPublic": False,
                "photoKeys": [],
                "createdAt": now,
            }
        )
        items.append(
            {
                **event_key(batch["batchId"], now),
                "eventId": f"event-{batch['batchId']}-1",
                "batchId": batch["batchId"],
                "userId": batch["userId"],
                "type": "note",
                "timestamp": now,
                "description": "Batch started",
                "createdAt": now,
            }
        )

    items.append(
        {
            **device_key("test-user-1", "device-1"),
            "deviceId": "device-1",
            "userId": "test-user-1",
            "platform": "ios",
            "token": "ExponentPushToken[local-device-1]",
            "deviceName": "iPhone 15 Pro",
            "appVersion": "1.0.0",
            "lastActiveAt": now,
            "createdAt": now,
        }
    )
    return items


def create_table(dynamodb, table_name: str) -> bool:
    """
    Create the table if it does not exist.

    Returns:
        True if the table was created, False if it already existed
    """
    try:
        table = dynamodb.create_table(
            TableName=table_name, BillingMode="PAY_PER_REQUEST", **table_schema
        )
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            return False
        raise

    table.wait_until_exists()
    return True


@click.command()
@click.option(
    "--endpoint-url",
    default=lambda: os.getenv("DYNAMODB_ENDPOINT", "http://localhost:8000"),
    help="DynamoDB endpoint",
    show_default="http://localhost:8000",
)
@click.option(
    "--table-name",
    default=lambda: os.getenv("TABLE_NAME", "kefir-local-table"),
    help="Table to create",
    show_default="kefir-local-table",
)
@click.option("--region", default="us-east-1", show_default=True)
@click.option("--seed", is_flag=True, help="Load sample users, batches and events")
@click.option("--env-file", default=".env", help="Path to .env file", show_default=True)
def main(endpoint_url: str, table_name: str, region: str, seed: bool, env_file: str):
    """Create (and optionally seed) the local kefir tracker table."""
    if Path(env_file).exists():
        load_dotenv(env_file)

    dynamodb = boto3.resource(
        "dynamodb",
        endpoint_url=endpoint_url,
        region_name=region,
        aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID", "local"),
        aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY", "local"),
    )

    try:
        created = create_table(dynamodb, table_name)
    except ClientError as e:
        click.secho(f"✗ Failed to create {table_name}: {e}", fg="red", err=True)
        sys.exit(1)

    if created:
        click.secho(f"✓ Created table {table_name} at {endpoint_url}", fg="green")
    else:
        click.secho(f"Table {table_name} already exists", fg="yellow")

    if seed:
        store = DynamoDBStore(table_name, dynamodb_resource=dynamodb)
        items = sample_items(utc_now_iso())
        store.batch_write([PutRequest(item=item) for item in items])
        click.secho(
            f"✓ Seeded {len(SAMPLE_USERS)} users, {len(SAMPLE_BATCHES)} batches "
            f"and {len(items) - len(SAMPLE_USERS) - len(SAMPLE_BATCHES)} other items",
            fg="green",
        )

    click.echo("\nPoint the API at it with:")
    click.echo(f"  TABLE_NAME={table_name} DYNAMODB_ENDPOINT={endpoint_url}")


if __name__ == "__main__":
    main()
