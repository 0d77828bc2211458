import json
import os

# Configuration is read when service modules are imported, so the test
# environment has to be in place first.
os.environ["IS_OFFLINE"] = "true"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_SECURITY_TOKEN"] = "testing"
os.environ["AWS_SESSION_TOKEN"] = "testing"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_ACCOUNT_ID"] = "123456789012"
os.environ["TABLE_NAME"] = "kefir-test-table"
os.environ["BUCKET_NAME"] = "kefir-test-bucket"
os.environ["STAGE"] = "test"
os.environ.pop("DYNAMODB_ENDPOINT", None)
os.environ.pop("EXPO_ACCESS_TOKEN", None)

from unittest import mock  # noqa: E402

import boto3  # noqa: E402
import moto  # noqa: E402
import pytest  # noqa: E402

from services.dynamodb import DynamoDBStore, table_schema  # noqa: E402
from services.entities import KefirEntities  # noqa: E402
from services.memory_store import InMemoryStore  # noqa: E402
from services.store import set_store  # noqa: E402

TABLE_NAME = "kefir-test-table"
BUCKET_NAME = "kefir-test-bucket"


@pytest.fixture(autouse=True)
def memory_store():
    """Every test starts with an empty process-wide in-memory store."""
    store = InMemoryStore()
    set_store(store)
    yield store
    set_store(None)


@pytest.fixture
def dynamo_resource():
    with moto.mock_aws():
        resource = boto3.resource("dynamodb")
        resource.create_table(
            TableName=TABLE_NAME, BillingMode="PAY_PER_REQUEST", **table_schema
        )
        yield resource


@pytest.fixture
def dynamo_store(dynamo_resource):
    yield DynamoDBStore(TABLE_NAME, dynamodb_resource=dynamo_resource)


@pytest.fixture(params=["memory", "dynamodb"])
def kv_store(request):
    """The same contract checks run against both store backends."""
    if request.param == "memory":
        yield InMemoryStore()
    else:
        yield request.getfixturevalue("dynamo_store")


@pytest.fixture
def entities(memory_store):
    yield KefirEntities(memory_store)


@pytest.fixture
def s3_client():
    with moto.mock_aws():
        client = boto3.client("s3")
        client.create_bucket(Bucket=BUCKET_NAME)
        yield client


@pytest.fixture
def scheduler_client():
    yield mock.Mock(boto3.client("scheduler"))


@pytest.fixture
def api_event():
    """Build an API Gateway HTTP API (v2) event with Cognito JWT claims."""

    def build(
        method="GET",
        path="/",
        body=None,
        path_params=None,
        query=None,
        user_id="user-1",
        email="user-1@example.com",
    ):
        event = {
            "version": "2.0",
            "rawPath": path,
            "pathParameters": path_params,
            "queryStringParameters": query,
            "requestContext": {"http": {"method": method, "sourceIp": "127.0.0.1"}},
            "isBase64Encoded": False,
        }
        if body is not None:
            event["body"] = body if isinstance(body, str) else json.dumps(body)
        if user_id is not None:
            event["requestContext"]["authorizer"] = {
                "jwt": {"claims": {"sub": user_id, "email": email}}
            }
        return event

    return build


@pytest.fixture
def lambda_context():
    context = mock.Mock()
    context.function_name = "kefir-test"
    context.aws_request_id = "request-id"
    context.get_remaining_time_in_millis.return_value = 30000
    yield context
