"""
DynamoDB backend for the key-value store facade.

Items are written as-is through the boto3 table resource. Floats are
converted to ``Decimal`` on the way in and numbers come back out as int or
float, so an item read from the table can be written straight back.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
import botocore
from boto3.dynamodb.conditions import Attr, Key

from services.store import (Between, DeleteRequest, IndexKeyCondition, Item,
                            KeyValueStore, PutRequest, SortKeyCondition,
                            WriteRequest, check_index_condition,
                            check_sort_condition, is_empty_limit, stamp)
from utils.clock import utc_now_iso

logger = logging.getLogger(__name__)

GSI1_INDEX_NAME = "GSI1"
BATCH_GET_LIMIT = 100
BATCH_GET_ATTEMPTS = 5

# Table layout; kept in sync with the deployed table and used by local setup.
table_schema = {
    "KeySchema": [
        {"AttributeName": "PK", "KeyType": "HASH"},
        {"AttributeName": "SK", "KeyType": "RANGE"},
    ],
    "AttributeDefinitions": [
        {"AttributeName": "PK", "AttributeType": "S"},
        {"AttributeName": "SK", "AttributeType": "S"},
        {"AttributeName": "GSI1PK", "AttributeType": "S"},
        {"AttributeName": "GSI1SK", "AttributeType": "S"},
    ],
    "GlobalSecondaryIndexes": [
        {
            "IndexName": GSI1_INDEX_NAME,
            "KeySchema": [
                {"AttributeName": "GSI1PK", "KeyType": "HASH"},
                {"AttributeName": "GSI1SK", "KeyType": "RANGE"},
            ],
            "Projection": {"ProjectionType": "ALL"},
        }
    ],
}


def to_dynamodb(value: Any) -> Any:
    """Convert floats to ``Decimal`` recursively; the resource rejects floats."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamodb(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_dynamodb(v) for v in value]
    return value


def from_dynamodb(value: Any) -> Any:
    """Turn the resource's ``Decimal`` numbers back into int or float."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: from_dynamodb(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamodb(v) for v in value]
    if isinstance(value, set):
        return {from_dynamodb(v) for v in value}
    return value


def _key_condition(name: str, condition: Optional[SortKeyCondition]):
    if condition is None:
        return None
    if isinstance(condition, Between):
        return Key(name).between(condition.low, condition.high)
    if condition.kind == "begins_with":
        return Key(name).begins_with(condition.prefix)
    return Key(name).eq(condition.value)


class DynamoDBStore(KeyValueStore):
    """
    Encapsulates operations on the kefir DynamoDB table.

    Client errors are logged with the table name and re-raised unchanged.
    """

    def __init__(self, table_name: str, dynamodb_resource=None):
        """
        :param table_name: Name of the DynamoDB table.
        :param dynamodb_resource: Optional boto3 resource, mainly for tests.
        """
        self.resource = dynamodb_resource or boto3.resource("dynamodb")
        self.table = self.resource.Table(table_name)

    def _log_client_error(self, action: str, err: botocore.exceptions.ClientError):
        logger.error(
            "Couldn't %s in table %s. Error: %s: %s",
            action,
            self.table.name,
            err.response["Error"]["Code"],
            err.response["Error"]["Message"],
        )

    def put(self, item: Item) -> Item:
        written = stamp(item)
        try:
            self.table.put_item(Item=to_dynamodb(written))
        except botocore.exceptions.ClientError as err:
            self._log_client_error(f"put {item.get('PK')}/{item.get('SK')}", err)
            raise
        return written

    def get(self, pk: str, sk: str) -> Optional[Item]:
        try:
            response = self.table.get_item(Key={"PK": pk, "SK": sk})
        except botocore.exceptions.ClientError as err:
            self._log_client_error(f"get {pk}/{sk}", err)
            raise
        return from_dynamodb(response.get("Item"))

    def _paginate(self, action: str, limit: Optional[int], **kwargs) -> List[Item]:
        items: List[Item] = []
        if is_empty_limit(limit):
            return items
        try:
            while True:
                if limit is not None:
                    kwargs["Limit"] = limit - len(items)
                response = self.table.query(**kwargs)
                items.extend(from_dynamodb(response.get("Items", [])))
                last_key = response.get("LastEvaluatedKey")
                if not last_key or (limit is not None and len(items) >= limit):
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except botocore.exceptions.ClientError as err:
            self._log_client_error(action, err)
            raise
        return items if limit is None else items[:limit]

    def query(
        self,
        pk: str,
        sk_condition: Optional[SortKeyCondition] = None,
        limit: Optional[int] = None,
        sort_ascending: bool = True,
    ) -> List[Item]:
        check_sort_condition(sk_condition)
        expression = Key("PK").eq(pk)
        sk_expression = _key_condition("SK", sk_condition)
        if sk_expression is not None:
            expression = expression & sk_expression

        return self._paginate(
            f"query {pk}",
            limit,
            KeyConditionExpression=expression,
            ScanIndexForward=sort_ascending,
        )

    def query_gsi1(
        self,
        gsi1pk: str,
        gsi1sk_condition: Optional[IndexKeyCondition] = None,
        limit: Optional[int] = None,
    ) -> List[Item]:
        check_index_condition(gsi1sk_condition)
        expression = Key("GSI1PK").eq(gsi1pk)
        sk_expression = _key_condition("GSI1SK", gsi1sk_condition)
        if sk_expression is not None:
            expression = expression & sk_expression

        return self._paginate(
            f"query {GSI1_INDEX_NAME} {gsi1pk}",
            limit,
            IndexName=GSI1_INDEX_NAME,
            KeyConditionExpression=expression,
        )

    def update(self, pk: str, sk: str, updates: Dict[str, Any]) -> Item:
        assignments = []
        names = {}
        values = {}

        for index, (field, value) in enumerate(updates.items()):
            if field in ("PK", "SK", "updatedAt"):
                continue
            names[f"#field{index}"] = field
            values[f":value{index}"] = value
            assignments.append(f"#field{index} = :value{index}")

        names["#updatedAt"] = "updatedAt"
        values[":updatedAt"] = utc_now_iso()
        assignments.append("#updatedAt = :updatedAt")

        try:
            response = self.table.update_item(
                Key={"PK": pk, "SK": sk},
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression=Attr("PK").exists(),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=to_dynamodb(values),
                ReturnValues="ALL_NEW",
            )
        except botocore.exceptions.ClientError as err:
            if err.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return {}
            self._log_client_error(f"update {pk}/{sk}", err)
            raise
        return from_dynamodb(response.get("Attributes", {}))

    def delete(self, pk: str, sk: str) -> None:
        try:
            self.table.delete_item(Key={"PK": pk, "SK": sk})
        except botocore.exceptions.ClientError as err:
            self._log_client_error(f"delete {pk}/{sk}", err)
            raise

    def batch_get(self, keys: List[Dict[str, str]]) -> List[Item]:
        """
        Fetch many items by key, 100 keys per request.

        Keys DynamoDB hands back as unprocessed are requested again, up to
        ``BATCH_GET_ATTEMPTS`` times per chunk; any still left after that are
        logged and treated as missing.
        """
        items: List[Item] = []
        unique_keys = list({(k["PK"], k["SK"]): k for k in keys}.values())
        try:
            for start in range(0, len(unique_keys), BATCH_GET_LIMIT):
                chunk = unique_keys[start : start + BATCH_GET_LIMIT]
                request = {
                    self.table.name: {
                        "Keys": [{"PK": k["PK"], "SK": k["SK"]} for k in chunk]
                    }
                }
                for _ in range(BATCH_GET_ATTEMPTS):
                    response = self.resource.batch_get_item(RequestItems=request)
                    found = response.get("Responses", {}).get(self.table.name, [])
                    items.extend(from_dynamodb(found))
                    request = response.get("UnprocessedKeys") or {}
                    if not request:
                        break
                if request:
                    logger.warning(
                        "Gave up on %d unprocessed keys in table %s",
                        len(request[self.table.name]["Keys"]),
                        self.table.name,
                    )
        except botocore.exceptions.ClientError as err:
            self._log_client_error(f"batch get {len(keys)} keys", err)
            raise
        return items

    def batch_write(self, operations: List[WriteRequest]) -> None:
        if not operations:
            return
        for operation in operations:
            if not isinstance(operation, (PutRequest, DeleteRequest)):
                raise TypeError(f"Invalid batch operation: {type(operation).__name__}")

        try:
            with self.table.batch_writer(overwrite_by_pkeys=["PK", "SK"]) as batch:
                for operation in operations:
                    if isinstance(operation, PutRequest):
                        batch.put_item(Item=to_dynamodb(stamp(operation.item)))
                    else:
                        batch.delete_item(Key={"PK": operation.PK, "SK": operation.SK})
        except botocore.exceptions.ClientError as err:
            self._log_client_error(f"batch write {len(operations)} operations", err)
            raise
