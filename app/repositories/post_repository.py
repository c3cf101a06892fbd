import uuid
from typing import Any

import boto3
import pendulum
from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Attr, ConditionBase, Key
from botocore.exceptions import ClientError

from app import settings
from app.models.post import PostStatus
from app.utils import compute_read_time

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def _is_conditional_check_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED


def _sort_descending(items: list[dict[str, Any]], field: str) -> list[dict[str, Any]]:
    return sorted(items, key=lambda i: i.get(field) or "", reverse=True)


class PostRepository:
    OWNER_INDEX = "OwnerIndex"
    STATUS_INDEX = "StatusIndex"

    def __init__(self):
        self._logger = Logger(utc=True)
        self._table = boto3.resource("dynamodb").Table(f"{settings.stage}-posts")

    def create_post(self, data: dict[str, Any]) -> dict[str, Any]:
        now = pendulum.now("UTC").to_iso8601_string()
        item = {
            **data,
            "id": str(uuid.uuid4()),
            "created_at": now,
            "updated_at": now,
            "read_time": compute_read_time(data["content"]),
        }
        # published_at stays absent until the first publication
        item.pop("published_at", None)
        if item.get("status") == PostStatus.PUBLISHED.value:
            item["published_at"] = now
        self._table.put_item(Item=item, ConditionExpression=Attr("id").not_exists())
        self._logger.debug(f"Post stored {item['id']=}")
        return item

    def get_post_by_uuid(self, post_uuid: str) -> dict[str, Any] | None:
        response = self._table.get_item(Key={"id": post_uuid})
        return response.get("Item")

    def get_posts_by_owner(
        self, owner: str, status: str | None = None
    ) -> list[dict[str, Any]]:
        kwargs: dict[str, Any] = {
            "IndexName": self.OWNER_INDEX,
            "KeyConditionExpression": Key("owner").eq(owner),
        }
        if status:
            kwargs["FilterExpression"] = Attr("status").eq(status)
        return _sort_descending(self._query_all(**kwargs), "updated_at")

    def get_posts_by_status(
        self, status: str, order_by: str = "published_at"
    ) -> list[dict[str, Any]]:
        items = self._query_all(
            IndexName=self.STATUS_INDEX,
            KeyConditionExpression=Key("status").eq(status),
        )
        return _sort_descending(items, order_by)

    def get_posts_by_tag(self, tag: str, status: str) -> list[dict[str, Any]]:
        items = self._query_all(
            IndexName=self.STATUS_INDEX,
            KeyConditionExpression=Key("status").eq(status),
            FilterExpression=Attr("tags").contains(tag),
        )
        return _sort_descending(items, "published_at")

    def get_distinct_tags(self, status: str) -> list[str]:
        items = self._query_all(
            IndexName=self.STATUS_INDEX,
            KeyConditionExpression=Key("status").eq(status),
        )
        return sorted({tag for item in items for tag in item.get("tags") or []})

    def update_post(
        self,
        post_uuid: str,
        data: dict[str, Any],
        condition_expression: ConditionBase | None = None,
    ) -> dict[str, Any] | None:
        now = pendulum.now("UTC").to_iso8601_string()
        data = {**data, "updated_at": now}
        if "content" in data:
            data["read_time"] = compute_read_time(data["content"])
        attr_names = {f"#{k}": k for k in data}
        attr_values = {f":{k}": v for k, v in data.items()}
        update_expr = [f"#{k}=:{k}" for k in data]
        if data.get("status") == PostStatus.PUBLISHED.value:
            attr_names["#published_at"] = "published_at"
            attr_values[":published_at"] = now
            update_expr.append(
                "#published_at=if_not_exists(#published_at, :published_at)"
            )
        condition = Attr("id").exists()
        if condition_expression is not None:
            condition = condition & condition_expression
        try:
            response = self._table.update_item(
                Key={"id": post_uuid},
                ConditionExpression=condition,
                UpdateExpression=f"SET {', '.join(update_expr)}",
                ExpressionAttributeNames=attr_names,
                ExpressionAttributeValues=attr_values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as error:
            if _is_conditional_check_failure(error):
                self._logger.info(f"Update condition failed {post_uuid=}")
                return None
            raise
        return response["Attributes"]

    def delete_post(self, post_uuid: str) -> bool:
        try:
            self._table.delete_item(
                Key={"id": post_uuid}, ConditionExpression=Attr("id").exists()
            )
        except ClientError as error:
            if _is_conditional_check_failure(error):
                self._logger.info(f"Nothing to delete {post_uuid=}")
                return False
            raise
        return True

    def _query_all(self, **kwargs) -> list[dict[str, Any]]:
        items = []
        response = self._table.query(**kwargs)
        items.extend(response["Items"])
        while "LastEvaluatedKey" in response:
            response = self._table.query(
                ExclusiveStartKey=response["LastEvaluatedKey"], **kwargs
            )
            items.extend(response["Items"])
        return items
