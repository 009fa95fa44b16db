from typing import Any, Dict, Generic, Iterable, List, TypeVar

from botocore.exceptions import ClientError

from app.repositories.errors import RepoError
from app.utils.log import logger

T = TypeVar("T")


class DynamoRepository(Generic[T]):
    """
    Base class for DynamoDB repositories with common query/error handling.
    """

    def __init__(self, table=None):
        from app.utils import db

        self._table = table or db.get_table()

    def _to_model(self, item: dict) -> T:
        """This should be overridden in subclasses"""
        raise NotImplementedError

    def _safe_query(self, **kwargs) -> List[dict]:
        """
        Execute query, following LastEvaluatedKey until every page is read.
        """
        items: List[dict] = []
        start_key: dict | None = None

        while True:
            if start_key:
                kwargs["ExclusiveStartKey"] = start_key
            try:
                response = self._table.query(**kwargs)
            except ClientError as e:
                logger.exception("DynamoDB query failed")
                raise RepoError("Failed to query database") from e

            items.extend(response.get("Items", []))
            start_key = response.get("LastEvaluatedKey")
            if not start_key:
                return items

    def _safe_scan(self, **kwargs) -> List[dict]:
        items: List[dict] = []
        start_key: dict | None = None

        while True:
            if start_key:
                kwargs["ExclusiveStartKey"] = start_key
            try:
                response = self._table.scan(**kwargs)
            except ClientError as e:
                logger.exception("DynamoDB scan failed")
                raise RepoError("Failed to scan database") from e

            items.extend(response.get("Items", []))
            start_key = response.get("LastEvaluatedKey")
            if not start_key:
                return items

    def _safe_put(self, item: dict, **kwargs) -> None:
        try:
            self._table.put_item(Item=item, **kwargs)
        except ClientError as e:
            logger.exception("DynamoDB put_item failed")
            raise RepoError("Failed to write to database") from e

    def _safe_update(self, **kwargs) -> Dict[str, Any]:
        try:
            return self._table.update_item(**kwargs)
        except ClientError as e:
            logger.exception("DynamoDB update_item failed")
            raise RepoError("Failed to update database") from e

    def _safe_get(self, **kwargs) -> dict | None:
        try:
            resp = self._table.get_item(**kwargs)
            return resp.get("Item")
        except ClientError as e:
            logger.exception("DynamoDB get_item failed")
            raise RepoError("Failed to read from database") from e

    def _safe_batch_delete(self, items: Iterable[dict]) -> int:
        """
        Delete items by their PK/SK. Deleting keys that no longer exist is a no-op,
        so re-running after a partial failure is safe.
        """
        deleted = 0
        try:
            # batch_writer bundles into batches and auto retries unprocessed items
            with self._table.batch_writer() as batch:
                for item in items:
                    batch.delete_item(Key={"PK": item["PK"], "SK": item["SK"]})
                    deleted += 1
        except ClientError as e:
            logger.exception("DynamoDB batch delete failed")
            raise RepoError("Failed to delete from database") from e
        return deleted
