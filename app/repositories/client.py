from typing import List, Protocol

from boto3.dynamodb.conditions import Key

from app.models.client import Client
from app.repositories.base import DynamoRepository
from app.repositories.errors import ClientNotFoundError, ClientRepoError, RepoError
from app.utils import db
from app.utils.log import logger


class ClientRepository(Protocol):
    def get_client(self, coach_sub: str, client_id: str) -> Client: ...
    def list_for_coach(self, coach_sub: str) -> List[Client]: ...
    def delete_all_for_coach(self, coach_sub: str) -> int: ...


class DynamoClientRepository(DynamoRepository[Client]):
    """
    A coach's clients, stored as CLIENT#<id> items under the coach's partition.
    """

    def _to_model(self, item: dict) -> Client:
        try:
            return Client.model_validate(item)
        except Exception as e:
            logger.error(f"_to_model failed for client: {e}")
            raise ClientRepoError("Failed to create client model from item") from e

    def get_client(self, coach_sub: str, client_id: str) -> Client:
        key = {"PK": db.build_user_pk(coach_sub), "SK": db.build_client_sk(client_id)}

        try:
            item = self._safe_get(Key=key)
        except RepoError as e:
            logger.error(f"Repo error fetching client {client_id}: {e}")
            raise ClientRepoError("Failed to fetch client") from e

        if not item:
            raise ClientNotFoundError(
                f"Client {client_id} not found for coach {coach_sub}"
            )
        return self._to_model(item)

    def list_for_coach(self, coach_sub: str) -> List[Client]:
        try:
            items = self._safe_query(
                KeyConditionExpression=Key("PK").eq(db.build_user_pk(coach_sub))
                & Key("SK").begins_with("CLIENT#")
            )
        except RepoError as e:
            logger.error(f"Repo error listing clients for {coach_sub}: {e}")
            raise ClientRepoError("Failed to list clients") from e

        return [self._to_model(item) for item in items]

    def delete_all_for_coach(self, coach_sub: str) -> int:
        clients = self.list_for_coach(coach_sub)

        try:
            deleted = self._safe_batch_delete(c.model_dump() for c in clients)
        except RepoError as e:
            logger.error(f"Repo error deleting clients for {coach_sub}: {e}")
            raise ClientRepoError("Failed to delete clients") from e

        logger.debug(f"Deleted {deleted} clients for coach {coach_sub}")
        return deleted
