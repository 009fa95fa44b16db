from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from app.utils.dates import dt_to_iso


class Client(BaseModel):
    """Someone a coach logs workouts for."""

    PK: str  # "USER#<coach sub>"
    SK: str  # "CLIENT#<client id>"
    type: Literal["client"]
    name: str | None = None

    created_at: datetime

    @property
    def client_id(self) -> str:
        return self.SK.split("#", 1)[-1]

    def to_ddb_item(self) -> dict:
        data = self.model_dump(exclude_none=True)
        data["created_at"] = dt_to_iso(self.created_at)
        return data


class BlockedEmail(BaseModel):
    email: str
    blocked_at: datetime
    reason: str

    def to_ddb_item(self, pk: str) -> dict:
        return {
            "PK": pk,
            "SK": "BLOCKED",
            "email": self.email,
            "blocked_at": dt_to_iso(self.blocked_at),
            "reason": self.reason,
        }
