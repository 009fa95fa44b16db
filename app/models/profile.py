from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, field_validator, model_validator

from app.utils.dates import dt_to_iso, now

ProfileSK = Literal["PROFILE"]
Role = Literal["athlete", "coach"]
Plan = Literal["free", "pro"]
GiftAction = Literal["list", "search", "gift"]


class UserProfile(BaseModel):
    PK: str
    SK: ProfileSK

    email: EmailStr
    full_name: str | None = None
    role: Role = "athlete"
    plan: Plan = "free"
    pro_expires_at: datetime | None = None
    pro_gift_message: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @property
    def is_coach(self) -> bool:
        return self.role == "coach"

    def has_active_pro(self, at: datetime | None = None) -> bool:
        if self.plan != "pro" or self.pro_expires_at is None:
            return False
        return self.pro_expires_at > (at or now())

    def summary(self) -> dict:
        return {
            "name": self.full_name,
            "email": self.email,
            "plan": self.plan,
            "pro_expires_at": (
                dt_to_iso(self.pro_expires_at) if self.pro_expires_at else None
            ),
        }


class GiftProRequest(BaseModel):
    action: GiftAction
    email: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def normalise_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    @model_validator(mode="after")
    def email_required_unless_listing(self) -> "GiftProRequest":
        if self.action != "list" and not self.email:
            raise ValueError(f"email is required for action '{self.action}'")
        return self
