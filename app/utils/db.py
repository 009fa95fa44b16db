import time
from datetime import date as DateType
from typing import NamedTuple

import boto3
from botocore.exceptions import ClientError

from app.settings import settings
from app.utils.log import logger

WINDOW_SECONDS = 60


def get_dynamo_resource():
    return boto3.resource("dynamodb", region_name=settings.REGION)


def get_table():
    return get_dynamo_resource().Table(settings.DDB_TABLE_NAME)  # type: ignore


# ─────────────────────────────────────────────────────────────
# Keys
#
#   USER#<sub>        PROFILE
#   USER#<sub>        CLIENT#<client id>
#   USER#<sub>        WORKOUT#<date>#<id>[#SET#<nnn>]
#   CLIENT#<id>       WORKOUT#<date>#<id>[#SET#<nnn>]
#   BLOCKED#<email>   BLOCKED
#   RATE#<client>     WIN#<minute>
# ─────────────────────────────────────────────────────────────


def build_user_pk(user_sub: str) -> str:
    return f"USER#{user_sub}"


def build_client_pk(client_id: str) -> str:
    """Partition holding workouts a coach logged for a client."""
    return f"CLIENT#{client_id}"


def build_client_sk(client_id: str) -> str:
    """The client item itself lives under the coach's USER# partition."""
    return f"CLIENT#{client_id}"


def build_workout_sk(workout_date: DateType, workout_id: str) -> str:
    return f"WORKOUT#{workout_date.isoformat()}#{workout_id}"


def build_set_prefix(workout_date: DateType, workout_id: str) -> str:
    return f"{build_workout_sk(workout_date, workout_id)}#SET#"


def build_set_sk(workout_date: DateType, workout_id: str, set_number: int) -> str:
    """Zero-padded so sets sort in recording order: ...#SET#001, ...#SET#002"""
    return f"{build_set_prefix(workout_date, workout_id)}{set_number:03d}"


def is_set_sk(sk: str) -> bool:
    return "#SET#" in sk


def build_blocked_email_pk(email: str) -> str:
    return f"BLOCKED#{email.strip().lower()}"


def build_rate_limit_pk(client_id: str) -> str:
    return f"RATE#{client_id}"


def build_rate_limit_sk(window_id: int) -> str:
    return f"WIN#{window_id}"


# ─────────────────────────────────────────────────────────────
# Rate limiting
# ─────────────────────────────────────────────────────────────


class RateLimitDdbError(Exception):
    pass


class RateLimitResult(NamedTuple):
    allowed: bool
    retry_after: int


def current_window(now: int) -> tuple[int, int]:
    """(window id, seconds until the next window) for a unix timestamp."""
    return now // WINDOW_SECONDS, WINDOW_SECONDS - (now % WINDOW_SECONDS)


def rate_limit_hit(
    *, client_id: str, limit: int, ttl_seconds: int = 600
) -> RateLimitResult:
    """
    Count one request against the client's counter for the current window.

    The counter is bumped with an atomic ADD, so concurrent Lambdas share it,
    and carries expires_at for TTL cleanup.
    """
    now = int(time.time())
    window_id, retry_after = current_window(now)

    try:
        resp = get_table().update_item(
            Key={
                "PK": build_rate_limit_pk(client_id),
                "SK": build_rate_limit_sk(window_id),
            },
            UpdateExpression="ADD #count :inc SET #expires_at = :expires_at",
            ExpressionAttributeNames={
                "#count": "count",
                "#expires_at": "expires_at",
            },
            ExpressionAttributeValues={
                ":inc": 1,
                ":expires_at": now + ttl_seconds,
            },
            ReturnValues="UPDATED_NEW",
        )
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code")
        logger.warning(f"Rate limit counter update failed ({code}) for {client_id[:64]}")
        raise RateLimitDdbError(str(e)) from e

    count = int(resp["Attributes"]["count"])
    if count > limit:
        logger.info(
            f"Rate limit exceeded for {client_id[:64]}: "
            f"{count}/{limit} in window {window_id}, retry in {retry_after}s"
        )
        return RateLimitResult(False, retry_after)

    return RateLimitResult(True, retry_after)
