from typing import Protocol

import boto3
from botocore.exceptions import ClientError

from app.settings import settings
from app.utils.log import logger


class StorageError(Exception):
    pass


class AudioStore(Protocol):
    def download_audio(self, storage_path: str) -> bytes: ...


def get_s3_client():
    return boto3.client("s3", region_name=settings.REGION)


class S3AudioStore:
    """Workout recordings uploaded by the app, keyed "<user sub>/<file>"."""

    def __init__(self, client=None, bucket: str | None = None):
        self._client = client or get_s3_client()
        self._bucket = bucket or settings.AUDIO_BUCKET

    def download_audio(self, storage_path: str) -> bytes:
        key = storage_path.lstrip("/")
        logger.debug(f"Downloading s3://{self._bucket}/{key}")

        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=key)
            return resp["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            logger.error(f"S3 get_object failed for {key}: {code}")
            raise StorageError(f"Download failed: {code}") from e
