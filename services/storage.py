"""S3 photo storage: object keys and presigned URLs."""

import logging
import time
from typing import Optional
from urllib.parse import quote

import boto3

from services.parameter_store import ParameterStoreConfig, config as default_config

logger = logging.getLogger(__name__)

PRESIGNED_URL_EXPIRY_SECONDS = 3600
OFFLINE_BASE_URL = "http://localhost:3000/_mock/s3"


def generate_photo_key(user_id: str, batch_id: str, filename: str) -> str:
    """``users/<user>/batches/<batch>/<epoch ms>.<ext>``; extension defaults to jpg."""
    extension = filename.rsplit(".", 1)[-1] if "." in filename else ""
    extension = extension or "jpg"
    timestamp = int(time.time() * 1000)
    return f"users/{user_id}/batches/{batch_id}/{timestamp}.{extension}"


class PhotoStorage:
    def __init__(
        self,
        client=None,
        settings: Optional[ParameterStoreConfig] = None,
        offline: Optional[bool] = None,
    ):
        self.settings = settings or default_config
        self.offline = self.settings.is_offline if offline is None else offline
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("s3")
        return self._client

    @property
    def bucket_name(self) -> str:
        return self.settings.get_required("bucket-name")

    def _mock_url(self, operation: str, key: str) -> str:
        url = f"{OFFLINE_BASE_URL}/{operation}/{quote(key, safe='')}"
        logger.info(f"Offline mode: mock {operation} URL", extra={"photo_key": key})
        return url

    def get_upload_url(self, key: str, content_type: str = "image/jpeg") -> str:
        if self.offline:
            return self._mock_url("upload", key)
        return self.client.generate_presigned_url(
            "put_object",
            Params={"Bucket": self.bucket_name, "Key": key, "ContentType": content_type},
            ExpiresIn=PRESIGNED_URL_EXPIRY_SECONDS,
        )

    def get_download_url(self, key: str) -> str:
        if self.offline:
            return self._mock_url("download", key)
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket_name, "Key": key},
            ExpiresIn=PRESIGNED_URL_EXPIRY_SECONDS,
        )

    def delete_photo(self, key: str) -> None:
        if self.offline:
            logger.info("Offline mode: skipping photo deletion", extra={"photo_key": key})
            return
        self.client.delete_object(Bucket=self.bucket_name, Key=key)
