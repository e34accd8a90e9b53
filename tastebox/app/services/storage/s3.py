"""
S3-compatible blob storage (AWS S3 and MinIO).

Objects are uploaded under ``RECIPE_IMAGE_S3_PREFIX`` and exposed through a public
HTTPS URL. When ``S3_PUBLIC_BASE_URL`` is set (CDN or MinIO gateway) URLs are built
from it; otherwise the virtual-hosted AWS URL is used.
"""
import logging
import mimetypes
from functools import lru_cache
from pathlib import Path
from uuid import uuid4

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile

from tastebox.app.core.config import Settings, get_settings
from tastebox.app.core.errors import StorageError
from tastebox.app.services.storage.base import StorageProvider

logger = logging.getLogger(__name__)


@lru_cache
def _get_s3_client() -> BaseClient:
    """
    Get or create a boto3 S3 client configured for AWS S3 or MinIO.

    - S3_ENDPOINT_URL: custom S3-compatible endpoint (MinIO)
    - S3_FORCE_PATH_STYLE: path-style addressing, required for MinIO
    - RECIPE_IMAGE_S3_REGION: AWS region (default: us-east-1)
    """
    settings = get_settings()

    client_kwargs = {}
    if settings.s3_force_path_style:
        client_kwargs["config"] = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
        )
    if settings.s3_endpoint_url:
        client_kwargs["endpoint_url"] = settings.s3_endpoint_url
    if settings.aws_access_key_id and settings.aws_secret_access_key:
        client_kwargs["aws_access_key_id"] = settings.aws_access_key_id
        client_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
    if settings.aws_session_token:
        client_kwargs["aws_session_token"] = settings.aws_session_token

    region = settings.recipe_image_s3_region or "us-east-1"
    return boto3.client("s3", region_name=region, **client_kwargs)


class S3StorageProvider(StorageProvider):
    def __init__(self, settings: Settings, client: BaseClient | None = None):
        if not settings.recipe_image_s3_bucket:
            raise StorageError("RECIPE_IMAGE_S3_BUCKET is not configured")
        self.bucket = settings.recipe_image_s3_bucket
        self.prefix = settings.recipe_image_s3_prefix.strip("/")
        self.region = settings.recipe_image_s3_region or "us-east-1"
        self.public_base_url = settings.s3_public_base_url.rstrip("/") if settings.s3_public_base_url else None
        self.public_acl = settings.s3_public_acl
        self._client = client

    @property
    def client(self) -> BaseClient:
        if self._client is None:
            self._client = _get_s3_client()
        return self._client

    def _key_for(self, filename: str) -> str:
        return f"{self.prefix}/{Path(filename).name}" if self.prefix else Path(filename).name

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def save_bytes(self, filename: str, data: bytes, content_type: str) -> str:
        key = self._key_for(filename)
        extra = {"ACL": "public-read"} if self.public_acl else {}
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                **extra,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Failed to upload object to s3://%s/%s", self.bucket, key)
            raise StorageError(f"S3 upload failed: {exc}") from exc
        url = self.public_url(key)
        logger.debug("Uploaded object to %s", url)
        return url

    def save_image(self, file: UploadFile) -> str:
        extension = Path(file.filename or "upload.jpg").suffix or ".jpg"
        filename = f"{uuid4().hex}{extension}"
        content_type = file.content_type or mimetypes.guess_type(filename)[0] or "image/jpeg"
        file.file.seek(0)
        return self.save_bytes(filename, file.file.read(), content_type)

    def delete_image(self, url: str) -> None:
        base = self.public_url("")
        if not url.startswith(base):
            return
        key = url[len(base) :]
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError):
            logger.warning("Failed to delete s3://%s/%s", self.bucket, key, exc_info=True)
