# streamstats/services/storage/s3_storage.py
from __future__ import annotations

import gzip
import shutil
import tempfile
from pathlib import Path
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from streamstats.common.logging import get_logger
from streamstats.common.settings import StorageConfig, get_settings
from streamstats.domain.errors import StorageFailure
from streamstats.domain.ports.storage import RecordingStoragePort

logger = get_logger()


class S3RecordingStorage(RecordingStoragePort):
    """
    S3-compatible storage for finished recordings (AWS, StackPath, B2, MinIO).
    Uploads are gzip-compressed before they leave the host.
    """

    def __init__(self, config: Optional[StorageConfig] = None, *, client: Any = None) -> None:
        self.cfg = config or get_settings().storage
        if not self.cfg.bucket:
            raise ValueError("storage bucket is not configured (STORAGE__BUCKET)")
        self._client = client or boto3.client(
            "s3",
            endpoint_url=self.cfg.endpoint_url or None,
            aws_access_key_id=self.cfg.access_key_id,
            aws_secret_access_key=self.cfg.secret_access_key,
            region_name=self.cfg.region,
            config=Config(signature_version="s3v4"),
        )

    def key_for(self, local_path: Path) -> str:
        return f"{self.cfg.key_prefix}{Path(local_path).name}"

    def location_for(self, key: str) -> str:
        if self.cfg.endpoint_url:
            return f"{self.cfg.endpoint_url.rstrip('/')}/{self.cfg.bucket}/{key}"
        return f"https://{self.cfg.bucket}.s3.{self.cfg.region}.amazonaws.com/{key}"

    # ---- Port API -------------------------------------------------------------
    def store(self, local_path: Path) -> str:
        path = Path(local_path)
        if not path.is_file():
            raise StorageFailure(f"Recording not found: {path}")

        key = self.key_for(path)
        extra = {"ContentType": self.cfg.content_type, "ACL": self.cfg.acl}
        try:
            if self.cfg.gzip:
                extra["ContentEncoding"] = "gzip"
                # spool to disk past 64 MiB; recordings can be large
                with tempfile.SpooledTemporaryFile(max_size=64 * 1024 * 1024) as buf:
                    with path.open("rb") as src, gzip.GzipFile(fileobj=buf, mode="wb") as gz:
                        shutil.copyfileobj(src, gz)
                    buf.seek(0)
                    self._client.upload_fileobj(buf, self.cfg.bucket, key, ExtraArgs=extra)
            else:
                with path.open("rb") as src:
                    self._client.upload_fileobj(src, self.cfg.bucket, key, ExtraArgs=extra)
        except (BotoCoreError, ClientError, OSError) as e:
            raise StorageFailure(f"Upload of {path.name} failed: {e}", key=key) from e

        location = self.location_for(key)
        logger.info("stored %s at %s", path.name, location)
        return location

    def delete(self, remote_key: str) -> None:
        if not remote_key:
            raise StorageFailure("No key provided to delete().")
        try:
            self._client.delete_object(Bucket=self.cfg.bucket, Key=remote_key)
        except (BotoCoreError, ClientError) as e:
            raise StorageFailure(f"Delete of {remote_key} failed: {e}", key=remote_key) from e
        logger.info("deleted %s from %s", remote_key, self.cfg.bucket)
