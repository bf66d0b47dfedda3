"""S3-compatible object storage adapter implementing the URL signer port."""

import asyncio
import logging

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from ....core.domain.exceptions import ConfigurationError, StorageError
from ....core.ports.storage_port import UrlSignerPort

logger = logging.getLogger(__name__)


class S3UrlSigner(UrlSignerPort):
    """Mints presigned GET URLs for source PDFs in a private bucket."""

    def __init__(
        self,
        *,
        bucket: str,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        region_name: str = "auto",
        client=None,
    ) -> None:
        if not bucket:
            raise ConfigurationError("Storage bucket not configured")
        self.bucket = bucket
        if client is None:
            if not (access_key_id and secret_access_key):
                raise ConfigurationError(
                    "Storage credentials not configured",
                    context={"bucket": bucket},
                )
            client = boto3.client(
                "s3",
                endpoint_url=endpoint_url or None,
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
                region_name=region_name,
                config=Config(signature_version="s3v4"),
            )
        self.client = client

    async def create_signed_url(self, locator: str, expires_in: int) -> str | None:
        return await asyncio.to_thread(self._presign, locator, expires_in)

    def _presign(self, key: str, expires_in: int) -> str | None:
        try:
            url = self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(
                str(e), cause=e, context={"bucket": self.bucket, "key": key}
            ) from e

        logger.debug("Generated presigned URL", extra={"bucket": self.bucket, "key": key})
        return url or None
