"""Object storage backends for IIIF artifact publishing.

Provides the ``ObjectStore`` Protocol that ``PublishConfig`` dispatches to,
and ``S3ObjectStore``, a boto3 implementation for Amazon S3 and
S3-compatible services.
"""

from pathlib import Path
from typing import Any, Protocol

import boto3
from boto3.exceptions import S3UploadFailedError
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from iiif_publish.core.config import Settings, get_settings
from iiif_publish.lib.publisher.types import ContentType

_MULTIPART_THRESHOLD = 25 * 1024 * 1024
_MULTIPART_CHUNKSIZE = 25 * 1024 * 1024


class StoreError(Exception):
    """Raised when a single upload or redirect call to the object store fails.

    Args:
        key: Object key the failing call targeted.
        message: Human-readable error description.
    """

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        self.message = message
        super().__init__(f"{key}: {message}")


class StoreInitError(Exception):
    """Raised when the object store cannot be reached or authenticated."""


class ObjectStore(Protocol):
    """Object storage interface used for publishing.

    Implementations raise ``StoreError`` on transport or auth failures.
    """

    def bucket_url(self) -> str:
        """Return the public base URL of the bucket, without a trailing slash."""
        ...

    def put_object(self, key: str, local_path: str, content_type: ContentType) -> None:
        """Upload a local file to ``key`` with the given content type."""
        ...

    def add_redirect(self, from_key: str, to_url: str) -> None:
        """Create an object at ``from_key`` that redirects to ``to_url``."""
        ...


def create_s3_client(
    region: str | None = None,
    endpoint_url: str | None = None,
    access_key_id: str | None = None,
    secret_access_key: str | None = None,
) -> Any:
    """Create a boto3 S3 client.

    Unset arguments fall back to the boto3 default configuration and
    credential chain.

    Args:
        region: AWS region name.
        endpoint_url: Custom endpoint for S3-compatible services.
        access_key_id: Access key.
        secret_access_key: Secret key.

    Returns:
        Configured boto3 S3 client.
    """
    return boto3.client(
        "s3",
        region_name=region,
        endpoint_url=endpoint_url,
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
    )


class S3ObjectStore:
    """S3 implementation of ObjectStore.

    Two stores are equal when they publish to the same bucket through the
    same endpoint with the same ACL; the boto3 client is not compared.

    Args:
        client: boto3 S3 client.
        bucket: Bucket name.
        region: Bucket region, used to derive the bucket URL.
        endpoint_url: Custom endpoint, used to derive the bucket URL.
        public_url: Public URL overriding the derived bucket URL.
        acl: Canned ACL for uploads and redirects, or None for no ACL.
    """

    def __init__(
        self,
        client: Any,
        bucket: str,
        *,
        region: str | None = None,
        endpoint_url: str | None = None,
        public_url: str | None = None,
        acl: str | None = "public-read",
    ) -> None:
        self._client = client
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_url = public_url
        self.acl = acl or None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "S3ObjectStore":
        """Build a store from settings and verify bucket access.

        Args:
            settings: Publishing settings; loaded from the environment when omitted.

        Returns:
            A store bound to the configured bucket.

        Raises:
            StoreInitError: If no bucket is configured, or the bucket cannot be
                reached with the configured credentials.
        """
        if settings is None:
            settings = get_settings()
        bucket = settings.aws_bucket_name
        if not bucket:
            msg = "No bucket configured. Set AWS_BUCKET_NAME to publish to S3."
            raise StoreInitError(msg)

        try:
            client = create_s3_client(
                region=settings.aws_region,
                endpoint_url=settings.aws_endpoint_url,
                access_key_id=settings.aws_access_key_id,
                secret_access_key=settings.aws_secret_access_key,
            )
            client.head_bucket(Bucket=bucket)
        except ClientError as exc:
            error_code = exc.response["Error"]["Code"]
            if error_code in ("404", "NoSuchBucket"):
                msg = f"Bucket '{bucket}' not found. Verify AWS_BUCKET_NAME is correct."
            elif error_code in ("403", "401"):
                msg = f"Access denied to bucket '{bucket}'. Verify AWS credentials."
            else:
                msg = f"Cannot access bucket '{bucket}': {error_code}"
            raise StoreInitError(msg) from exc
        except BotoCoreError as exc:
            msg = f"Cannot connect to bucket '{bucket}': {exc}"
            raise StoreInitError(msg) from exc

        logger.debug("Bucket s3://{} is accessible", bucket)
        return cls(
            client,
            bucket,
            region=settings.aws_region or client.meta.region_name,
            endpoint_url=settings.aws_endpoint_url,
            public_url=settings.aws_public_url,
            acl=settings.upload_acl,
        )

    def bucket_url(self) -> str:
        if self.public_url:
            return self.public_url.rstrip("/")
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}"
        if self.region in (None, "us-east-1"):
            return f"https://{self.bucket}.s3.amazonaws.com"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com"

    def put_object(self, key: str, local_path: str, content_type: ContentType) -> None:
        """Upload a local file, using multipart transfers for large files.

        Raises:
            StoreError: If the transfer fails.
        """
        transfer_config = TransferConfig(
            multipart_threshold=_MULTIPART_THRESHOLD,
            multipart_chunksize=_MULTIPART_CHUNKSIZE,
            max_concurrency=4,
            use_threads=True,
        )
        extra_args = {"ContentType": str(content_type)}
        if self.acl:
            extra_args["ACL"] = self.acl

        logger.info("Uploading {} to s3://{}/{}", Path(local_path).name, self.bucket, key)
        try:
            self._client.upload_file(
                str(local_path),
                self.bucket,
                key,
                Config=transfer_config,
                ExtraArgs=extra_args,
            )
        except (ClientError, BotoCoreError, S3UploadFailedError) as exc:
            logger.error("Upload to s3://{}/{} failed: {}", self.bucket, key, exc)
            raise StoreError(key, f"upload failed: {exc}") from exc

    def add_redirect(self, from_key: str, to_url: str) -> None:
        """Write an empty website-redirect object at ``from_key``.

        Raises:
            StoreError: If the object cannot be written.
        """
        params: dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": from_key,
            "Body": b"",
            "WebsiteRedirectLocation": to_url,
        }
        if self.acl:
            params["ACL"] = self.acl

        try:
            self._client.put_object(**params)
        except (ClientError, BotoCoreError) as exc:
            logger.error("Redirect s3://{}/{} -> {} failed: {}", self.bucket, from_key, to_url, exc)
            raise StoreError(from_key, f"redirect failed: {exc}") from exc

    def _identity(self) -> tuple[str, str | None, str | None, str | None, str | None]:
        return (self.bucket, self.region, self.endpoint_url, self.public_url, self.acl)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, S3ObjectStore):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __repr__(self) -> str:
        return f"S3ObjectStore(bucket={self.bucket!r}, url={self.bucket_url()!r})"
