"""Shared test fixtures for object stores, AWS credentials, and mocked S3."""

from collections.abc import Iterator
from typing import Any

import boto3
import pytest
from moto import mock_aws

from iiif_publish.lib.publisher.storage import StoreError
from iiif_publish.lib.publisher.types import ContentType

TEST_BUCKET = "iiif-test-bucket"


class RecordingStore:
    """In-memory ObjectStore that records every call."""

    def __init__(self, url: str = "https://iiif-test-bucket.s3.amazonaws.com") -> None:
        self.url = url
        self.puts: list[tuple[str, str, ContentType]] = []
        self.redirects: list[tuple[str, str]] = []

    def bucket_url(self) -> str:
        return self.url

    def put_object(self, key: str, local_path: str, content_type: ContentType) -> None:
        self.puts.append((key, local_path, content_type))

    def add_redirect(self, from_key: str, to_url: str) -> None:
        self.redirects.append((from_key, to_url))


@pytest.fixture
def recording_store() -> RecordingStore:
    """A fresh recording store."""
    return RecordingStore()


@pytest.fixture
def aws_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fake AWS credentials and bucket settings so no real account is touched."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    monkeypatch.setenv("AWS_BUCKET_NAME", TEST_BUCKET)
    for name in ("AWS_ENDPOINT_URL", "AWS_PUBLIC_URL", "UPLOAD_ACL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def s3_client(aws_env: None) -> Iterator[Any]:
    """Create a moto-mocked S3 client and bucket."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=TEST_BUCKET)
        yield client


class FailingStore(RecordingStore):
    """ObjectStore whose transfers and redirects always fail."""

    def put_object(self, key: str, local_path: str, content_type: ContentType) -> None:
        raise StoreError(key, "upload failed: connection reset")

    def add_redirect(self, from_key: str, to_url: str) -> None:
        raise StoreError(from_key, "redirect failed: access denied")


@pytest.fixture
def failing_store() -> FailingStore:
    """A store that rejects every call."""
    return FailingStore()
