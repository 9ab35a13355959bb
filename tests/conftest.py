"""Shared test fixtures for cdnsync."""

from __future__ import annotations

import hashlib
import threading
from pathlib import Path

import pytest
from botocore.exceptions import ClientError

from cdnsync.models.environment import EnvironmentTarget
from cdnsync.utils.config_loader import SyncConfig


def md5_hex(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def client_error(code: str, status: int, operation: str = "PutObject") -> ClientError:
    """Build a botocore ClientError with the given code and HTTP status."""
    return ClientError(
        {
            "Error": {"Code": code, "Message": f"{code} from fake store"},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class FakePaginator:
    def __init__(self, client):
        self.client = client

    def paginate(self, Bucket, Prefix=""):
        self.client.list_calls += 1
        if self.client.list_error is not None:
            raise self.client.list_error
        if self.client.list_failures:
            raise self.client.list_failures.pop(0)
        keys = sorted(k for k in self.client.objects if k.startswith(Prefix))
        page_size = self.client.page_size
        if not keys:
            yield {"KeyCount": 0}
            return
        for start in range(0, len(keys), page_size):
            chunk = keys[start:start + page_size]
            yield {
                "Contents": [
                    {
                        "Key": key,
                        "ETag": f'"{self.client.objects[key]["etag"]}"',
                        "Size": len(self.client.objects[key]["body"]),
                        "LastModified": None,
                    }
                    for key in chunk
                ]
            }


class FakeS3Client:
    """In-memory stand-in for a boto3 S3 client.

    ``objects`` maps full object keys to ``{"etag", "body", ...}``.
    ``put_failures`` maps full object keys to a list of exceptions raised
    by successive put_object calls; ``list_failures`` does the same for
    successive listings.
    """

    def __init__(self, page_size: int = 2):
        self.objects: dict[str, dict] = {}
        self.put_calls: list[dict] = []
        self.put_failures: dict[str, list] = {}
        self.always_fail: dict[str, Exception] = {}
        self.list_error: Exception | None = None
        self.list_failures: list = []
        self.list_calls = 0
        self.head_calls: list[str] = []
        self.page_size = page_size
        self._lock = threading.Lock()

    # seeding helpers
    def seed(self, key: str, body: bytes = b"", etag: str | None = None,
             metadata: dict | None = None):
        self.objects[key] = {"etag": etag or md5_hex(body), "body": body, "metadata": metadata}

    def get_paginator(self, name):
        assert name == "list_objects_v2"
        return FakePaginator(self)

    def put_object(self, Bucket, Key, Body, **kwargs):
        with self._lock:
            self.put_calls.append({"Bucket": Bucket, "Key": Key, **kwargs})
            if Key in self.always_fail:
                raise self.always_fail[Key]
            queued = self.put_failures.get(Key)
            if queued:
                raise queued.pop(0)
        data = Body.read()
        with self._lock:
            self.objects[Key] = {
                "etag": md5_hex(data),
                "body": data,
                "content_type": kwargs.get("ContentType"),
                "acl": kwargs.get("ACL"),
                "metadata": kwargs.get("Metadata"),
            }
        return {"ETag": f'"{md5_hex(data)}"'}

    def head_object(self, Bucket, Key):
        self.head_calls.append(Key)
        if Key not in self.objects:
            raise client_error("404", 404, "HeadObject")
        obj = self.objects[Key]
        return {
            "ETag": f'"{obj["etag"]}"',
            "ContentLength": len(obj["body"]),
            "Metadata": obj.get("metadata") or {},
        }

    def put_count(self, key: str) -> int:
        return sum(1 for call in self.put_calls if call["Key"] == key)


@pytest.fixture
def fake_s3() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def target() -> EnvironmentTarget:
    """A prefixed target, so key scoping is exercised."""
    return EnvironmentTarget(
        name="tst",
        bucket="cdn.example.test",
        prefix="tst",
        endpoint_url="https://s3.example.test",
        region="us-central-1",
        acl="public-read",
    )


@pytest.fixture
def build_dir(tmp_path: Path) -> Path:
    """A small build output tree."""
    out = tmp_path / "public"
    (out / "css").mkdir(parents=True)
    (out / "index.html").write_bytes(b"<html>home</html>")
    (out / "css" / "site.css").write_bytes(b"body { color: black; }")
    return out


def write_file(base: Path, key: str, data: bytes) -> Path:
    path = base / key
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


@pytest.fixture
def sync_config(target: EnvironmentTarget, build_dir: Path) -> SyncConfig:
    return SyncConfig(
        target=target,
        access_key="AKIATEST",
        secret_key="secret",
        content_dir=str(build_dir.parent / "content"),
        output_dir=str(build_dir),
        exclude=[".git/*", "*/.git/*"],
        workers=4,
        max_attempts=3,
        base_delay=0.5,
        max_delay=8.0,
    )
