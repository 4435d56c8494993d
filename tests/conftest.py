import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from botocore.exceptions import ClientError
from cvault_files.models.config import S3Config
from cvault_files.services import S3Service, UserFilesService


class FakePaginator:
    """Pages through the fake bucket like the list_objects_v2 paginator."""

    def __init__(self, client):
        self.client = client

    def paginate(self, Bucket, Prefix=""):
        return self._pages(Bucket, Prefix)

    async def _pages(self, Bucket, Prefix):
        self.client.record("list_objects_v2", Prefix)
        keys = sorted(key for key in self.client.objects if key.startswith(Prefix))
        if not keys:
            yield {"KeyCount": 0, "IsTruncated": False}
            return
        size = self.client.page_size
        for start in range(0, len(keys), size):
            page_keys = keys[start:start + size]
            yield {
                "Contents": [
                    {
                        "Key": key,
                        "Size": len(self.client.objects[key]["Body"]),
                        "LastModified": self.client.objects[key]["LastModified"],
                    }
                    for key in page_keys
                ],
                "IsTruncated": start + size < len(keys),
            }


class FakeS3Client:
    """In-memory S3 client, usable as the async context manager returned by
    aiobotocore's create_client.
    """

    def __init__(self, page_size: int = 1000):
        self.page_size = page_size
        self.objects = {}
        self.calls = []
        # keys that delete_objects reports as failed
        self.undeletable = set()
        # operation name -> exception to raise
        self.failures = {}
        self.clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def record(self, operation, argument):
        self.calls.append((operation, argument))
        if operation in self.failures:
            raise self.failures[operation]

    def calls_to(self, operation):
        return [argument for name, argument in self.calls if name == operation]

    def add(self, *keys, body=b""):
        for key in keys:
            self.clock += timedelta(seconds=1)
            self.objects[key] = {"Body": body, "ContentType": None, "LastModified": self.clock}

    def get_paginator(self, name):
        assert name == "list_objects_v2"
        return FakePaginator(self)

    async def put_object(self, Bucket, Key, Body=b"", ContentType=None, **kwargs):
        self.record("put_object", Key)
        self.clock += timedelta(seconds=1)
        self.objects[Key] = {"Body": Body, "ContentType": ContentType, "LastModified": self.clock}
        return {"ResponseMetadata": {"HTTPStatusCode": 200}}

    async def head_object(self, Bucket, Key):
        self.record("head_object", Key)
        if Key not in self.objects:
            raise ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject")
        return {"ResponseMetadata": {"HTTPStatusCode": 200},
                "ContentLength": len(self.objects[Key]["Body"])}

    async def delete_object(self, Bucket, Key):
        self.record("delete_object", Key)
        self.objects.pop(Key, None)
        return {"ResponseMetadata": {"HTTPStatusCode": 204}}

    async def delete_objects(self, Bucket, Delete):
        keys = [obj["Key"] for obj in Delete["Objects"]]
        self.record("delete_objects", keys)
        errors = []
        for key in keys:
            if key in self.undeletable:
                errors.append({"Key": key, "Code": "AccessDenied", "Message": "Access Denied"})
            else:
                self.objects.pop(key, None)
        response = {"ResponseMetadata": {"HTTPStatusCode": 200}}
        if errors:
            response["Errors"] = errors
        return response

    async def generate_presigned_url(self, ClientMethod, Params=None, ExpiresIn=3600):
        self.record("generate_presigned_url", ClientMethod)
        return f"https://s3.test/{Params['Bucket']}/{Params['Key']}?method={ClientMethod}&expires={ExpiresIn}"


@pytest.fixture
def s3_config():
    """Store settings for tests."""
    return S3Config(s3_endpoint_url="http://localhost:9000", bucket="test-bucket", path_prefix="")


@pytest.fixture
def fake_s3():
    """An in-memory bucket, with small pages to exercise pagination."""
    return FakeS3Client(page_size=2)


@pytest.fixture
def s3_service(s3_config, fake_s3):
    """An S3Service talking to the in-memory bucket."""
    service = S3Service(s3_config)
    service._create_client = MagicMock(return_value=fake_s3)
    return service


@pytest.fixture
def files_service(s3_service):
    """A UserFilesService on top of the in-memory bucket."""
    return UserFilesService(s3_service)
