import io

import pytest
from botocore.exceptions import ClientError
from fastapi import UploadFile

from tastebox.app.core.config import Settings
from tastebox.app.core.errors import StorageError
from tastebox.app.services.storage.local import LocalStorageProvider
from tastebox.app.services.storage.s3 import S3StorageProvider


class FakeS3Client:
    def __init__(self, fail=False):
        self.fail = fail
        self.put_calls = []
        self.deleted = []

    def put_object(self, **kwargs):
        if self.fail:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
        self.put_calls.append(kwargs)

    def delete_object(self, **kwargs):
        self.deleted.append(kwargs)


def s3_settings(**overrides):
    values = {"RECIPE_IMAGE_S3_BUCKET": "tastebox-media", "RECIPE_IMAGE_S3_REGION": "sa-east-1"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_local_save_and_delete(tmp_path):
    storage = LocalStorageProvider(tmp_path)
    url = storage.save_bytes("../escape/recipe-image-1.jpg", b"img", "image/jpeg")
    assert url == "/media/recipe-image-1.jpg"
    assert (tmp_path / "recipe-image-1.jpg").read_bytes() == b"img"

    storage.delete_image(url)
    assert not (tmp_path / "recipe-image-1.jpg").exists()
    # Foreign URLs are ignored
    storage.delete_image("https://cdn.example.com/recipe-image-1.jpg")


def test_local_save_upload(tmp_path):
    storage = LocalStorageProvider(tmp_path)
    upload = UploadFile(file=io.BytesIO(b"photo"), filename="me.png")
    url = storage.save_image(upload)
    assert url.startswith("/media/") and url.endswith(".png")


def test_s3_upload_public_url_and_acl():
    client = FakeS3Client()
    storage = S3StorageProvider(s3_settings(), client=client)
    url = storage.save_bytes("recipe-image-1.jpg", b"img", "image/jpeg")
    assert url == "https://tastebox-media.s3.sa-east-1.amazonaws.com/recipe-images/recipe-image-1.jpg"
    call = client.put_calls[0]
    assert call["Key"] == "recipe-images/recipe-image-1.jpg"
    assert call["ACL"] == "public-read"
    assert call["ContentType"] == "image/jpeg"

    storage.delete_image(url)
    assert client.deleted == [{"Bucket": "tastebox-media", "Key": "recipe-images/recipe-image-1.jpg"}]


def test_s3_public_base_url_and_private_acl():
    client = FakeS3Client()
    settings = s3_settings(S3_PUBLIC_BASE_URL="https://media.tastebox.io/", S3_PUBLIC_ACL="false")
    storage = S3StorageProvider(settings, client=client)
    url = storage.save_bytes("a.png", b"img", "image/png")
    assert url == "https://media.tastebox.io/recipe-images/a.png"
    assert "ACL" not in client.put_calls[0]


def test_s3_failure_raises_storage_error():
    storage = S3StorageProvider(s3_settings(), client=FakeS3Client(fail=True))
    with pytest.raises(StorageError):
        storage.save_bytes("a.jpg", b"img", "image/jpeg")


def test_s3_requires_bucket():
    with pytest.raises(StorageError):
        S3StorageProvider(Settings(_env_file=None, RECIPE_IMAGE_S3_BUCKET=None), client=FakeS3Client())
