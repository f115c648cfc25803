"""Tests for the local and S3 compatible storage backends."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from src.storage import CloudStorage, LocalStorage, get_storage


class TestLocalStorage:
    def test_upload_download_delete(self, storage):
        ref = storage.upload(b"audio bytes", "user-episodes/job-1.wav")

        assert ref.startswith("file://")
        assert ref == storage.make_ref("user-episodes/job-1.wav")
        assert storage.exists("user-episodes/job-1.wav")
        assert storage.download(ref) == b"audio bytes"

        storage.delete(ref)
        assert not storage.exists("user-episodes/job-1.wav")

    def test_upload_overwrites_existing_object(self, storage):
        storage.upload(b"first", "key.wav")
        ref = storage.upload(b"second", "key.wav")
        assert storage.download(ref) == b"second"

    def test_delete_missing_object_is_a_no_op(self, storage):
        storage.delete(storage.make_ref("never/uploaded.wav"))

    def test_download_missing_object_raises(self, storage):
        with pytest.raises(RuntimeError):
            storage.download(storage.make_ref("never/uploaded.wav"))

    def test_keys_cannot_escape_the_root(self, storage):
        with pytest.raises(ValueError):
            storage.upload(b"x", "../outside.wav")

    def test_foreign_reference_is_rejected(self, storage):
        with pytest.raises(ValueError):
            storage.download("s3://bucket/key.wav")


def client_error(code: str, operation: str = "HeadObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestCloudStorage:
    @pytest.fixture
    def s3_client(self):
        return MagicMock()

    @pytest.fixture
    def cloud(self, s3_client):
        return CloudStorage(client=s3_client, bucket_name="episodes")

    def test_upload_returns_bucket_reference(self, cloud, s3_client):
        ref = cloud.upload(b"wav", "/user-episodes/job-1.wav")

        assert ref == "s3://episodes/user-episodes/job-1.wav"
        s3_client.put_object.assert_called_once_with(
            Bucket="episodes",
            Key="user-episodes/job-1.wav",
            Body=b"wav",
            ContentType="audio/wav",
        )

    def test_download_reads_body(self, cloud, s3_client):
        s3_client.get_object.return_value = {"Body": MagicMock(read=MagicMock(return_value=b"wav"))}

        assert cloud.download("s3://episodes/user-episodes/job-1.wav") == b"wav"
        s3_client.get_object.assert_called_once_with(
            Bucket="episodes", Key="user-episodes/job-1.wav"
        )

    def test_delete(self, cloud, s3_client):
        cloud.delete("s3://episodes/a/b.wav")
        s3_client.delete_object.assert_called_once_with(Bucket="episodes", Key="a/b.wav")

    def test_exists(self, cloud, s3_client):
        assert cloud.exists("a/b.wav")
        s3_client.head_object.side_effect = client_error("404")
        assert not cloud.exists("a/b.wav")

    def test_exists_propagates_other_errors(self, cloud, s3_client):
        s3_client.head_object.side_effect = client_error("403")
        with pytest.raises(RuntimeError):
            cloud.exists("a/b.wav")

    def test_client_errors_become_runtime_errors(self, cloud, s3_client):
        s3_client.put_object.side_effect = client_error("500", "PutObject")
        with pytest.raises(RuntimeError, match="Error saving"):
            cloud.upload(b"wav", "a/b.wav")

    def test_reference_from_another_bucket_is_rejected(self, cloud):
        with pytest.raises(ValueError):
            cloud.download("s3://other-bucket/a/b.wav")

    def test_missing_bucket_name(self, monkeypatch):
        monkeypatch.setattr("src.storage.cloud.load_dotenv", lambda: None)
        monkeypatch.delenv("BUCKET_NAME", raising=False)
        with pytest.raises(RuntimeError, match="BUCKET_NAME"):
            CloudStorage(client=MagicMock())

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.setattr("src.storage.cloud.load_dotenv", lambda: None)
        monkeypatch.setenv("BUCKET_NAME", "episodes")
        for name in ("BUCKET_ENDPOINT", "BUCKET_KEY_ID", "BUCKET_ACCESS_KEY"):
            monkeypatch.delenv(name, raising=False)
        with pytest.raises(RuntimeError, match="BUCKET_ENDPOINT"):
            CloudStorage()


def test_get_storage(tmp_path):
    assert isinstance(get_storage("local", str(tmp_path)), LocalStorage)
    with pytest.raises(ValueError):
        get_storage("ftp")
