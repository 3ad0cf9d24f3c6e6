from unittest.mock import Mock

import pytest

from src.domain.exceptions import StorageError
from src.infrastructure.config import MediaSettings
from src.infrastructure.storage.factory import create_storage_backend
from src.infrastructure.storage.filesystem_storage import FilesystemStorage
from src.infrastructure.storage.supabase_storage import SupabaseStorage


class TestFilesystemStorage:
    def test_put_read_delete(self, tmp_path):
        storage = FilesystemStorage(tmp_path / "uploads" / "images")
        url = storage.put("large/a_large.jpg", b"abc", "image/jpeg")
        assert url == "/uploads/images/large/a_large.jpg"
        assert (tmp_path / "uploads" / "images" / "large" / "a_large.jpg").read_bytes() == b"abc"
        assert storage.exists("large/a_large.jpg")
        assert storage.read("large/a_large.jpg") == b"abc"
        assert storage.delete("large/a_large.jpg") is True
        assert storage.exists("large/a_large.jpg") is False

    def test_delete_missing_is_not_an_error(self, tmp_path):
        assert FilesystemStorage(tmp_path).delete("thumb/nope.jpg") is False

    def test_read_missing_raises(self, tmp_path):
        with pytest.raises(StorageError):
            FilesystemStorage(tmp_path).read("original/nope.jpg")

    def test_path_cannot_escape_base(self, tmp_path):
        storage = FilesystemStorage(tmp_path / "base")
        with pytest.raises(StorageError):
            storage.put("../outside.jpg", b"x", "image/jpeg")
        assert storage.exists("../../etc/passwd") is False

    def test_path_from_url(self, tmp_path):
        storage = FilesystemStorage(tmp_path, url_prefix="uploads/images/")
        assert storage.path_from_url("/uploads/images/original/a%20b.jpg") == "original/a b.jpg"
        assert storage.path_from_url("https://shop.example/uploads/images/thumb/x.png?v=2") == "thumb/x.png"
        assert storage.path_from_url("/images/old.jpg") is None
        assert storage.path_from_url("") is None


def _bucket_client():
    bucket = Mock()
    bucket.get_public_url.side_effect = lambda path: f"https://proj.supabase.co/storage/v1/object/public/media/{path}?"
    client = Mock()
    client.storage.from_.return_value = bucket
    return client, bucket


class TestSupabaseStorage:
    def test_put_uploads_with_content_type(self):
        client, bucket = _bucket_client()
        storage = SupabaseStorage(client, "media")
        url = storage.put("original/a.jpg", b"data", "image/jpeg")
        client.storage.from_.assert_called_with("media")
        kwargs = bucket.upload.call_args.kwargs
        assert kwargs["path"] == "original/a.jpg"
        assert kwargs["file_options"] == {"content-type": "image/jpeg", "upsert": "true"}
        assert url == "https://proj.supabase.co/storage/v1/object/public/media/original/a.jpg"

    def test_failures_become_storage_errors(self):
        client, bucket = _bucket_client()
        bucket.upload.side_effect = RuntimeError("boom")
        bucket.download.side_effect = RuntimeError("boom")
        storage = SupabaseStorage(client, "media")
        with pytest.raises(StorageError):
            storage.put("original/a.jpg", b"data", "image/jpeg")
        with pytest.raises(StorageError):
            storage.read("original/a.jpg")

    def test_exists_and_delete(self):
        client, bucket = _bucket_client()
        bucket.list.return_value = [{"name": "a_thumb.jpg"}, {"name": "a_thumb.jpg.bak"}]
        bucket.remove.return_value = []
        storage = SupabaseStorage(client, "media")
        assert storage.exists("thumb/a_thumb.jpg") is True
        bucket.list.assert_called_with("thumb", {"search": "a_thumb.jpg", "limit": 100})
        assert storage.exists("thumb/other.jpg") is False
        assert storage.delete("thumb/a_thumb.jpg") is False

    def test_path_from_url(self):
        client, _ = _bucket_client()
        storage = SupabaseStorage(client, "media")
        url = "https://proj.supabase.co/storage/v1/object/public/media/medium/a_medium.jpg"
        assert storage.path_from_url(url) == "medium/a_medium.jpg"
        assert storage.path_from_url("/uploads/images/medium/a_medium.jpg") is None


class TestFactory:
    def test_filesystem_backend(self, tmp_path):
        settings = MediaSettings(public_dir=tmp_path)
        storage = create_storage_backend(settings)
        assert isinstance(storage, FilesystemStorage)
        assert storage.base_dir == tmp_path / "uploads" / "images"

    def test_supabase_backend(self):
        client, _ = _bucket_client()
        storage = create_storage_backend(MediaSettings(storage_backend="supabase", bucket="media"), client)
        assert isinstance(storage, SupabaseStorage)
        assert storage.bucket == "media"

    def test_supabase_without_client_falls_back(self, tmp_path):
        settings = MediaSettings(storage_backend="supabase", public_dir=tmp_path)
        assert isinstance(create_storage_backend(settings, None), FilesystemStorage)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_storage_backend(MediaSettings(storage_backend="s3"))
