from src.domain.entities.content import ContentKind
from src.infrastructure.config import MediaSettings
from src.infrastructure.database.repositories.content_repository import ContentImageRepository
from src.infrastructure.database.repositories.media_repository import MediaRepository


def _media(**fields):
    repo = MediaRepository(None, store={})
    defaults = {"filename": "a.jpg", "url": "/uploads/images/original/a.jpg", "mime_type": "image/jpeg"}
    return repo, repo.create(**{**defaults, **fields})


class TestMediaRepositoryInMemory:
    def test_create_get_delete(self):
        repo, entity = _media(width=10, height=20)
        assert repo.get(entity.id) == entity
        assert repo.count() == 1
        assert repo.delete(entity.id) is True
        assert repo.get(entity.id) is None
        assert repo.delete(entity.id) is False

    def test_list_recent_pages_newest_first(self):
        repo = MediaRepository(None, store={})
        ids = [repo.create(filename=f"{i}.jpg", url=f"/u/{i}.jpg", mime_type="image/jpeg").id for i in range(5)]
        page = repo.list_recent(limit=2, offset=1)
        assert [m.id for m in page] == [ids[3], ids[2]]
        assert len(repo.list_recent()) == 5

    def test_updates(self):
        repo, entity = _media()
        assert [m.id for m in repo.list_missing_dimensions()] == [entity.id]
        repo.update_dimensions(entity.id, 640, 480)
        assert repo.list_missing_dimensions() == []
        repo.update_derivatives(entity.id, None, "/u/m.jpg", None, 640, 480)
        updated = repo.get(entity.id)
        assert (updated.url_medium, updated.width) == ("/u/m.jpg", 640)
        assert updated.derivative_urls() == ["/u/m.jpg"]
        assert repo.update_dimensions("missing", 1, 1) is False


class TestContentImageRepositoryInMemory:
    def test_refs_and_updates(self):
        repo = ContentImageRepository(None, store={})
        repo.add(ContentKind.NEWS, "1", "/images/a.jpg", "Launch")
        ref = repo.get(ContentKind.NEWS, "1")
        assert ref.describe() == "News article 1: Launch"
        assert repo.update_url(ContentKind.NEWS, "1", "/uploads/images/original/a.jpg") is True
        assert repo.get(ContentKind.NEWS, "1").url == "/uploads/images/original/a.jpg"
        assert repo.update_url(ContentKind.NEWS, "2", "/x.jpg") is False

    def test_delete_references_per_kind(self):
        repo = ContentImageRepository(None, store={})
        for kind in ContentKind:
            repo.add(kind, "1", "/images/gone.jpg", None)
        repo.add(ContentKind.PRODUCTS, "2", "/images/ok.jpg", None)

        assert repo.delete_references("/images/gone.jpg") == 4
        assert [r.row_id for r in repo.list_refs(ContentKind.PRODUCTS)] == ["2"]
        assert repo.get(ContentKind.HERO_SLIDES, "1").url is None
        assert repo.referenced_urls() == {"/images/ok.jpg"}


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("MEDIA_STORAGE_BACKEND", "Supabase")
    monkeypatch.setenv("MEDIA_PUBLIC_DIR", str(tmp_path))
    monkeypatch.setenv("MEDIA_URL_PREFIX", "media/")
    monkeypatch.setenv("MEDIA_LEGACY_DIRS", "public/images, /static/img/ ,")
    monkeypatch.setenv("MEDIA_JOB_WORKERS", "0")
    settings = MediaSettings.from_env()
    assert settings.storage_backend == "supabase"
    assert settings.upload_root == tmp_path / "uploads" / "images"
    assert settings.url_prefix == "/media"
    assert settings.legacy_dirs == ("public/images", "static/img")
    assert settings.job_workers == 1
