from pathlib import Path

import pytest

from src.infrastructure.storage.legacy_locator import LegacyImageLocator


def _write(path: Path, size: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path


@pytest.fixture()
def legacy_tree(tmp_path):
    images = tmp_path / "public" / "images"
    _write(images / "photo.jpg", 500)
    _write(images / "photo-300x300.jpg", 200)
    _write(images / "photo-800x800.jpg", 900)
    return tmp_path


def test_largest_variant_wins(legacy_tree):
    locator = LegacyImageLocator(legacy_tree)
    found = locator.locate("anything/photo-300x300.jpg")
    assert found == (legacy_tree / "public" / "images" / "photo-800x800.jpg").resolve()


def test_literal_path_found_first(legacy_tree):
    locator = LegacyImageLocator(legacy_tree)
    expected = (legacy_tree / "public" / "images" / "photo-300x300.jpg").resolve()
    assert locator.locate("/images/photo-300x300.jpg") == expected
    assert locator.locate("/public/images/photo-300x300.jpg") == expected
    assert locator.locate("https://shop.example/images/photo-300x300.jpg?v=3") == expected


def test_unsuffixed_name_falls_back_to_legacy_dirs(tmp_path):
    _write(tmp_path / "public" / "images" / "banner.gif", 10)
    locator = LegacyImageLocator(tmp_path)
    assert locator.locate("/old/location/banner.gif") == (tmp_path / "public" / "images" / "banner.gif").resolve()


def test_unknown_suffix_is_not_guessed(tmp_path):
    _write(tmp_path / "public" / "images" / "photo-640x480.jpg", 1000)
    locator = LegacyImageLocator(tmp_path)
    assert locator.locate("/images/photo.jpg") is None


def test_empty_files_are_ignored(tmp_path):
    _write(tmp_path / "public" / "images" / "empty-800x800.jpg", 0)
    locator = LegacyImageLocator(tmp_path)
    assert locator.locate("/missing/empty-300x300.jpg") is None


def test_miss_and_empty_reference(legacy_tree):
    locator = LegacyImageLocator(legacy_tree)
    assert locator.locate("/images/other.jpg") is None
    assert locator.locate("") is None
    assert locator.locate(None) is None


def test_reference_cannot_leave_root(tmp_path):
    _write(tmp_path / "secret.jpg", 100)
    root = tmp_path / "site"
    root.mkdir()
    locator = LegacyImageLocator(root)
    assert locator.locate("../secret.jpg") is None


def test_normalize():
    assert LegacyImageLocator.normalize("https://x.example/images/a%20b.jpg?v=1") == "images/a b.jpg"
    assert LegacyImageLocator.normalize("\\images\\a.jpg") == "images/a.jpg"
    assert LegacyImageLocator.normalize("./images//a.jpg") == "images/a.jpg"


def test_reference_forms(legacy_tree):
    locator = LegacyImageLocator(legacy_tree)
    path = legacy_tree / "public" / "images" / "photo.jpg"
    assert locator.reference_forms(path) == {"/public/images/photo.jpg", "/images/photo.jpg"}
    assert locator.legacy_directories() == [(legacy_tree / "public" / "images").resolve()]
