import io
import os
import sys
from pathlib import Path

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Ensure project root is on sys.path so 'src' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("SUPABASE_DISABLED", "1")
os.environ.setdefault("USE_LOCAL_DB", "0")


def image_bytes(w: int, h: int, fmt: str = "JPEG", color=(128, 64, 32), mode: str = "RGB") -> bytes:
    channels = {"RGB": 3, "RGBA": 4}[mode]
    arr = np.zeros((h, w, channels), dtype=np.uint8)
    arr[:, :] = (*color, 255)[:channels]
    # a gradient keeps encoders from collapsing the image to a few bytes
    arr[:, :, 0] = np.linspace(0, 255, w, dtype=np.uint8)[None, :]
    img = Image.fromarray(arr)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def make_image():
    return image_bytes


def camera_jpeg_bytes(w: int, h: int) -> bytes:
    """A two-frame JPEG as stereo cameras write it; Pillow opens these as MPO."""
    left = Image.open(io.BytesIO(image_bytes(w, h)))
    right = Image.open(io.BytesIO(image_bytes(w, h, color=(32, 64, 128))))
    buf = io.BytesIO()
    left.save(buf, format="MPO", save_all=True, append_images=[right])
    return buf.getvalue()


@pytest.fixture()
def make_camera_jpeg():
    return camera_jpeg_bytes


@pytest.fixture()
def media_env(tmp_path, monkeypatch) -> Path:
    """Point the service at a throwaway public/ tree and empty in-memory stores."""
    from src.infrastructure.database.repositories import content_repository, media_repository

    monkeypatch.setenv("SUPABASE_DISABLED", "1")
    monkeypatch.setenv("MEDIA_STORAGE_BACKEND", "filesystem")
    monkeypatch.setenv("MEDIA_PUBLIC_DIR", str(tmp_path / "public"))
    monkeypatch.setenv("MEDIA_LEGACY_ROOT", str(tmp_path))
    monkeypatch.setenv("MEDIA_MAX_UPLOAD_BYTES", str(1024 * 1024))
    media_repository._MEM_MEDIA.clear()
    for rows in content_repository._MEM_CONTENT.values():
        rows.clear()
    return tmp_path


@pytest.fixture()
def client(media_env) -> TestClient:
    # lazy import after env configured
    from src.main import create_app

    app = create_app()
    return TestClient(app)
