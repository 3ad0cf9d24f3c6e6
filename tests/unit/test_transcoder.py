import io

import pytest
from PIL import Image

from src.domain.entities.media import SizeRule, Tier
from src.domain.exceptions import ImageDecodeError, UnsupportedMediaTypeError
from src.domain.services.transcoder import TranscoderService, ensure_allowed_mime, normalize_mime

LARGE = SizeRule.bounding_box(Tier.LARGE, 1920, 1920, quality=85)
MEDIUM = SizeRule.short_side_scale(Tier.MEDIUM, 500, quality=85)
THUMB = SizeRule.bounding_box(Tier.THUMB, 150, 150, quality=80)


def _open(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


def test_mime_aliases():
    assert normalize_mime("image/JPG") == "image/jpeg"
    assert normalize_mime("image/png; charset=binary") == "image/png"
    assert ensure_allowed_mime("image/pjpeg") == "image/jpeg"


def test_disallowed_mime():
    with pytest.raises(UnsupportedMediaTypeError) as exc:
        ensure_allowed_mime("image/gif")
    assert exc.value.check == "type"
    with pytest.raises(UnsupportedMediaTypeError):
        ensure_allowed_mime(None)


def test_probe_reads_dimensions_and_format(make_image):
    info = TranscoderService.probe(make_image(640, 480, "PNG"))
    assert (info.width, info.height, info.mime_type) == (640, 480, "image/png")


def test_multi_picture_jpeg_reads_as_jpeg(make_camera_jpeg):
    data = make_camera_jpeg(300, 200)
    assert _open(data).format == "MPO"
    info = TranscoderService.probe(data)
    assert (info.width, info.height, info.mime_type) == (300, 200, "image/jpeg")
    assert ensure_allowed_mime("image/mpo") == "image/jpeg"

    result = TranscoderService().transcode(data, info.mime_type, THUMB)
    assert _open(result.data).format == "JPEG"
    assert (result.width, result.height) == (150, 100)


def test_decode_garbage_raises():
    with pytest.raises(ImageDecodeError):
        TranscoderService.decode(b"definitely not an image")
    with pytest.raises(ImageDecodeError):
        TranscoderService.probe(b"")


def test_jpeg_short_side(make_image):
    out = TranscoderService().transcode(make_image(2000, 1000), "image/jpeg", MEDIUM)
    assert (out.width, out.height) == (1000, 500)
    img = _open(out.data)
    assert img.format == "JPEG"
    assert img.size == (1000, 500)
    assert out.size == len(out.data)


def test_png_stays_png_and_keeps_alpha(make_image):
    data = make_image(400, 200, "PNG", mode="RGBA")
    out = TranscoderService().transcode(data, "image/png", THUMB)
    img = _open(out.data)
    assert img.format == "PNG"
    assert img.mode == "RGBA"
    assert img.size == (150, 75)


def test_webp_output(make_image):
    out = TranscoderService().transcode(make_image(300, 300, "WEBP"), "image/webp", THUMB)
    assert _open(out.data).format == "WEBP"
    assert (out.width, out.height) == (150, 150)


def test_rule_that_would_enlarge_keeps_size(make_image):
    out = TranscoderService().transcode(make_image(100, 80), "image/jpeg", LARGE)
    assert (out.width, out.height) == (100, 80)


def test_rgba_to_jpeg_is_flattened(make_image):
    img = TranscoderService.decode(make_image(600, 600, "PNG", mode="RGBA"))
    out = TranscoderService.encode(img, "image/jpeg", (300, 300), 80)
    assert _open(out.data).mode == "RGB"


def test_palette_image_resizes():
    img = Image.new("P", (800, 600))
    out = TranscoderService.encode(img, "image/png", (400, 300), 85)
    assert (out.width, out.height) == (400, 300)
