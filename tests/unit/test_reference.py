"""Unit tests for reference image helpers and process_reference_image."""

import base64
import io

import pytest
from PIL import Image

from logoforge.core.config import Config
from logoforge.core.models import ImageArtifact
from logoforge.core.reference import (
    _infer_format_from_magic,
    _normalize_format,
    _read_source,
    convert_to_rgb,
    encode_jpeg,
    load_image,
    process_reference_image,
    resize_image,
)
from logoforge.utils.exceptions import ImageProcessingError, ValidationError


def _encode(image: Image.Image, fmt: str) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


@pytest.mark.unit
class TestNormalizeFormat:
    def test_jpg_to_jpeg(self):
        assert _normalize_format("JPG") == "JPEG"
        assert _normalize_format("jpg") == "JPEG"

    def test_mime_type_stripped(self):
        assert _normalize_format("image/jpeg") == "JPEG"
        assert _normalize_format("image/PNG") == "PNG"

    def test_unsupported_or_empty(self):
        assert _normalize_format("BMP") is None
        assert _normalize_format("") is None
        assert _normalize_format(None) is None


@pytest.mark.unit
class TestInferFormatFromMagic:
    def test_known_formats(self, png_bytes):
        assert _infer_format_from_magic(png_bytes) == "PNG"
        assert _infer_format_from_magic(_encode(Image.new("RGB", (4, 4)), "JPEG")) == "JPEG"
        assert _infer_format_from_magic(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "WEBP"
        assert _infer_format_from_magic(b"GIF89a" + b"\x00" * 10) == "GIF"

    def test_too_short_or_unknown(self):
        assert _infer_format_from_magic(b"\x89PNG") is None
        assert _infer_format_from_magic(b"x" * 20) is None


@pytest.mark.unit
class TestReadSource:
    def test_path(self, tmp_path, png_bytes):
        path = tmp_path / "ref.png"
        path.write_bytes(png_bytes)
        assert _read_source(path, None) == (png_bytes, "PNG")
        assert _read_source(str(path), None) == (png_bytes, "PNG")

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            _read_source(tmp_path / "missing.png", None)

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "ref.bmp"
        path.write_bytes(b"BM" + b"\x00" * 20)
        with pytest.raises(ValidationError) as exc_info:
            _read_source(path, None)
        assert exc_info.value.field == "image_format"

    def test_bytes_with_hint_and_magic(self, png_bytes):
        assert _read_source(png_bytes, "image/png") == (png_bytes, "PNG")
        assert _read_source(png_bytes, None) == (png_bytes, "PNG")

    def test_bytes_unknown_format(self):
        with pytest.raises(ValidationError):
            _read_source(b"x" * 20, None)

    def test_data_url(self, png_bytes):
        url = ImageArtifact(data=png_bytes).to_data_url()
        assert _read_source(url, None) == (png_bytes, "PNG")


@pytest.mark.unit
class TestImageOps:
    def test_load_image_rejects_garbage(self):
        with pytest.raises(ImageProcessingError) as exc_info:
            load_image(b"garbage", image_path="x.png")
        assert exc_info.value.image_path == "x.png"

    def test_resize_noop_when_within_budget(self):
        image = Image.new("RGB", (100, 100))
        assert resize_image(image, max_pixels=20_000, min_pixels=100) is image

    def test_resize_shrinks_and_keeps_aspect(self):
        image = Image.new("RGB", (400, 200))
        resized = resize_image(image, max_pixels=20_000, min_pixels=100)
        w, h = resized.size
        assert w * h <= 20_000
        assert abs(w / h - 2.0) < 0.05

    def test_resize_too_small(self):
        with pytest.raises(ValidationError):
            resize_image(Image.new("RGB", (10, 10)), max_pixels=20_000, min_pixels=2500)

    def test_convert_rgba_composites_on_white(self):
        image = Image.new("RGBA", (4, 4), (0, 0, 0, 0))
        rgb = convert_to_rgb(image)
        assert rgb.mode == "RGB"
        assert rgb.getpixel((0, 0)) == (255, 255, 255)

    def test_convert_grayscale(self):
        assert convert_to_rgb(Image.new("L", (4, 4))).mode == "RGB"

    def test_encode_jpeg(self):
        data = encode_jpeg(Image.new("RGB", (8, 8), "red"), quality=80)
        assert data[:2] == b"\xff\xd8"


@pytest.mark.unit
class TestProcessReferenceImage:
    def test_path_returns_jpeg_artifact(self, tmp_path, png_bytes):
        path = tmp_path / "ref.png"
        path.write_bytes(png_bytes)
        artifact = process_reference_image(path, config=Config())
        assert artifact.mime_type == "image/jpeg"
        assert artifact.data[:2] == b"\xff\xd8"
        assert artifact.open().size == (64, 64)

    def test_downsizes_to_config_budget(self, make_image):
        config = Config(max_reference_pixels=10_000, min_reference_pixels=100)
        artifact = process_reference_image(make_image((300, 300)), config=config)
        w, h = artifact.open().size
        assert w * h <= 10_000

    def test_base64_data_url(self, png_bytes):
        url = "data:image/png;base64," + base64.b64encode(png_bytes).decode()
        artifact = process_reference_image(url, config=Config())
        assert artifact.mime_type == "image/jpeg"

    def test_transparent_png(self):
        data = _encode(Image.new("RGBA", (80, 80), (255, 0, 0, 0)), "PNG")
        artifact = process_reference_image(data, config=Config())
        assert artifact.open().mode == "RGB"

    def test_too_small_rejected(self, make_image):
        with pytest.raises(ValidationError):
            process_reference_image(make_image((10, 10)), config=Config())
