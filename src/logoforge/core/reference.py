"""
Reference image handling for logoforge.

A reference image is a user-supplied picture attached to an edit purely for
style extraction. This module loads it from a file path, raw bytes or a data
URL, checks the format, downsizes it to the configured pixel budget and
re-encodes it as JPEG.
"""

import io
import time
from pathlib import Path

from PIL import Image

from logoforge.core.config import Config, get_config
from logoforge.core.models import ImageArtifact
from logoforge.logging_config import get_logger
from logoforge.utils.exceptions import ImageProcessingError, ValidationError

logger = get_logger(__name__)

SUPPORTED_FORMATS = {"PNG", "JPEG", "WEBP", "GIF"}


def _infer_format_from_magic(data: bytes) -> str | None:
    """Infer image format from magic bytes. Returns format name (e.g. PNG, JPEG) or None."""
    if len(data) < 12:
        return None
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return "PNG"
    if data[:2] == b"\xff\xd8":
        return "JPEG"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "WEBP"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "GIF"
    return None


def _normalize_format(fmt: str | None) -> str | None:
    """Normalize a format or MIME type to a SUPPORTED_FORMATS key (JPG -> JPEG, image/png -> PNG)."""
    if not fmt:
        return None
    s = fmt.strip().upper()
    if s.startswith("IMAGE/"):
        s = s.split("/", 1)[1]
    if s == "JPG":
        s = "JPEG"
    return s if s in SUPPORTED_FORMATS else None


def _read_source(source: str | Path | bytes, format_hint: str | None) -> tuple[bytes, str]:
    """
    Return (raw bytes, format) for a path, bytes or data URL source.

    Raises:
        FileNotFoundError: If a path source does not exist
        ValidationError: If the format is unsupported or cannot be determined
    """
    if isinstance(source, str) and source.strip().startswith("data:"):
        artifact = ImageArtifact.from_data_url(source)
        source, format_hint = artifact.data, format_hint or artifact.mime_type

    if isinstance(source, bytes):
        if not source:
            raise ValidationError("Image data is empty", field="image")
        fmt = _normalize_format(format_hint) or _normalize_format(_infer_format_from_magic(source))
        if not fmt:
            raise ValidationError(
                "Could not determine image format from bytes. "
                "Pass format_hint (e.g. 'PNG', 'JPEG', 'image/jpeg').",
                field="image_format",
            )
        return source, fmt

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")
    fmt = _normalize_format(path.suffix.lstrip("."))
    if not fmt:
        raise ValidationError(
            f"Unsupported image format: {path.suffix.upper().lstrip('.')}. "
            f"Supported formats: {', '.join(sorted(SUPPORTED_FORMATS))}",
            field="image_format",
        )
    return path.read_bytes(), fmt


def load_image(data: bytes, image_path: str = "") -> Image.Image:
    """
    Decode image bytes with Pillow.

    Raises:
        ImageProcessingError: If the image cannot be decoded
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
        return image
    except Exception as e:
        raise ImageProcessingError(f"Failed to load image: {str(e)}", image_path=image_path) from e


def resize_image(image: Image.Image, max_pixels: int, min_pixels: int) -> Image.Image:
    """
    Shrink an image to at most max_pixels (aspect ratio preserved).

    Raises:
        ValidationError: If the result would have fewer than min_pixels
    """
    width, height = image.size
    current_pixels = width * height

    if current_pixels <= max_pixels:
        out_w, out_h = width, height
        logger.debug(
            "Reference image no resize needed dimensions=%dx%d max_pixels=%s",
            width,
            height,
            max_pixels,
        )
    else:
        scale_factor = (max_pixels / current_pixels) ** 0.5
        out_w = max(1, int(width * scale_factor))
        out_h = max(1, int(height * scale_factor))
        logger.debug(
            "Reference image resizing %dx%d -> %dx%d max_pixels=%s",
            width,
            height,
            out_w,
            out_h,
            max_pixels,
        )

    if out_w * out_h < min_pixels:
        raise ValidationError(
            f"Reference image too small: {out_w}x{out_h} ({out_w * out_h} pixels) "
            f"is below minimum {min_pixels} pixels.",
            field="image",
        )

    if (out_w, out_h) != (width, height):
        image = image.resize((out_w, out_h), Image.Resampling.LANCZOS)
    return image


def convert_to_rgb(image: Image.Image) -> Image.Image:
    """Convert to RGB, compositing any transparency onto white."""
    if image.mode == "RGB":
        return image
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[3])
        return background
    return image.convert("RGB")


def encode_jpeg(image: Image.Image, quality: int = 95) -> bytes:
    """
    Encode an RGB image as JPEG bytes.

    Raises:
        ImageProcessingError: If encoding fails
    """
    try:
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=quality)
        return buffer.getvalue()
    except Exception as e:
        raise ImageProcessingError(f"Failed to encode image: {str(e)}") from e


def process_reference_image(
    source: str | Path | bytes,
    format_hint: str | None = None,
    config: Config | None = None,
) -> ImageArtifact:
    """
    Prepare a reference image for an edit request.

    Args:
        source: Path to the image file (str or Path), raw image bytes, or a data URL
        format_hint: Optional format when source is bytes (e.g. 'PNG', 'image/jpeg')
        config: Config for the pixel limits and JPEG quality; if None, uses get_config()

    Returns:
        JPEG ImageArtifact ready to attach

    Raises:
        ValidationError: If the format is unsupported or the image is too small
        ImageProcessingError: If decoding or encoding fails
        FileNotFoundError: If a path source does not exist
    """
    cfg = config or get_config()
    logger.info("Processing reference image max_pixels=%s", cfg.max_reference_pixels)
    start_time = time.time()

    is_path = isinstance(source, Path) or (
        isinstance(source, str) and not source.strip().startswith("data:")
    )
    data, _fmt = _read_source(source, format_hint)
    image = load_image(data, image_path=str(source) if is_path else "")
    image = resize_image(
        image, max_pixels=cfg.max_reference_pixels, min_pixels=cfg.min_reference_pixels
    )
    image = convert_to_rgb(image)
    encoded = encode_jpeg(image, quality=cfg.reference_jpeg_quality)

    w, h = image.size
    logger.info(
        "Processed reference image in %.2fs dimensions=%dx%d",
        time.time() - start_time,
        w,
        h,
    )
    return ImageArtifact(data=encoded, mime_type="image/jpeg")
