"""
Value types shared by the composer, the session and the providers.
"""

import base64
import binascii
import io
import re
import time
from dataclasses import dataclass, field
from typing import Literal

from PIL import Image, UnidentifiedImageError

from logoforge.core.catalog import Decoration, Element, Font, LogoStyle
from logoforge.utils.exceptions import ImageProcessingError, ValidationError

Role = Literal["user", "assistant"]

_DATA_URL_RE = re.compile(r"^data:(?P<mime>image/[\w.+-]+);base64,", re.IGNORECASE)

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


@dataclass(frozen=True)
class GenerationConfig:
    """The user's logo choices. Exactly one value per category."""

    server_name: str = ""
    element: Element = Element.FIRE
    font: Font = Font.GOTHIC
    style: LogoStyle = LogoStyle.EPIC_MEDIEVAL
    decoration: Decoration = Decoration.SWORD


@dataclass(frozen=True)
class ChatMessage:
    """One entry in the edit conversation."""

    role: Role
    text: str
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class ImageArtifact:
    """
    An encoded image plus its MIME type.

    Holds raw bytes; base64 and data-URL forms are derived on demand so a
    data-URI prefix never travels to the wire by accident.
    """

    data: bytes = field(repr=False)
    mime_type: str = "image/png"

    def __post_init__(self) -> None:
        if not self.data:
            raise ValidationError("Image data is empty", field="image")

    @classmethod
    def from_base64(cls, payload: str, mime_type: str = "image/png") -> "ImageArtifact":
        """
        Build an artifact from base64 text.

        A leading data-URI prefix is stripped; its MIME type wins over mime_type.

        Raises:
            ValidationError: If the payload is not valid base64
        """
        payload = payload.strip()
        match = _DATA_URL_RE.match(payload)
        if match:
            mime_type = match.group("mime").lower()
            payload = payload[match.end() :]
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError(f"Invalid base64 image data: {e}", field="image") from e
        return cls(data=data, mime_type=mime_type)

    @classmethod
    def from_data_url(cls, data_url: str) -> "ImageArtifact":
        """
        Parse a data:image/...;base64,... URL.

        Raises:
            ValidationError: If the string is not a base64 image data URL
        """
        if not _DATA_URL_RE.match(data_url.strip()):
            raise ValidationError("Not a base64 image data URL", field="image")
        return cls.from_base64(data_url)

    @property
    def b64(self) -> str:
        """Bare base64 payload (no data-URI prefix)."""
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        """Data URL for display surfaces that expect one."""
        return f"data:{self.mime_type};base64,{self.b64}"

    @property
    def extension(self) -> str:
        """File extension matching the MIME type (png when unknown)."""
        return _EXTENSIONS.get(self.mime_type.lower(), "png")

    def open(self) -> Image.Image:
        """
        Decode with Pillow.

        Raises:
            ImageProcessingError: If the bytes are not a readable image
        """
        try:
            image = Image.open(io.BytesIO(self.data))
            image.load()
            return image
        except (UnidentifiedImageError, OSError) as e:
            raise ImageProcessingError(f"Failed to decode image: {e}") from e


@dataclass(frozen=True)
class PromptPayload:
    """A composed request: prompt text and attachments in send order."""

    text: str
    attachments: tuple[ImageArtifact, ...] = ()


@dataclass(frozen=True)
class EditWithoutReference:
    """Edit the current image from an instruction alone."""

    instruction: str


@dataclass(frozen=True)
class EditWithReference:
    """Edit the current image using a style reference (instruction may be empty)."""

    instruction: str
    reference: ImageArtifact


EditRequest = EditWithReference | EditWithoutReference
