"""
Protocols for image generation.

ImageGenerationProvider is what a backend (Gemini SDK, OpenRouter HTTP)
implements. ImageGenerationCollaborator is the narrower two-operation view the
GenerationSession depends on.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from logoforge.core.config import Config

if TYPE_CHECKING:
    from logoforge.core.image_gen import GenerationResult
    from logoforge.core.models import ImageArtifact


class ImageGenerationProvider(Protocol):
    """Protocol for image generation providers.

    Providers own the wire format and map backend failures onto the
    logoforge error taxonomy.
    """

    @property
    def supports_attachments(self) -> bool:
        """Whether the backend accepts input images (needed for edits). Read-only."""
        ...

    def generate(
        self,
        prompt: str,
        attachments: list[ImageArtifact],
        model: str,
        timeout: int,
        config: Config,
        *,
        api_key_override: str | None = None,
    ) -> GenerationResult:
        """Send prompt plus attachments (in order) and return the produced image.

        May raise AuthenticationError, NoImageProduced, TransientServiceError
        (NetworkError, RequestTimeoutError) or ServiceError.
        """
        ...


class ImageGenerationCollaborator(Protocol):
    """The two calls a GenerationSession makes."""

    def generate(self, prompt_text: str) -> GenerationResult:
        """Create an image from text alone."""
        ...

    def edit(self, prompt_text: str, attachments: Sequence[ImageArtifact]) -> GenerationResult:
        """Transform attachments[0] following prompt_text. Text-only replies are failures."""
        ...
