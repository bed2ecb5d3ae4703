"""
Image generation and editing through the configured provider.

generate_image() and edit_image() validate their inputs, resolve the provider,
model and timeout from config, and delegate the HTTP/SDK work to the provider.
ProviderCollaborator bundles them into the two-operation interface the
GenerationSession drives.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from logoforge.core.config import Config, get_config
from logoforge.core.models import ImageArtifact
from logoforge.core.providers import get_registry
from logoforge.logging_config import get_logger
from logoforge.utils.exceptions import (
    ConfigurationError,
    ImageProcessingError,
    NoImageProduced,
    ValidationError,
)

logger = get_logger(__name__)


@dataclass
class GenerationResult:
    """Result of a generate or edit call."""

    image: ImageArtifact
    assistant_text: str | None  # Text part of the response, if any
    generation_time: float  # Seconds spent in the request
    model_used: str
    prompt_used: str
    attachment_count: int = 0  # Images sent with the prompt

    @property
    def format(self) -> str:
        """File extension for the returned image (e.g. 'png', 'jpg')."""
        return self.image.extension

    @property
    def image_data(self) -> bytes:
        """Raw image bytes as returned by the service."""
        return self.image.data


def ensure_decodable(image: ImageArtifact, response: str = "") -> ImageArtifact:
    """
    Check that a returned image decodes; used by providers on every response.

    Raises:
        NoImageProduced: If the bytes are not a readable image
    """
    try:
        image.open()
    except ImageProcessingError as e:
        raise NoImageProduced(f"Service returned an unreadable image: {e}", response=response) from e
    return image


def _run(
    prompt: str,
    attachments: Sequence[ImageArtifact],
    model: str | None,
    provider_id: str | None,
    timeout: int | None,
    config: Config | None,
    api_key: str | None,
) -> GenerationResult:
    config = config or get_config()
    provider_id = provider_id or config.default_image_provider
    provider = get_registry().get(provider_id)
    if provider is None:
        raise ConfigurationError(
            f"Unknown image provider: {provider_id!r}. "
            f"Registered: {', '.join(get_registry().provider_ids())}."
        )
    if attachments and not provider.supports_attachments:
        raise ConfigurationError(
            f"Image provider {provider_id!r} cannot take input images, so it cannot edit logos."
        )
    model = model or config.image_model_for(provider_id)
    timeout = timeout or config.request_timeout
    return provider.generate(
        prompt,
        list(attachments),
        model,
        timeout,
        config,
        api_key_override=api_key,
    )


def generate_image(
    prompt: str,
    model: str | None = None,
    provider_id: str | None = None,
    timeout: int | None = None,
    config: Config | None = None,
    api_key: str | None = None,
) -> GenerationResult:
    """
    Generate a new image from a text prompt.

    Args:
        prompt: Fully composed prompt text
        model: Model id (defaults to the provider's configured model)
        provider_id: Provider to use (defaults to config.default_image_provider)
        timeout: Request timeout in seconds (defaults to config.request_timeout)
        config: Config to use; if None, uses shared config from get_config()
        api_key: Optional credential overriding the configured one

    Returns:
        GenerationResult with the image and any assistant text

    Raises:
        ValidationError: If the prompt is empty
        ConfigurationError: If the provider is unknown
        AuthenticationError, NoImageProduced, TransientServiceError, ServiceError
    """
    if not prompt or not prompt.strip():
        raise ValidationError("Prompt cannot be empty", field="prompt")
    return _run(prompt, [], model, provider_id, timeout, config, api_key)


def edit_image(
    prompt: str,
    attachments: Sequence[ImageArtifact],
    model: str | None = None,
    provider_id: str | None = None,
    timeout: int | None = None,
    config: Config | None = None,
    api_key: str | None = None,
) -> GenerationResult:
    """
    Edit an image: send the prompt with the attachments in the given order.

    The first attachment is the image being edited; any further ones are
    references the prompt text refers to by position.

    Raises:
        ValidationError: If the prompt or the attachment list is empty
        ConfigurationError: If the provider is unknown or cannot take input images
        AuthenticationError, NoImageProduced, TransientServiceError, ServiceError
    """
    if not prompt or not prompt.strip():
        raise ValidationError("Prompt cannot be empty", field="prompt")
    if not attachments:
        raise ValidationError("An edit needs the current image attached", field="attachments")
    return _run(prompt, attachments, model, provider_id, timeout, config, api_key)


class ProviderCollaborator:
    """Image generation collaborator backed by the provider registry."""

    def __init__(
        self,
        config: Config | None = None,
        provider_id: str | None = None,
        model: str | None = None,
        timeout: int | None = None,
        api_key: str | None = None,
    ) -> None:
        self.config = config or get_config()
        self.provider_id = provider_id or self.config.default_image_provider
        self.model = model or self.config.image_model_for(self.provider_id)
        self.timeout = timeout or self.config.request_timeout
        self._api_key = api_key

    def generate(self, prompt_text: str) -> GenerationResult:
        return generate_image(
            prompt_text,
            model=self.model,
            provider_id=self.provider_id,
            timeout=self.timeout,
            config=self.config,
            api_key=self._api_key,
        )

    def edit(self, prompt_text: str, attachments: Sequence[ImageArtifact]) -> GenerationResult:
        return edit_image(
            prompt_text,
            attachments,
            model=self.model,
            provider_id=self.provider_id,
            timeout=self.timeout,
            config=self.config,
            api_key=self._api_key,
        )
