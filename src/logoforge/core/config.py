"""
Application settings for logoforge.

Handles API keys, provider and model selection, request timeout and the
working language used for the model's confirmation messages. Settings come
from the environment (a local .env file is honoured) and can be overridden
per operation by passing a Config explicitly.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from logoforge.logging_config import get_logger
from logoforge.utils.exceptions import ConfigurationError

logger = get_logger(__name__)

load_dotenv()

DEFAULT_IMAGE_PROVIDER = "gemini"
DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_GEMINI_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_OPENROUTER_IMAGE_MODEL = "google/gemini-2.5-flash-image"
DEFAULT_LANGUAGE = "English"
DEFAULT_ASPECT_RATIO = "1:1"
DEFAULT_REQUEST_TIMEOUT = 60

# Provider ids accepted by validate(); do not import from logoforge.core.providers (circular import)
KNOWN_IMAGE_PROVIDERS = ("gemini", "openrouter")

_DEFAULT_MODELS = {
    "gemini": DEFAULT_GEMINI_IMAGE_MODEL,
    "openrouter": DEFAULT_OPENROUTER_IMAGE_MODEL,
}

# Checked in order; the first non-empty one wins
GEMINI_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


@dataclass
class Config:
    """Configuration for the logoforge client."""

    # API keys are excluded from repr to avoid leaking secrets
    gemini_api_key: str = field(default="", repr=False)
    openrouter_api_key: str = field(default="", repr=False)
    openrouter_base_url: str = DEFAULT_OPENROUTER_BASE_URL

    default_image_provider: str = DEFAULT_IMAGE_PROVIDER
    # Empty means "the provider's default model"
    default_image_model: str = ""

    aspect_ratio: str = DEFAULT_ASPECT_RATIO
    language: str = DEFAULT_LANGUAGE

    # Reference image limits
    min_reference_pixels: int = 2500
    max_reference_pixels: int = 2_000_000
    reference_jpeg_quality: int = 95

    request_timeout: int = DEFAULT_REQUEST_TIMEOUT

    # Debug: log raw API payload/response with image data truncated
    debug_api: bool = False

    _validated: bool = field(default=False, repr=False)

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create a Config instance from environment variables.

        Environment variables:
            GEMINI_API_KEY / GOOGLE_API_KEY / API_KEY: Gemini credential
            OPENROUTER_API_KEY: OpenRouter credential
            LOGOFORGE_IMAGE_PROVIDER: "gemini" or "openrouter"
            LOGOFORGE_IMAGE_MODEL: Model id for the chosen provider
            LOGOFORGE_TIMEOUT: Request timeout in seconds
            LOGOFORGE_LANGUAGE: Language of the model's confirmation messages
            LOGOFORGE_ASPECT_RATIO: Output aspect ratio, e.g. "1:1"
            LOGOFORGE_DEBUG_API: "1"/"true"/"yes" to log truncated payloads

        Returns:
            Config instance populated from environment

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """

        def _int_env(name: str, default: int) -> int:
            val = os.getenv(name)
            if val is None or val == "":
                return default
            try:
                return int(val)
            except ValueError as e:
                raise ConfigurationError(f"{name} must be an integer, got {val!r}.") from e

        gemini_key = next((os.getenv(n, "") for n in GEMINI_KEY_ENV_VARS if os.getenv(n)), "")
        debug_api = os.getenv("LOGOFORGE_DEBUG_API", "").strip().lower() in ("1", "true", "yes")

        return cls(
            gemini_api_key=gemini_key,
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY", ""),
            default_image_provider=os.getenv("LOGOFORGE_IMAGE_PROVIDER", DEFAULT_IMAGE_PROVIDER),
            default_image_model=os.getenv("LOGOFORGE_IMAGE_MODEL", ""),
            aspect_ratio=os.getenv("LOGOFORGE_ASPECT_RATIO", DEFAULT_ASPECT_RATIO),
            language=os.getenv("LOGOFORGE_LANGUAGE", DEFAULT_LANGUAGE),
            request_timeout=_int_env("LOGOFORGE_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            debug_api=debug_api,
        )

    def validate(self) -> None:
        """
        Validate the configuration.

        Only the default provider's credential is checked; a provider chosen at
        call time validates its own credential and raises AuthenticationError.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        logger.debug("Validating config")

        if self.request_timeout <= 0:
            raise ConfigurationError(
                f"request_timeout must be positive, got {self.request_timeout}."
            )
        if self.min_reference_pixels <= 0:
            raise ConfigurationError(
                f"min_reference_pixels must be positive, got {self.min_reference_pixels}."
            )
        if self.min_reference_pixels > self.max_reference_pixels:
            raise ConfigurationError(
                f"min_reference_pixels ({self.min_reference_pixels}) must not exceed "
                f"max_reference_pixels ({self.max_reference_pixels})."
            )
        if not self.language.strip():
            raise ConfigurationError("language cannot be empty.")

        ratio = self.aspect_ratio.split(":")
        if len(ratio) != 2 or not all(p.isdigit() and int(p) > 0 for p in ratio):
            raise ConfigurationError(
                f"aspect_ratio must look like 'W:H' with positive integers, got {self.aspect_ratio!r}."
            )

        provider = self.default_image_provider
        if provider not in KNOWN_IMAGE_PROVIDERS:
            raise ConfigurationError(
                f"Unknown default_image_provider: {provider!r}. "
                f"Must be one of: {', '.join(KNOWN_IMAGE_PROVIDERS)}."
            )
        if provider == "gemini" and not self.gemini_api_key:
            raise ConfigurationError(
                "Gemini API key is required when the default provider is gemini. "
                "Set GEMINI_API_KEY (or GOOGLE_API_KEY / API_KEY) in the environment."
            )
        if provider == "openrouter":
            if not self.openrouter_api_key:
                raise ConfigurationError(
                    "OpenRouter API key is required when the default provider is openrouter. "
                    "Set OPENROUTER_API_KEY environment variable or provide it explicitly."
                )
            if not self.openrouter_api_key.startswith("sk-"):
                raise ConfigurationError(
                    "OpenRouter API key appears to be invalid. It should start with 'sk-'."
                )

        self._validated = True

    def is_valid(self) -> bool:
        """Return True if validate() has been called successfully."""
        return self._validated

    def image_model_for(self, provider_id: str | None = None) -> str:
        """
        Resolve the model id to use with a provider.

        default_image_model applies only to the default provider; any other
        provider falls back to its own default model.
        """
        provider_id = provider_id or self.default_image_provider
        if self.default_image_model and provider_id == self.default_image_provider:
            return self.default_image_model
        return _DEFAULT_MODELS.get(provider_id, "")

    def set_api_key(self, api_key: str, provider: str | None = None) -> None:
        """
        Set the API key for a provider (the default provider when omitted).

        Raises:
            ConfigurationError: If the key is empty or malformed
        """
        if not api_key:
            raise ConfigurationError("API key cannot be empty")

        provider = provider or self.default_image_provider
        if provider == "openrouter":
            if not api_key.startswith("sk-"):
                raise ConfigurationError(
                    "OpenRouter API key appears to be invalid. It should start with 'sk-'."
                )
            self.openrouter_api_key = api_key
        elif provider == "gemini":
            self.gemini_api_key = api_key
        else:
            raise ConfigurationError(f"Unknown provider: {provider!r}")
        self._validated = False

    def set_image_model(self, model: str) -> None:
        """
        Set the image model for the default provider.

        Raises:
            ConfigurationError: If model is empty
        """
        if not model:
            raise ConfigurationError("Model ID cannot be empty")

        self.default_image_model = model


# Global configuration instance
_global_config: Config | None = None


def get_config() -> Config:
    """Return the global configuration, creating it from the environment on first use."""
    global _global_config
    if _global_config is None:
        _global_config = Config.from_env()
    return _global_config


def set_config(config: Config) -> None:
    """Replace the global configuration instance."""
    global _global_config
    _global_config = config
