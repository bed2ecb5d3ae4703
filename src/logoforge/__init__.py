"""
logoforge - 3D game-server logo generation and conversational editing.

Collects logo choices (server name, element, font, style, decoration), turns
them into prompts for a hosted multimodal image model, and refines the result
through an edit conversation.

Library usage:
- Hold choices in a ConfigStore, wrap a ProviderCollaborator in a
  GenerationSession, call submit_generate() once and submit_edit() as often
  as needed. session.current_image always holds the latest image.
- compose_generation_prompt() / compose_edit_prompt() are pure and can be used
  on their own with any image backend.
- Settings can be passed per operation (config=my_config) or through the
  shared config: get_config() / set_config().
- Logging: set_verbosity(0|1|2) or configure_logging(verbose_level, quiet);
  LOGOFORGE_VERBOSITY env (0/1/2) is read when the CLI runs.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("logoforge")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source in development)
    __version__ = "0.0.0.dev"

from logoforge.core.catalog import Decoration, Element, Font, LogoStyle, options, quick_edits
from logoforge.core.composer import (
    build_edit_request,
    compose_edit,
    compose_edit_prompt,
    compose_generation_prompt,
)
from logoforge.core.config import Config, get_config, set_config
from logoforge.core.config_store import ChatHistory, ConfigStore
from logoforge.core.image_gen import (
    GenerationResult,
    ProviderCollaborator,
    edit_image,
    generate_image,
)
from logoforge.core.models import (
    ChatMessage,
    EditRequest,
    EditWithoutReference,
    EditWithReference,
    GenerationConfig,
    ImageArtifact,
    PromptPayload,
)
from logoforge.core.reference import process_reference_image
from logoforge.core.session import EditionState, GenerationSession, SessionState
from logoforge.logging_config import configure_logging, set_verbosity
from logoforge.utils.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ImageProcessingError,
    LogoforgeError,
    NetworkError,
    NoImageProduced,
    RequestTimeoutError,
    ServiceError,
    TransientServiceError,
    ValidationError,
)

__all__ = [
    "AuthenticationError",
    "ChatHistory",
    "ChatMessage",
    "Config",
    "ConfigStore",
    "ConfigurationError",
    "Decoration",
    "EditRequest",
    "EditWithReference",
    "EditWithoutReference",
    "EditionState",
    "Element",
    "Font",
    "GenerationConfig",
    "GenerationResult",
    "GenerationSession",
    "ImageArtifact",
    "ImageProcessingError",
    "LogoStyle",
    "LogoforgeError",
    "NetworkError",
    "NoImageProduced",
    "PromptPayload",
    "ProviderCollaborator",
    "RequestTimeoutError",
    "ServiceError",
    "SessionState",
    "TransientServiceError",
    "ValidationError",
    "build_edit_request",
    "compose_edit",
    "compose_edit_prompt",
    "compose_generation_prompt",
    "configure_logging",
    "edit_image",
    "generate_image",
    "get_config",
    "options",
    "process_reference_image",
    "quick_edits",
    "set_config",
    "set_verbosity",
]
