"""
Generation session: one logo, from first generation through its edits.

States::

    IDLE --submit_generate--> GENERATING --ok--> READY <--> EDITING
      ^                           |                 |
      +-------- failure ----------+                 +--submit_generate--> GENERATING

GENERATING and EDITING are busy states; while busy every submit is a no-op,
so at most one request is in flight. Edits always chain from the latest
image. A failed generation is raised to the caller and leaves the session
IDLE; a failed edit is reported as an assistant message and the session
stays READY with the previous image.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from logoforge.core.composer import build_edit_request, compose_edit, compose_generation_prompt
from logoforge.core.config import DEFAULT_LANGUAGE
from logoforge.core.config_store import ChatHistory, ConfigStore
from logoforge.core.models import ChatMessage, GenerationConfig, ImageArtifact, Role
from logoforge.core.prompts_loader import get_prompts
from logoforge.core.providers.base import ImageGenerationCollaborator
from logoforge.logging_config import get_logger
from logoforge.utils.exceptions import AuthenticationError, LogoforgeError, ValidationError

logger = get_logger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    READY = "ready"
    EDITING = "editing"


@dataclass
class EditionState:
    """The image edits apply to, the staged reference, and the busy flag."""

    current_image: ImageArtifact | None = None
    staged_reference: ImageArtifact | None = None
    busy: bool = False


class GenerationSession:
    """Sequences generate and edit calls against an image collaborator."""

    def __init__(
        self,
        collaborator: ImageGenerationCollaborator,
        store: ConfigStore | None = None,
        *,
        language: str = DEFAULT_LANGUAGE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.collaborator = collaborator
        self.store = store or ConfigStore()
        self.language = language
        self._clock = clock
        self._state = SessionState.IDLE
        self._edition = EditionState()
        self._active_config: GenerationConfig | None = None
        self.last_error: LogoforgeError | None = None
        self.needs_credentials = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._edition.busy

    @property
    def current_image(self) -> ImageArtifact | None:
        return self._edition.current_image

    @property
    def staged_reference(self) -> ImageArtifact | None:
        return self._edition.staged_reference

    @property
    def history(self) -> ChatHistory:
        return self.store.history

    @property
    def active_config(self) -> GenerationConfig | None:
        """Config the current image was generated from; edits reuse it."""
        return self._active_config

    def stage_reference(self, image: ImageArtifact) -> None:
        """Stage a reference image for the next edit (replaces any staged one)."""
        self._edition.staged_reference = image

    def clear_reference(self) -> None:
        self._edition.staged_reference = None

    def _append(self, role: Role, text: str) -> ChatMessage:
        return self.history.append(ChatMessage(role=role, text=text, timestamp=self._clock()))

    def _enter(self, state: SessionState) -> None:
        logger.debug("Session %s -> %s", self._state.value, state.value)
        self._state = state
        self._edition.busy = state in (SessionState.GENERATING, SessionState.EDITING)

    def _note_failure(self, error: LogoforgeError) -> None:
        self.last_error = error
        if isinstance(error, AuthenticationError):
            self.needs_credentials = True

    def submit_generate(self, config: GenerationConfig | None = None) -> ChatMessage | None:
        """
        Start a new session from config (the store's snapshot when omitted).

        Returns:
            The assistant acknowledgement, or None if a request is already in flight

        Raises:
            ValidationError: If the server name is blank (session state unchanged)
            LogoforgeError: Any collaborator failure; the session is left IDLE
        """
        if self.busy:
            logger.debug("Generate ignored: request already in flight")
            return None
        config = config or self.store.snapshot()
        if not config.server_name.strip():
            raise ValidationError("Please enter your server name.", field="server_name")

        self.history.clear()
        self._edition.current_image = None
        self._edition.staged_reference = None
        self._active_config = config
        self.last_error = None
        self._enter(SessionState.GENERATING)

        payload = compose_generation_prompt(config)
        logger.info("Generating logo server_name=%r", config.server_name)
        try:
            result = self.collaborator.generate(payload.text)
        except LogoforgeError as e:
            self._note_failure(e)
            self._active_config = None
            self._enter(SessionState.IDLE)
            logger.warning("Generation failed: %s", e)
            raise
        except Exception:
            self._active_config = None
            self._enter(SessionState.IDLE)
            raise

        self._edition.current_image = result.image
        self.needs_credentials = False
        message = self._append(
            "assistant", result.assistant_text or get_prompts().messages.generated.strip()
        )
        self._enter(SessionState.READY)
        return message

    def submit_edit(
        self, instruction: str, reference_image: ImageArtifact | None = None
    ) -> ChatMessage | None:
        """
        Edit the current image.

        reference_image defaults to the staged reference. The call is ignored
        (None, nothing changes) unless the session is READY with an image and
        there is an instruction or a reference to send.

        Returns:
            The assistant reply (confirmation or error report), or None if ignored
        """
        if self._state is not SessionState.READY or self._edition.current_image is None:
            logger.debug("Edit ignored in state %s", self._state.value)
            return None
        reference = reference_image if reference_image is not None else self.staged_reference
        request = build_edit_request(instruction, reference)
        if request is None:
            logger.debug("Edit ignored: no instruction and no reference")
            return None

        self._edition.staged_reference = None
        messages = get_prompts().messages
        marker = messages.reference_attached if reference is not None else ""
        self._append("user", (request.instruction + marker).strip())
        self._enter(SessionState.EDITING)

        config = self._active_config or self.store.snapshot()
        payload = compose_edit(
            config, self._edition.current_image, request, language=self.language
        )
        logger.info("Editing logo attachments=%d", len(payload.attachments))
        try:
            result = self.collaborator.edit(payload.text, payload.attachments)
        except LogoforgeError as e:
            self._note_failure(e)
            logger.warning("Edit failed: %s", e)
            reply = self._append("assistant", messages.edit_failed.format(error=e))
            self._enter(SessionState.READY)
            return reply
        except Exception:
            self._enter(SessionState.READY)
            raise

        self._edition.current_image = result.image
        self.last_error = None
        self.needs_credentials = False
        reply = self._append("assistant", result.assistant_text or messages.edited.strip())
        self._enter(SessionState.READY)
        return reply
