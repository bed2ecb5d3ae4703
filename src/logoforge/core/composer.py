"""
Prompt composition for logo generation and edits.

Every function here is pure: the same inputs always give the same prompt
text and the same attachment order. Attachment order is part of the contract,
because the edit prompt tells the model to read "the second image" as the
style reference.
"""

from logoforge.core.catalog import fragment_for
from logoforge.core.config import DEFAULT_LANGUAGE
from logoforge.core.models import (
    EditRequest,
    EditWithoutReference,
    EditWithReference,
    GenerationConfig,
    ImageArtifact,
    PromptPayload,
)
from logoforge.core.prompts_loader import get_prompts
from logoforge.utils.exceptions import ValidationError


def _persona(config: GenerationConfig) -> str:
    return get_prompts().persona.format(server_name=config.server_name).strip()


def compose_generation_prompt(config: GenerationConfig) -> PromptPayload:
    """
    Build the prompt for the first, configuration-only generation.

    The server name is not validated here; callers must reject an empty name
    before dispatching.

    Args:
        config: Fully populated logo choices

    Returns:
        PromptPayload with the prompt text and no attachments
    """
    text = get_prompts().generation.template.format(
        persona=_persona(config),
        server_name_upper=config.server_name.upper(),
        font=fragment_for(config.font),
        element=fragment_for(config.element),
        style=fragment_for(config.style),
        decoration=fragment_for(config.decoration),
    )
    return PromptPayload(text=text.strip())


def build_edit_request(
    instruction: str, reference_image: ImageArtifact | None = None
) -> EditRequest | None:
    """
    Classify an edit into its tagged variant.

    Returns None when there is nothing to send (blank instruction and no
    reference image).
    """
    instruction = instruction or ""
    if reference_image is not None:
        return EditWithReference(instruction=instruction, reference=reference_image)
    if instruction.strip():
        return EditWithoutReference(instruction=instruction)
    return None


def compose_edit(
    config: GenerationConfig,
    current_image: ImageArtifact,
    request: EditRequest,
    *,
    language: str = DEFAULT_LANGUAGE,
) -> PromptPayload:
    """Build the edit prompt for an already classified request."""
    prompts = get_prompts()
    if isinstance(request, EditWithReference):
        directive = prompts.edit.with_reference.format(server_name=config.server_name)
        attachments: tuple[ImageArtifact, ...] = (current_image, request.reference)
    elif isinstance(request, EditWithoutReference):
        directive = prompts.edit.without_reference
        attachments = (current_image,)
    else:
        raise TypeError(f"Unsupported edit request: {type(request).__name__}")

    text = prompts.edit.template.format(
        persona=_persona(config),
        instruction=request.instruction,
        server_name=config.server_name,
        directive=directive.strip(),
        language=language,
    )
    return PromptPayload(text=text.strip(), attachments=attachments)


def compose_edit_prompt(
    config: GenerationConfig,
    current_image: ImageArtifact,
    instruction: str,
    reference_image: ImageArtifact | None = None,
    *,
    language: str = DEFAULT_LANGUAGE,
) -> PromptPayload:
    """
    Build the prompt for editing the current image.

    Args:
        config: Logo choices (for the server name and legibility constraint)
        current_image: The image being edited; always the first attachment
        instruction: Free-text edit instruction, quoted verbatim
        reference_image: Optional style reference; always the second attachment
        language: Language the model should answer in

    Returns:
        PromptPayload with attachments [current] or [current, reference]

    Raises:
        ValidationError: If the instruction is blank and no reference is given
    """
    request = build_edit_request(instruction, reference_image)
    if request is None:
        raise ValidationError(
            "An edit needs an instruction or a reference image.", field="instruction"
        )
    return compose_edit(config, current_image, request, language=language)
