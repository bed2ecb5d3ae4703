"""
Load prompt templates and catalog data from the bundled prompts.yaml file.

The file is parsed and validated once per process; callers get the same
validated PromptsSchema instance on every call.
"""

import importlib.resources
import string

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from logoforge.utils.exceptions import ConfigurationError

PROMPTS_FILE = "prompts.yaml"

# Module-level cache for the parsed prompts
_prompts: "PromptsSchema | None" = None


def _placeholders(template: str) -> set[str]:
    """Return the named str.format fields used in template."""
    return {name for _, name, _, _ in string.Formatter().parse(template) if name}


def _require_placeholders(template: str, required: set[str], where: str) -> str:
    missing = required - _placeholders(template)
    if missing:
        raise ValueError(f"{where} must contain {', '.join('{' + m + '}' for m in sorted(missing))}")
    return template


class CatalogEntry(BaseModel):
    """One selectable option: display label, optional icon, prompt fragment."""

    label: str = Field(..., min_length=1)
    icon: str = ""
    prompt: str = Field(..., min_length=1, description="Descriptive fragment used in prompts")


class Suggestion(BaseModel):
    """A canned edit instruction offered to the user."""

    label: str = Field(..., min_length=1)
    instruction: str = Field(..., min_length=1)


class GenerationPrompt(BaseModel):
    template: str = Field(..., min_length=1)

    @field_validator("template")
    @classmethod
    def _check_template(cls, v: str) -> str:
        return _require_placeholders(
            v,
            {"persona", "server_name_upper", "font", "element", "style", "decoration"},
            "generation.template",
        )


class EditPrompt(BaseModel):
    template: str = Field(..., min_length=1)
    with_reference: str = Field(..., min_length=1)
    without_reference: str = Field(..., min_length=1)

    @field_validator("template")
    @classmethod
    def _check_template(cls, v: str) -> str:
        return _require_placeholders(
            v, {"persona", "instruction", "server_name", "directive", "language"}, "edit.template"
        )


class Messages(BaseModel):
    """Fixed chat messages used by the session."""

    generated: str = Field(..., min_length=1)
    edited: str = Field(..., min_length=1)
    edit_failed: str = Field(..., min_length=1)
    reference_attached: str = Field(..., min_length=1)

    @field_validator("edit_failed")
    @classmethod
    def _check_edit_failed(cls, v: str) -> str:
        return _require_placeholders(v, {"error"}, "messages.edit_failed")


class PromptsSchema(BaseModel):
    """Schema for prompts.yaml."""

    model_config = {"extra": "allow"}

    persona: str = Field(..., min_length=1)
    generation: GenerationPrompt
    edit: EditPrompt
    messages: Messages
    elements: dict[str, CatalogEntry]
    fonts: dict[str, CatalogEntry]
    styles: dict[str, CatalogEntry]
    decorations: dict[str, CatalogEntry]
    suggestions: list[Suggestion] = Field(default_factory=list)

    @field_validator("persona")
    @classmethod
    def _check_persona(cls, v: str) -> str:
        return _require_placeholders(v, {"server_name"}, "persona")


def _read_prompts_file() -> str:
    try:
        with importlib.resources.files("logoforge").joinpath(PROMPTS_FILE).open(
            encoding="utf-8"
        ) as f:
            return f.read()
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"{PROMPTS_FILE} not found. This file is required and should be bundled with the package."
        ) from e


def get_prompts() -> PromptsSchema:
    """Load, validate and cache prompts.yaml.

    Returns:
        The validated prompt data.

    Raises:
        ConfigurationError: If the file is missing, malformed, or fails validation.
    """
    global _prompts
    if _prompts is not None:
        return _prompts

    raw = _read_prompts_file()
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse {PROMPTS_FILE}: {e}. Check YAML syntax and formatting."
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{PROMPTS_FILE} is empty or not a mapping.")

    try:
        _prompts = PromptsSchema(**data)
    except ValidationError as e:
        errors = "\n".join(
            f"  - {'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid {PROMPTS_FILE} structure:\n{errors}") from e
    return _prompts


def reset_prompts_cache() -> None:
    """Forget the cached prompts so the next get_prompts() call re-reads the file."""
    global _prompts
    _prompts = None
