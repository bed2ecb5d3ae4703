"""
Static catalog of logo choices.

Each category (element, font, visual style, central decoration) is an enum;
every member maps to a label, an icon and the descriptive fragment used when
composing prompts. The mapping is built once from prompts.yaml and exposed
read-only.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TypeVar

from logoforge.core.prompts_loader import CatalogEntry, get_prompts
from logoforge.utils.exceptions import ConfigurationError, ValidationError


class Element(str, Enum):
    FIRE = "FIRE"
    ICE = "ICE"
    LIGHTNING = "LIGHTNING"
    ARCANE = "ARCANE"
    SHADOWS = "SHADOWS"


class Font(str, Enum):
    GOTHIC = "GOTHIC"
    CURSIVE = "CURSIVE"
    RUNIC = "RUNIC"
    AGGRESSIVE = "AGGRESSIVE"
    ROYAL = "ROYAL"
    MODERN = "MODERN"


class LogoStyle(str, Enum):
    EPIC_MEDIEVAL = "EPIC_MEDIEVAL"
    DARK_FANTASY = "DARK_FANTASY"
    HIGH_FANTASY = "HIGH_FANTASY"
    DEMONIC = "DEMONIC"
    CELESTIAL = "CELESTIAL"


class Decoration(str, Enum):
    SWORD = "SWORD"
    GEM = "GEM"
    WINGS = "WINGS"
    DRAGON = "DRAGON"
    EMBLEM = "EMBLEM"


Choice = Element | Font | LogoStyle | Decoration
ChoiceT = TypeVar("ChoiceT", Element, Font, LogoStyle, Decoration)

# enum class -> prompts.yaml section
CATEGORIES: dict[type[Enum], str] = {
    Element: "elements",
    Font: "fonts",
    LogoStyle: "styles",
    Decoration: "decorations",
}


@dataclass(frozen=True)
class Option:
    """A selectable catalog option."""

    choice: Choice
    label: str
    icon: str
    fragment: str


@dataclass(frozen=True)
class QuickEdit:
    """A canned edit instruction with a short label."""

    label: str
    instruction: str


_options: MappingProxyType | None = None


def _build_options() -> MappingProxyType:
    prompts = get_prompts()
    table: dict[Choice, Option] = {}
    for enum_cls, section in CATEGORIES.items():
        entries: dict[str, CatalogEntry] = getattr(prompts, section)
        for member in enum_cls:
            entry = entries.get(member.value)
            if entry is None:
                raise ConfigurationError(
                    f"prompts.yaml section {section!r} has no entry for {member.value!r}."
                )
            table[member] = Option(  # type: ignore[index]
                choice=member,  # type: ignore[arg-type]
                label=entry.label,
                icon=entry.icon,
                fragment=entry.prompt.strip(),
            )
    return MappingProxyType(table)


def _catalog() -> MappingProxyType:
    global _options
    if _options is None:
        _options = _build_options()
    return _options


def option_for(choice: Choice) -> Option:
    """Return the catalog option for an enum member."""
    return _catalog()[choice]


def fragment_for(choice: Choice) -> str:
    """Return the descriptive prompt fragment for an enum member."""
    return option_for(choice).fragment


def options(enum_cls: type[ChoiceT]) -> list[Option]:
    """Return the options of one category in declaration order."""
    return [option_for(member) for member in enum_cls]


def quick_edits() -> list[QuickEdit]:
    """Return the canned edit suggestions."""
    return [QuickEdit(s.label, s.instruction.strip()) for s in get_prompts().suggestions]


def parse_choice(enum_cls: type[ChoiceT], value: "str | ChoiceT", field: str = "") -> ChoiceT:
    """
    Coerce a user-supplied value to a member of enum_cls.

    Accepts members, values and labels case-insensitively; '-' and spaces are
    read as '_' (so "dark-fantasy" and "Dark Fantasy" both give DARK_FANTASY).

    Raises:
        ValidationError: If value names no member of the category
    """
    if isinstance(value, enum_cls):
        return value
    key = str(value).strip().upper().replace("-", "_").replace(" ", "_")
    for member in enum_cls:
        if key == member.value:
            return member
    for member in enum_cls:
        label_key = option_for(member).label.upper().replace(" ", "_")  # type: ignore[arg-type]
        if key == label_key:
            return member
    allowed = ", ".join(m.value.lower() for m in enum_cls)
    raise ValidationError(
        f"Unknown {field or enum_cls.__name__.lower()}: {value!r}. Choose one of: {allowed}.",
        field=field,
    )
