"""
Mutable holder for the user's logo choices and the edit conversation.
"""

from collections.abc import Iterator
from dataclasses import replace
from typing import Any

from logoforge.core.catalog import Decoration, Element, Font, LogoStyle, parse_choice
from logoforge.core.models import ChatMessage, GenerationConfig
from logoforge.utils.exceptions import ValidationError

_CHOICE_FIELDS = {
    "element": Element,
    "font": Font,
    "style": LogoStyle,
    "decoration": Decoration,
}


class ChatHistory:
    """Append-only list of chat messages. Only a new generation may clear it."""

    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []

    def append(self, message: ChatMessage) -> ChatMessage:
        self._messages.append(message)
        return message

    def clear(self) -> None:
        self._messages.clear()

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(tuple(self._messages))

    def __getitem__(self, index: int) -> ChatMessage:
        return self._messages[index]


class ConfigStore:
    """Current GenerationConfig plus the running chat history.

    The config is an immutable snapshot; setters swap in a new one, so a
    snapshot taken by a caller never changes underneath it.
    """

    def __init__(self, config: GenerationConfig | None = None) -> None:
        self._config = config or GenerationConfig()
        self.history = ChatHistory()

    @property
    def config(self) -> GenerationConfig:
        return self._config

    def snapshot(self) -> GenerationConfig:
        return self._config

    def set_server_name(self, name: str) -> None:
        self._config = replace(self._config, server_name=name)

    def set_element(self, element: Element | str) -> None:
        self._config = replace(self._config, element=parse_choice(Element, element, "element"))

    def set_font(self, font: Font | str) -> None:
        self._config = replace(self._config, font=parse_choice(Font, font, "font"))

    def set_style(self, style: LogoStyle | str) -> None:
        self._config = replace(self._config, style=parse_choice(LogoStyle, style, "style"))

    def set_decoration(self, decoration: Decoration | str) -> None:
        self._config = replace(
            self._config, decoration=parse_choice(Decoration, decoration, "decoration")
        )

    def update(self, **changes: Any) -> GenerationConfig:
        """
        Apply several changes at once; None values are skipped.

        Either every change applies or none does.

        Raises:
            ValidationError: On an unknown field or choice
        """
        values: dict[str, Any] = {}
        for name, value in changes.items():
            if value is None:
                continue
            if name == "server_name":
                values[name] = str(value)
            elif name in _CHOICE_FIELDS:
                values[name] = parse_choice(_CHOICE_FIELDS[name], value, name)
            else:
                raise ValidationError(f"Unknown setting: {name}", field=name)
        self._config = replace(self._config, **values)
        return self._config
