"""Unit tests for the provider registry and built-in registration."""

import pytest

from logoforge.core.providers import (
    KNOWN_IMAGE_PROVIDERS,
    PROVIDER_GEMINI,
    PROVIDER_OPENROUTER,
    get_registry,
)
from logoforge.core.providers.gemini import GeminiProvider
from logoforge.core.providers.openrouter import OpenRouterProvider
from logoforge.core.providers.registry import ProviderRegistry


@pytest.mark.unit
class TestProviderRegistry:
    def test_get_gemini_returns_implementation(self):
        impl = get_registry().get(PROVIDER_GEMINI)
        assert isinstance(impl, GeminiProvider)
        assert impl.supports_attachments is True

    def test_get_openrouter_returns_implementation(self):
        impl = get_registry().get(PROVIDER_OPENROUTER)
        assert isinstance(impl, OpenRouterProvider)
        assert impl.supports_attachments is True

    def test_get_unknown_returns_none(self):
        assert get_registry().get("unknown") is None

    def test_provider_ids_contains_builtins(self):
        ids = get_registry().provider_ids()
        assert ids[:2] == [PROVIDER_GEMINI, PROVIDER_OPENROUTER]

    def test_known_image_providers_constant(self):
        assert KNOWN_IMAGE_PROVIDERS == (PROVIDER_GEMINI, PROVIDER_OPENROUTER)

    def test_register_replaces(self):
        reg = ProviderRegistry()
        first, second = object(), object()
        reg.register("x", first)  # type: ignore[arg-type]
        reg.register("x", second)  # type: ignore[arg-type]
        assert reg.get("x") is second
        assert reg.provider_ids() == ["x"]
