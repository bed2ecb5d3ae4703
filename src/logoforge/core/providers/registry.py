"""
Registry for image generation providers.

Maps provider ids (e.g. "gemini", "openrouter") to provider implementations.
"""

from logoforge.core.providers.base import ImageGenerationProvider


class ProviderRegistry:
    """Registry mapping provider id to ImageGenerationProvider implementation."""

    def __init__(self) -> None:
        self._impls: dict[str, ImageGenerationProvider] = {}

    def register(self, provider_id: str, impl: ImageGenerationProvider) -> None:
        """Register a provider implementation; re-registering an id replaces it."""
        self._impls[provider_id] = impl

    def get(self, provider_id: str) -> ImageGenerationProvider | None:
        """Return the implementation for provider_id, or None if unknown."""
        return self._impls.get(provider_id)

    def provider_ids(self) -> list[str]:
        """Return the registered provider ids in registration order."""
        return list(self._impls)


_registry: ProviderRegistry | None = None


def get_registry() -> ProviderRegistry:
    """Return the process-wide registry, creating it on first call."""
    global _registry
    if _registry is None:
        _registry = ProviderRegistry()
    return _registry
