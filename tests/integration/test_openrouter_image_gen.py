"""
Integration tests for OpenRouter image generation.

These tests call the real OpenRouter API. They are slow and cost money.
Run rarely and only when you need to verify the live API path.

To run:
  LOGOFORGE_RUN_INTEGRATION_TESTS=1 OPENROUTER_API_KEY=sk-... pytest -m integration --run-slow
"""

import os
from datetime import datetime
from pathlib import Path

import pytest

from logoforge.core.config import Config
from logoforge.core.config_store import ConfigStore
from logoforge.core.image_gen import ProviderCollaborator
from logoforge.core.models import GenerationConfig
from logoforge.core.session import GenerationSession, SessionState

# Project root (tests/integration -> tests -> project root)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_TMP_DIR = _PROJECT_ROOT / "tmp"


def _integration_enabled() -> bool:
    return os.getenv("LOGOFORGE_RUN_INTEGRATION_TESTS", "").strip() == "1"


@pytest.mark.integration
@pytest.mark.slow
@pytest.mark.expensive
class TestOpenRouterSession:
    """Real OpenRouter generate + edit round trip (requires API key and opt-in env)."""

    @pytest.fixture(autouse=True)
    def _require_opt_in(self) -> None:
        if not _integration_enabled():
            pytest.skip(
                "Integration tests are disabled. "
                "Set LOGOFORGE_RUN_INTEGRATION_TESTS=1 to run (slow, costs money)."
            )
        if not os.getenv("OPENROUTER_API_KEY", "").strip().startswith("sk-"):
            pytest.skip(
                "OPENROUTER_API_KEY not set or invalid. "
                "Set it in .env or environment to run integration tests."
            )

    def test_generate_then_edit(self) -> None:
        config = Config.from_env()
        config.default_image_provider = "openrouter"
        config.default_image_model = ""
        session = GenerationSession(
            ProviderCollaborator(config=config),
            ConfigStore(GenerationConfig(server_name="Glory")),
        )

        session.submit_generate()
        first = session.current_image
        assert first is not None
        assert session.state is SessionState.READY

        session.submit_edit("Make the flames blue")
        assert session.state is SessionState.READY
        assert len(session.history) == 3
        assert session.current_image is not None

        _TMP_DIR.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        out_path = _TMP_DIR / f"openrouter_{stamp}.{session.current_image.extension}"
        out_path.write_bytes(session.current_image.data)
