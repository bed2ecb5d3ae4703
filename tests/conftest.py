"""
Pytest configuration: default runs most tests; use --run-slow to include slow tests.
"""

import io

import pytest
from PIL import Image


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests (live Gemini and OpenRouter calls). Default: skip them.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-slow", False):
        return
    skip_slow = pytest.mark.skip(reason="Slow test; run with --run-slow to include")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def make_png(size: tuple[int, int] = (64, 64), color: str = "orange") -> bytes:
    """Encode a solid-color PNG."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def make_image():
    """Factory for solid-color PNG bytes of a given size and color."""
    return make_png
