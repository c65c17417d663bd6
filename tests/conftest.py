from __future__ import annotations

import io

import pytest
from PIL import Image


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Provide a small PNG the vision client accepts."""
    img = Image.new("RGB", (100, 100), color="red")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def clear_azure_env(monkeypatch):
    """Remove any Azure settings inherited from the developer's shell."""
    for name in (
        "AZURE_AI_SERVICES_ENDPOINT",
        "AZURE_AI_SERVICES_KEY",
        "AZURE_VISION_LANGUAGE",
        "AZURE_VISION_MAX_CANDIDATES",
        "AZURE_VISION_MIN_TAG_CONFIDENCE",
        "AZURE_VISION_RATE_LIMIT",
        "AZURE_VISION_GENDER_NEUTRAL_CAPTION",
        "AZURE_SPEECH_KEY",
        "AZURE_SPEECH_REGION",
        "AZURE_SPEECH_VOICE",
        "AZURE_SPEECH_OUTPUT_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
