import os
from dataclasses import dataclass


@dataclass
class VisionConfig:
    """Azure Vision API configuration."""
    endpoint: str
    key: str
    language: str = "en"
    max_candidates: int = 1
    min_tag_confidence: float = 0.0
    gender_neutral_caption: bool = False
    rate_limit: float = 1.0  # seconds between calls

    def __post_init__(self):
        if self.max_candidates < 1:
            raise ValueError("max_candidates must be at least 1")
        if not 0 <= self.min_tag_confidence <= 1:
            raise ValueError("min_tag_confidence must be between 0 and 1")
        if self.rate_limit < 0:
            raise ValueError("rate_limit cannot be negative")

    @classmethod
    def from_env(cls) -> "VisionConfig":
        """Create configuration from environment variables."""
        endpoint = os.environ.get("AZURE_AI_SERVICES_ENDPOINT")
        key = os.environ.get("AZURE_AI_SERVICES_KEY")

        if not endpoint or not key:
            raise ValueError("Azure Vision credentials not found in environment variables")

        return cls(
            endpoint=endpoint,
            key=key,
            language=os.environ.get("AZURE_VISION_LANGUAGE", "en"),
            max_candidates=int(os.environ.get("AZURE_VISION_MAX_CANDIDATES", "1")),
            min_tag_confidence=float(os.environ.get("AZURE_VISION_MIN_TAG_CONFIDENCE", "0.0")),
            gender_neutral_caption=os.environ.get(
                "AZURE_VISION_GENDER_NEUTRAL_CAPTION", ""
            ).strip().lower() in ("1", "true", "yes"),
            rate_limit=float(os.environ.get("AZURE_VISION_RATE_LIMIT", "1.0"))
        )
