import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class SpeechConfig:
    """Azure Speech service configuration."""
    key: str
    region: str
    voice: str = "en-US-JennyNeural"
    output_format: Optional[str] = None  # SpeechSynthesisOutputFormat member name

    @classmethod
    def from_env(cls) -> "SpeechConfig":
        """Create configuration from environment variables."""
        key = os.environ.get("AZURE_SPEECH_KEY")
        region = os.environ.get("AZURE_SPEECH_REGION")

        if not key or not region:
            raise ValueError("Azure Speech credentials not found in environment variables")

        return cls(
            key=key,
            region=region,
            voice=os.environ.get("AZURE_SPEECH_VOICE", "en-US-JennyNeural"),
            output_format=os.environ.get("AZURE_SPEECH_OUTPUT_FORMAT") or None
        )
