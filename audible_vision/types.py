from threading import Event
from typing import BinaryIO, Optional, Protocol

from audible_vision.vision.models import (ImageAnalysisResult,
                                          ImageDescriptionResult)


class VisionCollaborator(Protocol):
    """Recognizes text in, or describes, an image."""

    def read(
        self,
        image: BinaryIO,
        file_name: str,
        cancel: Optional[Event] = None
    ) -> ImageAnalysisResult:
        """Return the text lines found in the image, grouped into blocks."""

    def describe(
        self,
        image: BinaryIO,
        file_name: str,
        cancel: Optional[Event] = None
    ) -> ImageDescriptionResult:
        """Return ranked captions and tags for the image."""


class SpeechCollaborator(Protocol):
    """Renders text as speech."""

    def synthesize_to_stream(self, text: str, output: BinaryIO) -> None:
        """Write synthesized audio for text to the output stream."""

    def synthesize_to_default_speakers(self, text: str) -> None:
        """Play synthesized audio for text on the default output device."""
