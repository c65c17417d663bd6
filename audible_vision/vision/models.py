from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Line:
    """A single line of recognized text."""
    text: str


@dataclass
class ReadResult:
    """A block of recognized text lines, in reading order."""
    lines: list[Line] = field(default_factory=list)


@dataclass
class ImageAnalysisResult:
    """Text recognized in an image."""
    read_results: list[ReadResult] = field(default_factory=list)


@dataclass
class Caption:
    text: str
    confidence: Optional[float] = None


@dataclass
class ImageDescriptionResult:
    """Ranked captions and tags describing an image."""
    captions: list[Caption] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
