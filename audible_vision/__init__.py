import logging
from threading import Event
from typing import BinaryIO, Optional

from audible_vision.speech.client import SpeechClient
from audible_vision.types import SpeechCollaborator, VisionCollaborator
from audible_vision.vision.client import VisionAnalysisClient
from audible_vision.vision.models import ImageDescriptionResult

logger = logging.getLogger(__name__)


class AudibleVisionNarrator:
    """Turns the results of image analysis into spoken narration."""

    def __init__(self, vision: VisionCollaborator, speech: SpeechCollaborator) -> None:
        """
        Initialize the narrator.

        Args:
            vision: Service used to read or describe images
            speech: Service used to synthesize the narration
        """
        self.vision = vision
        self.speech = speech

    @classmethod
    def from_env(cls) -> "AudibleVisionNarrator":
        """Create a narrator backed by Azure services configured from the environment."""
        return cls(VisionAnalysisClient.from_env(), SpeechClient.from_env())

    def read_to_stream(
        self,
        image: BinaryIO,
        output: BinaryIO,
        file_name: str,
        cancel: Optional[Event] = None
    ) -> None:
        """
        Read the text in an image aloud into an output stream.

        Every recognized line is synthesized on its own, block by block, in
        reading order.

        Args:
            image: Readable image stream
            output: Writable stream receiving the audio; left open
            file_name: File name hint used for format detection
            cancel: Optional event that aborts the image analysis
        """
        try:
            analysis = self.vision.read(image, file_name, cancel)
            for read_result in analysis.read_results:
                for line in read_result.lines:
                    self.speech.synthesize_to_stream(line.text, output)
        except Exception as e:
            logger.error(str(e), exc_info=True)
            raise

    def describe_to_stream(
        self,
        image: BinaryIO,
        output: BinaryIO,
        file_name: str,
        cancel: Optional[Event] = None
    ) -> None:
        """
        Describe an image and narrate the description into an output stream.

        Captions and tags are combined into one text and synthesized with a
        single call, even when there is nothing to say.
        """
        try:
            description = self.vision.describe(image, file_name, cancel)
            text = "".join(f"{line}\n" for line in _description_lines(description))
            self.speech.synthesize_to_stream(text, output)
        except Exception as e:
            logger.error(str(e), exc_info=True)
            raise

    def describe_to_default_speakers(
        self,
        image: BinaryIO,
        file_name: str,
        cancel: Optional[Event] = None
    ) -> None:
        """Describe an image and speak the description on the default speakers, one line at a time."""
        try:
            description = self.vision.describe(image, file_name, cancel)
            for line in _description_lines(description):
                self.speech.synthesize_to_default_speakers(line)
        except Exception as e:
            logger.error(str(e), exc_info=True)
            raise


def _description_lines(description: ImageDescriptionResult) -> list[str]:
    lines = []
    if description.captions:
        lines.append(f"{len(description.captions)} descriptions found")
        lines.extend(caption.text for caption in description.captions)
    if description.tags:
        lines.append(f"{len(description.tags)} tags found")
        lines.extend(description.tags)
    return lines
