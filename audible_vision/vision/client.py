import logging
import time
from threading import Event, Lock
from typing import Any, BinaryIO, Optional

from azure.ai.vision.imageanalysis import ImageAnalysisClient
from azure.ai.vision.imageanalysis.models import VisualFeatures
from azure.core.credentials import AzureKeyCredential

from audible_vision.errors import OperationCancelledError, VisionAnalysisError
from audible_vision.vision.config import VisionConfig
from audible_vision.vision.models import (Caption, ImageAnalysisResult,
                                          ImageDescriptionResult, Line,
                                          ReadResult)
from audible_vision.vision.utils import validate_image

logger = logging.getLogger(__name__)


class VisionAnalysisClient:
    """Client for reading and describing images with Azure Vision."""

    def __init__(self, config: VisionConfig):
        self.config = config
        self.vision_client = ImageAnalysisClient(
            endpoint=config.endpoint,
            credential=AzureKeyCredential(config.key)
        )

        # Add rate limiting
        self._vision_lock = Lock()
        self._last_vision_call = 0
        self.vision_rate_limit = config.rate_limit

    @classmethod
    def from_env(cls) -> "VisionAnalysisClient":
        """Create client using environment variables."""
        return cls(VisionConfig.from_env())

    def read(
        self,
        image: BinaryIO,
        file_name: str,
        cancel: Optional[Event] = None
    ) -> ImageAnalysisResult:
        """
        Recognize the text in an image.

        Args:
            image: Readable image stream; read from its current position
            file_name: File name hint used for format detection
            cancel: Optional event that aborts the request when set

        Returns:
            ImageAnalysisResult with one ReadResult per detected text block

        Raises:
            OperationCancelledError: If cancel is set before the result is returned
            VisionAnalysisError: If the image is rejected or the service call fails
        """
        result = self._analyze(image, file_name, [VisualFeatures.READ], cancel)

        read_results = []
        if result.read and result.read.blocks:
            for block in result.read.blocks:
                read_results.append(ReadResult(lines=[Line(text=line.text) for line in block.lines]))

        logger.debug(
            f"Read {sum(len(r.lines) for r in read_results)} lines "
            f"in {len(read_results)} blocks from {file_name}"
        )
        return ImageAnalysisResult(read_results=read_results)

    def describe(
        self,
        image: BinaryIO,
        file_name: str,
        cancel: Optional[Event] = None
    ) -> ImageDescriptionResult:
        """
        Describe an image with ranked captions and tags.

        The main caption comes first, followed by dense captions in order of
        confidence when more than one candidate is configured.

        Raises:
            OperationCancelledError: If cancel is set before the result is returned
            VisionAnalysisError: If the image is rejected or the service call fails
        """
        features = [VisualFeatures.CAPTION, VisualFeatures.TAGS]
        if self.config.max_candidates > 1:
            features.append(VisualFeatures.DENSE_CAPTIONS)

        result = self._analyze(image, file_name, features, cancel)

        description = ImageDescriptionResult(
            captions=self._collect_captions(result),
            tags=[
                tag.name
                for tag in (result.tags.list if result.tags else [])
                if tag.confidence is None or tag.confidence >= self.config.min_tag_confidence
            ]
        )
        logger.debug(
            f"Described {file_name}: {len(description.captions)} captions, "
            f"{len(description.tags)} tags"
        )
        return description

    def _collect_captions(self, result: Any) -> list[Caption]:
        captions: list[Caption] = []
        if result.caption and result.caption.text:
            captions.append(Caption(text=result.caption.text, confidence=result.caption.confidence))

        if result.dense_captions and result.dense_captions.list:
            seen = {caption.text for caption in captions}
            ranked = sorted(result.dense_captions.list, key=lambda c: c.confidence or 0, reverse=True)
            for dense in ranked:
                if len(captions) >= self.config.max_candidates:
                    break
                if not dense.text or dense.text in seen:
                    continue
                seen.add(dense.text)
                captions.append(Caption(text=dense.text, confidence=dense.confidence))

        return captions[:self.config.max_candidates]

    def _analyze(
        self,
        image: BinaryIO,
        file_name: str,
        features: list[VisualFeatures],
        cancel: Optional[Event]
    ) -> Any:
        self._check_cancelled(cancel, file_name)
        try:
            image_data = image.read()
            validate_image(image_data, file_name)

            self._wait_for_vision_rate_limit()
            self._check_cancelled(cancel, file_name)

            logger.debug(f"Analyzing {file_name} for {[str(f) for f in features]}")
            result = self.vision_client.analyze(
                image_data=image_data,
                visual_features=features,
                language=self.config.language,
                gender_neutral_caption=self.config.gender_neutral_caption,
            )
        except OperationCancelledError:
            raise
        except Exception as e:
            raise VisionAnalysisError(f"Failed to analyze image {file_name}: {str(e)}") from e

        self._check_cancelled(cancel, file_name)
        return result

    @staticmethod
    def _check_cancelled(cancel: Optional[Event], file_name: str) -> None:
        if cancel is not None and cancel.is_set():
            raise OperationCancelledError(f"Analysis of {file_name} was cancelled")

    def _wait_for_vision_rate_limit(self):
        with self._vision_lock:
            now = time.time()
            if now - self._last_vision_call < self.vision_rate_limit:
                time.sleep(self.vision_rate_limit - (now - self._last_vision_call))
            self._last_vision_call = time.time()
