import logging
from typing import Any, BinaryIO, Optional

import azure.cognitiveservices.speech as speechsdk

from audible_vision.errors import SpeechSynthesisError
from audible_vision.speech.config import SpeechConfig

logger = logging.getLogger(__name__)


class SpeechClient:
    """Client for text-to-speech synthesis with Azure Speech."""

    def __init__(self, config: SpeechConfig):
        self.config = config
        self.speech_config = speechsdk.SpeechConfig(subscription=config.key, region=config.region)
        self.speech_config.speech_synthesis_voice_name = config.voice
        if config.output_format:
            try:
                output_format = speechsdk.SpeechSynthesisOutputFormat[config.output_format]
            except KeyError:
                raise ValueError(f"Unknown speech output format: {config.output_format}")
            self.speech_config.set_speech_synthesis_output_format(output_format)

    @classmethod
    def from_env(cls) -> "SpeechClient":
        """Create client using environment variables."""
        return cls(SpeechConfig.from_env())

    def synthesize_to_stream(self, text: str, output: BinaryIO) -> None:
        """
        Synthesize text and write the audio to an output stream.

        The stream is owned by the caller and is left open.

        Raises:
            SpeechSynthesisError: If synthesis fails or is cancelled
        """
        result = self._speak(text, audio_config=None)
        output.write(result.audio_data)
        logger.debug(f"Wrote {len(result.audio_data)} bytes of audio")

    def synthesize_to_default_speakers(self, text: str) -> None:
        """
        Synthesize text and play it on the default speakers.

        Raises:
            SpeechSynthesisError: If synthesis fails or is cancelled
        """
        self._speak(text, audio_config=speechsdk.audio.AudioOutputConfig(use_default_speaker=True))

    def _speak(self, text: str, audio_config: Optional[Any]) -> Any:
        try:
            synthesizer = speechsdk.SpeechSynthesizer(
                speech_config=self.speech_config,
                audio_config=audio_config
            )
            result = synthesizer.speak_text_async(text).get()
        except Exception as e:
            raise SpeechSynthesisError(f"Failed to synthesize speech: {str(e)}") from e

        if result.reason != speechsdk.ResultReason.SynthesizingAudioCompleted:
            details = result.cancellation_details
            message = f"Speech synthesis did not complete: {result.reason}"
            if details is not None:
                message = f"Speech synthesis cancelled: {details.reason}"
                if details.error_details:
                    message += f" ({details.error_details})"
            raise SpeechSynthesisError(message)

        logger.debug(f"Synthesized {len(text)} characters with voice {self.config.voice}")
        return result
