class CollaboratorFailure(Exception):
    """Raised when the vision or speech service fails to complete a request."""


class VisionAnalysisError(CollaboratorFailure):
    """Raised when image analysis fails or the image is rejected."""


class SpeechSynthesisError(CollaboratorFailure):
    """Raised when speech synthesis fails or is cancelled by the service."""


class OperationCancelledError(CollaboratorFailure):
    """Raised when the caller cancels an image analysis request."""
