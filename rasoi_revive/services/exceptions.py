from __future__ import annotations

class ServiceError(RuntimeError):
    """Base class for service-layer errors."""

class LeftoverValidationError(ServiceError):
    """Generate was requested with no leftovers; no service call is made."""

class GenerationInProgressError(ServiceError):
    """A generation workflow is already running for this session."""

class GenerationError(ServiceError):
    """Recipe batch request failed. The message is safe to show to the user."""

class ImageGenerationError(ServiceError):
    """Image request for one recipe failed."""

class SafetyBlockedError(ImageGenerationError):
    """The image was withheld by the service's content filter."""

    def __init__(self, message: str, finish_reason: str | None = None):
        super().__init__(message)
        self.finish_reason = finish_reason
