"""Domain exceptions for the lesson video pipeline."""


class DomainException(Exception):
    """Base exception for domain errors."""


class InvalidEntityIdException(DomainException):
    """Raised when an entity id cannot be used as a path or key segment."""

    def __init__(self, entity_id: str, reason: str = "Invalid identifier") -> None:
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(f"Invalid entity id '{entity_id}': {reason}")


class InvalidUploadException(DomainException):
    """Raised when an upload request is malformed (e.g. no file attached)."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class UploadTooLargeException(DomainException):
    """Raised when an upload exceeds the configured size ceiling."""

    def __init__(self, max_size_bytes: int, received_bytes: int | None = None) -> None:
        self.max_size_bytes = max_size_bytes
        self.received_bytes = received_bytes
        super().__init__(f"Upload exceeds maximum size of {max_size_bytes} bytes")


class TranscodeException(DomainException):
    """Raised when the external transcoder fails or is interrupted."""

    def __init__(self, input_path: str, reason: str) -> None:
        self.input_path = input_path
        self.reason = reason
        super().__init__(f"Transcoding failed for {input_path}: {reason}")


class TranscodeTimeoutException(TranscodeException):
    """Raised when a transcode exceeds its deadline and was killed."""

    def __init__(self, input_path: str, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(input_path, f"timed out after {timeout_seconds:g}s")


class TranscoderNotAvailableException(TranscodeException):
    """Raised when the transcoder binary cannot be resolved."""

    def __init__(self, input_path: str, binary: str) -> None:
        self.binary = binary
        super().__init__(input_path, f"transcoder binary '{binary}' not found")
