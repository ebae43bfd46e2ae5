class ConversionError(Exception):
    """Base for per-file failures. Never escapes the batch loop."""


class SourceValidationError(ConversionError):
    """Raised when file content does not match its claimed format."""


class UnsupportedSourceError(ConversionError):
    """Raised when a source kind cannot be converted (e.g. images without OCR)."""


class UnsupportedTargetError(ConversionError):
    """Raised when the requested target format is not TXT or DOCX."""


class ExtractionError(ConversionError):
    """Raised when a parser fails to extract text."""


class NoTextExtractedError(ExtractionError):
    """Raised when a PDF parses but yields no text, typically a scanned document."""


class EncodingError(ConversionError):
    """Raised when extracted text cannot be written in the target format."""


class BatchError(Exception):
    """Base for failures of a whole batch request."""


class InputRejectedError(BatchError):
    """Raised for malformed or missing input before any conversion runs."""


class UploadTooLargeError(InputRejectedError):
    """Raised when a single upload exceeds the configured size limit."""


class BatchFailedError(BatchError):
    """Raised when no file in a batch converted successfully.

    The message is the first recorded per-file failure.
    """

    def __init__(self, message: str, failures: list | None = None) -> None:
        super().__init__(message)
        self.failures = list(failures or [])


class RegistryError(Exception):
    """Base for download resolution failures."""


class ArtifactNotFoundError(RegistryError):
    """Raised when no artifact exists for a download id and name."""


class PathRejectedError(RegistryError):
    """Raised when a download path would escape the output directory."""
