"""
Failure taxonomy for the résumé pipeline.

Every failure carries the HTTP-style status it maps to and a message that is
safe to show to the person who uploaded the file. Internal detail stays in
the exception's own text (``str(exc)``) and in the logs.
"""

from __future__ import annotations

GENERIC_MESSAGE = "Something went wrong processing your resume. Please try again."


class ResumePipelineError(Exception):
    """Base class for every typed pipeline failure."""

    status_code = 500
    user_message = GENERIC_MESSAGE

    def __init__(self, message: str | None = None, *, user_message: str | None = None):
        self.message = message or self.user_message
        if user_message is not None:
            self.user_message = user_message
        super().__init__(self.message)


# ───────────────────────────────────────── input ──
class InputValidationError(ResumePipelineError):
    """The upload was rejected before any pipeline stage ran."""

    status_code = 400


class MissingFile(InputValidationError):
    status_code = 400
    user_message = "No file uploaded. Please attach a PDF."


class FileTooLarge(InputValidationError):
    status_code = 413
    user_message = "File too large."

    def __init__(self, limit_bytes: int, size_bytes: int | None = None):
        self.limit_bytes = limit_bytes
        self.size_bytes = size_bytes
        limit_mb = f"{limit_bytes / (1024 * 1024):g}"
        super().__init__(
            f"upload of {size_bytes} bytes exceeds {limit_bytes} bytes",
            user_message=f"File too large. Maximum size is {limit_mb} MB.",
        )


class UnsupportedMediaType(InputValidationError):
    status_code = 415
    user_message = "Only PDF files are accepted."

    def __init__(self, media_type: str | None = None):
        self.media_type = media_type
        super().__init__(f"unsupported media type: {media_type!r}")


# ───────────────────────────────────────── extraction ──
class ExtractionError(ResumePipelineError):
    status_code = 422


class UnreadableDocument(ExtractionError):
    """Too little text came out of the document (likely scanned or image-only)."""

    status_code = 422
    user_message = (
        "Could not extract readable text from the PDF. "
        "Ensure it is not scanned/image-based."
    )


# ───────────────────────────────────────── generation ──
class GenerationError(ResumePipelineError):
    status_code = 502
    user_message = "AI returned an unexpected response. Please try again."


class MalformedResponse(GenerationError):
    """The generative service answered with something that is not a JSON object."""

    status_code = 502

    def __init__(self, message: str | None = None, raw: str | None = None):
        self.raw = raw
        super().__init__(message or "response is not a JSON object")


class UpstreamThrottled(GenerationError):
    status_code = 429
    user_message = "AI rate limit reached. Please try again shortly."


class Timeout(GenerationError):
    status_code = 504
    user_message = "The AI service took too long to respond. Please try again."


# ───────────────────────────────────────── rendering ──
class RenderError(ResumePipelineError):
    status_code = 500


class IOFailure(RenderError):
    """The rendered document could not be written to its sink."""


# Namespaced aliases so call sites can read ``GenerationError.Timeout`` etc.
ExtractionError.Unreadable = UnreadableDocument
GenerationError.MalformedResponse = MalformedResponse
GenerationError.UpstreamThrottled = UpstreamThrottled
GenerationError.Timeout = Timeout
RenderError.IOFailure = IOFailure
InputValidationError.MissingFile = MissingFile
InputValidationError.FileTooLarge = FileTooLarge
InputValidationError.UnsupportedMediaType = UnsupportedMediaType
