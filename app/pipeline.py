"""
Upload ➜ improved résumé PDF.

    validate ➜ extract ➜ rewrite (LLM) ➜ normalise ➜ render

One synchronous run per request. The LLM client is injected, so nothing here
is shared between requests. Temp files for the upload and the rendered PDF
are removed in ``finally`` whatever happens.
"""

from __future__ import annotations
import logging
import re
import tempfile
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from config import (
    ACCEPTED_MEDIA_TYPES, MAX_FILE_SIZE_BYTES, OUTPUT_FILENAME,
    REWRITE_MAX_ATTEMPTS, TEMP_DIR,
)
from cleaner import normalize_resume
from errors import (
    GENERIC_MESSAGE, FileTooLarge, InputValidationError, MissingFile,
    ResumePipelineError, UnsupportedMediaType,
)
from extractor import extract_text
from generator_pdf import write_pdf
from llm_client import LLMClient
from parser_llm import RewriteService
from schema_resume import ResumeRecord
from utils import _sha, cleanup_file

logger = logging.getLogger(__name__)

_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class Upload:
    """What the transport layer hands over: raw bytes plus the declared type."""
    content: Optional[bytes]
    media_type: Optional[str] = None
    filename: Optional[str] = None


@dataclass
class PipelineResult:
    pdf_bytes: bytes
    record: ResumeRecord
    filename: str = OUTPUT_FILENAME
    timings: Dict[str, float] = field(default_factory=dict)


def validate_upload(upload: Optional[Upload],
                    max_bytes: int = MAX_FILE_SIZE_BYTES) -> Optional[InputValidationError]:
    """Return the reason the upload is unacceptable, or None if it may proceed."""
    if upload is None or not upload.content:
        return MissingFile()
    if len(upload.content) > max_bytes:
        return FileTooLarge(max_bytes, len(upload.content))
    media_type = (upload.media_type or "").split(";")[0].strip().lower()
    if media_type not in ACCEPTED_MEDIA_TYPES:
        return UnsupportedMediaType(upload.media_type)
    return None


def download_name(filename: Optional[str]) -> str:
    """`cv.pdf` ➜ `improved-cv.pdf`; header-safe, falls back to OUTPUT_FILENAME."""
    stem = _UNSAFE_NAME.sub("-", Path(filename or "").stem).strip(".-")
    return f"improved-{stem}.pdf" if stem else OUTPUT_FILENAME


def error_response(exc: BaseException) -> Tuple[int, Dict[str, str]]:
    """Map any failure to ``(status, {"error": message})`` without leaking internals."""
    if isinstance(exc, ResumePipelineError):
        return exc.status_code, {"error": exc.user_message}
    return 500, {"error": GENERIC_MESSAGE}


class ResumePipeline:
    """Runs the four stages for one upload at a time; safe to share across threads."""

    def __init__(self, client: LLMClient, model: str | None = None,
                 temp_dir: str | Path | None = None,
                 max_attempts: int = REWRITE_MAX_ATTEMPTS,
                 max_bytes: int = MAX_FILE_SIZE_BYTES):
        self.rewriter = RewriteService(client, model=model, max_attempts=max_attempts)
        self.temp_dir = Path(temp_dir or TEMP_DIR)
        self.max_bytes = max_bytes

    def run(self, upload: Upload,
            deliver: Callable[[Path], None] | None = None) -> PipelineResult:
        """
        Process one upload. Raises a ResumePipelineError subclass on any
        expected failure; *deliver* (if given) receives the rendered file
        before it is removed.
        """
        error = validate_upload(upload, self.max_bytes)
        if error is not None:
            raise error

        timings: Dict[str, float] = {}
        input_path: Optional[Path] = None
        output_path: Optional[Path] = None
        try:
            self.temp_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(dir=self.temp_dir, prefix="upload-",
                                             suffix=".pdf", delete=False) as fh:
                input_path = Path(fh.name)
                fh.write(upload.content)

            t0 = time.perf_counter()
            text = extract_text(input_path)
            timings["extract"] = time.perf_counter() - t0
            logger.info("Extracted resume text sha=%s len=%d", _sha(text)[:12], len(text))

            t0 = time.perf_counter()
            payload = self.rewriter.rewrite(text)
            timings["rewrite"] = time.perf_counter() - t0

            record = normalize_resume(payload)

            t0 = time.perf_counter()
            output_path = self.temp_dir / f"improved-{uuid.uuid4().hex}.pdf"
            write_pdf(record, output_path)
            pdf_bytes = output_path.read_bytes()
            timings["render"] = time.perf_counter() - t0

            if deliver is not None:
                deliver(output_path)

            logger.info("Pipeline finished: %s",
                        ", ".join(f"{k}={v:.2f}s" for k, v in timings.items()))
            return PipelineResult(pdf_bytes=pdf_bytes, record=record,
                                  filename=download_name(upload.filename), timings=timings)
        finally:
            cleanup_file(input_path)
            cleanup_file(output_path)

    def process(self, upload: Upload) -> Tuple[int, object, Dict[str, str]]:
        """
        Transport-friendly wrapper: ``(status, body, headers)`` where body is
        the PDF bytes on success and ``{"error": ...}`` otherwise.
        """
        try:
            result = self.run(upload)
        except InputValidationError as e:
            logger.info("Upload rejected: %s", e)
            status, body = error_response(e)
            return status, body, {"Content-Type": "application/json"}
        except ResumePipelineError as e:
            logger.warning("Pipeline failed (%s): %s", type(e).__name__, e)
            status, body = error_response(e)
            return status, body, {"Content-Type": "application/json"}
        except Exception as e:
            logger.exception("Unexpected pipeline error")
            status, body = error_response(e)
            return status, body, {"Content-Type": "application/json"}

        return 200, result.pdf_bytes, {
            "Content-Type": "application/pdf",
            "Content-Disposition": f'attachment; filename="{result.filename}"',
        }
