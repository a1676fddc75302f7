"""
PDF ➜ raw text
– strips `(cid:N)` glyph artifacts
– suppresses verbose CropBox warnings from pdfplumber/pdfminer
– rejects documents with too little text (scanned / image-only)
"""
from __future__ import annotations
from pathlib import Path
import io, re, logging, warnings, pdfplumber
from pdfminer.psparser import PSException
from pdfplumber.utils.exceptions import PdfminerException

from config import MIN_TEXT_LENGTH
from errors import UnreadableDocument

# silence noisy PDF logging
logging.getLogger("pdfplumber").setLevel(logging.ERROR)
logging.getLogger("pdfminer").setLevel(logging.ERROR)
warnings.filterwarnings("ignore", category=UserWarning, module="pdfminer")

logger = logging.getLogger(__name__)

_CID_RE = re.compile(r"\(cid:\d+\)")


def _read_pages(source) -> str:
    with pdfplumber.open(source) as pdf:
        pages = [p.extract_text() or "" for p in pdf.pages]
    return _CID_RE.sub("", "\n".join(pages))


def pdf_to_text(pdf_path: str | Path) -> str:
    return _read_pages(pdf_path)


def extract_text(source: bytes | str | Path, min_length: int = MIN_TEXT_LENGTH) -> str:
    """PDF bytes or path ➜ trimmed text, or UnreadableDocument when nothing usable comes out."""
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    try:
        text = _read_pages(source).strip()
    except (PdfminerException, PSException) as e:
        raise UnreadableDocument(f"PDF could not be parsed: {e}") from e

    if len(text) < min_length:
        raise UnreadableDocument(
            f"extracted {len(text)} characters, need at least {min_length}"
        )
    logger.info("Extracted %d characters of text", len(text))
    return text
