"""
Utility functions for the resume-polish app.
"""

import hashlib
import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^\s*```(?:json)?\s*", re.I)
_FENCE_CLOSE = re.compile(r"\s*```\s*$")


def _sha(text: str) -> str:
    """Computes SHA256 hash of a string."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def strip_json_fences(raw: str) -> str:
    """Remove a leading ```json / ``` fence and a trailing ``` fence."""
    return _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", raw or "")).strip()


def cleanup_file(path) -> bool:
    """Delete *path* if it exists. Returns True when a file was removed."""
    if not path:
        return False
    try:
        Path(path).unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning("Could not remove temp file %s: %s", path, e)
        return False
    return True
