"""
Schema normalisation: loosely-typed LLM payload ➜ ResumeRecord.

Never raises on odd shapes; anything unusable is dropped or defaulted.
This is the only module that knows about the upstream payload variants.
"""
from __future__ import annotations
import logging, re, unicodedata
from typing import Any, Dict, Iterable, List, Optional, Tuple

from schema_resume import (
    PLACEHOLDER_NAME, PRESENT, EducationEntry, ExperienceEntry, ResumeRecord,
)

logger = logging.getLogger(__name__)

_CONTROL = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_SPACES = re.compile(r"\s+")
_BULLET_LEAD = re.compile(r"^(?:[•▪●]\s*|[*–-](?:\s+|$))+")

# ───────────────────────────────────────── helpers ──
def clean_text(value: Any) -> Optional[str]:
    """Scalar ➜ single-line string without control characters, or None if empty."""
    if value is None or isinstance(value, (dict, list, tuple)):
        return None
    s = unicodedata.normalize("NFKC", str(value))
    s = _SPACES.sub(" ", _CONTROL.sub(" ", s)).strip()
    return s or None

def _first(d: Dict[str, Any], *keys: str) -> Optional[str]:
    for k in keys:
        if (v := clean_text(d.get(k))) is not None:
            return v
    return None

def as_sequence(value: Any) -> List[Any]:
    """None ➜ [], single object ➜ [object], list/tuple ➜ list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]

def string_list(value: Any) -> List[str]:
    out = []
    for item in as_sequence(value):
        if isinstance(item, dict):
            item = item.get("name") or item.get("title")
        if (s := clean_text(item)) is not None:
            out.append(s)
    return out

def _bullets(raw: Iterable[str]) -> Tuple[str, ...]:
    out = []
    for b in raw:
        b = _BULLET_LEAD.sub("", b).strip()
        if b:
            out.append(b)
    return tuple(out)

def _skills(value: Any) -> Tuple[str, ...]:
    if isinstance(value, dict):                       # {"core": [...], "tools": [...]}
        flat: List[str] = []
        for lst in value.values():
            flat.extend(_skills(lst))
        return tuple(flat)
    if isinstance(value, str):                        # "Python, SQL, Docker"
        return tuple(s for s in (clean_text(p) for p in value.split(",")) if s)
    return tuple(string_list(value))

# ───────────────────────────────────────── entries ──
def _experience(e: Any) -> Optional[ExperienceEntry]:
    if not isinstance(e, dict):
        return None
    bullets = _bullets(string_list(e.get("bullets")))
    if not bullets:                                   # older shape: one free-text description
        bullets = _bullets(string_list(e.get("description")))
    if not bullets:
        return None
    return ExperienceEntry(
        position=_first(e, "position", "title", "role") or "",
        company=_first(e, "company", "employer", "organization") or "",
        startDate=_first(e, "startDate", "start", "start_date") or "",
        endDate=_first(e, "endDate", "end", "end_date") or PRESENT,
        bullets=bullets,
    )

def _education(e: Any) -> Optional[EducationEntry]:
    if not isinstance(e, dict):
        return None
    entry = EducationEntry(
        degree=_first(e, "degree") or "",
        institution=_first(e, "institution", "school", "university") or "",
        year=_first(e, "year", "graduationYear", "end", "endDate") or "",
    )
    if not (entry.degree or entry.institution or entry.year):
        return None
    return entry

# ───────────────────────────────────────── normaliser ──
def normalize_resume(raw: Any) -> ResumeRecord:
    if isinstance(raw, ResumeRecord):
        return raw
    if not isinstance(raw, dict):
        logger.warning("Expected a JSON object, got %s; using an empty record",
                       type(raw).__name__)
        raw = {}

    contact = raw.get("contact") if isinstance(raw.get("contact"), dict) else {}

    def scalar(key: str) -> Optional[str]:
        return clean_text(raw.get(key)) or clean_text(contact.get(key))

    experience = [x for x in map(_experience, as_sequence(raw.get("experience"))) if x]
    education = [x for x in map(_education, as_sequence(raw.get("education"))) if x]

    dropped = len(as_sequence(raw.get("experience"))) - len(experience)
    if dropped:
        logger.debug("Dropped %d experience entries without bullets", dropped)

    return ResumeRecord(
        name=clean_text(raw.get("name")) or PLACEHOLDER_NAME,
        email=scalar("email"),
        phone=scalar("phone"),
        location=scalar("location"),
        linkedin=scalar("linkedin"),
        summary=clean_text(raw.get("summary")),
        experience=tuple(experience),
        skills=_skills(raw.get("skills")),
        education=tuple(education),
        certifications=tuple(string_list(raw.get("certifications"))),
    )
