# canonical record (empty tuples – no placeholders) + the schema the LLM is asked to fill
from __future__ import annotations
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

SCHEMA_VERSION = "2"

PLACEHOLDER_NAME = "Name Not Found"
PRESENT = "Present"

# Written once and shipped with the renderer: bump SCHEMA_VERSION when either changes.
RESUME_SCHEMA = """{
  "name": "string",
  "email": "string",
  "phone": "string",
  "location": "string",
  "linkedin": "string (optional)",
  "summary": "string (2-4 impactful sentences)",
  "experience": [
    {
      "position": "string",
      "company": "string",
      "startDate": "string",
      "endDate": "string",
      "bullets": ["string", "string"]
    }
  ],
  "skills": ["string"],
  "education": [
    {
      "degree": "string",
      "institution": "string",
      "year": "string"
    }
  ],
  "certifications": ["string (optional)"]
}"""


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class ExperienceEntry(_Frozen):
    """One job in the career history."""
    position: str = ""
    company: str = ""
    startDate: str = ""
    endDate: str = PRESENT
    bullets: Tuple[str, ...] = Field(default_factory=tuple)


class EducationEntry(_Frozen):
    degree: str = ""
    institution: str = ""
    year: str = ""


class ResumeRecord(_Frozen):
    """Canonical résumé shared by the normaliser and the PDF renderer."""
    name: str = PLACEHOLDER_NAME
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin: Optional[str] = None
    summary: Optional[str] = None
    experience: Tuple[ExperienceEntry, ...] = Field(default_factory=tuple)
    skills: Tuple[str, ...] = Field(default_factory=tuple)
    education: Tuple[EducationEntry, ...] = Field(default_factory=tuple)
    certifications: Tuple[str, ...] = Field(default_factory=tuple)

    @property
    def contact_parts(self) -> Tuple[str, ...]:
        return tuple(v for v in (self.email, self.phone, self.location, self.linkedin) if v)

    def to_dict(self) -> dict:
        """Plain dict with unknown scalars omitted, in the shape of RESUME_SCHEMA."""
        return self.model_dump(exclude_none=True)
