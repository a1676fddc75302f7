import io
import json

import pytest
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from errors import Timeout
from llm_client import LLMClient, LLMResponse


def make_pdf(lines):
    """Plain one-page PDF with one text line per entry."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    y = 800
    for line in lines:
        c.drawString(50, y, line)
        y -= 14
    c.showPage()
    c.save()
    return buf.getvalue()


class FakeLLMClient(LLMClient):
    """Returns canned replies in order; a reply may be a str, a dict, an exception or a callable."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def chat(self, model, messages, json_mode=False):
        self.calls.append({"model": model, "messages": messages, "json_mode": json_mode})
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if callable(reply) and not isinstance(reply, type):
            reply = reply(messages)
        if isinstance(reply, BaseException) or (isinstance(reply, type) and issubclass(reply, BaseException)):
            raise reply
        if isinstance(reply, dict):
            reply = json.dumps(reply)
        return LLMResponse(reply)


@pytest.fixture
def resume_lines():
    return [
        "Jane Doe",
        "jane@example.com | +1 555 0100 | Berlin",
        "Experience",
        "Sales Lead, Acme Corp, 2019 - 2023",
        "Managed a team and increased sales by 20%.",
        "Education",
        "BSc Economics, TU Berlin, 2018",
        "Skills: Negotiation, CRM, Excel",
    ]


@pytest.fixture
def resume_pdf(resume_lines):
    return make_pdf(resume_lines)


@pytest.fixture
def full_payload():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "+1 555 0100",
        "location": "Berlin",
        "linkedin": "linkedin.com/in/janedoe",
        "summary": "Sales leader who grows revenue. Builds teams that close.",
        "experience": [
            {
                "position": "Sales Lead",
                "company": "Acme Corp",
                "startDate": "2019",
                "endDate": "2023",
                "bullets": ["Increased sales by 20% in two years", "Hired and coached 6 reps"],
            }
        ],
        "skills": ["Negotiation", "CRM", "Excel"],
        "education": [{"degree": "BSc Economics", "institution": "TU Berlin", "year": "2018"}],
        "certifications": ["Certified Sales Professional"],
    }


@pytest.fixture
def timeout_error():
    return Timeout("slow upstream")
