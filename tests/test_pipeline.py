import io
import json
import re

import pdfplumber
import pytest

import pipeline as pipeline_mod
from conftest import FakeLLMClient, make_pdf
from errors import (
    FileTooLarge, GENERIC_MESSAGE, MalformedResponse, MissingFile, UnreadableDocument,
    UnsupportedMediaType, UpstreamThrottled,
)
from pipeline import ResumePipeline, Upload, download_name, error_response, validate_upload


def pdf_text(data: bytes) -> str:
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        return "\n".join(p.extract_text() or "" for p in pdf.pages)


def rewrite_from_text(messages):
    """Stands in for the model: lifts the sentence with a number into a bullet."""
    text = messages[-1]["content"]
    sentence = next(line for line in text.splitlines() if re.search(r"\d+%", line))
    return json.dumps({
        "name": text.splitlines()[0],
        "experience": [{"position": "Sales Lead", "company": "Acme Corp",
                        "startDate": "2019", "endDate": "2023", "description": sentence}],
        "education": {"degree": "BSc Economics", "institution": "TU Berlin", "year": "2018"},
    })


@pytest.fixture
def upload(resume_pdf):
    return Upload(content=resume_pdf, media_type="application/pdf", filename="cv.pdf")


def test_end_to_end_keeps_quantified_bullet(tmp_path, upload):
    client = FakeLLMClient(rewrite_from_text)
    result = ResumePipeline(client, model="m", temp_dir=tmp_path).run(upload)

    text = pdf_text(result.pdf_bytes)
    assert text.index("CAREER HISTORY") < text.index("20%")
    assert result.record.experience[0].bullets == ("Managed a team and increased sales by 20%.",)
    assert len(result.record.education) == 1
    assert result.filename == "improved-cv.pdf"
    assert len(client.calls) == 1
    assert list(tmp_path.iterdir()) == []


def test_short_text_aborts_before_rewrite(tmp_path):
    client = FakeLLMClient({"name": "never"})
    short = Upload(content=make_pdf(["Jane Doe", "Engineer"]), media_type="application/pdf")
    with pytest.raises(UnreadableDocument):
        ResumePipeline(client, temp_dir=tmp_path).run(short)
    assert client.calls == []
    assert list(tmp_path.iterdir()) == []


def test_malformed_response_skips_rendering(tmp_path, upload, monkeypatch):
    rendered = []
    monkeypatch.setattr(pipeline_mod, "write_pdf", lambda *a, **k: rendered.append(a))
    client = FakeLLMClient('{"name": "Jane Doe", "experience": [')

    status, body, headers = ResumePipeline(client, temp_dir=tmp_path).process(upload)
    assert status == 502
    assert body == {"error": MalformedResponse.user_message}
    assert headers["Content-Type"] == "application/json"
    assert rendered == []
    assert list(tmp_path.iterdir()) == []


def test_process_success_returns_attachment(tmp_path, upload, full_payload):
    status, body, headers = ResumePipeline(FakeLLMClient(full_payload), temp_dir=tmp_path).process(upload)
    assert status == 200
    assert body.startswith(b"%PDF")
    assert headers["Content-Type"] == "application/pdf"
    assert 'filename="improved-cv.pdf"' in headers["Content-Disposition"]


def test_throttling_maps_to_429(tmp_path, upload):
    status, body, _ = ResumePipeline(FakeLLMClient(UpstreamThrottled("quota")), temp_dir=tmp_path).process(upload)
    assert status == 429
    assert "rate limit" in body["error"]


def test_timeout_maps_to_504(tmp_path, upload, timeout_error):
    pipe = ResumePipeline(FakeLLMClient(timeout_error), temp_dir=tmp_path, max_attempts=2)
    status, _, _ = pipe.process(upload)
    assert status == 504


def test_unexpected_error_is_generic(tmp_path, upload):
    status, body, _ = ResumePipeline(FakeLLMClient(RuntimeError("secret internals")), temp_dir=tmp_path).process(upload)
    assert status == 500
    assert body == {"error": GENERIC_MESSAGE}
    assert list(tmp_path.iterdir()) == []


@pytest.mark.parametrize("bad, status", [
    (None, 400),
    (Upload(content=b""), 400),
    (Upload(content=b"x" * 101, media_type="application/pdf"), 413),
    (Upload(content=b"%PDF-1.4", media_type="image/png"), 415),
    (Upload(content=b"%PDF-1.4", media_type=None), 415),
])
def test_invalid_uploads_rejected_before_any_stage(tmp_path, bad, status):
    client = FakeLLMClient({"name": "never"})
    got, body, _ = ResumePipeline(client, temp_dir=tmp_path, max_bytes=100).process(bad)
    assert got == status
    assert set(body) == {"error"}
    assert client.calls == []
    assert list(tmp_path.iterdir()) == []


def test_validate_upload_values():
    assert isinstance(validate_upload(None), MissingFile)
    assert isinstance(validate_upload(Upload(b"x" * 11, "application/pdf"), max_bytes=10), FileTooLarge)
    assert isinstance(validate_upload(Upload(b"x", "text/plain")), UnsupportedMediaType)
    assert validate_upload(Upload(b"x", "application/pdf; charset=binary")) is None


def test_file_too_large_message():
    status, body = error_response(FileTooLarge(10 * 1024 * 1024, 11 * 1024 * 1024))
    assert status == 413
    assert body == {"error": "File too large. Maximum size is 10 MB."}


def test_temp_files_released_once_on_success(tmp_path, upload, full_payload, monkeypatch):
    released = []
    real = pipeline_mod.cleanup_file

    def tracking(path):
        released.append(path)
        return real(path)

    monkeypatch.setattr(pipeline_mod, "cleanup_file", tracking)
    ResumePipeline(FakeLLMClient(full_payload), temp_dir=tmp_path).run(upload)

    paths = [p for p in released if p is not None]
    assert len(paths) == 2 and len(set(paths)) == 2
    assert not any(p.exists() for p in paths)


def test_temp_files_released_when_delivery_fails(tmp_path, upload, full_payload):
    delivered = []

    def deliver(path):
        delivered.append(path.read_bytes()[:4])
        raise ConnectionResetError("client went away")

    with pytest.raises(ConnectionResetError):
        ResumePipeline(FakeLLMClient(full_payload), temp_dir=tmp_path).run(upload, deliver=deliver)
    assert delivered == [b"%PDF"]
    assert list(tmp_path.iterdir()) == []


@pytest.mark.parametrize("name, expected", [
    ("cv.pdf", "improved-cv.pdf"),
    ("Jane Doe (2024).PDF", "improved-Jane-Doe-2024.pdf"),
    ('../../evil"name.pdf', "improved-evil-name.pdf"),
    (None, "improved-resume.pdf"),
    ("", "improved-resume.pdf"),
    ("()).pdf", "improved-resume.pdf"),
])
def test_download_name_follows_upload(name, expected):
    assert download_name(name) == expected


def test_anonymous_upload_uses_default_name(tmp_path, resume_pdf, full_payload):
    anonymous = Upload(content=resume_pdf, media_type="application/pdf")
    _, _, headers = ResumePipeline(FakeLLMClient(full_payload), temp_dir=tmp_path).process(anonymous)
    assert 'filename="improved-resume.pdf"' in headers["Content-Disposition"]
