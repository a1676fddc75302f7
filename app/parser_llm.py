"""
LLM-based résumé rewriter.

• Supports multiple LLM providers (Ollama, OpenAI with GPT models)
• Sends the fixed RESUME_SCHEMA instructions plus the extracted text, one
  request per attempt; only timeouts are retried.
• Unwraps ```json fences / stray prose before parsing, and hands back the raw
  dict; the normaliser in cleaner.py turns it into a ResumeRecord.
"""

from __future__ import annotations
import json, logging, re, textwrap
from typing import Dict, List

from config import REWRITE_MAX_ATTEMPTS, get_model_for_provider
from errors import MalformedResponse, Timeout
from llm_client import LLMClient
from schema_resume import RESUME_SCHEMA, SCHEMA_VERSION
from utils import strip_json_fences

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = textwrap.dedent(
    """\
    You are an expert resume writer and career coach.

    Analyse the resume text and return ONLY a JSON object (no markdown fences,
    no commentary) that strictly matches this schema:
    {schema}

    Rules:
    - Rewrite the summary to be punchy and results-oriented (2–4 sentences).
    - Convert experience descriptions into 3–5 concise bullet points each (store as the "bullets" array).
    - Quantify achievements wherever the source material contains any numbers, dates, or metrics.
    - Extract all skills as a flat array of short strings.
    - If the education field contains multiple degrees, return them as an array.
    - Preserve all contact details exactly as found.
    - If a field is missing from the source, omit it from the JSON rather than guessing.
    """
).format(schema=RESUME_SCHEMA)

_JSON_FINDER = re.compile(r"\{.*\}", re.S)


def extract_json(raw: str) -> dict:
    """Fenced / chatty model output ➜ dict, or MalformedResponse."""
    payload = strip_json_fences(raw)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        m = _JSON_FINDER.search(payload)
        if not m:
            raise MalformedResponse("no JSON object in response", raw=raw)
        try:
            data = json.loads(m.group())
        except json.JSONDecodeError as e:
            raise MalformedResponse(f"invalid JSON: {e}", raw=raw) from e
    if not isinstance(data, dict):
        raise MalformedResponse(f"expected a JSON object, got {type(data).__name__}", raw=raw)
    return data


def build_messages(raw_text: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": raw_text},
    ]


class RewriteService:
    """Extracted text ➜ raw structured payload via one LLM round trip."""

    def __init__(self, client: LLMClient, model: str | None = None,
                 max_attempts: int = REWRITE_MAX_ATTEMPTS):
        self.client = client
        self.model = model or get_model_for_provider()
        self.max_attempts = max(1, max_attempts)

    def rewrite(self, raw_text: str) -> dict:
        messages = build_messages(raw_text)
        for attempt in range(1, self.max_attempts + 1):
            try:
                rsp = self.client.chat(model=self.model, messages=messages, json_mode=True)
                break
            except Timeout:
                if attempt == self.max_attempts:
                    raise
                logger.warning("Rewrite timed out (attempt %d/%d), retrying",
                               attempt, self.max_attempts)

        content = rsp.message.content or ""
        try:
            data = extract_json(content)
        except MalformedResponse:
            logger.error("Model %s returned non-JSON output (%d chars)", self.model, len(content))
            logger.debug("Raw model output: %.500s", content)
            raise

        logger.info("Rewrite produced %d top-level fields (schema v%s)", len(data), SCHEMA_VERSION)
        return data
