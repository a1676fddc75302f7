"""
Configuration settings for the resume-polish pipeline.

This file contains configuration for the LLM providers and models, plus the
limits applied to uploads and to the rewrite call.
You can easily switch between providers by changing the settings here.
"""

from dotenv import load_dotenv
load_dotenv()          # ← must be before os.getenv(...)
import os
import tempfile

# LLM Provider Configuration
# Set to "ollama" or "openai"
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai").lower()

# Model Configuration
# For Ollama: use models like "llama3", "mistral", etc.
# For OpenAI: use models like "gpt-4o-mini", "gpt-4o", etc.
DEFAULT_MODEL = {
    "ollama": os.getenv("OLLAMA_MODEL", "llama3"),
    "openai": os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
}

# OpenAI Configuration
# Not required at import time; OpenAIClient refuses to start without it.
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL_PARAMS = {
    "temperature": 0.3,
    "max_tokens": 2000
}

# Ollama Configuration
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")

# Rewrite call
REWRITE_TIMEOUT_SECONDS = float(os.getenv("REWRITE_TIMEOUT_SECONDS", "60"))
REWRITE_MAX_ATTEMPTS = int(os.getenv("REWRITE_MAX_ATTEMPTS", "2"))  # only timeouts are retried

# Upload / extraction limits
MAX_FILE_SIZE_MB = int(os.getenv("MAX_FILE_SIZE_MB", "10"))
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024
ACCEPTED_MEDIA_TYPES = ("application/pdf",)
MIN_TEXT_LENGTH = 50

# Output
OUTPUT_FILENAME = "improved-resume.pdf"
TEMP_DIR = os.getenv("RESUME_TEMP_DIR") or tempfile.gettempdir()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def get_model_for_provider(provider: str = None) -> str:
    """Get the default model for the specified provider."""
    provider = provider or LLM_PROVIDER
    return DEFAULT_MODEL.get(provider, "gpt-4o-mini")
