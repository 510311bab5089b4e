"""Runtime settings for the interview helper app and its edge function.

Every value comes from the environment (a local ``.env`` is honoured) and
falls back to a default that works for a laptop setup:

  GEMINI_API_KEY          key for the generative-language API (no default)
  AI_BASE_URL             OpenAI-compatible endpoint (Gemini by default)
  AI_MODEL                model id (default gemini-2.0-flash)
  AI_TEMPERATURE / AI_TOP_P / AI_MAX_OUTPUT_TOKENS
  AI_TIMEOUT_S            upstream timeout, kept below SUGGESTION_TIMEOUT_S
  SUGGESTION_API_URL      where the Streamlit app posts questions
  SUGGESTION_TIMEOUT_S    client timeout for that call
  INTERVIEW_HISTORY_FILE  local JSON file holding the history
  SPEECH_LANG             recognition language passed to the browser
  EDGE_HOST / EDGE_PORT   bind address of the edge function
  LOG_LEVEL               loguru sink level
"""

import os
import sys
from dataclasses import dataclass

from dotenv import load_dotenv
from loguru import logger

load_dotenv(override=False)

DEFAULT_AI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_AI_MODEL = "gemini-2.0-flash"
DEFAULT_SUGGESTION_API_URL = "http://localhost:8787/"
DEFAULT_HISTORY_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), ".interview_history.json")


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str = ""
    ai_base_url: str = DEFAULT_AI_BASE_URL
    ai_model: str = DEFAULT_AI_MODEL
    ai_temperature: float = 0.7
    ai_top_p: float = 0.95
    ai_max_output_tokens: int = 1024
    ai_timeout_s: float = 50.0
    suggestion_api_url: str = DEFAULT_SUGGESTION_API_URL
    suggestion_timeout_s: float = 60.0
    history_file: str = DEFAULT_HISTORY_FILE
    speech_lang: str = "en-US"
    edge_host: str = "0.0.0.0"
    edge_port: int = 8787
    log_level: str = "INFO"


def _env_str(name: str, default: str) -> str:
    return os.getenv(name, "").strip() or default


def _env_number(name: str, default, cast):
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}; using {default}")
        return default


def load_settings() -> Settings:
    return Settings(
        gemini_api_key=_env_str("GEMINI_API_KEY", ""),
        ai_base_url=_env_str("AI_BASE_URL", DEFAULT_AI_BASE_URL),
        ai_model=_env_str("AI_MODEL", DEFAULT_AI_MODEL),
        ai_temperature=_env_number("AI_TEMPERATURE", 0.7, float),
        ai_top_p=_env_number("AI_TOP_P", 0.95, float),
        ai_max_output_tokens=_env_number("AI_MAX_OUTPUT_TOKENS", 1024, int),
        ai_timeout_s=_env_number("AI_TIMEOUT_S", 50.0, float),
        suggestion_api_url=_env_str("SUGGESTION_API_URL", DEFAULT_SUGGESTION_API_URL),
        suggestion_timeout_s=_env_number("SUGGESTION_TIMEOUT_S", 60.0, float),
        history_file=_env_str("INTERVIEW_HISTORY_FILE", DEFAULT_HISTORY_FILE),
        speech_lang=_env_str("SPEECH_LANG", "en-US"),
        edge_host=_env_str("EDGE_HOST", "0.0.0.0"),
        edge_port=_env_number("EDGE_PORT", 8787, int),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)
