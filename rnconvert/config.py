from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _optional_float(value: Optional[str]) -> Optional[float]:
  if value is None or not value.strip():
    return None
  return float(value)


@dataclass
class Settings:
  """Global backend configuration derived from environment variables."""

  backend_host: str = os.getenv('BACKEND_HOST', '127.0.0.1')
  backend_port: int = int(os.getenv('BACKEND_PORT', '6110'))
  log_level: str = os.getenv('BACKEND_LOG_LEVEL', 'info')
  data_dir: Path = Path(os.getenv('CONVERTER_DATA_DIR', './data')).resolve()
  event_log_dir: Path = Path(os.getenv('CONVERTER_EVENT_LOG', './data/logs')).resolve()
  provider_id: str = os.getenv('CONVERTER_PROVIDER', 'gemini')
  model_identifier: str = os.getenv('CONVERTER_MODEL', 'gemini-2.0-flash')
  gemini_api_key: Optional[str] = os.getenv('GEMINI_API_KEY')
  gemini_api_url: str = os.getenv('GEMINI_API_URL', 'https://generativelanguage.googleapis.com/v1beta/models')
  openai_api_key: Optional[str] = os.getenv('OPENAI_API_KEY')
  openai_base_url: str = os.getenv('OPENAI_BASE_URL', 'https://api.openai.com/v1')
  openai_organization: Optional[str] = os.getenv('OPENAI_ORG_ID')
  ollama_base_url: str = os.getenv('OLLAMA_BASE_URL', 'http://127.0.0.1:11434')
  # None leaves provider calls unbounded; callers wanting a deadline wrap the pipeline.
  request_timeout_seconds: Optional[float] = _optional_float(os.getenv('CONVERTER_REQUEST_TIMEOUT'))
  temperature: float = float(os.getenv('CONVERTER_TEMPERATURE', '0.1'))
  max_output_tokens: int = int(os.getenv('CONVERTER_MAX_OUTPUT_TOKENS', '8192'))
  max_concurrency: int = int(os.getenv('CONVERTER_MAX_CONCURRENCY', '10'))
  oracle_manifest_rewrite: bool = os.getenv('CONVERTER_ORACLE_MANIFEST', 'true').lower() == 'true'
  github_api_url: str = os.getenv('GITHUB_API_URL', 'https://api.github.com')
  github_raw_url: str = os.getenv('GITHUB_RAW_URL', 'https://raw.githubusercontent.com')
  github_token: Optional[str] = os.getenv('GITHUB_TOKEN')

  def ensure_directories(self) -> None:
    self.data_dir.mkdir(parents=True, exist_ok=True)
    self.event_log_dir.mkdir(parents=True, exist_ok=True)


settings = Settings()
