from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import httpx

from rnconvert.config import settings


class ProviderError(RuntimeError):
  """Represents a provider specific failure."""


@dataclass
class ProviderResult:
  output_text: str
  input_tokens: int
  output_tokens: int
  total_tokens: int
  raw_response: Dict[str, object]


def _default_token_estimate(text: str) -> int:
  # Rough heuristic: 1 token ≈ 4 characters
  return max(1, math.ceil(len(text) / 4))


class BaseLLMClient:
  """One request per call; failures surface as ProviderError without retrying."""

  label = 'provider'

  def __init__(self, http_client: Optional[httpx.AsyncClient] = None) -> None:
    self.timeout = settings.request_timeout_seconds
    self._client = http_client or httpx.AsyncClient(timeout=self.timeout)

  async def complete(
    self,
    model: str,
    prompt: str,
    temperature: float,
    max_output_tokens: int
  ) -> ProviderResult:
    try:
      text, usage = await self._request(model, prompt, temperature, max_output_tokens)
    except httpx.HTTPStatusError as exc:
      raise ProviderError(
        f'{self.label} API error ({exc.response.status_code}): {exc.response.text}'
      ) from exc
    except httpx.HTTPError as exc:
      raise ProviderError(f'{self.label} request failed: {exc!r}') from exc
    except (KeyError, TypeError, ValueError) as exc:
      raise ProviderError(f'{self.label} returned an unexpected payload: {exc}') from exc
    if not text.strip():
      raise ProviderError(f'{self.label} returned an empty response')
    return self._build_result(text, usage, prompt)

  async def _request(
    self,
    model: str,
    prompt: str,
    temperature: float,
    max_output_tokens: int
  ) -> Tuple[str, Dict[str, int]]:
    raise NotImplementedError

  def _build_result(self, text: str, usage: Dict[str, int], prompt: str) -> ProviderResult:
    input_tokens = usage.get('prompt_tokens') or _default_token_estimate(prompt)
    output_tokens = usage.get('completion_tokens') or _default_token_estimate(text)
    return ProviderResult(
      output_text=text,
      input_tokens=input_tokens,
      output_tokens=output_tokens,
      total_tokens=input_tokens + output_tokens,
      raw_response={'usage': usage}
    )

  async def aclose(self) -> None:
    await self._client.aclose()


class GeminiClient(BaseLLMClient):
  label = 'Gemini'

  def __init__(
    self,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None
  ) -> None:
    api_key = api_key or settings.gemini_api_key
    if not api_key:
      raise ProviderError('GEMINI_API_KEY is not configured.')
    super().__init__(http_client)
    self.api_key = api_key
    self.base_url = (base_url or settings.gemini_api_url).rstrip('/')

  async def _request(
    self,
    model: str,
    prompt: str,
    temperature: float,
    max_output_tokens: int
  ) -> Tuple[str, Dict[str, int]]:
    url = f'{self.base_url}/{model}:generateContent'
    payload = {
      'contents': [{'parts': [{'text': prompt}]}],
      'generationConfig': {
        'temperature': temperature,
        'maxOutputTokens': max_output_tokens
      }
    }
    resp = await self._client.post(url, params={'key': self.api_key}, json=payload)
    resp.raise_for_status()
    data = resp.json()
    text_parts = []
    for candidate in data.get('candidates', []):
      for part in candidate.get('content', {}).get('parts', []):
        text_parts.append(part.get('text', ''))
    usage_meta = data.get('usageMetadata', {})
    usage = {
      'prompt_tokens': usage_meta.get('promptTokenCount', 0),
      'completion_tokens': usage_meta.get('candidatesTokenCount', 0)
    }
    return ''.join(text_parts), usage


class OpenAIClient(BaseLLMClient):
  label = 'OpenAI'

  def __init__(
    self,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None
  ) -> None:
    api_key = api_key or settings.openai_api_key
    if not api_key:
      raise ProviderError('OPENAI_API_KEY is not configured.')
    super().__init__(http_client)
    self.base_url = (base_url or settings.openai_base_url).rstrip('/')
    self.headers = {
      'Authorization': f'Bearer {api_key}',
      'Content-Type': 'application/json'
    }
    if settings.openai_organization:
      self.headers['OpenAI-Organization'] = settings.openai_organization

  async def _request(
    self,
    model: str,
    prompt: str,
    temperature: float,
    max_output_tokens: int
  ) -> Tuple[str, Dict[str, int]]:
    payload = {
      'model': model,
      'temperature': temperature,
      'max_tokens': max_output_tokens,
      'messages': [{'role': 'user', 'content': prompt}]
    }
    resp = await self._client.post(f'{self.base_url}/chat/completions', headers=self.headers, json=payload)
    resp.raise_for_status()
    data = resp.json()
    text = ''.join(
      choice['message'].get('content') or ''
      for choice in data.get('choices', [])
      if choice.get('message')
    )
    return text, data.get('usage', {})


class OllamaClient(BaseLLMClient):
  label = 'Ollama'

  def __init__(self, base_url: Optional[str] = None, http_client: Optional[httpx.AsyncClient] = None) -> None:
    super().__init__(http_client)
    self.base_url = (base_url or settings.ollama_base_url).rstrip('/')

  async def _request(
    self,
    model: str,
    prompt: str,
    temperature: float,
    max_output_tokens: int
  ) -> Tuple[str, Dict[str, int]]:
    payload = {
      'model': model,
      'prompt': prompt,
      'stream': False,
      'options': {
        'temperature': temperature,
        'num_predict': max_output_tokens
      }
    }
    resp = await self._client.post(f'{self.base_url}/api/generate', json=payload)
    resp.raise_for_status()
    data = resp.json()
    text = data.get('response', '')
    usage = {
      'completion_tokens': data.get('eval_count', 0),
      'prompt_tokens': data.get('prompt_eval_count', 0)
    }
    return text, usage


def create_client(provider_id: str, http_client: Optional[httpx.AsyncClient] = None) -> BaseLLMClient:
  provider = provider_id.lower()
  if provider.startswith('gemini'):
    return GeminiClient(http_client=http_client)
  if provider.startswith('gpt') or provider in {'openai', 'openai-compatible'}:
    return OpenAIClient(http_client=http_client)
  if provider == 'ollama':
    return OllamaClient(http_client=http_client)
  raise ProviderError(f'Unsupported provider: {provider_id}')
