from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from rnconvert.ai.clients import BaseLLMClient, ProviderError, ProviderResult, create_client
from rnconvert.ai.prompts import build_conversion_prompt, clean_model_output
from rnconvert.config import settings
from rnconvert.conversion.models import Role

logger = logging.getLogger(__name__)


@dataclass
class OrchestrationConfig:
  provider_id: str
  model_identifier: str
  temperature: float = 0.1
  max_tokens: int = 8192

  @classmethod
  def from_settings(cls) -> 'OrchestrationConfig':
    return cls(
      provider_id=settings.provider_id,
      model_identifier=settings.model_identifier,
      temperature=settings.temperature,
      max_tokens=settings.max_output_tokens
    )


class AIOrchestrator:
  """LLM-backed transformation oracle.

  Exposes the two capabilities the pipeline needs: ``transform_text`` for
  role-aware source rewrites and ``generate_text`` for free-form prompts
  such as the package.json rewrite. Clients are created lazily per provider.
  """

  def __init__(
    self,
    config: Optional[OrchestrationConfig] = None,
    client_factory: Callable[[str], BaseLLMClient] = create_client
  ) -> None:
    self.config = config or OrchestrationConfig.from_settings()
    self._client_factory = client_factory
    self._clients: Dict[str, BaseLLMClient] = {}

  async def transform_text(self, source: str, role: Role) -> str:
    logger.debug('Transforming %s source (%s chars) via %s', role.name, len(source), self.config.provider_id)
    prompt = build_conversion_prompt(source, role)
    result = await self._invoke_model(prompt)
    output = clean_model_output(result.output_text)
    if not output:
      raise ProviderError(f'Empty conversion returned for {role.name} source')
    return output

  async def generate_text(self, prompt: str) -> str:
    result = await self._invoke_model(prompt)
    return clean_model_output(result.output_text)

  async def _invoke_model(self, prompt: str) -> ProviderResult:
    client = self._get_client(self.config.provider_id)
    return await client.complete(
      model=self.config.model_identifier,
      prompt=prompt,
      temperature=self.config.temperature,
      max_output_tokens=self.config.max_tokens
    )

  def _get_client(self, provider_id: str) -> BaseLLMClient:
    if provider_id in self._clients:
      return self._clients[provider_id]
    client = self._client_factory(provider_id)
    self._clients[provider_id] = client
    return client

  async def close(self) -> None:
    for client in self._clients.values():
      close = getattr(client, 'aclose', None)
      if close:
        try:
          await close()
        except Exception:  # pragma: no cover - driver shutdown
          logger.debug('Failed to close client cleanly', exc_info=True)
    self._clients.clear()
