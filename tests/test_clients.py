"""Tests for the LLM provider clients and the orchestrator."""

import asyncio
import json

import httpx
import pytest

from rnconvert.ai.clients import GeminiClient, OllamaClient, OpenAIClient, ProviderError, ProviderResult, create_client
from rnconvert.ai.orchestrator import AIOrchestrator, OrchestrationConfig
from rnconvert.ai.prompts import build_conversion_prompt, clean_model_output
from rnconvert.conversion.models import Role


def mock_client(handler):
  return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def complete(client, prompt='convert me'):
  return asyncio.run(client.complete('model-x', prompt, temperature=0.1, max_output_tokens=256))


class TestGeminiClient:
  def test_successful_completion(self):
    seen = {}

    def handler(request):
      seen['url'] = str(request.url)
      seen['body'] = json.loads(request.content)
      return httpx.Response(200, json={
        'candidates': [{'content': {'parts': [{'text': 'const a = 1;'}]}}],
        'usageMetadata': {'promptTokenCount': 12, 'candidatesTokenCount': 5}
      })

    client = GeminiClient(api_key='k', base_url='https://gemini.test/models', http_client=mock_client(handler))
    result = complete(client)

    assert seen['url'] == 'https://gemini.test/models/model-x:generateContent?key=k'
    assert seen['body']['generationConfig'] == {'temperature': 0.1, 'maxOutputTokens': 256}
    assert result.output_text == 'const a = 1;'
    assert result.total_tokens == 17

  def test_http_error_becomes_provider_error(self):
    client = GeminiClient(api_key='k', http_client=mock_client(lambda request: httpx.Response(429, text='slow down')))
    with pytest.raises(ProviderError, match='429'):
      complete(client)

  def test_empty_reply_is_an_error(self):
    client = GeminiClient(api_key='k', http_client=mock_client(lambda request: httpx.Response(200, json={'candidates': []})))
    with pytest.raises(ProviderError, match='empty'):
      complete(client)


class TestOpenAIClient:
  def test_chat_completion(self):
    def handler(request):
      assert request.url.path.endswith('/chat/completions')
      assert request.headers['Authorization'] == 'Bearer k'
      return httpx.Response(200, json={
        'choices': [{'message': {'content': 'export default App;'}}],
        'usage': {'prompt_tokens': 3, 'completion_tokens': 4}
      })

    client = OpenAIClient(api_key='k', base_url='https://openai.test/v1', http_client=mock_client(handler))
    assert complete(client).output_text == 'export default App;'

  def test_malformed_payload(self):
    client = OpenAIClient(api_key='k', http_client=mock_client(lambda request: httpx.Response(200, json={'choices': None})))
    with pytest.raises(ProviderError):
      complete(client)


class TestOllamaClient:
  def test_generate(self):
    def handler(request):
      assert json.loads(request.content)['stream'] is False
      return httpx.Response(200, json={'response': 'ok', 'eval_count': 2, 'prompt_eval_count': 1})

    client = OllamaClient(base_url='http://ollama.test', http_client=mock_client(handler))
    assert complete(client).output_text == 'ok'


class TestCreateClient:
  def test_unknown_provider(self):
    with pytest.raises(ProviderError, match='Unsupported'):
      create_client('mystery')

  def test_ollama(self):
    assert isinstance(create_client('ollama', http_client=mock_client(lambda request: httpx.Response(200))), OllamaClient)


class FakeClient:
  def __init__(self, reply):
    self.reply = reply
    self.prompts = []
    self.closed = False

  async def complete(self, model, prompt, temperature, max_output_tokens):
    self.prompts.append(prompt)
    return ProviderResult(self.reply, 1, 1, 2, {})

  async def aclose(self):
    self.closed = True


class TestAIOrchestrator:
  def make(self, reply):
    client = FakeClient(reply)
    orchestrator = AIOrchestrator(OrchestrationConfig('fake', 'model-x'), client_factory=lambda provider: client)
    return orchestrator, client

  def test_transform_text_strips_fences(self):
    orchestrator, client = self.make('```jsx\nimport { View } from "react-native";\n```')
    output = asyncio.run(orchestrator.transform_text('<div/>', Role.SCREEN))
    assert output == 'import { View } from "react-native";'
    assert "identified as a 'SCREEN'" in client.prompts[0]
    assert '<div/>' in client.prompts[0]

  def test_empty_conversion_is_an_error(self):
    orchestrator, _ = self.make('```\n```')
    with pytest.raises(ProviderError):
      asyncio.run(orchestrator.transform_text('<div/>', Role.COMPONENT))

  def test_generate_text_and_close(self):
    orchestrator, client = self.make('{"name": "x"}')
    assert asyncio.run(orchestrator.generate_text('prompt')) == '{"name": "x"}'
    asyncio.run(orchestrator.close())
    assert client.closed


class TestPrompts:
  def test_clean_model_output_drops_language_line(self):
    assert clean_model_output('javascript\nconst a = 1;') == 'const a = 1;'
    assert clean_model_output('') == ''

  def test_role_guidance_in_prompt(self):
    assert 'custom React hook' in build_conversion_prompt('x', Role.HOOK)
