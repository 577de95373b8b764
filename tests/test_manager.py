"""Tests for the repository-level conversion manager."""

import asyncio

import httpx
import pytest

from rnconvert.conversion.manager import ConversionManager
from rnconvert.conversion.models import Role
from rnconvert.conversion.pipeline import PipelineError
from rnconvert.logging.event_logger import EventLogger
from rnconvert.source.github import GitHubSource

from conftest import BUTTON_SOURCE, HOME_SOURCE, FakeOracle

API = 'https://api.github.test'
RAW = 'https://raw.github.test'


def fake_github(request):
  if request.url.host == 'api.github.test':
    if '/repos/acme/gone/' in request.url.path:
      return httpx.Response(404)
    return httpx.Response(200, json={'tree': [
      {'path': 'src/pages/Home.jsx', 'type': 'blob'},
      {'path': 'src/components/Button.jsx', 'type': 'blob'},
    ]})
  files = {
    '/acme/shop/main/src/pages/Home.jsx': HOME_SOURCE,
    '/acme/shop/main/src/components/Button.jsx': BUTTON_SOURCE,
  }
  return httpx.Response(200, text=files[request.url.path])


def source_factory(token=None):
  client = httpx.AsyncClient(transport=httpx.MockTransport(fake_github))
  return GitHubSource(token=token, http_client=client, api_url=API, raw_url=RAW)


def make_manager(oracle=None):
  return ConversionManager(oracle=oracle or FakeOracle(), source_factory=source_factory, max_concurrency=2)


class TestConversionManager:
  def test_preview_manifest(self):
    manifest = asyncio.run(make_manager().preview_manifest('https://github.com/acme/shop'))
    assert [entry.output_path for entry in manifest] == ['src/screens/Home.jsx', 'src/components/Button.jsx']

  def test_convert_repository(self):
    oracle = FakeOracle()
    result = asyncio.run(make_manager(oracle).convert_repository('https://github.com/acme/shop'))
    assert sorted(result.report.succeeded) == ['src/components/Button.jsx', 'src/pages/Home.jsx']
    assert len(oracle.calls) == 2

  def test_invalid_url(self):
    with pytest.raises(PipelineError, match='Invalid GitHub URL'):
      asyncio.run(make_manager().convert_repository('ftp://example.com/repo'))

  def test_listing_failure_is_a_pipeline_error(self):
    with pytest.raises(PipelineError, match='not found'):
      asyncio.run(make_manager().preview_manifest('https://github.com/acme/gone'))

  def test_listing_failure_is_logged(self, tmp_path):
    events = EventLogger(tmp_path)
    manager = ConversionManager(oracle=FakeOracle(), event_logger=events, source_factory=source_factory)
    with pytest.raises(PipelineError):
      asyncio.run(manager.convert_repository('https://github.com/acme/gone'))
    last = events.recent()[-1]
    assert last['category'] == 'pipeline_failed'
    assert last['payload']['repo'] == 'acme/gone'

  def test_convert_snippet(self):
    oracle = FakeOracle()
    output = asyncio.run(make_manager(oracle).convert_snippet('const a = 1;', Role.HOOK))
    assert output == '// converted HOOK\nconst a = 1;'
    assert oracle.calls == [('const a = 1;', Role.HOOK)]
