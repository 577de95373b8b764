"""Shared fakes and fixtures for the rnconvert test suite.

The oracle and the file fetcher are external collaborators; the fakes here
stand in for them so concurrency, isolation and assembly can be verified
without network access.
"""

import os
import tempfile

# Keep the event log out of the working tree for modules that build globals at import.
os.environ.setdefault('CONVERTER_EVENT_LOG', tempfile.mkdtemp(prefix='rnconvert-events-'))
os.environ.setdefault('CONVERTER_DATA_DIR', tempfile.mkdtemp(prefix='rnconvert-data-'))

import asyncio
from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from rnconvert.ai.clients import ProviderError
from rnconvert.conversion.models import FileDescriptor, Role
from rnconvert.source.github import SourceError

RAW_BASE = 'https://raw.example.test/acme/shop/main/'

HOME_SOURCE = "export default function Home() { return <div><h1>Home</h1></div>; }"
BUTTON_SOURCE = "export default function Button({ label }) { return <button>{label}</button>; }"
APP_CSS = ".app { background-color: #fff; margin-top: 12px; }"
PACKAGE_JSON = '{"name": "shop", "dependencies": {"react": "18.2.0", "react-dom": "18.2.0", "axios": "1.6.0"}}'
LOGO_PNG = b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDRlogo'


def descriptor(path: str, download_url: Optional[str] = 'auto', type: str = 'file') -> FileDescriptor:
  if download_url == 'auto':
    download_url = RAW_BASE + path
  return FileDescriptor(path=path, download_url=download_url, type=type)


class FakeFetcher:
  """Serves canned payloads keyed by download URL."""

  def __init__(self, files: Dict[str, bytes], failures: Iterable[str] = ()) -> None:
    self.files = files
    self.failures = set(failures)
    self.calls: List[str] = []

  async def fetch(self, download_url: str, label: Optional[str] = None) -> bytes:
    self.calls.append(download_url)
    await asyncio.sleep(0)
    if download_url in self.failures or download_url not in self.files:
      raise SourceError(f'HTTP 404 for {label or download_url}')
    return self.files[download_url]


class FakeOracle:
  """Deterministic oracle that tracks how many transforms run at once."""

  def __init__(
    self,
    fail_on: Iterable[str] = (),
    manifest_reply: Optional[str] = None,
    delay: float = 0.0
  ) -> None:
    self.fail_on = tuple(fail_on)
    self.manifest_reply = manifest_reply
    self.delay = delay
    self.calls: List[Tuple[str, Role]] = []
    self.prompts: List[str] = []
    self.active = 0
    self.peak = 0

  async def transform_text(self, text: str, role: Role) -> str:
    self.active += 1
    self.peak = max(self.peak, self.active)
    try:
      await asyncio.sleep(self.delay)
      self.calls.append((text, role))
      if any(marker in text for marker in self.fail_on):
        raise ProviderError('oracle refused the file')
      return f'// converted {role.name}\n{text}'
    finally:
      self.active -= 1

  async def generate_text(self, prompt: str) -> str:
    self.prompts.append(prompt)
    if self.manifest_reply is None:
      raise ProviderError('manifest rewrite unavailable')
    return self.manifest_reply


@pytest.fixture
def scenario_descriptors() -> List[FileDescriptor]:
  return [
    descriptor('src/pages/Home.jsx'),
    descriptor('src/components/Button.jsx'),
    descriptor('src/styles/app.css'),
    descriptor('package.json'),
    descriptor('logo.png'),
  ]


@pytest.fixture
def scenario_payloads() -> Dict[str, bytes]:
  return {
    RAW_BASE + 'src/pages/Home.jsx': HOME_SOURCE.encode('utf-8'),
    RAW_BASE + 'src/components/Button.jsx': BUTTON_SOURCE.encode('utf-8'),
    RAW_BASE + 'src/styles/app.css': APP_CSS.encode('utf-8'),
    RAW_BASE + 'package.json': PACKAGE_JSON.encode('utf-8'),
    RAW_BASE + 'logo.png': LOGO_PNG,
  }


@pytest.fixture
def scenario_fetcher(scenario_payloads) -> FakeFetcher:
  return FakeFetcher(scenario_payloads)
