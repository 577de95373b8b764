from __future__ import annotations

import logging

import httpx

from rnconvert.ai.clients import ProviderError
from rnconvert.conversion.models import SCRIPT_ROLES, Content, ManifestEntry, Role
from rnconvert.source.github import SourceError

logger = logging.getLogger(__name__)

EXPECTED_FAILURES = (SourceError, ProviderError, httpx.HTTPError)


def _decode(payload: bytes) -> str:
  return payload.decode('utf-8', errors='replace')


def _passthrough(payload: bytes) -> Content:
  """Text when the payload is valid UTF-8, otherwise the original bytes."""
  try:
    return payload.decode('utf-8')
  except UnicodeDecodeError:
    return payload


class TransformationGateway:
  """Fetches one manifest entry and runs it through the oracle when its role calls for it.

  ``fetcher`` needs ``async fetch(download_url, label) -> bytes`` and ``oracle``
  needs ``async transform_text(text, role) -> str``. Assets are copied byte for
  byte and never reach the oracle; stylesheets, manifests, configs and other
  files are passed through as text, or as the original bytes when they
  are not valid UTF-8.
  """

  def __init__(self, fetcher, oracle) -> None:
    self.fetcher = fetcher
    self.oracle = oracle

  async def transform(self, entry: ManifestEntry) -> Content:
    payload = await self.fetcher.fetch(entry.download_url, entry.source_path)
    if entry.role is Role.ASSET:
      return payload
    if entry.role in SCRIPT_ROLES:
      return await self.oracle.transform_text(_decode(payload), entry.role)
    return _passthrough(payload)

  async def process(self, entry: ManifestEntry) -> ManifestEntry:
    """Moves the entry to a terminal state. Never raises for fetch or oracle failures."""
    try:
      content = await self.transform(entry)
    except EXPECTED_FAILURES as exc:
      logger.warning('Conversion failed for %s (%s): %s', entry.source_path, entry.role.name, exc)
      entry.mark_failed(str(exc) or exc.__class__.__name__)
      return entry
    except Exception as exc:
      logger.exception('Unexpected error converting %s', entry.source_path)
      entry.mark_failed(f'{exc.__class__.__name__}: {exc}')
      return entry
    entry.mark_succeeded(content)
    return entry
