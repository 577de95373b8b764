from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, List

from rnconvert.conversion.models import EntryStatus, ManifestEntry

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 10

EntryProcessor = Callable[[ManifestEntry], Awaitable[object]]


class BoundedExecutor:
  """Runs a processor over every manifest entry with at most ``cap`` in flight.

  ``run`` returns only once every entry is terminal. A failing entry never
  cancels its siblings, and the manifest list is neither reordered nor
  resized. There is no timeout: a processor that never returns stalls the
  barrier, so callers needing a deadline wrap ``run`` themselves.
  """

  def __init__(self, processor: EntryProcessor, cap: int = DEFAULT_CONCURRENCY) -> None:
    if cap < 1:
      raise ValueError('Concurrency cap must be at least 1')
    self.processor = processor
    self.cap = cap

  async def run(self, manifest: List[ManifestEntry]) -> List[ManifestEntry]:
    semaphore = asyncio.Semaphore(self.cap)
    started = time.monotonic()

    async def _guarded(entry: ManifestEntry) -> None:
      async with semaphore:
        try:
          await self.processor(entry)
        except Exception as exc:
          logger.exception('Processor raised for %s', entry.source_path)
          if not entry.is_terminal:
            entry.mark_failed(f'{exc.__class__.__name__}: {exc}')
        if not entry.is_terminal:
          entry.mark_failed('Processor returned without a result')

    await asyncio.gather(*(_guarded(entry) for entry in manifest))

    failed = sum(1 for entry in manifest if entry.status is EntryStatus.FAILED)
    logger.info(
      'Processed %s entries in %.2fs (%s failed, cap=%s)',
      len(manifest),
      time.monotonic() - started,
      failed,
      self.cap
    )
    return manifest
