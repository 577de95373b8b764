from __future__ import annotations

import logging
import time
import uuid
from typing import Iterable, List, Optional

from rnconvert.config import settings
from rnconvert.conversion.assembler import ProjectAssembler
from rnconvert.conversion.classifier import build_manifest
from rnconvert.conversion.dependencies import DependencyGenerator
from rnconvert.conversion.executor import BoundedExecutor
from rnconvert.conversion.gateway import TransformationGateway
from rnconvert.conversion.models import (
  ConversionReport,
  ConversionResult,
  EntryStatus,
  FileDescriptor,
  ManifestEntry
)

logger = logging.getLogger(__name__)


class PipelineError(RuntimeError):
  """Pipeline-level failure surfaced to the caller as a single error."""


class ConversionPipeline:
  """classify -> bounded parallel transform -> assemble."""

  def __init__(
    self,
    fetcher,
    oracle,
    event_logger=None,
    max_concurrency: Optional[int] = None,
    oracle_manifest_rewrite: Optional[bool] = None,
    dependency_generator: Optional[DependencyGenerator] = None
  ) -> None:
    self.fetcher = fetcher
    self.oracle = oracle
    self.event_logger = event_logger
    self.gateway = TransformationGateway(fetcher, oracle)
    self.executor = BoundedExecutor(
      self.gateway.process,
      cap=max_concurrency if max_concurrency is not None else settings.max_concurrency
    )
    use_oracle = settings.oracle_manifest_rewrite if oracle_manifest_rewrite is None else oracle_manifest_rewrite
    self.assembler = ProjectAssembler(
      dependency_generator=dependency_generator,
      oracle=oracle if use_oracle else None
    )

  def classify(self, files: Iterable[FileDescriptor]) -> List[ManifestEntry]:
    return build_manifest(files)

  async def run(self, files: Iterable[FileDescriptor]) -> ConversionResult:
    run_id = uuid.uuid4().hex[:12]
    started = time.monotonic()
    manifest = self.classify(files)
    logger.info('Run %s: classified %s files', run_id, len(manifest))
    if self.event_logger:
      self.event_logger.log_manifest(run_id, manifest)

    expected = len(manifest)
    await self.executor.run(manifest)
    if len(manifest) != expected:
      raise PipelineError(f'Manifest size changed during conversion ({expected} -> {len(manifest)})')

    report = ConversionReport(total_entries=expected)
    report.succeeded = [entry.source_path for entry in manifest if entry.status is EntryStatus.SUCCEEDED]
    report.failed = {
      entry.source_path: entry.error or 'unknown error'
      for entry in manifest
      if entry.status is EntryStatus.FAILED
    }
    archive = await self.assembler.assemble(manifest, report)
    report.elapsed_seconds = round(time.monotonic() - started, 3)

    logger.info(
      'Run %s: %s/%s entries converted, %s failed, manifest via %s',
      run_id,
      len(report.succeeded),
      expected,
      len(report.failed),
      report.manifest_source
    )
    if self.event_logger:
      self.event_logger.log_entry_failures(run_id, manifest)
      self.event_logger.log_report(run_id, report)
    return ConversionResult(archive=archive, manifest=manifest, report=report)
