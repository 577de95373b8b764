from __future__ import annotations

import io
import logging
import zipfile
from typing import Dict, List, Optional, Sequence, Tuple

from rnconvert.conversion.dependencies import DependencyGenerator
from rnconvert.conversion.models import Content, ConversionReport, ManifestEntry, Role
from rnconvert.conversion.scaffold import (
  ENTRY_POINT_FILENAME,
  ROOT_CONTAINER_FILENAME,
  create_entry_point,
  create_root_navigator
)

logger = logging.getLogger(__name__)

DEPENDENCY_MANIFEST_FILENAME = 'package.json'
# Fixed timestamp so identical manifests produce identical archives.
ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)


def select_dependency_manifest(manifest: Sequence[ManifestEntry]) -> Optional[ManifestEntry]:
  """Prefers the repository-root package.json, else the first one in manifest order."""
  candidates = [entry for entry in manifest if entry.role is Role.DEPENDENCY_MANIFEST]
  for entry in candidates:
    if entry.source_path.strip('/') == DEPENDENCY_MANIFEST_FILENAME:
      return entry
  return candidates[0] if candidates else None


def successful_screens(manifest: Sequence[ManifestEntry]) -> List[ManifestEntry]:
  return [entry for entry in manifest if entry.role is Role.SCREEN and entry.succeeded]


def pack_archive(files: Dict[str, Content]) -> bytes:
  buffer = io.BytesIO()
  with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
    for path, content in files.items():
      info = zipfile.ZipInfo(path, date_time=ZIP_TIMESTAMP)
      info.compress_type = zipfile.ZIP_DEFLATED
      info.external_attr = 0o644 << 16
      data = content.encode('utf-8') if isinstance(content, str) else bytes(content)
      zf.writestr(info, data)
  return buffer.getvalue()


class ProjectAssembler:
  """Turns a completed manifest into the output archive.

  Generated files (package.json, index.js, App.js) take precedence over
  converted entries that map to the same path; among converted entries the
  later one in manifest order wins.
  """

  def __init__(
    self,
    dependency_generator: Optional[DependencyGenerator] = None,
    oracle=None
  ) -> None:
    self.dependency_generator = dependency_generator or DependencyGenerator()
    self.oracle = oracle

  async def rewrite_dependency_manifest(
    self,
    manifest: Sequence[ManifestEntry],
    entry: Optional[ManifestEntry] = None
  ) -> Tuple[str, str]:
    if entry is None:
      entry = select_dependency_manifest(manifest)
    if entry is None or not entry.succeeded:
      if entry is not None:
        logger.warning('Dependency manifest %s unavailable (%s); emitting minimal manifest', entry.source_path, entry.error)
      return await self.dependency_generator.rewrite(None)
    return await self.dependency_generator.rewrite(entry.content, self.oracle)

  def merge_entries(
    self,
    manifest: Sequence[ManifestEntry],
    reserved: Dict[str, Content],
    dependency_manifest: Optional[ManifestEntry] = None
  ) -> Dict[str, Content]:
    """Maps output paths to content. The chosen dependency manifest is emitted rewritten, never raw."""
    merged: Dict[str, Content] = {}
    for entry in manifest:
      if not entry.succeeded or entry.output_path is None:
        continue
      if entry is dependency_manifest:
        continue
      if entry.output_path in reserved:
        logger.debug('Skipping %s: %s is generated', entry.source_path, entry.output_path)
        continue
      if entry.output_path in merged:
        logger.warning('Output path collision at %s; keeping %s', entry.output_path, entry.source_path)
      merged[entry.output_path] = entry.content if entry.content is not None else ''
    return merged

  async def build_files(
    self,
    manifest: Sequence[ManifestEntry],
    report: Optional[ConversionReport] = None
  ) -> Dict[str, Content]:
    pending = [entry.source_path for entry in manifest if not entry.is_terminal]
    if pending:
      raise ValueError(f'Cannot assemble with {len(pending)} pending entries: {pending[:5]}')

    dependency_manifest = select_dependency_manifest(manifest)
    package_json, manifest_source = await self.rewrite_dependency_manifest(manifest, dependency_manifest)
    screens = successful_screens(manifest)

    files: Dict[str, Content] = {
      DEPENDENCY_MANIFEST_FILENAME: package_json,
      ENTRY_POINT_FILENAME: create_entry_point(),
      ROOT_CONTAINER_FILENAME: create_root_navigator(screens)
    }
    files.update(self.merge_entries(manifest, files, dependency_manifest))

    if report is not None:
      report.manifest_source = manifest_source
      report.screens = [screen.output_path for screen in screens]
      report.omitted = [
        entry.source_path
        for entry in manifest
        if not entry.succeeded or entry.output_path is None
      ]
      report.archive_files = list(files.keys())
    return files

  async def assemble(self, manifest: Sequence[ManifestEntry], report: Optional[ConversionReport] = None) -> bytes:
    files = await self.build_files(manifest, report)
    archive = pack_archive(files)
    logger.info('Assembled archive with %s files (%s bytes)', len(files), len(archive))
    return archive
