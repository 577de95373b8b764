from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from rnconvert.conversion.models import ConversionReport, EntryStatus, ManifestEntry

logger = logging.getLogger(__name__)


class EventLogger:
  """Append-only JSON-lines log of pipeline events.

  The archive itself never reports which files were dropped; this log is
  where per-entry failures and the manifest rewrite path are recorded.
  """

  def __init__(self, base_dir: Path) -> None:
    self.base_dir = base_dir
    self.base_dir.mkdir(parents=True, exist_ok=True)
    self.log_file = self.base_dir / 'events.log'

  def log_event(self, category: str, message: str, payload: Optional[Dict[str, Any]] = None) -> None:
    entry = {
      'timestamp': datetime.now(timezone.utc).isoformat(),
      'category': category,
      'message': message,
      'payload': payload or {}
    }
    with self.log_file.open('a', encoding='utf-8') as handle:
      handle.write(json.dumps(entry) + '\n')

  def log_pipeline_failure(self, repo: str, error: str) -> None:
    self.log_event('pipeline_failed', 'Repository could not be listed', {'repo': repo, 'error': error})

  def log_manifest(self, run_id: str, manifest: Sequence[ManifestEntry]) -> None:
    roles: Dict[str, int] = {}
    for entry in manifest:
      roles[entry.role.name] = roles.get(entry.role.name, 0) + 1
    self.log_event('manifest_built', 'Manifest classified', {'run_id': run_id, 'entries': len(manifest), 'roles': roles})

  def log_entry_failures(self, run_id: str, manifest: Sequence[ManifestEntry]) -> None:
    for entry in manifest:
      if entry.status is EntryStatus.FAILED:
        self.log_event('entry_failed', 'Entry excluded from archive', {
          'run_id': run_id,
          'source_path': entry.source_path,
          'role': entry.role.name,
          'error': entry.error
        })

  def log_report(self, run_id: str, report: ConversionReport) -> None:
    if report.manifest_source != 'oracle':
      self.log_event('manifest_fallback', 'Dependency manifest built without the oracle', {
        'run_id': run_id,
        'source': report.manifest_source
      })
    self.log_event('pipeline_complete', 'Conversion archive produced', {'run_id': run_id, **report.summary()})

  def recent(self, limit: int = 200) -> List[Dict[str, Any]]:
    if not self.log_file.exists():
      return []
    lines = self.log_file.read_text(encoding='utf-8').splitlines()[-limit:]
    entries = []
    for line in lines:
      try:
        entries.append(json.loads(line))
      except json.JSONDecodeError:
        logger.warning('Malformed log line: %s', line)
    return entries
