from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from rnconvert.config import settings

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


def build_manager():
  from rnconvert.ai.orchestrator import AIOrchestrator
  from rnconvert.conversion.manager import ConversionManager
  from rnconvert.logging.event_logger import EventLogger

  event_logger = EventLogger(settings.event_log_dir)
  return ConversionManager(
    oracle=AIOrchestrator(),
    event_logger=event_logger,
    max_concurrency=settings.max_concurrency
  )


def parse_global_args() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(prog='rnconvert', description='React → React Native project converter CLI')
  sub = parser.add_subparsers(dest='command', required=True)

  p_manifest = sub.add_parser('manifest', help='Classify a repository without converting it')
  p_manifest.add_argument('--repo', required=True, help='GitHub repository URL')
  p_manifest.add_argument('--token')
  p_manifest.add_argument('--json', action='store_true')

  p_convert = sub.add_parser('convert', help='Convert a repository and write the archive')
  p_convert.add_argument('--repo', required=True, help='GitHub repository URL')
  p_convert.add_argument('--out', required=True, help='Destination .zip path')
  p_convert.add_argument('--token')
  p_convert.add_argument('--json', action='store_true')

  return parser


def cmd_manifest(manager, repo: str, token: Optional[str], as_json: bool) -> int:
  from rnconvert.conversion.pipeline import PipelineError

  try:
    manifest = asyncio.run(manager.preview_manifest(repo, token))
  except PipelineError as exc:
    print(str(exc), file=sys.stderr)
    return 2
  if as_json:
    print(json.dumps({'entries': [entry.to_dict() for entry in manifest]}, indent=2))
  else:
    for entry in manifest:
      target = entry.output_path or '(folded into components)'
      print(f'{entry.role.name:<20} {entry.source_path} -> {target}')
    print(f'{len(manifest)} files classified')
  return 0


def cmd_convert(manager, ns: argparse.Namespace) -> int:
  from rnconvert.conversion.pipeline import PipelineError

  out = Path(ns.out).expanduser().resolve()
  out.parent.mkdir(parents=True, exist_ok=True)

  async def _run():
    try:
      return await manager.convert_repository(ns.repo, ns.token)
    finally:
      await manager.close()

  try:
    result = asyncio.run(_run())
  except PipelineError as exc:
    print(str(exc), file=sys.stderr)
    return 2
  out.write_bytes(result.archive)
  report = result.report
  if ns.json:
    payload = report.summary()
    payload['archive'] = str(out)
    print(json.dumps(payload, indent=2))
  else:
    print(f'Wrote {out} ({len(result.archive)} bytes)')
    print(f'Converted {len(report.succeeded)}/{report.total_entries} files; manifest via {report.manifest_source}')
    for path, error in report.failed.items():
      print(f'  failed: {path}: {error}')
  return 0


def main(argv=None) -> int:
  parser = parse_global_args()
  ns = parser.parse_args(argv)
  manager = build_manager()
  if ns.command == 'manifest':
    return cmd_manifest(manager, ns.repo, ns.token, ns.json)
  if ns.command == 'convert':
    return cmd_convert(manager, ns)
  return 1


if __name__ == '__main__':
  raise SystemExit(main())
