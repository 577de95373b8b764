from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple

from rnconvert.ai.clients import ProviderError
from rnconvert.ai.prompts import build_manifest_prompt, clean_model_output
from rnconvert.conversion.mappings import (
  DEFAULT_PACKAGE_NAME,
  DEFAULT_PACKAGE_VERSION,
  DEV_DEPENDENCIES,
  MAPPED_VERSION,
  SOURCE_VERSION_PREFERRED,
  TARGET_SCRIPTS,
  DependencyMapping,
  default_dependency_mapping
)

logger = logging.getLogger(__name__)

SOURCE_ORACLE = 'oracle'
SOURCE_RULES = 'rules'
SOURCE_MINIMAL = 'minimal'


class ManifestFormatError(ValueError):
  """Raised when a dependency manifest is not a JSON object."""


def parse_manifest(text: Any) -> Dict[str, Any]:
  if isinstance(text, bytes):
    text = text.decode('utf-8', errors='replace')
  if not isinstance(text, str):
    raise ManifestFormatError('Dependency manifest is not text')
  try:
    data = json.loads(text)
  except json.JSONDecodeError as exc:
    raise ManifestFormatError(f'Dependency manifest is not valid JSON: {exc}') from exc
  if not isinstance(data, dict):
    raise ManifestFormatError('Dependency manifest must be a JSON object')
  return data


def _serialize(package: Dict[str, Any]) -> str:
  return json.dumps(package, indent=2)


class DependencyGenerator:
  """Rewrites a web package.json into a React Native one.

  The rule-driven path is a pure function of its input and never raises;
  the oracle path is best-effort and falls back to the rules on any anomaly.
  """

  def __init__(self, mapping: Optional[DependencyMapping] = None) -> None:
    self.mapping = mapping or default_dependency_mapping()

  def build_package(self, original: Dict[str, Any]) -> Dict[str, Any]:
    declared = original.get('dependencies')
    if not isinstance(declared, dict):
      declared = {}

    dependencies: Dict[str, Any] = dict(self.mapping.baseline)
    for name in SOURCE_VERSION_PREFERRED:
      version = declared.get(name)
      if isinstance(version, str) and version:
        dependencies[name] = version

    for name, version in declared.items():
      if self.mapping.is_web_only(name):
        continue
      target = self.mapping.target_for(name)
      if target == name:
        if name in SOURCE_VERSION_PREFERRED and not (isinstance(version, str) and version):
          continue
        dependencies[name] = version
      elif target in self.mapping.baseline:
        continue
      else:
        dependencies[target] = MAPPED_VERSION

    name = original.get('name')
    return {
      'name': name if isinstance(name, str) and name else DEFAULT_PACKAGE_NAME,
      'version': DEFAULT_PACKAGE_VERSION,
      'private': True,
      'main': 'index.js',
      'scripts': dict(TARGET_SCRIPTS),
      'dependencies': dependencies,
      'devDependencies': dict(DEV_DEPENDENCIES)
    }

  def minimal_manifest(self) -> str:
    return _serialize(self.build_package({}))

  def rewrite_with_rules(self, original_text: Any) -> Tuple[str, str]:
    """Returns (manifest_json, source) where source is 'rules' or 'minimal'."""
    try:
      original = parse_manifest(original_text)
    except ManifestFormatError as exc:
      logger.warning('Falling back to minimal dependency manifest: %s', exc)
      return self.minimal_manifest(), SOURCE_MINIMAL
    return _serialize(self.build_package(original)), SOURCE_RULES

  async def rewrite_with_oracle(self, original_text: str, oracle) -> str:
    prompt = build_manifest_prompt(original_text)
    reply = await oracle.generate_text(prompt)
    package = parse_manifest(clean_model_output(reply))
    return _serialize(package)

  async def rewrite(self, original_text: Optional[Any], oracle=None) -> Tuple[str, str]:
    if original_text is None:
      return self.minimal_manifest(), SOURCE_MINIMAL
    if oracle is not None:
      text = original_text.decode('utf-8', errors='replace') if isinstance(original_text, bytes) else str(original_text)
      try:
        return await self.rewrite_with_oracle(text, oracle), SOURCE_ORACLE
      except (ProviderError, ManifestFormatError) as exc:
        logger.warning('Oracle manifest rewrite rejected, using rule table: %s', exc)
      except Exception as exc:
        logger.warning('Oracle manifest rewrite failed unexpectedly, using rule table: %s', exc, exc_info=True)
    return self.rewrite_with_rules(original_text)
