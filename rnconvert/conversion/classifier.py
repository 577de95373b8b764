from __future__ import annotations

import logging
import posixpath
import re
from typing import Iterable, List, Optional, Tuple

from rnconvert.conversion.models import FileDescriptor, ManifestEntry, Role

logger = logging.getLogger(__name__)

SCRIPT_EXTENSIONS = frozenset({'.js', '.jsx'})
ASSET_EXTENSIONS = frozenset({
  '.png', '.jpg', '.jpeg', '.svg', '.gif', '.webp',
  '.ttf', '.otf', '.woff', '.woff2'
})
STYLE_EXTENSIONS = frozenset({'.css', '.scss'})

COMPONENT_DIRECTORIES = frozenset({'components'})
SCREEN_DIRECTORIES = frozenset({'pages', 'views'})
SCREEN_TARGET_DIRECTORY = 'screens'
HOOK_PREFIX = 'use'
ASSET_TARGET_DIRECTORY = 'assets/images'
DEPENDENCY_MANIFEST_NAME = 'package.json'

CONFIG_PATTERN = re.compile(r'\.config\.(?:js|cjs|mjs|ts)$')
CONFIG_FILENAMES = frozenset({'tsconfig.json', 'jsconfig.json', '.babelrc'})
CONFIG_PREFIXES = ('.eslintrc', '.prettierrc')


def _split(path: str) -> Tuple[List[str], str, str]:
  normalized = path.replace('\\', '/').strip('/')
  parts = normalized.split('/')
  basename = parts[-1]
  extension = posixpath.splitext(basename)[1].lower()
  return parts[:-1], basename, extension


def _is_config_name(basename: str) -> bool:
  if CONFIG_PATTERN.search(basename):
    return True
  if basename in CONFIG_FILENAMES:
    return True
  return basename.startswith(CONFIG_PREFIXES)


def _classify_script(path: str, directories: List[str], basename: str) -> Tuple[Role, str]:
  if any(segment in COMPONENT_DIRECTORIES for segment in directories):
    return Role.COMPONENT, path
  for index, segment in enumerate(directories):
    if segment in SCREEN_DIRECTORIES:
      rewritten = directories[:index] + [SCREEN_TARGET_DIRECTORY] + directories[index + 1:]
      return Role.SCREEN, '/'.join(rewritten + [basename])
  if basename.startswith(HOOK_PREFIX):
    return Role.HOOK, path
  return Role.UTILITY, path


def classify_path(path: str) -> Tuple[Role, Optional[str]]:
  """Returns the role and rewritten output path for a repository-relative path.

  Pure function of the path: rules are evaluated in a fixed order and the
  first match wins.
  """
  directories, basename, extension = _split(path)
  if extension in SCRIPT_EXTENSIONS:
    return _classify_script(path, directories, basename)
  if extension in ASSET_EXTENSIONS:
    return Role.ASSET, f'{ASSET_TARGET_DIRECTORY}/{basename}'
  if extension in STYLE_EXTENSIONS:
    return Role.STYLESHEET, None
  if basename == DEPENDENCY_MANIFEST_NAME:
    return Role.DEPENDENCY_MANIFEST, path
  if _is_config_name(basename):
    return Role.CONFIG, path
  return Role.OTHER, path


def classify(descriptor: FileDescriptor) -> ManifestEntry:
  role, output_path = classify_path(descriptor.path)
  return ManifestEntry(
    source_path=descriptor.path,
    role=role,
    output_path=output_path,
    download_url=descriptor.download_url or ''
  )


def build_manifest(files: Iterable[FileDescriptor]) -> List[ManifestEntry]:
  """Classifies every usable descriptor, preserving input order."""
  manifest: List[ManifestEntry] = []
  skipped = 0
  for descriptor in files:
    if not descriptor.is_usable:
      skipped += 1
      continue
    manifest.append(classify(descriptor))
  logger.debug('Built manifest with %s entries (%s descriptors skipped)', len(manifest), skipped)
  return manifest
