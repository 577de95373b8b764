from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Union


Content = Union[str, bytes]


class Role(Enum):
  COMPONENT = auto()
  SCREEN = auto()
  HOOK = auto()
  UTILITY = auto()
  ASSET = auto()
  STYLESHEET = auto()
  DEPENDENCY_MANIFEST = auto()
  CONFIG = auto()
  OTHER = auto()


# Roles whose source is rewritten by the oracle.
SCRIPT_ROLES = frozenset({Role.COMPONENT, Role.SCREEN, Role.HOOK, Role.UTILITY})


class EntryStatus(Enum):
  PENDING = auto()
  SUCCEEDED = auto()
  FAILED = auto()


@dataclass(frozen=True)
class FileDescriptor:
  path: str
  download_url: Optional[str] = None
  type: str = 'file'

  @classmethod
  def from_dict(cls, payload: Dict[str, Any]) -> 'FileDescriptor':
    return cls(
      path=payload['path'],
      download_url=payload.get('download_url'),
      type=payload.get('type', 'file')
    )

  @property
  def is_usable(self) -> bool:
    return self.type == 'file' and bool(self.download_url)


@dataclass
class ManifestEntry:
  source_path: str
  role: Role
  output_path: Optional[str]
  download_url: str
  status: EntryStatus = EntryStatus.PENDING
  content: Optional[Content] = None
  error: Optional[str] = None

  @property
  def is_terminal(self) -> bool:
    return self.status is not EntryStatus.PENDING

  @property
  def succeeded(self) -> bool:
    return self.status is EntryStatus.SUCCEEDED

  def mark_succeeded(self, content: Content) -> None:
    if self.is_terminal:
      raise RuntimeError(f'Entry {self.source_path} already finished as {self.status.name}')
    self.content = content
    self.status = EntryStatus.SUCCEEDED

  def mark_failed(self, error: str) -> None:
    if self.is_terminal:
      raise RuntimeError(f'Entry {self.source_path} already finished as {self.status.name}')
    self.error = error
    self.status = EntryStatus.FAILED

  def to_dict(self) -> Dict[str, Any]:
    return {
      'source_path': self.source_path,
      'role': self.role.name,
      'output_path': self.output_path,
      'status': self.status.name,
      'error': self.error
    }


@dataclass
class ConversionReport:
  total_entries: int = 0
  succeeded: List[str] = field(default_factory=list)
  failed: Dict[str, str] = field(default_factory=dict)
  omitted: List[str] = field(default_factory=list)
  screens: List[str] = field(default_factory=list)
  manifest_source: str = 'none'  # oracle, rules, minimal, none
  archive_files: List[str] = field(default_factory=list)
  elapsed_seconds: float = 0.0

  def summary(self) -> Dict[str, Any]:
    return {
      'total_entries': self.total_entries,
      'succeeded': len(self.succeeded),
      'failed': self.failed,
      'omitted': self.omitted,
      'screens': self.screens,
      'manifest_source': self.manifest_source,
      'archive_files': self.archive_files,
      'elapsed_seconds': self.elapsed_seconds
    }


@dataclass
class ConversionResult:
  archive: bytes
  manifest: List[ManifestEntry]
  report: ConversionReport
