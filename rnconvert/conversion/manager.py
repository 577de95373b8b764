from __future__ import annotations

import logging
from typing import Callable, List, Optional

from rnconvert.ai.orchestrator import AIOrchestrator
from rnconvert.conversion.classifier import build_manifest
from rnconvert.conversion.models import ConversionResult, FileDescriptor, ManifestEntry, Role
from rnconvert.conversion.pipeline import ConversionPipeline, PipelineError
from rnconvert.source.github import GitHubSource, RepoInfo, SourceError, parse_repo_url

logger = logging.getLogger(__name__)


class ConversionManager:
  """Entry point used by the HTTP and CLI surfaces.

  Holds the shared oracle; a repository source is created per request so
  each caller's token stays scoped to its own run.
  """

  def __init__(
    self,
    oracle=None,
    event_logger=None,
    source_factory: Callable[[Optional[str]], GitHubSource] = GitHubSource,
    max_concurrency: Optional[int] = None
  ) -> None:
    self.oracle = oracle or AIOrchestrator()
    self.event_logger = event_logger
    self.source_factory = source_factory
    self.max_concurrency = max_concurrency

  def _resolve_repo(self, repo_url: str) -> RepoInfo:
    repo = parse_repo_url(repo_url or '')
    if repo is None:
      raise PipelineError(f'Invalid GitHub URL: {repo_url!r}')
    return repo

  async def _list(self, source: GitHubSource, repo: RepoInfo) -> List[FileDescriptor]:
    try:
      return await source.list_files(repo)
    except SourceError as exc:
      if self.event_logger:
        self.event_logger.log_pipeline_failure(f'{repo.owner}/{repo.repo}', str(exc))
      raise PipelineError(str(exc)) from exc

  async def preview_manifest(self, repo_url: str, token: Optional[str] = None) -> List[ManifestEntry]:
    repo = self._resolve_repo(repo_url)
    source = self.source_factory(token)
    try:
      files = await self._list(source, repo)
    finally:
      await source.aclose()
    return build_manifest(files)

  async def convert_repository(self, repo_url: str, token: Optional[str] = None) -> ConversionResult:
    repo = self._resolve_repo(repo_url)
    source = self.source_factory(token)
    try:
      files = await self._list(source, repo)
      logger.info('Converting %s/%s@%s (%s files)', repo.owner, repo.repo, repo.branch, len(files))
      pipeline = ConversionPipeline(
        fetcher=source,
        oracle=self.oracle,
        event_logger=self.event_logger,
        max_concurrency=self.max_concurrency
      )
      return await pipeline.run(files)
    finally:
      await source.aclose()

  async def convert_snippet(self, code: str, role: Role = Role.COMPONENT) -> str:
    """Runs one pasted snippet through the oracle; no repository involved."""
    return await self.oracle.transform_text(code, role)

  async def close(self) -> None:
    close = getattr(self.oracle, 'close', None)
    if close:
      await close()
