from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

import httpx

from rnconvert.config import settings
from rnconvert.conversion.models import FileDescriptor

logger = logging.getLogger(__name__)

REPO_URL_PATTERN = re.compile(r'https://github\.com/([^/]+)/([^/]+)(?:/tree/([^/]+))?')
DEFAULT_BRANCH = 'main'
USER_AGENT = 'rnconvert'


class SourceError(RuntimeError):
  """Raised when the repository listing or a file fetch fails."""


@dataclass(frozen=True)
class RepoInfo:
  owner: str
  repo: str
  branch: str = DEFAULT_BRANCH


def parse_repo_url(url: str) -> Optional[RepoInfo]:
  match = REPO_URL_PATTERN.match(url.strip())
  if not match:
    return None
  repo = match.group(2)
  if repo.endswith('.git'):
    repo = repo[:-len('.git')]
  return RepoInfo(owner=match.group(1), repo=repo, branch=match.group(3) or DEFAULT_BRANCH)


class GitHubSource:
  """Lists a repository tree and fetches raw file content."""

  def __init__(
    self,
    token: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    api_url: Optional[str] = None,
    raw_url: Optional[str] = None
  ) -> None:
    self.token = token if token is not None else settings.github_token
    self.api_url = (api_url or settings.github_api_url).rstrip('/')
    self.raw_url = (raw_url or settings.github_raw_url).rstrip('/')
    self._owns_client = http_client is None
    self._client = http_client or httpx.AsyncClient(timeout=settings.request_timeout_seconds, follow_redirects=True)

  def _headers(self, accept: str) -> Dict[str, str]:
    headers = {'Accept': accept, 'User-Agent': USER_AGENT}
    if self.token:
      headers['Authorization'] = f'token {self.token}'
    return headers

  async def list_files(self, repo: RepoInfo) -> List[FileDescriptor]:
    tree_url = f'{self.api_url}/repos/{repo.owner}/{repo.repo}/git/trees/{repo.branch}'
    try:
      resp = await self._client.get(
        tree_url,
        params={'recursive': '1'},
        headers=self._headers('application/vnd.github.v3+json')
      )
    except httpx.HTTPError as exc:
      raise SourceError(f'GitHub listing failed: {exc!r}') from exc
    if resp.status_code == 404:
      raise SourceError('Repository not found or private repository')
    if resp.is_error:
      raise SourceError(f'GitHub API error: {resp.status_code} {resp.reason_phrase}')
    try:
      listing = resp.json()
    except ValueError as exc:
      raise SourceError('GitHub API returned a malformed tree listing') from exc
    if not isinstance(listing, dict) or not isinstance(listing.get('tree', []), list):
      raise SourceError('GitHub API returned a malformed tree listing')
    if listing.get('truncated'):
      logger.warning(
        'Tree listing for %s/%s@%s was truncated by GitHub; some files will be missing',
        repo.owner,
        repo.repo,
        repo.branch
      )
    tree = listing.get('tree', [])
    files = [
      FileDescriptor(
        path=item['path'],
        download_url=f"{self.raw_url}/{repo.owner}/{repo.repo}/{repo.branch}/{item['path']}",
        type='file'
      )
      for item in tree
      if isinstance(item, dict) and item.get('type') == 'blob' and item.get('path')
    ]
    logger.info('Listed %s files from %s/%s@%s', len(files), repo.owner, repo.repo, repo.branch)
    return files

  async def fetch(self, download_url: str, label: Optional[str] = None) -> bytes:
    try:
      resp = await self._client.get(download_url, headers=self._headers('application/vnd.github.v3.raw'))
    except httpx.HTTPError as exc:
      raise SourceError(f'Fetch failed for {label or download_url}: {exc!r}') from exc
    if resp.is_error:
      raise SourceError(f'HTTP {resp.status_code} for {label or download_url}')
    return resp.content

  async def aclose(self) -> None:
    if self._owns_client:
      await self._client.aclose()
