from typing import Dict, Any, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
from pydantic import AliasChoices, BaseModel, Field

from rnconvert.ai.clients import ProviderError
from rnconvert.api.globals import conversion_manager
from rnconvert.conversion.models import SCRIPT_ROLES, Role
from rnconvert.conversion.pipeline import PipelineError

router = APIRouter()

ARCHIVE_FILENAME = 'converted-project.zip'

class RepositoryPayload(BaseModel):
  repo_url: str = Field(
    ...,
    validation_alias=AliasChoices('repo_url', 'repoUrl'),
    description='GitHub repository URL, optionally with /tree/<branch>.'
  )
  token: Optional[str] = Field(default=None, description='GitHub token for private repositories.')

class CodePayload(BaseModel):
  code: str = Field(default='', description='React (web) source to convert.')
  role: str = Field(default=Role.COMPONENT.name, description='COMPONENT, SCREEN, HOOK or UTILITY.')

@router.post('/conversion/manifest')
async def conversion_manifest(payload: RepositoryPayload) -> Dict[str, Any]:
  try:
    manifest = await conversion_manager.preview_manifest(payload.repo_url, payload.token or None)
  except PipelineError as exc:
    raise HTTPException(status_code=400, detail=str(exc)) from exc
  return {
    'total': len(manifest),
    'entries': [entry.to_dict() for entry in manifest]
  }

@router.post('/conversion/end-to-end')
async def conversion_end_to_end(payload: RepositoryPayload) -> Response:
  try:
    result = await conversion_manager.convert_repository(payload.repo_url, payload.token or None)
  except PipelineError as exc:
    raise HTTPException(status_code=400, detail=str(exc)) from exc
  return Response(
    content=result.archive,
    media_type='application/zip',
    headers={
      'Content-Disposition': f'attachment; filename="{ARCHIVE_FILENAME}"',
      'X-Converted-Entries': str(len(result.report.succeeded)),
      'X-Failed-Entries': str(len(result.report.failed))
    }
  )

@router.post('/conversion/code')
async def conversion_code(payload: CodePayload) -> Dict[str, Any]:
  if not payload.code.strip():
    raise HTTPException(status_code=400, detail='Code is required')
  role = Role.__members__.get(payload.role.upper())
  if role not in SCRIPT_ROLES:
    raise HTTPException(status_code=400, detail=f'Unsupported role: {payload.role}')
  try:
    converted = await conversion_manager.convert_snippet(payload.code, role)
  except ProviderError as exc:
    raise HTTPException(status_code=502, detail=str(exc)) from exc
  return {
    'originalCode': payload.code,
    'convertedCode': converted,
    'role': role.name
  }
