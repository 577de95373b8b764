from typing import Dict, Any

from fastapi import APIRouter

from rnconvert.api.globals import event_logger, oracle
from rnconvert.config import settings

router = APIRouter()

@router.get('/health')
async def health() -> Dict[str, Any]:
  return {
    'status': 'ok',
    'provider': oracle.config.provider_id,
    'model': oracle.config.model_identifier,
    'max_concurrency': settings.max_concurrency
  }

@router.get('/events')
async def recent_events(limit: int = 100) -> Dict[str, Any]:
  return {'events': event_logger.recent(limit=limit)}
