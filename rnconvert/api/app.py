import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from rnconvert.config import settings
from rnconvert.api.globals import conversion_manager
from rnconvert.api.routes import system, conversion

# Configure logging
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(
  title='React → React Native Project Converter',
  version='0.1.0',
  description='Converts a GitHub-hosted React project into a downloadable React Native project archive.'
)

# CORS
app.add_middleware(
  CORSMiddleware,
  allow_origins=['*'],
  allow_credentials=True,
  allow_methods=['*'],
  allow_headers=['*']
)

# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
  logger.error('Unhandled error on %s: %s', request.url.path, exc, exc_info=True)
  return JSONResponse(
    status_code=500,
    content={'message': 'Internal Server Error', 'detail': str(exc)},
  )

# Include Routers
app.include_router(system.router, tags=['System'])
app.include_router(conversion.router, prefix='/api', tags=['Conversion'])

@app.on_event('startup')
async def startup_event() -> None:
  settings.ensure_directories()
  logger.info('Backend started on %s:%s', settings.backend_host, settings.backend_port)

@app.on_event('shutdown')
async def shutdown_event() -> None:
  await conversion_manager.close()

@app.get('/')
async def root():
  return {'message': 'React → React Native Project Converter API v0.1.0'}
