from rnconvert.ai.orchestrator import AIOrchestrator
from rnconvert.config import settings
from rnconvert.conversion.manager import ConversionManager
from rnconvert.logging.event_logger import EventLogger

# Initialize globals
event_logger = EventLogger(settings.event_log_dir)
oracle = AIOrchestrator()
conversion_manager = ConversionManager(
  oracle=oracle,
  event_logger=event_logger,
  max_concurrency=settings.max_concurrency
)
