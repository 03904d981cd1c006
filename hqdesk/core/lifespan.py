import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from hqdesk.core.logging import _initialize_logging
from hqdesk.services.connection import init_connection


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Set up logging and the store connection once uvicorn starts."""
  from hqdesk.config import get_settings

  settings = get_settings()
  logger = logging.getLogger("hqdesk.core.lifespan")

  try:
    _initialize_logging(settings)
    logger.info("Startup complete - logging verified.")
  except RuntimeError:
    # Keep serving with the default handlers.
    logger.warning("Initial logging setup failed.", exc_info=True)

  connection = init_connection(settings)
  if connection.is_configured:
    logger.info("Store endpoint configured host=%s", connection.status().host)
  else:
    logger.warning("Store endpoint not configured; store operations are disabled until an address is set.")
  if not settings.gemini_api_key:
    logger.warning("GEMINI_API_KEY is not set; generation calls will fail unless dummy responses are enabled.")

  yield
