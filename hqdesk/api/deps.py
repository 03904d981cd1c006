"""Shared FastAPI dependencies for the workflow controller and store connection."""

from __future__ import annotations

import logging

from hqdesk.ai.generation import build_generation_client
from hqdesk.config import get_settings
from hqdesk.services.connection import ConnectionConfig, get_connection
from hqdesk.services.store_client import RemoteStoreClient
from hqdesk.services.workflow import RecordWorkflowController

logger = logging.getLogger(__name__)

_CONTROLLER: RecordWorkflowController | None = None


def build_controller() -> RecordWorkflowController:
  """Wire the controller to the process-wide connection and the configured model."""
  settings = get_settings()
  # Read the address on every call so operator changes apply immediately.
  store = RemoteStoreClient.from_settings(settings, lambda: get_connection().address())
  return RecordWorkflowController(settings=settings, generation=build_generation_client(settings), store=store)


def get_controller() -> RecordWorkflowController:
  """Return the single in-memory controller for this process."""
  global _CONTROLLER
  if _CONTROLLER is None:
    _CONTROLLER = build_controller()
    logger.info("Workflow controller created")
  return _CONTROLLER


def get_connection_config() -> ConnectionConfig:
  return get_connection()
