"""Workspace and record workflow endpoints."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from hqdesk.api.deps import get_connection_config, get_controller
from hqdesk.api.models import AuditResponse, ConnectionResponse, EditBufferResponse, EditRequest, GenerateRequest, WorkspaceResponse
from hqdesk.schema.records import Record
from hqdesk.services.connection import ConnectionConfig
from hqdesk.services.workflow import RecordWorkflowController

router = APIRouter()

CONTROLLER_DEP = Depends(get_controller)
CONNECTION_DEP = Depends(get_connection_config)


@router.get("/workspace", response_model=WorkspaceResponse)
async def get_workspace(controller: RecordWorkflowController = CONTROLLER_DEP, connection: ConnectionConfig = CONNECTION_DEP) -> WorkspaceResponse:
  """Return the current record, edit buffer, last audit, busy flags and notices."""
  snapshot = controller.snapshot()
  return WorkspaceResponse(**snapshot, connection=ConnectionResponse(**asdict(connection.status())))


@router.post("/records/generate", response_model=Record)
async def generate_record(request: GenerateRequest, controller: RecordWorkflowController = CONTROLLER_DEP) -> Record:
  return await controller.generate(
    kind=request.kind,
    brand=request.brand,
    domain=request.domain,
    topic_name=request.topic_name,
    source_text=request.source_text,
    related_topic_id=request.related_topic_id,
  )


@router.post("/records/{record_id}/select", response_model=Record)
async def select_record(record_id: str, controller: RecordWorkflowController = CONTROLLER_DEP) -> Record:
  return controller.select(record_id)


@router.post("/records/edit/toggle", response_model=WorkspaceResponse)
async def toggle_edit(controller: RecordWorkflowController = CONTROLLER_DEP, connection: ConnectionConfig = CONNECTION_DEP) -> WorkspaceResponse:
  """Enter edit mode, or commit the scratch buffer and leave it."""
  controller.toggle_edit()
  return WorkspaceResponse(**controller.snapshot(), connection=ConnectionResponse(**asdict(connection.status())))


@router.patch("/records/edit", response_model=EditBufferResponse)
async def update_edit_buffer(request: EditRequest, controller: RecordWorkflowController = CONTROLLER_DEP) -> EditBufferResponse:
  buffer = controller.update_scratch(**request.model_dump(exclude_none=True))
  return EditBufferResponse(**asdict(buffer))


@router.post("/records/audit", response_model=AuditResponse)
async def audit_record(controller: RecordWorkflowController = CONTROLLER_DEP) -> AuditResponse:
  outcome = await controller.audit()
  record = controller.get_record(outcome.record_id)
  lesson_audit = outcome.lesson_audit.model_dump(mode="json") if outcome.lesson_audit else None
  return AuditResponse(record_id=outcome.record_id, kind=outcome.kind, report=outcome.report, corrected=outcome.corrected, lesson_audit=lesson_audit, record=record)


@router.post("/records/approve", response_model=Record)
async def approve_record(controller: RecordWorkflowController = CONTROLLER_DEP) -> Record:
  return await controller.approve()
