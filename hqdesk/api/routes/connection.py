"""Store connection endpoints; the console polls `refresh` to drive its indicator."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status

from hqdesk.api.deps import get_connection_config
from hqdesk.api.models import ConnectionRequest, ConnectionResponse
from hqdesk.services.connection import ConnectionConfig, ConnectionStatus, InvalidConnectionAddressError

router = APIRouter()

CONNECTION_DEP = Depends(get_connection_config)


def _to_response(snapshot: ConnectionStatus) -> ConnectionResponse:
  return ConnectionResponse(**asdict(snapshot))


@router.get("", response_model=ConnectionResponse)
async def get_connection_status(connection: ConnectionConfig = CONNECTION_DEP) -> ConnectionResponse:
  return _to_response(connection.status())


@router.put("", response_model=ConnectionResponse)
async def set_connection(request: ConnectionRequest, connection: ConnectionConfig = CONNECTION_DEP) -> ConnectionResponse:
  """Set the store address for this session."""
  try:
    snapshot = connection.set(request.address)
  except InvalidConnectionAddressError as exc:
    raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
  return _to_response(snapshot)


@router.delete("", response_model=ConnectionResponse)
async def clear_connection(connection: ConnectionConfig = CONNECTION_DEP) -> ConnectionResponse:
  return _to_response(connection.clear())


@router.post("/refresh", response_model=ConnectionResponse)
async def refresh_connection(connection: ConnectionConfig = CONNECTION_DEP) -> ConnectionResponse:
  return _to_response(connection.refresh())
