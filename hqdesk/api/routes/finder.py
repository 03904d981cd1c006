"""Finder endpoints over the merged local and remote record sets."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from hqdesk.api.deps import get_controller
from hqdesk.api.models import FinderResponse, FinderSearchRequest, QueryEvidenceResponse
from hqdesk.schema.records import Record, RecordKind
from hqdesk.services.finder import FinderFilter
from hqdesk.services.store_client import QueryResult
from hqdesk.services.workflow import RecordWorkflowController

router = APIRouter()

CONTROLLER_DEP = Depends(get_controller)


def _evidence(result: QueryResult | None) -> QueryEvidenceResponse | None:
  if result is None:
    return None
  evidence = result.evidence
  return QueryEvidenceResponse(tab_name=evidence.tab_name, rows_returned=evidence.rows_returned, query_used=evidence.query_used, timestamp=evidence.timestamp, status=result.status.value, error=result.error)


@router.get("", response_model=FinderResponse)
async def list_results(
  kind: RecordKind | None = Query(default=None),  # noqa: B008
  brand: str = Query(default=""),  # noqa: B008
  domain: str = Query(default=""),  # noqa: B008
  q: str = Query(default=""),  # noqa: B008
  controller: RecordWorkflowController = CONTROLLER_DEP,
) -> FinderResponse:
  """Filter and merge the held sets; does not call the store."""
  results = controller.results(FinderFilter(kind=kind, brand=brand, domain=domain, search_text=q))
  return FinderResponse(results=results, total=len(results), evidence=_evidence(controller.last_query))


@router.post("/search", response_model=FinderResponse)
async def search_store(request: FinderSearchRequest, controller: RecordWorkflowController = CONTROLLER_DEP) -> FinderResponse:
  """Refresh the remote set for one collection, then return the merged view."""
  result = await controller.search(request.kind, search_text=request.q)
  results = controller.results(FinderFilter(kind=request.kind, search_text=request.q))
  return FinderResponse(results=results, total=len(results), evidence=_evidence(result))


@router.get("/{record_id}", response_model=Record)
async def get_result(record_id: str, controller: RecordWorkflowController = CONTROLLER_DEP) -> Record:
  return controller.get_record(record_id)
