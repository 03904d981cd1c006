from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from hqdesk import __version__
from hqdesk.api.models import HealthResponse
from hqdesk.api.routes import catalog, connection, finder, records
from hqdesk.config import get_settings
from hqdesk.core.exceptions import global_exception_handler, http_exception_handler, request_validation_exception_handler, workflow_exception_handler
from hqdesk.core.lifespan import lifespan
from hqdesk.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from hqdesk.services.errors import WorkflowError

settings = get_settings()

app = FastAPI(title="HQ Desk", version=__version__, lifespan=lifespan)

app.add_middleware(CORSMiddleware, allow_origins=list(settings.allowed_origins), allow_credentials=True, allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"], allow_headers=["content-type"], expose_headers=["x-request-id"])

# Add exception handlers
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(WorkflowError, workflow_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

# Add middleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)


@app.get("/health", response_model=HealthResponse, include_in_schema=False)
async def health_check() -> HealthResponse:
  """Return a simple health status."""
  return HealthResponse(version=__version__)


app.include_router(catalog.router, prefix="/v1/catalog", tags=["catalog"])
app.include_router(connection.router, prefix="/v1/connection", tags=["connection"])
app.include_router(records.router, prefix="/v1", tags=["records"])
app.include_router(finder.router, prefix="/v1/finder", tags=["finder"])
