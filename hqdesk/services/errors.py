"""User-facing workflow failures raised by the record workflow controller."""

from __future__ import annotations


class WorkflowError(RuntimeError):
  """Base class for failures surfaced to the operator; prior state is always intact."""

  code = "workflow_error"
  status_code = 400

  def __init__(self, message: str) -> None:
    super().__init__(message)
    self.message = message


class InputValidationError(WorkflowError):
  code = "validation_failed"
  status_code = 422


class NoCurrentRecordError(WorkflowError):
  code = "no_current_record"
  status_code = 409


class RecordNotFoundError(WorkflowError):
  code = "not_found"
  status_code = 404


class RecordLockedError(WorkflowError):
  """The record is approved and can no longer be edited, audited or re-approved."""

  code = "record_locked"
  status_code = 409


class OperationInProgressError(WorkflowError):
  code = "operation_in_progress"
  status_code = 409


class EditRejectedError(WorkflowError):
  """The scratch buffer would break a record invariant; edit mode stays open."""

  code = "edit_rejected"
  status_code = 422


class GenerationFailedError(WorkflowError):
  code = "generation_failed"
  status_code = 502


class AuditFailedError(WorkflowError):
  code = "audit_failed"
  status_code = 502


class PersistenceFailedError(WorkflowError):
  code = "persistence_failed"
  status_code = 502


class StoreUnavailableError(WorkflowError):
  code = "store_unavailable"
  status_code = 503
