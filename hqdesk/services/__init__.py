"""Workflow services: store client, connection, finder and the record controller."""

from hqdesk.services.connection import ConnectionConfig, get_connection, init_connection
from hqdesk.services.finder import FinderFilter, matches_filter, merge_results
from hqdesk.services.store_client import AppendOutcome, QueryResult, QueryStatus, RemoteStoreClient
from hqdesk.services.workflow import RecordWorkflowController

__all__ = [
  "AppendOutcome",
  "ConnectionConfig",
  "FinderFilter",
  "QueryResult",
  "QueryStatus",
  "RecordWorkflowController",
  "RemoteStoreClient",
  "get_connection",
  "init_connection",
  "matches_filter",
  "merge_results",
]
