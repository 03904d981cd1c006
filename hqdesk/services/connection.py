"""Process-wide connection address for the remote store endpoint."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from urllib.parse import urlparse

from hqdesk.config import Settings

logger = logging.getLogger(__name__)

_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class InvalidConnectionAddressError(ValueError):
  """Raised when an address does not point at an allowed store endpoint."""


@dataclass(frozen=True)
class ConnectionStatus:
  """Snapshot driving the connected/disconnected indicator."""

  connected: bool
  host: str | None
  checked_at: str
  poll_seconds: float


class ConnectionConfig:
  """Holds the store address for the session.

  The address is set once (from the environment or by the operator) and
  re-checked by `refresh()`, which the UI calls on a timer. Status is
  informational only; store calls read the address through `address()`.
  """

  def __init__(self, *, allowed_host: str, poll_seconds: float, initial_address: str | None = None) -> None:
    self._allowed_host = allowed_host.lower()
    self._poll_seconds = poll_seconds
    self._address: str | None = None
    self._status = self._snapshot()
    if initial_address:
      try:
        self.set(initial_address)
      except InvalidConnectionAddressError as exc:
        logger.warning("Ignoring configured store address: %s", exc)

  def address(self) -> str | None:
    return self._address

  @property
  def is_configured(self) -> bool:
    return self._address is not None

  def validate(self, address: str) -> str:
    """Return the stripped address or raise when it is not an allowed endpoint."""
    candidate = (address or "").strip()
    parsed = urlparse(candidate)
    host = (parsed.hostname or "").lower()
    if parsed.scheme not in {"https", "http"} or not host:
      raise InvalidConnectionAddressError("Store address must be an absolute http(s) URL.")
    if host != self._allowed_host and not host.endswith(f".{self._allowed_host}"):
      raise InvalidConnectionAddressError(f"Store address must be hosted on {self._allowed_host}.")
    return candidate

  def set(self, address: str) -> ConnectionStatus:
    self._address = self.validate(address)
    logger.info("Store address configured host=%s", urlparse(self._address).hostname)
    return self.refresh()

  def clear(self) -> ConnectionStatus:
    self._address = None
    logger.info("Store address cleared")
    return self.refresh()

  def refresh(self) -> ConnectionStatus:
    """Re-validate the held address and record a fresh status snapshot."""
    if self._address is not None:
      try:
        self.validate(self._address)
      except InvalidConnectionAddressError as exc:
        logger.warning("Dropping store address that no longer validates: %s", exc)
        self._address = None
    self._status = self._snapshot()
    return self._status

  def status(self) -> ConnectionStatus:
    return self._status

  def _snapshot(self) -> ConnectionStatus:
    host = urlparse(self._address).hostname if self._address else None
    return ConnectionStatus(connected=self._address is not None, host=host, checked_at=time.strftime(_DATE_FORMAT, time.gmtime()), poll_seconds=self._poll_seconds)


_CONNECTION: ConnectionConfig | None = None


def init_connection(settings: Settings) -> ConnectionConfig:
  """Initialize the process-wide connection from settings."""
  global _CONNECTION
  _CONNECTION = ConnectionConfig(allowed_host=settings.store_allowed_host, poll_seconds=settings.connection_poll_seconds, initial_address=settings.apps_script_url)
  return _CONNECTION


def get_connection() -> ConnectionConfig:
  """Return the process-wide connection, initializing it on first use."""
  if _CONNECTION is None:
    from hqdesk.config import get_settings

    return init_connection(get_settings())
  return _CONNECTION
