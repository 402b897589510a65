from __future__ import annotations

import datetime as dt
import os
import threading
from typing import Callable, Optional, Protocol

import structlog

log = structlog.get_logger()


class AuditLog(Protocol):
    def log_data_send(
        self,
        provider: str,
        rows: int,
        columns: int,
        success: bool,
        error_message: Optional[str] = None,
    ) -> None: ...


def format_entry(
    timestamp: dt.datetime,
    provider: str,
    rows: int,
    columns: int,
    success: bool,
    error_message: Optional[str] = None,
) -> str:
    status = "SUCCESS" if success else "FAILURE"
    entry = (
        f"[{timestamp.strftime('%Y-%m-%d %H:%M:%S')}] Provider: {provider} | Status: {status}"
        f" | Rows: {rows} | Columns: {columns}"
    )
    if error_message:
        entry += f" | Error: {error_message}"
    return entry


class FileAuditLog:
    """Append-only audit trail of data sends, one line per send.

    Writes are serialized with a lock so concurrent requests never interleave
    inside a line. IO and encoding failures are logged and swallowed; text that
    cannot be encoded as UTF-8 (lone surrogates from upstream JSON) is written
    backslash-escaped.
    """

    def __init__(self, path: str, clock: Optional[Callable[[], dt.datetime]] = None) -> None:
        self.path = os.path.abspath(path)
        self._clock = clock or (lambda: dt.datetime.now(dt.timezone.utc))
        self._lock = threading.Lock()

    def log_data_send(
        self,
        provider: str,
        rows: int,
        columns: int,
        success: bool,
        error_message: Optional[str] = None,
    ) -> None:
        entry = format_entry(self._clock(), provider, rows, columns, success, error_message)
        try:
            with self._lock:
                with open(self.path, "a", encoding="utf-8", errors="backslashreplace") as f:
                    f.write(entry + "\n")
        except (OSError, ValueError) as e:
            log.warning("audit_log_write_failed", path=self.path, error=str(e))
            return
        log.info("audit_log_entry", provider=provider, rows=rows, columns=columns, success=success)
