"""SQLite request logging for API."""

import sqlite3
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from core.config import DB_PATH


@dataclass
class RequestLog:
    """Captured request/response data for logging."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    started: float = field(default_factory=time.time)
    endpoint: str = ""
    method: str = ""
    client_ip: str | None = None
    events_received: int | None = None
    participants: int | None = None
    status_code: int = 0
    error_code: str | None = None
    error_message: str | None = None
    processing_time_ms: int = 0
    results_returned: int | None = None
    details: list[tuple[str, str]] = field(default_factory=list)  # (type, message)

    def finish(
        self,
        status_code: int,
        error_code: str | None = None,
        error_message: str | None = None,
        details: list[str] | None = None,
    ) -> None:
        """Record outcome and elapsed time."""
        self.status_code = status_code
        self.error_code = error_code
        self.error_message = error_message
        for detail in details or []:
            self.details.append(("validation_error", detail))
        self.processing_time_ms = int((time.time() - self.started) * 1000)


def log_request(log: RequestLog) -> None:
    """Write request log to SQLite database."""
    conn = sqlite3.connect(DB_PATH)
    try:
        cursor = conn.cursor()

        cursor.execute(
            """
            INSERT INTO api_requests (
                request_id, timestamp, endpoint, method, client_ip,
                events_received, participants, status_code, error_code,
                error_message, processing_time_ms, results_returned
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
            (
                log.request_id,
                log.timestamp,
                log.endpoint,
                log.method,
                log.client_ip,
                log.events_received,
                log.participants,
                log.status_code,
                log.error_code,
                log.error_message,
                log.processing_time_ms,
                log.results_returned,
            ),
        )

        for detail_type, message in log.details:
            cursor.execute(
                """
                INSERT INTO api_request_details (request_id, detail_type, message)
                VALUES (?, ?, ?)
            """,
                (log.request_id, detail_type, message),
            )

        conn.commit()
    finally:
        conn.close()
