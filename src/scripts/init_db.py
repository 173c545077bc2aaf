#!/usr/bin/env python3
"""
Create the SQLite request log used by the HTTP API.

The engine itself keeps no state; this database only records one row per API
call (``api_requests``) plus any validation messages attached to it
(``api_request_details``). Safe to run repeatedly.

Usage:
    uv run python src/scripts/init_db.py [--db path/to/requests.db]
"""

import argparse
import sqlite3
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS api_requests (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    request_id TEXT UNIQUE NOT NULL,
    timestamp TEXT NOT NULL,
    endpoint TEXT NOT NULL,
    method TEXT NOT NULL,
    client_ip TEXT,
    events_received INTEGER,
    participants INTEGER,
    status_code INTEGER NOT NULL,
    error_code TEXT,
    error_message TEXT,
    processing_time_ms INTEGER NOT NULL,
    results_returned INTEGER
);

CREATE TABLE IF NOT EXISTS api_request_details (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    request_id TEXT NOT NULL,
    detail_type TEXT NOT NULL CHECK(detail_type IN ('validation_error', 'warning')),
    message TEXT NOT NULL,
    FOREIGN KEY (request_id) REFERENCES api_requests(request_id)
);

CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp);
CREATE INDEX IF NOT EXISTS idx_api_requests_endpoint_status ON api_requests(endpoint, status_code);
CREATE INDEX IF NOT EXISTS idx_api_request_details_request ON api_request_details(request_id);
"""


def create_database(db_path: Path = DB_PATH) -> Path:
    """Create the request log tables at ``db_path`` if missing."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        conn.execute("PRAGMA foreign_keys = ON")
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()
    return db_path


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the API request log database")
    parser.add_argument("--db", type=Path, default=DB_PATH, help=f"Database file (default: {DB_PATH})")
    args = parser.parse_args()

    path = create_database(args.db)
    print(f"Request log ready at: {path}")
