"""MongoDB connection management.

A single ``MongoClient`` is shared by the whole process.  The driver
keeps a bounded connection pool (``MONGO_MAX_POOL_SIZE``) and lends a
connection to each operation, returning it when the operation ends, so
request handlers never hold connections themselves.

Server-selection, connect and socket timeouts come from settings; an
operation that exceeds them raises instead of hanging the request.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Dict, Optional

import structlog
from django.conf import settings
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = structlog.get_logger(__name__)

_client: Optional[MongoClient] = None
_client_lock = threading.Lock()


def get_client() -> MongoClient:
    """Return the process-wide client, creating it on first use.

    Creation does not block on the network; the driver connects lazily.
    """
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                _client = MongoClient(
                    settings.MONGO_URI,
                    maxPoolSize=settings.MONGO_MAX_POOL_SIZE,
                    serverSelectionTimeoutMS=settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
                    socketTimeoutMS=settings.MONGO_SOCKET_TIMEOUT_MS,
                    connectTimeoutMS=settings.MONGO_CONNECT_TIMEOUT_MS,
                    tz_aware=True,
                    appname=settings.MONGO_APP_NAME,
                )
                logger.info(
                    "mongo.client_created",
                    database=settings.MONGO_DB_NAME,
                    max_pool_size=settings.MONGO_MAX_POOL_SIZE,
                )
    return _client


def get_database() -> Database:
    """Database named in the connection string, else ``MONGO_DB_NAME``."""
    return get_client().get_default_database(default=settings.MONGO_DB_NAME)


def get_collection(name: str) -> Collection:
    return get_database()[name]


def close_client() -> None:
    """Close the shared client; the next ``get_client`` opens a new one."""
    global _client
    with _client_lock:
        if _client is not None:
            _client.close()
            _client = None
            logger.info("mongo.client_closed")


def connection_status() -> Dict[str, Any]:
    """Ping the server and report whether the store is reachable."""
    start = time.monotonic()
    try:
        database = get_database()
        database.command("ping")
        address = database.client.address
    except PyMongoError as exc:
        logger.error("mongo.ping_failed", error=str(exc))
        return {"status": "down"}
    return {
        "status": "up",
        "host": f"{address[0]}:{address[1]}" if address else None,
        "name": database.name,
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
    }
