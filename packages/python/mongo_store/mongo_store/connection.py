"""Shared MongoDB clients.

A ``ConnectionPool`` hands out one ``MongoClient`` per URI and keeps it for the
life of the pool. Applications normally build one pool at startup and pass it to
every ``MongoStore``; stores built without a pool share ``default_pool``.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List

import pymongo
from loguru import logger
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from .errors import CODE_CONFIGURATION, CODE_CONNECT, StoreConnectionError
from .settings import DEFAULT_TIMEOUT_SECONDS, DEFAULT_URI

ClientFactory = Callable[..., Any]


class ConnectionPool:
    """Lazily created, process-lifetime clients keyed by URI."""

    def __init__(self, client_factory: ClientFactory = MongoClient):
        self._client_factory = client_factory
        self._clients: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def get_client(self, uri: str = "", timeout: float = DEFAULT_TIMEOUT_SECONDS) -> MongoClient:
        """Return the client for ``uri``, connecting on first use.

        The first successful connect for a URI wins; later callers get the
        cached client whatever timeout they pass. A failed handshake leaves
        nothing cached so the next call tries again.
        """

        uri = uri or DEFAULT_URI
        if timeout <= 0:
            timeout = DEFAULT_TIMEOUT_SECONDS

        client = self._clients.get(uri)
        if client is not None:
            return client

        with self._lock:
            client = self._clients.get(uri)
            if client is not None:
                return client
            client = self._connect(uri, timeout)
            self._clients[uri] = client
            return client

    def _connect(self, uri: str, timeout: float) -> Any:
        timeout_ms = int(timeout * 1000)
        try:
            client = self._client_factory(
                uri,
                connectTimeoutMS=timeout_ms,
                serverSelectionTimeoutMS=timeout_ms,
            )
        except (PyMongoError, TypeError, ValueError) as exc:
            raise StoreConnectionError(
                f"Did not create mongo client for {uri}. Check the inner error for details.",
                CODE_CONFIGURATION,
                exc,
            ) from exc

        try:
            with pymongo.timeout(timeout):
                client.admin.command("ping")
        except PyMongoError as exc:
            client.close()
            raise StoreConnectionError(
                f"Did not connect mongo client for {uri}. Check the inner error for details.",
                CODE_CONNECT,
                exc,
            ) from exc

        logger.info("Connected to MongoDB @ {uri}", uri=uri)
        return client

    def is_connected(self, uri: str = "") -> bool:
        return (uri or DEFAULT_URI) in self._clients

    def uris(self) -> List[str]:
        return list(self._clients.keys())

    def close(self) -> None:
        """Close every client. Meant for application teardown and tests."""

        with self._lock:
            clients = list(self._clients.items())
            self._clients.clear()
        for uri, client in clients:
            client.close()
            logger.debug("Closed MongoDB client @ {uri}", uri=uri)


default_pool = ConnectionPool()
