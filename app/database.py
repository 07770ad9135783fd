"""
Backend Connection Layer.

Owns the single Supabase client used by every repository and service, and
the realtime bridge used for change notifications.  The hosted backend is
the only store: there is no local database and no offline mode, so
construction fails fast when the connection parameters are missing.

Data access is performed through the Repository pattern.  This module only
manages the raw clients; it contains no query logic.

Usage (dependency injection at app startup)::

    from app.database import DatabaseManager
    from app.logger import StructuredLogger

    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        logger=StructuredLogger(name="database"),
    )
    # Inject `db` into repositories / services that need it.
"""

from __future__ import annotations

import threading
from typing import Optional

from supabase import AsyncClient, create_client, acreate_client, Client as SupabaseClient

from app.errors import ConfigurationError
from app.logger import StructuredLogger
from app.realtime import RealtimeBridge


class DatabaseManager:
    """Holds the Supabase clients for the lifetime of the process.

    Parameters
    ----------
    supabase_url:
        The Supabase project URL (e.g. ``https://xyz.supabase.co``).
    supabase_key:
        The Supabase public (anon) key.
    logger:
        A ``StructuredLogger`` instance for structured JSON log output.
    client:
        Pre-built client.  When given, ``supabase_url`` and
        ``supabase_key`` are not used to create one.
    realtime:
        Pre-built realtime bridge.  When omitted, one backed by
        ``acreate_client(supabase_url, supabase_key)`` is created on first
        use.

    Raises
    ------
    ConfigurationError
        If no client is injected and either connection parameter is empty.
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        logger: StructuredLogger,
        client: Optional[SupabaseClient] = None,
        realtime: Optional[RealtimeBridge] = None,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._lock: threading.Lock = threading.Lock()
        self._closed: bool = False
        self._url: str = supabase_url
        self._key: str = supabase_key
        self._realtime: Optional[RealtimeBridge] = realtime

        if client is not None:
            self._supabase: SupabaseClient = client
            return

        if not supabase_url or not supabase_key:
            raise ConfigurationError("Missing Supabase environment variables")

        self._supabase = create_client(supabase_url, supabase_key)
        self._logger.info("Supabase client initialized.")

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def supabase(self) -> SupabaseClient:
        """Return the Supabase client."""
        return self._supabase

    @property
    def realtime(self) -> RealtimeBridge:
        """Return the realtime bridge, creating it on first access.

        Raises:
            ConfigurationError: If no bridge was injected and the
                connection parameters are missing.
        """
        with self._lock:
            if self._realtime is None:
                if not self._url or not self._key:
                    raise ConfigurationError("Realtime is not configured")
                url, key = self._url, self._key

                async def _connect() -> AsyncClient:
                    return await acreate_client(url, key)

                self._realtime = RealtimeBridge(client_factory=_connect, logger=self._logger)
            return self._realtime

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close every realtime channel and stop the realtime loop.

        Safe to call multiple times; subsequent calls are no-ops.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            realtime = self._realtime

        if realtime is not None:
            realtime.close()
        self._logger.info("Supabase client closed.")
