"""
Keep-alive pinger for hosts that put idle services to sleep.

The service periodically requests its own /api/up endpoint and records the
outcome in a ServerStatus, which /api/test reports back.
"""
import asyncio
import os
import threading
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

import httpx

from schemas.status import ServerStatusSnapshot
from utils.logger_factory import new_logger

log = new_logger("keepalive_service")

STATUS_TIMEZONE = ZoneInfo("Asia/Kolkata")
KEEPALIVE_INTERVAL_SECONDS = float(os.getenv("KEEPALIVE_INTERVAL_SECONDS", "300"))
PING_TIMEOUT = 10.0


def format_status_time(moment: Optional[datetime] = None) -> str:
    moment = moment or datetime.now(STATUS_TIMEZONE)
    return moment.astimezone(STATUS_TIMEZONE).strftime("%d/%m/%Y, %I:%M:%S %p")


class ServerStatus:
    """Process-wide record of the last keep-alive ping."""

    def __init__(self):
        self._lock = threading.Lock()
        self._start_request_time = None
        self._start_response_time = None
        self._error = None
        self._error_time = None

    def mark_request(self, moment: Optional[datetime] = None):
        with self._lock:
            self._start_request_time = format_status_time(moment)

    def mark_response(self, moment: Optional[datetime] = None):
        with self._lock:
            self._start_response_time = format_status_time(moment)
            self._error = None
            self._error_time = None

    def mark_error(self, error: Exception, moment: Optional[datetime] = None):
        with self._lock:
            self._error = str(error) or error.__class__.__name__
            self._error_time = format_status_time(moment)

    def snapshot(self) -> ServerStatusSnapshot:
        with self._lock:
            return ServerStatusSnapshot(
                server_start_time=self._start_request_time,
                server_start_response_time=self._start_response_time,
                server_error=self._error,
                server_error_time=self._error_time,
            )


server_status = ServerStatus()


def keepalive_url() -> Optional[str]:
    base_url = os.getenv("BASE_URL")
    if not base_url:
        return None
    return base_url.rstrip("/") + "/api/up"


async def ping_once(url: str, status: ServerStatus, client: httpx.AsyncClient) -> bool:
    status.mark_request()
    log.info(f"ping server: {url}")
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        log.warning(f"Keep-alive ping failed: {str(e)}")
        status.mark_error(e)
        return False
    status.mark_response()
    return True


async def keepalive_loop(
    url: str,
    status: ServerStatus = server_status,
    interval: float = KEEPALIVE_INTERVAL_SECONDS,
    client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
):
    log.info(f"Starting keep-alive loop for {url} every {interval}s")
    client_factory = client_factory or (lambda: httpx.AsyncClient(timeout=PING_TIMEOUT))
    async with client_factory() as client:
        while True:
            await ping_once(url, status, client)
            await asyncio.sleep(interval)
