# services/publishing-dataset-controller/dataset_controller/clients/http_utils.py
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from dataset_controller.config import settings

logger = logging.getLogger("dataset_controller.clients.http")


# One shared AsyncClient per base_url (connection pooling + timeouts)
_clients: dict[str, httpx.AsyncClient] = {}
_clients_lock = asyncio.Lock()


async def get_http_client(base_url: str) -> httpx.AsyncClient:
    async with _clients_lock:
        client = _clients.get(base_url)
        if client is None or client.is_closed:
            client = httpx.AsyncClient(
                base_url=base_url,
                timeout=settings.http_client_timeout_seconds,
                headers={
                    "Accept": "application/json",
                    "User-Agent": f"{settings.service_name}/{settings.service_version}",
                },
            )
            _clients[base_url] = client
            logger.info("HTTP client created for %s", base_url)
        return client


async def close_http_clients() -> None:
    async with _clients_lock:
        for base_url, client in list(_clients.items()):
            await client.aclose()
            logger.info("HTTP client closed for %s", base_url)
        _clients.clear()


class ServiceClientError(RuntimeError):
    """
    Non-2xx answer (or no answer at all) from an upstream service.
    `status` is 0 when the request never got a response.
    """
    def __init__(self, *, service: str, status: int, url: str, body: str) -> None:
        super().__init__(f"{service} HTTP {status}: {url} :: {body[:500]}")
        self.service = service
        self.status = status
        self.url = url
        self.body = body

    @property
    def not_found(self) -> bool:
        return self.status == 404


class PreconditionFailed(ServiceClientError):
    """The upstream rejected a conditional write because the If-Match ETag is stale."""


def _raise_for_status(service: str, resp: httpx.Response) -> None:
    try:
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        # keep body for debugging (limited)
        body = ""
        try:
            body = resp.text
        except Exception:
            pass
        cls = PreconditionFailed if resp.status_code == 412 else ServiceClientError
        raise cls(service=service, status=resp.status_code, url=str(resp.request.url), body=body) from e


async def send(service: str, client: httpx.AsyncClient, method: str, url: str, **kwargs) -> httpx.Response:
    """
    Issue one request and normalise every failure into ServiceClientError.
    """
    try:
        resp = await client.request(method, url, **kwargs)
    except httpx.TransportError as e:
        raise ServiceClientError(service=service, status=0, url=url, body=str(e)) from e
    _raise_for_status(service, resp)
    return resp


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, ServiceClientError):
        return exc.status == 0 or exc.status >= 500
    return False


# Retry wrapper for idempotent GETs only; HTTP_CLIENT_GET_ATTEMPTS=1 disables it
def retryable_get(fn):
    return retry(
        stop=stop_after_attempt(max(1, settings.http_client_get_attempts)),
        wait=wait_exponential_jitter(initial=0.2, max=2.0),
        retry=retry_if_exception(_is_transient),
        reraise=True,
    )(fn)


def _merge_headers(
    *,
    access_token: Optional[str] = None,
    collection_id: Optional[str] = None,
    extras: Optional[Dict[str, str]] = None,
) -> Optional[Dict[str, str]]:
    """Build per-request headers for the dataset API (bearer token + collection)."""
    headers: Dict[str, str] = {}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if collection_id:
        headers["Collection-Id"] = collection_id
    if extras:
        headers.update({k: v for k, v in extras.items() if v is not None})
    return headers or None
