# Copyright 2025 Gowtham Rao <rao@ohdsi.org>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Provides an async client for the CampusConnect REST backend."""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from .config import Settings
from .exceptions import (
    CampusConnectError,
    NotFoundError,
    TransportError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Endpoints that are served without credentials.
PUBLIC_ENDPOINTS = (
    "/institutions",
    "/scholarships",
    "/public/gallery",
    "/contact/submit",
)


def is_public_endpoint(path: str) -> bool:
    """Return True if `path` can be requested without an access token."""
    return path.startswith(PUBLIC_ENDPOINTS)


def _extract_detail(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("detail"), str):
        return body["detail"]
    return None


class ApiClient:
    """Thin wrapper around httpx that maps HTTP failures onto the error taxonomy.

    Credentials are never read from ambient state: a `token_provider` callable
    is consulted for every protected request, and `on_unauthorized` is invoked
    when the backend rejects the token so that the caller can log the user out.
    """

    def __init__(
        self,
        settings: Settings,
        token_provider: Callable[[], str | None] | None = None,
        on_unauthorized: Callable[[], None] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client with settings and an optional HTTP client."""
        self.settings = settings
        self.token_provider = token_provider or (lambda: settings.access_token)
        self.on_unauthorized = on_unauthorized
        self.client = client or httpx.AsyncClient(
            headers={
                "Content-Type": "application/json",
                "User-Agent": "campus-connect-core/0.1.0",
            },
            timeout=settings.timeout_seconds,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def url_for(self, path: str) -> str:
        return f"{self.settings.api_base_url}{path}"

    def _headers_for(self, path: str) -> dict[str, str]:
        if is_public_endpoint(path):
            return {}
        token = self.token_provider()
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            NotFoundError: On a 404 response.
            ValidationError: On a 400 or 422 response.
            TransportError: On any other failure, including network errors.

        """
        try:
            response = await self.client.request(
                method,
                self.url_for(path),
                params=params,
                json=payload,
                headers=self._headers_for(path),
            )
        except httpx.RequestError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise TransportError(f"Could not reach the server: {e}") from e

        if response.is_success:
            try:
                return response.json()
            except ValueError as e:
                raise TransportError(f"Invalid JSON from {method} {path}") from e

        raise self._error_for(method, path, response)

    def _error_for(
        self, method: str, path: str, response: httpx.Response
    ) -> CampusConnectError:
        detail = _extract_detail(response)
        status = response.status_code
        message = f"{method} {path} returned HTTP {status}"
        logger.warning("%s: %s", message, detail or response.reason_phrase)

        if status == 404:
            return NotFoundError(message, detail)
        if status in (400, 422):
            return ValidationError(message, detail)
        if status == 401 and not is_public_endpoint(path) and self.on_unauthorized:
            self.on_unauthorized()
        return TransportError(message, detail)

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def patch(self, path: str, payload: dict[str, Any]) -> Any:
        return await self.request("PATCH", path, payload=payload)
