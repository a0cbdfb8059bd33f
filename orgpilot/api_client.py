"""HTTP client for the OrgPilot organisation endpoints."""

import asyncio
import json
import logging
import time

import httpx
from pydantic import ValidationError

from orgpilot.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT_S,
    DIRECT_REPORTS_PATH,
    ORGANISATION_PATH,
)
from orgpilot.models import (
    OrgNode,
    OrgPageData,
    org_node_adapter,
    org_node_list_adapter,
    org_structure_adapter,
    parse_direct_reports,
)

logger = logging.getLogger(__name__)

API_CONNECT_RETRY_DELAYS_S = (0.1, 0.3, 0.6)
CONNECT_ERROR_LOG_DEBOUNCE_S = 10.0

INERTIA_HEADERS = {
    "X-Inertia": "true",
    "X-Requested-With": "XMLHttpRequest",
    "Accept": "text/html, application/xhtml+xml",
}

__all__ = ["OrgAPIClient", "APIError"]


class APIError(Exception):
    """API request failed with structured error info."""

    def __init__(self, message: str, status_code: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail or message  # Fallback to full message if no detail


class OrgAPIClient:
    """Async HTTP client for organisation data."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S,
        cookies: httpx.Cookies | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize client.

        Args:
            base_url: Backend base URL
            timeout_s: Default request timeout
            cookies: Cookie jar sent with requests (e.g. the view-mode cookie channel)
            transport: Optional transport override (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._cookies = cookies
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._last_connect_error_log: float | None = None
        self._inertia_version: str | None = None

    async def connect(self) -> None:
        """Create the underlying httpx client."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            cookies=self._cookies,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def close(self) -> None:
        """Close connection."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "OrgAPIClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @staticmethod
    def _now_monotonic() -> float:
        return time.monotonic()

    async def _get(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """GET with bounded connect retries and error normalisation.

        Raises:
            APIError: If the request fails
        """
        if not self._client:
            raise APIError("Client not connected. Call connect() first.")

        request_timeout = timeout if timeout is not None else self.timeout_s
        logged_connect_error = False

        try:
            for attempt, delay in enumerate((0.0, *API_CONNECT_RETRY_DELAYS_S), start=1):
                if delay:
                    await asyncio.sleep(delay)
                try:
                    resp = await self._client.get(url, headers=headers, timeout=request_timeout)
                    resp.raise_for_status()
                    return resp
                except httpx.ConnectError as e:
                    if not logged_connect_error:
                        now = self._now_monotonic()
                        if (
                            self._last_connect_error_log is None
                            or (now - self._last_connect_error_log) >= CONNECT_ERROR_LOG_DEBOUNCE_S
                        ):
                            self._last_connect_error_log = now
                            logger.debug("API connect failed: GET %s%s: %s", self.base_url, url, e)
                        logged_connect_error = True
                    if attempt >= (1 + len(API_CONNECT_RETRY_DELAYS_S)):
                        raise APIError(f"Cannot connect to {self.base_url}") from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            detail = None
            try:
                body = e.response.json()
                if isinstance(body, dict):
                    detail = body.get("message") or body.get("error") or body.get("detail")
            except (json.JSONDecodeError, ValueError):
                detail = e.response.text
            raise APIError(
                f"API request failed: {status_code} {detail or e.response.text}",
                status_code=status_code,
                detail=detail,
            ) from e
        except httpx.TimeoutException as e:
            raise APIError(f"API request timed out: GET {url}") from e
        except APIError:
            raise
        except httpx.HTTPError as e:
            raise APIError(f"Unexpected HTTP error: {e}") from e

        raise APIError(f"Cannot connect to {self.base_url}")

    @staticmethod
    def _json(resp: httpx.Response) -> object:
        try:
            return resp.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise APIError(f"Invalid JSON from {resp.request.url}: {e}") from e

    async def get_direct_reports(self, node_id: int, *, timeout: float | None = None) -> list[OrgNode]:
        """Fetch the direct reports of a node.

        Args:
            node_id: Organisation node id
            timeout: Optional request timeout override

        Returns:
            Direct reports; empty when the response has no `directReports` key

        Raises:
            APIError: On transport, status, or payload errors
        """
        resp = await self._get(DIRECT_REPORTS_PATH.format(node_id=node_id), timeout=timeout)
        try:
            reports = parse_direct_reports(self._json(resp))
        except (ValidationError, ValueError) as e:
            raise APIError(f"Invalid direct reports payload for node {node_id}: {e}") from e
        logger.debug("Received %d direct reports for node %d", len(reports), node_id)
        return reports

    async def get_organisation_page(self) -> OrgPageData:
        """Load the organisation page props through the Inertia JSON protocol.

        Returns:
            Parsed page data (structure, root, root's direct reports)

        Raises:
            APIError: On transport/status errors, asset version mismatch (409), or bad props
        """
        headers = dict(INERTIA_HEADERS)
        if self._inertia_version:
            headers["X-Inertia-Version"] = self._inertia_version

        try:
            resp = await self._get(ORGANISATION_PATH, headers=headers)
        except APIError as e:
            if e.status_code == 409:
                self._inertia_version = None
                raise APIError("Inertia asset version changed; reload required", status_code=409) from e
            raise

        body = self._json(resp)
        if not isinstance(body, dict) or not isinstance(body.get("props"), dict):
            raise APIError(f"Unexpected organisation page response from {ORGANISATION_PATH}")
        version = body.get("version")
        if isinstance(version, str):
            self._inertia_version = version

        props = body["props"]
        try:
            structure = org_structure_adapter.validate_python(props.get("orgStructure"))
            root_raw = props.get("rootNode") or props.get("rootEmployee")
            root = org_node_adapter.validate_python(root_raw)
            direct_reports = org_node_list_adapter.validate_python(props.get("directReports") or [])
        except ValidationError as e:
            raise APIError(f"Invalid organisation page props: {e}") from e

        return OrgPageData(structure=structure, root=root, direct_reports=direct_reports)
