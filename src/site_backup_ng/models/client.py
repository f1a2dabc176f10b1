"""Client for the hosting platform's REST API.

Only the handful of calls backup-all needs are exposed. Anything that
talks to the platform goes through the PlatformClient protocol so the
command logic can be exercised against a test double.
"""

import logging
from typing import Any, Optional, Protocol

import httpx

from .. import __version__

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A platform API call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(ApiError):
    """The requested site, environment or resource does not exist."""


class PlatformClient(Protocol):
    """Capabilities the backup-all command needs from the platform."""

    def list_sites(self, user_id: str) -> list[dict[str, Any]]: ...

    def list_environments(self, site_id: str) -> dict[str, dict[str, Any]]: ...

    def get_diffstat(self, site_id: str, env_id: str) -> dict[str, Any]: ...

    def create_workflow(
        self, site_id: str, env_id: str, workflow_type: str, params: dict[str, Any]
    ) -> dict[str, Any]: ...


class HttpPlatformClient:
    """PlatformClient over HTTPS using httpx.

    No retries are attempted here; every failure surfaces as ApiError.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not base_url.endswith("/"):
            base_url += "/"
        self._client = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
                "User-Agent": f"site-backup-ng/{__version__}",
            },
            timeout=timeout,
            verify=verify_ssl,
            transport=transport,
        )

    def __enter__(self) -> "HttpPlatformClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        logger.debug("%s %s", method, path)
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = f"{method} {path} failed with HTTP {status}"
            detail = e.response.text.strip()
            if detail:
                message = f"{message}: {detail[:200]}"
            if status == 404:
                raise NotFoundError(message, status) from e
            raise ApiError(message, status) from e
        except httpx.HTTPError as e:
            raise ApiError(f"{method} {path} failed: {e}") from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"{method} {path} returned invalid JSON") from e

    def list_sites(self, user_id: str) -> list[dict[str, Any]]:
        data = self._request("GET", f"users/{user_id}/sites")
        if not isinstance(data, list):
            raise ApiError("Unexpected site list payload")
        return data

    def list_environments(self, site_id: str) -> dict[str, dict[str, Any]]:
        data = self._request("GET", f"sites/{site_id}/environments")
        if not isinstance(data, dict):
            raise ApiError(f"Unexpected environment payload for site {site_id}")
        return data

    def get_diffstat(self, site_id: str, env_id: str) -> dict[str, Any]:
        data = self._request("GET", f"sites/{site_id}/environments/{env_id}/diffstat")
        # An empty diffstat comes back as [] rather than {}
        if isinstance(data, list):
            return {str(i): item for i, item in enumerate(data)}
        return data

    def create_workflow(
        self, site_id: str, env_id: str, workflow_type: str, params: dict[str, Any]
    ) -> dict[str, Any]:
        return self._request(
            "POST",
            f"sites/{site_id}/environments/{env_id}/workflows",
            json={"type": workflow_type, "params": params},
        )
