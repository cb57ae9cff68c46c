"""Vercel REST API client for project environment variables."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog

from envsync.integrations.vercel.exceptions import (
    VercelAPIError,
    VercelAuthError,
    VercelConnectionError,
    VercelEnvExistsError,
)

if TYPE_CHECKING:
    from envsync.integrations.vercel.config import VercelPluginConfig

logger = structlog.get_logger()

EXISTS_ERROR_CODES = {"ENV_ALREADY_EXISTS", "ENV_CONFLICT"}


class VercelAPIClient:
    """HTTP client for the Vercel project environment variable endpoints.

    Example:
        ```python
        config = VercelPluginConfig(backend="api", token="...", project_id="prj_123")

        with VercelAPIClient(config) as client:
            values = client.pull_env("production")
        ```

    Args:
        config: Plugin configuration with token and project_id set.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        config: VercelPluginConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not config.token or not config.project_id:
            raise ValueError("VercelAPIClient requires token and project_id")
        self._config = config
        self._project_path = f"projects/{config.project_id}/env"

        client_kwargs: dict[str, Any] = {
            "base_url": config.api_url,
            "timeout": httpx.Timeout(config.timeout),
            "headers": {"Authorization": f"Bearer {config.token}"},
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)

        logger.info(
            "vercel_api_client_initialized",
            api_url=config.api_url,
            project_id=config.project_id,
        )

    def _params(self, **extra: Any) -> dict[str, Any]:
        params: dict[str, Any] = dict(extra)
        if self._config.team_id:
            params["teamId"] = self._config.team_id
        return params

    def _handle_response(self, response: httpx.Response, endpoint: str) -> dict[str, Any]:
        """Parse a response, raising on error status codes.

        Raises:
            VercelAuthError: On 401/403.
            VercelAPIError: On any other error status.
        """
        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {"raw": response.text}

        if response.is_success:
            return body

        error = body.get("error", {}) if isinstance(body, dict) else {}
        message = error.get("message", f"Vercel API error: {response.status_code}")

        if response.status_code in (401, 403):
            raise VercelAuthError(
                message=message,
                status_code=response.status_code,
                response_body=body,
                endpoint=endpoint,
            )

        raise VercelAPIError(
            message=message,
            status_code=response.status_code,
            response_body=body,
            endpoint=endpoint,
        )

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        """Make an HTTP request to the Vercel API.

        Raises:
            VercelConnectionError: If the API cannot be reached.
            VercelAPIError: If the API returns an error response.
        """
        url = f"/{endpoint.lstrip('/')}"
        log = logger.bind(method=method, endpoint=url)

        try:
            log.debug("vercel_api_request")
            response = self._client.request(method, url, **kwargs)
            log.debug("vercel_api_response", status=response.status_code)
            return self._handle_response(response, url)
        except httpx.TransportError as e:
            log.error("vercel_api_connection_failed", error=str(e))
            raise VercelConnectionError(
                message=f"Failed to reach Vercel API: {e}",
                endpoint=url,
                original_error=e,
            ) from e

    def _list(self, environment: str, *, decrypt: bool) -> list[dict[str, Any]]:
        params = self._params(decrypt="true" if decrypt else "false")
        body = self._request("GET", f"v9/{self._project_path}", params=params)
        envs = body.get("envs", [])
        return [item for item in envs if environment in (item.get("target") or [])]

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()
        logger.debug("vercel_api_client_closed")

    def __enter__(self) -> VercelAPIClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    # Environment variable operations

    def get_version(self) -> str:
        """Describe the backend; also verifies the token can list variables."""
        self._request("GET", f"v9/{self._project_path}", params=self._params(decrypt="false"))
        return f"Vercel REST API ({self._config.api_url})"

    def pull_env(self, environment: str) -> dict[str, str]:
        """Fetch every variable of environment with its decrypted value.

        Raises:
            VercelAPIError: If any variable comes back without a value
                (sensitive variables are never decrypted) or on API errors.
        """
        env_vars: dict[str, str] = {}
        for item in self._list(environment, decrypt=True):
            value = item.get("value")
            if value is None:
                raise VercelAPIError(
                    message=f"Value of {item.get('key')} is not readable",
                    endpoint=f"/v9/{self._project_path}",
                )
            env_vars[item["key"]] = value
        return env_vars

    def list_env_names(self, environment: str) -> list[str]:
        """List variable names of environment without values."""
        return [item["key"] for item in self._list(environment, decrypt=False)]

    def add_env(self, key: str, environment: str, value: str) -> None:
        """Create an encrypted variable targeting environment.

        Raises:
            VercelEnvExistsError: If the variable already exists.
            VercelAPIError: On any other API error.
        """
        payload = {"key": key, "value": value, "type": "encrypted", "target": [environment]}
        try:
            self._request(
                "POST", f"v10/{self._project_path}", json=payload, params=self._params()
            )
        except VercelAPIError as e:
            code = ((e.response_body or {}).get("error") or {}).get("code")
            if code in EXISTS_ERROR_CODES or "already exists" in e.message.lower():
                raise VercelEnvExistsError(key=key, environment=environment) from e
            raise

    def remove_env(self, key: str, environment: str) -> None:
        """Remove key from environment.

        A variable record shared with other targets is narrowed to the
        remaining targets instead of being deleted.

        Raises:
            VercelAPIError: If no such variable exists or the call fails.
        """
        for item in self._list(environment, decrypt=False):
            if item.get("key") != key:
                continue
            endpoint = f"v9/{self._project_path}/{item['id']}"
            remaining = [t for t in item.get("target") or [] if t != environment]
            if remaining:
                self._request("PATCH", endpoint, json={"target": remaining}, params=self._params())
            else:
                self._request("DELETE", endpoint, params=self._params())
            return
        raise VercelAPIError(
            message=f"{key} not found in {environment}",
            status_code=404,
            endpoint=f"/v9/{self._project_path}",
        )
