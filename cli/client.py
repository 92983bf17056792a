from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the sensor feed monitor service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def trigger_update(self) -> str:
        payload = self._request("GET", "/api/sensors/update")
        return str(payload.get("message", ""))

    def get_analysis(self) -> Dict[str, Any]:
        return self._request("GET", "/api/sensors/analysis")

    def register(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> str:
        body = {"email": email, "password": password, "fullName": full_name, "phone": phone}
        payload = self._request("POST", "/api/auth/register", json=body)
        return str(payload.get("message", ""))

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self._request(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1)
        payload = response.json()
        if not isinstance(payload, dict):
            raise typer.BadParameter(f"Unexpected response payload from {path}.")
        return payload

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("message")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
