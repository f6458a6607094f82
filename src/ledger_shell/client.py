"""HTTP transport to a ledger gateway fronting a validator pool."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from ledger_shell.errors import GatewayUnavailableError, LedgerRequestError

GATEWAY_API_KEY_ENV_VAR = "LEDGER_SHELL_GATEWAY_API_KEY"

logger = logging.getLogger(__name__)


@dataclass
class GatewayClient:
    base_url: str
    api_key: str | None = None
    timeout: float = 20.0
    retries: int = 2

    def __post_init__(self) -> None:
        try:
            import requests
            from requests.adapters import HTTPAdapter
            from urllib3.util.retry import Retry
        except Exception as exc:  # pragma: no cover
            raise GatewayUnavailableError(f"requests stack unavailable: {exc}") from exc

        self._session = requests.Session()
        retry = Retry(
            total=max(0, int(self.retries)),
            connect=max(0, int(self.retries)),
            read=max(0, int(self.retries)),
            status=max(0, int(self.retries)),
            status_forcelist=(429, 502, 503, 504),
            backoff_factor=0.2,
            allowed_methods=("GET",),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)
        if self.api_key is None:
            env_api_key = os.getenv(GATEWAY_API_KEY_ENV_VAR)
            self.api_key = env_api_key.strip() or None if env_api_key else None

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        json_payload: dict | None = None,
        timeout: float | None = None,
    ) -> dict:
        headers = {"x-api-key": self.api_key} if self.api_key else None
        logger.debug("gateway %s %s", method, path)
        try:
            response = self._session.request(
                method,
                self._url(path),
                json=json_payload,
                headers=headers,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except Exception as exc:
            raise GatewayUnavailableError(str(exc)) from exc

        if response.status_code >= 400:
            body: object | None = None
            reason: object | None = None
            try:
                body = response.json()
            except Exception:
                body = None
            if isinstance(body, dict):
                reason = body.get("reason") or body.get("detail")
            if isinstance(reason, str):
                message = f"gateway request failed: {response.status_code} {reason}"
            else:
                message = f"gateway request failed: {response.status_code} {response.text}"
            raise LedgerRequestError(
                message,
                status_code=response.status_code,
                reason=reason,
                body=body,
            )
        try:
            return response.json()
        except Exception as exc:
            raise GatewayUnavailableError(f"invalid data has been received: {exc}") from exc

    def status(self) -> dict:
        return self._request("GET", "/status")

    def refresh(self) -> dict:
        return self._request("POST", "/refresh")

    def submit(self, request: dict, *, timeout: float | None = None) -> dict:
        return self._request("POST", "/submit", json_payload=request, timeout=timeout)

    def submit_action(
        self,
        request: dict,
        *,
        nodes: list[str] | None = None,
        timeout: float | None = None,
    ) -> dict:
        payload: dict = {"request": request}
        if nodes:
            payload["nodes"] = list(nodes)
        if timeout is not None:
            payload["timeout"] = timeout
        return self._request("POST", "/submit-action", json_payload=payload, timeout=timeout)

    def close(self) -> None:
        self._session.close()


__all__ = ["GatewayClient"]
