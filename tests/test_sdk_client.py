from __future__ import annotations

import types

import pytest

from ledger_shell.client import GATEWAY_API_KEY_ENV_VAR, GatewayClient
from ledger_shell.errors import GatewayUnavailableError, LedgerRequestError


def _capture(client: GatewayClient, response) -> dict[str, object]:
    captured: dict[str, object] = {}

    def fake_request(method, url, *, json=None, headers=None, timeout=None):  # noqa: ANN001
        captured["method"] = method
        captured["url"] = url
        captured["json"] = json
        captured["headers"] = headers
        captured["timeout"] = timeout
        return response

    client._session.request = fake_request
    return captured


def test_request_includes_api_key_header(monkeypatch) -> None:
    monkeypatch.delenv(GATEWAY_API_KEY_ENV_VAR, raising=False)
    client = GatewayClient(base_url="http://localhost:9702/", api_key="gw_test_key", timeout=0.1)
    captured = _capture(client, types.SimpleNamespace(status_code=200, json=lambda: {"ok": True}))

    assert client.status() == {"ok": True}
    assert captured["method"] == "GET"
    assert captured["url"] == "http://localhost:9702/status"
    assert captured["headers"] == {"x-api-key": "gw_test_key"}
    assert captured["timeout"] == 0.1


def test_api_key_from_environment(monkeypatch) -> None:
    monkeypatch.setenv(GATEWAY_API_KEY_ENV_VAR, "  env_key  ")
    assert GatewayClient(base_url="http://localhost:9702").api_key == "env_key"
    monkeypatch.setenv(GATEWAY_API_KEY_ENV_VAR, "   ")
    assert GatewayClient(base_url="http://localhost:9702").api_key is None


def test_no_header_without_api_key(monkeypatch) -> None:
    monkeypatch.delenv(GATEWAY_API_KEY_ENV_VAR, raising=False)
    client = GatewayClient(base_url="http://localhost:9702")
    captured = _capture(client, types.SimpleNamespace(status_code=200, json=lambda: {}))
    client.refresh()
    assert captured["headers"] is None
    assert captured["method"] == "POST"


def test_submit_action_payload() -> None:
    client = GatewayClient(base_url="http://localhost:9702", api_key="k")
    captured = _capture(client, types.SimpleNamespace(status_code=200, json=lambda: {"Node1": "{}"}))

    result = client.submit_action({"reqId": 1}, nodes=["Node1"], timeout=5)
    assert result == {"Node1": "{}"}
    assert captured["url"] == "http://localhost:9702/submit-action"
    assert captured["json"] == {"request": {"reqId": 1}, "nodes": ["Node1"], "timeout": 5}
    assert captured["timeout"] == 5

    client.submit_action({"reqId": 2})
    assert captured["json"] == {"request": {"reqId": 2}}


def test_error_response_carries_reason() -> None:
    client = GatewayClient(base_url="http://localhost:9702", api_key="k")
    _capture(
        client,
        types.SimpleNamespace(status_code=409, json=lambda: {"reason": "pool busy"}, text="busy"),
    )
    with pytest.raises(LedgerRequestError) as exc:
        client.submit({"reqId": 1})
    assert exc.value.status_code == 409
    assert exc.value.reason == "pool busy"
    assert str(exc.value) == "gateway request failed: 409 pool busy"


def test_error_response_without_json_body() -> None:
    client = GatewayClient(base_url="http://localhost:9702", api_key="k")

    def not_json():
        raise ValueError("no json")

    _capture(client, types.SimpleNamespace(status_code=500, json=not_json, text="boom"))
    with pytest.raises(LedgerRequestError, match="500 boom"):
        client.status()


def test_connection_failure_is_gateway_unavailable() -> None:
    client = GatewayClient(base_url="http://localhost:9702", api_key="k")

    def refuse(*args, **kwargs):  # noqa: ANN002, ANN003
        raise ConnectionError("refused")

    client._session.request = refuse
    with pytest.raises(GatewayUnavailableError, match="refused"):
        client.status()
