import json
import logging

import httpx
import pytest

from vmpool.common.http_client import ProviderHttpClient, operation_id_ctx
from vmpool.common.logger import JsonFormatter


def _client(handler):
    return ProviderHttpClient(
        api_token="tok",
        base_url="https://api.example.com/v1",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_request_injects_bearer_and_operation_id():
    seen = {}

    def handler(request):
        seen.update(request.headers)
        return httpx.Response(200, json={})

    client = _client(handler)
    token = operation_id_ctx.set("op-123")
    try:
        await client.get("/servers")
    finally:
        operation_id_ctx.reset(token)
        await client.close()

    assert seen["authorization"] == "Bearer tok"
    assert seen["x-request-id"] == "op-123"


@pytest.mark.asyncio
async def test_error_status_is_logged_and_raised(caplog):
    def handler(request):
        return httpx.Response(
            401, json={"error": {"code": "unauthorized", "message": "unable to authenticate"}}
        )

    client = _client(handler)

    with caplog.at_level(logging.ERROR, logger="vmpool.common.http_client"):
        with pytest.raises(httpx.HTTPStatusError):
            await client.delete("/servers/1")

    assert "401 unauthorized: unable to authenticate" in caplog.text
    await client.close()


def test_timeout_is_mandatory():
    with pytest.raises(ValueError):
        ProviderHttpClient(api_token="tok", base_url="https://x", timeout_seconds=0)


def test_json_formatter_includes_operation_id():
    record = logging.LogRecord(
        "vmpool.test", logging.WARNING, __file__, 10, "failed to power on %s", ("42",), None
    )
    token = operation_id_ctx.set("op-9")
    try:
        payload = json.loads(JsonFormatter().format(record))
    finally:
        operation_id_ctx.reset(token)

    assert payload["message"] == "failed to power on 42"
    assert payload["operation_id"] == "op-9"
    assert payload["level"] == "WARNING"
