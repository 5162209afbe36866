import json
from unittest.mock import MagicMock

import httpx
import pytest

from vmpool.adapter_engine.adapters.hetzner.hetzner_adapter import HetznerManager
from vmpool.common.http_client import ProviderHttpClient
from vmpool.config import ProviderConfig


class FakeHetznerAPI:
    """
    In-memory stand-in for api.hetzner.cloud, served through httpx.MockTransport.
    Routes map (method, path) to a callable returning an httpx.Response.
    """

    def __init__(self):
        self.requests = []
        self.routes = {}

    def route(self, method, path, handler=None, *, status=200, json_body=None):
        if handler is None:

            def handler(request):
                return httpx.Response(status, json=json_body if json_body is not None else {})

        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(
                404, json={"error": {"code": "not_found", "message": "not found"}}
            )
        return handler(request)

    def calls(self, method=None, path=None):
        return [
            r
            for r in self.requests
            if (method is None or r.method == method)
            and (path is None or r.url.path == path)
        ]

    @staticmethod
    def body(request: httpx.Request):
        return json.loads(request.content) if request.content else None


@pytest.fixture
def fake_api():
    return FakeHetznerAPI()


@pytest.fixture
def provider_config():
    return ProviderConfig(
        provider="hetzner",
        region="EU",
        api_token="test-token",
        image_id=98765,
        image_name="vbrowser",
        gateway="https://gateway.example.com",
        ssh_keys=[11, 12],
        networks=[101, 102, 103],
        datacenters=["nbg1", "fsn1", "hel1"],
        pool_limit=120,
        pool_limit_large=20,
    )


@pytest.fixture
def cloud_init():
    return MagicMock(return_value="#cloud-config\n")


@pytest.fixture
def make_manager(fake_api, provider_config, cloud_init):
    def _make(large=False, config=None, region="EU"):
        http_client = ProviderHttpClient(
            api_token="test-token",
            base_url="https://api.hetzner.cloud/v1",
            transport=httpx.MockTransport(fake_api),
        )
        return HetznerManager(
            config or provider_config,
            region=region,
            large=large,
            cloud_init=cloud_init,
            http_client=http_client,
        )

    return _make


@pytest.fixture
def server_object():
    return make_server_object


def make_server_object(id, *, ip="10.0.0.5", labels=None, name="secret", status="running"):
    return {
        "id": id,
        "name": name,
        "status": status,
        "created": "2024-01-01T00:00:00+00:00",
        "private_net": [{"ip": ip, "network": 101}] if ip else [],
        "labels": labels if labels is not None else {"HetznerEU": "1", "originalName": f"w{id}"},
    }
