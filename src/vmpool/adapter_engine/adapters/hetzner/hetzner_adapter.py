import asyncio
import logging
import uuid
from typing import Dict, List, Optional

from vmpool.adapter_engine.base import (
    CloudInitGenerator,
    ManagerCapabilities,
    VMManager,
)
from vmpool.adapter_engine.adapters.hetzner.server_builder import (
    build_attach_payload,
    build_create_payload,
    build_list_params,
    build_rebuild_payload,
    build_rename_payload,
    pick_placement,
)
from vmpool.adapter_engine.adapters.hetzner.server_mapper import map_server
from vmpool.common.errors import ProviderConfigurationError
from vmpool.common.http_client import ProviderHttpClient
from vmpool.config import ProviderConfig
from vmpool.constants import (
    CLOUD_INIT_FLAGS,
    HETZNER_API_URL,
    HETZNER_PAGE_SIZE,
    LARGE_RESOLUTION,
    SizeTier,
)
from vmpool.schemas.vm import VM, ActionResult

logger = logging.getLogger(__name__)


class HetznerManager(VMManager):
    """
    Hetzner Cloud adapter.

    IMPORTANT CONTRACT:
    - VM.password is the live server name; reboot_vm rotates it
    - originalName label keeps the name requested at creation
    - reboot is rename + rebuild, since Hetzner does not refresh the
      hostname on rename + soft reboot
    """

    ADAPTER_ID = "Hetzner"

    CAPABILITIES = ManagerCapabilities(
        page_size=HETZNER_PAGE_SIZE,
        supports_label_selector=True,
        reboot_strategy="rebuild",
        rotates_credential_on_reboot=True,
        supports_network_attach=True,
        features={
            "private_networks": True,
            "gateway_proxied": True,
        },
    )

    def __init__(
        self,
        config: ProviderConfig,
        *,
        region: str,
        large: bool = False,
        cloud_init: CloudInitGenerator,
        http_client: Optional[ProviderHttpClient] = None,
    ):
        if not config.networks:
            raise ProviderConfigurationError(
                "hetzner", f"no networks configured for region {region}"
            )
        if not config.datacenters:
            raise ProviderConfigurationError(
                "hetzner", f"no datacenters configured for region {region}"
            )
        super().__init__(
            config,
            region=region,
            large=large,
            cloud_init=cloud_init,
            http_client=http_client,
        )

    @classmethod
    def build_http_client(cls, config: ProviderConfig) -> ProviderHttpClient:
        return ProviderHttpClient(
            api_token=config.api_token,
            base_url=HETZNER_API_URL,
            timeout_seconds=config.request_timeout_seconds,
        )

    @property
    def server_type(self) -> str:
        return SizeTier.for_pool(self.is_large).value

    # -------------------------------------------------
    # CREATE
    # -------------------------------------------------
    async def start_vm(self, name: str) -> str:
        user_data = self.cloud_init(
            self.config.image_name,
            LARGE_RESOLUTION if self.is_large else None,
            *CLOUD_INIT_FLAGS,
        )
        payload = build_create_payload(
            name=name,
            tag=self.get_tag(),
            server_type=self.server_type,
            image_id=self.config.image_id,
            ssh_keys=self.config.ssh_keys,
            network=pick_placement(self.config.networks),
            location=pick_placement(self.config.datacenters),
            user_data=user_data,
        )

        response = await self.http.post("/servers", json=payload)
        server_id = str(response.json()["server"]["id"])
        logger.info(
            f"Created Hetzner server {server_id} ({name}, type={self.server_type}, "
            f"location={payload['location']}, network={payload['networks'][0]})"
        )
        return server_id

    # -------------------------------------------------
    # DELETE
    # -------------------------------------------------
    async def terminate_vm(self, id: str) -> None:
        await self.http.delete(f"/servers/{id}")
        logger.info(f"Terminated Hetzner server {id}")

    # -------------------------------------------------
    # RECLAIM
    # -------------------------------------------------
    async def reboot_vm(self, id: str) -> None:
        password = str(uuid.uuid4())

        # Step 1: the image reads the name back on first boot, so rename first
        await self.http.put(f"/servers/{id}", json=build_rename_payload(password))
        logger.info(f"Renamed Hetzner server {id} for reclaim")

        # Step 2: no revert of the rename if this fails
        await self.http.post(
            f"/servers/{id}/actions/rebuild",
            json=build_rebuild_payload(self.config.image_id),
        )
        logger.info(f"Rebuilding Hetzner server {id} from image {self.config.image_id}")

    # -------------------------------------------------
    # INSPECT
    # -------------------------------------------------
    async def get_vm(self, id: str) -> Optional[VM]:
        response = await self.http.get(f"/servers/{id}")
        logger.debug(
            f"[GETVM] {response.headers.get('ratelimit-remaining')} rate limit remaining"
        )
        server = self.map_server(response.json()["server"])
        if not server.private_ip:
            return None
        return server

    async def list_vms(self, filter: Optional[str] = None) -> List[VM]:
        pages = range(1, self.page_count() + 1)
        # gather fails fast: one bad page fails the whole listing
        responses = await asyncio.gather(
            *(
                self.http.get("/servers", params=build_list_params(page, filter))
                for page in pages
            )
        )
        logger.debug(f"Fetched {len(responses)} server page(s) for {self.get_tag()}")

        vms: List[VM] = []
        for response in responses:
            vms.extend(self._members(response.json().get("servers", [])))
        return vms

    def _members(self, servers: List[Dict]) -> List[VM]:
        # The label selector can match more than exact membership
        mapped = [self.map_server(server) for server in servers]
        return [vm for vm in mapped if self.is_member(vm)]

    def map_server(self, server: Dict) -> VM:
        return map_server(
            server,
            gateway=self.config.gateway,
            provider=self.ADAPTER_ID,
            large=self.is_large,
            region=self.region,
        )

    # -------------------------------------------------
    # BEST EFFORT
    # -------------------------------------------------
    async def power_on(self, id: str) -> ActionResult:
        try:
            await self.http.post(f"/servers/{id}/actions/poweron")
        except Exception as e:
            logger.warning(
                f"Failed to power on Hetzner server {id}: {e}",
                extra={"vm_id": id, "action": "poweron", "provider": self.ADAPTER_ID},
            )
            return ActionResult(action="poweron", vm_id=id, ok=False, error=str(e))
        return ActionResult(action="poweron", vm_id=id)

    async def attach_to_network(self, id: str) -> ActionResult:
        network = self.config.networks[-1]
        try:
            await self.http.post(
                f"/servers/{id}/actions/attach_to_network",
                json=build_attach_payload(network),
            )
        except Exception as e:
            logger.warning(
                f"Failed to attach Hetzner server {id} to network {network}: {e}",
                extra={
                    "vm_id": id,
                    "action": "attach_to_network",
                    "provider": self.ADAPTER_ID,
                },
            )
            return ActionResult(
                action="attach_to_network", vm_id=id, ok=False, error=str(e)
            )
        return ActionResult(action="attach_to_network", vm_id=id)
