import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from vmpool.common.http_client import ProviderHttpClient
from vmpool.config import ProviderConfig
from vmpool.schemas.vm import VM, ActionResult


class CloudInitGenerator(Protocol):
    """
    Builds the user-data blob attached at creation time.
    Called as (image_name, resolution, flag, flag, flag); the flags are opaque here.
    """

    def __call__(
        self,
        image_name: str,
        resolution: Optional[str],
        flag_a: bool,
        flag_b: bool,
        flag_c: bool,
    ) -> str: ...


@dataclass
class ManagerCapabilities:
    """
    Provider quirks the pool layer may need to know about.
    """

    # Listing
    page_size: int = 50
    supports_label_selector: bool = True

    # Lifecycle
    reboot_strategy: str = "restart"  # restart | rebuild
    rotates_credential_on_reboot: bool = True
    supports_network_attach: bool = False

    # Metadata
    features: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert capabilities to dictionary for serialization."""
        return {
            "page_size": self.page_size,
            "supports_label_selector": self.supports_label_selector,
            "reboot_strategy": self.reboot_strategy,
            "rotates_credential_on_reboot": self.rotates_credential_on_reboot,
            "supports_network_attach": self.supports_network_attach,
            "features": self.features,
        }


class VMManager(ABC):
    """
    Lifecycle contract for a VM pool on one provider.
    Consumers depend ONLY on this interface.

    An instance is bound to (provider, region, size tier) at construction.
    No state is kept between calls; every answer is re-derived from the provider.

    All implementations must:
    1. Define ADAPTER_ID and CAPABILITIES class attributes
    2. Implement all abstract methods
    """

    ADAPTER_ID: str = ""
    CAPABILITIES: ManagerCapabilities = ManagerCapabilities()

    def __init__(
        self,
        config: ProviderConfig,
        *,
        region: str,
        large: bool = False,
        cloud_init: CloudInitGenerator,
        http_client: Optional[ProviderHttpClient] = None,
    ):
        self.config = config
        self.region = region
        self.is_large = large
        self.cloud_init = cloud_init
        self.http = http_client or self.build_http_client(config)

    @classmethod
    def get_capabilities(cls) -> ManagerCapabilities:
        return cls.CAPABILITIES

    @classmethod
    @abstractmethod
    def build_http_client(cls, config: ProviderConfig) -> ProviderHttpClient:
        raise NotImplementedError

    # -------------------------------------------------
    # MEMBERSHIP
    # -------------------------------------------------
    def get_tag(self) -> str:
        """Pool-membership tag for this (provider, region, size tier)."""
        return f"{self.ADAPTER_ID}{self.region}{'Large' if self.is_large else ''}"

    def is_member(self, vm: VM) -> bool:
        return self.get_tag() in vm.tags

    @property
    def pool_limit(self) -> Optional[int]:
        return self.config.limit_for(self.is_large)

    def page_count(self) -> int:
        """Pages needed to cover the pool; no limit means a single page."""
        return max(1, math.ceil((self.pool_limit or 1) / self.get_capabilities().page_size))

    # -------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------
    @abstractmethod
    async def start_vm(self, name: str) -> str:
        """
        Create one instance named `name` and return the provider id.
        The instance carries the membership tag and an originalName label.
        """
        raise NotImplementedError

    @abstractmethod
    async def terminate_vm(self, id: str) -> None:
        """
        Destroy the instance. On failure the state is unknown; re-query before retrying.
        """
        raise NotImplementedError

    @abstractmethod
    async def reboot_vm(self, id: str) -> None:
        """Return the instance to a clean state and rotate its access credential."""
        raise NotImplementedError

    @abstractmethod
    async def get_vm(self, id: str) -> Optional[VM]:
        """
        Fetch one instance. Returns None while it has no private address yet.
        """
        raise NotImplementedError

    @abstractmethod
    async def list_vms(self, filter: Optional[str] = None) -> List[VM]:
        """
        Fetch all instances matching an optional provider label filter,
        keeping only those that carry this manager's membership tag.
        """
        raise NotImplementedError

    # -------------------------------------------------
    # BEST EFFORT
    # -------------------------------------------------
    @abstractmethod
    async def power_on(self, id: str) -> ActionResult:
        """Try to power on an instance that is unexpectedly off. Never raises."""
        raise NotImplementedError

    @abstractmethod
    async def attach_to_network(self, id: str) -> ActionResult:
        """Try to attach an instance missing connectivity. Never raises."""
        raise NotImplementedError

    # -------------------------------------------------
    # RESOURCES
    # -------------------------------------------------
    async def close(self):
        await self.http.close()

    async def __aenter__(self) -> "VMManager":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
