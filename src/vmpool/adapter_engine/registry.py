from typing import Dict, Optional, Type

from vmpool.adapter_engine.adapters.hetzner.hetzner_adapter import HetznerManager
from vmpool.adapter_engine.base import CloudInitGenerator, VMManager
from vmpool.common.errors import UnknownProviderError
from vmpool.common.http_client import ProviderHttpClient
from vmpool.config import Settings
from vmpool.config import settings as default_settings

ADAPTER_REGISTRY: Dict[str, Type[VMManager]] = {
    "hetzner": HetznerManager,
}


def get_adapter_class(provider: str) -> Type[VMManager]:
    adapter_cls = ADAPTER_REGISTRY.get(provider.lower())
    if not adapter_cls:
        raise UnknownProviderError(provider, get_registered_providers())
    return adapter_cls


def get_manager(
    provider: str,
    *,
    region: str,
    large: bool = False,
    cloud_init: CloudInitGenerator,
    settings: Optional[Settings] = None,
    http_client: Optional[ProviderHttpClient] = None,
) -> VMManager:
    """
    Build a manager bound to (provider, region, size tier).

    Args:
        provider: Provider name (e.g., "hetzner"), case-insensitive
        region: Logical region (e.g., "US", "EU")
        large: Whether the manager runs the large size tier
        cloud_init: Generator for the user-data attached at creation
        settings: Settings to read; defaults to the process-wide settings
        http_client: Optional pre-built client (tests, shared pools)

    Raises:
        UnknownProviderError: If provider is not registered
        ProviderConfigurationError: If the provider's configuration is unusable
    """
    adapter_cls = get_adapter_class(provider)
    if settings is None:
        settings = default_settings
    config = settings.get_provider_config(provider, region)
    return adapter_cls(
        config,
        region=region,
        large=large,
        cloud_init=cloud_init,
        http_client=http_client,
    )


def get_registered_providers() -> list:
    """
    Get list of all registered provider names.
    """
    return list(ADAPTER_REGISTRY.keys())


def get_provider_info() -> dict:
    """
    Get information about all registered providers including their capabilities.

    Returns:
        Dict mapping provider names to their capabilities
    """
    info = {}
    for provider_name, adapter_cls in ADAPTER_REGISTRY.items():
        info[provider_name] = {
            "adapter_id": adapter_cls.ADAPTER_ID,
            "capabilities": adapter_cls.get_capabilities().to_dict(),
        }
    return info
