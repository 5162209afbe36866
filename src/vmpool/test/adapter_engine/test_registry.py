from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from vmpool.adapter_engine.adapters.hetzner.hetzner_adapter import HetznerManager
from vmpool.adapter_engine.registry import (
    get_manager,
    get_provider_info,
    get_registered_providers,
)
from vmpool.common.errors import UnknownProviderError


def test_get_manager_builds_adapter_from_settings(provider_config, cloud_init):
    settings = SimpleNamespace(get_provider_config=MagicMock(return_value=provider_config))

    manager = get_manager(
        "Hetzner", region="EU", large=True, cloud_init=cloud_init, settings=settings
    )

    assert isinstance(manager, HetznerManager)
    assert manager.get_tag() == "HetznerEULarge"
    assert manager.pool_limit == 20
    settings.get_provider_config.assert_called_once_with("Hetzner", "EU")


def test_tag_differs_per_region_and_tier(provider_config, cloud_init):
    tags = {
        HetznerManager(provider_config, region=region, large=large, cloud_init=cloud_init).get_tag()
        for region in ("EU", "US")
        for large in (False, True)
    }

    assert tags == {"HetznerEU", "HetznerEULarge", "HetznerUS", "HetznerUSLarge"}


def test_get_manager_rejects_unknown_provider(cloud_init):
    with pytest.raises(UnknownProviderError, match="No adapter registered"):
        get_manager("digitalocean", region="EU", cloud_init=cloud_init)


def test_provider_info_lists_capabilities():
    assert get_registered_providers() == ["hetzner"]

    info = get_provider_info()

    assert info["hetzner"]["adapter_id"] == "Hetzner"
    assert info["hetzner"]["capabilities"]["reboot_strategy"] == "rebuild"
    assert info["hetzner"]["capabilities"]["page_size"] == 50
