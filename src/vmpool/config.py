"""
VM Pool Configuration
"""

from dataclasses import dataclass, field
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from vmpool.common.errors import ProviderConfigurationError


@dataclass(frozen=True)
class ProviderConfig:
    """
    Placement and credential inputs for one (provider, region) pair.
    Built once from Settings and handed to each manager's constructor.
    """

    provider: str
    region: str
    api_token: str
    image_id: int
    image_name: str
    gateway: str
    ssh_keys: List[int] = field(default_factory=list)
    networks: List[int] = field(default_factory=list)
    datacenters: List[str] = field(default_factory=list)
    pool_limit: Optional[int] = None
    pool_limit_large: Optional[int] = None
    request_timeout_seconds: float = 30.0

    def limit_for(self, large: bool) -> Optional[int]:
        return self.pool_limit_large if large else self.pool_limit


def split_csv(value: Optional[str]) -> List[str]:
    """Split a comma-delimited setting, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def split_ints(value: Optional[str], name: str, provider: str) -> List[int]:
    try:
        return [int(item) for item in split_csv(value)]
    except ValueError:
        raise ProviderConfigurationError(
            provider, f"{name} must be a comma-separated list of integers, got {value!r}"
        )


class Settings(BaseSettings):
    """Application settings."""

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON")

    # Transport deadline applied to every provider request
    http_timeout_seconds: float = Field(
        default=30.0, gt=0, validation_alias="HTTP_TIMEOUT_SECONDS"
    )

    # Pool capacity
    vm_pool_limit: Optional[int] = Field(
        default=None, ge=0, validation_alias="VM_POOL_LIMIT"
    )
    vm_pool_limit_large: Optional[int] = Field(
        default=None, ge=0, validation_alias="VM_POOL_LIMIT_LARGE"
    )

    # Hetzner Configuration
    hetzner_token: str = Field(default="", validation_alias="HETZNER_TOKEN")
    hetzner_ssh_keys: str = Field(default="", validation_alias="HETZNER_SSH_KEYS")
    hetzner_image: Optional[int] = Field(default=None, validation_alias="HETZNER_IMAGE")
    hetzner_image_name: str = Field(
        default="vbrowser", validation_alias="HETZNER_IMAGE_NAME"
    )
    hetzner_networks: str = Field(default="", validation_alias="HETZNER_NETWORKS")
    hetzner_networks_us: str = Field(default="", validation_alias="HETZNER_NETWORKS_US")
    hetzner_datacenters: str = Field(
        default="nbg1,fsn1,hel1", validation_alias="HETZNER_DATACENTERS"
    )
    hetzner_datacenters_us: str = Field(
        default="ash", validation_alias="HETZNER_DATACENTERS_US"
    )
    hetzner_gateway: str = Field(default="", validation_alias="HETZNER_GATEWAY")
    hetzner_gateway_us: str = Field(default="", validation_alias="HETZNER_GATEWAY_US")

    def get_provider_config(self, provider: str, region: str) -> ProviderConfig:
        """
        Build the typed configuration for a provider in a region.

        Args:
            provider: Provider name (e.g., 'hetzner')
            region: Logical region (e.g., 'US', 'EU'); 'US' selects the _US settings

        Raises:
            ProviderConfigurationError: unknown provider or missing required values
        """
        builders = {
            "hetzner": self._hetzner_config,
        }
        builder = builders.get(provider.lower())
        if builder is None:
            raise ProviderConfigurationError(provider, "no configuration section")
        return builder(region)

    def _hetzner_config(self, region: str) -> ProviderConfig:
        us = region == "US"
        if not self.hetzner_token:
            raise ProviderConfigurationError("hetzner", "HETZNER_TOKEN is not set")
        if self.hetzner_image is None:
            raise ProviderConfigurationError("hetzner", "HETZNER_IMAGE is not set")

        return ProviderConfig(
            provider="hetzner",
            region=region,
            api_token=self.hetzner_token,
            image_id=self.hetzner_image,
            image_name=self.hetzner_image_name,
            gateway=self.hetzner_gateway_us if us else self.hetzner_gateway,
            ssh_keys=split_ints(self.hetzner_ssh_keys, "HETZNER_SSH_KEYS", "hetzner"),
            networks=split_ints(
                self.hetzner_networks_us if us else self.hetzner_networks,
                "HETZNER_NETWORKS_US" if us else "HETZNER_NETWORKS",
                "hetzner",
            ),
            datacenters=split_csv(
                self.hetzner_datacenters_us if us else self.hetzner_datacenters
            ),
            pool_limit=self.vm_pool_limit,
            pool_limit_large=self.vm_pool_limit_large,
            request_timeout_seconds=self.http_timeout_seconds,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )


settings = Settings()
