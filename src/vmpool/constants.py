from enum import Enum

HETZNER_API_URL = "https://api.hetzner.cloud/v1"

# Hetzner caps per_page at 50
HETZNER_PAGE_SIZE = 50

# Display resolution handed to cloud-init for the large (GPU-capable) tier
LARGE_RESOLUTION = "1920x1080@30"

# Feature flags forwarded to the cloud-init generator, in positional order
CLOUD_INIT_FLAGS = (False, False, True)


class SizeTier(str, Enum):
    """Hetzner server types backing each pool tier."""

    # cx11, cpx11, cpx21, cpx31, ccx11
    NORMAL = "cpx11"
    LARGE = "cpx31"

    @classmethod
    def for_pool(cls, large: bool) -> "SizeTier":
        return cls.LARGE if large else cls.NORMAL
