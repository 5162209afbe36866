"""
Request bodies for the Hetzner Cloud servers API.
"""

import random
from typing import Any, Dict, List, Optional, Sequence, TypeVar

from vmpool.constants import HETZNER_PAGE_SIZE

T = TypeVar("T")


def pick_placement(options: Sequence[T], rng: Optional[random.Random] = None) -> T:
    """
    Uniform random pick over configured networks or locations.
    Spreads servers across zones and subnets; not load-aware.
    """
    if not options:
        raise ValueError("cannot pick a placement from an empty list")
    return (rng or random).choice(list(options))


def build_create_payload(
    *,
    name: str,
    tag: str,
    server_type: str,
    image_id: int,
    ssh_keys: List[int],
    network: int,
    location: str,
    user_data: str,
) -> Dict[str, Any]:
    return {
        "name": name,
        "server_type": server_type,
        "start_after_create": True,
        "image": image_id,
        "ssh_keys": list(ssh_keys),
        "networks": [network],
        "user_data": user_data,
        "labels": {
            tag: "1",
            # The live name is overwritten on every reclaim
            "originalName": name,
        },
        "location": location,
    }


def build_rename_payload(name: str) -> Dict[str, Any]:
    return {"name": name}


def build_rebuild_payload(image_id: int) -> Dict[str, Any]:
    return {"image": image_id}


def build_attach_payload(network: int) -> Dict[str, Any]:
    return {"network": network}


def build_list_params(
    page: int,
    label_selector: Optional[str] = None,
    per_page: int = HETZNER_PAGE_SIZE,
) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "sort": "id:asc",
        "page": page,
        "per_page": per_page,
    }
    if label_selector:
        params["label_selector"] = label_selector
    return params
