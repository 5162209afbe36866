from typing import Any, Dict, Optional

from vmpool.schemas.vm import VM


def private_address(server: Dict[str, Any]) -> Optional[str]:
    """First private network address, or None while the server has none."""
    private_net = server.get("private_net") or []
    if not private_net:
        return None
    return private_net[0].get("ip") or None


def map_server(
    server: Dict[str, Any],
    *,
    gateway: str,
    provider: str,
    large: bool,
    region: str,
) -> VM:
    """
    Map a Hetzner server object to the canonical VM record.

    The host points at the gateway, which terminates TLS and proxies to the
    private IP. originalName is read from its label because reclaim renames
    the server.
    """
    ip = private_address(server)
    labels = server.get("labels") or {}
    return VM(
        id=str(server["id"]),
        password=server.get("name") or "",
        host=f"{gateway}/?ip={ip or ''}",
        private_ip=ip,
        state=server.get("status"),
        tags=set(labels.keys()),
        creation_date=server.get("created"),
        original_name=labels.get("originalName"),
        provider=provider,
        large=large,
        region=region,
    )
