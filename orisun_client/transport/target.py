from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from orisun_client.core.config import DEFAULT_HOST, DEFAULT_PORT, ConnectionConfig, ServerAddress


DNS_SCHEME = "dns:///"
STATIC_SCHEME = "static:///"

SOURCE_DNS = "dns"
SOURCE_STATIC = "static"
SOURCE_SERVERS = "servers"


@dataclass(frozen=True)
class ResolvedTarget:
    """Connection target produced from a ConnectionConfig.

    ``multi_peer`` marks targets that can expand to several peers; only those
    get a load-balancing policy. ``source`` records which config field won.
    """

    target: str
    multi_peer: bool
    source: str


def _with_scheme(name: str, scheme: str) -> str:
    return name if name.startswith(scheme) else scheme + name


def _join(servers: Sequence[ServerAddress]) -> str:
    return ",".join(server.address for server in servers)


def resolve_target(config: ConnectionConfig) -> Optional[ResolvedTarget]:
    """Resolve a config into a single target, first match wins.

    Returns None when a prebuilt channel was supplied.
    """
    if config.channel is not None:
        return None

    if config.dns_target and config.dns_target.strip():
        return ResolvedTarget(_with_scheme(config.dns_target, DNS_SCHEME), True, SOURCE_DNS)

    if config.static_target and config.static_target.strip():
        return ResolvedTarget(_with_scheme(config.static_target, STATIC_SCHEME), True, SOURCE_STATIC)

    servers = list(config.servers) or [ServerAddress(host=DEFAULT_HOST, port=DEFAULT_PORT)]

    if len(servers) == 1:
        return ResolvedTarget(servers[0].address, False, SOURCE_SERVERS)

    # A comma inside a host means the caller hand-built a peer list: no scheme wrapping
    if any("," in server.host for server in servers):
        return ResolvedTarget(_join(servers), True, SOURCE_SERVERS)

    scheme = DNS_SCHEME if config.use_dns_resolver else STATIC_SCHEME
    return ResolvedTarget(scheme + _join(servers), True, SOURCE_SERVERS)
