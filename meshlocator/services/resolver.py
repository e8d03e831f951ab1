from typing import Any

from meshlocator.clients.sysinfo_client import SysinfoClient
from meshlocator.logger import logger
from meshlocator.models.common import FetchResult, GatewayRecord
from meshlocator.subnets import HOST_PREFIX, detect_netmask_prefix, generate_candidates


class GatewayResolver:
    """Finds the mesh node serving a client address.

    Candidates are probed one at a time and the first node that answers wins;
    later candidates are never contacted. When no inferred gateway answers,
    the client address itself is probed, which covers nodes running in NAT
    mode where the node is the only address the server ever sees.
    """

    def __init__(self, probe_client: SysinfoClient) -> None:
        self._probe_client = probe_client

    async def resolve(self, client_ip: str) -> GatewayRecord | None:
        for candidate in generate_candidates(client_ip):
            result = await self._probe_client.fetch(candidate.gateway_ip)
            sysinfo = self._accept(candidate.gateway_ip, result)
            if sysinfo is None:
                continue

            netmask_cidr = detect_netmask_prefix(client_ip, candidate.gateway_ip)
            logger.info(
                "Resolved gateway "
                f"client_ip={client_ip} router_ip={candidate.gateway_ip} "
                f"candidate_prefix=/{candidate.prefix_length} netmask_cidr={netmask_cidr}"
            )
            return GatewayRecord.from_sysinfo(candidate.gateway_ip, netmask_cidr, sysinfo)

        sysinfo = self._accept(client_ip, await self._probe_client.fetch(client_ip))
        if sysinfo is None:
            return None

        logger.info(f"Resolved gateway in self mode client_ip={client_ip}")
        return GatewayRecord.from_sysinfo(client_ip, HOST_PREFIX, sysinfo)

    @staticmethod
    def _accept(ip: str, result: FetchResult) -> dict[str, Any] | None:
        """Fold a probe result into "this is the gateway" or "try the next one".

        Timeouts, refused connections, HTTP errors and malformed documents all
        mean the same thing here: this address is not the gateway.
        """
        if result.ok:
            return result.payload
        logger.debug(f"Gateway probe failed ip={ip} status={result.status.value} detail={result.detail}")
        return None
