"""IPv4 subnet arithmetic used to infer a client's gateway.

Mesh nodes hand out small LAN subnets and sit on the first usable host
address of that subnet, so the gateway can be guessed from the client address
alone once the subnet size is known.
"""

from ipaddress import AddressValueError, IPv4Address, IPv4Network
from typing import NamedTuple

CANDIDATE_PREFIXES: tuple[int, ...] = (27, 28, 29, 30)
VERIFICATION_PREFIXES: tuple[int, ...] = (27, 28, 29, 30, 32)
HOST_PREFIX = 32

_ALL_ONES = 0xFFFFFFFF


class Candidate(NamedTuple):
    prefix_length: int
    gateway_ip: str


def parse_ipv4(value: str) -> IPv4Address:
    """Parse a dotted-quad IPv4 address, raising ValueError on anything else."""
    try:
        return IPv4Address(value)
    except AddressValueError as exc:
        raise ValueError(f"{value!r} is not a valid IPv4 address") from exc


def _mask(prefix_length: int) -> int:
    if prefix_length == 0:
        return 0
    return (_ALL_ONES << (32 - prefix_length)) & _ALL_ONES


def cidr_to_netmask(prefix_length: int) -> str | None:
    """Convert a CIDR prefix length to a dotted-quad netmask (None if out of range)."""
    if not 0 <= prefix_length <= 32:
        return None
    return str(IPv4Address(_mask(prefix_length)))


def first_host(address: str, prefix_length: int) -> str:
    """Network address of `address` under `prefix_length`, plus one."""
    base = int(parse_ipv4(address)) & _mask(prefix_length)
    return str(IPv4Address(base + 1))


def generate_candidates(client_ip: str, prefixes: tuple[int, ...] = CANDIDATE_PREFIXES) -> list[Candidate]:
    """Guess gateway addresses for `client_ip`, least specific subnet first.

    Different prefix lengths often produce the same first host; each address
    is reported once, under the first prefix that produced it.
    """
    seen: set[str] = set()
    candidates: list[Candidate] = []
    for prefix_length in prefixes:
        gateway_ip = first_host(client_ip, prefix_length)
        if gateway_ip in seen:
            continue
        seen.add(gateway_ip)
        candidates.append(Candidate(prefix_length, gateway_ip))
    return candidates


def detect_netmask_prefix(client_ip: str, gateway_ip: str) -> int | None:
    """Pick the subnet size that fits a confirmed client/gateway pair.

    Returns the first prefix in VERIFICATION_PREFIXES under which the gateway
    is the first host of its network and the client is another host of that
    same network, or None when no prefix fits.
    """
    client = int(parse_ipv4(client_ip))
    gateway = int(parse_ipv4(gateway_ip))

    for prefix_length in VERIFICATION_PREFIXES:
        mask = _mask(prefix_length)
        gateway_net = gateway & mask
        if gateway != gateway_net + 1:
            continue
        if client & mask == gateway_net and client != gateway:
            return prefix_length

    return None


def in_network(address: str, network: str) -> bool:
    return parse_ipv4(address) in IPv4Network(network, strict=False)
