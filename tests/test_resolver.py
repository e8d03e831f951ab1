import pytest

from meshlocator.services.resolver import GatewayResolver
from tests.common import FakeSysinfoClient

CLIENT_IP = "10.190.71.239"
SYSINFO = {"node": "K9RCP-Edge", "lat": 45.2755, "lon": -123.01778, "gridsquare": "CN85lg"}


@pytest.mark.asyncio
async def test_resolve_first_candidate() -> None:
    probe = FakeSysinfoClient({"10.190.71.225": SYSINFO})

    record = await GatewayResolver(probe).resolve(CLIENT_IP)

    assert record is not None
    assert record.router_ip == "10.190.71.225"
    assert record.netmask_cidr == 27
    assert record.netmask == "255.255.255.224"
    assert record.node == "K9RCP-Edge"
    assert record.lat == pytest.approx(45.2755)
    assert record.lon == pytest.approx(-123.01778)
    assert record.gridsquare == "CN85lg"
    assert probe.calls == ["10.190.71.225"]


@pytest.mark.asyncio
async def test_resolve_stops_at_first_success() -> None:
    """First match wins: the /30 candidate is never probed once the /29 one answers."""
    probe = FakeSysinfoClient({"10.190.71.233": {"node": "A"}, "10.190.71.237": {"node": "B"}})

    record = await GatewayResolver(probe).resolve(CLIENT_IP)

    assert record is not None
    assert record.router_ip == "10.190.71.233"
    assert record.node == "A"
    assert record.netmask_cidr == 29
    assert probe.calls == ["10.190.71.225", "10.190.71.233"]


@pytest.mark.asyncio
async def test_resolve_probes_each_unique_candidate_once() -> None:
    probe = FakeSysinfoClient()

    await GatewayResolver(probe).resolve("10.1.2.37")

    # .33 covers /27, /28 and /29; .37 is the /30 candidate and then the client itself.
    assert probe.calls == ["10.1.2.33", "10.1.2.37", "10.1.2.37"]


@pytest.mark.asyncio
async def test_resolve_falls_back_to_self_mode() -> None:
    probe = FakeSysinfoClient({CLIENT_IP: {"node": "X"}})

    record = await GatewayResolver(probe).resolve(CLIENT_IP)

    assert record is not None
    assert record.router_ip == CLIENT_IP
    assert record.netmask_cidr == 32
    assert record.netmask == "255.255.255.255"
    assert record.node == "X"
    assert record.lat is None and record.lon is None and record.gridsquare is None
    assert probe.calls == ["10.190.71.225", "10.190.71.233", "10.190.71.237", CLIENT_IP]


@pytest.mark.asyncio
async def test_resolve_returns_none_when_everything_fails() -> None:
    probe = FakeSysinfoClient()

    assert await GatewayResolver(probe).resolve(CLIENT_IP) is None
    assert probe.calls[-1] == CLIENT_IP
    assert len(probe.calls) == 4


@pytest.mark.asyncio
async def test_resolve_ignores_unknown_sysinfo_keys_and_coerces_strings() -> None:
    sysinfo = {"node": "N0CALL-hap", "lat": "45.2755", "lon": "-123.01778", "api_version": "1.13", "meshrf": {}}
    probe = FakeSysinfoClient({"10.190.71.225": sysinfo})

    record = await GatewayResolver(probe).resolve(CLIENT_IP)

    assert record is not None
    assert record.lat == pytest.approx(45.2755)
    assert record.lon == pytest.approx(-123.01778)
    assert record.gridsquare is None
