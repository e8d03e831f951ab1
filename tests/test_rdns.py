import socket

import pytest

from meshlocator.config import Settings
from meshlocator.services.rdns import ReverseDnsResolver


def _patch_ptr(monkeypatch: pytest.MonkeyPatch, hostname: str | None) -> list[str]:
    calls: list[str] = []

    def fake_gethostbyaddr(ip: str) -> tuple[str, list[str], list[str]]:
        calls.append(ip)
        if hostname is None:
            raise socket.herror(1, "Unknown host")
        return hostname, [], [ip]

    monkeypatch.setattr(socket, "gethostbyaddr", fake_gethostbyaddr)
    return calls


@pytest.mark.asyncio
async def test_ptr_returns_hostname(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_ptr(monkeypatch, "laptop.local.mesh")

    assert await ReverseDnsResolver(Settings()).ptr("10.190.71.239") == "laptop.local.mesh"


@pytest.mark.asyncio
async def test_ptr_lookup_error_is_none(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_ptr(monkeypatch, None)

    assert await ReverseDnsResolver(Settings()).ptr("10.190.71.239") is None


@pytest.mark.asyncio
async def test_ptr_echoing_the_address_is_none(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_ptr(monkeypatch, "10.190.71.239")

    assert await ReverseDnsResolver(Settings()).ptr("10.190.71.239") is None


@pytest.mark.asyncio
async def test_ptr_disabled_skips_lookup(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _patch_ptr(monkeypatch, "laptop.local.mesh")

    assert await ReverseDnsResolver(Settings(enable_rdns=False)).ptr("10.190.71.239") is None
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("hostname", "expected"),
    [
        ("lan.K9RCP-Edge.local.mesh", "K9RCP-Edge.local.mesh"),
        ("K9RCP-Edge.local.mesh", "K9RCP-Edge.local.mesh"),
        ("plan.K9RCP-Edge.local.mesh", "plan.K9RCP-Edge.local.mesh"),
    ],
)
async def test_router_ptr_strips_leading_lan(
    monkeypatch: pytest.MonkeyPatch,
    hostname: str,
    expected: str,
) -> None:
    _patch_ptr(monkeypatch, hostname)

    assert await ReverseDnsResolver(Settings()).router_ptr("10.190.71.225") == expected
