"""Tests for the xSTRK vault holdings service."""

import pytest

from endur_holdings.core.models import BlockTag, Holdings, HoldingsRequest
from endur_holdings.protocols.lst import LSTHoldingsService


@pytest.fixture()
def service(mainnet_config, reader, settings):
    return LSTHoldingsService(mainnet_config, reader, settings)


@pytest.fixture()
def lst_address(mainnet_config):
    return mainnet_config.lst.address


@pytest.mark.asyncio
async def test_wallet_balance(service, reader, user, lst_address):
    """Test that the wallet balance is reported as xSTRK."""
    reader.set(lst_address, "balance_of", 5 * 10**18)

    response = await service.get_holdings(HoldingsRequest(address=user))

    assert response.success
    assert response.protocol == "lst"
    assert response.data == Holdings(xstrk_amount=5 * 10**18)
    call = reader.calls[0]
    assert call.calldata == [user]
    assert call.block_identifier == BlockTag.PENDING


@pytest.mark.asyncio
async def test_historical_block_is_forwarded(service, reader, user, lst_address):
    """Test that the requested block pins the read."""
    reader.set(lst_address, "balance_of", "0x64")

    response = await service.get_holdings(HoldingsRequest(address=user, block_identifier=1_000_000))

    assert response.data.xstrk_amount == 100
    assert reader.calls[0].block_identifier == 1_000_000


@pytest.mark.asyncio
async def test_before_deployment_is_zero(service, reader, user):
    """Test that no call is made before the vault existed."""
    response = await service.get_holdings(HoldingsRequest(address=user, block_identifier=900_000))

    assert response.success
    assert response.data.is_zero()
    assert reader.calls == []


@pytest.mark.asyncio
async def test_invalid_address(service, reader):
    """Test that an invalid address fails before any chain call."""
    response = await service.get_holdings(HoldingsRequest(address="0x123"))

    assert not response.success
    assert response.error == "Invalid address provided"
    assert reader.calls == []


@pytest.mark.asyncio
async def test_provider_not_set(mainnet_config, settings, user):
    """Test that a missing chain reader is a failed response."""
    service = LSTHoldingsService(mainnet_config, None, settings)

    response = await service.get_holdings(HoldingsRequest(address=user))

    assert not response.success
    assert response.error == "Provider not set"


@pytest.mark.asyncio
async def test_call_failure_is_failed_response(service, reader, user, lst_address):
    """Test that an RPC error surfaces as a failed response."""
    reader.set(lst_address, "balance_of", ConnectionError("node unreachable"))

    response = await service.get_holdings(HoldingsRequest(address=user))

    assert not response.success
    assert "node unreachable" in response.error


@pytest.mark.asyncio
async def test_exchange_rate(service, reader, lst_address):
    """Test the share price scaled by 10**18."""
    reader.set(lst_address, "total_assets", 2 * 10**21)
    reader.set(lst_address, "total_supply", 10**21)

    assert await service.get_exchange_rate() == 2 * 10**18


@pytest.mark.asyncio
async def test_exchange_rate_zero_supply(service, reader, lst_address):
    """Test that an empty vault has a zero rate."""
    reader.set(lst_address, "total_assets", 10**18)
    reader.set(lst_address, "total_supply", 0)

    assert await service.get_exchange_rate() == 0


@pytest.mark.asyncio
async def test_auxiliary_reads_before_deployment(service, reader):
    """Test that auxiliary reads are gated as well."""
    assert await service.get_total_assets(1) == 0
    assert await service.get_total_supply(1) == 0
    assert await service.get_exchange_rate(1) == 0
    assert await service.convert_xstrk_to_strk(10**18, 1) == 0
    assert reader.calls == []


@pytest.mark.asyncio
async def test_convert_xstrk_to_strk(service, reader, lst_address):
    """Test conversion through convert_to_assets."""
    reader.set(lst_address, "convert_to_assets", lambda calldata, block: calldata[0] * 105 // 100)

    assert await service.convert_xstrk_to_strk(10**18) == 105 * 10**16
