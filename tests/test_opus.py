"""Tests for the Opus trove holdings service."""

import pytest

from endur_holdings.core.models import BlockTag, Holdings, HoldingsRequest
from endur_holdings.protocols.opus import OpusHoldingsService


@pytest.fixture()
def service(mainnet_config, reader, settings):
    return OpusHoldingsService(mainnet_config, reader, settings)


@pytest.fixture()
def opus_address(mainnet_config):
    return mainnet_config.opus.address


@pytest.mark.asyncio
async def test_sums_xstrk_across_troves(service, reader, user, opus_address, mainnet_config):
    """Test that the xSTRK balance of every trove is summed."""
    balances = {7: 3 * 10**18, 9: 4 * 10**18}
    reader.set(opus_address, "get_user_trove_ids", ["0x7", 9])
    reader.set(opus_address, "get_trove_asset_balance", lambda calldata, block: balances[calldata[0]])

    response = await service.get_holdings(HoldingsRequest(address=user))

    assert response.success
    assert response.data == Holdings(xstrk_amount=7 * 10**18)
    balance_calls = reader.calls_to("get_trove_asset_balance")
    assert len(balance_calls) == 2
    assert all(call.calldata[1] == mainnet_config.tokens.xstrk for call in balance_calls)
    assert all(call.block_identifier == BlockTag.LATEST for call in reader.calls)


@pytest.mark.asyncio
async def test_no_troves(service, reader, user, opus_address):
    """Test that an account without troves makes no balance calls."""
    reader.set(opus_address, "get_user_trove_ids", [])

    response = await service.get_holdings(HoldingsRequest(address=user))

    assert response.data.is_zero()
    assert reader.calls_to("get_trove_asset_balance") == []


@pytest.mark.asyncio
async def test_before_deployment(service, reader, user):
    """Test that no call is made before Opus existed."""
    response = await service.get_holdings(HoldingsRequest(address=user, block_identifier=973642))

    assert response.data.is_zero()
    assert reader.calls == []
    assert await service.get_user_troves(user, 973642) == []
    assert await service.get_trove_asset_balance(1, "0x1", 973642) == 0


@pytest.mark.asyncio
async def test_failure_is_failed_response(service, reader, user, opus_address):
    """Test that a trove read failure fails the protocol."""
    reader.set(opus_address, "get_user_trove_ids", [1])
    reader.set(opus_address, "get_trove_asset_balance", RuntimeError("reverted"))

    response = await service.get_holdings(HoldingsRequest(address=user))

    assert not response.success
    assert "reverted" in response.error
