"""Tests for the STRKFarm holdings services."""

from types import SimpleNamespace

import pytest

from endur_holdings.core.models import Holdings, HoldingsRequest
from endur_holdings.protocols.strkfarm import STRKFarmEkuboHoldingsService, STRKFarmSenseiHoldingsService


@pytest.fixture()
def sensei(mainnet_config, reader, settings):
    return STRKFarmSenseiHoldingsService(mainnet_config, reader, settings)


@pytest.fixture()
def ekubo_vault(mainnet_config, reader, settings):
    return STRKFarmEkuboHoldingsService(mainnet_config, reader, settings)


@pytest.mark.asyncio
async def test_sensei_deposit(sensei, reader, user, mainnet_config):
    """Test that deposit2 of the position holdings is the xSTRK amount."""
    reader.set(
        mainnet_config.strkfarm_sensei.address,
        "describe_position",
        ({"owner": user}, {"deposit1": 1, "deposit2": "0x3e8"}),
    )

    response = await sensei.get_holdings(HoldingsRequest(address=user))

    assert response.success
    assert response.protocol == "strkfarm"
    assert response.data == Holdings(xstrk_amount=1000)


@pytest.mark.asyncio
async def test_sensei_failure_is_zero(sensei, reader, user, mainnet_config):
    """Test that a failing read resolves to zero holdings."""
    reader.set(mainnet_config.strkfarm_sensei.address, "describe_position", RuntimeError("no position"))

    response = await sensei.get_holdings(HoldingsRequest(address=user))

    assert response.success
    assert response.data.is_zero()


@pytest.mark.asyncio
async def test_sensei_before_deployment(sensei, reader, user):
    """Test that no call is made before the strategy existed."""
    response = await sensei.get_holdings(HoldingsRequest(address=user, block_identifier=1_000_000))

    assert response.data.is_zero()
    assert reader.calls == []


@pytest.mark.asyncio
async def test_ekubo_vault_converts_shares(ekubo_vault, reader, user, mainnet_config):
    """Test that shares convert to the xSTRK/STRK pair."""
    vault = mainnet_config.strkfarm_ekubo_vault.address
    reader.set(vault, "balanceOf", 42)
    reader.set(
        vault,
        "convert_to_assets",
        lambda calldata, block: SimpleNamespace(amount0=calldata[0] * 10, amount1=calldata[0] * 20),
    )

    response = await ekubo_vault.get_holdings(HoldingsRequest(address=user, block_identifier=1_300_000))

    assert response.success
    assert response.protocol == "strkfarmEkubo"
    assert response.data == Holdings(xstrk_amount=420, strk_amount=840)
    assert [call.entrypoint for call in reader.calls] == ["balanceOf", "convert_to_assets"]
    assert all(call.block_identifier == 1_300_000 for call in reader.calls)


@pytest.mark.asyncio
async def test_ekubo_vault_failure_is_zero(ekubo_vault, reader, user, mainnet_config):
    """Test that a failing conversion resolves to zero holdings."""
    vault = mainnet_config.strkfarm_ekubo_vault.address
    reader.set(vault, "balanceOf", 42)
    reader.set(vault, "convert_to_assets", RuntimeError("reverted"))

    response = await ekubo_vault.get_holdings(HoldingsRequest(address=user))

    assert response.success
    assert response.data.is_zero()


@pytest.mark.asyncio
async def test_invalid_address_still_fails(ekubo_vault, reader):
    """Test that validation errors are not downgraded to zero."""
    response = await ekubo_vault.get_holdings(HoldingsRequest(address="not-an-address"))

    assert not response.success
    assert reader.calls == []
