"""Tests for the Vesu holdings service."""

import pytest

from endur_holdings.core.models import Holdings, HoldingsRequest
from endur_holdings.protocols.vesu import VesuHoldingsService

BEFORE_MIGRATION = 1_000_000
MIGRATION_GAP = 1_440_420


@pytest.fixture()
def service(mainnet_config, reader, settings):
    return VesuHoldingsService(mainnet_config, reader, settings)


@pytest.fixture()
def vesu(mainnet_config):
    return mainnet_config.vesu


@pytest.mark.asyncio
async def test_historical_block_uses_v1(service, reader, user, vesu, mainnet_config):
    """Test a block where only the first vault, singleton and pool exist."""
    v1 = vesu.vaults[0].v1.address
    singleton_v1 = vesu.singletons[0].address
    reader.set(v1, "balance_of", 100)
    reader.set(v1, "convert_to_assets", lambda calldata, block: calldata[0] * 2)
    reader.set(singleton_v1, "position_unsafe", ({"nominal_debt": 0}, 55, 0))

    response = await service.get_holdings(HoldingsRequest(address=user, block_identifier=BEFORE_MIGRATION))

    assert response.success
    assert response.data == Holdings(xstrk_amount=255)
    positions = reader.calls_to("position_unsafe")
    assert len(positions) == 1
    assert positions[0].calldata == [
        vesu.pools["RE7_XSTRK"].id,
        mainnet_config.tokens.xstrk,
        mainnet_config.tokens.strk,
        user,
    ]
    assert all(call.block_identifier == BEFORE_MIGRATION for call in reader.calls)


@pytest.mark.asyncio
async def test_current_state_reads_v1_and_v2_shares(service, reader, user, vesu, mainnet_config):
    """Test that leftover v1 shares are valued through v2 after the migration."""
    for vault in vesu.vaults:
        reader.set(vault.v1.address, "balance_of", 1)
        reader.set(vault.v2.address, "balance_of", 2)
        reader.set(vault.v2.address, "convert_to_assets", lambda calldata, block: calldata[0] * 10)
    singleton_v2 = vesu.singletons[1].address
    reader.set(singleton_v2, "position_unsafe", (None, 1000, 0))

    response = await service.get_holdings(HoldingsRequest(address=user))

    assert response.success
    # 3 vaults * (1 + 2) shares * 10, plus 7 markets * 1000
    assert response.data == Holdings(xstrk_amount=90 + 7000)
    converters = {call.contract_address for call in reader.calls_to("convert_to_assets")}
    assert converters == {vault.v2.address for vault in vesu.vaults}
    assert {call.contract_address for call in reader.calls_to("position_unsafe")} == {singleton_v2}


@pytest.mark.asyncio
async def test_unknown_pool_is_skipped(service, reader, user, vesu, mainnet_config):
    """Test that markets whose pool is unknown to the singleton are skipped."""
    for vault in vesu.vaults:
        reader.set(vault.v1.address, "balance_of", 0)
        reader.set(vault.v2.address, "balance_of", 0)
        reader.set(vault.v2.address, "convert_to_assets", 0)

    usdt = mainnet_config.tokens.usdt

    def position(calldata, block):
        if calldata[2] == usdt:
            return RuntimeError("Contract error: unknown-pool")
        return (None, 5, 0)

    reader.set(vesu.singletons[1].address, "position_unsafe", position)

    response = await service.get_holdings(HoldingsRequest(address=user))

    assert response.success
    assert response.data.xstrk_amount == 30


@pytest.mark.asyncio
async def test_other_collateral_errors_fail_the_protocol(service, reader, user, vesu):
    """Test that unexpected singleton errors are not swallowed."""
    for vault in vesu.vaults:
        reader.set(vault.v1.address, "balance_of", 0)
        reader.set(vault.v2.address, "balance_of", 0)
        reader.set(vault.v2.address, "convert_to_assets", 0)
    reader.set(vesu.singletons[1].address, "position_unsafe", RuntimeError("rate limited"))

    response = await service.get_holdings(HoldingsRequest(address=user))

    assert not response.success
    assert "rate limited" in response.error


@pytest.mark.asyncio
async def test_migration_gap_is_zero(service, reader, user):
    """Test a block where neither version of anything is live."""
    response = await service.get_holdings(HoldingsRequest(address=user, block_identifier=MIGRATION_GAP))

    assert response.success
    assert response.data.is_zero()
    assert reader.calls == []


@pytest.mark.asyncio
async def test_vault_holdings_by_type(service, reader, user, vesu):
    """Test one vault slot on its own."""
    vault = vesu.vaults[1]
    reader.set(vault.v1.address, "balance_of", 3)
    reader.set(vault.v1.address, "convert_to_assets", lambda calldata, block: calldata[0] + 1)

    holdings = await service.get_vault_holdings_by_type(user, vault, 1_300_000)

    assert holdings == Holdings(xstrk_amount=4)
