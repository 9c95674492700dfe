"""STRKFarm strategy holdings services (xSTRK Sensei and Ekubo xSTRK/STRK vault)."""

import logging

from endur_holdings.core.models import BlockIdentifier, Holdings, ProtocolType
from endur_holdings.core.registry import ProtocolRegistry
from endur_holdings.core.validation import get_field, to_int
from endur_holdings.protocols.base import BaseHoldingsService

logger = logging.getLogger(__name__)


@ProtocolRegistry.register
class STRKFarmSenseiHoldingsService(BaseHoldingsService):
    """
    Holdings service for the STRKFarm xSTRK Sensei strategy.

    ``describe_position`` returns ``(position, holdings)``; ``holdings.deposit2``
    is the xSTRK deposited on the account's behalf.

    """

    name = ProtocolType.STRKFARM.value
    display_name = "STRKFarm Sensei"
    description = "xSTRK deposited in the STRKFarm xSTRK Sensei strategy"

    async def fetch_holdings(self, address: str, block_identifier: BlockIdentifier) -> Holdings:
        sensei = self.network_config.strkfarm_sensei
        if not self.is_contract_deployed(block_identifier, sensei):
            return Holdings.zero()

        try:
            info = await self.call(sensei.address, "describe_position", [address], block_identifier)
            deposit = to_int(get_field(get_field(info, 1), "deposit2"))
        except Exception as e:
            logger.warning("STRKFarm Sensei position read failed for %s: %s", address, e)
            return Holdings.zero()

        return Holdings(xstrk_amount=deposit)


@ProtocolRegistry.register
class STRKFarmEkuboHoldingsService(BaseHoldingsService):
    """
    Holdings service for the STRKFarm Ekubo xSTRK/STRK liquidity vault.

    Vault shares convert to an ``(amount0, amount1)`` pair of the underlying
    pool tokens: xSTRK and STRK.

    """

    name = ProtocolType.STRKFARM_EKUBO.value
    display_name = "STRKFarm Ekubo"
    description = "Shares of the STRKFarm Ekubo xSTRK/STRK vault"

    async def fetch_holdings(self, address: str, block_identifier: BlockIdentifier) -> Holdings:
        vault = self.network_config.strkfarm_ekubo_vault
        if not self.is_contract_deployed(block_identifier, vault):
            return Holdings.zero()

        try:
            shares = await self.call_int(vault.address, "balanceOf", [address], block_identifier)
            assets = await self.call(vault.address, "convert_to_assets", [shares], block_identifier)
            holdings = Holdings(
                xstrk_amount=get_field(assets, "amount0"),
                strk_amount=get_field(assets, "amount1"),
            )
        except Exception as e:
            logger.warning("STRKFarm Ekubo vault read failed for %s: %s", address, e)
            return Holdings.zero()

        return holdings
