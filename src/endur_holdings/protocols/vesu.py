"""Vesu vault and collateral holdings service."""

import asyncio
import logging

from endur_holdings.core.deployment import is_contract_deployed, select_live_deployment
from endur_holdings.core.errors import ChainCallError
from endur_holdings.core.models import (
    BlockIdentifier,
    CollateralMarket,
    Holdings,
    ProtocolType,
    VaultSuccession,
)
from endur_holdings.core.registry import ProtocolRegistry
from endur_holdings.core.validation import get_field, to_int
from endur_holdings.protocols.base import BaseHoldingsService

logger = logging.getLogger(__name__)

UNKNOWN_POOL_ERROR = "unknown-pool"


@ProtocolRegistry.register
class VesuHoldingsService(BaseHoldingsService):
    """
    Holdings service for Vesu.

    Two sources are summed into ``xstrk_amount``:

    - vTokens of the xSTRK earn vaults, converted to xSTRK through the vault's
      ``convert_to_assets``. Each vault was migrated at a cutover block; the
      retired v1 answers historical queries only, and shares left in v1 after
      the cutover are valued through v2.
    - xSTRK posted as collateral in the singleton, one position per
      (pool, debt token) market.

    """

    name = ProtocolType.VESU.value
    display_name = "Vesu"
    description = "xSTRK in Vesu earn vaults and xSTRK collateral positions"

    async def fetch_holdings(self, address: str, block_identifier: BlockIdentifier) -> Holdings:
        vault_holdings, collateral_holdings = await asyncio.gather(
            self.get_vault_holdings(address, block_identifier),
            self.get_collateral_holdings(address, block_identifier),
        )
        return vault_holdings + collateral_holdings

    async def get_vault_holdings(self, address: str, block_identifier: BlockIdentifier = None) -> Holdings:
        """
        Get xSTRK held through every Vesu earn vault.

        Parameters
        ----------
        address : str
            Account address
        block_identifier : int | BlockTag | None
            Block to read at

        Returns
        -------
        Holdings
            Summed vault holdings

        """
        results = await asyncio.gather(
            *(
                self.get_vault_holdings_by_type(address, vault, block_identifier)
                for vault in self.network_config.vesu.vaults
            )
        )
        return sum(results, Holdings.zero())

    async def get_vault_holdings_by_type(
        self,
        address: str,
        vault: VaultSuccession,
        block_identifier: BlockIdentifier = None,
    ) -> Holdings:
        """
        Get xSTRK held through one vault slot (v1 and its v2 successor).

        Parameters
        ----------
        address : str
            Account address
        vault : VaultSuccession
            Vault slot
        block_identifier : int | BlockTag | None
            Block to read at

        Returns
        -------
        Holdings
            Vault holdings, zero if neither version is live at that block

        """
        v1_live = self.is_contract_deployed(block_identifier, vault.v1)
        v2_live = self.is_contract_deployed(block_identifier, vault.v2)
        if not v1_live and not v2_live:
            return Holdings.zero()

        share_tokens = [vault.v1.address, vault.v2.address] if v2_live else [vault.v1.address]
        converter = vault.v2.address if v2_live else vault.v1.address

        amounts = await asyncio.gather(
            *(self._shares_to_assets(address, token, converter, block_identifier) for token in share_tokens)
        )
        return Holdings(xstrk_amount=sum(amounts))

    async def _shares_to_assets(
        self,
        address: str,
        share_token: str,
        converter: str,
        block_identifier: BlockIdentifier,
    ) -> int:
        shares = await self.call_int(share_token, "balance_of", [address], block_identifier)
        return await self.call_int(converter, "convert_to_assets", [shares], block_identifier)

    async def get_collateral_holdings(self, address: str, block_identifier: BlockIdentifier = None) -> Holdings:
        """
        Get xSTRK posted as collateral in the Vesu singleton.

        Parameters
        ----------
        address : str
            Account address
        block_identifier : int | BlockTag | None
            Block to read at

        Returns
        -------
        Holdings
            Collateral summed over every market whose pool exists at that block

        Raises
        ------
        ChainCallError
            If a position read fails for a reason other than an unknown pool

        """
        singleton = select_live_deployment(block_identifier, self.network_config.vesu.singletons)
        if singleton is None:
            return Holdings.zero()

        amounts = await asyncio.gather(
            *(
                self._collateral_in_market(address, singleton.address, market, block_identifier)
                for market in self.network_config.vesu.collateral_markets
            )
        )
        return Holdings(xstrk_amount=sum(amounts))

    async def _collateral_in_market(
        self,
        address: str,
        singleton_address: str,
        market: CollateralMarket,
        block_identifier: BlockIdentifier,
    ) -> int:
        pool = self.network_config.vesu.pools[market.pool]
        if not is_contract_deployed(block_identifier, pool.deployment_block):
            return 0

        tokens = self.network_config.tokens
        try:
            position = await self.call(
                singleton_address,
                "position_unsafe",
                [pool.id, tokens.xstrk, tokens.address_of(market.debt_token), address],
                block_identifier,
            )
        except ChainCallError as e:
            if UNKNOWN_POOL_ERROR in str(e):
                logger.debug("Skipping Vesu pool %s (%s): unknown pool", market.pool, market.debt_token)
                return 0
            raise

        # position_unsafe returns (position, collateral, debt)
        return to_int(get_field(position, 1))

