"""Endur liquid staking (xSTRK vault) holdings service."""

import asyncio
import logging

from endur_holdings.core.models import BlockIdentifier, Holdings, ProtocolType
from endur_holdings.core.registry import ProtocolRegistry
from endur_holdings.protocols.base import BaseHoldingsService

logger = logging.getLogger(__name__)

WAD = 10**18


@ProtocolRegistry.register
class LSTHoldingsService(BaseHoldingsService):
    """
    Holdings service for xSTRK held directly in the wallet.

    The xSTRK token is itself an ERC-4626 vault over STRK, so besides the
    wallet balance it exposes the share price used elsewhere to value xSTRK.

    """

    name = ProtocolType.LST.value
    display_name = "Endur LST"
    description = "xSTRK held directly by the account"

    async def fetch_holdings(self, address: str, block_identifier: BlockIdentifier) -> Holdings:
        lst = self.network_config.lst
        if not self.is_contract_deployed(block_identifier, lst):
            return Holdings.zero()

        balance = await self.call_int(lst.address, "balance_of", [address], block_identifier)
        return Holdings(xstrk_amount=balance)

    async def get_total_assets(self, block_identifier: BlockIdentifier = None) -> int:
        """
        Get the STRK backing the vault.

        Returns
        -------
        int
            Total assets, 0 if the vault is not deployed at that block

        """
        lst = self.network_config.lst
        if not self.is_contract_deployed(block_identifier, lst):
            return 0
        return await self.call_int(lst.address, "total_assets", block_identifier=block_identifier)

    async def get_total_supply(self, block_identifier: BlockIdentifier = None) -> int:
        """
        Get the xSTRK supply.

        Returns
        -------
        int
            Total supply, 0 if the vault is not deployed at that block

        """
        lst = self.network_config.lst
        if not self.is_contract_deployed(block_identifier, lst):
            return 0
        return await self.call_int(lst.address, "total_supply", block_identifier=block_identifier)

    async def get_exchange_rate(self, block_identifier: BlockIdentifier = None) -> int:
        """
        Get the STRK value of one xSTRK, scaled by 10**18.

        Parameters
        ----------
        block_identifier : int | BlockTag | None
            Block to read at

        Returns
        -------
        int
            ``total_assets * 10**18 // total_supply``, or 0 when nothing is minted

        """
        self.validate_provider()
        total_assets, total_supply = await asyncio.gather(
            self.get_total_assets(block_identifier),
            self.get_total_supply(block_identifier),
        )
        if total_supply == 0:
            return 0
        return total_assets * WAD // total_supply

    async def convert_xstrk_to_strk(self, amount: int, block_identifier: BlockIdentifier = None) -> int:
        """
        Convert an xSTRK amount to STRK using the vault's share price.

        Parameters
        ----------
        amount : int
            xSTRK amount in the smallest unit
        block_identifier : int | BlockTag | None
            Block to read at

        Returns
        -------
        int
            Equivalent STRK amount, 0 if the vault is not deployed at that block

        """
        lst = self.network_config.lst
        if not self.is_contract_deployed(block_identifier, lst):
            return 0
        return await self.call_int(lst.address, "convert_to_assets", [amount], block_identifier)
