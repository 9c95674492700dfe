"""Opus trove collateral holdings service."""

import asyncio

from endur_holdings.core.models import BlockIdentifier, BlockTag, Holdings, ProtocolType
from endur_holdings.core.registry import ProtocolRegistry
from endur_holdings.core.validation import to_int
from endur_holdings.protocols.base import BaseHoldingsService


@ProtocolRegistry.register
class OpusHoldingsService(BaseHoldingsService):
    """
    Holdings service for xSTRK deposited as collateral in Opus troves.

    An account may own several troves; the xSTRK balance of each is summed.

    """

    name = ProtocolType.OPUS.value
    display_name = "Opus"
    description = "xSTRK deposited as trove collateral in Opus"
    default_block_tag = BlockTag.LATEST

    async def fetch_holdings(self, address: str, block_identifier: BlockIdentifier) -> Holdings:
        if not self.is_contract_deployed(block_identifier, self.network_config.opus):
            return Holdings.zero()

        trove_ids = await self.get_user_troves(address, block_identifier)
        if not trove_ids:
            return Holdings.zero()

        xstrk = self.network_config.tokens.xstrk
        balances = await asyncio.gather(
            *(self.get_trove_asset_balance(trove_id, xstrk, block_identifier) for trove_id in trove_ids)
        )
        return Holdings(xstrk_amount=sum(balances))

    async def get_user_troves(self, address: str, block_identifier: BlockIdentifier = None) -> list[int]:
        """
        Get the ids of the troves owned by an account.

        Parameters
        ----------
        address : str
            Account address
        block_identifier : int | BlockTag | None
            Block to read at

        Returns
        -------
        list[int]
            Trove ids, empty if Opus is not deployed at that block

        """
        if not self.is_contract_deployed(block_identifier, self.network_config.opus):
            return []

        trove_ids = await self.call(
            self.network_config.opus.address,
            "get_user_trove_ids",
            [address],
            block_identifier,
        )
        return [to_int(trove_id) for trove_id in trove_ids or []]

    async def get_trove_asset_balance(
        self,
        trove_id: int,
        asset_address: str,
        block_identifier: BlockIdentifier = None,
    ) -> int:
        """
        Get the balance of one collateral asset in a trove.

        Parameters
        ----------
        trove_id : int
            Trove id
        asset_address : str
            Collateral token address
        block_identifier : int | BlockTag | None
            Block to read at

        Returns
        -------
        int
            Asset balance, 0 if Opus is not deployed at that block

        """
        if not self.is_contract_deployed(block_identifier, self.network_config.opus):
            return 0

        return await self.call_int(
            self.network_config.opus.address,
            "get_trove_asset_balance",
            [trove_id, asset_address],
            block_identifier,
        )
