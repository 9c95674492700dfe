"""Nostra lending and Nostra DEX holdings services."""

import asyncio
import logging
import math

from endur_holdings.core.models import BlockIdentifier, BlockTag, Holdings, ProtocolType
from endur_holdings.core.registry import ProtocolRegistry
from endur_holdings.core.validation import get_field, to_int
from endur_holdings.protocols.base import BaseHoldingsService

logger = logging.getLogger(__name__)


def pro_rata_share(balance: int, total_supply: int, reserve: int, exact: bool = True) -> int:
    """
    Compute an LP holder's share of a pool reserve.

    Parameters
    ----------
    balance : int
        LP tokens held by the account
    total_supply : int
        LP token supply
    reserve : int
        Pool reserve of one token
    exact : bool
        Use exact integer math; when False mirror float floor(balance / supply * reserve)

    Returns
    -------
    int
        Reserve amount attributable to the holder, 0 when the supply is zero

    Examples
    --------
    >>> pro_rata_share(50, 100, 1000)
    500

    """
    if total_supply == 0:
        return 0
    if exact:
        return balance * reserve // total_supply
    return math.floor(balance / total_supply * reserve)


@ProtocolRegistry.register
class NostraLendingHoldingsService(BaseHoldingsService):
    """
    Holdings service for xSTRK supplied to Nostra lending.

    Nostra mints one receipt token per xSTRK market (collateral and
    non-collateral, interest bearing or not) plus a debt token. Every receipt
    balance is 1:1 with the supplied xSTRK.

    """

    name = ProtocolType.NOSTRA_LENDING.value
    display_name = "Nostra Lending"
    description = "xSTRK supplied to Nostra money markets"
    default_block_tag = BlockTag.LATEST

    async def fetch_holdings(self, address: str, block_identifier: BlockIdentifier) -> Holdings:
        vaults = list(self.network_config.nostra_lending)
        balances = await asyncio.gather(
            *(self.get_vault_holdings_by_type(address, vault, block_identifier) for vault in vaults)
        )
        return Holdings(xstrk_amount=sum(balances))

    async def get_vault_holdings_by_type(
        self,
        address: str,
        vault: str,
        block_identifier: BlockIdentifier = None,
    ) -> int:
        """
        Get the account's balance in one Nostra xSTRK token.

        Parameters
        ----------
        address : str
            Account address
        vault : str
            Token symbol (e.g. 'nXSTRK', 'iXSTRKC')
        block_identifier : int | BlockTag | None
            Block to read at

        Returns
        -------
        int
            Balance, 0 if the token is not deployed or the read fails

        Raises
        ------
        KeyError
            If the vault symbol is unknown

        """
        try:
            deployment = self.network_config.nostra_lending[vault]
        except KeyError:
            msg = f"Unknown Nostra vault: {vault}"
            raise KeyError(msg) from None

        if not self.is_contract_deployed(block_identifier, deployment):
            return 0

        try:
            return await self.call_int(deployment.address, "balance_of", [address], block_identifier)
        except Exception as e:
            logger.warning("Nostra %s balance read failed for %s: %s", vault, address, e)
            return 0


@ProtocolRegistry.register
class NostraDexHoldingsService(BaseHoldingsService):
    """Holdings service for the Nostra xSTRK/STRK liquidity pool."""

    name = ProtocolType.NOSTRA_DEX.value
    display_name = "Nostra DEX"
    description = "Liquidity provided to the Nostra xSTRK/STRK pool"
    default_block_tag = BlockTag.LATEST

    async def fetch_holdings(self, address: str, block_identifier: BlockIdentifier) -> Holdings:
        lp = self.network_config.nostra_dex_lp
        if not self.is_contract_deployed(block_identifier, lp):
            return Holdings.zero()

        balance, total_supply, reserves = await asyncio.gather(
            self.call_int(lp.address, "balance_of", [address], block_identifier),
            self.call_int(lp.address, "total_supply", block_identifier=block_identifier),
            self.call(lp.address, "get_reserves", block_identifier=block_identifier),
        )

        # Pool token0 is xSTRK, token1 is STRK
        reserve0 = to_int(get_field(reserves, 0))
        reserve1 = to_int(get_field(reserves, 1))
        exact = self.settings.exact_lp_math

        return Holdings(
            xstrk_amount=pro_rata_share(balance, total_supply, reserve0, exact),
            strk_amount=pro_rata_share(balance, total_supply, reserve1, exact),
        )
