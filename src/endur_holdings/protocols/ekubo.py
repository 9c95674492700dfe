"""Ekubo concentrated-liquidity holdings service."""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any, Protocol

from endur_holdings.config import HoldingsSettings
from endur_holdings.core.models import BlockIdentifier, EkuboPosition, Holdings, NetworkConfig, ProtocolType
from endur_holdings.core.registry import ProtocolRegistry
from endur_holdings.core.validation import get_field, same_address, to_int
from endur_holdings.integrations.ekubo_api import EkuboAPIClient
from endur_holdings.integrations.endur_graphql import EndurGraphQLClient
from endur_holdings.protocols.base import BaseHoldingsService
from endur_holdings.rpc.reader import ChainReader

logger = logging.getLogger(__name__)

NOT_INITIALIZED_ERROR = "NOT_INITIALIZED"


class PositionSource(Protocol):
    """Off-chain index listing an account's Ekubo positions."""

    supports_history: bool

    async def fetch_positions(self, user_address: str, to_datetime: datetime) -> list[EkuboPosition]:
        """Return the account's positions as of ``to_datetime``."""
        ...


def build_position_source(network_config: NetworkConfig, settings: HoldingsSettings) -> PositionSource:
    """
    Create the position index selected in the settings.

    Parameters
    ----------
    network_config : NetworkConfig
        Network whose index endpoints are used unless overridden
    settings : HoldingsSettings
        Source kind, URL overrides and timeout

    Returns
    -------
    PositionSource
        Endur GraphQL client or Ekubo REST client

    """
    if settings.ekubo_position_source == "api":
        return EkuboAPIClient(
            base_url=settings.ekubo_api_url or network_config.ekubo_api_url,
            xstrk_address=network_config.tokens.xstrk,
            timeout=settings.request_timeout,
        )
    return EndurGraphQLClient(
        base_url=settings.graphql_url or network_config.graphql_url,
        timeout=settings.request_timeout,
    )


def encode_bounds(lower: int, upper: int) -> dict[str, dict[str, Any]]:
    """
    Encode tick bounds as Ekubo ``i129`` values.

    Examples
    --------
    >>> encode_bounds(-100, 200)
    {'lower': {'mag': 100, 'sign': True}, 'upper': {'mag': 200, 'sign': False}}

    """
    return {
        "lower": {"mag": abs(lower), "sign": lower < 0},
        "upper": {"mag": abs(upper), "sign": upper < 0},
    }


@ProtocolRegistry.register
class EkuboHoldingsService(BaseHoldingsService):
    """
    Holdings service for Ekubo liquidity positions in xSTRK pools.

    Position ids come from an off-chain index; each position is then valued
    on-chain with ``get_token_info`` (principal plus uncollected fees).

    """

    name = ProtocolType.EKUBO.value
    display_name = "Ekubo"
    description = "Liquidity positions in Ekubo xSTRK pools"

    def __init__(
        self,
        network_config: NetworkConfig,
        chain_reader: ChainReader | None = None,
        settings: HoldingsSettings | None = None,
        position_source: PositionSource | None = None,
    ) -> None:
        super().__init__(network_config, chain_reader, settings)
        self.position_source = position_source or build_position_source(self.network_config, self.settings)

    async def fetch_holdings(self, address: str, block_identifier: BlockIdentifier) -> Holdings:
        if not self.is_contract_deployed(block_identifier, self.network_config.ekubo_positions):
            return Holdings.zero()

        try:
            return await self._value_positions(address, block_identifier)
        except Exception as e:
            logger.error("Error fetching Ekubo positions for %s: %s", address, e)
            return Holdings.zero()

    async def _value_positions(self, address: str, block_identifier: BlockIdentifier) -> Holdings:
        if self.position_source.supports_history:
            timestamp = await self.get_block_timestamp(block_identifier)
            as_of = datetime.fromtimestamp(timestamp, tz=UTC)
        else:
            as_of = datetime.now(tz=UTC)

        positions = await self.position_source.fetch_positions(address, as_of)

        values = await asyncio.gather(*(self._value_position(position, block_identifier) for position in positions))
        return sum(values, Holdings.zero())

    async def _value_position(self, position: EkuboPosition, block_identifier: BlockIdentifier) -> Holdings:
        try:
            return await self.get_position_holdings(position, block_identifier)
        except Exception as e:
            if NOT_INITIALIZED_ERROR in str(e):
                logger.debug("Skipping uninitialized Ekubo position %s", position.position_id)
                return Holdings.zero()
            raise

    def pool_key_for(self, position: EkuboPosition) -> dict[str, Any]:
        """
        Build the pool key of a position.

        Positions from an index that does not report tokens are assumed to be
        in the xSTRK/STRK pool.

        """
        tokens = self.network_config.tokens
        return {
            "token0": position.token0 or tokens.xstrk,
            "token1": position.token1 or tokens.strk,
            "fee": position.pool_fee,
            "tick_spacing": position.pool_tick_spacing,
            "extension": position.extension,
        }

    async def get_position_holdings(self, position: EkuboPosition, block_identifier: BlockIdentifier = None) -> Holdings:
        """
        Value one position, principal plus uncollected fees.

        Parameters
        ----------
        position : EkuboPosition
            Position descriptor from the index
        block_identifier : int | BlockTag | None
            Block to read at

        Returns
        -------
        Holdings
            xSTRK side and STRK side of the position

        Raises
        ------
        ChainCallError
            If ``get_token_info`` fails (e.g. ``NOT_INITIALIZED``)

        """
        pool_key = self.pool_key_for(position)
        info = await self.call(
            self.network_config.ekubo_positions.address,
            "get_token_info",
            [position.position_id, pool_key, encode_bounds(position.lower_bound, position.upper_bound)],
            block_identifier,
        )

        side0 = to_int(get_field(info, "amount0")) + to_int(get_field(info, "fees0"))
        side1 = to_int(get_field(info, "amount1")) + to_int(get_field(info, "fees1"))

        tokens = self.network_config.tokens
        if same_address(pool_key["token0"], tokens.xstrk):
            xstrk_amount, other_amount, other_token = side0, side1, pool_key["token1"]
        else:
            xstrk_amount, other_amount, other_token = side1, side0, pool_key["token0"]

        # Only the STRK leg of a pool counts; other pairs contribute xSTRK alone
        strk_amount = other_amount if same_address(other_token, tokens.strk) else 0
        return Holdings(xstrk_amount=xstrk_amount, strk_amount=strk_amount)
