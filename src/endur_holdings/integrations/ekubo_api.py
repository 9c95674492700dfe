"""Ekubo REST API client."""

import logging
from datetime import datetime
from typing import Any

import httpx

from endur_holdings.core.errors import PositionIndexError
from endur_holdings.core.models import EkuboPosition
from endur_holdings.core.validation import same_address

logger = logging.getLogger(__name__)


class EkuboAPIClient:
    """
    Client for the Ekubo REST API.

    Lists every position NFT owned by an account, across all pools, with its
    pool key and tick bounds. Unlike the Endur indexer it only reflects the
    current state.

    Parameters
    ----------
    base_url : str
        API base URL
    xstrk_address : str | None
        When set, only positions in pools containing this token are returned
    timeout : float
        Request timeout in seconds
    transport : httpx.AsyncBaseTransport | None
        Custom transport (e.g. ``httpx.MockTransport`` in tests)

    """

    BASE_URL = "https://mainnet-api.ekubo.org"
    supports_history = False

    def __init__(
        self,
        base_url: str = BASE_URL,
        xstrk_address: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.xstrk_address = xstrk_address
        self.timeout = timeout
        self.transport = transport

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """
        Make a GET request to the API.

        Parameters
        ----------
        path : str
            Path relative to the base URL
        params : dict[str, Any] | None
            Query parameters

        Returns
        -------
        Any
            Decoded JSON body

        Raises
        ------
        PositionIndexError
            If the request fails

        """
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as e:
            msg = f"Request timeout: {e}"
            raise PositionIndexError(msg) from e
        except httpx.HTTPStatusError as e:
            msg = f"HTTP error {e.response.status_code}: {e}"
            raise PositionIndexError(msg) from e
        except httpx.HTTPError as e:
            msg = f"HTTP request failed: {e}"
            raise PositionIndexError(msg) from e
        except ValueError as e:
            msg = f"Invalid JSON response: {e}"
            raise PositionIndexError(msg) from e

    async def get_positions(self, user_address: str, show_closed: bool = True) -> list[dict[str, Any]]:
        """
        Fetch raw position records for a user.

        Parameters
        ----------
        user_address : str
            User account address
        show_closed : bool
            Include positions with no remaining liquidity

        Returns
        -------
        list[dict[str, Any]]
            Raw position records

        """
        body = await self._get(
            f"/positions/{user_address}",
            params={"showClosed": "true" if show_closed else "false"},
        )
        if isinstance(body, dict):
            body = body.get("data", [])
        if not isinstance(body, list):
            msg = "Unexpected positions payload from Ekubo API"
            raise PositionIndexError(msg)
        return body

    def _touches_xstrk(self, pool_key: dict[str, Any]) -> bool:
        if self.xstrk_address is None:
            return True
        return same_address(pool_key.get("token0"), self.xstrk_address) or same_address(
            pool_key.get("token1"), self.xstrk_address
        )

    async def fetch_positions(self, user_address: str, to_datetime: datetime | None = None) -> list[EkuboPosition]:
        """
        Fetch a user's positions in pools containing xSTRK.

        Parameters
        ----------
        user_address : str
            User account address
        to_datetime : datetime | None
            Ignored; the API only serves current positions

        Returns
        -------
        list[EkuboPosition]
            Positions with their pool tokens

        """
        records = await self.get_positions(user_address)

        positions = []
        for record in records:
            pool_key = record.get("pool_key") or {}
            if not record.get("id") or not self._touches_xstrk(pool_key):
                continue
            bounds = record.get("bounds") or {}
            positions.append(
                EkuboPosition(
                    position_id=record["id"],
                    lower_bound=int(bounds["lower"]),
                    upper_bound=int(bounds["upper"]),
                    pool_fee=pool_key["fee"],
                    pool_tick_spacing=pool_key["tick_spacing"],
                    extension=pool_key.get("extension") or "0x0",
                    token0=pool_key["token0"],
                    token1=pool_key["token1"],
                )
            )

        logger.debug("Ekubo API returned %d xSTRK positions for %s", len(positions), user_address)
        return positions
