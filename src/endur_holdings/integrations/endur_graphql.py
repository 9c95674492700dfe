"""Endur GraphQL API client for Ekubo position discovery."""

import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from endur_holdings.core.errors import PositionIndexError
from endur_holdings.core.models import EkuboPosition

logger = logging.getLogger(__name__)


def format_graphql_datetime(moment: datetime) -> str:
    """
    Format a datetime the way the GraphQL ``DateTimeISO`` scalar expects.

    Examples
    --------
    >>> format_graphql_datetime(datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC))
    '2025-01-02T03:04:05.000Z'

    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    moment = moment.astimezone(UTC)
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{moment.microsecond // 1000:03d}Z"


class EndurGraphQLClient:
    """
    Client for the Endur GraphQL indexer.

    The indexer tracks Ekubo positions opened on the xSTRK/STRK pools and can
    replay them as of a past timestamp.

    Parameters
    ----------
    base_url : str
        GraphQL endpoint URL
    timeout : float
        Request timeout in seconds
    transport : httpx.AsyncBaseTransport | None
        Custom transport (e.g. ``httpx.MockTransport`` in tests)

    """

    supports_history = True

    POSITIONS_BY_USER_QUERY = """
    query GetEkuboPositionsByUser(
      $userAddress: String!
      $showClosed: Boolean!
      $toDateTime: DateTimeISO!
    ) {
      getEkuboPositionsByUser(
        userAddress: $userAddress
        showClosed: $showClosed
        toDateTime: $toDateTime
      ) {
        position_id
        timestamp
        lower_bound
        upper_bound
        pool_fee
        pool_tick_spacing
        extension
      }
    }
    """

    def __init__(
        self,
        base_url: str = "https://graphql.mainnet.endur.fi",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    async def _execute_query(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Execute a GraphQL query.

        Parameters
        ----------
        query : str
            GraphQL query string
        variables : dict[str, Any] | None
            Query variables

        Returns
        -------
        dict[str, Any]
            Query response data

        Raises
        ------
        PositionIndexError
            If the request fails or GraphQL errors come back without data

        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.base_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                result = response.json()
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

        data = result.get("data")
        if result.get("errors"):
            error_messages = [e.get("message", "Unknown error") for e in result["errors"]]
            if not data:
                msg = f"GraphQL errors: {'; '.join(error_messages)}"
                raise PositionIndexError(msg)
            logger.warning("GraphQL returned partial data with errors: %s", "; ".join(error_messages))

        return data or {}

    async def get_positions_by_user(
        self,
        user_address: str,
        to_datetime: datetime,
        show_closed: bool = False,
    ) -> list[dict[str, Any]]:
        """
        Fetch raw Ekubo position records for a user.

        Parameters
        ----------
        user_address : str
            User account address (sent lowercased)
        to_datetime : datetime
            Replay positions as of this moment
        show_closed : bool
            Include closed positions

        Returns
        -------
        list[dict[str, Any]]
            Raw position records

        Raises
        ------
        PositionIndexError
            If the request fails or the response has no position list

        """
        variables = {
            "userAddress": user_address.lower(),
            "showClosed": show_closed,
            "toDateTime": format_graphql_datetime(to_datetime),
        }
        data = await self._execute_query(self.POSITIONS_BY_USER_QUERY, variables)

        positions = data.get("getEkuboPositionsByUser")
        if positions is None:
            msg = "Failed to fetch Ekubo positions data"
            raise PositionIndexError(msg)
        return positions

    async def fetch_positions(self, user_address: str, to_datetime: datetime) -> list[EkuboPosition]:
        """
        Fetch open Ekubo positions for a user as models.

        Records without a position id are dropped. The indexer only tracks
        xSTRK/STRK pools, so no pool key is attached.

        Parameters
        ----------
        user_address : str
            User account address
        to_datetime : datetime
            Replay positions as of this moment

        Returns
        -------
        list[EkuboPosition]
            Open positions

        """
        records = await self.get_positions_by_user(user_address, to_datetime)

        positions = []
        for record in records:
            if not record.get("position_id"):
                continue
            positions.append(
                EkuboPosition(
                    position_id=record["position_id"],
                    lower_bound=int(record["lower_bound"]),
                    upper_bound=int(record["upper_bound"]),
                    pool_fee=record["pool_fee"],
                    pool_tick_spacing=record["pool_tick_spacing"],
                    extension=record.get("extension") or "0x0",
                )
            )

        logger.debug("Endur indexer returned %d Ekubo positions for %s", len(positions), user_address)
        return positions
