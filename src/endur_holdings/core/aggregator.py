"""Holdings aggregator for fanning a request out across protocols."""

import asyncio
import logging
from collections.abc import Callable, Sequence

from endur_holdings.core.models import Holdings, HoldingsRequest, HoldingsResponse, MultiProtocolHoldings
from endur_holdings.core.registry import HoldingsServiceInterface
from endur_holdings.rpc.retry import RetryConfig, retry_async

logger = logging.getLogger(__name__)

ServiceLookup = Callable[[str], HoldingsServiceInterface | None]


class HoldingsAggregator:
    """
    Orchestrates holdings lookups across protocols.

    Workflow:
    1. Resolve the requested protocol set (every known protocol by default)
    2. Query every protocol service concurrently
    3. Retry lookups that raised instead of returning a response
    4. Sum successful responses into a portfolio total

    A protocol that fails contributes zero; it never fails the whole request.

    Parameters
    ----------
    service_lookup : Callable[[str], HoldingsServiceInterface | None]
        Returns the service for a protocol id, or None if unknown
    default_protocols : Sequence[str]
        Protocols queried when the caller does not name any
    retry_config : RetryConfig | None
        Retry policy for lookups that raise (default: one retry after 10s)

    """

    def __init__(
        self,
        service_lookup: ServiceLookup,
        default_protocols: Sequence[str],
        retry_config: RetryConfig | None = None,
    ) -> None:
        self.service_lookup = service_lookup
        self.default_protocols = list(default_protocols)
        self.retry_config = retry_config or RetryConfig()

    async def get_protocol_holdings(self, protocol: str, request: HoldingsRequest) -> HoldingsResponse:
        """
        Get holdings for a single protocol.

        Parameters
        ----------
        protocol : str
            Protocol identifier
        request : HoldingsRequest
            Account and point in history

        Returns
        -------
        HoldingsResponse
            Service response, or a failed response for an unknown protocol

        """
        service = self.service_lookup(protocol)
        if service is None:
            return HoldingsResponse.failed(protocol, f"Protocol {protocol} not supported")
        return await service.get_holdings(request)

    async def get_multi_protocol_holdings(
        self,
        request: HoldingsRequest,
        protocols: Sequence[str] | None = None,
    ) -> MultiProtocolHoldings:
        """
        Get holdings summed across several protocols.

        Parameters
        ----------
        request : HoldingsRequest
            Account and point in history
        protocols : Sequence[str] | None
            Protocols to query (default: ``request.protocol`` if set, else every
            known protocol); duplicates are queried once

        Returns
        -------
        MultiProtocolHoldings
            Total, per-protocol holdings and the protocols queried

        """
        if protocols is None:
            protocols = [request.protocol] if request.protocol else self.default_protocols
        requested = list(dict.fromkeys(protocols))

        responses = await asyncio.gather(*(self._fetch_with_retry(protocol, request) for protocol in requested))

        by_protocol = {protocol: Holdings.zero() for protocol in requested}
        total = Holdings.zero()
        for protocol, response in zip(requested, responses, strict=True):
            if response is None:
                continue
            if response.success and response.data is not None:
                by_protocol[protocol] = response.data
                total += response.data
            else:
                logger.info("%s returned no holdings: %s", protocol, response.error)

        return MultiProtocolHoldings(total=total, by_protocol=by_protocol, protocols=requested)

    async def _fetch_with_retry(self, protocol: str, request: HoldingsRequest) -> HoldingsResponse | None:
        try:
            return await retry_async(self.get_protocol_holdings, protocol, request, config=self.retry_config)
        except Exception as e:
            logger.error("Error fetching %s holdings for %s: %s", protocol, request.address, e)
            return None
