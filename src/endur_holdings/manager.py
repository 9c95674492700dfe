"""Holdings manager: one long-lived service per protocol for the active network."""

import logging
from collections.abc import Sequence

import endur_holdings.protocols  # noqa: F401  (registers the protocol services)
from endur_holdings.config import HoldingsSettings
from endur_holdings.core.aggregator import HoldingsAggregator
from endur_holdings.core.models import (
    HoldingsRequest,
    HoldingsResponse,
    MultiProtocolHoldings,
    ProtocolInfo,
    ProtocolType,
)
from endur_holdings.core.registry import ProtocolRegistry
from endur_holdings.data.loader import get_network_config
from endur_holdings.protocols.base import BaseHoldingsService
from endur_holdings.rpc.reader import ChainReader
from endur_holdings.rpc.retry import RetryConfig

logger = logging.getLogger(__name__)

DEFAULT_PROTOCOLS: list[str] = [protocol.value for protocol in ProtocolType]


class HoldingsManager:
    """
    Entry point for xSTRK holdings lookups.

    Holds one service instance per registered protocol, all bound to the same
    chain reader and network contract table.

    Parameters
    ----------
    chain_reader : ChainReader | None
        Reader used for contract calls; lookups fail until one is set
    network : str | None
        Network name (default: ``settings.network``)
    settings : HoldingsSettings | None
        Runtime settings (default: read from ``ENDUR_*`` environment variables)

    Examples
    --------
    >>> manager = HoldingsManager(chain_reader=reader)
    >>> await manager.get_multi_protocol_holdings(HoldingsRequest(address=address))

    """

    def __init__(
        self,
        chain_reader: ChainReader | None = None,
        network: str | None = None,
        settings: HoldingsSettings | None = None,
    ) -> None:
        self.settings = settings or HoldingsSettings.from_env()
        self.chain_reader = chain_reader
        self._network = network or self.settings.network
        self.services: dict[str, BaseHoldingsService] = {}
        self._build_services()

        retry_config = RetryConfig(
            max_retries=self.settings.retry_attempts,
            base_delay=self.settings.retry_delay,
            max_delay=self.settings.retry_delay,
            exponential_base=1.0,
        )
        self.aggregator = HoldingsAggregator(
            service_lookup=self.get_protocol_service,
            default_protocols=self.default_protocols,
            retry_config=retry_config,
        )

    def _build_services(self) -> None:
        network_config = get_network_config(self._network)
        settings = self.settings.model_copy(update={"network": self._network})

        self.services = {}
        for service_class in ProtocolRegistry.get_services_for_network(self._network):
            self.services[service_class.name] = service_class(network_config, self.chain_reader, settings)

        logger.debug("Initialized %d protocol services for %s", len(self.services), self._network)

    @property
    def network(self) -> str:
        """Name of the active network."""
        return self._network

    @property
    def default_protocols(self) -> list[str]:
        """Protocols queried by default, in canonical order."""
        registered = ProtocolRegistry.list_protocols()
        extra = [name for name in registered if name not in DEFAULT_PROTOCOLS]
        return [name for name in DEFAULT_PROTOCOLS if name in registered] + extra

    def set_provider(self, chain_reader: ChainReader | None) -> None:
        """
        Replace the chain reader on every protocol service.

        Parameters
        ----------
        chain_reader : ChainReader | None
            New reader

        """
        self.chain_reader = chain_reader
        for service in self.services.values():
            service.set_provider(chain_reader)

    def update_network(self, network: str) -> None:
        """
        Switch to another network, rebuilding every protocol service.

        Parameters
        ----------
        network : str
            Network name

        Raises
        ------
        UnsupportedNetworkError
            If the network has no contract table (the current network is kept)

        """
        get_network_config(network)
        self._network = network
        self._build_services()

    def get_protocol_service(self, protocol: str) -> BaseHoldingsService | None:
        """
        Get the service instance for a protocol, e.g. for auxiliary reads.

        Parameters
        ----------
        protocol : str
            Protocol identifier

        Returns
        -------
        BaseHoldingsService | None
            Service, or None if the protocol is unknown on this network

        """
        return self.services.get(protocol)

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
        return await self.aggregator.get_protocol_holdings(protocol, request)

    async def get_multi_protocol_holdings(
        self,
        request: HoldingsRequest,
        protocols: Sequence[str] | None = None,
    ) -> MultiProtocolHoldings:
        """
        Get holdings summed across protocols.

        Parameters
        ----------
        request : HoldingsRequest
            Account and point in history
        protocols : Sequence[str] | None
            Protocols to query (default: the request's protocol, else all)

        Returns
        -------
        MultiProtocolHoldings
            Total and per-protocol holdings

        """
        return await self.aggregator.get_multi_protocol_holdings(request, protocols)

    def get_available_protocols(self) -> list[ProtocolInfo]:
        """Describe every registered protocol."""
        return ProtocolRegistry.get_protocol_info()
