"""Protocol service registry with auto-registration pattern."""

from typing import Any, Protocol

from endur_holdings.core.models import HoldingsRequest, HoldingsResponse, ProtocolInfo


class HoldingsServiceInterface(Protocol):
    """
    Interface that all protocol holdings services must implement.

    Attributes
    ----------
    name : str
        Unique protocol identifier (e.g., 'lst', 'vesu')
    display_name : str
        Human readable protocol name
    description : str
        Short protocol description
    supported_networks : list[str]
        Networks where this protocol is tracked

    Methods
    -------
    get_holdings(request)
        Compute the account's xSTRK/STRK holdings in this protocol
    set_provider(chain_reader)
        Replace the chain reader used for contract calls

    """

    name: str
    display_name: str
    description: str
    supported_networks: list[str]

    async def get_holdings(self, request: HoldingsRequest) -> HoldingsResponse:
        """
        Compute holdings for the request.

        Parameters
        ----------
        request : HoldingsRequest
            Account, block and optional protocol filter

        Returns
        -------
        HoldingsResponse
            Successful or failed response; never raises for expected failures

        """
        ...

    def set_provider(self, chain_reader: Any) -> None:
        """Replace the chain reader."""
        ...


class ProtocolRegistry:
    """
    Registry for protocol holdings services with auto-registration.

    Services register themselves using the @ProtocolRegistry.register decorator.
    The holdings manager instantiates one service per registered protocol.

    """

    _services: dict[str, type] = {}

    @classmethod
    def register(cls, service_class: type) -> type:
        """
        Decorator to register a protocol holdings service.

        Parameters
        ----------
        service_class : type
            Service class to register

        Returns
        -------
        type
            The service class (for decorator chaining)

        Examples
        --------
        >>> @ProtocolRegistry.register
        ... class LSTHoldingsService(BaseHoldingsService):
        ...     name = "lst"

        """
        if not getattr(service_class, "name", ""):
            msg = f"Service {service_class.__name__} must define 'name' attribute"
            raise ValueError(msg)

        cls._services[service_class.name] = service_class
        return service_class

    @classmethod
    def get_service_class(cls, protocol_name: str) -> type | None:
        """
        Get service class by protocol name.

        Parameters
        ----------
        protocol_name : str
            Protocol identifier

        Returns
        -------
        type | None
            Service class or None if not found

        """
        return cls._services.get(protocol_name)

    @classmethod
    def get_all_services(cls) -> list[type]:
        """
        Get all registered service classes, in registration order.

        Returns
        -------
        list[type]
            List of all service classes

        """
        return list(cls._services.values())

    @classmethod
    def get_services_for_network(cls, network: str) -> list[type]:
        """
        Get all services that support a specific network.

        Parameters
        ----------
        network : str
            Network name

        Returns
        -------
        list[type]
            List of service classes supporting this network

        """
        return [
            service_class for service_class in cls._services.values() if network in service_class.supported_networks
        ]

    @classmethod
    def get_protocol_info(cls) -> list[ProtocolInfo]:
        """
        Describe every registered protocol.

        Returns
        -------
        list[ProtocolInfo]
            One entry per registered protocol

        """
        return [
            ProtocolInfo(
                type=service_class.name,
                name=service_class.display_name or service_class.name,
                description=service_class.description,
                is_active=service_class.is_active,
                supported_networks=list(service_class.supported_networks),
            )
            for service_class in cls._services.values()
        ]

    @classmethod
    def clear(cls) -> None:
        """Clear all registered services (useful for testing)."""
        cls._services.clear()

    @classmethod
    def list_protocols(cls) -> list[str]:
        """
        Get list of all registered protocol names.

        Returns
        -------
        list[str]
            List of protocol identifiers

        """
        return list(cls._services.keys())
