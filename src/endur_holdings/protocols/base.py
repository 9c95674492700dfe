"""Base holdings service class with common functionality."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, ClassVar

from endur_holdings.config import HoldingsSettings
from endur_holdings.core.deployment import is_queryable
from endur_holdings.core.errors import ChainCallError, InvalidAddressError, ProviderNotConfiguredError
from endur_holdings.core.models import (
    BlockIdentifier,
    BlockTag,
    ContractDeployment,
    Holdings,
    HoldingsRequest,
    HoldingsResponse,
    NetworkConfig,
)
from endur_holdings.core.validation import is_valid_starknet_address, to_int
from endur_holdings.rpc.reader import ChainReader

logger = logging.getLogger(__name__)


class BaseHoldingsService(ABC):
    """
    Abstract base class for protocol holdings services.

    All protocol services should inherit from this class and implement
    :meth:`fetch_holdings`. :meth:`get_holdings` is the failure boundary: it
    validates the chain reader and the address, then converts any exception
    into a failed :class:`HoldingsResponse`.

    Attributes
    ----------
    name : str
        Unique protocol identifier (must be set in subclass)
    display_name : str
        Human readable protocol name
    description : str
        Short protocol description
    supported_networks : list[str]
        Networks where the protocol is tracked
    default_block_tag : BlockTag
        State read when a request carries no block identifier

    """

    name: ClassVar[str] = ""
    display_name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    supported_networks: ClassVar[list[str]] = ["mainnet", "testnet"]
    is_active: ClassVar[bool] = True
    default_block_tag: ClassVar[BlockTag] = BlockTag.PENDING

    def __init__(
        self,
        network_config: NetworkConfig,
        chain_reader: ChainReader | None = None,
        settings: HoldingsSettings | None = None,
    ) -> None:
        """
        Initialize the holdings service.

        Parameters
        ----------
        network_config : NetworkConfig
            Contract table of the active network
        chain_reader : ChainReader | None
            Reader used for contract calls
        settings : HoldingsSettings | None
            Runtime settings (defaults apply if None)

        """
        if not self.name:
            msg = f"{self.__class__.__name__} must define 'name' attribute"
            raise ValueError(msg)
        self.network_config = network_config
        self.chain_reader = chain_reader
        self.settings = settings or HoldingsSettings(network=network_config.name)

    @property
    def network(self) -> str:
        """Name of the network this service reads from."""
        return self.network_config.name

    def set_provider(self, chain_reader: ChainReader | None) -> None:
        """
        Replace the chain reader.

        Parameters
        ----------
        chain_reader : ChainReader | None
            New reader

        """
        self.chain_reader = chain_reader

    def validate_provider(self) -> None:
        """
        Ensure a chain reader is configured.

        Raises
        ------
        ProviderNotConfiguredError
            If no chain reader is set

        """
        if self.chain_reader is None:
            msg = "Provider not set"
            raise ProviderNotConfiguredError(msg)

    def validate_address(self, address: str) -> None:
        """
        Ensure an account address is well formed.

        Raises
        ------
        InvalidAddressError
            If the address is not a 0x-prefixed 64 hex character string

        """
        if not is_valid_starknet_address(address):
            msg = "Invalid address provided"
            raise InvalidAddressError(msg)

    def is_contract_deployed(self, block_identifier: BlockIdentifier, deployment: ContractDeployment) -> bool:
        """
        Check whether a contract may be read at ``block_identifier``.

        Parameters
        ----------
        block_identifier : int | BlockTag | None
            Block number or current-state sentinel
        deployment : ContractDeployment
            Contract and its deployment window

        Returns
        -------
        bool
            True if the contract is authoritative at that point

        """
        return is_queryable(block_identifier, deployment)

    async def get_holdings(self, request: HoldingsRequest) -> HoldingsResponse:
        """
        Fetch holdings for the request.

        Parameters
        ----------
        request : HoldingsRequest
            Account address and point in history

        Returns
        -------
        HoldingsResponse
            Holdings on success, the error message otherwise

        """
        try:
            self.validate_provider()
            self.validate_address(request.address)
            holdings = await self.fetch_holdings(request.address, request.block_identifier)
        except Exception as e:
            logger.warning("%s holdings lookup failed for %s: %s", self.name, request.address, e)
            return HoldingsResponse.failed(self.name, str(e) or e.__class__.__name__)

        return HoldingsResponse.ok(self.name, holdings)

    @abstractmethod
    async def fetch_holdings(self, address: str, block_identifier: BlockIdentifier) -> Holdings:
        """
        Compute the account's holdings in this protocol.

        Must be implemented by subclasses. Called only after the chain reader
        and the address have been validated.

        Parameters
        ----------
        address : str
            Account address
        block_identifier : int | BlockTag | None
            Block number or current-state sentinel

        Returns
        -------
        Holdings
            xSTRK and STRK amounts

        """
        ...

    async def call(
        self,
        contract_address: str,
        entrypoint: str,
        calldata: Sequence[Any] | None = None,
        block_identifier: BlockIdentifier = None,
    ) -> Any:
        """
        Make a contract call using the chain reader.

        Parameters
        ----------
        contract_address : str
            Target contract address
        entrypoint : str
            Entrypoint name (e.g., 'balance_of', 'total_supply')
        calldata : Sequence[Any] | None
            Entrypoint arguments (default: None)
        block_identifier : int | BlockTag | None
            Block to read at; the service's default tag when None

        Returns
        -------
        Any
            Decoded call result

        Raises
        ------
        ProviderNotConfiguredError
            If no chain reader is set
        ChainCallError
            If the call fails

        """
        self.validate_provider()

        if calldata is None:
            calldata = []
        block = self.default_block_tag if block_identifier is None else block_identifier

        try:
            return await self.chain_reader.call(contract_address, entrypoint, list(calldata), block)
        except ChainCallError:
            raise
        except Exception as e:
            msg = f"Contract call {entrypoint} on {contract_address} failed: {e}"
            raise ChainCallError(msg, contract_address=contract_address, entrypoint=entrypoint) from e

    async def call_int(
        self,
        contract_address: str,
        entrypoint: str,
        calldata: Sequence[Any] | None = None,
        block_identifier: BlockIdentifier = None,
    ) -> int:
        """Make a contract call whose result is a single integer (felt or u256)."""
        return to_int(await self.call(contract_address, entrypoint, calldata, block_identifier))

    async def get_block_timestamp(self, block_identifier: BlockIdentifier) -> int:
        """
        Get the timestamp of a block.

        Parameters
        ----------
        block_identifier : int | BlockTag | None
            Block number, or current state (``latest``) when None

        Returns
        -------
        int
            Block timestamp in seconds

        """
        self.validate_provider()
        block = BlockTag.LATEST if block_identifier is None else block_identifier
        block_info = await self.chain_reader.get_block(block)
        return to_int(block_info["timestamp"])
