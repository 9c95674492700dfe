"""Chain reader interface consumed by the protocol services."""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from endur_holdings.core.models import BlockIdentifier


@runtime_checkable
class ChainReader(Protocol):
    """
    Read-only access to Starknet contract state.

    Implementations wrap an RPC client (e.g. starknet-py's ``FullNodeClient``
    plus ABI decoding). Struct results may be returned as mappings or attribute
    objects, tuples as sequences, and integers as ``int`` or hex strings.

    Methods
    -------
    call(contract_address, entrypoint, calldata, block_identifier)
        Call a view entrypoint and return the decoded output
    get_block(block_identifier)
        Return block data including a ``timestamp`` in seconds

    """

    async def call(
        self,
        contract_address: str,
        entrypoint: str,
        calldata: Sequence[Any],
        block_identifier: BlockIdentifier,
    ) -> Any:
        """
        Call a view entrypoint.

        Parameters
        ----------
        contract_address : str
            Target contract
        entrypoint : str
            Entrypoint name (e.g. 'balance_of')
        calldata : Sequence[Any]
            Entrypoint arguments
        block_identifier : int | BlockTag | None
            Block to read state at

        Returns
        -------
        Any
            Decoded output

        """
        ...

    async def get_block(self, block_identifier: BlockIdentifier) -> Mapping[str, Any]:
        """
        Fetch block data.

        Parameters
        ----------
        block_identifier : int | BlockTag | None
            Block number or sentinel

        Returns
        -------
        Mapping[str, Any]
            Block data with at least ``timestamp`` (seconds since the epoch)

        """
        ...
