"""Exception hierarchy for holdings lookups."""


class HoldingsError(Exception):
    """Base class for every error raised by endur_holdings."""


class ProviderNotConfiguredError(HoldingsError):
    """Raised when a protocol service is used without a chain reader."""


class InvalidAddressError(HoldingsError, ValueError):
    """Raised when an account address is not a well-formed Starknet address."""


class ChainCallError(HoldingsError):
    """
    Raised when a contract read fails.

    The message always embeds the original transport/contract message so callers
    can match known revert reasons such as ``NOT_INITIALIZED``.

    Attributes
    ----------
    contract_address : str
        Contract that was called
    entrypoint : str
        Entrypoint name

    """

    def __init__(self, message: str, contract_address: str = "", entrypoint: str = "") -> None:
        super().__init__(message)
        self.contract_address = contract_address
        self.entrypoint = entrypoint


class PositionIndexError(HoldingsError):
    """Raised when an off-chain position index (GraphQL or REST) fails."""


class UnsupportedNetworkError(HoldingsError, KeyError):
    """Raised when no contract table exists for the requested network."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""
