"""Data models for holdings, requests, responses and network contract tables."""

import time
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from endur_holdings.core.validation import to_int


class BlockTag(StrEnum):
    """Sentinels selecting the current chain state instead of a historical block."""

    LATEST = "latest"
    PENDING = "pending"


# A concrete historical block number, a "current" sentinel, or None (treated as current)
BlockIdentifier = int | BlockTag | None


class ProtocolType(StrEnum):
    """Identifiers of the protocols whose xSTRK/STRK holdings are tracked."""

    LST = "lst"
    EKUBO = "ekubo"
    NOSTRA_LENDING = "nostraLending"
    NOSTRA_DEX = "nostraDex"
    OPUS = "opus"
    STRKFARM = "strkfarm"
    STRKFARM_EKUBO = "strkfarmEkubo"
    VESU = "vesu"


class Holdings(BaseModel):
    """
    xSTRK and STRK amounts held in one protocol (or summed across several).

    Amounts are integers in the token's smallest unit (18 decimals for both
    tokens). Addition is exact, associative and commutative; ``Holdings.zero()``
    is the identity.

    Attributes
    ----------
    xstrk_amount : int
        Amount of the liquid staking token (xSTRK)
    strk_amount : int
        Amount of the underlying staked token (STRK)

    """

    model_config = ConfigDict(frozen=True)

    xstrk_amount: int = Field(default=0, ge=0)
    strk_amount: int = Field(default=0, ge=0)

    @field_validator("xstrk_amount", "strk_amount", mode="before")
    @classmethod
    def _parse_amount(cls, value: Any) -> int:
        if value is None:
            return 0
        return to_int(value)

    @field_serializer("xstrk_amount", "strk_amount", when_used="json")
    def _serialize_amount(self, value: int) -> str:
        return str(value)

    @classmethod
    def zero(cls) -> "Holdings":
        """Return empty holdings."""
        return cls()

    def is_zero(self) -> bool:
        """Check whether both amounts are zero."""
        return self.xstrk_amount == 0 and self.strk_amount == 0

    def __add__(self, other: object) -> "Holdings":
        if not isinstance(other, Holdings):
            return NotImplemented
        return Holdings(
            xstrk_amount=self.xstrk_amount + other.xstrk_amount,
            strk_amount=self.strk_amount + other.strk_amount,
        )

    def __radd__(self, other: object) -> "Holdings":
        # Lets the builtin sum() start from 0
        if other == 0:
            return self
        return NotImplemented


class HoldingsRequest(BaseModel):
    """
    Holdings query for one account.

    Attributes
    ----------
    address : str
        Account address; validated by each protocol service, not here
    block_identifier : int | BlockTag | None
        Historical block number, a current-state sentinel, or None for current
    protocol : str | None
        Specific protocol to query

    """

    model_config = ConfigDict(frozen=True)

    address: str
    block_identifier: BlockIdentifier = None
    protocol: str | None = None


def _now_ms() -> int:
    return int(time.time() * 1000)


class HoldingsResponse(BaseModel):
    """
    Outcome of a single protocol lookup.

    ``protocol`` and ``timestamp`` are set whether or not the lookup succeeded.

    Attributes
    ----------
    success : bool
        Whether holdings were computed
    protocol : str
        Protocol identifier
    timestamp : int
        Milliseconds since the epoch when the response was produced
    data : Holdings | None
        Holdings on success
    error : str | None
        Error message on failure

    """

    model_config = ConfigDict(frozen=True)

    success: bool
    protocol: str
    timestamp: int = Field(default_factory=_now_ms)
    data: Holdings | None = None
    error: str | None = None

    @classmethod
    def ok(cls, protocol: str, holdings: Holdings) -> "HoldingsResponse":
        """Build a successful response."""
        return cls(success=True, protocol=protocol, data=holdings)

    @classmethod
    def failed(cls, protocol: str, error: str) -> "HoldingsResponse":
        """Build a failed response."""
        return cls(success=False, protocol=protocol, error=error)


class MultiProtocolHoldings(BaseModel):
    """
    Holdings summed across several protocols.

    Attributes
    ----------
    total : Holdings
        Sum of every successful protocol lookup
    by_protocol : dict[str, Holdings]
        Holdings per requested protocol; zero for protocols that failed
    protocols : list[str]
        Requested protocols, in request order

    """

    total: Holdings = Field(default_factory=Holdings)
    by_protocol: dict[str, Holdings] = Field(default_factory=dict)
    protocols: list[str] = Field(default_factory=list)


class ProtocolInfo(BaseModel):
    """Descriptive entry returned by ``get_available_protocols``."""

    type: str
    name: str
    description: str
    is_active: bool = True
    supported_networks: list[str] = Field(default_factory=list)


class ContractDeployment(BaseModel):
    """
    A contract address and the block window in which it is authoritative.

    Attributes
    ----------
    address : str
        Contract address
    deployment_block : int
        First block at which the contract exists
    max_block : int | None
        Last block at which the contract is authoritative (set once it was
        superseded by a newer version)

    """

    model_config = ConfigDict(frozen=True)

    address: str
    deployment_block: int = 0
    max_block: int | None = None


class EkuboPosition(BaseModel):
    """
    Ekubo concentrated-liquidity position descriptor from a position index.

    ``token0``/``token1`` are only known when the index reports the pool key;
    otherwise the configured xSTRK/STRK pair is assumed.

    """

    model_config = ConfigDict(frozen=True)

    position_id: str
    lower_bound: int
    upper_bound: int
    pool_fee: str
    pool_tick_spacing: str
    extension: str = "0x0"
    token0: str | None = None
    token1: str | None = None

    @field_validator("position_id", "pool_fee", "pool_tick_spacing", "extension", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return str(value)


class TokenAddresses(BaseModel):
    """Token addresses used by the protocol services on one network."""

    model_config = ConfigDict(frozen=True)

    xstrk: str
    strk: str
    eth: str
    usdc: str
    usdt: str
    wbtc: str
    rusdc: str

    def address_of(self, token: str) -> str:
        """Look up a token address by its key (e.g. ``"strk"``)."""
        try:
            return getattr(self, token)
        except AttributeError as e:
            msg = f"Unknown token key: {token}"
            raise KeyError(msg) from e


class VaultSuccession(BaseModel):
    """A vault slot backed by a retired v1 and its v2 successor."""

    model_config = ConfigDict(frozen=True)

    name: str
    v1: ContractDeployment
    v2: ContractDeployment


class LendingPool(BaseModel):
    """A Vesu lending pool tracked in the singleton."""

    model_config = ConfigDict(frozen=True)

    id: str
    deployment_block: int = 0


class CollateralMarket(BaseModel):
    """A (pool, debt token) pair where xSTRK may be posted as collateral."""

    model_config = ConfigDict(frozen=True)

    pool: str
    debt_token: str


class VesuConfig(BaseModel):
    """Vesu vaults, singleton succession, pools and collateral markets."""

    model_config = ConfigDict(frozen=True)

    vaults: list[VaultSuccession]
    singletons: list[ContractDeployment]
    pools: dict[str, LendingPool]
    collateral_markets: list[CollateralMarket]


class NetworkConfig(BaseModel):
    """
    Immutable contract table for one Starknet network.

    Attributes
    ----------
    name : str
        Network key (e.g. 'mainnet')
    display_name : str
        Human readable network name
    chain_id : str
        Starknet chain id (hex)
    graphql_url : str
        Endur GraphQL position index endpoint
    ekubo_api_url : str
        Ekubo REST API base URL
    tokens : TokenAddresses
        Token addresses
    lst : ContractDeployment
        xSTRK vault
    ekubo_positions : ContractDeployment
        Ekubo positions NFT contract
    nostra_lending : dict[str, ContractDeployment]
        Nostra receipt/debt tokens keyed by symbol
    nostra_dex_lp : ContractDeployment
        Nostra xSTRK/STRK LP token
    opus : ContractDeployment
        Opus trove contract
    strkfarm_sensei : ContractDeployment
        STRKFarm xSTRK Sensei strategy
    strkfarm_ekubo_vault : ContractDeployment
        STRKFarm Ekubo xSTRK/STRK strategy vault
    vesu : VesuConfig
        Vesu deployment table

    """

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str = ""
    chain_id: str = ""
    graphql_url: str
    ekubo_api_url: str
    tokens: TokenAddresses
    lst: ContractDeployment
    ekubo_positions: ContractDeployment
    nostra_lending: dict[str, ContractDeployment]
    nostra_dex_lp: ContractDeployment
    opus: ContractDeployment
    strkfarm_sensei: ContractDeployment
    strkfarm_ekubo_vault: ContractDeployment
    vesu: VesuConfig

    @model_validator(mode="after")
    def _check_collateral_markets(self) -> Self:
        for market in self.vesu.collateral_markets:
            if market.pool not in self.vesu.pools:
                msg = f"Collateral market references unknown pool '{market.pool}'"
                raise ValueError(msg)
            if market.debt_token not in TokenAddresses.model_fields:
                msg = f"Collateral market references unknown token '{market.debt_token}'"
                raise ValueError(msg)
        return self
