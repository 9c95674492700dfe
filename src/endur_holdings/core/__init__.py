"""Core functionality including models, deployment gating, aggregator, and registry."""

from endur_holdings.core.aggregator import HoldingsAggregator
from endur_holdings.core.deployment import is_contract_deployed, is_queryable, select_live_deployment
from endur_holdings.core.errors import (
    ChainCallError,
    HoldingsError,
    InvalidAddressError,
    PositionIndexError,
    ProviderNotConfiguredError,
    UnsupportedNetworkError,
)
from endur_holdings.core.models import (
    BlockTag,
    ContractDeployment,
    Holdings,
    HoldingsRequest,
    HoldingsResponse,
    MultiProtocolHoldings,
    ProtocolInfo,
    ProtocolType,
)
from endur_holdings.core.registry import ProtocolRegistry

__all__ = [
    "BlockTag",
    "ChainCallError",
    "ContractDeployment",
    "Holdings",
    "HoldingsAggregator",
    "HoldingsError",
    "HoldingsRequest",
    "HoldingsResponse",
    "InvalidAddressError",
    "MultiProtocolHoldings",
    "PositionIndexError",
    "ProtocolInfo",
    "ProtocolRegistry",
    "ProtocolType",
    "ProviderNotConfiguredError",
    "UnsupportedNetworkError",
    "is_contract_deployed",
    "is_queryable",
    "select_live_deployment",
]
