"""Network contract tables and loading helpers."""

from endur_holdings.data.loader import (
    DEFAULT_NETWORK,
    get_network_config,
    get_supported_networks,
    get_token_addresses,
    load_networks,
)

__all__ = [
    "DEFAULT_NETWORK",
    "get_network_config",
    "get_supported_networks",
    "get_token_addresses",
    "load_networks",
]
