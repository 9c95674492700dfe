"""Network contract table loader."""

from pathlib import Path
from typing import Any

import yaml

from endur_holdings.core.errors import UnsupportedNetworkError
from endur_holdings.core.models import NetworkConfig

DEFAULT_NETWORK = "mainnet"


def load_networks() -> dict[str, Any]:
    """
    Load raw network tables from networks.yaml.

    Returns
    -------
    dict[str, Any]
        Mapping of network name to its raw contract table

    """
    path = Path(__file__).parent / "networks.yaml"
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f)["networks"]


def get_supported_networks() -> list[str]:
    """
    Get list of all network names with a contract table.

    Returns
    -------
    list[str]
        List of network names

    """
    return list(load_networks().keys())


def get_network_config(network: str = DEFAULT_NETWORK) -> NetworkConfig:
    """
    Get the validated contract table for a network.

    Parameters
    ----------
    network : str
        Network name (e.g., 'mainnet', 'testnet')

    Returns
    -------
    NetworkConfig
        Immutable contract table

    Raises
    ------
    UnsupportedNetworkError
        If the network has no contract table

    """
    networks = load_networks()
    raw = networks.get(network)
    if raw is None:
        msg = f"Unsupported network: {network}. Supported: {list(networks.keys())}"
        raise UnsupportedNetworkError(msg)
    return NetworkConfig.model_validate({"name": network, **raw})


def get_token_addresses(network: str = DEFAULT_NETWORK) -> dict[str, str]:
    """
    Get token addresses for a network.

    Parameters
    ----------
    network : str
        Network name

    Returns
    -------
    dict[str, str]
        Mapping of token keys to addresses

    """
    return get_network_config(network).tokens.model_dump()
