"""Runtime settings for holdings lookups."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from endur_holdings.data import DEFAULT_NETWORK

PositionSourceKind = Literal["graphql", "api"]


class HoldingsSettings(BaseSettings):
    """
    Settings shared by the holdings manager and protocol services.

    Every field can be set from an ``ENDUR_``-prefixed environment variable,
    e.g. ``ENDUR_RETRY_DELAY=2``. Keyword arguments take precedence.

    Attributes
    ----------
    network : str
        Network whose contract table is used
    request_timeout : float
        Timeout in seconds for position index HTTP requests
    retry_attempts : int
        Retries per protocol after an unexpected exception
    retry_delay : float
        Fixed delay in seconds before each retry
    ekubo_position_source : {'graphql', 'api'}
        Where Ekubo position ids are discovered
    graphql_url : str | None
        Override for the network's Endur GraphQL endpoint
    ekubo_api_url : str | None
        Override for the network's Ekubo REST API base URL
    exact_lp_math : bool
        Use exact integer pro-rata math for LP shares instead of float math

    """

    model_config = SettingsConfigDict(env_prefix="ENDUR_", env_ignore_empty=True, frozen=True)

    network: str = DEFAULT_NETWORK
    request_timeout: float = Field(default=30.0, gt=0)
    retry_attempts: int = Field(default=1, ge=0)
    retry_delay: float = Field(default=10.0, ge=0)
    ekubo_position_source: PositionSourceKind = "graphql"
    graphql_url: str | None = None
    ekubo_api_url: str | None = None
    exact_lp_math: bool = True

    @classmethod
    def from_env(cls, **overrides: object) -> "HoldingsSettings":
        """
        Build settings from ``ENDUR_*`` environment variables.

        Parameters
        ----------
        **overrides : object
            Values taking precedence over the environment

        Returns
        -------
        HoldingsSettings
            Validated settings

        """
        return cls(**overrides)
