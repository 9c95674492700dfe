"""Off-chain position index clients."""

from endur_holdings.integrations.ekubo_api import EkuboAPIClient
from endur_holdings.integrations.endur_graphql import EndurGraphQLClient, format_graphql_datetime

__all__ = [
    "EkuboAPIClient",
    "EndurGraphQLClient",
    "format_graphql_datetime",
]
